import pytest

import huffman as huff
from huffman import CodeWord, HuffmanNode


TEXTS = [
    "hello alex",
    "mmmmaaarrrthhaa",
    "abracadabra",
    "aab",
    "the quick brown fox jumps over the lazy dog",
    "aaaaaaaaaaaaaaaabbbbbbbbccccddef",
]


def test_freq_computation():
    res = huff.compute_frequencies("hello alex")
    assert res.get("l") == 3
    assert res.get("h") == 1
    assert res.get("e") == 2
    assert res.get("m") is None
    assert "m" not in res


def test_frequencies_sum_to_length():
    text = "the quick brown fox"
    res = huff.compute_frequencies(text)
    assert sum(res.values()) == len(text)
    assert all(n >= 1 for n in res.values())


def test_frequencies_empty_input():
    assert huff.compute_frequencies("") == {}


def test_frequencies_accept_any_hashable():
    assert huff.compute_frequencies(b"\x00\x01\x01") == {0: 1, 1: 2}


def test_leaf_extraction():
    leaves = huff.extract_leaves(huff.compute_frequencies("mmmmaaarrrthhaa"))
    assert {(n.symbol, n.weight) for n in leaves} == {("m", 4), ("a", 5), ("r", 3), ("t", 1), ("h", 2)}
    assert all(n.is_leaf for n in leaves)


@pytest.mark.parametrize("strategy", huff.TREE_STRATEGIES)
@pytest.mark.parametrize("text", TEXTS)
def test_tree_covers_every_symbol_once(text, strategy):
    tree = huff.build_huffman_tree(text, strategy)
    leaves = tree.leaves()
    assert sorted(n.symbol for n in leaves) == sorted(set(text))
    assert tree.weight == len(text)
    # k leaves need exactly k - 1 merges
    assert len(tree.nodes) == 2 * len(leaves) - 1


@pytest.mark.parametrize("strategy", huff.TREE_STRATEGIES)
def test_internal_weight_is_sum_of_children(strategy):
    tree = huff.build_huffman_tree("mmmmaaarrrthhaa", strategy)
    for node in tree.nodes:
        if not node.is_leaf:
            assert node.weight == tree.nodes[node.left].weight + tree.nodes[node.right].weight
            assert node.symbol is None


def test_nodes_are_immutable():
    tree = huff.build_huffman_tree("aab")
    with pytest.raises(AttributeError):
        tree.root_node.weight = 10


@pytest.mark.parametrize("strategy", huff.TREE_STRATEGIES)
def test_empty_input_is_rejected(strategy):
    with pytest.raises(huff.InvalidInputError):
        huff.build_huffman_tree("", strategy)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        huff.build_tree_from_frequencies({})


def test_non_positive_frequency_is_rejected():
    with pytest.raises(huff.InvalidInputError):
        huff.build_tree_from_frequencies({"a": 3, "b": 0})


def test_unknown_strategy():
    with pytest.raises(ValueError, match="unknown tree strategy"):
        huff.build_huffman_tree("aab", "fibonacci")


@pytest.mark.parametrize("strategy", huff.TREE_STRATEGIES)
def test_single_symbol_tree_is_one_leaf(strategy):
    tree = huff.build_huffman_tree("zzzz", strategy)
    assert tree.root_node == HuffmanNode(4, "z")
    assert huff.generate_huffman_codes(tree) == {"z": CodeWord(0, 1)}


def test_two_queue_merge_order():
    # leaves sorted c:1, b:2, a:4; the merged (c, b) node wins the 3-vs-4 pick
    tree = huff.build_huffman_tree("aaaabbc", "two_queue")
    codes = huff.generate_huffman_codes(tree)
    assert codes == {
        "a": CodeWord(1, 1),
        "c": CodeWord(0, 2),
        "b": CodeWord(2, 2),
    }
    assert huff.code_to_string(codes["b"]) == "01"


def test_two_symbol_codes():
    codes = huff.generate_huffman_codes(huff.build_huffman_tree("aab"))
    assert codes == {"b": CodeWord(0, 1), "a": CodeWord(1, 1)}


@pytest.mark.parametrize("strategy", huff.TREE_STRATEGIES)
@pytest.mark.parametrize("text", TEXTS)
def test_codes_are_prefix_free(text, strategy):
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(text, strategy))
    assert set(codes) == set(text)
    assert huff.is_prefix_free(codes)
    strings = [huff.code_to_string(c) for c in codes.values()]
    for i, a in enumerate(strings):
        for j, b in enumerate(strings):
            if i != j:
                assert not b.startswith(a)


@pytest.mark.parametrize("strategy", huff.TREE_STRATEGIES)
@pytest.mark.parametrize("text", TEXTS)
def test_more_frequent_symbols_get_no_longer_codes(text, strategy):
    freqs = huff.compute_frequencies(text)
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(text, strategy))
    for a, fa in freqs.items():
        for b, fb in freqs.items():
            if fa > fb:
                assert codes[a].length <= codes[b].length


@pytest.mark.parametrize("text", TEXTS)
def test_strategies_give_the_same_total_cost(text):
    freqs = huff.compute_frequencies(text)
    costs = set()
    for strategy in huff.TREE_STRATEGIES:
        codes = huff.generate_huffman_codes(huff.build_tree_from_frequencies(freqs, strategy))
        costs.add(sum(codes[s].length * n for s, n in freqs.items()))
    assert len(costs) == 1


def test_code_length_matches_leaf_depth():
    tree = huff.build_huffman_tree("aaaaaaaaaaaaaaaabbbbbbbbccccddef")
    codes = huff.generate_huffman_codes(tree)

    # walk each code from the root and make sure it ends on the right leaf
    for symbol, code in codes.items():
        node = tree.root_node
        for i in range(code.length):
            node = tree.nodes[node.right if (code.bits >> i) & 1 else node.left]
        assert node.is_leaf
        assert node.symbol == symbol


def test_code_to_string_is_root_first():
    assert huff.code_to_string(CodeWord(0b110, 3)) == "011"
    assert huff.code_to_string(CodeWord(0, 1)) == "0"


def test_is_prefix_free_detects_prefix():
    assert not huff.is_prefix_free({"a": CodeWord(0, 1), "b": CodeWord(0b10, 2)})
    assert not huff.is_prefix_free({"a": CodeWord(1, 2), "b": CodeWord(1, 2)})
    assert huff.is_prefix_free({"a": CodeWord(0, 1), "b": CodeWord(0b01, 2), "c": CodeWord(0b11, 2)})


def test_average_code_length():
    freqs = huff.compute_frequencies("aab")
    codes = huff.generate_huffman_codes(huff.build_tree_from_frequencies(freqs))
    assert huff.average_code_length(codes, freqs) == pytest.approx(1.0)
    assert huff.average_code_length({}, {}) == 0.0
