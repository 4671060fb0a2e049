import heapq
from collections import deque
from dataclasses import dataclass
from itertools import count
from typing import Any, Dict, Hashable, Iterable, List, Mapping, NamedTuple, Optional

from ordering import quick_sort, take_min


class HuffmanError(ValueError):
    """Base class for every failure raised by the Huffman pipeline."""


class InvalidInputError(HuffmanError):
    """Tree construction was asked to work on an empty symbol sequence."""


class CodeLookupError(HuffmanError):
    """A symbol being encoded has no entry in the code table."""


class CorruptBufferError(HuffmanError):
    """Packed bits do not resolve to symbols with the given code table."""


class MissingCodeTableError(HuffmanError):
    """Decode was requested before any code table was attached."""


@dataclass(frozen=True)
class HuffmanNode: # arena entry; children are indices, not references
    weight: int
    symbol: Any = None          # only meaningful on leaves
    left: Optional[int] = None  # child index in HuffmanTree.nodes
    right: Optional[int] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


class CodeWord(NamedTuple):
    bits: int   # bit k = branch taken at depth k (0 left, 1 right)
    length: int


@dataclass(frozen=True)
class HuffmanTree:
    nodes: List[HuffmanNode]
    root: int

    @property
    def root_node(self) -> HuffmanNode:
        return self.nodes[self.root]

    @property
    def weight(self) -> int:
        return self.root_node.weight

    def leaves(self) -> List[HuffmanNode]:
        return [n for n in self.nodes if n.is_leaf]


TREE_STRATEGIES = ("two_queue", "heap")


def compute_frequencies(symbols: Iterable[Hashable]) -> Dict[Hashable, int]:
    freqs: Dict[Hashable, int] = {}
    for s in symbols:
        freqs[s] = freqs.get(s, 0) + 1
    return freqs


def extract_leaves(frequencies: Mapping[Hashable, int]) -> List[HuffmanNode]:
    return [HuffmanNode(weight, symbol) for symbol, weight in frequencies.items()]


def _merge(nodes: List[HuffmanNode], left: int, right: int) -> int:
    nodes.append(HuffmanNode(nodes[left].weight + nodes[right].weight, None, left, right))
    return len(nodes) - 1


def _build_two_queue(nodes: List[HuffmanNode]) -> int:
    # Sorted leaves and merged nodes are each non-decreasing in weight,
    # so the global minimum is always at the front of one of the two queues
    order = list(range(len(nodes)))
    quick_sort(order, lambda a, b: nodes[a].weight < nodes[b].weight)

    leaves = deque(order)
    merged: deque = deque()
    weight_of = lambda i: nodes[i].weight

    while len(leaves) + len(merged) > 1:
        left = take_min(leaves, merged, weight_of)
        right = take_min(leaves, merged, weight_of)
        merged.append(_merge(nodes, left, right))

    return merged[0] if merged else leaves[0]


def _build_heap(nodes: List[HuffmanNode]) -> int:
    # (weight, insertion sequence, node index): ties go to the older node
    seq = count()
    priority_queue = [(n.weight, next(seq), i) for i, n in enumerate(nodes)]
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        _, _, left = heapq.heappop(priority_queue)
        _, _, right = heapq.heappop(priority_queue)
        idx = _merge(nodes, left, right)
        heapq.heappush(priority_queue, (nodes[idx].weight, next(seq), idx))

    return priority_queue[0][2]


def build_tree_from_frequencies(frequencies: Mapping[Hashable, int], strategy: str = "two_queue") -> HuffmanTree:
    """
    Build the Huffman tree for a frequency map.

    strategy "two_queue" sorts the leaves once and merges from two FIFO queues;
    strategy "heap" uses a binary heap with insertion-order tie breaking.
    A single distinct symbol yields a tree whose root is that leaf.
    """
    if strategy not in TREE_STRATEGIES:
        raise ValueError(f"unknown tree strategy {strategy!r}, expected one of {TREE_STRATEGIES}")
    if not frequencies:
        raise InvalidInputError("cannot build a Huffman tree from empty input")
    for symbol, weight in frequencies.items():
        if weight < 1:
            raise InvalidInputError(f"symbol {symbol!r} has non-positive frequency {weight}")

    nodes = extract_leaves(frequencies)
    if strategy == "two_queue":
        root = _build_two_queue(nodes)
    else:
        root = _build_heap(nodes)
    return HuffmanTree(nodes, root)


def build_huffman_tree(symbols: Iterable[Hashable], strategy: str = "two_queue") -> HuffmanTree:
    return build_tree_from_frequencies(compute_frequencies(symbols), strategy)


def generate_huffman_codes(tree: HuffmanTree) -> Dict[Any, CodeWord]:
    """
    Map every leaf symbol to its root-to-leaf path.

    Each stack entry carries its own (bits, length), so siblings never see
    each other's partial codes. A lone leaf gets the one-bit code 0.
    """
    root = tree.root_node
    if root.is_leaf:
        return {root.symbol: CodeWord(0, 1)}

    codes: Dict[Any, CodeWord] = {}
    stack = [(tree.root, 0, 0)]
    while stack:
        idx, bits, length = stack.pop()
        node = tree.nodes[idx]
        if node.is_leaf:
            codes[node.symbol] = CodeWord(bits, length)
            continue
        stack.append((node.right, bits | (1 << length), length + 1))
        stack.append((node.left, bits, length + 1))
    return codes


def code_to_string(code: CodeWord) -> str:
    # root decision first
    return "".join("1" if (code.bits >> i) & 1 else "0" for i in range(code.length))


def is_prefix_free(code_table: Mapping[Any, CodeWord]) -> bool:
    codes = sorted(code_table.values(), key=lambda c: c.length)
    for i, short in enumerate(codes):
        mask = (1 << short.length) - 1
        for longer in codes[i + 1:]:
            if longer.bits & mask == short.bits:
                return False
    return True


def average_code_length(code_table: Mapping[Any, CodeWord], frequencies: Mapping[Any, int]) -> float:
    total = sum(frequencies.values())
    if total == 0:
        return 0.0
    return sum(code_table[s].length * f for s, f in frequencies.items()) / total
