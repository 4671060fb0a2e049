from typing import Any, Dict, Hashable, Iterable, Iterator, List, Mapping, Optional

from huffman import (
    CodeLookupError,
    CodeWord,
    CorruptBufferError,
    HuffmanError,
    MissingCodeTableError,
    TREE_STRATEGIES,
    build_huffman_tree,
    generate_huffman_codes,
)

WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1


class HuffmanEncoding:
    """
    Packed Huffman bitstream.

    `data` holds 64-bit words filled least-significant-bit first; only the
    first `number_of_bits` bits are meaningful. `code_table` is the table the
    bits were produced with and is required for decoding.
    """

    def __init__(self, code_table: Optional[Mapping[Any, CodeWord]] = None):
        self.data: List[int] = []
        self.number_of_bits = 0
        self.symbol_count = 0
        self.code_table: Optional[Dict[Any, CodeWord]] = dict(code_table) if code_table is not None else None

    def __repr__(self) -> str:
        return f"HuffmanEncoding(words={len(self.data)}, bits={self.number_of_bits}, symbols={self.symbol_count})"

    def add_value(self, value: int, bits_number: int) -> None:
        if not 1 <= bits_number <= WORD_BITS:
            raise ValueError(f"bits_number must be in 1..{WORD_BITS}, got {bits_number}")
        if value < 0 or value >> bits_number:
            raise ValueError(f"value {value} does not fit in {bits_number} bits")

        taken_bits = self.number_of_bits % WORD_BITS
        if taken_bits == 0:
            self.data.append(0) # previous word is full (or there is none yet)

        self.data[-1] |= (value << taken_bits) & WORD_MASK
        free_bits = WORD_BITS - taken_bits
        if bits_number > free_bits:
            self.data.append(value >> free_bits) # high-order bits spill into a new word
        self.number_of_bits += bits_number

    def add_code(self, code: CodeWord) -> None:
        # Codes deeper than one word go in 64-bit chunks, low bits first
        offset = 0
        while offset < code.length:
            n = min(WORD_BITS, code.length - offset)
            self.add_value((code.bits >> offset) & ((1 << n) - 1), n)
            offset += n

    def iter_bits(self) -> Iterator[int]:
        remaining = self.number_of_bits
        for word in self.data:
            for i in range(min(WORD_BITS, remaining)):
                yield (word >> i) & 1
            remaining -= WORD_BITS
            if remaining <= 0:
                break

    def pack(self, symbols: Iterable[Hashable], code_table: Optional[Mapping[Any, CodeWord]] = None) -> "HuffmanEncoding":
        """
        Append `symbols` using an existing code table.

        Without `code_table` the attached table is used; a table given to an
        encoding that has none becomes its table. Every symbol is looked up
        before any bit is written, so a lookup miss leaves the buffer untouched.
        """
        if code_table is None:
            if self.code_table is None:
                raise MissingCodeTableError("no code table attached or given")
        elif self.code_table is None:
            self.code_table = dict(code_table)
        elif dict(code_table) != self.code_table:
            raise HuffmanError("code table differs from the one attached to this encoding")

        codes = []
        for s in symbols:
            code = self.code_table.get(s)
            if code is None:
                raise CodeLookupError(f"symbol {s!r} has no code in the code table")
            codes.append(code)

        for code in codes:
            self.add_code(code)
        self.symbol_count += len(codes)
        return self

    def encode(self, symbols: Iterable[Hashable], strategy: str = "two_queue") -> "HuffmanEncoding":
        if strategy not in TREE_STRATEGIES:
            raise ValueError(f"unknown tree strategy {strategy!r}, expected one of {TREE_STRATEGIES}")
        symbols = list(symbols)
        self.data = []
        self.number_of_bits = 0
        self.symbol_count = 0
        if not symbols:
            self.code_table = {}
            return self

        tree = build_huffman_tree(symbols, strategy)
        self.code_table = generate_huffman_codes(tree)
        return self.pack(symbols)

    def decode(self) -> List[Any]:
        if self.code_table is None:
            raise MissingCodeTableError("no code table attached; call encode() first")

        inverse = {code: symbol for symbol, code in self.code_table.items()}
        max_len = max((c.length for c in self.code_table.values()), default=0)

        out: List[Any] = []
        bits = 0
        length = 0
        for pos, bit in enumerate(self.iter_bits()):
            bits |= bit << length # new bit lands above the ones already read
            length += 1
            candidate = CodeWord(bits, length)
            if candidate in inverse:
                out.append(inverse[candidate])
                bits = 0
                length = 0
            elif length >= max_len:
                raise CorruptBufferError(
                    f"no code matches the {length} bits ending at bit {pos}"
                )

        if length:
            raise CorruptBufferError(
                f"buffer ended inside a code: {length} unresolved bits after {len(out)} symbols"
            )
        return out

    @property
    def nbytes(self) -> int:
        return (self.number_of_bits + 7) // 8

    def compression_ratio(self, original_bits_per_symbol: int = 8) -> float:
        # packed bits / original bits
        return self.number_of_bits / max(1, self.symbol_count * original_bits_per_symbol)


def encode(symbols: Iterable[Hashable], strategy: str = "two_queue") -> HuffmanEncoding:
    return HuffmanEncoding().encode(symbols, strategy)


def decode(encoding: HuffmanEncoding) -> List[Any]:
    return encoding.decode()


def decode_text(encoding: HuffmanEncoding) -> str:
    return "".join(encoding.decode())
