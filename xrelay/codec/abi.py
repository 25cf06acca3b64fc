"""
Minimal Ethereum ABI tuple encoding for checkpoint payloads.

Only the types the checkpoint layouts use are supported: uintN, address,
bytes32, bool and a single dynamic string. Static values occupy one 32-byte
big-endian head word; the string's head word holds the byte offset of its
tail (length word followed by data right-padded to a word boundary).

Decoding is strict: narrow integers with dirty high bits, bools other than
0/1, out-of-range offsets, non-zero padding and invalid UTF-8 are rejected.
"""

from typing import List

from ..core.errors import MalformedMessageError
from ..core.ids import ADDRESS_SIZE, WORD_SIZE, HexLike, to_bytes


def encode_uint(value: int, bits: int = 256) -> bytes:
    if value < 0 or value >= 1 << bits:
        raise ValueError(f"value {value} does not fit in uint{bits}")
    return value.to_bytes(WORD_SIZE, "big")


def encode_bool(value: bool) -> bytes:
    return encode_uint(1 if value else 0, 8)


def encode_address(value: HexLike) -> bytes:
    return to_bytes(value, ADDRESS_SIZE).rjust(WORD_SIZE, b"\x00")


def encode_bytes32(value: HexLike) -> bytes:
    return to_bytes(value, WORD_SIZE)


def encode_string_tail(value: str) -> bytes:
    data = value.encode("utf-8")
    padded_len = -(-len(data) // WORD_SIZE) * WORD_SIZE
    return encode_uint(len(data)) + data.ljust(padded_len, b"\x00")


def encode_tuple(head: List[bytes], string_index: int, value: str) -> bytes:
    """
    Assemble a tuple with one dynamic string.

    Args:
        head: Encoded static words, with a placeholder at string_index
        string_index: Head position of the string's offset word
        value: String placed in the tail
    """
    words = list(head)
    words[string_index] = encode_uint(len(words) * WORD_SIZE)
    return b"".join(words) + encode_string_tail(value)


class WordReader:
    """
    Bounds-checked reader over ABI-encoded bytes.

    Every accessor raises MalformedMessageError instead of IndexError or
    UnicodeDecodeError so callers see a single failure type.
    """

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)

    def require_words(self, count: int) -> None:
        if len(self.data) < count * WORD_SIZE:
            raise MalformedMessageError(
                f"payload truncated: {len(self.data)} bytes, head needs {count * WORD_SIZE}"
            )

    def _raw(self, start: int, size: int) -> bytes:
        if start < 0 or start + size > len(self.data):
            raise MalformedMessageError(f"read of {size} bytes at {start} is out of range")
        return self.data[start : start + size]

    def word(self, index: int) -> bytes:
        return self._raw(index * WORD_SIZE, WORD_SIZE)

    def uint(self, index: int, bits: int = 256) -> int:
        value = int.from_bytes(self.word(index), "big")
        if value >= 1 << bits:
            raise MalformedMessageError(f"word {index} overflows uint{bits}")
        return value

    def boolean(self, index: int) -> bool:
        value = self.uint(index, 8)
        if value > 1:
            raise MalformedMessageError(f"word {index} is not a canonical bool")
        return value == 1

    def address(self, index: int) -> str:
        raw = self.word(index)
        if any(raw[: WORD_SIZE - ADDRESS_SIZE]):
            raise MalformedMessageError(f"word {index} has dirty address bits")
        return "0x" + raw[WORD_SIZE - ADDRESS_SIZE :].hex()

    def bytes32(self, index: int) -> str:
        return "0x" + self.word(index).hex()

    def string(self, index: int) -> str:
        offset = self.uint(index)
        if offset % WORD_SIZE:
            raise MalformedMessageError(f"string offset {offset} is not word aligned")
        length = int.from_bytes(self._raw(offset, WORD_SIZE), "big")
        start = offset + WORD_SIZE
        padded_len = -(-length // WORD_SIZE) * WORD_SIZE
        body = self._raw(start, padded_len)
        if any(body[length:]):
            raise MalformedMessageError("string padding is not zero")
        try:
            return body[:length].decode("utf-8")
        except UnicodeDecodeError as ex:
            raise MalformedMessageError("string is not valid UTF-8") from ex
