"""Variable-length quantity codec used for delta times and payload lengths."""
from __future__ import annotations

from typing import Callable

from .errors import DecodeError, MidiFormatError

# Files never need more than four bytes; a fifth is tolerated before giving up.
MAX_VARLEN_BYTES = 5
MAX_VARLEN_VALUE = 0x0FFFFFFF


def decode_varlen(read_byte: Callable[[], int | None]) -> int | None:
    """Decode one quantity, pulling bytes from ``read_byte``.

    Returns ``None`` when ``read_byte`` has nothing to give for the first byte,
    which is how a track chunk signals that its event data is exhausted.
    Running out after the first byte raises ``TRUNCATED_STREAM``; a fifth byte
    that still has its continuation bit set raises ``CORRUPT_VARIABLE_LENGTH``.
    """

    value = 0
    consumed = 0
    while True:
        if consumed >= MAX_VARLEN_BYTES:
            raise MidiFormatError(
                DecodeError.CORRUPT_VARIABLE_LENGTH,
                f"not terminated after {consumed} bytes",
            )
        byte = read_byte()
        if byte is None:
            if consumed == 0:
                return None
            raise MidiFormatError(DecodeError.TRUNCATED_STREAM, "inside a variable-length quantity")
        consumed += 1
        value = (value << 7) | (byte & 0x7F)
        if byte & 0x80 == 0:
            return value


def encode_varlen(value: int) -> bytes:
    """Encode ``value`` as a big-endian 7-bit group sequence."""

    if value < 0:
        raise ValueError("Variable-length quantities must be non-negative.")
    if value > MAX_VARLEN_VALUE:
        raise ValueError(f"Value {value} does not fit in four variable-length bytes.")
    buffer = [value & 0x7F]
    value >>= 7
    while value:
        buffer.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(buffer))


__all__ = ["MAX_VARLEN_BYTES", "MAX_VARLEN_VALUE", "decode_varlen", "encode_varlen"]
