"""Byte sources and the chunk-bounded cursor shared by the decoding layers."""
from __future__ import annotations

from typing import BinaryIO, Iterable, Protocol, runtime_checkable

from .errors import DecodeError, MidiFormatError
from .vlq import decode_varlen


@runtime_checkable
class ByteSource(Protocol):
    """Forward-only producer of bytes; ``None`` means no more data."""

    def read_byte(self) -> int | None:
        ...


class BinaryStreamSource:
    """Read one byte at a time from a binary file object."""

    __slots__ = ("_handle",)

    def __init__(self, handle: BinaryIO):
        self._handle = handle

    def read_byte(self) -> int | None:
        data = self._handle.read(1)
        if not data:
            return None
        return data[0]


class IterableByteSource:
    """Serve bytes from ``bytes`` or any iterable of integers."""

    __slots__ = ("_iterator",)

    def __init__(self, data: Iterable[int]):
        self._iterator = iter(data)

    def read_byte(self) -> int | None:
        try:
            value = next(self._iterator)
        except StopIteration:
            return None
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Byte value out of range: {value!r}")
        return value


def as_byte_source(source: object) -> ByteSource:
    """Wrap ``source`` so it satisfies :class:`ByteSource`."""

    if isinstance(source, ByteSource):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        return IterableByteSource(bytes(source))
    if callable(getattr(source, "read", None)):
        return BinaryStreamSource(source)  # type: ignore[arg-type]
    if isinstance(source, Iterable):
        return IterableByteSource(source)
    raise TypeError(f"Cannot read MIDI bytes from {type(source).__name__}")


class ChunkCursor:
    """Read bytes from a source without crossing the current chunk boundary.

    Every successful read decrements ``bytes_remaining`` by exactly the bytes
    it consumed.  Reads past the boundary return ``None`` instead of touching
    the source.
    """

    __slots__ = ("_source", "_remaining", "_position")

    def __init__(self, source: ByteSource | None = None):
        self._source = source
        self._remaining = -1
        self._position = 0

    @property
    def bytes_remaining(self) -> int:
        return self._remaining

    @property
    def attached(self) -> bool:
        return self._source is not None

    def tell(self) -> int:
        """Number of bytes pulled from the source so far."""

        return self._position

    def attach(self, source: ByteSource) -> None:
        self._source = source
        self._remaining = -1
        self._position = 0

    def detach(self) -> None:
        self._source = None
        self._remaining = -1

    def reset(self, budget: int) -> None:
        if budget < 0:
            raise ValueError("Chunk budget must be non-negative.")
        self._remaining = budget

    def invalidate(self) -> None:
        self._remaining = -1

    def read_unbounded(self) -> int | None:
        """Read a byte that belongs to no chunk, such as a chunk signature."""

        byte = self._require_source().read_byte()
        if byte is not None:
            self._position += 1
        return byte

    def read_byte(self) -> int | None:
        if self._remaining <= 0:
            return None
        source = self._require_source()
        self._remaining -= 1
        byte = source.read_byte()
        if byte is None:
            raise MidiFormatError(
                DecodeError.TRUNCATED_STREAM,
                f"source ended with {self._remaining + 1} chunk bytes outstanding",
            )
        self._position += 1
        return byte

    def require_byte(self) -> int:
        byte = self.read_byte()
        if byte is None:
            raise MidiFormatError(DecodeError.TRUNCATED_STREAM, "end of chunk inside an event")
        return byte

    def read_fixed(self, width: int) -> int:
        """Read a big-endian unsigned integer of ``width`` bytes."""

        value = 0
        for _ in range(width):
            value = (value << 8) | self.require_byte()
        return value

    def read_varlen(self) -> int | None:
        return decode_varlen(self.read_byte)

    def require_varlen(self) -> int:
        value = self.read_varlen()
        if value is None:
            raise MidiFormatError(DecodeError.TRUNCATED_STREAM, "end of chunk before a length field")
        return value

    def skip(self, count: int) -> None:
        for _ in range(count):
            self.require_byte()

    def _require_source(self) -> ByteSource:
        if self._source is None:
            raise RuntimeError("No MIDI byte source is attached.")
        return self._source


__all__ = [
    "BinaryStreamSource",
    "ByteSource",
    "ChunkCursor",
    "IterableByteSource",
    "as_byte_source",
]
