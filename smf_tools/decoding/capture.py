"""Bounded capture of variable-length event payloads."""
from __future__ import annotations

from .errors import DecodeError, MidiFormatError
from .models import DEFAULT_CAPTURE_CAPACITY, CapturedPayload
from .streams import ChunkCursor


def validate_capacity(capacity: int) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise ValueError(f"Capture capacity must be an integer, got {capacity!r}")
    if capacity < 1:
        raise ValueError("Capture capacity must leave room for the terminator (>= 1).")
    return capacity


def capture_payload(
    cursor: ChunkCursor,
    declared_length: int,
    capacity: int = DEFAULT_CAPTURE_CAPACITY,
) -> CapturedPayload:
    """Copy up to ``capacity - 1`` payload bytes and discard the rest.

    All ``declared_length`` bytes are consumed from the chunk regardless of how
    many are kept, so decoding stays aligned with the next event.
    """

    validate_capacity(capacity)
    if declared_length < 0:
        raise ValueError("Declared payload length must be non-negative.")

    stored_length = min(declared_length, capacity - 1)
    stored = bytearray()
    try:
        for _ in range(stored_length):
            stored.append(cursor.require_byte())
        cursor.skip(declared_length - stored_length)
    except MidiFormatError as exc:
        raise MidiFormatError(
            DecodeError.TRUNCATED_STREAM,
            f"payload of {declared_length} bytes cut short ({exc.detail})",
        ) from exc
    return CapturedPayload(data=bytes(stored), declared_length=declared_length)


__all__ = ["DEFAULT_CAPTURE_CAPACITY", "capture_payload", "validate_capacity"]
