"""Parsing of the MThd header chunk."""
from __future__ import annotations

import logging

from .errors import DecodeError, MidiFormatError
from .models import ChunkKind, MidiHeader
from .streams import ChunkCursor

_LOGGER = logging.getLogger(__name__)

HEADER_LENGTH = 6
SMPTE_DIVISION_FLAG = 0x8000
KNOWN_FORMATS = (0, 1, 2)


def parse_header(cursor: ChunkCursor, kind: ChunkKind) -> MidiHeader:
    """Read format, track count and division from an open header chunk."""

    if kind is not ChunkKind.HEADER:
        raise MidiFormatError(DecodeError.UNEXPECTED_CHUNK, f"found {kind.value} chunk")
    if cursor.bytes_remaining != HEADER_LENGTH:
        raise MidiFormatError(
            DecodeError.MALFORMED_HEADER_LENGTH,
            f"declared {cursor.bytes_remaining} bytes",
        )

    file_format = cursor.read_fixed(2)
    track_count = cursor.read_fixed(2)
    division = cursor.read_fixed(2)
    if division & SMPTE_DIVISION_FLAG:
        raise MidiFormatError(
            DecodeError.UNSUPPORTED_DIVISION_FORMAT,
            f"division word 0x{division:04X}",
        )
    if cursor.bytes_remaining > 0:
        raise MidiFormatError(
            DecodeError.HEADER_SIZE_MISMATCH,
            f"{cursor.bytes_remaining} bytes left over",
        )

    if file_format not in KNOWN_FORMATS:
        _LOGGER.warning("MIDI header declares unknown format %s", file_format)
    if division == 0:
        _LOGGER.warning("MIDI header declares zero ticks per beat")
    return MidiHeader(format=file_format, track_count=track_count, ticks_per_beat=division)


__all__ = ["HEADER_LENGTH", "SMPTE_DIVISION_FLAG", "parse_header"]
