"""Byte builders for hand-made MIDI test data."""
from __future__ import annotations

import struct
from typing import Iterable

from smf_tools.decoding.vlq import encode_varlen


def vlq(value: int) -> bytes:
    return encode_varlen(value)


def header_chunk(file_format: int = 0, track_count: int = 1, division: int = 96) -> bytes:
    return b"MThd" + struct.pack(">IHHH", 6, file_format, track_count, division)


def chunk(signature: bytes, payload: bytes) -> bytes:
    return signature + struct.pack(">I", len(payload)) + payload


def track_chunk(*events: bytes) -> bytes:
    return chunk(b"MTrk", b"".join(events))


def event(delta: int, body: Iterable[int] | bytes) -> bytes:
    return vlq(delta) + bytes(body)


def meta(delta: int, meta_type: int, payload: bytes) -> bytes:
    return vlq(delta) + bytes([0xFF, meta_type]) + vlq(len(payload)) + payload


def end_of_track(delta: int = 0) -> bytes:
    return meta(delta, 0x2F, b"")


def midi_file(*tracks: bytes, file_format: int = 0, division: int = 96) -> bytes:
    return header_chunk(file_format, len(tracks), division) + b"".join(tracks)


def single_note_file() -> bytes:
    """Format 0, one track: note on, note off 96 ticks later, end of track."""

    return midi_file(
        track_chunk(
            event(0, [0x90, 60, 100]),
            event(96, [0x80, 60, 0]),
            end_of_track(),
        )
    )
