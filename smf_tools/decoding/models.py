"""Data models produced by the streaming MIDI decoder."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Union

DEFAULT_CAPTURE_CAPACITY = 140 + 1
CAPTURE_SENTINEL = b"\x00"


class ChunkKind(Enum):
    """Classification of the chunk most recently opened."""

    UNKNOWN = "unknown"
    END_OF_STREAM = "end_of_stream"
    HEADER = "header"
    TRACK = "track"


class EventType(Enum):
    """Kind of event most recently decoded."""

    UNKNOWN = "unknown"
    NO_OP = "no_op"
    END_OF_CHUNK = "end_of_chunk"
    SYSEX = "sysex"
    SYSEX_ESCAPE = "sysex_escape"
    SEQUENCE_NUMBER = "sequence_number"
    TEXT = "text"
    COPYRIGHT = "copyright"
    NAME = "name"
    INSTRUMENT_NAME = "instrument_name"
    LYRIC = "lyric"
    MARKER = "marker"
    CUE_POINT = "cue_point"
    CHANNEL_PREFIX = "channel_prefix"
    END_OF_TRACK = "end_of_track"
    TEMPO = "tempo"
    SMPTE_OFFSET = "smpte_offset"
    TIME_SIGNATURE = "time_signature"
    KEY_SIGNATURE = "key_signature"
    CHANNEL = "channel"


TEXT_EVENT_TYPES = frozenset(
    {
        EventType.TEXT,
        EventType.COPYRIGHT,
        EventType.NAME,
        EventType.INSTRUMENT_NAME,
        EventType.LYRIC,
        EventType.MARKER,
        EventType.CUE_POINT,
    }
)


class ChannelCode(IntEnum):
    """High nibble of a channel status byte."""

    NOTE_OFF = 0x8
    NOTE_ON = 0x9
    NOTE_AFTERTOUCH = 0xA
    CONTROLLER = 0xB
    PROGRAM_CHANGE = 0xC
    CHANNEL_AFTERTOUCH = 0xD
    PITCH_BEND = 0xE
    # 0xF1-0xFE are not valid inside a track; decoded as two-parameter events.
    SYSTEM = 0xF

    @property
    def has_second_parameter(self) -> bool:
        return self not in (ChannelCode.PROGRAM_CHANGE, ChannelCode.CHANNEL_AFTERTOUCH)


@dataclass(frozen=True)
class MidiHeader:
    """Fields of the MThd chunk."""

    format: int
    track_count: int
    ticks_per_beat: int


@dataclass(frozen=True)
class CapturedPayload:
    """Bytes kept from a variable-length payload.

    ``data`` holds at most ``capacity - 1`` bytes; ``declared_length`` is the
    length written in the file, which was consumed in full.
    """

    data: bytes
    declared_length: int

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def truncated(self) -> bool:
        return self.declared_length > len(self.data)

    @property
    def terminated(self) -> bytes:
        return self.data + CAPTURE_SENTINEL

    @property
    def text(self) -> str:
        return self.data.decode("latin-1")


@dataclass(frozen=True)
class SequenceNumber:
    number: int


@dataclass(frozen=True)
class ChannelPrefix:
    channel: int


@dataclass(frozen=True)
class EndOfTrack:
    pass


@dataclass(frozen=True)
class Tempo:
    microseconds_per_beat: int

    @property
    def bpm(self) -> float:
        if self.microseconds_per_beat <= 0:
            return 0.0
        return 60_000_000.0 / float(self.microseconds_per_beat)


@dataclass(frozen=True)
class SmpteOffset:
    hours: int
    minutes: int
    seconds: int
    frames: int
    hundredths: int


@dataclass(frozen=True)
class TimeSignature:
    numerator: int
    denominator: int
    metronome_clocks: int
    thirty_seconds_per_24_clocks: int


@dataclass(frozen=True)
class KeySignature:
    sharps: int
    mode: int

    @property
    def is_minor(self) -> bool:
        return self.mode != 0


@dataclass(frozen=True)
class UnknownMeta:
    """Meta event of a type the decoder does not interpret; its bytes were skipped."""

    meta_type: int
    length: int


@dataclass(frozen=True)
class ChannelMessage:
    code: ChannelCode
    channel: int
    param1: int
    param2: int

    @property
    def status(self) -> int:
        return (int(self.code) << 4) | self.channel


EventData = Union[
    CapturedPayload,
    SequenceNumber,
    ChannelPrefix,
    EndOfTrack,
    Tempo,
    SmpteOffset,
    TimeSignature,
    KeySignature,
    UnknownMeta,
    ChannelMessage,
]


@dataclass(frozen=True)
class MidiEvent:
    """One decoded event: the delta time plus the payload for its type."""

    delta_ticks: int
    type: EventType
    data: EventData | None = None

    @property
    def is_end_of_chunk(self) -> bool:
        return self.type is EventType.END_OF_CHUNK


END_OF_CHUNK_TICKS = -1
END_OF_CHUNK = MidiEvent(delta_ticks=END_OF_CHUNK_TICKS, type=EventType.END_OF_CHUNK)


__all__ = [
    "CAPTURE_SENTINEL",
    "DEFAULT_CAPTURE_CAPACITY",
    "END_OF_CHUNK",
    "END_OF_CHUNK_TICKS",
    "CapturedPayload",
    "ChannelCode",
    "ChannelMessage",
    "ChannelPrefix",
    "ChunkKind",
    "EndOfTrack",
    "EventData",
    "EventType",
    "KeySignature",
    "MidiEvent",
    "MidiHeader",
    "SequenceNumber",
    "SmpteOffset",
    "TEXT_EVENT_TYPES",
    "Tempo",
    "TimeSignature",
    "UnknownMeta",
]
