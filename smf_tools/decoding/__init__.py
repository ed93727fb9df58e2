"""Public facade for the streaming Standard MIDI File decoder."""

from .capture import capture_payload
from .decoder import StreamingMidiDecoder
from .describe import describe_error, describe_event, describe_header
from .errors import DecodeError, MidiDecodeError, MidiFormatError
from .models import (
    DEFAULT_CAPTURE_CAPACITY,
    END_OF_CHUNK,
    CapturedPayload,
    ChannelCode,
    ChannelMessage,
    ChannelPrefix,
    ChunkKind,
    EndOfTrack,
    EventData,
    EventType,
    KeySignature,
    MidiEvent,
    MidiHeader,
    SequenceNumber,
    SmpteOffset,
    Tempo,
    TimeSignature,
    UnknownMeta,
)
from .reader import MidiFile, TrackEvent, iter_midi_events, open_midi_stream, read_header, read_midi
from .streams import BinaryStreamSource, ByteSource, ChunkCursor, IterableByteSource, as_byte_source
from .vlq import decode_varlen, encode_varlen

__all__ = [
    "BinaryStreamSource",
    "ByteSource",
    "CapturedPayload",
    "ChannelCode",
    "ChannelMessage",
    "ChannelPrefix",
    "ChunkCursor",
    "ChunkKind",
    "DEFAULT_CAPTURE_CAPACITY",
    "DecodeError",
    "END_OF_CHUNK",
    "EndOfTrack",
    "EventData",
    "EventType",
    "IterableByteSource",
    "KeySignature",
    "MidiDecodeError",
    "MidiEvent",
    "MidiFile",
    "MidiFormatError",
    "MidiHeader",
    "SequenceNumber",
    "SmpteOffset",
    "StreamingMidiDecoder",
    "Tempo",
    "TimeSignature",
    "TrackEvent",
    "UnknownMeta",
    "as_byte_source",
    "capture_payload",
    "decode_varlen",
    "describe_error",
    "describe_event",
    "describe_header",
    "encode_varlen",
    "iter_midi_events",
    "open_midi_stream",
    "read_header",
    "read_midi",
]
