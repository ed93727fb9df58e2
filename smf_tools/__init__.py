from .decoding import (
    ChannelCode,
    ChunkKind,
    DecodeError,
    EventType,
    MidiDecodeError,
    MidiEvent,
    MidiFile,
    MidiHeader,
    StreamingMidiDecoder,
    TrackEvent,
    describe_event,
    describe_header,
    iter_midi_events,
    read_header,
    read_midi,
)

__all__ = [
    "ChannelCode",
    "ChunkKind",
    "DecodeError",
    "EventType",
    "MidiDecodeError",
    "MidiEvent",
    "MidiFile",
    "MidiHeader",
    "StreamingMidiDecoder",
    "TrackEvent",
    "describe_event",
    "describe_header",
    "iter_midi_events",
    "read_header",
    "read_midi",
]
