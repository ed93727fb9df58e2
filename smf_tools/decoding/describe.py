"""Human-readable one-line descriptions for decoder output."""
from __future__ import annotations

from .errors import DecodeError
from .models import (
    TEXT_EVENT_TYPES,
    CapturedPayload,
    ChannelCode,
    ChannelMessage,
    ChannelPrefix,
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

_PREVIEW_LIMIT = 40

_CHANNEL_LABELS = {
    ChannelCode.NOTE_OFF: "Note Off",
    ChannelCode.NOTE_ON: "Note On",
    ChannelCode.NOTE_AFTERTOUCH: "Note Aftertouch",
    ChannelCode.CONTROLLER: "Controller",
    ChannelCode.PROGRAM_CHANGE: "Program Change",
    ChannelCode.CHANNEL_AFTERTOUCH: "Channel Aftertouch",
    ChannelCode.PITCH_BEND: "Pitch Bend",
    ChannelCode.SYSTEM: "System",
}


def describe_header(header: MidiHeader) -> str:
    return (
        f"MIDI header format={header.format} tracks={header.track_count} "
        f"ticks_per_beat={header.ticks_per_beat}"
    )


def describe_error(error: DecodeError) -> str:
    if error.is_malformed_length:
        return f"{error.description} [malformed length: {error.value}]"
    return f"{error.description} [{error.value}]"


def describe_event(event: MidiEvent) -> str:
    """Summarise ``event`` as ``<ticks>T <kind>: <details>``."""

    prefix = f"{event.delta_ticks}T"
    data = event.data
    if event.type is EventType.END_OF_CHUNK:
        return "end of chunk"
    if event.type is EventType.UNKNOWN:
        return f"{prefix} unknown event"
    if isinstance(data, ChannelMessage):
        label = _CHANNEL_LABELS[data.code]
        return f"{prefix} {label} [ch {data.channel}] {data.param1}, {data.param2}"
    if isinstance(data, CapturedPayload):
        return f"{prefix} {_label(event.type)}: {_describe_payload(event.type, data)}"
    if isinstance(data, Tempo):
        return f"{prefix} Tempo: {data.microseconds_per_beat} us/beat ({data.bpm:.2f} bpm)"
    if isinstance(data, TimeSignature):
        return (
            f"{prefix} Time Signature: {data.numerator}/{data.denominator}, "
            f"metronome {data.metronome_clocks}, 32nds {data.thirty_seconds_per_24_clocks}"
        )
    if isinstance(data, KeySignature):
        mode = "minor" if data.is_minor else "major"
        return f"{prefix} Key Signature: {data.sharps} sharps, {mode}"
    if isinstance(data, SmpteOffset):
        return (
            f"{prefix} SMPTE Offset: {data.hours:02d}:{data.minutes:02d}:{data.seconds:02d}"
            f" frame {data.frames}.{data.hundredths:02d}"
        )
    if isinstance(data, SequenceNumber):
        return f"{prefix} Sequence Number: {data.number}"
    if isinstance(data, ChannelPrefix):
        return f"{prefix} Channel Prefix: {data.channel}"
    if isinstance(data, UnknownMeta):
        return f"{prefix} skipped meta 0x{data.meta_type:02X} ({data.length} bytes)"
    return f"{prefix} {_label(event.type)}"


def _label(event_type: EventType) -> str:
    return event_type.value.replace("_", " ").title()


def _describe_payload(event_type: EventType, payload: CapturedPayload) -> str:
    suffix = f" (truncated from {payload.declared_length})" if payload.truncated else ""
    if event_type in TEXT_EVENT_TYPES:
        text = payload.text
        if len(text) > _PREVIEW_LIMIT:
            text = text[: _PREVIEW_LIMIT - 3] + "..."
        return f"{text!r}{suffix}"
    preview = payload.data[:16].hex(" ")
    if payload.length > 16:
        preview += " ..."
    return f"{payload.length} bytes [{preview}]{suffix}"


__all__ = ["describe_error", "describe_event", "describe_header"]
