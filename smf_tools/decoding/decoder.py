"""Streaming Standard MIDI File decoder.

The decoder pulls bytes one at a time from a forward-only source and never
holds more than the current event in memory.  A session looks like::

    decoder = StreamingMidiDecoder()
    header = decoder.open_header(handle).unwrap()
    while (kind := decoder.open_chunk()) is not ChunkKind.END_OF_STREAM:
        if kind is not ChunkKind.TRACK:
            decoder.skip_chunk()
            continue
        while True:
            result = decoder.read_event()
            if result.is_err() or result.unwrap().is_end_of_chunk:
                break

``open_header`` and ``read_event`` report structural failures as error
results carrying a :class:`DecodeError`; the caller decides whether to
abandon the file.  Nothing attempts to resynchronise after a failure.
"""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Dict, Tuple

from app.config import get_decoder_config
from shared.result import Result

from .capture import capture_payload, validate_capacity
from .describe import describe_event
from .errors import DecodeError, MidiFormatError
from .header import parse_header
from .models import (
    END_OF_CHUNK,
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
from .streams import ChunkCursor, as_byte_source

_LOGGER = logging.getLogger(__name__)

HEADER_SIGNATURE = b"MThd"
TRACK_SIGNATURE = b"MTrk"
SIGNATURE_LENGTH = 4
CHUNK_LENGTH_WIDTH = 4

SYSEX_STATUS = 0xF0
SYSEX_ESCAPE_STATUS = 0xF7
META_STATUS = 0xFF

_CHUNK_KINDS: Dict[bytes, ChunkKind] = {
    HEADER_SIGNATURE: ChunkKind.HEADER,
    TRACK_SIGNATURE: ChunkKind.TRACK,
}

_TEXT_META_TYPES: Dict[int, EventType] = {
    0x01: EventType.TEXT,
    0x02: EventType.COPYRIGHT,
    0x03: EventType.NAME,
    0x04: EventType.INSTRUMENT_NAME,
    0x05: EventType.LYRIC,
    0x06: EventType.MARKER,
    0x07: EventType.CUE_POINT,
}

# meta type -> (event type, required payload length)
_FIXED_META_TYPES: Dict[int, Tuple[EventType, int]] = {
    0x00: (EventType.SEQUENCE_NUMBER, 2),
    0x20: (EventType.CHANNEL_PREFIX, 1),
    0x2F: (EventType.END_OF_TRACK, 0),
    0x51: (EventType.TEMPO, 3),
    0x54: (EventType.SMPTE_OFFSET, 5),
    0x58: (EventType.TIME_SIGNATURE, 4),
    0x59: (EventType.KEY_SIGNATURE, 2),
}

_NO_EVENT = MidiEvent(delta_ticks=-1, type=EventType.UNKNOWN)


class StreamingMidiDecoder:
    """Decode one MIDI file stream, one chunk and one event at a time.

    One instance serves one byte source; the chunk budget and running status
    are session state and must not be shared between threads.
    """

    def __init__(self, capture_capacity: int | None = None, *, log_events: bool | None = None):
        if capture_capacity is None or log_events is None:
            config = get_decoder_config()
            if capture_capacity is None:
                capture_capacity = config.capture_capacity
            if log_events is None:
                log_events = config.log_events
        self._capacity = validate_capacity(capture_capacity)
        self._log_events = bool(log_events)
        self._cursor = ChunkCursor()
        self._header: MidiHeader | None = None
        self._chunk_kind = ChunkKind.UNKNOWN
        self._running_status: int | None = None
        self._event = _NO_EVENT
        self._last_error: DecodeError | None = None

    def __enter__(self) -> "StreamingMidiDecoder":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Accessors
    @property
    def capture_capacity(self) -> int:
        return self._capacity

    @property
    def header(self) -> MidiHeader | None:
        return self._header

    @property
    def format(self) -> int:
        return self._header.format if self._header is not None else -1

    @property
    def track_count(self) -> int:
        return self._header.track_count if self._header is not None else -1

    @property
    def ticks_per_beat(self) -> int:
        return self._header.ticks_per_beat if self._header is not None else 0

    @property
    def chunk_kind(self) -> ChunkKind:
        return self._chunk_kind

    @property
    def bytes_remaining(self) -> int:
        return self._cursor.bytes_remaining

    @property
    def running_status(self) -> int | None:
        return self._running_status

    @property
    def event(self) -> MidiEvent:
        return self._event

    @property
    def event_type(self) -> EventType:
        return self._event.type

    @property
    def delta_ticks(self) -> int:
        return self._event.delta_ticks

    @property
    def event_data(self) -> EventData | None:
        return self._event.data

    @property
    def last_error(self) -> DecodeError | None:
        return self._last_error

    # ------------------------------------------------------------------
    # Session lifecycle
    def open_header(self, source: object) -> Result[MidiHeader, DecodeError]:
        """Attach ``source`` and read its MThd chunk."""

        self._reset_session()
        self._cursor.attach(as_byte_source(source))
        kind = self.open_chunk()
        if kind is ChunkKind.UNKNOWN and self._last_error is not None:
            return Result.err(self._last_error)
        try:
            header = parse_header(self._cursor, kind)
        except MidiFormatError as exc:
            return self._fail(exc)
        self._header = header
        _LOGGER.debug(
            "MIDI header: format=%s tracks=%s ticks_per_beat=%s",
            header.format,
            header.track_count,
            header.ticks_per_beat,
        )
        return Result.ok(header)

    def close(self) -> None:
        """Forget the source and all session state; the caller closes the file."""

        self._cursor.detach()
        self._reset_session()

    def _reset_session(self) -> None:
        self._header = None
        self._chunk_kind = ChunkKind.UNKNOWN
        self._running_status = None
        self._event = _NO_EVENT
        self._last_error = None

    # ------------------------------------------------------------------
    # Chunks
    def open_chunk(self) -> ChunkKind:
        """Read the next chunk signature and length.

        Returns ``END_OF_STREAM`` when the source is exhausted exactly at a
        chunk boundary.  Unknown signatures still record their length so the
        caller may :meth:`skip_chunk`.
        """

        cursor = self._require_cursor()
        cursor.invalidate()
        self._running_status = None
        self._event = _NO_EVENT
        self._last_error = None

        try:
            signature = self._read_signature()
            if signature is None:
                self._chunk_kind = ChunkKind.END_OF_STREAM
                return self._chunk_kind
            cursor.reset(CHUNK_LENGTH_WIDTH)
            try:
                length = cursor.read_fixed(CHUNK_LENGTH_WIDTH)
            except MidiFormatError as exc:
                raise MidiFormatError(DecodeError.TRUNCATED_HEADER, "inside a chunk length") from exc
        except MidiFormatError as exc:
            cursor.invalidate()
            self._record_failure(exc)
            self._chunk_kind = ChunkKind.UNKNOWN
            return self._chunk_kind

        cursor.reset(length)
        kind = _CHUNK_KINDS.get(signature, ChunkKind.UNKNOWN)
        if kind is ChunkKind.UNKNOWN:
            _LOGGER.debug("Unknown chunk signature %s (%d bytes)", signature.hex(" "), length)
        self._chunk_kind = kind
        return kind

    def skip_chunk(self) -> Result[int, DecodeError]:
        """Discard whatever is left of the current chunk."""

        cursor = self._require_cursor()
        remaining = max(0, cursor.bytes_remaining)
        try:
            cursor.skip(remaining)
        except MidiFormatError as exc:
            return self._fail(exc)
        return Result.ok(remaining)

    def _read_signature(self) -> bytes | None:
        cursor = self._cursor
        signature = bytearray()
        for index in range(SIGNATURE_LENGTH):
            byte = cursor.read_unbounded()
            if byte is None:
                if index == 0:
                    return None
                raise MidiFormatError(
                    DecodeError.TRUNCATED_HEADER,
                    f"after {index} signature bytes",
                )
            signature.append(byte)
        return bytes(signature)

    # ------------------------------------------------------------------
    # Events
    def read_event(self) -> Result[MidiEvent, DecodeError]:
        """Decode the next event of the open chunk.

        Returns the ``END_OF_CHUNK`` sentinel once the chunk has no bytes left
        to start another event.
        """

        self._require_cursor()
        try:
            event = self._decode_event()
        except MidiFormatError as exc:
            return self._fail(exc)
        self._event = event
        if self._log_events and not event.is_end_of_chunk:
            _LOGGER.debug("%s", describe_event(event))
        return Result.ok(event)

    def _decode_event(self) -> MidiEvent:
        cursor = self._cursor
        delta = cursor.read_varlen()
        if delta is None:
            return END_OF_CHUNK

        status = cursor.require_byte()
        if status in (SYSEX_STATUS, SYSEX_ESCAPE_STATUS):
            self._running_status = None
            length = cursor.require_varlen()
            payload = capture_payload(cursor, length, self._capacity)
            event_type = EventType.SYSEX if status == SYSEX_STATUS else EventType.SYSEX_ESCAPE
            return MidiEvent(delta, event_type, payload)

        if status == META_STATUS:
            self._running_status = None
            return self._decode_meta(delta)

        return self._decode_channel(delta, status)

    def _decode_meta(self, delta: int) -> MidiEvent:
        cursor = self._cursor
        meta_type = cursor.require_byte()
        length = cursor.require_varlen()

        text_type = _TEXT_META_TYPES.get(meta_type)
        if text_type is not None:
            return MidiEvent(delta, text_type, capture_payload(cursor, length, self._capacity))

        fixed = _FIXED_META_TYPES.get(meta_type)
        if fixed is None:
            cursor.skip(length)
            return MidiEvent(delta, EventType.NO_OP, UnknownMeta(meta_type=meta_type, length=length))

        event_type, expected_length = fixed
        if length != expected_length:
            raise MidiFormatError(
                DecodeError.MALFORMED_META_LENGTH,
                f"{event_type.value} declares {length} bytes, expected {expected_length}",
            )
        return MidiEvent(delta, event_type, self._read_fixed_meta(event_type))

    def _read_fixed_meta(self, event_type: EventType) -> EventData:
        # Any short read aborts the whole event.
        cursor = self._cursor
        if event_type is EventType.SEQUENCE_NUMBER:
            return SequenceNumber(number=cursor.read_fixed(2))
        if event_type is EventType.CHANNEL_PREFIX:
            return ChannelPrefix(channel=cursor.require_byte())
        if event_type is EventType.END_OF_TRACK:
            return EndOfTrack()
        if event_type is EventType.TEMPO:
            return Tempo(microseconds_per_beat=cursor.read_fixed(3))
        if event_type is EventType.SMPTE_OFFSET:
            return SmpteOffset(
                hours=cursor.require_byte(),
                minutes=cursor.require_byte(),
                seconds=cursor.require_byte(),
                frames=cursor.require_byte(),
                hundredths=cursor.require_byte(),
            )
        if event_type is EventType.TIME_SIGNATURE:
            numerator = cursor.require_byte()
            denominator_exponent = cursor.require_byte()
            return TimeSignature(
                numerator=numerator,
                denominator=1 << denominator_exponent,
                metronome_clocks=cursor.require_byte(),
                thirty_seconds_per_24_clocks=cursor.require_byte(),
            )
        if event_type is EventType.KEY_SIGNATURE:
            raw_sharps = cursor.require_byte()
            sharps = raw_sharps - 0x100 if raw_sharps & 0x80 else raw_sharps
            return KeySignature(sharps=sharps, mode=cursor.require_byte())
        raise AssertionError(f"No fixed-length layout for {event_type}")

    def _decode_channel(self, delta: int, status: int) -> MidiEvent:
        cursor = self._cursor
        first_param: int | None = None
        if status & 0x80 == 0:
            if self._running_status is None:
                raise MidiFormatError(
                    DecodeError.RUNNING_STATUS_UNAVAILABLE,
                    f"data byte 0x{status:02X}",
                )
            # The byte just read is the first parameter of a running-status event.
            first_param = status
            status = self._running_status

        code = ChannelCode(status >> 4)
        channel = status & 0x0F
        self._running_status = status

        param1 = first_param if first_param is not None else cursor.require_byte()
        param2 = cursor.require_byte() if code.has_second_parameter else 0
        message = ChannelMessage(code=code, channel=channel, param1=param1, param2=param2)
        return MidiEvent(delta, EventType.CHANNEL, message)

    # ------------------------------------------------------------------
    # Failure bookkeeping
    def _fail(self, exc: MidiFormatError) -> Result:
        self._record_failure(exc)
        self._event = _NO_EVENT
        return Result.err(exc.error)

    def _record_failure(self, exc: MidiFormatError) -> None:
        self._last_error = exc.error
        _LOGGER.debug(
            "MIDI decode failure at byte %d (%s chunk, %d bytes left): %s",
            self._cursor.tell(),
            self._chunk_kind.value,
            self._cursor.bytes_remaining,
            exc,
        )

    def _require_cursor(self) -> ChunkCursor:
        if not self._cursor.attached:
            raise RuntimeError("No MIDI stream is open; call open_header() first.")
        return self._cursor


__all__ = [
    "HEADER_SIGNATURE",
    "META_STATUS",
    "SYSEX_ESCAPE_STATUS",
    "SYSEX_STATUS",
    "StreamingMidiDecoder",
    "TRACK_SIGNATURE",
]
