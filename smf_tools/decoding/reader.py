"""File-level helpers that drive :class:`StreamingMidiDecoder` across chunks."""
from __future__ import annotations

import logging
import os
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Iterator, Tuple

from .decoder import StreamingMidiDecoder
from .errors import MidiDecodeError
from .models import ChunkKind, MidiEvent, MidiHeader

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackEvent:
    """A decoded event tagged with the index of the track chunk it came from."""

    track_index: int
    event: MidiEvent


@dataclass(frozen=True)
class MidiFile:
    """Header plus every event of every track chunk, in file order."""

    header: MidiHeader
    tracks: Tuple[Tuple[MidiEvent, ...], ...]

    @property
    def event_count(self) -> int:
        return sum(len(track) for track in self.tracks)


@contextmanager
def open_midi_stream(
    source: object,
    *,
    capture_capacity: int | None = None,
    log_events: bool | None = None,
) -> Iterator[Tuple[MidiHeader, Iterator[TrackEvent]]]:
    """Open ``source`` once and yield its header with a lazy event iterator.

    Used as a context manager; the iterator must be consumed inside the
    ``with`` block.  Header failures raise :class:`MidiDecodeError` on entry.
    """

    with ExitStack() as stack:
        decoder = stack.enter_context(StreamingMidiDecoder(capture_capacity, log_events=log_events))
        header = _open_header(decoder, _open_source(stack, source))
        yield header, _iter_track_events(decoder, header)


def iter_midi_events(
    source: object,
    *,
    capture_capacity: int | None = None,
    log_events: bool | None = None,
) -> Iterator[TrackEvent]:
    """Yield every event of every track chunk of ``source``.

    ``source`` may be a filesystem path, a binary file object, ``bytes`` or any
    :class:`~smf_tools.decoding.streams.ByteSource`.  Unknown chunks are
    skipped.  The first structural failure raises :class:`MidiDecodeError`.
    """

    with open_midi_stream(source, capture_capacity=capture_capacity, log_events=log_events) as (_, events):
        yield from events


def read_header(source: object) -> MidiHeader:
    """Return only the header of ``source``."""

    with ExitStack() as stack:
        decoder = stack.enter_context(StreamingMidiDecoder())
        return _open_header(decoder, _open_source(stack, source))


def read_midi(source: object, *, capture_capacity: int | None = None) -> MidiFile:
    """Decode ``source`` completely and group its events per track chunk."""

    with ExitStack() as stack:
        decoder = stack.enter_context(StreamingMidiDecoder(capture_capacity))
        header = _open_header(decoder, _open_source(stack, source))
        tracks = tuple(tuple(events) for _, events in _iter_track_chunks(decoder, header))
    return MidiFile(header=header, tracks=tracks)


def _iter_track_events(decoder: StreamingMidiDecoder, header: MidiHeader) -> Iterator[TrackEvent]:
    for track_index, events in _iter_track_chunks(decoder, header):
        for event in events:
            yield TrackEvent(track_index=track_index, event=event)


def _open_source(stack: ExitStack, source: object) -> object:
    if isinstance(source, (str, os.PathLike)):
        return stack.enter_context(open(source, "rb"))
    return source


def _open_header(decoder: StreamingMidiDecoder, source: object) -> MidiHeader:
    result = decoder.open_header(source)
    if result.is_err():
        raise MidiDecodeError(result.error)
    return result.unwrap()


def _iter_track_chunks(
    decoder: StreamingMidiDecoder, header: MidiHeader
) -> Iterator[Tuple[int, Iterator[MidiEvent]]]:
    # Each yielded event iterator must be exhausted before advancing.
    track_index = 0
    while True:
        kind = decoder.open_chunk()
        if kind is ChunkKind.END_OF_STREAM:
            break
        if kind is ChunkKind.TRACK:
            yield track_index, _iter_chunk_events(decoder, track_index)
            track_index += 1
            continue
        if decoder.last_error is not None:
            raise MidiDecodeError(decoder.last_error, track_index=track_index)

        _LOGGER.info(
            "Skipping %s chunk of %d bytes before track %d",
            kind.value,
            decoder.bytes_remaining,
            track_index,
        )
        skipped = decoder.skip_chunk()
        if skipped.is_err():
            raise MidiDecodeError(skipped.error, track_index=track_index)

    if track_index != header.track_count:
        _LOGGER.warning(
            "MIDI header declares %d tracks but %d track chunks were found",
            header.track_count,
            track_index,
        )


def _iter_chunk_events(decoder: StreamingMidiDecoder, track_index: int) -> Iterator[MidiEvent]:
    event_index = 0
    while True:
        result = decoder.read_event()
        if result.is_err():
            raise MidiDecodeError(result.error, track_index=track_index, event_index=event_index)
        event = result.unwrap()
        if event.is_end_of_chunk:
            return
        yield event
        event_index += 1


__all__ = ["MidiFile", "TrackEvent", "iter_midi_events", "open_midi_stream", "read_header", "read_midi"]
