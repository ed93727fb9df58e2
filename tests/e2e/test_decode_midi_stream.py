from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from smf_tools.decoding import ChunkKind, MidiHeader, StreamingMidiDecoder, describe_event

from tests.helpers import end_of_track, event, midi_file, track_chunk


pytestmark = [pytest.mark.e2e]

scenarios("decode_midi_stream.feature")


@dataclass
class DecodeSession:
    division: int = 96
    file_format: int = 0
    track_events: List[bytes] = field(default_factory=list)
    cut: int = 0
    decoder: StreamingMidiDecoder = field(
        default_factory=lambda: StreamingMidiDecoder(capture_capacity=141, log_events=False)
    )
    header: MidiHeader | None = None
    chunk_kind: ChunkKind = ChunkKind.UNKNOWN

    def data(self) -> bytes:
        raw = midi_file(track_chunk(*self.track_events), file_format=self.file_format, division=self.division)
        return raw[: len(raw) - self.cut] if self.cut else raw


@pytest.fixture
def session() -> DecodeSession:
    return DecodeSession()


@given(parsers.parse("a format {file_format:d} MIDI file with {division:d} ticks per beat"))
def midi_file_layout(session: DecodeSession, file_format: int, division: int) -> None:
    session.file_format = file_format
    session.division = division


@given(parsers.parse("the track plays note {note:d} for {ticks:d} ticks"))
def track_plays_note(session: DecodeSession, note: int, ticks: int) -> None:
    session.track_events.extend(
        [
            event(0, [0x90, note, 100]),
            event(ticks, [0x80, note, 0]),
            end_of_track(),
        ]
    )


@given(parsers.parse("the file is cut {count:d} bytes short"))
def file_is_cut(session: DecodeSession, count: int) -> None:
    session.cut = count


@when("the decoder opens the header")
def decoder_opens_header(session: DecodeSession) -> None:
    session.header = session.decoder.open_header(session.data()).unwrap()


@when("the decoder opens the next chunk")
def decoder_opens_chunk(session: DecodeSession) -> None:
    session.chunk_kind = session.decoder.open_chunk()


@then(
    parsers.parse(
        "the header reports format {file_format:d} with {tracks:d} track at {division:d} ticks per beat"
    )
)
def header_reports(session: DecodeSession, file_format: int, tracks: int, division: int) -> None:
    assert session.header == MidiHeader(format=file_format, track_count=tracks, ticks_per_beat=division)


@then(parsers.parse('the chunk kind is "{kind}"'))
def chunk_is(session: DecodeSession, kind: str) -> None:
    assert session.chunk_kind is ChunkKind(kind)


@then(parsers.parse('the next event is "{description}"'))
def next_event_is(session: DecodeSession, description: str) -> None:
    result = session.decoder.read_event()
    assert result.is_ok(), result.error
    assert describe_event(result.unwrap()) == description


@then(parsers.parse('reading the remaining events fails with "{error}"'))
def remaining_events_fail(session: DecodeSession, error: str) -> None:
    while True:
        result = session.decoder.read_event()
        if result.is_err():
            break
        assert not result.unwrap().is_end_of_chunk, "Expected the chunk to end in an error"
    assert result.error.value == error
