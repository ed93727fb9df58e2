"""Chunk traversal, session lifecycle and event tracing."""
from __future__ import annotations

import io
import logging

import pytest

from smf_tools.decoding import (
    END_OF_CHUNK,
    ChannelCode,
    ChannelMessage,
    ChunkKind,
    DecodeError,
    EndOfTrack,
    EventType,
    MidiHeader,
    StreamingMidiDecoder,
)

from tests.helpers import chunk, end_of_track, event, header_chunk, meta, single_note_file, track_chunk


def _decoder() -> StreamingMidiDecoder:
    return StreamingMidiDecoder(capture_capacity=141, log_events=False)


def test_single_track_file_decodes_end_to_end() -> None:
    decoder = _decoder()

    header = decoder.open_header(io.BytesIO(single_note_file())).unwrap()
    assert header == MidiHeader(format=0, track_count=1, ticks_per_beat=96)

    assert decoder.open_chunk() is ChunkKind.TRACK
    events = [decoder.read_event().unwrap() for _ in range(4)]

    assert events[0].delta_ticks == 0
    assert events[0].data == ChannelMessage(ChannelCode.NOTE_ON, 0, 60, 100)
    assert events[1].delta_ticks == 96
    assert events[1].data == ChannelMessage(ChannelCode.NOTE_OFF, 0, 60, 0)
    assert events[2].type is EventType.END_OF_TRACK
    assert events[2].data == EndOfTrack()
    assert events[3] is END_OF_CHUNK
    assert decoder.open_chunk() is ChunkKind.END_OF_STREAM


def test_reading_past_the_end_of_a_chunk_keeps_returning_end_of_chunk() -> None:
    decoder = _decoder()
    decoder.open_header(header_chunk() + track_chunk()).unwrap()
    decoder.open_chunk()

    assert decoder.read_event().unwrap() is END_OF_CHUNK
    assert decoder.read_event().unwrap() is END_OF_CHUNK
    assert decoder.event_type is EventType.END_OF_CHUNK


def test_event_bytes_add_up_to_chunk_length() -> None:
    events = [
        meta(0, 0x03, b"Melody"),
        meta(0, 0x01, b"x" * 300),
        event(0, b"\xf0\x03\x7e\x7f\xf7"),
        event(0, [0x90, 60, 100]),
        event(200, [60, 0]),
        meta(0, 0x7E, b"\x01\x02\x03"),
        end_of_track(),
    ]
    payload_length = sum(len(item) for item in events)
    decoder = StreamingMidiDecoder(capture_capacity=16, log_events=False)
    decoder.open_header(header_chunk() + track_chunk(*events)).unwrap()
    decoder.open_chunk()

    assert decoder.bytes_remaining == payload_length
    consumed = 0
    for item in events:
        before = decoder.bytes_remaining
        decoder.read_event().unwrap()
        consumed += before - decoder.bytes_remaining
        assert before - decoder.bytes_remaining == len(item)

    assert consumed == payload_length
    assert decoder.read_event().unwrap() is END_OF_CHUNK


def test_unknown_chunk_can_be_skipped() -> None:
    data = header_chunk() + chunk(b"XFIH", b"\x01\x02\x03\x04\x05") + track_chunk(end_of_track())
    decoder = _decoder()
    decoder.open_header(data).unwrap()

    assert decoder.open_chunk() is ChunkKind.UNKNOWN
    assert decoder.last_error is None
    assert decoder.bytes_remaining == 5
    assert decoder.skip_chunk().unwrap() == 5
    assert decoder.open_chunk() is ChunkKind.TRACK
    assert decoder.read_event().unwrap().type is EventType.END_OF_TRACK


def test_opening_next_chunk_discards_unread_events() -> None:
    data = (
        header_chunk(file_format=1, track_count=2)
        + track_chunk(event(0, [0x90, 60, 100]), end_of_track())
        + track_chunk(event(0, [0x91, 62, 100]))
    )
    decoder = _decoder()
    decoder.open_header(data).unwrap()
    decoder.open_chunk()
    decoder.read_event().unwrap()

    decoder.skip_chunk().unwrap()

    assert decoder.open_chunk() is ChunkKind.TRACK
    assert decoder.read_event().unwrap().data.channel == 1


def test_skipping_an_unknown_chunk_cut_short_is_truncation() -> None:
    data = header_chunk() + b"XFIH\x00\x00\x00\x20\x01\x02"
    decoder = _decoder()
    decoder.open_header(data).unwrap()
    decoder.open_chunk()

    result = decoder.skip_chunk()

    assert result.error is DecodeError.TRUNCATED_STREAM


@pytest.mark.parametrize(
    "tail",
    [
        pytest.param(b"MT", id="signature"),
        pytest.param(b"MTrk\x00\x00", id="length"),
    ],
)
def test_truncated_chunk_preamble(tail: bytes) -> None:
    decoder = _decoder()
    decoder.open_header(header_chunk() + tail).unwrap()

    assert decoder.open_chunk() is ChunkKind.UNKNOWN
    assert decoder.last_error is DecodeError.TRUNCATED_HEADER


def test_chunk_kind_is_reported() -> None:
    decoder = _decoder()
    decoder.open_header(single_note_file()).unwrap()

    assert decoder.chunk_kind is ChunkKind.HEADER
    decoder.open_chunk()
    assert decoder.chunk_kind is ChunkKind.TRACK


def test_close_forgets_the_session() -> None:
    decoder = _decoder()
    decoder.open_header(single_note_file()).unwrap()
    decoder.open_chunk()

    decoder.close()

    assert decoder.header is None
    assert decoder.format == -1
    assert decoder.track_count == -1
    assert decoder.ticks_per_beat == 0
    with pytest.raises(RuntimeError):
        decoder.read_event()


def test_context_manager_closes_decoder() -> None:
    with StreamingMidiDecoder(log_events=False) as decoder:
        decoder.open_header(single_note_file()).unwrap()

    with pytest.raises(RuntimeError):
        decoder.open_chunk()


def test_methods_require_an_open_stream() -> None:
    decoder = _decoder()

    with pytest.raises(RuntimeError):
        decoder.open_chunk()
    with pytest.raises(RuntimeError):
        decoder.skip_chunk()


def test_decoder_reads_defaults_from_config() -> None:
    decoder = StreamingMidiDecoder()

    assert decoder.capture_capacity == 141


@pytest.mark.parametrize("capacity", [0, -3, True, "141"])
def test_invalid_capture_capacity_is_rejected(capacity) -> None:
    with pytest.raises(ValueError):
        StreamingMidiDecoder(capacity, log_events=False)


def test_log_events_traces_each_event(caplog: pytest.LogCaptureFixture) -> None:
    decoder = StreamingMidiDecoder(capture_capacity=141, log_events=True)
    decoder.open_header(single_note_file()).unwrap()
    decoder.open_chunk()

    with caplog.at_level(logging.DEBUG, logger="smf_tools.decoding.decoder"):
        while not decoder.read_event().unwrap().is_end_of_chunk:
            pass

    traced = [record.getMessage() for record in caplog.records if record.name == "smf_tools.decoding.decoder"]
    assert traced == [
        "0T Note On [ch 0] 60, 100",
        "96T Note Off [ch 0] 60, 0",
        "0T End Of Track",
    ]


def test_failures_are_logged_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    decoder = _decoder()
    decoder.open_header(header_chunk() + track_chunk(event(0, [60, 0]))).unwrap()
    decoder.open_chunk()

    with caplog.at_level(logging.DEBUG, logger="smf_tools.decoding.decoder"):
        decoder.read_event()

    assert any("Running status" in record.getMessage() for record in caplog.records)
