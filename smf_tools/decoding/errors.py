"""Error taxonomy for Standard MIDI File decoding."""
from __future__ import annotations

from enum import Enum


class DecodeError(str, Enum):
    """Structural check that failed while decoding a MIDI stream."""

    MALFORMED_HEADER_LENGTH = "malformed_header_length"
    MALFORMED_META_LENGTH = "malformed_meta_length"
    HEADER_SIZE_MISMATCH = "header_size_mismatch"
    TRUNCATED_HEADER = "truncated_header"
    TRUNCATED_STREAM = "truncated_stream"
    CORRUPT_VARIABLE_LENGTH = "corrupt_variable_length"
    RUNNING_STATUS_UNAVAILABLE = "running_status_unavailable"
    UNSUPPORTED_DIVISION_FORMAT = "unsupported_division_format"
    UNEXPECTED_CHUNK = "unexpected_chunk"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def is_malformed_length(self) -> bool:
        return self in (DecodeError.MALFORMED_HEADER_LENGTH, DecodeError.MALFORMED_META_LENGTH)


_DESCRIPTIONS: dict[DecodeError, str] = {
    DecodeError.MALFORMED_HEADER_LENGTH: "Header chunk length is not 6 bytes",
    DecodeError.MALFORMED_META_LENGTH: "Meta event length does not match its fixed size",
    DecodeError.HEADER_SIZE_MISMATCH: "Header chunk has bytes left after its fields",
    DecodeError.TRUNCATED_HEADER: "End of file inside a chunk signature",
    DecodeError.TRUNCATED_STREAM: "Unexpected end of MIDI data",
    DecodeError.CORRUPT_VARIABLE_LENGTH: "Variable-length quantity is not terminated",
    DecodeError.RUNNING_STATUS_UNAVAILABLE: "Running status used before any channel status byte",
    DecodeError.UNSUPPORTED_DIVISION_FORMAT: "SMPTE frames-per-second division is not supported",
    DecodeError.UNEXPECTED_CHUNK: "Expected a MThd header chunk",
}


class MidiFormatError(ValueError):
    """Raised inside the decoding layers when a structural check fails.

    The decoder catches it at its public boundary and reports the attached
    :class:`DecodeError` as a result value instead.
    """

    def __init__(self, error: DecodeError, detail: str | None = None) -> None:
        message = error.description if detail is None else f"{error.description}: {detail}"
        super().__init__(message)
        self.error = error
        self.detail = detail


class MidiDecodeError(ValueError):
    """Raised by the file-level reader when a MIDI file cannot be decoded."""

    def __init__(
        self,
        error: DecodeError,
        *,
        track_index: int | None = None,
        event_index: int | None = None,
    ) -> None:
        location = []
        if track_index is not None:
            location.append(f"track {track_index}")
        if event_index is not None:
            location.append(f"event {event_index}")
        message = error.description
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)
        self.error = error
        self.track_index = track_index
        self.event_index = event_index


__all__ = ["DecodeError", "MidiDecodeError", "MidiFormatError"]
