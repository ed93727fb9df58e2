"""Print the header and every event of a Standard MIDI File."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from app.config import get_app_config, load_app_config, set_app_config
from app.version import describe_app_version
from shared.logging_config import ensure_app_logging, set_file_log_verbosity

from .decoding import (
    MidiDecodeError,
    describe_error,
    describe_event,
    describe_header,
    open_midi_stream,
)

_LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="smf-dump", description=__doc__)
    parser.add_argument("path", type=Path, help="MIDI file to decode.")
    parser.add_argument(
        "--capacity",
        type=_positive_int,
        default=None,
        help="Bytes kept per text/sysex payload plus one for the terminator.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON configuration file overriding the bundled defaults.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Trace every decoded event in the log file.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {describe_app_version()}")
    return parser.parse_args(argv)


def dump_midi(
    path: Path,
    *,
    capture_capacity: int | None = None,
    log_events: bool | None = None,
    out: TextIO | None = None,
) -> int:
    """Write one line per event of ``path`` to ``out``; return the event count."""

    out = out if out is not None else sys.stdout
    count = 0
    with open_midi_stream(path, capture_capacity=capture_capacity, log_events=log_events) as (header, events):
        print(describe_header(header), file=out)
        for item in events:
            print(f"track {item.track_index}  {describe_event(item.event)}", file=out)
            count += 1
    return count


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.config is not None:
        set_app_config(load_app_config(args.config))
    config = get_app_config()

    ensure_app_logging()
    set_file_log_verbosity("verbose" if args.verbose else config.logging.verbosity)

    log_events = True if args.verbose else None
    try:
        count = dump_midi(args.path, capture_capacity=args.capacity, log_events=log_events)
    except MidiDecodeError as exc:
        _LOGGER.error("Failed to decode %s: %s", args.path, exc)
        print(f"{args.path}: {describe_error(exc.error)}", file=sys.stderr)
        if exc.track_index is not None:
            print(f"  at track {exc.track_index}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"{args.path}: {exc.strerror or exc}", file=sys.stderr)
        return 1

    _LOGGER.info("Decoded %d events from %s", count, args.path)
    return 0


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}") from exc
    if value < 1:
        raise argparse.ArgumentTypeError("capacity must be at least 1")
    return value


if __name__ == "__main__":
    raise SystemExit(main())
