"""Command-line interface for the IRC log converter.

WHY: Most conversions are one-off shell jobs ("turn last year's irssi
logs into weechat logs"). The CLI wires the dialect registry, the
Context and the conversion driver together behind a few subcommands.

HOW: argparse with subcommands:
  convert INFORMAT OUTFORMAT   stream stdin (or -i FILE) to stdout (or -o FILE)
  parse FORMAT FILE...         decode files and report every error item
  freq FORMAT [FILE...]        print the most talkative nicks
  formats                      list registered dialects
Status messages go to stderr; converted output goes to stdout or -o.

RULES:
- --date (YYYY-MM-DD), --tz (seconds west of UTC) and --channel build the
  Context; IRCLOG_TZ / IRCLOG_CHANNEL from .env are the defaults
- convert stops at the first error and reports the record and error kind
- Configuration errors (unknown format, bad date, missing file) exit 1
- Ctrl-C exits 130
"""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional

from irclog_converter import __version__
from irclog_converter.config import (
    DEFAULT_INPUT_FORMAT,
    DEFAULT_OUTPUT_FORMAT,
    STATS_TOP_N,
    load_channel,
    load_timezone_offset,
)
from irclog_converter.core.context import Context, build_context
from irclog_converter.core.convert import ConvertFailed, convert
from irclog_converter.core.errors import ConversionError
from irclog_converter.formats import FORMATS, UnknownFormatError, get_format
from irclog_converter.stats import SpeakerStats, collect_stats, format_stats, top_speakers

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr (stdout may carry converted output)."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    _status("Error: {}".format(msg))
    sys.exit(1)


def _build_context(args: argparse.Namespace) -> Context:
    tz = args.tz if args.tz is not None else load_timezone_offset()
    channel = args.channel if args.channel is not None else load_channel()
    return build_context(date_text=args.date, timezone_offset=tz, channel=channel)


def _open_input(stack: ExitStack, path: Optional[str]) -> BinaryIO:
    if not path or path == "-":
        return sys.stdin.buffer
    source = Path(path)
    if not source.is_file():
        _fail("File not found: {}".format(source))
    return stack.enter_context(source.open("rb"))


def _open_output(stack: ExitStack, path: Optional[str]) -> BinaryIO:
    if not path or path == "-":
        return sys.stdout.buffer
    return stack.enter_context(Path(path).open("wb"))


def _run_convert(args: argparse.Namespace, context: Context) -> int:
    decoder = get_format(args.informat)
    encoder = get_format(args.outformat)
    with ExitStack() as stack:
        source = _open_input(stack, args.input)
        sink = _open_output(stack, args.output)
        try:
            count = convert(decoder, encoder, context, source, sink)
        except ConvertFailed as exc:
            sink.flush()
            _status("Error: record {}: {}: {}".format(
                exc.record, type(exc.error).__name__, exc.error,
            ))
            return 1
        sink.flush()
    _status("Converted {} event(s) from {} to {}".format(count, decoder.name, encoder.name))
    return 0


def _run_parse(args: argparse.Namespace, context: Context) -> int:
    decoder = get_format(args.format)
    failures = 0
    for name in args.files:
        events = 0
        with ExitStack() as stack:
            source = _open_input(stack, name)
            for record, item in enumerate(decoder.decode(context, source), start=1):
                if isinstance(item, ConversionError):
                    failures += 1
                    _status("{}: record {}: {}: {}".format(name, record, type(item).__name__, item))
                else:
                    events += 1
                    logger.debug("Parsed: %r", item)
        _status("{}: {} event(s)".format(name, events))
    return 1 if failures else 0


def _run_freq(args: argparse.Namespace, context: Context) -> int:
    decoder = get_format(args.format)
    totals: Dict[str, SpeakerStats] = {}
    with ExitStack() as stack:
        for name in args.files or ["-"]:
            source = _open_input(stack, name)
            try:
                stats = collect_stats(decoder.decode(context, source))
            except ConversionError as exc:
                _status("Error: {}: {}: {}".format(name, type(exc).__name__, exc))
                return 1
            for nick, person in stats.items():
                total = totals.setdefault(nick, SpeakerStats())
                total.lines += person.lines
                total.words += person.words
    report = format_stats(top_speakers(totals, args.top))
    if report:
        print(report)
    return 0


def _run_formats(args: argparse.Namespace, context: Context) -> int:
    for name in sorted(FORMATS):
        print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Separate from main() so tests can inspect the parser without running
    a conversion.
    """
    parser = argparse.ArgumentParser(
        prog="irclog-converter",
        description="A converter and statistics utility for IRC log files.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s {}".format(__version__))
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log parsing details to stderr.",
    )

    context_flags = argparse.ArgumentParser(add_help=False)
    context_flags.add_argument(
        "--date",
        default=None,
        help="Override the date for this log. ISO 8601, YYYY-MM-DD.",
    )
    context_flags.add_argument(
        "--tz",
        type=int,
        default=None,
        help="UTC offset in seconds, in the direction of the western hemisphere "
             "(default: IRCLOG_TZ or 0).",
    )
    context_flags.add_argument(
        "--channel",
        default=None,
        help="Set a channel for the given log (default: IRCLOG_CHANNEL).",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    convert_cmd = commands.add_parser(
        "convert", parents=[context_flags], help="Convert a log between formats.",
    )
    convert_cmd.add_argument(
        "informat", nargs="?", default=DEFAULT_INPUT_FORMAT,
        help="Input format (default: %(default)s).",
    )
    convert_cmd.add_argument(
        "outformat", nargs="?", default=DEFAULT_OUTPUT_FORMAT,
        help="Output format (default: %(default)s).",
    )
    convert_cmd.add_argument("-i", "--input", default=None, help="Input file (default: stdin).")
    convert_cmd.add_argument("-o", "--output", default=None, help="Output file (default: stdout).")
    convert_cmd.set_defaults(handler=_run_convert)

    parse_cmd = commands.add_parser(
        "parse", parents=[context_flags], help="Decode files and report errors.",
    )
    parse_cmd.add_argument("format", help="Input format.")
    parse_cmd.add_argument("files", nargs="+", help="Log files to parse.")
    parse_cmd.set_defaults(handler=_run_parse)

    freq_cmd = commands.add_parser(
        "freq", parents=[context_flags], help="Show who wrote the most words.",
    )
    freq_cmd.add_argument("format", help="Input format.")
    freq_cmd.add_argument("files", nargs="*", help="Log files (default: stdin).")
    freq_cmd.add_argument(
        "--top", type=int, default=STATS_TOP_N,
        help="Number of nicks to show (default: %(default)s).",
    )
    freq_cmd.set_defaults(handler=_run_freq)

    formats_cmd = commands.add_parser("formats", help="List available formats.")
    formats_cmd.set_defaults(handler=_run_formats)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``irclog-converter`` and ``python -m irclog_converter``.

    argv=None means use sys.argv; explicit argv is for testing.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        context = _build_context(args) if hasattr(args, "date") else Context()
        code = args.handler(args, context)
    except (ValueError, UnknownFormatError) as exc:
        # Config errors (bad date, bad IRCLOG_TZ, unknown format name)
        _fail(str(exc))
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
