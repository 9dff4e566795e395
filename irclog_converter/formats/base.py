"""Decode/Encode contract and the shared line-oriented codec machinery.

WHY: The conversion driver, the statistics aggregator and the CLI must
work with any dialect generically. Every codec therefore exposes the
same two calls: decode a byte stream into a lazy sequence of events, and
encode one event into a byte sink.

HOW: BaseFormat is an ABC with ``name``, ``decode()`` and ``encode()``.
LineFormat implements decode/encode for the text dialects: it reads one
line at a time, tokenizes it, tries the dialect's ordered Shape list and
hands the first match to an ``_on_<shape>`` handler. Subclasses only
declare SHAPES, the handlers, and ``render()``.

RULES:
- decode() is a generator: nothing is read until the first pull
- Decode failures are YIELDED as ConversionError instances, not raised
- Lines matching no shape are skipped silently (optional on_skip hook)
- End of stream or an OSError while reading ends the sequence quietly
- encode() writes nothing for variants the dialect cannot represent
- encode() raises MissingRequiredFieldError instead of inventing fields
- Text encoders raise ParseError for fields containing a line break

To add a new dialect:
1. Create a new module in formats/
2. Subclass BaseFormat (or LineFormat for text logs)
3. Register it in FORMATS in formats/__init__.py
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional, Union

from irclog_converter.core.context import Context
from irclog_converter.core.errors import (
    ConversionError,
    MissingRequiredFieldError,
    ParseError,
    StreamIOError,
    TimeParseError,
)
from irclog_converter.core.event import Event, Time
from irclog_converter.core.tokens import Shape, ShapeMatch, match_first, tokenize

logger = logging.getLogger(__name__)

DecodeItem = Union[Event, ConversionError]


class BaseFormat(ABC):
    """Abstract base for every log dialect codec."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the dialect, e.g. ``'irssi'``."""

    @abstractmethod
    def decode(self, context: Context, input: BinaryIO) -> Iterator[DecodeItem]:
        """Lazily decode ``input`` into events (or error items).

        Args:
            context: Timezone, date and channel overrides.
            input: A readable binary stream positioned at the first record.

        Returns:
            A single-pass iterator of Event or ConversionError items.
        """

    @abstractmethod
    def encode(self, context: Context, output: BinaryIO, event: Event) -> None:
        """Append the rendering of ``event`` to ``output``.

        Raises:
            MissingRequiredFieldError: A field the dialect shows is None.
            StreamIOError: Writing to ``output`` failed.
        """


def write_bytes(output: BinaryIO, data: bytes) -> None:
    """Write to the sink, converting OSError into StreamIOError."""
    try:
        output.write(data)
    except OSError as exc:
        raise StreamIOError("failed to write output: {}".format(exc)) from exc


def require(event: Event, value: Optional[str], field: str) -> str:
    """Return ``value`` or raise MissingRequiredFieldError for ``field``."""
    if value is None:
        raise MissingRequiredFieldError(event.variant, field)
    return value


def iter_events(items: Iterable[DecodeItem]) -> Iterator[Event]:
    """Yield events from a decode sequence, raising the first error item."""
    for item in items:
        if isinstance(item, ConversionError):
            raise item
        yield item


@dataclass
class DecodeState:
    """Mutable per-stream state owned by one decode() call.

    RULES:
    - date: the most recent date announced by a banner line, if any
    """

    date: Optional[date] = None


class LineFormat(BaseFormat):
    """Shared decode/encode loop for line-oriented text dialects.

    Subclasses set SHAPES (most specific first) and implement one
    ``_on_<shape name>(match, context, state)`` handler per shape, each
    returning an Event or None (banner lines that only update state).
    """

    SHAPES: List[Shape] = []

    def __init__(self, on_skip: Optional[Callable[[str], None]] = None) -> None:
        self._on_skip = on_skip

    def decode(self, context: Context, input: BinaryIO) -> Iterator[DecodeItem]:
        state = DecodeState()
        while True:
            try:
                raw = input.readline()
            except OSError as exc:
                logger.warning("Read failed, ending %s decode: %s", self.name, exc)
                return
            if not raw:
                return

            text = raw.decode("utf-8", errors="replace")
            if text.endswith("\n"):
                text = text[:-1]
            if text.endswith("\r"):
                text = text[:-1]

            line = tokenize(text)
            logger.debug("Parsing:   %r", line.tokens)

            found = match_first(self.SHAPES, line)
            if found is None:
                logger.debug("Skipped:   %r", text)
                if self._on_skip is not None:
                    self._on_skip(text)
                continue

            try:
                event = self._build(found, context, state)
            except ConversionError as exc:
                logger.debug("Failed:    %r (%s)", text, exc)
                yield exc
                continue
            if event is not None:
                yield event

    def _build(self, found: ShapeMatch, context: Context, state: DecodeState) -> Optional[Event]:
        handler = getattr(self, "_on_{}".format(found.shape))
        return handler(found, context, state)

    def encode(self, context: Context, output: BinaryIO, event: Event) -> None:
        line = self.render(context, event)
        if line is None:
            return
        if "\n" in line or "\r" in line:
            raise ParseError(
                "{} event contains a line break, which a {} line cannot hold".format(
                    event.variant, self.name,
                )
            )
        write_bytes(output, (line + "\n").encode("utf-8"))

    @abstractmethod
    def render(self, context: Context, event: Event) -> Optional[str]:
        """Render ``event`` as one line without terminator, or None to skip."""

    # -- helpers for subclasses -------------------------------------------

    @staticmethod
    def resolve_date(context: Context, state: DecodeState) -> date:
        """Pick the date for a time-of-day-only line.

        The context override wins, then the last banner date.

        Raises:
            TimeParseError: If neither is available.
        """
        if context.override_date is not None:
            return context.override_date
        if state.date is not None:
            return state.date
        raise TimeParseError("line has no date and no --date override or log banner was seen")

    @staticmethod
    def time_on(day: date, clock: str, fmt: str, context: Context) -> Time:
        """Combine a date with a time-of-day token parsed by ``fmt``."""
        try:
            parsed = datetime.strptime(clock, fmt).time()
        except ValueError as exc:
            raise TimeParseError(
                "cannot parse time {!r} with format {!r}".format(clock, fmt)
            ) from exc
        return Time.from_local(datetime.combine(day, parsed), context.timezone_offset)
