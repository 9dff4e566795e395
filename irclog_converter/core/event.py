"""Canonical event dataclasses shared by every log dialect.

WHY: Each IRC client writes its logs differently (irssi, weechat,
energymech, plus our own binary and msgpack forms). Converting N dialects
into M dialects directly would need N*M translators. Instead every
decoder produces these dataclasses and every encoder consumes them, so
adding a dialect is one new codec module.

HOW: One frozen dataclass per event variant, each carrying only the
fields that make sense for it, wrapped in an Event together with the
absolute time and the (optional) channel:
  Msg, Action, Notice   a speaker and a text body
  Join, Part, Quit      a nick plus optional hostmask or reason
  Nick                  a rename
  Disconnect            no payload

RULES:
- Optional fields may be None because a dialect never records them
- Non-optional fields are always populated by every decoder
- ``from`` is a keyword, so the speaker attribute is ``from_``
- Time.timestamp is UTC seconds; Time.offset is seconds WEST of UTC
  (positive for the Americas), the same convention as the --tz flag
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from irclog_converter.core.errors import TimeParseError


# datetime.timezone accepts offsets strictly inside one day
MAX_OFFSET = 86399


def _tzinfo(offset: int) -> timezone:
    if not -MAX_OFFSET <= offset <= MAX_OFFSET:
        raise TimeParseError(
            "timezone offset {} is outside +/-{} seconds".format(offset, MAX_OFFSET)
        )
    return timezone(timedelta(seconds=-offset))


@dataclass(frozen=True)
class Time:
    """An absolute instant plus the timezone offset it was resolved with.

    WHY: Text dialects only store local wall-clock time. Keeping the UTC
    instant lets any encoder re-render it in its own local format, and
    keeping the offset lets the binary dialects round-trip losslessly.

    RULES:
    - timestamp: integer seconds since the Unix epoch, UTC
    - offset: seconds west of UTC used when the local time was resolved
    """

    timestamp: int
    offset: int = 0

    @classmethod
    def from_local(cls, local: datetime, offset: int = 0) -> Time:
        """Resolve a naive local datetime into an absolute Time.

        Raises:
            TimeParseError: If ``offset`` is not a valid timezone offset.
        """
        aware = local.replace(tzinfo=_tzinfo(offset))
        try:
            timestamp = int(aware.timestamp())
        except (ValueError, OverflowError, OSError) as exc:
            raise TimeParseError("cannot resolve {} at offset {}".format(local, offset)) from exc
        return cls(timestamp=timestamp, offset=offset)

    @classmethod
    def parse(cls, text: str, fmt: str, offset: int = 0) -> Time:
        """Parse ``text`` with a strptime pattern as local time at ``offset``.

        Raises:
            TimeParseError: If ``text`` does not match ``fmt``.
        """
        try:
            local = datetime.strptime(text, fmt)
        except ValueError as exc:
            raise TimeParseError(
                "cannot parse time {!r} with format {!r}".format(text, fmt)
            ) from exc
        return cls.from_local(local, offset)

    def as_datetime(self, offset: Optional[int] = None) -> datetime:
        """Return an aware datetime in the local time of ``offset``.

        Raises:
            TimeParseError: If the instant is outside what datetime can
                represent, or ``offset`` is not a valid timezone offset.
        """
        if offset is None:
            offset = self.offset
        tz = _tzinfo(offset)
        try:
            return datetime.fromtimestamp(self.timestamp, tz=tz)
        except (ValueError, OverflowError, OSError) as exc:
            raise TimeParseError(
                "timestamp {} is out of range: {}".format(self.timestamp, exc)
            ) from exc

    def format(self, fmt: str, offset: Optional[int] = None) -> str:
        """Render with a strftime pattern in the local time of ``offset``."""
        return self.as_datetime(offset).strftime(fmt)


@dataclass(frozen=True)
class Msg:
    """A regular channel message."""

    from_: str
    content: str


@dataclass(frozen=True)
class Action:
    """A CTCP ACTION (``/me``) line."""

    from_: str
    content: str


@dataclass(frozen=True)
class Join:
    nick: str
    mask: Optional[str] = None


@dataclass(frozen=True)
class Part:
    nick: str
    mask: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class Quit:
    nick: str
    mask: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class Nick:
    old_nick: str
    new_nick: str


@dataclass(frozen=True)
class Notice:
    from_: str
    content: str


@dataclass(frozen=True)
class Disconnect:
    """The client lost (or closed) its connection. No payload."""


EventType = Union[Msg, Action, Join, Part, Quit, Nick, Notice, Disconnect]

EVENT_TYPES = (Msg, Action, Join, Part, Quit, Nick, Notice, Disconnect)


@dataclass(frozen=True)
class Event:
    """One log line's semantic content.

    RULES:
    - type: one of the EventType variants above
    - time: absolute Time of the line
    - channel: None when the dialect has no per-line channel and the
      context supplies no override
    """

    type: EventType
    time: Time
    channel: Optional[str] = field(default=None)

    @property
    def variant(self) -> str:
        """Variant class name, e.g. ``"Join"``; used in error messages."""
        return type(self.type).__name__
