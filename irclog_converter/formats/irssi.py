"""irssi log dialect (default theme, ``HH:MM`` timestamps).

WHY: irssi is one of the most common terminal IRC clients, and its logs
are the typical input for conversion. They are also the hardest to read
back: lines carry only the time of day, the date comes from
"--- Log opened" / "--- Day changed" banners, and several line kinds
share prefixes ("-!-" covers joins, parts, quits and renames).

HOW: SHAPES lists the recognized token sequences, most specific first.
Banner shapes update the per-stream date and produce no event (except
"Log closed", which becomes a Disconnect). All other shapes build one
Event. render() writes the same shapes back.

Example log::

    --- Log opened Tue Jan 06 12:00:00 2015
    12:34 -!- alice [alice@host] has joined #chan
    12:35 < alice> hello  there
    12:36  * alice waves
    12:37 -bob(bob@host)- psst
    12:38 -!- alice is now known as alicia
    12:39 -!- alicia [alice@host] has quit [Quit: bye]
    --- Log closed Tue Jan 06 13:00:00 2015

RULES:
- Line dates: Context.override_date, else the last banner date, else a
  TimeParseError item (decoding continues with the next line)
- Join/Part channels come from the line; everything else uses the
  context's channel override (channel notices "-nick:#chan-" excepted)
- Nick mode prefixes (@, +, %, &, ~) are dropped from message senders
- Join and Part need mask and channel to render; Quit needs mask
- Fail-soft: an error item never ends the sequence
"""

from __future__ import annotations

import logging
from typing import Optional

from irclog_converter.core.context import Context
from irclog_converter.core.event import (
    Action,
    Disconnect,
    Event,
    Join,
    Msg,
    Nick,
    Notice,
    Part,
    Quit,
    Time,
)
from irclog_converter.core.tokens import ANY, Shape, ShapeMatch, strip_one
from irclog_converter.formats.base import DecodeState, LineFormat, require

logger = logging.getLogger(__name__)

LINE_TIME_FORMAT = "%H:%M"
BANNER_TIME_FORMAT = "%a %b %d %H:%M:%S %Y"
DAY_CHANGED_FORMAT = "%a %b %d %Y"

_MODE_PREFIXES = "@+%&~"


def _is_bracketed_nick(token: str) -> bool:
    return len(token) >= 3 and token.startswith("<") and token.endswith(">")


def _closes_nick(token: str) -> bool:
    return len(token) >= 2 and token.endswith(">")


def _is_notice_sender(token: str) -> bool:
    return len(token) >= 3 and token != "-!-" and token.startswith("-") and token.endswith("-")


def _drop_mode(nick: str) -> str:
    if len(nick) > 1 and nick[0] in _MODE_PREFIXES:
        return nick[1:]
    return nick


class IrssiFormat(LineFormat):
    """Codec for irssi's default log theme."""

    SHAPES = [
        Shape("log_opened", ("---", "Log", "opened", ANY, ANY, ANY, ANY, ANY)),
        Shape("log_closed", ("---", "Log", "closed", ANY, ANY, ANY, ANY, ANY)),
        Shape("day_changed", ("---", "Day", "changed", ANY, ANY, ANY, ANY)),
        Shape("join", (ANY, "-!-", ANY, ANY, "has", "joined", ANY)),
        Shape("nick", (ANY, "-!-", ANY, "is", "now", "known", "as", ANY)),
        Shape("part", (ANY, "-!-", ANY, ANY, "has", "left", ANY), rest=True),
        Shape("quit", (ANY, "-!-", ANY, ANY, "has", "quit"), rest=True),
        Shape("action", (ANY, "*", ANY), rest=True),
        Shape("notice", (ANY, _is_notice_sender), rest=True),
        Shape("spaced_msg", (ANY, "<", _closes_nick), rest=True),
        Shape("msg", (ANY, _is_bracketed_nick), rest=True),
    ]

    @property
    def name(self) -> str:
        return "irssi"

    # -- decoding ---------------------------------------------------------

    def _line_time(self, found: ShapeMatch, context: Context, state: DecodeState) -> Time:
        day = self.resolve_date(context, state)
        return self.time_on(day, found.tokens[0], LINE_TIME_FORMAT, context)

    def _on_log_opened(self, found, context, state):
        banner = " ".join(found.tokens[3:8])
        state.date = Time.parse(banner, BANNER_TIME_FORMAT, context.timezone_offset).as_datetime().date()
        logger.debug("Log opened, date is now %s", state.date)
        return None

    def _on_log_closed(self, found, context, state):
        banner = " ".join(found.tokens[3:8])
        return Event(
            type=Disconnect(),
            time=Time.parse(banner, BANNER_TIME_FORMAT, context.timezone_offset),
            channel=context.resolve_channel(),
        )

    def _on_day_changed(self, found, context, state):
        banner = " ".join(found.tokens[3:7])
        state.date = Time.parse(banner, DAY_CHANGED_FORMAT, context.timezone_offset).as_datetime().date()
        return None

    def _on_join(self, found, context, state):
        return Event(
            type=Join(nick=found.tokens[2], mask=strip_one(found.tokens[3])),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(found.tokens[6]),
        )

    def _on_part(self, found, context, state):
        reason = strip_one(found.rest) if found.rest is not None else None
        return Event(
            type=Part(nick=found.tokens[2], mask=strip_one(found.tokens[3]), reason=reason or None),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(found.tokens[6]),
        )

    def _on_quit(self, found, context, state):
        reason = strip_one(found.rest) if found.rest is not None else None
        return Event(
            type=Quit(nick=found.tokens[2], mask=strip_one(found.tokens[3]), reason=reason or None),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(),
        )

    def _on_nick(self, found, context, state):
        return Event(
            type=Nick(old_nick=found.tokens[2], new_nick=found.tokens[7]),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(),
        )

    def _on_action(self, found, context, state):
        return Event(
            type=Action(from_=found.tokens[2], content=found.rest or ""),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(),
        )

    def _on_notice(self, found, context, state):
        # -nick(user@host)- for private notices, -nick:#chan- for channel ones
        sender = found.tokens[1][1:-1]
        channel = None
        if "(" in sender:
            sender = sender[:sender.index("(")]
        elif ":" in sender:
            sender, channel = sender.split(":", 1)
        return Event(
            type=Notice(from_=sender, content=found.rest or ""),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(channel),
        )

    def _on_spaced_msg(self, found, context, state):
        return Event(
            type=Msg(from_=found.tokens[2][:-1], content=found.rest or ""),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(),
        )

    def _on_msg(self, found, context, state):
        return Event(
            type=Msg(from_=_drop_mode(found.tokens[1][1:-1]), content=found.rest or ""),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(),
        )

    # -- encoding ---------------------------------------------------------

    def render(self, context: Context, event: Event) -> Optional[str]:
        ty = event.type
        tz = context.timezone_offset
        if isinstance(ty, Disconnect):
            return "--- Log closed {}".format(event.time.format(BANNER_TIME_FORMAT, tz))

        stamp = event.time.format(LINE_TIME_FORMAT, tz)
        if isinstance(ty, Msg):
            return "{} < {}> {}".format(stamp, ty.from_, ty.content)
        if isinstance(ty, Action):
            return "{}  * {} {}".format(stamp, ty.from_, ty.content)
        if isinstance(ty, Notice):
            sender = ty.from_
            if event.channel:
                sender = "{}:{}".format(sender, event.channel)
            return "{} -{}- {}".format(stamp, sender, ty.content)
        if isinstance(ty, Join):
            return "{} -!- {} [{}] has joined {}".format(
                stamp,
                ty.nick,
                require(event, ty.mask, "mask"),
                require(event, event.channel, "channel"),
            )
        if isinstance(ty, Part):
            return "{} -!- {} [{}] has left {} [{}]".format(
                stamp,
                ty.nick,
                require(event, ty.mask, "mask"),
                require(event, event.channel, "channel"),
                ty.reason or "",
            )
        if isinstance(ty, Quit):
            return "{} -!- {} [{}] has quit [{}]".format(
                stamp, ty.nick, require(event, ty.mask, "mask"), ty.reason or "",
            )
        if isinstance(ty, Nick):
            return "{} -!- {} is now known as {}".format(stamp, ty.old_nick, ty.new_nick)
        return None
