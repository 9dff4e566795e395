"""EnergyMech bot log dialect (``[HH:MM:SS]`` prefix, one file per day).

WHY: EnergyMech channel logs are common on long-running bot archives.
They record the time of day only (the day is in the file name) and never
the channel, so both come from the Context.

HOW: Same LineFormat machinery as irssi, without banner lines. The date
is Context.override_date; without it every event line yields a
TimeParseError item.

Example log::

    [12:34:56] *** Joins: alice (alice@host)
    [12:35:00] <alice> hello  there
    [12:35:10] * alice waves
    [12:36:00] -bob- psst
    [12:37:00] *** alice is now known as alicia
    [12:38:00] *** Quits: alicia (alice@host) (Client exited)

RULES:
- Channel is always Context.override_channel (possibly None)
- Disconnect has no EnergyMech line: encoding it writes nothing
- Joins, Parts and Quits need a mask to render
- Fail-soft: a bad timestamp never ends the sequence
"""

from __future__ import annotations

from typing import Optional

from irclog_converter.core.context import Context
from irclog_converter.core.event import (
    Action,
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

TIME_FORMAT = "[%H:%M:%S]"


def _is_angle_nick(token: str) -> bool:
    return len(token) >= 3 and token.startswith("<") and token.endswith(">")


def _is_dash_nick(token: str) -> bool:
    return len(token) >= 3 and token.startswith("-") and token.endswith("-")


class EnergymechFormat(LineFormat):
    """Codec for EnergyMech channel logs."""

    SHAPES = [
        Shape("join", (ANY, "***", "Joins:", ANY, ANY)),
        Shape("nick", (ANY, "***", ANY, "is", "now", "known", "as", ANY)),
        Shape("part", (ANY, "***", "Parts:", ANY, ANY), rest=True),
        Shape("quit", (ANY, "***", "Quits:", ANY, ANY), rest=True),
        Shape("action", (ANY, "*", ANY), rest=True),
        Shape("notice", (ANY, _is_dash_nick), rest=True),
        Shape("msg", (ANY, _is_angle_nick), rest=True),
    ]

    @property
    def name(self) -> str:
        return "energymech"

    # -- decoding ---------------------------------------------------------

    def _line_time(self, found: ShapeMatch, context: Context, state: DecodeState) -> Time:
        day = self.resolve_date(context, state)
        return self.time_on(day, found.tokens[0], TIME_FORMAT, context)

    def _on_join(self, found, context, state):
        return Event(
            type=Join(nick=found.tokens[3], mask=strip_one(found.tokens[4])),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(),
        )

    def _on_part(self, found, context, state):
        reason = strip_one(found.rest) if found.rest is not None else None
        return Event(
            type=Part(nick=found.tokens[3], mask=strip_one(found.tokens[4]), reason=reason or None),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(),
        )

    def _on_quit(self, found, context, state):
        reason = strip_one(found.rest) if found.rest is not None else None
        return Event(
            type=Quit(nick=found.tokens[3], mask=strip_one(found.tokens[4]), reason=reason or None),
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
        return Event(
            type=Notice(from_=found.tokens[1][1:-1], content=found.rest or ""),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(),
        )

    def _on_msg(self, found, context, state):
        return Event(
            type=Msg(from_=found.tokens[1][1:-1], content=found.rest or ""),
            time=self._line_time(found, context, state),
            channel=context.resolve_channel(),
        )

    # -- encoding ---------------------------------------------------------

    def render(self, context: Context, event: Event) -> Optional[str]:
        ty = event.type
        stamp = event.time.format(TIME_FORMAT, context.timezone_offset)
        if isinstance(ty, Msg):
            return "{} <{}> {}".format(stamp, ty.from_, ty.content)
        if isinstance(ty, Action):
            return "{} * {} {}".format(stamp, ty.from_, ty.content)
        if isinstance(ty, Notice):
            return "{} -{}- {}".format(stamp, ty.from_, ty.content)
        if isinstance(ty, Join):
            return "{} *** Joins: {} ({})".format(stamp, ty.nick, require(event, ty.mask, "mask"))
        if isinstance(ty, Part):
            return "{} *** Parts: {} ({}) ({})".format(
                stamp, ty.nick, require(event, ty.mask, "mask"), ty.reason or "",
            )
        if isinstance(ty, Quit):
            return "{} *** Quits: {} ({}) ({})".format(
                stamp, ty.nick, require(event, ty.mask, "mask"), ty.reason or "",
            )
        if isinstance(ty, Nick):
            return "{} *** {} is now known as {}".format(stamp, ty.old_nick, ty.new_nick)
        # Disconnect has no EnergyMech rendering
        return None
