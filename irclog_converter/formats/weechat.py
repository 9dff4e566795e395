"""WeeChat 3 log dialect (tab-separated, full date on every line).

WHY: WeeChat writes one file per buffer with a complete
``YYYY-MM-DD HH:MM:SS`` timestamp, a prefix column (``-->``, ``<--``,
``--``, `` *`` or the speaker's nick) and the message. It is the second
text dialect most users have lying around.

HOW: Same LineFormat machinery as irssi. Because every line has its own
date, neither banners nor Context.override_date are needed.

Example log::

    2015-01-06 12:34:56<TAB>--><TAB>alice (alice@host) has joined #chan
    2015-01-06 12:35:00<TAB>alice<TAB>hello  there
    2015-01-06 12:35:10<TAB> *<TAB>alice waves
    2015-01-06 12:36:00<TAB>--<TAB>Notice(bob): psst
    2015-01-06 12:37:00<TAB><--<TAB>alice (alice@host) has quit (bye)

RULES:
- The prefix column decides the shape; "-->", "<--", "--" and "*" are
  never treated as a speaker nick
- Reasons are optional: "has quit" alone decodes to reason None
- Join and Part need mask and channel to render; Quit needs mask
- Fail-soft: a bad timestamp yields one TimeParseError item and decoding
  continues with the next line
"""

from __future__ import annotations

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
from irclog_converter.formats.base import LineFormat, require

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_PREFIXES = frozenset({"-->", "<--", "--", "*"})


def _is_notice_prefix(token: str) -> bool:
    return token.startswith("Notice(") and token.endswith("):")


def _is_speaker(token: str) -> bool:
    return token not in _PREFIXES


class WeechatFormat(LineFormat):
    """Codec for WeeChat 3 buffer logs."""

    SHAPES = [
        Shape("join", (ANY, ANY, "-->", ANY, ANY, "has", "joined", ANY)),
        Shape("disconnect", (ANY, ANY, "--", "irc:", "disconnected", "from", "server")),
        Shape("nick", (ANY, ANY, "--", ANY, lambda t: t in ("is", "are"), "now", "known", "as", ANY)),
        Shape("part", (ANY, ANY, "<--", ANY, ANY, "has", "left", ANY), rest=True),
        Shape("quit", (ANY, ANY, "<--", ANY, ANY, "has", "quit"), rest=True),
        Shape("notice", (ANY, ANY, "--", _is_notice_prefix), rest=True),
        Shape("action", (ANY, ANY, "*", ANY), rest=True),
        Shape("msg", (ANY, ANY, _is_speaker), rest=True),
    ]

    @property
    def name(self) -> str:
        return "weechat"

    # -- decoding ---------------------------------------------------------

    @staticmethod
    def _line_time(found: ShapeMatch, context: Context) -> Time:
        stamp = "{} {}".format(found.tokens[0], found.tokens[1])
        return Time.parse(stamp, TIME_FORMAT, context.timezone_offset)

    def _on_join(self, found, context, state):
        return Event(
            type=Join(nick=found.tokens[3], mask=strip_one(found.tokens[4])),
            time=self._line_time(found, context),
            channel=context.resolve_channel(found.tokens[7]),
        )

    def _on_part(self, found, context, state):
        reason = strip_one(found.rest) if found.rest is not None else None
        return Event(
            type=Part(nick=found.tokens[3], mask=strip_one(found.tokens[4]), reason=reason or None),
            time=self._line_time(found, context),
            channel=context.resolve_channel(found.tokens[7]),
        )

    def _on_quit(self, found, context, state):
        reason = strip_one(found.rest) if found.rest is not None else None
        return Event(
            type=Quit(nick=found.tokens[3], mask=strip_one(found.tokens[4]), reason=reason or None),
            time=self._line_time(found, context),
            channel=context.resolve_channel(),
        )

    def _on_disconnect(self, found, context, state):
        return Event(
            type=Disconnect(),
            time=self._line_time(found, context),
            channel=context.resolve_channel(),
        )

    def _on_nick(self, found, context, state):
        return Event(
            type=Nick(old_nick=found.tokens[3], new_nick=found.tokens[8]),
            time=self._line_time(found, context),
            channel=context.resolve_channel(),
        )

    def _on_notice(self, found, context, state):
        sender = found.tokens[3][len("Notice("):-len("):")]
        return Event(
            type=Notice(from_=sender, content=found.rest or ""),
            time=self._line_time(found, context),
            channel=context.resolve_channel(),
        )

    def _on_action(self, found, context, state):
        return Event(
            type=Action(from_=found.tokens[3], content=found.rest or ""),
            time=self._line_time(found, context),
            channel=context.resolve_channel(),
        )

    def _on_msg(self, found, context, state):
        return Event(
            type=Msg(from_=found.tokens[2], content=found.rest or ""),
            time=self._line_time(found, context),
            channel=context.resolve_channel(),
        )

    # -- encoding ---------------------------------------------------------

    def render(self, context: Context, event: Event) -> Optional[str]:
        ty = event.type
        stamp = event.time.format(TIME_FORMAT, context.timezone_offset)
        if isinstance(ty, Msg):
            return "{}\t{}\t{}".format(stamp, ty.from_, ty.content)
        if isinstance(ty, Action):
            return "{}\t *\t{} {}".format(stamp, ty.from_, ty.content)
        if isinstance(ty, Join):
            return "{}\t-->\t{} ({}) has joined {}".format(
                stamp,
                ty.nick,
                require(event, ty.mask, "mask"),
                require(event, event.channel, "channel"),
            )
        if isinstance(ty, Part):
            line = "{}\t<--\t{} ({}) has left {}".format(
                stamp,
                ty.nick,
                require(event, ty.mask, "mask"),
                require(event, event.channel, "channel"),
            )
            if ty.reason:
                line += " ({})".format(ty.reason)
            return line
        if isinstance(ty, Quit):
            line = "{}\t<--\t{} ({}) has quit".format(stamp, ty.nick, require(event, ty.mask, "mask"))
            if ty.reason:
                line += " ({})".format(ty.reason)
            return line
        if isinstance(ty, Disconnect):
            return "{}\t--\tirc: disconnected from server".format(stamp)
        if isinstance(ty, Notice):
            return "{}\t--\tNotice({}): {}".format(stamp, ty.from_, ty.content)
        if isinstance(ty, Nick):
            return "{}\t--\t{} is now known as {}".format(stamp, ty.old_nick, ty.new_nick)
        return None
