"""Shared fixtures and helpers for the irclog_converter test suite.

WHY: Every codec test needs the same things: a Context pinned to a known
date, an in-memory byte stream, and one fully populated event of each
variant for round-trip checks.

HOW: Plain helper functions decode/encode through io.BytesIO. ALL_EVENTS
holds one Event per variant with every optional field set, plus a few
with optional fields left as None.

RULES:
- The reference instant is 2015-01-06 12:34:00 UTC (1420547640)
- All text fixtures use "\\n" line endings
"""

import io
from datetime import date
from typing import List

import pytest

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

LOG_DATE = date(2015, 1, 6)
T_1234 = 1420547640  # 2015-01-06 12:34:00 UTC

ALL_EVENTS: List[Event] = [
    Event(Msg(from_="alice", content="hello  there"), Time(T_1234, 0), "#chan"),
    Event(Action(from_="alice", content="waves"), Time(T_1234 + 1, 0), "#chan"),
    Event(Join(nick="alice", mask="alice@host"), Time(T_1234 + 2, 0), "#chan"),
    Event(Join(nick="bob"), Time(T_1234 + 3, 3600), None),
    Event(Part(nick="alice", mask="alice@host", reason="gone"), Time(T_1234 + 4, 0), "#chan"),
    Event(Part(nick="alice"), Time(T_1234 + 5, -7200), "#chan"),
    Event(Quit(nick="bob", mask="bob@host", reason="Quit: bye"), Time(T_1234 + 6, 0), None),
    Event(Nick(old_nick="alice", new_nick="alicia"), Time(T_1234 + 7, 0), "#chan"),
    Event(Notice(from_="NickServ", content="identify ✓"), Time(T_1234 + 8, 0), None),
    Event(Disconnect(), Time(T_1234 + 9, 0), "#chan"),
]


def decode_bytes(codec, data: bytes, context: Context = None) -> list:
    """Decode ``data`` fully and return the list of items."""
    return list(codec.decode(context or Context(), io.BytesIO(data)))


def encode_events(codec, events, context: Context = None) -> bytes:
    """Encode ``events`` in order and return the written bytes."""
    sink = io.BytesIO()
    for event in events:
        codec.encode(context or Context(), sink, event)
    return sink.getvalue()


@pytest.fixture
def dated_context():
    """Context with the date override set to LOG_DATE, UTC, no channel."""
    return Context(override_date=LOG_DATE)


@pytest.fixture
def channel_context():
    """Context with date and channel overrides."""
    return Context(override_date=LOG_DATE, override_channel="#chan")
