"""Tests for the EnergyMech dialect codec.

WHY: EnergyMech lines carry neither the date nor the channel, so every
decoded field outside the line body comes from the Context.
"""

import pytest

from irclog_converter.core.context import Context
from irclog_converter.core.errors import MissingRequiredFieldError, TimeParseError
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
from irclog_converter.formats.energymech import EnergymechFormat

from conftest import T_1234, decode_bytes, encode_events

SAMPLE = (
    b"[12:34:56] *** Joins: alice (alice@host)\n"
    b"[12:35:00] <alice> hello  there\n"
    b"[12:35:10] * alice waves\n"
    b"[12:36:00] -bob- psst\n"
    b"[12:37:00] *** alice is now known as alicia\n"
    b"[12:38:00] *** Quits: alicia (alice@host) (Client exited)\n"
)


@pytest.fixture
def mech():
    return EnergymechFormat()


class TestDecode:

    def test_sample(self, mech, channel_context):
        items = decode_bytes(mech, SAMPLE, channel_context)
        assert [item.type for item in items] == [
            Join("alice", "alice@host"),
            Msg("alice", "hello  there"),
            Action("alice", "waves"),
            Notice("bob", "psst"),
            Nick("alice", "alicia"),
            Quit("alicia", "alice@host", "Client exited"),
        ]
        assert items[0].time == Time(T_1234 + 56, 0)
        assert {item.channel for item in items} == {"#chan"}

    def test_leading_whitespace_round_trip(self, mech, dated_context):
        data = b"[12:34:00] <alice>   indented  text\n"
        [event] = decode_bytes(mech, data, dated_context)
        assert event.type == Msg("alice", "  indented  text")
        assert encode_events(mech, [event], dated_context) == data

    def test_channel_none_without_override(self, mech, dated_context):
        [event] = decode_bytes(mech, b"[12:34:00] <alice> hi\n", dated_context)
        assert event.channel is None

    def test_no_date_yields_error_per_line(self, mech):
        items = decode_bytes(mech, SAMPLE)
        assert len(items) == 6
        assert all(isinstance(item, TimeParseError) for item in items)

    def test_empty_input(self, mech, channel_context):
        assert decode_bytes(mech, b"", channel_context) == []

    def test_part_with_empty_reason(self, mech, dated_context):
        [event] = decode_bytes(mech, b"[12:34:00] *** Parts: bob (b@h) ()\n", dated_context)
        assert event.type == Part("bob", "b@h", None)

    def test_bad_time_continues(self, mech, dated_context):
        items = decode_bytes(mech, b"[25:99:00] <alice> hi\n[12:34:00] <bob> yo\n", dated_context)
        assert isinstance(items[0], TimeParseError)
        assert items[1].type == Msg("bob", "yo")


class TestEncode:

    def test_disconnect_writes_nothing(self, mech):
        assert encode_events(mech, [Event(Disconnect(), Time(T_1234), "#chan")]) == b""

    def test_join_needs_mask(self, mech):
        with pytest.raises(MissingRequiredFieldError):
            encode_events(mech, [Event(Join("alice"), Time(T_1234), None)])

    def test_join_without_channel_is_fine(self, mech):
        data = encode_events(mech, [Event(Join("alice", "a@h"), Time(T_1234), None)])
        assert data == b"[12:34:00] *** Joins: alice (a@h)\n"

    def test_sample_reencodes_identically(self, mech, channel_context):
        events = decode_bytes(mech, SAMPLE, channel_context)
        assert encode_events(mech, events, channel_context) == SAMPLE

    def test_round_trip_part(self, mech, channel_context):
        events = [
            Event(Part("bob", "b@h", "gone"), Time(T_1234), "#chan"),
            Event(Part("bob", "b@h"), Time(T_1234 + 1), "#chan"),
        ]
        data = encode_events(mech, events, channel_context)
        assert decode_bytes(mech, data, channel_context) == events

    def test_rendered_in_context_timezone(self, mech):
        event = Event(Msg("alice", "hi"), Time(T_1234), None)
        assert encode_events(mech, [event], Context(timezone_offset=3600)) == b"[11:34:00] <alice> hi\n"
