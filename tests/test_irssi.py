"""Tests for the irssi dialect codec.

WHY: irssi logs carry only HH:MM on each line, so date resolution
(override, banners, day changes) is where most bugs would hide. The
"-!-" prefix is shared by four line kinds, so shape priority matters too.
"""

import io
from datetime import date

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
from irclog_converter.formats.irssi import IrssiFormat

from conftest import T_1234, decode_bytes, encode_events

SAMPLE = (
    "--- Log opened Tue Jan 06 12:00:00 2015\n"
    "12:34 -!- alice [alice@host] has joined #chan\n"
    "12:35 < alice> hello  there\n"
    "12:36  * alice waves\n"
    "12:37 -!- alice is now known as alicia\n"
    "12:38 -!- alicia [alice@host] has quit [Quit: bye]\n"
    "--- Log closed Tue Jan 06 13:00:00 2015\n"
).encode("utf-8")


@pytest.fixture
def irssi():
    return IrssiFormat()


class TestDecodeJoin:

    def test_join_with_brackets(self, irssi, dated_context):
        items = decode_bytes(irssi, b"12:34 -!- alice [alice@host] has joined #chan\n", dated_context)
        assert items == [Event(Join("alice", "alice@host"), Time(T_1234, 0), "#chan")]

    def test_join_with_parentheses(self, irssi, dated_context):
        items = decode_bytes(irssi, b"12:34 -!- alice (alice@host) has joined #chan\n", dated_context)
        assert items == [Event(Join("alice", "alice@host"), Time(T_1234, 0), "#chan")]

    def test_timezone_offset_applied(self, irssi):
        context = Context(timezone_offset=3600, override_date=date(2015, 1, 6))
        [event] = decode_bytes(irssi, b"12:34 -!- alice [a@h] has joined #chan\n", context)
        assert event.time == Time(T_1234 + 3600, 3600)


class TestDates:

    def test_banner_supplies_date(self, irssi):
        data = b"--- Log opened Tue Jan 06 12:00:00 2015\n12:34 < alice> hi\n"
        items = decode_bytes(irssi, data)
        assert items == [Event(Msg("alice", "hi"), Time(T_1234, 0), None)]

    def test_override_wins_over_banner(self, irssi):
        data = b"--- Log opened Tue Jan 06 12:00:00 2015\n12:34 < alice> hi\n"
        [event] = decode_bytes(irssi, data, Context(override_date=date(2015, 1, 7)))
        assert event.time.timestamp == T_1234 + 86400

    def test_day_changed(self, irssi):
        data = (
            b"--- Log opened Tue Jan 06 23:00:00 2015\n"
            b"--- Day changed Wed Jan 07 2015\n"
            b"00:01 < alice> late\n"
        )
        [event] = decode_bytes(irssi, data)
        assert event.time.timestamp == 1420588860

    def test_log_closed_is_disconnect(self, irssi):
        [event] = decode_bytes(irssi, b"--- Log closed Tue Jan 06 12:34:00 2015\n")
        assert event == Event(Disconnect(), Time(T_1234, 0), None)

    def test_no_date_yields_error_and_continues(self, irssi):
        data = b"12:34 < alice> hi\n--- Log opened Tue Jan 06 12:00:00 2015\n12:34 < bob> yo\n"
        items = decode_bytes(irssi, data)
        assert len(items) == 2
        assert isinstance(items[0], TimeParseError)
        assert items[1] == Event(Msg("bob", "yo"), Time(T_1234, 0), None)

    def test_bad_time_yields_error_and_continues(self, irssi, dated_context):
        items = decode_bytes(irssi, b"ab:cd < alice> hi\n12:34 < bob> yo\n", dated_context)
        assert isinstance(items[0], TimeParseError)
        assert items[1].type == Msg("bob", "yo")


class TestDecodeLines:

    def test_unknown_line_is_skipped(self, dated_context):
        skipped = []
        irssi = IrssiFormat(on_skip=skipped.append)
        line = "12:00 -!- Irssi: Join to #chan was synced in 0 secs"
        items = decode_bytes(irssi, (line + "\n12:34 < alice> hi\n").encode(), dated_context)
        assert [item.type for item in items] == [Msg("alice", "hi")]
        assert skipped == [line]

    def test_message_whitespace_preserved(self, irssi, dated_context):
        [event] = decode_bytes(irssi, b"12:34 < alice> look:    here  \n", dated_context)
        assert event.type == Msg("alice", "look:    here  ")

    def test_leading_whitespace_preserved(self, irssi, dated_context):
        line = b"12:34 < alice>    indented  text\n"
        [event] = decode_bytes(irssi, line, dated_context)
        assert event.type == Msg("alice", "   indented  text")
        assert encode_events(irssi, [event], dated_context) == line

    def test_crlf_stripped(self, irssi, dated_context):
        [event] = decode_bytes(irssi, b"12:34 < alice> hi\r\n", dated_context)
        assert event.type == Msg("alice", "hi")

    def test_mode_prefix_dropped(self, irssi, dated_context):
        items = decode_bytes(irssi, b"12:34 <@alice> hi\n12:34 <+bob> yo\n", dated_context)
        assert [item.type.from_ for item in items] == ["alice", "bob"]

    def test_action(self, irssi, dated_context):
        [event] = decode_bytes(irssi, b"12:34  * alice waves  hard\n", dated_context)
        assert event.type == Action("alice", "waves  hard")

    def test_nick_change(self, irssi, dated_context):
        [event] = decode_bytes(irssi, b"12:34 -!- alice is now known as alicia\n", dated_context)
        assert event.type == Nick("alice", "alicia")

    def test_part_with_reason(self, irssi, dated_context):
        [event] = decode_bytes(irssi, b"12:34 -!- bob [b@h] has left #chan [see you]\n", dated_context)
        assert event == Event(Part("bob", "b@h", "see you"), Time(T_1234, 0), "#chan")

    def test_empty_reason_is_none(self, irssi, dated_context):
        data = b"12:34 -!- bob [b@h] has left #chan []\n12:35 -!- bob [b@h] has quit []\n"
        part, quit = decode_bytes(irssi, data, dated_context)
        assert part.type.reason is None
        assert quit.type.reason is None

    def test_quit_reason_strips_one_layer(self, irssi, dated_context):
        [event] = decode_bytes(irssi, b"12:34 -!- bob [b@h] has quit [[nested]]\n", dated_context)
        assert event.type == Quit("bob", "b@h", "[nested]")

    def test_private_notice(self, irssi, dated_context):
        [event] = decode_bytes(irssi, b"12:34 -bob(bob@host)- psst\n", dated_context)
        assert event == Event(Notice("bob", "psst"), Time(T_1234, 0), None)

    def test_channel_notice(self, irssi, dated_context):
        [event] = decode_bytes(irssi, b"12:34 -bob:#chan- hear ye\n", dated_context)
        assert event.type == Notice("bob", "hear ye")
        assert event.channel == "#chan"

    def test_context_channel_applied(self, irssi, channel_context):
        [event] = decode_bytes(irssi, b"12:34 < alice> hi\n", channel_context)
        assert event.channel == "#chan"

    def test_empty_input(self, irssi):
        assert decode_bytes(irssi, b"") == []


class TestEncode:

    def test_msg(self, irssi):
        data = encode_events(irssi, [Event(Msg("alice", "hi  there"), Time(T_1234), None)])
        assert data == b"12:34 < alice> hi  there\n"

    def test_join(self, irssi):
        data = encode_events(irssi, [Event(Join("alice", "alice@host"), Time(T_1234), "#chan")])
        assert data == b"12:34 -!- alice [alice@host] has joined #chan\n"

    def test_rendered_in_context_timezone(self, irssi):
        event = Event(Msg("alice", "hi"), Time(T_1234), None)
        assert encode_events(irssi, [event], Context(timezone_offset=-7200)) == b"14:34 < alice> hi\n"

    def test_timestamp_out_of_range_is_conversion_error(self, irssi):
        with pytest.raises(TimeParseError):
            encode_events(irssi, [Event(Msg("alice", "hi"), Time(10 ** 15), None)])

    def test_quit_without_reason(self, irssi):
        data = encode_events(irssi, [Event(Quit("bob", "b@h"), Time(T_1234), None)])
        assert data == b"12:34 -!- bob [b@h] has quit []\n"

    def test_join_without_mask_fails(self, irssi):
        with pytest.raises(MissingRequiredFieldError) as info:
            encode_events(irssi, [Event(Join("alice"), Time(T_1234), "#chan")])
        assert info.value.variant == "Join"
        assert info.value.field == "mask"

    def test_join_without_channel_fails(self, irssi):
        with pytest.raises(MissingRequiredFieldError) as info:
            encode_events(irssi, [Event(Join("alice", "a@h"), Time(T_1234), None)])
        assert info.value.field == "channel"

    def test_failed_encode_writes_nothing(self, irssi):
        sink = io.BytesIO()
        with pytest.raises(MissingRequiredFieldError):
            irssi.encode(Context(), sink, Event(Part("alice"), Time(T_1234), "#chan"))
        assert sink.getvalue() == b""


class TestRoundTrip:

    def test_sample_reencodes_identically(self, irssi):
        events = decode_bytes(irssi, SAMPLE)
        assert not [item for item in events if not isinstance(item, Event)]
        # The "Log opened" banner only sets state, so it is not re-emitted.
        expected = SAMPLE.split(b"\n", 1)[1]
        assert encode_events(irssi, events) == expected

    def test_decode_encode_decode_is_stable(self, irssi):
        first = decode_bytes(irssi, SAMPLE)
        second = decode_bytes(irssi, b"--- Log opened Tue Jan 06 12:00:00 2015\n" + encode_events(irssi, first))
        assert second == first
