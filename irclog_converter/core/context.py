"""Read-only decode/encode context: timezone, date override, channel override.

WHY: Several dialects only store part of what the canonical Event needs.
irssi and energymech record time of day without a date, energymech and
most quit/nick lines record no channel. The caller knows these facts
about a log file (it is "#rust on 2015-06-01, server time UTC+2") and
hands them to every decode and encode call through a Context.

HOW: Context is a frozen dataclass. build_context() turns the raw CLI
strings into one, parsing the ISO date.

RULES:
- timezone_offset: seconds WEST of UTC (``--tz 3600`` is UTC-1)
  and strictly less than one day in either direction
- override_date: wins over any date found in the log itself
- override_channel: used only when a line carries no channel
- Context is never mutated by codecs; per-stream state lives in the decoder
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from irclog_converter.core.event import MAX_OFFSET


@dataclass(frozen=True)
class Context:
    """Configuration passed unchanged to every decode and encode call."""

    timezone_offset: int = 0
    override_date: Optional[date] = None
    override_channel: Optional[str] = None

    def resolve_channel(self, channel: Optional[str] = None) -> Optional[str]:
        """Return the line's own channel, or the override when it has none."""
        if channel:
            return channel
        return self.override_channel


def parse_date(text: str) -> date:
    """Parse an ISO 8601 calendar date (``YYYY-MM-DD``).

    Raises:
        ValueError: If ``text`` is not a valid calendar date.
    """
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        raise ValueError("Invalid date {!r}, expected YYYY-MM-DD".format(text))


def build_context(
    date_text: Optional[str] = None,
    timezone_offset: int = 0,
    channel: Optional[str] = None,
) -> Context:
    """Assemble a Context from command-line style values.

    Args:
        date_text: ISO date string, or None for no override.
        timezone_offset: Seconds west of UTC.
        channel: Channel name, or None/empty for no override.

    Returns:
        A frozen Context.

    Raises:
        ValueError: On an invalid date, or a timezone offset of a day or more.
    """
    if not -MAX_OFFSET <= timezone_offset <= MAX_OFFSET:
        raise ValueError(
            "Invalid timezone offset {}, expected seconds between -{} and {}".format(
                timezone_offset, MAX_OFFSET, MAX_OFFSET,
            )
        )
    override_date = parse_date(date_text) if date_text else None
    return Context(
        timezone_offset=timezone_offset,
        override_date=override_date,
        override_channel=channel or None,
    )
