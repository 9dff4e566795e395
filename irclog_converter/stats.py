"""Per-nick line and word statistics over a decoded log.

WHY: The most common question asked of an IRC log is "who talks the
most?". Answering it only needs the decode side of any dialect, which
makes it a good second consumer of the Decode contract.

HOW: collect_stats() walks a decode sequence and counts, for every Msg
event, one line and the number of whitespace-separated words for the
sender. top_speakers() sorts by words, most first.

RULES:
- Only Msg events count (actions, notices and joins are ignored)
- Error items are raised (the first one stops collection)
- Ties in word count keep first-seen order
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from irclog_converter.core.event import Msg
from irclog_converter.formats.base import DecodeItem, iter_events


@dataclass
class SpeakerStats:
    """Line and word counts for one nick."""

    lines: int = 0
    words: int = 0


def count_words(text: str) -> int:
    return len(text.split())


def collect_stats(items: Iterable[DecodeItem]) -> Dict[str, SpeakerStats]:
    """Aggregate Msg lines and words per sender.

    Raises:
        ConversionError: The first error item in ``items``.
    """
    stats: Dict[str, SpeakerStats] = {}
    for event in iter_events(items):
        if not isinstance(event.type, Msg):
            continue
        person = stats.setdefault(event.type.from_, SpeakerStats())
        person.lines += 1
        person.words += count_words(event.type.content)
    return stats


def top_speakers(stats: Dict[str, SpeakerStats], limit: int = 10) -> List[Tuple[str, SpeakerStats]]:
    """Return the ``limit`` nicks with the most words."""
    ranked = sorted(stats.items(), key=lambda item: item[1].words, reverse=True)
    return ranked[:limit]


def format_stats(ranked: List[Tuple[str, SpeakerStats]]) -> str:
    """Render ranked stats as the ``freq`` command prints them."""
    blocks = [
        "{}:\n\tLines: {}\n\tWords: {}".format(name, person.lines, person.words)
        for name, person in ranked
    ]
    return "\n".join(blocks)
