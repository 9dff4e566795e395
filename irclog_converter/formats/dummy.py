"""No-op dialect: decodes nothing, encodes nothing.

WHY: A baseline codec for exercising the Decode/Encode contract in
isolation, and a sink for dry runs (``convert irssi dummy`` reports parse
errors without writing any output).

RULES:
- decode() always returns an empty iterator
- encode() never writes to the sink
"""

from __future__ import annotations

from typing import BinaryIO, Iterator

from irclog_converter.core.context import Context
from irclog_converter.core.event import Event
from irclog_converter.formats.base import BaseFormat, DecodeItem


class DummyFormat(BaseFormat):
    """Codec that ignores its input and output."""

    @property
    def name(self) -> str:
        return "dummy"

    def decode(self, context: Context, input: BinaryIO) -> Iterator[DecodeItem]:
        return iter(())

    def encode(self, context: Context, output: BinaryIO, event: Event) -> None:
        return None
