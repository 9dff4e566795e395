"""Log dialect registry.

WHY: The CLI, the conversion driver and the statistics command need a
single lookup to find a codec by name. A central dict makes adding a
dialect trivial: write the codec class, import it here, add one line.

HOW: FORMATS maps string keys to codec *classes* (not instances).
get_format() instantiates one and turns unknown names into a clear
UnknownFormatError.

RULES:
- Keys are lowercase identifiers (used as CLI arguments)
- "msgpack" is an alias of "structured"
- Every codec listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from irclog_converter.formats.binary import BinaryFormat
from irclog_converter.formats.dummy import DummyFormat
from irclog_converter.formats.energymech import EnergymechFormat
from irclog_converter.formats.irssi import IrssiFormat
from irclog_converter.formats.structured import StructuredFormat
from irclog_converter.formats.weechat import WeechatFormat

if TYPE_CHECKING:
    from irclog_converter.formats.base import BaseFormat

FORMATS: dict[str, type[BaseFormat]] = {
    "irssi": IrssiFormat,
    "weechat": WeechatFormat,
    "energymech": EnergymechFormat,
    "binary": BinaryFormat,
    "structured": StructuredFormat,
    "msgpack": StructuredFormat,
    "dummy": DummyFormat,
}


class UnknownFormatError(KeyError):
    """Raised when a dialect name is not in FORMATS."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return "Unknown format '{}'. Available formats: {}".format(
            self.name, ", ".join(sorted(FORMATS))
        )


def get_format(name: str) -> BaseFormat:
    """Instantiate the codec registered under ``name``.

    Raises:
        UnknownFormatError: If no codec is registered under ``name``.
    """
    try:
        codec = FORMATS[name.lower()]
    except KeyError:
        raise UnknownFormatError(name) from None
    return codec()
