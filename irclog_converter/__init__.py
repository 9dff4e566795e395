"""IRC log converter: translate chat logs between client dialects.

WHY: Every IRC client and bot writes logs in its own format (irssi,
WeeChat, EnergyMech, ...). Moving an archive between tools, or running
statistics over mixed archives, needs one program that reads and writes
all of them.

HOW: Each dialect codec decodes a byte stream into canonical Event
dataclasses and encodes Events back into bytes. The conversion driver
pipes one codec's decode sequence into another codec's encoder.

RULES:
- All codecs consume and produce the same Event model (core/event.py)
- Adding a dialect = one new codec module plus one registry line
- Decoding is lazy and streams one record at a time
"""

__version__ = "0.1.0"
