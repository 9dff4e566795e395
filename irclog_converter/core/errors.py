"""Exception hierarchy shared by every dialect codec.

WHY: Callers (the conversion driver, the statistics aggregator, tests)
need to tell a malformed record apart from a broken stream or from an
event that the target dialect cannot render faithfully. One typed
exception per failure kind makes that a plain isinstance check.

HOW: Everything derives from ConversionError. Decoders never raise these
from the iterator; they yield the exception instance as an item so the
sequence can continue. Encoders raise them directly.

RULES:
- ParseError: a record matched a shape but a field could not be read, or
  a field cannot be written as a single text line
- TimeParseError: a timestamp did not match the dialect's time pattern
- BinaryDecodeError / BinaryEncodeError: packed framing problems
- StructuredDecodeError / StructuredEncodeError: msgpack schema problems
- StreamIOError: the underlying stream failed (original OSError in __cause__)
- MissingRequiredFieldError: the encoder needs a field the event lacks
"""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for all decode and encode failures."""


class ParseError(ConversionError):
    """Raised when a recognized record has a field that cannot be parsed."""


class TimeParseError(ParseError):
    """Raised when a timestamp string does not match the expected pattern.

    WHY: Time-of-day-only dialects also fail here when no date is known
    (no override and no log-open banner seen yet).
    """


class BinaryDecodeError(ConversionError):
    """Raised on truncated frames, unknown tags, or length mismatches."""


class BinaryEncodeError(ConversionError):
    """Raised when an event field does not fit the packed frame layout."""


class StructuredDecodeError(ConversionError):
    """Raised when a msgpack record is corrupt or violates the event schema."""


class StructuredEncodeError(ConversionError):
    """Raised when an event cannot be packed into a msgpack map."""


class StreamIOError(ConversionError):
    """Raised when writing to the output sink fails.

    RULES:
    - Always raised ``from`` the original OSError
    """


class MissingRequiredFieldError(ConversionError):
    """Raised when a dialect must render a field the event does not carry.

    WHY: Emitting a placeholder hostmask or channel would fabricate log
    content. Failing loudly is the only honest option.

    HOW: Carries the variant name and field name so the driver can report
    exactly what was missing.

    RULES:
    - Nothing is written to the sink before this is raised
    """

    def __init__(self, variant: str, field: str) -> None:
        self.variant = variant
        self.field = field
        super().__init__(
            "{} event has no {}, but the target format requires one".format(variant, field)
        )
