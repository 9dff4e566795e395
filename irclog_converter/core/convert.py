"""Conversion driver: stream events from one codec into another.

WHY: Both the CLI's ``convert`` command and library callers need the same
loop: pull each item from a decoder, stop on the first error item, and
hand each event to an encoder. Keeping it here means the stop policy and
the error report (which record, which error kind) live in one place.

HOW: convert() iterates the decode sequence, numbering items from 1.
Error items and encode failures are wrapped in ConvertFailed, which
carries the record number and the original ConversionError.

RULES:
- Records are numbered by decode item (skipped lines are not counted)
- The first error item or encode failure stops the conversion
- Output already written before the failure is left in the sink
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Callable, Optional

from irclog_converter.core.context import Context
from irclog_converter.core.errors import ConversionError
from irclog_converter.core.event import Event

logger = logging.getLogger(__name__)


class ConvertFailed(Exception):
    """Raised when a conversion stops on an unrecoverable record.

    RULES:
    - record: 1-based index of the failing decode item
    - error: the ConversionError that caused the stop
    - stage: "decode" or "encode"
    """

    def __init__(self, record: int, error: ConversionError, stage: str) -> None:
        self.record = record
        self.error = error
        self.stage = stage
        super().__init__(
            "record {}: {} failed with {}: {}".format(record, stage, type(error).__name__, error)
        )


def convert(
    decoder,
    encoder,
    context: Context,
    input: BinaryIO,
    output: BinaryIO,
    on_event: Optional[Callable[[Event], None]] = None,
) -> int:
    """Decode ``input`` with ``decoder`` and encode every event to ``output``.

    Args:
        decoder: A BaseFormat used to read ``input``.
        encoder: A BaseFormat used to write ``output``.
        context: Passed unchanged to every decode and encode call.
        input: Readable binary stream.
        output: Writable binary stream.
        on_event: Optional callback invoked after each event is encoded.

    Returns:
        Number of events handed to the encoder.

    Raises:
        ConvertFailed: On the first error item or encode failure.
    """
    count = 0
    for record, item in enumerate(decoder.decode(context, input), start=1):
        if isinstance(item, ConversionError):
            raise ConvertFailed(record, item, "decode")
        try:
            encoder.encode(context, output, item)
        except ConversionError as exc:
            raise ConvertFailed(record, exc, "encode") from exc
        count += 1
        if on_event is not None:
            on_event(item)

    logger.info("Converted %d events from %s to %s", count, decoder.name, encoder.name)
    return count
