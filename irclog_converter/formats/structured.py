"""Structured dialect: schema-checked msgpack maps, one per event.

WHY: The packed binary dialect is compact but opaque. External tools
(log indexers, notebooks, other languages) can read msgpack maps with
any off-the-shelf library, so this dialect is the interchange form of
the canonical events.

HOW: Each Event becomes one map::

    {"type": "join",
     "time": {"timestamp": 1420547640, "offset": 0},
     "channel": "#chan",
     "nick": "alice", "mask": "alice@host"}

Input is read in fixed-size chunks and fed to a msgpack.Unpacker. The
codec counts the bytes it read and the bytes the unpacker consumed, so
leftover bytes at end of stream mean a truncated record, also on
non-seekable input such as stdin. Every decoded map is
validated against a per-variant JSON Schema (Draft 7) with jsonschema
before an Event is built. Encoding validates the same schema before
packing, so the two directions accept exactly the same records.

RULES:
- All keys of a variant are required; Optional fields may be nil
- No coercion: "integer" means a real int (not 1.0, not True) and
  "string" means str (not bin); extra keys are rejected
- Fail-soft for schema mismatches: the record was fully framed, so one
  StructuredDecodeError is yielded and decoding continues
- Fail-hard for corrupt msgpack (or a truncated final record): one
  StructuredDecodeError is yielded and the sequence ends
- An empty stream decodes to an empty sequence
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Dict, Iterator, Optional

import jsonschema
import msgpack
from jsonschema import validators
from jsonschema.exceptions import best_match

from irclog_converter.core.context import Context
from irclog_converter.core.errors import StructuredDecodeError, StructuredEncodeError
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
from irclog_converter.formats.base import BaseFormat, DecodeItem, write_bytes

logger = logging.getLogger(__name__)

_READ_SIZE = 16 * 1024

# type name -> (variant class, {record key: (attribute, optional)})
VARIANTS = {
    "msg": (Msg, {"from": ("from_", False), "content": ("content", False)}),
    "action": (Action, {"from": ("from_", False), "content": ("content", False)}),
    "join": (Join, {"nick": ("nick", False), "mask": ("mask", True)}),
    "part": (Part, {"nick": ("nick", False), "mask": ("mask", True), "reason": ("reason", True)}),
    "quit": (Quit, {"nick": ("nick", False), "mask": ("mask", True), "reason": ("reason", True)}),
    "nick": (Nick, {"old_nick": ("old_nick", False), "new_nick": ("new_nick", False)}),
    "notice": (Notice, {"from": ("from_", False), "content": ("content", False)}),
    "disconnect": (Disconnect, {}),
}
_TYPE_NAMES = {cls: name for name, (cls, _) in VARIANTS.items()}

_STRING = {"type": "string"}
_NULLABLE_STRING = {"type": ["string", "null"]}
_TIME_SCHEMA = {
    "type": "object",
    "properties": {
        "timestamp": {"type": "integer"},
        "offset": {"type": "integer"},
    },
    "required": ["timestamp", "offset"],
    "additionalProperties": False,
}

ENVELOPE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {"type": {"enum": sorted(VARIANTS)}},
    "required": ["type"],
}


def _is_strict_integer(checker: Any, instance: Any) -> bool:
    return isinstance(instance, int) and not isinstance(instance, bool)


StrictValidator = validators.extend(
    jsonschema.Draft7Validator,
    type_checker=jsonschema.Draft7Validator.TYPE_CHECKER.redefine("integer", _is_strict_integer),
)


def variant_schema(type_name: str) -> Dict[str, Any]:
    """Build the JSON Schema for one event variant's record."""
    _, fields = VARIANTS[type_name]
    properties: Dict[str, Any] = {
        "type": {"const": type_name},
        "time": _TIME_SCHEMA,
        "channel": _NULLABLE_STRING,
    }
    for key, (_, optional) in fields.items():
        properties[key] = _NULLABLE_STRING if optional else _STRING
    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


_ENVELOPE_VALIDATOR = StrictValidator(ENVELOPE_SCHEMA)
_VALIDATORS = {name: StrictValidator(variant_schema(name)) for name in VARIANTS}


def _check(record: Any) -> Optional[str]:
    """Return a schema violation message for ``record``, or None if valid."""
    error = best_match(_ENVELOPE_VALIDATOR.iter_errors(record))
    if error is not None:
        return error.message
    error = best_match(_VALIDATORS[record["type"]].iter_errors(record))
    if error is not None:
        path = "/".join(str(part) for part in error.absolute_path)
        return "{}: {}".format(path, error.message) if path else error.message
    return None


def event_to_record(event: Event) -> Dict[str, Any]:
    """Convert an Event into its schema-valid msgpack map.

    Raises:
        StructuredEncodeError: If the event's fields violate the schema.
    """
    type_name = _TYPE_NAMES.get(type(event.type))
    if type_name is None:
        raise StructuredEncodeError("unknown event type {!r}".format(event.type))
    record: Dict[str, Any] = {
        "type": type_name,
        "time": {"timestamp": event.time.timestamp, "offset": event.time.offset},
        "channel": event.channel,
    }
    for key, (attribute, _) in VARIANTS[type_name][1].items():
        record[key] = getattr(event.type, attribute)

    problem = _check(record)
    if problem is not None:
        raise StructuredEncodeError("{} event does not fit the schema: {}".format(type_name, problem))
    return record


def record_to_event(record: Any) -> Event:
    """Validate a decoded msgpack object and build the Event.

    Raises:
        StructuredDecodeError: If the object does not match the schema.
    """
    problem = _check(record)
    if problem is not None:
        raise StructuredDecodeError("record does not match the event schema: {}".format(problem))

    variant, fields = VARIANTS[record["type"]]
    values = {attribute: record[key] for key, (attribute, _) in fields.items()}
    time = record["time"]
    return Event(
        type=variant(**values),
        time=Time(timestamp=time["timestamp"], offset=time["offset"]),
        channel=record["channel"],
    )


class StructuredFormat(BaseFormat):
    """Codec for the msgpack interchange dialect."""

    @property
    def name(self) -> str:
        return "structured"

    def decode(self, context: Context, input: BinaryIO) -> Iterator[DecodeItem]:
        unpacker = msgpack.Unpacker(raw=False)
        received = 0
        consumed = 0
        while True:
            try:
                chunk = input.read(_READ_SIZE)
            except OSError as exc:
                logger.warning("Read failed, ending structured decode: %s", exc)
                return
            if not chunk:
                if consumed < received:
                    yield StructuredDecodeError(
                        "truncated msgpack record at byte {} of {}".format(consumed, received)
                    )
                return
            received += len(chunk)
            unpacker.feed(chunk)

            while True:
                try:
                    record = unpacker.unpack()
                except msgpack.OutOfData:
                    break
                except (msgpack.UnpackException, ValueError) as exc:
                    yield StructuredDecodeError("corrupt msgpack data: {}".format(exc))
                    return
                consumed = unpacker.tell()

                try:
                    event = record_to_event(record)
                except StructuredDecodeError as exc:
                    logger.debug("Rejected record %r: %s", record, exc)
                    yield exc
                    continue
                yield event

    def encode(self, context: Context, output: BinaryIO, event: Event) -> None:
        record = event_to_record(event)
        try:
            data = msgpack.packb(record, use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as exc:
            raise StructuredEncodeError("cannot pack {} event: {}".format(record["type"], exc)) from exc
        write_bytes(output, data)
