"""Packed binary dialect: a lossless 1:1 framing of the canonical events.

WHY: Converting through a text dialect always loses something (seconds,
hostmasks, channels). The binary dialect stores every Event field so
logs can be cached, concatenated and converted again later without loss.

HOW: Each event is one length-prefixed frame built with ``struct``:

    frame   := u32 payload_length | payload
    payload := u8 tag | i64 timestamp | i32 offset | opt channel | fields
    str     := u32 byte_length | UTF-8 bytes
    opt     := u8 0                   (None)
             | u8 1 | str             (present)

Fields follow the variant's declaration order in core/event.py; Optional
fields are ``opt``, the rest are ``str``. All integers are big-endian.

RULES:
- Versionless: the tag table below is the wire contract
- Every variant is representable, so encode() never skips an event
- Fail-hard: a truncated frame, an unknown tag, trailing payload bytes or
  invalid UTF-8 yields one BinaryDecodeError and ends the sequence,
  since frame boundaries can no longer be trusted
- An empty stream decodes to an empty sequence
"""

from __future__ import annotations

import dataclasses
import logging
import struct
from typing import BinaryIO, Iterator, List, Optional, Tuple

from irclog_converter.core.context import Context
from irclog_converter.core.errors import BinaryDecodeError, BinaryEncodeError
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

_LENGTH = struct.Struct(">I")
_HEADER = struct.Struct(">BqiB")  # tag, timestamp, offset, channel flag
_FLAG = struct.Struct(">B")

# Wire tags. Never renumber.
TAGS = {
    Msg: 0,
    Action: 1,
    Join: 2,
    Part: 3,
    Quit: 4,
    Nick: 5,
    Notice: 6,
    Disconnect: 7,
}
_VARIANTS = {tag: cls for cls, tag in TAGS.items()}

_MAX_U32 = 0xFFFFFFFF

# Fields encoded as `opt`; every other field is a plain `str`.
_OPTIONAL_FIELDS = frozenset({"mask", "reason"})


def _pack_str(value: str) -> bytes:
    data = value.encode("utf-8")
    if len(data) > _MAX_U32:
        raise BinaryEncodeError("string of {} bytes does not fit a frame".format(len(data)))
    return _LENGTH.pack(len(data)) + data


def _pack_opt(value: Optional[str]) -> bytes:
    if value is None:
        return _FLAG.pack(0)
    return _FLAG.pack(1) + _pack_str(value)


def pack_event(event: Event) -> bytes:
    """Serialize one Event into a complete length-prefixed frame.

    Raises:
        BinaryEncodeError: If a value does not fit the frame layout.
    """
    variant = type(event.type)
    try:
        header = _HEADER.pack(
            TAGS[variant],
            event.time.timestamp,
            event.time.offset,
            0 if event.channel is None else 1,
        )
    except (KeyError, struct.error) as exc:
        raise BinaryEncodeError("cannot pack {} event: {}".format(variant.__name__, exc)) from exc

    parts: List[bytes] = [header]
    if event.channel is not None:
        parts.append(_pack_str(event.channel))
    for field in dataclasses.fields(event.type):
        value = getattr(event.type, field.name)
        if field.name in _OPTIONAL_FIELDS:
            parts.append(_pack_opt(value))
        elif isinstance(value, str):
            parts.append(_pack_str(value))
        else:
            raise BinaryEncodeError(
                "{}.{} must be a string, got {!r}".format(variant.__name__, field.name, value)
            )

    payload = b"".join(parts)
    if len(payload) > _MAX_U32:
        raise BinaryEncodeError("frame of {} bytes is too large".format(len(payload)))
    return _LENGTH.pack(len(payload)) + payload


class _Reader:
    """Cursor over one frame payload."""

    def __init__(self, payload: bytes) -> None:
        self.payload = payload
        self.pos = 0

    def take(self, size: int) -> bytes:
        end = self.pos + size
        if end > len(self.payload):
            raise BinaryDecodeError(
                "frame ends after {} bytes, needed {}".format(len(self.payload), end)
            )
        chunk = self.payload[self.pos:end]
        self.pos = end
        return chunk

    def unpack(self, layout: struct.Struct) -> Tuple:
        return layout.unpack(self.take(layout.size))

    def string(self) -> str:
        (size,) = self.unpack(_LENGTH)
        raw = self.take(size)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BinaryDecodeError("invalid UTF-8 in frame: {}".format(exc)) from exc

    def optional(self) -> Optional[str]:
        (flag,) = self.unpack(_FLAG)
        if flag == 0:
            return None
        if flag == 1:
            return self.string()
        raise BinaryDecodeError("invalid optional flag {}".format(flag))


def unpack_event(payload: bytes) -> Event:
    """Deserialize one frame payload (without its length prefix).

    Raises:
        BinaryDecodeError: On any framing or content mismatch.
    """
    reader = _Reader(payload)
    tag, timestamp, offset, channel_flag = reader.unpack(_HEADER)
    variant = _VARIANTS.get(tag)
    if variant is None:
        raise BinaryDecodeError("unknown event tag {}".format(tag))

    if channel_flag == 0:
        channel = None
    elif channel_flag == 1:
        channel = reader.string()
    else:
        raise BinaryDecodeError("invalid channel flag {}".format(channel_flag))

    values = {}
    for field in dataclasses.fields(variant):
        values[field.name] = reader.optional() if field.name in _OPTIONAL_FIELDS else reader.string()

    if reader.pos != len(payload):
        raise BinaryDecodeError(
            "{} trailing bytes in {} frame".format(len(payload) - reader.pos, variant.__name__)
        )
    return Event(type=variant(**values), time=Time(timestamp=timestamp, offset=offset), channel=channel)


class BinaryFormat(BaseFormat):
    """Codec for the packed binary dialect."""

    @property
    def name(self) -> str:
        return "binary"

    def decode(self, context: Context, input: BinaryIO) -> Iterator[DecodeItem]:
        while True:
            try:
                prefix = input.read(_LENGTH.size)
                if not prefix:
                    return
                if len(prefix) < _LENGTH.size:
                    yield BinaryDecodeError("truncated frame length ({} bytes)".format(len(prefix)))
                    return
                (size,) = _LENGTH.unpack(prefix)
                payload = input.read(size)
            except OSError as exc:
                logger.warning("Read failed, ending binary decode: %s", exc)
                return

            if len(payload) < size:
                yield BinaryDecodeError(
                    "truncated frame: expected {} bytes, got {}".format(size, len(payload))
                )
                return
            try:
                event = unpack_event(payload)
            except BinaryDecodeError as exc:
                yield exc
                return
            yield event

    def encode(self, context: Context, output: BinaryIO, event: Event) -> None:
        write_bytes(output, pack_event(event))
