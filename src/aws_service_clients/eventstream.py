#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
"""Decoding for the application/vnd.amazon.eventstream format.

Each message is framed as::

    [total length: u32][headers length: u32][prelude crc: u32]
    [headers][payload][message crc: u32]

Both checksums are CRC32; the message checksum covers everything before it.
"""

import datetime
import logging
import struct
import uuid
from binascii import crc32
from collections.abc import AsyncIterator, Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Self

import ijson  # type: ignore

from .exceptions import (
    ChecksumMismatch,
    EventStreamException,
    InvalidEventBytes,
    InvalidHeadersLength,
    InvalidHeaderValueLength,
    InvalidPayloadLength,
)
from .http import HTTPResponse
from .protocols import decode_json

_LOGGER = logging.getLogger(__name__)

MAX_HEADERS_LENGTH = 128 * 1024
MAX_HEADER_VALUE_BYTE_LENGTH = 32 * 1024 - 1
MAX_PAYLOAD_LENGTH = 16 * 1024**2

_PRELUDE_LENGTH = 12
# Prelude plus the trailing message crc.
_MESSAGE_METADATA_SIZE = 16

type HeaderValue = bool | int | bytes | str | datetime.datetime | uuid.UUID


@dataclass(kw_only=True, frozen=True)
class EventMessage:
    """A single decoded event stream message.

    AWS messages declare their meaning in the ``:message-type`` header, which is
    one of ``event``, ``exception`` or ``error``.
    """

    headers: Mapping[str, HeaderValue] = field(default_factory=dict[str, HeaderValue])
    payload: bytes = b""

    @property
    def message_type(self) -> str | None:
        return self._str_header(":message-type")

    @property
    def event_type(self) -> str | None:
        return self._str_header(":event-type")

    def _str_header(self, name: str) -> str | None:
        value = self.headers.get(name)
        return value if isinstance(value, str) else None


def _fixed(fmt: str) -> Callable[[memoryview, int], tuple[HeaderValue, int]]:
    size = struct.calcsize(fmt)

    def _unpack(data: memoryview, offset: int) -> tuple[HeaderValue, int]:
        return struct.unpack_from(fmt, data, offset)[0], offset + size

    return _unpack


def _byte_array(data: memoryview, offset: int) -> tuple[HeaderValue, int]:
    (length,) = struct.unpack_from("!H", data, offset)
    if length > MAX_HEADER_VALUE_BYTE_LENGTH:
        raise InvalidHeaderValueLength(length, MAX_HEADER_VALUE_BYTE_LENGTH)
    start = offset + 2
    if start + length > len(data):
        raise InvalidEventBytes()
    return bytes(data[start : start + length]), start + length


def _string(data: memoryview, offset: int) -> tuple[HeaderValue, int]:
    value, end = _byte_array(data, offset)
    return bytes(value).decode("utf-8"), end  # type: ignore


def _timestamp(data: memoryview, offset: int) -> tuple[HeaderValue, int]:
    (millis,) = struct.unpack_from("!q", data, offset)
    return (
        datetime.datetime.fromtimestamp(millis / 1000, tz=datetime.UTC),
        offset + 8,
    )


def _uuid(data: memoryview, offset: int) -> tuple[HeaderValue, int]:
    if offset + 16 > len(data):
        raise InvalidEventBytes()
    return uuid.UUID(bytes=bytes(data[offset : offset + 16])), offset + 16


_HEADER_VALUE_DECODERS: Mapping[
    int, Callable[[memoryview, int], tuple[HeaderValue, int]]
] = MappingProxyType(
    {
        0: lambda _, offset: (True, offset),
        1: lambda _, offset: (False, offset),
        2: _fixed("!b"),
        3: _fixed("!h"),
        4: _fixed("!i"),
        5: _fixed("!q"),
        6: _byte_array,
        7: _string,
        8: _timestamp,
        9: _uuid,
    }
)


def decode_headers(data: bytes | memoryview) -> dict[str, HeaderValue]:
    view = memoryview(data)
    if len(view) > MAX_HEADERS_LENGTH:
        raise InvalidHeadersLength(len(view), MAX_HEADERS_LENGTH)

    headers: dict[str, HeaderValue] = {}
    offset = 0
    try:
        while offset < len(view):
            name_length = view[offset]
            offset += 1
            name = bytes(view[offset : offset + name_length]).decode("utf-8")
            offset += name_length
            value_type = view[offset]
            offset += 1
            decoder = _HEADER_VALUE_DECODERS.get(value_type)
            if decoder is None:
                raise InvalidEventBytes()
            headers[name], offset = decoder(view, offset)
    except (IndexError, struct.error, UnicodeDecodeError) as e:
        raise InvalidEventBytes() from e
    return headers


def _validate_checksum(data: bytes, checksum: int, crc: int = 0) -> None:
    # crc32(...) & 0xFFFFFFFF keeps the value identical across platforms.
    computed = crc32(data, crc) & 0xFFFFFFFF
    if checksum != computed:
        raise ChecksumMismatch(checksum, computed)


class EventStreamDecoder:
    """Incrementally splits a byte stream into :py:class:`EventMessage` values.

    Bytes may arrive in chunks of any size; messages are emitted once complete.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, data: bytes) -> list[EventMessage]:
        self._buffer.extend(data)
        messages: list[EventMessage] = []
        while (message := self._next_message()) is not None:
            messages.append(message)
        return messages

    @property
    def has_partial_message(self) -> bool:
        return bool(self._buffer)

    def _next_message(self) -> EventMessage | None:
        if len(self._buffer) < _PRELUDE_LENGTH:
            return None

        total_length, headers_length, prelude_crc = struct.unpack_from(
            "!III", self._buffer
        )
        _validate_checksum(bytes(self._buffer[:8]), prelude_crc)

        if headers_length > MAX_HEADERS_LENGTH:
            raise InvalidHeadersLength(headers_length, MAX_HEADERS_LENGTH)
        payload_length = total_length - headers_length - _MESSAGE_METADATA_SIZE
        if payload_length < 0:
            raise InvalidEventBytes()
        if payload_length > MAX_PAYLOAD_LENGTH:
            raise InvalidPayloadLength(payload_length, MAX_PAYLOAD_LENGTH)

        if len(self._buffer) < total_length:
            return None

        frame = bytes(self._buffer[:total_length])
        del self._buffer[:total_length]

        (message_crc,) = struct.unpack_from("!I", frame, total_length - 4)
        _validate_checksum(frame[: total_length - 4], message_crc)

        headers_end = _PRELUDE_LENGTH + headers_length
        return EventMessage(
            headers=decode_headers(frame[_PRELUDE_LENGTH:headers_end]),
            payload=frame[headers_end : total_length - 4],
        )


class EventStream:
    """An async iterator over the events of a streaming response.

    Each item is a single-key dict naming the event, e.g.
    ``{"SubscribeToShardEvent": {"Records": [...], ...}}``. The optional
    ``initial-response`` message is exposed as :py:attr:`initial_response` rather
    than yielded.

    :raises EventStreamException: When the service sends an exception or error
        message. The stream is closed afterwards.
    """

    def __init__(self, response: HTTPResponse) -> None:
        self._response = response
        self._decoder = EventStreamDecoder()
        self._pending: list[EventMessage] = []
        self._chunks: AsyncIterator[bytes] = aiter(response.body)
        self._closed = False
        self.initial_response: dict[str, Any] | None = None

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> dict[str, Any]:
        while True:
            message = await self._next_message()
            if message is None:
                await self.close()
                raise StopAsyncIteration

            match message.message_type:
                case "event":
                    if message.event_type == "initial-response":
                        self.initial_response = await self._payload(message)
                        continue
                    return {message.event_type or "": await self._payload(message)}
                case "exception":
                    await self.close()
                    payload = await self._payload(message)
                    raise EventStreamException(
                        str(message.headers.get(":exception-type", "Unknown")),
                        str(payload.get("message", payload.get("Message", ""))),
                    )
                case "error":
                    await self.close()
                    raise EventStreamException(
                        str(message.headers.get(":error-code", "Unknown")),
                        str(message.headers.get(":error-message", "")),
                    )
                case other:
                    _LOGGER.debug("Skipping event stream message of type %s", other)

    async def _next_message(self) -> EventMessage | None:
        while not self._pending:
            if self._closed:
                return None
            try:
                chunk = await anext(self._chunks)
            except StopAsyncIteration:
                if self._decoder.has_partial_message:
                    raise InvalidEventBytes() from None
                return None
            self._pending.extend(self._decoder.feed(chunk))
        return self._pending.pop(0)

    async def _payload(self, message: EventMessage) -> dict[str, Any]:
        if not message.payload:
            return {}
        try:
            document = decode_json(message.payload)
        except ijson.JSONError as e:  # type: ignore
            await self.close()
            raise InvalidEventBytes() from e
        return document if isinstance(document, dict) else {"Payload": document}  # type: ignore

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            await self._response.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
