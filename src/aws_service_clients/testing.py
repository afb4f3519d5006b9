#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
"""Test doubles for exercising clients without a network."""

import struct
from binascii import crc32
from collections import deque
from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from aws_sdk_signers import Field, Fields

from .auth import Signer
from .endpoints import Endpoint, parse_url
from .exceptions import EndpointResolutionError
from .http import HTTPRequest, HTTPRequestConfiguration, HTTPResponse
from .operations import EndpointParams, HTTPMethod, OperationDescriptor, Request
from .outcome import Outcome

if TYPE_CHECKING:
    from .config import ClientConfig


class MockHTTPClientError(Exception):
    """Exception raised by MockHTTPClient for test setup issues."""


@dataclass(frozen=True)
class _QueuedResponse:
    status: int
    headers: Sequence[tuple[str, str]]
    chunks: Sequence[bytes]


async def _chunks(chunks: Sequence[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


class MockHTTPClient:
    """An :py:class:`.http.HTTPClient` that serves queued responses.

    Responses and errors are returned in FIFO order and requests are captured for
    inspection.
    """

    def __init__(self) -> None:
        self._queue: deque[_QueuedResponse | Exception] = deque()
        self._captured_requests: list[HTTPRequest] = []
        self._captured_configs: list[HTTPRequestConfiguration | None] = []
        self.closed = False

    def add_response(
        self,
        status: int = 200,
        headers: list[tuple[str, str]] | None = None,
        body: bytes | Sequence[bytes] = b"",
    ) -> None:
        """Queue a response for the next request.

        :param status: HTTP status code.
        :param headers: HTTP response headers as list of (name, value) tuples.
        :param body: Response body as bytes, or as the chunks it should arrive in.
        """
        chunks = [body] if isinstance(body, bytes) else list(body)
        self._queue.append(_QueuedResponse(status, headers or [], chunks))

    def add_error(self, error: Exception) -> None:
        """Queue an exception to raise from the next send."""
        self._queue.append(error)

    async def send(
        self,
        request: HTTPRequest,
        *,
        request_config: HTTPRequestConfiguration | None = None,
    ) -> HTTPResponse:
        """Capture the request and return the next queued response.

        :raises MockHTTPClientError: If no responses are queued.
        """
        self._captured_requests.append(request)
        self._captured_configs.append(request_config)

        if not self._queue:
            raise MockHTTPClientError(
                "No responses queued in MockHTTPClient. Use add_response() to queue "
                "responses."
            )
        queued = self._queue.popleft()
        if isinstance(queued, Exception):
            raise queued

        fields = Fields()
        for name, value in queued.headers:
            if name in fields:
                fields[name].add(value)
            else:
                fields.set_field(Field(name=name, values=[value]))
        return HTTPResponse(
            status=queued.status, fields=fields, body=_chunks(queued.chunks)
        )

    async def close(self) -> None:
        self.closed = True

    @property
    def call_count(self) -> int:
        """The number of requests made to this client."""
        return len(self._captured_requests)

    @property
    def captured_requests(self) -> list[HTTPRequest]:
        """The list of all requests captured by this client."""
        return self._captured_requests.copy()

    @property
    def captured_configs(self) -> list[HTTPRequestConfiguration | None]:
        return self._captured_configs.copy()


class RecordingEndpointProvider:
    """An endpoint provider that records resolutions.

    Returns a fixed endpoint, or raises :py:class:`EndpointResolutionError` with
    ``error`` as its message when it's set.
    """

    def __init__(
        self,
        url: str = "https://example.com",
        *,
        signing_region: str | None = "us-west-2",
        error: str | None = None,
    ) -> None:
        self.endpoint = Endpoint(uri=parse_url(url), signing_region=signing_region)
        self.error = error
        self.calls: list[EndpointParams] = []

    async def resolve_endpoint(self, params: EndpointParams) -> Endpoint:
        self.calls.append(params)
        if self.error is not None:
            raise EndpointResolutionError(self.error)
        return self.endpoint

    def init_builtin_parameters(self, config: "ClientConfig") -> None:
        pass

    def override_endpoint(self, url: str) -> None:
        self.endpoint = Endpoint(uri=parse_url(url))


class RecordingTransport:
    """A :py:class:`.transport.Transport` that records requests and returns a fixed
    outcome."""

    def __init__(self, outcome: Outcome[Any] | None = None) -> None:
        self.outcome: Outcome[Any] = outcome or Outcome.success({})
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    async def make_request(
        self,
        *,
        operation: OperationDescriptor,
        request: Request | None,
        endpoint: Endpoint,
        method: HTTPMethod,
        signer: Signer,
    ) -> Outcome[Any]:
        self.calls.append(
            {
                "operation": operation,
                "request": request,
                "endpoint": endpoint,
                "method": method,
                "signer": signer,
            }
        )
        return self.outcome

    async def close(self) -> None:
        self.closed = True


type HeaderInput = bool | int | bytes | str


def _encode_header(name: str, value: HeaderInput) -> bytes:
    encoded_name = name.encode("utf-8")
    prefix = struct.pack("!B", len(encoded_name)) + encoded_name
    match value:
        case bool():
            return prefix + struct.pack("!B", 0 if value else 1)
        case int():
            return prefix + struct.pack("!Bi", 4, value)
        case bytes():
            return prefix + struct.pack("!BH", 6, len(value)) + value
        case str():
            raw = value.encode("utf-8")
            return prefix + struct.pack("!BH", 7, len(raw)) + raw


def encode_event_message(headers: Mapping[str, HeaderInput], payload: bytes = b"") -> bytes:
    """Frame a message in the application/vnd.amazon.eventstream format."""
    encoded_headers = b"".join(_encode_header(k, v) for k, v in headers.items())
    total_length = 16 + len(encoded_headers) + len(payload)
    prelude = struct.pack("!II", total_length, len(encoded_headers))
    prelude += struct.pack("!I", crc32(prelude) & 0xFFFFFFFF)
    message = prelude + encoded_headers + payload
    return message + struct.pack("!I", crc32(message) & 0xFFFFFFFF)
