#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import logging
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from itertools import chain
from typing import Protocol, runtime_checkable
from urllib.parse import parse_qsl, urlunparse

import aiohttp
from aws_sdk_signers import URI, Field, Fields

from .exceptions import TransportError

_LOGGER = logging.getLogger(__name__)


async def _empty_body() -> AsyncIterator[bytes]:
    return
    yield


@dataclass(kw_only=True)
class HTTPRequest:
    """An HTTP request ready to be signed and sent."""

    destination: URI
    method: str
    fields: Fields
    body: bytes = field(repr=False, default=b"")


@dataclass(kw_only=True)
class HTTPResponse:
    """An HTTP response whose body may still be streaming from the connection."""

    status: int
    """The 3 digit response status code (1xx, 2xx, 3xx, 4xx, 5xx)."""

    fields: Fields
    """HTTP header fields."""

    body: AsyncIterable[bytes] = field(repr=False, default_factory=_empty_body)
    """The response payload as an async iterable of chunks of bytes."""

    reason: str | None = None
    """Optional string provided by the server explaining the status."""

    release: Callable[[], Awaitable[None]] | None = field(repr=False, default=None)
    """Returns the underlying connection to the pool, if the body is still open."""

    async def consume_body_async(self) -> bytes:
        """Iterate over the response body and return it as bytes."""
        data = bytearray()
        async for chunk in self.body:
            data += chunk
        await self.close()
        return bytes(data)

    async def close(self) -> None:
        if self.release is not None:
            release, self.release = self.release, None
            await release()

    def header(self, name: str) -> str | None:
        if name not in self.fields:
            return None
        return self.fields[name].as_string()


@dataclass(kw_only=True, frozen=True)
class HTTPClientConfiguration:
    """Client-level HTTP configuration."""

    connect_timeout: float | None = None
    """Seconds allowed to establish a connection. None waits indefinitely."""

    read_timeout: float | None = None
    """Seconds allowed between reads on an open connection. None waits
    indefinitely."""


@dataclass(kw_only=True, frozen=True)
class HTTPRequestConfiguration:
    """Request-level HTTP configuration."""

    stream: bool = False
    """Leave the response body open and stream it instead of buffering it."""


@runtime_checkable
class HTTPClient(Protocol):
    """An asynchronous HTTP client.

    Implementations raise :py:class:`TransportError` for failures to exchange the
    request, never for error statuses.
    """

    async def send(
        self,
        request: HTTPRequest,
        *,
        request_config: HTTPRequestConfiguration | None = None,
    ) -> HTTPResponse: ...

    async def close(self) -> None: ...


class AIOHTTPClient:
    """Implementation of :py:class:`HTTPClient` using aiohttp."""

    def __init__(
        self,
        *,
        client_config: HTTPClientConfiguration | None = None,
        _session: aiohttp.ClientSession | None = None,
    ) -> None:
        """
        :param client_config: Configuration that applies to all requests made with this
        client.
        """
        self._config = client_config or HTTPClientConfiguration()
        self._session = _session

    def _get_session(self) -> aiohttp.ClientSession:
        # The session binds to the running loop, so it can't be built in __init__.
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=None,
                    sock_connect=self._config.connect_timeout,
                    sock_read=self._config.read_timeout,
                ),
                auto_decompress=True,
            )
        return self._session

    async def send(
        self,
        request: HTTPRequest,
        *,
        request_config: HTTPRequestConfiguration | None = None,
    ) -> HTTPResponse:
        """Send HTTP request using aiohttp client.

        :param request: The request including destination URI, fields, payload.
        :param request_config: Configuration specific to this request.
        """
        request_config = request_config or HTTPRequestConfiguration()

        headers_list = list(chain.from_iterable(fld.as_tuples() for fld in request.fields))

        try:
            resp = await self._get_session().request(
                method=request.method,
                url=self._serialize_uri_without_query(request.destination),
                params=parse_qsl(request.destination.query or "", keep_blank_values=True),
                headers=headers_list,
                data=request.body or None,
            )
            if request_config.stream:
                return self._marshal_response(resp, resp.content.iter_any())
            body = await resp.read()
            resp.release()
        except TimeoutError as e:
            raise TransportError(
                f"Request to {request.destination.host} timed out",
                is_timeout_error=True,
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                f"Request to {request.destination.host} failed: {e}"
            ) from e

        return self._marshal_response(resp, _single_chunk(body))

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            _LOGGER.debug("Closing aiohttp session")
            await self._session.close()

    def _serialize_uri_without_query(self, uri: URI) -> str:
        """Serialize all parts of the URI up to and including the path."""
        components = (uri.scheme, uri.netloc, uri.path or "", "", "", "")
        return urlunparse(components)

    def _marshal_response(
        self, aiohttp_resp: aiohttp.ClientResponse, body: AsyncIterable[bytes]
    ) -> HTTPResponse:
        """Convert a ``aiohttp.ClientResponse`` to an :py:class:`HTTPResponse`."""
        headers = Fields()
        for header_name, header_val in aiohttp_resp.headers.items():
            try:
                headers[header_name].add(header_val)
            except KeyError:
                headers[header_name] = Field(name=header_name, values=[header_val])

        async def _release() -> None:
            aiohttp_resp.release()

        return HTTPResponse(
            status=aiohttp_resp.status,
            fields=headers,
            body=_wrap_stream_errors(body),
            reason=aiohttp_resp.reason,
            release=_release,
        )


async def _single_chunk(data: bytes) -> AsyncIterator[bytes]:
    if data:
        yield data


async def _wrap_stream_errors(body: AsyncIterable[bytes]) -> AsyncIterator[bytes]:
    try:
        async for chunk in body:
            yield chunk
    except TimeoutError as e:
        raise TransportError("Timed out reading response body", is_timeout_error=True) from e
    except aiohttp.ClientError as e:
        raise TransportError(f"Failed reading response body: {e}") from e
