#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import logging
import os
import platform
from asyncio import sleep
from string import ascii_letters, digits
from typing import Any, Protocol

from aws_sdk_signers import Field

from . import __version__
from .auth import Signer
from .endpoints import Endpoint
from .eventstream import EventStream
from .exceptions import CallError, IdentityError, RetryError
from .http import HTTPClient, HTTPRequest, HTTPRequestConfiguration, HTTPResponse
from .operations import HTTPMethod, OperationDescriptor, Request
from .outcome import ErrorKind, OperationError, Outcome
from .protocols import JSONClientProtocol
from .retries import RetryStrategy
from .service import ServiceDefinition

_LOGGER = logging.getLogger(__name__)


class Transport(Protocol):
    """The request execution engine shared by every operation of a client."""

    async def make_request(
        self,
        *,
        operation: OperationDescriptor,
        request: Request | None,
        endpoint: Endpoint,
        method: HTTPMethod,
        signer: Signer,
    ) -> Outcome[Any]:
        """Send the request and return its outcome. Never raises for request
        failures."""
        ...

    async def close(self) -> None:
        """Release the connections held by the transport."""
        ...


class TransportCore:
    """Serializes, signs, sends and retries requests, and parses their responses."""

    def __init__(
        self,
        *,
        service: ServiceDefinition,
        protocol: JSONClientProtocol,
        http_client: HTTPClient,
        retry_strategy: RetryStrategy,
        user_agent_extra: str | None = None,
    ) -> None:
        self._service = service
        self._protocol = protocol
        self._http_client = http_client
        self._retry_strategy = retry_strategy
        self._user_agent = build_user_agent(service, user_agent_extra)

    @property
    def http_client(self) -> HTTPClient:
        return self._http_client

    async def make_request(
        self,
        *,
        operation: OperationDescriptor,
        request: Request | None,
        endpoint: Endpoint,
        method: HTTPMethod,
        signer: Signer,
    ) -> Outcome[Any]:
        _LOGGER.debug("Serializing request for: %s", operation.name)
        http_request = self._protocol.serialize_request(
            operation=operation, request=request, endpoint=endpoint
        )
        http_request.method = method
        http_request.fields.set_field(Field(name="User-Agent", values=[self._user_agent]))

        try:
            result = await self._retry(operation, http_request, endpoint, signer)
        except CallError as e:
            _LOGGER.debug("%s failed: %s", operation.name, e)
            return Outcome.failure(OperationError.from_exception(e))
        except IdentityError as e:
            # Credential failures surface from the signer before anything is sent.
            return Outcome.failure(
                OperationError(
                    kind=ErrorKind.TRANSPORT, code=type(e).__name__, message=str(e)
                )
            )
        return Outcome.success(result)

    async def _retry(
        self,
        operation: OperationDescriptor,
        request: HTTPRequest,
        endpoint: Endpoint,
        signer: Signer,
    ) -> Any:
        retry_strategy = self._retry_strategy
        retry_token = retry_strategy.acquire_initial_retry_token()

        while True:
            if retry_token.retry_delay:
                await sleep(retry_token.retry_delay)

            try:
                result = await self._handle_attempt(operation, request, endpoint, signer)
            except CallError as error:
                try:
                    retry_token = retry_strategy.refresh_retry_token_for_retry(
                        token_to_renew=retry_token, error=error
                    )
                except RetryError:
                    raise error

                _LOGGER.debug(
                    "Retry needed. Attempting request #%s in %.4f seconds.",
                    retry_token.retry_count + 1,
                    retry_token.retry_delay,
                )
            else:
                retry_strategy.record_success(token=retry_token)
                return result

    async def _handle_attempt(
        self,
        operation: OperationDescriptor,
        request: HTTPRequest,
        endpoint: Endpoint,
        signer: Signer,
    ) -> Any:
        signed = await signer.sign(request, endpoint)

        _LOGGER.debug("Sending request %s %s", signed.method, signed.destination.build())
        response = await self._http_client.send(
            signed,
            request_config=HTTPRequestConfiguration(stream=operation.event_stream),
        )
        _LOGGER.debug("Received response: %s", response.status)

        if operation.event_stream:
            return await self._event_stream(response)
        return await self._protocol.deserialize_response(
            operation=operation, response=response
        )

    async def _event_stream(self, response: HTTPResponse) -> EventStream:
        if not 200 <= response.status < 300:
            raise self._protocol.parse_error(
                response=response, body=await response.consume_body_async()
            )
        return EventStream(response)

    async def close(self) -> None:
        await self._http_client.close()


def build_user_agent(service: ServiceDefinition, extra: str | None = None) -> str:
    """Build a User-Agent string in the standard AWS SDK format."""
    os_name = platform.system().lower() or "other"
    if os_name == "darwin":
        os_name = "macos"
    components = [
        f"aws-service-clients/{__version__}",
        "ua/2.1",
        f"os/{_sanitize(os_name)}#{_sanitize(platform.release(), allow_hash=True)}",
        f"lang/python#{platform.python_version()}",
        f"md/pyimpl#{_sanitize(platform.python_implementation())}",
        f"api/{_sanitize(service.signing_name)}#{service.api_version}",
    ]
    if (exec_env := os.getenv("AWS_EXECUTION_ENV")) is not None:
        components.append(f"exec-env/{_sanitize(exec_env)}")
    if extra:
        components.append(extra)
    return " ".join(components)


_USERAGENT_ALLOWED_CHARACTERS = ascii_letters + digits + "!$%&'*+-.^_`|~"


def _sanitize(raw_str: str, allow_hash: bool = False) -> str:
    """Replace every character not allowed in a User-Agent component with "-"."""
    return "".join(
        c if c in _USERAGENT_ALLOWED_CHARACTERS or (allow_hash and c == "#") else "-"
        for c in raw_str
    )
