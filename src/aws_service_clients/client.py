#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, ClassVar, Self

from .auth import AnonymousSigner, Signer, SigV4Signer
from .config import ClientConfig
from .endpoints import EndpointProvider, RegionalEndpointProvider
from .exceptions import EndpointResolutionError
from .http import AIOHTTPClient, HTTPClientConfiguration
from .operations import OperationDescriptor, Request, SignerKind
from .outcome import OperationError, Outcome
from .protocols import protocol_for
from .service import ServiceDefinition
from .telemetry import TelemetryProvider, instrument
from .transport import Transport, TransportCore

_LOGGER = logging.getLogger(__name__)

_SNAKE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """``ListTagsForResource`` -> ``list_tags_for_resource``."""
    return _SNAKE_BOUNDARY.sub("_", name).lower()


class ServiceClient:
    """Base class of every service client.

    A client is a :py:class:`ServiceDefinition` bound to configuration, an endpoint
    provider and a transport. Every operation goes through :py:meth:`call`, which
    validates the request, resolves the endpoint, fills in the path and hands the
    request to the transport. Operations are also exposed as methods, under both
    their API name and its snake_case form::

        async with KinesisClient(ClientConfig(region="us-west-2")) as client:
            outcome = await client.list_streams({"Limit": 10})
            if outcome.is_success:
                print(outcome.result["StreamNames"])

    Operation calls return an :py:class:`Outcome` rather than raising.
    """

    SERVICE: ClassVar[ServiceDefinition]

    ENDPOINT_PROVIDER: ClassVar[Callable[[ServiceDefinition], EndpointProvider]] = (
        RegionalEndpointProvider
    )
    """Builds the endpoint provider used when none is passed in."""

    _ALIASES: ClassVar[Mapping[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "SERVICE" in cls.__dict__:
            cls._ALIASES = {
                alias: name
                for name in cls.SERVICE.operations
                for alias in (name, snake_case(name))
            }

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        endpoint_provider: EndpointProvider | None = ...,  # type: ignore[assignment]
        transport: Transport | None = None,
    ) -> None:
        """
        :param config: Client configuration. Resolved from the environment and the
            shared config file when omitted.
        :param endpoint_provider: Overrides the service's endpoint provider. Calls
            made with ``None`` fail with an endpoint resolution error.
        :param transport: Overrides the transport built from ``config``.
        """
        self._config = config or ClientConfig()

        if endpoint_provider is ...:
            endpoint_provider = self.ENDPOINT_PROVIDER(self.SERVICE)
        if endpoint_provider is not None:
            endpoint_provider.init_builtin_parameters(self._config)
        self._endpoint_provider = endpoint_provider

        self._transport = transport or self._build_transport(self._config)
        self._signers: dict[SignerKind, Signer] = {
            SignerKind.SIGV4: SigV4Signer(
                signing_name=self.SERVICE.signing_name,
                region=self._config.region,
                credentials_resolver=self._config.resolve_credentials_resolver(),
            ),
            SignerKind.NONE: AnonymousSigner(),
        }
        self._dispatch = instrument(
            self._dispatch_call,
            service_name=self.SERVICE.name,
            telemetry=self._config.telemetry_provider or TelemetryProvider(),
        )

        self._closed = False
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()

    def _build_transport(self, config: ClientConfig) -> Transport:
        http_client = config.http_client or AIOHTTPClient(
            client_config=HTTPClientConfiguration(
                connect_timeout=config.connect_timeout,
                read_timeout=config.read_timeout,
            )
        )
        return TransportCore(
            service=self.SERVICE,
            protocol=protocol_for(self.SERVICE),
            http_client=http_client,
            retry_strategy=config.resolve_retry_strategy(),
            user_agent_extra=config.user_agent_extra,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def endpoint_provider(self) -> EndpointProvider | None:
        return self._endpoint_provider

    def override_endpoint(self, url: str) -> None:
        """Send every subsequent call to ``url``."""
        if self._endpoint_provider is None:
            raise ValueError("The client has no endpoint provider to override.")
        self._endpoint_provider.override_endpoint(url)

    async def call(
        self,
        operation: str | OperationDescriptor,
        request: Request | None = None,
    ) -> Outcome[Any]:
        """Invoke an operation of this client's service.

        :param operation: The operation's API name, e.g. ``"DescribeStream"``, or its
            descriptor.
        :param request: Operation input keyed by member name.
        :raises KeyError: If the service has no such operation.
        """
        if not isinstance(operation, OperationDescriptor):
            operation = self.SERVICE.operation(operation)

        if self._closed:
            _LOGGER.debug("Unable to call %s: client is closed", operation.name)
            return Outcome.failure(OperationError.not_initialized(operation.name))

        self._in_flight += 1
        self._idle.clear()
        try:
            return await self._dispatch(operation, request, self._endpoint_provider)
        finally:
            self._in_flight -= 1
            if not self._in_flight:
                self._idle.set()

    async def _dispatch_call(
        self,
        operation: OperationDescriptor,
        request: Request | None,
        endpoint_provider: EndpointProvider | None,
    ) -> Outcome[Any]:
        if endpoint_provider is None:
            _LOGGER.debug("%s: endpoint provider is not initialized", operation.name)
            return Outcome.failure(
                OperationError.endpoint_resolution_failure(
                    "endpoint provider is not initialized"
                )
            )

        if (missing := operation.missing_field(request)) is not None:
            _LOGGER.debug("%s: Missing required field [%s]", operation.name, missing)
            return Outcome.failure(OperationError.missing_parameter(missing))

        endpoint_params = operation.endpoint_params(request)
        _LOGGER.debug("Calling endpoint provider with params: %s", endpoint_params)
        try:
            endpoint = await endpoint_provider.resolve_endpoint(endpoint_params)
        except EndpointResolutionError as e:
            _LOGGER.debug("%s: %s", operation.name, e)
            return Outcome.failure(OperationError.endpoint_resolution_failure(str(e)))

        endpoint = endpoint.with_path(operation.build_path(request))
        _LOGGER.debug("Endpoint provider result: %s", endpoint)

        return await self._transport.make_request(
            operation=operation,
            request=request if operation.takes_input else None,
            endpoint=endpoint,
            method=operation.method,
            signer=self._signers[operation.signer],
        )

    def __getattr__(self, name: str) -> Callable[..., Awaitable[Outcome[Any]]]:
        if name.startswith("_") or name not in self._ALIASES:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            )
        operation = self.SERVICE.operation(self._ALIASES[name])

        async def _operation(request: Request | None = None) -> Outcome[Any]:
            return await self.call(operation, request)

        _operation.__name__ = name
        _operation.__doc__ = f"Invoke the {operation.name} operation."
        return _operation

    async def close(self) -> None:
        """Reject new calls, wait for in-flight calls, then release connections.

        Calls made after closing fail with a ``NOT_INITIALIZED`` error.
        """
        if self._closed:
            return
        self._closed = True
        await self._idle.wait()
        await self._transport.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
