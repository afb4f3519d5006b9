#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
"""Tracing and metrics for operation calls, built on the OpenTelemetry API.

Nothing is exported unless the application installs an OpenTelemetry SDK; the
API's default providers are no-ops.
"""

import time
from collections.abc import Awaitable, Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics, trace
from opentelemetry.metrics import Histogram, Meter, MeterProvider
from opentelemetry.trace import SpanKind, Status, StatusCode, Tracer, TracerProvider

from .endpoints import Endpoint, EndpointProvider
from .operations import EndpointParams, OperationDescriptor, Request
from .outcome import Outcome

if TYPE_CHECKING:
    from .config import ClientConfig

CALL_DURATION = "smithy.client.duration"
RESOLVE_ENDPOINT_DURATION = "smithy.client.resolve_endpoint_duration"

RPC_METHOD = "rpc.method"
RPC_SERVICE = "rpc.service"
RPC_SYSTEM = "rpc.system"

type Dispatch = Callable[
    [OperationDescriptor, Request | None, EndpointProvider | None],
    Awaitable[Outcome[Any]],
]
"""Runs one operation call against an endpoint provider."""


class TelemetryProvider:
    """Supplies the tracer and meter a client records with.

    Defaults to the globally registered OpenTelemetry providers.
    """

    def __init__(
        self,
        *,
        tracer_provider: TracerProvider | None = None,
        meter_provider: MeterProvider | None = None,
    ) -> None:
        self._tracer_provider = tracer_provider
        self._meter_provider = meter_provider

    def get_tracer(self, scope: str) -> Tracer:
        return trace.get_tracer(scope, tracer_provider=self._tracer_provider)

    def get_meter(self, scope: str) -> Meter:
        return (self._meter_provider or metrics.get_meter_provider()).get_meter(scope)


@contextmanager
def _timed(histogram: Histogram, attributes: Mapping[str, str]) -> Iterator[None]:
    start = time.perf_counter_ns()
    try:
        yield
    finally:
        histogram.record((time.perf_counter_ns() - start) / 1e6, attributes=attributes)


class _TimedEndpointProvider:
    """Records how long endpoint resolution takes for a single call."""

    def __init__(
        self,
        provider: EndpointProvider,
        histogram: Histogram,
        attributes: Mapping[str, str],
    ) -> None:
        self._provider = provider
        self._histogram = histogram
        self._attributes = attributes

    async def resolve_endpoint(self, params: EndpointParams) -> Endpoint:
        with _timed(self._histogram, self._attributes):
            return await self._provider.resolve_endpoint(params)

    def init_builtin_parameters(self, config: "ClientConfig") -> None:
        self._provider.init_builtin_parameters(config)

    def override_endpoint(self, url: str) -> None:
        self._provider.override_endpoint(url)


def instrument(
    dispatch: Dispatch, *, service_name: str, telemetry: TelemetryProvider
) -> Dispatch:
    """Wrap ``dispatch`` so that every call is traced and timed.

    Each call gets a client span named ``{service}.{operation}`` and records its
    duration, and the duration of its endpoint resolution, in milliseconds.
    """
    tracer = telemetry.get_tracer(service_name)
    meter = telemetry.get_meter(service_name)
    call_duration = meter.create_histogram(
        CALL_DURATION, unit="ms", description="Duration of an operation call"
    )
    resolve_duration = meter.create_histogram(
        RESOLVE_ENDPOINT_DURATION,
        unit="ms",
        description="Duration of endpoint resolution",
    )

    async def _instrumented(
        operation: OperationDescriptor,
        request: Request | None,
        endpoint_provider: EndpointProvider | None,
    ) -> Outcome[Any]:
        attributes = {RPC_METHOD: operation.name, RPC_SERVICE: service_name}
        if endpoint_provider is not None:
            endpoint_provider = _TimedEndpointProvider(
                endpoint_provider, resolve_duration, attributes
            )

        with tracer.start_as_current_span(
            f"{service_name}.{operation.name}",
            kind=SpanKind.CLIENT,
            attributes={**attributes, RPC_SYSTEM: "aws-api"},
        ) as span:
            with _timed(call_duration, attributes):
                outcome = await dispatch(operation, request, endpoint_provider)
            if outcome.error is not None:
                span.set_attribute("error.type", outcome.error.code)
                span.set_status(Status(StatusCode.ERROR, outcome.error.message))
        return outcome

    return _instrumented
