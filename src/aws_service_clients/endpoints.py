#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from urllib.parse import urlparse

from aws_sdk_signers import URI

from .exceptions import EndpointResolutionError
from .operations import EndpointParams
from .service import ServiceDefinition

if TYPE_CHECKING:
    from .config import ClientConfig

_LOGGER = logging.getLogger(__name__)

REGION = "Region"
USE_FIPS = "UseFIPS"
USE_DUAL_STACK = "UseDualStack"
ENDPOINT = "Endpoint"

_HOST_LABEL = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?$")
_ACCOUNT_ID = re.compile(r"^[a-zA-Z0-9-]+$")


@dataclass(kw_only=True, frozen=True)
class Endpoint:
    """A resolved endpoint."""

    uri: URI
    """The endpoint URI."""

    signing_region: str | None = None
    """The region requests to this endpoint must be signed for, if it's fixed."""

    def with_path(self, path: str) -> "Endpoint":
        """Return a copy with the operation path appended to the base path."""
        base = (self.uri.path or "").rstrip("/")
        return replace(self, uri=replace(self.uri, path=base + path or "/"))


@runtime_checkable
class EndpointProvider(Protocol):
    """Maps an operation's endpoint parameters to a concrete endpoint."""

    async def resolve_endpoint(self, params: EndpointParams) -> Endpoint:
        """Resolve an endpoint from the operation's context parameters.

        :raises EndpointResolutionError: If no endpoint can be resolved.
        """
        ...

    def init_builtin_parameters(self, config: "ClientConfig") -> None:
        """Seed the parameters that come from client configuration."""
        ...

    def override_endpoint(self, url: str) -> None:
        """Send every subsequent request to ``url``."""
        ...


@dataclass(frozen=True)
class Partition:
    name: str
    dns_suffix: str
    dual_stack_dns_suffix: str
    implicit_global_region: str


_AWS = Partition("aws", "amazonaws.com", "api.aws", "us-east-1")

_PARTITIONS = (
    (
        re.compile(r"^cn-\w+-\d+$"),
        Partition(
            "aws-cn", "amazonaws.com.cn", "api.amazonwebservices.com.cn", "cn-northwest-1"
        ),
    ),
    (
        re.compile(r"^us-gov-\w+-\d+$"),
        Partition("aws-us-gov", "amazonaws.com", "api.aws", "us-gov-west-1"),
    ),
    (
        re.compile(r"^us-iso-\w+-\d+$"),
        Partition("aws-iso", "c2s.ic.gov", "c2s.ic.gov", "us-iso-east-1"),
    ),
    (
        re.compile(r"^us-isob-\w+-\d+$"),
        Partition("aws-iso-b", "sc2s.sgov.gov", "sc2s.sgov.gov", "us-isob-east-1"),
    ),
)


def partition_for(region: str) -> Partition:
    for pattern, partition in _PARTITIONS:
        if pattern.match(region):
            return partition
    return _AWS


def compute_signer_region(region: str | None) -> str | None:
    """Derive the signing region from a configured region.

    Pseudo regions such as ``aws-global`` or ``fips-us-east-1`` name an endpoint
    rather than a signing scope.
    """
    if region is None:
        return None
    if region in ("aws-global", "s3-external-1"):
        return "us-east-1"
    if region.startswith("fips-"):
        region = region.removeprefix("fips-")
    if region.endswith("-fips"):
        region = region.removesuffix("-fips")
    return region


def parse_url(url: str | URI) -> URI:
    """Parse a user supplied endpoint URL."""
    if isinstance(url, URI):
        return url

    parsed = urlparse(url)
    if parsed.hostname is None:
        raise EndpointResolutionError(
            f"Unable to parse hostname from provided URI: {url}"
        )

    return URI(
        host=parsed.hostname,
        path=parsed.path or None,
        scheme=parsed.scheme or "https",
        query=parsed.query or None,
        port=parsed.port,
    )


class StaticEndpointProvider:
    """An endpoint provider that always returns the same URL."""

    def __init__(self, url: str | URI, *, signing_region: str | None = None) -> None:
        self._uri = parse_url(url)
        self._signing_region = signing_region

    async def resolve_endpoint(self, params: EndpointParams) -> Endpoint:
        return Endpoint(uri=self._uri, signing_region=self._signing_region)

    def init_builtin_parameters(self, config: "ClientConfig") -> None:
        if self._signing_region is None:
            self._signing_region = compute_signer_region(config.region)

    def override_endpoint(self, url: str) -> None:
        self._uri = parse_url(url)


class RegionalEndpointProvider:
    """Resolves endpoints for services with standard regional endpoints.

    Supports FIPS and dual-stack variants, the China partition, and partition-wide
    global endpoints.
    """

    def __init__(self, service: ServiceDefinition) -> None:
        self._service = service
        self._builtins: dict[str, Any] = {USE_FIPS: False, USE_DUAL_STACK: False}

    @property
    def builtin_parameters(self) -> Mapping[str, Any]:
        return MappingProxyType(self._builtins)

    def init_builtin_parameters(self, config: "ClientConfig") -> None:
        self._builtins[REGION] = config.region
        self._builtins[USE_FIPS] = config.use_fips_endpoint
        self._builtins[USE_DUAL_STACK] = config.use_dualstack_endpoint
        if config.endpoint_url is not None:
            self._builtins[ENDPOINT] = config.endpoint_url

    def override_endpoint(self, url: str) -> None:
        self._builtins[ENDPOINT] = url

    async def resolve_endpoint(self, params: EndpointParams) -> Endpoint:
        merged = {**self._builtins, **params}
        _LOGGER.debug("Resolving endpoint with parameters: %s", merged)
        endpoint = self._resolve(merged)
        _LOGGER.debug("Resolved endpoint: %s", endpoint)
        return endpoint

    def _resolve(self, params: Mapping[str, Any]) -> Endpoint:
        region: str | None = params.get(REGION)
        use_fips = bool(params.get(USE_FIPS))
        use_dual_stack = bool(params.get(USE_DUAL_STACK))

        if (url := params.get(ENDPOINT)) is not None:
            if use_fips:
                raise EndpointResolutionError(
                    "Invalid Configuration: FIPS and custom endpoint are not supported"
                )
            if use_dual_stack:
                raise EndpointResolutionError(
                    "Invalid Configuration: Dualstack and custom endpoint are not "
                    "supported"
                )
            return Endpoint(
                uri=parse_url(url), signing_region=compute_signer_region(region)
            )

        region = self._validate_region(region)
        partition = partition_for(region)

        global_endpoint = self._service.global_endpoints.get(partition.name)
        if global_endpoint is not None and not use_fips and not use_dual_stack:
            return Endpoint(
                uri=URI(host=global_endpoint.host),
                signing_region=global_endpoint.signing_region,
            )

        prefix = self._service.endpoint_prefix + ("-fips" if use_fips else "")
        suffix = partition.dual_stack_dns_suffix if use_dual_stack else partition.dns_suffix
        return Endpoint(
            uri=URI(host=f"{prefix}.{region}.{suffix}"),
            signing_region=compute_signer_region(region),
        )

    def _validate_region(self, region: str | None) -> str:
        if not region:
            raise EndpointResolutionError("Invalid Configuration: Missing Region")
        if not _HOST_LABEL.match(region):
            raise EndpointResolutionError(
                f"Invalid Configuration: Region {region!r} is not a valid host label"
            )
        return region


@dataclass(frozen=True)
class _ParsedArn:
    partition: str
    service: str
    region: str
    account_id: str


def _parse_arn(value: str) -> _ParsedArn | None:
    parts = value.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn":
        return None
    _, partition, service, region, account_id, resource = parts
    if not partition or not service or not resource:
        return None
    return _ParsedArn(partition, service, region, account_id)


class KinesisEndpointProvider(RegionalEndpointProvider):
    """Kinesis endpoint rules.

    Operations that identify a stream or consumer by ARN are routed to the owning
    account's control or data plane host, e.g.
    ``123456789012.data-kinesis.us-east-1.amazonaws.com``.
    """

    _ACCOUNT_ROUTED_PARTITIONS = ("aws", "aws-us-gov")

    def _resolve(self, params: Mapping[str, Any]) -> Endpoint:
        arn = params.get("StreamARN") or params.get("ConsumerARN")
        if arn is None or params.get(ENDPOINT) is not None:
            return super()._resolve(params)

        region = self._validate_region(params.get(REGION))
        partition = partition_for(region)
        if partition.name not in self._ACCOUNT_ROUTED_PARTITIONS:
            return super()._resolve(params)

        operation_type = params.get("OperationType")
        if operation_type is None:
            raise EndpointResolutionError("Operation Type is not set")

        parsed = _parse_arn(arn)
        if parsed is None:
            raise EndpointResolutionError(f"Invalid ARN: Failed to parse ARN {arn!r}")
        if parsed.service != "kinesis":
            raise EndpointResolutionError(
                "Invalid ARN: The ARN was not for the Kinesis service, found: "
                f"{parsed.service}"
            )
        if not _HOST_LABEL.match(parsed.region):
            raise EndpointResolutionError("Invalid ARN: Invalid region.")
        if not _ACCOUNT_ID.match(parsed.account_id):
            raise EndpointResolutionError("Invalid ARN: Invalid account id.")
        if parsed.partition != partition.name:
            raise EndpointResolutionError(
                f"Partition: {parsed.partition} from ARN doesn't match with "
                f"partition name: {partition.name}"
            )
        if parsed.region != region:
            raise EndpointResolutionError(
                f"Invalid ARN: ARN region {parsed.region} doesn't match the "
                f"configured region {region}"
            )

        fips = "-fips" if params.get(USE_FIPS) else ""
        suffix = (
            partition.dual_stack_dns_suffix
            if params.get(USE_DUAL_STACK)
            else partition.dns_suffix
        )
        host = f"{parsed.account_id}.{operation_type}-kinesis{fips}.{region}.{suffix}"
        return Endpoint(uri=URI(host=host), signing_region=region)
