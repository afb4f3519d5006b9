#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from .operations import HTTPMethod, OperationDescriptor


class Protocol(Enum):
    """The wire protocol a service speaks."""

    AWS_JSON_1_0 = "awsJson1_0"
    AWS_JSON_1_1 = "awsJson1_1"
    REST_JSON_1 = "restJson1"

    @property
    def is_aws_json(self) -> bool:
        return self is not Protocol.REST_JSON_1


@dataclass(frozen=True)
class GlobalEndpoint:
    """A single, partition-wide endpoint used instead of a regional one."""

    host: str
    signing_region: str


@dataclass(frozen=True, kw_only=True)
class ServiceDefinition:
    """Everything the client runtime needs to know about one AWS service."""

    name: str
    """The client display name, used as the telemetry service name."""

    signing_name: str
    endpoint_prefix: str
    protocol: Protocol
    api_version: str

    target_prefix: str | None = None
    """Prefix of the ``X-Amz-Target`` header for awsJson protocols."""

    operations: Mapping[str, OperationDescriptor] = field(
        default_factory=dict[str, OperationDescriptor]
    )

    global_endpoints: Mapping[str, GlobalEndpoint] = field(
        default_factory=dict[str, GlobalEndpoint]
    )
    """Global endpoints keyed by partition name."""

    lower_camel_members: bool = False
    """Whether top-level member names are lowerCamel on the wire."""

    def operation(self, name: str) -> OperationDescriptor:
        try:
            return self.operations[name]
        except KeyError:
            raise KeyError(f"{self.name} has no operation named {name!r}") from None


def index(operations: Iterable[OperationDescriptor]) -> dict[str, OperationDescriptor]:
    return {op.name: op for op in operations}


def json_rpc(*names: str) -> list[OperationDescriptor]:
    """Describe awsJson operations, which are all ``POST /`` without labels."""
    return [OperationDescriptor(name=name) for name in names]


def rest(
    name: str,
    method: HTTPMethod,
    path: str,
    *required: str,
    query: Mapping[str, str] | None = None,
) -> OperationDescriptor:
    """Describe a restJson operation.

    Path labels are always required, so they don't need to be repeated in
    ``required``; extra required members are checked after the labels.
    """
    descriptor = OperationDescriptor(name=name, method=method, path=path)
    checks = tuple(dict.fromkeys((*descriptor.labels, *required)))
    return OperationDescriptor(
        name=name,
        method=method,
        path=path,
        required=checks,
        query=dict(query or {}),
    )
