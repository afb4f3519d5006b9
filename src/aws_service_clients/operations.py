#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, Literal
from urllib.parse import quote

type HTTPMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

type Request = Mapping[str, Any]
"""Operation input keyed by AWS member name, e.g. ``{"ClusterArn": "arn:..."}``."""

type EndpointParams = dict[str, Any]

# RFC 3986 pchar minus the percent-encoded and unreserved sets, which quote
# already leaves alone.
_PCHAR_SAFE = "!$&'()*+,;=:@"

_LABEL_RE = re.compile(r"\{([A-Za-z0-9_]+)\}")


class SignerKind(Enum):
    """How a request is authenticated before it is sent."""

    SIGV4 = "sigv4"
    """Sign with AWS Signature Version 4."""

    NONE = "none"
    """Send the request unsigned."""


@dataclass(frozen=True, kw_only=True)
class OperationDescriptor:
    """Declarative description of one AWS API operation.

    The generic dispatcher needs nothing else to validate, route, and send a call.
    """

    name: str
    """The AWS API action name, e.g. ``DeleteCluster``."""

    method: HTTPMethod = "POST"
    """The HTTP method, fixed per operation."""

    path: str = "/"
    """Path template; ``{Label}`` segments are filled from request members."""

    required: tuple[str, ...] = ()
    """Members that must be set before the request is sent, in check order."""

    query: Mapping[str, str] = field(default_factory=dict[str, str])
    """Members bound to the query string, mapped to their query parameter name."""

    signer: SignerKind = SignerKind.SIGV4

    event_stream: bool = False
    """Whether the response body is decoded as a live event stream."""

    takes_input: bool = True
    """False for operations that have no input at all."""

    context_params: tuple[str, ...] = ()
    """Request members forwarded to the endpoint provider."""

    static_context: Mapping[str, Any] = field(default_factory=dict[str, Any])
    """Endpoint parameters fixed for this operation."""

    @cached_property
    def labels(self) -> tuple[str, ...]:
        return tuple(_LABEL_RE.findall(self.path))

    def missing_field(self, request: Request | None) -> str | None:
        """Return the first required member that is unset, or None."""
        for name in self.required:
            if request is None or request.get(name) is None:
                return name
        return None

    def build_path(self, request: Request | None) -> str:
        """Fill the path template from the request.

        Labels are substituted in template order and escaped so that only the pchar
        set survives unescaped.
        """
        if not self.labels:
            return self.path
        values = request or {}

        def _substitute(match: re.Match[str]) -> str:
            return quote(_label_value(values.get(match.group(1))), safe=_PCHAR_SAFE)

        return _LABEL_RE.sub(_substitute, self.path)

    def endpoint_params(self, request: Request | None) -> EndpointParams:
        params: EndpointParams = dict(self.static_context)
        if not self.takes_input or request is None:
            return params
        for name in self.context_params:
            if (value := request.get(name)) is not None:
                params[name] = value
        return params

    def bound_members(self) -> frozenset[str]:
        """Members carried by the path or query string rather than the body."""
        return frozenset(self.labels) | frozenset(self.query)


def _label_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
