#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
"""Wire serialization for the AWS JSON protocols.

Requests are plain mappings keyed by AWS member name. Top-level members are
renamed to lowerCamel for services whose wire format uses it; nested values are
sent as given, since maps such as tags carry caller-owned keys.
"""

import json
import logging
from base64 import b64encode
from collections.abc import Iterator, Mapping
from datetime import UTC, date, datetime
from decimal import Decimal
from io import BytesIO
from typing import Any, Final
from urllib.parse import quote, urlencode

import ijson  # type: ignore
from aws_sdk_signers import URI, Field, Fields

from .endpoints import Endpoint
from .exceptions import ServiceError
from .http import HTTPRequest, HTTPResponse
from .operations import OperationDescriptor, Request
from .service import Protocol, ServiceDefinition

_LOGGER = logging.getLogger(__name__)

_ERROR_CODE_HEADER: Final = "x-amzn-errortype"
_REQUEST_ID_HEADERS: Final = ("x-amzn-requestid", "x-amz-request-id")
_ERROR_CODE_KEYS: Final = ("__type", "code", "Code")
_ERROR_MESSAGE_KEYS: Final = ("message", "Message", "errorMessage", "error_message")

THROTTLING_CODES: Final = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "ThrottledException",
        "RequestThrottledException",
        "TooManyRequestsException",
        "ProvisionedThroughputExceededException",
        "TransactionInProgressException",
        "RequestLimitExceeded",
        "BandwidthLimitExceeded",
        "LimitExceededException",
        "RequestThrottled",
        "SlowDown",
        "PriorRequestNotComplete",
        "EC2ThrottledException",
    }
)

TRANSIENT_CODES: Final = frozenset(
    {
        "RequestTimeout",
        "RequestTimeoutException",
        "InternalError",
        "InternalFailure",
        "InternalServerError",
        "ServiceUnavailable",
        "ServiceUnavailableException",
    }
)


def lower_camel(name: str) -> str:
    return name[:1].lower() + name[1:]


def _json_default(value: Any) -> Any:
    match value:
        case bytes() | bytearray():
            return b64encode(value).decode("utf-8")
        case datetime():
            return _epoch_seconds(value)
        case date():
            return value.isoformat()
        case Decimal():
            return float(value)
        case _:
            raise TypeError(
                f"Object of type {type(value).__name__} is not JSON serializable"
            )


def _epoch_seconds(value: datetime) -> int | float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    seconds = value.timestamp()
    return int(seconds) if seconds.is_integer() else seconds


def _query_value(value: Any) -> str:
    match value:
        case bool():
            return "true" if value else "false"
        case datetime():
            if value.tzinfo is not None:
                value = value.astimezone(UTC)
            return value.strftime("%Y-%m-%dT%H:%M:%SZ")
        case bytes() | bytearray():
            return b64encode(value).decode("utf-8")
        case _:
            return str(value)


def _query_pairs(name: str, value: Any) -> Iterator[tuple[str, str]]:
    if isinstance(value, list | tuple | set | frozenset):
        for item in value:  # type: ignore
            yield name, _query_value(item)
    elif isinstance(value, Mapping):
        for key, item in value.items():  # type: ignore
            yield str(key), _query_value(item)
    else:
        yield name, _query_value(value)


def encode_json(value: Mapping[str, Any]) -> bytes:
    return json.dumps(value, default=_json_default, separators=(",", ":")).encode(
        "utf-8"
    )


def decode_json(data: bytes) -> Any:
    """Parse a JSON document, keeping non-integer numbers as ``Decimal``.

    :raises ijson.JSONError: If ``data`` is not exactly one well-formed document.
    """
    try:
        documents = list(ijson.items(BytesIO(data), ""))  # type: ignore
    except UnicodeDecodeError as e:
        raise ijson.JSONError(str(e)) from e  # type: ignore
    if len(documents) != 1:  # type: ignore
        raise ijson.JSONError(  # type: ignore
            f"Expected one JSON document, found {len(documents)}"  # type: ignore
        )
    return documents[0]  # type: ignore


class JSONClientProtocol:
    """Base for the JSON based protocols."""

    content_type: str = "application/json"

    def __init__(self, service: ServiceDefinition) -> None:
        self._service = service

    def serialize_request(
        self,
        *,
        operation: OperationDescriptor,
        request: Request | None,
        endpoint: Endpoint,
    ) -> HTTPRequest:
        raise NotImplementedError()

    def wire_name(self, member: str) -> str:
        return lower_camel(member) if self._service.lower_camel_members else member

    def _payload(
        self, request: Request | None, exclude: frozenset[str] = frozenset()
    ) -> dict[str, Any]:
        return {
            self.wire_name(name): value
            for name, value in (request or {}).items()
            if value is not None and name not in exclude
        }

    def _destination(self, endpoint: Endpoint, query: str | None) -> URI:
        uri = endpoint.uri
        if uri.query and query:
            query = f"{uri.query}&{query}"
        return URI(
            scheme=uri.scheme,
            host=uri.host,
            port=uri.port,
            path=uri.path or "/",
            query=query or uri.query,
        )

    async def deserialize_response(
        self, *, operation: OperationDescriptor, response: HTTPResponse
    ) -> dict[str, Any]:
        """Read a buffered response body.

        :raises ServiceError: If the response is an error response or its body is
            not a JSON document.
        """
        body = await response.consume_body_async()
        if not 200 <= response.status < 300:
            raise self.parse_error(response=response, body=body)

        if not body.strip():
            return {}
        try:
            document = decode_json(body)
        except ijson.JSONError as e:  # type: ignore
            _LOGGER.debug("Response body is not JSON: %r", body[:256])
            raise ServiceError(
                f"Unable to parse response body: {e}",
                code="SerializationException",
                status=response.status,
                request_id=_request_id(response),
                fault="server",
                is_retry_safe=False,
            ) from e
        if not isinstance(document, dict):
            return {"Payload": document}
        return document  # type: ignore

    def parse_error(self, *, response: HTTPResponse, body: bytes) -> ServiceError:
        document: dict[str, Any] = {}
        if body.strip():
            try:
                parsed = decode_json(body)
            except ijson.JSONError:  # type: ignore
                _LOGGER.debug("Error response body is not JSON: %r", body[:256])
            else:
                if isinstance(parsed, dict):
                    document = parsed  # type: ignore

        raw_code = response.header(_ERROR_CODE_HEADER)
        if raw_code is None:
            raw_code = next(
                (document[k] for k in _ERROR_CODE_KEYS if isinstance(document.get(k), str)),
                None,
            )
        code = parse_error_code(raw_code) or f"Http{response.status}"

        message = next(
            (
                str(document[k])
                for k in _ERROR_MESSAGE_KEYS
                if document.get(k) is not None
            ),
            response.reason or "",
        )

        request_id = _request_id(response)
        is_throttle = response.status == 429 or code in THROTTLING_CODES
        return ServiceError(
            message,
            code=code,
            status=response.status,
            request_id=request_id,
            fault="client" if response.status < 500 else "server",
            is_throttling_error=is_throttle,
            is_retry_safe=(
                is_throttle or response.status >= 500 or code in TRANSIENT_CODES
            ),
            retry_after=_retry_after(response),
        )


class AWSJSONProtocol(JSONClientProtocol):
    """The awsJson1_0 and awsJson1_1 protocols.

    Every operation is a ``POST /`` whose target is named in ``X-Amz-Target``.
    """

    def __init__(self, service: ServiceDefinition) -> None:
        super().__init__(service)
        version = "1.0" if service.protocol is Protocol.AWS_JSON_1_0 else "1.1"
        self.content_type = f"application/x-amz-json-{version}"

    def serialize_request(
        self,
        *,
        operation: OperationDescriptor,
        request: Request | None,
        endpoint: Endpoint,
    ) -> HTTPRequest:
        return HTTPRequest(
            destination=self._destination(endpoint, None),
            method=operation.method,
            fields=Fields(
                [
                    Field(name="Content-Type", values=[self.content_type]),
                    Field(
                        name="X-Amz-Target",
                        values=[f"{self._service.target_prefix}.{operation.name}"],
                    ),
                ]
            ),
            body=encode_json(self._payload(request)),
        )


class RestJSONProtocol(JSONClientProtocol):
    """The restJson1 protocol.

    The endpoint arrives with its labelled path already filled in. Query-bound
    members go in the query string and everything else in the JSON body, or in
    the query string for GET and DELETE, which carry no body.
    """

    def serialize_request(
        self,
        *,
        operation: OperationDescriptor,
        request: Request | None,
        endpoint: Endpoint,
    ) -> HTTPRequest:
        values = request or {}
        bound = operation.bound_members()

        query: list[tuple[str, str]] = []
        for member, wire_name in operation.query.items():
            if (value := values.get(member)) is not None:
                query.extend(_query_pairs(wire_name, value))

        body = b""
        fields = Fields()
        if operation.method in ("GET", "DELETE"):
            for member, value in values.items():
                if member not in bound and value is not None:
                    query.extend(_query_pairs(lower_camel(member), value))
        elif payload := self._payload(request, exclude=bound):
            body = encode_json(payload)
            fields.set_field(Field(name="Content-Type", values=[self.content_type]))

        return HTTPRequest(
            destination=self._destination(
                endpoint, urlencode(query, quote_via=quote, safe="") or None
            ),
            method=operation.method,
            fields=fields,
            body=body,
        )


def protocol_for(service: ServiceDefinition) -> JSONClientProtocol:
    if service.protocol.is_aws_json:
        return AWSJSONProtocol(service)
    return RestJSONProtocol(service)


def parse_error_code(code: str | None) -> str | None:
    """Strip the namespace and trailing metadata from an AWS error code.

    ``aws.protocoltests#FooError:http://internal.amazon.com/`` becomes ``FooError``.
    """
    if not code:
        return None
    code = code.split(":")[0]
    if "#" in code:
        code = code.rsplit("#", 1)[1]
    return code or None


def _request_id(response: HTTPResponse) -> str | None:
    return next(
        (rid for h in _REQUEST_ID_HEADERS if (rid := response.header(h))), None
    )


def _retry_after(response: HTTPResponse) -> float | None:
    value = response.header("retry-after")
    if value is None:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None
