#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from dataclasses import dataclass, field
from typing import Literal


class ClientError(Exception):
    """Base exception type for all exceptions raised by aws-service-clients."""


type Fault = Literal["client", "server"] | None
"""Whether the client or server is at fault.

If None, then there was not enough information to determine fault.
"""


@dataclass(kw_only=True)
class CallError(ClientError):
    """Base exception for errors raised while executing a request.

    Implements :py:class:`.retries.ErrorRetryInfo`. Call errors never escape an
    operation call; the dispatcher converts them into an error
    :py:class:`.outcome.Outcome`.
    """

    fault: Fault = None
    """Whether the client or server is at fault.

    If None, then there was not enough information to determine fault.
    """

    message: str = field(default="", kw_only=False)
    """The message of the error."""

    is_retry_safe: bool | None = None
    """Whether the exception is safe to retry.

    A value of True does not mean a retry will occur, but rather that a retry is allowed
    to occur.

    A value of None indicates that there is not enough information available to
    determine if a retry is safe.
    """

    retry_after: float | None = None
    """The amount of time that should pass before a retry.

    Retry strategies MAY choose to wait longer.
    """

    is_throttling_error: bool = False
    """Whether the error is a throttling error."""

    is_timeout_error: bool = False
    """Whether the error was caused by a connect or read timeout."""

    def __post_init__(self):
        super().__init__(self.message)


@dataclass(kw_only=True)
class ServiceError(CallError):
    """An error response returned by an AWS service."""

    code: str = "Unknown"
    """The error code, with any namespace or trailing metadata removed."""

    status: int | None = None
    """The HTTP status code of the error response."""

    request_id: str | None = None
    """The request id the service assigned to the failed request."""


@dataclass(kw_only=True)
class TransportError(CallError):
    """A failure to exchange a request with the service, such as a reset connection
    or an expired timeout."""

    fault: Fault = "client"
    is_retry_safe: bool | None = True


class EndpointResolutionError(ClientError):
    """Exception type for all exceptions raised by endpoint resolution."""


class RetryError(ClientError):
    """Base exception type for all exceptions raised in retry strategies."""


class IdentityError(ClientError):
    """Exception type raised when credentials can't be resolved."""


class OperationFailedError(ClientError):
    """Raised by :py:meth:`.outcome.Outcome.unwrap` when the outcome holds an error."""

    def __init__(self, error: object) -> None:
        super().__init__(str(error))
        self.error = error


class EventStreamError(ClientError):
    """Base exception for failures while decoding an event stream."""


class InvalidHeaderValueLength(EventStreamError):
    def __init__(self, length: int, max_length: int) -> None:
        super().__init__(
            f"Expected header value length to be no more than {max_length}, "
            f"but was {length}"
        )


class InvalidHeadersLength(EventStreamError):
    def __init__(self, length: int, max_length: int) -> None:
        super().__init__(
            f"Expected headers length to be no more than {max_length}, "
            f"but was {length}"
        )


class InvalidPayloadLength(EventStreamError):
    def __init__(self, length: int, max_length: int) -> None:
        super().__init__(
            f"Expected payload length to be no more than {max_length}, "
            f"but was {length}"
        )


class ChecksumMismatch(EventStreamError):
    def __init__(self, expected: int, calculated: int) -> None:
        super().__init__(
            f"Checksum mismatch: expected 0x{expected:08x}, "
            f"calculated 0x{calculated:08x}"
        )


class InvalidEventBytes(EventStreamError):
    def __init__(self) -> None:
        super().__init__("Invalid event bytes.")


class EventStreamException(EventStreamError):
    """An exception event sent by the service in the middle of an event stream."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
