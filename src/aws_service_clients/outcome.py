#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from dataclasses import dataclass
from enum import StrEnum
from typing import Self

from .exceptions import CallError, OperationFailedError, ServiceError


class ErrorKind(StrEnum):
    """The category of a failed operation call."""

    MISSING_PARAMETER = "MISSING_PARAMETER"
    """A required request field was not set. No request was sent."""

    ENDPOINT_RESOLUTION_FAILURE = "ENDPOINT_RESOLUTION_FAILURE"
    """The endpoint provider is unset or couldn't resolve an endpoint."""

    TRANSPORT = "TRANSPORT"
    """The request couldn't be exchanged with the service."""

    SERVICE = "SERVICE"
    """The service returned an error response."""

    NOT_INITIALIZED = "NOT_INITIALIZED"
    """The client was already closed when the operation was called."""


@dataclass(frozen=True, kw_only=True)
class OperationError:
    """The error variant of an :py:class:`Outcome`, shared by every service."""

    kind: ErrorKind
    code: str
    message: str
    retryable: bool = False
    status: int | None = None
    request_id: str | None = None

    @classmethod
    def missing_parameter(cls, field_name: str) -> Self:
        return cls(
            kind=ErrorKind.MISSING_PARAMETER,
            code="MissingParameter",
            message=f"Missing required field [{field_name}]",
        )

    @classmethod
    def endpoint_resolution_failure(cls, message: str) -> Self:
        return cls(
            kind=ErrorKind.ENDPOINT_RESOLUTION_FAILURE,
            code="EndpointResolutionFailure",
            message=message,
        )

    @classmethod
    def not_initialized(cls, operation: str) -> Self:
        return cls(
            kind=ErrorKind.NOT_INITIALIZED,
            code="NotInitialized",
            message=(
                f"Unable to call {operation}: client is not initialized "
                "(or already terminated)"
            ),
        )

    @classmethod
    def from_exception(cls, error: CallError) -> Self:
        """Convert an error raised by the transport into an error variant."""
        if isinstance(error, ServiceError):
            return cls(
                kind=ErrorKind.SERVICE,
                code=error.code,
                message=error.message,
                retryable=bool(error.is_retry_safe),
                status=error.status,
                request_id=error.request_id,
            )
        return cls(
            kind=ErrorKind.TRANSPORT,
            code=type(error).__name__,
            message=error.message,
            retryable=bool(error.is_retry_safe),
        )

    def __str__(self) -> str:
        return f"{self.kind}: {self.code}: {self.message}"


@dataclass(frozen=True)
class Outcome[T]:
    """The result of an operation call: either a result or an error, never both.

    Operation calls never raise for request failures. Use :py:attr:`is_success` to
    branch, or :py:meth:`unwrap` to opt into an exception.
    """

    result: T | None = None
    error: OperationError | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.result is not None:
            raise ValueError("An outcome can't hold both a result and an error.")

    @classmethod
    def success(cls, result: T) -> "Outcome[T]":
        return cls(result=result)

    @classmethod
    def failure(cls, error: OperationError) -> "Outcome[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the result, raising :py:class:`OperationFailedError` on error."""
        if self.error is not None:
            raise OperationFailedError(self.error)
        return self.result  # type: ignore
