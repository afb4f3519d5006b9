#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import random
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from .exceptions import RetryError


@runtime_checkable
class ErrorRetryInfo(Protocol):
    """A protocol for errors that carry retry information.

    :py:class:`.exceptions.CallError` implements it.
    """

    is_retry_safe: bool | None
    retry_after: float | None
    is_throttling_error: bool
    is_timeout_error: bool


class RetryBackoffStrategy(Protocol):
    def compute_next_backoff_delay(self, retry_attempt: int) -> float:
        """Seconds to wait before retry number ``retry_attempt`` (1 based)."""
        ...


@dataclass(kw_only=True)
class RetryToken:
    """Issued by a :py:class:`RetryStrategy` for each attempt.

    Always obtain tokens from a strategy, never construct them directly.
    """

    retry_count: int
    """The total number of attempts minus the initial attempt."""

    retry_delay: float
    """Seconds to wait before the attempt this token was issued for."""

    quota_cost: int = 0
    """Retry quota withdrawn to issue this token, refunded on success."""

    @property
    def attempt_count(self) -> int:
        return self.retry_count + 1


class RetryStrategy(Protocol):
    max_attempts: int

    def acquire_initial_retry_token(self) -> RetryToken: ...

    def refresh_retry_token_for_retry(
        self, *, token_to_renew: RetryToken, error: Exception
    ) -> RetryToken:
        """Issue a token for the next attempt after ``error``.

        :raises RetryError: If no further attempt is allowed.
        """
        ...

    def record_success(self, *, token: RetryToken) -> None: ...


class ExponentialBackoffJitterType(Enum):
    """Jitter mode for :py:class:`ExponentialRetryBackoffStrategy`."""

    DEFAULT = 1
    """Equal jitter: half of the capped delay plus a random share of the other half."""

    NONE = 2
    """The capped delay, ``min(max_backoff, scale * 2 ** (attempt - 1))``."""

    FULL = 3
    """A random share of the whole capped delay."""


class ExponentialRetryBackoffStrategy:
    def __init__(
        self,
        *,
        backoff_scale_value: float = 0.025,
        max_backoff: float = 20,
        jitter_type: ExponentialBackoffJitterType = ExponentialBackoffJitterType.DEFAULT,
        random: Callable[[], float] = random.random,
    ) -> None:
        """Truncated binary exponential backoff with optional jitter.

        .. seealso:: https://aws.amazon.com/blogs/architecture/exponential-backoff-and-jitter/

        :param backoff_scale_value: The delay before the first retry, before jitter.
        :param max_backoff: Upper limit for delay values returned, in seconds.
        :param jitter_type: How randomness is applied to the delay.
        :param random: A callable that returns random numbers between ``0`` and ``1``.
        """
        self._backoff_scale_value = backoff_scale_value
        self._max_backoff = max_backoff
        self._jitter_type = jitter_type
        self._random = random

    def compute_next_backoff_delay(self, retry_attempt: int) -> float:
        if retry_attempt <= 0:
            return 0

        capped = min(
            self._backoff_scale_value * (2.0 ** (retry_attempt - 1)), self._max_backoff
        )
        match self._jitter_type:
            case ExponentialBackoffJitterType.NONE:
                return capped
            case ExponentialBackoffJitterType.FULL:
                return self._random() * capped
            case ExponentialBackoffJitterType.DEFAULT:
                return (self._random() * 0.5 + 0.5) * capped


def _check_retryable(error: Exception) -> None:
    if not isinstance(error, ErrorRetryInfo) or not error.is_retry_safe:
        raise RetryError(f"Error is not retryable: {error}") from error


class SimpleRetryStrategy:
    def __init__(
        self,
        *,
        backoff_strategy: RetryBackoffStrategy | None = None,
        max_attempts: int = 5,
    ) -> None:
        """Retry any retry-safe error until ``max_attempts`` is reached.

        :param backoff_strategy: Computes the delay before each retry. Defaults to
            :py:class:`ExponentialRetryBackoffStrategy`.
        :param max_attempts: Upper limit on total number of attempts made, including
            the initial attempt.
        """
        self.backoff_strategy = backoff_strategy or ExponentialRetryBackoffStrategy()
        self.max_attempts = max_attempts

    def acquire_initial_retry_token(self) -> RetryToken:
        return RetryToken(retry_count=0, retry_delay=0)

    def refresh_retry_token_for_retry(
        self, *, token_to_renew: RetryToken, error: Exception
    ) -> RetryToken:
        _check_retryable(error)
        retry_count = token_to_renew.retry_count + 1
        if retry_count >= self.max_attempts:
            raise RetryError(
                f"Reached maximum number of allowed attempts: {self.max_attempts}"
            ) from error
        return RetryToken(
            retry_count=retry_count,
            retry_delay=_delay(self.backoff_strategy, retry_count, error),
        )

    def record_success(self, *, token: RetryToken) -> None:
        pass


class StandardRetryStrategy:
    """The AWS standard retry mode.

    Retries draw from a client-wide quota so that a failing service isn't flooded
    with retries: each retry costs ``retry_cost`` (``timeout_cost`` after a timeout)
    and each success refunds what its attempt withdrew, or ``success_refund`` for a
    first-try success. Retries stop when the quota is exhausted.
    """

    def __init__(
        self,
        *,
        backoff_strategy: RetryBackoffStrategy | None = None,
        max_attempts: int = 3,
        initial_quota: int = 500,
        retry_cost: int = 5,
        timeout_cost: int = 10,
        success_refund: int = 1,
    ) -> None:
        self.backoff_strategy = backoff_strategy or ExponentialRetryBackoffStrategy(
            backoff_scale_value=1,
            max_backoff=20,
            jitter_type=ExponentialBackoffJitterType.FULL,
        )
        self.max_attempts = max_attempts
        self._max_quota = initial_quota
        self._quota = initial_quota
        self._retry_cost = retry_cost
        self._timeout_cost = timeout_cost
        self._success_refund = success_refund
        self._lock = threading.Lock()

    @property
    def available_quota(self) -> int:
        return self._quota

    def acquire_initial_retry_token(self) -> RetryToken:
        return RetryToken(retry_count=0, retry_delay=0)

    def refresh_retry_token_for_retry(
        self, *, token_to_renew: RetryToken, error: Exception
    ) -> RetryToken:
        _check_retryable(error)
        retry_count = token_to_renew.retry_count + 1
        if retry_count >= self.max_attempts:
            raise RetryError(
                f"Reached maximum number of allowed attempts: {self.max_attempts}"
            ) from error

        is_timeout = isinstance(error, ErrorRetryInfo) and error.is_timeout_error
        cost = self._timeout_cost if is_timeout else self._retry_cost
        with self._lock:
            if cost > self._quota:
                raise RetryError("Retry quota exceeded") from error
            self._quota -= cost

        return RetryToken(
            retry_count=retry_count,
            retry_delay=_delay(self.backoff_strategy, retry_count, error),
            quota_cost=cost,
        )

    def record_success(self, *, token: RetryToken) -> None:
        refund = token.quota_cost or self._success_refund
        with self._lock:
            self._quota = min(self._max_quota, self._quota + refund)


def _delay(backoff: RetryBackoffStrategy, retry_count: int, error: Exception) -> float:
    delay = backoff.compute_next_backoff_delay(retry_count)
    retry_after = error.retry_after if isinstance(error, ErrorRetryInfo) else None
    if retry_after is not None:
        delay = max(delay, retry_after)
    return delay


def retry_strategy_for(mode: str, max_attempts: int | None) -> RetryStrategy:
    """Build the retry strategy for a configured retry mode."""
    match mode:
        case "standard":
            return StandardRetryStrategy(max_attempts=max_attempts or 3)
        case "simple" | "legacy":
            return SimpleRetryStrategy(max_attempts=max_attempts or 5)
        case _:
            raise ValueError(f"Unsupported retry mode: {mode!r}")
