#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import configparser
import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from aws_sdk_signers import AWSCredentialIdentity

from .http import HTTPClient
from .identity import (
    CredentialsResolver,
    StaticCredentialsResolver,
    default_credentials_chain,
)
from .retries import RetryStrategy, retry_strategy_for

if TYPE_CHECKING:
    from .telemetry import TelemetryProvider

_LOGGER = logging.getLogger(__name__)

SOURCE_CONSTRUCTOR = "constructor"
SOURCE_ENVIRONMENT = "environment"
SOURCE_CONFIG_FILE = "config_file"
SOURCE_DEFAULT = "default"
SOURCE_IN_CODE_UPDATE = "in_code_update"

type SourceType = Literal[
    "constructor", "environment", "config_file", "default", "in_code_update"
]

RETRY_MODES = ("standard", "legacy", "simple")


@dataclass(frozen=True)
class ConfigValue:
    """Configuration value with metadata about its source"""

    value: Any
    source: SourceType


def _parse_bool(name: str, raw: str) -> bool:
    match raw.strip().lower():
        case "true":
            return True
        case "false":
            return False
        case _:
            raise ValueError(f"{name} must be 'true' or 'false', got {raw!r}")


def _parse_positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


def _parse_seconds(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _parse_retry_mode(name: str, raw: str) -> str:
    if raw not in RETRY_MODES:
        raise ValueError(f"{name} must be one of {', '.join(RETRY_MODES)}, got {raw!r}")
    return raw


@dataclass(frozen=True, kw_only=True)
class _FieldSpec:
    default: Any = None
    env_vars: tuple[str, ...] = ()
    config_key: str | None = None
    parser: Callable[[str, str], Any] | None = None


class _Setting:
    """Exposes a resolved config field; assignment records an in-code update."""

    def __set_name__(self, owner: type, name: str) -> None:
        self._name = name

    def __get__(self, instance: "ClientConfig | None", owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.get_config_value(self._name).value

    def __set__(self, instance: "ClientConfig", value: Any) -> None:
        instance._values[self._name] = ConfigValue(value, SOURCE_IN_CODE_UPDATE)


def config_file_path() -> Path:
    if (path := os.getenv("AWS_CONFIG_FILE")) is not None:
        return Path(path).expanduser()
    return Path.home() / ".aws" / "config"


def _load_config_file(profile: str) -> dict[str, str]:
    path = config_file_path()
    parser = configparser.RawConfigParser()
    try:
        read = parser.read(path)
    except configparser.Error as e:
        raise ValueError(f"Unable to parse config file {path}: {e}") from e
    if not read:
        return {}

    section = "default" if profile == "default" else f"profile {profile}"
    if not parser.has_section(section):
        _LOGGER.debug("Profile %r not found in %s", profile, path)
        return {}
    return dict(parser[section])


class ClientConfig:
    """Client configuration with precedence-based resolution.

    Every field resolves, in order, from the constructor, the environment, the
    active profile of the shared config file (``AWS_CONFIG_FILE`` or
    ``~/.aws/config``, profile ``AWS_PROFILE`` or ``default``), and finally its
    default. Resolution happens once, when the config is constructed; the source
    of each value is available from :py:meth:`get_config_value`.

    The constructor uses ``...`` as its sentinel so that "not provided" can be told
    apart from an explicit ``None``.

    :raises ValueError: If an environment or config file value can't be parsed.
    """

    CONFIG_FIELDS: ClassVar[Mapping[str, _FieldSpec]] = {
        "region": _FieldSpec(
            env_vars=("AWS_REGION", "AWS_DEFAULT_REGION"), config_key="region"
        ),
        "endpoint_url": _FieldSpec(
            env_vars=("AWS_ENDPOINT_URL",), config_key="endpoint_url"
        ),
        "use_fips_endpoint": _FieldSpec(
            default=False,
            env_vars=("AWS_USE_FIPS_ENDPOINT",),
            config_key="use_fips_endpoint",
            parser=_parse_bool,
        ),
        "use_dualstack_endpoint": _FieldSpec(
            default=False,
            env_vars=("AWS_USE_DUALSTACK_ENDPOINT",),
            config_key="use_dualstack_endpoint",
            parser=_parse_bool,
        ),
        "max_attempts": _FieldSpec(
            env_vars=("AWS_MAX_ATTEMPTS",),
            config_key="max_attempts",
            parser=_parse_positive_int,
        ),
        "retry_mode": _FieldSpec(
            default="standard",
            env_vars=("AWS_RETRY_MODE",),
            config_key="retry_mode",
            parser=_parse_retry_mode,
        ),
        "connect_timeout": _FieldSpec(
            default=60.0, config_key="connect_timeout", parser=_parse_seconds
        ),
        "read_timeout": _FieldSpec(
            default=60.0, config_key="read_timeout", parser=_parse_seconds
        ),
        "aws_access_key_id": _FieldSpec(config_key="aws_access_key_id"),
        "aws_secret_access_key": _FieldSpec(config_key="aws_secret_access_key"),
        "aws_session_token": _FieldSpec(config_key="aws_session_token"),
        "user_agent_extra": _FieldSpec(),
        "credentials_resolver": _FieldSpec(),
        "retry_strategy": _FieldSpec(),
        "http_client": _FieldSpec(),
        "telemetry_provider": _FieldSpec(),
    }

    region: str | None = _Setting()  # type: ignore[assignment]
    endpoint_url: str | None = _Setting()  # type: ignore[assignment]
    use_fips_endpoint: bool = _Setting()  # type: ignore[assignment]
    use_dualstack_endpoint: bool = _Setting()  # type: ignore[assignment]
    max_attempts: int | None = _Setting()  # type: ignore[assignment]
    retry_mode: str = _Setting()  # type: ignore[assignment]
    connect_timeout: float | None = _Setting()  # type: ignore[assignment]
    read_timeout: float | None = _Setting()  # type: ignore[assignment]
    aws_access_key_id: str | None = _Setting()  # type: ignore[assignment]
    aws_secret_access_key: str | None = _Setting()  # type: ignore[assignment]
    aws_session_token: str | None = _Setting()  # type: ignore[assignment]
    user_agent_extra: str | None = _Setting()  # type: ignore[assignment]
    credentials_resolver: CredentialsResolver | None = _Setting()  # type: ignore[assignment]
    retry_strategy: RetryStrategy | None = _Setting()  # type: ignore[assignment]
    http_client: HTTPClient | None = _Setting()  # type: ignore[assignment]
    telemetry_provider: "TelemetryProvider | None" = _Setting()  # type: ignore[assignment]

    def __init__(
        self,
        *,
        region: str | None = ...,  # type: ignore[assignment]
        endpoint_url: str | None = ...,  # type: ignore[assignment]
        use_fips_endpoint: bool = ...,  # type: ignore[assignment]
        use_dualstack_endpoint: bool = ...,  # type: ignore[assignment]
        max_attempts: int | None = ...,  # type: ignore[assignment]
        retry_mode: str = ...,  # type: ignore[assignment]
        connect_timeout: float | None = ...,  # type: ignore[assignment]
        read_timeout: float | None = ...,  # type: ignore[assignment]
        aws_access_key_id: str | None = ...,  # type: ignore[assignment]
        aws_secret_access_key: str | None = ...,  # type: ignore[assignment]
        aws_session_token: str | None = ...,  # type: ignore[assignment]
        user_agent_extra: str | None = ...,  # type: ignore[assignment]
        credentials_resolver: CredentialsResolver | None = ...,  # type: ignore[assignment]
        retry_strategy: RetryStrategy | None = ...,  # type: ignore[assignment]
        http_client: HTTPClient | None = ...,  # type: ignore[assignment]
        telemetry_provider: "TelemetryProvider | None" = ...,  # type: ignore[assignment]
    ) -> None:
        constructor_values = {
            k: v for k, v in locals().items() if k != "self" and v is not ...
        }
        if (mode := constructor_values.get("retry_mode")) is not None:
            _parse_retry_mode("retry_mode", mode)

        environ = os.environ
        profile = environ.get("AWS_PROFILE", "default")
        config_file_values = _load_config_file(profile)

        self._values: dict[str, ConfigValue] = {
            name: self._resolve_field(
                name, spec, constructor_values, environ, config_file_values
            )
            for name, spec in self.CONFIG_FIELDS.items()
        }

    @staticmethod
    def _resolve_field(
        name: str,
        spec: _FieldSpec,
        constructor_values: Mapping[str, Any],
        environ: Mapping[str, str],
        config_file_values: Mapping[str, str],
    ) -> ConfigValue:
        if name in constructor_values:
            return ConfigValue(constructor_values[name], SOURCE_CONSTRUCTOR)

        for env_var in spec.env_vars:
            if raw := environ.get(env_var):
                value = spec.parser(env_var, raw) if spec.parser else raw
                return ConfigValue(value, SOURCE_ENVIRONMENT)

        if spec.config_key is not None:
            if raw := config_file_values.get(spec.config_key):
                value = spec.parser(spec.config_key, raw) if spec.parser else raw
                return ConfigValue(value, SOURCE_CONFIG_FILE)

        return ConfigValue(spec.default, SOURCE_DEFAULT)

    def get_config_value(self, name: str) -> ConfigValue:
        """Return a resolved field together with where it came from.

        :raises KeyError: If ``name`` isn't a config field.
        """
        try:
            return self._values[name]
        except KeyError:
            raise KeyError(f"Unknown config field: {name!r}") from None

    def resolve_credentials_resolver(self) -> CredentialsResolver:
        """The configured resolver, static keys if both are set, or the default
        chain."""
        if self.credentials_resolver is not None:
            return self.credentials_resolver
        if self.aws_access_key_id and self.aws_secret_access_key:
            return StaticCredentialsResolver(
                AWSCredentialIdentity(
                    access_key_id=self.aws_access_key_id,
                    secret_access_key=self.aws_secret_access_key,
                    session_token=self.aws_session_token,
                )
            )
        return default_credentials_chain()

    def resolve_retry_strategy(self) -> RetryStrategy:
        if self.retry_strategy is not None:
            return self.retry_strategy
        return retry_strategy_for(self.retry_mode, self.max_attempts)

    def __repr__(self) -> str:
        shown = {
            name: value.value
            for name, value in self._values.items()
            if name not in ("aws_secret_access_key", "aws_session_token")
        }
        return f"ClientConfig({shown!r})"
