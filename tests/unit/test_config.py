#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import os
from pathlib import Path

import pytest

from aws_service_clients.config import (
    SOURCE_CONFIG_FILE,
    SOURCE_CONSTRUCTOR,
    SOURCE_DEFAULT,
    SOURCE_ENVIRONMENT,
    SOURCE_IN_CODE_UPDATE,
    ClientConfig,
)
from aws_service_clients.identity import (
    ChainedCredentialsResolver,
    StaticCredentialsResolver,
)
from aws_service_clients.retries import SimpleRetryStrategy, StandardRetryStrategy


def _write_config(contents: str) -> None:
    Path(os.environ["AWS_CONFIG_FILE"]).write_text(contents)


class TestClientConfig:
    def test_defaults(self) -> None:
        config = ClientConfig()

        assert config.region is None
        assert config.endpoint_url is None
        assert config.use_fips_endpoint is False
        assert config.use_dualstack_endpoint is False
        assert config.retry_mode == "standard"
        assert config.connect_timeout == 60.0
        assert config.get_config_value("region").source == SOURCE_DEFAULT

    def test_constructor_value(self) -> None:
        config = ClientConfig(region="us-east-1")
        assert config.region == "us-east-1"
        assert config.get_config_value("region").source == SOURCE_CONSTRUCTOR

    def test_explicit_none_is_a_constructor_value(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("AWS_REGION", "us-west-2")
        config = ClientConfig(region=None)
        assert config.region is None
        assert config.get_config_value("region").source == SOURCE_CONSTRUCTOR

    @pytest.mark.parametrize(
        "field_name, env_var, raw, expected",
        [
            ("region", "AWS_REGION", "us-west-2", "us-west-2"),
            ("region", "AWS_DEFAULT_REGION", "eu-west-1", "eu-west-1"),
            ("endpoint_url", "AWS_ENDPOINT_URL", "http://localhost:4566", "http://localhost:4566"),
            ("use_fips_endpoint", "AWS_USE_FIPS_ENDPOINT", "TRUE", True),
            ("use_dualstack_endpoint", "AWS_USE_DUALSTACK_ENDPOINT", "false", False),
            ("max_attempts", "AWS_MAX_ATTEMPTS", "7", 7),
            ("retry_mode", "AWS_RETRY_MODE", "legacy", "legacy"),
        ],
    )
    def test_environment(
        self,
        monkeypatch: pytest.MonkeyPatch,
        field_name: str,
        env_var: str,
        raw: str,
        expected: object,
    ) -> None:
        monkeypatch.setenv(env_var, raw)
        config = ClientConfig()
        assert getattr(config, field_name) == expected
        assert config.get_config_value(field_name).source == SOURCE_ENVIRONMENT

    def test_aws_region_wins_over_default_region(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("AWS_REGION", "us-west-2")
        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-1")
        assert ClientConfig().region == "us-west-2"

    def test_config_file_default_profile(self) -> None:
        _write_config(
            "[default]\n"
            "region = ap-south-1\n"
            "max_attempts = 4\n"
            "read_timeout = 2.5\n"
            "use_fips_endpoint = true\n"
        )
        config = ClientConfig()

        assert config.region == "ap-south-1"
        assert config.max_attempts == 4
        assert config.read_timeout == 2.5
        assert config.use_fips_endpoint is True
        assert config.get_config_value("region").source == SOURCE_CONFIG_FILE

    def test_config_file_named_profile(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_config(
            "[default]\nregion = us-east-1\n\n[profile dev]\nregion = eu-central-1\n"
        )
        monkeypatch.setenv("AWS_PROFILE", "dev")
        assert ClientConfig().region == "eu-central-1"

    def test_missing_profile_uses_defaults(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_config("[default]\nregion = us-east-1\n")
        monkeypatch.setenv("AWS_PROFILE", "missing")
        assert ClientConfig().region is None

    def test_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_config("[default]\nregion = us-east-1\nretry_mode = legacy\n")
        monkeypatch.setenv("AWS_REGION", "us-west-2")

        from_env = ClientConfig()
        from_constructor = ClientConfig(region="eu-west-1")

        assert from_env.region == "us-west-2"
        assert from_env.retry_mode == "legacy"
        assert from_constructor.region == "eu-west-1"

    def test_in_code_update(self) -> None:
        config = ClientConfig(region="us-east-1")
        config.region = "us-west-2"
        assert config.region == "us-west-2"
        assert config.get_config_value("region").source == SOURCE_IN_CODE_UPDATE

    @pytest.mark.parametrize(
        "env_var, raw, message",
        [
            ("AWS_USE_FIPS_ENDPOINT", "yes", "must be 'true' or 'false'"),
            ("AWS_MAX_ATTEMPTS", "three", "must be an integer"),
            ("AWS_MAX_ATTEMPTS", "0", "must be at least 1"),
            ("AWS_RETRY_MODE", "adaptive", "must be one of"),
        ],
    )
    def test_invalid_environment_values(
        self, monkeypatch: pytest.MonkeyPatch, env_var: str, raw: str, message: str
    ) -> None:
        monkeypatch.setenv(env_var, raw)
        with pytest.raises(ValueError, match=message):
            ClientConfig()

    def test_invalid_config_file(self) -> None:
        _write_config("region = us-east-1\n")
        with pytest.raises(ValueError, match="Unable to parse config file"):
            ClientConfig()

    def test_invalid_constructor_retry_mode(self) -> None:
        with pytest.raises(ValueError, match="retry_mode"):
            ClientConfig(retry_mode="adaptive")

    def test_unknown_field(self) -> None:
        with pytest.raises(KeyError, match="Unknown config field"):
            ClientConfig().get_config_value("nope")

    def test_repr_hides_secrets(self) -> None:
        config = ClientConfig(
            aws_access_key_id="AKID",
            aws_secret_access_key="SECRET",
            aws_session_token="TOKEN",
        )
        assert "AKID" in repr(config)
        assert "SECRET" not in repr(config)
        assert "TOKEN" not in repr(config)


class TestResolvers:
    def test_explicit_credentials_resolver(self) -> None:
        resolver = ChainedCredentialsResolver([])
        config = ClientConfig(
            credentials_resolver=resolver,
            aws_access_key_id="AKID",
            aws_secret_access_key="SECRET",
        )
        assert config.resolve_credentials_resolver() is resolver

    async def test_static_keys(self) -> None:
        config = ClientConfig(
            aws_access_key_id="AKID",
            aws_secret_access_key="SECRET",
            aws_session_token="TOKEN",
        )
        resolver = config.resolve_credentials_resolver()

        assert isinstance(resolver, StaticCredentialsResolver)
        credentials = await resolver.get_credentials()
        assert credentials.access_key_id == "AKID"
        assert credentials.session_token == "TOKEN"

    async def test_keys_from_config_file(self) -> None:
        _write_config(
            "[default]\naws_access_key_id = FILEKEY\naws_secret_access_key = FILESECRET\n"
        )
        credentials = await ClientConfig().resolve_credentials_resolver().get_credentials()
        assert credentials.access_key_id == "FILEKEY"

    def test_default_chain(self) -> None:
        resolver = ClientConfig(aws_access_key_id="AKID").resolve_credentials_resolver()
        assert isinstance(resolver, ChainedCredentialsResolver)

    @pytest.mark.parametrize(
        "kwargs, expected_cls, expected_attempts",
        [
            ({}, StandardRetryStrategy, 3),
            ({"max_attempts": 6}, StandardRetryStrategy, 6),
            ({"retry_mode": "simple"}, SimpleRetryStrategy, 5),
        ],
    )
    def test_retry_strategy(
        self, kwargs: dict[str, object], expected_cls: type, expected_attempts: int
    ) -> None:
        strategy = ClientConfig(**kwargs).resolve_retry_strategy()  # type: ignore
        assert isinstance(strategy, expected_cls)
        assert strategy.max_attempts == expected_attempts  # type: ignore

    def test_explicit_retry_strategy(self) -> None:
        strategy = SimpleRetryStrategy(max_attempts=1)
        assert ClientConfig(retry_strategy=strategy).resolve_retry_strategy() is strategy
