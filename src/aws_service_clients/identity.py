#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import asyncio
import configparser
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from aws_sdk_signers import AWSCredentialIdentity

from .exceptions import IdentityError

logger: Final = logging.getLogger(__name__)


@runtime_checkable
class CredentialsResolver(Protocol):
    """Resolves the AWS credentials used to sign requests."""

    async def get_credentials(self) -> AWSCredentialIdentity:
        """Return credentials.

        :raises IdentityError: If this resolver has no credentials to offer.
        """
        ...


class StaticCredentialsResolver:
    """Resolves a fixed set of credentials."""

    def __init__(self, credentials: AWSCredentialIdentity) -> None:
        self._credentials = credentials

    async def get_credentials(self) -> AWSCredentialIdentity:
        return self._credentials


class EnvironmentCredentialsResolver:
    """Resolves AWS Credentials from system environment variables."""

    def __init__(self) -> None:
        self._credentials: AWSCredentialIdentity | None = None

    async def get_credentials(self) -> AWSCredentialIdentity:
        if self._credentials is not None:
            return self._credentials

        access_key_id = os.getenv("AWS_ACCESS_KEY_ID")
        secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY")
        session_token = os.getenv("AWS_SESSION_TOKEN")

        if not access_key_id or not secret_access_key:
            raise IdentityError(
                "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY are required"
            )

        self._credentials = AWSCredentialIdentity(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token or None,
        )
        return self._credentials


def shared_credentials_path() -> Path:
    if (path := os.getenv("AWS_SHARED_CREDENTIALS_FILE")) is not None:
        return Path(path).expanduser()
    return Path.home() / ".aws" / "credentials"


class SharedCredentialsFileResolver:
    """Resolves credentials from a profile in the shared credentials file.

    The file is ``~/.aws/credentials`` unless ``AWS_SHARED_CREDENTIALS_FILE`` is
    set, and the profile is ``AWS_PROFILE`` or ``default``.
    """

    def __init__(self, *, profile: str | None = None, path: Path | None = None) -> None:
        self._profile = profile
        self._path = path

    async def get_credentials(self) -> AWSCredentialIdentity:
        return await asyncio.to_thread(self._load)

    def _load(self) -> AWSCredentialIdentity:
        path = self._path or shared_credentials_path()
        profile = self._profile or os.getenv("AWS_PROFILE") or "default"

        parser = configparser.RawConfigParser()
        try:
            read = parser.read(path)
        except configparser.Error as e:
            raise IdentityError(f"Unable to parse credentials file {path}: {e}") from e
        if not read:
            raise IdentityError(f"Credentials file {path} does not exist")
        if not parser.has_section(profile):
            raise IdentityError(f"Profile {profile!r} not found in {path}")

        section = parser[profile]
        access_key_id = section.get("aws_access_key_id")
        secret_access_key = section.get("aws_secret_access_key")
        if not access_key_id or not secret_access_key:
            raise IdentityError(
                f"Profile {profile!r} in {path} is missing aws_access_key_id or "
                "aws_secret_access_key"
            )
        return AWSCredentialIdentity(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=section.get("aws_session_token") or None,
        )


class ChainedCredentialsResolver:
    """Attempts to resolve credentials by checking a sequence of sub-resolvers.

    If a nested resolver raises a :py:class:`IdentityError`, the next resolver in
    the chain will be attempted. The first credentials found are cached until they
    expire.
    """

    def __init__(self, resolvers: Sequence[CredentialsResolver]) -> None:
        """Construct a ChainedCredentialsResolver.

        :param resolvers: The sequence of resolvers to resolve credentials from.
        """
        self._resolvers = resolvers
        self._cached: AWSCredentialIdentity | None = None

    async def get_credentials(self) -> AWSCredentialIdentity:
        if self._cached is None or self._cached.is_expired:
            self._cached = await self._resolve()
        return self._cached

    async def _resolve(self) -> AWSCredentialIdentity:
        logger.debug("Attempting to resolve credentials from resolver chain.")
        for resolver in self._resolvers:
            try:
                logger.debug("Attempting to resolve credentials from %s.", type(resolver))
                return await resolver.get_credentials()
            except IdentityError as e:
                logger.debug(
                    "Failed to resolve credentials from %s: %s", type(resolver), e
                )

        raise IdentityError("Failed to resolve credentials from resolver chain.")


def default_credentials_chain() -> CredentialsResolver:
    """Creates the default credentials chain: environment, then the shared file."""
    return ChainedCredentialsResolver(
        resolvers=(EnvironmentCredentialsResolver(), SharedCredentialsFileResolver())
    )
