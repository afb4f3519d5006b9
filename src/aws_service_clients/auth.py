#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import logging
from hashlib import sha256
from typing import Protocol, runtime_checkable

from aws_sdk_signers import AsyncSigV4Signer, AWSRequest, Field, SigV4SigningProperties

from .endpoints import Endpoint
from .exceptions import IdentityError
from .http import HTTPRequest
from .identity import CredentialsResolver

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class Signer(Protocol):
    """Applies authentication material to a request bound for an endpoint."""

    async def sign(self, request: HTTPRequest, endpoint: Endpoint) -> HTTPRequest:
        """Return a signed copy of ``request``.

        :raises IdentityError: If no credentials are available.
        """
        ...


class AnonymousSigner:
    """A signer for operations that are sent unsigned."""

    async def sign(self, request: HTTPRequest, endpoint: Endpoint) -> HTTPRequest:
        return request


class SigV4Signer:
    """Signs requests with AWS Signature Version 4."""

    def __init__(
        self,
        *,
        signing_name: str,
        region: str | None,
        credentials_resolver: CredentialsResolver,
        signer: AsyncSigV4Signer | None = None,
    ) -> None:
        """
        :param signing_name: The service name in the credential scope.
        :param region: The signing region. An endpoint that pins its own signing
            region takes precedence.
        :param credentials_resolver: Where to get credentials from on every sign.
        """
        self._signing_name = signing_name
        self._region = region
        self._credentials_resolver = credentials_resolver
        self._signer = signer or AsyncSigV4Signer()

    async def sign(self, request: HTTPRequest, endpoint: Endpoint) -> HTTPRequest:
        region = endpoint.signing_region or self._region
        if region is None:
            raise IdentityError("A signing region is required to sign requests")

        credentials = await self._credentials_resolver.get_credentials()

        fields = request.fields
        # The payload is already in memory, so hash it here rather than handing
        # the signer a stream to read.
        if "X-Amz-Content-SHA256" not in fields:
            fields.set_field(
                Field(
                    name="X-Amz-Content-SHA256",
                    values=[sha256(request.body).hexdigest()],
                )
            )

        signing_properties = SigV4SigningProperties(
            region=region, service=self._signing_name
        )
        _LOGGER.debug("Signing request with properties: %s", signing_properties)
        try:
            signed = await self._signer.sign(
                signing_properties=signing_properties,
                http_request=AWSRequest(
                    destination=request.destination,
                    method=request.method,
                    body=None,
                    fields=fields,
                ),
                identity=credentials,
            )
        except ValueError as e:
            # Raised for expired credentials.
            raise IdentityError(str(e)) from e
        return HTTPRequest(
            destination=request.destination,
            method=request.method,
            fields=signed.fields,
            body=request.body,
        )
