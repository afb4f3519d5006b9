#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import json
from typing import Any

import pytest
from aws_sdk_signers import URI, AWSCredentialIdentity

from aws_service_clients.auth import AnonymousSigner, Signer, SigV4Signer
from aws_service_clients.endpoints import Endpoint
from aws_service_clients.eventstream import EventStream
from aws_service_clients.exceptions import TransportError
from aws_service_clients.identity import StaticCredentialsResolver
from aws_service_clients.outcome import ErrorKind, Outcome
from aws_service_clients.protocols import protocol_for
from aws_service_clients.retries import (
    ExponentialRetryBackoffStrategy,
    SimpleRetryStrategy,
)
from aws_service_clients.services.kinesis import SERVICE as KINESIS
from aws_service_clients.testing import MockHTTPClient, encode_event_message
from aws_service_clients.transport import TransportCore, build_user_agent

ENDPOINT = Endpoint(
    uri=URI(host="kinesis.us-west-2.amazonaws.com", path="/"),
    signing_region="us-west-2",
)
SIGNER = SigV4Signer(
    signing_name="kinesis",
    region="us-west-2",
    credentials_resolver=StaticCredentialsResolver(
        AWSCredentialIdentity(access_key_id="AKID", secret_access_key="SECRET")
    ),
)


def _transport(http_client: MockHTTPClient, max_attempts: int = 3) -> TransportCore:
    return TransportCore(
        service=KINESIS,
        protocol=protocol_for(KINESIS),
        http_client=http_client,
        retry_strategy=SimpleRetryStrategy(
            backoff_strategy=ExponentialRetryBackoffStrategy(backoff_scale_value=0),
            max_attempts=max_attempts,
        ),
        user_agent_extra="app/orders",
    )


async def _list_streams(
    transport: TransportCore, signer: Signer = SIGNER
) -> Outcome[Any]:
    return await transport.make_request(
        operation=KINESIS.operation("ListStreams"),
        request={"Limit": 10},
        endpoint=ENDPOINT,
        method="POST",
        signer=signer,
    )


async def test_successful_request() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(200, body=b'{"StreamNames": ["orders"]}')

    outcome = await _list_streams(_transport(http_client))

    assert outcome.is_success
    assert outcome.result == {"StreamNames": ["orders"]}

    (request,) = http_client.captured_requests
    assert request.method == "POST"
    assert request.destination.host == "kinesis.us-west-2.amazonaws.com"
    assert json.loads(request.body) == {"Limit": 10}
    assert request.fields["X-Amz-Target"].as_string() == "Kinesis_20131202.ListStreams"
    assert request.fields["Authorization"].as_string().startswith("AWS4-HMAC-SHA256")
    user_agent = request.fields["User-Agent"].as_string()
    assert user_agent.startswith("aws-service-clients/")
    assert user_agent.endswith(" app/orders")
    assert http_client.captured_configs[0] is not None
    assert not http_client.captured_configs[0].stream


async def test_unsigned_request() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(200)

    outcome = await _list_streams(_transport(http_client), AnonymousSigner())

    assert outcome.is_success
    assert outcome.result == {}
    assert "Authorization" not in http_client.captured_requests[0].fields


async def test_method_comes_from_caller() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(200)

    await _transport(http_client).make_request(
        operation=KINESIS.operation("ListStreams"),
        request=None,
        endpoint=ENDPOINT,
        method="GET",
        signer=AnonymousSigner(),
    )

    assert http_client.captured_requests[0].method == "GET"


async def test_retries_server_errors() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(500, body=b'{"__type": "InternalFailure"}')
    http_client.add_response(200, body=b'{"StreamNames": []}')

    outcome = await _list_streams(_transport(http_client))

    assert outcome.result == {"StreamNames": []}
    assert http_client.call_count == 2
    for request in http_client.captured_requests:
        assert "Authorization" in request.fields


async def test_gives_up_after_max_attempts() -> None:
    http_client = MockHTTPClient()
    for _ in range(3):
        http_client.add_response(503, headers=[("x-amzn-RequestId", "req-9")])

    outcome = await _list_streams(_transport(http_client))

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.SERVICE
    assert outcome.error.code == "Http503"
    assert outcome.error.status == 503
    assert outcome.error.request_id == "req-9"
    assert outcome.error.retryable
    assert http_client.call_count == 3


async def test_client_errors_are_not_retried() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(
        400,
        body=b'{"__type": "ResourceNotFoundException", "message": "Stream not found"}',
    )

    outcome = await _list_streams(_transport(http_client))

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.SERVICE
    assert outcome.error.code == "ResourceNotFoundException"
    assert outcome.error.message == "Stream not found"
    assert not outcome.error.retryable
    assert http_client.call_count == 1


async def test_transport_errors() -> None:
    http_client = MockHTTPClient()
    http_client.add_error(TransportError("connection reset"))
    http_client.add_error(TransportError("connection reset"))

    outcome = await _list_streams(_transport(http_client, max_attempts=2))

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.TRANSPORT
    assert outcome.error.code == "TransportError"
    assert outcome.error.message == "connection reset"
    assert http_client.call_count == 2


async def test_credential_errors_are_transport_failures() -> None:
    http_client = MockHTTPClient()
    signer = SigV4Signer(
        signing_name="kinesis",
        region=None,
        credentials_resolver=StaticCredentialsResolver(
            AWSCredentialIdentity(access_key_id="AKID", secret_access_key="SECRET")
        ),
    )
    endpoint = Endpoint(uri=ENDPOINT.uri)

    outcome = await _transport(http_client).make_request(
        operation=KINESIS.operation("ListStreams"),
        request=None,
        endpoint=endpoint,
        method="POST",
        signer=signer,
    )

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.TRANSPORT
    assert outcome.error.code == "IdentityError"
    assert http_client.call_count == 0


async def test_event_stream_response() -> None:
    records = {"Records": [], "ContinuationSequenceNumber": "1"}
    message = encode_event_message(
        {
            ":message-type": "event",
            ":event-type": "SubscribeToShardEvent",
            ":content-type": "application/json",
        },
        json.dumps(records).encode(),
    )
    http_client = MockHTTPClient()
    http_client.add_response(200, body=[message[:10], message[10:]])

    outcome = await _transport(http_client).make_request(
        operation=KINESIS.operation("SubscribeToShard"),
        request={"ConsumerARN": "arn", "ShardId": "shardId-0"},
        endpoint=ENDPOINT,
        method="POST",
        signer=SIGNER,
    )

    assert http_client.captured_configs[0] is not None
    assert http_client.captured_configs[0].stream
    stream = outcome.unwrap()
    assert isinstance(stream, EventStream)
    events = [event async for event in stream]
    assert events == [{"SubscribeToShardEvent": records}]


async def test_event_stream_error_response() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(
        400, body=b'{"__type": "ResourceInUseException", "message": "busy"}'
    )

    outcome = await _transport(http_client).make_request(
        operation=KINESIS.operation("SubscribeToShard"),
        request={"ConsumerARN": "arn"},
        endpoint=ENDPOINT,
        method="POST",
        signer=SIGNER,
    )

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.SERVICE
    assert outcome.error.code == "ResourceInUseException"


async def test_close_closes_http_client() -> None:
    http_client = MockHTTPClient()
    await _transport(http_client).close()
    assert http_client.closed


def test_user_agent(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("AWS_EXECUTION_ENV", raising=False)
    user_agent = build_user_agent(KINESIS)
    components = user_agent.split(" ")

    assert components[0].startswith("aws-service-clients/")
    assert "ua/2.1" in components
    assert "api/kinesis#2013-12-02" in components
    assert any(c.startswith("lang/python#") for c in components)
    assert not any(c.startswith("exec-env/") for c in components)


def test_user_agent_extras(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AWS_EXECUTION_ENV", "AWS Lambda")
    user_agent = build_user_agent(KINESIS, "app/orders")
    assert user_agent.endswith("exec-env/AWS-Lambda app/orders")
