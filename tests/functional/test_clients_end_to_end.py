#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import json
from typing import Any

from aws_service_clients import (
    BudgetsClient,
    ClientConfig,
    DocDBElasticClient,
    ErrorKind,
    KinesisClient,
    SecurityLakeClient,
    SWFClient,
    TextractClient,
)
from aws_service_clients.exceptions import TransportError
from aws_service_clients.retries import (
    ExponentialRetryBackoffStrategy,
    SimpleRetryStrategy,
)
from aws_service_clients.testing import MockHTTPClient, encode_event_message

STREAM_ARN = "arn:aws:kinesis:us-east-1:123456789012:stream/orders"


def _config(http_client: MockHTTPClient, **kwargs: Any) -> ClientConfig:
    kwargs.setdefault("region", "us-west-2")
    return ClientConfig(
        aws_access_key_id="AKID",
        aws_secret_access_key="SECRET",
        http_client=http_client,
        retry_strategy=SimpleRetryStrategy(
            backoff_strategy=ExponentialRetryBackoffStrategy(backoff_scale_value=0),
            max_attempts=3,
        ),
        **kwargs,
    )


def _credential_scope(authorization: str) -> str:
    credential = authorization.split("Credential=")[1].split(",")[0]
    return "/".join(credential.split("/")[2:])


async def test_kinesis_put_record_is_account_routed() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(
        200, body=b'{"ShardId": "shardId-000000000000", "SequenceNumber": "49"}'
    )

    async with KinesisClient(_config(http_client, region="us-east-1")) as client:
        outcome = await client.put_record(
            {
                "StreamARN": STREAM_ARN,
                "Data": b"order-1",
                "PartitionKey": "orders",
            }
        )

    assert outcome.unwrap() == {
        "ShardId": "shardId-000000000000",
        "SequenceNumber": "49",
    }
    (request,) = http_client.captured_requests
    assert request.method == "POST"
    assert request.destination.host == "123456789012.data-kinesis.us-east-1.amazonaws.com"
    assert request.destination.path == "/"
    assert request.fields["X-Amz-Target"].as_string() == "Kinesis_20131202.PutRecord"
    assert json.loads(request.body) == {
        "StreamARN": STREAM_ARN,
        "Data": "b3JkZXItMQ==",
        "PartitionKey": "orders",
    }
    assert _credential_scope(request.fields["Authorization"].as_string()) == (
        "us-east-1/kinesis/aws4_request"
    )
    assert http_client.closed


async def test_kinesis_arn_region_mismatch_sends_nothing() -> None:
    http_client = MockHTTPClient()

    async with KinesisClient(_config(http_client, region="eu-west-1")) as client:
        outcome = await client.describe_stream_summary({"StreamARN": STREAM_ARN})

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.ENDPOINT_RESOLUTION_FAILURE
    assert "doesn't match the configured region" in outcome.error.message
    assert http_client.call_count == 0


async def test_subscribe_to_shard_streams_events() -> None:
    event = encode_event_message(
        {":message-type": "event", ":event-type": "SubscribeToShardEvent"},
        b'{"Records": [], "ContinuationSequenceNumber": "7", "MillisBehindLatest": 0}',
    )
    http_client = MockHTTPClient()
    http_client.add_response(
        200,
        headers=[("Content-Type", "application/vnd.amazon.eventstream")],
        body=[event[:20], event[20:] + event],
    )

    async with KinesisClient(_config(http_client, region="us-east-1")) as client:
        outcome = await client.subscribe_to_shard(
            {
                "ConsumerARN": STREAM_ARN + "/consumer/app:1",
                "ShardId": "shardId-000000000000",
                "StartingPosition": {"Type": "LATEST"},
            }
        )
        async with outcome.unwrap() as stream:
            events = [e async for e in stream]

    assert [e["SubscribeToShardEvent"]["ContinuationSequenceNumber"] for e in events] == [
        "7",
        "7",
    ]
    (request,) = http_client.captured_requests
    assert request.destination.host == "123456789012.data-kinesis.us-east-1.amazonaws.com"
    assert "Authorization" in request.fields


async def test_budgets_uses_global_endpoint() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(200, body=b'{"Budgets": []}')

    async with BudgetsClient(_config(http_client)) as client:
        outcome = await client.describe_budgets({"AccountId": "123456789012"})

    assert outcome.unwrap() == {"Budgets": []}
    (request,) = http_client.captured_requests
    assert request.destination.host == "budgets.amazonaws.com"
    assert request.fields["X-Amz-Target"].as_string() == (
        "AWSBudgetServiceGateway.DescribeBudgets"
    )
    assert request.fields["Content-Type"].as_string() == "application/x-amz-json-1.1"
    assert _credential_scope(request.fields["Authorization"].as_string()) == (
        "us-east-1/budgets/aws4_request"
    )


async def test_docdb_delete_cluster() -> None:
    arn = "arn:aws:docdb-elastic:us-west-2:123456789012:cluster/abc"
    http_client = MockHTTPClient()
    http_client.add_response(200, body=b'{"cluster": {"status": "DELETING"}}')

    async with DocDBElasticClient(_config(http_client)) as client:
        outcome = await client.delete_cluster({"ClusterArn": arn})

    assert outcome.unwrap() == {"cluster": {"status": "DELETING"}}
    (request,) = http_client.captured_requests
    assert request.method == "DELETE"
    assert request.destination.host == "docdb-elastic.us-west-2.amazonaws.com"
    assert request.destination.path == (
        "/cluster/arn:aws:docdb-elastic:us-west-2:123456789012:cluster%2Fabc"
    )
    assert request.body == b""


async def test_custom_endpoint_url_keeps_base_path() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(200, body=b'{"subscriber": {}}')
    config = _config(http_client, endpoint_url="http://localhost:4566/securitylake")

    async with SecurityLakeClient(config) as client:
        outcome = await client.get_subscriber({"SubscriberId": "sub 1"})

    assert outcome.is_success
    (request,) = http_client.captured_requests
    assert request.destination.scheme == "http"
    assert request.destination.host == "localhost"
    assert request.destination.port == 4566
    assert request.destination.path == "/securitylake/v1/subscribers/sub%201"


async def test_query_parameters() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(200, body=b'{"subscribers": []}')

    async with SecurityLakeClient(_config(http_client)) as client:
        await client.list_subscribers({"MaxResults": 10, "NextToken": "abc"})

    (request,) = http_client.captured_requests
    assert request.method == "GET"
    assert request.destination.path == "/v1/subscribers"
    assert request.destination.query == "maxResults=10&nextToken=abc"


async def test_swf_uses_lower_camel_members() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(200, body=b'{"domainInfos": []}')

    async with SWFClient(_config(http_client)) as client:
        await client.list_domains({"RegistrationStatus": "REGISTERED"})

    (request,) = http_client.captured_requests
    assert request.destination.host == "swf.us-west-2.amazonaws.com"
    assert request.fields["Content-Type"].as_string() == "application/x-amz-json-1.0"
    assert json.loads(request.body) == {"registrationStatus": "REGISTERED"}


async def test_service_error() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(
        400,
        headers=[
            ("x-amzn-RequestId", "req-1"),
            ("Content-Type", "application/x-amz-json-1.1"),
        ],
        body=(
            b'{"__type": "com.amazonaws.textract#InvalidParameterException", '
            b'"Message": "Document is empty"}'
        ),
    )

    async with TextractClient(_config(http_client)) as client:
        outcome = await client.analyze_document({"FeatureTypes": ["TABLES"]})

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.SERVICE
    assert outcome.error.code == "InvalidParameterException"
    assert outcome.error.message == "Document is empty"
    assert outcome.error.request_id == "req-1"
    assert outcome.error.status == 400
    assert not outcome.error.retryable


async def test_transient_failures_are_retried() -> None:
    http_client = MockHTTPClient()
    http_client.add_error(TransportError("connection reset"))
    http_client.add_response(503)
    http_client.add_response(200, body=b'{"Blocks": []}')

    async with TextractClient(_config(http_client)) as client:
        outcome = await client.detect_document_text({"Document": {"Bytes": b"%PDF"}})

    assert outcome.unwrap() == {"Blocks": []}
    assert http_client.call_count == 3


async def test_retries_are_exhausted() -> None:
    http_client = MockHTTPClient()
    for _ in range(3):
        http_client.add_error(TransportError("timed out", is_timeout_error=True))

    async with TextractClient(_config(http_client)) as client:
        outcome = await client.detect_document_text({"Document": {"Bytes": b"%PDF"}})

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.TRANSPORT
    assert outcome.error.retryable
    assert http_client.call_count == 3


async def test_missing_credentials_fail_without_sending() -> None:
    http_client = MockHTTPClient()
    config = ClientConfig(region="us-west-2", http_client=http_client)

    async with TextractClient(config) as client:
        outcome = await client.get_document_analysis({"JobId": "job-1"})

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.TRANSPORT
    assert outcome.error.code == "IdentityError"
    assert http_client.call_count == 0


async def test_malformed_success_body_is_returned_as_error() -> None:
    http_client = MockHTTPClient()
    http_client.add_response(
        200, headers=[("x-amzn-RequestId", "req-3")], body=b"<html>oops</html>"
    )

    async with TextractClient(_config(http_client)) as client:
        outcome = await client.get_document_analysis({"JobId": "job-1"})

    assert outcome.error is not None
    assert outcome.error.kind is ErrorKind.SERVICE
    assert outcome.error.code == "SerializationException"
    assert outcome.error.status == 200
    assert outcome.error.request_id == "req-3"
    assert not outcome.error.retryable
    assert http_client.call_count == 1
