#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from ..client import ServiceClient
from ..endpoints import KinesisEndpointProvider
from ..operations import OperationDescriptor
from ..service import Protocol, ServiceDefinition, index


def _control(name: str, *context: str) -> OperationDescriptor:
    return OperationDescriptor(
        name=name,
        context_params=context,
        static_context={"OperationType": "control"},
    )


def _data(name: str, *context: str, event_stream: bool = False) -> OperationDescriptor:
    return OperationDescriptor(
        name=name,
        context_params=context,
        static_context={"OperationType": "data"},
        event_stream=event_stream,
    )


SERVICE = ServiceDefinition(
    name="Kinesis",
    signing_name="kinesis",
    endpoint_prefix="kinesis",
    protocol=Protocol.AWS_JSON_1_1,
    api_version="2013-12-02",
    target_prefix="Kinesis_20131202",
    operations=index(
        [
            _control("AddTagsToStream", "StreamARN"),
            OperationDescriptor(name="CreateStream"),
            _control("DecreaseStreamRetentionPeriod", "StreamARN"),
            _control("DeleteStream", "StreamARN"),
            _control("DeregisterStreamConsumer", "StreamARN", "ConsumerARN"),
            OperationDescriptor(name="DescribeLimits"),
            _control("DescribeStream", "StreamARN"),
            _control("DescribeStreamConsumer", "StreamARN", "ConsumerARN"),
            _control("DescribeStreamSummary", "StreamARN"),
            _control("DisableEnhancedMonitoring", "StreamARN"),
            _control("EnableEnhancedMonitoring", "StreamARN"),
            _data("GetRecords", "StreamARN"),
            _data("GetShardIterator", "StreamARN"),
            _control("IncreaseStreamRetentionPeriod", "StreamARN"),
            _control("ListShards", "StreamARN"),
            _control("ListStreamConsumers", "StreamARN"),
            OperationDescriptor(name="ListStreams"),
            _control("ListTagsForStream", "StreamARN"),
            _control("MergeShards", "StreamARN"),
            _data("PutRecord", "StreamARN"),
            _data("PutRecords", "StreamARN"),
            _control("RegisterStreamConsumer", "StreamARN"),
            _control("RemoveTagsFromStream", "StreamARN"),
            _control("SplitShard", "StreamARN"),
            _control("StartStreamEncryption", "StreamARN"),
            _control("StopStreamEncryption", "StreamARN"),
            _data("SubscribeToShard", "ConsumerARN", event_stream=True),
            _control("UpdateShardCount", "StreamARN"),
            _control("UpdateStreamMode", "StreamARN"),
        ]
    ),
)


class KinesisClient(ServiceClient):
    """Client for Amazon Kinesis Data Streams.

    Calls that carry a ``StreamARN`` or ``ConsumerARN`` are routed to the account
    specific control or data plane endpoint of the stream owner.

    ``SubscribeToShard`` succeeds with an :py:class:`~aws_service_clients.eventstream.EventStream`
    that yields ``{"SubscribeToShardEvent": {...}}`` records as they arrive::

        outcome = await client.subscribe_to_shard(
            {"ConsumerARN": arn, "ShardId": "shardId-000000000000",
             "StartingPosition": {"Type": "LATEST"}}
        )
        async with outcome.unwrap() as stream:
            async for event in stream:
                ...
    """

    SERVICE = SERVICE
    ENDPOINT_PROVIDER = KinesisEndpointProvider
