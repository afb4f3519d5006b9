#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from ..client import ServiceClient
from ..service import Protocol, ServiceDefinition, index, json_rpc

SERVICE = ServiceDefinition(
    name="Kinesis Analytics V2",
    signing_name="kinesisanalytics",
    endpoint_prefix="kinesisanalytics",
    protocol=Protocol.AWS_JSON_1_1,
    api_version="2018-05-23",
    target_prefix="KinesisAnalytics_20180523",
    operations=index(
        json_rpc(
            "AddApplicationCloudWatchLoggingOption",
            "AddApplicationInput",
            "AddApplicationInputProcessingConfiguration",
            "AddApplicationOutput",
            "AddApplicationReferenceDataSource",
            "AddApplicationVpcConfiguration",
            "CreateApplication",
            "CreateApplicationPresignedUrl",
            "CreateApplicationSnapshot",
            "DeleteApplication",
            "DeleteApplicationCloudWatchLoggingOption",
            "DeleteApplicationInputProcessingConfiguration",
            "DeleteApplicationOutput",
            "DeleteApplicationReferenceDataSource",
            "DeleteApplicationSnapshot",
            "DeleteApplicationVpcConfiguration",
            "DescribeApplication",
            "DescribeApplicationSnapshot",
            "DescribeApplicationVersion",
            "DiscoverInputSchema",
            "ListApplicationSnapshots",
            "ListApplicationVersions",
            "ListApplications",
            "ListTagsForResource",
            "RollbackApplication",
            "StartApplication",
            "StopApplication",
            "TagResource",
            "UntagResource",
            "UpdateApplication",
            "UpdateApplicationMaintenanceConfiguration",
        )
    ),
)


class KinesisAnalyticsV2Client(ServiceClient):
    """Client for Amazon Managed Service for Apache Flink (Kinesis Analytics V2)."""

    SERVICE = SERVICE
