#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from .budgets import BudgetsClient
from .docdb_elastic import DocDBElasticClient
from .iotdeviceadvisor import IoTDeviceAdvisorClient
from .kinesis import KinesisClient
from .kinesisanalyticsv2 import KinesisAnalyticsV2Client
from .privatenetworks import PrivateNetworksClient
from .ram import RAMClient
from .securitylake import SecurityLakeClient
from .swf import SWFClient
from .textract import TextractClient

ALL_CLIENTS = (
    BudgetsClient,
    DocDBElasticClient,
    IoTDeviceAdvisorClient,
    KinesisClient,
    KinesisAnalyticsV2Client,
    PrivateNetworksClient,
    RAMClient,
    SecurityLakeClient,
    SWFClient,
    TextractClient,
)

__all__ = (
    "ALL_CLIENTS",
    "BudgetsClient",
    "DocDBElasticClient",
    "IoTDeviceAdvisorClient",
    "KinesisClient",
    "KinesisAnalyticsV2Client",
    "PrivateNetworksClient",
    "RAMClient",
    "SecurityLakeClient",
    "SWFClient",
    "TextractClient",
)
