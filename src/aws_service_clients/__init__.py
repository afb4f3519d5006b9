#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import importlib.metadata

__version__: str = importlib.metadata.version("aws-service-clients")

from .client import ServiceClient  # noqa: E402
from .config import ClientConfig  # noqa: E402
from .outcome import ErrorKind, OperationError, Outcome  # noqa: E402
from .services import (  # noqa: E402
    ALL_CLIENTS,
    BudgetsClient,
    DocDBElasticClient,
    IoTDeviceAdvisorClient,
    KinesisAnalyticsV2Client,
    KinesisClient,
    PrivateNetworksClient,
    RAMClient,
    SecurityLakeClient,
    SWFClient,
    TextractClient,
)
from .telemetry import TelemetryProvider  # noqa: E402

__all__ = (
    "ALL_CLIENTS",
    "BudgetsClient",
    "ClientConfig",
    "DocDBElasticClient",
    "ErrorKind",
    "IoTDeviceAdvisorClient",
    "KinesisAnalyticsV2Client",
    "KinesisClient",
    "OperationError",
    "Outcome",
    "PrivateNetworksClient",
    "RAMClient",
    "SecurityLakeClient",
    "ServiceClient",
    "SWFClient",
    "TelemetryProvider",
    "TextractClient",
)
