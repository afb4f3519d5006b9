#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from ..client import ServiceClient
from ..service import GlobalEndpoint, Protocol, ServiceDefinition, index, json_rpc

SERVICE = ServiceDefinition(
    name="Budgets",
    signing_name="budgets",
    endpoint_prefix="budgets",
    protocol=Protocol.AWS_JSON_1_1,
    api_version="2016-10-20",
    target_prefix="AWSBudgetServiceGateway",
    global_endpoints={
        "aws": GlobalEndpoint("budgets.amazonaws.com", "us-east-1"),
        "aws-cn": GlobalEndpoint("budgets.amazonaws.com.cn", "cn-northwest-1"),
    },
    operations=index(
        json_rpc(
            "CreateBudget",
            "CreateBudgetAction",
            "CreateNotification",
            "CreateSubscriber",
            "DeleteBudget",
            "DeleteBudgetAction",
            "DeleteNotification",
            "DeleteSubscriber",
            "DescribeBudget",
            "DescribeBudgetAction",
            "DescribeBudgetActionHistories",
            "DescribeBudgetActionsForAccount",
            "DescribeBudgetActionsForBudget",
            "DescribeBudgetNotificationsForAccount",
            "DescribeBudgetPerformanceHistory",
            "DescribeBudgets",
            "DescribeNotificationsForBudget",
            "DescribeSubscribersForNotification",
            "ExecuteBudgetAction",
            "UpdateBudget",
            "UpdateBudgetAction",
            "UpdateNotification",
            "UpdateSubscriber",
        )
    ),
)


class BudgetsClient(ServiceClient):
    """Client for AWS Budgets.

    Budgets is served from a single global endpoint per partition, so the
    configured region only selects the partition.
    """

    SERVICE = SERVICE
