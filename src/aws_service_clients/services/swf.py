#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from ..client import ServiceClient
from ..service import Protocol, ServiceDefinition, index, json_rpc

SERVICE = ServiceDefinition(
    name="SWF",
    signing_name="swf",
    endpoint_prefix="swf",
    protocol=Protocol.AWS_JSON_1_0,
    api_version="2012-01-25",
    target_prefix="SimpleWorkflowService",
    lower_camel_members=True,
    operations=index(
        json_rpc(
            "CountClosedWorkflowExecutions",
            "CountOpenWorkflowExecutions",
            "CountPendingActivityTasks",
            "CountPendingDecisionTasks",
            "DeprecateActivityType",
            "DeprecateDomain",
            "DeprecateWorkflowType",
            "DescribeActivityType",
            "DescribeDomain",
            "DescribeWorkflowExecution",
            "DescribeWorkflowType",
            "GetWorkflowExecutionHistory",
            "ListActivityTypes",
            "ListClosedWorkflowExecutions",
            "ListDomains",
            "ListOpenWorkflowExecutions",
            "ListTagsForResource",
            "ListWorkflowTypes",
            "PollForActivityTask",
            "PollForDecisionTask",
            "RecordActivityTaskHeartbeat",
            "RegisterActivityType",
            "RegisterDomain",
            "RegisterWorkflowType",
            "RequestCancelWorkflowExecution",
            "RespondActivityTaskCanceled",
            "RespondActivityTaskCompleted",
            "RespondActivityTaskFailed",
            "RespondDecisionTaskCompleted",
            "SignalWorkflowExecution",
            "StartWorkflowExecution",
            "TagResource",
            "TerminateWorkflowExecution",
            "UndeprecateActivityType",
            "UndeprecateDomain",
            "UndeprecateWorkflowType",
            "UntagResource",
        )
    ),
)


class SWFClient(ServiceClient):
    """Client for Amazon Simple Workflow Service.

    ``PollForActivityTask`` and ``PollForDecisionTask`` are long polls that the
    service holds open for up to 60 seconds, so configure ``read_timeout`` above
    that.
    """

    SERVICE = SERVICE
