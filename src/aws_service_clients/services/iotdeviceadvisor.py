#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from ..client import ServiceClient
from ..service import Protocol, ServiceDefinition, index, rest

_SUITE = "/suiteDefinitions/{SuiteDefinitionId}"
_SUITE_RUN = _SUITE + "/suiteRuns/{SuiteRunId}"

SERVICE = ServiceDefinition(
    name="IotDeviceAdvisor",
    signing_name="iotdeviceadvisor",
    endpoint_prefix="api.iotdeviceadvisor",
    protocol=Protocol.REST_JSON_1,
    api_version="2020-09-18",
    lower_camel_members=True,
    operations=index(
        [
            rest("CreateSuiteDefinition", "POST", "/suiteDefinitions"),
            rest("DeleteSuiteDefinition", "DELETE", _SUITE),
            rest("GetEndpoint", "GET", "/endpoint"),
            rest("GetSuiteDefinition", "GET", _SUITE),
            rest("GetSuiteRun", "GET", _SUITE_RUN),
            rest("GetSuiteRunReport", "GET", _SUITE_RUN + "/report"),
            rest("ListSuiteDefinitions", "GET", "/suiteDefinitions"),
            rest("ListSuiteRuns", "GET", "/suiteRuns"),
            rest("ListTagsForResource", "GET", "/tags/{ResourceArn}"),
            rest("StartSuiteRun", "POST", _SUITE + "/suiteRuns"),
            rest("StopSuiteRun", "POST", _SUITE_RUN + "/stop"),
            rest("TagResource", "POST", "/tags/{ResourceArn}"),
            rest(
                "UntagResource",
                "DELETE",
                "/tags/{ResourceArn}",
                "TagKeys",
                query={"TagKeys": "tagKeys"},
            ),
            rest("UpdateSuiteDefinition", "PATCH", _SUITE),
        ]
    ),
)


class IoTDeviceAdvisorClient(ServiceClient):
    """Client for AWS IoT Core Device Advisor."""

    SERVICE = SERVICE
