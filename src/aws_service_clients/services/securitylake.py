#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from ..client import ServiceClient
from ..service import Protocol, ServiceDefinition, index, rest

_SUBSCRIBER = "/v1/subscribers/{SubscriberId}"

SERVICE = ServiceDefinition(
    name="SecurityLake",
    signing_name="securitylake",
    endpoint_prefix="securitylake",
    protocol=Protocol.REST_JSON_1,
    api_version="2018-05-10",
    lower_camel_members=True,
    operations=index(
        [
            rest("CreateAwsLogSource", "POST", "/v1/datalake/logsources/aws"),
            rest("CreateCustomLogSource", "POST", "/v1/datalake/logsources/custom"),
            rest("CreateDataLake", "POST", "/v1/datalake"),
            rest(
                "CreateDataLakeExceptionSubscription",
                "POST",
                "/v1/datalake/exceptions/subscription",
            ),
            rest(
                "CreateDataLakeOrganizationConfiguration",
                "POST",
                "/v1/datalake/organization/configuration",
            ),
            rest("CreateSubscriber", "POST", "/v1/subscribers"),
            rest("CreateSubscriberNotification", "POST", _SUBSCRIBER + "/notification"),
            rest("DeleteAwsLogSource", "POST", "/v1/datalake/logsources/aws/delete"),
            rest(
                "DeleteCustomLogSource",
                "DELETE",
                "/v1/datalake/logsources/custom/{SourceName}",
            ),
            rest("DeleteDataLake", "POST", "/v1/datalake/delete"),
            rest(
                "DeleteDataLakeExceptionSubscription",
                "DELETE",
                "/v1/datalake/exceptions/subscription",
            ),
            rest(
                "DeleteDataLakeOrganizationConfiguration",
                "POST",
                "/v1/datalake/organization/configuration/delete",
            ),
            rest("DeleteSubscriber", "DELETE", _SUBSCRIBER),
            rest(
                "DeleteSubscriberNotification", "DELETE", _SUBSCRIBER + "/notification"
            ),
            rest(
                "DeregisterDataLakeDelegatedAdministrator",
                "DELETE",
                "/v1/datalake/delegate",
            ),
            rest(
                "GetDataLakeExceptionSubscription",
                "GET",
                "/v1/datalake/exceptions/subscription",
            ),
            rest(
                "GetDataLakeOrganizationConfiguration",
                "GET",
                "/v1/datalake/organization/configuration",
            ),
            rest("GetDataLakeSources", "POST", "/v1/datalake/sources"),
            rest("GetSubscriber", "GET", _SUBSCRIBER),
            rest("ListDataLakeExceptions", "POST", "/v1/datalake/exceptions"),
            rest("ListDataLakes", "GET", "/v1/datalakes"),
            rest("ListLogSources", "POST", "/v1/datalake/logsources/list"),
            rest("ListSubscribers", "GET", "/v1/subscribers"),
            rest(
                "RegisterDataLakeDelegatedAdministrator",
                "POST",
                "/v1/datalake/delegate",
            ),
            rest("UpdateDataLake", "PUT", "/v1/datalake"),
            rest(
                "UpdateDataLakeExceptionSubscription",
                "PUT",
                "/v1/datalake/exceptions/subscription",
            ),
            rest("UpdateSubscriber", "PUT", _SUBSCRIBER),
            rest("UpdateSubscriberNotification", "PUT", _SUBSCRIBER + "/notification"),
        ]
    ),
)


class SecurityLakeClient(ServiceClient):
    """Client for Amazon Security Lake."""

    SERVICE = SERVICE
