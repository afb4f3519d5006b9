#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from typing import Any

from ..client import ServiceClient
from ..operations import OperationDescriptor
from ..outcome import Outcome
from ..service import Protocol, ServiceDefinition, index, rest

SERVICE = ServiceDefinition(
    name="PrivateNetworks",
    signing_name="private-networks",
    endpoint_prefix="private-networks",
    protocol=Protocol.REST_JSON_1,
    api_version="2021-12-03",
    lower_camel_members=True,
    operations=index(
        [
            rest("AcknowledgeOrderReceipt", "POST", "/v1/orders/acknowledge"),
            rest(
                "ActivateDeviceIdentifier", "POST", "/v1/device-identifiers/activate"
            ),
            rest("ActivateNetworkSite", "POST", "/v1/network-sites/activate"),
            rest("ConfigureAccessPoint", "POST", "/v1/network-resources/configure"),
            rest("CreateNetwork", "POST", "/v1/networks"),
            rest("CreateNetworkSite", "POST", "/v1/network-sites"),
            rest(
                "DeactivateDeviceIdentifier",
                "POST",
                "/v1/device-identifiers/deactivate",
            ),
            rest("DeleteNetwork", "DELETE", "/v1/networks/{NetworkArn}"),
            rest("DeleteNetworkSite", "DELETE", "/v1/network-sites/{NetworkSiteArn}"),
            rest(
                "GetDeviceIdentifier",
                "GET",
                "/v1/device-identifiers/{DeviceIdentifierArn}",
            ),
            rest("GetNetwork", "GET", "/v1/networks/{NetworkArn}"),
            rest(
                "GetNetworkResource", "GET", "/v1/network-resources/{NetworkResourceArn}"
            ),
            rest("GetNetworkSite", "GET", "/v1/network-sites/{NetworkSiteArn}"),
            rest("GetOrder", "GET", "/v1/orders/{OrderArn}"),
            rest("ListDeviceIdentifiers", "POST", "/v1/device-identifiers/list"),
            rest("ListNetworkResources", "POST", "/v1/network-resources"),
            rest("ListNetworkSites", "POST", "/v1/network-sites/list"),
            rest("ListNetworks", "POST", "/v1/networks/list"),
            rest("ListOrders", "POST", "/v1/orders/list"),
            rest("ListTagsForResource", "GET", "/tags/{ResourceArn}"),
            OperationDescriptor(name="Ping", method="GET", path="/ping", takes_input=False),
            rest(
                "StartNetworkResourceUpdate", "POST", "/v1/network-resources/update"
            ),
            rest("TagResource", "POST", "/tags/{ResourceArn}"),
            rest(
                "UntagResource",
                "DELETE",
                "/tags/{ResourceArn}",
                "TagKeys",
                query={"TagKeys": "tagKeys"},
            ),
            rest("UpdateNetworkSite", "PUT", "/v1/network-sites/site"),
            rest("UpdateNetworkSitePlan", "PUT", "/v1/network-sites/plan"),
        ]
    ),
)


class PrivateNetworksClient(ServiceClient):
    """Client for AWS Private 5G."""

    SERVICE = SERVICE

    async def ping(self) -> Outcome[dict[str, Any]]:
        """Check that the service is reachable. Ping takes no input."""
        return await self.call("Ping")
