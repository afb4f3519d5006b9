#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from ..client import ServiceClient
from ..operations import OperationDescriptor
from ..service import Protocol, ServiceDefinition, index, rest


def _post(name: str) -> OperationDescriptor:
    # RAM routes every POST action to its lowercased name.
    return rest(name, "POST", "/" + name.lower())


SERVICE = ServiceDefinition(
    name="RAM",
    signing_name="ram",
    endpoint_prefix="ram",
    protocol=Protocol.REST_JSON_1,
    api_version="2018-01-04",
    lower_camel_members=True,
    operations=index(
        [
            _post("AcceptResourceShareInvitation"),
            _post("AssociateResourceShare"),
            _post("AssociateResourceSharePermission"),
            _post("CreatePermission"),
            _post("CreatePermissionVersion"),
            _post("CreateResourceShare"),
            rest(
                "DeletePermission",
                "DELETE",
                "/deletepermission",
                "PermissionArn",
                query={"PermissionArn": "permissionArn"},
            ),
            rest(
                "DeletePermissionVersion",
                "DELETE",
                "/deletepermissionversion",
                "PermissionArn",
                "PermissionVersion",
                query={
                    "PermissionArn": "permissionArn",
                    "PermissionVersion": "permissionVersion",
                },
            ),
            rest(
                "DeleteResourceShare",
                "DELETE",
                "/deleteresourceshare",
                "ResourceShareArn",
                query={"ResourceShareArn": "resourceShareArn"},
            ),
            _post("DisassociateResourceShare"),
            _post("DisassociateResourceSharePermission"),
            _post("EnableSharingWithAwsOrganization"),
            _post("GetPermission"),
            _post("GetResourcePolicies"),
            _post("GetResourceShareAssociations"),
            _post("GetResourceShareInvitations"),
            _post("GetResourceShares"),
            _post("ListPendingInvitationResources"),
            _post("ListPermissionAssociations"),
            _post("ListPermissionVersions"),
            _post("ListPermissions"),
            _post("ListPrincipals"),
            _post("ListReplacePermissionAssociationsWork"),
            _post("ListResourceSharePermissions"),
            _post("ListResourceTypes"),
            _post("ListResources"),
            _post("PromotePermissionCreatedFromPolicy"),
            rest(
                "PromoteResourceShareCreatedFromPolicy",
                "POST",
                "/promoteresourcesharecreatedfrompolicy",
                "ResourceShareArn",
                query={"ResourceShareArn": "resourceShareArn"},
            ),
            _post("RejectResourceShareInvitation"),
            _post("ReplacePermissionAssociations"),
            _post("SetDefaultPermissionVersion"),
            _post("TagResource"),
            _post("UntagResource"),
            _post("UpdateResourceShare"),
        ]
    ),
)


class RAMClient(ServiceClient):
    """Client for AWS Resource Access Manager."""

    SERVICE = SERVICE
