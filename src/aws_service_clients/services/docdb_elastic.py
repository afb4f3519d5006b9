#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from ..client import ServiceClient
from ..service import Protocol, ServiceDefinition, index, rest

SERVICE = ServiceDefinition(
    name="DocDB Elastic",
    signing_name="docdb-elastic",
    endpoint_prefix="docdb-elastic",
    protocol=Protocol.REST_JSON_1,
    api_version="2022-11-28",
    lower_camel_members=True,
    operations=index(
        [
            rest("CreateCluster", "POST", "/cluster"),
            rest("CreateClusterSnapshot", "POST", "/cluster-snapshot"),
            rest("DeleteCluster", "DELETE", "/cluster/{ClusterArn}"),
            rest("DeleteClusterSnapshot", "DELETE", "/cluster-snapshot/{SnapshotArn}"),
            rest("GetCluster", "GET", "/cluster/{ClusterArn}"),
            rest("GetClusterSnapshot", "GET", "/cluster-snapshot/{SnapshotArn}"),
            rest("ListClusterSnapshots", "GET", "/cluster-snapshots"),
            rest("ListClusters", "GET", "/clusters"),
            rest("ListTagsForResource", "GET", "/tags/{ResourceArn}"),
            rest(
                "RestoreClusterFromSnapshot",
                "POST",
                "/cluster-snapshot/{SnapshotArn}/restore",
            ),
            rest("TagResource", "POST", "/tags/{ResourceArn}"),
            rest(
                "UntagResource",
                "DELETE",
                "/tags/{ResourceArn}",
                "TagKeys",
                query={"TagKeys": "tagKeys"},
            ),
            rest("UpdateCluster", "PUT", "/cluster/{ClusterArn}"),
        ]
    ),
)


class DocDBElasticClient(ServiceClient):
    """Client for Amazon DocumentDB Elastic Clusters."""

    SERVICE = SERVICE
