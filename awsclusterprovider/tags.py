"""Resource tags and the tag keys used to mark cluster ownership."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class ResourceLifecycle(str, Enum):
    """Lifecycle of a tagged resource relative to its cluster."""

    OWNED = "owned"
    SHARED = "shared"

    def __str__(self) -> str:
        return self.value


NAME_KUBERNETES_AWS_CLOUD_PROVIDER_PREFIX = "kubernetes.io/cluster/"
NAME_AWS_PROVIDER_PREFIX = "sigs.k8s.io/cluster-api-provider-aws/"
NAME_AWS_PROVIDER_OWNED = NAME_AWS_PROVIDER_PREFIX + "cluster/"
NAME_AWS_CLUSTER_API_ROLE = NAME_AWS_PROVIDER_PREFIX + "role"

API_SERVER_ROLE_TAG_VALUE = "apiserver"
BASTION_ROLE_TAG_VALUE = "bastion"
COMMON_ROLE_TAG_VALUE = "common"
PUBLIC_ROLE_TAG_VALUE = "public"
PRIVATE_ROLE_TAG_VALUE = "private"


def cluster_tag_key(name: str) -> str:
    """Tag key marking resources associated with a cluster."""
    return f"{NAME_AWS_PROVIDER_OWNED}{name}"


def cluster_aws_cloud_provider_tag_key(name: str) -> str:
    """Tag key marking resources associated with a cluster's cloud provider."""
    return f"{NAME_KUBERNETES_AWS_CLOUD_PROVIDER_PREFIX}{name}"


class Tags(dict):
    """A mapping of tag keys to tag values."""

    def equals(self, other: Optional[Mapping[str, str]]) -> bool:
        """Return True if both tag maps hold exactly the same entries."""
        if other is None:
            return False
        return dict(self) == dict(other)

    def has_owned(self, cluster: str) -> bool:
        """Return True if the tags mark the resource as owned by the cluster."""
        value = self.get(cluster_tag_key(cluster))
        return value is not None and value == ResourceLifecycle.OWNED.value

    def has_aws_cloud_provider_owned(self, cluster: str) -> bool:
        """Return True if the cloud provider tag marks the resource as owned."""
        value = self.get(cluster_aws_cloud_provider_tag_key(cluster))
        return value is not None and value == ResourceLifecycle.OWNED.value

    def get_role(self) -> str:
        """Return the role tag value, or an empty string."""
        return self.get(NAME_AWS_CLUSTER_API_ROLE, "")

    def difference(self, other: Optional[Mapping[str, str]]) -> "Tags":
        """Return entries of this map whose key/value pair is absent from other."""
        other = other or {}
        return Tags(
            (key, value)
            for key, value in self.items()
            if key not in other or other[key] != value
        )


@dataclass
class BuildParams:
    """Inputs used to build the tags of a resource."""

    lifecycle: ResourceLifecycle
    cluster_name: str
    resource_id: str = ""
    name: Optional[str] = None
    role: Optional[str] = None
    additional: Tags = field(default_factory=Tags)


def build(params: BuildParams) -> Tags:
    """Build the tags for a resource, including the cluster ownership tag."""
    tags = Tags(params.additional or {})
    tags[cluster_tag_key(params.cluster_name)] = str(
        getattr(params.lifecycle, "value", params.lifecycle)
    )
    if params.role is not None:
        tags[NAME_AWS_CLUSTER_API_ROLE] = params.role
    if params.name is not None:
        tags["Name"] = params.name
    return tags