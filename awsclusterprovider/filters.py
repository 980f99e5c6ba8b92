"""Filters for EC2 describe calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .tags import NAME_AWS_CLUSTER_API_ROLE, ResourceLifecycle, cluster_tag_key

_FILTER_NAME_TAG_KEY = "tag-key"
_FILTER_NAME_VPC_ID = "vpc-id"
_FILTER_NAME_STATE = "state"
_FILTER_NAME_VPC_ATTACHMENT = "attachment.vpc-id"


@dataclass
class EC2Filter:
    """A named EC2 filter with its accepted values."""

    name: str
    values: List[str] = field(default_factory=list)

    def to_api(self) -> Dict[str, Any]:
        """Return the filter in the shape the EC2 API expects."""
        return {"Name": self.name, "Values": list(self.values)}


def cluster(cluster_name: str) -> EC2Filter:
    """Filter on resources carrying the cluster tag key."""
    return EC2Filter(_FILTER_NAME_TAG_KEY, [cluster_tag_key(cluster_name)])


def name(name: str) -> EC2Filter:
    """Filter on the Name tag."""
    return EC2Filter("tag:Name", [name])


def cluster_owned(cluster_name: str) -> EC2Filter:
    """Filter on resources owned by the cluster."""
    return EC2Filter(f"tag:{cluster_tag_key(cluster_name)}", [ResourceLifecycle.OWNED.value])


def cluster_shared(cluster_name: str) -> EC2Filter:
    """Filter on resources shared with the cluster."""
    return EC2Filter(f"tag:{cluster_tag_key(cluster_name)}", [ResourceLifecycle.SHARED.value])


def provider_role(role: str) -> EC2Filter:
    """Filter on the provider role tag."""
    return EC2Filter(f"tag:{NAME_AWS_CLUSTER_API_ROLE}", [role])


def vpc(vpc_id: str) -> EC2Filter:
    """Filter on the VPC id."""
    return EC2Filter(_FILTER_NAME_VPC_ID, [vpc_id])


def vpc_attachment(vpc_id: str) -> EC2Filter:
    """Filter on the VPC a resource is attached to."""
    return EC2Filter(_FILTER_NAME_VPC_ATTACHMENT, [vpc_id])


def available() -> EC2Filter:
    """Filter on resources in the available state."""
    return EC2Filter(_FILTER_NAME_STATE, ["available"])


def nat_gateway_states(*args: str) -> EC2Filter:
    """Filter on NAT gateway states."""
    return EC2Filter("state", list(args))


def instance_states(*args: str) -> EC2Filter:
    """Filter on instance states."""
    return EC2Filter("instance-state-name", list(args))


def vpc_states(*args: str) -> EC2Filter:
    """Filter on VPC states."""
    return EC2Filter("state", list(args))


def subnet_states(*args: str) -> EC2Filter:
    """Filter on subnet states."""
    return EC2Filter("state", list(args))