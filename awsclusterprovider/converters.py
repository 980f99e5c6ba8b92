"""Conversions between EC2/ELB API shapes and this package's types."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .tags import Tags
from .types import Instance, InstanceState

_PROFILE_MARKER = "instance-profile/"


def tags_to_map(src: Optional[Iterable[Mapping[str, str]]]) -> Tags:
    """Convert a list of {"Key", "Value"} tags into Tags."""
    return Tags((tag["Key"], tag["Value"]) for tag in src or ())


def map_to_tags(src: Optional[Mapping[str, str]]) -> List[Dict[str, str]]:
    """Convert Tags into a list of {"Key", "Value"} EC2 tags."""
    return [{"Key": key, "Value": value} for key, value in (src or {}).items()]


def elb_tags_to_map(src: Optional[Iterable[Mapping[str, str]]]) -> Tags:
    """Convert a list of ELB {"Key", "Value"} tags into Tags."""
    return tags_to_map(src)


def map_to_elb_tags(src: Optional[Mapping[str, str]]) -> List[Dict[str, str]]:
    """Convert Tags into a list of {"Key", "Value"} ELB tags."""
    return map_to_tags(src)


def _state(raw: Any) -> Any:
    try:
        return InstanceState(raw)
    except ValueError:
        return raw


def sdk_to_instance(v: Mapping[str, Any]) -> Instance:
    """Convert an EC2 DescribeInstances instance into an Instance.

    The root device size cannot be learnt from this output and stays zero.
    """
    try:
        state_name = v["State"]["Name"]
    except (KeyError, TypeError) as exc:
        raise ValueError("instance has no state name") from exc

    instance = Instance(
        id=v.get("InstanceId") or "",
        state=_state(state_name),
        type=v.get("InstanceType") or "",
        subnet_id=v.get("SubnetId") or "",
        image_id=v.get("ImageId") or "",
        key_name=v.get("KeyName"),
        private_ip=v.get("PrivateIpAddress"),
        public_ip=v.get("PublicIpAddress"),
        ena_support=v.get("EnaSupport"),
        ebs_optimized=v.get("EbsOptimized"),
    )

    profile = v.get("IamInstanceProfile")
    if profile and profile.get("Arn") is not None:
        parts = profile["Arn"].split(_PROFILE_MARKER)
        if len(parts) > 1 and parts[1]:
            instance.iam_profile = parts[1]

    instance.security_group_ids = [sg["GroupId"] for sg in v.get("SecurityGroups") or ()]

    if v.get("Tags"):
        instance.tags = tags_to_map(v["Tags"])

    return instance