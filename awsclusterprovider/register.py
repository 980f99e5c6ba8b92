"""API group version and encoding of provider specs and statuses."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from .provider_config import (
    AWSClusterProviderSpec,
    AWSClusterProviderStatus,
    AWSMachineProviderSpec,
    AWSMachineProviderStatus,
)


@dataclass(frozen=True)
class GroupVersion:
    """An API group and version."""

    group: str
    version: str

    def __str__(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version


SCHEME_GROUP_VERSION = GroupVersion(group="awsprovider.k8s.io", version="v1alpha1")

KNOWN_TYPES = (
    AWSClusterProviderSpec,
    AWSClusterProviderStatus,
    AWSMachineProviderSpec,
    AWSMachineProviderStatus,
)


@dataclass
class RawExtension:
    """Raw serialized bytes of an embedded object."""

    raw: bytes = b""


def _unmarshal(extension: Optional[RawExtension]) -> Dict[str, Any]:
    if extension is None or not extension.raw:
        return {}
    try:
        data = yaml.safe_load(extension.raw)
    except yaml.YAMLError as exc:
        raise ValueError(f"cannot decode provider data: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"cannot decode provider data: expected a mapping, got {type(data).__name__}"
        )
    return data


def _marshal(data: Dict[str, Any]) -> RawExtension:
    return RawExtension(raw=json.dumps(data, separators=(",", ":")).encode("utf-8"))


def cluster_config_from_provider_spec(raw: Optional[RawExtension]) -> AWSClusterProviderSpec:
    """Decode a cluster provider spec; an absent value yields an empty spec."""
    return AWSClusterProviderSpec.from_dict(_unmarshal(raw))


def cluster_status_from_provider_status(
    extension: Optional[RawExtension],
) -> AWSClusterProviderStatus:
    """Decode a cluster provider status; an absent value yields an empty status."""
    return AWSClusterProviderStatus.from_dict(_unmarshal(extension))


def machine_status_from_provider_status(
    extension: Optional[RawExtension],
) -> AWSMachineProviderStatus:
    """Decode a machine provider status; an absent value yields an empty status."""
    return AWSMachineProviderStatus.from_dict(_unmarshal(extension))


def encode_machine_status(status: Optional[AWSMachineProviderStatus]) -> RawExtension:
    """Encode a machine status as JSON."""
    return RawExtension() if status is None else _marshal(status.to_dict())


def encode_machine_spec(spec: Optional[AWSMachineProviderSpec]) -> RawExtension:
    """Encode a machine provider spec as JSON."""
    return RawExtension() if spec is None else _marshal(spec.to_dict())


def encode_cluster_status(status: Optional[AWSClusterProviderStatus]) -> RawExtension:
    """Encode a cluster status as JSON."""
    return RawExtension() if status is None else _marshal(status.to_dict())


def encode_cluster_spec(spec: Optional[AWSClusterProviderSpec]) -> RawExtension:
    """Encode a cluster provider spec as JSON."""
    return RawExtension() if spec is None else _marshal(spec.to_dict())