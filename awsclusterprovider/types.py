"""Data types describing AWS networking, load balancers and instances."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from .tags import Tags

ANNOTATION_CLUSTER_INFRASTRUCTURE_READY = "aws.cluster.x-k8s.io/infrastructure-ready"
ANNOTATION_CONTROL_PLANE_READY = "aws.cluster.x-k8s.io/control-plane-ready"
VALUE_READY = "true"


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


@dataclass
class Filter:
    """A named filter with one or more case-sensitive values."""

    name: str
    values: List[str] = field(default_factory=list)


@dataclass
class AWSResourceReference:
    """Reference to an AWS resource by ID, ARN or filters."""

    id: Optional[str] = None
    arn: Optional[str] = None
    filters: List[Filter] = field(default_factory=list)


class AWSMachineProviderConditionType(_StrEnum):
    MACHINE_CREATED = "MachineCreated"


@dataclass
class AWSMachineProviderCondition:
    """A condition reported on a machine."""

    type: AWSMachineProviderConditionType
    status: str
    last_probe_time: Optional[datetime] = None
    last_transition_time: Optional[datetime] = None
    reason: str = ""
    message: str = ""


class ClassicELBScheme(_StrEnum):
    INTERNET_FACING = "Internet-facing"
    INTERNAL = "internal"


class ClassicELBProtocol(_StrEnum):
    TCP = "TCP"
    SSL = "SSL"
    HTTP = "HTTP"
    HTTPS = "HTTPS"


@dataclass
class ClassicELBAttributes:
    idle_timeout: timedelta = timedelta(0)


@dataclass
class ClassicELBListener:
    protocol: ClassicELBProtocol
    port: int
    instance_protocol: ClassicELBProtocol
    instance_port: int


@dataclass
class ClassicELBHealthCheck:
    target: str
    interval: timedelta
    timeout: timedelta
    healthy_threshold: int
    unhealthy_threshold: int


@dataclass
class ClassicELB:
    """A classic load balancer."""

    name: str = ""
    dns_name: str = ""
    scheme: Optional[ClassicELBScheme] = None
    subnet_ids: List[str] = field(default_factory=list)
    security_group_ids: List[str] = field(default_factory=list)
    listeners: List[ClassicELBListener] = field(default_factory=list)
    health_check: Optional[ClassicELBHealthCheck] = None
    attributes: ClassicELBAttributes = field(default_factory=ClassicELBAttributes)
    tags: Dict[str, str] = field(default_factory=dict)


class SecurityGroupRole(_StrEnum):
    BASTION = "bastion"
    NODE = "node"
    CONTROL_PLANE = "controlplane"
    LB = "lb"


class SecurityGroupProtocol(_StrEnum):
    ALL = "-1"
    IP_IN_IP = "4"
    TCP = "tcp"
    UDP = "udp"
    ICMP = "icmp"
    ICMPV6 = "58"


@dataclass
class IngressRule:
    """An inbound rule of a security group."""

    description: str
    protocol: SecurityGroupProtocol
    from_port: int
    to_port: int
    cidr_blocks: List[str] = field(default_factory=list)
    source_security_group_ids: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"protocol={self.protocol!s}/range=[{self.from_port}-{self.to_port}]"
            f"/description={self.description}"
        )

    def equals(self, other: "IngressRule") -> bool:
        """Return True if both rules match, ignoring the order of lists."""
        return (
            sorted(self.cidr_blocks) == sorted(other.cidr_blocks)
            and sorted(self.source_security_group_ids)
            == sorted(other.source_security_group_ids)
            and self.description == other.description
            and self.from_port == other.from_port
            and self.to_port == other.to_port
            and str(self.protocol) == str(other.protocol)
        )


class IngressRules(list):
    """A list of ingress rules."""

    def difference(self, other: List[IngressRule]) -> "IngressRules":
        """Return the rules of this list with no equal rule in other."""
        return IngressRules(
            rule for rule in self if not any(rule.equals(o) for o in other)
        )


@dataclass
class SecurityGroup:
    """A security group."""

    id: str
    name: str
    ingress_rules: IngressRules = field(default_factory=IngressRules)
    tags: Tags = field(default_factory=Tags)

    def __str__(self) -> str:
        return f"id={self.id}/name={self.name}"


@dataclass
class Network:
    """Networking resources of a cluster."""

    security_groups: Dict[str, SecurityGroup] = field(default_factory=dict)
    api_server_elb: ClassicELB = field(default_factory=ClassicELB)


@dataclass
class KeyPair:
    """A certificate and key pair."""

    cert: bytes = b""
    key: bytes = b""

    def has_cert_and_key(self) -> bool:
        """Return True if both cert and key are non-empty."""
        return bool(self.cert) and bool(self.key)


@dataclass
class VPCSpec:
    """Configuration of a VPC."""

    id: str = ""
    cidr_block: str = ""
    internet_gateway_id: Optional[str] = None
    tags: Tags = field(default_factory=Tags)

    def __str__(self) -> str:
        return f"id={self.id}"

    def is_unmanaged(self, cluster_name: str) -> bool:
        """Return True if the VPC exists and is not owned by the cluster."""
        return self.id != "" and not Tags(self.tags or {}).has_owned(cluster_name)


@dataclass
class SubnetSpec:
    """Configuration of a subnet."""

    id: str = ""
    cidr_block: str = ""
    availability_zone: str = ""
    is_public: bool = False
    route_table_id: Optional[str] = None
    nat_gateway_id: Optional[str] = None
    tags: Tags = field(default_factory=Tags)

    def __str__(self) -> str:
        public = "true" if self.is_public else "false"
        return f"id={self.id}/az={self.availability_zone}/public={public}"


class Subnets(list):
    """A list of subnets."""

    def to_map(self) -> Dict[str, SubnetSpec]:
        """Return a mapping from subnet id to subnet."""
        return {subnet.id: subnet for subnet in self}

    def find_by_id(self, id: str) -> Optional[SubnetSpec]:
        """Return the first subnet with the given id, or None."""
        return next((subnet for subnet in self if subnet.id == id), None)

    def filter_private(self) -> "Subnets":
        return Subnets(subnet for subnet in self if not subnet.is_public)

    def filter_public(self) -> "Subnets":
        return Subnets(subnet for subnet in self if subnet.is_public)

    def filter_by_zone(self, zone: str) -> "Subnets":
        return Subnets(s for s in self if s.availability_zone == zone)


@dataclass
class NetworkSpec:
    """Network configuration of a cluster."""

    vpc: VPCSpec = field(default_factory=VPCSpec)
    subnets: Subnets = field(default_factory=Subnets)


@dataclass
class RouteTable:
    id: str


class InstanceState(_StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass
class Instance:
    """An EC2 instance."""

    id: str
    state: Optional[InstanceState] = None
    type: str = ""
    subnet_id: str = ""
    image_id: str = ""
    key_name: Optional[str] = None
    security_group_ids: List[str] = field(default_factory=list)
    user_data: Optional[str] = None
    iam_profile: str = ""
    private_ip: Optional[str] = None
    public_ip: Optional[str] = None
    ena_support: Optional[bool] = None
    ebs_optimized: Optional[bool] = None
    root_device_size: int = 0
    tags: Dict[str, str] = field(default_factory=dict)