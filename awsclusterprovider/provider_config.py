"""Provider specs and statuses for clusters and machines, with their JSON form."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from .tags import Tags
from .types import (
    AWSMachineProviderCondition,
    AWSMachineProviderConditionType,
    AWSResourceReference,
    ClassicELB,
    ClassicELBAttributes,
    ClassicELBHealthCheck,
    ClassicELBListener,
    ClassicELBProtocol,
    ClassicELBScheme,
    Filter,
    IngressRule,
    IngressRules,
    Instance,
    InstanceState,
    KeyPair,
    Network,
    NetworkSpec,
    SecurityGroup,
    SecurityGroupProtocol,
    SubnetSpec,
    Subnets,
    VPCSpec,
)

_E = TypeVar("_E", bound=Enum)
_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _put(out: Dict[str, Any], key: str, value: Any) -> None:
    """Set a key unless the value is empty (zero, false, empty or None)."""
    if value:
        out[key] = value


def _put_ptr(out: Dict[str, Any], key: str, value: Any) -> None:
    """Set a key unless the value is absent."""
    if value is not None:
        out[key] = value


def _enum(cls: Type[_E], value: Any) -> Union[_E, str, None]:
    if value is None or value == "":
        return None
    try:
        return cls(value)
    except ValueError:
        return value


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _sorted_map(mapping: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return {key: mapping[key] for key in sorted(mapping or {})}


def _duration_to_json(value: timedelta) -> int:
    return (value // timedelta(microseconds=1)) * 1000


def _duration_from_json(value: Any) -> timedelta:
    return timedelta(microseconds=int(value or 0) // 1000)


def _bytes_to_json(value: bytes) -> Optional[str]:
    return base64.b64encode(value).decode("ascii") if value else None


def _bytes_from_json(value: Any) -> bytes:
    return base64.b64decode(value) if value else b""


def _time_to_json(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(_TIME_FORMAT)


def _time_from_json(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class ObjectMeta:
    """Object metadata: name, namespace, uid, labels and annotations."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)


def _meta_to_dict(meta: ObjectMeta) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    _put(out, "name", meta.name)
    _put(out, "namespace", meta.namespace)
    _put(out, "uid", meta.uid)
    _put(out, "labels", _sorted_map(meta.labels))
    _put(out, "annotations", _sorted_map(meta.annotations))
    return out


def _meta_from_dict(data: Optional[Mapping[str, Any]]) -> ObjectMeta:
    data = data or {}
    return ObjectMeta(
        name=_str(data.get("name")),
        namespace=_str(data.get("namespace")),
        uid=_str(data.get("uid")),
        labels=dict(data.get("labels") or {}),
        annotations=dict(data.get("annotations") or {}),
    )


def _type_meta(out: Dict[str, Any], api_version: str, kind: str) -> None:
    _put(out, "apiVersion", api_version)
    _put(out, "kind", kind)


def _filter_to_dict(flt: Filter) -> Dict[str, Any]:
    return {"name": flt.name, "values": list(flt.values)}


def _filter_from_dict(data: Mapping[str, Any]) -> Filter:
    return Filter(name=_str(data.get("name")), values=list(data.get("values") or []))


def _ref_to_dict(ref: AWSResourceReference) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    _put_ptr(out, "id", ref.id)
    _put_ptr(out, "arn", ref.arn)
    _put(out, "filters", [_filter_to_dict(f) for f in ref.filters])
    return out


def _ref_from_dict(data: Optional[Mapping[str, Any]]) -> AWSResourceReference:
    data = data or {}
    return AWSResourceReference(
        id=data.get("id"),
        arn=data.get("arn"),
        filters=[_filter_from_dict(f) for f in data.get("filters") or []],
    )


def _key_pair_to_dict(pair: KeyPair) -> Dict[str, Any]:
    return {"cert": _bytes_to_json(pair.cert), "key": _bytes_to_json(pair.key)}


def _key_pair_from_dict(data: Optional[Mapping[str, Any]]) -> KeyPair:
    data = data or {}
    return KeyPair(cert=_bytes_from_json(data.get("cert")), key=_bytes_from_json(data.get("key")))


def _vpc_to_dict(vpc: VPCSpec) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    _put(out, "id", vpc.id)
    _put(out, "cidrBlock", vpc.cidr_block)
    _put_ptr(out, "internetGatewayId", vpc.internet_gateway_id)
    _put(out, "tags", _sorted_map(vpc.tags))
    return out


def _vpc_from_dict(data: Optional[Mapping[str, Any]]) -> VPCSpec:
    data = data or {}
    return VPCSpec(
        id=_str(data.get("id")),
        cidr_block=_str(data.get("cidrBlock")),
        internet_gateway_id=data.get("internetGatewayId"),
        tags=Tags(data.get("tags") or {}),
    )


def _subnet_to_dict(subnet: SubnetSpec) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    _put(out, "id", subnet.id)
    _put(out, "cidrBlock", subnet.cidr_block)
    _put(out, "availabilityZone", subnet.availability_zone)
    out["isPublic"] = subnet.is_public
    out["routeTableId"] = subnet.route_table_id
    _put_ptr(out, "natGatewayId", subnet.nat_gateway_id)
    _put(out, "tags", _sorted_map(subnet.tags))
    return out


def _subnet_from_dict(data: Mapping[str, Any]) -> SubnetSpec:
    return SubnetSpec(
        id=_str(data.get("id")),
        cidr_block=_str(data.get("cidrBlock")),
        availability_zone=_str(data.get("availabilityZone")),
        is_public=bool(data.get("isPublic", False)),
        route_table_id=data.get("routeTableId"),
        nat_gateway_id=data.get("natGatewayId"),
        tags=Tags(data.get("tags") or {}),
    )


def _network_spec_to_dict(spec: NetworkSpec) -> Dict[str, Any]:
    out: Dict[str, Any] = {"vpc": _vpc_to_dict(spec.vpc)}
    _put(out, "subnets", [_subnet_to_dict(s) for s in spec.subnets])
    return out


def _network_spec_from_dict(data: Optional[Mapping[str, Any]]) -> NetworkSpec:
    data = data or {}
    return NetworkSpec(
        vpc=_vpc_from_dict(data.get("vpc")),
        subnets=Subnets(_subnet_from_dict(s) for s in data.get("subnets") or []),
    )


def _ingress_rule_to_dict(rule: IngressRule) -> Dict[str, Any]:
    return {
        "description": rule.description,
        "protocol": _str(rule.protocol),
        "fromPort": rule.from_port,
        "toPort": rule.to_port,
        "cidrBlocks": list(rule.cidr_blocks),
        "sourceSecurityGroupIds": list(rule.source_security_group_ids),
    }


def _ingress_rule_from_dict(data: Mapping[str, Any]) -> IngressRule:
    return IngressRule(
        description=_str(data.get("description")),
        protocol=_enum(SecurityGroupProtocol, data.get("protocol")),
        from_port=int(data.get("fromPort") or 0),
        to_port=int(data.get("toPort") or 0),
        cidr_blocks=list(data.get("cidrBlocks") or []),
        source_security_group_ids=list(data.get("sourceSecurityGroupIds") or []),
    )


def _security_group_to_dict(group: SecurityGroup) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": group.id,
        "name": group.name,
        "ingressRule": [_ingress_rule_to_dict(r) for r in group.ingress_rules],
    }
    _put(out, "tags", _sorted_map(group.tags))
    return out


def _security_group_from_dict(data: Mapping[str, Any]) -> SecurityGroup:
    return SecurityGroup(
        id=_str(data.get("id")),
        name=_str(data.get("name")),
        ingress_rules=IngressRules(
            _ingress_rule_from_dict(r) for r in data.get("ingressRule") or []
        ),
        tags=Tags(data.get("tags") or {}),
    )


def _listener_to_dict(listener: ClassicELBListener) -> Dict[str, Any]:
    return {
        "protocol": _str(listener.protocol),
        "port": listener.port,
        "instanceProtocol": _str(listener.instance_protocol),
        "instancePort": listener.instance_port,
    }


def _listener_from_dict(data: Mapping[str, Any]) -> ClassicELBListener:
    return ClassicELBListener(
        protocol=_enum(ClassicELBProtocol, data.get("protocol")),
        port=int(data.get("port") or 0),
        instance_protocol=_enum(ClassicELBProtocol, data.get("instanceProtocol")),
        instance_port=int(data.get("instancePort") or 0),
    )


def _health_check_to_dict(check: ClassicELBHealthCheck) -> Dict[str, Any]:
    return {
        "target": check.target,
        "interval": _duration_to_json(check.interval),
        "timeout": _duration_to_json(check.timeout),
        "healthyThreshold": check.healthy_threshold,
        "unhealthyThreshold": check.unhealthy_threshold,
    }


def _health_check_from_dict(data: Optional[Mapping[str, Any]]) -> Optional[ClassicELBHealthCheck]:
    if data is None:
        return None
    return ClassicELBHealthCheck(
        target=_str(data.get("target")),
        interval=_duration_from_json(data.get("interval")),
        timeout=_duration_from_json(data.get("timeout")),
        healthy_threshold=int(data.get("healthyThreshold") or 0),
        unhealthy_threshold=int(data.get("unhealthyThreshold") or 0),
    )


def _elb_to_dict(elb: ClassicELB) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    _put(out, "name", elb.name)
    _put(out, "dnsName", elb.dns_name)
    _put(out, "scheme", _str(elb.scheme))
    _put(out, "subnetIds", list(elb.subnet_ids))
    _put(out, "securityGroupIds", list(elb.security_group_ids))
    _put(out, "listeners", [_listener_to_dict(l) for l in elb.listeners])
    _put_ptr(
        out,
        "healthChecks",
        None if elb.health_check is None else _health_check_to_dict(elb.health_check),
    )
    attributes: Dict[str, Any] = {}
    _put(attributes, "idleTimeout", _duration_to_json(elb.attributes.idle_timeout))
    out["attributes"] = attributes
    _put(out, "tags", _sorted_map(elb.tags))
    return out


def _elb_from_dict(data: Optional[Mapping[str, Any]]) -> ClassicELB:
    data = data or {}
    attributes = data.get("attributes") or {}
    return ClassicELB(
        name=_str(data.get("name")),
        dns_name=_str(data.get("dnsName")),
        scheme=_enum(ClassicELBScheme, data.get("scheme")),
        subnet_ids=list(data.get("subnetIds") or []),
        security_group_ids=list(data.get("securityGroupIds") or []),
        listeners=[_listener_from_dict(l) for l in data.get("listeners") or []],
        health_check=_health_check_from_dict(data.get("healthChecks")),
        attributes=ClassicELBAttributes(
            idle_timeout=_duration_from_json(attributes.get("idleTimeout"))
        ),
        tags=dict(data.get("tags") or {}),
    )


def _network_to_dict(network: Network) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    _put(
        out,
        "securityGroups",
        {
            str(role): _security_group_to_dict(group)
            for role, group in sorted(network.security_groups.items(), key=lambda kv: str(kv[0]))
        },
    )
    out["apiServerElb"] = _elb_to_dict(network.api_server_elb)
    return out


def _network_from_dict(data: Optional[Mapping[str, Any]]) -> Network:
    data = data or {}
    return Network(
        security_groups={
            role: _security_group_from_dict(group)
            for role, group in (data.get("securityGroups") or {}).items()
        },
        api_server_elb=_elb_from_dict(data.get("apiServerElb")),
    )


def _instance_to_dict(instance: Instance) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": instance.id}
    _put(out, "instanceState", _str(instance.state))
    _put(out, "type", instance.type)
    _put(out, "subnetId", instance.subnet_id)
    _put(out, "imageId", instance.image_id)
    _put_ptr(out, "keyName", instance.key_name)
    _put(out, "securityGroupIds", list(instance.security_group_ids))
    _put_ptr(out, "userData", instance.user_data)
    _put(out, "iamProfile", instance.iam_profile)
    _put_ptr(out, "privateIp", instance.private_ip)
    _put_ptr(out, "publicIp", instance.public_ip)
    _put_ptr(out, "enaSupport", instance.ena_support)
    _put_ptr(out, "ebsOptimized", instance.ebs_optimized)
    _put(out, "rootDeviceSize", instance.root_device_size)
    _put(out, "tags", _sorted_map(instance.tags))
    return out


def _instance_from_dict(data: Optional[Mapping[str, Any]]) -> Instance:
    data = data or {}
    return Instance(
        id=_str(data.get("id")),
        state=_enum(InstanceState, data.get("instanceState")),
        type=_str(data.get("type")),
        subnet_id=_str(data.get("subnetId")),
        image_id=_str(data.get("imageId")),
        key_name=data.get("keyName"),
        security_group_ids=list(data.get("securityGroupIds") or []),
        user_data=data.get("userData"),
        iam_profile=_str(data.get("iamProfile")),
        private_ip=data.get("privateIp"),
        public_ip=data.get("publicIp"),
        ena_support=data.get("enaSupport"),
        ebs_optimized=data.get("ebsOptimized"),
        root_device_size=int(data.get("rootDeviceSize") or 0),
        tags=dict(data.get("tags") or {}),
    )


def _condition_to_dict(condition: AWSMachineProviderCondition) -> Dict[str, Any]:
    return {
        "type": _str(condition.type),
        "status": condition.status,
        "lastProbeTime": _time_to_json(condition.last_probe_time),
        "lastTransitionTime": _time_to_json(condition.last_transition_time),
        "reason": condition.reason,
        "message": condition.message,
    }


def _condition_from_dict(data: Mapping[str, Any]) -> AWSMachineProviderCondition:
    return AWSMachineProviderCondition(
        type=_enum(AWSMachineProviderConditionType, data.get("type")),
        status=_str(data.get("status")),
        last_probe_time=_time_from_json(data.get("lastProbeTime")),
        last_transition_time=_time_from_json(data.get("lastTransitionTime")),
        reason=_str(data.get("reason")),
        message=_str(data.get("message")),
    )


@dataclass
class AWSClusterProviderSpec:
    """Provider configuration of a cluster."""

    api_version: str = ""
    kind: str = ""
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    network_spec: NetworkSpec = field(default_factory=NetworkSpec)
    region: str = ""
    ssh_key_name: str = ""
    ca_key_pair: KeyPair = field(default_factory=KeyPair)
    etcd_ca_key_pair: KeyPair = field(default_factory=KeyPair)
    front_proxy_ca_key_pair: KeyPair = field(default_factory=KeyPair)
    sa_key_pair: KeyPair = field(default_factory=KeyPair)
    cluster_configuration: Dict[str, Any] = field(default_factory=dict)
    additional_user_data_files: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready form of the spec."""
        out: Dict[str, Any] = {}
        _type_meta(out, self.api_version, self.kind)
        out["metadata"] = _meta_to_dict(self.metadata)
        out["networkSpec"] = _network_spec_to_dict(self.network_spec)
        _put(out, "region", self.region)
        _put(out, "sshKeyName", self.ssh_key_name)
        out["caKeyPair"] = _key_pair_to_dict(self.ca_key_pair)
        out["etcdCAKeyPair"] = _key_pair_to_dict(self.etcd_ca_key_pair)
        out["frontProxyCAKeyPair"] = _key_pair_to_dict(self.front_proxy_ca_key_pair)
        out["saKeyPair"] = _key_pair_to_dict(self.sa_key_pair)
        out["clusterConfiguration"] = dict(self.cluster_configuration)
        _put(out, "additionalUserDataFiles", [dict(f) for f in self.additional_user_data_files])
        return out

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AWSClusterProviderSpec":
        """Build a spec from its JSON-ready form."""
        data = data or {}
        return cls(
            api_version=_str(data.get("apiVersion")),
            kind=_str(data.get("kind")),
            metadata=_meta_from_dict(data.get("metadata")),
            network_spec=_network_spec_from_dict(data.get("networkSpec")),
            region=_str(data.get("region")),
            ssh_key_name=_str(data.get("sshKeyName")),
            ca_key_pair=_key_pair_from_dict(data.get("caKeyPair")),
            etcd_ca_key_pair=_key_pair_from_dict(data.get("etcdCAKeyPair")),
            front_proxy_ca_key_pair=_key_pair_from_dict(data.get("frontProxyCAKeyPair")),
            sa_key_pair=_key_pair_from_dict(data.get("saKeyPair")),
            cluster_configuration=dict(data.get("clusterConfiguration") or {}),
            additional_user_data_files=[
                dict(f) for f in data.get("additionalUserDataFiles") or []
            ],
        )


@dataclass
class AWSClusterProviderStatus:
    """Provider status of a cluster."""

    api_version: str = ""
    kind: str = ""
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    network: Network = field(default_factory=Network)
    bastion: Instance = field(default_factory=lambda: Instance(id=""))

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready form of the status."""
        out: Dict[str, Any] = {}
        _type_meta(out, self.api_version, self.kind)
        out["metadata"] = _meta_to_dict(self.metadata)
        out["network"] = _network_to_dict(self.network)
        out["bastion"] = _instance_to_dict(self.bastion)
        return out

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AWSClusterProviderStatus":
        """Build a status from its JSON-ready form."""
        data = data or {}
        return cls(
            api_version=_str(data.get("apiVersion")),
            kind=_str(data.get("kind")),
            metadata=_meta_from_dict(data.get("metadata")),
            network=_network_from_dict(data.get("network")),
            bastion=_instance_from_dict(data.get("bastion")),
        )


@dataclass
class KubeadmConfiguration:
    """Join and init configurations handed to kubeadm."""

    join: Dict[str, Any] = field(default_factory=dict)
    init: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AWSMachineProviderSpec:
    """Provider configuration of a machine."""

    api_version: str = ""
    kind: str = ""
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    ami: AWSResourceReference = field(default_factory=AWSResourceReference)
    image_lookup_org: str = ""
    instance_type: str = ""
    additional_tags: Dict[str, str] = field(default_factory=dict)
    iam_instance_profile: str = ""
    public_ip: Optional[bool] = None
    additional_security_groups: List[AWSResourceReference] = field(default_factory=list)
    availability_zone: Optional[str] = None
    subnet: Optional[AWSResourceReference] = None
    key_name: str = ""
    root_device_size: int = 0
    kubeadm_configuration: KubeadmConfiguration = field(default_factory=KubeadmConfiguration)
    additional_user_data_files: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready form of the spec."""
        out: Dict[str, Any] = {}
        _type_meta(out, self.api_version, self.kind)
        out["metadata"] = _meta_to_dict(self.metadata)
        out["ami"] = _ref_to_dict(self.ami)
        _put(out, "imageLookupOrg", self.image_lookup_org)
        _put(out, "instanceType", self.instance_type)
        _put(out, "additionalTags", _sorted_map(self.additional_tags))
        _put(out, "iamInstanceProfile", self.iam_instance_profile)
        _put_ptr(out, "publicIP", self.public_ip)
        _put(
            out,
            "additionalSecurityGroups",
            [_ref_to_dict(r) for r in self.additional_security_groups],
        )
        _put_ptr(out, "availabilityZone", self.availability_zone)
        _put_ptr(out, "subnet", None if self.subnet is None else _ref_to_dict(self.subnet))
        _put(out, "keyName", self.key_name)
        _put(out, "rootDeviceSize", self.root_device_size)
        out["kubeadmConfiguration"] = {
            "join": dict(self.kubeadm_configuration.join),
            "init": dict(self.kubeadm_configuration.init),
        }
        _put(out, "additionalUserDataFiles", [dict(f) for f in self.additional_user_data_files])
        return out

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AWSMachineProviderSpec":
        """Build a spec from its JSON-ready form."""
        data = data or {}
        kubeadm = data.get("kubeadmConfiguration") or {}
        subnet = data.get("subnet")
        return cls(
            api_version=_str(data.get("apiVersion")),
            kind=_str(data.get("kind")),
            metadata=_meta_from_dict(data.get("metadata")),
            ami=_ref_from_dict(data.get("ami")),
            image_lookup_org=_str(data.get("imageLookupOrg")),
            instance_type=_str(data.get("instanceType")),
            additional_tags=dict(data.get("additionalTags") or {}),
            iam_instance_profile=_str(data.get("iamInstanceProfile")),
            public_ip=data.get("publicIP"),
            additional_security_groups=[
                _ref_from_dict(r) for r in data.get("additionalSecurityGroups") or []
            ],
            availability_zone=data.get("availabilityZone"),
            subnet=None if subnet is None else _ref_from_dict(subnet),
            key_name=_str(data.get("keyName")),
            root_device_size=int(data.get("rootDeviceSize") or 0),
            kubeadm_configuration=KubeadmConfiguration(
                join=dict(kubeadm.get("join") or {}),
                init=dict(kubeadm.get("init") or {}),
            ),
            additional_user_data_files=[
                dict(f) for f in data.get("additionalUserDataFiles") or []
            ],
        )


@dataclass
class AWSMachineProviderStatus:
    """Provider status of a machine."""

    api_version: str = ""
    kind: str = ""
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    instance_id: Optional[str] = None
    instance_state: Optional[InstanceState] = None
    conditions: List[AWSMachineProviderCondition] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready form of the status."""
        out: Dict[str, Any] = {}
        _type_meta(out, self.api_version, self.kind)
        out["metadata"] = _meta_to_dict(self.metadata)
        _put_ptr(out, "instanceID", self.instance_id)
        _put_ptr(
            out,
            "instanceState",
            None if self.instance_state is None else str(self.instance_state),
        )
        _put(out, "conditions", [_condition_to_dict(c) for c in self.conditions])
        return out

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AWSMachineProviderStatus":
        """Build a status from its JSON-ready form."""
        data = data or {}
        state = data.get("instanceState")
        return cls(
            api_version=_str(data.get("apiVersion")),
            kind=_str(data.get("kind")),
            metadata=_meta_from_dict(data.get("metadata")),
            instance_id=data.get("instanceID"),
            instance_state=None if state is None else _enum(InstanceState, state) or state,
            conditions=[_condition_from_dict(c) for c in data.get("conditions") or []],
        )