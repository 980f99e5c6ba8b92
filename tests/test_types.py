import pytest

from awsclusterprovider.tags import Tags, cluster_tag_key
from awsclusterprovider.types import (
    ClassicELBScheme,
    IngressRule,
    IngressRules,
    InstanceState,
    KeyPair,
    SecurityGroup,
    SecurityGroupProtocol,
    SubnetSpec,
    Subnets,
    VPCSpec,
)


def _subnets():
    return Subnets(
        [
            SubnetSpec(id="a", availability_zone="z1", is_public=True),
            SubnetSpec(id="b", availability_zone="z1", is_public=False),
            SubnetSpec(id="c", availability_zone="z2", is_public=False),
        ]
    )


def test_keypair_has_cert_and_key():
    assert KeyPair(cert=b"c", key=b"k").has_cert_and_key()
    assert not KeyPair(cert=b"c").has_cert_and_key()
    assert not KeyPair().has_cert_and_key()


def test_vpc_str():
    assert str(VPCSpec(id="vpc-1")) == "id=vpc-1"


def test_vpc_is_unmanaged():
    assert VPCSpec(id="vpc-1").is_unmanaged("c1")
    owned = VPCSpec(id="vpc-1", tags=Tags({cluster_tag_key("c1"): "owned"}))
    assert not owned.is_unmanaged("c1")
    assert owned.is_unmanaged("c2")
    assert not VPCSpec().is_unmanaged("c1")


def test_subnet_str():
    subnet = SubnetSpec(id="subnet-1", availability_zone="zone-a", is_public=True)
    assert str(subnet) == "id=subnet-1/az=zone-a/public=true"


def test_subnets_to_map_and_find():
    subnets = _subnets()
    mapping = subnets.to_map()
    assert sorted(mapping) == ["a", "b", "c"]
    assert mapping["b"] is subnets[1]
    assert subnets.find_by_id("c") is subnets[2]
    assert subnets.find_by_id("missing") is None


def test_subnets_filters():
    subnets = _subnets()
    assert [s.id for s in subnets.filter_public()] == ["a"]
    assert [s.id for s in subnets.filter_private()] == ["b", "c"]
    assert [s.id for s in subnets.filter_by_zone("z1")] == ["a", "b"]
    assert isinstance(subnets.filter_by_zone("z1"), Subnets)
    assert subnets.filter_by_zone("none") == []


def test_security_group_str():
    assert str(SecurityGroup(id="sg-1", name="web")) == "id=sg-1/name=web"


def test_ingress_rule_str():
    rule = IngressRule("ssh", SecurityGroupProtocol.TCP, 22, 22)
    assert str(rule) == "protocol=tcp/range=[22-22]/description=ssh"


def test_ingress_rule_equals_ignores_order():
    a = IngressRule("x", SecurityGroupProtocol.TCP, 1, 2, ["b", "a"], ["s2", "s1"])
    b = IngressRule("x", SecurityGroupProtocol.TCP, 1, 2, ["a", "b"], ["s1", "s2"])
    assert a.equals(b)
    assert b.equals(a)


@pytest.mark.parametrize(
    "other",
    [
        IngressRule("y", SecurityGroupProtocol.TCP, 1, 2, ["a"]),
        IngressRule("x", SecurityGroupProtocol.UDP, 1, 2, ["a"]),
        IngressRule("x", SecurityGroupProtocol.TCP, 0, 2, ["a"]),
        IngressRule("x", SecurityGroupProtocol.TCP, 1, 3, ["a"]),
        IngressRule("x", SecurityGroupProtocol.TCP, 1, 2, ["a", "b"]),
        IngressRule("x", SecurityGroupProtocol.TCP, 1, 2, ["a"], ["s"]),
    ],
)
def test_ingress_rule_not_equal(other):
    base = IngressRule("x", SecurityGroupProtocol.TCP, 1, 2, ["a"])
    assert not base.equals(other)


def test_ingress_rules_difference():
    r1 = IngressRule("one", SecurityGroupProtocol.TCP, 1, 1)
    r2 = IngressRule("two", SecurityGroupProtocol.UDP, 2, 2)
    r2_copy = IngressRule("two", SecurityGroupProtocol.UDP, 2, 2)
    diff = IngressRules([r1, r2]).difference(IngressRules([r2_copy]))
    assert diff == [r1]
    assert isinstance(diff, IngressRules)
    assert IngressRules([r1]).difference([r1]) == []


def test_enum_values_from_source():
    assert SecurityGroupProtocol.ALL.value == "-1"
    assert SecurityGroupProtocol.ICMPV6.value == "58"
    assert ClassicELBScheme.INTERNET_FACING.value == "Internet-facing"
    assert InstanceState("shutting-down") is InstanceState.SHUTTING_DOWN