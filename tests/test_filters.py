import pytest

from awsclusterprovider import filters
from awsclusterprovider.filters import EC2Filter
from awsclusterprovider.tags import NAME_AWS_CLUSTER_API_ROLE, cluster_tag_key


def test_cluster_filter_uses_tag_key():
    flt = filters.cluster("alpha")
    assert flt.name == "tag-key"
    assert flt.values == [cluster_tag_key("alpha")]


def test_name_filter():
    assert filters.name("web") == EC2Filter("tag:Name", ["web"])


def test_cluster_owned_and_shared():
    owned = filters.cluster_owned("alpha")
    shared = filters.cluster_shared("alpha")
    assert owned.name == shared.name == "tag:" + cluster_tag_key("alpha")
    assert owned.values == ["owned"]
    assert shared.values == ["shared"]


def test_provider_role():
    flt = filters.provider_role("bastion")
    assert flt.name == "tag:" + NAME_AWS_CLUSTER_API_ROLE
    assert flt.values == ["bastion"]


def test_vpc_filters():
    assert filters.vpc("vpc-1") == EC2Filter("vpc-id", ["vpc-1"])
    assert filters.vpc_attachment("vpc-1") == EC2Filter("attachment.vpc-id", ["vpc-1"])


def test_available():
    assert filters.available() == EC2Filter("state", ["available"])


@pytest.mark.parametrize(
    "func,filter_name",
    [
        (filters.nat_gateway_states, "state"),
        (filters.instance_states, "instance-state-name"),
        (filters.vpc_states, "state"),
        (filters.subnet_states, "state"),
    ],
)
def test_state_filters_keep_order(func, filter_name):
    flt = func("pending", "running")
    assert flt.name == filter_name
    assert flt.values == ["pending", "running"]


def test_state_filter_without_states_is_empty():
    assert filters.instance_states().values == []


def test_to_api_shape():
    assert filters.vpc("vpc-9").to_api() == {"Name": "vpc-id", "Values": ["vpc-9"]}