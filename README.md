# awsclusterprovider

Building blocks for tools that manage Kubernetes clusters on AWS. The
package contains:

- **API types** (`awsclusterprovider.types`): VPC and subnet specs, the
  `Subnets` list with its filters, security groups and ingress rules (with
  `IngressRule.equals` and `IngressRules.difference`), classic ELB
  descriptions, key pairs, instances and their states.
- **Provider specs and statuses** (`awsclusterprovider.provider_config`):
  `AWSClusterProviderSpec`, `AWSClusterProviderStatus`,
  `AWSMachineProviderSpec` and `AWSMachineProviderStatus`, each with
  `to_dict()` and `from_dict()` for their JSON form.
- **Serialisation** (`awsclusterprovider.register`): decode provider specs and
  statuses from raw YAML or JSON held in a `RawExtension`, and encode them
  back as JSON. `SCHEME_GROUP_VERSION` names the API group and version.
- **Tags** (`awsclusterprovider.tags`): the `Tags` mapping with ownership and
  role checks, `cluster_tag_key()` and `cluster_aws_cloud_provider_tag_key()`,
  and `build()` for the standard tag set of a resource.
- **EC2 filters** (`awsclusterprovider.filters`): ready-made `EC2Filter`
  values such as `cluster_owned()`, `vpc()` or `instance_states()`;
  `EC2Filter.to_api()` gives the `{"Name", "Values"}` shape the EC2 API takes.
- **Converters** (`awsclusterprovider.converters`): turn an EC2
  DescribeInstances instance into an `Instance` with `sdk_to_instance()`, and
  convert between `{"Key", "Value"}` tag lists and `Tags`.
- **Machine state** (`awsclusterprovider.machine_state`): work out which
  security groups and tags have changed on a machine, keeping a record of
  what was last applied in JSON annotations.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Build the tags of a resource and check who owns it:

```python
from awsclusterprovider.tags import BuildParams, ResourceLifecycle, build

tags = build(BuildParams(
    lifecycle=ResourceLifecycle.OWNED,
    cluster_name="demo",
    name="demo-vpc",
    role="common",
))
assert tags.has_owned("demo")
assert tags.get_role() == "common"
```

Filter subnets:

```python
from awsclusterprovider.types import SubnetSpec, Subnets

subnets = Subnets([
    SubnetSpec(id="subnet-1", availability_zone="us-east-1a", is_public=True),
    SubnetSpec(id="subnet-2", availability_zone="us-east-1a"),
])
public = subnets.filter_public()
private_in_zone = subnets.filter_by_zone("us-east-1a").filter_private()
```

Find out which tags on a machine need to change:

```python
from awsclusterprovider.machine_state import tags_changed

changed, created, deleted, new_annotation = tags_changed(
    {"team": "infra", "old": "x"},
    {"team": "platform"},
)
# changed is True, created == {"team": "platform"}, deleted == {"old": "x"}
```

Round-trip a machine status through its raw form:

```python
from awsclusterprovider.provider_config import AWSMachineProviderStatus
from awsclusterprovider.register import (
    encode_machine_status,
    machine_status_from_provider_status,
)

raw = encode_machine_status(AWSMachineProviderStatus(instance_id="i-0abc"))
status = machine_status_from_provider_status(raw)
```

## What the package does not do

The package does not talk to AWS or to a Kubernetes API server, and it has no
command-line tool or long-running controller. `ensure_security_groups()` and
`ensure_tags()` in `awsclusterprovider.machine_state` take an object that
implements the `EC2MachineService` protocol; supplying one that makes the
actual EC2 calls is up to the caller. There is no classification of AWS API
errors either: callers handle the exceptions their own AWS client raises.