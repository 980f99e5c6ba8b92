"""Bookkeeping of a machine's security groups and tags through annotations."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Protocol, Tuple

from .types import AWSResourceReference

SECURITY_GROUPS_LAST_APPLIED_ANNOTATION = (
    "sigs.k8s.io/cluster-api-provider-aws-last-applied-security-groups"
)
TAGS_LAST_APPLIED_ANNOTATION = "sigs.k8s.io/cluster-api-provider-aws-last-applied-tags"

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class EC2MachineService(Protocol):
    """The EC2 operations needed to keep a machine's groups and tags in step."""

    def get_core_security_groups(self, scope: Any) -> List[str]:
        """Return the ids of the security groups every such machine must have."""
        ...

    def update_instance_security_groups(self, instance_id: str, ids: List[str]) -> None:
        """Replace the security groups of an instance."""
        ...

    def update_resource_tags(
        self,
        resource_id: Optional[str],
        create: Dict[str, str],
        remove: Dict[str, str],
    ) -> None:
        """Create or update and remove tags on a resource."""
        ...


def _encode_json(content: Mapping[str, Any]) -> str:
    text = json.dumps(content, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def update_annotation(
    annotations: MutableMapping[str, str], annotation: str, content: str
) -> None:
    """Set an annotation to the given content."""
    annotations[annotation] = content


def update_annotation_json(
    annotations: MutableMapping[str, str], annotation: str, content: Mapping[str, Any]
) -> None:
    """Set an annotation to the JSON encoding of a mapping."""
    update_annotation(annotations, annotation, _encode_json(content))


def annotation_value(annotations: Optional[Mapping[str, str]], annotation: str) -> str:
    """Return an annotation's value, or an empty string if it is not set."""
    return (annotations or {}).get(annotation, "")


def annotation_json(
    annotations: Optional[Mapping[str, str]], annotation: str
) -> Dict[str, Any]:
    """Decode an annotation holding a JSON object; an unset one yields {}.

    Raises ValueError if the annotation is not a JSON object.
    """
    raw = annotation_value(annotations, annotation)
    if not raw:
        return {}
    data = json.loads(raw)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"annotation {annotation!r} holds a JSON {type(data).__name__}, not an object"
        )
    return data


def _reference_id(ref: AWSResourceReference) -> str:
    if ref.id is None:
        raise ValueError("security group reference has no id")
    return ref.id


def security_groups_changed(
    annotation: Mapping[str, Any],
    core: Iterable[str],
    additional: Iterable[AWSResourceReference],
    existing: Mapping[str, List[str]],
) -> Tuple[bool, List[str]]:
    """Work out the security groups an instance should have.

    Returns whether they differ from any of the existing group lists, and the
    sorted ids of the groups to apply.
    """
    state: Dict[str, bool] = {_reference_id(ref): True for ref in additional}

    # Groups applied last time but no longer requested are dropped.
    for group_id in annotation:
        state.setdefault(group_id, False)

    for group_id in core:
        state[group_id] = True

    wanted = sorted(group_id for group_id, keep in state.items() if keep)

    changed = any(sorted(actual) != wanted for actual in existing.values())
    return changed, wanted


def ensure_security_groups(
    ec2svc: EC2MachineService,
    scope: Any,
    annotations: MutableMapping[str, str],
    instance_id: str,
    additional: List[AWSResourceReference],
    existing: Mapping[str, List[str]],
) -> bool:
    """Bring the instance's security groups in line; return True if they changed."""
    annotation = annotation_json(annotations, SECURITY_GROUPS_LAST_APPLIED_ANNOTATION)
    core = ec2svc.get_core_security_groups(scope)

    changed, ids = security_groups_changed(annotation, core, additional, existing)
    if not changed:
        return False

    ec2svc.update_instance_security_groups(instance_id, ids)

    new_annotation = {_reference_id(ref): {} for ref in additional}
    update_annotation_json(annotations, SECURITY_GROUPS_LAST_APPLIED_ANNOTATION, new_annotation)
    return True


def tags_changed(
    annotation: Mapping[str, Any], src: Mapping[str, str]
) -> Tuple[bool, Dict[str, str], Dict[str, str], Dict[str, Any]]:
    """Compare the wanted tags with those applied last time.

    Returns whether anything changed, the tags to create or update, the tags
    to delete, and the annotation to record.
    """
    created: Dict[str, str] = {}
    deleted: Dict[str, str] = {}

    for key, value in annotation.items():
        if key not in src:
            if not isinstance(value, str):
                raise TypeError(f"tag {key!r} in annotation is not a string")
            deleted[key] = value

    for key, value in src.items():
        if key not in annotation or annotation[key] != value:
            created[key] = value

    new_annotation: Dict[str, Any] = dict(src)
    changed = bool(created or deleted)
    return changed, created, deleted, new_annotation


def ensure_tags(
    svc: EC2MachineService,
    annotations: MutableMapping[str, str],
    instance_id: Optional[str],
    additional_tags: Mapping[str, str],
) -> bool:
    """Bring the instance's additional tags in line; return True if they changed."""
    annotation = annotation_json(annotations, TAGS_LAST_APPLIED_ANNOTATION)

    changed, created, deleted, new_annotation = tags_changed(annotation, additional_tags)
    if changed:
        svc.update_resource_tags(instance_id, created, deleted)
        update_annotation_json(annotations, TAGS_LAST_APPLIED_ANNOTATION, new_annotation)
    return changed