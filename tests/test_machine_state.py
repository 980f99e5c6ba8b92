import json

import pytest

from awsclusterprovider.machine_state import (
    SECURITY_GROUPS_LAST_APPLIED_ANNOTATION,
    TAGS_LAST_APPLIED_ANNOTATION,
    annotation_json,
    annotation_value,
    ensure_security_groups,
    ensure_tags,
    security_groups_changed,
    tags_changed,
    update_annotation,
    update_annotation_json,
)
from awsclusterprovider.types import AWSResourceReference


class FakeService:
    def __init__(self, core=None):
        self.core = list(core or [])
        self.group_updates = []
        self.tag_updates = []
        self.scopes = []

    def get_core_security_groups(self, scope):
        self.scopes.append(scope)
        return list(self.core)

    def update_instance_security_groups(self, instance_id, ids):
        self.group_updates.append((instance_id, list(ids)))

    def update_resource_tags(self, resource_id, create, remove):
        self.tag_updates.append((resource_id, dict(create), dict(remove)))


def refs(*ids):
    return [AWSResourceReference(id=i) for i in ids]


def test_update_annotation_sets_value():
    annotations = {"other": "x"}
    update_annotation(annotations, "key", "value")
    assert annotations == {"other": "x", "key": "value"}
    assert annotation_value(annotations, "key") == "value"


def test_annotation_value_missing_is_empty():
    assert annotation_value({}, "key") == ""
    assert annotation_value(None, "key") == ""


def test_annotation_json_round_trip():
    annotations = {}
    content = {"b": "2", "a": "1", "nested": {}}
    update_annotation_json(annotations, "key", content)
    assert annotation_json(annotations, "key") == content


def test_annotation_json_is_compact_and_sorted():
    annotations = {}
    update_annotation_json(annotations, "key", {"b": "2", "a": "1"})
    assert annotations["key"] == '{"a":"1","b":"2"}'


def test_annotation_json_escapes_html_characters():
    annotations = {}
    update_annotation_json(annotations, "key", {"k": "<&>"})
    assert "<" not in annotations["key"]
    assert json.loads(annotations["key"]) == {"k": "<&>"}


def test_annotation_json_missing_is_empty():
    assert annotation_json({}, "key") == {}
    assert annotation_json({"key": "null"}, "key") == {}


def test_annotation_json_invalid_raises():
    with pytest.raises(ValueError):
        annotation_json({"key": "{not json"}, "key")


def test_annotation_json_non_object_raises():
    with pytest.raises(ValueError):
        annotation_json({"key": "[1, 2]"}, "key")


def test_security_groups_unchanged_without_existing():
    changed, ids = security_groups_changed({}, ["sg-core"], refs("sg-b", "sg-a"), {})
    assert changed is False
    assert ids == sorted(["sg-core", "sg-b", "sg-a"])


def test_security_groups_same_set_not_changed():
    changed, ids = security_groups_changed(
        {}, ["sg-core"], refs("sg-a"), {"eni-1": ["sg-a", "sg-core"]}
    )
    assert changed is False
    assert ids == ["sg-a", "sg-core"]


def test_security_groups_different_length_changed():
    changed, ids = security_groups_changed(
        {}, ["sg-core"], refs("sg-a"), {"eni-1": ["sg-core"]}
    )
    assert changed is True
    assert set(ids) == {"sg-a", "sg-core"}


def test_security_groups_different_ids_changed():
    changed, _ = security_groups_changed(
        {}, ["sg-core"], refs("sg-a"), {"eni-1": ["sg-core", "sg-other"]}
    )
    assert changed is True


def test_security_groups_removed_from_annotation_are_dropped():
    changed, ids = security_groups_changed(
        {"sg-old": {}}, ["sg-core"], refs("sg-a"), {"eni-1": ["sg-a", "sg-core", "sg-old"]}
    )
    assert changed is True
    assert "sg-old" not in ids
    assert set(ids) == {"sg-a", "sg-core"}


def test_security_groups_core_overrides_removed_annotation():
    _, ids = security_groups_changed({"sg-core": {}}, ["sg-core"], [], {})
    assert ids == ["sg-core"]


def test_security_groups_reference_without_id_raises():
    with pytest.raises(ValueError):
        security_groups_changed({}, [], [AWSResourceReference()], {})


def test_ensure_security_groups_applies_changes():
    svc = FakeService(core=["sg-core"])
    annotations = {}
    scope = object()
    result = ensure_security_groups(
        svc, scope, annotations, "i-1", refs("sg-a"), {"eni-1": ["sg-core"]}
    )
    assert result is True
    assert svc.scopes == [scope]
    assert svc.group_updates == [("i-1", ["sg-a", "sg-core"])]
    assert annotation_json(annotations, SECURITY_GROUPS_LAST_APPLIED_ANNOTATION) == {"sg-a": {}}


def test_ensure_security_groups_no_change():
    svc = FakeService(core=["sg-core"])
    annotations = {}
    result = ensure_security_groups(
        svc, None, annotations, "i-1", refs("sg-a"), {"eni-1": ["sg-core", "sg-a"]}
    )
    assert result is False
    assert svc.group_updates == []
    assert SECURITY_GROUPS_LAST_APPLIED_ANNOTATION not in annotations


def test_tags_changed_new_tag():
    changed, created, deleted, new = tags_changed({}, {"env": "prod"})
    assert changed is True
    assert created == {"env": "prod"}
    assert deleted == {}
    assert new == {"env": "prod"}


def test_tags_changed_deleted_tag():
    changed, created, deleted, new = tags_changed({"old": "v"}, {})
    assert changed is True
    assert created == {}
    assert deleted == {"old": "v"}
    assert new == {}


def test_tags_changed_updated_value():
    changed, created, deleted, new = tags_changed({"env": "dev"}, {"env": "prod"})
    assert changed is True
    assert created == {"env": "prod"}
    assert deleted == {}
    assert new == {"env": "prod"}


def test_tags_changed_nothing():
    changed, created, deleted, new = tags_changed({"env": "prod"}, {"env": "prod"})
    assert changed is False
    assert created == {}
    assert deleted == {}
    assert new == {"env": "prod"}


def test_tags_changed_non_string_deleted_value_raises():
    with pytest.raises(TypeError):
        tags_changed({"old": 1}, {})


def test_ensure_tags_applies_and_records():
    svc = FakeService()
    annotations = {TAGS_LAST_APPLIED_ANNOTATION: json.dumps({"old": "v", "keep": "k"})}
    result = ensure_tags(svc, annotations, "i-1", {"keep": "k", "new": "n"})
    assert result is True
    assert svc.tag_updates == [("i-1", {"new": "n"}, {"old": "v"})]
    assert annotation_json(annotations, TAGS_LAST_APPLIED_ANNOTATION) == {"keep": "k", "new": "n"}


def test_ensure_tags_second_pass_is_stable():
    svc = FakeService()
    annotations = {}
    assert ensure_tags(svc, annotations, "i-1", {"a": "1"}) is True
    assert ensure_tags(svc, annotations, "i-1", {"a": "1"}) is False
    assert len(svc.tag_updates) == 1


def test_ensure_tags_bad_annotation_raises():
    svc = FakeService()
    with pytest.raises(ValueError):
        ensure_tags(svc, {TAGS_LAST_APPLIED_ANNOTATION: "not-json"}, "i-1", {})
    assert svc.tag_updates == []