from __future__ import annotations

import json

import pytest

from linkerd_inject.core.constants import INIT_CONTAINERS_ANNOTATION, MARKER_ANNOTATION
from linkerd_inject.core.errors import JsonEncodeError, JsonParseError, YamlDecodeError
from linkerd_inject.core.inject import (
    build_init_container, decode_init_containers, encode_init_containers, inject_pod_template,
)
from linkerd_inject.core.types import InjectParams


def _template(annotations: dict | None = None) -> dict:
    t = {"spec": {"containers": [{"name": "app", "image": "nginx"}]}}
    if annotations is not None:
        t["metadata"] = {"annotations": annotations}
    return t


def _init_containers(template: dict) -> list:
    return json.loads(template["metadata"]["annotations"][INIT_CONTAINERS_ANNOTATION])


def test_default_args() -> None:
    assert InjectParams().init_args() == ["-p", "4140", "-m", "false", "-s", "L5D"]


def test_custom_args() -> None:
    params = InjectParams(proxy_port="9999", proxy_service_name="meshproxy",
                          use_service_vip=True)
    assert params.init_args() == ["-p", "9999", "-m", "true", "-s", "MESHPROXY"]


def test_proxy_port_is_opaque() -> None:
    assert InjectParams(proxy_port="not-a-port").init_args()[1] == "not-a-port"


def test_init_container_descriptor() -> None:
    assert build_init_container(InjectParams()) == {
        "name": "init-linkerd",
        "image": "linkerd/istio-init:v1",
        "args": ["-p", "4140", "-m", "false", "-s", "L5D"],
        "env": [{
            "name": "NODE_NAME",
            "valueFrom": {"fieldRef": {"apiVersion": "v1", "fieldPath": "spec.nodeName"}},
        }],
        "imagePullPolicy": "IfNotPresent",
        "securityContext": {"capabilities": {"add": ["NET_ADMIN"]}},
    }


def test_inject_into_template_without_metadata() -> None:
    t = _template()
    assert inject_pod_template(InjectParams(), t) is True
    annotations = t["metadata"]["annotations"]
    assert annotations[MARKER_ANNOTATION] == "injected"
    containers = _init_containers(t)
    assert len(containers) == 1
    assert containers[0]["name"] == "init-linkerd"
    # Pod spec itself is not touched
    assert t["spec"] == {"containers": [{"name": "app", "image": "nginx"}]}


def test_inject_keeps_unrelated_annotations() -> None:
    t = _template({"prometheus.io/scrape": "true"})
    inject_pod_template(InjectParams(), t)
    assert t["metadata"]["annotations"]["prometheus.io/scrape"] == "true"


def test_inject_with_null_annotations() -> None:
    t = {"metadata": {"annotations": None}}
    assert inject_pod_template(InjectParams(), t) is True
    assert MARKER_ANNOTATION in t["metadata"]["annotations"]


def test_marker_present_means_no_change() -> None:
    original = {MARKER_ANNOTATION: "anything", INIT_CONTAINERS_ANNOTATION: "not even json"}
    t = _template(dict(original))
    assert inject_pod_template(InjectParams(), t) is False
    assert t["metadata"]["annotations"] == original


def test_inject_twice_is_a_noop() -> None:
    t = _template()
    inject_pod_template(InjectParams(), t)
    snapshot = json.dumps(t, sort_keys=True)
    assert inject_pod_template(InjectParams(proxy_port="1"), t) is False
    assert json.dumps(t, sort_keys=True) == snapshot


def test_existing_entries_are_preserved_and_new_one_appended() -> None:
    existing = [
        {"name": "other", "image": "busybox"},
        {"name": "third", "image": "alpine", "x-custom": {"keep": [1, 2]}},
    ]
    t = _template({INIT_CONTAINERS_ANNOTATION: json.dumps(existing)})
    inject_pod_template(InjectParams(), t)
    containers = _init_containers(t)
    assert containers[:2] == existing
    assert containers[2]["name"] == "init-linkerd"
    assert t["metadata"]["annotations"][MARKER_ANNOTATION] == "injected"


def test_existing_null_annotation_is_an_empty_list() -> None:
    t = _template({INIT_CONTAINERS_ANNOTATION: "null"})
    inject_pod_template(InjectParams(), t)
    assert [c["name"] for c in _init_containers(t)] == ["init-linkerd"]


@pytest.mark.parametrize("value", ["[{", '{"name": "other"}', '"text"', "42"])
def test_existing_annotation_must_be_a_json_array(value: str) -> None:
    t = _template({INIT_CONTAINERS_ANNOTATION: value})
    with pytest.raises(JsonParseError):
        inject_pod_template(InjectParams(), t)


def test_existing_annotation_must_be_a_string() -> None:
    with pytest.raises(YamlDecodeError, match="must be a string"):
        decode_init_containers(["already", "decoded"])


def test_yaml_list_annotation_is_a_decode_error() -> None:
    t = _template({INIT_CONTAINERS_ANNOTATION: [1]})
    with pytest.raises(YamlDecodeError):
        inject_pod_template(InjectParams(), t)
    assert MARKER_ANNOTATION not in t["metadata"]["annotations"]


def test_encoding_is_compact_with_sorted_keys() -> None:
    assert encode_init_containers([{"name": "a", "image": "b"}]) == '[{"image":"b","name":"a"}]'


def test_encoding_failure() -> None:
    with pytest.raises(JsonEncodeError):
        encode_init_containers([{"name": object()}])


def test_non_mapping_annotations_is_a_decode_error() -> None:
    with pytest.raises(YamlDecodeError):
        inject_pod_template(InjectParams(), {"metadata": {"annotations": ["a"]}})
