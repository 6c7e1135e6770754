from dataclasses import dataclass, field

import pytest
import yaml

from gtctl.helm_values import Values, merge_maps, parse_set_values, to_helm_values


@dataclass
class _Opts:
    image_registry: str = field(default="", metadata={"helm": "image.registry"})
    version: str = field(default="", metadata={"helm": "image.tag"})
    config_values: str = field(default="", metadata={"helm": "*"})
    untagged: str = "ignored"


BASE = """image:
  registry: docker.io
  repository: greptime/greptimedb
  tag: latest
resources:
  limits:
    cpu: 500m
"""


def test_from_file_round_trip(tmp_path):
    p = tmp_path / "values.yaml"
    p.write_text(BASE)
    assert Values.from_file(str(p)).output_values().decode() == BASE


def test_to_helm_values(tmp_path):
    p = tmp_path / "values.yaml"
    p.write_text(BASE)
    opts = _Opts(
        image_registry="greptime-registry.cn-hangzhou.cr.aliyuncs.com",
        version="v0.1.0",
        config_values="resources.limits.cpu=100m,resources.limits.memory=256Mi",
    )
    v = to_helm_values(opts, str(p))
    assert v == {
        "image": {"registry": "greptime-registry.cn-hangzhou.cr.aliyuncs.com",
                  "repository": "greptime/greptimedb", "tag": "v0.1.0"},
        "resources": {"limits": {"cpu": "100m", "memory": "256Mi"}},
    }
    assert yaml.safe_load(v.output_values()) == v


def test_to_helm_values_without_file():
    assert to_helm_values(_Opts(version="v1"), "") == {"image": {"tag": "v1"}}
    assert to_helm_values(_Opts(), "") == {}


def test_rejects_non_dataclass():
    with pytest.raises(TypeError):
        to_helm_values({"a": 1}, "")


def test_merge_maps():
    assert merge_maps({"a": {"b": 1, "c": 2}, "d": 1}, {"a": {"b": 3}, "d": {"x": 1}}) == {
        "a": {"b": 3, "c": 2}, "d": {"x": 1}}


def test_parse_set_values_types():
    assert parse_set_values("a=true,b=10,c=007,d=null,e.f[1]=x,g={1,two}") == {
        "a": True, "b": 10, "c": "007", "d": None, "e": {"f": [None, "x"]}, "g": [1, "two"]}


def test_parse_set_values_missing_value():
    with pytest.raises(ValueError):
        parse_set_values("novalue")