import copy

import pytest
import yaml

from gtctl.config import (
    Artifact,
    BareMetalClusterConfig,
    BareMetalClusterMetadata,
    ConfigValidationError,
    SetValues,
    default_bare_metal_config,
    validate_config,
)

VALID_YAML = """
cluster:
  artifact:
    version: v0.4.1
  frontend:
    replicas: 1
    httpAddr: 0.0.0.0:4000
    grpcAddr: 0.0.0.0:4001
    mysqlAddr: 0.0.0.0:4002
    postgresAddr: 0.0.0.0:4003
  meta:
    replicas: 1
    storeAddr: 127.0.0.1:2379
    serverAddr: 0.0.0.0:3002
    httpAddr: 0.0.0.0:14001
  datanode:
    replicas: 3
    rpcAddr: 0.0.0.0:14100
    httpAddr: 0.0.0.0:14300
etcd:
  artifact:
    version: v3.5.7
"""


def _valid_data():
    return yaml.safe_load(VALID_YAML)


def _invalid_hostname_port(data):
    data["cluster"]["meta"]["serverAddr"] = "0.0.0.0:port"
    data["cluster"]["datanode"]["httpAddr"] = "0.0.0.0"
    return data


def _invalid_replicas(data):
    data["cluster"]["frontend"]["replicas"] = 0
    data["cluster"]["datanode"]["replicas"] = -1
    return data


def _invalid_artifact(data):
    data["etcd"]["artifact"] = {"version": "", "local": ""}
    return data


@pytest.mark.parametrize(
    "raw, expected",
    [
        (
            ["cluster.foo=bar", "etcd.foo=bar", "operator.foo=bar"],
            {"cluster_config": "foo=bar", "etcd_config": "foo=bar", "operator_config": "foo=bar"},
        ),
        (
            ["foo=bar", "foo.boo=bar", "foo.boo.coo=bar"],
            {"cluster_config": "foo=bar,foo.boo=bar,foo.boo.coo=bar"},
        ),
        (
            ["etcd.foo=bar", "foo.boo=bar", "foo.boo.coo=bar"],
            {"cluster_config": "foo.boo=bar,foo.boo.coo=bar", "etcd_config": "foo=bar"},
        ),
        ([], {}),
    ],
    ids=["all-with-prefix", "all-without-prefix", "mix-with-prefix", "empty-config"],
)
def test_parse_set_values(raw, expected):
    actual = SetValues(raw_config=list(raw))
    actual.parse()
    assert actual == SetValues(raw_config=list(raw), **expected)


def test_parse_empty_value_raises():
    values = SetValues(raw_config=[""])
    with pytest.raises(ValueError, match="cannot parse empty config values"):
        values.parse()


def test_parse_comma_separated_and_trimmed():
    values = SetValues(raw_config=["operator.a=1, cluster.b=2 ,c=3"])
    values.parse()
    assert values.operator_config == "a=1"
    assert values.cluster_config == "b=2,c=3"
    assert values.etcd_config == ""


def test_valid_config_passes():
    config = BareMetalClusterConfig.from_dict(_valid_data())
    assert validate_config(config) is None
    assert config.cluster.datanode.replicas == 3


@pytest.mark.parametrize(
    "mutate, keys",
    [
        (
            _invalid_hostname_port,
            ["Config.Cluster.MetaSrv.ServerAddr", "Config.Cluster.Datanode.HTTPAddr"],
        ),
        (
            _invalid_replicas,
            ["Config.Cluster.Frontend.Replicas", "Config.Cluster.Datanode.Replicas"],
        ),
        (_invalid_artifact, ["Config.Etcd.Artifact.Artifact"]),
    ],
    ids=["invalid_hostname_port", "invalid_replicas", "invalid_artifact"],
)
def test_invalid_configs(mutate, keys):
    config = BareMetalClusterConfig.from_dict(mutate(_valid_data()))
    with pytest.raises(ConfigValidationError) as info:
        validate_config(config)
    message = str(info.value)
    for key in keys:
        assert key in message
    assert len(info.value.errors) == len(keys)


def test_validate_none_raises():
    with pytest.raises(ConfigValidationError, match="no config to validate"):
        validate_config(None)


def test_missing_required_section():
    data = _valid_data()
    del data["cluster"]
    with pytest.raises(ConfigValidationError) as info:
        validate_config(BareMetalClusterConfig.from_dict(data))
    assert info.value.errors == [
        "Key: 'BareMetalClusterConfig.Cluster' Error:Field validation for 'Cluster' "
        "failed on the 'required' tag"
    ]


def test_local_artifact_satisfies_artifact_check(tmp_path):
    data = _valid_data()
    data["etcd"]["artifact"] = {"local": str(tmp_path / "etcd")}
    assert validate_config(BareMetalClusterConfig.from_dict(data)) is None


def test_local_artifact_directory_is_rejected(tmp_path):
    data = _valid_data()
    data["etcd"]["artifact"] = {"local": str(tmp_path)}
    with pytest.raises(ConfigValidationError) as info:
        validate_config(BareMetalClusterConfig.from_dict(data))
    assert "BareMetalClusterConfig.Etcd.Artifact.Local" in str(info.value)
    assert "'filepath'" in str(info.value)


def test_existing_data_dir_is_accepted(tmp_path):
    data = _valid_data()
    data["cluster"]["datanode"]["dataDir"] = str(tmp_path)
    assert validate_config(BareMetalClusterConfig.from_dict(data)) is None


@pytest.mark.parametrize(
    "addr, ok",
    [
        ("0.0.0.0:4001", True),
        (":4001", True),
        ("localhost:4001", True),
        ("localhost", False),
        ("host:0", False),
        ("host:65536", False),
        ("a:b:4001", False),
    ],
)
def test_hostname_port_rule(addr, ok):
    data = _valid_data()
    data["cluster"]["frontend"]["grpcAddr"] = addr
    config = BareMetalClusterConfig.from_dict(data)
    if ok:
        assert validate_config(config) is None
    else:
        with pytest.raises(ConfigValidationError, match="Frontend.GRPCAddr"):
            validate_config(config)


def test_default_config_values():
    config = default_bare_metal_config("v0.4.1", "v3.5.7")
    assert config.cluster.artifact == Artifact(version="v0.4.1")
    assert config.etcd.artifact == Artifact(version="v3.5.7")
    assert config.cluster.frontend.http_addr == "0.0.0.0:4000"
    assert config.cluster.frontend.grpc_addr == "0.0.0.0:4001"
    assert config.cluster.frontend.mysql_addr == "0.0.0.0:4002"
    assert config.cluster.frontend.postgres_addr == "0.0.0.0:4003"
    assert config.cluster.meta_srv.store_addr == "127.0.0.1:2379"
    assert config.cluster.meta_srv.server_addr == "0.0.0.0:3002"
    assert config.cluster.meta_srv.http_addr == "0.0.0.0:14001"
    assert config.cluster.datanode.replicas == 3
    assert config.cluster.datanode.rpc_addr == "0.0.0.0:14100"
    assert config.cluster.datanode.http_addr == "0.0.0.0:14300"
    assert validate_config(config) is None


def test_to_dict_uses_yaml_keys():
    data = default_bare_metal_config("v0.4.1", "v3.5.7").to_dict()
    assert data["cluster"]["meta"]["storeAddr"] == "127.0.0.1:2379"
    assert data["cluster"]["datanode"]["nodeID"] == 0
    assert data["etcd"]["artifact"] == {"local": "", "version": "v3.5.7"}


def test_round_trip_through_yaml():
    config = default_bare_metal_config("v0.4.1", "v3.5.7")
    text = yaml.safe_dump(config.to_dict())
    assert BareMetalClusterConfig.from_dict(yaml.safe_load(text)) == config


def test_from_dict_rejects_non_mapping():
    with pytest.raises(ValueError):
        BareMetalClusterConfig.from_dict({"cluster": ["not", "a", "mapping"]})


def test_from_dict_does_not_mutate_input():
    data = _valid_data()
    snapshot = copy.deepcopy(data)
    BareMetalClusterConfig.from_dict(data)
    assert data == snapshot


def test_metadata_to_dict():
    from datetime import datetime

    config = default_bare_metal_config("v0.4.1", "v3.5.7")
    created = datetime(2023, 5, 1, 12, 0, 0)
    meta = BareMetalClusterMetadata(
        config=config, creation_date=created, cluster_dir="/tmp/c", foreground_pid=42
    )
    data = meta.to_dict()
    assert data["creationDate"] == created
    assert data["clusterDir"] == "/tmp/c"
    assert data["foregroundPid"] == 42
    assert BareMetalClusterConfig.from_dict(data["config"]) == config