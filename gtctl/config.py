"""Cluster configuration models, ``--set`` value parsing and validation."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Optional

# Prefixes that route a ``--set`` value to a specific chart.
_CONFIG_OPERATOR = "operator"
_CONFIG_CLUSTER = "cluster"
_CONFIG_ETCD = "etcd"

_HOSTNAME_RE = re.compile(
    r"^([a-zA-Z0-9]{1}[a-zA-Z0-9-]{0,62}){1}(\.[a-zA-Z0-9]{1}[a-zA-Z0-9-]{0,62})*?$"
)
_PORT_RE = re.compile(r"^[+-]?[0-9]+$")


def _spec(key: str, name: str, rules: str = "", *, default: Any = "", struct: Any = None):
    """Declare a config field with its YAML key, display name and validation rules."""
    return field(
        default=default,
        metadata={"yaml": key, "go": name, "rules": rules, "struct": struct},
    )


@dataclass
class Artifact:
    """Where to get a binary: a local path or a release version."""

    local: str = _spec("local", "Local", "omitempty,filepath")
    version: str = _spec("version", "Version")


@dataclass
class Datanode:
    node_id: int = _spec("nodeID", "NodeID", "gte=0", default=0)
    rpc_addr: str = _spec("rpcAddr", "RPCAddr", "required,hostname_port")
    http_addr: str = _spec("httpAddr", "HTTPAddr", "required,hostname_port")
    data_dir: str = _spec("dataDir", "DataDir", "omitempty,dirpath")
    wal_dir: str = _spec("walDir", "WalDir", "omitempty,dirpath")
    procedure_dir: str = _spec("procedureDir", "ProcedureDir", "omitempty,dirpath")
    replicas: int = _spec("replicas", "Replicas", "gt=0", default=0)
    config: str = _spec("config", "Config", "omitempty,filepath")
    log_level: str = _spec("logLevel", "LogLevel")


@dataclass
class Frontend:
    grpc_addr: str = _spec("grpcAddr", "GRPCAddr", "omitempty,hostname_port")
    http_addr: str = _spec("httpAddr", "HTTPAddr", "omitempty,hostname_port")
    postgres_addr: str = _spec("postgresAddr", "PostgresAddr", "omitempty,hostname_port")
    meta_addr: str = _spec("metaAddr", "MetaAddr", "omitempty,hostname_port")
    mysql_addr: str = _spec("mysqlAddr", "MysqlAddr", "omitempty,hostname_port")
    replicas: int = _spec("replicas", "Replicas", "gt=0", default=0)
    config: str = _spec("config", "Config", "omitempty,filepath")
    log_level: str = _spec("logLevel", "LogLevel")
    user_provider: str = _spec("userProvider", "UserProvider")


@dataclass
class MetaSrv:
    store_addr: str = _spec("storeAddr", "StoreAddr", "hostname_port")
    server_addr: str = _spec("serverAddr", "ServerAddr", "hostname_port")
    bind_addr: str = _spec("bindAddr", "BindAddr", "omitempty,hostname_port")
    http_addr: str = _spec("httpAddr", "HTTPAddr", "required,hostname_port")
    replicas: int = _spec("replicas", "Replicas", "gt=0", default=0)
    config: str = _spec("config", "Config", "omitempty,filepath")
    log_level: str = _spec("logLevel", "LogLevel")


@dataclass
class Etcd:
    artifact: Optional[Artifact] = _spec(
        "artifact", "Artifact", "required", default=None, struct=Artifact
    )


@dataclass
class BareMetalClusterComponentsConfig:
    artifact: Optional[Artifact] = _spec(
        "artifact", "Artifact", "required", default=None, struct=Artifact
    )
    frontend: Optional[Frontend] = _spec(
        "frontend", "Frontend", "required", default=None, struct=Frontend
    )
    meta_srv: Optional[MetaSrv] = _spec(
        "meta", "MetaSrv", "required", default=None, struct=MetaSrv
    )
    datanode: Optional[Datanode] = _spec(
        "datanode", "Datanode", "required", default=None, struct=Datanode
    )


@dataclass
class BareMetalClusterConfig:
    """Desired state of a GreptimeDB cluster on bare metal."""

    cluster: Optional[BareMetalClusterComponentsConfig] = _spec(
        "cluster", "Cluster", "required", default=None, struct=BareMetalClusterComponentsConfig
    )
    etcd: Optional[Etcd] = _spec("etcd", "Etcd", "required", default=None, struct=Etcd)

    @classmethod
    def from_dict(cls, data: Optional[Mapping]) -> "BareMetalClusterConfig":
        """Build a config from a mapping keyed by the YAML field names."""
        if data is None:
            return cls()
        return _from_mapping(cls, data)

    def to_dict(self) -> dict:
        """Return the config as a mapping keyed by the YAML field names."""
        return _to_mapping(self)


@dataclass
class BareMetalClusterMetadata:
    """Metadata stored alongside a bare-metal cluster."""

    config: Optional[BareMetalClusterConfig]
    creation_date: datetime
    cluster_dir: str = ""
    foreground_pid: int = 0

    def to_dict(self) -> dict:
        return {
            "config": self.config.to_dict() if self.config is not None else None,
            "creationDate": self.creation_date,
            "clusterDir": self.cluster_dir,
            "foregroundPid": self.foreground_pid,
        }


def _from_mapping(cls, data: Any):
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a mapping for {cls.__name__}, got {type(data).__name__}")
    kwargs = {}
    for f in fields(cls):
        value = data.get(f.metadata["yaml"])
        if value is None:
            continue
        nested = f.metadata["struct"]
        if nested is not None:
            kwargs[f.name] = _from_mapping(nested, value)
        elif isinstance(f.default, int):
            kwargs[f.name] = int(value)
        else:
            kwargs[f.name] = str(value)
    return cls(**kwargs)


def _to_mapping(obj) -> dict:
    out = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if f.metadata["struct"] is not None and value is not None:
            value = _to_mapping(value)
        out[f.metadata["yaml"]] = value
    return out


def default_bare_metal_config(greptime_version: str, etcd_version: str) -> BareMetalClusterConfig:
    """Return the default bare-metal cluster config for the given artifact versions."""
    return BareMetalClusterConfig(
        cluster=BareMetalClusterComponentsConfig(
            artifact=Artifact(version=greptime_version),
            frontend=Frontend(
                replicas=1,
                http_addr="0.0.0.0:4000",
                grpc_addr="0.0.0.0:4001",
                mysql_addr="0.0.0.0:4002",
                postgres_addr="0.0.0.0:4003",
            ),
            meta_srv=MetaSrv(
                replicas=1,
                store_addr="127.0.0.1:2379",
                server_addr="0.0.0.0:3002",
                http_addr="0.0.0.0:14001",
            ),
            datanode=Datanode(
                replicas=3,
                rpc_addr="0.0.0.0:14100",
                http_addr="0.0.0.0:14300",
            ),
        ),
        etcd=Etcd(artifact=Artifact(version=etcd_version)),
    )


@dataclass
class SetValues:
    """Raw ``--set`` values split by target: operator, cluster or etcd."""

    raw_config: list[str] = field(default_factory=list)
    operator_config: str = ""
    cluster_config: str = ""
    etcd_config: str = ""

    def parse(self) -> None:
        """Classify the raw values by their prefix.

        Values without a known prefix go to the cluster config unchanged.
        Raises ValueError on an empty raw value.
        """
        buckets: dict[str, list[str]] = {
            _CONFIG_OPERATOR: [],
            _CONFIG_CLUSTER: [],
            _CONFIG_ETCD: [],
        }
        for raw in self.raw_config:
            if not raw:
                raise ValueError("cannot parse empty config values")
            for value in raw.split(","):
                value = value.strip(" ")
                prefix, _, rest = value.partition(".")
                config_value = rest if "." in value else prefix
                if prefix in buckets:
                    buckets[prefix].append(config_value)
                else:
                    buckets[_CONFIG_CLUSTER].append(value)

        if buckets[_CONFIG_OPERATOR]:
            self.operator_config = ",".join(buckets[_CONFIG_OPERATOR])
        if buckets[_CONFIG_CLUSTER]:
            self.cluster_config = ",".join(buckets[_CONFIG_CLUSTER])
        if buckets[_CONFIG_ETCD]:
            self.etcd_config = ",".join(buckets[_CONFIG_ETCD])


class ConfigValidationError(ValueError):
    """Raised when a cluster config fails validation; ``errors`` lists each failure."""

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("\n".join(self.errors))


def _split_host_port(addr: str) -> tuple[str, str]:
    if addr.startswith("["):
        end = addr.find("]")
        if end < 0 or end + 1 >= len(addr) or addr[end + 1] != ":":
            raise ValueError(f"invalid address {addr!r}")
        return addr[1:end], addr[end + 2:]
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    if ":" in host or "[" in host or "]" in host:
        raise ValueError(f"too many colons in address {addr!r}")
    return host, port


def _is_hostname_port(value: str) -> bool:
    try:
        host, port = _split_host_port(value)
    except ValueError:
        return False
    if not _PORT_RE.match(port) or not 1 <= int(port) <= 65535:
        return False
    if host:
        return _HOSTNAME_RE.match(host) is not None
    return True


def _is_file_path(value: str) -> bool:
    if "\x00" in value or os.path.isdir(value):
        return False
    return not value.endswith(("/", os.sep))


def _is_dir_path(value: str) -> bool:
    if "\x00" in value:
        return False
    if os.path.exists(value):
        return os.path.isdir(value)
    return value.endswith(("/", os.sep))


def _check(tag: str, value: Any) -> bool:
    if tag == "required":
        return bool(value)
    if tag.startswith("gte="):
        return value >= int(tag[4:])
    if tag.startswith("gt="):
        return value > int(tag[3:])
    if tag == "hostname_port":
        return _is_hostname_port(value)
    if tag == "filepath":
        return _is_file_path(value)
    if tag == "dirpath":
        return _is_dir_path(value)
    raise ValueError(f"unknown validation tag: {tag}")


def _message(namespace: str, name: str, tag: str) -> str:
    return f"Key: '{namespace}' Error:Field validation for '{name}' failed on the '{tag}' tag"


def _validate_struct(obj, namespace: str, errors: list[str]) -> None:
    for f in fields(obj):
        name = f.metadata["go"]
        path = f"{namespace}.{name}"
        value = getattr(obj, f.name)
        tags = [tag for tag in f.metadata["rules"].split(",") if tag]
        if "omitempty" in tags and not value:
            continue
        failed = next(
            (tag for tag in tags if tag != "omitempty" and not _check(tag, value)), None
        )
        if failed is not None:
            errors.append(_message(path, name, failed))
            continue
        if f.metadata["struct"] is not None and value is not None:
            _validate_struct(value, path, errors)

    if isinstance(obj, Artifact) and not obj.version and not obj.local:
        errors.append(_message(f"{namespace}.Artifact", "Artifact", ""))


def validate_config(config: Optional[BareMetalClusterConfig]) -> None:
    """Validate a bare-metal config, raising ConfigValidationError on any failure."""
    if config is None:
        raise ConfigValidationError("no config to validate")
    errors: list[str] = []
    _validate_struct(config, type(config).__name__, errors)
    if errors:
        raise ConfigValidationError(errors)