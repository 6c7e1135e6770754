"""Layout of the on-disk working directory: artifacts and per-cluster directories."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

import yaml

from gtctl.config import BareMetalClusterConfig, BareMetalClusterMetadata
from gtctl.fileutils import delete_dir_if_exists, ensure_dir

# All metadata lives under ${HOME}/${BASE_DIR}.
BASE_DIR = ".gtctl"

CLUSTER_LOGS_DIR = "logs"
CLUSTER_DATA_DIR = "data"
CLUSTER_PIDS_DIR = "pids"


class ArtifactType(str, Enum):
    CHART = "chart"
    BINARY = "binary"


@dataclass(frozen=True)
class ClusterScopeDirs:
    """Directories and config file of one cluster."""

    base_dir: str
    logs_dir: str
    data_dir: str
    pids_dir: str
    config_path: str


class MetadataManager:
    """Allocates and creates the paths where artifacts and cluster state are kept."""

    def __init__(self, home_dir: Optional[str] = None):
        if not home_dir:
            home_dir = os.path.expanduser("~")
            if home_dir == "~":
                raise RuntimeError("cannot determine the user home directory")
        self._working_dir = os.path.join(home_dir, BASE_DIR)
        self._cluster_dirs: Optional[ClusterScopeDirs] = None

    @property
    def working_dir(self) -> str:
        """The ${HOME}/${BASE_DIR} directory."""
        return self._working_dir

    @property
    def cluster_scope_dirs(self) -> Optional[ClusterScopeDirs]:
        """The directories allocated for the current cluster, if any."""
        return self._cluster_dirs

    def set_home_dir(self, directory: str) -> None:
        self._working_dir = os.path.join(directory, BASE_DIR)

    def allocate_cluster_scope_dirs(self, cluster_name: str) -> ClusterScopeDirs:
        """Compute the directories of a cluster without creating them."""
        base = os.path.join(self._working_dir, cluster_name)
        self._cluster_dirs = ClusterScopeDirs(
            base_dir=base,
            logs_dir=os.path.join(base, CLUSTER_LOGS_DIR),
            data_dir=os.path.join(base, CLUSTER_DATA_DIR),
            pids_dir=os.path.join(base, CLUSTER_PIDS_DIR),
            config_path=os.path.join(base, f"{cluster_name}.yaml"),
        )
        return self._cluster_dirs

    def allocate_artifact_file_path(
        self, name: str, version: str, artifact_type, install_binary: bool = False
    ) -> str:
        """Return the directory where an artifact is downloaded or installed."""
        try:
            kind = ArtifactType(artifact_type)
        except ValueError:
            raise ValueError(f"unknown artifact type: {artifact_type}") from None

        artifacts_dir = os.path.join(self._working_dir, "artifacts")
        if kind is ArtifactType.CHART:
            return os.path.join(artifacts_dir, "charts", name, version, "pkg")
        leaf = "bin" if install_binary else "pkg"
        return os.path.join(artifacts_dir, "binaries", name, version, leaf)

    def create_cluster_scope_dirs(self, cfg: Optional[BareMetalClusterConfig]) -> None:
        """Create the allocated cluster directories and write the cluster metadata file."""
        dirs = self._cluster_dirs
        if dirs is None:
            raise RuntimeError(
                "unallocated cluster dir, please initialize a metadata manager "
                "with cluster name provided"
            )

        for directory in (dirs.base_dir, dirs.logs_dir, dirs.data_dir, dirs.pids_dir):
            ensure_dir(directory)

        metadata = BareMetalClusterMetadata(
            config=cfg,
            creation_date=datetime.now().astimezone(),
            cluster_dir=dirs.base_dir,
            foreground_pid=os.getpid(),
        )
        with open(dirs.config_path, "w", encoding="utf-8") as out:
            yaml.safe_dump(
                metadata.to_dict(), out, sort_keys=False, default_flow_style=False
            )

    def clean(self) -> None:
        """Remove the whole working directory."""
        delete_dir_if_exists(self._working_dir)