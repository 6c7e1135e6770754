"""The datanode component of a bare-metal cluster."""

from __future__ import annotations

import os
import threading

from gtctl.components.base import (
    DEFAULT_LOG_LEVEL,
    ClusterComponent,
    RunOptions,
    WorkingDirs,
    format_addr_arg,
    generate_addr_arg,
)
from gtctl.config import Datanode
from gtctl.fileutils import ensure_dir
from gtctl.logger import Logger

DATA_HOME_DIR = "home"
DATA_WAL_DIR = "wal"


def _port_of(addr: str) -> str:
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    return port


class DatanodeComponent(ClusterComponent):
    """Runs the configured number of datanode replicas."""

    def __init__(self, config: Datanode, meta_srv_addr: str, working_dirs: WorkingDirs,
                 logger: Logger):
        super().__init__(working_dirs, logger)
        self.config = config
        self.meta_srv_addr = meta_srv_addr
        self.data_home_dirs: list[str] = []

    def name(self) -> str:
        return "datanode"

    def start(self, stop: threading.Event, binary: str) -> None:
        for i in range(self.config.replicas):
            dir_name = f"{self.name()}.{i}"
            node_data_dir = os.path.join(self.working_dirs.data_dir, dir_name)

            home_dir = os.path.join(node_data_dir, DATA_HOME_DIR)
            ensure_dir(home_dir)
            self.data_home_dirs.append(home_dir)

            log_dir = os.path.join(self.working_dirs.logs_dir, dir_name)
            ensure_dir(log_dir)
            self.logs_dirs.append(log_dir)

            pid_dir = os.path.join(self.working_dirs.pids_dir, dir_name)
            ensure_dir(pid_dir)
            self.pids_dirs.append(pid_dir)

            wal_dir = os.path.join(node_data_dir, DATA_WAL_DIR)
            ensure_dir(wal_dir)
            self.data_dirs.append(node_data_dir)

            option = RunOptions(
                binary=binary,
                name=dir_name,
                log_dir=log_dir,
                pid_dir=pid_dir,
                args=self.build_args(i, wal_dir, home_dir),
            )
            self._launch(option, stop)

        self._wait_until_running(stop)

    def build_args(self, *args) -> list[str]:
        node_id, _wal_dir, home_dir = args[0], args[1], args[2]
        log_level = self.config.log_level or DEFAULT_LOG_LEVEL
        result = [
            f"--log-level={log_level}",
            self.name(), "start",
            f"--node-id={node_id}",
            f"--metasrv-addr={self.meta_srv_addr}",
            f"--data-home={home_dir}",
        ]
        result = generate_addr_arg("--http-addr", self.config.http_addr, node_id, result)
        result = generate_addr_arg("--rpc-addr", self.config.rpc_addr, node_id, result)
        if self.config.config:
            result.append(f"-c={self.config.config}")
        return result

    def is_running(self) -> bool:
        for i in range(self.config.replicas):
            addr = format_addr_arg(self.config.http_addr, i)
            try:
                port = _port_of(addr)
            except ValueError as exc:
                self.logger.v(5).info("failed to split host port in %s: %s", self.name(), exc)
                return False
            if not self._health_ok(f"http://localhost:{port}/health"):
                return False
        return True