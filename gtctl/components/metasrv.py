"""The metasrv component of a bare-metal cluster."""

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
from gtctl.config import MetaSrv
from gtctl.fileutils import ensure_dir
from gtctl.logger import Logger

DEFAULT_BIND_ADDR = "127.0.0.1:3002"


class MetaSrvComponent(ClusterComponent):
    """Runs the configured number of metasrv replicas."""

    def __init__(self, config: MetaSrv, working_dirs: WorkingDirs, logger: Logger,
                 use_memory_meta: bool = False):
        super().__init__(working_dirs, logger)
        self.config = config
        self.use_memory_meta = use_memory_meta

    def name(self) -> str:
        return "metasrv"

    def start(self, stop: threading.Event, binary: str) -> None:
        bind_addr = self.config.bind_addr or DEFAULT_BIND_ADDR
        for i in range(self.config.replicas):
            dir_name = f"{self.name()}.{i}"

            log_dir = os.path.join(self.working_dirs.logs_dir, dir_name)
            ensure_dir(log_dir)
            self.logs_dirs.append(log_dir)

            pid_dir = os.path.join(self.working_dirs.pids_dir, dir_name)
            ensure_dir(pid_dir)
            self.pids_dirs.append(pid_dir)

            option = RunOptions(
                binary=binary,
                name=dir_name,
                log_dir=log_dir,
                pid_dir=pid_dir,
                args=self.build_args(i, bind_addr),
            )
            self._launch(option, stop)

        self._wait_until_running(stop)

    def build_args(self, *args) -> list[str]:
        node_id, bind_addr = args[0], args[1]
        log_level = self.config.log_level or DEFAULT_LOG_LEVEL
        result = [
            f"--log-level={log_level}",
            self.name(), "start",
            f"--store-addr={self.config.store_addr}",
            f"--server-addr={self.config.server_addr}",
        ]
        result = generate_addr_arg("--http-addr", self.config.http_addr, node_id, result)
        result = generate_addr_arg("--bind-addr", bind_addr, node_id, result)
        if self.use_memory_meta:
            result = generate_addr_arg("--use-memory-store", "true", node_id, result)
        if self.config.config:
            result.append(f"-c={self.config.config}")
        return result

    def is_running(self) -> bool:
        for i in range(self.config.replicas):
            addr = format_addr_arg(self.config.http_addr, i)
            _host, sep, port = addr.rpartition(":")
            if not sep:
                self.logger.v(5).info("failed to split host port in %s: %s", self.name(), addr)
                return False
            if not self._health_ok(f"http://localhost:{port}/health"):
                return False
        return True