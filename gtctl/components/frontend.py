"""The frontend component of a bare-metal cluster."""

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
from gtctl.config import Frontend
from gtctl.fileutils import ensure_dir
from gtctl.logger import Logger


class FrontendComponent(ClusterComponent):
    """Runs the configured number of frontend replicas."""

    def __init__(self, config: Frontend, meta_srv_addr: str, working_dirs: WorkingDirs,
                 logger: Logger):
        super().__init__(working_dirs, logger)
        self.config = config
        self.meta_srv_addr = meta_srv_addr

    def name(self) -> str:
        return "frontend"

    def start(self, stop: threading.Event, binary: str) -> None:
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
                args=self.build_args(i),
            )
            self._launch(option, stop)

    def build_args(self, *args) -> list[str]:
        node_id = args[0]
        log_level = self.config.log_level or DEFAULT_LOG_LEVEL
        result = [
            f"--log-level={log_level}",
            self.name(), "start",
            f"--metasrv-addr={self.meta_srv_addr}",
        ]
        result = generate_addr_arg("--http-addr", self.config.http_addr, node_id, result)
        result = generate_addr_arg("--rpc-addr", self.config.grpc_addr, node_id, result)
        result = generate_addr_arg("--mysql-addr", self.config.mysql_addr, node_id, result)
        result = generate_addr_arg("--postgres-addr", self.config.postgres_addr, node_id, result)
        if self.config.config:
            result.append(f"-c={self.config.config}")
        if self.config.user_provider:
            result.append(f"--user-provider={self.config.user_provider}")
        return result

    def is_running(self) -> bool:
        for i in range(self.config.replicas):
            addr = format_addr_arg(self.config.http_addr, i)
            if not self._health_ok(f"http://{addr}/health"):
                return False
        return True