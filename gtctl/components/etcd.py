"""The etcd component of a bare-metal cluster."""

from __future__ import annotations

import os
import threading

from gtctl.components.base import ClusterComponent, RunOptions, WorkingDirs
from gtctl.fileutils import ensure_dir
from gtctl.logger import Logger


class EtcdComponent(ClusterComponent):
    """Runs a single etcd process with its own data, log and pid directories."""

    def __init__(self, working_dirs: WorkingDirs, logger: Logger):
        super().__init__(working_dirs, logger)

    def name(self) -> str:
        return "etcd"

    def start(self, stop: threading.Event, binary: str) -> None:
        data_dir = os.path.join(self.working_dirs.data_dir, self.name())
        log_dir = os.path.join(self.working_dirs.logs_dir, self.name())
        pid_dir = os.path.join(self.working_dirs.pids_dir, self.name())
        for directory in (data_dir, log_dir, pid_dir):
            ensure_dir(directory)
        self.data_dirs.append(data_dir)
        self.logs_dirs.append(log_dir)
        self.pids_dirs.append(pid_dir)

        option = RunOptions(
            binary=binary,
            name=self.name(),
            log_dir=log_dir,
            pid_dir=pid_dir,
            args=self.build_args(data_dir),
        )
        self._launch(option, stop)

    def build_args(self, *args) -> list[str]:
        data_dir = args[0]
        return ["--data-dir", data_dir]

    def is_running(self) -> bool:
        # No health check for etcd yet.
        return False