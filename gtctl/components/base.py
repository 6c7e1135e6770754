"""Shared pieces of the bare-metal cluster components: directories, address flags and process launching."""

from __future__ import annotations

import signal
import subprocess
import threading
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from os import path as _path

from gtctl.logger import Logger

DEFAULT_LOG_LEVEL = "info"

_POLL_INTERVAL = 0.1
_STATUS_CHECK_INTERVAL = 0.5
_HEALTH_TIMEOUT = 5.0

# Exits caused by these signals are expected shutdowns, not failures.
_IGNORED_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGKILL", None), getattr(signal, "SIGINT", None)) if sig
)


@dataclass(frozen=True)
class WorkingDirs:
    """Directories used by a cluster running on bare metal."""

    data_dir: str
    logs_dir: str
    pids_dir: str


@dataclass
class RunOptions:
    """Everything needed to run one component binary on bare metal."""

    binary: str
    name: str
    pid_dir: str
    log_dir: str
    args: list[str] = field(default_factory=list)


def _split_host_port(addr: str) -> tuple[str, str]:
    if addr.startswith("["):
        end = addr.find("]")
        if end < 0 or end + 1 >= len(addr) or addr[end + 1] != ":":
            raise ValueError(f"invalid address {addr!r}")
        return addr[1:end], addr[end + 2:]
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {addr!r}")
    if ":" in host:
        raise ValueError(f"too many colons in address {addr!r}")
    return host, port


def _join_host_port(host: str, port: str) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def format_addr_arg(addr: str, node_id: int) -> str:
    """Shift the port of addr by node_id; an empty addr stays empty."""
    if not addr:
        return addr
    try:
        host, port = _split_host_port(addr)
    except ValueError:
        host, port = "", ""
    try:
        port_number = int(port)
    except ValueError:
        port_number = 0
    return _join_host_port(host, str(port_number + node_id))


def generate_addr_arg(flag: str, addr: str, node_id: int, args: list[str]) -> list[str]:
    """Return args with ``flag=<addr shifted by node_id>`` appended, unless addr is empty."""
    socket_addr = format_addr_arg(addr, node_id)
    if not socket_addr:
        return list(args)
    return [*args, f"{flag}={socket_addr}"]


def _describe_exit(returncode: int) -> str:
    if returncode < 0:
        try:
            return f"signal: {signal.Signals(-returncode).name}"
        except ValueError:
            return f"signal: {-returncode}"
    return f"exit status {returncode}"


def _format_args(args: list[str]) -> str:
    return "[" + " ".join(args) + "]"


def run_binary(option: RunOptions, stop: threading.Event, logger: Logger) -> threading.Thread:
    """Start the binary in the background and return the thread watching it.

    Output goes to ``<log_dir>/log`` and the pid to ``<pid_dir>/pid``. Setting
    ``stop`` kills the process; if the process fails on its own, ``stop`` is set
    so the other components shut down too.
    """
    log_file = open(_path.join(option.log_dir, "log"), "wb")
    try:
        process = subprocess.Popen(
            [option.binary, *option.args],
            stdout=log_file,
            stderr=subprocess.STDOUT,
        )
    except BaseException:
        log_file.close()
        raise

    pid = str(process.pid)
    logger.v(3).info(
        "run '%s' binary '%s' with args: '%s', log: '%s', pid: '%s'",
        option.name, option.binary, _format_args(option.args), option.log_dir, pid,
    )

    try:
        with open(_path.join(option.pid_dir, "pid"), "w", encoding="utf-8") as pid_file:
            pid_file.write(pid)
    except BaseException:
        process.kill()
        process.wait()
        log_file.close()
        raise

    def watch() -> None:
        try:
            while True:
                try:
                    returncode = process.wait(timeout=_POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    if stop.is_set():
                        process.kill()
                        returncode = process.wait()
                        break
        finally:
            log_file.close()

        if returncode == 0 or -returncode in _IGNORED_SIGNALS:
            return
        logger.error(
            "component '%s' binary '%s' (pid '%s') exited with error: %s",
            option.name, option.binary, pid, _describe_exit(returncode),
        )
        logger.error("args: '%s'", _format_args(option.args))
        stop.set()

    watcher = threading.Thread(target=watch, name=f"watch-{option.name}", daemon=True)
    watcher.start()
    return watcher


class ClusterComponent(ABC):
    """One kind of cluster process (etcd, metasrv, datanode, frontend) run from a binary."""

    def __init__(self, working_dirs: WorkingDirs, logger: Logger):
        self.working_dirs = working_dirs
        self.logger = logger
        self.data_dirs: list[str] = []
        self.logs_dirs: list[str] = []
        self.pids_dirs: list[str] = []
        self._watchers: list[threading.Thread] = []

    @abstractmethod
    def start(self, stop: threading.Event, binary: str) -> None:
        """Start the component by running the binary; setting stop shuts it down."""

    @abstractmethod
    def build_args(self, *args) -> list[str]:
        """Build the command-line arguments of the component."""

    @abstractmethod
    def is_running(self) -> bool:
        """Return whether every replica of the component is healthy."""

    @abstractmethod
    def name(self) -> str:
        """Return the component name."""

    def wait(self) -> None:
        """Block until every process started by this component has exited."""
        for watcher in self._watchers:
            watcher.join()

    def _launch(self, option: RunOptions, stop: threading.Event) -> None:
        self._watchers.append(run_binary(option, stop, self.logger))

    def _wait_until_running(self, stop: threading.Event) -> None:
        while True:
            if stop.wait(_STATUS_CHECK_INTERVAL):
                raise RuntimeError("status checking failed: context canceled")
            if self.is_running():
                return

    def _health_ok(self, url: str) -> bool:
        try:
            with urllib.request.urlopen(url, timeout=_HEALTH_TIMEOUT) as response:
                return response.status == 200
        except (urllib.error.URLError, OSError, ValueError) as exc:
            self.logger.v(5).info("failed to get %s health: %s", self.name(), exc)
            return False