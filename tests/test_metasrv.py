import io

from gtctl.components.base import WorkingDirs, format_addr_arg
from gtctl.components.metasrv import DEFAULT_BIND_ADDR, MetaSrvComponent
from gtctl.config import MetaSrv
from gtctl.logger import Logger


def _component(tmp_path, memory=False, **kw):
    cfg = MetaSrv(replicas=1, store_addr="127.0.0.1:2379", server_addr="0.0.0.0:3002",
                  http_addr=kw.pop("http_addr", "0.0.0.0:14001"), **kw)
    dirs = WorkingDirs(str(tmp_path / "d"), str(tmp_path / "l"), str(tmp_path / "p"))
    return MetaSrvComponent(cfg, dirs, Logger(io.StringIO()), memory)


def test_name(tmp_path):
    assert _component(tmp_path).name() == "metasrv"


def test_build_args(tmp_path):
    args = _component(tmp_path).build_args(0, DEFAULT_BIND_ADDR)
    assert args == [
        "--log-level=info", "metasrv", "start", "--store-addr=127.0.0.1:2379",
        "--server-addr=0.0.0.0:3002", "--http-addr=0.0.0.0:14001",
        "--bind-addr=127.0.0.1:3002",
    ]


def test_build_args_memory_store_and_config(tmp_path):
    c = _component(tmp_path, memory=True, config="/m.toml")
    args = c.build_args(1, DEFAULT_BIND_ADDR)
    assert "--bind-addr=" + format_addr_arg(DEFAULT_BIND_ADDR, 1) in args
    assert any(a.startswith("--use-memory-store=") for a in args)
    assert args[-1] == "-c=/m.toml"


def test_not_running(tmp_path):
    assert _component(tmp_path, http_addr="127.0.0.1:1").is_running() is False