# gtctl

A library of building blocks for running a GreptimeDB cluster on bare metal:
cluster configuration and validation, the on-disk layout of cluster metadata,
launching the cluster components (etcd, metasrv, datanode, frontend) from
their binaries, a lookup for `gtctl-<name>` plugin executables, Helm values
handling, and a few file, version, logging and progress helpers.

Install with the test extra to run the test suite:

```
pip install -e ".[test]"
pytest
```

## Configuration

```python
from gtctl.config import default_bare_metal_config, validate_config

cfg = default_bare_metal_config("latest", "v3.5.7")
validate_config(cfg)  # raises ConfigValidationError on a bad config
```

The default config has one frontend (`0.0.0.0:4000`–`4003` for HTTP, gRPC,
MySQL and PostgreSQL), one metasrv and three datanodes.
`validate_config` checks required fields, replica counts, `host:port`
addresses and paths, and that every `Artifact` has a `version` or a `local`
path; `ConfigValidationError.errors` lists each failure.

`BareMetalClusterConfig.from_dict` and `BareMetalClusterConfig.to_dict`
convert a configuration to and from the mapping stored in YAML files
(keys such as `cluster`, `etcd`, `meta`, `httpAddr`).

`SetValues.parse` sorts `--set` style values into `operator_config`,
`cluster_config` and `etcd_config` by their `operator.`, `cluster.` or
`etcd.` prefix; values without a known prefix go to the cluster group
unchanged, and an empty value raises `ValueError`.

## Metadata layout

```python
from gtctl.metadata import ArtifactType, MetadataManager

manager = MetadataManager("/tmp/gtctl-home")
dirs = manager.allocate_cluster_scope_dirs("mycluster")
manager.create_cluster_scope_dirs(cfg)

manager.allocate_artifact_file_path("etcd", "v3.5.7", ArtifactType.BINARY, install_binary=True)
# "/tmp/gtctl-home/.gtctl/artifacts/binaries/etcd/v3.5.7/bin"
```

Everything lives under `<home>/.gtctl` (the user's home directory when no
home is given). Each cluster gets its own `logs`, `data` and `pids`
directories and a `<cluster>.yaml` file holding the config, creation date,
cluster directory and the pid of the creating process.
`MetadataManager.set_home_dir` moves the working directory and
`MetadataManager.clean` removes it entirely.

## Components

`gtctl.components.etcd.EtcdComponent`,
`gtctl.components.metasrv.MetaSrvComponent`,
`gtctl.components.datanode.DatanodeComponent` and
`gtctl.components.frontend.FrontendComponent` build each replica's command
line, create its directories, start the binary you point them at, and write
its output to `<logs>/<name>.<i>/log` and its pid to `<pids>/<name>.<i>/pid`.

```python
import sys
import threading

from gtctl.components.base import WorkingDirs
from gtctl.components.metasrv import MetaSrvComponent
from gtctl.logger import Logger

dirs = manager.cluster_scope_dirs
working = WorkingDirs(data_dir=dirs.data_dir, logs_dir=dirs.logs_dir, pids_dir=dirs.pids_dir)
stop = threading.Event()

metasrv = MetaSrvComponent(cfg.cluster.meta_srv, working, Logger(sys.stderr, verbosity=3))
metasrv.start(stop, "/path/to/greptime")  # returns once every replica's /health is OK
...
stop.set()      # kills every process started with this event
metasrv.wait()
```

Setting the `stop` event kills the processes; if any process exits with an
error on its own, the event is set so the rest shut down too. Metasrv and
datanode `start` wait for their health endpoints and raise `RuntimeError` if
`stop` is set first. Etcd has no health check: its `is_running` always
returns `False`.

Replica addresses are derived from a base address by adding the replica
index to the port:

```python
from gtctl.components.base import format_addr_arg

format_addr_arg("0.0.0.0:4000", 1)  # "0.0.0.0:4001"
```

## Plugins

`gtctl.plugins.PluginManager` looks for `gtctl-<name>` executables in the
`:`-separated directories of `GTCTL_PLUGIN_PATHS`, or else in the current
directory and `PATH`. `should_run(name)` tells whether one exists;
`run([name, *args])` runs it and raises `PluginError` if it is missing or
exits non-zero.

## Helm values

```python
from dataclasses import dataclass, field
from gtctl.helm_values import to_helm_values

@dataclass
class Options:
    image_registry: str = field(default="", metadata={"helm": "image.registry"})
    extra: str = field(default="", metadata={"helm": "*"})

to_helm_values(Options(image_registry="registry.example.com", extra="a.b=1"))
# {'image': {'registry': 'registry.example.com'}, 'a': {'b': 1}}
```

Fields tagged `"*"` hold raw `key=value` pairs. An optional values file
given as the second argument is loaded first and overridden by the options.
`Values.from_file`, `Values.output_values`, `merge_maps` and
`parse_set_values` are available on their own.

## Other helpers

```python
from gtctl.versions import compare
from gtctl.fileutils import merge_yaml

compare("v0.4.0-nightly-20230807", "0.4.0-nightly-20230802")  # True
merge_yaml(b"a: 1\nb: 2\n", b"a: 3\n")  # b"a: 3\nb: 2\n"; top-level keys from src win
```

- `gtctl.fileutils`: `ensure_dir`, `delete_dir_if_exists`, `is_file_exists`,
  `copy_file`, and `uncompress` for `.zip`, `.tgz`, `.gz` and `.tar.gz`
  archives.
- `gtctl.logger.Logger`: `warn`, `error` and verbosity-gated `v(level).info`
  messages, optionally coloured; `bold` for emphasis on a terminal.
- `gtctl.status.Spinner`: an animated status line ending in a ✓ or ✗ mark.
- `gtctl.version.get()`: build and interpreter version details.

## What this package does not do

There is no command-line program: nothing here parses a `cluster create`
style command or is installed as a script. The package does not download
GreptimeDB or etcd binaries or Helm charts, does not render charts, does
not talk to Kubernetes, and does not open MySQL or PostgreSQL client
sessions. Binaries must already be on disk and are passed to the
components by path.