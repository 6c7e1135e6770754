"""Discovery and execution of ``gtctl-<name>`` plugin executables."""

from __future__ import annotations

import os
import subprocess

from gtctl.fileutils import is_file_exists

DEFAULT_PLUGIN_PREFIX = "gtctl-"

# When set, only these ':'-separated paths are searched; otherwise the
# current directory and $PATH are.
PLUGIN_SEARCH_PATHS_ENV_KEY = "GTCTL_PLUGIN_PATHS"


class PluginError(RuntimeError):
    """A plugin could not be found or failed to run."""


class PluginManager:
    """Finds plugin executables and runs them."""

    def __init__(self):
        self._prefix = DEFAULT_PLUGIN_PREFIX
        configured = os.environ.get(PLUGIN_SEARCH_PATHS_ENV_KEY, "")
        if configured:
            self._search_paths = configured.split(":")
        else:
            self._search_paths = [os.getcwd()]
            path_env = os.environ.get("PATH", "")
            if path_env:
                self._search_paths.extend(path_env.split(":"))

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def search_paths(self) -> list[str]:
        return list(self._search_paths)

    def should_run(self, name: str) -> bool:
        """Return True if a plugin for this subcommand exists."""
        try:
            self._search(name)
        except PluginError:
            return False
        return True

    def run(self, args: list[str]) -> None:
        """Run the plugin named by args[0] with the remaining arguments."""
        if not args:
            return
        plugin_path = self._search(args[0])
        try:
            completed = subprocess.run([plugin_path, *args[1:]], check=False)
        except OSError as exc:
            raise PluginError(f"failed to run plugin '{plugin_path}': {exc}") from exc
        if completed.returncode != 0:
            raise PluginError(
                f"failed to run plugin '{plugin_path}': exit status {completed.returncode}"
            )

    def _search(self, name: str) -> str:
        if not self._search_paths:
            raise PluginError("no plugin search paths provided")

        plugin_name = self._prefix + name
        for directory in self._search_paths:
            plugin_path = os.path.join(directory, plugin_name)
            try:
                found = is_file_exists(plugin_path)
            except OSError:
                found = False
            if found:
                return plugin_path

        raise PluginError(f'error: unknown command "{name}" for "gtctl"')