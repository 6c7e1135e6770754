"""Build and runtime version information."""

from __future__ import annotations

import platform as _platform
from dataclasses import dataclass

GIT_COMMIT = "none"
GIT_VERSION = "none"
BUILD_DATE = "none"


@dataclass(frozen=True)
class Version:
    """Version details of the running tool."""

    git_commit: str
    git_version: str
    python_version: str
    compiler: str
    platform: str
    build_date: str

    def __str__(self) -> str:
        return (
            f"GitCommit: {self.git_commit}\n"
            f"GitVersion: {self.git_version}\n"
            f"PythonVersion: {self.python_version}\n"
            f"Compiler: {self.compiler}\n"
            f"Platform: {self.platform}\n"
            f"BuildDate: {self.build_date}\n"
        )


def get() -> Version:
    """Return the version information of this build and interpreter."""
    return Version(
        git_commit=GIT_COMMIT,
        git_version=GIT_VERSION,
        python_version=_platform.python_version(),
        compiler=_platform.python_implementation(),
        platform=f"{_platform.system().lower()}/{_platform.machine().lower()}",
        build_date=BUILD_DATE,
    )