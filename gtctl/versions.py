"""Semantic version comparison."""

from __future__ import annotations

import re

import semver

_VERSION_RE = re.compile(
    r"^v?(?P<major>[0-9]+)(?:\.(?P<minor>[0-9]+))?(?:\.(?P<patch>[0-9]+))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*))?$"
)


def _parse(text: str) -> semver.Version:
    match = _VERSION_RE.match(text)
    if match is None:
        raise ValueError(f"invalid semantic version: {text!r}")
    return semver.Version(
        major=int(match["major"]),
        minor=int(match["minor"] or 0),
        patch=int(match["patch"] or 0),
        prerelease=match["prerelease"],
        build=match["build"],
    )


def compare(v1: str, v2: str) -> bool:
    """Return True if version v1 is greater than v2.

    A leading "v" and missing minor or patch numbers are accepted.
    Raises ValueError if either version cannot be parsed.
    """
    return _parse(v1) > _parse(v2)