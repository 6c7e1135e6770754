"""Helm values: loading, merging and building them from tagged options."""

from __future__ import annotations

import dataclasses
import re
from typing import Any, Optional

import yaml

FIELD_TAG = "helm"

_INDEX_RE = re.compile(r"^(.*)\[(\d+)\]$")


class Values(dict):
    """A mapping of helm values."""

    @classmethod
    def from_file(cls, filename: str) -> "Values":
        """Load values from a local YAML file."""
        with open(filename, encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"values file {filename!r} is not a mapping")
        return cls(data)

    def output_values(self) -> bytes:
        """Render the values as YAML with sorted keys."""
        return yaml.safe_dump(
            dict(self), sort_keys=True, default_flow_style=False, allow_unicode=True
        ).encode("utf-8")


def merge_maps(a: Optional[dict], b: Optional[dict]) -> dict:
    """Merge b into a copy of a recursively; values of b win."""
    out = dict(a or {})
    for key, value in (b or {}).items():
        current = out.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            out[key] = merge_maps(current, value)
        else:
            out[key] = value
    return out


def _split_unescaped(text: str, sep: str) -> list[str]:
    parts, buf, depth, escaped = [], [], 0, False
    for ch in text:
        if escaped:
            buf.append(ch)
            escaped = False
            continue
        if ch == "\\":
            buf.append(ch)
            escaped = True
            continue
        if ch == "{":
            depth += 1
        elif ch == "}" and depth:
            depth -= 1
        if ch == sep and depth == 0:
            parts.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
    parts.append("".join(buf))
    return parts


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text)


def _typed(value: str) -> Any:
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    if value == "null":
        return None
    if value == "0":
        return 0
    if value and value[0] != "0":
        try:
            return int(value)
        except ValueError:
            pass
    return value


def _value(raw: str) -> Any:
    if raw.startswith("{") and raw.endswith("}"):
        inner = raw[1:-1]
        if not inner:
            return []
        return [_typed(_unescape(item)) for item in _split_unescaped(inner, ",")]
    return _typed(_unescape(raw))


def _set_path(target: dict, keys: list[str], value: Any) -> None:
    container: Any = target
    for position, part in enumerate(keys):
        last = position == len(keys) - 1
        match = _INDEX_RE.match(part)
        if match is None:
            if last:
                container[part] = value
            else:
                child = container.get(part)
                if not isinstance(child, dict):
                    child = {}
                    container[part] = child
                container = child
            continue
        name, index = match.group(1), int(match.group(2))
        seq = container.get(name)
        if not isinstance(seq, list):
            seq = []
            container[name] = seq
        seq.extend([None] * (index + 1 - len(seq)))
        if last:
            seq[index] = value
        else:
            if not isinstance(seq[index], dict):
                seq[index] = {}
            container = seq[index]


def parse_set_values(text: str) -> dict:
    """Parse ``a.b=c,d[0]=e`` style values into a nested mapping."""
    result: dict = {}
    for pair in _split_unescaped(text, ","):
        if not pair:
            continue
        key, sep, raw = pair.partition("=")
        if not sep:
            raise ValueError(f"key {key!r} has no value")
        keys = [_unescape(k) for k in re.split(r"(?<!\\)\.", key)]
        if any(not k for k in keys):
            raise ValueError(f"invalid key {key!r}")
        _set_path(result, keys, _value(raw))
    return result


def _options_to_values(options: Any) -> Optional[Values]:
    if not dataclasses.is_dataclass(options) or isinstance(options, type):
        raise TypeError("invalid input type, should be a dataclass instance")
    raw_args = []
    for f in dataclasses.fields(options):
        key = f.metadata.get(FIELD_TAG, "")
        value = getattr(options, f.name)
        if key and value:
            raw_args.append(str(value) if key == "*" else f"{key}={value}")
    if not raw_args:
        return None
    return Values(parse_set_values(",".join(raw_args)))


def to_helm_values(options: Any, values_file: str = "") -> Values:
    """Build helm values from a values file overlaid with helm-tagged dataclass fields.

    A field whose metadata ``helm`` key is ``"*"`` holds raw ``key=value`` pairs.
    """
    base = Values.from_file(values_file) if values_file else None
    vals = _options_to_values(options)
    return Values(merge_maps(base, vals))