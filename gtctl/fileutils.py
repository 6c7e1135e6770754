"""Filesystem helpers: directories, copying, archive extraction and YAML merging."""

from __future__ import annotations

import os
import shutil
import tarfile
import zipfile

import yaml

ZIP_EXTENSION = ".zip"
TAR_GZ_EXTENSION = ".tar.gz"
TGZ_EXTENSION = ".tgz"
GZ_EXTENSION = ".gz"
TAR_EXTENSION = ".tar"


def ensure_dir(directory: str) -> None:
    """Create the directory and any missing parents if it does not exist yet."""
    if not os.path.exists(directory):
        os.makedirs(directory, mode=0o755, exist_ok=True)


def delete_dir_if_exists(directory: str) -> None:
    """Remove the directory (or file) and everything under it; a missing path is fine."""
    try:
        if os.path.isdir(directory) and not os.path.islink(directory):
            shutil.rmtree(directory)
        else:
            os.remove(directory)
    except FileNotFoundError:
        pass


def is_file_exists(path: str) -> bool:
    """Return True if a regular file exists at path.

    Raises IsADirectoryError if the path is a directory.
    """
    try:
        info = os.stat(path)
    except FileNotFoundError:
        return False
    if os.path.isdir(path) or (info.st_mode & 0o170000) == 0o040000:
        raise IsADirectoryError(f"'{path}' is directory, not file")
    return True


def copy_file(src: str, dst: str) -> None:
    """Copy the contents of src to dst and flush them to disk."""
    with open(src, "rb") as reader, open(dst, "wb") as writer:
        shutil.copyfileobj(reader, writer)
        writer.flush()
        os.fsync(writer.fileno())


def _extension(file: str) -> str:
    name = file.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def uncompress(file: str, dst: str) -> None:
    """Extract a .zip, .tgz, .gz or .tar.gz archive into dst."""
    file_type = _extension(file)
    if file_type == ZIP_EXTENSION:
        _unzip(file, dst)
    elif file_type in (TGZ_EXTENSION, GZ_EXTENSION, TAR_GZ_EXTENSION):
        _untar(file, dst)
    else:
        raise ValueError(f"unsupported file type: {file_type}")


def _unzip(file: str, dst: str) -> None:
    with zipfile.ZipFile(file) as archive:
        for entry in archive.infolist():
            file_path = os.path.join(dst, entry.filename)
            if entry.is_dir():
                os.makedirs(file_path, exist_ok=True)
                continue

            os.makedirs(os.path.dirname(file_path) or ".", exist_ok=True)
            mode = (entry.external_attr >> 16) & 0o777 or 0o666
            fd = os.open(file_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
            with os.fdopen(fd, "wb") as out, archive.open(entry) as src:
                shutil.copyfileobj(src, out)


def _untar(file: str, dst: str) -> None:
    with tarfile.open(file, "r:gz") as archive:
        for member in archive:
            target = os.path.join(dst, member.name)
            if member.isfile():
                source = archive.extractfile(member)
                if source is None:
                    continue
                with source, open(target, "wb") as out:
                    shutil.copyfileobj(source, out)
                os.chmod(target, member.mode & 0o7777)
            elif member.isdir():
                try:
                    os.mkdir(target, 0o755)
                except FileExistsError:
                    pass


class _IndentedDumper(yaml.SafeDumper):
    """Dumper that indents block sequences under their parent key."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def _load_mapping(data: bytes | str) -> dict:
    loaded = yaml.safe_load(data)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError("YAML document is not a mapping")
    return loaded


def merge_yaml(dst: bytes | str, src: bytes | str) -> bytes:
    """Merge two YAML documents; top-level keys of src override those of dst."""
    overrides = _load_mapping(src)
    merged = _load_mapping(dst)
    merged.update(overrides)
    text = yaml.dump(
        merged,
        Dumper=_IndentedDumper,
        indent=2,
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
    )
    return text.encode("utf-8")