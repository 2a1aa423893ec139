"""Shared text, JSON and YAML I/O helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import json
import os
from pathlib import Path
import tempfile
from typing import IO, Any, Mapping, Optional

import yaml

from graphconv.errors import GraphIOError

ENCODING = "utf-8"
YAML_SUFFIXES = (".yaml", ".yml")


@contextmanager
def open_text_input(path: Path) -> Iterator[IO[str]]:
    """Open a graph file for reading, mapping OS failures to GraphIOError."""
    try:
        handle = path.open("r", encoding=ENCODING, errors="surrogateescape")
    except FileNotFoundError as exc:
        raise GraphIOError(f"Input graph not found: {path}") from exc
    except OSError as exc:
        raise GraphIOError(f"Failed to open input graph {path}: {exc}") from exc
    with handle:
        yield handle


def _default_file_mode() -> int:
    # mkstemp creates 0600 files; match what open() would give under the umask.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


@contextmanager
def atomic_text_writer(path: Path) -> Iterator[IO[str]]:
    """Yield a handle to a temp sibling of ``path``; rename over it on success."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_handle, tmp_path = tempfile.mkstemp(
            prefix=f".{path.name}.", dir=path.parent
        )
    except OSError as exc:
        raise GraphIOError(f"Failed to create output for {path}: {exc}") from exc
    fd: Optional[int] = tmp_handle
    try:
        with os.fdopen(tmp_handle, "w", encoding="utf-8", newline="\n") as handle:
            fd = None
            yield handle
        os.chmod(tmp_path, _default_file_mode())
        os.replace(tmp_path, path)
    except OSError as exc:
        raise GraphIOError(f"Failed to write output graph {path}: {exc}") from exc
    finally:
        if fd is not None:
            try:
                os.close(fd)
            except OSError:
                pass
        if os.path.exists(tmp_path):
            try:
                os.unlink(tmp_path)
            except OSError:
                pass


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def write_json_atomic(path: Path, payload: Any) -> None:
    with atomic_text_writer(path) as handle:
        json.dump(payload, handle, indent=2, sort_keys=True, ensure_ascii=True)
        handle.write("\n")


def write_yaml_atomic(
    path: Path,
    payload: Mapping[str, Any],
    *,
    sort_keys: bool = True,
) -> None:
    with atomic_text_writer(path) as handle:
        yaml.safe_dump(
            dict(payload),
            handle,
            allow_unicode=False,
            default_flow_style=False,
            sort_keys=sort_keys,
        )


def write_payload(path: Path, payload: Mapping[str, Any]) -> None:
    """Write a mapping as YAML or JSON depending on the file suffix."""
    if path.suffix.lower() in YAML_SUFFIXES:
        write_yaml_atomic(path, payload)
    else:
        write_json_atomic(path, payload)


__all__ = [
    "ENCODING",
    "YAML_SUFFIXES",
    "atomic_text_writer",
    "open_text_input",
    "read_json",
    "write_json_atomic",
    "write_payload",
    "write_yaml_atomic",
]
