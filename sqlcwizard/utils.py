# File: sqlcwizard/utils.py
"""
SQLC Wizard - Utility Functions & Helpers
==========================================
Small helpers shared by the pipeline: nested-mapping merges and dotted-key
expansion for overrides, atomic file I/O, checksums and a step timer.

No external dependencies beyond the Python standard library.
"""

from __future__ import annotations

import copy
import hashlib
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.utils")


# ---------------------------------------------------------------------------
# Nested mapping helpers
# ---------------------------------------------------------------------------


def deep_merge(base: Mapping[str, Any], patch: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a new dict: *base* with *patch* laid over it, recursing into
    nested mappings.  Neither argument is modified.

    >>> deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
    {'a': {'x': 1, 'y': 3}}
    """
    merged: Dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in patch.items():
        current: Any = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def expand_dotted(flat: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Expand ``{"emit.interface": True}`` into ``{"emit": {"interface": True}}``.

    Keys without dots and nested mappings pass through; both spellings may
    be mixed.  A key that is both a scalar and a section raises ``ValueError``.
    """
    expanded: Dict[str, Any] = {}
    for key, value in flat.items():
        if isinstance(value, Mapping):
            value = expand_dotted(value)
        parts: List[str] = str(key).split(".")
        node: Dict[str, Any] = expanded
        for part in parts[:-1]:
            child: Any = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise ValueError(f"'{part}' is both a value and a section")
            node = child
        leaf: str = parts[-1]
        existing: Any = node.get(leaf)
        if isinstance(existing, dict) and isinstance(value, dict):
            node[leaf] = deep_merge(existing, value)
        elif isinstance(existing, dict) or (leaf in node and isinstance(value, dict)):
            raise ValueError(f"'{leaf}' is both a value and a section")
        else:
            node[leaf] = value
    return expanded


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*.

    When *atomic* is True the bytes go to a temporary file in the same
    directory which is then renamed over the target, so readers never see
    a partially written file.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

    if atomic:
        fd: int
        tmp_path: str
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(encoded)
            os.replace(tmp_path, str(path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", byte_count, path)
    return byte_count


def read_file(path: Path) -> str:
    """Read a file and return its content as a string."""
    return path.read_text(encoding="utf-8")


def is_writable_directory(path: Path) -> bool:
    """True when *path* (or its nearest existing ancestor) accepts new files."""
    probe: Path = path
    while not probe.exists():
        if probe.parent == probe:
            return False
        probe = probe.parent
    return probe.is_dir() and os.access(str(probe), os.W_OK | os.X_OK)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for pipeline steps.

    Usage:
        with Timer("synthesize") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


__all__: List[str] = [
    "deep_merge",
    "expand_dotted",
    "ensure_directory",
    "write_file",
    "read_file",
    "is_writable_directory",
    "sha256_hex",
    "count_lines",
    "Timer",
]
