# File: sqlcwizard/exporters.py
"""
SQLC Wizard - Project Exporter (File-System Writer)
====================================================

Responsible for:
    1. Normalising every target path against one caller-supplied root.
    2. Rejecting paths that are blank, absolute outside the root, or that
       escape the root through ``..``.
    3. Refusing to overwrite existing files unless ``overwrite=True``.
    4. Writing ``sqlc.yaml`` and the starter SQL files atomically.
    5. Returning a ``FileRecord`` (size, lines, sha256) per written file.

All targets of a batch are resolved and checked before the first byte is
written, so a rejected path never leaves a half-written project behind.
Each individual file write is atomic (temp file + rename).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union

from sqlcwizard.errors import ErrorKind, WizardError
from sqlcwizard.models import DatabaseEngine, SqlcConfig
from sqlcwizard.serializer import DEFAULT_CONFIG_FILENAME, serialize_config
from sqlcwizard.templates import StarterTemplateGenerator
from sqlcwizard.utils import Timer, count_lines, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.exporters")

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Final result returned by ``ProjectExporter.export()``."""

    root: str
    files: Tuple[FileRecord, ...]
    elapsed_seconds: float

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)


# ---------------------------------------------------------------------------
# ProjectExporter class
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes the configuration and starter files under one root directory.

    Usage::

        exporter = ProjectExporter(Path("./myproject"))
        result = exporter.export(config)
        for record in result.files:
            print(record.relative_path, record.sha256)

    Thread-safety: NOT thread-safe.  Use one exporter per root.
    """

    def __init__(
        self,
        root: PathLike,
        *,
        overwrite: bool = False,
        atomic_writes: bool = True,
    ) -> None:
        """
        Args:
            root: Directory every relative path is resolved against.
            overwrite: Replace existing files instead of failing.
            atomic_writes: Use the write-to-temp + rename pattern.
        """
        if not str(root).strip():
            raise WizardError(ErrorKind.FILE_WRITE_ERROR, "output root is required")
        self._root: Path = Path(root).expanduser().resolve()
        self._overwrite: bool = overwrite
        self._atomic_writes: bool = atomic_writes

        logger.debug(
            "ProjectExporter initialised: root=%s, overwrite=%s.",
            self._root,
            self._overwrite,
        )

    @property
    def root(self) -> Path:
        return self._root

    # -----------------------------------------------------------------
    # Path normalisation
    # -----------------------------------------------------------------

    def resolve(self, target: PathLike) -> Path:
        """
        Absolute path for *target*, guaranteed to lie inside the root.

        Raises:
            WizardError: ``FileWriteError`` for blank paths, ``~`` paths,
                absolute paths outside the root and relative paths that
                escape it.
        """
        raw: str = str(target).strip()
        if not raw:
            raise WizardError(ErrorKind.FILE_WRITE_ERROR, "path is required")
        if raw.startswith("~"):
            raise WizardError(
                ErrorKind.FILE_WRITE_ERROR,
                "home-relative paths are ambiguous; use a path under the output root",
                path=raw,
            )

        candidate: Path = Path(raw)
        resolved: Path = (
            candidate.resolve() if candidate.is_absolute() else (self._root / candidate).resolve()
        )
        if resolved != self._root and not resolved.is_relative_to(self._root):
            reason: str = (
                "absolute path lies outside the output root"
                if candidate.is_absolute()
                else "relative path escapes the output root"
            )
            raise WizardError(ErrorKind.FILE_WRITE_ERROR, reason, path=raw)
        return resolved

    def relative(self, absolute: Path) -> str:
        return absolute.relative_to(self._root).as_posix()

    # -----------------------------------------------------------------
    # Writing
    # -----------------------------------------------------------------

    def _check_target(self, target: Path) -> None:
        if target.is_dir():
            raise WizardError(
                ErrorKind.FILE_WRITE_ERROR, "target is a directory", path=target
            )
        if target.exists() and not self._overwrite:
            raise WizardError(
                ErrorKind.FILE_WRITE_ERROR,
                "file already exists (use overwrite to replace it)",
                path=target,
            )

    def _write_single_file(self, target: Path, content: str) -> FileRecord:
        try:
            size_bytes: int = write_file(target, content, atomic=self._atomic_writes)
        except OSError as exc:
            raise WizardError(
                ErrorKind.FILE_WRITE_ERROR, f"cannot write file: {exc}", path=target
            ) from exc

        record: FileRecord = FileRecord(
            relative_path=self.relative(target),
            absolute_path=str(target),
            size_bytes=size_bytes,
            line_count=count_lines(content),
            sha256=sha256_hex(content),
        )
        logger.debug(
            "Wrote file: %s (%d bytes, %d lines).",
            record.relative_path,
            record.size_bytes,
            record.line_count,
        )
        return record

    def write_files(self, files: Dict[str, str]) -> List[FileRecord]:
        """
        Write a batch of ``relative path -> content`` entries.

        Every target is resolved and checked first; nothing is written if
        any of them is rejected.
        """
        planned: List[Tuple[Path, str]] = []
        seen: Dict[Path, str] = {}
        for rel_path, content in files.items():
            target: Path = self.resolve(rel_path)
            if target in seen:
                raise WizardError(
                    ErrorKind.FILE_WRITE_ERROR,
                    f"same target as {seen[target]!r}",
                    path=rel_path,
                )
            self._check_target(target)
            seen[target] = rel_path
            planned.append((target, content))

        return [self._write_single_file(target, content) for target, content in planned]

    def write_config(
        self, config: SqlcConfig, filename: str = DEFAULT_CONFIG_FILENAME
    ) -> FileRecord:
        """Serialize *config* to ``<root>/<filename>``."""
        return self.write_files({filename: serialize_config(config)})[0]

    def starter_files(
        self,
        config: SqlcConfig,
        *,
        include_queries: bool = True,
        include_schema: bool = True,
    ) -> Dict[str, str]:
        """
        Starter files for every SQL section of *config*, keyed by path
        relative to the root.  Sections with an unknown engine are skipped.
        """
        files: Dict[str, str] = {}
        for index, section in enumerate(config.sql):
            if section.engine not in DatabaseEngine.values():
                logger.warning(
                    "sql[%d]: no starter templates for engine %r", index, section.engine
                )
                continue
            generator: StarterTemplateGenerator = StarterTemplateGenerator(section.engine)
            generated: Dict[str, str] = generator.generate_all(
                section.queries.first() or ".",
                section.schema_paths.first() or ".",
                include_queries=include_queries,
                include_schema=include_schema,
            )
            for rel_path, content in generated.items():
                normalised: str = os.path.normpath(rel_path)
                if normalised not in files:
                    files[normalised] = content
        return files

    def write_starters(
        self,
        config: SqlcConfig,
        *,
        include_queries: bool = True,
        include_schema: bool = True,
    ) -> List[FileRecord]:
        return self.write_files(
            self.starter_files(
                config, include_queries=include_queries, include_schema=include_schema
            )
        )

    def export(
        self,
        config: SqlcConfig,
        *,
        filename: str = DEFAULT_CONFIG_FILENAME,
        include_examples: bool = True,
    ) -> ExportResult:
        """Write ``sqlc.yaml`` plus (optionally) the starter files."""
        with Timer("export") as t:
            files: Dict[str, str] = {filename: serialize_config(config)}
            if include_examples:
                for rel_path, content in self.starter_files(config).items():
                    files.setdefault(rel_path, content)
            records: List[FileRecord] = self.write_files(files)

        logger.info(
            "Export complete: %d file(s) to %s in %.3fs.",
            len(records),
            self._root,
            t.elapsed,
        )
        return ExportResult(
            root=str(self._root),
            files=tuple(records),
            elapsed_seconds=t.elapsed,
        )


__all__: List[str] = [
    "FileRecord",
    "ExportResult",
    "ProjectExporter",
]

logger.debug("sqlcwizard.exporters loaded.")
