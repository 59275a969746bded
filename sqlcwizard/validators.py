# File: sqlcwizard/validators.py
"""
SQLC Wizard - Configuration Validators
=======================================
Pure-function checks over the output document (``SqlcConfig``) and over
the resolved input record.

Pydantic already guarantees that values have the right *types*.  This
module adds the semantic layer: required values, closed-set membership for
fields kept as plain strings in the document (so hand-written files can be
loaded and reported on), and advisory warnings.

Every finding carries a dotted field path such as ``sql[0].gen.go.package``.
Errors block the pipeline; warnings only advise.

Usage:
    from sqlcwizard.validators import validate_config
    result = validate_config(doc)
    if not result.is_valid:
        print(result.format_report())
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Dict, List, Optional, Tuple

from sqlcwizard.errors import validation_failed
from sqlcwizard.models import (
    DatabaseEngine,
    GoGenConfig,
    InputRecord,
    JsonTagsCaseStyle,
    SQLSection,
    SqlcConfig,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.validators")

SUPPORTED_VERSIONS: Tuple[str, ...] = ("1", "2")
PROJECT_NAME_MIN: int = 2
PROJECT_NAME_MAX: int = 50

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight finding descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "field", "message")

    def __init__(self, level: str, code: str, field: str, message: str) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.field: str = field
        self.message: str = message

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def _key(self) -> Tuple[str, str, str, str]:
        return (self.level, self.code, self.field, self.message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self}"

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "field": self.field,
            "message": self.message,
        }


class ValidationResult:
    """
    Errors and warnings produced by one validation pass, in the order they
    were found.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(self, field: str, message: str, code: str = "INVALID") -> None:
        self._items.append(ValidationError("error", code, field, message))

    def add_warning(self, field: str, message: str, code: str = "ADVICE") -> None:
        self._items.append(ValidationError("warning", code, field, message))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationError]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def fields(self, level: Optional[str] = None) -> List[str]:
        """Field paths of all findings (optionally only one level)."""
        return [e.field for e in self._items if level is None or e.level == level]

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)."
        )

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary()]
        for item in self._items:
            prefix: str = "❌" if item.is_error else "⚠️"
            lines.append(f"  {prefix} [{item.code}] {item}")
        return "\n".join(lines)

    def raise_for_errors(self) -> None:
        """Raise ``ValidationFailed`` if any error was recorded."""
        if self.has_errors:
            raise validation_failed(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationResult):
            return NotImplemented
        return self._items == other._items

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)


# ---------------------------------------------------------------------------
# Document checks
# ---------------------------------------------------------------------------


def _validate_go(go: GoGenConfig, prefix: str, result: ValidationResult) -> None:
    if not go.package:
        result.add_error(f"{prefix}.package", "package name is required", "PACKAGE_REQUIRED")
    if not go.out:
        result.add_error(f"{prefix}.out", "output directory is required", "OUT_REQUIRED")
    style: str = go.json_tags_case_style
    if style and style not in JsonTagsCaseStyle.values():
        result.add_error(
            f"{prefix}.json_tags_case_style",
            f"invalid case style: {style} "
            f"(must be one of: {', '.join(JsonTagsCaseStyle.values())})",
            "INVALID_CASE_STYLE",
        )

    if not go.emit_interface:
        result.add_warning(
            f"{prefix}.emit_interface",
            "consider enabling emit_interface for better testability",
        )
    if not go.emit_prepared_queries:
        result.add_warning(
            f"{prefix}.emit_prepared_queries",
            "consider enabling emit_prepared_queries for better performance",
        )
    if not go.emit_json_tags:
        result.add_warning(
            f"{prefix}.emit_json_tags",
            "consider enabling emit_json_tags for JSON serialization support",
        )


def validate_sql_section(section: SQLSection, index: int) -> ValidationResult:
    """Checks for one entry of the ``sql`` list."""
    result: ValidationResult = ValidationResult()
    prefix: str = f"sql[{index}]"

    if not section.engine:
        result.add_error(f"{prefix}.engine", "engine is required", "ENGINE_REQUIRED")
    elif section.engine not in DatabaseEngine.values():
        result.add_error(
            f"{prefix}.engine",
            f"invalid engine: {section.engine} "
            f"(must be one of: {', '.join(DatabaseEngine.values())})",
            "INVALID_ENGINE",
        )

    if section.queries.is_empty():
        result.add_error(f"{prefix}.queries", "queries path is required", "QUERIES_REQUIRED")
    if section.schema_paths.is_empty():
        result.add_error(f"{prefix}.schema", "schema path is required", "SCHEMA_REQUIRED")

    if not section.gen.has_any():
        result.add_error(
            f"{prefix}.gen",
            "at least one language generation config is required",
            "GEN_REQUIRED",
        )
    if section.gen.go is not None:
        _validate_go(section.gen.go, f"{prefix}.gen.go", result)

    return result


def validate_config(config: Optional[SqlcConfig]) -> ValidationResult:
    """
    **Master validation entry point** for an output document.

    Pure: the document is not touched and repeated calls return equal
    results.  ``None`` yields exactly one error on field ``config``.
    """
    result: ValidationResult = ValidationResult()

    if config is None:
        result.add_error("config", "configuration cannot be nil", "CONFIG_NIL")
        return result

    if not config.version:
        result.add_error("version", "version is required", "VERSION_REQUIRED")
    elif config.version not in SUPPORTED_VERSIONS:
        result.add_error(
            "version",
            f"unsupported version: {config.version} (expected 1 or 2)",
            "UNSUPPORTED_VERSION",
        )

    if not config.sql:
        result.add_error(
            "sql", "at least one SQL configuration is required", "SQL_REQUIRED"
        )
    for index, section in enumerate(config.sql):
        result.merge(validate_sql_section(section, index))

    if result.has_errors:
        logger.error("Config validation FAILED. %s", result.summary())
    else:
        logger.info("Config validation passed. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Input-record checks
# ---------------------------------------------------------------------------


def _normalise(path: str) -> str:
    return posixpath.normpath(path.strip().replace("\\", "/"))


def validate_input_record(record: InputRecord) -> ValidationResult:
    """
    Cross-field checks on a resolved input record: project-name bounds,
    package name present, output paths present and pairwise distinct.
    """
    result: ValidationResult = ValidationResult()

    name_length: int = len(record.project_name)
    if record.project_name and not PROJECT_NAME_MIN <= name_length <= PROJECT_NAME_MAX:
        result.add_error(
            "project_name",
            f"project name must be between {PROJECT_NAME_MIN} and "
            f"{PROJECT_NAME_MAX} characters (got {name_length})",
            "PROJECT_NAME_LENGTH",
        )

    if not record.package.name.strip():
        result.add_error("package.name", "package name is required", "PACKAGE_REQUIRED")

    paths: List[Tuple[str, str]] = [
        ("base_dir", record.output.base_dir),
        ("queries_dir", record.output.queries_dir),
        ("schema_dir", record.output.schema_dir),
    ]
    seen: Dict[str, str] = {}
    for name, value in paths:
        if not value.strip():
            result.add_error(f"output.{name}", f"{name} is required", "PATH_REQUIRED")
            continue
        normalised: str = _normalise(value)
        if normalised in seen:
            result.add_error(
                f"output.{name}",
                f"{name} must differ from {seen[normalised]} ({value})",
                "PATH_NOT_DISTINCT",
            )
        else:
            seen[normalised] = name

    if result.has_errors:
        logger.error("Input validation FAILED. %s", result.summary())
    return result


__all__: List[str] = [
    "SUPPORTED_VERSIONS",
    "ValidationError",
    "ValidationResult",
    "validate_sql_section",
    "validate_config",
    "validate_input_record",
]

logger.debug("sqlcwizard.validators loaded, %d public symbols.", len(__all__))
