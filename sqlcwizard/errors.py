# File: sqlcwizard/errors.py
"""
SQLC Wizard - Error Taxonomy
=============================
A single exception type for every failure the wizard can surface.

Each ``WizardError`` carries an ``ErrorKind`` plus optional data: the dotted
field path the failure refers to (``sql[0].gen.go.package``), the file-system
path for I/O errors, and the ``ValidationResult`` when validation blocked the
pipeline.  Underlying causes are preserved through ``raise ... from exc``.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

if TYPE_CHECKING:
    from sqlcwizard.validators import ValidationResult

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.errors")


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    INVALID_ENUM = "InvalidEnum"
    INVALID_SHAPE = "InvalidShape"
    TEMPLATE_NOT_FOUND = "TemplateNotFound"
    CONFIG_NOT_FOUND = "ConfigNotFound"
    CONFIG_PARSE_FAILED = "ConfigParseFailed"
    VALIDATION_FAILED = "ValidationFailed"
    FILE_READ_ERROR = "FileReadError"
    FILE_WRITE_ERROR = "FileWriteError"


class WizardError(Exception):
    """
    Typed failure raised by the synthesis core and its collaborators.

    Args:
        kind: Which member of the taxonomy this is.
        message: Human-readable description (without the field prefix).
        field: Dotted field path, when the failure is tied to one.
        path: File-system path, for load/write failures.
        result: The validation result that caused a ``ValidationFailed``.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        field: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
        result: Optional["ValidationResult"] = None,
    ) -> None:
        self.kind: ErrorKind = kind
        self.message: str = message
        self.field: Optional[str] = field
        self.path: Optional[str] = str(path) if path is not None else None
        self.result: Optional["ValidationResult"] = result
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        """Message shown to users: kind-specific prefix plus the field or path."""
        if self.field:
            return f"{self.field}: {self.message}"
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message

    def diagnostic(self) -> str:
        """Full message including every chained cause."""
        parts: List[str] = [f"[{self.kind.value}] {self.user_message}"]
        cause: Optional[BaseException] = self.__cause__
        while cause is not None:
            parts.append(f"caused by {type(cause).__name__}: {cause}")
            cause = cause.__cause__
        return "\n  ".join(parts)

    def __repr__(self) -> str:
        return f"<WizardError {self.kind.value}: {self.user_message}>"


# ---------------------------------------------------------------------------
# Constructors for the common cases
# ---------------------------------------------------------------------------


def invalid_enum(field: str, value: object, allowed: Sequence[str]) -> WizardError:
    return WizardError(
        ErrorKind.INVALID_ENUM,
        f"invalid value {value!r} (must be one of: {', '.join(allowed)})",
        field=field,
    )


def invalid_shape(field: str, message: str) -> WizardError:
    return WizardError(ErrorKind.INVALID_SHAPE, message, field=field)


def template_not_found(archetype: str) -> WizardError:
    return WizardError(
        ErrorKind.TEMPLATE_NOT_FOUND,
        f"no preset registered for project type {archetype!r}",
        field="project_type",
    )


def validation_failed(result: "ValidationResult") -> WizardError:
    first: str = str(result.errors[0]) if result.errors else "validation failed"
    return WizardError(
        ErrorKind.VALIDATION_FAILED,
        f"{result.error_count} validation error(s); first: {first}",
        result=result,
    )


__all__: List[str] = [
    "ErrorKind",
    "WizardError",
    "invalid_enum",
    "invalid_shape",
    "template_not_found",
    "validation_failed",
]
