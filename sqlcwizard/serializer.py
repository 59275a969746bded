# File: sqlcwizard/serializer.py
"""
SQLC Wizard - YAML Serializer
==============================
Deterministic ``sqlc.yaml`` emission and parsing.

Output rules:

* key order follows the model field order (``version``, ``cloud``, ``sql``,
  ``rules`` at the top; ``name``, ``engine``, ``queries``, ``schema`` ... in
  each SQL section);
* ``queries`` / ``schema`` are always sequences, even with one element;
* ``false`` booleans, empty strings, empty collections and ``None`` are
  omitted;
* maps are emitted in lexicographic key order, overrides by ``db_type``;
* two-space indentation with indented sequences, final newline.

For every document produced by the synthesis pipeline
``parse_config(serialize_config(doc)) == doc``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Tuple, Union

import yaml
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from sqlcwizard.errors import ErrorKind, WizardError, invalid_shape
from sqlcwizard.models import (
    PATH_OR_PATHS_SHAPE_ERROR,
    PathOrPaths,
    SQLSection,
    SqlcConfig,
)
from sqlcwizard.utils import read_file, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.serializer")

DEFAULT_CONFIG_FILENAME: str = "sqlc.yaml"

# Keys written even when their value is empty.
_ALWAYS_EMIT: Mapping[type, FrozenSet[str]] = {
    SqlcConfig: frozenset({"version", "sql"}),
    SQLSection: frozenset({"name", "engine", "queries", "schema", "gen"}),
}


# ---------------------------------------------------------------------------
# YAML dumper
# ---------------------------------------------------------------------------


class _DoubleQuoted(str):
    """A string that must be emitted with double quotes (``version: "2"``)."""


class _ConfigDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their parent key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indent(flow, False)


def _represent_double_quoted(dumper: yaml.SafeDumper, data: _DoubleQuoted) -> yaml.Node:
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data), style='"')


_ConfigDumper.add_representer(_DoubleQuoted, _represent_double_quoted)


# ---------------------------------------------------------------------------
# Model → plain data
# ---------------------------------------------------------------------------


def _is_omitted(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, dict)) and len(value) == 0:
        return True
    return False


def _plain(value: Any) -> Any:
    if isinstance(value, PathOrPaths):
        return value.strings()
    if isinstance(value, BaseModel):
        return _plain_model(value)
    if isinstance(value, Mapping):
        return {str(k): _plain(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _plain_model(model: BaseModel) -> Dict[str, Any]:
    keep: FrozenSet[str] = _ALWAYS_EMIT.get(type(model), frozenset())
    out: Dict[str, Any] = {}
    for name, info in type(model).model_fields.items():
        key: str = info.alias or name
        value: Any = getattr(model, name)
        if name == "overrides":
            value = sorted(value, key=lambda o: (o.db_type, o.column))
        plain: Any = _plain(value)
        if key not in keep and _is_omitted(plain):
            continue
        out[key] = plain
    return out


def to_plain(config: SqlcConfig) -> Dict[str, Any]:
    """Ordered plain-dict form of *config*, as it will be written."""
    data: Dict[str, Any] = _plain_model(config)
    data["version"] = _DoubleQuoted(config.version)
    return data


def serialize_config(config: SqlcConfig) -> str:
    """Render *config* as YAML text."""
    text: str = yaml.dump(
        to_plain(config),
        Dumper=_ConfigDumper,
        sort_keys=False,
        default_flow_style=False,
        indent=2,
        width=4096,
        allow_unicode=True,
    )
    if not text.endswith("\n"):
        text += "\n"
    return text


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _format_loc(loc: Tuple[Union[str, int], ...]) -> str:
    path: str = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "config"


def parse_config(text: str) -> SqlcConfig:
    """
    Parse YAML *text* into a ``SqlcConfig``.

    Raises:
        WizardError: ``ConfigParseFailed`` for YAML syntax errors and
            structural mismatches, ``InvalidShape`` for a ``queries`` /
            ``schema`` value that is neither a string nor a list of strings.
    """
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WizardError(
            ErrorKind.CONFIG_PARSE_FAILED, f"invalid YAML: {exc}"
        ) from exc

    if data is None:
        raise WizardError(ErrorKind.CONFIG_PARSE_FAILED, "configuration is empty")
    if not isinstance(data, dict):
        raise WizardError(
            ErrorKind.CONFIG_PARSE_FAILED,
            f"top level must be a mapping, got {type(data).__name__}",
        )

    try:
        return SqlcConfig.model_validate(data)
    except PydanticValidationError as exc:
        errors: List[Dict[str, Any]] = exc.errors()
        for err in errors:
            if err.get("type") == PATH_OR_PATHS_SHAPE_ERROR:
                raise invalid_shape(_format_loc(err["loc"]), err["msg"]) from exc
        first: Dict[str, Any] = errors[0]
        raise WizardError(
            ErrorKind.CONFIG_PARSE_FAILED,
            first["msg"],
            field=_format_loc(first["loc"]),
        ) from exc


def load_config_file(path: Union[str, Path]) -> SqlcConfig:
    """
    Read and parse a config file.

    Raises:
        WizardError: ``ConfigNotFound``, ``FileReadError``, or the parse
            errors of ``parse_config`` with *path* attached.
    """
    target: Path = Path(path)
    if not target.is_file():
        raise WizardError(
            ErrorKind.CONFIG_NOT_FOUND, "configuration file not found", path=target
        )
    try:
        text: str = read_file(target)
    except (OSError, UnicodeDecodeError) as exc:
        raise WizardError(
            ErrorKind.FILE_READ_ERROR, f"cannot read file: {exc}", path=target
        ) from exc

    try:
        config: SqlcConfig = parse_config(text)
    except WizardError as exc:
        message: str = f"{exc.field}: {exc.message}" if exc.field else exc.message
        raise WizardError(exc.kind, message, path=target) from exc

    logger.info("Loaded %s (%d SQL section(s))", target, len(config.sql))
    return config


def write_config_file(config: SqlcConfig, path: Union[str, Path]) -> int:
    """
    Serialize *config* to *path* atomically.  Returns bytes written.

    Raises:
        WizardError: ``FileWriteError`` with *path* attached.
    """
    target: Path = Path(path)
    text: str = serialize_config(config)
    try:
        written: int = write_file(target, text, atomic=True)
    except OSError as exc:
        raise WizardError(
            ErrorKind.FILE_WRITE_ERROR, f"cannot write file: {exc}", path=target
        ) from exc
    logger.info("Wrote %s (%d bytes)", target, written)
    return written


__all__: List[str] = [
    "DEFAULT_CONFIG_FILENAME",
    "to_plain",
    "serialize_config",
    "parse_config",
    "load_config_file",
    "write_config_file",
]
