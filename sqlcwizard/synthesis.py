# File: sqlcwizard/synthesis.py
"""
SQLC Wizard - Synthesis Pipeline
=================================
Maps (archetype × engine × caller overrides) onto a fully materialised
``SqlcConfig``.

Steps, in order:

1. look up the archetype preset (``TemplateNotFound`` when missing);
2. seed an input record from the preset defaults;
3. overlay caller overrides field by field (``None``, ``""`` and ``UNSET``
   keep the preset value);
4. derive dependent fields (output dirs, driver hint, build tags);
5. check the record (``ValidationFailed`` on error);
6. build one SQL section with its ``gen.go`` subsection and safety rules.

The pipeline has no side effects.  On failure it raises ``WizardError`` and
no partial document escapes.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Union

from pydantic import ValidationError as PydanticValidationError

from sqlcwizard.engines import build_tags, driver_hint, type_overrides
from sqlcwizard.errors import ErrorKind, WizardError, invalid_shape, validation_failed
from sqlcwizard.models import (
    DatabaseSection,
    GenConfig,
    GoGenConfig,
    InputRecord,
    PathOrPaths,
    ProjectArchetype,
    SQLSection,
    SqlcConfig,
    database_engine_from,
    json_case_style_from,
    project_archetype_from,
)
from sqlcwizard.presets import DEFAULT_REGISTRY, Preset, PresetRegistry
from sqlcwizard.rules import rules_for
from sqlcwizard.utils import expand_dotted
from sqlcwizard.validators import ValidationResult, validate_input_record

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.synthesis")


class _Unset:
    """Marker for "leave the preset value in place"."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: _Unset = _Unset()

Overrides = Mapping[str, Any]
ArchetypeLike = Union[ProjectArchetype, str]

# Leaf fields routed through a smart constructor instead of pydantic coercion.
_ENUM_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "database.engine": database_engine_from,
    "emit.json_tags_case_style": json_case_style_from,
}


# ---------------------------------------------------------------------------
# Overlay
# ---------------------------------------------------------------------------


def _keeps_preset(value: Any) -> bool:
    return value is UNSET or value is None or (isinstance(value, str) and value == "")


def _overlay(target: Dict[str, Any], patch: Mapping[str, Any], prefix: str = "") -> Set[str]:
    """Apply *patch* onto *target* in place; return the dotted paths changed."""
    changed: Set[str] = set()
    for key, value in patch.items():
        path: str = f"{prefix}.{key}" if prefix else str(key)
        if path == "archetype":
            raise invalid_shape(path, "archetype cannot be overridden")
        if key not in target:
            raise invalid_shape(path, f"unknown field {key!r}")

        current: Any = target[key]
        if isinstance(current, dict):
            if _keeps_preset(value):
                continue
            if not isinstance(value, Mapping):
                raise invalid_shape(
                    path, f"expected a section mapping, got {type(value).__name__}"
                )
            changed |= _overlay(current, value, path)
            continue

        if isinstance(value, Mapping):
            raise invalid_shape(path, "expected a value, got a mapping")
        if _keeps_preset(value):
            continue

        coerce: Optional[Callable[[Any], Any]] = _ENUM_COERCERS.get(path)
        target[key] = coerce(value) if coerce is not None else value
        changed.add(path)
    return changed


def _derive(data: Dict[str, Any], changed: Set[str], preset: Preset) -> None:
    """Fill dependent fields after overrides have been applied."""
    output: Dict[str, Any] = data["output"]
    defaults: Dict[str, Any] = preset.baseline.output.model_dump()

    base: str = (output.get("base_dir") or "").strip() or defaults["base_dir"]
    output["base_dir"] = base
    base_overridden: bool = "output.base_dir" in changed

    for key, leaf in (("queries_dir", "queries"), ("schema_dir", "schema")):
        value: str = (output.get(key) or "").strip()
        explicit: bool = f"output.{key}" in changed
        if not value or (base_overridden and not explicit):
            output[key] = f"{base.rstrip('/')}/{leaf}"
            logger.debug("Derived output.%s = %s", key, output[key])


def _pydantic_failure(exc: PydanticValidationError) -> WizardError:
    result: ValidationResult = ValidationResult()
    for err in exc.errors():
        location: str = ".".join(str(part) for part in err.get("loc", ()))
        result.add_error(location or "input", err.get("msg", "invalid value"), "INVALID_TYPE")
    first = result.errors[0]
    return WizardError(
        ErrorKind.VALIDATION_FAILED,
        first.message,
        field=first.field,
        result=result,
    )


def _normalise_overrides(overrides: Optional[Overrides]) -> Dict[str, Any]:
    if overrides is None:
        return {}
    if not isinstance(overrides, Mapping):
        raise invalid_shape(
            "overrides", f"overrides must be a mapping, got {type(overrides).__name__}"
        )
    try:
        return expand_dotted(overrides)
    except ValueError as exc:
        raise invalid_shape("overrides", str(exc)) from exc


def _resolve(preset: Preset, overrides: Optional[Overrides]) -> InputRecord:
    patch: Dict[str, Any] = _normalise_overrides(overrides)
    data: Dict[str, Any] = preset.defaults().model_dump()

    changed: Set[str] = _overlay(data, patch)
    if changed:
        logger.debug("Overrides applied: %s", ", ".join(sorted(changed)))
    _derive(data, changed, preset)

    try:
        record: InputRecord = InputRecord.model_validate(data)
    except PydanticValidationError as exc:
        raise _pydantic_failure(exc) from exc

    result: ValidationResult = validate_input_record(record)
    if not result.is_valid:
        raise validation_failed(result)
    return record


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_input(
    archetype: ArchetypeLike,
    overrides: Optional[Overrides] = None,
    *,
    registry: Optional[PresetRegistry] = None,
) -> InputRecord:
    """
    Preset defaults for *archetype* with *overrides* laid over them.

    Overrides may be nested (``{"emit": {"interface": True}}``) or dotted
    (``{"emit.interface": True}``).

    Raises:
        WizardError: ``InvalidEnum``, ``TemplateNotFound``, ``InvalidShape``
            or ``ValidationFailed``.
    """
    registry = registry if registry is not None else DEFAULT_REGISTRY
    preset: Preset = registry.get(project_archetype_from(archetype))
    return _resolve(preset, overrides)


def build_document(record: InputRecord, preset: Optional[Preset] = None) -> SqlcConfig:
    """Materialise the output document for an already-resolved *record*."""
    if preset is None:
        preset = DEFAULT_REGISTRY.get(record.archetype)

    engine = record.database.engine
    use_pgx: bool = record.database.use_pgx
    emit = record.emit

    go: GoGenConfig = GoGenConfig(
        package=record.package.name,
        out=record.output.base_dir,
        sql_package=driver_hint(engine, use_pgx),
        build_tags=build_tags(engine, use_pgx, record.package.build_tags),
        emit_json_tags=emit.json_tags,
        emit_prepared_queries=emit.prepared_queries,
        emit_interface=emit.interface,
        emit_empty_slices=emit.empty_slices,
        emit_result_struct_pointers=emit.result_pointers,
        emit_params_struct_pointers=emit.params_pointers,
        emit_enum_valid_method=emit.enum_valid_method,
        emit_all_enum_values=emit.all_enum_values,
        json_tags_case_style=(
            emit.json_tags_case_style.value if emit.json_tags_case_style else ""
        ),
        overrides=type_overrides(engine, record.database),
        rename=dict(sorted(preset.rename_rules().items())),
    )

    database: Optional[DatabaseSection] = None
    if record.database.url or record.database.use_managed:
        database = DatabaseSection(
            uri=record.database.url,
            managed=record.database.use_managed,
        )

    section: SQLSection = SQLSection(
        name=record.project_name or preset.section_name,
        engine=engine.value,
        queries=PathOrPaths(record.output.queries_dir),
        schema_paths=PathOrPaths(record.output.schema_dir),
        database=database,
        gen=GenConfig(go=go),
        strict_function_checks=True if record.validation.strict_functions else None,
        strict_order_by=True if record.validation.strict_order_by else None,
        rules=rules_for(record.safety),
    )
    return SqlcConfig(version="2", sql=[section])


def synthesize(
    archetype: ArchetypeLike,
    overrides: Optional[Overrides] = None,
    *,
    registry: Optional[PresetRegistry] = None,
) -> SqlcConfig:
    """
    **Pipeline entry point**: archetype plus overrides to output document.

    Unknown archetype strings fail at the smart constructor (``InvalidEnum``)
    before any preset lookup happens.
    """
    resolved: ProjectArchetype = project_archetype_from(archetype)
    registry = registry if registry is not None else DEFAULT_REGISTRY
    preset: Preset = registry.get(resolved)
    logger.info("Synthesizing configuration for archetype %s", resolved.value)

    record: InputRecord = _resolve(preset, overrides)
    document: SqlcConfig = build_document(record, preset)

    section: SQLSection = document.sql[0]
    logger.info(
        "Synthesized section %r (engine=%s, %d override(s), %d rule(s))",
        section.name,
        section.engine,
        len(section.gen.go.overrides) if section.gen.go else 0,
        len(section.rules),
    )
    return document


__all__: List[str] = [
    "UNSET",
    "resolve_input",
    "build_document",
    "synthesize",
]
