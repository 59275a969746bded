# File: sqlcwizard/models.py
"""
SQLC Wizard - Core Data Models
===============================
Pydantic V2 models for both ends of the synthesis pipeline:

* the **input record**: the user's intent after preset defaults and
  overrides have been merged (project, package, database, output paths,
  emit toggles, strict checks, safety toggles);
* the **output document**: the in-memory form of ``sqlc.yaml`` (version 2
  schema) that the serializer writes to disk.

Closed sets (archetype, engine, JSON case style) are ``str`` enums with
smart constructors that raise ``InvalidEnum`` instead of coercing.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError, PydanticUndefined

from sqlcwizard.errors import invalid_enum

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.models")

# ---------------------------------------------------------------------------
# Enums (closed sets)
# ---------------------------------------------------------------------------


class _ClosedSet(str, Enum):
    """Base for string enums that list their allowed values."""

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class ProjectArchetype(_ClosedSet):
    """Project shapes a preset exists for."""

    HOBBY = "hobby"
    MICROSERVICE = "microservice"
    ENTERPRISE = "enterprise"
    API_FIRST = "api-first"
    ANALYTICS = "analytics"
    TESTING = "testing"
    MULTI_TENANT = "multi-tenant"
    LIBRARY = "library"


class DatabaseEngine(_ClosedSet):
    """Database dialects understood by sqlc."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"


class JsonTagsCaseStyle(_ClosedSet):
    """Casing applied to generated JSON struct tags."""

    CAMEL = "camel"
    PASCAL = "pascal"
    SNAKE = "snake"


# ---------------------------------------------------------------------------
# Smart constructors (case-sensitive; never coerce unknown strings)
# ---------------------------------------------------------------------------


def _closed_set_from(enum_cls: type, value: object, field: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str) and not isinstance(value, Enum):
        try:
            return enum_cls(value)
        except ValueError:
            pass
    raise invalid_enum(field, value, enum_cls.values())


def project_archetype_from(value: object) -> ProjectArchetype:
    """Return the archetype named by ``value`` or raise ``InvalidEnum``."""
    return _closed_set_from(ProjectArchetype, value, "project_type")


def database_engine_from(value: object) -> DatabaseEngine:
    """Return the engine named by ``value`` or raise ``InvalidEnum``."""
    return _closed_set_from(DatabaseEngine, value, "database.engine")


def json_case_style_from(value: object) -> JsonTagsCaseStyle:
    """Return the JSON tag case style named by ``value`` or raise ``InvalidEnum``."""
    return _closed_set_from(JsonTagsCaseStyle, value, "emit.json_tags_case_style")


def is_valid_archetype(value: str) -> bool:
    return value in ProjectArchetype.values()


def is_valid_engine(value: str) -> bool:
    return value in DatabaseEngine.values()


def is_valid_json_case_style(value: str) -> bool:
    return value in JsonTagsCaseStyle.values()


# ===========================================================================
# Input record
# ===========================================================================

_RECORD_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
    validate_default=True,
)


class PackageSettings(BaseModel):
    """Identity of the generated Go package."""

    model_config = _RECORD_CONFIG

    name: str = Field(default="db", description="Go package name.")
    path: str = Field(default="internal/db", description="Go import path.")
    build_tags: str = Field(
        default="",
        description="Explicit build-tag string; blank means engine default.",
    )


class DatabaseSettings(BaseModel):
    """Database selection and the feature flags that drive type overrides."""

    model_config = _RECORD_CONFIG

    engine: DatabaseEngine
    url: str = Field(default="", description="Connection URL or ${VAR} placeholder.")
    use_managed: bool = False
    use_uuids: bool = False
    use_json: bool = False
    use_arrays: bool = False
    use_full_text: bool = False
    use_pgx: bool = Field(
        default=False,
        description="Request the pgx/v5 driver (postgresql only).",
    )


class OutputSettings(BaseModel):
    """Where generated code, queries and schema files live."""

    model_config = _RECORD_CONFIG

    base_dir: str = ""
    queries_dir: str = ""
    schema_dir: str = ""

    def as_tuple(self) -> tuple:
        return (self.base_dir, self.queries_dir, self.schema_dir)


class EmitOptions(BaseModel):
    """Emit toggles forwarded to the downstream Go generator."""

    model_config = _RECORD_CONFIG

    json_tags: bool = True
    prepared_queries: bool = True
    interface: bool = True
    empty_slices: bool = True
    result_pointers: bool = False
    params_pointers: bool = False
    enum_valid_method: bool = False
    all_enum_values: bool = False
    json_tags_case_style: Optional[JsonTagsCaseStyle] = JsonTagsCaseStyle.CAMEL


class ValidationToggles(BaseModel):
    """sqlc's strict analysis switches."""

    model_config = _RECORD_CONFIG

    strict_functions: bool = False
    strict_order_by: bool = False


class SafetyToggles(BaseModel):
    """
    Query safety switches.  Field order is the catalog order: rules are
    emitted in exactly this sequence.
    """

    model_config = _RECORD_CONFIG

    no_select_star: bool = True
    require_where: bool = True
    no_drop_table: bool = True
    no_truncate: bool = True
    require_limit: bool = False

    def enabled(self) -> List[str]:
        return [name for name, value in self if value]


class InputRecord(BaseModel):
    """
    The authoritative intent fed to the synthesis pipeline.

    An empty ``project_name`` is allowed; the pipeline then falls back to
    the preset's section name.
    """

    model_config = _RECORD_CONFIG

    project_name: str = Field(default="", description="Project / SQL section name.")
    archetype: ProjectArchetype
    package: PackageSettings = Field(default_factory=PackageSettings)
    database: DatabaseSettings
    output: OutputSettings = Field(default_factory=OutputSettings)
    emit: EmitOptions = Field(default_factory=EmitOptions)
    validation: ValidationToggles = Field(default_factory=ValidationToggles)
    safety: SafetyToggles = Field(default_factory=SafetyToggles)


# ===========================================================================
# Output document (sqlc.yaml, version 2)
# ===========================================================================

_DOCUMENT_CONFIG: ConfigDict = ConfigDict(
    extra="forbid",
    populate_by_name=True,
    validate_assignment=True,
)

PATH_OR_PATHS_SHAPE_ERROR: str = "path_or_paths_shape"


class PathOrPaths(RootModel[List[str]]):
    """
    A ``queries`` / ``schema`` value: one path or a list of paths on the
    wire, always a list in memory and always a sequence when serialized.

    Examples::

        PathOrPaths("q/").strings()          # ['q/']
        PathOrPaths(["q1/", "q2/"]).first()  # 'q1/'
    """

    root: List[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _scalar_or_sequence(cls, value: Any) -> List[str]:
        if value is PydanticUndefined:
            return []
        if isinstance(value, PathOrPaths):
            return list(value.root)
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            return list(value)
        raise PydanticCustomError(
            PATH_OR_PATHS_SHAPE_ERROR,
            "path_or_paths must be either a string or a list of strings, got {kind}",
            {"kind": type(value).__name__},
        )

    def strings(self) -> List[str]:
        return list(self.root)

    def first(self) -> str:
        return self.root[0] if self.root else ""

    def is_empty(self) -> bool:
        return len(self.root) == 0

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> str:
        return self.root[index]


class CloudConfig(BaseModel):
    """sqlc Cloud settings (parsed and re-emitted, never synthesized)."""

    model_config = _DOCUMENT_CONFIG

    organization: str = ""
    project: str = ""
    token: str = ""
    hostname: str = ""


class DatabaseSection(BaseModel):
    """Connection used by sqlc for managed / analyzed databases."""

    model_config = _DOCUMENT_CONFIG

    uri: str = ""
    managed: bool = False


class TypeOverride(BaseModel):
    """Binds a database column type (or column) to a Go type."""

    model_config = _DOCUMENT_CONFIG

    db_type: str = ""
    column: str = ""
    go_type: str = ""
    go_import_path: str = ""
    go_struct_tag: str = ""
    nullable: bool = False


class RuleConfig(BaseModel):
    """A named boolean predicate over a query, enforced by sqlc vet."""

    model_config = _DOCUMENT_CONFIG

    name: str = Field(..., min_length=1)
    rule: str = Field(..., min_length=1)
    message: str = ""


class GoGenConfig(BaseModel):
    """``gen.go``: settings for sqlc's Go generator."""

    model_config = _DOCUMENT_CONFIG

    package: str = ""
    out: str = ""
    sql_package: str = ""
    build_tags: str = ""

    emit_json_tags: bool = False
    emit_db_tags: bool = False
    emit_prepared_queries: bool = False
    emit_interface: bool = False
    emit_exact_table_names: bool = False
    emit_empty_slices: bool = False
    emit_exported_queries: bool = False
    emit_result_struct_pointers: bool = False
    emit_params_struct_pointers: bool = False
    emit_methods_with_db_argument: bool = False
    emit_pointers_for_null_types: bool = False
    emit_enum_valid_method: bool = False
    emit_all_enum_values: bool = False
    json_tags_case_style: str = ""
    omit_unused_structs: bool = False
    omit_sqlc_version: bool = False
    query_parameter_limit: Optional[int] = Field(default=None, ge=0)

    output_db_file_name: str = ""
    output_models_file_name: str = ""
    output_querier_file_name: str = ""
    output_copyfrom_file_name: str = ""
    output_batch_file_name: str = ""

    overrides: List[TypeOverride] = Field(default_factory=list)
    rename: Dict[str, str] = Field(default_factory=dict)
    inflection_exclude_table_names: List[str] = Field(default_factory=list)


class LanguageGenConfig(BaseModel):
    """Minimal ``package`` / ``out`` pair for the non-Go generators."""

    model_config = _DOCUMENT_CONFIG

    package: str = ""
    out: str = ""


class GenConfig(BaseModel):
    """``gen``: one subsection per target language."""

    model_config = _DOCUMENT_CONFIG

    go: Optional[GoGenConfig] = None
    kotlin: Optional[LanguageGenConfig] = None
    python: Optional[LanguageGenConfig] = None
    typescript: Optional[LanguageGenConfig] = None

    def has_any(self) -> bool:
        return any(
            section is not None
            for section in (self.go, self.kotlin, self.python, self.typescript)
        )


class CodegenPlugin(BaseModel):
    """An entry of the ``codegen`` list (plugin-based generators)."""

    model_config = _DOCUMENT_CONFIG

    plugin: str = ""
    out: str = ""
    wasm: str = ""
    sha256: str = ""
    options: Dict[str, Any] = Field(default_factory=dict)


class SQLSection(BaseModel):
    """One entry of the top-level ``sql`` list."""

    model_config = _DOCUMENT_CONFIG

    name: str = ""
    engine: str = ""
    queries: PathOrPaths = Field(default_factory=PathOrPaths)
    schema_paths: PathOrPaths = Field(default_factory=PathOrPaths, alias="schema")
    database: Optional[DatabaseSection] = None
    gen: GenConfig = Field(default_factory=GenConfig)
    strict_function_checks: Optional[bool] = None
    strict_order_by: Optional[bool] = None
    codegen: List[CodegenPlugin] = Field(default_factory=list)
    rules: List[RuleConfig] = Field(default_factory=list)


class SqlcConfig(BaseModel):
    """The complete ``sqlc.yaml`` document."""

    model_config = _DOCUMENT_CONFIG

    version: str = "2"
    cloud: Optional[CloudConfig] = None
    sql: List[SQLSection] = Field(default_factory=list)
    rules: List[RuleConfig] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _numeric_version_as_string(cls, value: Any) -> Any:
        # ``version: 2`` without quotes loads as an int.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


__all__: List[str] = [
    "ProjectArchetype",
    "DatabaseEngine",
    "JsonTagsCaseStyle",
    "project_archetype_from",
    "database_engine_from",
    "json_case_style_from",
    "is_valid_archetype",
    "is_valid_engine",
    "is_valid_json_case_style",
    "PackageSettings",
    "DatabaseSettings",
    "OutputSettings",
    "EmitOptions",
    "ValidationToggles",
    "SafetyToggles",
    "InputRecord",
    "PATH_OR_PATHS_SHAPE_ERROR",
    "PathOrPaths",
    "CloudConfig",
    "DatabaseSection",
    "TypeOverride",
    "RuleConfig",
    "GoGenConfig",
    "LanguageGenConfig",
    "GenConfig",
    "CodegenPlugin",
    "SQLSection",
    "SqlcConfig",
]
