# File: sqlcwizard/presets.py
"""
SQLC Wizard - Archetype Presets
================================
One immutable ``Preset`` per project archetype.  Every preset is the shared
baseline (the microservice emit defaults, conservative safety, managed off)
with a small per-archetype patch laid over it.  Presets are never mutated:
callers get deep copies from ``Preset.defaults()`` and merge over those.

Lookup goes through ``PresetRegistry``; ``DEFAULT_REGISTRY`` is filled at
import time with the eight built-in archetypes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from sqlcwizard.engines import rename_rules as default_rename_rules
from sqlcwizard.errors import WizardError, template_not_found
from sqlcwizard.models import (
    InputRecord,
    ProjectArchetype,
    project_archetype_from,
)
from sqlcwizard.utils import deep_merge

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.presets")

# ---------------------------------------------------------------------------
# Shared baseline
# ---------------------------------------------------------------------------

_BASELINE: Mapping[str, Any] = MappingProxyType(
    {
        "project_name": "",
        "package": {"name": "db", "path": "internal/db", "build_tags": ""},
        "database": {
            "engine": "postgresql",
            "url": "${DATABASE_URL}",
            "use_managed": False,
            "use_uuids": False,
            "use_json": False,
            "use_arrays": False,
            "use_full_text": False,
            "use_pgx": False,
        },
        "output": {
            "base_dir": "internal/db",
            "queries_dir": "internal/db/queries",
            "schema_dir": "internal/db/schema",
        },
        "emit": {
            "json_tags": True,
            "prepared_queries": True,
            "interface": True,
            "empty_slices": True,
            "result_pointers": False,
            "params_pointers": False,
            "enum_valid_method": False,
            "all_enum_values": False,
            "json_tags_case_style": "camel",
        },
        "validation": {"strict_functions": False, "strict_order_by": False},
        "safety": {
            "no_select_star": True,
            "require_where": True,
            "no_drop_table": True,
            "no_truncate": True,
            "require_limit": False,
        },
    }
)

_ALL_SAFETY_OFF: Dict[str, bool] = {
    "no_select_star": False,
    "require_where": False,
    "no_drop_table": False,
    "no_truncate": False,
    "require_limit": False,
}


# ---------------------------------------------------------------------------
# Preset record
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Preset:
    """
    Default field values for one archetype.

    Attributes:
        archetype: The archetype this preset serves.
        summary: One-line human description.
        section_name: SQL section name used when the project name is blank.
        baseline: Fully populated input record (frozen).
        features: Descriptive feature tags; not enforced anywhere.
        rename_map: Rename rules emitted into ``gen.go.rename``.
    """

    archetype: ProjectArchetype
    summary: str
    section_name: str
    baseline: InputRecord
    features: Tuple[str, ...] = ()
    rename_map: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(default_rename_rules())
    )

    def name(self) -> str:
        return self.archetype.value

    def description(self) -> str:
        return self.summary

    def defaults(self) -> InputRecord:
        """A fresh copy of the preset's input record."""
        return self.baseline.model_copy(deep=True)

    def feature_tags(self) -> List[str]:
        return list(self.features)

    def rename_rules(self) -> Dict[str, str]:
        return dict(self.rename_map)


def _preset(
    archetype: ProjectArchetype,
    summary: str,
    section_name: str,
    patch: Mapping[str, Any],
    features: Tuple[str, ...] = (),
    rename_map: Optional[Mapping[str, str]] = None,
) -> Preset:
    data: Dict[str, Any] = deep_merge(_BASELINE, patch)
    data["archetype"] = archetype
    return Preset(
        archetype=archetype,
        summary=summary,
        section_name=section_name,
        baseline=InputRecord.model_validate(data),
        features=features,
        rename_map=MappingProxyType(
            dict(rename_map) if rename_map is not None else default_rename_rules()
        ),
    )


# ---------------------------------------------------------------------------
# The eight built-in presets
# ---------------------------------------------------------------------------

HOBBY: Preset = _preset(
    ProjectArchetype.HOBBY,
    "Lightweight configuration for personal projects and learning",
    "hobby",
    {
        "package": {"name": "db", "path": "db"},
        "database": {"engine": "sqlite", "url": "file:dev.db"},
        "output": {
            "base_dir": "db",
            "queries_dir": "db/queries",
            "schema_dir": "db/schema",
        },
        "emit": {
            "json_tags": False,
            "prepared_queries": False,
            "interface": False,
            "json_tags_case_style": "snake",
        },
        "safety": _ALL_SAFETY_OFF,
    },
)

MICROSERVICE: Preset = _preset(
    ProjectArchetype.MICROSERVICE,
    "Single database, container-optimized configuration for API services and microservices",
    "service",
    {
        "database": {
            "use_managed": True,
            "use_uuids": True,
            "use_json": True,
            "use_pgx": True,
        },
    },
    features=("emit_interface", "prepared_queries", "json_tags"),
)

ENTERPRISE: Preset = _preset(
    ProjectArchetype.ENTERPRISE,
    "Production-ready configuration with strict safety rules for enterprise applications",
    "enterprise",
    {
        "database": {"use_uuids": True, "use_json": True, "use_full_text": True},
        "validation": {"strict_functions": True, "strict_order_by": True},
        "safety": {"require_limit": True},
    },
    features=("emit_interface", "prepared_queries", "json_tags", "strict_checks"),
)

API_FIRST: Preset = _preset(
    ProjectArchetype.API_FIRST,
    "Optimized for REST/GraphQL API development with JSON support and camelCase naming",
    "api",
    {
        "package": {"name": "api"},
        "database": {"use_uuids": True, "use_json": True},
        "emit": {
            "result_pointers": True,
            "params_pointers": True,
            "json_tags_case_style": "camel",
        },
    },
    features=("emit_interface", "prepared_queries", "json_tags", "camel_case"),
)

ANALYTICS: Preset = _preset(
    ProjectArchetype.ANALYTICS,
    "Optimized for data analytics and reporting with full-text search and array support",
    "analytics",
    {
        "package": {"name": "analytics", "path": "internal/analytics"},
        "database": {
            "url": "${ANALYTICS_DATABASE_URL}",
            "use_json": True,
            "use_arrays": True,
            "use_full_text": True,
        },
        "output": {
            "base_dir": "internal/analytics",
            "queries_dir": "internal/analytics/queries",
            "schema_dir": "internal/analytics/schema",
        },
        "emit": {"prepared_queries": False, "json_tags_case_style": "snake"},
        "validation": {"strict_functions": True, "strict_order_by": True},
        "safety": {
            "no_select_star": False,
            "require_where": False,
            "no_drop_table": True,
            "no_truncate": True,
            "require_limit": True,
        },
    },
    features=("emit_interface", "json_tags", "full_text_search"),
)

TESTING: Preset = _preset(
    ProjectArchetype.TESTING,
    "Lightweight configuration for test suites and database fixtures",
    "test",
    {
        "package": {"name": "testdata", "path": "testdata/db"},
        "database": {"engine": "sqlite", "url": "file:testdata/test.db"},
        "output": {
            "base_dir": "testdata/db",
            "queries_dir": "testdata/db/queries",
            "schema_dir": "testdata/db/schema",
        },
        "emit": {"json_tags": False, "prepared_queries": False, "interface": False},
        "safety": _ALL_SAFETY_OFF,
    },
    features=("empty_slices",),
    rename_map={"id": "ID"},
)

MULTI_TENANT: Preset = _preset(
    ProjectArchetype.MULTI_TENANT,
    "Optimized for SaaS multi-tenant architecture with tenant isolation and strict safety rules",
    "multi-tenant-app",
    {
        "database": {
            "use_managed": True,
            "use_uuids": True,
            "use_json": True,
            "use_arrays": True,
        },
        "emit": {"result_pointers": True, "params_pointers": True},
        "validation": {"strict_functions": True, "strict_order_by": True},
        "safety": {"no_truncate": False, "require_limit": True},
    },
    features=(
        "emit_interface",
        "prepared_queries",
        "json_tags",
        "tenant_isolation",
        "strict_checks",
    ),
    rename_map=default_rename_rules({"tenant": "Tenant"}),
)

LIBRARY: Preset = _preset(
    ProjectArchetype.LIBRARY,
    "Library package configuration for reusable Go library development",
    "library",
    {
        "package": {"name": "library"},
        "emit": {"prepared_queries": False, "enum_valid_method": True},
        "safety": _ALL_SAFETY_OFF,
    },
    features=("emit_interface", "json_tags", "enum_valid_method"),
)

BUILTIN_PRESETS: Tuple[Preset, ...] = (
    HOBBY,
    MICROSERVICE,
    ENTERPRISE,
    API_FIRST,
    ANALYTICS,
    TESTING,
    MULTI_TENANT,
    LIBRARY,
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class PresetRegistry:
    """Archetype → preset lookup.  Filled once, then only read."""

    __slots__ = ("_presets",)

    def __init__(self, presets: Tuple[Preset, ...] = ()) -> None:
        self._presets: Dict[ProjectArchetype, Preset] = {}
        for preset in presets:
            self.register(preset)

    def register(self, preset: Preset) -> None:
        if preset.archetype in self._presets:
            logger.warning("Replacing preset for %s", preset.archetype.value)
        self._presets[preset.archetype] = preset
        logger.debug("Registered preset %s", preset.archetype.value)

    def get(self, archetype: Union[ProjectArchetype, str]) -> Preset:
        """Return the preset for *archetype*; raises ``TemplateNotFound``."""
        resolved: ProjectArchetype = project_archetype_from(archetype)
        try:
            return self._presets[resolved]
        except KeyError:
            raise template_not_found(resolved.value) from None

    def has(self, archetype: Union[ProjectArchetype, str]) -> bool:
        try:
            return project_archetype_from(archetype) in self._presets
        except WizardError:
            return False

    def list(self) -> List[Preset]:
        """Registered presets in archetype declaration order."""
        return [self._presets[a] for a in ProjectArchetype if a in self._presets]

    def __len__(self) -> int:
        return len(self._presets)

    def __contains__(self, archetype: object) -> bool:
        return isinstance(archetype, (str, ProjectArchetype)) and self.has(archetype)


DEFAULT_REGISTRY: PresetRegistry = PresetRegistry(BUILTIN_PRESETS)


def get_preset(archetype: Union[ProjectArchetype, str]) -> Preset:
    return DEFAULT_REGISTRY.get(archetype)


def list_presets() -> List[Preset]:
    return DEFAULT_REGISTRY.list()


__all__: List[str] = [
    "Preset",
    "PresetRegistry",
    "BUILTIN_PRESETS",
    "DEFAULT_REGISTRY",
    "get_preset",
    "list_presets",
]

logger.debug("%d built-in presets loaded", len(DEFAULT_REGISTRY))
