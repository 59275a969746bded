# File: sqlcwizard/engines.py
"""
SQLC Wizard - Engine Adapter
=============================
Per-engine lookup tables and the small pure functions that turn an engine
plus the input record's database flags into pieces of the ``gen.go``
subsection: driver hint (``sql_package``), build tags and type overrides.

All tables are built once at import time and never mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple, Union

from sqlcwizard.models import (
    DatabaseEngine,
    TypeOverride,
    database_engine_from,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.engines")

EngineLike = Union[DatabaseEngine, str]

DRIVER_DATABASE_SQL: str = "database/sql"
DRIVER_PGX_V5: str = "pgx/v5"
PGX_BUILD_TAG: str = "pgx"

# ---------------------------------------------------------------------------
# Engine profiles
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EngineProfile:
    """Static facts about one database engine."""

    engine: DatabaseEngine
    build_tag: str
    default_driver: str
    supports_pgx: bool = False


_PROFILES: Mapping[DatabaseEngine, EngineProfile] = MappingProxyType(
    {
        DatabaseEngine.POSTGRESQL: EngineProfile(
            engine=DatabaseEngine.POSTGRESQL,
            build_tag="postgres",
            default_driver=DRIVER_DATABASE_SQL,
            supports_pgx=True,
        ),
        DatabaseEngine.MYSQL: EngineProfile(
            engine=DatabaseEngine.MYSQL,
            build_tag="mysql",
            default_driver=DRIVER_DATABASE_SQL,
        ),
        DatabaseEngine.SQLITE: EngineProfile(
            engine=DatabaseEngine.SQLITE,
            build_tag="sqlite",
            default_driver=DRIVER_DATABASE_SQL,
        ),
    }
)


def get_profile(engine: EngineLike) -> EngineProfile:
    """Return the profile for *engine*; unknown strings raise ``InvalidEnum``."""
    return _PROFILES[database_engine_from(engine)]


def pgx_in_effect(engine: EngineLike, use_pgx: bool) -> bool:
    """``True`` only when pgx is requested *and* the engine can use it."""
    profile: EngineProfile = get_profile(engine)
    if use_pgx and not profile.supports_pgx:
        logger.warning(
            "pgx requested for engine %s; ignoring (postgresql only)",
            profile.engine.value,
        )
        return False
    return use_pgx and profile.supports_pgx


def driver_hint(engine: EngineLike, use_pgx: bool = False) -> str:
    """
    Value for ``gen.go.sql_package``.

    ``database/sql`` for every engine unless pgx is explicitly requested
    for postgresql, in which case ``pgx/v5``.
    """
    if pgx_in_effect(engine, use_pgx):
        return DRIVER_PGX_V5
    return get_profile(engine).default_driver


def build_tags(engine: EngineLike, use_pgx: bool = False, explicit: str = "") -> str:
    """
    Comma-separated build-tag string for ``gen.go.build_tags``.

    *explicit* replaces the engine tag when non-blank; ``pgx`` is appended
    (once) whenever pgx is in effect.
    """
    base: str = explicit.strip() or get_profile(engine).build_tag
    tags: List[str] = [t.strip() for t in base.split(",") if t.strip()]
    if pgx_in_effect(engine, use_pgx) and PGX_BUILD_TAG not in tags:
        tags.append(PGX_BUILD_TAG)
    return ",".join(tags)


# ---------------------------------------------------------------------------
# Conditional type overrides
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OverrideRule:
    """Emit one override when ``engine`` matches and ``flag`` is set."""

    engine: DatabaseEngine
    flag: str
    db_type: str
    go_type: str
    go_import_path: str

    def to_override(self) -> TypeOverride:
        return TypeOverride(
            db_type=self.db_type,
            go_type=self.go_type,
            go_import_path=self.go_import_path,
        )


_OVERRIDE_RULES: Tuple[OverrideRule, ...] = (
    OverrideRule(
        engine=DatabaseEngine.POSTGRESQL,
        flag="use_uuids",
        db_type="uuid",
        go_type="UUID",
        go_import_path="github.com/google/uuid",
    ),
    OverrideRule(
        engine=DatabaseEngine.POSTGRESQL,
        flag="use_json",
        db_type="jsonb",
        go_type="RawMessage",
        go_import_path="encoding/json",
    ),
    OverrideRule(
        engine=DatabaseEngine.MYSQL,
        flag="use_json",
        db_type="json",
        go_type="RawMessage",
        go_import_path="encoding/json",
    ),
)


def _flag(flags: Any, name: str) -> bool:
    if flags is None:
        return False
    if isinstance(flags, Mapping):
        return bool(flags.get(name, False))
    return bool(getattr(flags, name, False))


def type_overrides(engine: EngineLike, flags: Any = None) -> List[TypeOverride]:
    """
    Overrides for *engine* given the database feature *flags*.

    *flags* is a ``DatabaseSettings`` or any mapping / object exposing
    ``use_uuids`` and ``use_json``.  SQLite never gets conditional overrides.
    Entries are ordered by ``db_type``.
    """
    resolved: DatabaseEngine = database_engine_from(engine)
    overrides: List[TypeOverride] = [
        rule.to_override()
        for rule in _OVERRIDE_RULES
        if rule.engine is resolved and _flag(flags, rule.flag)
    ]
    overrides.sort(key=lambda o: o.db_type)
    logger.debug(
        "Type overrides for %s: %s",
        resolved.value,
        [o.db_type for o in overrides] or "none",
    )
    return overrides


# ---------------------------------------------------------------------------
# Rename map
# ---------------------------------------------------------------------------

DEFAULT_RENAME_RULES: Mapping[str, str] = MappingProxyType(
    {
        "id": "ID",
        "uuid": "UUID",
        "url": "URL",
        "uri": "URI",
        "api": "API",
        "http": "HTTP",
        "json": "JSON",
    }
)


def rename_rules(extra: Optional[Mapping[str, str]] = None) -> dict:
    """Acronym normalisation map, optionally extended by *extra*."""
    rules: dict = dict(DEFAULT_RENAME_RULES)
    if extra:
        rules.update(extra)
    return rules


__all__: List[str] = [
    "DRIVER_DATABASE_SQL",
    "DRIVER_PGX_V5",
    "EngineProfile",
    "get_profile",
    "pgx_in_effect",
    "driver_hint",
    "build_tags",
    "OverrideRule",
    "type_overrides",
    "DEFAULT_RENAME_RULES",
    "rename_rules",
]
