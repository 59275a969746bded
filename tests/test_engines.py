"""
tests/test_engines.py
Tests for the per-engine driver hint, build tags, type overrides and
rename map.
"""

from __future__ import annotations

import itertools
import logging
from typing import Tuple

import pytest

from sqlcwizard.engines import (
    DEFAULT_RENAME_RULES,
    build_tags,
    driver_hint,
    get_profile,
    pgx_in_effect,
    rename_rules,
    type_overrides,
)
from sqlcwizard.errors import ErrorKind, WizardError
from sqlcwizard.models import DatabaseEngine, DatabaseSettings

_FEATURE_FLAGS: Tuple[str, ...] = (
    "use_uuids",
    "use_json",
    "use_arrays",
    "use_full_text",
    "use_pgx",
)


class TestDriverHint:
    @pytest.mark.parametrize("engine", DatabaseEngine.values())
    def test_database_sql_by_default(self, engine: str) -> None:
        assert driver_hint(engine) == "database/sql"

    def test_pgx_for_postgresql(self) -> None:
        assert driver_hint("postgresql", use_pgx=True) == "pgx/v5"

    @pytest.mark.parametrize("engine", ["mysql", "sqlite"])
    def test_pgx_ignored_elsewhere(
        self, engine: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="sqlcwizard.engines"):
            assert driver_hint(engine, use_pgx=True) == "database/sql"
        assert "pgx requested" in caplog.text

    def test_pgx_in_effect(self) -> None:
        assert pgx_in_effect(DatabaseEngine.POSTGRESQL, True)
        assert not pgx_in_effect(DatabaseEngine.POSTGRESQL, False)

    def test_unknown_engine(self) -> None:
        with pytest.raises(WizardError) as exc_info:
            get_profile("oracle")
        assert exc_info.value.kind is ErrorKind.INVALID_ENUM


class TestBuildTags:
    @pytest.mark.parametrize(
        "engine,expected",
        [("postgresql", "postgres"), ("mysql", "mysql"), ("sqlite", "sqlite")],
    )
    def test_engine_default(self, engine: str, expected: str) -> None:
        assert build_tags(engine) == expected

    def test_pgx_appended(self) -> None:
        assert build_tags("postgresql", use_pgx=True) == "postgres,pgx"

    def test_explicit_replaces_engine_tag(self) -> None:
        assert build_tags("postgresql", explicit="integration") == "integration"

    def test_pgx_not_duplicated(self) -> None:
        assert build_tags("postgresql", True, "postgres, pgx") == "postgres,pgx"

    def test_blank_explicit_falls_back(self) -> None:
        assert build_tags("sqlite", explicit="   ") == "sqlite"


class TestTypeOverrides:
    def test_postgres_uuid_and_json(self) -> None:
        flags = DatabaseSettings(engine="postgresql", use_uuids=True, use_json=True)
        overrides = type_overrides("postgresql", flags)
        assert [(o.db_type, o.go_type, o.go_import_path) for o in overrides] == [
            ("jsonb", "RawMessage", "encoding/json"),
            ("uuid", "UUID", "github.com/google/uuid"),
        ]

    def test_postgres_no_flags(self) -> None:
        assert type_overrides("postgresql", {"use_uuids": False}) == []

    def test_mysql_json_only(self) -> None:
        overrides = type_overrides("mysql", {"use_uuids": True, "use_json": True})
        assert [o.db_type for o in overrides] == ["json"]

    def test_sqlite_never_overridden(self) -> None:
        assert type_overrides("sqlite", {"use_uuids": True, "use_json": True}) == []

    def test_none_flags(self) -> None:
        assert type_overrides("postgresql") == []

    def test_overrides_are_sorted(self) -> None:
        overrides = type_overrides("postgresql", {"use_uuids": True, "use_json": True})
        db_types = [o.db_type for o in overrides]
        assert db_types == sorted(db_types)

    @pytest.mark.parametrize("engine", DatabaseEngine.values())
    @pytest.mark.parametrize("combo", list(itertools.product([False, True], repeat=5)))
    def test_db_types_distinct_for_every_flag_combination(
        self, engine: str, combo: Tuple[bool, ...]
    ) -> None:
        flags = DatabaseSettings(engine=engine, **dict(zip(_FEATURE_FLAGS, combo)))
        db_types = [o.db_type for o in type_overrides(engine, flags)]
        assert len(set(db_types)) == len(db_types)


class TestRenameRules:
    def test_defaults(self) -> None:
        rules = rename_rules()
        assert rules["id"] == "ID"
        assert rules["json"] == "JSON"
        assert len(rules) == len(DEFAULT_RENAME_RULES)

    def test_extra_extends_copy(self) -> None:
        rules = rename_rules({"tenant": "Tenant"})
        assert rules["tenant"] == "Tenant"
        assert "tenant" not in DEFAULT_RENAME_RULES
