"""
tests/test_presets.py
Tests for the built-in archetype presets and the preset registry.
"""

from __future__ import annotations

import pytest

from sqlcwizard.errors import ErrorKind, WizardError
from sqlcwizard.models import DatabaseEngine, InputRecord, ProjectArchetype
from sqlcwizard.presets import (
    BUILTIN_PRESETS,
    DEFAULT_REGISTRY,
    MICROSERVICE,
    PresetRegistry,
    get_preset,
    list_presets,
)


class TestBuiltinPresets:
    def test_one_preset_per_archetype(self) -> None:
        assert [p.archetype for p in BUILTIN_PRESETS] == list(ProjectArchetype)

    @pytest.mark.parametrize("archetype", ProjectArchetype.values())
    def test_preset_is_complete(self, archetype: str) -> None:
        preset = get_preset(archetype)
        record = preset.defaults()
        assert isinstance(record, InputRecord)
        assert record.archetype.value == archetype
        assert preset.name() == archetype
        assert preset.description()
        assert preset.section_name
        assert all(record.output.as_tuple())

    def test_defaults_are_copies(self) -> None:
        first = MICROSERVICE.defaults()
        second = MICROSERVICE.defaults()
        assert first == second
        assert first is not second
        assert first.database is not second.database

    @pytest.mark.parametrize(
        "archetype,engine,url",
        [
            ("hobby", DatabaseEngine.SQLITE, "file:dev.db"),
            ("testing", DatabaseEngine.SQLITE, "file:testdata/test.db"),
            ("microservice", DatabaseEngine.POSTGRESQL, "${DATABASE_URL}"),
            ("analytics", DatabaseEngine.POSTGRESQL, "${ANALYTICS_DATABASE_URL}"),
        ],
    )
    def test_engine_and_url(self, archetype: str, engine: DatabaseEngine, url: str) -> None:
        record = get_preset(archetype).defaults()
        assert record.database.engine is engine
        assert record.database.url == url

    def test_only_microservice_requests_pgx(self) -> None:
        with_pgx = [p.name() for p in BUILTIN_PRESETS if p.defaults().database.use_pgx]
        assert with_pgx == ["microservice"]

    def test_strict_presets(self) -> None:
        strict = sorted(
            p.name()
            for p in BUILTIN_PRESETS
            if p.defaults().validation.strict_functions
        )
        assert strict == ["analytics", "enterprise", "multi-tenant"]

    def test_multi_tenant_rename(self) -> None:
        rules = get_preset("multi-tenant").rename_rules()
        assert rules["tenant"] == "Tenant"
        assert rules["id"] == "ID"

    def test_testing_rename(self) -> None:
        assert get_preset("testing").rename_rules() == {"id": "ID"}

    def test_feature_tags(self) -> None:
        assert "strict_checks" in get_preset("enterprise").feature_tags()
        assert get_preset("hobby").feature_tags() == []

    def test_list_presets_order(self) -> None:
        assert [p.name() for p in list_presets()] == ProjectArchetype.values()


class TestPresetRegistry:
    def test_default_registry_full(self) -> None:
        assert len(DEFAULT_REGISTRY) == 8
        assert "library" in DEFAULT_REGISTRY
        assert ProjectArchetype.HOBBY in DEFAULT_REGISTRY

    def test_unknown_name_not_contained(self) -> None:
        assert "startup" not in DEFAULT_REGISTRY
        assert 42 not in DEFAULT_REGISTRY

    def test_missing_preset(self, empty_registry: PresetRegistry) -> None:
        with pytest.raises(WizardError) as exc_info:
            empty_registry.get("hobby")
        assert exc_info.value.kind is ErrorKind.TEMPLATE_NOT_FOUND
        assert exc_info.value.field == "project_type"

    def test_unknown_archetype_is_invalid_enum(self, registry: PresetRegistry) -> None:
        with pytest.raises(WizardError) as exc_info:
            registry.get("startup")
        assert exc_info.value.kind is ErrorKind.INVALID_ENUM

    def test_register(self, empty_registry: PresetRegistry) -> None:
        empty_registry.register(MICROSERVICE)
        assert empty_registry.has("microservice")
        assert not empty_registry.has("hobby")
        assert empty_registry.list() == [MICROSERVICE]
