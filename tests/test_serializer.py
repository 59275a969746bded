"""
tests/test_serializer.py
Tests for YAML emission, parsing and config file I/O.
"""

from __future__ import annotations

import pathlib
import textwrap
from typing import Any, Dict

import pytest
import yaml

from sqlcwizard.errors import ErrorKind, WizardError
from sqlcwizard.models import ProjectArchetype, SqlcConfig
from sqlcwizard.serializer import (
    load_config_file,
    parse_config,
    serialize_config,
    to_plain,
    write_config_file,
)
from sqlcwizard.synthesis import synthesize


# ===========================================================================
# Emission
# ===========================================================================


class TestSerializeConfig:
    def test_version_double_quoted(self, microservice_doc: SqlcConfig) -> None:
        text = serialize_config(microservice_doc)
        assert text.startswith('version: "2"\n')

    def test_final_newline_no_trailing_space(self, microservice_doc: SqlcConfig) -> None:
        text = serialize_config(microservice_doc)
        assert text.endswith("\n")
        assert all(line == line.rstrip() for line in text.splitlines())

    def test_top_level_key_order(self, microservice_doc: SqlcConfig) -> None:
        assert list(to_plain(microservice_doc)) == ["version", "sql"]

    def test_section_key_order(self, microservice_doc: SqlcConfig) -> None:
        section = to_plain(microservice_doc)["sql"][0]
        assert list(section)[:5] == ["name", "engine", "queries", "schema", "database"]
        assert list(section)[-1] == "rules"

    def test_paths_always_sequences(self, microservice_doc: SqlcConfig) -> None:
        data = yaml.safe_load(serialize_config(microservice_doc))
        assert data["sql"][0]["queries"] == ["internal/db/queries"]
        assert data["sql"][0]["schema"] == ["internal/db/schema"]

    def test_sequences_indented(self, microservice_doc: SqlcConfig) -> None:
        text = serialize_config(microservice_doc)
        assert "\nsql:\n  - name: svc\n" in text
        assert "    queries:\n      - internal/db/queries\n" in text

    def test_false_and_empty_omitted(self, hobby_doc: SqlcConfig) -> None:
        data = yaml.safe_load(serialize_config(hobby_doc))
        section = data["sql"][0]
        go = section["gen"]["go"]
        assert "emit_interface" not in go
        assert "overrides" not in go
        assert "rules" not in section
        assert "strict_function_checks" not in section
        assert section["database"] == {"uri": "file:dev.db"}

    def test_rename_sorted(self, microservice_doc: SqlcConfig) -> None:
        go = yaml.safe_load(serialize_config(microservice_doc))["sql"][0]["gen"]["go"]
        assert list(go["rename"]) == sorted(go["rename"])

    def test_deterministic(self, microservice_doc: SqlcConfig) -> None:
        assert serialize_config(microservice_doc) == serialize_config(
            synthesize("microservice", {"project_name": "svc"})
        )


# ===========================================================================
# Parsing
# ===========================================================================


class TestParseConfig:
    @pytest.mark.parametrize("archetype", ProjectArchetype.values())
    def test_round_trip(self, archetype: str) -> None:
        doc = synthesize(archetype)
        assert parse_config(serialize_config(doc)) == doc

    @pytest.mark.parametrize(
        "queries,expected",
        [("q/", ["q/"]), (["q1/", "q2/"], ["q1/", "q2/"])],
    )
    def test_path_or_list(
        self, minimal_config_dict: Dict[str, Any], queries: Any, expected: list
    ) -> None:
        minimal_config_dict["sql"][0]["queries"] = queries
        doc = parse_config(yaml.safe_dump(minimal_config_dict))
        assert doc.sql[0].queries.strings() == expected
        emitted = yaml.safe_load(serialize_config(doc))
        assert emitted["sql"][0]["queries"] == expected

    def test_unquoted_version(self) -> None:
        doc = parse_config("version: 2\nsql: []\n")
        assert doc.version == "2"

    def test_cloud_section_preserved(self, minimal_config_dict: Dict[str, Any]) -> None:
        minimal_config_dict["cloud"] = {"project": "01HXYZ"}
        doc = parse_config(yaml.safe_dump(minimal_config_dict))
        assert doc.cloud is not None
        assert doc.cloud.project == "01HXYZ"
        assert "project: 01HXYZ" in serialize_config(doc)

    def test_bad_path_shape(self, minimal_config_dict: Dict[str, Any]) -> None:
        minimal_config_dict["sql"][0]["schema"] = {"dir": "s"}
        with pytest.raises(WizardError) as exc_info:
            parse_config(yaml.safe_dump(minimal_config_dict))
        assert exc_info.value.kind is ErrorKind.INVALID_SHAPE
        assert exc_info.value.field == "sql[0].schema"

    def test_syntax_error(self) -> None:
        with pytest.raises(WizardError) as exc_info:
            parse_config("version: [2\nsql:")
        assert exc_info.value.kind is ErrorKind.CONFIG_PARSE_FAILED

    @pytest.mark.parametrize("text", ["", "# nothing\n", "- a\n- b\n", "just a string"])
    def test_not_a_mapping(self, text: str) -> None:
        with pytest.raises(WizardError) as exc_info:
            parse_config(text)
        assert exc_info.value.kind is ErrorKind.CONFIG_PARSE_FAILED

    def test_structural_mismatch_names_field(self) -> None:
        text = textwrap.dedent(
            """\
            version: "2"
            sql:
              - name: app
                engine: postgresql
                gen:
                  go:
                    emit_interface: perhaps
            """
        )
        with pytest.raises(WizardError) as exc_info:
            parse_config(text)
        assert exc_info.value.kind is ErrorKind.CONFIG_PARSE_FAILED
        assert exc_info.value.field == "sql[0].gen.go.emit_interface"


# ===========================================================================
# File I/O
# ===========================================================================


class TestConfigFiles:
    def test_load(self, config_path: pathlib.Path) -> None:
        doc = load_config_file(config_path)
        assert doc.sql[0].name == "app"

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(WizardError) as exc_info:
            load_config_file(tmp_path / "nope.yaml")
        assert exc_info.value.kind is ErrorKind.CONFIG_NOT_FOUND
        assert exc_info.value.path.endswith("nope.yaml")

    def test_parse_error_carries_path(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "sqlc.yaml"
        path.write_text("sql: {unclosed\n", encoding="utf-8")
        with pytest.raises(WizardError) as exc_info:
            load_config_file(path)
        assert exc_info.value.kind is ErrorKind.CONFIG_PARSE_FAILED
        assert exc_info.value.path == str(path)

    def test_undecodable_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "sqlc.yaml"
        path.write_bytes(b"\xff\xfe\x00bad")
        with pytest.raises(WizardError) as exc_info:
            load_config_file(path)
        assert exc_info.value.kind is ErrorKind.FILE_READ_ERROR

    def test_write_then_load(self, microservice_doc: SqlcConfig, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "nested" / "sqlc.yaml"
        written = write_config_file(microservice_doc, path)
        assert written == len(path.read_bytes())
        assert load_config_file(path) == microservice_doc
        assert not [p for p in path.parent.iterdir() if p.name.endswith(".tmp")]

    def test_write_into_file_parent_fails(
        self, microservice_doc: SqlcConfig, tmp_path: pathlib.Path
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(WizardError) as exc_info:
            write_config_file(microservice_doc, blocker / "sqlc.yaml")
        assert exc_info.value.kind is ErrorKind.FILE_WRITE_ERROR
