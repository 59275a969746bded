"""
tests/test_exporters.py
Tests for ProjectExporter: path normalisation, overwrite policy and the
files written for a synthesized document.
"""

from __future__ import annotations

import hashlib
import pathlib

import pytest

from sqlcwizard.errors import ErrorKind, WizardError
from sqlcwizard.exporters import ProjectExporter
from sqlcwizard.models import SqlcConfig
from sqlcwizard.serializer import load_config_file, serialize_config


class TestPathResolution:
    def test_relative_inside_root(self, output_dir: pathlib.Path) -> None:
        exporter = ProjectExporter(output_dir)
        assert exporter.resolve("a/b.sql") == output_dir.resolve() / "a" / "b.sql"

    def test_dot_segments_normalised(self, output_dir: pathlib.Path) -> None:
        exporter = ProjectExporter(output_dir)
        assert exporter.resolve("a/../b.sql") == output_dir.resolve() / "b.sql"

    def test_absolute_inside_root(self, output_dir: pathlib.Path) -> None:
        exporter = ProjectExporter(output_dir)
        target = output_dir.resolve() / "sqlc.yaml"
        assert exporter.resolve(str(target)) == target

    @pytest.mark.parametrize("target", ["", "   ", "~/sqlc.yaml", "../escape.sql", "a/../../x"])
    def test_rejected(self, output_dir: pathlib.Path, target: str) -> None:
        exporter = ProjectExporter(output_dir)
        with pytest.raises(WizardError) as exc_info:
            exporter.resolve(target)
        assert exc_info.value.kind is ErrorKind.FILE_WRITE_ERROR

    def test_absolute_outside_root(self, output_dir: pathlib.Path, tmp_path: pathlib.Path) -> None:
        exporter = ProjectExporter(output_dir)
        with pytest.raises(WizardError) as exc_info:
            exporter.resolve(str(tmp_path / "elsewhere.sql"))
        assert "outside the output root" in exc_info.value.message

    def test_blank_root(self) -> None:
        with pytest.raises(WizardError):
            ProjectExporter("  ")


class TestWriteFiles:
    def test_records(self, output_dir: pathlib.Path) -> None:
        exporter = ProjectExporter(output_dir)
        records = exporter.write_files({"q/users.sql": "SELECT 1;\n"})
        record = records[0]
        assert record.relative_path == "q/users.sql"
        assert record.size_bytes == 10
        assert record.line_count == 1
        assert record.sha256 == hashlib.sha256(b"SELECT 1;\n").hexdigest()
        assert (output_dir / "q" / "users.sql").read_text(encoding="utf-8") == "SELECT 1;\n"

    def test_existing_file_refused(self, output_dir: pathlib.Path) -> None:
        (output_dir / "sqlc.yaml").write_text("keep me", encoding="utf-8")
        exporter = ProjectExporter(output_dir)
        with pytest.raises(WizardError) as exc_info:
            exporter.write_files({"new.sql": "x", "sqlc.yaml": "replace"})
        assert exc_info.value.kind is ErrorKind.FILE_WRITE_ERROR
        assert (output_dir / "sqlc.yaml").read_text(encoding="utf-8") == "keep me"
        assert not (output_dir / "new.sql").exists()

    def test_overwrite(self, output_dir: pathlib.Path) -> None:
        (output_dir / "sqlc.yaml").write_text("old", encoding="utf-8")
        ProjectExporter(output_dir, overwrite=True).write_files({"sqlc.yaml": "new"})
        assert (output_dir / "sqlc.yaml").read_text(encoding="utf-8") == "new"

    def test_directory_target_refused(self, output_dir: pathlib.Path) -> None:
        (output_dir / "queries").mkdir()
        with pytest.raises(WizardError):
            ProjectExporter(output_dir, overwrite=True).write_files({"queries": "x"})

    def test_duplicate_targets_refused(self, output_dir: pathlib.Path) -> None:
        with pytest.raises(WizardError) as exc_info:
            ProjectExporter(output_dir).write_files({"a.sql": "1", "./a.sql": "2"})
        assert "same target" in exc_info.value.message
        assert not (output_dir / "a.sql").exists()

    def test_escape_rejected_before_any_write(self, output_dir: pathlib.Path) -> None:
        with pytest.raises(WizardError):
            ProjectExporter(output_dir).write_files({"ok.sql": "1", "../bad.sql": "2"})
        assert list(output_dir.iterdir()) == []


class TestExport:
    def test_microservice_export(
        self, microservice_doc: SqlcConfig, output_dir: pathlib.Path
    ) -> None:
        result = ProjectExporter(output_dir).export(microservice_doc)
        assert sorted(r.relative_path for r in result.files) == [
            "internal/db/queries/users.sql",
            "internal/db/schema/001_users_table.sql",
            "sqlc.yaml",
        ]
        assert result.total_files == 3
        assert result.total_bytes == sum(r.size_bytes for r in result.files)
        assert result.total_lines > 0
        assert load_config_file(output_dir / "sqlc.yaml") == microservice_doc

    def test_config_only(self, hobby_doc: SqlcConfig, output_dir: pathlib.Path) -> None:
        result = ProjectExporter(output_dir).export(hobby_doc, include_examples=False)
        assert [r.relative_path for r in result.files] == ["sqlc.yaml"]
        assert (output_dir / "sqlc.yaml").read_text(encoding="utf-8") == serialize_config(
            hobby_doc
        )

    def test_custom_filename(self, hobby_doc: SqlcConfig, output_dir: pathlib.Path) -> None:
        ProjectExporter(output_dir).export(
            hobby_doc, filename="sqlc.dev.yaml", include_examples=False
        )
        assert (output_dir / "sqlc.dev.yaml").is_file()

    def test_second_export_refused(
        self, hobby_doc: SqlcConfig, output_dir: pathlib.Path
    ) -> None:
        exporter = ProjectExporter(output_dir)
        exporter.export(hobby_doc)
        with pytest.raises(WizardError):
            exporter.export(hobby_doc)

    def test_starters_skip_unknown_engine(
        self, hobby_doc: SqlcConfig, output_dir: pathlib.Path
    ) -> None:
        doc = hobby_doc.model_copy(deep=True)
        doc.sql[0].engine = "oracle"
        assert ProjectExporter(output_dir).starter_files(doc) == {}

    def test_write_starters_only(
        self, hobby_doc: SqlcConfig, output_dir: pathlib.Path
    ) -> None:
        records = ProjectExporter(output_dir).write_starters(
            hobby_doc, include_queries=False
        )
        assert [r.relative_path for r in records] == ["db/schema/001_users_table.sql"]

    def test_write_config(self, hobby_doc: SqlcConfig, output_dir: pathlib.Path) -> None:
        record = ProjectExporter(output_dir).write_config(hobby_doc)
        assert record.relative_path == "sqlc.yaml"
