"""
tests/conftest.py
Shared fixtures for the sqlcwizard test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import logging
import pathlib
import textwrap
from typing import Any, Dict, Iterator

import pytest
import yaml

from sqlcwizard.models import SqlcConfig
from sqlcwizard.presets import BUILTIN_PRESETS, PresetRegistry
from sqlcwizard.synthesis import synthesize


# ---------------------------------------------------------------------------
# Registry fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> PresetRegistry:
    """A private registry with the built-in presets, safe to mutate."""
    return PresetRegistry(BUILTIN_PRESETS)


@pytest.fixture()
def empty_registry() -> PresetRegistry:
    return PresetRegistry()


# ---------------------------------------------------------------------------
# Document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def microservice_doc() -> SqlcConfig:
    """Synthesized microservice document named ``svc``."""
    return synthesize("microservice", {"project_name": "svc"})


@pytest.fixture()
def hobby_doc() -> SqlcConfig:
    return synthesize("hobby")


@pytest.fixture()
def invalid_doc() -> SqlcConfig:
    """Hand-built document with an empty version and no SQL sections."""
    return SqlcConfig(version="", sql=[])


# ---------------------------------------------------------------------------
# Raw YAML fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_minimal_config() -> Dict[str, Any]:
    """Smallest document that validates without errors."""
    return {
        "version": "2",
        "sql": [
            {
                "name": "app",
                "engine": "postgresql",
                "queries": "db/queries",
                "schema": "db/schema",
                "gen": {
                    "go": {
                        "package": "db",
                        "out": "db",
                        "emit_interface": True,
                        "emit_prepared_queries": True,
                        "emit_json_tags": True,
                    }
                },
            }
        ],
    }


@pytest.fixture()
def minimal_config_dict(raw_minimal_config: Dict[str, Any]) -> Dict[str, Any]:
    """Return a deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_minimal_config)


@pytest.fixture()
def minimal_config_yaml(minimal_config_dict: Dict[str, Any]) -> str:
    return yaml.safe_dump(minimal_config_dict, sort_keys=False)


@pytest.fixture()
def config_path(minimal_config_yaml: str, tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the minimal document to ``tmp_path/sqlc.yaml`` and return its path."""
    path = tmp_path / "sqlc.yaml"
    path.write_text(minimal_config_yaml, encoding="utf-8")
    return path


@pytest.fixture()
def invalid_config_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """A config that parses but fails validation (bad engine, no gen)."""
    path = tmp_path / "broken.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            version: "2"
            sql:
              - name: app
                engine: oracle
                queries: q
                schema: s
            """
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Empty directory for exporter and CLI output."""
    path = tmp_path / "out"
    path.mkdir()
    return path


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_wizard_logger() -> Iterator[None]:
    """Undo the handler/propagation changes ``cli_main`` makes."""
    yield
    wizard_logger = logging.getLogger("sqlcwizard")
    wizard_logger.handlers.clear()
    wizard_logger.setLevel(logging.NOTSET)
    wizard_logger.propagate = True
