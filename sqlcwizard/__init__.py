# File: sqlcwizard/__init__.py
"""
SQLC Wizard - sqlc.yaml Configuration Generator
================================================

Turns a project archetype (hobby, microservice, enterprise, ...) plus a few
overrides into a validated ``sqlc.yaml`` and optional starter SQL files.

Architecture overview::

    ┌──────────────┐     ┌─────────────────┐     ┌────────────────┐
    │  CLI / Entry │────▶│ WizardGenerator │────▶│   synthesis    │
    │   (cli.py)   │     │ (generator.py)  │     │ presets/engines│
    └──────────────┘     └────────┬────────┘     └────────────────┘
                                  │
                    ┌─────────────┼─────────────┐
                    ▼             ▼             ▼
             ┌──────────┐  ┌────────────┐ ┌───────────┐
             │validators│  │ serializer │ │ exporters │
             └──────────┘  └────────────┘ └───────────┘

Usage::

    # As a library
    from sqlcwizard import synthesize, validate_config, serialize_config
    doc = synthesize("microservice", {"project_name": "svc"})
    assert validate_config(doc).is_valid
    print(serialize_config(doc))

    # From the command line
    sqlc-wizard init --project-type microservice --project-name svc -o ./svc
"""

from __future__ import annotations

__version__: str = "0.1.0"

from sqlcwizard.errors import ErrorKind, WizardError
from sqlcwizard.models import (
    DatabaseEngine,
    InputRecord,
    JsonTagsCaseStyle,
    PathOrPaths,
    ProjectArchetype,
    SqlcConfig,
    database_engine_from,
    is_valid_archetype,
    is_valid_engine,
    project_archetype_from,
)
from sqlcwizard.presets import Preset, get_preset, list_presets
from sqlcwizard.synthesis import UNSET, build_document, resolve_input, synthesize
from sqlcwizard.validators import ValidationResult, validate_config
from sqlcwizard.serializer import (
    load_config_file,
    parse_config,
    serialize_config,
    write_config_file,
)
from sqlcwizard.exporters import ProjectExporter
from sqlcwizard.generator import GenerationReport, WizardGenerator

__all__: list[str] = [
    "__version__",
    # Errors
    "ErrorKind",
    "WizardError",
    # Models
    "DatabaseEngine",
    "InputRecord",
    "JsonTagsCaseStyle",
    "PathOrPaths",
    "ProjectArchetype",
    "SqlcConfig",
    "database_engine_from",
    "is_valid_archetype",
    "is_valid_engine",
    "project_archetype_from",
    # Presets & synthesis
    "Preset",
    "get_preset",
    "list_presets",
    "UNSET",
    "build_document",
    "resolve_input",
    "synthesize",
    # Validation & persistence
    "ValidationResult",
    "validate_config",
    "load_config_file",
    "parse_config",
    "serialize_config",
    "write_config_file",
    # Orchestration
    "ProjectExporter",
    "GenerationReport",
    "WizardGenerator",
]
