# File: sqlcwizard/cli.py
"""
SQLC Wizard - Command-Line Interface
=====================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # New microservice config plus starter SQL in ./svc
    sqlc-wizard init --project-type microservice --project-name svc -o ./svc

    # Same, but MySQL, pascal-case JSON tags and no strict ORDER BY
    sqlc-wizard init --project-type enterprise --database mysql \\
        --json-case pascal --set validation.strict_order_by=false

    # Preview without writing anything
    sqlc-wizard init --project-type hobby --dry-run

    # Starter files for an existing config
    sqlc-wizard generate -c sqlc.yaml -o .

    # Check a config, failing on warnings too
    sqlc-wizard validate sqlc.yaml --strict

    # Environment checks and preset list
    sqlc-wizard doctor
    sqlc-wizard templates

Exit codes:
    0 success (warnings allowed)
    1 validation error
    2 generation error
    3 write error
    4 input/argument error
"""

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import shutil
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, NoReturn, Optional, Sequence, Tuple

import yaml

from sqlcwizard.errors import ErrorKind, WizardError

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4

_EXIT_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILED: EXIT_VALIDATION_ERROR,
    ErrorKind.TEMPLATE_NOT_FOUND: EXIT_GENERATION_ERROR,
    ErrorKind.FILE_WRITE_ERROR: EXIT_EXPORT_ERROR,
    ErrorKind.INVALID_ENUM: EXIT_INPUT_ERROR,
    ErrorKind.INVALID_SHAPE: EXIT_INPUT_ERROR,
    ErrorKind.CONFIG_NOT_FOUND: EXIT_INPUT_ERROR,
    ErrorKind.CONFIG_PARSE_FAILED: EXIT_INPUT_ERROR,
    ErrorKind.FILE_READ_ERROR: EXIT_INPUT_ERROR,
}


def exit_code_for(kind: Optional[ErrorKind]) -> int:
    if kind is None:
        return EXIT_SUCCESS
    return _EXIT_CODES.get(kind, EXIT_GENERATION_ERROR)


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``sqlcwizard`` logger.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity >= 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("sqlcwizard")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


def _report_error(exc: WizardError, verbosity: int) -> int:
    logger.error("%s", exc.user_message)
    if verbosity >= 2:
        logger.debug("%s", exc.diagnostic(), exc_info=exc)
    return exit_code_for(exc.kind)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from sqlcwizard import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="sqlc-wizard",
        description=(
            "SQLC Wizard: generate a validated sqlc.yaml from a project "
            "archetype, plus starter schema and query files."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s init --project-type microservice --project-name svc -o ./svc\n"
            "  %(prog)s validate sqlc.yaml --strict\n"
            "  %(prog)s templates\n"
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"SQLC Wizard v{__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all log output except errors.",
    )

    sub = parser.add_subparsers(dest="command", metavar="<command>")

    # --- init ---
    init: argparse.ArgumentParser = sub.add_parser(
        "init", help="Create sqlc.yaml (and starter SQL) from a project archetype."
    )
    init.add_argument(
        "--project-type",
        required=True,
        metavar="TYPE",
        help="Archetype: hobby, microservice, enterprise, api-first, analytics, "
        "testing, multi-tenant, library.",
    )
    overrides_group = init.add_argument_group("configuration overrides")
    overrides_group.add_argument("--project-name", metavar="NAME", help="SQL section name.")
    overrides_group.add_argument(
        "--database", metavar="ENGINE", help="postgresql, mysql or sqlite."
    )
    overrides_group.add_argument(
        "--database-url", metavar="URL", help="Connection URL or ${VAR} placeholder."
    )
    overrides_group.add_argument("--package", metavar="NAME", help="Go package name.")
    overrides_group.add_argument("--package-path", metavar="PATH", help="Go import path.")
    overrides_group.add_argument("--base-dir", metavar="DIR", help="Generated code directory.")
    overrides_group.add_argument("--queries-dir", metavar="DIR", help="Queries directory.")
    overrides_group.add_argument("--schema-dir", metavar="DIR", help="Schema directory.")
    overrides_group.add_argument(
        "--json-case", metavar="STYLE", help="JSON tag case: camel, pascal or snake."
    )
    overrides_group.add_argument(
        "--set",
        dest="settings",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Dotted input override, e.g. emit.interface=false (repeatable).",
    )
    init_behaviour = init.add_argument_group("behaviour flags")
    init_behaviour.add_argument(
        "-o", "--output-dir", default=".", metavar="DIR", help="Output directory."
    )
    init_behaviour.add_argument(
        "--no-examples",
        action="store_true",
        default=False,
        help="Do not write starter users.sql / 001_users_table.sql.",
    )
    init_behaviour.add_argument(
        "--force", action="store_true", default=False, help="Overwrite existing files."
    )
    init_behaviour.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Print the configuration instead of writing files.",
    )
    init_behaviour.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat validation warnings as errors.",
    )

    # --- generate ---
    generate: argparse.ArgumentParser = sub.add_parser(
        "generate", help="Write starter SQL files for an existing sqlc.yaml."
    )
    generate.add_argument(
        "-c", "--config", default="sqlc.yaml", metavar="PATH", help="Config file."
    )
    generate.add_argument(
        "-o", "--output-dir", default=".", metavar="DIR", help="Project root."
    )
    generate.add_argument(
        "--force", action="store_true", default=False, help="Overwrite existing files."
    )

    # --- validate ---
    validate: argparse.ArgumentParser = sub.add_parser(
        "validate", help="Validate an sqlc.yaml file."
    )
    validate.add_argument("file", nargs="?", default="sqlc.yaml", help="Config file.")
    validate.add_argument(
        "--strict",
        action="store_true",
        default=False,
        help="Fail on warnings as well as errors.",
    )

    # --- doctor ---
    doctor: argparse.ArgumentParser = sub.add_parser(
        "doctor", help="Check the local environment."
    )
    doctor.add_argument(
        "-o", "--output-dir", default=".", metavar="DIR", help="Directory to check."
    )
    doctor.add_argument(
        "-c", "--config", default="sqlc.yaml", metavar="PATH", help="Config to check."
    )

    # --- templates ---
    sub.add_parser("templates", help="List the available project archetypes.")

    return parser


# ---------------------------------------------------------------------------
# Override builder
# ---------------------------------------------------------------------------

_FLAG_OVERRIDES: Tuple[Tuple[str, str], ...] = (
    ("project_name", "project_name"),
    ("database", "database.engine"),
    ("database_url", "database.url"),
    ("package", "package.name"),
    ("package_path", "package.path"),
    ("base_dir", "output.base_dir"),
    ("queries_dir", "output.queries_dir"),
    ("schema_dir", "output.schema_dir"),
    ("json_case", "emit.json_tags_case_style"),
)


def _parse_setting(raw: str) -> Tuple[str, Any]:
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not sep or not key:
        raise WizardError(
            ErrorKind.INVALID_SHAPE,
            f"expected KEY=VALUE, got {raw!r}",
            field="--set",
        )
    if not value.strip():
        return key, ""
    if not _is_bool_setting(key):
        return key, value
    try:
        parsed: Any = yaml.safe_load(value)
    except yaml.YAMLError:
        parsed = value
    if not isinstance(parsed, bool):
        parsed = value
    return key, parsed


def _is_bool_setting(key: str) -> bool:
    """True when the dotted *key* names a boolean field of the input record."""
    from sqlcwizard.models import InputRecord

    fields: Dict[str, Any] = InputRecord.model_fields
    parts: List[str] = key.split(".")
    for index, part in enumerate(parts):
        field = fields.get(part)
        if field is None:
            return False
        annotation: Any = field.annotation
        if index == len(parts) - 1:
            return annotation is bool
        nested: Optional[Dict[str, Any]] = getattr(annotation, "model_fields", None)
        if not isinstance(nested, dict):
            return False
        fields = nested
    return False


def _build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Dotted override mapping from CLI flags; ``--set`` wins over flags."""
    overrides: Dict[str, Any] = {}
    for attr, key in _FLAG_OVERRIDES:
        value: Optional[str] = getattr(args, attr, None)
        if value is not None:
            overrides[key] = value
    for raw in args.settings:
        key, value = _parse_setting(raw)
        overrides[key] = value
    return overrides


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_init(args: argparse.Namespace, verbosity: int) -> int:
    from sqlcwizard.generator import GenerationReport, WizardGenerator

    try:
        overrides: Dict[str, Any] = _build_overrides(args)
    except WizardError as exc:
        return _report_error(exc, verbosity)

    generator: WizardGenerator = WizardGenerator(
        fail_on_warnings=args.fail_on_warnings,
        overwrite=args.force,
        include_examples=not args.no_examples,
    )
    report: GenerationReport = generator.run(
        args.project_type,
        overrides or None,
        Path(args.output_dir),
        dry_run=args.dry_run,
    )

    if args.dry_run and report.config_text:
        print(report.config_text, end="")
    print(report.summary())

    if not report.success:
        return exit_code_for(report.error_kind or ErrorKind.VALIDATION_FAILED)
    return EXIT_SUCCESS


def _cmd_generate(args: argparse.Namespace, verbosity: int) -> int:
    from sqlcwizard.exporters import FileRecord, ProjectExporter
    from sqlcwizard.serializer import load_config_file
    from sqlcwizard.validators import validate_config

    try:
        config = load_config_file(Path(args.config))
        result = validate_config(config)
        if not result.is_valid:
            print(result.format_report())
            return EXIT_VALIDATION_ERROR
        exporter: ProjectExporter = ProjectExporter(
            Path(args.output_dir), overwrite=args.force
        )
        records: List[FileRecord] = exporter.write_starters(config)
    except WizardError as exc:
        return _report_error(exc, verbosity)

    if not records:
        print("No starter files to write.")
    for record in records:
        print(f"  ✓ {record.relative_path} ({record.size_bytes:,} bytes)")
    return EXIT_SUCCESS


def _cmd_validate(args: argparse.Namespace, verbosity: int) -> int:
    from sqlcwizard.serializer import load_config_file
    from sqlcwizard.validators import ValidationResult, validate_config

    try:
        config = load_config_file(Path(args.file))
    except WizardError as exc:
        return _report_error(exc, verbosity)

    result: ValidationResult = validate_config(config)

    print(f"\n{'=' * 50}")
    print("  Configuration Validation Report")
    print(f"{'=' * 50}")
    print(f"  File:     {args.file}")
    print(f"  Sections: {len(config.sql)}")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({result.error_count}):")
        for err in result.errors:
            print(f"    ✗ {err}")

    if result.warnings:
        print(f"\n  Warnings ({result.warning_count}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")

    if result.is_valid and not result.warnings:
        print("\n  ✅ All validations passed!")
    print(f"{'=' * 50}\n")

    if not result.is_valid:
        return EXIT_VALIDATION_ERROR
    if args.strict and result.has_warnings:
        return EXIT_VALIDATION_ERROR
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# doctor
# ---------------------------------------------------------------------------

DoctorCheck = Tuple[str, Callable[[argparse.Namespace], Tuple[str, str]]]


def _check_python(args: argparse.Namespace) -> Tuple[str, str]:
    version: str = ".".join(str(p) for p in sys.version_info[:3])
    if sys.version_info < (3, 10):
        return "FAIL", f"Python {version} is too old (3.10+ required)"
    return "PASS", f"Python {version}"


def _check_sqlc(args: argparse.Namespace) -> Tuple[str, str]:
    location: Optional[str] = shutil.which("sqlc")
    if location is None:
        return "WARN", "sqlc not found on PATH (install from https://docs.sqlc.dev)"
    return "PASS", f"sqlc found at {location}"


def _check_libraries(args: argparse.Namespace) -> Tuple[str, str]:
    found: List[str] = []
    for dist in ("pydantic", "PyYAML"):
        try:
            found.append(f"{dist} {importlib.metadata.version(dist)}")
        except importlib.metadata.PackageNotFoundError:
            return "FAIL", f"{dist} is not installed"
    return "PASS", ", ".join(found)


def _check_output_dir(args: argparse.Namespace) -> Tuple[str, str]:
    from sqlcwizard.utils import is_writable_directory

    target: Path = Path(args.output_dir).resolve()
    if is_writable_directory(target):
        return "PASS", f"{target} is writable"
    return "FAIL", f"{target} is not writable"


def _check_config(args: argparse.Namespace) -> Tuple[str, str]:
    from sqlcwizard.serializer import load_config_file
    from sqlcwizard.validators import validate_config

    path: Path = Path(args.config)
    if not path.exists():
        return "WARN", f"{path} not found (run 'sqlc-wizard init')"
    try:
        result = validate_config(load_config_file(path))
    except WizardError as exc:
        return "FAIL", exc.user_message
    if not result.is_valid:
        return "FAIL", f"{path}: {result.summary()}"
    return "PASS", f"{path}: {result.summary()}"


_DOCTOR_CHECKS: Tuple[DoctorCheck, ...] = (
    ("Python version", _check_python),
    ("sqlc installation", _check_sqlc),
    ("Required libraries", _check_libraries),
    ("Output directory", _check_output_dir),
    ("Configuration file", _check_config),
)


def _cmd_doctor(args: argparse.Namespace, verbosity: int) -> int:
    print("SQLC Wizard Health Check")
    print("=" * 40)
    failed: int = 0
    warned: int = 0
    for label, check in _DOCTOR_CHECKS:
        status, message = check(args)
        print(f"  {status:<4s}  {label}: {message}")
        if status == "FAIL":
            failed += 1
        elif status == "WARN":
            warned += 1
    print("=" * 40)
    print(f"  {failed} failure(s), {warned} warning(s)")
    return EXIT_VALIDATION_ERROR if failed else EXIT_SUCCESS


def _cmd_templates(args: argparse.Namespace, verbosity: int) -> int:
    from sqlcwizard.presets import list_presets

    for preset in list_presets():
        baseline = preset.defaults()
        print(f"{preset.name():<14s} {preset.description()}")
        print(
            f"{'':<14s} engine={baseline.database.engine.value}, "
            f"output={baseline.output.base_dir}"
        )
        if preset.features:
            print(f"{'':<14s} features: {', '.join(preset.feature_tags())}")
    return EXIT_SUCCESS


_COMMANDS: Dict[str, Callable[[argparse.Namespace, int], int]] = {
    "init": _cmd_init,
    "generate": _cmd_generate,
    "validate": _cmd_validate,
    "doctor": _cmd_doctor,
    "templates": _cmd_templates,
}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    try:
        args: argparse.Namespace = parser.parse_args(argv)
    except SystemExit as exc:
        # argparse exits with 2 on usage errors; report those as input errors.
        sys.exit(EXIT_INPUT_ERROR if exc.code not in (0, None) else EXIT_SUCCESS)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    if args.command is None:
        parser.print_help(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    try:
        exit_code: int = _COMMANDS[args.command](args, verbosity)
    except KeyboardInterrupt:
        logger.error("Interrupted; nothing further was written.")
        exit_code = EXIT_GENERATION_ERROR

    logger.debug("Command %s finished with exit code %d.", args.command, exit_code)
    sys.exit(exit_code)


__all__: List[str] = [
    "cli_main",
    "exit_code_for",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]
