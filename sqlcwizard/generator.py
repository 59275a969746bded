# File: sqlcwizard/generator.py
"""
SQLC Wizard - Generation Pipeline (Orchestrator)
=================================================

Connects every phase together:

    Archetype + overrides → Synthesis → Validation → Serialization → Export

``WizardGenerator`` backs the CLI ``init`` command and can be used
programmatically.  Every run returns a ``GenerationReport``; it never
raises for expected failures.  The typed error is recorded on the report
(``error_kind``) so callers can map it to an exit code.

Error handling strategy:
    - Synthesis failures (bad enum, unknown preset, invalid override) stop
      the run before anything is validated or written.
    - Validation errors stop the run before export; warnings are recorded
      and only stop it when ``fail_on_warnings`` is set.
    - Export failures are fatal to the run; files are checked before the
      first write so a rejected path leaves the disk untouched.
    - ``KeyboardInterrupt`` before export propagates with nothing written.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from sqlcwizard.errors import ErrorKind, WizardError
from sqlcwizard.exporters import ExportResult, FileRecord, ProjectExporter
from sqlcwizard.models import ProjectArchetype, SqlcConfig
from sqlcwizard.presets import DEFAULT_REGISTRY, PresetRegistry
from sqlcwizard.serializer import DEFAULT_CONFIG_FILENAME, serialize_config
from sqlcwizard.synthesis import synthesize
from sqlcwizard.utils import Timer
from sqlcwizard.validators import ValidationResult, validate_config

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.generator")

_RULE: str = "=" * 60
_THIN_RULE: str = "─" * 60


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``WizardGenerator.run()``.

    ``error_kind`` is set whenever the run failed with a typed error;
    ``error_message`` carries its user-facing text.
    """

    success: bool = False
    archetype: str = ""
    output_directory: str = ""
    dry_run: bool = False

    total_elapsed_seconds: float = 0.0

    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    error_kind: Optional[ErrorKind] = None
    error_message: str = ""

    config: Optional[SqlcConfig] = None
    config_text: str = ""
    files: List[FileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        if self.success and self.dry_run:
            status += " (dry run, nothing written)"
        lines.append(_RULE)
        lines.append("  SQLC Wizard: Generation Report")
        lines.append(_RULE)
        lines.append(f"  Status:           {status}")
        lines.append(f"  Project type:     {self.archetype}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Files written:    {self.total_files}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append(_THIN_RULE)

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<24s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        if self.error_kind is not None:
            lines.append(_THIN_RULE)
            lines.append(f"  Error [{self.error_kind.value}]: {self.error_message}")

        if self.validation_errors:
            lines.append(_THIN_RULE)
            lines.append(f"  Validation Errors ({len(self.validation_errors)}):")
            for err in self.validation_errors:
                lines.append(f"    ✗ {err}")

        if self.validation_warnings:
            lines.append(_THIN_RULE)
            lines.append(f"  Validation Warnings ({len(self.validation_warnings)}):")
            for warn in self.validation_warnings:
                lines.append(f"    ⚠ {warn}")

        if self.files:
            lines.append(_THIN_RULE)
            lines.append("  Files:")
            for record in self.files:
                lines.append(f"    • {record.relative_path} ({record.size_bytes:,} bytes)")

        if self.success:
            lines.append(_THIN_RULE)
            lines.append("  Next steps:")
            lines.append(f"    1. Review {DEFAULT_CONFIG_FILENAME}")
            lines.append("    2. Add your database schema to the schema directory")
            lines.append("    3. Write your SQL queries in the queries directory")
            lines.append("    4. Run 'sqlc generate' to generate Go code")

        lines.append(_RULE)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# WizardGenerator
# ---------------------------------------------------------------------------


class WizardGenerator:
    """
    Pipeline orchestrator.

    Usage::

        generator = WizardGenerator()
        report = generator.run(
            "microservice",
            {"project_name": "svc"},
            output_dir=Path("./svc"),
        )
        print(report.summary())

    The generator is reusable: create once, call ``run()`` many times.
    """

    def __init__(
        self,
        *,
        fail_on_warnings: bool = False,
        overwrite: bool = False,
        include_examples: bool = True,
        registry: Optional[PresetRegistry] = None,
    ) -> None:
        """
        Args:
            fail_on_warnings: Treat validation warnings as blocking.
            overwrite: Replace existing files in the output directory.
            include_examples: Also write the starter ``users.sql`` and
                ``001_users_table.sql`` files.
            registry: Preset registry; the built-in one by default.
        """
        self._fail_on_warnings: bool = fail_on_warnings
        self._overwrite: bool = overwrite
        self._include_examples: bool = include_examples
        self._registry: PresetRegistry = (
            registry if registry is not None else DEFAULT_REGISTRY
        )

        logger.debug(
            "WizardGenerator initialised: fail_on_warnings=%s, overwrite=%s, "
            "include_examples=%s.",
            fail_on_warnings,
            overwrite,
            include_examples,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def run(
        self,
        archetype: Union[ProjectArchetype, str],
        overrides: Optional[Mapping[str, Any]] = None,
        output_dir: Union[str, Path] = ".",
        *,
        dry_run: bool = False,
        filename: str = DEFAULT_CONFIG_FILENAME,
    ) -> GenerationReport:
        """
        Full pipeline: synthesize → validate → serialize → export.

        Args:
            archetype: Project archetype tag.
            overrides: Nested or dotted input-record overrides.
            output_dir: Root for ``sqlc.yaml`` and starter files.
            dry_run: Run every step except the disk writes.
            filename: Name of the configuration file.
        """
        report: GenerationReport = GenerationReport(
            archetype=str(getattr(archetype, "value", archetype)),
            output_directory=str(Path(output_dir).resolve()),
            dry_run=dry_run,
        )
        pipeline_start: float = time.perf_counter()

        try:
            config: Optional[SqlcConfig] = self._step_synthesize(
                archetype, overrides, report
            )
            if config is not None and self._step_validate(config, report):
                report.config_text = self._step_serialize(config, report)
                if dry_run:
                    logger.info("Dry run: skipping export to %s", report.output_directory)
                else:
                    self._step_export(config, Path(output_dir), filename, report)
        finally:
            report.total_elapsed_seconds = time.perf_counter() - pipeline_start

        report.success = (
            report.error_kind is None
            and report.config is not None
            and not report.validation_errors
        )
        return report

    # -----------------------------------------------------------------
    # Pipeline steps
    # -----------------------------------------------------------------

    def _fail(self, report: GenerationReport, exc: WizardError) -> None:
        report.error_kind = exc.kind
        report.error_message = exc.user_message
        logger.error("%s", exc.user_message)
        logger.debug("%s", exc.diagnostic())

    def _step_synthesize(
        self,
        archetype: Union[ProjectArchetype, str],
        overrides: Optional[Mapping[str, Any]],
        report: GenerationReport,
    ) -> Optional[SqlcConfig]:
        with Timer("synthesize") as t:
            try:
                config: Optional[SqlcConfig] = synthesize(
                    archetype, overrides, registry=self._registry
                )
                error: Optional[WizardError] = None
            except WizardError as exc:
                config, error = None, exc

        if error is not None:
            self._fail(report, error)
            if error.result is not None:
                report.validation_errors.extend(str(e) for e in error.result.errors)
            detail: str = error.kind.value
        else:
            report.config = config
            detail = f"{len(config.sql)} SQL section(s)"

        report.step_metrics.append(GenerationStepMetric(
            step_name="Synthesize Config",
            success=error is None,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))
        return config

    def _step_validate(self, config: SqlcConfig, report: GenerationReport) -> bool:
        """Returns True when the run may proceed to export."""
        with Timer("validation") as t:
            result: ValidationResult = validate_config(config)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.has_errors:
            detail: str = f"{result.error_count} error(s)"
        elif result.has_warnings:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        proceed: bool = result.is_valid
        if proceed and result.has_warnings and self._fail_on_warnings:
            proceed = False
            report.error_kind = ErrorKind.VALIDATION_FAILED
            report.error_message = (
                f"{result.warning_count} warning(s) treated as errors"
            )

        report.step_metrics.append(GenerationStepMetric(
            step_name="Validate Config",
            success=proceed,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

        if result.has_errors:
            report.error_kind = ErrorKind.VALIDATION_FAILED
            report.error_message = f"{result.error_count} validation error(s)"
            for err in result.errors:
                logger.error("  ✗ %s", err)
        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)
        return proceed

    def _step_serialize(self, config: SqlcConfig, report: GenerationReport) -> str:
        with Timer("serialize") as t:
            text: str = serialize_config(config)
        report.step_metrics.append(GenerationStepMetric(
            step_name="Serialize YAML",
            success=True,
            elapsed_seconds=t.elapsed,
            detail=f"{len(text.encode('utf-8')):,} bytes",
        ))
        return text

    def _step_export(
        self,
        config: SqlcConfig,
        output_dir: Path,
        filename: str,
        report: GenerationReport,
    ) -> None:
        with Timer("export") as t:
            try:
                exporter: ProjectExporter = ProjectExporter(
                    output_dir, overwrite=self._overwrite
                )
                result: Optional[ExportResult] = exporter.export(
                    config,
                    filename=filename,
                    include_examples=self._include_examples,
                )
                error: Optional[WizardError] = None
            except WizardError as exc:
                result, error = None, exc

        if error is not None:
            self._fail(report, error)
        else:
            report.files.extend(result.files)

        report.step_metrics.append(GenerationStepMetric(
            step_name="Export to Filesystem",
            success=error is None,
            elapsed_seconds=t.elapsed,
            detail=(
                error.kind.value
                if error is not None
                else f"{result.total_files} file(s), {result.total_bytes:,} bytes"
            ),
        ))


__all__: List[str] = [
    "GenerationStepMetric",
    "GenerationReport",
    "WizardGenerator",
]

logger.debug("sqlcwizard.generator loaded.")
