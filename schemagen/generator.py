# File: schemagen/generator.py
"""
SchemaGen - Generation Pipeline (Orchestrator)
===============================================

Connects every phase together:

    Config Validation → Catalog Introspection → Template Loading
        → Model Generation → Service Generation

``CodeGenerator`` provides both the programmatic API (with fluent setters)
and the backend for the CLI.

Error handling strategy:
    - Configuration is validated before any catalog query or file I/O.
    - Every error aborts the run immediately; there is no per-table
      isolation and nothing is retried.
    - Files written before a failure stay on disk; a failed run's output
      directory must be treated as partial.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from schemagen.errors import ConfigurationError
from schemagen.introspection import SchemaIntrospector
from schemagen.model_generator import ModelCodeGenerator
from schemagen.models import GeneratorConfig, SchemaGraph
from schemagen.service_generator import ServiceCodeGenerator
from schemagen.templates import MODEL_TEMPLATE, SERVICE_TEMPLATE, TemplateLoader
from schemagen.utils import Timer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and detail for a single pipeline step."""

    step_name: str = ""
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """Summary of a successful ``CodeGenerator.generate()`` run."""

    output_directory: str = ""
    namespace: str = ""
    tables_processed: int = 0
    model_files: List[Path] = field(default_factory=list)
    service_files: List[Path] = field(default_factory=list)
    total_bytes: int = 0
    total_elapsed_seconds: float = 0.0
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.model_files) + len(self.service_files)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        lines.append(f"{'='*60}")
        lines.append("  SchemaGen — Generation Report")
        lines.append(f"{'='*60}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Namespace:        {self.namespace}")
        lines.append(f"  Tables processed: {self.tables_processed}")
        lines.append(f"  Model files:      {len(self.model_files)}")
        lines.append(f"  Service files:    {len(self.service_files)}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")

        if self.step_metrics:
            lines.append(f"{'─'*60}")
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                lines.append(
                    f"    ✓ {step.step_name:<24s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        lines.append(f"{'='*60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Config file loader
# ---------------------------------------------------------------------------


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load a JSON or YAML settings file into a plain mapping.

    Dispatches on the file extension; unknown extensions are parsed as
    YAML, which also accepts JSON.

    Raises:
        FileNotFoundError: if the file doesn't exist.
        ValueError: if the file can't be parsed or isn't a mapping.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    text: str = path.read_text(encoding="utf-8")

    if path.suffix.lower() == ".json":
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    else:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a mapping at top level of {path}, got {type(data).__name__}."
        )
    return data


def build_config(
    raw: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> GeneratorConfig:
    """
    Merge a raw settings mapping with overrides into a ``GeneratorConfig``.

    Override values of ``None`` are ignored; ``db_options`` are merged key
    by key.

    Raises:
        ConfigurationError: on unknown keys or values of the wrong type.
    """
    merged: Dict[str, Any] = dict(raw or {})
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key == "db_options":
            options: Dict[str, Any] = dict(merged.get("db_options") or {})
            options.update(value)
            merged["db_options"] = options
        else:
            merged[key] = value

    try:
        return GeneratorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


# ---------------------------------------------------------------------------
# CodeGenerator — orchestrator
# ---------------------------------------------------------------------------

IntrospectorFactory = Callable[[GeneratorConfig], SchemaIntrospector]


class CodeGenerator:
    """
    Pipeline orchestrator.

    Usage::

        report = (
            CodeGenerator()
            .set_db_configuration("localhost", "shop", "root", "secret")
            .set_output_directory("./generated")
            .set_namespace("App")
            .generate()
        )
        print(report.summary())
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        *,
        introspector_factory: Optional[IntrospectorFactory] = None,
    ) -> None:
        self._config: GeneratorConfig = config if config is not None else GeneratorConfig()
        self._introspector_factory: IntrospectorFactory = (
            introspector_factory or SchemaIntrospector
        )
        self._model_generator: ModelCodeGenerator = ModelCodeGenerator()
        self._service_generator: ServiceCodeGenerator = ServiceCodeGenerator()

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    # -----------------------------------------------------------------
    # Fluent setters
    # -----------------------------------------------------------------

    def set_db_configuration(
        self,
        host: str,
        dbname: str,
        user: str,
        password: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> "CodeGenerator":
        self._config.db_host = host
        self._config.db_name = dbname
        self._config.db_user = user
        self._config.db_password = password
        self._config.db_options = dict(options or {})
        return self

    def set_output_directory(self, directory: str) -> "CodeGenerator":
        self._config.output_directory = str(directory)
        return self

    def set_namespace(self, namespace: str) -> "CodeGenerator":
        self._config.namespace = namespace
        return self

    def set_templates_directory(self, directory: str) -> "CodeGenerator":
        self._config.templates_directory = str(directory)
        return self

    # -----------------------------------------------------------------
    # Pipeline
    # -----------------------------------------------------------------

    def generate(self) -> GenerationReport:
        """
        Run the whole pipeline.

        Raises:
            ConfigurationError: before any I/O if settings are incomplete.
            CatalogConnectionError: if the catalog cannot be reached.
            IntrospectionError: on malformed or inconsistent catalog data.
            TemplateError: if a template cannot be loaded.
            GenerationError: if a directory or file cannot be written.
        """
        pipeline_start: float = time.perf_counter()
        config: GeneratorConfig = self._config
        config.validate_complete()

        output_root: Path = Path(config.output_directory or "")
        namespace: str = config.namespace or ""
        report: GenerationReport = GenerationReport(
            output_directory=str(output_root),
            namespace=namespace,
        )

        with Timer("introspection") as t:
            graph: SchemaGraph = self._introspector_factory(config).introspect()
        report.tables_processed = len(graph)
        report.step_metrics.append(GenerationStepMetric(
            step_name="Introspect Schema",
            elapsed_seconds=t.elapsed,
            detail=f"{len(graph)} tables, {graph.total_foreign_keys} foreign keys",
        ))

        with Timer("template loading") as t:
            loader: TemplateLoader = TemplateLoader(
                Path(config.templates_directory) if config.templates_directory else None
            )
            model_template: str = loader.load(MODEL_TEMPLATE)
            service_template: str = loader.load(SERVICE_TEMPLATE)
        report.step_metrics.append(GenerationStepMetric(
            step_name="Load Templates",
            elapsed_seconds=t.elapsed,
            detail="model, service",
        ))

        with Timer("models") as t:
            report.model_files = self._model_generator.generate(
                graph, model_template, namespace, output_root
            )
        report.step_metrics.append(GenerationStepMetric(
            step_name="Generate Models",
            elapsed_seconds=t.elapsed,
            detail=f"{len(report.model_files)} files",
        ))

        with Timer("services") as t:
            report.service_files = self._service_generator.generate(
                graph, service_template, namespace, output_root
            )
        report.step_metrics.append(GenerationStepMetric(
            step_name="Generate Services",
            elapsed_seconds=t.elapsed,
            detail=f"{len(report.service_files)} files",
        ))

        report.total_bytes = sum(
            p.stat().st_size for p in report.model_files + report.service_files
        )
        report.total_elapsed_seconds = time.perf_counter() - pipeline_start

        logger.info(
            "Generation complete: %d tables, %d files in %.3fs.",
            report.tables_processed,
            report.total_files,
            report.total_elapsed_seconds,
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CodeGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "build_config",
    "load_config_file",
]

logger.debug("schemagen.generator loaded.")
