"""Conversion orchestrator.

Runs the stages in order: extraction (only when a Doxyfile is configured),
intake, normalize, build, resolve, intermediate retention (only when kept),
generator dispatch and cleanup. Any ConversionError raised before dispatch
aborts the run without invoking a generator.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field

from doxyset.config_runtime import ConversionConfig
from doxyset.database import DatabaseBuilder, ReferenceResolver, write_cleaned_documents
from doxyset.database.models import Database
from doxyset.exceptions import DanglingReference
from doxyset.extraction import remove_extraction_dir, run_doxygen
from doxyset.generators import DispatchReport, GeneratorDispatcher, OutputGenerator, create_generators
from doxyset.markup import normalize_markup, read_raw_documents
from doxyset.pipeline.structures import StageResult, TaskStatus
from doxyset.utils.exit_codes import ExitCodes
from doxyset.utils.logging import logger

from .events import PipelineObserver


@dataclass
class ConversionResult:
    """Everything one conversion run produced."""
    database: Database
    warnings: list[DanglingReference] = field(default_factory=list)
    report: DispatchReport = field(default_factory=DispatchReport)
    stages: list[StageResult] = field(default_factory=list)

    def exit_code(self, strict: bool = False) -> int:
        if self.report.failures:
            return ExitCodes.GENERATOR_FAILED
        if strict and self.warnings:
            return ExitCodes.WARNINGS
        return ExitCodes.SUCCESS


class DoxygenConverter:
    """Drives one conversion run for a resolved configuration."""

    def __init__(
        self,
        config: ConversionConfig,
        observer: PipelineObserver | None = None,
        generators: list[OutputGenerator] | None = None,
    ):
        self.config = config
        self.observer = observer
        # Validated up front so an unknown generator id fails before any work
        self.generators = generators if generators is not None else create_generators(config)
        self.stages: list[StageResult] = []
        self._total = 0
        self._index = 0

    @contextmanager
    def _stage(self, name: str):
        """Time one stage and report it to the observer.

        The body may set ``info["detail"]`` to a short summary.
        """
        self._index += 1
        if self.observer is not None:
            self.observer.on_stage_start(name, self._index, self._total)
        logger.info(f"Stage {name} started")

        info = {"detail": ""}
        start = time.time()
        try:
            yield info
        except Exception as e:
            elapsed = time.time() - start
            self.stages.append(StageResult(name, TaskStatus.FAILED, elapsed, str(e)))
            if self.observer is not None:
                self.observer.on_stage_failed(name, str(e))
            raise

        elapsed = time.time() - start
        self.stages.append(StageResult(name, TaskStatus.SUCCESS, elapsed, info["detail"]))
        logger.info(f"Stage {name} finished in {elapsed:.2f}s")
        if self.observer is not None:
            self.observer.on_stage_complete(name, elapsed, info["detail"])

    def _extracting(self) -> bool:
        return self.config.doxyfile is not None

    def build_database(self) -> tuple[Database, list[DanglingReference]]:
        """Run every stage up to and including reference resolution."""
        input_dir = self.config.input_dir

        if self._extracting():
            with self._stage("extract") as info:
                input_dir = run_doxygen(self.config)
                info["detail"] = str(input_dir)

        with self._stage("intake") as info:
            raw = read_raw_documents(input_dir)
            info["detail"] = f"{len(raw.entities)} entity documents"

        with self._stage("normalize") as info:
            normalized = normalize_markup(raw, workers=self.config.workers)
            info["detail"] = f"{len(normalized.entities)} documents cleaned"

        with self._stage("build") as info:
            builder = DatabaseBuilder(self.config.file_extension, workers=self.config.workers)
            database = builder.build(normalized)
            info["detail"] = f"{len(database)} entities, {database.member_count()} members"

        with self._stage("resolve") as info:
            resolution = ReferenceResolver(database, workers=self.config.workers).resolve()
            info["detail"] = f"{resolution.resolved} links, {len(resolution.warnings)} dangling"

        return database, resolution.warnings

    def convert(self) -> ConversionResult:
        self.stages = []
        self._index = 0
        self._total = 5 + int(self._extracting()) + int(self.config.keep_intermediate)

        try:
            database, warnings = self.build_database()

            if self.config.keep_intermediate:
                with self._stage("retain") as info:
                    written = write_cleaned_documents(database, self.config.intermediate_dir)
                    info["detail"] = f"{len(written)} documents in {self.config.intermediate_dir}"

            with self._stage("generate") as info:
                report = GeneratorDispatcher(self.generators, self.observer).dispatch(database)
                info["detail"] = (
                    f"{sum(o.success for o in report.outcomes)}/{len(report.outcomes)} generators succeeded"
                )
        finally:
            if self._extracting() and not self.config.keep_intermediate:
                remove_extraction_dir(self.config)

        return ConversionResult(database, warnings, report, list(self.stages))
