"""Generator dispatch - runs output generators in order."""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from doxyset.exceptions import GeneratorFailure
from doxyset.pipeline.structures import TaskStatus
from doxyset.utils.logging import logger

from .base import OutputGenerator

if TYPE_CHECKING:
    from doxyset.database.models import Database
    from doxyset.events import PipelineObserver


@dataclass
class GeneratorOutcome:
    """Result of invoking (or skipping) one generator."""
    name: str
    status: TaskStatus
    elapsed: float = 0.0
    outputs: list[Path] = field(default_factory=list)
    failure: GeneratorFailure | None = None
    reason: str = ""

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "name": self.name,
            "status": self.status.value,
            "elapsed": self.elapsed,
            "outputs": [str(path) for path in self.outputs],
            "error": str(self.failure) if self.failure else None,
            "reason": self.reason,
        }


@dataclass
class DispatchReport:
    outcomes: list[GeneratorOutcome] = field(default_factory=list)

    @property
    def failures(self) -> list[GeneratorFailure]:
        return [o.failure for o in self.outcomes if o.failure is not None]

    @property
    def skipped(self) -> list[GeneratorOutcome]:
        return [o for o in self.outcomes if o.status == TaskStatus.SKIPPED]

    @property
    def ok(self) -> bool:
        return all(o.success for o in self.outcomes)

    def outcome(self, name: str) -> GeneratorOutcome | None:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None


class GeneratorDispatcher:
    """Invokes generators sequentially.

    A failing generator does not stop the run: later generators still run
    unless they require the output of a generator that failed, was skipped,
    or has not run before them. Outputs of a failed generator are left as
    they are.
    """

    def __init__(self, generators: list[OutputGenerator], observer: "PipelineObserver | None" = None):
        names = [g.name for g in generators]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Generators registered twice: {', '.join(duplicates)}")
        self.generators = generators
        self.observer = observer

    def dispatch(self, database: "Database") -> DispatchReport:
        report = DispatchReport()
        statuses: dict[str, TaskStatus] = {}

        for generator in self.generators:
            reason = self._blocked_reason(generator, statuses)
            if reason:
                outcome = GeneratorOutcome(generator.name, TaskStatus.SKIPPED, reason=reason)
                logger.warning(f"Skipping generator {generator.name}: {reason}")
            else:
                outcome = self._run(generator, database)

            statuses[generator.name] = outcome.status
            report.outcomes.append(outcome)
            if self.observer is not None:
                self.observer.on_generator_complete(outcome)

        return report

    @staticmethod
    def _blocked_reason(generator: OutputGenerator, statuses: dict[str, TaskStatus]) -> str:
        for requirement in generator.requires:
            status = statuses.get(requirement)
            if status is None:
                return f"requires '{requirement}' which has not run"
            if status == TaskStatus.FAILED:
                return f"requires '{requirement}' which failed"
            if status == TaskStatus.SKIPPED:
                return f"requires '{requirement}' which was skipped"
        return ""

    @staticmethod
    def _run(generator: OutputGenerator, database: "Database") -> GeneratorOutcome:
        logger.info(f"Running generator {generator.name}")
        start = time.time()
        try:
            outputs = generator.generate(database) or []
        except Exception as e:
            failure = GeneratorFailure(generator.name, e)
            logger.opt(exception=e).error(str(failure))
            return GeneratorOutcome(
                generator.name, TaskStatus.FAILED, elapsed=time.time() - start, failure=failure
            )

        elapsed = time.time() - start
        logger.info(f"Generator {generator.name} wrote {len(outputs)} files in {elapsed:.2f}s")
        return GeneratorOutcome(generator.name, TaskStatus.SUCCESS, elapsed=elapsed, outputs=list(outputs))
