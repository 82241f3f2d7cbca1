"""Event system for conversion observers.

Decouples pipeline execution from presentation logic. Observers must handle
their own exceptions.
"""

from typing import TYPE_CHECKING, Protocol

from doxyset.pipeline.ui import console

if TYPE_CHECKING:
    from doxyset.generators.dispatch import GeneratorOutcome


class PipelineObserver(Protocol):
    """Observer interface for conversion events."""

    def on_stage_start(self, name: str, index: int, total: int) -> None:
        """Called when a stage begins."""
        ...

    def on_stage_complete(self, name: str, elapsed: float, detail: str) -> None:
        """Called when a stage succeeds."""
        ...

    def on_stage_failed(self, name: str, error: str) -> None:
        """Called when a stage aborts the run."""
        ...

    def on_generator_complete(self, outcome: "GeneratorOutcome") -> None:
        """Called after each generator ran, failed or was skipped."""
        ...


class ConsoleLogger:
    """Rich console observer. This is the DEFAULT observer."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def on_stage_start(self, name: str, index: int, total: int) -> None:
        if not self.quiet:
            console.print(f"[dim][{index}/{total}][/dim] {name}...", highlight=False)

    def on_stage_complete(self, name: str, elapsed: float, detail: str) -> None:
        if not self.quiet:
            suffix = f" - {detail}" if detail else ""
            console.print(f"[success][OK][/success] {name} ({elapsed:.2f}s){suffix}", highlight=False)

    def on_stage_failed(self, name: str, error: str) -> None:
        # Errors print even in quiet mode
        display_err = error.strip()[:200]
        if len(error) > 200:
            display_err += "..."
        console.print(f"[error][FAILED][/error] {name}: {display_err}", highlight=False)

    def on_generator_complete(self, outcome: "GeneratorOutcome") -> None:
        if outcome.success:
            if not self.quiet:
                console.print(
                    f"  [success]generator[/success] {outcome.name}: "
                    f"{len(outcome.outputs)} files ({outcome.elapsed:.2f}s)",
                    highlight=False,
                )
        elif outcome.failure is not None:
            console.print(f"  [error]generator[/error] {outcome.name}: {outcome.failure}", highlight=False)
        elif not self.quiet:
            console.print(f"  [warning]generator[/warning] {outcome.name} skipped: {outcome.reason}", highlight=False)
