"""Convert doxygen XML into documentation output."""

import sys
import time

import click
from rich.table import Table

from doxyset.config_runtime import ConversionConfig, load_runtime_config
from doxyset.converter import ConversionResult, DoxygenConverter
from doxyset.events import ConsoleLogger
from doxyset.pipeline.ui import console, print_header, print_status_panel, print_warning
from doxyset.utils.error_handler import handle_exceptions
from doxyset.utils.exit_codes import ExitCodes
from doxyset.utils.logging import configure_file_logging, logger

MAX_LISTED_WARNINGS = 20


def print_conversion_summary(result: ConversionResult, exit_code: int, elapsed: float) -> None:
    """Print the generator table and the final status panel."""
    console.print()
    print_header("CONVERSION SUMMARY")

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2, 0, 0))
    table.add_column("Generator", style="cmd")
    table.add_column("Status")
    table.add_column("Files", justify="right")
    table.add_column("Time", justify="right", style="dim")
    table.add_column("Detail", style="dim")

    status_styles = {"success": "success", "failed": "error", "skipped": "warning"}
    for outcome in result.report.outcomes:
        style = status_styles.get(outcome.status.value, "white")
        detail = str(outcome.failure) if outcome.failure else outcome.reason
        table.add_row(
            outcome.name,
            f"[{style}]{outcome.status.value.upper()}[/{style}]",
            str(len(outcome.outputs)),
            f"{outcome.elapsed:.2f}s",
            detail,
        )
    console.print(table)

    if result.warnings:
        console.print()
        for warning in result.warnings[:MAX_LISTED_WARNINGS]:
            print_warning(str(warning))
        if len(result.warnings) > MAX_LISTED_WARNINGS:
            console.print(f"[dim]... and {len(result.warnings) - MAX_LISTED_WARNINGS} more[/dim]")

    message = (
        f"{len(result.database)} entities, {result.database.member_count()} members, "
        f"{len(result.warnings)} dangling references"
    )
    detail = f"Total time: {elapsed:.1f}s - {ExitCodes.get_description(exit_code)}"

    console.print()
    if exit_code == ExitCodes.SUCCESS:
        print_status_panel("OK", message, detail, level="success")
    elif exit_code == ExitCodes.WARNINGS:
        print_status_panel("WARNINGS", message, detail, level="warning")
    else:
        print_status_panel("FAILED", message, detail, level="error")


@click.command()
@handle_exceptions
@click.argument("input_dir", required=False, type=click.Path(file_okay=False))
@click.option("--output", "-o", "output_dir", type=click.Path(file_okay=False), help="Output root directory")
@click.option("--doxyfile", type=click.Path(dir_okay=False), help="Run doxygen on this Doxyfile first (generated with defaults if missing)")
@click.option(
    "--generator",
    "-g",
    "generators",
    multiple=True,
    help="Output generator to run (repeatable, runs in the given order)",
)
@click.option(
    "--keep-intermediate/--no-keep-intermediate",
    default=None,
    help="Keep cleaned XML documents and the doxygen working tree",
)
@click.option("--workers", type=click.IntRange(min=1), help="Worker threads for normalize/build/resolve")
@click.option("--project-name", help="Project name used in page titles and the docset")
@click.option("--strict", is_flag=True, help="Exit with code 1 when dangling references exist")
@click.option("--quiet", is_flag=True, help="Minimal output")
def convert(input_dir, output_dir, doxyfile, generators, keep_intermediate, workers, project_name, strict, quiet):
    """Convert doxygen XML output into HTML pages and a docset.

    Reads the XML directory doxygen produced (or runs doxygen first when
    --doxyfile is given), builds the object database, resolves every
    cross-reference and runs the configured output generators.

    Examples:
      doxyset convert build/xml -o docs
      doxyset convert --doxyfile Doxyfile -o docs --keep-intermediate
      doxyset convert build/xml -o docs -g html --strict

    Output Files:
      <output>/html/                  Rendered pages
      <output>/<project>.docset/      Docset bundle with search index
      <output>/xml/                   Cleaned documents (--keep-intermediate)
      <output>/doxyset.log            Detailed execution log

    Exit Codes:
      0 = Success
      1 = Dangling references (only with --strict)
      2 = One or more generators failed
      3 = Conversion aborted (malformed input, duplicates, bad config)
    """
    cfg = load_runtime_config(".")
    config = ConversionConfig.from_runtime(
        cfg,
        input_dir=input_dir,
        output_dir=output_dir,
        doxyfile=doxyfile,
        generators=list(generators) or None,
        keep_intermediate=keep_intermediate,
        workers=workers,
        project_name=project_name,
    )

    handler_id = configure_file_logging(config.output_dir)
    logger.info(f"Converting {config.doxyfile or config.input_dir} into {config.output_dir}")

    start = time.time()
    try:
        result = DoxygenConverter(config, observer=ConsoleLogger(quiet=quiet)).convert()
    finally:
        logger.remove(handler_id)

    exit_code = result.exit_code(strict=strict)
    if not quiet or exit_code != ExitCodes.SUCCESS:
        print_conversion_summary(result, exit_code, time.time() - start)

    sys.exit(exit_code)
