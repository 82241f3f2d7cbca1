"""Inspect the object database built from doxygen XML."""

import click
from rich.table import Table
from rich.tree import Tree

from doxyset.config_runtime import ConversionConfig, load_runtime_config
from doxyset.converter import DoxygenConverter
from doxyset.database.models import Database, HierarchyNode
from doxyset.pipeline.ui import console, print_header, print_warning
from doxyset.utils.error_handler import handle_exceptions


def _add_branch(tree: Tree, node: HierarchyNode) -> None:
    label = f"[cmd]{node.name}[/cmd]" if node.documented else f"[dim]{node.name}[/dim]"
    branch = tree.add(label)
    for child in node.children:
        _add_branch(branch, child)


def print_database(database: Database) -> None:
    print_header("OBJECTS")
    for directory, entities in database.directories.items():
        table = Table(title=directory, title_justify="left", box=None, padding=(0, 2, 0, 0))
        table.add_column("Name", style="cmd")
        table.add_column("Kind")
        table.add_column("Members", justify="right")
        table.add_column("Path", style="path")
        for entity in entities:
            table.add_row(entity.name, entity.kind.value, str(len(entity.members)), entity.relative_path)
        console.print(table)
        console.print()

    if database.hierarchy:
        print_header("HIERARCHY")
        tree = Tree("[bold]classes[/bold]")
        for root in database.hierarchy:
            _add_branch(tree, root)
        console.print(tree)


@click.command()
@handle_exceptions
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--workers", type=click.IntRange(min=1), help="Worker threads")
def objects(input_dir, workers):
    """List the entities, members and class hierarchy of a doxygen XML tree.

    Runs intake, normalization, database build and reference resolution,
    but no output generator. Dangling references are listed at the end.

    Examples:
      doxyset objects build/xml
    """
    cfg = load_runtime_config(".")
    config = ConversionConfig.from_runtime(cfg, input_dir=input_dir, workers=workers, doxyfile="", generators=[])
    database, warnings = DoxygenConverter(config, generators=[]).build_database()

    print_database(database)
    if warnings:
        console.print()
        for warning in warnings:
            print_warning(str(warning))
    console.print(
        f"\n[bold]{len(database)}[/bold] entities, [bold]{database.member_count()}[/bold] members, "
        f"[bold]{len(warnings)}[/bold] dangling references"
    )
