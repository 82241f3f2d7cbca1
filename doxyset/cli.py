"""doxyset CLI - main entry point and command registration."""
# ruff: noqa: E402 - commands imported after cli group definition

import click
from rich.table import Table

from doxyset import __version__
from doxyset.pipeline.ui import console


class VerboseGroup(click.Group):
    """Help output that lists commands with a one-line summary each."""

    def format_commands(self, ctx, formatter):
        """Suppress the default listing (format_help prints a table instead)."""
        pass

    def format_help(self, ctx, formatter):
        super().format_help(ctx, formatter)

        console.print()
        console.rule("[bold]COMMANDS[/bold]")

        table = Table(show_header=False, box=None, padding=(0, 2, 0, 0))
        table.add_column("Command", style="cmd", width=12)
        table.add_column("Description", style="white")

        for name, cmd in sorted(self.commands.items()):
            if getattr(cmd, "hidden", False):
                continue
            first_line = (cmd.help or "").split("\n")[0].strip()
            table.add_row(name, first_line)

        console.print(table)
        console.print()
        console.print("For detailed options: [cmd]doxyset <command> --help[/cmd]")


@click.group(cls=VerboseGroup)
@click.version_option(version=__version__, prog_name="doxyset")
@click.help_option("-h", "--help")
def cli():
    """doxyset - Doxygen XML to HTML and docset converter

    \b
    QUICK START:
      doxyset convert build/xml -o docs      # Convert existing XML
      doxyset convert --doxyfile Doxyfile    # Run doxygen first
      doxyset objects build/xml              # Inspect the object database"""
    pass


from doxyset.commands.convert import convert
from doxyset.commands.objects import objects

cli.add_command(convert)
cli.add_command(objects)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
