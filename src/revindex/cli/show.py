"""rvx show command - display indexed revisions."""

import click
from rich.console import Console
from rich.table import Table

from revindex.cli.utils import cli_errors, get_config, open_revision_log


def _first_line(message: str) -> str:
    lines = message.strip().splitlines()
    return lines[0] if lines else ""


@click.command()
@click.argument("target")
@click.argument("revisions", nargs=-1, required=True, type=click.IntRange(min=1))
@click.pass_context
def show_command(ctx: click.Context, target: str, revisions: tuple[int, ...]) -> None:
    """Show summary, bugs, refs and merges of REVISIONS.

    TARGET is a repository URL or a working copy path.
    """
    revision_log = open_revision_log(get_config(ctx), target)
    with cli_errors():
        summaries = revision_log.get_revisions_data("summary", revisions)
        bugs = revision_log.get_revisions_data("bugs", revisions)
        refs = revision_log.get_revisions_data("refs", revisions)
        merges = revision_log.get_revisions_data("merges", revisions)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Revision", justify="right", style="cyan")
    table.add_column("Author")
    table.add_column("Date")
    table.add_column("Message")
    table.add_column("Bugs")
    table.add_column("Refs")
    table.add_column("Merged")

    for revision, summary in summaries.items():
        table.add_row(
            f"r{revision}",
            summary["author"],
            summary["date"].strftime("%Y-%m-%d %H:%M"),
            _first_line(summary["message"]),
            ", ".join(bugs[revision]),
            ", ".join(refs[revision]),
            ", ".join(f"r{merged}" for merged in merges[revision]),
        )

    Console().print(table)
