"""rvx refresh command - bring the revision log up to date."""

import click

from revindex.cli.utils import get_config, open_revision_log
from revindex.core.progress import pluralize, status


@click.command()
@click.argument("target")
@click.pass_context
def refresh_command(ctx: click.Context, target: str) -> None:
    """Index revisions committed since the last refresh.

    TARGET is a repository URL or a working copy path.
    """
    config = get_config(ctx)
    status("Refreshing revision log...")
    revision_log = open_revision_log(config, target, show_progress=True)
    status(
        f"Indexed up to r{revision_log.get_last_revision()} "
        f"({pluralize(len(revision_log.extractors), 'extractor')})",
        style="success",
    )
