"""rvx find command - search the revision log."""

import json

import click

from revindex.cli.utils import cli_errors, get_config, open_revision_log


@click.command()
@click.argument("target")
@click.argument("extractor")
@click.argument("criteria", nargs=-1, required=True)
@click.option("--scope", default=None, help="Project path to search in (default: TARGET's project)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def find_command(
    ctx: click.Context,
    target: str,
    extractor: str,
    criteria: tuple[str, ...],
    scope: str | None,
    as_json: bool,
) -> None:
    """Print revisions matching CRITERIA in one EXTRACTOR.

    \b
    Examples:
        rvx find URL paths trunk/src/app.py
        rvx find URL bugs JRA-10 JRA-11
        rvx find URL refs all
        rvx find URL merges all_merges
        rvx find URL summary author:alice
    """
    revision_log = open_revision_log(get_config(ctx), target)
    with cli_errors():
        revisions = revision_log.find(extractor, list(criteria), scope)

    if as_json:
        click.echo(json.dumps(revisions))
        return
    for revision in revisions:
        click.echo(revision)
