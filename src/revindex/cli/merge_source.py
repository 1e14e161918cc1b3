"""rvx merge-source command - guess where a branch receives merges from."""

import click

from revindex.merge.detector import default_detector


@click.command()
@click.argument("url")
def merge_source_command(url: str) -> None:
    """Print the usual merge source of a branch URL."""
    merge_source = default_detector().detect(url)
    if not merge_source:
        raise click.ClickException(f"No merge source detected for {url}")
    click.echo(merge_source)
