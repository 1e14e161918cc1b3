"""rvx cache commands - manage the result cache."""

import click

from revindex.cache.manager import CacheManager
from revindex.cli.utils import get_config
from revindex.core.progress import pluralize, status


@click.group()
def cache_command() -> None:
    """Manage cached results of remote queries."""


@cache_command.command("clear")
@click.option("--namespace", default=None, help="Only clear this namespace (e.g. command)")
@click.pass_context
def clear_command(ctx: click.Context, namespace: str | None) -> None:
    """Delete cached results."""
    config = get_config(ctx)
    removed = CacheManager(config.cache.path).clear(namespace)
    status(f"Removed {pluralize(removed, 'cache file')}", style="success")
