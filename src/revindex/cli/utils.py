"""CLI utilities."""

from collections.abc import Iterator
from contextlib import contextmanager

import click

from revindex.cache.manager import CacheManager
from revindex.config.models import RevIndexConfig
from revindex.core.errors import RevIndexError
from revindex.log.factory import RevisionLogFactory
from revindex.log.revision_log import RevisionLog
from revindex.svn.connector import SvnConnector
from revindex.svn.errors import SvnError


def get_config(ctx: click.Context) -> RevIndexConfig:
    """Configuration loaded by the ``rvx`` group."""
    config: RevIndexConfig = ctx.find_root().obj["config"]
    return config


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn library errors into click errors (exit code 1, message on stderr)."""
    try:
        yield
    except RevIndexError as e:
        raise click.ClickException(e.message) from e
    except SvnError as e:
        raise click.ClickException(str(e)) from e


def build_connector(config: RevIndexConfig) -> tuple[SvnConnector, CacheManager]:
    cache_manager = CacheManager(config.cache.path)
    return SvnConnector(config.repository, cache_manager), cache_manager


def open_revision_log(
    config: RevIndexConfig, target: str, *, show_progress: bool = False
) -> RevisionLog:
    """Open and refresh the revision log of a URL or working copy path.

    Raises:
        click.ClickException: If the target is not a repository or svn fails
    """
    connector, cache_manager = build_connector(config)
    factory = RevisionLogFactory(connector, cache_manager, config.cache.path, config)
    with cli_errors():
        repository_url = connector.get_working_copy_url(target)
        return factory.get_revision_log(repository_url, show_progress=show_progress)
