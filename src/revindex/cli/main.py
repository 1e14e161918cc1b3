"""revindex CLI - rvx command."""

from pathlib import Path

import click

from revindex.cli.cache import cache_command
from revindex.cli.find import find_command
from revindex.cli.merge_source import merge_source_command
from revindex.cli.refresh import refresh_command
from revindex.cli.show import show_command
from revindex.config.loader import load_config
from revindex.core.errors import ConfigError
from revindex.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="rvx")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML config file (default: ~/.config/revindex/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """revindex - Incremental Subversion revision log index."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


cli.add_command(refresh_command, name="refresh")
cli.add_command(find_command, name="find")
cli.add_command(show_command, name="show")
cli.add_command(merge_source_command, name="merge-source")
cli.add_command(cache_command, name="cache")


if __name__ == "__main__":
    cli()
