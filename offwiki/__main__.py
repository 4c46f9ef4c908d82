"""Main entry point for the offline wiki reader."""

import click

from offwiki import __version__
from offwiki.cli.lookup import lookup
from offwiki.cli.records import records
from offwiki.cli.render import render
from offwiki.utils.config import Config
from offwiki.utils.logger import LOG_FORMATS, configure_logging


@click.group()
@click.version_option(__version__, prog_name="offwiki")
@click.option("--log-level", help="Logging level (default: $LOG_LEVEL or INFO)")
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMATS),
    help="Log line format on stderr (default: $LOG_FORMAT or auto)",
)
def cli(log_level: str | None, log_format: str | None) -> None:
    """Read single articles from a block-compressed MediaWiki dump."""
    config = Config()
    configure_logging(log_level or config.log_level, log_format or config.log_format)


cli.add_command(render)
cli.add_command(lookup)
cli.add_command(records)


if __name__ == "__main__":
    cli()
