"""CLI command for inspecting an index entry."""

from pathlib import Path

import click

from offwiki.cli.utils import load_index, require_one_selector
from offwiki.utils.config import Config
from offwiki.utils.exceptions import LookupMiss, OffwikiError
from offwiki.utils.logger import get_logger

logger = get_logger(__name__, component="cli")


@click.command()
@click.option("--title", help="Exact article title")
@click.option("--id", "record_id", type=int, help="Page id")
@click.option(
    "--index",
    "index_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Multistream index file (default: $OFFWIKI_INDEX_PATH)",
)
def lookup(title: str | None, record_id: int | None, index_path: Path | None) -> None:
    """Show where an article is stored in the dump."""
    require_one_selector(title, record_id)

    try:
        index = load_index(Config(), index_path)
        entry = index.locate(title=title, record_id=record_id)
    except LookupMiss as e:
        click.echo(f"Error: {e.message}", err=True)
        raise click.Abort() from None
    except (OffwikiError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        logger.error("lookup_failed", error=str(e))
        raise click.Abort() from e

    length = index.block_byte_length(entry)

    click.echo(f"Title: {entry.title}")
    click.echo(f"Page ID: {entry.record_id}")
    click.echo(f"Block offset: {entry.block_offset}")
    click.echo(f"Ordinal in block: {entry.ordinal_in_block}")
    if length is None:
        click.echo("Block length: undetermined (final block, bounded by end of file)")
    else:
        click.echo(f"Block length: {length:,} bytes")


if __name__ == "__main__":
    lookup()
