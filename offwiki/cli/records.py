"""CLI command for listing the records stored in one block."""

from pathlib import Path

import click

from offwiki.ingestion.block_extractor import extract_block
from offwiki.ingestion.record_parser import RecordParser
from offwiki.utils.config import Config
from offwiki.utils.exceptions import OffwikiError
from offwiki.utils.logger import get_logger

logger = get_logger(__name__, component="cli")


@click.command()
@click.option("--offset", type=click.IntRange(min=0), required=True, help="Block byte offset")
@click.option(
    "--length",
    type=click.IntRange(min=1),
    help="Compressed block length (default: up to the end of the dump)",
)
@click.option(
    "--dump",
    "dump_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Multistream dump file (default: $OFFWIKI_DUMP_PATH)",
)
def records(offset: int, length: int | None, dump_path: Path | None) -> None:
    """List the records of the block starting at OFFSET."""
    try:
        dump_path = Config().resolve_dump_path(dump_path)
        if length is None:
            length = dump_path.stat().st_size - offset
        block_records = RecordParser().parse(extract_block(dump_path, offset, length))
    except (OffwikiError, OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        logger.error("records_failed", offset=offset, error=str(e))
        raise click.Abort() from e

    click.echo(f"{len(block_records)} records in block at offset {offset}")
    for ordinal, record in enumerate(block_records):
        redirect = f" -> {record.redirect_target}" if record.is_redirect else ""
        click.echo(f"  [{ordinal}] id={record.id} ns={record.namespace} {record.title}{redirect}")


if __name__ == "__main__":
    records()
