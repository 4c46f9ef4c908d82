"""Shared utilities for CLI commands."""

from pathlib import Path

import click

from offwiki.ingestion.index_store import IndexStore
from offwiki.utils.config import Config


def require_one_selector(title: str | None, record_id: int | None) -> None:
    """Reject calls that give both or neither of --title and --id."""
    if (title is None) == (record_id is None):
        raise click.UsageError("Give exactly one of --title or --id")


def load_index(config: Config, index_path: Path | None) -> IndexStore:
    """Load the index from an explicit path or OFFWIKI_INDEX_PATH.

    Raises:
        ConfigurationError: If no index path is available
        IndexParseError: If the index is malformed
    """
    return IndexStore.from_file(config.resolve_index_path(index_path))
