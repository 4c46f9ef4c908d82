"""Sparse offset index over the compressed blocks of a multistream dump."""

import bz2
from collections.abc import Iterator
from pathlib import Path

import structlog

from offwiki.ingestion.models import IndexEntry
from offwiki.utils.exceptions import IndexParseError, LookupMiss

logger = structlog.get_logger(__name__)


class IndexStore:
    """Read-only lookup structure over ``blockOffset:recordId:title`` lines.

    Entries keep the order of the index source. Lookups by id and by title go
    through dictionaries that remember the first entry seen for each key, so
    duplicates resolve the same way a front-to-back scan would.
    """

    def __init__(self) -> None:
        """Initialize an empty IndexStore."""
        self.logger = logger.bind(component="index_store")
        self._entries: list[IndexEntry] = []
        self._by_id: dict[int, int] = {}
        self._by_title: dict[str, int] = {}
        self._next_offsets: list[int | None] = []

    @classmethod
    def from_file(cls, index_path: str | Path) -> "IndexStore":
        """Load an index file, bz2-compressed unless it ends in ``.txt``.

        Args:
            index_path: Path to the ``*-multistream-index.txt.bz2`` file

        Returns:
            Loaded IndexStore

        Raises:
            FileNotFoundError: If the index file doesn't exist
            IndexParseError: If a line is malformed
        """
        index_path = Path(index_path)
        if not index_path.exists():
            raise FileNotFoundError(f"Index file not found: {index_path}")

        if index_path.suffix == ".txt":
            source_text = index_path.read_text(encoding="utf-8")
        else:
            with bz2.open(index_path, "rt", encoding="utf-8") as f:
                source_text = f.read()

        store = cls()
        store.load(source_text)
        return store

    def load(self, source_text: str) -> None:
        """Parse index lines and build the lookup tables.

        Only the first two colons of a line are delimiters; the title keeps any
        further colons. Blank lines are skipped.

        Args:
            source_text: Decompressed index text

        Raises:
            IndexParseError: On a missing field or a malformed integer
        """
        entries: list[IndexEntry] = []
        current_block = 0
        ordinal = 0

        for line_number, line in enumerate(source_text.splitlines(), start=1):
            if not line.strip():
                continue

            fields = line.split(":", 2)
            if len(fields) < 3:
                raise IndexParseError(
                    f"line {line_number}: expected 'offset:id:title', got {line!r}",
                    line_number=line_number,
                )

            block_offset = self._parse_int(fields[0], "block offset", line_number)
            record_id = self._parse_int(fields[1], "record id", line_number)

            # Ordinals assume the source is sorted by offset; unsorted input
            # is not validated.
            if block_offset > current_block:
                ordinal = 0
                current_block = block_offset

            entries.append(
                IndexEntry(
                    block_offset=block_offset,
                    ordinal_in_block=ordinal,
                    record_id=record_id,
                    title=fields[2],
                )
            )

            if block_offset == current_block:
                ordinal += 1

        self._entries = entries
        self._by_id = {}
        self._by_title = {}
        for position, entry in enumerate(entries):
            self._by_id.setdefault(entry.record_id, position)
            self._by_title.setdefault(entry.title, position)
        self._next_offsets = self._compute_next_offsets(entries)

        self.logger.info(
            "index_loaded",
            entries=len(entries),
            blocks=len({entry.block_offset for entry in entries}),
        )

    @staticmethod
    def _parse_int(value: str, field_name: str, line_number: int) -> int:
        try:
            return int(value)
        except ValueError as e:
            raise IndexParseError(
                f"line {line_number}: invalid {field_name} {value!r}",
                line_number=line_number,
            ) from e

    @staticmethod
    def _compute_next_offsets(entries: list[IndexEntry]) -> list[int | None]:
        """For each position, the first later block offset strictly greater."""
        next_offsets: list[int | None] = [None] * len(entries)
        pending: list[int] = []
        for position in range(len(entries) - 1, -1, -1):
            offset = entries[position].block_offset
            while pending and pending[-1] <= offset:
                pending.pop()
            next_offsets[position] = pending[-1] if pending else None
            pending.append(offset)
        return next_offsets

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._entries)

    def find_by_id(self, record_id: int) -> IndexEntry | None:
        """Return the first entry with the given record id, if any."""
        position = self._by_id.get(record_id)
        return self._entries[position] if position is not None else None

    def find_by_title(self, title: str) -> IndexEntry | None:
        """Return the first entry with exactly the given title, if any."""
        position = self._by_title.get(title)
        return self._entries[position] if position is not None else None

    def locate(self, title: str | None = None, record_id: int | None = None) -> IndexEntry:
        """Find the entry for a title or a record id.

        Raises:
            ValueError: If neither or both of title and record_id are given
            LookupMiss: If the index has no such entry
        """
        if title is not None and record_id is None:
            entry = self.find_by_title(title)
            wanted = f"title {title!r}"
        elif record_id is not None and title is None:
            entry = self.find_by_id(record_id)
            wanted = f"id {record_id}"
        else:
            raise ValueError("Exactly one of title or record_id must be given")

        if entry is None:
            raise LookupMiss(f"Article with {wanted} not found in index")
        return entry

    def next_block_offset(self, entry: IndexEntry) -> int | None:
        """Offset of the block following the entry's block.

        The scan starts at the first entry carrying the same record id.

        Returns:
            The next strictly greater offset, or None for the final block
        """
        position = self._by_id.get(entry.record_id)
        if position is None:
            return None
        return self._next_offsets[position]

    def block_byte_length(self, entry: IndexEntry) -> int | None:
        """Compressed length of the block holding ``entry``.

        Returns:
            Byte length, or None when the entry sits in the final block and the
            length has to be derived from the archive size by the caller
        """
        next_offset = self.next_block_offset(entry)
        if next_offset is None:
            return None
        return next_offset - entry.block_offset
