"""Single-article pipeline: index lookup, block extraction, parsing, rendering."""

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from offwiki.ingestion.block_extractor import extract_block
from offwiki.ingestion.index_store import IndexStore
from offwiki.ingestion.models import IndexEntry, Record
from offwiki.ingestion.record_parser import RecordParser
from offwiki.rendering.context import RenderMode
from offwiki.rendering.html_renderer import HtmlRenderer
from offwiki.utils.exceptions import (
    ArchiveReadError,
    MarkupParseWarning,
    StructuralParseError,
    UndeterminedBlockLength,
)

logger = structlog.get_logger(__name__)


@dataclass
class RenderedArticle:
    """Result of rendering one article.

    Attributes:
        record: The page record the HTML was produced from
        html: Rendered HTML fragment
        warnings: Markup parser warnings (empty in strict mode)
    """

    record: Record
    html: str
    warnings: list[str] = field(default_factory=list)


class ArticlePipeline:
    """Locates one article in a multistream dump and renders it.

    Every step either completes or raises; nothing partial is returned.
    """

    def __init__(
        self,
        index: IndexStore,
        dump_path: str | Path,
        renderer: HtmlRenderer | None = None,
        strict_markup: bool = False,
    ) -> None:
        """Initialize the pipeline.

        Args:
            index: Loaded offset index
            dump_path: Path to the multistream archive
            renderer: HTML renderer (default: one with "/" link prefix)
            strict_markup: Treat markup parser warnings as errors
        """
        self.logger = logger.bind(component="article_pipeline")
        self.index = index
        self.dump_path = Path(dump_path)
        self.renderer = renderer or HtmlRenderer()
        self.strict_markup = strict_markup

    def locate(self, title: str | None = None, record_id: int | None = None) -> IndexEntry:
        """Find the index entry for a title or a record id.

        Raises:
            ValueError: If neither or both of title and record_id are given
            LookupMiss: If the index has no such entry
        """
        return self.index.locate(title=title, record_id=record_id)

    def block_range(self, entry: IndexEntry, allow_eof: bool = True) -> tuple[int, int]:
        """Byte offset and compressed length of the entry's block.

        The final block has no following offset in the index; with
        ``allow_eof`` it is bounded by the archive size instead.

        Raises:
            UndeterminedBlockLength: For the final block when allow_eof is False
            ArchiveReadError: If the archive size cannot be read
        """
        length = self.index.block_byte_length(entry)
        if length is not None:
            return entry.block_offset, length

        if not allow_eof:
            raise UndeterminedBlockLength(
                f"Block at offset {entry.block_offset} is the last one in the index"
            )

        try:
            archive_size = self.dump_path.stat().st_size
        except OSError as e:
            raise ArchiveReadError(f"cannot stat {self.dump_path}: {e}") from e

        self.logger.info(
            "final_block_bounded_by_eof", offset=entry.block_offset, archive_size=archive_size
        )
        return entry.block_offset, archive_size - entry.block_offset

    def fetch_record(self, entry: IndexEntry, allow_eof: bool = True) -> Record:
        """Extract and parse the entry's block, then select its record.

        Raises:
            StructuralParseError: If the block holds fewer records than the
                ordinal requires, or its XML is malformed
        """
        offset, length = self.block_range(entry, allow_eof=allow_eof)
        block_text = extract_block(self.dump_path, offset, length)
        records = RecordParser().parse(block_text)

        if entry.ordinal_in_block >= len(records):
            raise StructuralParseError(
                f"Block at offset {offset} holds {len(records)} records, "
                f"index expects ordinal {entry.ordinal_in_block}"
            )

        record = records[entry.ordinal_in_block]
        if record.id != entry.record_id:
            matching = [r for r in records if r.id == entry.record_id]
            self.logger.warning(
                "ordinal_mismatch",
                expected_id=entry.record_id,
                found_id=record.id,
                recovered=bool(matching),
            )
            if matching:
                record = matching[0]
        return record

    def render_record(
        self,
        record: Record,
        mode: RenderMode = RenderMode.WITH_FOOTNOTES,
        formatted: bool = True,
    ) -> RenderedArticle:
        """Render a record's wikitext to HTML.

        Args:
            record: Record to render
            mode: Citation handling of the top-level render call
            formatted: Prefix the body with title, timestamp and a rule;
                ignored for redirects, whose marker must lead the text

        Raises:
            MarkupParseWarning: In strict mode, if the markup parser warned
        """
        if formatted and not record.is_redirect:
            wikitext = record.formatted_wikitext()
        else:
            wikitext = record.wikitext
        result = self.renderer.markup_parser.parse(wikitext)

        if result.warnings:
            if self.strict_markup:
                raise MarkupParseWarning(
                    f"{len(result.warnings)} markup warning(s) in {record.title!r}",
                    warnings=result.warnings,
                )
            self.logger.warning(
                "markup_warnings", title=record.title, count=len(result.warnings)
            )

        html = self.renderer.render(result.nodes, mode)
        self.logger.info("article_rendered", title=record.title, id=record.id, chars=len(html))
        return RenderedArticle(record=record, html=html, warnings=result.warnings)

    def render_article(
        self,
        title: str | None = None,
        record_id: int | None = None,
        mode: RenderMode = RenderMode.WITH_FOOTNOTES,
        formatted: bool = True,
    ) -> RenderedArticle:
        """Locate, fetch and render one article."""
        entry = self.locate(title=title, record_id=record_id)
        record = self.fetch_record(entry)
        return self.render_record(record, mode=mode, formatted=formatted)
