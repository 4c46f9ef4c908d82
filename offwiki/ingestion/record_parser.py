"""Streaming parser that rebuilds page records from one decompressed block."""

import re
from collections.abc import Callable
from enum import Enum

import structlog
from lxml import etree

from offwiki.ingestion.models import Contributor, Record, Revision
from offwiki.utils.exceptions import StructuralParseError

logger = structlog.get_logger(__name__)

# Blocks are fed to lxml in slices of this many characters
FEED_CHUNK_CHARS = 64 * 1024

# The first block carries the dump's opening tag (and possibly an XML
# declaration), the last one its closing tag. Both are dropped so every block
# parses as a plain sequence of pages under a synthetic root.
_ENVELOPE_RE = re.compile(r"<\?xml[^>]*\?>|<mediawiki\b[^>]*>|</mediawiki\s*>")

_BLOCK_ROOT = "block"


class Scope(str, Enum):
    """Nesting context of the parser."""

    ROOT = "root"
    PAGE = "page"
    REVISION = "revision"
    CONTRIBUTOR = "contributor"


_SCOPE_TAGS = {
    "page": (Scope.ROOT, Scope.PAGE),
    "revision": (Scope.PAGE, Scope.REVISION),
    "contributor": (Scope.REVISION, Scope.CONTRIBUTOR),
}

# leaf tag -> (attribute name, converter) per scope
_PAGE_FIELDS: dict[str, tuple[str, Callable[[str], object]]] = {
    "title": ("title", str),
    "ns": ("namespace", int),
    "id": ("id", int),
}
_REVISION_FIELDS: dict[str, tuple[str, Callable[[str], object]]] = {
    "id": ("id", int),
    "parentid": ("parent_id", int),
    "timestamp": ("timestamp", str),
    "comment": ("comment", str),
    "origin": ("origin", int),
    "model": ("content_model", str),
    "format": ("content_format", str),
    "sha1": ("checksum", str),
}
_CONTRIBUTOR_FIELDS: dict[str, tuple[str, Callable[[str], object]]] = {
    "username": ("username", str),
    "id": ("id", int),
    "ip": ("ip", str),
}


class RecordParser:
    """Event-driven parser for the page records of a MediaWiki dump block.

    Tracks nesting with an explicit scope stack and refuses closing tags that
    do not match the open scope. Text is routed by the open scope and the name
    of the leaf element it belongs to. Pages are appended in document order as
    soon as their closing tag is seen, and their elements are released.
    """

    def __init__(self) -> None:
        """Initialize the RecordParser."""
        self.logger = logger.bind(component="record_parser")
        self._records: list[Record] = []
        self._scopes: list[Scope] = [Scope.ROOT]
        self._record = Record()

    def parse(self, block_text: str) -> list[Record]:
        """Parse every complete page in a decompressed block.

        Args:
            block_text: Decompressed text of one block

        Returns:
            Records in document order

        Raises:
            StructuralParseError: If the XML is malformed, nesting is irregular
                or a numeric field does not parse
        """
        self._reset()
        fragment = _ENVELOPE_RE.sub("", block_text)

        parser = etree.XMLPullParser(
            events=("start", "end"),
            huge_tree=True,
            resolve_entities=False,
            no_network=True,
        )

        try:
            parser.feed(f"<{_BLOCK_ROOT}>")
            for start in range(0, len(fragment), FEED_CHUNK_CHARS):
                parser.feed(fragment[start : start + FEED_CHUNK_CHARS])
                self._drain(parser)
            parser.feed(f"</{_BLOCK_ROOT}>")
            parser.close()
            self._drain(parser)
        except etree.XMLSyntaxError as e:
            raise StructuralParseError(f"malformed block XML: {e}") from e

        if self._scopes != [Scope.ROOT]:
            raise StructuralParseError(f"block ended inside <{self._scopes[-1].value}>")

        records = self._records
        self.logger.info("records_parsed", records=len(records), chars=len(block_text))
        self._reset()
        return records

    def _reset(self) -> None:
        self._records = []
        self._scopes = [Scope.ROOT]
        self._record = Record()

    def _drain(self, parser: etree.XMLPullParser) -> None:
        for event, elem in parser.read_events():
            tag = etree.QName(elem).localname
            if event == "start":
                self._handle_start(tag, elem)
            else:
                self._handle_end(tag, elem)

    def _handle_start(self, tag: str, elem: etree._Element) -> None:
        scope = self._scopes[-1]

        if tag in _SCOPE_TAGS:
            parent, child = _SCOPE_TAGS[tag]
            if scope is not parent:
                raise StructuralParseError(f"<{tag}> opened inside <{scope.value}>")
            self._scopes.append(child)
            return

        if tag == "text" and scope is Scope.REVISION:
            text = self._record.body.text
            byte_count = elem.get("bytes")
            if byte_count is not None:
                text.byte_count = self._to_int(byte_count, "text@bytes")
            text.checksum = elem.get("sha1", "")
        elif tag == "redirect" and scope is Scope.PAGE:
            self._record.redirect_target = elem.get("title", "")

    def _handle_end(self, tag: str, elem: etree._Element) -> None:
        scope = self._scopes[-1]

        if tag in _SCOPE_TAGS:
            if scope.value != tag:
                raise StructuralParseError(f"</{tag}> closes <{scope.value}>")
            self._scopes.pop()
            if tag == "page":
                self._finish_record(elem)
            return

        self._route_text(scope, tag, elem.text)

    def _route_text(self, scope: Scope, tag: str, text: str | None) -> None:
        if text is None or not text.strip():
            return

        revision: Revision = self._record.body
        if scope is Scope.REVISION and tag == "text":
            revision.text.content = text
            return

        target: Record | Revision | Contributor
        if scope is Scope.PAGE:
            fields, target = _PAGE_FIELDS, self._record
        elif scope is Scope.REVISION:
            fields, target = _REVISION_FIELDS, revision
        elif scope is Scope.CONTRIBUTOR:
            fields, target = _CONTRIBUTOR_FIELDS, revision.contributor
        else:
            return

        if tag not in fields:
            return
        attr, convert = fields[tag]
        value = text.strip()
        if convert is int:
            setattr(target, attr, self._to_int(value, tag))
        else:
            setattr(target, attr, value)

    def _finish_record(self, elem: etree._Element) -> None:
        self._records.append(self._record)
        self._record = Record()

        # Release the finished page and anything parsed before it
        elem.clear()
        parent = elem.getparent()
        if parent is not None:
            while elem.getprevious() is not None:
                del parent[0]

    @staticmethod
    def _to_int(value: str, field_name: str) -> int:
        try:
            return int(value)
        except ValueError as e:
            raise StructuralParseError(f"invalid integer in <{field_name}>: {value!r}") from e


def parse_records(block_text: str) -> list[Record]:
    """Parse a decompressed block with a fresh RecordParser."""
    return RecordParser().parse(block_text)
