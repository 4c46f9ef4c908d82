"""Wikitext parsing into the closed markup node set.

mwparserfromhell does the tokenizing. This module turns its ``Wikicode`` tree
into :mod:`offwiki.rendering.nodes` values: style tags become toggle markers,
list markers are grouped into list nodes line by line, blank lines become
paragraph breaks and space-indented lines become preformatted blocks.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

import mwparserfromhell  # type: ignore[import-untyped]
import structlog
from mwparserfromhell import nodes as mw  # type: ignore[import-untyped]
from mwparserfromhell.wikicode import Wikicode  # type: ignore[import-untyped]

from offwiki.rendering.nodes import (
    Bold,
    BoldItalic,
    Category,
    CharacterEntity,
    DefinitionList,
    EndTag,
    ExternalLink,
    GenericTag,
    Heading,
    HorizontalRule,
    Image,
    Italic,
    Link,
    ListItem,
    MagicWord,
    MarkupNode,
    OrderedList,
    Parameter,
    ParagraphBreak,
    Preformatted,
    Redirect,
    StartTag,
    Table,
    Template,
    TemplateParameter,
    Text,
    UnorderedList,
)

logger = structlog.get_logger(__name__)

_REDIRECT_RE = re.compile(
    r"^\s*#REDIRECT\s*:?\s*\[\[([^\[\]|]+)(?:\|[^\[\]]*)?\]\]", re.IGNORECASE
)
_MAGIC_WORD_RE = re.compile(r"(__[A-Z]+__)")
_UNPARSED_RE = re.compile(r"\[\[|\]\]|\{\{|\}\}")

_STYLE_MARKERS = {"b": Bold, "i": Italic}
_LIST_TAGS = frozenset({"li", "dt", "dd"})
_IMAGE_NAMESPACES = frozenset({"file", "image"})

# Tags rendered by MediaWiki extensions rather than passed through as HTML
_EXTENSION_TAGS = frozenset(
    {
        "categorytree",
        "ce",
        "chem",
        "gallery",
        "graph",
        "hiero",
        "imagemap",
        "indicator",
        "inputbox",
        "mapframe",
        "maplink",
        "math",
        "nowiki",
        "poem",
        "ref",
        "references",
        "score",
        "section",
        "source",
        "syntaxhighlight",
        "templatedata",
        "timeline",
    }
)
# Extension tags whose contents are not wikitext
_RAW_TAGS = frozenset(
    {"ce", "chem", "graph", "hiero", "math", "nowiki", "score", "source", "syntaxhighlight"}
)

_LIST_KINDS: dict[str, type[OrderedList] | type[UnorderedList] | type[DefinitionList]] = {
    "*": UnorderedList,
    "#": OrderedList,
    ";": DefinitionList,
    ":": DefinitionList,
}
_ITEM_KINDS = {"*": "item", "#": "item", ";": "term", ":": "details"}


@dataclass(frozen=True)
class _ListMarker:
    """Line-start list marker; only lives until lines are grouped."""

    markup: str


_Line = list[MarkupNode | _ListMarker]


@dataclass
class ParseResult:
    """Parsed markup.

    Attributes:
        nodes: Top-level node sequence
        warnings: Human-readable notes about markup the parser left unparsed
    """

    nodes: list[MarkupNode]
    warnings: list[str] = field(default_factory=list)


class MarkupParser:
    """Converts wikitext into markup nodes."""

    def __init__(self) -> None:
        """Initialize the MarkupParser."""
        self.logger = logger.bind(component="markup_parser")

    def parse(self, text: str) -> ParseResult:
        """Parse wikitext.

        Args:
            text: Raw wikitext

        Returns:
            ParseResult with the node sequence and any warnings
        """
        warnings: list[str] = []
        nodes: list[MarkupNode] = []

        match = _REDIRECT_RE.match(text)
        if match:
            nodes.append(Redirect(target=match.group(1).strip()))
            text = text[match.end() :]

        wikicode = mwparserfromhell.parse(text)
        nodes.extend(self._blocks(self._convert(wikicode, warnings)))

        if warnings:
            self.logger.debug("markup_warnings", count=len(warnings), first=warnings[0])
        return ParseResult(nodes=nodes, warnings=warnings)

    # -- node conversion -------------------------------------------------

    def _convert(self, wikicode: Wikicode, warnings: list[str]) -> _Line:
        converted: _Line = []
        for node in wikicode.nodes:
            converted.extend(self._convert_node(node, warnings))
        return converted

    def _inline(self, wikicode: Wikicode | None, warnings: list[str]) -> list[MarkupNode]:
        """Convert without block structure; stray list markers become text."""
        if wikicode is None:
            return []
        return _plain(self._convert(wikicode, warnings))

    def _convert_node(self, node: mw.Node, warnings: list[str]) -> _Line:
        if isinstance(node, mw.Text):
            return self._convert_text(node.value, warnings)
        if isinstance(node, mw.HTMLEntity):
            return [CharacterEntity(character=node.normalize())]
        if isinstance(node, mw.Comment):
            return []
        if isinstance(node, mw.Heading):
            return [Heading(level=node.level, nodes=self._inline(node.title, warnings))]
        if isinstance(node, mw.Wikilink):
            return [self._convert_wikilink(node, warnings)]
        if isinstance(node, mw.ExternalLink):
            return self._convert_external_link(node, warnings)
        if isinstance(node, mw.Template):
            return [self._convert_template(node, warnings)]
        if isinstance(node, mw.Argument):
            default = self._inline(node.default, warnings) if node.default is not None else None
            return [TemplateParameter(name=self._inline(node.name, warnings), default=default)]
        if isinstance(node, mw.Tag):
            return self._convert_tag(node, warnings)
        return [Text(value=str(node))]

    def _convert_text(self, value: str, warnings: list[str]) -> _Line:
        if _UNPARSED_RE.search(value):
            warnings.append(f"unparsed markup in text {value.strip()[:60]!r}")

        converted: _Line = []
        for piece in _MAGIC_WORD_RE.split(value):
            if not piece:
                continue
            if _MAGIC_WORD_RE.fullmatch(piece):
                converted.append(MagicWord(name=piece.strip("_")))
            else:
                converted.append(Text(value=piece))
        return converted

    def _convert_wikilink(self, node: mw.Wikilink, warnings: list[str]) -> MarkupNode:
        title = str(node.title).strip()
        namespace, colon, _ = title.partition(":")
        namespace = namespace.strip().lower() if colon else ""
        text = self._inline(node.text, warnings)

        if namespace in _IMAGE_NAMESPACES:
            return Image(target=title, text=text)
        if namespace == "category":
            return Category(target=title, ordinal=text)
        return Link(target=title, text=text or [Text(value=title)])

    def _convert_external_link(self, node: mw.ExternalLink, warnings: list[str]) -> _Line:
        url = self._inline(node.url, warnings)
        if not node.brackets:
            return list(url)

        content: list[MarkupNode] = list(url)
        if node.title is not None:
            content.append(Text(value=" "))
            content.extend(self._inline(node.title, warnings))
        return [ExternalLink(nodes=content)]

    def _convert_template(self, node: mw.Template, warnings: list[str]) -> MarkupNode:
        parameters = [
            Parameter(
                name=self._inline(param.name, warnings) if param.showkey else None,
                value=self._inline(param.value, warnings),
            )
            for param in node.params
        ]
        return Template(name=self._inline(node.name, warnings), parameters=parameters)

    def _convert_tag(self, node: mw.Tag, warnings: list[str]) -> _Line:
        name = str(node.tag).strip().lower()

        if node.wiki_markup:
            if name in _STYLE_MARKERS:
                return self._convert_style(node, name, warnings)
            if name == "hr":
                return [HorizontalRule()]
            if name in _LIST_TAGS:
                return [_ListMarker(markup=node.wiki_markup)]
            if name == "table":
                return [Table(source=str(node))]
            return [Text(value=str(node))]

        if name == "table":
            return [Table(source=str(node))]
        if name == "pre":
            return [Preformatted(nodes=self._inline(node.contents, []))]
        if name in _EXTENSION_TAGS:
            tag_warnings = [] if name in _RAW_TAGS else warnings
            return [GenericTag(name=name, nodes=self._inline(node.contents, tag_warnings))]

        attributes = "".join(str(attr) for attr in node.attributes)
        if node.self_closing:
            return [StartTag(name=name, attributes=attributes)]
        return [
            StartTag(name=name, attributes=attributes),
            *self._inline(node.contents, warnings),
            EndTag(name=name),
        ]

    def _convert_style(self, node: mw.Tag, name: str, warnings: list[str]) -> _Line:
        inner = node.contents.nodes if node.contents is not None else []
        if len(inner) == 1 and isinstance(inner[0], mw.Tag) and inner[0].wiki_markup:
            inner_name = str(inner[0].tag).strip().lower()
            if inner_name in _STYLE_MARKERS and inner_name != name:
                body = self._inline(inner[0].contents, warnings)
                return [BoldItalic(), *body, BoldItalic()]

        marker = _STYLE_MARKERS[name]()
        return [marker, *self._inline(node.contents, warnings), marker]

    # -- block structure -------------------------------------------------

    def _blocks(self, converted: _Line) -> list[MarkupNode]:
        lines = _split_lines(converted)
        blocks: list[MarkupNode] = []
        needs_newline = False
        i = 0

        while i < len(lines):
            line = lines[i]

            if _is_blank(line):
                j = i + 1
                while j < len(lines) and _is_blank(lines[j]):
                    j += 1
                if blocks and j < len(lines):
                    blocks.append(ParagraphBreak())
                needs_newline = False
                i = j
                continue

            if _list_markers(line):
                entries: list[tuple[str, _Line]] = []
                while i < len(lines) and _list_markers(lines[i]):
                    entries.append(_split_list_line(lines[i]))
                    i += 1
                blocks.extend(_build_lists(entries))
                needs_newline = False
                continue

            if _is_preformatted(line):
                if needs_newline:
                    blocks.append(Text(value="\n"))
                body: list[MarkupNode] = []
                while i < len(lines) and _is_preformatted(lines[i]):
                    if body:
                        body.append(Text(value="\n"))
                    body.extend(_drop_indent(_plain(lines[i])))
                    i += 1
                blocks.append(Preformatted(nodes=body))
                needs_newline = False
                continue

            if needs_newline:
                blocks.append(Text(value="\n"))
            blocks.extend(_plain(line))
            needs_newline = True
            i += 1

        return blocks


def _plain(line: Sequence[MarkupNode | _ListMarker]) -> list[MarkupNode]:
    return [Text(value=n.markup) if isinstance(n, _ListMarker) else n for n in line]


def _split_lines(converted: _Line) -> list[_Line]:
    lines: list[_Line] = [[]]
    for node in converted:
        if isinstance(node, Text) and "\n" in node.value:
            for k, part in enumerate(node.value.split("\n")):
                if k:
                    lines.append([])
                if part:
                    lines[-1].append(Text(value=part))
        else:
            lines[-1].append(node)
    return lines


def _is_blank(line: _Line) -> bool:
    return all(isinstance(n, Text) and not n.value.strip() for n in line)


def _is_preformatted(line: _Line) -> bool:
    if _is_blank(line):
        return False
    first = line[0]
    return isinstance(first, Text) and first.value.startswith(" ")


def _drop_indent(nodes: list[MarkupNode]) -> list[MarkupNode]:
    first = nodes[0]
    if isinstance(first, Text) and first.value.startswith(" "):
        rest = first.value[1:]
        return ([Text(value=rest)] if rest else []) + nodes[1:]
    return nodes


def _strip_leading(nodes: list[MarkupNode]) -> list[MarkupNode]:
    if nodes and isinstance(nodes[0], Text):
        rest = nodes[0].value.lstrip()
        return ([Text(value=rest)] if rest else []) + nodes[1:]
    return nodes


def _list_markers(line: _Line) -> str:
    markers = ""
    for node in line:
        if not isinstance(node, _ListMarker):
            break
        markers += node.markup
    return markers


def _split_list_line(line: _Line) -> tuple[str, _Line]:
    markers = _list_markers(line)
    return markers, line[len(markers) :]


def _list_items(marker: str, body: _Line) -> list[ListItem]:
    if marker == ";":
        # ";term : details" on one line
        for k, node in enumerate(body):
            if isinstance(node, _ListMarker) and node.markup == ":":
                return [
                    ListItem(nodes=_strip_leading(_plain(body[:k])), kind="term"),
                    ListItem(nodes=_strip_leading(_plain(body[k + 1 :])), kind="details"),
                ]
    return [ListItem(nodes=_strip_leading(_plain(body)), kind=_ITEM_KINDS[marker])]


def _build_lists(entries: list[tuple[str, _Line]]) -> list[MarkupNode]:
    """Group consecutive list lines; deeper markers nest in the previous item."""
    lists: list[MarkupNode] = []
    i = 0

    while i < len(entries):
        kind = _LIST_KINDS[entries[i][0][0]]
        items: list[ListItem] = []

        while i < len(entries) and _LIST_KINDS[entries[i][0][0]] is kind:
            markers, body = entries[i]
            if len(markers) == 1:
                items.extend(_list_items(markers, body))
                i += 1
                continue

            nested: list[tuple[str, _Line]] = []
            while (
                i < len(entries)
                and len(entries[i][0]) > 1
                and _LIST_KINDS[entries[i][0][0]] is kind
            ):
                nested.append((entries[i][0][1:], entries[i][1]))
                i += 1
            sublists = _build_lists(nested)
            if items:
                last = items.pop()
                items.append(ListItem(nodes=[*last.nodes, *sublists], kind=last.kind))
            else:
                items.append(ListItem(nodes=sublists))

        lists.append(kind(items=items))

    return lists


def parse_markup(text: str) -> ParseResult:
    """Parse wikitext with a fresh MarkupParser."""
    return MarkupParser().parse(text)
