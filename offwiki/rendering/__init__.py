"""Wikitext to HTML rendering."""

from offwiki.rendering.context import FootnoteBuffer, RenderContext, RenderMode
from offwiki.rendering.html_renderer import HtmlRenderer, wrap_document
from offwiki.rendering.markup_parser import MarkupParser, ParseResult, parse_markup

__all__ = [
    "FootnoteBuffer",
    "HtmlRenderer",
    "MarkupParser",
    "ParseResult",
    "RenderContext",
    "RenderMode",
    "parse_markup",
    "wrap_document",
]
