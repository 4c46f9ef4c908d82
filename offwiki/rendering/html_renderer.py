"""Markup node to HTML transducer."""

import html
from collections.abc import Callable, Sequence
from typing import Any

import structlog

from offwiki.rendering.context import RenderContext, RenderMode
from offwiki.rendering.markup_parser import MarkupParser
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
    MagicWord,
    MarkupNode,
    OrderedList,
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
from offwiki.rendering.templates import TemplateCall, get_handler

logger = structlog.get_logger(__name__)

CITATION_TAG = "ref"

NodeHandler = Callable[[Any, RenderMode, RenderContext], str]


class HtmlRenderer:
    """Renders markup nodes to an HTML fragment.

    Each node type has exactly one handler; node types without a handler
    render as nothing. No escaping happens here: text is emitted as parsed.
    """

    def __init__(self, link_prefix: str = "/", markup_parser: MarkupParser | None = None) -> None:
        """Initialize the HtmlRenderer.

        Args:
            link_prefix: Prefix put in front of internal link targets
            markup_parser: Parser used to re-read collected footnotes
        """
        self.logger = logger.bind(component="html_renderer")
        self.link_prefix = link_prefix
        self.markup_parser = markup_parser or MarkupParser()
        self._handlers: dict[type, NodeHandler] = {
            Bold: self._render_bold,
            Italic: self._render_italic,
            BoldItalic: self._render_bold_italic,
            MagicWord: self._render_magic_word,
            Text: self._render_text,
            CharacterEntity: self._render_character_entity,
            Heading: self._render_heading,
            HorizontalRule: self._render_horizontal_rule,
            Link: self._render_link,
            ExternalLink: self._render_external_link,
            Category: self._render_category,
            Image: self._render_image,
            OrderedList: self._render_list,
            UnorderedList: self._render_list,
            DefinitionList: self._render_unsupported,
            ParagraphBreak: self._render_paragraph_break,
            Preformatted: self._render_preformatted,
            Redirect: self._render_redirect,
            StartTag: self._render_start_tag,
            EndTag: self._render_end_tag,
            GenericTag: self._render_generic_tag,
            Template: self._render_template,
            TemplateParameter: self._render_unsupported,
            Table: self._render_unsupported,
        }

    def render(
        self,
        nodes: Sequence[MarkupNode],
        mode: RenderMode = RenderMode.WITH_FOOTNOTES,
        context: RenderContext | None = None,
    ) -> str:
        """Render a node sequence.

        Args:
            nodes: Nodes to render
            mode: Whether citations become footnotes or stay inline
            context: Render state; a fresh one is created for top-level calls

        Returns:
            HTML fragment
        """
        if context is None:
            context = RenderContext()

        parts: list[str] = []
        for node in nodes:
            handler = self._handlers.get(type(node))
            if handler is not None:
                parts.append(handler(node, mode, context))
        return "".join(parts)

    def render_markup(self, text: str, mode: RenderMode = RenderMode.WITH_FOOTNOTES) -> str:
        """Parse and render wikitext, ignoring parser warnings."""
        return self.render(self.markup_parser.parse(text).nodes, mode)

    def render_footnotes(self, context: RenderContext) -> str:
        """Render and empty the footnote buffer of ``context``."""
        result = self.markup_parser.parse(context.footnotes.drain())
        if result.warnings:
            self.logger.debug("footnote_markup_warnings", warnings=result.warnings)
        return self._inline(result.nodes, context)

    def link_href(self, target: str) -> str:
        return self.link_prefix + target.replace(" ", "_")

    def _inline(self, nodes: Sequence[MarkupNode], context: RenderContext) -> str:
        return self.render(nodes, RenderMode.INLINE, context.nested())

    def _render_unsupported(self, node: Any, mode: RenderMode, context: RenderContext) -> str:
        label = type(node).__name__
        self.logger.debug("unsupported_markup", node=label)
        return f'<span class="unsupported">[{label}]</span>'

    # -- toggles ---------------------------------------------------------

    def _render_bold(self, node: Bold, mode: RenderMode, context: RenderContext) -> str:
        context.bold = not context.bold
        return "<strong>" if context.bold else "</strong>"

    def _render_italic(self, node: Italic, mode: RenderMode, context: RenderContext) -> str:
        context.italic = not context.italic
        return "<em>" if context.italic else "</em>"

    def _render_bold_italic(self, node: BoldItalic, mode: RenderMode, context: RenderContext) -> str:
        return self._render_bold(Bold(), mode, context) + self._render_italic(Italic(), mode, context)

    def _render_magic_word(self, node: MagicWord, mode: RenderMode, context: RenderContext) -> str:
        context.magic_word = not context.magic_word
        return "<magic>" if context.magic_word else "</magic>"

    # -- leaves ----------------------------------------------------------

    def _render_text(self, node: Text, mode: RenderMode, context: RenderContext) -> str:
        return node.value

    def _render_character_entity(
        self, node: CharacterEntity, mode: RenderMode, context: RenderContext
    ) -> str:
        return node.character

    def _render_horizontal_rule(
        self, node: HorizontalRule, mode: RenderMode, context: RenderContext
    ) -> str:
        return "<hr>"

    def _render_paragraph_break(
        self, node: ParagraphBreak, mode: RenderMode, context: RenderContext
    ) -> str:
        return "<br><br>\n"

    def _render_redirect(self, node: Redirect, mode: RenderMode, context: RenderContext) -> str:
        return f"REDIRECT TO: {node.target}"

    def _render_start_tag(self, node: StartTag, mode: RenderMode, context: RenderContext) -> str:
        return f"<{node.name}{node.attributes}>"

    def _render_end_tag(self, node: EndTag, mode: RenderMode, context: RenderContext) -> str:
        return f"</{node.name}>\n"

    # -- containers ------------------------------------------------------

    def _render_heading(self, node: Heading, mode: RenderMode, context: RenderContext) -> str:
        content = self._inline(node.nodes, context).strip()
        return f"<h{node.level}>{content}</h{node.level}>\n"

    def _render_link(self, node: Link, mode: RenderMode, context: RenderContext) -> str:
        return f'<a href="{self.link_href(node.target)}">{self._inline(node.text, context)}</a>'

    def _render_external_link(
        self, node: ExternalLink, mode: RenderMode, context: RenderContext
    ) -> str:
        content = self._inline(node.nodes, context)
        parts = content.split(None, 1)
        url = parts[0] if parts else ""
        label = parts[1] if len(parts) > 1 else ""
        return f'<a href="{url}">{label}</a>'

    def _render_category(self, node: Category, mode: RenderMode, context: RenderContext) -> str:
        label = self._inline(node.ordinal, context) if node.ordinal else node.target
        return f'<a href="{self.link_href(node.target)}">{label}</a>'

    def _render_image(self, node: Image, mode: RenderMode, context: RenderContext) -> str:
        if not node.text:
            return f'<img src="{node.target}" />\n'
        caption = self._inline(node.text, context).split("|")[-1]
        return f'<img src="{node.target}" /> <p>{caption}</p>\n'

    def _render_list(
        self, node: OrderedList | UnorderedList, mode: RenderMode, context: RenderContext
    ) -> str:
        tag = "ol" if isinstance(node, OrderedList) else "ul"
        items = "".join(f"<li>{self._inline(item.nodes, context)}</li>\n" for item in node.items)
        return f"<{tag}>\n{items}</{tag}>\n"

    def _render_preformatted(
        self, node: Preformatted, mode: RenderMode, context: RenderContext
    ) -> str:
        return self._inline(node.nodes, context) + "\n"

    def _render_generic_tag(self, node: GenericTag, mode: RenderMode, context: RenderContext) -> str:
        if node.name != CITATION_TAG:
            self.logger.debug("unsupported_tag", tag=node.name)
            return f'<span class="unsupported">[tag: {node.name}]</span>'

        content = self._inline(node.nodes, context)
        if mode is RenderMode.INLINE:
            return f"<ref>{content}</ref>\n"

        number = context.footnotes.add(content)
        return f'<sup id="cite-{number}"><a href="#ref-{number}">[{number}]</a></sup> '

    def _render_template(self, node: Template, mode: RenderMode, context: RenderContext) -> str:
        name = self._inline(node.name, context).strip()
        parameters = [
            (
                self._inline(param.name, context).strip() if param.name is not None else None,
                self._inline(param.value, context).strip(),
            )
            for param in node.parameters
        ]
        handler = get_handler(name)
        return handler(TemplateCall(name=name, parameters=parameters, renderer=self, context=context))


def wrap_document(title: str, body: str) -> str:
    """Wrap a rendered fragment into a standalone HTML page."""
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        '<meta charset="utf-8">\n'
        f"<title>{html.escape(title)}</title>\n"
        f"</head>\n<body>\n{body}</body>\n</html>\n"
    )
