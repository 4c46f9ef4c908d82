"""Rendering rules for the handful of templates given dedicated output.

Handlers are looked up by lower-cased template name; anything else goes
through :func:`render_fallback`, which lists the template's parameters.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from offwiki.rendering.context import RenderContext

if TYPE_CHECKING:
    from offwiki.rendering.html_renderer import HtmlRenderer

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp", ".tif", ".tiff")


@dataclass
class TemplateCall:
    """A template invocation with its parameters already rendered.

    Attributes:
        name: Template name as written (whitespace trimmed)
        parameters: (name, value) pairs in declared order; name is None for
            positional parameters
        renderer: Renderer handling the current document
        context: Render context of the enclosing call
    """

    name: str
    parameters: list[tuple[str | None, str]]
    renderer: "HtmlRenderer"
    context: RenderContext

    @property
    def values(self) -> list[str]:
        return [value for _, value in self.parameters]


TemplateHandler = Callable[[TemplateCall], str]


def render_reflist(call: TemplateCall) -> str:
    """Footnotes collected so far as a numbered list."""
    return f"<ol>\n{call.renderer.render_footnotes(call.context)}</ol>\n"


def render_main_article(call: TemplateCall) -> str:
    if not call.parameters:
        return ""
    target = call.values[0]
    href = call.renderer.link_href(target)
    return f'<em>See the main article: <a href="{href}">{target}</a></em><br><br>\n'


def render_height(call: TemplateCall) -> str:
    # {{height|ft=5|in=11}} -> "11in5ft"
    return "".join(value + (name or "") for name, value in reversed(call.parameters))


def render_convert(call: TemplateCall) -> str:
    # Only the first four values are used; fewer are joined as they are.
    return "".join(call.values[:4])


def render_clear(call: TemplateCall) -> str:
    return "<br><br>\n"


def render_rp(call: TemplateCall) -> str:
    return f"<sup>:{' '.join(call.values)}</sup>"


def _format_value(name: str | None, value: str) -> str:
    if name == "image" or value.lower().endswith(IMAGE_SUFFIXES):
        return f'<img src="{value}"/>'
    if ("http://" in value or "https://" in value) and "<" not in value:
        return f'<a href="{value}">{value}</a>'
    return value


def render_fallback(call: TemplateCall) -> str:
    """Template name followed by one ``name: value`` row per parameter."""
    rows = "".join(
        f"{name or ''}: {_format_value(name, value)}<br>\n" for name, value in call.parameters
    )
    return f"{call.name}:<br> {rows}"


TEMPLATE_HANDLERS: dict[str, TemplateHandler] = {
    "reflist": render_reflist,
    "main": render_main_article,
    "height": render_height,
    "convert": render_convert,
    "clear": render_clear,
    "rp": render_rp,
}


def get_handler(name: str) -> TemplateHandler:
    """Handler for a template name, matched case-insensitively."""
    return TEMPLATE_HANDLERS.get(name.strip().lower(), render_fallback)
