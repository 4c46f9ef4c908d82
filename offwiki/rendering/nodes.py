"""Closed set of markup node types produced by the wikitext parser."""

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Bold:
    """Toggle marker for ``'''``."""


@dataclass(frozen=True)
class Italic:
    """Toggle marker for ``''``."""


@dataclass(frozen=True)
class BoldItalic:
    """Toggle marker for ``'''''``."""


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class CharacterEntity:
    """An HTML entity, already decoded."""

    character: str


@dataclass(frozen=True)
class Link:
    target: str
    text: list["MarkupNode"]


@dataclass(frozen=True)
class ExternalLink:
    """Bracketed external link; content is the URL, a space and the label."""

    nodes: list["MarkupNode"]


@dataclass(frozen=True)
class Heading:
    level: int
    nodes: list["MarkupNode"]


@dataclass(frozen=True)
class HorizontalRule:
    pass


@dataclass(frozen=True)
class Image:
    """``[[File:...]]``; text holds the pipe-separated options and caption."""

    target: str
    text: list["MarkupNode"]


@dataclass(frozen=True)
class Category:
    target: str
    ordinal: list["MarkupNode"]


@dataclass(frozen=True)
class ListItem:
    """One line of a list.

    Attributes:
        nodes: Item body, including any nested list
        kind: "item" for ``*``/``#``, "term" for ``;`` and "details" for ``:``
    """

    nodes: list["MarkupNode"]
    kind: str = "item"


@dataclass(frozen=True)
class OrderedList:
    items: list[ListItem]


@dataclass(frozen=True)
class UnorderedList:
    items: list[ListItem]


@dataclass(frozen=True)
class DefinitionList:
    items: list[ListItem]


@dataclass(frozen=True)
class ParagraphBreak:
    pass


@dataclass(frozen=True)
class Preformatted:
    nodes: list["MarkupNode"]


@dataclass(frozen=True)
class Redirect:
    target: str


@dataclass(frozen=True)
class StartTag:
    """Opening HTML tag; attributes is the raw attribute text, leading space included."""

    name: str
    attributes: str = ""


@dataclass(frozen=True)
class EndTag:
    name: str


@dataclass(frozen=True)
class GenericTag:
    """Extension tag such as ``<ref>`` with its parsed contents."""

    name: str
    nodes: list["MarkupNode"]


@dataclass(frozen=True)
class Parameter:
    """Template argument; name is None for positional arguments."""

    name: list["MarkupNode"] | None
    value: list["MarkupNode"]


@dataclass(frozen=True)
class Template:
    name: list["MarkupNode"]
    parameters: list[Parameter] = field(default_factory=list)


@dataclass(frozen=True)
class TemplateParameter:
    """``{{{name|default}}}`` reference inside a template body."""

    name: list["MarkupNode"]
    default: list["MarkupNode"] | None = None


@dataclass(frozen=True)
class Table:
    """Table markup, kept as source text."""

    source: str


@dataclass(frozen=True)
class MagicWord:
    """Behaviour switch such as ``__NOTOC__``."""

    name: str


MarkupNode = Union[
    Bold,
    BoldItalic,
    Italic,
    Text,
    CharacterEntity,
    Link,
    ExternalLink,
    Heading,
    HorizontalRule,
    Image,
    Category,
    OrderedList,
    UnorderedList,
    DefinitionList,
    ParagraphBreak,
    Preformatted,
    Redirect,
    StartTag,
    EndTag,
    GenericTag,
    Template,
    TemplateParameter,
    Table,
    MagicWord,
]
