"""Render mode and per-call render state."""

from dataclasses import dataclass, field
from enum import Enum


class RenderMode(str, Enum):
    """How citation tags are handled.

    WITH_FOOTNOTES defers citations into a numbered footnote list; INLINE
    leaves them in place. Nested node sequences always render INLINE.
    """

    WITH_FOOTNOTES = "with_footnotes"
    INLINE = "inline"


@dataclass
class FootnoteBuffer:
    """Footnotes collected during one top-level render call.

    Attributes:
        entries: Footnote list entries as markup, in emission order
        next_number: 1-based number of the next footnote
    """

    entries: list[str] = field(default_factory=list)
    next_number: int = 1

    def add(self, content: str) -> int:
        """Store a footnote and return the number it was given."""
        number = self.next_number
        self.entries.append(f'<li id="ref-{number}">{content}</li>\n')
        self.next_number += 1
        return number

    def drain(self) -> str:
        """Return the buffered entries and empty the buffer."""
        markup = "".join(self.entries)
        self.entries.clear()
        return markup


@dataclass
class RenderContext:
    """State for rendering one node sequence.

    Bold, italic and magic-word flags flip on every marker and are not
    nesting-safe. The footnote buffer is shared with nested contexts.
    """

    footnotes: FootnoteBuffer = field(default_factory=FootnoteBuffer)
    bold: bool = False
    italic: bool = False
    magic_word: bool = False

    def nested(self) -> "RenderContext":
        """Fresh toggles, same footnote buffer."""
        return RenderContext(footnotes=self.footnotes)
