"""Data models for the offset index and the dump's page records."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class IndexEntry:
    """One line of the multistream offset index.

    Attributes:
        block_offset: Byte offset of the compressed block holding the record
        ordinal_in_block: 0-based position of the record within its block
        record_id: Page id
        title: Page title
    """

    block_offset: int
    ordinal_in_block: int
    record_id: int
    title: str


@dataclass
class Contributor:
    """Author of a revision; anonymous edits carry only an IP."""

    username: str = ""
    id: int = 0
    ip: str = ""


@dataclass
class RevisionText:
    """Body of a revision together with its declared size and checksum."""

    byte_count: int = 0
    checksum: str = ""
    content: str = ""


@dataclass
class Revision:
    """Latest revision stored for a page.

    Attributes:
        id: Revision id
        parent_id: Id of the previous revision (0 for the first one)
        timestamp: ISO 8601 timestamp of the edit
        contributor: Author of the edit
        comment: Edit summary
        origin: Id of the revision the content originates from
        content_model: Content model, usually "wikitext"
        content_format: MIME type of the content, usually "text/x-wiki"
        text: Revision body
        checksum: SHA-1 of the revision body as stored in the dump
    """

    id: int = 0
    parent_id: int = 0
    timestamp: str = ""
    contributor: Contributor = field(default_factory=Contributor)
    comment: str = ""
    origin: int = 0
    content_model: str = ""
    content_format: str = ""
    text: RevisionText = field(default_factory=RevisionText)
    checksum: str = ""


@dataclass
class Record:
    """A page record reconstructed from one decompressed block.

    Attributes:
        title: Page title
        redirect_target: Target title when the page is a redirect
        namespace: Namespace number (0 for articles)
        id: Page id
        body: Revision holding the page content
    """

    title: str = ""
    redirect_target: str | None = None
    namespace: int = 0
    id: int = 0
    body: Revision = field(default_factory=Revision)

    @property
    def wikitext(self) -> str:
        """Raw wikitext of the stored revision."""
        return self.body.text.content

    @property
    def is_redirect(self) -> bool:
        return self.redirect_target is not None

    def formatted_wikitext(self) -> str:
        """Wikitext prefixed with a title heading, the timestamp and a rule."""
        return f"={self.title}=\n\n''{self.body.timestamp}''\n-----\n{self.wikitext}"
