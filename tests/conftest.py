"""Pytest configuration and shared fixtures."""

import bz2
from dataclasses import dataclass
from pathlib import Path

import pytest

SITEINFO = """<mediawiki xmlns="http://www.mediawiki.org/xml/export-0.11/" version="0.11" xml:lang="en">
  <siteinfo>
    <sitename>Wikipedia</sitename>
    <namespaces>
      <namespace key="0" case="first-letter" />
    </namespaces>
  </siteinfo>
"""

FOOTER = "</mediawiki>\n"

ALPHA_PAGE = """  <page>
    <title>Alpha</title>
    <ns>0</ns>
    <id>10</id>
    <revision>
      <id>1001</id>
      <parentid>1000</parentid>
      <timestamp>2024-06-01T12:00:00Z</timestamp>
      <contributor>
        <username>Editor</username>
        <id>42</id>
      </contributor>
      <comment>copyedit</comment>
      <origin>1001</origin>
      <model>wikitext</model>
      <format>text/x-wiki</format>
      <text bytes="64" sha1="abc123" xml:space="preserve">'''Alpha''' is a [[letter]] &amp;amp; a symbol.</text>
      <sha1>abc123</sha1>
    </revision>
  </page>
"""

ALFA_PAGE = """  <page>
    <title>Alfa</title>
    <ns>0</ns>
    <id>11</id>
    <redirect title="Alpha" />
    <revision>
      <id>2001</id>
      <timestamp>2024-06-02T08:30:00Z</timestamp>
      <contributor>
        <ip>192.0.2.1</ip>
      </contributor>
      <model>wikitext</model>
      <format>text/x-wiki</format>
      <text bytes="19" sha1="def456" xml:space="preserve">#REDIRECT [[Alpha]]</text>
      <sha1>def456</sha1>
    </revision>
  </page>
"""

BETA_PAGE = """  <page>
    <title>Beta: The Sequel</title>
    <ns>0</ns>
    <id>12</id>
    <revision>
      <id>3001</id>
      <timestamp>2024-06-03T09:00:00Z</timestamp>
      <contributor>
        <username>Scholar</username>
        <id>7</id>
      </contributor>
      <model>wikitext</model>
      <format>text/x-wiki</format>
      <text bytes="90" sha1="ghi789" xml:space="preserve">Beta follows alpha.&lt;ref&gt;First source&lt;/ref&gt; It is second.&lt;ref&gt;Second source&lt;/ref&gt;

== References ==
{{Reflist}}</text>
      <sha1>ghi789</sha1>
    </revision>
  </page>
"""

GAMMA_PAGE = """  <page>
    <title>Gamma</title>
    <ns>0</ns>
    <id>13</id>
    <revision>
      <id>4001</id>
      <timestamp>2024-06-04T10:00:00Z</timestamp>
      <contributor>
        <username>Editor</username>
        <id>42</id>
      </contributor>
      <model>wikitext</model>
      <format>text/x-wiki</format>
      <text bytes="40" sha1="jkl012" xml:space="preserve">Gamma is [[broken markup.</text>
      <sha1>jkl012</sha1>
    </revision>
  </page>
"""


@dataclass
class SampleDump:
    """Multistream dump and index written to a temporary directory.

    Attributes:
        dump_path: Archive laid out as header, block A, block B, block C, footer
        index_path: bz2-compressed index file
        offsets: Byte offsets of blocks A, B and C
    """

    dump_path: Path
    index_path: Path
    offsets: list[int]

    @property
    def index_text(self) -> str:
        return bz2.decompress(self.index_path.read_bytes()).decode("utf-8")


def write_multistream(path: Path, blocks: list[list[str]]) -> list[int]:
    """Write blocks of independently compressed frames back-to-back.

    Args:
        path: File to write
        blocks: Each block is a list of frame texts

    Returns:
        Byte offset of each block
    """
    offsets = []
    with path.open("wb") as f:
        for frames in blocks:
            offsets.append(f.tell())
            for frame in frames:
                f.write(bz2.compress(frame.encode("utf-8")))
    return offsets


@pytest.fixture
def two_page_block() -> str:
    """Decompressed block holding the Alpha article and the Alfa redirect."""
    return ALPHA_PAGE + ALFA_PAGE


@pytest.fixture
def sample_dump(tmp_path: Path) -> SampleDump:
    """Dump with a header stream, three indexed blocks and a footer stream.

    Block B is split over two frames; block C is the final indexed block and is
    followed only by the footer.
    """
    dump_path = tmp_path / "testwiki-pages-articles-multistream.xml.bz2"
    offsets = write_multistream(
        dump_path,
        [
            [SITEINFO],
            [ALPHA_PAGE + ALFA_PAGE],
            [BETA_PAGE[: len(BETA_PAGE) // 2], BETA_PAGE[len(BETA_PAGE) // 2 :]],
            [GAMMA_PAGE],
            [FOOTER],
        ],
    )
    block_a, block_b, block_c = offsets[1:4]

    index_text = (
        f"{block_a}:10:Alpha\n"
        f"{block_a}:11:Alfa\n"
        f"{block_b}:12:Beta: The Sequel\n"
        f"{block_c}:13:Gamma\n"
    )
    index_path = tmp_path / "testwiki-pages-articles-multistream-index.txt.bz2"
    index_path.write_bytes(bz2.compress(index_text.encode("utf-8")))

    return SampleDump(dump_path=dump_path, index_path=index_path, offsets=[block_a, block_b, block_c])
