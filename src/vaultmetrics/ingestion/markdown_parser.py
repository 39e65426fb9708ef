"""Markdown structure extraction.

Splits a note into typed regions addressed by character offsets and extracts
the internal links and inline tags it contains. This is a line-based block
scanner, not a full CommonMark implementation: it recognises the block types
that matter for word counting and leaves everything else as paragraphs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Tuple

from vaultmetrics.ingestion.regions import RegionType
from vaultmetrics.models import ParsedStructure, Region

LOGGER = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"
FENCE = re.compile(r" {0,3}(`{3,}|~{3,})")
HEADING = re.compile(r" {0,3}#{1,6}(\s|$)")
THEMATIC_BREAK = re.compile(r" {0,3}([-*_])( *\1){2,} *")
BLOCKQUOTE = re.compile(r" {0,3}>")
CALLOUT = re.compile(r" {0,3}>\s*\[![^\]]+\]")
LIST_ITEM = re.compile(r" {0,3}([-*+]|\d{1,9}[.)])(\s|$)")
TABLE_ROW = re.compile(r" {0,3}\|")
FOOTNOTE_DEFINITION = re.compile(r" {0,3}\[\^[^\]]+\]:")
DEFINITION = re.compile(r" {0,3}\[[^\]^][^\]]*\]:\s*\S")
HTML_BLOCK = re.compile(r" {0,3}<(/?[A-Za-z][A-Za-z0-9-]*[\s/>]|/?[A-Za-z][A-Za-z0-9-]*$|!--)")
INDENTED = re.compile(r"( {2,}|\t)\S")

INLINE_CODE = re.compile(r"(`+)(?!`).*?(?<!`)\1(?!`)")
WIKI_LINK = re.compile(r"(?<!!)\[\[([^\[\]]+?)\]\]")
MARKDOWN_LINK = re.compile(r"(?<![!\]])\[[^\[\]]*\]\(<?([^()\s<>]+)>?(?:\s+\"[^\"]*\")?\)")
URL_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*:")
TAG = re.compile(r"(?<![\w#/&])#([\w/-]*[^\W\d][\w/-]*)")

# Regions whose text never carries links or tags.
OPAQUE_REGIONS = frozenset(
    {RegionType.CODE, RegionType.MATH, RegionType.COMMENT, RegionType.YAML}
)


@dataclass(slots=True)
class _Line:
    start: int
    end: int
    text: str

    @property
    def blank(self) -> bool:
        return not self.text.strip()


def _split_lines(content: str) -> List[_Line]:
    lines: List[_Line] = []
    offset = 0
    for raw in content.split("\n"):
        end = offset + len(raw)
        lines.append(_Line(start=offset, end=end, text=raw.rstrip("\r")))
        offset = end + 1
    return lines


def _interrupts_paragraph(text: str) -> bool:
    return bool(
        HEADING.match(text)
        or FENCE.match(text)
        or THEMATIC_BREAK.fullmatch(text)
        or BLOCKQUOTE.match(text)
        or LIST_ITEM.match(text)
        or TABLE_ROW.match(text)
        or text.strip().startswith(("$$", "%%"))
    )


class _BlockScanner:
    def __init__(self, lines: List[_Line]) -> None:
        self.lines = lines

    def scan(self) -> List[Region]:
        regions: List[Region] = []
        index = self._frontmatter(regions)
        while index < len(self.lines):
            line = self.lines[index]
            if line.blank:
                index += 1
                continue
            region_type, last = self._block_at(index)
            regions.append(
                Region(type=region_type.value, start=line.start, end=self.lines[last].end)
            )
            index = last + 1
        return regions

    def _frontmatter(self, regions: List[Region]) -> int:
        if not self.lines or self.lines[0].text.strip() != FRONTMATTER_DELIMITER:
            return 0
        for index in range(1, len(self.lines)):
            if self.lines[index].text.strip() in (FRONTMATTER_DELIMITER, "..."):
                regions.append(
                    Region(
                        type=RegionType.YAML.value,
                        start=self.lines[0].start,
                        end=self.lines[index].end,
                    )
                )
                return index + 1
        return 0

    def _block_at(self, index: int) -> Tuple[RegionType, int]:
        text = self.lines[index].text
        stripped = text.strip()

        fence = FENCE.match(text)
        if fence:
            return RegionType.CODE, self._closing_fence(index, fence.group(1))
        if stripped.startswith("$$"):
            return RegionType.MATH, self._closing_marker(index, "$$")
        if stripped.startswith("%%"):
            return RegionType.COMMENT, self._closing_marker(index, "%%")
        if HEADING.match(text):
            return RegionType.HEADING, index
        if THEMATIC_BREAK.fullmatch(text):
            return RegionType.THEMATIC_BREAK, index
        if CALLOUT.match(text):
            return RegionType.CALLOUT, self._while(index, BLOCKQUOTE.match)
        if BLOCKQUOTE.match(text):
            return RegionType.BLOCKQUOTE, self._while(index, BLOCKQUOTE.match)
        if LIST_ITEM.match(text):
            return RegionType.LIST, self._list_end(index)
        if TABLE_ROW.match(text):
            return RegionType.TABLE, self._while(index, TABLE_ROW.match)
        if FOOTNOTE_DEFINITION.match(text):
            return RegionType.FOOTNOTE_DEFINITION, self._while(index + 1, INDENTED.match, index)
        if DEFINITION.match(text):
            return RegionType.DEFINITION, index
        if HTML_BLOCK.match(text):
            return RegionType.HTML, self._while(index, lambda t: t.strip())
        return RegionType.PARAGRAPH, self._paragraph_end(index)

    def _closing_fence(self, index: int, opener: str) -> int:
        for last in range(index + 1, len(self.lines)):
            stripped = self.lines[last].text.strip()
            if len(stripped) >= len(opener) and stripped == opener[0] * len(stripped):
                return last
        return len(self.lines) - 1

    def _closing_marker(self, index: int, marker: str) -> int:
        stripped = self.lines[index].text.strip()
        if len(stripped) >= 2 * len(marker) and stripped.endswith(marker):
            return index
        for last in range(index + 1, len(self.lines)):
            if self.lines[last].text.strip().endswith(marker):
                return last
        return len(self.lines) - 1

    def _while(self, index: int, predicate, last: int | None = None) -> int:
        last = index if last is None else last
        position = index
        while position < len(self.lines) and not self.lines[position].blank:
            if not predicate(self.lines[position].text):
                break
            last = position
            position += 1
        return last

    def _list_end(self, index: int) -> int:
        last = index
        position = index + 1
        while position < len(self.lines):
            line = self.lines[position]
            if line.blank:
                following = self._next_non_blank(position)
                if following is None:
                    break
                text = self.lines[following].text
                if not (LIST_ITEM.match(text) or INDENTED.match(text)):
                    break
                position = following
                continue
            if not (LIST_ITEM.match(line.text) or INDENTED.match(line.text)):
                if _interrupts_paragraph(line.text):
                    break
            last = position
            position += 1
        return last

    def _paragraph_end(self, index: int) -> int:
        last = index
        for position in range(index + 1, len(self.lines)):
            line = self.lines[position]
            if line.blank or _interrupts_paragraph(line.text):
                break
            last = position
        return last

    def _next_non_blank(self, index: int) -> int | None:
        for position in range(index, len(self.lines)):
            if not self.lines[position].blank:
                return position
        return None


def _mask(content: str, spans: List[Tuple[int, int]]) -> str:
    """Blank out ``spans`` while keeping every offset and newline in place."""
    chars = list(content)
    for start, end in spans:
        for position in range(start, end):
            if chars[position] != "\n":
                chars[position] = " "
    return "".join(chars)


def extract_links(text: str) -> List[str]:
    links = [match.group(1).split("|", 1)[0].strip() for match in WIKI_LINK.finditer(text)]
    for match in MARKDOWN_LINK.finditer(text):
        target = match.group(1)
        if not URL_SCHEME.match(target):
            links.append(target)
    return links


def extract_tags(text: str) -> List[str]:
    return ["#" + match.group(1) for match in TAG.finditer(text)]


def parse_markdown(content: str) -> ParsedStructure:
    """Parse ``content`` into typed regions plus its links and tags."""
    regions = _BlockScanner(_split_lines(content)).scan()

    opaque = [
        (region.start, region.end)
        for region in regions
        if RegionType(region.type) in OPAQUE_REGIONS
    ]
    visible = _mask(content, opaque)
    visible = _mask(visible, [match.span() for match in INLINE_CODE.finditer(visible)])
    links = extract_links(visible)

    # Heading targets such as [[#Intro]] or (#intro) are not tags.
    linkless = _mask(
        visible,
        [match.span() for pattern in (WIKI_LINK, MARKDOWN_LINK) for match in pattern.finditer(visible)],
    )
    structure = ParsedStructure(regions=regions, links=links, tags=extract_tags(linkless))
    LOGGER.debug(
        "Parsed %d regions, %d links, %d tags",
        len(structure.regions),
        len(structure.links),
        len(structure.tags),
    )
    return structure
