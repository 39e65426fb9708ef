"""Tests for markdown structure extraction."""

from __future__ import annotations

from vaultmetrics.ingestion.markdown_parser import extract_links, extract_tags, parse_markdown
from vaultmetrics.models import Region


SAMPLE = """---
tags: [a]
---
# Title #heading-tag

Hello **world**, see [[Other Note|alias]] and [docs](docs/guide.md).
External [site](https://example.com) and ![[image.png]].

- item one
- item two #todo
  continued line

> [!note] Callout
> body text

> quote here

| a | b |
| - | - |
| 1 | 2 |

```python
x = "[[not a link]]" #notatag
```

$$
e = mc^2
$$

%% hidden [[comment link]] %%

---

[^1]: footnote text
[ref]: https://example.com

<div>html</div>

Inline `#code` and #real/tag 42 #123.
"""


def _types(content: str) -> list[str]:
    return [region.type for region in parse_markdown(content).regions]


class TestRegions:
    """Test block level region detection."""

    def test_region_types_in_order(self) -> None:
        assert _types(SAMPLE) == [
            "yaml",
            "heading",
            "paragraph",
            "list",
            "callout",
            "blockquote",
            "table",
            "code",
            "math",
            "comment",
            "thematicBreak",
            "footnoteDefinition",
            "definition",
            "html",
            "paragraph",
        ]

    def test_offsets_address_the_text(self) -> None:
        """Should slice back to the exact lines of each block."""
        structure = parse_markdown(SAMPLE)
        by_type = {region.type: region for region in structure.regions}

        assert SAMPLE[by_type["heading"].start : by_type["heading"].end] == "# Title #heading-tag"
        assert SAMPLE[by_type["list"].start : by_type["list"].end] == (
            "- item one\n- item two #todo\n  continued line"
        )
        assert SAMPLE[by_type["code"].start : by_type["code"].end].endswith("```")

    def test_paragraphs_split_on_blank_lines(self) -> None:
        structure = parse_markdown("Hello world.\n\nSecond para")
        assert structure.regions == [
            Region(type="paragraph", start=0, end=12),
            Region(type="paragraph", start=14, end=25),
        ]

    def test_crlf_line_endings(self) -> None:
        structure = parse_markdown("Line one\r\nLine two")
        assert structure.regions == [Region(type="paragraph", start=0, end=18)]

    def test_unterminated_fence_runs_to_end(self) -> None:
        assert _types("```\ncode\n\nmore code") == ["code"]

    def test_fence_closes_on_a_longer_run(self) -> None:
        assert _types("```\ncode\n`````\nafter") == ["code", "paragraph"]

    def test_fence_needs_matching_character_and_length(self) -> None:
        assert _types("~~~~\n```\n~~~\nstill code\n~~~~\nafter") == ["code", "paragraph"]

    def test_heading_interrupts_paragraph(self) -> None:
        assert _types("some text\n## Heading\nmore") == ["paragraph", "heading", "paragraph"]

    def test_unclosed_frontmatter_is_a_break(self) -> None:
        assert _types("---\ntext") == ["thematicBreak", "paragraph"]

    def test_empty_document(self) -> None:
        assert parse_markdown("").regions == []


class TestLinksAndTags:
    """Test link and tag extraction."""

    def test_sample_links(self) -> None:
        assert parse_markdown(SAMPLE).links == ["Other Note", "docs/guide.md"]

    def test_sample_tags(self) -> None:
        assert parse_markdown(SAMPLE).tags == ["#heading-tag", "#todo", "#real/tag"]

    def test_embeds_and_urls_are_not_links(self) -> None:
        assert extract_links("![[a.png]] ![alt](b.png) [x](http://y.z) [[real]]") == ["real"]

    def test_wiki_link_heading_target(self) -> None:
        assert extract_links("[[Note#Section|shown]]") == ["Note#Section"]

    def test_tags_need_a_letter(self) -> None:
        assert extract_tags("#123 #a1 #_x") == ["#a1", "#_x"]

    def test_heading_marker_and_fragments_are_not_tags(self) -> None:
        assert extract_tags("# Heading\npage.html#anchor ##double") == []

    def test_heading_link_targets_are_not_tags(self) -> None:
        structure = parse_markdown("See [[#Heading]] and [top](#intro) here.")

        assert structure.links == ["#Heading", "#intro"]
        assert structure.tags == []

    def test_tag_next_to_a_heading_link_still_counts(self) -> None:
        structure = parse_markdown("[[Note#Part]] #kept [up](#top)")

        assert structure.links == ["Note#Part", "#top"]
        assert structure.tags == ["#kept"]
