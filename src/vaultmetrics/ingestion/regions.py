"""Mapping from document region types to tokenizers."""

from __future__ import annotations

from enum import Enum
from typing import Dict

from vaultmetrics.utils.text import MARKDOWN_TOKENIZER, UNIT_TOKENIZER, Tokenizer


class RegionType(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    BLOCKQUOTE = "blockquote"
    CALLOUT = "callout"
    TABLE = "table"
    YAML = "yaml"
    CODE = "code"
    MATH = "math"
    THEMATIC_BREAK = "thematicBreak"
    HTML = "html"
    TEXT = "text"
    ELEMENT = "element"
    FOOTNOTE_DEFINITION = "footnoteDefinition"
    DEFINITION = "definition"
    COMMENT = "comment"


# Prose regions count words; the rest only count through links and tags.
TOKENIZERS: Dict[RegionType, Tokenizer] = {
    RegionType.PARAGRAPH: MARKDOWN_TOKENIZER,
    RegionType.HEADING: MARKDOWN_TOKENIZER,
    RegionType.LIST: MARKDOWN_TOKENIZER,
    RegionType.BLOCKQUOTE: MARKDOWN_TOKENIZER,
    RegionType.CALLOUT: MARKDOWN_TOKENIZER,
    RegionType.TABLE: UNIT_TOKENIZER,
    RegionType.YAML: UNIT_TOKENIZER,
    RegionType.CODE: UNIT_TOKENIZER,
    RegionType.MATH: UNIT_TOKENIZER,
    RegionType.THEMATIC_BREAK: UNIT_TOKENIZER,
    RegionType.HTML: UNIT_TOKENIZER,
    RegionType.TEXT: UNIT_TOKENIZER,
    RegionType.ELEMENT: UNIT_TOKENIZER,
    RegionType.FOOTNOTE_DEFINITION: UNIT_TOKENIZER,
    RegionType.DEFINITION: UNIT_TOKENIZER,
    RegionType.COMMENT: UNIT_TOKENIZER,
}


def classify(region_type: str) -> Tokenizer | None:
    """Return the tokenizer registered for ``region_type``, or None if unknown."""
    try:
        return TOKENIZERS[RegionType(region_type)]
    except ValueError:
        return None
