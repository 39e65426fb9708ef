"""Tests for the markdown and unit tokenizers."""

from __future__ import annotations

import pytest

from vaultmetrics.utils.text import (
    MARKDOWN_TOKENIZER,
    UNIT_TOKENIZER,
    MarkdownTokenizer,
    markdown_tokenize,
    unit_tokenize,
)


class TestUnitTokenizer:
    """Test the constant tokenizer."""

    @pytest.mark.parametrize("content", ["", "Hello world.", "| a | b |", "```python"])
    def test_always_empty(self, content: str) -> None:
        """Should return no tokens whatever the input."""
        assert UNIT_TOKENIZER.tokenize(content) == []
        assert unit_tokenize(content) == []


class TestMarkdownTokenizer:
    """Test markdown word tokenization."""

    def test_simple_sentence(self) -> None:
        """Should split prose and drop a trailing period."""
        assert markdown_tokenize("Hello world.") == ["Hello", "world"]

    def test_empty_and_whitespace(self) -> None:
        """Should return nothing for blank input."""
        assert markdown_tokenize("") == []
        assert markdown_tokenize("  \n\t \r\n") == []

    def test_numbers_are_not_words(self) -> None:
        """Should drop integers and decimals but keep the words around them."""
        assert markdown_tokenize("3.14 is pi.") == ["is", "pi"]
        assert markdown_tokenize("In 2024 we shipped 12 releases") == [
            "In",
            "we",
            "shipped",
            "releases",
        ]

    def test_punctuation_runs_are_dropped(self) -> None:
        """Should ignore candidates without any word character."""
        assert markdown_tokenize("... --- !!! -> ##") == []

    def test_nested_formatting_reaches_fixed_point(self) -> None:
        """Should unwrap one marker layer per pass until nothing changes."""
        assert markdown_tokenize("**_word_**") == ["word"]
        assert markdown_tokenize("==**hi**==") == ["hi"]

    def test_highlight(self) -> None:
        assert markdown_tokenize("==x==") == ["x"]

    def test_wiki_links(self) -> None:
        """Should split wiki link text and drop the brackets."""
        assert markdown_tokenize("[[Page Name]]") == ["Page", "Name"]
        assert markdown_tokenize("See [[Note]].") == ["See", "Note"]

    def test_inline_code_and_punctuation(self) -> None:
        assert markdown_tokenize("`code` hello: world?") == ["code", "hello", "world"]

    def test_code_block_header_is_dropped(self) -> None:
        """Should skip a fence opener but count the code words after it."""
        assert markdown_tokenize("```python\nprint(x)\n```") == ["print", "x"]

    def test_boundary_characters(self) -> None:
        assert markdown_tokenize('a/b|c,d "e" (f) [g]') == ["a", "b", "c", "d", "e", "f", "g"]

    def test_emphasis_before_comma(self) -> None:
        assert markdown_tokenize("*emphasis*, plain") == ["emphasis", "plain"]

    def test_inner_underscores_are_kept(self) -> None:
        assert markdown_tokenize("snake_case __init__") == ["snake_case", "init"]

    def test_cyrillic_words(self) -> None:
        assert markdown_tokenize("Привет, мир!") == ["Привет", "мир"]

    def test_marker_only_token_disappears(self) -> None:
        assert markdown_tokenize("_ word") == ["word"]

    def test_strip_all(self) -> None:
        """Should expose the fixed point normalization directly."""
        tokenizer = MarkdownTokenizer()
        assert tokenizer.strip_all("") == ""
        assert tokenizer.strip_all("**_word_**") == "word"
        assert tokenizer.strip_all("[[==note==]]") == "note"
        assert tokenizer.strip_all("plain") == "plain"

    def test_shared_instance(self) -> None:
        assert MARKDOWN_TOKENIZER.tokenize("One two three four.") == [
            "One",
            "two",
            "three",
            "four",
        ]
