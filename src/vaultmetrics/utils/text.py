"""Text helpers turning markdown spans into normalized word tokens."""

from __future__ import annotations

import re
from typing import List, Protocol

WORD_BOUNDARY = re.compile(r'[ \n\r\t"|,()\[\]/]+')
NON_WORD = re.compile(r"[^\wа-яА-ЯёЁ]+", re.ASCII)
NUMBER = re.compile(r"\d+(\.\d+)?", re.ASCII)
CODE_BLOCK_HEADER = re.compile(r"```\w+", re.ASCII)

STRIP_HIGHLIGHTS = re.compile(r"(==)?(.*?)(==)?")
STRIP_FORMATTING = re.compile(r"(_+|\*+)?(.*?)(_+|\*+)?")
STRIP_PUNCTUATION = re.compile(r"([`.:\",!?])?(.*?)([`.:\",!?])?")
STRIP_WIKI_LINKS = re.compile(r"(\[\[)?(.*?)(\]\])?")

_STRIP_ORDER = (STRIP_HIGHLIGHTS, STRIP_FORMATTING, STRIP_PUNCTUATION, STRIP_WIKI_LINKS)


class Tokenizer(Protocol):
    def tokenize(self, content: str) -> List[str]: ...


class UnitTokenizer:
    """Constant tokenizer that always returns an empty list."""

    def tokenize(self, content: str) -> List[str]:
        return []


class MarkdownTokenizer:
    """Splits markdown prose into word tokens.

    Candidates are produced by splitting on boundary characters, filtered
    (pure punctuation, plain numbers, code fence openers), then unwrapped
    from markup until stripping no longer changes them.
    """

    def tokenize(self, content: str) -> List[str]:
        if not content.strip():
            return []

        words: List[str] = []
        for candidate in WORD_BOUNDARY.split(content):
            if self._is_non_word(candidate) or self._is_number(candidate):
                continue
            if self._is_code_block_header(candidate):
                continue
            token = self.strip_all(candidate)
            if token:
                words.append(token)
        return words

    def strip_all(self, token: str) -> str:
        """Strip markup layers until a full pass leaves the token unchanged."""
        if token == "":
            return token

        while True:
            previous = token
            for pattern in _STRIP_ORDER:
                token = _strip(pattern, token)
            if token == previous:
                return token

    @staticmethod
    def _is_non_word(token: str) -> bool:
        return NON_WORD.fullmatch(token) is not None

    @staticmethod
    def _is_number(token: str) -> bool:
        return NUMBER.fullmatch(token) is not None

    @staticmethod
    def _is_code_block_header(token: str) -> bool:
        return CODE_BLOCK_HEADER.fullmatch(token) is not None


def _strip(pattern: re.Pattern[str], token: str) -> str:
    # Each pattern removes at most one marker from either side.
    match = pattern.fullmatch(token)
    if match is None:
        return ""
    return match.group(2)


UNIT_TOKENIZER = UnitTokenizer()
MARKDOWN_TOKENIZER = MarkdownTokenizer()


def unit_tokenize(content: str) -> List[str]:
    return UNIT_TOKENIZER.tokenize(content)


def markdown_tokenize(content: str) -> List[str]:
    return MARKDOWN_TOKENIZER.tokenize(content)
