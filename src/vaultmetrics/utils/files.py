"""Utility helpers for working with corpus paths and keys."""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Collection, Iterator, List

from vaultmetrics.models import DocumentKind

DOCUMENT_EXTENSION = "md"

_TOKEN_SEPARATOR = re.compile(r"[,\s]+")


def iter_corpus_paths(root: Path) -> Iterator[Path]:
    """Yield every visible file under ``root``, descending into directories.

    Entries whose name starts with a dot (``.git``, ``.obsidian``) are skipped
    together with their contents.
    """
    for child in sorted(root.iterdir()):
        if child.name.startswith("."):
            continue
        if child.is_dir():
            yield from iter_corpus_paths(child)
        elif child.is_file():
            yield child


def key_for(root: Path, path: Path) -> str:
    """Stable corpus key: the POSIX path of ``path`` relative to ``root``."""
    return path.relative_to(root).as_posix()


def document_kind(key: str) -> DocumentKind:
    suffix = PurePosixPath(key).suffix
    if suffix[1:].lower() == DOCUMENT_EXTENSION:
        return DocumentKind.DOCUMENT
    return DocumentKind.ATTACHMENT


def parse_excluded_tokens(value: str | None) -> List[str]:
    """Split the configured exclusion string on commas and whitespace."""
    if not value:
        return []
    return [token for token in _TOKEN_SEPARATOR.split(value) if token]


def is_excluded(key: str, excluded: Collection[str]) -> bool:
    """Return True if any segment of ``key`` names an excluded directory."""
    if not excluded:
        return False
    return any(segment in excluded for segment in key.split("/"))
