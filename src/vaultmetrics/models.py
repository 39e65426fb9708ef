"""Core VaultMetrics data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Literal


class DocumentKind(Enum):
    """Kind of a corpus entry, decided once per collection."""

    DOCUMENT = "document"
    ATTACHMENT = "attachment"


@dataclass(frozen=True, slots=True)
class MetricsRecord:
    """Per-document snapshot of the counted statistics."""

    files: int = 0
    documents: int = 0
    attachments: int = 0
    size: int = 0
    links: int = 0
    words: int = 0
    tags: int = 0
    quality: float = 0.0

    @classmethod
    def zero(cls) -> MetricsRecord:
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_SUMMED_FIELDS = tuple(f.name for f in fields(MetricsRecord) if f.name != "quality")


@dataclass(slots=True)
class AggregateRecord:
    """Running totals over every record currently known to the engine.

    All counters are plain sums. ``quality`` is recomputed from the sums after
    every change instead of being accumulated.
    """

    files: int = 0
    documents: int = 0
    attachments: int = 0
    size: int = 0
    links: int = 0
    words: int = 0
    tags: int = 0
    quality: float = 0.0

    def inc(self, record: MetricsRecord) -> None:
        for name in _SUMMED_FIELDS:
            setattr(self, name, getattr(self, name) + getattr(record, name))
        self._update_quality()

    def dec(self, record: MetricsRecord) -> None:
        for name in _SUMMED_FIELDS:
            setattr(self, name, getattr(self, name) - getattr(record, name))
        self._update_quality()

    def reset(self) -> None:
        for name in _SUMMED_FIELDS:
            setattr(self, name, 0)
        self.quality = 0.0

    def snapshot(self) -> MetricsRecord:
        """Immutable copy for read-only consumers."""
        return MetricsRecord(**{f.name: getattr(self, f.name) for f in fields(MetricsRecord)})

    def to_dict(self) -> Dict[str, Any]:
        return self.snapshot().to_dict()

    def _update_quality(self) -> None:
        self.quality = self.links / self.documents if self.documents else 0.0


@dataclass(frozen=True, slots=True)
class Region:
    """Typed span of a document's raw text, addressed by character offsets."""

    type: str
    start: int
    end: int


@dataclass(slots=True)
class ParsedStructure:
    """Structure extracted from one document by a structure provider."""

    regions: List[Region] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DocumentHandle:
    """A key resolved to a live file in the corpus."""

    key: str
    path: Path
    size: int
    mtime: float


ChangeKind = Literal["created", "modified", "deleted", "renamed"]


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Change notification fired by a corpus watcher."""

    kind: ChangeKind
    key: str
    old_key: str | None = None
