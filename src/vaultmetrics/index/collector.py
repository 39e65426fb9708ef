"""Per-document metrics collection."""

from __future__ import annotations

import asyncio
import logging

from vaultmetrics.index.vault import Corpus, StructureProvider
from vaultmetrics.ingestion.regions import classify
from vaultmetrics.models import DocumentHandle, DocumentKind, MetricsRecord, ParsedStructure
from vaultmetrics.utils.files import document_kind

LOGGER = logging.getLogger(__name__)


class DocumentMetricsCollector:
    """Counts words, links and tags of a markdown note."""

    async def collect(
        self, handle: DocumentHandle, structure: ParsedStructure, content: str | None
    ) -> MetricsRecord:
        links = len(structure.links)
        return MetricsRecord(
            files=1,
            documents=1,
            attachments=0,
            size=handle.size,
            links=links,
            words=self._count_words(handle, structure, content),
            tags=len(structure.tags),
            quality=float(links),
        )

    def _count_words(
        self, handle: DocumentHandle, structure: ParsedStructure, content: str | None
    ) -> int:
        if content is None:
            return 0

        words = 0
        for region in structure.regions:
            tokenizer = classify(region.type)
            if tokenizer is None:
                LOGGER.warning("%s: no tokenizer, region type=%s", handle.key, region.type)
                continue
            words += len(tokenizer.tokenize(content[region.start : region.end]))
        return words


class AttachmentMetricsCollector:
    """Attachments only count as files with a size."""

    async def collect(self, handle: DocumentHandle, structure: ParsedStructure) -> MetricsRecord:
        return MetricsRecord(files=1, documents=0, attachments=1, size=handle.size)


class MetricsCollector:
    """Dispatches a resolved document to the collector for its kind.

    A note is read once. The same text feeds the structure provider and the
    word count, and both the read and the parse run off the event loop.
    """

    def __init__(self, corpus: Corpus, structures: StructureProvider) -> None:
        self.corpus = corpus
        self.structures = structures
        self.documents = DocumentMetricsCollector()
        self.attachments = AttachmentMetricsCollector()

    async def read(self, handle: DocumentHandle) -> str | None:
        try:
            return await self.corpus.read(handle)
        except Exception as exc:
            LOGGER.warning("%s: unable to read content: %s", handle.key, exc)
            return None

    async def structure_for(
        self, handle: DocumentHandle, content: str | None = None
    ) -> ParsedStructure | None:
        try:
            return await asyncio.to_thread(self.structures.get_file_cache, handle, content)
        except Exception as exc:
            # A vanished document raises instead of returning None.
            LOGGER.debug("%s: structure unavailable: %s", handle.key, exc)
            return None

    async def collect(self, handle: DocumentHandle) -> MetricsRecord | None:
        """Return the metrics for ``handle``, or None if it can't be found."""
        kind = document_kind(handle.key)
        if kind is DocumentKind.DOCUMENT:
            content = await self.read(handle)
            structure = await self.structure_for(handle, content)
            if structure is None:
                return None
            return await self.documents.collect(handle, structure, content)
        if kind is DocumentKind.ATTACHMENT:
            structure = await self.structure_for(handle)
            if structure is None:
                return None
            return await self.attachments.collect(handle, structure)
        raise ValueError(f"Unhandled document kind: {kind}")
