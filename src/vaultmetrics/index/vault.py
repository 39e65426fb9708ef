"""Filesystem-backed corpus and change detection."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Protocol

from vaultmetrics.ingestion.markdown_parser import parse_markdown
from vaultmetrics.models import ChangeEvent, DocumentHandle, DocumentKind, ParsedStructure
from vaultmetrics.utils.files import document_kind, iter_corpus_paths, key_for

LOGGER = logging.getLogger(__name__)


class Corpus(Protocol):
    def iter_keys(self) -> Iterator[str]: ...

    def resolve(self, key: str) -> DocumentHandle | None: ...

    async def read(self, handle: DocumentHandle) -> str: ...


class StructureProvider(Protocol):
    def get_file_cache(
        self, handle: DocumentHandle, content: str | None = None
    ) -> ParsedStructure | None: ...


class FilesystemVault:
    """A directory tree of markdown notes and attachments.

    Serves both as the corpus (enumeration, key resolution, content reads) and
    as the structure provider for the notes it contains.
    """

    def __init__(self, root: Path, *, encoding: str = "utf-8") -> None:
        self.root = Path(root)
        self.encoding = encoding

    def iter_keys(self) -> Iterator[str]:
        for path in iter_corpus_paths(self.root):
            yield key_for(self.root, path)

    def path_for(self, key: str) -> Path:
        return self.root.joinpath(*key.split("/"))

    def resolve(self, key: str) -> DocumentHandle | None:
        path = self.path_for(key)
        try:
            stat = path.stat()
        except OSError:
            return None
        if not path.is_file():
            return None
        return DocumentHandle(key=key, path=path, size=stat.st_size, mtime=stat.st_mtime)

    def read_text(self, handle: DocumentHandle) -> str:
        return handle.path.read_text(encoding=self.encoding, errors="replace")

    async def read(self, handle: DocumentHandle) -> str:
        return await asyncio.to_thread(self.read_text, handle)

    def get_file_cache(
        self, handle: DocumentHandle, content: str | None = None
    ) -> ParsedStructure | None:
        """Parse the note behind ``handle``, or ``content`` when already read.

        Attachments have no markdown structure and get an empty one. Raises
        ``FileNotFoundError`` when the file vanished after it was resolved.
        """
        if document_kind(handle.key) is DocumentKind.ATTACHMENT:
            if not handle.path.exists():
                raise FileNotFoundError(handle.path)
            return ParsedStructure()
        if content is None:
            content = self.read_text(handle)
        return parse_markdown(content)


@dataclass(frozen=True, slots=True)
class _Fingerprint:
    inode: int
    mtime: float
    size: int


class VaultWatcher:
    """Polls a vault and turns filesystem differences into change events."""

    def __init__(self, vault: FilesystemVault) -> None:
        self.vault = vault
        self._snapshot: Dict[str, _Fingerprint] = {}

    def prime(self) -> None:
        """Record the current state without emitting events."""
        self._snapshot = self._scan()

    def poll(self) -> List[ChangeEvent]:
        current = self._scan()
        previous = self._snapshot
        self._snapshot = current

        created = [key for key in current if key not in previous]
        deleted = [key for key in previous if key not in current]
        events: List[ChangeEvent] = []

        vanished_by_inode = {previous[key].inode: key for key in deleted}
        for key in created:
            old_key = vanished_by_inode.pop(current[key].inode, None)
            if old_key is not None:
                events.append(ChangeEvent(kind="renamed", key=key, old_key=old_key))
            else:
                events.append(ChangeEvent(kind="created", key=key))

        for key in vanished_by_inode.values():
            events.append(ChangeEvent(kind="deleted", key=key))

        for key, fingerprint in current.items():
            before = previous.get(key)
            if before is not None and before != fingerprint:
                events.append(ChangeEvent(kind="modified", key=key))

        if events:
            LOGGER.debug("Detected %d change(s) in %s", len(events), self.vault.root)
        return events

    def _scan(self) -> Dict[str, _Fingerprint]:
        snapshot: Dict[str, _Fingerprint] = {}
        for path in iter_corpus_paths(self.vault.root):
            try:
                stat = path.stat()
            except OSError as exc:
                LOGGER.debug("Skipping %s: %s", path, exc)
                continue
            snapshot[key_for(self.vault.root, path)] = _Fingerprint(
                inode=stat.st_ino, mtime=stat.st_mtime, size=stat.st_size
            )
        return snapshot
