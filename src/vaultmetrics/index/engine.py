"""Incremental aggregation of per-document metrics."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Collection, Dict, Iterable, List

from vaultmetrics.index.collector import MetricsCollector
from vaultmetrics.index.vault import Corpus
from vaultmetrics.models import AggregateRecord, ChangeEvent, MetricsRecord
from vaultmetrics.utils.files import is_excluded

LOGGER = logging.getLogger(__name__)

DEFAULT_DRAIN_INTERVAL = 2.0


@dataclass(slots=True)
class DrainStats:
    updated: int = 0
    removed: int = 0
    excluded: int = 0
    missing: int = 0
    failed: int = 0
    processed_keys: list[str] = field(default_factory=list)

    def increment(self, status: str, key: str) -> None:
        if status == "updated":
            self.updated += 1
        elif status == "removed":
            self.removed += 1
        elif status == "excluded":
            self.excluded += 1
        elif status == "missing":
            self.missing += 1
        else:
            self.failed += 1
        self.processed_keys.append(key)


class AggregationEngine:
    """Keeps a running total consistent with the latest record of every key.

    Changes are queued as keys in a deduplicated FIFO backlog and folded into
    the total one key at a time by :meth:`drain`. Each key contributes exactly
    one record; replacing it subtracts the old contribution before adding the
    new one, so a drain costs O(1) per key regardless of corpus size.
    """

    def __init__(
        self,
        corpus: Corpus,
        collector: MetricsCollector,
        *,
        aggregate: AggregateRecord | None = None,
        excluded: Collection[str] = (),
        legacy_deletion: bool = False,
    ) -> None:
        self.corpus = corpus
        self.collector = collector
        self.excluded = frozenset(excluded)
        self.legacy_deletion = legacy_deletion
        self._aggregate = aggregate if aggregate is not None else AggregateRecord()
        self._records: Dict[str, MetricsRecord] = {}
        self._backlog: OrderedDict[str, None] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def aggregate(self) -> MetricsRecord:
        with self._lock:
            return self._aggregate.snapshot()

    def records(self) -> Dict[str, MetricsRecord]:
        with self._lock:
            return dict(self._records)

    def pending(self) -> List[str]:
        with self._lock:
            return list(self._backlog)

    def enqueue(self, key: str) -> bool:
        """Queue ``key`` unless it is already waiting. Returns True if queued."""
        with self._lock:
            if key in self._backlog:
                return False
            self._backlog[key] = None
            return True

    def enqueue_many(self, keys: Iterable[str]) -> int:
        return sum(1 for key in keys if self.enqueue(key))

    def notify(self, event: ChangeEvent) -> None:
        self.enqueue(event.key)
        if event.kind == "renamed" and event.old_key is not None:
            self.enqueue(event.old_key)

    def _pop(self) -> str | None:
        with self._lock:
            if not self._backlog:
                return None
            key, _ = self._backlog.popitem(last=False)
            return key

    async def drain(self) -> DrainStats:
        """Process every queued key, including keys queued while draining."""
        stats = DrainStats()
        while (key := self._pop()) is not None:
            try:
                status = await self._process(key)
            except Exception:
                LOGGER.exception("Error processing %s", key)
                status = "failed"
            stats.increment(status, key)
        if stats.processed_keys:
            LOGGER.debug(
                "Drained %d key(s): updated=%d removed=%d excluded=%d missing=%d failed=%d",
                len(stats.processed_keys),
                stats.updated,
                stats.removed,
                stats.excluded,
                stats.missing,
                stats.failed,
            )
        return stats

    async def _process(self, key: str) -> str:
        if is_excluded(key, self.excluded):
            LOGGER.debug("Skipping excluded %s", key)
            return "excluded"

        handle = self.corpus.resolve(key)
        if handle is None:
            return self._forget(key)

        record = await self.collector.collect(handle)
        if record is None:
            return self._forget(key)

        self.apply(key, record)
        return "updated"

    def _forget(self, key: str) -> str:
        if self.legacy_deletion:
            return "missing"
        with self._lock:
            known = key in self._records
        if not known:
            return "missing"
        self.remove(key)
        return "removed"

    def apply(self, key: str, record: MetricsRecord | None) -> None:
        """Swap the contribution of ``key`` for ``record``; None drops the key."""
        with self._lock:
            self._aggregate.dec(self._records.get(key, MetricsRecord.zero()))
            if record is None:
                self._records.pop(key, None)
                record = MetricsRecord.zero()
            else:
                self._records[key] = record
            self._aggregate.inc(record)

    def remove(self, key: str) -> None:
        self.apply(key, None)

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
            self._backlog.clear()
            self._aggregate.reset()

    def start(self) -> int:
        """Reset state and queue every key the corpus currently holds."""
        self.reset()
        queued = self.enqueue_many(self.corpus.iter_keys())
        LOGGER.info("Queued %d file(s) for collection", queued)
        return queued

    async def run(
        self,
        interval: float = DEFAULT_DRAIN_INTERVAL,
        *,
        on_drain: Callable[[DrainStats], None] | None = None,
    ) -> None:
        """Drain the backlog every ``interval`` seconds until cancelled."""
        while True:
            stats = await self.drain()
            if on_drain is not None and stats.processed_keys:
                on_drain(stats)
            await asyncio.sleep(interval)

    def stop(self) -> None:
        self.reset()
