"""Wires a vault, its watcher and the aggregation engine together."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from vaultmetrics.config import AppConfig
from vaultmetrics.index.collector import MetricsCollector
from vaultmetrics.index.engine import AggregationEngine, DrainStats
from vaultmetrics.index.vault import FilesystemVault, VaultWatcher

LOGGER = logging.getLogger(__name__)


class VaultService:
    """Runs the periodic drain and filesystem polling loops for one vault."""

    def __init__(self, config: AppConfig, vault: FilesystemVault) -> None:
        self.config = config
        self.vault = vault
        self.watcher = VaultWatcher(vault)
        self.engine = AggregationEngine(
            vault,
            MetricsCollector(vault, vault),
            excluded=config.excluded_tokens(),
            legacy_deletion=config.legacy_deletion,
        )
        self._tasks: list[asyncio.Task] = []

    @classmethod
    def from_config(cls, config: AppConfig) -> VaultService:
        return cls(config, FilesystemVault(config.vault_path))

    async def scan(self) -> DrainStats:
        """Collect the whole vault once."""
        self.engine.start()
        return await self.engine.drain()

    def poll_once(self) -> int:
        events = self.watcher.poll()
        for event in events:
            self.engine.notify(event)
        return len(events)

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.poll_interval)
            try:
                await asyncio.to_thread(self.poll_once)
            except Exception:
                LOGGER.exception("Polling %s failed", self.vault.root)

    def start(self, *, on_drain: Callable[[DrainStats], None] | None = None) -> None:
        """Schedule the drain and poll loops on the running event loop."""
        self.watcher.prime()
        self.engine.start()
        self._tasks = [
            asyncio.create_task(self.engine.run(self.config.drain_interval, on_drain=on_drain)),
            asyncio.create_task(self._poll_loop()),
        ]

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self.engine.stop()
