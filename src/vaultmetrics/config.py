"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from vaultmetrics.index.engine import DEFAULT_DRAIN_INTERVAL
from vaultmetrics.utils.files import parse_excluded_tokens


@dataclass(slots=True)
class AppConfig:
    vault_path: Path = Path(".")
    exclude_directories: str = ""
    drain_interval: float = DEFAULT_DRAIN_INTERVAL
    poll_interval: float = 1.0
    legacy_deletion: bool = False

    def excluded_tokens(self) -> List[str]:
        return parse_excluded_tokens(self.exclude_directories)

    def resolve_vault_path(self, base_dir: Path | None = None) -> Path:
        if Path(self.vault_path).is_absolute() or base_dir is None:
            return Path(self.vault_path)
        return base_dir / self.vault_path
