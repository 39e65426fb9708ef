"""Command line interface for VaultMetrics."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from vaultmetrics.config import AppConfig
from vaultmetrics.index.service import VaultService
from vaultmetrics.models import MetricsRecord
from vaultmetrics.web.app import app as web_app
from vaultmetrics.web.app import configure as configure_web


console = Console()
app = typer.Typer(help="VaultMetrics - incremental statistics for markdown vaults")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _resolve_vault(config: AppConfig) -> Path:
    resolved = config.resolve_vault_path(Path.cwd())
    if not resolved.is_dir():
        raise typer.BadParameter(f"Vault not found: {resolved}")
    return resolved


def metrics_table(record: MetricsRecord) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    table.add_row("Files", f"{record.files:,}")
    table.add_row("Notes", f"{record.documents:,}")
    table.add_row("Attachments", f"{record.attachments:,}")
    table.add_row("Size (bytes)", f"{record.size:,}")
    table.add_row("Links", f"{record.links:,}")
    table.add_row("Words", f"{record.words:,}")
    table.add_row("Tags", f"{record.tags:,}")
    table.add_row("Quality", f"{record.quality:.2f}")
    return table


def documents_table(records: dict[str, MetricsRecord]) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Links", justify="right")
    table.add_column("Tags", justify="right")

    for key in sorted(records):
        record = records[key]
        table.add_row(key, str(record.size), str(record.words), str(record.links), str(record.tags))
    return table


@app.command()
def scan(
    vault: Path = typer.Argument(..., help="Vault directory to scan.", resolve_path=True),
    exclude: str = typer.Option(
        AppConfig().exclude_directories,
        "--exclude",
        "-x",
        help="Directory names to leave out, separated by commas or spaces",
    ),
    documents: bool = typer.Option(False, "--documents", "-d", help="List per-file metrics"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Collect statistics for a vault once and print them."""
    _setup_logging(verbose)
    config = AppConfig(vault_path=vault, exclude_directories=exclude)
    config.vault_path = _resolve_vault(config)

    service = VaultService.from_config(config)
    console.print(f"Scanning [bold]{config.vault_path}[/bold]...")
    stats = asyncio.run(service.scan())

    if documents:
        console.print(documents_table(service.engine.records()))
    console.print(metrics_table(service.engine.aggregate))
    console.print(
        f"Processed: {len(stats.processed_keys)}, excluded: {stats.excluded}, "
        f"missing: {stats.missing}, failed: {stats.failed}"
    )


async def _watch(service: VaultService) -> None:
    def report(_stats) -> None:
        console.print(metrics_table(service.engine.aggregate))

    service.start(on_drain=report)
    try:
        await asyncio.Event().wait()
    finally:
        await service.stop()


@app.command()
def watch(
    vault: Path = typer.Argument(..., help="Vault directory to watch.", resolve_path=True),
    exclude: str = typer.Option(
        AppConfig().exclude_directories,
        "--exclude",
        "-x",
        help="Directory names to leave out, separated by commas or spaces",
    ),
    interval: float = typer.Option(
        AppConfig().drain_interval, help="Seconds between backlog drains"
    ),
    poll_interval: float = typer.Option(
        AppConfig().poll_interval, help="Seconds between filesystem polls"
    ),
    legacy_deletion: bool = typer.Option(
        AppConfig().legacy_deletion,
        "--legacy-deletion",
        help="Keep counting files that disappear from the vault",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Keep statistics up to date while the vault changes."""
    _setup_logging(verbose)
    config = AppConfig(
        vault_path=vault,
        exclude_directories=exclude,
        drain_interval=interval,
        poll_interval=poll_interval,
        legacy_deletion=legacy_deletion,
    )
    config.vault_path = _resolve_vault(config)

    console.print(f"Watching [bold]{config.vault_path}[/bold] (Ctrl+C to stop)...")
    try:
        asyncio.run(_watch(VaultService.from_config(config)))
    except KeyboardInterrupt:
        console.print("Stopped.")


@app.command()
def web(
    vault: Path = typer.Argument(..., help="Vault directory to serve.", resolve_path=True),
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    exclude: str = typer.Option(
        AppConfig().exclude_directories,
        "--exclude",
        "-x",
        help="Directory names to leave out, separated by commas or spaces",
    ),
) -> None:
    """Serve the live statistics over HTTP."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - optional extra
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    config = AppConfig(vault_path=vault, exclude_directories=exclude)
    config.vault_path = _resolve_vault(config)
    configure_web(config)

    console.print(f"Starting web interface on http://{host}:{port} (vault: {config.vault_path})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
