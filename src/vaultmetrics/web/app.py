"""FastAPI application exposing the live vault statistics."""

from __future__ import annotations

import logging
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from vaultmetrics.config import AppConfig
from vaultmetrics.index.service import VaultService
from vaultmetrics.models import MetricsRecord

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="VaultMetrics Web", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


class MetricsPayload(BaseModel):
    files: int
    documents: int
    attachments: int
    size: int
    links: int
    words: int
    tags: int
    quality: float

    @classmethod
    def from_record(cls, record: MetricsRecord) -> MetricsPayload:
        return cls(**record.to_dict())


class DocumentPayload(BaseModel):
    key: str
    metrics: MetricsPayload


def configure(config: AppConfig) -> None:
    """Set the configuration used when the application starts."""
    app.state.config = config


def _get_service() -> VaultService:
    service = getattr(app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Vault service is not running")
    return service


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    config = getattr(app.state, "config", None) or AppConfig()
    if not config.vault_path.is_dir():
        LOGGER.error("Vault not found: %s", config.vault_path)
        app.state.service = None
        return
    service = VaultService.from_config(config)
    service.start()
    app.state.service = service


@app.on_event("shutdown")
async def shutdown_event() -> None:
    service = getattr(app.state, "service", None)
    if service is not None:
        await service.stop()
        app.state.service = None


@app.get("/metrics")
async def get_metrics() -> MetricsPayload:
    return MetricsPayload.from_record(_get_service().engine.aggregate)


@app.get("/documents")
async def list_documents() -> dict[str, Any]:
    """List the last collected metrics of every known file."""
    engine = _get_service().engine
    records = engine.records()
    documents: List[DocumentPayload] = [
        DocumentPayload(key=key, metrics=MetricsPayload.from_record(records[key]))
        for key in sorted(records)
    ]
    return {"documents": documents, "pending": len(engine.pending())}


@app.post("/rescan")
async def rescan() -> dict[str, Any]:
    """Queue every file of the vault for collection again."""
    service = _get_service()
    queued = service.engine.enqueue_many(service.vault.iter_keys())
    return {"status": "ok", "queued": queued}
