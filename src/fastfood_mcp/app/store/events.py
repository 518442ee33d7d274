from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import structlog

from fastfood_mcp.app.core.metrics import record_store_event
from fastfood_mcp.app.store.errors import StoreError

logger = structlog.get_logger(__name__)

LOADED = "loaded"
RELOADED = "reloaded"
RELOAD_FAILED = "reload_failed"


@dataclass(frozen=True)
class StoreEvent:
    kind: str
    store: str
    path: Path
    error: Optional[StoreError] = None
    ts: float = field(default_factory=time.time)


StoreListener = Callable[[StoreEvent], None]


def log_store_event(event: StoreEvent) -> None:
    """Default listener: structured log line plus a Prometheus counter."""
    record_store_event(event.store, event.kind)
    if event.kind == RELOAD_FAILED:
        logger.error(
            "store_reload_failed",
            store=event.store,
            path=str(event.path),
            reason=event.error.reason if event.error else None,
            error=str(event.error) if event.error else None,
        )
    elif event.kind == RELOADED:
        logger.info("store_reloaded", store=event.store, path=str(event.path))
    else:
        logger.info("store_loaded", store=event.store, path=str(event.path))


@dataclass
class StoreStatus:
    """Running counters kept by each store for health reporting."""

    loaded_at: Optional[float] = None
    reloads: int = 0
    failures: int = 0
    last_error: Optional[str] = None
    last_reload_failed: bool = False

    def apply(self, event: StoreEvent) -> None:
        if event.kind == RELOAD_FAILED:
            self.failures += 1
            self.last_error = str(event.error) if event.error else None
            self.last_reload_failed = True
            return
        if event.kind == RELOADED:
            self.reloads += 1
        self.loaded_at = event.ts
        self.last_reload_failed = False
