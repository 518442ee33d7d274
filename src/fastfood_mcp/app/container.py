from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import structlog

from fastfood_mcp.app.core.config import Settings
from fastfood_mcp.app.schemas.catalog import ErrorCatalog, FlagsData, SystemData
from fastfood_mcp.app.store.notifier import ChangeNotifier
from fastfood_mcp.app.store.reloading import ReloadingStore
from fastfood_mcp.app.store.scheduling import BackgroundJobScheduler, Scheduler

logger = structlog.get_logger(__name__)


@dataclass
class DataStores:
    """The three catalog stores, built once at startup and passed to the tools."""

    errors: ReloadingStore[ErrorCatalog]
    system: ReloadingStore[SystemData]
    flags: ReloadingStore[FlagsData]
    scheduler: Optional[BackgroundJobScheduler] = None

    def all(self) -> Dict[str, ReloadingStore[Any]]:
        return {"errors": self.errors, "system": self.system, "flags": self.flags}

    def close(self) -> None:
        for store in self.all().values():
            store.close()
        if self.scheduler is not None:
            self.scheduler.shutdown()
        logger.info("stores_closed")

    def __enter__(self) -> "DataStores":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def build_stores(
    settings: Settings,
    *,
    scheduler: Optional[Scheduler] = None,
    notifier_factory: Optional[Callable[[Path], ChangeNotifier]] = None,
) -> DataStores:
    """Load all three data files; raises FatalLoadError if any cannot be loaded."""
    owned: Optional[BackgroundJobScheduler] = None
    if scheduler is None:
        scheduler = owned = BackgroundJobScheduler()

    def make(path: Path, shape: Any, name: str) -> ReloadingStore[Any]:
        return ReloadingStore.for_type(
            path,
            shape,
            name=name,
            scheduler=scheduler,
            notifier=notifier_factory(path) if notifier_factory else None,
            debounce_seconds=settings.reload_debounce_seconds,
        )

    built: List[ReloadingStore[Any]] = []
    try:
        errors = make(settings.errors_path, ErrorCatalog, "errors")
        built.append(errors)
        system = make(settings.system_path, SystemData, "system")
        built.append(system)
        flags = make(settings.flags_path, FlagsData, "flags")
        built.append(flags)
    except Exception:
        for store in built:
            store.close()
        if owned is not None:
            owned.shutdown()
        raise

    return DataStores(errors=errors, system=system, flags=flags, scheduler=owned)
