"""
Hot-reloading, typed snapshot of a single JSON data file.

A store reads and parses its file once at construction (failure is fatal),
then watches the file and republishes a fresh snapshot after every change that
parses cleanly. Failed reloads keep the last good snapshot and are reported
through store events only. Readers call :meth:`ReloadingStore.current` on every
use and never hold on to the snapshot between calls.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Callable, Generic, Iterable, Optional, Type, TypeVar

import structlog
from pydantic import TypeAdapter, ValidationError

from fastfood_mcp.app.core.otel import get_tracer
from fastfood_mcp.app.core.parsing import parse_json_text
from fastfood_mcp.app.store.debounce import Debouncer
from fastfood_mcp.app.store.errors import (
    INVALID,
    MALFORMED,
    MISSING,
    UNREADABLE,
    FatalLoadError,
    StoreError,
    TransientReloadError,
)
from fastfood_mcp.app.store.events import (
    LOADED,
    RELOAD_FAILED,
    RELOADED,
    StoreEvent,
    StoreListener,
    StoreStatus,
    log_store_event,
)
from fastfood_mcp.app.store.notifier import ChangeNotifier, WatchdogNotifier
from fastfood_mcp.app.store.scheduling import BackgroundJobScheduler, Scheduler

T = TypeVar("T")

DEFAULT_DEBOUNCE_SECONDS = 0.1

logger = structlog.get_logger(__name__)


def typed_loader(shape: Any) -> Callable[[str], Any]:
    """Build a ``text -> shape`` loader using a pydantic TypeAdapter."""
    adapter = TypeAdapter(shape)

    def load(text: str) -> Any:
        return adapter.validate_python(parse_json_text(text))

    return load


def read_snapshot(path: Path, loader: Callable[[str], T], error_cls: Type[StoreError]) -> T:
    """Read and parse ``path`` once, mapping every failure to ``error_cls``."""
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise error_cls(path, MISSING) from None
    except (OSError, UnicodeDecodeError) as exc:
        raise error_cls(path, UNREADABLE, str(exc)) from exc

    try:
        snapshot = loader(text)
    except json.JSONDecodeError as exc:
        raise error_cls(path, MALFORMED, str(exc)) from exc
    except RecursionError as exc:
        raise error_cls(path, MALFORMED, "nesting too deep") from exc
    except ValidationError as exc:
        raise error_cls(path, INVALID, f"{exc.error_count()} validation error(s)") from exc
    except Exception as exc:
        # custom loaders may raise anything
        raise error_cls(path, INVALID, f"{type(exc).__name__}: {exc}") from exc

    if snapshot is None:
        raise error_cls(path, INVALID, "file deserialized to null")
    return snapshot


class ReloadingStore(Generic[T]):
    def __init__(
        self,
        path: Path | str,
        loader: Callable[[str], T],
        *,
        name: Optional[str] = None,
        notifier: Optional[ChangeNotifier] = None,
        scheduler: Optional[Scheduler] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        listeners: Iterable[StoreListener] = (log_store_event,),
    ) -> None:
        self.path = Path(path)
        self.name = name or self.path.stem
        self.status = StoreStatus()
        self._loader = loader
        self._listeners = list(listeners)
        self._reload_lock = threading.Lock()
        self._closed = False

        try:
            self._snapshot: T = self._read(FatalLoadError)
        except FatalLoadError as exc:
            logger.error("store_load_failed", store=self.name, path=str(self.path), reason=exc.reason, error=str(exc))
            raise
        self._emit(LOADED)

        self._owned_scheduler: Optional[BackgroundJobScheduler] = None
        if scheduler is None:
            scheduler = self._owned_scheduler = BackgroundJobScheduler()
        self._debouncer = Debouncer(self.reload, scheduler, debounce_seconds)
        self._notifier = notifier if notifier is not None else WatchdogNotifier(self.path)
        self._notifier.start(self._debouncer.notify)

    @classmethod
    def for_type(cls, path: Path | str, shape: Type[T] | Any, **kwargs: Any) -> "ReloadingStore[T]":
        return cls(path, typed_loader(shape), **kwargs)

    def current(self) -> T:
        """Latest published snapshot. Lock-free; treat the result as read-only."""
        return self._snapshot

    @property
    def debouncer(self) -> Debouncer:
        return self._debouncer

    def add_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def reload(self) -> bool:
        """Re-read the file and publish it if it parses. Returns True on publish.

        Runs on the scheduler thread after a debounced change; calls are
        serialized so an older parse can never overwrite a newer one.
        """
        with self._reload_lock:
            with get_tracer().start_as_current_span("store.reload") as span:
                span.set_attribute("store.name", self.name)
                try:
                    snapshot = self._read(TransientReloadError)
                except TransientReloadError as exc:
                    span.set_attribute("store.reload.outcome", "failed")
                    self._emit(RELOAD_FAILED, exc)
                    return False
                self._snapshot = snapshot
                span.set_attribute("store.reload.outcome", "published")
            self._emit(RELOADED)
            return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._notifier.stop()
        self._debouncer.close()
        if self._owned_scheduler is not None:
            self._owned_scheduler.shutdown()

    def __enter__(self) -> "ReloadingStore[T]":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _read(self, error_cls: Type[StoreError]) -> T:
        return read_snapshot(self.path, self._loader, error_cls)

    def _emit(self, kind: str, error: Optional[StoreError] = None) -> None:
        event = StoreEvent(kind=kind, store=self.name, path=self.path, error=error)
        self.status.apply(event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("store_listener_failed", store=self.name, event=kind)
