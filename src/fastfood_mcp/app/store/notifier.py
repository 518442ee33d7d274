from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, Protocol

import structlog
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = structlog.get_logger(__name__)


class ChangeNotifier(Protocol):
    """Calls back whenever the watched file may have changed."""

    def start(self, callback: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...


class _SingleFileHandler(FileSystemEventHandler):
    """Forwards events that touch one file name inside the watched directory.

    Editors often save by writing a temp file and renaming it over the
    target, so moves onto the file count as changes too.
    """

    def __init__(self, path: Path, callback: Callable[[], None]) -> None:
        super().__init__()
        self.path = path
        self.callback = callback

    def _matches(self, raw: Optional[str]) -> bool:
        if not raw:
            return False
        if isinstance(raw, bytes):
            raw = os.fsdecode(raw)
        return Path(raw).name == self.path.name

    def _handle_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if self._matches(event.src_path) or self._matches(getattr(event, "dest_path", None)):
            logger.debug("file_change_detected", path=str(self.path), event=event.event_type)
            self.callback()

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle_event(event)


class WatchdogNotifier:
    """Watches the file's parent directory (non-recursive) with a watchdog observer."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).resolve()
        self._observer: Optional[Observer] = None

    def start(self, callback: Callable[[], None]) -> None:
        if self._observer is not None:
            return
        handler = _SingleFileHandler(self.path, callback)
        observer = Observer()
        observer.daemon = True
        observer.schedule(handler, str(self.path.parent), recursive=False)
        observer.start()
        self._observer = observer
        logger.debug("file_watcher_started", path=str(self.path))

    def stop(self) -> None:
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=5)
        logger.debug("file_watcher_stopped", path=str(self.path))
