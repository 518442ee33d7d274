import json
import shutil
from pathlib import Path
from typing import Any, Callable, List, Optional

import pytest

from fastfood_mcp.app.container import build_stores
from fastfood_mcp.app.core.config import load_settings

SAMPLE_DATA = Path(__file__).resolve().parent.parent / "data"


class ManualHandle:
    def __init__(self, delay: float, func: Callable[[], None]) -> None:
        self.delay = delay
        self.func = func
        self.cancelled = False
        self.ran = False

    def cancel(self) -> None:
        self.cancelled = True

    def run(self) -> None:
        self.ran = True
        self.func()


class ManualScheduler:
    """Scheduler that only runs callbacks when the test says so."""

    def __init__(self) -> None:
        self.handles: List[ManualHandle] = []

    def call_later(self, delay: float, func: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(delay, func)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[ManualHandle]:
        return [h for h in self.handles if not h.cancelled and not h.ran]

    def run_pending(self) -> int:
        # callbacks scheduled while running wait for the next call
        due = self.pending
        for handle in due:
            handle.run()
        return len(due)


class ManualNotifier:
    """Change notifier driven by ``fire()`` instead of the filesystem."""

    def __init__(self) -> None:
        self.callback: Optional[Callable[[], None]] = None
        self.stopped = False

    def start(self, callback: Callable[[], None]) -> None:
        self.callback = callback

    def stop(self) -> None:
        self.stopped = True

    def fire(self, times: int = 1) -> None:
        assert self.callback is not None, "notifier was never started"
        for _ in range(times):
            self.callback()


def write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def notifier() -> ManualNotifier:
    return ManualNotifier()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    for name in ("errors.json", "system.json", "flags.json"):
        shutil.copy(SAMPLE_DATA / name, tmp_path / name)
    return tmp_path


@pytest.fixture
def settings(data_dir: Path, monkeypatch):
    monkeypatch.delenv("FASTFOOD_CONFIG", raising=False)
    return load_settings(data_dir=data_dir)


@pytest.fixture
def notifiers():
    """Path -> ManualNotifier for every store built by the ``stores`` fixture."""
    return {}


@pytest.fixture
def stores(settings, scheduler, notifiers):
    def factory(path: Path) -> ManualNotifier:
        notifiers[path.name] = ManualNotifier()
        return notifiers[path.name]

    built = build_stores(settings, scheduler=scheduler, notifier_factory=factory)
    yield built
    built.close()
