from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs a callable once after a delay, off the caller's thread."""

    def call_later(self, delay: float, func: Callable[[], None]) -> Handle: ...


class _JobHandle:
    def __init__(self, job) -> None:
        self._job = job

    def cancel(self) -> None:
        try:
            self._job.remove()
        except JobLookupError:
            # already ran or removed
            pass


class BackgroundJobScheduler:
    """APScheduler-backed one-shot scheduler shared by the data stores."""

    def __init__(self) -> None:
        self.scheduler = BackgroundScheduler(timezone="UTC")
        self._started = False

    def start(self) -> None:
        if not self._started:
            self.scheduler.start()
            self._started = True

    def call_later(self, delay: float, func: Callable[[], None]) -> Handle:
        self.start()
        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(0.0, delay))
        job = self.scheduler.add_job(func, "date", run_date=run_date, misfire_grace_time=None)
        return _JobHandle(job)

    def shutdown(self) -> None:
        if self._started:
            self.scheduler.shutdown(wait=False)
            self._started = False
