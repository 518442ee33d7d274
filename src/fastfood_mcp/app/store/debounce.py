from __future__ import annotations

import threading
from typing import Callable, Optional

import structlog

from fastfood_mcp.app.store.scheduling import Handle, Scheduler

logger = structlog.get_logger(__name__)

IDLE = "idle"
PENDING = "pending"
RELOADING = "reloading"
CLOSED = "closed"


class Debouncer:
    """Coalesces bursts of change notifications into serialized action runs.

    States move ``idle -> pending -> reloading -> idle``:

    * a notification while idle schedules the action after ``delay``;
    * a notification while pending restarts the delay;
    * a notification while reloading queues exactly one follow-up run, which
      goes through the pending delay again once the current run finishes.

    At most one action run is in flight at any time.
    """

    def __init__(self, action: Callable[[], None], scheduler: Scheduler, delay: float) -> None:
        self._action = action
        self._scheduler = scheduler
        self._delay = delay
        self._lock = threading.Lock()
        self._state = IDLE
        self._handle: Optional[Handle] = None
        self._generation = 0
        self._follow_up = False

    @property
    def state(self) -> str:
        return self._state

    @property
    def follow_up_queued(self) -> bool:
        return self._follow_up

    def notify(self) -> None:
        with self._lock:
            if self._state == CLOSED:
                return
            if self._state == RELOADING:
                self._follow_up = True
                return
            if self._handle is not None:
                self._handle.cancel()
            self._schedule_locked()

    def close(self) -> None:
        with self._lock:
            self._state = CLOSED
            self._follow_up = False
            handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _schedule_locked(self) -> None:
        self._generation += 1
        generation = self._generation
        self._state = PENDING
        self._handle = self._scheduler.call_later(self._delay, lambda: self._fire(generation))

    def _fire(self, generation: int) -> None:
        with self._lock:
            # a cancelled timer can still fire; only the latest one counts
            if self._state != PENDING or generation != self._generation:
                return
            self._state = RELOADING
            self._handle = None

        try:
            self._action()
        except Exception:
            logger.exception("debounced_action_failed")

        with self._lock:
            if self._state == CLOSED:
                return
            if self._follow_up:
                self._follow_up = False
                self._schedule_locked()
            else:
                self._state = IDLE
