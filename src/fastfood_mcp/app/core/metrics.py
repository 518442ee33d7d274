from __future__ import annotations

import time
from contextlib import contextmanager

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

STORE_EVENTS = Counter(
    "fastfood_store_events_total",
    "Data store loads and reloads",
    labelnames=("store", "kind"),
)
TOOL_CALLS = Counter(
    "fastfood_tool_calls_total",
    "Tool invocations",
    labelnames=("tool", "outcome"),
)
TOOL_LATENCY = Histogram(
    "fastfood_tool_latency_seconds",
    "Latency of tool invocations",
    labelnames=("tool",),
)
SUGGESTIONS = Counter(
    "fastfood_suggestions_total",
    "Did-you-mean hints served on lookup misses",
    labelnames=("tool", "found"),
)


@contextmanager
def record_latency(tool: str):
    start = time.time()
    try:
        yield
    finally:
        TOOL_LATENCY.labels(tool=tool).observe(time.time() - start)


def record_tool_call(tool: str, outcome: str) -> None:
    TOOL_CALLS.labels(tool=tool, outcome=outcome).inc()


def record_store_event(store: str, kind: str) -> None:
    STORE_EVENTS.labels(store=store, kind=kind).inc()


def record_suggestions(tool: str, count: int) -> None:
    SUGGESTIONS.labels(tool=tool, found="yes" if count else "no").inc()


def render_latest() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
