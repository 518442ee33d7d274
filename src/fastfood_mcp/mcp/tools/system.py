from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastfood_mcp.app.container import DataStores


def _utc_iso(ts: Optional[float]) -> Optional[str]:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def health(stores: DataStores, server: str = "fastfood-mcp", version: str = "0.1.0") -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    report: Dict[str, Any] = {}
    degraded = False
    for name, store in stores.all().items():
        status = store.status
        degraded = degraded or status.last_reload_failed
        report[name] = {
            "path": str(store.path),
            "loadedAt": _utc_iso(status.loaded_at),
            "reloads": status.reloads,
            "failures": status.failures,
            "lastError": status.last_error,
        }
    return {
        "status": "degraded" if degraded else "healthy",
        "server": server,
        "version": version,
        "timestamp": now.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "stores": report,
    }
