from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import structlog

from fastfood_mcp.app.core.fuzzy import DEFAULT_MIN_SCORE, DEFAULT_TOP_N, did_you_mean, suggest
from fastfood_mcp.app.core.metrics import record_suggestions
from fastfood_mcp.app.schemas.catalog import ServiceEntry, SystemData
from fastfood_mcp.app.schemas.requests import (
    FindEndpointRequest,
    GetServiceRequest,
    ListDependenciesRequest,
    ServiceOwnerRequest,
)
from fastfood_mcp.app.store.reloading import ReloadingStore
from fastfood_mcp.mcp.errors import InvalidParamsError, parse_request

logger = structlog.get_logger(__name__)

DIRECTIONS = ("inbound", "outbound")


def _resolve(services: Dict[str, ServiceEntry], name: str) -> Optional[Tuple[str, ServiceEntry]]:
    lower = name.lower()
    entry = services.get(lower)
    if entry is not None:
        return lower, entry
    for key, value in services.items():
        if key.lower() == lower:
            return key, value
    return None


def _service_payload(name: str, service: ServiceEntry) -> Dict[str, Any]:
    return {
        "name": name,
        "description": service.description,
        "owners": list(service.owners),
        "repo": service.repo,
        "language": service.language,
        "dependsOn": list(service.depends_on),
        "api": [{"method": e.method, "path": e.path, "auth": e.auth} for e in service.api],
    }


def get_service(
    store: ReloadingStore[SystemData],
    name: str,
    *,
    top_n: int = DEFAULT_TOP_N,
    min_score: float = DEFAULT_MIN_SCORE,
) -> Dict[str, Any]:
    """Service metadata; an unknown name yields a placeholder with suggestions."""
    req = parse_request(GetServiceRequest, name=name)
    logger.info("get_service", name=req.name)

    services = store.current().services
    found = _resolve(services, req.name)
    if found is not None:
        return _service_payload(*found)

    suggestions = suggest(req.name, sorted(services), top_n=top_n, min_score=min_score)
    record_suggestions("get_service", len(suggestions))
    return {
        "name": req.name,
        "description": f"Service '{req.name}' not found.{did_you_mean(suggestions)}",
        "owners": [],
        "repo": None,
        "language": None,
        "dependsOn": [],
        "api": [],
    }


def _neighbours(services: Dict[str, ServiceEntry], name: str, direction: str) -> List[str]:
    if direction == "outbound":
        found = _resolve(services, name)
        return list(found[1].depends_on) if found else []
    lower = name.lower()
    return [key for key, entry in services.items() if any(d.lower() == lower for d in entry.depends_on)]


def list_dependencies(
    store: ReloadingStore[SystemData],
    name: str,
    direction: str = "outbound",
    depth: int = 1,
) -> List[Dict[str, str]]:
    """Services this one depends on (outbound) or that depend on it (inbound).

    ``depth`` > 1 follows the graph transitively; the service itself is never
    reported, and cycles are visited once.
    """
    req = parse_request(ListDependenciesRequest, name=name, direction=direction, depth=depth)
    direction = req.direction.lower()
    logger.info("list_dependencies", name=req.name, direction=direction, depth=req.depth)
    if direction not in DIRECTIONS:
        raise InvalidParamsError(f"Invalid direction '{req.direction}'. Must be 'inbound' or 'outbound'.")

    services = store.current().services
    found = _resolve(services, req.name)
    if found is None:
        logger.warning("service_not_found", name=req.name)
        return []

    root = found[0]
    seen = {root.lower()}
    names: List[str] = []
    frontier = [root]
    for _ in range(req.depth):
        next_frontier: List[str] = []
        for current in frontier:
            for dep in _neighbours(services, current, direction):
                if dep.lower() in seen:
                    continue
                seen.add(dep.lower())
                names.append(dep)
                next_frontier.append(dep)
        if not next_frontier:
            break
        frontier = next_frontier

    return [{"name": n} for n in sorted(names)]


def find_endpoint(store: ReloadingStore[SystemData], name: str, path: Optional[str] = None) -> List[Dict[str, Any]]:
    req = parse_request(FindEndpointRequest, name=name, path=path)
    logger.info("find_endpoint", name=req.name, path=req.path)

    found = _resolve(store.current().services, req.name)
    if found is None:
        logger.warning("service_not_found", name=req.name)
        return []

    endpoints = list(found[1].api)
    if req.path:
        needle = req.path.lower()
        endpoints = [e for e in endpoints if needle in e.path.lower()]

    endpoints.sort(key=lambda e: (e.path, e.method))
    return [{"method": e.method, "path": e.path, "auth": e.auth, "examples": []} for e in endpoints]


def service_owner(store: ReloadingStore[SystemData], name: str) -> Dict[str, Optional[str]]:
    """Contact details of the service's first listed owner."""
    req = parse_request(ServiceOwnerRequest, name=name)
    logger.info("service_owner", name=req.name)

    data = store.current()
    found = _resolve(data.services, req.name)
    if found is None:
        logger.warning("service_not_found", name=req.name)
        return _owner_placeholder(f"Service '{req.name}' not found.")

    service = found[1]
    if not service.owners:
        logger.warning("service_has_no_owners", name=req.name)
        return _owner_placeholder(f"Service '{req.name}' has no owners defined.")

    owner_key = service.owners[0]
    owner = data.owners.get(owner_key)
    if owner is None:
        return _owner_placeholder(owner_key)
    return {"team": owner.team, "slack": owner.slack, "pager": owner.pager, "runbook": owner.runbook}


def _owner_placeholder(team: str) -> Dict[str, Optional[str]]:
    return {"team": team, "slack": None, "pager": None, "runbook": None}
