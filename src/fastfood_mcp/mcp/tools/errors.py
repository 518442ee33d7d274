from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import structlog

from fastfood_mcp.app.core.fuzzy import DEFAULT_MIN_SCORE, DEFAULT_TOP_N, fuzzy_contains
from fastfood_mcp.app.schemas.catalog import ErrorCatalog, ErrorEntry
from fastfood_mcp.app.schemas.requests import ExplainErrorRequest, SearchErrorsRequest, SuggestFixRequest
from fastfood_mcp.app.store.reloading import ReloadingStore
from fastfood_mcp.mcp.errors import not_found, parse_request

logger = structlog.get_logger(__name__)

TITLE_FUZZY_THRESHOLD = 0.5
DEFAULT_SEARCH_LIMIT_CAP = 50


def _resolve(catalog: ErrorCatalog, code: str) -> Optional[Tuple[str, ErrorEntry]]:
    upper = code.upper()
    entry = catalog.get(upper)
    if entry is not None:
        return upper, entry
    lower = code.lower()
    for key, value in catalog.items():
        if key.lower() == lower:
            return key, value
    return None


def _lookup(
    store: ReloadingStore[ErrorCatalog], code: str, tool: str, top_n: int, min_score: float
) -> Tuple[str, ErrorEntry]:
    catalog = store.current()
    found = _resolve(catalog, code)
    if found is None:
        raise not_found("Error code", code, catalog.keys(), tool=tool, top_n=top_n, min_score=min_score)
    return found


def explain_error(
    store: ReloadingStore[ErrorCatalog],
    code: str,
    service: Optional[str] = None,
    trace_id: Optional[str] = None,
    *,
    top_n: int = DEFAULT_TOP_N,
    min_score: float = DEFAULT_MIN_SCORE,
) -> Dict[str, Any]:
    req = parse_request(ExplainErrorRequest, code=code, service=service, trace_id=trace_id)
    logger.info("explain_error", code=req.code, service=req.service, trace_id=req.trace_id)

    key, entry = _lookup(store, req.code, "explain_error", top_n, min_score)
    return {
        "code": key,
        "title": entry.title,
        "severity": entry.severity,
        "services": list(entry.services),
        "likelyCauses": list(entry.causes),
        "recommendedSteps": list(entry.fix),
        "references": [{"label": link.label, "url": link.url} for link in entry.links],
    }


def search_errors(
    store: ReloadingStore[ErrorCatalog],
    query: str,
    limit: int = 10,
    *,
    limit_cap: int = DEFAULT_SEARCH_LIMIT_CAP,
) -> List[Dict[str, Any]]:
    """Keyword search over codes, titles and message patterns, sorted by code."""
    req = parse_request(SearchErrorsRequest, query=query, limit=limit)
    q = req.query.lower()
    limit = min(max(req.limit, 1), limit_cap)

    catalog = store.current()
    results: List[Dict[str, Any]] = []
    for code in sorted(catalog):
        entry = catalog[code]
        if (
            q in code.lower()
            or q in entry.title.lower()
            or any(q in pattern.lower() for pattern in entry.message_patterns)
            or fuzzy_contains(entry.title, q, TITLE_FUZZY_THRESHOLD)
        ):
            results.append({"code": code, "title": entry.title, "severity": entry.severity})
            if len(results) >= limit:
                break

    logger.info("search_errors", query=req.query, results=len(results))
    return results


def suggest_fix(
    store: ReloadingStore[ErrorCatalog],
    code: str,
    *,
    top_n: int = DEFAULT_TOP_N,
    min_score: float = DEFAULT_MIN_SCORE,
) -> List[Dict[str, str]]:
    req = parse_request(SuggestFixRequest, code=code)
    logger.info("suggest_fix", code=req.code)

    _, entry = _lookup(store, req.code, "suggest_fix", top_n, min_score)
    return [{"step": step} for step in entry.fix]
