from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog

from fastfood_mcp.app.core.fuzzy import DEFAULT_MIN_SCORE, DEFAULT_TOP_N
from fastfood_mcp.app.schemas.catalog import FeatureFlag, FlagsData
from fastfood_mcp.app.schemas.requests import FlagStatusRequest, GetFlagRequest, ListFlagsRequest
from fastfood_mcp.app.store.reloading import ReloadingStore
from fastfood_mcp.mcp.errors import not_found, parse_request

logger = structlog.get_logger(__name__)


def _find_flag(data: FlagsData, key: str, tool: str, top_n: int, min_score: float) -> FeatureFlag:
    lower = key.lower()
    for flag in data.flags:
        if flag.key.lower() == lower:
            return flag
    raise not_found("Feature flag", key, (f.key for f in data.flags), tool=tool, top_n=top_n, min_score=min_score)


def list_flags(store: ReloadingStore[FlagsData], service: Optional[str] = None) -> List[Dict[str, Optional[str]]]:
    req = parse_request(ListFlagsRequest, service=service)
    logger.info("list_flags", service=req.service)

    flags = list(store.current().flags)
    if req.service:
        wanted = req.service.lower()
        flags = [f for f in flags if (f.service or "").lower() == wanted]
    flags.sort(key=lambda f: f.key)
    return [{"key": f.key, "service": f.service, "type": f.type} for f in flags]


def get_flag(
    store: ReloadingStore[FlagsData],
    key: str,
    *,
    top_n: int = DEFAULT_TOP_N,
    min_score: float = DEFAULT_MIN_SCORE,
) -> Dict[str, Any]:
    req = parse_request(GetFlagRequest, key=key)
    logger.info("get_flag", key=req.key)

    flag = _find_flag(store.current(), req.key, "get_flag", top_n, min_score)
    return {
        "key": flag.key,
        "service": flag.service,
        "type": flag.type,
        "default": flag.default,
        "variants": list(flag.variants) if flag.variants is not None else None,
        "owners": list(flag.owners),
        "description": flag.description,
        "environments": dict(flag.environments),
    }


def flag_status(
    store: ReloadingStore[FlagsData],
    key: str,
    environment: str,
    *,
    top_n: int = DEFAULT_TOP_N,
    min_score: float = DEFAULT_MIN_SCORE,
) -> Dict[str, Any]:
    """Value of a flag in one environment, falling back to the flag default."""
    req = parse_request(FlagStatusRequest, key=key, environment=environment)
    logger.info("flag_status", key=req.key, environment=req.environment)

    flag = _find_flag(store.current(), req.key, "flag_status", top_n, min_score)
    envs = flag.environments
    env_key = req.environment.lower()
    if env_key not in envs:
        env_key = next((k for k in envs if k.lower() == env_key), None)

    if env_key is None:
        logger.warning("flag_environment_missing", key=req.key, environment=req.environment)
        return {"key": flag.key, "environment": req.environment, "value": flag.default, "source": "default"}
    return {"key": flag.key, "environment": req.environment, "value": envs[env_key], "source": "environment"}
