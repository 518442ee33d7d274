from __future__ import annotations

from typing import Any, Iterable, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from fastfood_mcp.app.core.fuzzy import DEFAULT_MIN_SCORE, DEFAULT_TOP_N, did_you_mean, suggest
from fastfood_mcp.app.core.metrics import record_suggestions

M = TypeVar("M", bound=BaseModel)


class ToolError(Exception):
    """Base class for errors reported back to the calling client."""


class ToolNotFoundError(ToolError):
    pass


class InvalidParamsError(ToolError):
    pass


class NotFoundError(ToolError):
    def __init__(self, kind: str, key: str, suggestions: List[str]) -> None:
        self.kind = kind
        self.key = key
        self.suggestions = suggestions
        super().__init__(f"{kind} '{key}' not found.{did_you_mean(suggestions)}")


def not_found(
    kind: str,
    key: str,
    candidates: Iterable[str],
    *,
    tool: str,
    top_n: int = DEFAULT_TOP_N,
    min_score: float = DEFAULT_MIN_SCORE,
) -> NotFoundError:
    """Build a NotFoundError carrying near-miss suggestions for ``key``."""
    suggestions = suggest(key, sorted(candidates), top_n=top_n, min_score=min_score)
    record_suggestions(tool, len(suggestions))
    return NotFoundError(kind, key, suggestions)


def parse_request(model: Type[M], **values: Any) -> M:
    try:
        return model(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidParamsError(f"Invalid parameters: {problems}") from exc
