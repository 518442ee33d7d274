from __future__ import annotations

import re as _re
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")

_WORD_SPLIT = _re.compile(r"[ \-_.]+")

DEFAULT_TOP_N = 3
DEFAULT_MIN_SCORE = 0.3
DEFAULT_CONTAINS_THRESHOLD = 0.6


@dataclass(frozen=True)
class Match(Generic[T]):
    item: T
    score: float


def distance(a: str, b: str) -> int:
    """Levenshtein distance between ``a`` and ``b``, ignoring case."""
    a = (a or "").lower()
    b = (b or "").lower()
    if not a:
        return len(b)
    if not b:
        return len(a)

    rows, cols = len(a) + 1, len(b) + 1
    table = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,
                table[i][j - 1] + 1,
                table[i - 1][j - 1] + cost,
            )
    return table[-1][-1]


def similarity(a: str, b: str) -> float:
    """Score in [0, 1]; 1.0 means equal ignoring case, empty input scores 0.0."""
    if not a or not b:
        return 0.0
    # lower() can change the length, so measure the strings distance compares
    a, b = a.lower(), b.lower()
    longest = max(len(a), len(b))
    return min(1.0, max(0.0, 1.0 - distance(a, b) / longest))


def rank(
    query: str,
    candidates: Iterable[T],
    key: Optional[Callable[[T], str]] = None,
    top_n: int = DEFAULT_TOP_N,
    min_score: float = DEFAULT_MIN_SCORE,
) -> List[Match[T]]:
    """Return at most ``top_n`` candidates scoring ``>= min_score``, best first.

    Ties keep the candidates' input order; callers that need a deterministic
    order pre-sort the candidates.
    """
    if not query or top_n <= 0:
        return []
    key = key or str
    scored = [Match(item=c, score=similarity(query, key(c))) for c in candidates]
    kept = [m for m in scored if m.score >= min_score]
    kept.sort(key=lambda m: m.score, reverse=True)
    return kept[:top_n]


def suggest(
    query: str,
    candidates: Iterable[str],
    top_n: int = DEFAULT_TOP_N,
    min_score: float = DEFAULT_MIN_SCORE,
) -> List[str]:
    return [m.item for m in rank(query, candidates, top_n=top_n, min_score=min_score)]


def fuzzy_contains(text: str, query: str, threshold: float = DEFAULT_CONTAINS_THRESHOLD) -> bool:
    """Approximate "does ``text`` mention ``query``" check for free-text search."""
    if not text or not query:
        return False
    if query.lower() in text.lower():
        return True
    if similarity(text, query) >= threshold:
        return True
    words = [w for w in _WORD_SPLIT.split(text) if w]
    return any(similarity(w, query) >= threshold for w in words)


def did_you_mean(suggestions: List[str]) -> str:
    if not suggestions:
        return ""
    return f" Did you mean: {', '.join(suggestions)}?"
