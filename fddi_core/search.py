from __future__ import annotations

from dataclasses import dataclass

from .schemas import BaseSchema, iter_records


# Scores for whole-name matches; scattered-letter matches score lower.
EXACT_SCORE = 1.0
PREFIX_SCORE = 0.9
CONTAINS_SCORE = 0.7
SEQUENCE_WEIGHT = 0.6
SEQUENCE_THRESHOLD = 0.2


@dataclass(frozen=True)
class SearchMatch:
    path: str
    record: BaseSchema
    name: str
    score: float


def _sequence_score(text: str, query: str) -> float:
    if not text or not query:
        return 0.0
    matched = 0
    for char in text:
        if matched == len(query):
            break
        if char == query[matched]:
            matched += 1
    # Shorter names are more specific matches.
    return (matched / len(query)) * min(1.0, len(query) / len(text))


def match_score(name: str, query: str) -> float:
    """Score between 0 (no match) and 1 (exact match, ignoring case)."""
    name = name.lower()
    query = query.strip().lower()
    if not query:
        return 0.0
    if name == query:
        return EXACT_SCORE
    if name.startswith(query):
        return PREFIX_SCORE
    if query in name:
        return CONTAINS_SCORE
    score = _sequence_score(name, query)
    return score * SEQUENCE_WEIGHT if score > SEQUENCE_THRESHOLD else 0.0


def search_records(record: BaseSchema, query: str, limit: int | None = None) -> list[SearchMatch]:
    """Find named records in a tree whose name matches ``query``.

    Args:
        record: Root of the tree to search
        query: Text to look for; surrounding whitespace and case are ignored
        limit: Maximum number of matches to return

    Returns:
        Matches ordered by descending score, ties kept in tree order
    """
    if not query.strip():
        return []

    matches: list[SearchMatch] = []
    for path, node in iter_records(record):
        name = getattr(node, "name", None)
        if not isinstance(name, str):
            continue
        score = match_score(name, query)
        if score > 0:
            matches.append(SearchMatch(path=path, record=node, name=name, score=score))

    matches.sort(key=lambda match: match.score, reverse=True)
    if limit is not None:
        return matches[:limit]
    return matches
