"""Completion, target date and lateness roll-up over a record tree."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date

from .schemas import (
    Activity,
    Aspect,
    AspectInfo,
    BaseSchema,
    Feature,
    Program,
    Progress,
    Project,
    Subject,
)


def child_nodes(record: BaseSchema) -> list[BaseSchema]:
    """Direct children of a node in the planning hierarchy."""
    if isinstance(record, Program):
        return [*(record.programs or []), *(record.projects or [])]
    if isinstance(record, Project):
        return list(record.aspects or [])
    if isinstance(record, Aspect):
        return list(record.subjects or [])
    if isinstance(record, Subject):
        return list(record.activities or [])
    if isinstance(record, Activity):
        return list(record.features or [])
    return []


def feature_completion(feature: Feature, aspect_info: AspectInfo | None) -> int:
    """Sum the effort of every completed milestone, capped at 100.

    Milestones are matched to the aspect's milestone definitions by position.
    """
    if not feature.milestones or aspect_info is None or not aspect_info.milestone_info:
        return 0
    total = 0
    for milestone, info in zip(feature.milestones, aspect_info.milestone_info):
        if milestone.status == "complete":
            total += info.effort
    return min(total, 100)


def _store_completion(record: BaseSchema, completion: int) -> None:
    current = getattr(record, "progress", None)
    if current is None:
        progress = Progress(completion=completion)
    else:
        progress = current.model_copy(update={"completion": completion})
    setattr(record, "progress", progress)


def rollup(record: BaseSchema, aspect_info: AspectInfo | None = None) -> int:
    """Recompute completion for every node under ``record``.

    Features score by milestone effort; every other node takes the integer
    mean of its children, or 0 when it has none.

    Args:
        record: Root node to recompute
        aspect_info: Milestone definitions used for features when ``record``
            sits below an aspect that is not part of the walk

    Returns:
        Completion percent of ``record``
    """
    if isinstance(record, Aspect) and record.info is not None:
        aspect_info = record.info

    if isinstance(record, Feature):
        completion = feature_completion(record, aspect_info)
    else:
        completions = [rollup(child, aspect_info) for child in child_nodes(record)]
        completion = sum(completions) // len(completions) if completions else 0

    _store_completion(record, completion)
    return completion


def target_date(record: BaseSchema) -> date | None:
    """Latest planned milestone date anywhere under ``record``."""
    if isinstance(record, Feature):
        planned = [m.planned for m in record.milestones or [] if m.planned is not None]
        return max(planned) if planned else None
    dates = [d for d in (target_date(child) for child in child_nodes(record)) if d is not None]
    return max(dates) if dates else None


def is_late(record: BaseSchema, today: date | None = None) -> bool:
    """Feature: an open milestone is overdue. Other nodes: unfinished past ``target_date``."""
    today = today or date.today()
    if isinstance(record, Feature):
        return any(
            m.planned is not None and m.planned < today and m.status != "complete"
            for m in record.milestones or []
        )
    target = target_date(record)
    if target is None or target >= today:
        return False
    progress = getattr(record, "progress", None)
    completion = progress.completion if progress is not None else 0
    return completion != 100


def outline(record: BaseSchema, depth: int = 0) -> Iterator[tuple[int, BaseSchema]]:
    """Yield (depth, node) for the planning hierarchy in display order."""
    yield depth, record
    for child in child_nodes(record):
        yield from outline(child, depth + 1)
