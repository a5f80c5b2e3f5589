"""
Import of task outlines exported from MS Project as CSV.

Each row is ``outline level, task name, percent complete, finish[, resource]``.
The subtree below the task named "Develop" becomes one Aspect of a new
Project: the next three outline levels map to Subjects, Activities and
Features, deeper rows are ignored, and the first row back at or above the
"Develop" level ends the import.
"""

from __future__ import annotations

import csv
import logging
import re
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path

from .errors import DecodeError
from .schemas import (
    Activity,
    Aspect,
    AspectInfo,
    Feature,
    Milestone,
    MilestoneInfo,
    Project,
    Status,
    Subject,
)


logger = logging.getLogger(__name__)

ROOT_TASK_NAME = "Develop"
DEFAULT_PROJECT_NAME = "Imported Project"

# Name and percent effort of each milestone every imported feature carries.
STANDARD_MILESTONES: tuple[tuple[str, int], ...] = (
    ("Domain Walkthrough", 1),
    ("Design", 40),
    ("Design Inspection", 3),
    ("Code", 45),
    ("Code Inspection", 10),
    ("Promote to Build", 1),
)

# Finish column looks like "Mon 03/16/26".
_FINISH_FORMAT = "%m/%d/%y"


def standard_aspect_info() -> AspectInfo:
    return AspectInfo(
        milestone_info=[
            MilestoneInfo(name=name, effort=effort) for name, effort in STANDARD_MILESTONES
        ]
    )


def standard_milestones(percent_complete: int, planned: date | None) -> list[Milestone]:
    """Six standard milestones, complete up to the share ``percent_complete`` covers."""
    milestones: list[Milestone] = []
    reached = 0
    for _, effort in STANDARD_MILESTONES:
        reached += effort
        status: Status = "complete" if percent_complete >= reached else "notstarted"
        milestones.append(Milestone(planned=planned, status=status))
    return milestones


def _parse_percent(text: str, line: int) -> int:
    try:
        return int(text.strip().rstrip("%"))
    except ValueError:
        raise DecodeError(f"Line {line}: invalid percent complete {text!r}") from None


def _parse_finish(row: list[str], line: int) -> date | None:
    if len(row) < 4 or not row[3].strip():
        return None
    text = row[3].strip()
    # Drop the leading weekday abbreviation.
    if not text[:1].isdigit():
        text = text[4:].strip()
    try:
        return datetime.strptime(text, _FINISH_FORMAT).date()
    except ValueError:
        raise DecodeError(f"Line {line}: invalid finish date {row[3]!r}") from None


def _owner_initials(owner: str) -> str | None:
    parts = re.split(r"\W", owner.strip(), maxsplit=1)
    return parts[0] or None


def read_outline_csv(lines: Iterable[str], project_name: str = DEFAULT_PROJECT_NAME) -> Project:
    """Build a Project from the rows of an MS Project CSV export.

    Args:
        lines: CSV text, one row per item
        project_name: Name given to the new Project

    Returns:
        Project holding one Aspect for the "Develop" subtree

    Raises:
        DecodeError: If no "Develop" row exists or a row is malformed
        ValueError: If ``project_name`` is blank
    """
    project: Project | None = None
    aspect: Aspect | None = None
    subject: Subject | None = None
    activity: Activity | None = None
    root_level = 0

    try:
        rows = list(csv.reader(lines))
    except csv.Error as exc:
        raise DecodeError(f"Malformed CSV outline: {exc}") from exc

    for line, row in enumerate(rows, start=1):
        if not row or not row[0][:1].isdigit():
            continue
        if len(row) < 3:
            raise DecodeError(f"Line {line}: expected at least 3 columns, got {len(row)}")

        try:
            level = int(row[0])
        except ValueError:
            raise DecodeError(f"Line {line}: invalid outline level {row[0]!r}") from None
        name = row[1].strip()

        if project is None:
            if name.lower() != ROOT_TASK_NAME.lower():
                continue
            root_level = level
        elif level <= root_level:
            break
        elif level >= root_level + 4:
            logger.debug("Skipping line %d below feature level: %s", line, name)
            continue

        percent = _parse_percent(row[2], line)
        owner = row[4].strip() if len(row) > 4 else ""

        depth = level - root_level
        if depth == 0:
            project = Project(
                name=project_name,
                aspects=[Aspect(name=name, info=standard_aspect_info(), subjects=[])],
            )
            aspect = project.aspects[0] if project.aspects else None
        elif depth == 1:
            if aspect is None or aspect.subjects is None:
                raise DecodeError(f"Line {line}: subject {name!r} has no aspect above it")
            subject = Subject(name=name, activities=[])
            aspect.subjects.append(subject)
            activity = None
        elif depth == 2:
            if subject is None or subject.activities is None:
                raise DecodeError(f"Line {line}: activity {name!r} has no subject above it")
            activity = Activity(name=name, initials=_owner_initials(owner), features=[])
            subject.activities.append(activity)
        else:
            if activity is None or activity.features is None:
                raise DecodeError(f"Line {line}: feature {name!r} has no activity above it")
            activity.features.append(
                Feature(
                    name=name,
                    initials=owner or None,
                    milestones=standard_milestones(percent, _parse_finish(row, line)),
                )
            )

    if project is None:
        raise DecodeError(f"No {ROOT_TASK_NAME!r} task found in outline")
    return project


def load_outline_csv(csv_path: str | Path, project_name: str = DEFAULT_PROJECT_NAME) -> Project:
    """Read an MS Project CSV export from disk; see ``read_outline_csv``."""
    try:
        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            return read_outline_csv(f, project_name)
    except UnicodeDecodeError as exc:
        raise DecodeError(f"{csv_path} is not UTF-8 text: {exc}") from exc
