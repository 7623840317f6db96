"""
Persistent storage for the user's personal schedule.

This module manages the file:

    data/schedule.json

It holds a JSON list of schedule entries (see model.ScheduleCourse).
The entry id ("CSE 2050-001") is unique: adding the same section twice
is an error, not a silent no-op.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from catalogsync.config import DATA_DIR
from catalogsync.errors import DuplicateCourseError
from catalogsync.model import ScheduleCourse

logger = logging.getLogger(__name__)


def _default_schedule_path() -> Path:
    """
    Return the default path of schedule.json inside the package.

    Using a function instead of a constant lets tests pass their own path.
    """
    return DATA_DIR / "schedule.json"


def load_schedule(path: str | Path | None = None) -> List[ScheduleCourse]:
    """
    Load all schedule entries.

    Returns an empty list if the file does not exist or is invalid.
    """
    schedule_path = Path(path) if path is not None else _default_schedule_path()

    # First run: nothing scheduled yet
    if not schedule_path.exists():
        return []

    try:
        data = json.loads(schedule_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.error("Error retrieving courses from %s: %s", schedule_path, exc)
        return []

    if not isinstance(data, list):
        return []
    return [ScheduleCourse.from_dict(x) for x in data if isinstance(x, dict)]


def save_schedule(courses: List[ScheduleCourse], path: str | Path | None = None) -> None:
    """
    Write all schedule entries, creating parent directories if needed.
    """
    schedule_path = Path(path) if path is not None else _default_schedule_path()
    schedule_path.parent.mkdir(parents=True, exist_ok=True)

    payload = [c.to_dict() for c in courses]
    schedule_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def add_course(course: ScheduleCourse, path: str | Path | None = None) -> None:
    """
    Append one entry.

    Raises:
        DuplicateCourseError: if an entry with the same id exists.
    """
    courses = load_schedule(path)
    if any(c.id == course.id for c in courses):
        raise DuplicateCourseError(course.id)
    courses.append(course)
    save_schedule(courses, path)


def remove_course(course_id: str, path: str | Path | None = None) -> bool:
    """
    Remove the entry with course_id. Returns False if it was not scheduled.
    """
    courses = load_schedule(path)
    kept = [c for c in courses if c.id != course_id]
    if len(kept) == len(courses):
        return False
    save_schedule(kept, path)
    return True


def used_colors(path: str | Path | None = None) -> List[str]:
    return [c.color for c in load_schedule(path) if c.color]
