"""
Central data model definitions used across the project.

This module defines the canonical structure of scraped catalog data and
of personal schedule entries so that:
- scraping, caching and the CLI share the same field names
- the JSON form stored in the cache matches what the mobile client reads
  (camelCase keys such as "sectionNumber" and "lastUpdated")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CourseSummary:
    """
    One course from a subject page, e.g. ("CSE 2050", "Data Structures and Algorithms").
    """

    code: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "name": self.name}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CourseSummary":
        return cls(code=str(d.get("code", "")), name=str(d.get("name", "")))


@dataclass
class Term:
    """
    One option of the search form's term dropdown.
    """

    value: str
    label: str

    @property
    def sort_key(self) -> int:
        # non-numeric or missing values sort last
        try:
            return int(self.value)
        except (TypeError, ValueError):
            return -1


@dataclass
class Section:
    section_number: str
    meets: str
    instructor: str

    def is_empty(self) -> bool:
        return not (self.section_number or self.meets or self.instructor)

    def to_dict(self) -> Dict[str, str]:
        return {
            "sectionNumber": self.section_number,
            "meets": self.meets,
            "instructor": self.instructor,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Section":
        return cls(
            section_number=str(d.get("sectionNumber", "")),
            meets=str(d.get("meets", "")),
            instructor=str(d.get("instructor", "")),
        )


@dataclass
class CourseSections:
    """
    All sections listed for one course code in the live search results.
    """

    course_code: str
    title: str
    sections: List[Section] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "courseCode": self.course_code,
            "title": self.title,
            "sections": [s.to_dict() for s in self.sections],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CourseSections":
        return cls(
            course_code=str(d.get("courseCode", "")),
            title=str(d.get("title", "")),
            sections=[Section.from_dict(s) for s in d.get("sections", []) if isinstance(s, dict)],
        )


@dataclass
class CacheEntry(Generic[T]):
    """
    A cached value and the moment it was written (timezone-aware UTC).
    """

    data: T
    last_updated: datetime

    def age_hours(self, now: datetime) -> float:
        return (now - self.last_updated).total_seconds() / 3600.0

    def is_fresh(self, now: datetime, max_age_hours: float) -> bool:
        return self.age_hours(now) < max_age_hours

    def to_dict(self) -> Dict[str, Any]:
        return {"data": self.data, "lastUpdated": self.last_updated.isoformat()}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CacheEntry[Any]":
        last_updated = datetime.fromisoformat(d["lastUpdated"])
        # timestamps written without an offset are UTC
        if last_updated.tzinfo is None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)
        return cls(data=d["data"], last_updated=last_updated)


@dataclass
class ScheduleCourse:
    """
    One section a user placed on their personal schedule.

    The id ("CSE 2050-001") is the uniqueness key of the schedule file.
    """

    id: str
    name: str
    section: str
    days: List[str]
    start_time: str
    end_time: str
    color: str
    instructor: Optional[str] = None
    location: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "section": self.section,
            "days": list(self.days),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "color": self.color,
            "instructor": self.instructor,
            "location": self.location,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScheduleCourse":
        days = d.get("days", [])
        return cls(
            id=str(d.get("id", "")),
            name=str(d.get("name", "")),
            section=str(d.get("section", "")),
            days=[str(x) for x in days] if isinstance(days, list) else [],
            start_time=str(d.get("startTime", "")),
            end_time=str(d.get("endTime", "")),
            color=str(d.get("color", "")),
            instructor=d.get("instructor"),
            location=d.get("location"),
        )
