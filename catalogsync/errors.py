"""
Exceptions raised by catalogsync.

Only fatal conditions are raised to callers. Structural scrape failures
(missing elements, selector timeouts) are logged and turned into empty
results at the function that hit them.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for all catalogsync errors."""


class NoSubjectsFoundError(CatalogError):
    """The catalog sitemap yielded no subject links."""


class NoTermFoundError(CatalogError):
    """The search form offered no usable (non-winter) term."""


class DuplicateCourseGroupError(CatalogError):
    """Two result groups on one page carry the same course code."""

    def __init__(self, course_code: str) -> None:
        super().__init__(f"Course code {course_code!r} starts more than one result group")
        self.course_code = course_code


class DuplicateCourseError(CatalogError):
    """A schedule entry with the same id already exists."""

    def __init__(self, course_id: str) -> None:
        super().__init__(f"Course section already exists in schedule: {course_id}")
        self.course_id = course_id
