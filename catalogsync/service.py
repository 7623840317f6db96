"""
Cache-aside access to catalog data.

CatalogService answers from the cache while entries are fresh and falls
back to live scraping otherwise, storing whatever the live path returns.

The handle_*_request functions implement the GET endpoint contract on top
of it without tying it to a web framework: they take the method and query
parameters and return (status code, JSON body).
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Tuple

from catalogsync.cache import CatalogCache
from catalogsync.config import COURSES_MAX_AGE_HOURS, SECTIONS_MAX_AGE_HOURS
from catalogsync.model import CourseSections, CourseSummary
from catalogsync.scrape import scrape_all_courses
from catalogsync.sections import fetch_course_sections

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_LIVE = "live"

Response = Tuple[int, Dict[str, Any]]


class CatalogService:
    def __init__(
        self,
        cache: CatalogCache,
        scrape_courses: Callable[[], Awaitable[List[CourseSummary]]] = scrape_all_courses,
        fetch_sections: Callable[[str], Awaitable[List[CourseSections]]] = fetch_course_sections,
        courses_max_age_hours: float = COURSES_MAX_AGE_HOURS,
        sections_max_age_hours: float = SECTIONS_MAX_AGE_HOURS,
    ) -> None:
        self.cache = cache
        self.scrape_courses = scrape_courses
        self.fetch_sections = fetch_sections
        self.courses_max_age_hours = courses_max_age_hours
        self.sections_max_age_hours = sections_max_age_hours

    async def get_courses(self, refresh: bool = False) -> Tuple[str, List[CourseSummary]]:
        if not refresh:
            cached = self.cache.get_global_courses(self.courses_max_age_hours)
            if cached is not None:
                return SOURCE_CACHE, cached

        logger.info("Cache miss or refresh requested, scraping all courses")
        courses = await self.scrape_courses()
        self.cache.put_global_courses(courses)
        return SOURCE_LIVE, courses

    async def get_sections(self, course_code: str, refresh: bool = False) -> Tuple[str, List[CourseSections]]:
        course_code = course_code.strip()
        if not refresh:
            cached = self.cache.get_sections(course_code, self.sections_max_age_hours)
            if cached is not None:
                return SOURCE_CACHE, cached

        logger.info("Cache miss or refresh requested, fetching fresh sections for %s", course_code)
        sections = await self.fetch_sections(course_code)
        self.cache.put_sections(course_code, sections)
        return SOURCE_LIVE, sections

    async def sync_courses(self) -> int:
        """
        Scrape the whole catalog and overwrite the cached course list.
        """
        courses = await self.scrape_courses()
        self.cache.put_global_courses(courses)
        return len(courses)


async def handle_sections_request(method: str, query: Mapping[str, Any], service: CatalogService) -> Response:
    if method.upper() != "GET":
        return 405, {"error": "Method not allowed"}

    course_code = query.get("courseCode")
    if isinstance(course_code, str):
        course_code = course_code.strip()
    if not course_code or not isinstance(course_code, str):
        return 400, {"error": "Missing or invalid courseCode"}

    try:
        source, sections = await service.get_sections(course_code)
    except Exception:
        logger.exception("Error fetching sections for %s", course_code)
        return 500, {"error": "Failed to fetch sections"}

    return 200, {"source": source, "data": [s.to_dict() for s in sections]}


async def handle_courses_request(method: str, service: CatalogService) -> Response:
    if method.upper() != "GET":
        return 405, {"error": "Method not allowed"}

    try:
        source, courses = await service.get_courses()
    except Exception:
        logger.exception("Error fetching courses")
        return 500, {"error": "Failed to fetch courses"}

    return 200, {"source": source, "data": [c.to_dict() for c in courses]}
