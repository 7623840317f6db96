"""
Tests for the cache-aside service and the GET endpoint contract.
"""

from __future__ import annotations

import unittest

from catalogsync.cache import CatalogCache, MemoryCacheStore
from catalogsync.model import CourseSections, CourseSummary, Section
from catalogsync.service import CatalogService, handle_courses_request, handle_sections_request

COURSES = [CourseSummary("CSE 2050", "Data Structures and Algorithms")]
SECTIONS = [CourseSections("CSE 2050", "Data Structures and Algorithms", [Section("001", "MWF 10:10-11:00a", "Ada")])]


class Live:
    """
    Counts live calls and returns canned data (or raises).
    """

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.course_calls = 0
        self.section_calls: list[str] = []

    async def scrape(self) -> list[CourseSummary]:
        self.course_calls += 1
        if self.error:
            raise self.error
        return COURSES

    async def sections(self, course_code: str) -> list[CourseSections]:
        self.section_calls.append(course_code)
        if self.error:
            raise self.error
        return SECTIONS


class TestCatalogService(unittest.IsolatedAsyncioTestCase):
    def make_service(self, live: Live) -> CatalogService:
        self.cache = CatalogCache(MemoryCacheStore())
        return CatalogService(self.cache, scrape_courses=live.scrape, fetch_sections=live.sections)

    async def test_miss_goes_live_then_hits_cache(self) -> None:
        live = Live()
        service = self.make_service(live)

        self.assertEqual(await service.get_sections("CSE 2050"), ("live", SECTIONS))
        self.assertEqual(await service.get_sections("CSE 2050"), ("cache", SECTIONS))
        self.assertEqual(live.section_calls, ["CSE 2050"])

    async def test_padded_code_shares_cache_entry(self) -> None:
        live = Live()
        service = self.make_service(live)

        self.assertEqual(await service.get_sections(" CSE 2050 "), ("live", SECTIONS))
        self.assertEqual(await service.get_sections("CSE 2050"), ("cache", SECTIONS))
        self.assertEqual(live.section_calls, ["CSE 2050"])

    async def test_refresh_bypasses_cache(self) -> None:
        live = Live()
        service = self.make_service(live)
        await service.get_courses()
        source, _ = await service.get_courses(refresh=True)
        self.assertEqual(source, "live")
        self.assertEqual(live.course_calls, 2)

    async def test_sync_overwrites_courses(self) -> None:
        live = Live()
        service = self.make_service(live)
        self.assertEqual(await service.sync_courses(), 1)
        self.assertEqual(self.cache.get_global_courses(), COURSES)

    async def test_empty_live_result_is_cached(self) -> None:
        live = Live()
        service = self.make_service(live)

        async def nothing(course_code: str) -> list[CourseSections]:
            return []

        service.fetch_sections = nothing
        self.assertEqual(await service.get_sections("XYZ 0000"), ("live", []))
        self.assertEqual(await service.get_sections("XYZ 0000"), ("cache", []))


class TestRequestHandlers(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.service = CatalogService(
            CatalogCache(MemoryCacheStore()), scrape_courses=Live().scrape, fetch_sections=Live().sections
        )

    async def test_non_get_is_405(self) -> None:
        status, body = await handle_sections_request("POST", {"courseCode": "CSE 2050"}, self.service)
        self.assertEqual(status, 405)
        status, _ = await handle_courses_request("DELETE", self.service)
        self.assertEqual(status, 405)

    async def test_missing_or_invalid_code_is_400(self) -> None:
        for query in ({}, {"courseCode": ""}, {"courseCode": "   "}, {"courseCode": ["CSE 2050", "CSE 2100"]}):
            status, body = await handle_sections_request("GET", query, self.service)
            self.assertEqual(status, 400)
            self.assertIn("error", body)

    async def test_live_then_cache(self) -> None:
        status, body = await handle_sections_request("GET", {"courseCode": "CSE 2050"}, self.service)
        self.assertEqual(status, 200)
        self.assertEqual(body["source"], "live")
        self.assertEqual(body["data"][0]["sections"][0]["sectionNumber"], "001")

        status, body = await handle_sections_request("GET", {"courseCode": "CSE 2050"}, self.service)
        self.assertEqual(body["source"], "cache")

    async def test_internal_error_is_generic_500(self) -> None:
        live = Live(error=RuntimeError("selector #crit-srcdb not found"))
        service = CatalogService(CatalogCache(MemoryCacheStore()), scrape_courses=live.scrape, fetch_sections=live.sections)

        with self.assertLogs("catalogsync.service", level="ERROR"):
            status, body = await handle_courses_request("GET", service)
        self.assertEqual(status, 500)
        self.assertNotIn("crit-srcdb", str(body))


if __name__ == "__main__":
    unittest.main()
