"""
Tests for the catalog sync: sitemap and subject page extraction and
the batch scheduler. HTTP is served by httpx.MockTransport.
"""

import unittest

import httpx

from catalogsync.errors import NoSubjectsFoundError
from catalogsync.fetch import create_client
from catalogsync.scrape import (
    chunked,
    parse_subject_courses,
    parse_subject_links,
    scrape_all_courses,
)

SITEMAP_HTML = """
<div class="az_sitemap">
  <a href="#A">A</a>
  <a href="/undergraduate/courses/acct/">Accounting (ACCT)</a>
  <a href="#C">C</a>
  <a href="/undergraduate/courses/cse/">Computer Science (CSE)</a>
  <a>no href</a>
</div>
<a href="/elsewhere/">outside the sitemap</a>
"""


def subject_html(*courses: tuple[str, str]) -> str:
    blocks = []
    for code, title in courses:
        blocks.append(
            f"""
            <div class="courseblock">
              <div class="cols noindent">
                <span class="text detail-code"><strong>{code}</strong></span>
                <span class="text detail-title"><strong>{title}</strong></span>
              </div>
            </div>
            """
        )
    return "\n".join(blocks)


class TestParsers(unittest.TestCase):
    def test_subject_links_skip_fragments(self) -> None:
        links = parse_subject_links(SITEMAP_HTML)
        self.assertEqual(links, ["/undergraduate/courses/acct/", "/undergraduate/courses/cse/"])

    def test_trailing_period_is_stripped_once(self) -> None:
        html = subject_html(("CSE 2050.", "Data Structures and Algorithms"), ("CSE 1010..", "Intro"))
        courses = parse_subject_courses(html)
        self.assertEqual(courses[0].code, "CSE 2050")
        self.assertEqual(courses[0].name, "Data Structures and Algorithms")
        self.assertEqual(courses[1].code, "CSE 1010.")

    def test_blocks_missing_code_or_title_are_skipped(self) -> None:
        html = subject_html(("", "Nameless"), ("MATH 1131Q.", ""), ("MATH 1132Q.", "Calculus II"))
        courses = parse_subject_courses(html)
        self.assertEqual([c.code for c in courses], ["MATH 1132Q"])

    def test_chunked(self) -> None:
        self.assertEqual(chunked(["a", "b", "c", "d", "e"], 2), [["a", "b"], ["c", "d"], ["e"]])
        with self.assertRaises(ValueError):
            chunked(["a"], 0)


class TestScrapeAllCourses(unittest.IsolatedAsyncioTestCase):
    def make_client(self, subjects: list[str], failing: set[str] = frozenset()) -> httpx.AsyncClient:
        sitemap = '<div class="az_sitemap">' + "".join(f'<a href="{s}">{s}</a>' for s in subjects) + "</div>"
        self.requests: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            self.requests.append(path)
            if path == "/undergraduate/courses/":
                return httpx.Response(200, text=sitemap)
            if path in failing:
                return httpx.Response(503, text="unavailable")
            name = path.strip("/").split("/")[-1].upper()
            return httpx.Response(200, text=subject_html((f"{name} 1000.", f"{name} intro")))

        return create_client(transport=httpx.MockTransport(handler))

    async def asyncSetUp(self) -> None:
        self.waits: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            self.waits.append(seconds)

        self.sleep = fake_sleep

    async def test_batches_and_delays(self) -> None:
        subjects = [f"/undergraduate/courses/s{i}/" for i in range(5)]
        async with self.make_client(subjects) as client:
            with self.assertLogs("catalogsync.scrape", level="INFO") as logs:
                courses = await scrape_all_courses(client, batch_size=2, batch_delay=0.1, sleep=self.sleep)

        # ceil(5/2) batches, one delay fewer
        progress = [m for m in logs.output if "Processed" in m]
        self.assertEqual(len(progress), 3)
        self.assertIn("Processed 5/5 subjects", progress[-1])
        self.assertEqual(self.waits, [0.1, 0.1])
        self.assertEqual([c.code for c in courses], [f"S{i} 1000" for i in range(5)])

    async def test_single_batch_has_no_delay(self) -> None:
        subjects = [f"/undergraduate/courses/s{i}/" for i in range(3)]
        async with self.make_client(subjects) as client:
            courses = await scrape_all_courses(client, batch_size=62, sleep=self.sleep)
        self.assertEqual(len(courses), 3)
        self.assertEqual(self.waits, [])

    async def test_failing_subject_does_not_abort_batch(self) -> None:
        subjects = ["/undergraduate/courses/ok1/", "/undergraduate/courses/bad/", "/undergraduate/courses/ok2/"]
        async with self.make_client(subjects, failing={"/undergraduate/courses/bad/"}) as client:
            courses = await scrape_all_courses(client, batch_size=62, sleep=self.sleep)

        self.assertEqual([c.code for c in courses], ["OK1 1000", "OK2 1000"])
        # first attempt plus three retries
        self.assertEqual(self.requests.count("/undergraduate/courses/bad/"), 4)

    async def test_no_subjects_is_fatal(self) -> None:
        async with self.make_client([]) as client:
            with self.assertRaises(NoSubjectsFoundError):
                await scrape_all_courses(client, sleep=self.sleep)

    async def test_sitemap_failure_is_fatal(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        async with create_client(transport=httpx.MockTransport(handler)) as client:
            with self.assertRaises(NoSubjectsFoundError):
                await scrape_all_courses(client, sleep=self.sleep)


if __name__ == "__main__":
    unittest.main()
