"""
Live section search on the catalog's course-search page.

Flow for one course code:
- open the search form and wait until the term dropdown is populated
- pick the most recent non-winter term
- submit term + campus + course code and wait for the result list
- group the rendered result rows into CourseSections

The rendered page is read back as HTML and parsed with BeautifulSoup, so
all parsing below is plain Python over strings.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import AsyncContextManager, Awaitable, Callable, Iterable, List, Optional

from bs4 import BeautifulSoup

from catalogsync.browser import BrowserPage, browser_page
from catalogsync.config import (
    COURSE_SEARCH_URL,
    DETAIL_PANEL_SETTLE_SECONDS,
    SECTION_PANEL_SETTLE_SECONDS,
    Settings,
    load_settings,
)
from catalogsync.errors import DuplicateCourseGroupError, NoTermFoundError
from catalogsync.model import CourseSections, Section, Term

logger = logging.getLogger(__name__)

PageFactory = Callable[[Settings], AsyncContextManager[BrowserPage]]

GROUP_START_CLASS = "result--group-start"


@dataclass
class ResultRow:
    """
    Text fields of one rendered `.result` row.
    """

    group_start: bool
    code: str
    title: str
    section_number: str
    meets: str
    instructor: str


# ---------------------------------------------------------------------------
# Term selection
# ---------------------------------------------------------------------------


def read_term_options(html: str) -> List[Term]:
    soup = BeautifulSoup(html, "html.parser")
    terms: List[Term] = []
    for opt in soup.select("#crit-srcdb option"):
        terms.append(Term(value=(opt.get("value") or "").strip(), label=opt.get_text(strip=True)))
    return terms


def select_most_recent_term(terms: Iterable[Term]) -> Term:
    """
    Return the non-winter term with the greatest numeric value.

    Raises:
        NoTermFoundError: if no term survives the winter filter, or the
            chosen option has an empty value (a placeholder like "Select a term").
    """
    candidates = [t for t in terms if "winter" not in t.label.lower()]
    best = max(candidates, key=lambda t: t.sort_key) if candidates else None
    if best is None or not best.value:
        raise NoTermFoundError("Failed to determine most recent term")
    return best


# ---------------------------------------------------------------------------
# Result parsing
# ---------------------------------------------------------------------------


def _field(row, selector: str, label: str = "") -> str:
    el = row.select_one(selector)
    if el is None:
        return ""
    text = el.get_text()
    if label:
        text = text.replace(label, "", 1)
    return text.strip()


def parse_result_html(html: str) -> List[ResultRow]:
    soup = BeautifulSoup(html, "html.parser")

    rows: List[ResultRow] = []
    for el in soup.select(".result"):
        rows.append(
            ResultRow(
                group_start=GROUP_START_CLASS in (el.get("class") or []),
                code=_field(el, ".result__code"),
                title=_field(el, ".result__title"),
                section_number=_field(el, ".result__flex--3", "Section Number:"),
                meets=_field(el, ".flex--grow", "Meets:"),
                instructor=_field(el, ".result__flex--9", "Instructor:"),
            )
        )
    return rows


def group_sections(rows: List[ResultRow], course_code: str) -> List[CourseSections]:
    """
    Collect the sections of every result group whose code equals course_code.

    A group runs from its group-start row (inclusive) up to the next
    group-start row (exclusive). Rows with no section number, meets or
    instructor are dropped.

    Raises:
        DuplicateCourseGroupError: if two groups carry the queried code.
    """
    wanted = course_code.strip()
    found: List[CourseSections] = []

    for i, row in enumerate(rows):
        if not row.group_start or row.code != wanted:
            continue
        if found:
            raise DuplicateCourseGroupError(wanted)

        course = CourseSections(course_code=row.code, title=row.title)
        for j in range(i, len(rows)):
            if j > i and rows[j].group_start:
                break
            r = rows[j]
            course.sections.append(Section(section_number=r.section_number, meets=r.meets, instructor=r.instructor))

        course.sections = [s for s in course.sections if not s.is_empty()]
        found.append(course)

    return found


# ---------------------------------------------------------------------------
# Browser flow
# ---------------------------------------------------------------------------


async def open_search_form(page: BrowserPage) -> None:
    await page.goto(COURSE_SEARCH_URL)
    await page.wait_for_selector("#search-form")
    # the term dropdown is filled by script after the form shows up
    await page.wait_for_selector("#crit-srcdb")


async def submit_search(page: BrowserPage, term: Term, campus: str, course_code: str) -> None:
    await page.select_option("#crit-srcdb", term.value)
    await page.select_option("#crit-camp", campus)
    await page.type("#crit-keyword", course_code)
    await page.click_and_wait("#search-button", ".result")


async def search_course(page: BrowserPage, settings: Settings, course_code: str) -> Term:
    """
    Run a search for course_code and return the term that was searched.
    """
    await open_search_form(page)
    term = select_most_recent_term(read_term_options(await page.content()))
    logger.debug("Searching %s in term %s (%s)", course_code, term.value, term.label)
    await submit_search(page, term, settings.campus, course_code)
    return term


async def fetch_course_sections(
    course_code: str,
    settings: Optional[Settings] = None,
    open_page: PageFactory = browser_page,
) -> List[CourseSections]:
    """
    Fetch the live sections for one course code.

    Never raises: any failure is logged and an empty list returned.
    """
    try:
        settings = settings or load_settings()
        async with open_page(settings) as page:
            await search_course(page, settings, course_code)
            rows = parse_result_html(await page.content())
            return group_sections(rows, course_code)
    except Exception:
        logger.exception("Error fetching sections for %s", course_code)
        return []


def _find_section_index(html: str, section_number: str) -> Optional[int]:
    soup = BeautifulSoup(html, "html.parser")
    for idx, el in enumerate(soup.select(".course-section")):
        label = el.select_one(".course-section-section")
        if label is not None and section_number in label.get_text():
            return idx
    return None


def _read_room(html: str, term: Term) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    meet = soup.select_one(".meet")
    if meet is None:
        return None
    room = meet.select_one(f".meet-room-{term.value}")
    if room is None:
        return None
    text = re.sub(r"^in\s+", "", room.get_text().strip())
    return text or None


async def fetch_section_location(
    course_code: str,
    section_number: str,
    settings: Optional[Settings] = None,
    open_page: PageFactory = browser_page,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Optional[str]:
    """
    Return the room of one section (e.g. "ITE C80"), or None if it cannot be found.
    """
    try:
        settings = settings or load_settings()
        async with open_page(settings) as page:
            term = await search_course(page, settings, course_code)

            # open the detail panel that lists the course's sections
            await page.click_and_wait(f'.result__link[data-group="code:{course_code}"]', ".course-sections")
            await sleep(DETAIL_PANEL_SETTLE_SECONDS)

            idx = _find_section_index(await page.content(), section_number)
            if idx is None:
                logger.info("Section %s not listed for %s", section_number, course_code)
                return None

            await page.click(f".course-section >> nth={idx}")
            await sleep(SECTION_PANEL_SETTLE_SECONDS)

            return _read_room(await page.content(), term)
    except Exception:
        logger.exception("Error fetching location for %s section %s", course_code, section_number)
        return None
