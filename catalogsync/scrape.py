from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from catalogsync.config import BASE_URL, BATCH_DELAY_SECONDS, BATCH_SIZE, SITEMAP_URL
from catalogsync.errors import NoSubjectsFoundError
from catalogsync.fetch import create_client, fetch_page_with_retry
from catalogsync.logs import configure_logging
from catalogsync.model import CourseSummary

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


def parse_subject_links(html: str) -> List[str]:
    """
    Extract subject page paths from the catalog sitemap.

    Returns:
        ["/undergraduate/courses/acct/", "/undergraduate/courses/cse/", ...]
    """
    soup = BeautifulSoup(html, "html.parser")

    links: List[str] = []
    for a in soup.select("div.az_sitemap a"):
        href = a.get("href")
        # letter index entries ("#A", "#B", ...) point into the same page
        if not href or href.startswith("#"):
            continue
        links.append(href)

    return links


def parse_subject_courses(html: str) -> List[CourseSummary]:
    """
    Extract (code, name) pairs from one subject page.
    """
    soup = BeautifulSoup(html, "html.parser")

    courses: List[CourseSummary] = []
    for block in soup.select(".courseblock .cols.noindent"):
        code_el = block.select_one(".text.detail-code strong")
        name_el = block.select_one(".text.detail-title strong")

        code = code_el.get_text(strip=True) if code_el else ""
        name = name_el.get_text(strip=True) if name_el else ""
        if not code or not name:
            continue

        # "CSE 2050." -> "CSE 2050"
        if code.endswith("."):
            code = code[:-1]

        courses.append(CourseSummary(code=code, name=name))

    return courses


async def get_subject_links(client: httpx.AsyncClient) -> List[str]:
    """
    Fetch the sitemap and return subject page paths, or [] if the fetch fails.
    """
    try:
        html = await fetch_page_with_retry(client, SITEMAP_URL)
    except httpx.HTTPError as exc:
        logger.error("Error fetching subject links: %s", exc)
        return []
    return parse_subject_links(html)


async def get_courses_from_subject_page(client: httpx.AsyncClient, subject_url: str) -> List[CourseSummary]:
    try:
        html = await fetch_page_with_retry(client, subject_url)
    except httpx.HTTPError as exc:
        logger.error("Error fetching courses from %s: %s", subject_url, exc)
        return []
    return parse_subject_courses(html)


# ---------------------------------------------------------------------------
# Batch scheduling
# ---------------------------------------------------------------------------


def chunked(items: Sequence[str], size: int) -> List[Sequence[str]]:
    """
    Split items into consecutive chunks of at most `size`.
    """
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [items[i : i + size] for i in range(0, len(items), size)]


async def process_batch(client: httpx.AsyncClient, batch: Sequence[str]) -> List[CourseSummary]:
    """
    Scrape every subject of one batch concurrently.

    A subject that fails contributes no courses; its siblings are unaffected.
    """

    async def one(subject_url: str) -> List[CourseSummary]:
        full_url = urljoin(BASE_URL + "/", subject_url)
        try:
            return await get_courses_from_subject_page(client, full_url)
        except Exception:
            logger.exception("Failed to process %s", full_url)
            return []

    results = await asyncio.gather(*(one(url) for url in batch))

    out: List[CourseSummary] = []
    for courses in results:
        out.extend(courses)
    return out


async def scrape_all_courses(
    client: Optional[httpx.AsyncClient] = None,
    batch_size: int = BATCH_SIZE,
    batch_delay: float = BATCH_DELAY_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> List[CourseSummary]:
    """
    Scrape the full course list of the catalog.

    Subjects are processed in batches of `batch_size` with `batch_delay`
    seconds between batches to bound the connections opened to the catalog.

    Raises:
        NoSubjectsFoundError: if the sitemap yields no subjects.
    """
    if client is None:
        async with create_client() as own_client:
            return await scrape_all_courses(own_client, batch_size, batch_delay, sleep)

    subject_links = await get_subject_links(client)
    if not subject_links:
        raise NoSubjectsFoundError("No subject links found.")

    all_courses: List[CourseSummary] = []
    total = len(subject_links)
    processed = 0

    batches = chunked(subject_links, batch_size)
    for i, batch in enumerate(batches):
        all_courses.extend(await process_batch(client, batch))

        processed += len(batch)
        logger.info("Processed %d/%d subjects", processed, total)

        if i + 1 < len(batches):
            await sleep(batch_delay)

    return all_courses


# ---------------------------------------------------------------------------
# CLI entry
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="catalogsync.scrape", description="Scrape all courses from the catalog")
    p.add_argument("--out", "-o", type=Path, default=None, help="Write courses as JSON to this file")
    p.add_argument("--batch-size", type=int, default=BATCH_SIZE, help="Subjects fetched concurrently")
    p.add_argument("--batch-delay", type=float, default=BATCH_DELAY_SECONDS, help="Seconds between batches")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    courses = asyncio.run(scrape_all_courses(batch_size=args.batch_size, batch_delay=args.batch_delay))

    payload = json.dumps([c.to_dict() for c in courses], ensure_ascii=False, indent=2)
    if args.out is None:
        print(payload)
    else:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(payload, encoding="utf-8")
        print(f"Wrote {len(courses)} courses to {args.out}")


if __name__ == "__main__":
    main()
