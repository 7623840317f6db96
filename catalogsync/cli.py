"""
CLI (Command Line Interface).

    catalogsync courses [--search TEXT] [--refresh]
    catalogsync sync
    catalogsync sections <course_code> [--refresh]
    catalogsync location <course_code> <section>
    catalogsync add <course_code> <section> [--location]
    catalogsync remove <schedule_id>
    catalogsync schedule

Catalog data is read through the cache (data/cache/) and scraped live on
a miss. The personal schedule lives in data/schedule.json.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from catalogsync import storage
from catalogsync.cache import CatalogCache, JsonFileCacheStore
from catalogsync.config import Settings, load_settings
from catalogsync.errors import CatalogError
from catalogsync.logs import configure_logging
from catalogsync.model import CourseSections, Section
from catalogsync.sections import fetch_section_location
from catalogsync.service import CatalogService
from catalogsync.transform import transform_section

console = Console()


def _build_service(settings: Settings) -> CatalogService:
    return CatalogService(CatalogCache(JsonFileCacheStore(settings.cache_dir)))


def _find_section(groups: List[CourseSections], section_number: str) -> Optional[Section]:
    for group in groups:
        for s in group.sections:
            if s.section_number == section_number:
                return s
    return None


def _cmd_courses(args: argparse.Namespace, service: CatalogService) -> int:
    """
    List catalog courses, optionally filtered by a substring of code or name.
    """
    source, courses = asyncio.run(service.get_courses(refresh=args.refresh))

    query = (args.search or "").strip().lower()
    if query:
        courses = [c for c in courses if query in f"{c.code} {c.name}".lower()]

    if not courses:
        console.print("No results.")
        return 0

    table = Table(title=f"Courses ({source})")
    table.add_column("Code", no_wrap=True)
    table.add_column("Name")
    # show max 50
    for c in courses[:50]:
        table.add_row(c.code, c.name)
    console.print(table)
    if len(courses) > 50:
        console.print(f"... and {len(courses) - 50} more results")
    return 0


def _cmd_sync(args: argparse.Namespace, service: CatalogService) -> int:
    count = asyncio.run(service.sync_courses())
    console.print(f"Courses updated successfully ({count} courses)")
    return 0


def _cmd_sections(args: argparse.Namespace, service: CatalogService) -> int:
    code = (args.course_code or "").strip()
    if not code:
        console.print("Please provide a course code.")
        return 1

    source, groups = asyncio.run(service.get_sections(code, refresh=args.refresh))
    if not groups:
        console.print(f"No sections found for {code}.")
        return 0

    for group in groups:
        table = Table(title=f"{group.course_code} {group.title} ({source})")
        table.add_column("Section", no_wrap=True)
        table.add_column("Meets")
        table.add_column("Instructor")
        for s in group.sections:
            table.add_row(s.section_number, s.meets, s.instructor)
        console.print(table)
    return 0


def _cmd_location(args: argparse.Namespace, settings: Settings) -> int:
    location = asyncio.run(fetch_section_location(args.course_code.strip(), args.section.strip(), settings))
    if location is None:
        console.print("Location not found.")
        return 1
    console.print(location)
    return 0


def _cmd_add(args: argparse.Namespace, service: CatalogService, settings: Settings) -> int:
    """
    Add one section of a course to the personal schedule.
    """
    code = (args.course_code or "").strip()
    number = (args.section or "").strip()
    if not code or not number:
        console.print("Please provide a course code and a section number.")
        return 1

    _, groups = asyncio.run(service.get_sections(code))
    section = _find_section(groups, number)
    if section is None:
        console.print(f"Section {number} not found for {code}.")
        return 1

    location = None
    if args.location:
        location = asyncio.run(fetch_section_location(code, number, settings))

    course = transform_section(code, section, storage.used_colors(settings.schedule_path), location)
    storage.add_course(course, settings.schedule_path)
    console.print(f"Added: {course.id} ({', '.join(course.days) or 'unscheduled'} {course.start_time}-{course.end_time})")
    return 0


def _cmd_remove(args: argparse.Namespace, settings: Settings) -> int:
    course_id = (args.schedule_id or "").strip()
    if not storage.remove_course(course_id, settings.schedule_path):
        console.print(f"Not scheduled: {course_id}")
        return 0
    console.print(f"Removed: {course_id}")
    return 0


def _cmd_schedule(args: argparse.Namespace, settings: Settings) -> int:
    courses = storage.load_schedule(settings.schedule_path)
    if not courses:
        console.print("Schedule is empty.")
        return 0

    table = Table(title="My schedule")
    for col in ("Id", "Days", "Start", "End", "Instructor", "Location"):
        table.add_column(col)
    for c in courses:
        table.add_row(
            f"[{c.color}]{c.id}[/]" if c.color else c.id,
            " ".join(c.days),
            c.start_time,
            c.end_time,
            c.instructor or "",
            c.location or "",
        )
    console.print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="catalogsync", description="Course catalog scraper and cache")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_courses = sub.add_parser("courses", help="List catalog courses")
    p_courses.add_argument("--search", "-s", type=str, default="", help="Filter by code or name")
    p_courses.add_argument("--refresh", action="store_true", help="Ignore the cache and scrape again")

    sub.add_parser("sync", help="Scrape the whole catalog and refresh the cache")

    p_sections = sub.add_parser("sections", help="Show live sections of a course")
    p_sections.add_argument("course_code", type=str, help="Course code (e.g. 'CSE 2050')")
    p_sections.add_argument("--refresh", action="store_true", help="Ignore the cache and search again")

    p_location = sub.add_parser("location", help="Look up the room of one section")
    p_location.add_argument("course_code", type=str)
    p_location.add_argument("section", type=str, help="Section number (e.g. 001)")

    p_add = sub.add_parser("add", help="Add a section to the personal schedule")
    p_add.add_argument("course_code", type=str)
    p_add.add_argument("section", type=str)
    p_add.add_argument("--location", action="store_true", help="Also look up the room")

    p_remove = sub.add_parser("remove", help="Remove a schedule entry by id")
    p_remove.add_argument("schedule_id", type=str, help="Schedule id (e.g. 'CSE 2050-001')")

    sub.add_parser("schedule", help="Show the personal schedule")

    return parser


def main(argv: list[str] | None = None, service: CatalogService | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    settings = load_settings()
    service = service or _build_service(settings)

    try:
        if args.command == "courses":
            raise SystemExit(_cmd_courses(args, service))
        if args.command == "sync":
            raise SystemExit(_cmd_sync(args, service))
        if args.command == "sections":
            raise SystemExit(_cmd_sections(args, service))
        if args.command == "location":
            raise SystemExit(_cmd_location(args, settings))
        if args.command == "add":
            raise SystemExit(_cmd_add(args, service, settings))
        if args.command == "remove":
            raise SystemExit(_cmd_remove(args, settings))
        if args.command == "schedule":
            raise SystemExit(_cmd_schedule(args, settings))
    except CatalogError as exc:
        console.print(f"Error: {exc}")
        raise SystemExit(1)

    raise SystemExit(2)
