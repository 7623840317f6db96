"""
Turn scraped sections into schedule entries.

The catalog encodes meeting times in a compact "meets" string such as
"MWF 10:10-11:00a" or "TuTh 2:00-3:15p". These helpers pull the days and
a 24-hour start/end time out of it. Strings like "TBA" or "Does Not Meet"
have no time and produce empty start/end values.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from catalogsync.model import ScheduleCourse, Section

COLORS = [
    "#FF6F61",  # Coral
    "#6B5B93",  # Slate Blue
    "#88B04B",  # Olive Green
    "#F7CAC9",  # Light Pink
    "#92A8D1",  # Light Blue
    "#955251",  # Deep Red
    "#B9B3C2",  # Lavender Gray
    "#FFD700",  # Gold
    "#40E0D0",  # Turquoise
    "#FF7F50",  # Coral Red
]

# two-letter tokens are tried before single letters ("Th" vs "T")
TWO_LETTER_DAYS = {"Th": "THU", "Su": "SUN", "Sa": "SAT"}
ONE_LETTER_DAYS = {"M": "MON", "T": "TUE", "W": "WED", "F": "FRI", "S": "SAT"}

TIME_PATTERN = re.compile(
    r"(\d{1,2})(?::(\d{2}))?\s*([ap])?\.?m?\.?\s*-\s*(\d{1,2})(?::(\d{2}))?\s*([ap])?",
    re.IGNORECASE,
)


def next_color(used_colors: Iterable[str]) -> str:
    """
    Pick a palette color not in used_colors.

    When every palette color is taken the palette is cycled by how many
    colors are in use, so the pick stays deterministic.
    """
    used = list(used_colors)
    for color in COLORS:
        if color not in used:
            return color
    return COLORS[len(used) % len(COLORS)]


def parse_days(meets: str) -> List[str]:
    days: List[str] = []
    i = 0
    while i < len(meets):
        pair = meets[i : i + 2]
        if pair in TWO_LETTER_DAYS:
            days.append(TWO_LETTER_DAYS[pair])
            i += 2
        elif meets[i] in ONE_LETTER_DAYS:
            days.append(ONE_LETTER_DAYS[meets[i]])
            i += 1
        else:
            i += 1
    return days


def _to_24h(hour: str, minute: Optional[str], meridiem: str) -> Tuple[int, int]:
    h = int(hour)
    m = int(minute) if minute else 0
    if meridiem == "p" and h != 12:
        h += 12
    elif meridiem == "a" and h == 12:
        h = 0
    return h, m


def _fmt(hm: Tuple[int, int]) -> str:
    return f"{hm[0]:02d}:{hm[1]:02d}"


def parse_time(meets: str) -> Tuple[str, str]:
    """
    Return (start, end) as "HH:MM" 24-hour strings, or ("", "") if there is no time.

    Examples:
        "10:00-10:50am"    -> ("10:00", "10:50")
        "11:00am-12:15pm"  -> ("11:00", "12:15")
        "11-12:05p"        -> ("11:00", "12:05")
        "8:00-8:50"        -> ("08:00", "08:50")
    """
    match = TIME_PATTERN.search(meets)
    if not match:
        return "", ""

    start_h, start_m, start_mer, end_h, end_m, end_mer = match.groups()
    start_mer = start_mer.lower() if start_mer else None
    end_mer = end_mer.lower() if end_mer else None

    # no meridiem anywhere reads as AM
    if start_mer is None and end_mer is None:
        start_mer = end_mer = "a"
    if end_mer is None:
        end_mer = start_mer

    if start_mer is None:
        # "11-12:05p": the shared meridiem belongs to the end time
        start = _to_24h(start_h, start_m, end_mer)
        if start > _to_24h(end_h, end_m, end_mer):
            start = _to_24h(start_h, start_m, "a")
    else:
        start = _to_24h(start_h, start_m, start_mer)

    end = _to_24h(end_h, end_m, end_mer)
    return _fmt(start), _fmt(end)


def transform_section(
    course_code: str,
    section: Section,
    used_colors: Iterable[str] = (),
    location: Optional[str] = None,
) -> ScheduleCourse:
    start, end = parse_time(section.meets)
    # unscheduled sections ("TBA", "Does Not Meet") get no days either
    days = parse_days(section.meets) if start else []

    return ScheduleCourse(
        id=f"{course_code}-{section.section_number}",
        name=course_code,
        section=section.section_number,
        days=days,
        start_time=start,
        end_time=end,
        color=next_color(used_colors),
        instructor=section.instructor or None,
        location=location,
    )
