"""
Cache store for scraped catalog data.

Two namespaces are kept:

    courses                 the full catalog course list
    sections/<course code>  live sections of one course

Every entry is stored as {"data": ..., "lastUpdated": <ISO timestamp>}.
Writes always overwrite. Reads return the data only while the entry is
younger than the caller's max age; a stale entry is left in place and
reported as a miss until the next successful write replaces it.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

from catalogsync.config import (
    COURSES_CACHE_KEY,
    COURSES_MAX_AGE_HOURS,
    SECTIONS_CACHE_PREFIX,
    SECTIONS_MAX_AGE_HOURS,
)
from catalogsync.model import CacheEntry, CourseSections, CourseSummary

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _records(data: Any) -> List[Dict[str, Any]]:
    if not isinstance(data, list) or not all(isinstance(d, dict) for d in data):
        raise TypeError(f"expected a list of objects, got {type(data).__name__}")
    return data


def _decode_courses(data: Any) -> List[CourseSummary]:
    return [CourseSummary.from_dict(d) for d in _records(data)]


def _decode_sections(data: Any) -> List[CourseSections]:
    return [CourseSections.from_dict(d) for d in _records(data)]


class CacheStore:
    """
    Key-value store of CacheEntry objects. Subclasses implement read/write.
    """

    def read(self, key: str) -> Optional[CacheEntry[Any]]:
        raise NotImplementedError

    def write(self, key: str, entry: CacheEntry[Any]) -> None:
        raise NotImplementedError


class MemoryCacheStore(CacheStore):
    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry[Any]] = {}

    def read(self, key: str) -> Optional[CacheEntry[Any]]:
        return self._entries.get(key)

    def write(self, key: str, entry: CacheEntry[Any]) -> None:
        self._entries[key] = entry


class JsonFileCacheStore(CacheStore):
    """
    One JSON file per key inside `root`.

    Keys are percent-encoded into file names, so "sections/CSE 2050"
    becomes "sections%2FCSE%202050.json".
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}.json"

    def read(self, key: str) -> Optional[CacheEntry[Any]]:
        path = self.path_for(key)
        # never written -> miss
        if not path.exists():
            return None
        raw = json.loads(path.read_text(encoding="utf-8"))
        return CacheEntry.from_dict(raw)

    def write(self, key: str, entry: CacheEntry[Any]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(entry.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)


class CatalogCache:
    """
    Typed get/put operations over a CacheStore with freshness expiry.
    """

    def __init__(self, store: CacheStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    def put(self, key: str, data: Any) -> None:
        try:
            self.store.write(key, CacheEntry(data=data, last_updated=self.clock()))
        except OSError:
            logger.exception("Error storing %s in cache", key)
            raise

    def get(self, key: str, max_age_hours: float, decode: Optional[Callable[[Any], Any]] = None) -> Any:
        """
        Return the cached data for key, or None if missing, stale or unreadable.

        `decode` turns the stored JSON into typed objects; a shape it cannot
        decode counts as unreadable.
        """
        try:
            entry = self.store.read(key)
            if entry is None:
                return None

            now = self.clock()
            age = entry.age_hours(now)
            if not entry.is_fresh(now, max_age_hours):
                logger.info("Cache for %s is stale (%.2f hours old)", key, age)
                return None

            data = entry.data if decode is None else decode(entry.data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error("Error reading %s from cache: %s", key, exc)
            return None

        logger.info("Using cached %s (%.2f hours old)", key, age)
        return data

    # -- catalog ------------------------------------------------------------

    def put_global_courses(self, courses: List[CourseSummary]) -> None:
        self.put(COURSES_CACHE_KEY, [c.to_dict() for c in courses])
        logger.info("Cached %d courses in global cache", len(courses))

    def get_global_courses(self, max_age_hours: float = COURSES_MAX_AGE_HOURS) -> Optional[List[CourseSummary]]:
        return self.get(COURSES_CACHE_KEY, max_age_hours, decode=_decode_courses)

    # -- sections -----------------------------------------------------------

    @staticmethod
    def sections_key(course_code: str) -> str:
        return f"{SECTIONS_CACHE_PREFIX}/{course_code}"

    def put_sections(self, course_code: str, sections: List[CourseSections]) -> None:
        self.put(self.sections_key(course_code), [s.to_dict() for s in sections])

    def get_sections(
        self, course_code: str, max_age_hours: float = SECTIONS_MAX_AGE_HOURS
    ) -> Optional[List[CourseSections]]:
        return self.get(self.sections_key(course_code), max_age_hours, decode=_decode_sections)
