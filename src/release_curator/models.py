"""Release feed record types.

Records arrive from the release-data provider as JSON-like mappings with
camelCase keys. ``ReleaseCandidate`` validates the fields the curation
pipeline reads and keeps the original mapping so that output records have
exactly the shape of the input records.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import StrEnum
from typing import Any

from release_curator.errors import FeedShapeError, InvalidReferenceDateError, MalformedRecordError

ISO_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


class MediaType(StrEnum):
    """Kind of title announced in the feed."""

    MOVIE = "movie"
    TV = "tv"


def is_iso_date(value: object) -> bool:
    """Return True if value is a real calendar date written as YYYY-MM-DD."""
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def coerce_reference_date(today: date | str) -> str:
    """
    Normalize the caller-supplied reference date to a YYYY-MM-DD string.

    Raises:
        InvalidReferenceDateError: if today is neither a date nor an ISO date string
    """
    if isinstance(today, date):
        # datetime is a date subclass; only the calendar part matters
        return date(today.year, today.month, today.day).isoformat()
    if is_iso_date(today):
        return today
    raise InvalidReferenceDateError(f"Reference date must be a date or YYYY-MM-DD string, got {today!r}")


def shift_date(day: str, days: int) -> str:
    """Add days to a YYYY-MM-DD string and return the result in the same form."""
    return (date.fromisoformat(day) + timedelta(days=days)).isoformat()


def _text_field(value: object) -> str:
    # Optional display fields; anything but a string counts as missing
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class ReleaseCandidate:
    """One release announcement from the provider feed."""

    id: str | int
    title: str
    type: MediaType
    release_date: str
    region: str = ""
    genre: str = ""
    cover: str | None = None
    episodes: int | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_mapping(cls, record: object) -> ReleaseCandidate:
        """
        Build a candidate from a raw feed record.

        Raises:
            MalformedRecordError: if a required field is missing or invalid
        """
        if isinstance(record, ReleaseCandidate):
            return record
        if not isinstance(record, Mapping):
            raise MalformedRecordError(f"record is {type(record).__name__}, not a mapping")

        record_id = record.get("id")
        if record_id is None or isinstance(record_id, bool) or record_id == "":
            raise MalformedRecordError("missing id")
        if not isinstance(record_id, str | int):
            raise MalformedRecordError(f"id has unsupported type {type(record_id).__name__}")

        title = record.get("title")
        if not isinstance(title, str) or not title.strip():
            raise MalformedRecordError("missing title", record_id)

        release_date = record.get("releaseDate")
        if not is_iso_date(release_date):
            raise MalformedRecordError(f"unparseable releaseDate {release_date!r}", record_id)

        try:
            media_type = MediaType(record.get("type"))
        except ValueError:
            raise MalformedRecordError(f"unknown type {record.get('type')!r}", record_id) from None

        cover = record.get("cover")
        episodes = record.get("episodes")
        return cls(
            id=record_id,
            title=title,
            type=media_type,
            release_date=release_date,
            region=_text_field(record.get("region")),
            genre=_text_field(record.get("genre")),
            cover=cover if isinstance(cover, str) else None,
            episodes=episodes if isinstance(episodes, int) and not isinstance(episodes, bool) else None,
            raw=dict(record),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the record in feed shape (camelCase keys, no added fields)."""
        if self.raw:
            return dict(self.raw)
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "type": self.type.value,
            "releaseDate": self.release_date,
        }
        if self.region:
            result["region"] = self.region
        if self.genre:
            result["genre"] = self.genre
        if self.cover is not None:
            result["cover"] = self.cover
        if self.episodes is not None:
            result["episodes"] = self.episodes
        return result


def parse_records(feed: object) -> tuple[list[ReleaseCandidate], list[str]]:
    """
    Validate a raw feed payload record by record.

    Returns:
        (candidates, problems) where problems describes each dropped record

    Raises:
        FeedShapeError: if feed is not a list or tuple
    """
    if not isinstance(feed, list | tuple):
        raise FeedShapeError(f"Release feed must be a list of records, got {type(feed).__name__}")

    candidates: list[ReleaseCandidate] = []
    problems: list[str] = []
    for index, record in enumerate(feed):
        try:
            candidates.append(ReleaseCandidate.from_mapping(record))
        except MalformedRecordError as e:
            problems.append(f"#{index}: {e}")
    return candidates, problems
