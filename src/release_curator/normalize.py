"""Series and subtitle normalization for release titles.

Titles such as "Alpha", "Alpha 第二季" and "前传:Alpha" share one grouping key.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

CHINESE_NUMERALS = "一二三四五六七八九十"

# Ordered as applied; the bare "二季" form is only caught by the second pattern.
SEASON_STRIP_PATTERNS = (
    re.compile(rf"第[{CHINESE_NUMERALS}0-9]+季"),
    re.compile(rf"第?[{CHINESE_NUMERALS}0-9]+季"),
    re.compile(r"Season\s*[0-9]+", re.IGNORECASE),
    re.compile(r"S[0-9]+", re.IGNORECASE),
)
SEASON_MARKER_PATTERN = re.compile(
    rf"第[{CHINESE_NUMERALS}0-9]+季|Season\s*[0-9]+|S[0-9]+", re.IGNORECASE
)
TRAILING_NUMBER_PATTERN = re.compile(r"\s+[0-9]+$")
WHITESPACE_PATTERN = re.compile(r"\s+")

FULLWIDTH_COLON = "："
COLON = ":"


@dataclass
class NormalizedTitle:
    """
    Result of title normalization.

    ``key`` is the grouping key; the other fields explain how it was derived.
    """

    original: str
    key: str
    segment: str
    has_season_marker: bool
    ruleset_version: str = "series-v1"


class TitleNormalizer:
    """
    Deterministic series/subtitle normalizer for release titles.

    Two titles with the same key are treated as the same underlying work.
    The key is compared case-sensitively.
    """

    def normalize(self, title: str) -> NormalizedTitle:
        segment = self._extract_subtitle(self._unify_colons(title))
        key = self._strip_season_markers(segment)
        key = TRAILING_NUMBER_PATTERN.sub("", key)
        key = WHITESPACE_PATTERN.sub("", key).strip()
        return NormalizedTitle(
            original=title,
            key=key,
            segment=segment,
            has_season_marker=self.has_season_marker(title),
        )

    def has_season_marker(self, title: str) -> bool:
        """Check the raw title (not the key) for a season or sequel marker."""
        return SEASON_MARKER_PATTERN.search(title) is not None

    def _unify_colons(self, title: str) -> str:
        return title.replace(FULLWIDTH_COLON, COLON).strip()

    def _extract_subtitle(self, title: str) -> str:
        """Keep the part after the last colon ("series: subtitle" -> "subtitle")."""
        if COLON not in title:
            return title
        parts = [part.strip() for part in title.split(COLON)]
        return parts[-1]

    def _strip_season_markers(self, s: str) -> str:
        for pattern in SEASON_STRIP_PATTERNS:
            s = pattern.sub("", s)
        return s


_default_normalizer = TitleNormalizer()


def normalize_title(title: str) -> str:
    """Return the grouping key for a release title."""
    return _default_normalizer.normalize(title).key


def has_season_marker(title: str) -> bool:
    """Return True if the raw title carries a season/sequel marker."""
    return _default_normalizer.has_season_marker(title)
