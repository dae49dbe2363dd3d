"""Tests for series/subtitle title normalization."""

from __future__ import annotations

import pytest

from release_curator.normalize import TitleNormalizer, has_season_marker, normalize_title


@pytest.mark.parametrize(
    ("title", "key"),
    [
        ("Alpha", "Alpha"),
        ("Alpha 第二季", "Alpha"),
        ("Alpha第十二季", "Alpha"),
        ("Alpha 第3季", "Alpha"),
        ("Alpha 二季", "Alpha"),
        ("Alpha Season 2", "Alpha"),
        ("Alpha season2", "Alpha"),
        ("Alpha S2", "Alpha"),
        ("Alpha s03", "Alpha"),
        ("Alpha 2", "Alpha"),
        ("前传:猛将", "猛将"),
        ("前传：猛将", "猛将"),
        ("过关斩将：猎杀游戏", "猎杀游戏"),
        ("A: B: C", "C"),
        ("  The Long  Night  ", "TheLongNight"),
    ],
)
def test_normalize_title_keys(title: str, key: str):
    assert normalize_title(title) == key


def test_key_is_case_sensitive():
    assert normalize_title("alpha") != normalize_title("Alpha")


def test_trailing_number_needs_separator():
    """Only a standalone trailing number is a sequel index."""
    assert normalize_title("Blade Runner 2049") == "BladeRunner"
    assert normalize_title("Apollo13") == "Apollo13"


def test_subtitle_after_last_colon_is_kept():
    result = TitleNormalizer().normalize("Mission: Impossible: Dead Reckoning")
    assert result.segment == "Dead Reckoning"
    assert result.key == "DeadReckoning"


def test_colon_with_empty_tail_gives_empty_key():
    assert normalize_title("Untitled:") == ""


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Alpha 第二季", True),
        ("Alpha 第10季", True),
        ("Alpha Season 1", True),
        ("Alpha S2", True),
        ("alpha s2", True),
        ("Alpha", False),
        ("Alpha 2", False),
        # The bare "二季" form is stripped from the key but is not a marker
        ("Alpha 二季", False),
    ],
)
def test_has_season_marker(title: str, expected: bool):
    assert has_season_marker(title) is expected


def test_marker_detected_on_raw_title_not_key():
    """The marker sits in the series prefix, which normalization discards."""
    result = TitleNormalizer().normalize("Alpha 第二季: Finale")
    assert result.key == "Finale"
    assert result.has_season_marker is True


def test_normalized_title_records_original():
    result = TitleNormalizer().normalize("前传：猛将")
    assert result.original == "前传：猛将"
    assert result.segment == "猛将"
    assert result.ruleset_version == "series-v1"
