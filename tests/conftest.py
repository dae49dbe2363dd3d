"""Pytest configuration and shared fixtures for release-curator tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from feed_helpers import TODAY, make_candidate, make_record

from release_curator.models import ReleaseCandidate

# =============================================================================
# Reference Date
# =============================================================================


@pytest.fixture
def today() -> str:
    return TODAY


# =============================================================================
# Record Factories
# =============================================================================


@pytest.fixture
def record() -> Callable[..., dict[str, Any]]:
    return make_record


@pytest.fixture
def candidate() -> Callable[..., ReleaseCandidate]:
    return make_candidate


# =============================================================================
# Feed Files
# =============================================================================


@pytest.fixture
def feed_file(tmp_path: Path) -> Callable[[Any], Path]:
    """Write a payload to a JSON feed file and return its path."""

    def _write(payload: Any) -> Path:
        path = tmp_path / "releases.json"
        path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        return path

    return _write
