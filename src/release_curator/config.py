"""Configuration for release-curator.

Curation policy, calendar browsing and logging settings, loaded from a TOML
file with ``RELEASE_CURATOR_*`` environment overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class QuotaConfig(BaseModel):
    """Primary per-bucket quotas, drawn before any fallback."""

    recently_released: int = Field(default=2, ge=0)
    releasing_today: int = Field(default=1, ge=0)
    next_seven_days: int = Field(default=4, ge=0)
    next_thirty_days: int = Field(default=2, ge=0)
    later_releasing: int = Field(default=1, ge=0)


class CurationPolicy(BaseModel):
    """Knobs for the release curation pipeline."""

    max_total: int = Field(default=10, ge=0)

    # Retention window around today (days)
    window_days_before: int = Field(default=7, ge=0)
    window_days_after: int = Field(default=90, ge=0)

    # Bucket boundaries (days after today)
    next_seven_days: int = Field(default=7, ge=1)
    next_thirty_days: int = Field(default=30, ge=1)

    quotas: QuotaConfig = Field(default_factory=QuotaConfig)

    # Hard cap on releasingToday items across primary and fallback draws
    releasing_today_cap: int = Field(default=3, ge=0)

    @model_validator(mode="after")
    def _check_boundaries(self) -> CurationPolicy:
        if self.next_seven_days >= self.next_thirty_days:
            raise ValueError("next_seven_days must be smaller than next_thirty_days")
        return self


class CalendarConfig(BaseModel):
    """Release calendar browsing configuration."""

    region_facets: int = Field(default=10, ge=0)
    genre_facets: int = Field(default=15, ge=0)
    page_size: int | None = Field(default=None, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING")  # DEBUG, INFO, WARNING, ERROR
    format: str = Field(default="%(message)s")
    truncate_titles: int = Field(default=60, ge=8)


class Config(BaseModel):
    """
    Main configuration for release-curator.

    Loads from TOML file with optional environment variable overrides.
    """

    curation: CurationPolicy = Field(default_factory=CurationPolicy)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """
        Load configuration from TOML file with environment variable overrides.

        Environment variables take precedence and follow the pattern:
        RELEASE_CURATOR_<SECTION>_<KEY> (e.g., RELEASE_CURATOR_CURATION_MAX_TOTAL)

        Everything is merged into one dictionary first and then validated by
        Pydantic, so env values get the same coercion as TOML values.
        """
        config_dict: dict[str, object] = {}

        if config_path and config_path.exists():
            config_dict = tomllib.loads(config_path.read_text(encoding="utf-8"))

        config_dict = cls._merge_env_overrides(config_dict)
        return cls.model_validate(config_dict)

    @classmethod
    def _merge_env_overrides(cls, config_dict: dict[str, object]) -> dict[str, object]:
        """Return config_dict with RELEASE_CURATOR_* env vars applied."""
        env_prefix = "RELEASE_CURATOR_"

        curation = config_dict.setdefault("curation", {})
        if not isinstance(curation, dict):
            curation = {}
            config_dict["curation"] = curation

        if max_total := os.getenv(f"{env_prefix}CURATION_MAX_TOTAL"):
            curation["max_total"] = max_total
        if days_before := os.getenv(f"{env_prefix}CURATION_WINDOW_DAYS_BEFORE"):
            curation["window_days_before"] = days_before
        if days_after := os.getenv(f"{env_prefix}CURATION_WINDOW_DAYS_AFTER"):
            curation["window_days_after"] = days_after
        if today_cap := os.getenv(f"{env_prefix}CURATION_RELEASING_TODAY_CAP"):
            curation["releasing_today_cap"] = today_cap

        quotas = curation.setdefault("quotas", {})
        if not isinstance(quotas, dict):
            quotas = {}
            curation["quotas"] = quotas

        for quota_name in QuotaConfig.model_fields:
            if quota := os.getenv(f"{env_prefix}CURATION_QUOTA_{quota_name.upper()}"):
                quotas[quota_name] = quota

        calendar = config_dict.setdefault("calendar", {})
        if not isinstance(calendar, dict):
            calendar = {}
            config_dict["calendar"] = calendar

        if region_facets := os.getenv(f"{env_prefix}CALENDAR_REGION_FACETS"):
            calendar["region_facets"] = region_facets
        if genre_facets := os.getenv(f"{env_prefix}CALENDAR_GENRE_FACETS"):
            calendar["genre_facets"] = genre_facets
        if page_size := os.getenv(f"{env_prefix}CALENDAR_PAGE_SIZE"):
            calendar["page_size"] = page_size

        logging_config = config_dict.setdefault("logging", {})
        if not isinstance(logging_config, dict):
            logging_config = {}
            config_dict["logging"] = logging_config

        if log_level := os.getenv(f"{env_prefix}LOGGING_LEVEL"):
            logging_config["level"] = log_level
        if log_format := os.getenv(f"{env_prefix}LOGGING_FORMAT"):
            logging_config["format"] = log_format
        if truncate := os.getenv(f"{env_prefix}LOGGING_TRUNCATE_TITLES"):
            logging_config["truncate_titles"] = truncate

        return config_dict


## Tests


def test_config_defaults():
    config = Config()
    assert config.curation.max_total == 10
    assert config.curation.window_days_before == 7
    assert config.curation.window_days_after == 90
    assert config.curation.quotas.next_seven_days == 4
    assert config.curation.releasing_today_cap == 3
    assert config.calendar.region_facets == 10
    assert config.logging.level == "WARNING"


def test_config_from_dict():
    config = Config.model_validate(
        {
            "curation": {"max_total": 6, "quotas": {"releasing_today": 2}},
            "calendar": {"page_size": 20},
        }
    )
    assert config.curation.max_total == 6
    assert config.curation.quotas.releasing_today == 2
    assert config.curation.quotas.recently_released == 2
    assert config.calendar.page_size == 20


def test_config_env_overrides(
    monkeypatch,  # pyright: ignore[reportMissingParameterType,reportUnknownParameterType]
):
    monkeypatch.setenv("RELEASE_CURATOR_CURATION_MAX_TOTAL", "12")  # pyright: ignore[reportUnknownMemberType]
    monkeypatch.setenv("RELEASE_CURATOR_CURATION_QUOTA_LATER_RELEASING", "3")  # pyright: ignore[reportUnknownMemberType]
    monkeypatch.setenv("RELEASE_CURATOR_LOGGING_LEVEL", "DEBUG")  # pyright: ignore[reportUnknownMemberType]

    config = Config.load()
    assert config.curation.max_total == 12
    assert config.curation.quotas.later_releasing == 3
    assert config.logging.level == "DEBUG"


def test_config_load_nonexistent_file():
    config = Config.load(Path("/nonexistent/config.toml"))
    assert config.curation.max_total == 10
