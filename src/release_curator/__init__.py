__all__ = (
    "main",
    "Config",
    "CurationPolicy",
    "QuotaConfig",
    # Errors
    "CurationError",
    "FeedShapeError",
    "InvalidReferenceDateError",
    "MalformedRecordError",
    # Records
    "MediaType",
    "ReleaseCandidate",
    "parse_records",
    # Pipeline stages
    "TitleNormalizer",
    "normalize_title",
    "has_season_marker",
    "filter_window",
    "DedupeDecision",
    "DedupeRationale",
    "deduplicate",
    "deduplicate_with_trace",
    "Bucket",
    "bucketize",
    "allocate",
    "plan_allocation",
    # Resolver
    "CurationResolver",
    "CurationResult",
    "CurationStats",
    "CurationTrace",
    "curate",
    # Calendar browsing
    "CalendarFilters",
    "CalendarPage",
    "CalendarQuery",
    "build_filters",
    "merge_feeds",
    "query_calendar",
    "release_label",
)

from release_curator.allocator import allocate, plan_allocation
from release_curator.buckets import Bucket, bucketize
from release_curator.cli import cli as main
from release_curator.config import Config, CurationPolicy, QuotaConfig
from release_curator.dedupe import (
    DedupeDecision,
    DedupeRationale,
    deduplicate,
    deduplicate_with_trace,
)
from release_curator.errors import (
    CurationError,
    FeedShapeError,
    InvalidReferenceDateError,
    MalformedRecordError,
)
from release_curator.models import MediaType, ReleaseCandidate, parse_records
from release_curator.normalize import TitleNormalizer, has_season_marker, normalize_title
from release_curator.release_calendar import (
    CalendarFilters,
    CalendarPage,
    CalendarQuery,
    build_filters,
    merge_feeds,
    query_calendar,
    release_label,
)
from release_curator.resolver import (
    CurationResolver,
    CurationResult,
    CurationStats,
    CurationTrace,
    curate,
)
from release_curator.window import filter_window
