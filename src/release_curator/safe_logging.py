"""Log-safe formatting for release-curator.

Feed records carry cover URLs that are often signed CDN links, and titles
that can be arbitrarily long. These helpers keep log output readable and free
of URL credentials:
- Query string / fragment stripping for URLs
- Title truncation
- Rich console logging setup
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from rich.console import Console
from rich.logging import RichHandler

URL_PATTERN = re.compile(r"https?://[^\s'\"<>]+")

DEFAULT_TRUNCATE = 60


def strip_url_query(url: str) -> str:
    """Drop query string and fragment from a URL.

    Args:
        url: URL to clean

    Returns:
        URL with scheme, host and path only
    """
    parts = urlsplit(url)
    if not parts.query and not parts.fragment:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def truncate(value: str, length: int = DEFAULT_TRUNCATE) -> str:
    """Shorten a string to at most length characters, marking the cut with an ellipsis."""
    if len(value) <= length:
        return value
    return value[: length - 1] + "…"


def sanitize_message(message: str) -> str:
    """Strip query strings from every URL in a log message."""
    return URL_PATTERN.sub(lambda match: strip_url_query(match.group(0)), message)


def summarize_record(record: Mapping[str, Any], length: int = DEFAULT_TRUNCATE) -> str:
    """One-line description of a raw feed record for log messages."""
    title = record.get("title")
    title_str = truncate(title, length) if isinstance(title, str) else repr(title)
    return f"{title_str} [{record.get('type')}, {record.get('releaseDate')}, id={record.get('id')!r}]"


class SafeLogFormatter(logging.Formatter):
    """Log formatter that strips URL query strings and truncates long arguments."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        sanitize_messages: bool = True,
        truncate_length: int = DEFAULT_TRUNCATE,
    ):
        super().__init__(fmt, datefmt)
        self.sanitize_messages = sanitize_messages
        self.truncate_length = truncate_length

    def format(self, record: logging.LogRecord) -> str:
        # Copy so that other handlers still see the original record
        record = logging.makeLogRecord(record.__dict__)

        if self.sanitize_messages:
            record.msg = sanitize_message(str(record.msg))

        if record.args:
            record.args = self._sanitize_args(record.args)

        return super().format(record)

    def _sanitize_args(
        self, args: tuple[Any, ...] | Mapping[str, Any]
    ) -> tuple[Any, ...] | dict[str, Any]:
        if isinstance(args, Mapping):
            # logging unpacks a lone mapping argument; a feed record is one
            if "title" in args:
                return (summarize_record(args, self.truncate_length),)
            return {key: self._sanitize_value(value) for key, value in args.items()}
        return tuple(self._sanitize_value(arg) for arg in args)

    def _sanitize_value(self, value: Any) -> Any:
        if isinstance(value, Mapping) and "title" in value:
            return summarize_record(value, self.truncate_length)
        if isinstance(value, str):
            if value.startswith(("http://", "https://")):
                return strip_url_query(value)
            return truncate(value, self.truncate_length)
        return value


def configure_rich_logging(
    level: int = logging.WARNING,
    format_string: str = "%(message)s",
    truncate_length: int = DEFAULT_TRUNCATE,
    show_time: bool = True,
    show_path: bool = False,
) -> Console:
    """Configure logging through a Rich handler on stderr.

    Replaces any handlers already on the root logger so repeated CLI
    invocations in one process do not duplicate output.

    Returns:
        Console for regular (stdout) output
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=show_time,
        show_path=show_path,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(SafeLogFormatter(fmt=format_string, truncate_length=truncate_length))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        root_logger.removeHandler(existing)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    return Console()


## Tests


def test_strip_url_query():
    assert (
        strip_url_query("https://img.example.com/p/123.jpg?sign=abc&t=1#x")
        == "https://img.example.com/p/123.jpg"
    )
    assert strip_url_query("https://img.example.com/p/123.jpg") == "https://img.example.com/p/123.jpg"


def test_truncate():
    assert truncate("short", 10) == "short"
    assert truncate("a" * 20, 10) == "a" * 9 + "…"
    assert len(truncate("b" * 100, 12)) == 12


def test_sanitize_message():
    msg = "cover https://cdn.example.com/c.webp?token=secret for 猛将"
    sanitized = sanitize_message(msg)

    assert "token=secret" not in sanitized
    assert "https://cdn.example.com/c.webp" in sanitized
    assert "猛将" in sanitized


def test_summarize_record():
    summary = summarize_record({"id": "m1", "title": "Alpha", "type": "movie", "releaseDate": "2025-01-20"})
    assert summary == "Alpha [movie, 2025-01-20, id='m1']"


def test_safe_log_formatter():
    formatter = SafeLogFormatter(fmt="%(message)s", truncate_length=10)

    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg="Cover %s for %s",
        args=("https://cdn.example.com/a.jpg?sig=1", "A very long release title"),
        exc_info=None,
    )

    formatted = formatter.format(record)
    assert "sig=1" not in formatted
    assert "A very lo…" in formatted


def test_safe_log_formatter_record_argument():
    formatter = SafeLogFormatter(fmt="%(message)s")
    record = logging.LogRecord(
        name="test",
        level=logging.WARNING,
        pathname="",
        lineno=0,
        msg="Dropping %s",
        args=({"id": 7, "title": "Alpha", "type": "tv", "releaseDate": "2025-13-01"},),
        exc_info=None,
    )

    assert formatter.format(record) == "Dropping Alpha [tv, 2025-13-01, id=7]"
