"""Tests for the curate CLI."""

from __future__ import annotations

import json

from feed_helpers import TODAY, distribution_feed, make_record
from typer.testing import CliRunner

from release_curator.cli import ExitCode, app

runner = CliRunner()


def invoke_json(*args: str):
    result = runner.invoke(app, ["-o", "json", *args])
    return result, json.loads(result.stdout) if result.exit_code != ExitCode.ERROR else None


class TestPick:
    def test_json_output(self, feed_file):
        path = feed_file(distribution_feed(recent=2, today_count=5, seven=6, thirty=3, later=2))

        result, payload = invoke_json("pick", str(path), "--today", TODAY)

        assert result.exit_code == ExitCode.SUCCESS
        assert payload["today"] == TODAY
        assert len(payload["items"]) == 10
        assert payload["stats"]["selected_per_bucket"]["releasingToday"] == 1
        assert "trace" not in payload

    def test_items_keep_feed_shape(self, feed_file):
        record = make_record("长安的荔枝", "2025-01-20", region="中国大陆", genre="剧情")
        path = feed_file([record])

        _, payload = invoke_json("pick", str(path), "--today", TODAY)

        assert payload["items"] == [record]

    def test_accepts_items_envelope(self, feed_file):
        path = feed_file({"items": [make_record("Alpha", "2025-01-20")]})

        result, payload = invoke_json("pick", str(path), "--today", TODAY)

        assert result.exit_code == ExitCode.SUCCESS
        assert [item["title"] for item in payload["items"]] == ["Alpha"]

    def test_explain_adds_trace(self, feed_file):
        path = feed_file(
            [make_record("Alpha", "2025-01-20"), make_record("Alpha 第二季", "2025-01-10")]
        )

        _, payload = invoke_json("pick", str(path), "--today", TODAY, "--explain")

        assert payload["trace"]["window"] == ["2025-01-08", "2025-04-15"]
        assert payload["trace"]["dedupe_decisions"][0]["rationale"] == "DEDUPE:MARKER_FREE_KEPT"

    def test_text_output(self, feed_file):
        path = feed_file([make_record("Alpha", "2025-01-20")])

        result = runner.invoke(app, ["pick", str(path), "--today", TODAY, "--explain"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Alpha" in result.stdout
        assert "Curation Trace" in result.stdout

    def test_no_results_exit_code(self, feed_file):
        path = feed_file([make_record("Ancient", "2020-01-01")])

        result = runner.invoke(app, ["pick", str(path), "--today", TODAY])

        assert result.exit_code == ExitCode.NO_RESULTS

    def test_bad_feed_shape(self, feed_file):
        path = feed_file({"releases": []})

        result = runner.invoke(app, ["pick", str(path), "--today", TODAY])

        assert result.exit_code == ExitCode.ERROR
        assert "expected a list" in result.stdout

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        result = runner.invoke(app, ["pick", str(path), "--today", TODAY])

        assert result.exit_code == ExitCode.ERROR

    def test_invalid_today(self, feed_file):
        path = feed_file([])

        result = runner.invoke(app, ["pick", str(path), "--today", "15/01/2025"])

        assert result.exit_code == ExitCode.ERROR

    def test_max_total_option(self, feed_file):
        path = feed_file(distribution_feed(recent=2, today_count=5, seven=6, thirty=3, later=2))

        _, payload = invoke_json("--max-total", "4", "pick", str(path), "--today", TODAY)

        assert len(payload["items"]) == 4

    def test_today_cap_option(self, feed_file):
        path = feed_file(distribution_feed(recent=0, today_count=8, seven=0, thirty=0, later=0))

        _, payload = invoke_json("--today-cap", "5", "pick", str(path), "--today", TODAY)

        assert len(payload["items"]) == 5


class TestCalendar:
    def test_filters_and_pagination(self, feed_file):
        path = feed_file(
            [
                make_record("Alpha", "2025-02-01", region="美国"),
                make_record("Beta", "2025-01-20", media_type="tv", region="日本"),
                make_record("Gamma", "2025-01-25", region="美国 / 英国"),
            ]
        )

        result, payload = invoke_json(
            "calendar", str(path), "--type", "movie", "--region", "美国", "--limit", "1"
        )

        assert result.exit_code == ExitCode.SUCCESS
        assert [item["title"] for item in payload["items"]] == ["Gamma"]
        assert payload["total"] == 2
        assert payload["hasMore"] is True

    def test_date_range(self, feed_file):
        path = feed_file(
            [make_record("Alpha", "2025-02-01"), make_record("Beta", "2025-03-01")]
        )

        _, payload = invoke_json("calendar", str(path), "--from", "2025-02-15", "--to", "2025-03-31")

        assert [item["title"] for item in payload["items"]] == ["Beta"]

    def test_empty_page_exit_code(self, feed_file):
        path = feed_file([make_record("Alpha", "2025-02-01")])

        result = runner.invoke(app, ["calendar", str(path), "--type", "tv"])

        assert result.exit_code == ExitCode.NO_RESULTS


class TestFilters:
    def test_json_facets(self, feed_file):
        path = feed_file(
            [
                make_record("Alpha", "2025-02-01", region="美国", genre="剧情"),
                make_record("Beta", "2025-01-20", media_type="tv", region="美国"),
            ]
        )

        result, payload = invoke_json("filters", str(path))

        assert result.exit_code == ExitCode.SUCCESS
        assert payload["types"] == [
            {"value": "movie", "label": "电影", "count": 1},
            {"value": "tv", "label": "电视剧", "count": 1},
        ]
        assert payload["regions"] == [{"value": "美国", "label": "美国", "count": 2}]

    def test_text_facets(self, feed_file):
        path = feed_file([make_record("Alpha", "2025-02-01", region="美国")])

        result = runner.invoke(app, ["filters", str(path)])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Regions:" in result.stdout
        assert "美国: 1" in result.stdout


class TestNormalize:
    def test_text(self):
        result = runner.invoke(app, ["normalize", "Alpha 第二季", "前传:猛将"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Alpha 第二季 -> Alpha [season]" in result.stdout
        assert "前传:猛将 -> 猛将" in result.stdout

    def test_json(self):
        _, payload = invoke_json("normalize", "Night Watch Season 2")

        assert payload == [
            {"title": "Night Watch Season 2", "key": "NightWatch", "has_season_marker": True}
        ]


class TestOddRecords:
    def test_text_output_with_non_text_region(self, feed_file):
        path = feed_file(
            [
                make_record("Alpha", "2025-01-20", region=5, genre=["剧情"]),
                make_record("Beta", "2025-01-21", cover=42),
            ]
        )

        result = runner.invoke(app, ["pick", str(path), "--today", TODAY])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Alpha" in result.stdout
        assert "Beta" in result.stdout

    def test_filters_with_list_region(self, feed_file):
        path = feed_file([make_record("Alpha", "2025-01-20", region=["美国"])])

        result, payload = invoke_json("filters", str(path))

        assert result.exit_code == ExitCode.SUCCESS
        assert payload["regions"] == [{"value": "未知", "label": "未知", "count": 1}]
