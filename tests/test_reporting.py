"""Tests for leaderboard formatting and export."""

import csv
import json

from factories import entry

from story_contest.services.reporting import (
    entry_to_dict,
    format_score,
    render_leaderboard_markdown,
)
from story_contest.services.storage import ReportStore


class TestFormatting:
    """Tests for score and table formatting."""

    def test_format_score(self):
        """Means print without trailing zeros."""
        assert format_score(entry("s1", 1, 7.5)) == "7.5/10"
        assert format_score(entry("s1", 1, 8.0), max_score=5) == "8/5"

    def test_entry_to_dict(self):
        """Entries flatten to export rows."""
        row = entry_to_dict(entry("s1", 1, 7.5, count=2, group_key="Tiny Tales"))
        assert row["submission_id"] == "s1"
        assert row["group"] == "Tiny Tales"
        assert row["mean"] == 7.5
        assert row["count"] == 2
        assert row["created_at"].startswith("2025-01-10T09:01")

    def test_markdown_table(self):
        """Markdown reports contain a heading and one row per entry."""
        text = render_leaderboard_markdown(
            "Finals",
            [entry("s1", 1, 9.0, group_key="Tiny Tales"), entry("s2", 2, 7.5)],
            description="Judge scores",
        )
        lines = text.splitlines()
        assert lines[0] == "# Finals"
        assert "Judge scores" in lines
        assert "Rank" in text and "|" in text
        assert "Story s1" in text
        assert "7.5/10" in text

    def test_markdown_empty(self):
        """An empty leaderboard says so."""
        assert "No entries yet." in render_leaderboard_markdown("Finals", [])


class TestReportStore:
    """Tests for ReportStore exports."""

    async def test_save_leaderboard(self, tmp_path):
        """Exports write md, csv and json under a slugged directory."""
        reports = ReportStore(tmp_path, max_score=10)
        entries = [entry("s1", 1, 9.0), entry("s2", 2, 7.5, count=3)]
        directory = await reports.save_leaderboard("Spring Finals", entries)

        assert directory == tmp_path / "spring-finals"
        assert (directory / "leaderboard.md").read_text().startswith("# Leaderboard: Spring")

        with (directory / "leaderboard.csv").open() as f:
            rows = list(csv.DictReader(f))
        assert [r["submission_id"] for r in rows] == ["s1", "s2"]
        assert rows[1]["count"] == "3"

        data = json.loads((directory / "leaderboard.json").read_text())
        assert data[0]["rank"] == 1
        assert data[1]["mean"] == 7.5
