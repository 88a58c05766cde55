"""Leaderboard export to Markdown, CSV and JSON files."""

from __future__ import annotations

import asyncio
import csv
import json
from pathlib import Path

import structlog

from story_contest.core.slug import slugify
from story_contest.ranking import LeaderboardEntry
from story_contest.services.reporting import entry_to_dict, render_leaderboard_markdown

logger = structlog.get_logger()

CSV_FIELDS = [
    "rank",
    "submission_id",
    "title",
    "owner_id",
    "event_id",
    "group",
    "category",
    "mean",
    "count",
    "created_at",
]


class ReportStore:
    """Report export storage."""

    def __init__(self, base_dir: Path, max_score: int = 10) -> None:
        """Initialize report store.

        Args:
            base_dir: Directory under which one folder per export is created.
            max_score: Upper score bound shown in Markdown reports.
        """
        self.base_dir = base_dir
        self.max_score = max_score

    def report_dir(self, name: str) -> Path:
        """Get or create the directory for a named export."""
        path = self.base_dir / slugify(name)
        path.mkdir(parents=True, exist_ok=True)
        return path

    async def save_leaderboard(self, name: str, entries: list[LeaderboardEntry]) -> Path:
        """Save leaderboard to md/csv/json files; returns the export directory."""

        def _save() -> Path:
            directory = self.report_dir(name)

            md_path = directory / "leaderboard.md"
            md_path.write_text(
                render_leaderboard_markdown(f"Leaderboard: {name}", entries, self.max_score)
                + "\n",
                encoding="utf-8",
            )

            rows = [entry_to_dict(e) for e in entries]

            csv_path = directory / "leaderboard.csv"
            with csv_path.open("w", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
                writer.writeheader()
                writer.writerows(rows)

            json_path = directory / "leaderboard.json"
            with json_path.open("w", encoding="utf-8") as f:
                json.dump(rows, f, indent=2, default=str)

            logger.debug("saved_leaderboard", path=str(directory), entries=len(entries))
            return directory

        return await asyncio.to_thread(_save)
