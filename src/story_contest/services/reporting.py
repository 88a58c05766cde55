"""Leaderboard formatting for reports and the CLI."""

from __future__ import annotations

from typing import Any

from tabulate import tabulate

from story_contest.ranking import LeaderboardEntry

TABLE_HEADERS = ("Rank", "Title", "Group", "Score", "Votes")


def format_score(entry: LeaderboardEntry, max_score: int = 10) -> str:
    """Display a mean score as e.g. ``7.5/10``."""
    return f"{entry.mean:g}/{max_score}"


def entry_to_dict(entry: LeaderboardEntry) -> dict[str, Any]:
    """Flatten an entry for JSON/CSV export."""
    s = entry.submission
    return {
        "rank": entry.rank,
        "submission_id": s.id,
        "title": s.title,
        "owner_id": s.owner_id,
        "event_id": s.event_id,
        "group": s.group_key,
        "category": s.category,
        "mean": entry.mean,
        "count": entry.count,
        "created_at": s.created_at.isoformat(),
    }


def leaderboard_rows(
    entries: list[LeaderboardEntry], max_score: int = 10
) -> list[tuple[int, str, str, str, int]]:
    return [
        (
            e.rank,
            e.submission.title or e.submission.id,
            e.submission.group_key or "-",
            format_score(e, max_score),
            e.count,
        )
        for e in entries
    ]


def render_leaderboard_markdown(
    title: str,
    entries: list[LeaderboardEntry],
    max_score: int = 10,
    description: str | None = None,
) -> str:
    """Render a leaderboard as a Markdown report.

    Args:
        title: Report title (markdown heading).
        entries: Ranked entries.
        max_score: Upper score bound used in the score column.
        description: Optional description line below title.

    Returns:
        Markdown report content.
    """
    lines = [f"# {title}", ""]
    if description:
        lines.extend([description, ""])
    if not entries:
        lines.append("No entries yet.")
    else:
        lines.append(
            tabulate(leaderboard_rows(entries, max_score), headers=TABLE_HEADERS, tablefmt="github")
        )
    return "\n".join(lines)
