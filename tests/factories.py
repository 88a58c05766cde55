"""Builders for domain records used across tests."""

from datetime import UTC, datetime, timedelta

from story_contest.ranking import LeaderboardEntry, SubmissionRecord, VoteRecord

BASE_TIME = datetime(2025, 1, 10, 9, 0, tzinfo=UTC)


def at(minutes: int) -> datetime:
    return BASE_TIME + timedelta(minutes=minutes)


def submission(
    sid: str,
    created: int = 0,
    event_id: str | None = "event-1",
    group_key: str | None = None,
) -> SubmissionRecord:
    return SubmissionRecord(
        id=sid,
        created_at=at(created),
        event_id=event_id,
        group_key=group_key,
        title=f"Story {sid}",
    )


def vote(voter: str, sid: str, score: int, minute: int = 0, vid: str | None = None) -> VoteRecord:
    return VoteRecord(
        id=vid or f"{voter}:{sid}:{minute}",
        submission_id=sid,
        voter_id=voter,
        score=score,
        created_at=at(minute),
    )


def entry(
    sid: str,
    rank: int,
    mean: float,
    count: int = 1,
    group_key: str | None = None,
) -> LeaderboardEntry:
    return LeaderboardEntry(
        submission=submission(sid, created=rank, group_key=group_key),
        rank=rank,
        mean=mean,
        count=count,
    )
