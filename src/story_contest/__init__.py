"""Story Contest scoring.

Rank storytelling-contest submissions from judge and community votes,
with balanced top-N selection, SMS one-time passwords and payment
signature verification.
"""

from story_contest.ranking import (
    LeaderboardEntry,
    RoleFilter,
    compute_leaderboard,
    select_balanced_top_n,
)

__version__ = "0.1.0"
__all__ = [
    "LeaderboardEntry",
    "RoleFilter",
    "__version__",
    "compute_leaderboard",
    "select_balanced_top_n",
]
