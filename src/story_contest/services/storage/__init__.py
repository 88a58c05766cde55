from .otp_repository import OtpRepository
from .report_store import ReportStore
from .role_repository import RoleRepository
from .snapshot import ContestSnapshot
from .store import ContestStore
from .submission_repository import SubmissionRepository
from .vote_repository import VoteRepository

__all__ = [
    "ContestSnapshot",
    "ContestStore",
    "OtpRepository",
    "ReportStore",
    "RoleRepository",
    "SubmissionRepository",
    "VoteRepository",
]
