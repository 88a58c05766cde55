from ._time import as_utc, utc_now
from .otp_code import OtpCode
from .role import RoleAssignment
from .submission import Submission
from .vote import Vote

__all__ = ["OtpCode", "RoleAssignment", "Submission", "Vote", "as_utc", "utc_now"]
