"""Core configuration and utilities for Story Contest."""

from story_contest.core.config import (
    ContestConfig,
    LeaderboardConfig,
    OtpConfig,
    PaymentConfig,
    ScoringConfig,
    load_config,
)
from story_contest.core.errors import (
    ConfigurationError,
    ContestError,
    InvalidArgumentError,
    InvalidPhoneError,
    MissingCredentialsError,
    OtpError,
    OtpExpiredError,
    OtpMismatchError,
    OtpNotFoundError,
    PaymentGatewayError,
    UpstreamUnavailableError,
)
from story_contest.core.slug import DEFAULT_SLUG_MAX_LENGTH, slugify

__all__ = [
    "DEFAULT_SLUG_MAX_LENGTH",
    "ContestConfig",
    "LeaderboardConfig",
    "OtpConfig",
    "PaymentConfig",
    "ScoringConfig",
    "load_config",
    "slugify",
    "ConfigurationError",
    "ContestError",
    "InvalidArgumentError",
    "InvalidPhoneError",
    "MissingCredentialsError",
    "OtpError",
    "OtpExpiredError",
    "OtpMismatchError",
    "OtpNotFoundError",
    "PaymentGatewayError",
    "UpstreamUnavailableError",
]
