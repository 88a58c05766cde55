"""Configuration schemas and loading for Story Contest."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from story_contest.core.errors import MissingCredentialsError

DEFAULT_GROUPS = ["Tiny Tales", "Young Dreamers", "Story Champions"]


class ScoringConfig(BaseModel):
    """Inclusive integer bound for vote scores."""

    min_score: int = 1
    max_score: int = 10

    @model_validator(mode="after")
    def validate_bounds(self) -> ScoringConfig:
        if self.min_score >= self.max_score:
            msg = "min_score must be lower than max_score"
            raise ValueError(msg)
        return self

    @property
    def score_range(self) -> tuple[int, int]:
        return self.min_score, self.max_score


class LeaderboardConfig(BaseModel):
    """Leaderboard selection configuration.

    Attributes:
        groups: Ordered group names used for balanced top-N selection
            (class levels for school events). Empty list means plain top-N.
        per_group_quota: Entries taken from each group before backfilling.
        total_quota: Size of the balanced top-N selection.
        community_pool_size: Number of judge-ranked entries after the top-N
            that are eligible for the community leaderboard.
    """

    groups: list[str] = Field(default_factory=lambda: list(DEFAULT_GROUPS))
    per_group_quota: int = Field(default=2, ge=0)
    total_quota: int = Field(default=6, ge=0)
    community_pool_size: int = Field(default=45, ge=0)

    @field_validator("groups")
    @classmethod
    def validate_groups_unique(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            msg = "Group names must be unique"
            raise ValueError(msg)
        for name in v:
            if not name or not name.strip():
                msg = "Group names cannot be empty"
                raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_quotas(self) -> LeaderboardConfig:
        if self.total_quota < self.per_group_quota:
            msg = "total_quota must be at least per_group_quota"
            raise ValueError(msg)
        return self


class OtpConfig(BaseModel):
    """One-time password and SMS delivery settings."""

    expiry_minutes: int = Field(default=5, ge=1)
    code_length: int = Field(default=6, ge=4, le=10)
    default_country_code: str = "+91"
    sender_name: str = "Story Seed Studio"
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_phone_number: str | None = None

    def get_twilio_credentials(self) -> tuple[str, str, str]:
        """Get Twilio credentials from config or environment."""
        sid = self.twilio_account_sid or os.environ.get("TWILIO_ACCOUNT_SID")
        token = self.twilio_auth_token or os.environ.get("TWILIO_AUTH_TOKEN")
        phone = self.twilio_phone_number or os.environ.get("TWILIO_PHONE_NUMBER")
        if not sid or not token or not phone:
            raise MissingCredentialsError(
                "Twilio",
                ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"),
            )
        return sid, token, phone


class PaymentConfig(BaseModel):
    """Payment gateway settings. Amounts are in minor currency units.

    ``provider`` picks the gateway used for orders. Razorpay uses the key
    pair; Zoho uses an OAuth refresh token and signs its webhooks with a
    separate secret.
    """

    provider: Literal["razorpay", "zoho"] = "razorpay"
    currency: str = "INR"
    key_id: str | None = None
    key_secret: str | None = None
    zoho_client_id: str | None = None
    zoho_client_secret: str | None = None
    zoho_refresh_token: str | None = None
    zoho_organization_id: str | None = None
    zoho_webhook_secret: str | None = None
    zoho_accounts_url: str = "https://accounts.zoho.in"
    zoho_api_url: str = "https://payments.zoho.in/api/v1"

    def get_key_id(self) -> str:
        key_id = self.key_id or os.environ.get("RAZORPAY_KEY_ID")
        if not key_id:
            raise MissingCredentialsError("Razorpay", ("RAZORPAY_KEY_ID",))
        return key_id

    def get_key_secret(self) -> str:
        """Get the signing secret from config or environment."""
        secret = self.key_secret or os.environ.get("RAZORPAY_KEY_SECRET")
        if not secret:
            raise MissingCredentialsError("Razorpay", ("RAZORPAY_KEY_SECRET",))
        return secret

    def get_zoho_credentials(self) -> tuple[str, str, str, str]:
        """Get Zoho OAuth client id, secret, refresh token and organization id."""
        values = (
            self.zoho_client_id or os.environ.get("ZOHO_CLIENT_ID"),
            self.zoho_client_secret or os.environ.get("ZOHO_CLIENT_SECRET"),
            self.zoho_refresh_token or os.environ.get("ZOHO_REFRESH_TOKEN"),
            self.zoho_organization_id or os.environ.get("ZOHO_USER_ID"),
        )
        if not all(values):
            raise MissingCredentialsError(
                "Zoho",
                ("ZOHO_CLIENT_ID", "ZOHO_CLIENT_SECRET", "ZOHO_REFRESH_TOKEN", "ZOHO_USER_ID"),
            )
        return values

    def get_zoho_webhook_secret(self) -> str:
        secret = self.zoho_webhook_secret or os.environ.get("ZOHO_PAYMENTS_WEBHOOK_SECRET")
        if not secret:
            raise MissingCredentialsError("Zoho", ("ZOHO_PAYMENTS_WEBHOOK_SECRET",))
        return secret


class ContestConfig(BaseModel):
    """Complete contest configuration."""

    name: str = "Story Contest"
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    leaderboard: LeaderboardConfig = Field(default_factory=LeaderboardConfig)
    otp: OtpConfig = Field(default_factory=OtpConfig)
    payment: PaymentConfig = Field(default_factory=PaymentConfig)
    database_path: str = "./contest.duckdb"
    output_dir: str = "./reports"


def load_config(path: str | Path) -> ContestConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Returns:
        Validated ContestConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f)

    return ContestConfig.model_validate(data or {})
