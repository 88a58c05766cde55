"""Tests for configuration loading and validation."""

import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from story_contest.core.config import (
    ContestConfig,
    LeaderboardConfig,
    OtpConfig,
    PaymentConfig,
    ScoringConfig,
    load_config,
)
from story_contest.core.errors import MissingCredentialsError
from story_contest.core.slug import slugify


class TestScoringConfig:
    """Tests for ScoringConfig."""

    def test_defaults(self):
        """Default range is 1-10."""
        assert ScoringConfig().score_range == (1, 10)

    def test_inverted_bounds(self):
        """min_score must be below max_score."""
        with pytest.raises(ValidationError):
            ScoringConfig(min_score=5, max_score=5)


class TestLeaderboardConfig:
    """Tests for LeaderboardConfig."""

    def test_defaults(self):
        """Three class-level groups, 2 per group, 6 total, pool of 45."""
        config = LeaderboardConfig()
        assert config.groups == ["Tiny Tales", "Young Dreamers", "Story Champions"]
        assert config.per_group_quota == 2
        assert config.total_quota == 6
        assert config.community_pool_size == 45

    def test_defaults_not_shared(self):
        """Each instance gets its own group list."""
        a = LeaderboardConfig()
        a.groups.append("Extra")
        assert "Extra" not in LeaderboardConfig().groups

    def test_duplicate_groups(self):
        """Group names must be unique."""
        with pytest.raises(ValidationError, match="unique"):
            LeaderboardConfig(groups=["A", "A"])

    def test_blank_group(self):
        """Group names cannot be blank."""
        with pytest.raises(ValidationError, match="empty"):
            LeaderboardConfig(groups=["A", " "])

    def test_empty_groups_allowed(self):
        """An empty group list means plain top-N."""
        assert LeaderboardConfig(groups=[]).groups == []

    def test_total_below_per_group(self):
        """total_quota cannot be below per_group_quota."""
        with pytest.raises(ValidationError):
            LeaderboardConfig(per_group_quota=3, total_quota=2)

    def test_negative_quota(self):
        """Quotas are non-negative."""
        with pytest.raises(ValidationError):
            LeaderboardConfig(community_pool_size=-1)


class TestCredentials:
    """Tests for credential lookup."""

    def test_twilio_from_env(self, monkeypatch):
        """Twilio credentials fall back to the environment."""
        monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
        monkeypatch.setenv("TWILIO_AUTH_TOKEN", "token")
        monkeypatch.setenv("TWILIO_PHONE_NUMBER", "+15550000")
        assert OtpConfig().get_twilio_credentials() == ("AC123", "token", "+15550000")

    def test_twilio_config_wins(self, monkeypatch):
        """Config values take precedence over the environment."""
        monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC-env")
        config = OtpConfig(
            twilio_account_sid="AC-config",
            twilio_auth_token="t",
            twilio_phone_number="+1",
        )
        assert config.get_twilio_credentials()[0] == "AC-config"

    def test_twilio_missing(self, monkeypatch):
        """Missing Twilio credentials raise MissingCredentialsError."""
        for name in ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_PHONE_NUMBER"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(MissingCredentialsError, match="Twilio"):
            OtpConfig().get_twilio_credentials()

    def test_razorpay_missing(self, monkeypatch):
        """Missing Razorpay keys raise MissingCredentialsError with a suggestion."""
        monkeypatch.delenv("RAZORPAY_KEY_SECRET", raising=False)
        with pytest.raises(MissingCredentialsError) as exc_info:
            PaymentConfig().get_key_secret()
        assert "RAZORPAY_KEY_SECRET" in str(exc_info.value)

    def test_razorpay_from_env(self, monkeypatch):
        """Razorpay keys fall back to the environment."""
        monkeypatch.setenv("RAZORPAY_KEY_ID", "rzp_test")
        assert PaymentConfig().get_key_id() == "rzp_test"

    def test_zoho_from_env(self, monkeypatch):
        """Zoho OAuth credentials fall back to the environment."""
        monkeypatch.setenv("ZOHO_CLIENT_ID", "cid")
        monkeypatch.setenv("ZOHO_CLIENT_SECRET", "csecret")
        monkeypatch.setenv("ZOHO_REFRESH_TOKEN", "rtoken")
        monkeypatch.setenv("ZOHO_USER_ID", "org1")
        assert PaymentConfig().get_zoho_credentials() == ("cid", "csecret", "rtoken", "org1")

    def test_unknown_provider_rejected(self):
        """Only known payment providers are accepted."""
        with pytest.raises(ValidationError):
            PaymentConfig(provider="stripe")


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_yaml(self):
        """Values from YAML override defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "contest.yaml"
            path.write_text(
                "name: Spring Stories\n"
                "scoring:\n"
                "  max_score: 5\n"
                "leaderboard:\n"
                "  groups: [Juniors, Seniors]\n"
                "  total_quota: 4\n"
                "otp:\n"
                "  expiry_minutes: 10\n"
            )
            config = load_config(path)

        assert config.name == "Spring Stories"
        assert config.scoring.score_range == (1, 5)
        assert config.leaderboard.groups == ["Juniors", "Seniors"]
        assert config.leaderboard.total_quota == 4
        assert config.leaderboard.per_group_quota == 2
        assert config.otp.expiry_minutes == 10
        assert config.payment.currency == "INR"

    def test_empty_file(self):
        """An empty file gives the defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "empty.yaml"
            path.write_text("")
            assert load_config(path) == ContestConfig()

    def test_missing_file(self):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/contest.yaml")

    def test_invalid_values(self):
        """Invalid values raise a pydantic ValidationError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yaml"
            path.write_text("scoring:\n  min_score: 10\n  max_score: 1\n")
            with pytest.raises(ValidationError):
                load_config(path)


class TestSlugify:
    """Tests for slugify."""

    def test_basic(self):
        """Text is lowercased and joined with hyphens."""
        assert slugify("Spring Finals 2025!") == "spring-finals-2025"

    def test_truncation(self):
        """Long slugs are truncated without a trailing hyphen."""
        assert slugify("abc def", max_length=4) == "abc"

    def test_fallback(self):
        """Text without usable characters falls back to a default."""
        assert slugify("!!!") == "leaderboard"
