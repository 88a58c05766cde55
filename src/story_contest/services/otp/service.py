"""One-time password issuance and verification."""

from __future__ import annotations

import hmac
import re
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog

from story_contest.core.config import OtpConfig
from story_contest.core.errors import (
    InvalidPhoneError,
    OtpExpiredError,
    OtpMismatchError,
    OtpNotFoundError,
)
from story_contest.models import as_utc
from story_contest.services.otp.sms import SmsSender
from story_contest.services.storage import OtpRepository

logger = structlog.get_logger()

PHONE_DIGITS = 10


def normalize_phone(raw: str) -> str:
    """Keep digits only and take the last ten.

    Raises:
        InvalidPhoneError: If fewer than ten digits remain.
    """
    digits = re.sub(r"\D", "", raw or "")[-PHONE_DIGITS:]
    if len(digits) != PHONE_DIGITS:
        raise InvalidPhoneError(raw)
    return digits


def generate_code(length: int = 6) -> str:
    """Random numeric code without a leading zero."""
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class OtpDispatch:
    """Outcome of a code request.

    Attributes:
        phone: Normalized ten-digit phone number.
        expires_at: When the issued code stops being accepted (UTC).
        delivered: Whether the SMS provider accepted the message.
    """

    phone: str
    expires_at: datetime
    delivered: bool


class OtpService:
    """Issues single-use codes and verifies them.

    A new request replaces any outstanding code for the same phone number.
    Codes expire after ``OtpConfig.expiry_minutes`` and are deleted once
    verified.
    """

    def __init__(
        self,
        config: OtpConfig,
        repository: OtpRepository,
        sender: SmsSender,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.config = config
        self.repository = repository
        self.sender = sender
        self._clock = clock

    def _destination(self, phone: str) -> str:
        return f"{self.config.default_country_code}{phone}"

    async def request_code(self, phone: str) -> OtpDispatch:
        """Issue a new code and send it by SMS.

        Raises:
            InvalidPhoneError: If the phone number is malformed.
        """
        normalized = normalize_phone(phone)
        code = generate_code(self.config.code_length)
        expires_at = as_utc(self._clock()) + timedelta(minutes=self.config.expiry_minutes)

        await self.repository.replace_code(normalized, code, expires_at)

        message = (
            f"Your {self.config.sender_name} verification code is: {code}. "
            f"Valid for {self.config.expiry_minutes} minutes."
        )
        delivered = await self.sender.send(self._destination(normalized), message)
        logger.info("otp_issued", phone=normalized, delivered=delivered)
        return OtpDispatch(phone=normalized, expires_at=expires_at, delivered=delivered)

    async def verify_code(self, phone: str, code: str) -> None:
        """Verify and consume a code.

        Raises:
            InvalidPhoneError: If the phone number is malformed.
            OtpNotFoundError: If no code is outstanding.
            OtpExpiredError: If the code expired; it is deleted.
            OtpMismatchError: If the code is wrong; it stays valid.
        """
        normalized = normalize_phone(phone)
        record = await self.repository.latest_code(normalized)
        if record is None:
            raise OtpNotFoundError()

        if as_utc(self._clock()) > as_utc(record.expires_at):
            await self.repository.delete_code(record.id)
            logger.info("otp_expired", phone=normalized)
            raise OtpExpiredError()

        supplied = str(code).strip().encode()
        if not hmac.compare_digest(record.code.encode(), supplied):
            logger.info("otp_mismatch", phone=normalized)
            raise OtpMismatchError()

        if not await self.repository.delete_code(record.id):
            # consumed by a concurrent verification
            raise OtpNotFoundError()
        logger.info("otp_verified", phone=normalized)
