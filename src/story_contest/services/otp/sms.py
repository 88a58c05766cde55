"""SMS delivery clients for one-time passwords."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from story_contest.core.config import OtpConfig

logger = structlog.get_logger()


def _is_retryable(error: BaseException) -> bool:
    """Retry transport failures and 5xx responses, never 4xx."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.TransportError)


class SmsSender(ABC):
    """Abstract base class for async SMS senders."""

    @abstractmethod
    async def send(self, to: str, body: str) -> bool:
        """Send a text message.

        Args:
            to: Destination number in E.164 format.
            body: Message text.

        Returns:
            True if the provider accepted the message.
        """

    async def close(self) -> None:  # noqa: B027
        """Close any resources. Override if needed."""


@dataclass(frozen=True)
class SentMessage:
    to: str
    body: str


class FakeSmsSender(SmsSender):
    """Records messages instead of sending them; for tests and dry runs."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[SentMessage] = []

    async def send(self, to: str, body: str) -> bool:
        if self.fail:
            return False
        self.sent.append(SentMessage(to=to, body=body))
        return True


class TwilioSmsSender(SmsSender):
    """Async Twilio Messages API client with retries."""

    BASE_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.account_sid = account_sid
        self.from_number = from_number
        self.client = client or httpx.AsyncClient(timeout=30.0)
        self._auth = httpx.BasicAuth(account_sid, auth_token)

    async def send(self, to: str, body: str) -> bool:
        """Send an SMS; delivery failures are logged and reported as False."""
        try:
            data = await self._post_message(to, body)
        except httpx.HTTPError as e:
            logger.warning("sms_delivery_failed", to=to, error=str(e))
            return False

        if data.get("error_code"):
            logger.warning(
                "sms_delivery_failed",
                to=to,
                error_code=data.get("error_code"),
                error=data.get("error_message"),
            )
            return False

        logger.info("sms_sent", to=to, sid=data.get("sid"))
        return True

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception(_is_retryable),
        reraise=True,
    )
    async def _post_message(self, to: str, body: str) -> dict:
        """Make API call with retries.

        Raises:
            httpx.HTTPError: On API error after retries.
        """
        response = await self.client.post(
            self.BASE_URL.format(sid=self.account_sid),
            auth=self._auth,
            data={"To": to, "From": self.from_number, "Body": body},
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()


def create_sms_sender(config: OtpConfig, dry_run: bool = False) -> SmsSender:
    """Create appropriate SMS sender based on settings.

    Raises:
        MissingCredentialsError: If Twilio credentials are missing.
    """
    if dry_run:
        logger.info("using_fake_sms_sender")
        return FakeSmsSender()

    sid, token, phone = config.get_twilio_credentials()
    return TwilioSmsSender(sid, token, phone)
