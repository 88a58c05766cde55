"""Order creation and payment signature verification."""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from story_contest.core.config import PaymentConfig
from story_contest.core.errors import ConfigurationError, InvalidArgumentError
from story_contest.services.payment.gateway import PaymentGateway, PaymentOrder

logger = structlog.get_logger()


def compute_signature(secret: str, order_id: str, payment_id: str) -> str:
    """HMAC-SHA256 hex digest of ``"<order_id>|<payment_id>"``."""
    payload = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def parse_webhook_signature(header: str | None) -> tuple[str, str] | None:
    """Split a ``t=<timestamp>,v=<signature>`` header; None when malformed."""
    if not header:
        return None
    parts = dict(part.strip().partition("=")[::2] for part in header.split(","))
    timestamp, signature = parts.get("t"), parts.get("v")
    if not timestamp or not signature:
        return None
    return timestamp, signature


def verify_webhook_signature(secret: str, payload: str, header: str | None) -> bool:
    """Check a webhook signature: HMAC-SHA256 hex of ``"<timestamp>.<payload>"``."""
    parsed = parse_webhook_signature(header)
    if parsed is None:
        return False
    timestamp, signature = parsed
    message = f"{timestamp}.{payload}".encode()
    expected = hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected.encode(), signature.encode())


def _utc_now() -> datetime:
    return datetime.now(UTC)


class PaymentService:
    """Creates gateway orders and verifies payment callbacks."""

    def __init__(
        self,
        config: PaymentConfig,
        gateway: PaymentGateway | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self._clock = clock

    async def create_order(self, amount: int) -> PaymentOrder:
        """Create an order for ``amount`` minor currency units.

        Raises:
            InvalidArgumentError: If the amount is not a positive integer.
            PaymentGatewayError: If the gateway rejects the order.
            ConfigurationError: If the service was built without a gateway.
        """
        if self.gateway is None:
            msg = "No payment gateway configured"
            raise ConfigurationError(msg, "Pass a gateway built with create_gateway().")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            msg = f"Invalid amount: {amount!r}"
            raise InvalidArgumentError(msg)
        receipt = f"order_rcpt_{int(self._clock().timestamp() * 1000)}"
        return await self.gateway.create_order(amount, self.config.currency, receipt)

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """Check a payment signature against the server-held secret.

        Raises:
            InvalidArgumentError: If any reference is missing.
            MissingCredentialsError: If no signing secret is configured.
        """
        if not order_id or not payment_id or not signature:
            msg = "Missing verification parameters"
            raise InvalidArgumentError(msg)

        expected = compute_signature(self.config.get_key_secret(), order_id, payment_id)
        valid = hmac.compare_digest(expected.encode(), signature.encode())
        if valid:
            logger.info("payment_verified", order_id=order_id, payment_id=payment_id)
        else:
            logger.warning("payment_signature_mismatch", order_id=order_id)
        return valid

    def verify_webhook(self, payload: str, signature_header: str | None) -> bool:
        """Check a Zoho webhook body against its signature header.

        Raises:
            MissingCredentialsError: If no webhook secret is configured.
        """
        valid = verify_webhook_signature(
            self.config.get_zoho_webhook_secret(), payload, signature_header
        )
        if not valid:
            logger.warning("webhook_signature_mismatch")
        return valid
