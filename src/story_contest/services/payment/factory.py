"""Gateway selection from payment settings."""

from __future__ import annotations

import structlog

from story_contest.core.config import PaymentConfig
from story_contest.services.payment.gateway import (
    FakePaymentGateway,
    PaymentGateway,
    RazorpayGateway,
)
from story_contest.services.payment.zoho import ZohoGateway

logger = structlog.get_logger()


def create_gateway(config: PaymentConfig, dry_run: bool = False) -> PaymentGateway:
    """Create appropriate payment gateway based on settings.

    Raises:
        MissingCredentialsError: If the selected provider's credentials are missing.
    """
    if dry_run:
        logger.info("using_fake_payment_gateway")
        return FakePaymentGateway()

    if config.provider == "zoho":
        client_id, client_secret, refresh_token, organization_id = config.get_zoho_credentials()
        return ZohoGateway(
            client_id,
            client_secret,
            refresh_token,
            organization_id,
            accounts_url=config.zoho_accounts_url,
            api_url=config.zoho_api_url,
        )

    return RazorpayGateway(config.get_key_id(), config.get_key_secret())
