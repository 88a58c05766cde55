"""Zoho Payments client: OAuth token refresh, payment sessions and links."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import httpx
import structlog

from story_contest.core.errors import PaymentGatewayError
from story_contest.services.payment.gateway import PaymentGateway, PaymentOrder

logger = structlog.get_logger()

# Refresh the access token this many seconds before Zoho expires it
TOKEN_EXPIRY_MARGIN = 60


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class ZohoGateway(PaymentGateway):
    """Async Zoho Payments client.

    Amounts are passed in minor currency units like every other gateway and
    converted to the major units Zoho expects. The OAuth access token is
    refreshed from the long-lived refresh token and cached until shortly
    before it expires.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        organization_id: str,
        accounts_url: str = "https://accounts.zoho.in",
        api_url: str = "https://payments.zoho.in/api/v1",
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.organization_id = organization_id
        self.accounts_url = accounts_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=30.0)
        self._clock = clock
        self._token: str | None = None
        self._token_expires_at = 0.0

    async def access_token(self) -> str:
        """Return a valid access token, refreshing it when needed.

        Raises:
            PaymentGatewayError: If Zoho refuses the refresh token.
        """
        if self._token and self._clock() < self._token_expires_at:
            return self._token

        try:
            response = await self.client.post(
                f"{self.accounts_url}/oauth/v2/token",
                params={
                    "refresh_token": self.refresh_token,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "refresh_token",
                },
            )
        except httpx.TransportError as e:
            msg = f"Zoho accounts server unreachable: {e}"
            raise PaymentGatewayError(msg) from e

        data = _json_or_empty(response)
        if response.is_error or "access_token" not in data:
            logger.error("zoho_token_failed", status=response.status_code, error=data.get("error"))
            msg = "Failed to get Zoho access token"
            raise PaymentGatewayError(msg, status_code=response.status_code)

        self._token = data["access_token"]
        expires_in = float(data.get("expires_in", 3600))
        self._token_expires_at = self._clock() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        logger.debug("zoho_token_refreshed", expires_in=expires_in)
        return self._token

    async def _post(self, path: str, payload: dict[str, Any], failure: str) -> dict[str, Any]:
        token = await self.access_token()
        try:
            response = await self.client.post(
                f"{self.api_url}/{path}",
                headers={"Authorization": f"Zoho-oauthtoken {token}"},
                json=payload,
            )
        except httpx.TransportError as e:
            msg = f"Payment gateway unreachable: {e}"
            raise PaymentGatewayError(msg) from e

        data = _json_or_empty(response)
        if response.is_error:
            description = data.get("message") or failure
            logger.error("zoho_request_failed", path=path, status=response.status_code)
            raise PaymentGatewayError(description, status_code=response.status_code)
        return data

    async def create_order(self, amount: int, currency: str, receipt: str) -> PaymentOrder:
        """Create a payment session for ``amount`` minor units."""
        logger.info("creating_payment_session", amount=amount, currency=currency)
        data = await self._post(
            "paymentsessions",
            {
                "amount": amount / 100,
                "currency_code": currency,
                "organization_id": self.organization_id,
            },
            "Failed to create payment session",
        )
        session = data.get("payments_session") or data
        session_id = session.get("payments_session_id") or session.get("id")
        if not session_id:
            msg = "Payment gateway returned no session id"
            raise PaymentGatewayError(msg)

        logger.info("payment_session_created", session_id=session_id)
        return PaymentOrder(
            id=str(session_id),
            amount=amount,
            currency=currency,
            receipt=receipt,
            status=session.get("status", "created"),
            raw=data,
        )

    async def create_payment_link(
        self,
        amount: int,
        currency: str,
        reference_id: str,
        description: str,
        return_url: str,
        email: str,
    ) -> dict[str, Any]:
        """Create a hosted payment link; returns Zoho's response body."""
        return await self._post(
            "paymentlinks",
            {
                "amount": amount / 100,
                "currency_code": currency,
                "organization_id": self.organization_id,
                "email": email,
                "return_url": return_url,
                "reference_id": reference_id,
                "description": description,
            },
            "Failed to create payment link",
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()
