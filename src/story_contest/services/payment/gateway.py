"""Payment gateway clients for order creation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from story_contest.core.errors import PaymentGatewayError

logger = structlog.get_logger()


@dataclass(frozen=True)
class PaymentOrder:
    """An order created at the payment gateway.

    Attributes:
        id: Gateway order reference.
        amount: Amount in minor currency units.
        currency: ISO currency code.
        receipt: Merchant receipt reference.
        status: Gateway order status.
        raw: Full gateway response.
    """

    id: str
    amount: int
    currency: str
    receipt: str
    status: str = "created"
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


class PaymentGateway(ABC):
    """Abstract base class for async payment gateways."""

    @abstractmethod
    async def create_order(self, amount: int, currency: str, receipt: str) -> PaymentOrder:
        """Create an order the client can pay against.

        Raises:
            PaymentGatewayError: If the gateway rejects the request.
        """

    async def close(self) -> None:  # noqa: B027
        """Close any resources. Override if needed."""


class FakePaymentGateway(PaymentGateway):
    """Creates sequential fake orders; for tests and dry runs."""

    def __init__(self) -> None:
        self.orders: list[PaymentOrder] = []

    async def create_order(self, amount: int, currency: str, receipt: str) -> PaymentOrder:
        order = PaymentOrder(
            id=f"order_fake_{len(self.orders) + 1}",
            amount=amount,
            currency=currency,
            receipt=receipt,
        )
        self.orders.append(order)
        return order


class RazorpayGateway(PaymentGateway):
    """Async Razorpay Orders API client."""

    BASE_URL = "https://api.razorpay.com/v1/orders"

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.client = client or httpx.AsyncClient(timeout=30.0)
        self._auth = httpx.BasicAuth(key_id, key_secret)

    async def create_order(self, amount: int, currency: str, receipt: str) -> PaymentOrder:
        logger.info("creating_order", amount=amount, currency=currency)
        try:
            response = await self.client.post(
                self.BASE_URL,
                auth=self._auth,
                json={"amount": amount, "currency": currency, "receipt": receipt},
            )
        except httpx.TransportError as e:
            msg = f"Payment gateway unreachable: {e}"
            raise PaymentGatewayError(msg) from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            description = (data.get("error") or {}).get("description") or "Failed to create order"
            logger.error("order_failed", status=response.status_code, error=description)
            raise PaymentGatewayError(description, status_code=response.status_code)

        if "id" not in data:
            msg = "Payment gateway returned no order id"
            raise PaymentGatewayError(msg, status_code=response.status_code)

        logger.info("order_created", order_id=data["id"])
        return PaymentOrder(
            id=data["id"],
            amount=data.get("amount", amount),
            currency=data.get("currency", currency),
            receipt=data.get("receipt", receipt),
            status=data.get("status", "created"),
            raw=data,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()
