from .factory import create_gateway
from .gateway import (
    FakePaymentGateway,
    PaymentGateway,
    PaymentOrder,
    RazorpayGateway,
)
from .service import (
    PaymentService,
    compute_signature,
    parse_webhook_signature,
    verify_webhook_signature,
)
from .zoho import ZohoGateway

__all__ = [
    "FakePaymentGateway",
    "PaymentGateway",
    "PaymentOrder",
    "PaymentService",
    "RazorpayGateway",
    "ZohoGateway",
    "compute_signature",
    "create_gateway",
    "parse_webhook_signature",
    "verify_webhook_signature",
]
