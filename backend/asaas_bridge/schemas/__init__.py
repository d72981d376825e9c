from .checkout import (
    CheckoutResponse,
    CustomerRef,
    ErrorResponse,
    PaymentLink,
    SubscriptionRef,
)
from .webhooks import AsaasPayment, AsaasWebhookEvent

__all__ = [
    "AsaasPayment",
    "AsaasWebhookEvent",
    "CheckoutResponse",
    "CustomerRef",
    "ErrorResponse",
    "PaymentLink",
    "SubscriptionRef",
]
