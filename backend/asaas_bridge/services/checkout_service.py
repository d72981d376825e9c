from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Callable

from fastapi import status

from ..config import LinkStrategy, PlanConfig, Settings
from ..logging_context import set_customer_context
from ..schemas import CheckoutResponse, CustomerRef, PaymentLink, SubscriptionRef
from .asaas_client import EXCERPT_LIMIT, AsaasClient, MalformedResponse, parse_record
from .customers import ensure_customer

logger = logging.getLogger(__name__)

SUBSCRIPTIONS_PATH = "/subscriptions"
PAYMENT_LINKS_PATH = "/paymentLinks"
MISSING_PARAMETERS_DETAIL = "Parâmetros email e name são obrigatórios"


class MissingParameter(ValueError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str = MISSING_PARAMETERS_DETAIL) -> None:
        super().__init__(detail)
        self.detail = detail


def _require(value: str | None) -> str:
    if value is None or not value.strip():
        raise MissingParameter()
    return value


class CheckoutService:
    """
    Run the customer -> subscription -> payable URL sequence against Asaas.

    Steps are strictly sequential and not compensated: when a later step
    fails, the customer or subscription created earlier stays in Asaas. Each
    completed step is logged with its identifier so it can be reconciled by
    hand.
    """

    def __init__(
        self,
        client: AsaasClient,
        plan: PlanConfig,
        *,
        link_strategy: LinkStrategy = LinkStrategy.payment_link,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._client = client
        self._plan = plan
        self._link_strategy = link_strategy
        self._today = today

    @classmethod
    def from_settings(cls, client: AsaasClient, settings: Settings) -> "CheckoutService":
        return cls(client, settings.plan, link_strategy=settings.checkout_link_strategy)

    async def checkout(self, email: str | None, name: str | None) -> CheckoutResponse:
        email = _require(email)
        name = _require(name)

        customer = await ensure_customer(self._client, email, name)
        set_customer_context(customer.id)
        _log_step("customer", asaas_customer_id=customer.id)

        subscription = await self.create_subscription(customer)
        _log_step(
            "subscription",
            asaas_customer_id=customer.id,
            asaas_subscription_id=subscription.id,
        )

        invoice_url = await self.resolve_invoice_url(subscription)
        _log_step(
            "payment_url",
            asaas_customer_id=customer.id,
            asaas_subscription_id=subscription.id,
            link_strategy=self._link_strategy.value,
        )
        return CheckoutResponse(invoiceUrl=invoice_url)

    def subscription_payload(self, customer: CustomerRef) -> dict[str, Any]:
        next_due_date = self._today() + timedelta(days=1)
        return {
            "customer": customer.id,
            "billingType": "UNDEFINED",
            "cycle": "MONTHLY",
            "nextDueDate": next_due_date.isoformat(),
            "value": float(self._plan.value),
            "description": self._plan.description,
        }

    async def create_subscription(self, customer: CustomerRef) -> SubscriptionRef:
        created = await self._client.post(
            SUBSCRIPTIONS_PATH, body=self.subscription_payload(customer)
        )
        return parse_record(SubscriptionRef, created, method="POST", path=SUBSCRIPTIONS_PATH)

    async def resolve_invoice_url(self, subscription: SubscriptionRef) -> str:
        if self._link_strategy is LinkStrategy.first_payment:
            return await self._first_payment_url(subscription)
        link = await self._create_payment_link(subscription)
        return link.url

    async def _create_payment_link(self, subscription: SubscriptionRef) -> PaymentLink:
        created = await self._client.post(
            PAYMENT_LINKS_PATH,
            body={
                "chargeType": "SUBSCRIPTION",
                "subscription": subscription.id,
                "name": self._plan.description,
            },
        )
        return parse_record(PaymentLink, created, method="POST", path=PAYMENT_LINKS_PATH)

    async def _first_payment_url(self, subscription: SubscriptionRef) -> str:
        path = f"{SUBSCRIPTIONS_PATH}/{subscription.id}/payments"
        listing = await self._client.get(path)
        payments = listing.get("data") if isinstance(listing, dict) else None
        first = payments[0] if payments else None
        invoice_url = first.get("invoiceUrl") if isinstance(first, dict) else None
        if not isinstance(invoice_url, str) or not invoice_url:
            raise MalformedResponse(
                method="GET",
                path=path,
                excerpt=str(listing)[:EXCERPT_LIMIT],
                reason=f"Asaas subscription {subscription.id} has no payable invoice",
            )
        return invoice_url


def _log_step(step: str, **fields: Any) -> None:
    logger.info("Checkout step completed: %s", step, extra={"checkout_step": step, **fields})


__all__ = ["CheckoutService", "MissingParameter", "MISSING_PARAMETERS_DETAIL"]
