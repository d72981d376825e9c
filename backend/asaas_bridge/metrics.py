from __future__ import annotations

from prometheus_client import Counter

asaas_requests_total = Counter(
    "asaas_requests_total",
    "Outbound Asaas API calls by HTTP method and outcome.",
    ["method", "outcome"],
)
checkout_requests_total = Counter(
    "checkout_requests_total",
    "Checkout requests by outcome.",
    ["outcome"],
)
asaas_webhook_events_total = Counter(
    "asaas_webhook_events_total",
    "Asaas webhook deliveries received, by event type.",
    ["event"],
)
