from __future__ import annotations

import logging

from ..schemas import CustomerRef
from .asaas_client import AsaasClient, parse_record

logger = logging.getLogger(__name__)

CUSTOMERS_PATH = "/customers"


async def find_customer(client: AsaasClient, email: str) -> CustomerRef | None:
    """Return the first Asaas customer registered with ``email``, if any."""
    search = await client.get(CUSTOMERS_PATH, params={"email": email})
    matches = search.get("data") if isinstance(search, dict) else None
    if not matches:
        return None
    return parse_record(CustomerRef, matches[0], method="GET", path=CUSTOMERS_PATH)


async def ensure_customer(client: AsaasClient, email: str, name: str) -> CustomerRef:
    existing = await find_customer(client, email)
    if existing is not None:
        logger.info(
            "Reusing Asaas customer",
            extra={"asaas_customer_id": existing.id},
        )
        return existing

    created = await client.post(CUSTOMERS_PATH, body={"email": email, "name": name})
    customer = parse_record(CustomerRef, created, method="POST", path=CUSTOMERS_PATH)
    logger.info(
        "Created Asaas customer",
        extra={"asaas_customer_id": customer.id},
    )
    return customer


__all__ = ["ensure_customer", "find_customer"]
