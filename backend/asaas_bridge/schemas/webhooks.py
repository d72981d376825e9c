from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class AsaasPayment(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    customer: Optional[str] = None
    subscription: Optional[str] = None
    status: Optional[str] = None


class AsaasWebhookEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    event: Optional[str] = None
    payment: Optional[AsaasPayment] = None
