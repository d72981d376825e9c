from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email: Optional[str] = None
    name: Optional[str] = None


class SubscriptionRef(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    customer_id: str = Field(alias="customer")
    cycle: Literal["MONTHLY"] = "MONTHLY"
    value: Optional[Decimal] = None
    description: Optional[str] = None
    next_due_date: Optional[date] = Field(default=None, alias="nextDueDate")


class PaymentLink(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str


class CheckoutResponse(BaseModel):
    invoiceUrl: str


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
