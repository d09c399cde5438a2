"""
Structured partial updates for clients and subscriptions.

Each patch enumerates the fields it may touch; unknown fields are rejected.
Only fields explicitly set by the caller end up in `changes()`, so an
omitted field is never confused with a field cleared to null.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from clientdesk.utils.validation import validate_and_normalize_amount


class _Patch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    @classmethod
    def allowed_fields(cls) -> tuple[str, ...]:
        return tuple(cls.model_fields)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    def is_empty(self) -> bool:
        return not self.model_fields_set


class NewClient(BaseModel):
    """Input for client creation"""
    model_config = ConfigDict(extra="forbid")

    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    source: Optional[str] = None
    status: Literal["active", "archived"] = "active"

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Client name cannot be empty")
        return v

    def to_row(self) -> Dict[str, Any]:
        """Row fields for insert; blank optional strings are stored as null."""
        return {
            "name": self.name,
            "email": self.email or None,
            "phone": self.phone or None,
            "company": self.company or None,
            "source": self.source or None,
            "status": self.status,
        }


class ClientPatch(_Patch):
    name: Optional[str] = None
    source: Optional[str] = None
    status: Optional[Literal["active", "archived"]] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Client name cannot be empty")
        return v.strip()

    @field_validator("status")
    @classmethod
    def status_not_null(cls, v):
        if v is None:
            raise ValueError("Client status cannot be null")
        return v


class SubscriptionPatch(_Patch):
    amount: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = None
    cycle: Optional[Literal["monthly", "quarterly", "yearly", "one-time"]] = None
    next_payment_date: Optional[date] = None
    active: Optional[bool] = None

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, v):
        if v is None:
            raise ValueError("Amount cannot be null")
        if isinstance(v, str):
            return validate_and_normalize_amount(v)
        return v

    @field_validator("currency")
    @classmethod
    def iso_currency(cls, v: Optional[str]) -> str:
        code = (v or "").strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError("Currency must be a 3-letter ISO 4217 code")
        return code

    @field_validator("cycle", "active")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    def changes(self) -> Dict[str, Any]:
        """Changes in row form: dates as ISO strings."""
        data = super().changes()
        if isinstance(data.get("next_payment_date"), date):
            data["next_payment_date"] = data["next_payment_date"].isoformat()
        return data
