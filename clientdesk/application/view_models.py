"""
Row -> view model mapping for the client detail page.

Total functions: absent optional fields fall back to display defaults.
"""
from dataclasses import dataclass, asdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from clientdesk.domain.asset import ASSET_TYPE_AUDIO, ASSET_TYPE_IMAGE, ASSET_TYPE_PDF, ASSET_TYPE_DOCUMENT
from clientdesk.domain.billing import DEFAULT_CURRENCY, DEFAULT_CYCLE
from clientdesk.domain.client import ClientData, Row
from clientdesk.utils.money import format_money
from clientdesk.utils.validation import to_decimal

DISPLAY_PDF = "pdf"
DISPLAY_IMAGE = "image"
DISPLAY_DOC = "doc"
DISPLAY_OTHER = "other"

_DISPLAY_CATEGORY = {
    ASSET_TYPE_PDF: DISPLAY_PDF,
    ASSET_TYPE_IMAGE: DISPLAY_IMAGE,
    ASSET_TYPE_DOCUMENT: DISPLAY_DOC,
}

_CONTACT_FIELDS = ("email", "phone", "address", "company", "notes")


def display_category(asset_type: Optional[str]) -> str:
    return _DISPLAY_CATEGORY.get(asset_type, DISPLAY_OTHER)


def format_size(size: Optional[int]) -> str:
    if size is None:
        return "Unknown"
    value = float(size)
    for unit in ("B", "KB", "MB"):
        if value < 1024:
            return f"{int(value)} B" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def _date_part(timestamp: Optional[str]) -> str:
    return (timestamp or "")[:10]


@dataclass
class AssetView:
    id: str
    name: str
    type: str
    size: str
    uploaded_at: str
    url: str


def asset_view(row: Row) -> AssetView:
    return AssetView(
        id=row["id"],
        name=row.get("name") or "",
        type=display_category(row.get("type")),
        size=format_size(row.get("size")),
        uploaded_at=_date_part(row.get("created_at")),
        url=row.get("file_url") or "",
    )


def document_views(assets: List[Row]) -> List[AssetView]:
    """Everything except audio; voice notes are listed separately."""
    return [asset_view(a) for a in assets if a.get("type") != ASSET_TYPE_AUDIO]


def voice_note_views(assets: List[Row]) -> List[AssetView]:
    return [asset_view(a) for a in assets if a.get("type") == ASSET_TYPE_AUDIO]


@dataclass
class BillingSettings:
    recurring_enabled: bool = False
    amount: Decimal = Decimal("0")
    currency: str = DEFAULT_CURRENCY
    cycle: str = DEFAULT_CYCLE
    next_payment_date: Optional[date] = None


def billing_settings(subscription: Optional[Row]) -> BillingSettings:
    if not subscription:
        return BillingSettings()
    raw_date = subscription.get("next_payment_date")
    return BillingSettings(
        recurring_enabled=bool(subscription.get("active", False)),
        amount=to_decimal(subscription.get("amount")),
        currency=subscription.get("currency") or DEFAULT_CURRENCY,
        cycle=subscription.get("cycle") or DEFAULT_CYCLE,
        next_payment_date=date.fromisoformat(raw_date[:10]) if raw_date else None,
    )


def billing_changes(settings: BillingSettings) -> Dict[str, Any]:
    """Inverse mapping: billing form -> subscription row fields."""
    return {
        "active": settings.recurring_enabled,
        "amount": settings.amount,
        "currency": settings.currency,
        "cycle": settings.cycle,
        "next_payment_date": settings.next_payment_date.isoformat() if settings.next_payment_date else None,
    }


def contact_info(client: Optional[Row]) -> Dict[str, str]:
    client = client or {}
    return {name: client.get(name) or "" for name in _CONTACT_FIELDS}


@dataclass
class InvoiceView:
    id: str
    date: str
    amount: Decimal
    amount_display: str
    status: str


def invoice_views(invoices: List[Row], currency: str = DEFAULT_CURRENCY) -> List[InvoiceView]:
    return [
        InvoiceView(
            id=i["id"],
            date=_date_part(i.get("created_at")),
            amount=to_decimal(i.get("amount")),
            amount_display=format_money(to_decimal(i.get("amount")), currency),
            status=i.get("status") or "",
        )
        for i in invoices
    ]


def client_detail(data: ClientData) -> Dict[str, Any]:
    """Everything the client detail page renders, as plain data."""
    billing = billing_settings(data.subscription)
    client = data.client or {}
    return {
        "client": data.client,
        "header": {
            "name": client.get("name") or "",
            "source": client.get("source") or "",
            "status": client.get("status") or "",
        },
        "contact": contact_info(data.client),
        "billing": asdict(billing),
        "invoices": [asdict(v) for v in invoice_views(data.invoices, billing.currency)],
        "documents": [asdict(v) for v in document_views(data.assets)],
        "voice_notes": [asdict(v) for v in voice_note_views(data.assets)],
    }
