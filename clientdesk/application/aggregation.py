"""
Derived figures computed from raw row snapshots.

Pure functions: no I/O, no hidden state. Time-window math takes `now`
explicitly so the same rows and the same instant always give the same answer.
"""
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from clientdesk.domain.billing import INVOICE_PAID, INVOICE_PENDING, INVOICE_OVERDUE, OPEN_INVOICE_STATUSES
from clientdesk.domain.client import CLIENT_STATUS_ACTIVE, UNKNOWN_CLIENT_NAME, Row
from clientdesk.utils.validation import to_decimal

_ZERO = Decimal("0")


@dataclass
class ClientStats:
    total: int
    active: int
    total_revenue: Decimal

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class InvoiceStats:
    total: int
    paid: Decimal
    overdue: Decimal
    pending: Decimal
    outstanding: Decimal

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ClientCounts:
    total: int
    active: int


@dataclass
class DashboardStats:
    total_clients: int
    active_clients: int
    open_invoices: Decimal
    revenue_this_month: Decimal
    # Count of active subscriptions; there is no reminder entity behind it
    pending_reminders: int

    def to_dict(self) -> dict:
        return asdict(self)


# ----------------------------------------------------------------------
# Clients
# ----------------------------------------------------------------------

def total_billed_by_client(invoices: Iterable[Row]) -> Dict[str, Decimal]:
    """Sum of paid invoice amounts per client_id."""
    billed: Dict[str, Decimal] = defaultdict(lambda: _ZERO)
    for inv in invoices:
        if inv.get("status") == INVOICE_PAID:
            billed[inv["client_id"]] += to_decimal(inv.get("amount"))
    return dict(billed)


def clients_with_stats(clients: Iterable[Row], invoices: Iterable[Row]) -> List[Row]:
    """
    Client rows enriched with `total_billed` and `last_activity`.

    Clients without paid invoices get 0; last_activity mirrors updated_at.
    """
    billed = total_billed_by_client(invoices)
    return [
        {
            **client,
            "total_billed": billed.get(client["id"], _ZERO),
            "last_activity": client.get("updated_at"),
        }
        for client in clients
    ]


def compute_client_stats(clients: Iterable[Row], invoices: Iterable[Row]) -> ClientStats:
    clients = list(clients)
    billed = total_billed_by_client(invoices)
    active = sum(1 for c in clients if c.get("status") == CLIENT_STATUS_ACTIVE)
    total_revenue = sum((billed.get(c["id"], _ZERO) for c in clients), _ZERO)
    return ClientStats(total=len(clients), active=active, total_revenue=total_revenue)


# ----------------------------------------------------------------------
# Invoices
# ----------------------------------------------------------------------

def _sum_by_status(invoices: Iterable[Row], statuses: tuple) -> Decimal:
    return sum(
        (to_decimal(i.get("amount")) for i in invoices if i.get("status") in statuses),
        _ZERO,
    )


def compute_invoice_stats(invoices: Iterable[Row]) -> InvoiceStats:
    invoices = list(invoices)
    paid = _sum_by_status(invoices, (INVOICE_PAID,))
    overdue = _sum_by_status(invoices, (INVOICE_OVERDUE,))
    pending = _sum_by_status(invoices, (INVOICE_PENDING,))
    return InvoiceStats(
        total=len(invoices),
        paid=paid,
        overdue=overdue,
        pending=pending,
        outstanding=overdue + pending,
    )


def join_client_name(invoices: Iterable[Row], clients: Iterable[Row]) -> List[Row]:
    """Left join: each invoice gets `client_name`, "Unknown Client" when unmatched."""
    names = {c["id"]: c.get("name") for c in clients}
    return [
        {**inv, "client_name": names.get(inv.get("client_id")) or UNKNOWN_CLIENT_NAME}
        for inv in invoices
    ]


# ----------------------------------------------------------------------
# Dashboard
# ----------------------------------------------------------------------

def month_start(now: datetime) -> datetime:
    """First instant (00:00) of now's calendar month, in now's timezone."""
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _parse_created_at(value, tz) -> Optional[datetime]:
    if value is None:
        return None
    created = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if tz is None:
        # Naive "now": compare in the machine's local calendar
        if created.tzinfo is not None:
            created = created.astimezone().replace(tzinfo=None)
        return created
    if created.tzinfo is None:
        # Naive timestamps are read as wall-clock time of the dashboard's zone
        return created.replace(tzinfo=tz)
    return created


def revenue_in_month(invoices: Iterable[Row], now: datetime) -> Decimal:
    start = month_start(now)
    total = _ZERO
    for inv in invoices:
        if inv.get("status") != INVOICE_PAID:
            continue
        created = _parse_created_at(inv.get("created_at"), now.tzinfo)
        if created is not None and created >= start:
            total += to_decimal(inv.get("amount"))
    return total


def compute_dashboard_stats(
    client_counts: ClientCounts,
    invoices: Iterable[Row],
    active_subscription_count: int,
    now: datetime,
) -> DashboardStats:
    invoices = list(invoices)
    return DashboardStats(
        total_clients=client_counts.total,
        active_clients=client_counts.active,
        open_invoices=_sum_by_status(invoices, OPEN_INVOICE_STATUSES),
        revenue_this_month=revenue_in_month(invoices, now),
        pending_reminders=active_subscription_count,
    )


# ----------------------------------------------------------------------
# List filters
# ----------------------------------------------------------------------

def _contains(query: str, *values) -> bool:
    q = query.strip().lower()
    return any(q in (v or "").lower() for v in values)


def filter_clients(clients: Iterable[Row], search: str = "", status: str = "all") -> List[Row]:
    """Case-insensitive search over name/email/company plus a status filter."""
    result = []
    for c in clients:
        if status != "all" and c.get("status") != status:
            continue
        if search.strip() and not _contains(search, c.get("name"), c.get("email"), c.get("company")):
            continue
        result.append(c)
    return result


def filter_invoices(invoices: Iterable[Row], search: str = "", status: str = "all") -> List[Row]:
    """Search over invoice id and client name plus a status filter."""
    result = []
    for i in invoices:
        if status != "all" and i.get("status") != status:
            continue
        if search.strip() and not _contains(search, i.get("id"), i.get("client_name")):
            continue
        result.append(i)
    return result
