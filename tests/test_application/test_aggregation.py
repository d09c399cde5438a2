"""Tests for aggregation functions - client, invoice and dashboard figures."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from clientdesk.application.aggregation import (
    ClientCounts, compute_client_stats, compute_invoice_stats, compute_dashboard_stats,
    total_billed_by_client, clients_with_stats, join_client_name,
    filter_clients, filter_invoices, month_start,
)

UTC = timezone.utc
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


def _client(cid, status="active", name=None, **extra):
    return {"id": cid, "name": name or cid.upper(), "status": status, **extra}


def _invoice(iid, client_id, amount, status, created_at="2026-03-10T10:00:00+00:00"):
    return {"id": iid, "client_id": client_id, "amount": amount, "status": status, "created_at": created_at}


class TestClientStats:
    def test_end_to_end_scenario(self):
        clients = [{"id": "c1", "status": "active"}]
        invoices = [
            {"id": "i1", "client_id": "c1", "amount": 100, "status": "paid"},
            {"id": "i2", "client_id": "c1", "amount": 50, "status": "pending"},
        ]
        stats = compute_client_stats(clients, invoices)
        assert stats.total == 1
        assert stats.active == 1
        assert stats.total_revenue == 100

        inv = compute_invoice_stats(invoices)
        assert (inv.total, inv.paid, inv.overdue, inv.pending, inv.outstanding) == (2, 100, 0, 50, 50)

    def test_total_revenue_matches_per_client_paid_sums(self):
        clients = [_client("a"), _client("b", status="archived"), _client("c")]
        invoices = [
            _invoice("1", "a", Decimal("10.50"), "paid"),
            _invoice("2", "a", Decimal("4.50"), "paid"),
            _invoice("3", "b", Decimal("7"), "paid"),
            _invoice("4", "b", Decimal("99"), "overdue"),
            _invoice("5", "zzz", Decimal("1000"), "paid"),  # no such client
            _invoice("6", "c", Decimal("3"), "pending"),
        ]
        expected = sum(
            (Decimal(str(i["amount"])) for c in clients for i in invoices
             if i["client_id"] == c["id"] and i["status"] == "paid"),
            Decimal("0"),
        )
        stats = compute_client_stats(clients, invoices)
        assert stats.total_revenue == expected == Decimal("22.00")
        assert stats.total == 3
        assert stats.active == 2

    def test_client_without_invoices_contributes_zero(self):
        stats = compute_client_stats([_client("a"), _client("b")], [])
        assert stats.total_revenue == 0

    def test_grouping_uses_exact_client_id(self):
        billed = total_billed_by_client([
            _invoice("1", "c1", 10, "paid"),
            _invoice("2", "C1", 20, "paid"),
            _invoice("3", "c1 ", 40, "paid"),
        ])
        assert billed == {"c1": 10, "C1": 20, "c1 ": 40}

    def test_amounts_given_as_strings(self):
        billed = total_billed_by_client([_invoice("1", "c1", "12.30", "paid"), _invoice("2", "c1", "0.70", "paid")])
        assert billed["c1"] == Decimal("13.00")

    def test_clients_with_stats_adds_total_and_last_activity(self):
        clients = [_client("a", updated_at="2026-03-01T00:00:00"), _client("b", updated_at=None)]
        rows = clients_with_stats(clients, [_invoice("1", "a", 25, "paid")])
        assert rows[0]["total_billed"] == 25
        assert rows[0]["last_activity"] == "2026-03-01T00:00:00"
        assert rows[1]["total_billed"] == 0
        assert rows[1]["last_activity"] is None
        # source rows are not modified
        assert "total_billed" not in clients[0]


class TestInvoiceStats:
    def test_outstanding_is_overdue_plus_pending(self):
        for invoices in (
            [],
            [_invoice("1", "a", 5, "overdue")],
            [_invoice("1", "a", 5, "pending"), _invoice("2", "a", 7, "overdue"), _invoice("3", "a", 9, "paid")],
        ):
            stats = compute_invoice_stats(invoices)
            assert stats.outstanding == stats.overdue + stats.pending

    def test_per_status_sums(self):
        stats = compute_invoice_stats([
            _invoice("1", "a", 100, "paid"),
            _invoice("2", "a", 30, "overdue"),
            _invoice("3", "b", 20, "overdue"),
            _invoice("4", "b", 5, "pending"),
        ])
        assert stats.total == 4
        assert stats.paid == 100
        assert stats.overdue == 50
        assert stats.pending == 5
        assert stats.outstanding == 55


class TestJoinClientName:
    def test_unmatched_client_gets_sentinel(self):
        rows = join_client_name(
            [_invoice("1", "a", 1, "paid"), _invoice("2", "gone", 1, "paid")],
            [_client("a", name="Acme")],
        )
        assert rows[0]["client_name"] == "Acme"
        assert rows[1]["client_name"] == "Unknown Client"

    def test_idempotent(self):
        invoices = [_invoice("1", "a", 1, "paid"), _invoice("2", "b", 2, "pending")]
        clients = [_client("a", name="Acme"), _client("b", name="Beta")]
        assert join_client_name(invoices, clients) == join_client_name(invoices, clients)
        assert "client_name" not in invoices[0]


class TestDashboardStats:
    def test_counts_and_open_invoices(self):
        stats = compute_dashboard_stats(
            ClientCounts(total=5, active=3),
            [
                _invoice("1", "a", 10, "pending"),
                _invoice("2", "a", 15, "overdue"),
                _invoice("3", "a", 100, "paid"),
            ],
            active_subscription_count=2,
            now=NOW,
        )
        assert stats.total_clients == 5
        assert stats.active_clients == 3
        assert stats.open_invoices == 25
        assert stats.revenue_this_month == 100
        assert stats.pending_reminders == 2

    def test_revenue_month_boundary(self):
        start = datetime(2026, 3, 1, tzinfo=UTC)
        invoices = [
            _invoice("last-of-feb", "a", 40, "paid", (start - timedelta(microseconds=1)).isoformat()),
            _invoice("first-of-mar", "a", 60, "paid", start.isoformat()),
            _invoice("pending-mar", "a", 1000, "pending", start.isoformat()),
        ]
        stats = compute_dashboard_stats(ClientCounts(1, 1), invoices, 0, now=NOW)
        assert stats.revenue_this_month == 60

    def test_month_uses_the_calendar_of_now(self):
        tz = ZoneInfo("Europe/Berlin")
        now = datetime(2026, 3, 15, 12, 0, tzinfo=tz)
        # 23:30 UTC on Feb 28 is already March 1st in Berlin
        invoices = [_invoice("1", "a", 10, "paid", "2026-02-28T23:30:00+00:00")]
        assert compute_dashboard_stats(ClientCounts(1, 1), invoices, 0, now=now).revenue_this_month == 10
        assert compute_dashboard_stats(ClientCounts(1, 1), invoices, 0, now=NOW).revenue_this_month == 0

    def test_naive_timestamps_read_in_the_dashboard_zone(self):
        invoices = [
            _invoice("1", "a", 10, "paid", "2026-03-01T00:00:00"),
            _invoice("2", "a", 20, "paid", "2026-02-28T23:59:59"),
        ]
        stats = compute_dashboard_stats(ClientCounts(1, 1), invoices, 0, now=NOW)
        assert stats.revenue_this_month == 10

    def test_naive_now(self):
        now = datetime(2026, 3, 15, 12, 0)
        invoices = [_invoice("1", "a", 10, "paid", "2026-03-01T00:00:00")]
        assert compute_dashboard_stats(ClientCounts(1, 1), invoices, 0, now=now).revenue_this_month == 10

    def test_month_start(self):
        assert month_start(NOW) == datetime(2026, 3, 1, tzinfo=UTC)


class TestFilters:
    def test_filter_clients_by_search_and_status(self):
        clients = [
            _client("a", name="Acme Corp", email="hello@acme.io"),
            _client("b", name="Beta", company="ACME Holdings", status="archived"),
            _client("c", name="Gamma"),
        ]
        assert [c["id"] for c in filter_clients(clients, "acme")] == ["a", "b"]
        assert [c["id"] for c in filter_clients(clients, "acme", "active")] == ["a"]
        assert [c["id"] for c in filter_clients(clients, "", "archived")] == ["b"]
        assert len(filter_clients(clients)) == 3

    def test_filter_invoices(self):
        invoices = [
            {**_invoice("INV-1", "a", 1, "paid"), "client_name": "Acme"},
            {**_invoice("INV-2", "b", 1, "overdue"), "client_name": "Beta"},
        ]
        assert [i["id"] for i in filter_invoices(invoices, "beta")] == ["INV-2"]
        assert [i["id"] for i in filter_invoices(invoices, "inv-1")] == ["INV-1"]
        assert [i["id"] for i in filter_invoices(invoices, status="overdue")] == ["INV-2"]
