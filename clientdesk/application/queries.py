"""
Read paths: fetch rows through the query cache and shape them for views.

Store errors propagate to the caller (the view shows an error state);
nothing is cached for a failed read.
"""
import asyncio
from datetime import datetime
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from clientdesk.application import query_cache as qc
from clientdesk.application.aggregation import (
    ClientStats, InvoiceStats, DashboardStats, ClientCounts,
    clients_with_stats, compute_client_stats, compute_invoice_stats,
    compute_dashboard_stats, join_client_name, filter_clients, filter_invoices,
)
from clientdesk.domain.client import ClientData, CLIENT_STATUS_ACTIVE, Row
from clientdesk.infrastructure.store.base import RemoteStore

_NEWEST_FIRST = ("created_at", True)


class ClientQueries:
    def __init__(self, store: RemoteStore, cache: qc.QueryCache, timezone: str = "UTC"):
        self.store = store
        self.cache = cache
        self.tz = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    # ------------------------------------------------------------------
    # Clients list
    # ------------------------------------------------------------------

    async def _load_clients(self) -> dict:
        clients = await self.store.select("clients", order=_NEWEST_FIRST)
        invoices = await self.store.select("invoices", columns=("client_id", "amount", "status"))
        return {"clients": clients, "invoices": invoices}

    async def client_overview(self, search: str = "", status: str = "all") -> Tuple[List[Row], ClientStats]:
        """
        Clients (newest first) with total_billed/last_activity, filtered for
        display, plus stats over the unfiltered set.
        """
        snapshot = await self.cache.fetch(qc.key(qc.CLIENTS), self._load_clients)
        rows = clients_with_stats(snapshot["clients"], snapshot["invoices"])
        stats = compute_client_stats(snapshot["clients"], snapshot["invoices"])
        return filter_clients(rows, search, status), stats

    # ------------------------------------------------------------------
    # Single client
    # ------------------------------------------------------------------

    async def get_client(self, client_id: str) -> Optional[Row]:
        return await self.cache.fetch(
            qc.key(qc.CLIENT, client_id),
            lambda: self.store.select_one("clients", {"id": client_id}),
        )

    async def get_subscription(self, client_id: str) -> Optional[Row]:
        return await self.cache.fetch(
            qc.key(qc.SUBSCRIPTION, client_id),
            lambda: self.store.select_one("subscriptions", {"client_id": client_id}),
        )

    async def get_client_invoices(self, client_id: str) -> List[Row]:
        return await self.cache.fetch(
            qc.key(qc.INVOICES, client_id),
            lambda: self.store.select("invoices", {"client_id": client_id}, order=_NEWEST_FIRST),
        )

    async def get_client_assets(self, client_id: str) -> List[Row]:
        return await self.cache.fetch(
            qc.key(qc.ASSETS, client_id),
            lambda: self.store.select("assets", {"client_id": client_id}, order=_NEWEST_FIRST),
        )

    async def get_client_data(self, client_id: str) -> ClientData:
        client, subscription, invoices, assets = await asyncio.gather(
            self.get_client(client_id),
            self.get_subscription(client_id),
            self.get_client_invoices(client_id),
            self.get_client_assets(client_id),
        )
        return ClientData(
            client=client,
            subscription=subscription,
            invoices=invoices or [],
            assets=assets or [],
        )

    # ------------------------------------------------------------------
    # Invoices list
    # ------------------------------------------------------------------

    async def _load_invoices(self) -> List[Row]:
        invoices = await self.store.select("invoices", order=_NEWEST_FIRST)
        if not invoices:
            return []
        client_ids = sorted({i["client_id"] for i in invoices})
        clients = await self.store.select("clients", {"id": client_ids}, columns=("id", "name"))
        return join_client_name(invoices, clients)

    async def invoice_overview(self, search: str = "", status: str = "all") -> Tuple[List[Row], InvoiceStats]:
        invoices = await self.cache.fetch(qc.key(qc.ALL_INVOICES), self._load_invoices)
        return filter_invoices(invoices, search, status), compute_invoice_stats(invoices)

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    async def _load_dashboard_inputs(self) -> dict:
        total = await self.store.count("clients")
        active = await self.store.count("clients", {"status": CLIENT_STATUS_ACTIVE})
        invoices = await self.store.select("invoices", columns=("amount", "status", "created_at"))
        active_subscriptions = await self.store.count("subscriptions", {"active": True})
        return {
            "counts": ClientCounts(total=total, active=active),
            "invoices": invoices,
            "active_subscriptions": active_subscriptions,
        }

    async def dashboard_stats(self) -> DashboardStats:
        """
        Figures over cached rows, evaluated against the current time so the
        month window moves even when the rows are served from the cache.
        """
        inputs = await self.cache.fetch(qc.key(qc.DASHBOARD_STATS), self._load_dashboard_inputs)
        return compute_dashboard_stats(
            inputs["counts"],
            inputs["invoices"],
            inputs["active_subscriptions"],
            now=self.now(),
        )
