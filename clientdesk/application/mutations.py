"""
Mutation coordinator - every write to the remote store goes through here.

Two disciplines:

* invalidate-after (clients, invoice status, assets): write, then on success
  mark the affected cached queries stale; on failure leave the cache as is.
* optimistic-with-rollback (subscription upsert): publish the expected
  result into the cache before writing, restore the exact snapshot if the
  write fails, and mark the key stale once the write has settled.

StoreError never escapes: each outcome becomes exactly one toast and a
MutationResult for the caller.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

from clientdesk.application import query_cache as qc
from clientdesk.application.notifications import Notifier
from clientdesk.domain.asset import BucketPath, build_storage_key, detect_asset_type
from clientdesk.domain.billing import INVOICE_STATUSES
from clientdesk.domain.client import Row
from clientdesk.domain.patches import ClientPatch, NewClient, SubscriptionPatch
from clientdesk.infrastructure.store.base import RemoteStore, StoreError

logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    ok: bool
    data: Any = None
    error: Optional[str] = None


def merge_subscription(current: Optional[Row], client_id: str, changes: Dict[str, Any]) -> Row:
    """
    Optimistic guess of the row after the write: a shallow merge of the
    changes onto the cached row, or onto {client_id} when nothing is cached.
    """
    if current:
        return {**current, **changes}
    return {"client_id": client_id, **changes}


class MutationCoordinator:
    def __init__(
        self,
        store: RemoteStore,
        cache: qc.QueryCache,
        notifier: Notifier,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.store = store
        self.cache = cache
        self.notifier = notifier
        # milliseconds since epoch, used in storage keys
        self.clock = clock or (lambda: int(time.time() * 1000))

    # ------------------------------------------------------------------
    # outcome helpers
    # ------------------------------------------------------------------

    def _succeeded(self, message: str, data: Any, stale: Iterable[qc.CacheKey]) -> MutationResult:
        for entity_type, client_id in stale:
            self.cache.invalidate(entity_type, client_id)
        self.notifier.success(message)
        return MutationResult(ok=True, data=data)

    def _failed(self, prefix: str, error: str) -> MutationResult:
        self.notifier.error(f"{prefix}: {error}")
        return MutationResult(ok=False, error=error)

    # ------------------------------------------------------------------
    # clients
    # ------------------------------------------------------------------

    async def create_client(self, new_client: NewClient) -> MutationResult:
        try:
            row = await self.store.insert("clients", new_client.to_row())
        except StoreError as exc:
            logger.warning("Client create failed: %s", exc.message)
            return self._failed("Failed to create client", exc.message)
        return self._succeeded(
            "Client created successfully", row,
            [qc.key(qc.CLIENTS), qc.key(qc.DASHBOARD_STATS)],
        )

    async def update_client(self, client_id: str, patch: ClientPatch) -> MutationResult:
        if not client_id:
            return self._failed("Failed to update client", "No client ID")
        try:
            row = await self.store.update("clients", client_id, patch.changes())
        except StoreError as exc:
            logger.warning("Client %s update failed: %s", client_id, exc.message)
            return self._failed("Failed to update client", exc.message)
        # Name and status feed the lists and the dashboard as well
        return self._succeeded(
            "Client updated successfully", row,
            [
                qc.key(qc.CLIENT, client_id), qc.key(qc.CLIENTS),
                qc.key(qc.ALL_INVOICES), qc.key(qc.DASHBOARD_STATS),
            ],
        )

    async def delete_client(self, client_id: str) -> MutationResult:
        if not client_id:
            return self._failed("Failed to delete client", "No client ID")
        try:
            await self.store.delete("clients", client_id)
        except StoreError as exc:
            logger.warning("Client %s delete failed: %s", client_id, exc.message)
            return self._failed("Failed to delete client", exc.message)
        return self._succeeded(
            "Client deleted", None,
            [
                qc.key(qc.CLIENT, client_id), qc.key(qc.CLIENTS),
                qc.key(qc.ALL_INVOICES), qc.key(qc.DASHBOARD_STATS),
            ],
        )

    # ------------------------------------------------------------------
    # invoices
    # ------------------------------------------------------------------

    async def update_invoice_status(self, invoice_id: str, status: str) -> MutationResult:
        if status not in INVOICE_STATUSES:
            return self._failed("Failed to update invoice", f"Invalid status: {status}")
        try:
            row = await self.store.update("invoices", invoice_id, {"status": status})
        except StoreError as exc:
            logger.warning("Invoice %s status update failed: %s", invoice_id, exc.message)
            return self._failed("Failed to update invoice", exc.message)
        return self._succeeded(
            "Invoice updated", row,
            [
                qc.key(qc.ALL_INVOICES), qc.key(qc.INVOICES, row.get("client_id")),
                qc.key(qc.CLIENTS), qc.key(qc.DASHBOARD_STATS),
            ],
        )

    # ------------------------------------------------------------------
    # subscription (optimistic)
    # ------------------------------------------------------------------

    async def _write_subscription(self, client_id: str, changes: Dict[str, Any]) -> Row:
        existing = await self.store.select_one("subscriptions", {"client_id": client_id})
        if existing:
            return await self.store.update("subscriptions", {"client_id": client_id}, changes)
        return await self.store.insert("subscriptions", {"client_id": client_id, **changes})

    async def upsert_subscription(self, client_id: str, patch: SubscriptionPatch) -> MutationResult:
        if not client_id:
            return self._failed("Failed to update subscription", "No client ID")

        cache_key = qc.key(qc.SUBSCRIPTION, client_id)
        changes = patch.changes()

        async with self.cache.lock(cache_key):
            # A background refetch landing after the snapshot would make it stale
            await self.cache.cancel(cache_key)
            snapshot = self.cache.snapshot(cache_key)
            self.cache.set(cache_key, merge_subscription(snapshot.value, client_id, changes))

            try:
                row = await self._write_subscription(client_id, changes)
            except StoreError as exc:
                self.cache.restore(snapshot)
                logger.warning("Subscription upsert for client %s failed, rolled back: %s",
                               client_id, exc.message)
                return self._failed("Failed to update subscription", exc.message)
            finally:
                # Reconcile with the authoritative row on the next read
                self.cache.invalidate(qc.SUBSCRIPTION, client_id)

            return self._succeeded("Subscription updated", row, [qc.key(qc.DASHBOARD_STATS)])

    # ------------------------------------------------------------------
    # assets
    # ------------------------------------------------------------------

    async def upload_asset(
        self,
        client_id: str,
        filename: str,
        data: bytes,
        content_type: Optional[str],
        bucket: str,
    ) -> MutationResult:
        if not client_id:
            return self._failed("Upload failed", "No client ID")

        storage_key = build_storage_key(client_id, filename, self.clock())
        try:
            public_url = await self.store.put_blob(bucket, storage_key, data)
        except StoreError as exc:
            logger.warning("Blob upload %s/%s failed: %s", bucket, storage_key, exc.message)
            return self._failed("Upload failed", exc.message)

        try:
            row = await self.store.insert("assets", {
                "client_id": client_id,
                "name": filename,
                "type": detect_asset_type(content_type),
                "size": len(data),
                "file_url": public_url,
                "bucket_path": str(BucketPath(bucket, storage_key)),
            })
        except StoreError as exc:
            # No compensating delete: the blob stays orphaned
            logger.warning("Asset row insert failed, blob %s/%s orphaned: %s",
                           bucket, storage_key, exc.message)
            return self._failed("Upload failed", exc.message)

        return self._succeeded("File uploaded successfully", row, [qc.key(qc.ASSETS, client_id)])

    async def delete_asset(self, asset: Row) -> MutationResult:
        location = BucketPath.parse(asset["bucket_path"])
        try:
            await self.store.delete_blob(location.bucket, location.key)
        except StoreError as exc:
            logger.warning("Blob delete %s failed, keeping asset %s: %s",
                           location, asset["id"], exc.message)
            return self._failed("Delete failed", exc.message)

        try:
            await self.store.delete("assets", asset["id"])
        except StoreError as exc:
            logger.warning("Asset %s row delete failed: %s", asset["id"], exc.message)
            return self._failed("Delete failed", exc.message)

        return self._succeeded("Asset deleted", None, [qc.key(qc.ASSETS, asset.get("client_id"))])
