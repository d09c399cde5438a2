"""
FastAPI dependencies (store, cache, coordinator)
"""
from functools import lru_cache

from fastapi import Depends

from clientdesk.application.mutations import MutationCoordinator
from clientdesk.application.notifications import CollectingNotifier
from clientdesk.application.queries import ClientQueries
from clientdesk.application.query_cache import QueryCache
from clientdesk.config import get_settings
from clientdesk.infrastructure.db.session import get_session_factory
from clientdesk.infrastructure.store.base import RemoteStore
from clientdesk.infrastructure.store.blobs import LocalBlobStorage
from clientdesk.infrastructure.store.sql_store import SqlRemoteStore


@lru_cache
def get_store() -> RemoteStore:
    """Application-wide remote store (SQL rows + local blob buckets)"""
    settings = get_settings()
    blobs = LocalBlobStorage(
        settings.BLOB_STORAGE_DIR,
        settings.PUBLIC_BLOB_BASE_URL,
        settings.buckets,
    )
    return SqlRemoteStore(get_session_factory(), blobs)


@lru_cache
def get_cache() -> QueryCache:
    """Application-wide query cache"""
    return QueryCache(stale_after=get_settings().CACHE_STALE_AFTER)


def get_notifier() -> CollectingNotifier:
    """One toast collector per request"""
    return CollectingNotifier()


def get_queries(
    store: RemoteStore = Depends(get_store),
    cache: QueryCache = Depends(get_cache),
) -> ClientQueries:
    return ClientQueries(store, cache, timezone=get_settings().TIMEZONE)


def get_coordinator(
    store: RemoteStore = Depends(get_store),
    cache: QueryCache = Depends(get_cache),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> MutationCoordinator:
    return MutationCoordinator(store, cache, notifier)
