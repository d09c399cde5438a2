"""
Remote store capability - row CRUD over four tables plus blob buckets.

Everything the application layer persists goes through this contract;
implementations may sit on any networked data store.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

Row = Dict[str, Any]
# Equality filters; a list/tuple/set value means "column IN (...)"
Filters = Dict[str, Any]
# (column, descending)
Order = Tuple[str, bool]

TABLES = ("clients", "subscriptions", "invoices", "assets")


class StoreError(Exception):
    """
    Any failure of the remote store: connectivity, permission, constraint.

    Not subdivided further; `message` is shown to the user as-is.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RemoteStore(ABC):
    """Async row + blob storage used by read paths and the mutation coordinator"""

    @abstractmethod
    async def select(self, table: str, filters: Optional[Filters] = None,
                     order: Optional[Order] = None,
                     columns: Optional[Iterable[str]] = None) -> List[Row]:
        ...

    @abstractmethod
    async def select_one(self, table: str, filters: Filters) -> Optional[Row]:
        """First matching row, or None (absence is not an error)."""
        ...

    @abstractmethod
    async def count(self, table: str, filters: Optional[Filters] = None) -> int:
        ...

    @abstractmethod
    async def insert(self, table: str, fields: Row) -> Row:
        ...

    @abstractmethod
    async def update(self, table: str, match: Any, patch: Row) -> Row:
        """
        Update rows matched by id (str) or by a filters dict; returns the
        first updated row. No match is a StoreError.
        """
        ...

    @abstractmethod
    async def delete(self, table: str, match: Any) -> None:
        ...

    @abstractmethod
    async def put_blob(self, bucket: str, key: str, data: bytes) -> str:
        """Store bytes under bucket/key, return the public URL."""
        ...

    @abstractmethod
    async def delete_blob(self, bucket: str, key: str) -> None:
        ...
