"""
RemoteStore over SQLAlchemy (rows) and LocalBlobStorage (blobs).

Sessions and files are blocking; every public call hands its work to a
worker thread so the event loop keeps serving other requests meanwhile.
"""
import asyncio
import logging
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from sqlalchemy import Date, DateTime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from clientdesk.infrastructure.db.models import ClientModel, SubscriptionModel, InvoiceModel, AssetModel
from clientdesk.infrastructure.store.base import RemoteStore, StoreError, Row, Filters, Order
from clientdesk.infrastructure.store.blobs import LocalBlobStorage

logger = logging.getLogger(__name__)

_MODELS = {
    "clients": ClientModel,
    "subscriptions": SubscriptionModel,
    "invoices": InvoiceModel,
    "assets": AssetModel,
}


def _serialize(value: Any) -> Any:
    # Timestamps leave the store as ISO-8601 strings
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class SqlRemoteStore(RemoteStore):
    def __init__(self, session_factory: sessionmaker, blobs: LocalBlobStorage):
        self.session_factory = session_factory
        self.blobs = blobs

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _model(table: str):
        model = _MODELS.get(table)
        if model is None:
            raise StoreError(f"Unknown table: {table}")
        return model

    @staticmethod
    def _column(model, name: str):
        if name not in model.__table__.columns:
            raise StoreError(f"Unknown column {model.__tablename__}.{name}")
        return getattr(model, name)

    def _filtered(self, session: Session, model, filters: Optional[Filters]):
        query = session.query(model)
        for name, value in (filters or {}).items():
            column = self._column(model, name)
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.filter(column.in_(list(value)))
            else:
                query = query.filter(column == value)
        return query

    def _match_filters(self, match: Any) -> Filters:
        if isinstance(match, dict):
            if not match:
                raise StoreError("Refusing to modify rows without a filter")
            return match
        return {"id": match}

    def _coerce(self, model, fields: Row) -> Row:
        """Check field names and parse ISO strings for date/time columns."""
        values = {}
        for name, value in fields.items():
            column = model.__table__.columns.get(name)
            if column is None:
                raise StoreError(f"Unknown column {model.__tablename__}.{name}")
            if isinstance(value, str):
                try:
                    if isinstance(column.type, DateTime):
                        value = datetime.fromisoformat(value)
                    elif isinstance(column.type, Date):
                        value = date.fromisoformat(value)
                except ValueError as exc:
                    raise StoreError(f"Invalid value for {name}: {value}") from exc
            values[name] = value
        return values

    @staticmethod
    def _to_row(obj, columns: Optional[Iterable[str]] = None) -> Row:
        names = columns or [c.key for c in obj.__table__.columns]
        return {name: _serialize(getattr(obj, name)) for name in names}

    def _fail(self, session: Session, action: str, exc: Exception) -> StoreError:
        session.rollback()
        logger.warning("Store %s failed: %s", action, exc)
        orig = getattr(exc, "orig", None)
        return StoreError(str(orig or exc))

    # ------------------------------------------------------------------
    # rows
    # ------------------------------------------------------------------

    def _select(self, table: str, filters: Optional[Filters] = None,
                     order: Optional[Order] = None,
                     columns: Optional[Iterable[str]] = None) -> List[Row]:
        model = self._model(table)
        if columns is not None:
            columns = list(columns)
            for name in columns:
                self._column(model, name)
        with self.session_factory() as session:
            try:
                query = self._filtered(session, model, filters)
                if order is not None:
                    name, descending = order
                    column = self._column(model, name)
                    query = query.order_by(column.desc() if descending else column.asc())
                return [self._to_row(obj, columns) for obj in query.all()]
            except SQLAlchemyError as exc:
                raise self._fail(session, f"select from {table}", exc) from exc

    def _select_one(self, table: str, filters: Filters) -> Optional[Row]:
        model = self._model(table)
        with self.session_factory() as session:
            try:
                obj = self._filtered(session, model, filters).first()
            except SQLAlchemyError as exc:
                raise self._fail(session, f"select from {table}", exc) from exc
            return self._to_row(obj) if obj is not None else None

    def _count(self, table: str, filters: Optional[Filters] = None) -> int:
        model = self._model(table)
        with self.session_factory() as session:
            try:
                query = self._filtered(session, model, filters)
                return query.count()
            except SQLAlchemyError as exc:
                raise self._fail(session, f"count {table}", exc) from exc

    def _insert(self, table: str, fields: Row) -> Row:
        model = self._model(table)
        values = self._coerce(model, fields)
        with self.session_factory() as session:
            try:
                obj = model(**values)
                session.add(obj)
                session.commit()
                session.refresh(obj)
            except SQLAlchemyError as exc:
                raise self._fail(session, f"insert into {table}", exc) from exc
            logger.info("Inserted %s row %s", table, obj.id)
            return self._to_row(obj)

    def _update(self, table: str, match: Any, patch: Row) -> Row:
        model = self._model(table)
        values = self._coerce(model, patch)
        filters = self._match_filters(match)
        with self.session_factory() as session:
            try:
                rows = self._filtered(session, model, filters).all()
                if not rows:
                    raise StoreError(f"No {table} row matched {filters}")
                for obj in rows:
                    for name, value in values.items():
                        setattr(obj, name, value)
                session.commit()
                for obj in rows:
                    session.refresh(obj)
            except SQLAlchemyError as exc:
                raise self._fail(session, f"update {table}", exc) from exc
            logger.info("Updated %d %s row(s) matching %s", len(rows), table, filters)
            return self._to_row(rows[0])

    def _delete(self, table: str, match: Any) -> None:
        model = self._model(table)
        filters = self._match_filters(match)
        with self.session_factory() as session:
            try:
                deleted = self._filtered(session, model, filters).delete(synchronize_session=False)
                session.commit()
            except SQLAlchemyError as exc:
                raise self._fail(session, f"delete from {table}", exc) from exc
            logger.info("Deleted %d %s row(s) matching %s", deleted, table, filters)

    # ------------------------------------------------------------------
    # blobs
    # ------------------------------------------------------------------

    def _put_blob(self, bucket: str, key: str, data: bytes) -> str:
        return self.blobs.put(bucket, key, data)

    def _delete_blob(self, bucket: str, key: str) -> None:
        self.blobs.delete(bucket, key)

    # ------------------------------------------------------------------
    # RemoteStore: session and file I/O run in a worker thread
    # ------------------------------------------------------------------

    async def select(self, table: str, filters: Optional[Filters] = None,
                     order: Optional[Order] = None,
                     columns: Optional[Iterable[str]] = None) -> List[Row]:
        return await asyncio.to_thread(self._select, table, filters, order, columns)

    async def select_one(self, table: str, filters: Filters) -> Optional[Row]:
        return await asyncio.to_thread(self._select_one, table, filters)

    async def count(self, table: str, filters: Optional[Filters] = None) -> int:
        return await asyncio.to_thread(self._count, table, filters)

    async def insert(self, table: str, fields: Row) -> Row:
        return await asyncio.to_thread(self._insert, table, fields)

    async def update(self, table: str, match: Any, patch: Row) -> Row:
        return await asyncio.to_thread(self._update, table, match, patch)

    async def delete(self, table: str, match: Any) -> None:
        await asyncio.to_thread(self._delete, table, match)

    async def put_blob(self, bucket: str, key: str, data: bytes) -> str:
        return await asyncio.to_thread(self._put_blob, bucket, key, data)

    async def delete_blob(self, bucket: str, key: str) -> None:
        await asyncio.to_thread(self._delete_blob, bucket, key)
