"""
SQLAlchemy ORM models: clients, subscriptions, invoices, assets
"""
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Text, TIMESTAMP, Date, Boolean, Numeric, BigInteger, func
from sqlalchemy.orm import Mapped, mapped_column

from clientdesk.infrastructure.db.session import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ClientModel(Base):
    """Client record (CRM contact card)"""
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    source: Mapped[str | None] = mapped_column(String(255), nullable=True)  # lead source
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active", server_default="active")

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_now, onupdate=_now, server_default=func.now(), nullable=False
    )


class SubscriptionModel(Base):
    """Recurring billing settings, at most one per client"""
    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    client_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD", server_default="USD")
    cycle: Mapped[str] = mapped_column(String(16), nullable=False, default="monthly", server_default="monthly")
    next_payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_now, onupdate=_now, server_default=func.now(), nullable=False
    )


class InvoiceModel(Base):
    """Issued invoice; only status changes after creation"""
    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    subscription_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    client_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", server_default="pending")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_now, server_default=func.now(), nullable=False
    )


class AssetModel(Base):
    """Uploaded file (document or voice note) attached to a client"""
    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    client_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)  # image, pdf, document, audio, other
    size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)  # bytes
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    bucket_path: Mapped[str] = mapped_column(Text, nullable=False)  # "<bucket>/<storage-key>"

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_now, server_default=func.now(), nullable=False
    )
