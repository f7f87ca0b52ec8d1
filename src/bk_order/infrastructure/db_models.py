# src/bk_order/infrastructure/db_models.py
"""SQLAlchemy ORM model for the orders table (DDL reference only, queries use raw SQL)."""
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.bk_common.database import Base


class OrderORM(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    client_info: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    pickup_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    pickup_location: Mapped[str] = mapped_column(String(16), nullable=False)
    delivery_type: Mapped[str] = mapped_column(String(16), nullable=False)
    delivery_address: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    delivery_fee: Mapped[Decimal] = mapped_column(Numeric, nullable=False, default=0)
    total: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    deposit_amount: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    payment_type: Mapped[str] = mapped_column(String(16), nullable=False)
    deposit_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deposit_paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    balance_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    balance_paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="unpaid")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    invoice_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    invoice_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
