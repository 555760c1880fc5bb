from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    CHAR,
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: ledger_categories
# ---------------------------


class LedgerCategory(Base):
    """User-defined categories. Predefined ones live in code and are never stored."""

    __tablename__ = "ledger_categories"

    # UUIDs are stored as canonical 36-char strings for portability.
    id: Mapped[str] = mapped_column(CHAR(36), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    icon: Mapped[str] = mapped_column(String, nullable=False, default="")
    default_type: Mapped[str] = mapped_column(String(7), nullable=False)
    is_custom: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.current_timestamp()
    )

    __table_args__ = (
        CheckConstraint(
            "default_type in ('income','expense')", name="ck_ledger_category_default_type"
        ),
    )


# ---------------------------
# Core: ledger_transactions
# ---------------------------


class LedgerTransaction(Base):
    __tablename__ = "ledger_transactions"

    id: Mapped[str] = mapped_column(CHAR(36), primary_key=True)
    # Insertion order within the saved snapshot
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    # Integer minor units (fen); avoids float/Decimal drift across backends.
    amount_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    type: Mapped[str] = mapped_column(String(7), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Not a foreign key: predefined and sentinel categories are not stored, and
    # a dangling id is resolved to the "未分类" sentinel on load.
    category_id: Mapped[str] = mapped_column(CHAR(36), nullable=False)
    category_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    category_is_custom: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.current_timestamp()
    )

    __table_args__ = (
        CheckConstraint("amount_minor > 0", name="ck_ledger_tx_amount_positive"),
        CheckConstraint("type in ('income','expense')", name="ck_ledger_tx_type"),
    )


__all__ = [
    "Base",
    "LedgerCategory",
    "LedgerTransaction",
]
