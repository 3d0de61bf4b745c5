"""Annual budget per account. One row per (account, fiscal year)."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Integer, Text, DateTime, Numeric, ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fund_ledger.models.base import Base, utcnow


class Budget(Base):
    __tablename__ = "budgets"
    __table_args__ = (
        UniqueConstraint("account_id", "fiscal_year", name="uq_budgets_account_year"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False, index=True
    )
    fiscal_year: Mapped[int] = mapped_column(Integer, nullable=False)
    budgeted_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    account: Mapped["Account"] = relationship()
