"""
Bank reconciliation record.

At most one in-progress reconciliation may exist per account.
That rule lives in the database as a partial unique index, so
two concurrent starts cannot both succeed.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Text, Date, DateTime, Numeric, ForeignKey, Index,
    Enum as SAEnum, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fund_ledger.models.base import Base, utcnow
from fund_ledger.models.enums import ReconciliationStatus


class Reconciliation(Base):
    __tablename__ = "reconciliations"
    __table_args__ = (
        Index(
            "uq_reconciliations_one_in_progress",
            "account_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False, index=True
    )
    statement_date: Mapped[date] = mapped_column(Date, nullable=False)
    statement_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False
    )
    reconciled_balance: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 2), nullable=True
    )
    status: Mapped[ReconciliationStatus] = mapped_column(
        SAEnum(
            ReconciliationStatus,
            name="reconciliation_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=ReconciliationStatus.IN_PROGRESS,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    account: Mapped["Account"] = relationship()
    cleared_lines: Mapped[list["LedgerLine"]] = relationship()

    @property
    def cleared_line_ids(self) -> list[int]:
        return [line.id for line in self.cleared_lines]

    def __repr__(self) -> str:
        return f"<Reconciliation acct={self.account_id} {self.statement_date} ({self.status.value})>"
