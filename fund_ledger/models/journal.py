"""
Journal entries and ledger lines.

A journal entry is the atomic unit of financial history: a
dated header grouping two or more ledger lines whose debits
equal their credits. Each line carries its own account, fund,
and non-negative debit and credit fields; the two fields are
independent, never a single signed amount.

Once lines exist the monetary content of an entry never
changes. Voiding hides an entry from every balance while
keeping its rows; a hard delete removes header and lines
together.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Text, Boolean, Date, DateTime, Numeric,
    ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fund_ledger.models.base import Base, utcnow


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    reference_number: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    donor_id: Mapped[int | None] = mapped_column(
        ForeignKey("donors.id"), nullable=True, index=True
    )
    is_in_kind: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_voided: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    voided_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    voided_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    lines: Mapped[list["LedgerLine"]] = relationship(
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        order_by="LedgerLine.id",
    )
    donor: Mapped["Donor | None"] = relationship()

    @property
    def total_debits(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credits(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))

    def __repr__(self) -> str:
        voided = " VOIDED" if self.is_voided else ""
        return f"<JournalEntry {self.entry_date} {self.description!r}{voided}>"


class LedgerLine(Base):
    __tablename__ = "ledger_lines"
    __table_args__ = (
        CheckConstraint("debit >= 0", name="ck_ledger_lines_debit_nonneg"),
        CheckConstraint("credit >= 0", name="ck_ledger_lines_credit_nonneg"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False, index=True
    )
    fund_id: Mapped[int] = mapped_column(
        ForeignKey("funds.id"), nullable=False, index=True
    )
    debit: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    memo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Bank reconciliation state
    is_cleared: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    cleared_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    reconciliation_id: Mapped[int | None] = mapped_column(
        ForeignKey("reconciliations.id"), nullable=True, index=True
    )

    journal_entry: Mapped[JournalEntry] = relationship(back_populates="lines")
    account: Mapped["Account"] = relationship()
    fund: Mapped["Fund"] = relationship()

    def __repr__(self) -> str:
        return f"<LedgerLine acct={self.account_id} Dr {self.debit} Cr {self.credit}>"
