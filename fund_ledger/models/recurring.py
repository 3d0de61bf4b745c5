"""
Recurring transaction templates.

A template stores the lines of a journal entry plus a cadence.
Each time it fires, the scheduler posts those lines as a new
entry, writes a history row, and moves next_run_date forward by
one frequency step.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Integer, String, Text, Boolean, Date, DateTime, Numeric,
    ForeignKey, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fund_ledger.models.base import Base, utcnow
from fund_ledger.models.enums import Frequency, RunStatus


class RecurringTemplate(Base):
    __tablename__ = "recurring_templates"

    id: Mapped[int] = mapped_column(primary_key=True)
    template_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    frequency: Mapped[Frequency] = mapped_column(
        SAEnum(
            Frequency,
            name="recurring_frequency_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    last_run_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    next_run_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    fund_id: Mapped[int] = mapped_column(ForeignKey("funds.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 2), nullable=False)
    reference_number_prefix: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    lines: Mapped[list["RecurringTemplateLine"]] = relationship(
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="RecurringTemplateLine.line_order",
    )
    history: Mapped[list["RecurringHistory"]] = relationship(
        back_populates="template",
        cascade="all, delete-orphan",
    )

    def is_due(self, today: date) -> bool:
        if not self.is_active or self.next_run_date > today:
            return False
        return self.end_date is None or today <= self.end_date

    def __repr__(self) -> str:
        return f"<RecurringTemplate {self.template_name} ({self.frequency.value})>"


class RecurringTemplateLine(Base):
    __tablename__ = "recurring_template_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    template_id: Mapped[int] = mapped_column(
        ForeignKey("recurring_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False
    )
    debit: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    memo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    line_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    template: Mapped[RecurringTemplate] = relationship(back_populates="lines")


class RecurringHistory(Base):
    __tablename__ = "recurring_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    template_id: Mapped[int] = mapped_column(
        ForeignKey("recurring_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    journal_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True
    )
    executed_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 2), nullable=False)
    status: Mapped[RunStatus] = mapped_column(
        SAEnum(
            RunStatus,
            name="recurring_run_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    template: Mapped[RecurringTemplate] = relationship(back_populates="history")
