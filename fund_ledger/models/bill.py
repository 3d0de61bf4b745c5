"""
Bills and bill payments.

A bill has a small state machine:

    unpaid -> partial -> paid
    unpaid | partial -> cancelled   (only while nothing is paid)

Status is derived from amount_paid except for cancelled, which
is the one state a user sets directly. amount_paid is a running
total of BillPayment rows; the version column makes concurrent
payments against the same bill fail instead of double-applying.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Integer, String, Text, Date, DateTime, Numeric,
    ForeignKey, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fund_ledger.models.base import Base, utcnow
from fund_ledger.models.enums import BillStatus


# Transitions a user may request. Payment-driven transitions
# are derived by Bill.status_for_paid_amount.
VALID_TRANSITIONS: dict[BillStatus, set[BillStatus]] = {
    BillStatus.UNPAID: {BillStatus.PARTIAL, BillStatus.PAID, BillStatus.CANCELLED},
    BillStatus.PARTIAL: {BillStatus.PARTIAL, BillStatus.PAID, BillStatus.CANCELLED},
    BillStatus.PAID: set(),
    BillStatus.CANCELLED: set(),
}


class Bill(Base):
    __tablename__ = "bills"

    id: Mapped[int] = mapped_column(primary_key=True)
    vendor_id: Mapped[int] = mapped_column(
        ForeignKey("vendors.id"), nullable=False, index=True
    )
    fund_id: Mapped[int] = mapped_column(ForeignKey("funds.id"), nullable=False)
    expense_account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False
    )
    liability_account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False
    )
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=False
    )
    bill_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 2), nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    status: Mapped[BillStatus] = mapped_column(
        SAEnum(
            BillStatus,
            name="bill_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=BillStatus.UNPAID,
    )
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    vendor: Mapped["Vendor"] = relationship()
    payments: Mapped[list["BillPayment"]] = relationship(
        back_populates="bill", order_by="BillPayment.payment_date"
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def remaining_balance(self) -> Decimal:
        return self.amount - self.amount_paid

    def can_transition_to(self, new_status: BillStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def status_for_paid_amount(self, paid: Decimal) -> BillStatus:
        """Status a bill has once `paid` of its amount is settled."""
        if paid >= self.amount or abs(paid - self.amount) < Decimal("0.01"):
            return BillStatus.PAID
        if paid > 0:
            return BillStatus.PARTIAL
        return BillStatus.UNPAID

    def __repr__(self) -> str:
        return f"<Bill {self.bill_number or self.id} {self.amount} ({self.status.value})>"


class BillPayment(Base):
    """One payment against a bill, with its own journal entry."""

    __tablename__ = "bill_payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    bill_id: Mapped[int] = mapped_column(
        ForeignKey("bills.id"), nullable=False, index=True
    )
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    bill: Mapped[Bill] = relationship(back_populates="payments")
