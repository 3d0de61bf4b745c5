"""
Accounts payable.

Bill lifecycle:

    create  -> Dr expense / Cr accounts payable, bill is unpaid
    pay     -> Dr accounts payable / Cr bank, status re-derived
    cancel  -> only while nothing has been paid

Each operation is one database transaction. The bill row is
locked (SELECT ... FOR UPDATE) and versioned while a payment is
applied, so two concurrent payments cannot both pass the
remaining-balance check.
"""

import logging

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from fund_ledger.errors import ValidationError, StateConflictError
from fund_ledger.models.account import Account
from fund_ledger.models.bill import Bill, BillPayment
from fund_ledger.models.enums import BillStatus
from fund_ledger.models.vendor import Vendor
from fund_ledger.money import ZERO, TOLERANCE, to_money, fmt
from fund_ledger.schemas.journal import EntryHeader, LineInput
from fund_ledger.schemas.payables import (
    VendorCreate,
    BillCreate,
    BillPaymentCreate,
    PayBillResult,
)
from fund_ledger.services.audit import record_event
from fund_ledger.services.boundary import ledger_operation
from fund_ledger.services.lookups import get_or_raise
from fund_ledger.services.posting_service import PostingService

logger = logging.getLogger(__name__)


class PayablesService:

    def __init__(self, db: Session):
        self.db = db
        self.posting = PostingService(db)

    # --- Vendors ---

    @ledger_operation
    def create_vendor(self, request: VendorCreate) -> Vendor:
        name = (request.name or "").strip()
        if not name:
            raise ValidationError("Vendor name is required")
        vendor = Vendor(
            name=name,
            contact_name=request.contact_name or None,
            email=request.email or None,
            phone=request.phone or None,
            address=request.address or None,
            notes=request.notes or None,
        )
        self.db.add(vendor)
        self.db.flush()
        return vendor

    @ledger_operation(commit=False)
    def list_vendors(self, include_inactive: bool = False) -> list[Vendor]:
        query = select(Vendor).order_by(Vendor.name)
        if not include_inactive:
            query = query.where(Vendor.is_active.is_(True))
        return list(self.db.execute(query).scalars())

    # --- Bills ---

    @ledger_operation
    def create_bill(self, request: BillCreate) -> Bill:
        """
        Book a vendor bill.

        Accounting:
            DEBIT  Expense
            CREDIT Accounts Payable
        """
        if not request.vendor_id:
            raise ValidationError("Vendor is required")
        if not request.fund_id:
            raise ValidationError("Fund is required")
        if not request.expense_account_id:
            raise ValidationError("Expense account is required")
        liability_account_id = request.liability_account_id
        if not liability_account_id:
            expense = self.db.get(Account, request.expense_account_id)
            if expense is not None:
                liability_account_id = expense.default_liability_account_id
        if not liability_account_id:
            raise ValidationError("Accounts Payable account is required")
        amount = to_money(request.amount)
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        description = (request.description or "").strip()
        if not description:
            raise ValidationError("Description is required")
        if request.due_date < request.invoice_date:
            raise ValidationError("Due date cannot be before invoice date")

        get_or_raise(self.db, Vendor, request.vendor_id, "Vendor")

        entry = self.posting.write_entry(
            EntryHeader(
                entry_date=request.invoice_date,
                description=f"Bill from vendor: {description}",
                reference_number=request.bill_number,
            ),
            [
                LineInput(account_id=request.expense_account_id, fund_id=request.fund_id,
                          debit=amount, memo=f"Bill: {description}"),
                LineInput(account_id=liability_account_id, fund_id=request.fund_id,
                          credit=amount, memo="Accounts Payable"),
            ],
        )

        bill = Bill(
            vendor_id=request.vendor_id,
            fund_id=request.fund_id,
            expense_account_id=request.expense_account_id,
            liability_account_id=liability_account_id,
            journal_entry_id=entry.id,
            bill_number=request.bill_number or None,
            description=description,
            amount=amount,
            amount_paid=ZERO,
            status=BillStatus.UNPAID,
            invoice_date=request.invoice_date,
            due_date=request.due_date,
            notes=request.notes or None,
        )
        self.db.add(bill)
        self.db.flush()
        logger.info("Created bill %s for %s: %s", bill.id, fmt(amount), description)
        return bill

    @ledger_operation
    def pay_bill(self, bill_id: int, request: BillPaymentCreate) -> PayBillResult:
        """
        Apply a payment to a bill.

        Accounting:
            DEBIT  Accounts Payable
            CREDIT Bank
        """
        bill = get_or_raise(self.db, Bill, bill_id, "Bill", lock=True)
        if bill.status == BillStatus.PAID:
            raise StateConflictError("This bill has already been paid in full")
        if bill.status == BillStatus.CANCELLED:
            raise StateConflictError("Cannot pay a cancelled bill")

        payment_amount = to_money(request.amount)
        if payment_amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        remaining = bill.remaining_balance
        if payment_amount > remaining + TOLERANCE:
            raise ValidationError(
                f"Payment amount (${fmt(payment_amount)}) exceeds "
                f"remaining balance (${fmt(remaining)})"
            )

        fund_id = request.fund_id or bill.fund_id
        liability_account_id = request.liability_account_id or bill.liability_account_id
        entry = self.posting.write_entry(
            EntryHeader(
                entry_date=request.payment_date,
                description=f"Payment for bill: {bill.description}",
                reference_number=request.reference_number or bill.bill_number,
            ),
            [
                LineInput(account_id=liability_account_id, fund_id=fund_id,
                          debit=payment_amount, memo="Payment of Accounts Payable"),
                LineInput(account_id=request.bank_account_id, fund_id=fund_id,
                          credit=payment_amount,
                          memo=f"Payment to vendor for: {bill.description}"),
            ],
        )

        payment = BillPayment(
            bill_id=bill.id,
            journal_entry_id=entry.id,
            amount=payment_amount,
            payment_date=request.payment_date,
            payment_method=request.payment_method or None,
            reference_number=request.reference_number or None,
            notes=request.notes or None,
        )
        self.db.add(payment)

        new_paid = bill.amount_paid + payment_amount
        bill.amount_paid = new_paid
        bill.status = bill.status_for_paid_amount(new_paid)
        self.db.flush()

        remaining = max(bill.amount - new_paid, ZERO)
        logger.info(
            "Paid %s on bill %s; status %s, remaining %s",
            fmt(payment_amount), bill.id, bill.status.value, fmt(remaining),
        )
        return PayBillResult(
            bill_id=bill.id,
            payment_id=payment.id,
            journal_entry_id=entry.id,
            new_status=bill.status,
            amount_paid=new_paid,
            remaining_balance=remaining,
        )

    @ledger_operation
    def cancel_bill(self, bill_id: int, reason: str | None = None) -> Bill:
        """
        Cancel a bill that has no payments.

        The original expense entry is left in place; void it
        separately if the expense itself was booked in error.
        """
        bill = get_or_raise(self.db, Bill, bill_id, "Bill", lock=True)
        if bill.amount_paid > 0:
            raise StateConflictError(
                "Cannot cancel a bill that has been partially or fully paid"
            )
        if not bill.can_transition_to(BillStatus.CANCELLED):
            raise StateConflictError("This bill is already cancelled")

        bill.status = BillStatus.CANCELLED
        if reason:
            bill.notes = f"Cancelled: {reason}"
        record_event(self.db, "bill.cancelled", bill_id=bill.id, reason=reason)
        self.db.flush()
        logger.info("Cancelled bill %s", bill.id)
        return bill

    @ledger_operation(commit=False)
    def list_bills(self, status: BillStatus | None = None) -> list[Bill]:
        query = select(Bill).order_by(Bill.due_date)
        if status is not None:
            query = query.where(Bill.status == status)
        return list(self.db.execute(query).scalars())

    @ledger_operation(commit=False)
    def get_bill(self, bill_id: int) -> Bill:
        return get_or_raise(self.db, Bill, bill_id, "Bill")

    @ledger_operation(commit=False)
    def total_amount_owed(self):
        """Outstanding balance across unpaid and partially paid bills."""
        total = self.db.scalar(
            select(func.coalesce(func.sum(Bill.amount - Bill.amount_paid), 0))
            .where(Bill.status.in_([BillStatus.UNPAID, BillStatus.PARTIAL]))
        )
        return to_money(total)
