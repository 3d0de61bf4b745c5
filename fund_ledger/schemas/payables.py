"""Schemas for vendors, bills, and bill payments."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from fund_ledger.models.enums import BillStatus


# --- Request Schemas ---

class VendorCreate(BaseModel):
    name: str
    contact_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None


class BillCreate(BaseModel):
    vendor_id: int | None = None
    fund_id: int | None = None
    expense_account_id: int | None = None
    liability_account_id: int | None = None
    bill_number: str | None = None
    description: str = ""
    invoice_date: date
    due_date: date
    amount: Decimal
    notes: str | None = None


class BillPaymentCreate(BaseModel):
    """
    A payment against a bill.

    fund_id and liability_account_id default to the bill's own
    fund and liability account.
    """
    amount: Decimal
    bank_account_id: int
    payment_date: date
    fund_id: int | None = None
    liability_account_id: int | None = None
    payment_method: str | None = None
    reference_number: str | None = None
    notes: str | None = None


class BillCancel(BaseModel):
    reason: str | None = None


# --- Response Schemas ---

class VendorResponse(BaseModel):
    id: int
    name: str
    contact_name: str | None
    email: str | None
    phone: str | None
    address: str | None
    notes: str | None
    is_active: bool

    model_config = {"from_attributes": True}


class BillPaymentResponse(BaseModel):
    id: int
    bill_id: int
    journal_entry_id: int
    amount: Decimal
    payment_date: date
    payment_method: str | None
    reference_number: str | None
    notes: str | None

    model_config = {"from_attributes": True}


class BillResponse(BaseModel):
    id: int
    vendor_id: int
    fund_id: int
    expense_account_id: int
    liability_account_id: int
    journal_entry_id: int
    bill_number: str | None
    description: str
    amount: Decimal
    amount_paid: Decimal
    remaining_balance: Decimal
    status: BillStatus
    invoice_date: date
    due_date: date
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class BillDetailResponse(BillResponse):
    payments: list[BillPaymentResponse]


class PayBillResult(BaseModel):
    bill_id: int
    payment_id: int
    journal_entry_id: int
    new_status: BillStatus
    amount_paid: Decimal
    remaining_balance: Decimal
