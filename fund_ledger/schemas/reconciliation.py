"""Schemas for bank reconciliation."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from fund_ledger.models.enums import ReconciliationStatus


# --- Request Schemas ---

class ReconciliationStart(BaseModel):
    account_id: int
    statement_date: date
    statement_balance: Decimal
    notes: str | None = None


class LineSelection(BaseModel):
    ledger_line_ids: list[int]


class ClearedUpdate(BaseModel):
    is_cleared: bool


# --- Response Schemas ---

class ReconciliationLine(BaseModel):
    """A ledger line as shown on the reconciliation screen."""
    ledger_line_id: int
    journal_entry_id: int
    entry_date: date
    description: str
    reference_number: str | None
    fund_name: str
    debit: Decimal
    credit: Decimal
    memo: str | None
    is_cleared: bool
    cleared_at: datetime | None


class ReconciliationResponse(BaseModel):
    id: int
    account_id: int
    statement_date: date
    statement_balance: Decimal
    reconciled_balance: Decimal | None
    status: ReconciliationStatus
    notes: str | None
    completed_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ReconciliationBalance(BaseModel):
    account_id: int
    balance: Decimal
