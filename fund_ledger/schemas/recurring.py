"""Schemas for recurring transaction templates."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from fund_ledger.models.enums import Frequency, RunStatus


# --- Request Schemas ---

class TemplateLineInput(BaseModel):
    account_id: int
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    memo: str | None = None


class TemplateCreate(BaseModel):
    template_name: str
    description: str
    frequency: Frequency
    start_date: date
    end_date: date | None = None
    fund_id: int | None = None
    amount: Decimal
    reference_number_prefix: str | None = None
    notes: str | None = None
    lines: list[TemplateLineInput]


class TemplateActiveUpdate(BaseModel):
    is_active: bool


# --- Response Schemas ---

class TemplateLineResponse(BaseModel):
    id: int
    account_id: int
    debit: Decimal
    credit: Decimal
    memo: str | None
    line_order: int

    model_config = {"from_attributes": True}


class TemplateResponse(BaseModel):
    id: int
    template_name: str
    description: str
    frequency: Frequency
    start_date: date
    end_date: date | None
    last_run_date: date | None
    next_run_date: date
    fund_id: int
    amount: Decimal
    reference_number_prefix: str | None
    notes: str | None
    is_active: bool
    lines: list[TemplateLineResponse]

    model_config = {"from_attributes": True}


class RecurringHistoryResponse(BaseModel):
    id: int
    template_id: int
    journal_entry_id: int | None
    executed_date: date
    amount: Decimal
    status: RunStatus
    error_message: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
