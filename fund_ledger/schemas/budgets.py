"""Schemas for annual budgets."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class BudgetUpsert(BaseModel):
    account_id: int
    fiscal_year: int
    budgeted_amount: Decimal
    notes: str | None = None


class BudgetResponse(BaseModel):
    id: int
    account_id: int
    fiscal_year: int
    budgeted_amount: Decimal
    notes: str | None
    updated_at: datetime

    model_config = {"from_attributes": True}


class HistoricalActual(BaseModel):
    """What an account actually did in a past year, for budget planning."""
    account_id: int
    account_number: int
    account_name: str
    actual_amount: Decimal
