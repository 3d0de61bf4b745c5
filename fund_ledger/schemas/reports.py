"""
Report payloads.

These are the structures the balance engine produces and the
report endpoints return unchanged. Renderers (PDF, dashboards)
consume them as-is.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from fund_ledger.models.enums import AccountType


class AccountBalanceLine(BaseModel):
    # account_id is None for the synthetic "unallocated" net-asset row
    account_id: int | None
    account_number: int | None
    account_name: str
    balance: Decimal


class FundBalanceLine(BaseModel):
    fund_id: int
    fund_name: str
    is_restricted: bool
    balance: Decimal


class BalanceSheetData(BaseModel):
    as_of: date | None
    assets: list[AccountBalanceLine]
    liabilities: list[AccountBalanceLine]
    net_assets: list[AccountBalanceLine]
    fund_balances: list[FundBalanceLine]
    total_assets: Decimal
    total_liabilities: Decimal
    total_net_assets: Decimal
    is_balanced: bool


class IncomeStatementLine(BaseModel):
    account_id: int
    account_number: int
    account_name: str
    amount: Decimal
    budget: Decimal


class IncomeStatementData(BaseModel):
    label: str
    period_start: date
    period_end: date
    income: list[IncomeStatementLine]
    expenses: list[IncomeStatementLine]
    total_income: Decimal
    total_expenses: Decimal
    net_increase: Decimal
    total_income_budget: Decimal
    total_expense_budget: Decimal


class QuarterlyIncomeStatementData(BaseModel):
    year: int
    quarters: list[IncomeStatementData]


class FundSummaryRow(BaseModel):
    fund_id: int
    fund_name: str
    is_restricted: bool
    beginning_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    ending_balance: Decimal
    planned_income: Decimal
    planned_expenses: Decimal


class FundSummaryData(BaseModel):
    period_start: date
    period_end: date
    funds: list[FundSummaryRow]
    total_beginning_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    total_ending_balance: Decimal


class PeriodTotals(BaseModel):
    """Income and expense totals for one labelled period."""
    label: str
    period_start: date
    period_end: date
    income: Decimal
    expenses: Decimal
    net: Decimal


class BudgetVarianceItem(BaseModel):
    account_id: int
    account_number: int
    account_name: str
    account_type: AccountType
    budgeted_amount: Decimal
    actual_amount: Decimal
    variance: Decimal
    variance_percentage: Decimal


class BudgetVarianceData(BaseModel):
    fiscal_year: int
    income_variance: list[BudgetVarianceItem]
    expense_variance: list[BudgetVarianceItem]
    total_income_budgeted: Decimal
    total_income_actual: Decimal
    total_expense_budgeted: Decimal
    total_expense_actual: Decimal


class DonorGift(BaseModel):
    journal_entry_id: int
    entry_date: date
    description: str
    reference_number: str | None
    fund_name: str
    amount: Decimal
    is_in_kind: bool


class DonorStatementData(BaseModel):
    donor_id: int
    donor_name: str
    year: int
    gifts: list[DonorGift]
    total_cash: Decimal
    total_in_kind: Decimal
    total_amount: Decimal


class FundActivityRow(BaseModel):
    """Year-to-date income and expense for one fund."""
    fund_id: int
    fund_name: str
    ytd_income: Decimal
    ytd_expenses: Decimal
    net_change: Decimal
