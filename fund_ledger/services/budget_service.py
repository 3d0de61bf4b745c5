"""
Budget service.

One budget figure per account per fiscal year. Saving a budget
for an (account, year) that already has one replaces it.
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from fund_ledger.errors import ValidationError
from fund_ledger.models.account import Account
from fund_ledger.models.budget import Budget
from fund_ledger.models.enums import AccountType
from fund_ledger.money import to_money
from fund_ledger.schemas.budgets import BudgetUpsert, HistoricalActual
from fund_ledger.schemas.reports import BudgetVarianceData
from fund_ledger.services import balance
from fund_ledger.services.boundary import ledger_operation
from fund_ledger.services.lookups import get_or_raise
from fund_ledger.services.report_service import ReportService

logger = logging.getLogger(__name__)


class BudgetService:

    def __init__(self, db: Session):
        self.db = db
        self.reports = ReportService(db)

    def _upsert(self, request: BudgetUpsert) -> Budget:
        account = get_or_raise(self.db, Account, request.account_id, "Account")
        if account.account_type not in (AccountType.INCOME, AccountType.EXPENSE):
            raise ValidationError("Budgets can only be set on Income or Expense accounts")
        amount = to_money(request.budgeted_amount)
        if amount < 0:
            raise ValidationError("Budgeted amount cannot be negative")

        budget = self.db.execute(
            select(Budget).where(
                Budget.account_id == request.account_id,
                Budget.fiscal_year == request.fiscal_year,
            ).with_for_update()
        ).scalar_one_or_none()
        if budget is None:
            budget = Budget(account_id=request.account_id, fiscal_year=request.fiscal_year)
            self.db.add(budget)
        budget.budgeted_amount = amount
        budget.notes = request.notes
        self.db.flush()
        return budget

    @ledger_operation
    def upsert_budget(self, request: BudgetUpsert) -> Budget:
        return self._upsert(request)

    @ledger_operation
    def upsert_budgets(self, requests: list[BudgetUpsert]) -> list[Budget]:
        """Save several budgets; all of them or none."""
        budgets = [self._upsert(request) for request in requests]
        logger.info("Saved %d budget lines", len(budgets))
        return budgets

    @ledger_operation(commit=False)
    def list_budgets(self, fiscal_year: int) -> list[Budget]:
        return list(self.db.execute(
            select(Budget)
            .join(Account, Account.id == Budget.account_id)
            .where(Budget.fiscal_year == fiscal_year)
            .order_by(Account.account_number)
        ).scalars())

    @ledger_operation(commit=False)
    def historical_actuals(self, fiscal_year: int) -> list[HistoricalActual]:
        """Income/Expense actuals for a year, as a starting point for next year's budget."""
        start, end = date(fiscal_year, 1, 1), date(fiscal_year, 12, 31)
        actuals = balance.account_balances(self.reports.load_lines(start, end))
        return [
            HistoricalActual(
                account_id=ref.id,
                account_number=ref.account_number,
                account_name=ref.name,
                actual_amount=actuals[ref.id],
            )
            for ref in sorted(self.reports.account_refs(), key=lambda a: a.account_number)
            if ref.id in actuals
            and ref.account_type in (AccountType.INCOME, AccountType.EXPENSE)
        ]

    @ledger_operation(commit=False)
    def budget_variance(self, fiscal_year: int) -> BudgetVarianceData:
        start, end = date(fiscal_year, 1, 1), date(fiscal_year, 12, 31)
        return balance.build_budget_variance(
            self.reports.load_lines(start, end),
            self.reports.account_refs(),
            self.reports.annual_budgets(fiscal_year),
            fiscal_year,
        )
