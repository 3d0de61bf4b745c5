"""
Tests for the BudgetService.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import select, func

from fund_ledger.errors import ErrorKind
from fund_ledger.models import Budget
from fund_ledger.schemas.budgets import BudgetUpsert
from fund_ledger.schemas.journal import GivingInput
from fund_ledger.services.budget_service import BudgetService
from fund_ledger.services.posting_service import PostingService


def upsert(account, amount, year=2024):
    return BudgetUpsert(account_id=account.id, fiscal_year=year, budgeted_amount=Decimal(amount))


class TestUpsertBudget:

    def test_second_save_replaces_the_first(self, db_session, chart):
        service = BudgetService(db_session)
        service.upsert_budget(upsert(chart.tithes, "1000.00"))
        result = service.upsert_budget(upsert(chart.tithes, "1500.00"))

        assert result.success
        assert result.data.budgeted_amount == Decimal("1500.00")
        assert db_session.scalar(select(func.count(Budget.id))) == 1

    def test_only_income_and_expense_accounts(self, db_session, chart):
        result = BudgetService(db_session).upsert_budget(upsert(chart.checking, "100.00"))

        assert result.error_kind == ErrorKind.VALIDATION
        assert result.error == "Budgets can only be set on Income or Expense accounts"

    def test_negative_amount_is_rejected(self, db_session, chart):
        result = BudgetService(db_session).upsert_budget(upsert(chart.utilities, "-5.00"))
        assert result.error == "Budgeted amount cannot be negative"

    def test_batch_is_all_or_nothing(self, db_session, chart):
        result = BudgetService(db_session).upsert_budgets([
            upsert(chart.tithes, "1000.00"),
            upsert(chart.payable, "50.00"),
        ])

        assert not result.success
        assert db_session.scalar(select(func.count(Budget.id))) == 0

    def test_list_is_per_year_in_account_order(self, db_session, chart):
        service = BudgetService(db_session)
        service.upsert_budgets([
            upsert(chart.utilities, "2400.00"),
            upsert(chart.tithes, "1000.00"),
            upsert(chart.tithes, "900.00", year=2023),
        ])

        budgets = service.list_budgets(2024).data
        assert [b.account_id for b in budgets] == [chart.tithes.id, chart.utilities.id]


class TestActualsAndVariance:

    def test_historical_actuals_and_variance(self, db_session, chart):
        PostingService(db_session).record_giving(GivingInput(
            entry_date=date(2024, 5, 5),
            fund_id=chart.general.id,
            income_account_id=chart.tithes.id,
            checking_account_id=chart.checking.id,
            amount=Decimal("450.00"),
        ))
        service = BudgetService(db_session)
        service.upsert_budgets([
            upsert(chart.tithes, "600.00"),
            upsert(chart.utilities, "200.00"),
        ])

        actuals = service.historical_actuals(2024).data
        variance = service.budget_variance(2024).data

        assert [(a.account_id, a.actual_amount) for a in actuals] == [
            (chart.tithes.id, Decimal("450.00"))
        ]
        tithes = variance.income_variance[0]
        assert tithes.variance == Decimal("-150.00")
        assert tithes.variance_percentage == Decimal("75.00")
        utilities = variance.expense_variance[0]
        assert utilities.actual_amount == Decimal("0")
        assert variance.total_expense_budgeted == Decimal("200.00")
