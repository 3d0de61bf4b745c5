"""
Report service.

Loads ledger rows once per report and hands them to the pure
functions in services/balance.py. Every method is read-only.
"""

import logging
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.orm import Session

from fund_ledger.errors import ValidationError
from fund_ledger.models.account import Account
from fund_ledger.models.budget import Budget
from fund_ledger.models.donor import Donor
from fund_ledger.models.enums import AccountType
from fund_ledger.models.fund import Fund
from fund_ledger.models.journal import JournalEntry, LedgerLine
from fund_ledger.money import ZERO, to_money
from fund_ledger.schemas.reports import (
    BalanceSheetData,
    IncomeStatementData,
    QuarterlyIncomeStatementData,
    FundSummaryData,
    FundActivityRow,
    PeriodTotals,
    DonorGift,
    DonorStatementData,
)
from fund_ledger.services import balance
from fund_ledger.services.balance import LineRow, AccountRef, FundRef
from fund_ledger.services.boundary import ledger_operation
from fund_ledger.services.lookups import get_or_raise

logger = logging.getLogger(__name__)


class ReportService:

    def __init__(self, db: Session):
        self.db = db

    # --- Loading ---

    def load_lines(
        self, start: date | None = None, end: date | None = None
    ) -> list[LineRow]:
        """Non-voided lines dated within [start, end], as LineRow tuples."""
        query = (
            select(
                LedgerLine.account_id,
                Account.account_type,
                LedgerLine.fund_id,
                JournalEntry.entry_date,
                LedgerLine.debit,
                LedgerLine.credit,
                JournalEntry.is_voided,
            )
            .join(Account, Account.id == LedgerLine.account_id)
            .join(JournalEntry, JournalEntry.id == LedgerLine.journal_entry_id)
            .where(JournalEntry.is_voided.is_(False))
        )
        if start is not None:
            query = query.where(JournalEntry.entry_date >= start)
        if end is not None:
            query = query.where(JournalEntry.entry_date <= end)
        return [LineRow(*row) for row in self.db.execute(query)]

    def account_refs(self) -> list[AccountRef]:
        return [
            AccountRef(a.id, a.account_number, a.name, a.account_type)
            for a in self.db.execute(select(Account)).scalars()
        ]

    def fund_refs(self) -> list[FundRef]:
        return [
            FundRef(f.id, f.name, f.is_restricted, f.net_asset_account_id)
            for f in self.db.execute(select(Fund)).scalars()
        ]

    def annual_budgets(self, fiscal_year: int) -> dict[int, Decimal]:
        rows = self.db.execute(
            select(Budget.account_id, Budget.budgeted_amount)
            .where(Budget.fiscal_year == fiscal_year)
        )
        return {account_id: amount for account_id, amount in rows}

    # --- Statements ---

    @ledger_operation(commit=False)
    def balance_sheet(self, as_of: date | None = None) -> BalanceSheetData:
        sheet = balance.build_balance_sheet(
            self.load_lines(end=as_of), self.account_refs(), self.fund_refs(), as_of
        )
        if not sheet.is_balanced:
            logger.warning(
                "Balance sheet does not balance: assets=%s liabilities=%s net_assets=%s",
                sheet.total_assets, sheet.total_liabilities, sheet.total_net_assets,
            )
        return sheet

    @ledger_operation(commit=False)
    def income_statement(self, year: int, month: int) -> IncomeStatementData:
        """One calendar month, with a twelfth of each annual budget."""
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")
        start, end = balance.month_bounds(year, month)
        return balance.build_income_statement(
            self.load_lines(start, end),
            self.account_refs(),
            start,
            end,
            annual_budgets=self.annual_budgets(year),
            budget_fraction=Decimal(1) / Decimal(12),
            label=start.strftime("%B %Y"),
        )

    @ledger_operation(commit=False)
    def income_statement_for_range(self, start: date, end: date) -> IncomeStatementData:
        if end < start:
            raise ValidationError("End date cannot be before start date")
        return balance.build_income_statement(
            self.load_lines(start, end), self.account_refs(), start, end
        )

    @ledger_operation(commit=False)
    def quarterly_income_statement(self, year: int) -> QuarterlyIncomeStatementData:
        """Quarters with any activity, each with a quarter of the annual budget."""
        lines = self.load_lines(date(year, 1, 1), date(year, 12, 31))
        accounts = self.account_refs()
        budgets = self.annual_budgets(year)

        quarters = []
        for first_month, label in balance.QUARTERS:
            start, end = balance.quarter_bounds(year, first_month)
            statement = balance.build_income_statement(
                lines, accounts, start, end,
                annual_budgets=budgets,
                budget_fraction=Decimal(1) / Decimal(4),
                label=label,
            )
            if statement.total_income == 0 and statement.total_expenses == 0:
                continue
            quarters.append(statement)
        return QuarterlyIncomeStatementData(year=year, quarters=quarters)

    @ledger_operation(commit=False)
    def fund_summary(self, start: date, end: date) -> FundSummaryData:
        if end < start:
            raise ValidationError("End date cannot be before start date")
        return balance.build_fund_summary(
            self.load_lines(end=end),
            self.fund_refs(),
            self.account_refs(),
            start,
            end,
            annual_budgets=self.annual_budgets(start.year),
        )

    # --- Dashboard series ---

    @ledger_operation(commit=False)
    def monthly_income_expense(
        self, months: int = 6, today: date | None = None
    ) -> list[PeriodTotals]:
        """Income and expenses for the last `months` calendar months, oldest first."""
        today = today or date.today()
        first = today.replace(day=1) - relativedelta(months=months - 1)
        lines = self.load_lines(first, today)

        series = []
        for offset in range(months):
            month_start = first + relativedelta(months=offset)
            start, end = balance.month_bounds(month_start.year, month_start.month)
            series.append(balance.period_totals(
                lines, start, end, start.strftime("%b %Y")
            ))
        return series

    @ledger_operation(commit=False)
    def ytd_income_expense(self, today: date | None = None) -> PeriodTotals:
        today = today or date.today()
        start = date(today.year, 1, 1)
        return balance.period_totals(
            self.load_lines(start, today), start, today, f"{today.year} YTD"
        )

    @ledger_operation(commit=False)
    def ytd_fund_activity(self, today: date | None = None) -> list[FundActivityRow]:
        today = today or date.today()
        start = date(today.year, 1, 1)
        return balance.build_fund_activity(
            self.load_lines(start, today), self.fund_refs(), start, today
        )

    # --- Donors ---

    @ledger_operation(commit=False)
    def donor_statement(self, donor_id: int, year: int) -> DonorStatementData:
        """
        A donor's gifts for the year: income credits on the donor's
        non-voided entries, with in-kind gifts totalled separately.
        """
        donor = get_or_raise(self.db, Donor, donor_id, "Donor")
        rows = self.db.execute(
            select(JournalEntry, LedgerLine.credit, Fund.name)
            .join(LedgerLine, LedgerLine.journal_entry_id == JournalEntry.id)
            .join(Account, Account.id == LedgerLine.account_id)
            .join(Fund, Fund.id == LedgerLine.fund_id)
            .where(
                JournalEntry.donor_id == donor_id,
                JournalEntry.is_voided.is_(False),
                JournalEntry.entry_date >= date(year, 1, 1),
                JournalEntry.entry_date <= date(year, 12, 31),
                Account.account_type == AccountType.INCOME,
                LedgerLine.credit > 0,
            )
            .order_by(JournalEntry.entry_date, JournalEntry.id, LedgerLine.id)
        ).all()

        gifts: dict[int, DonorGift] = {}
        for entry, credit, fund_name in rows:
            gift = gifts.get(entry.id)
            if gift is None:
                gifts[entry.id] = DonorGift(
                    journal_entry_id=entry.id,
                    entry_date=entry.entry_date,
                    description=entry.description,
                    reference_number=entry.reference_number,
                    fund_name=fund_name,
                    amount=to_money(credit),
                    is_in_kind=entry.is_in_kind,
                )
            else:
                gift.amount = to_money(gift.amount + credit)

        gift_list = list(gifts.values())
        total_cash = sum((g.amount for g in gift_list if not g.is_in_kind), ZERO)
        total_in_kind = sum((g.amount for g in gift_list if g.is_in_kind), ZERO)
        return DonorStatementData(
            donor_id=donor.id,
            donor_name=donor.name,
            year=year,
            gifts=gift_list,
            total_cash=total_cash,
            total_in_kind=total_in_kind,
            total_amount=total_cash + total_in_kind,
        )
