"""
Balance engine.

Pure functions that turn ledger lines into balances and report
structures. Nothing here touches the database: the report
service loads LineRow tuples once and hands them in, which keeps
every algorithm testable with plain lists.

Sign convention (normal balance):
    Asset, Expense               debit - credit
    Liability, Equity, Income    credit - debit

Voided entries are dropped before any aggregation.

Fund balance
------------
A fund's balance is what it holds net of what it owes:

    fund balance = sum(Asset debit - credit) - sum(Liability credit - debit)

restricted to the fund's lines, Equity accounts excluded. Because
every entry balances, this equals the fund's direct equity
postings plus its cumulative income minus expenses, which is why
the balance sheet only folds in the part not already posted to
Equity.
"""

import calendar
from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, NamedTuple

from fund_ledger.models.enums import AccountType
from fund_ledger.money import ZERO, to_money, amounts_match
from fund_ledger.schemas.reports import (
    AccountBalanceLine,
    FundBalanceLine,
    BalanceSheetData,
    IncomeStatementLine,
    IncomeStatementData,
    FundSummaryRow,
    FundSummaryData,
    PeriodTotals,
    FundActivityRow,
    BudgetVarianceItem,
    BudgetVarianceData,
)

UNALLOCATED_NET_ASSETS = "Net Assets (unallocated funds)"


class LineRow(NamedTuple):
    """A ledger line joined with what the reports need."""
    account_id: int
    account_type: AccountType
    fund_id: int
    entry_date: date
    debit: Decimal
    credit: Decimal
    is_voided: bool = False


class AccountRef(NamedTuple):
    id: int
    account_number: int
    name: str
    account_type: AccountType


class FundRef(NamedTuple):
    id: int
    name: str
    is_restricted: bool
    net_asset_account_id: int | None = None


def normal_balance(account_type: AccountType, debit, credit) -> Decimal:
    """Signed balance of a debit/credit pair under the type's convention."""
    if account_type.increases_with_debit:
        return Decimal(debit) - Decimal(credit)
    return Decimal(credit) - Decimal(debit)


def select_lines(
    lines: Iterable[LineRow],
    start: date | None = None,
    end: date | None = None,
    before: date | None = None,
) -> list[LineRow]:
    """Non-voided lines with start <= entry_date <= end (and < before)."""
    selected = []
    for line in lines:
        if line.is_voided:
            continue
        if start is not None and line.entry_date < start:
            continue
        if end is not None and line.entry_date > end:
            continue
        if before is not None and line.entry_date >= before:
            continue
        selected.append(line)
    return selected


def account_balances(
    lines: Iterable[LineRow], start: date | None = None, end: date | None = None
) -> dict[int, Decimal]:
    balances: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for line in select_lines(lines, start, end):
        balances[line.account_id] += normal_balance(
            line.account_type, line.debit, line.credit
        )
    return {k: to_money(v) for k, v in balances.items()}


def _fund_contribution(line: LineRow) -> Decimal:
    if line.account_type == AccountType.ASSET:
        return line.debit - line.credit
    if line.account_type == AccountType.LIABILITY:
        return -(line.credit - line.debit)
    return ZERO


def fund_balances(
    lines: Iterable[LineRow],
    start: date | None = None,
    end: date | None = None,
    before: date | None = None,
) -> dict[int, Decimal]:
    """Per-fund balance (assets less liabilities, Equity excluded)."""
    balances: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for line in select_lines(lines, start, end, before):
        balances[line.fund_id] += _fund_contribution(line)
    return {k: to_money(v) for k, v in balances.items()}


def _fund_equity_postings(lines: list[LineRow]) -> dict[int, Decimal]:
    posted: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for line in lines:
        if line.account_type == AccountType.EQUITY:
            posted[line.fund_id] += line.credit - line.debit
    return posted


def build_balance_sheet(
    lines: Iterable[LineRow],
    accounts: Iterable[AccountRef],
    funds: Iterable[FundRef],
    as_of: date | None = None,
) -> BalanceSheetData:
    """
    Balance sheet since inception (through as_of when given).

    Each fund's balance, less what was already posted to Equity in
    that fund, is folded into the fund's mapped Equity account.
    Funds without a mapping are presented together on one
    unallocated net-asset line.
    """
    selected = select_lines(lines, end=as_of)
    accounts_by_id = {a.id: a for a in accounts}
    funds = list(funds)

    balances = account_balances(selected)
    per_fund = fund_balances(selected)
    equity_posted = _fund_equity_postings(selected)

    folded: dict[int, Decimal] = defaultdict(lambda: ZERO)
    unallocated = ZERO
    for fund in funds:
        surplus = per_fund.get(fund.id, ZERO) - equity_posted.get(fund.id, ZERO)
        if fund.net_asset_account_id in accounts_by_id:
            folded[fund.net_asset_account_id] += surplus
        else:
            unallocated += surplus

    sections: dict[AccountType, list[AccountBalanceLine]] = {
        AccountType.ASSET: [],
        AccountType.LIABILITY: [],
        AccountType.EQUITY: [],
    }
    shown_ids = set(balances) | set(folded)
    for account_id in sorted(shown_ids, key=lambda i: accounts_by_id[i].account_number):
        account = accounts_by_id[account_id]
        if account.account_type not in sections:
            continue
        amount = balances.get(account_id, ZERO) + folded.get(account_id, ZERO)
        sections[account.account_type].append(AccountBalanceLine(
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.name,
            balance=to_money(amount),
        ))
    if unallocated != ZERO:
        sections[AccountType.EQUITY].append(AccountBalanceLine(
            account_id=None,
            account_number=None,
            account_name=UNALLOCATED_NET_ASSETS,
            balance=to_money(unallocated),
        ))

    total_assets = sum((l.balance for l in sections[AccountType.ASSET]), ZERO)
    total_liabilities = sum((l.balance for l in sections[AccountType.LIABILITY]), ZERO)
    total_net_assets = sum((l.balance for l in sections[AccountType.EQUITY]), ZERO)

    return BalanceSheetData(
        as_of=as_of,
        assets=sections[AccountType.ASSET],
        liabilities=sections[AccountType.LIABILITY],
        net_assets=sections[AccountType.EQUITY],
        fund_balances=[
            FundBalanceLine(
                fund_id=fund.id,
                fund_name=fund.name,
                is_restricted=fund.is_restricted,
                balance=per_fund.get(fund.id, ZERO),
            )
            for fund in sorted(funds, key=lambda f: (f.is_restricted, f.name))
        ],
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        total_net_assets=total_net_assets,
        is_balanced=amounts_match(total_assets, total_liabilities + total_net_assets),
    )


def income_and_expenses(lines: Iterable[LineRow]) -> tuple[Decimal, Decimal]:
    """(total income, total expenses) over already-selected lines."""
    income = expenses = ZERO
    for line in lines:
        if line.account_type == AccountType.INCOME:
            income += line.credit - line.debit
        elif line.account_type == AccountType.EXPENSE:
            expenses += line.debit - line.credit
    return to_money(income), to_money(expenses)


def build_income_statement(
    lines: Iterable[LineRow],
    accounts: Iterable[AccountRef],
    start: date,
    end: date,
    annual_budgets: dict[int, Decimal] | None = None,
    budget_fraction: Decimal = Decimal("1"),
    label: str = "",
) -> IncomeStatementData:
    """
    Income and expenses for entries dated within [start, end].

    Accounts appear when they had activity or carry a budget.
    Each budget is the annual figure times budget_fraction.
    """
    annual_budgets = annual_budgets or {}
    selected = select_lines(lines, start, end)
    balances = account_balances(selected)

    income_lines, expense_lines = [], []
    for account in sorted(accounts, key=lambda a: a.account_number):
        if account.account_type not in (AccountType.INCOME, AccountType.EXPENSE):
            continue
        annual = annual_budgets.get(account.id, ZERO)
        if account.id not in balances and not annual:
            continue
        row = IncomeStatementLine(
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.name,
            amount=balances.get(account.id, ZERO),
            budget=to_money(annual * budget_fraction),
        )
        if account.account_type == AccountType.INCOME:
            income_lines.append(row)
        else:
            expense_lines.append(row)

    total_income, total_expenses = income_and_expenses(selected)
    return IncomeStatementData(
        label=label or f"{start.isoformat()} to {end.isoformat()}",
        period_start=start,
        period_end=end,
        income=income_lines,
        expenses=expense_lines,
        total_income=total_income,
        total_expenses=total_expenses,
        net_increase=total_income - total_expenses,
        total_income_budget=sum((r.budget for r in income_lines), ZERO),
        total_expense_budget=sum((r.budget for r in expense_lines), ZERO),
    )


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def build_fund_summary(
    lines: Iterable[LineRow],
    funds: Iterable[FundRef],
    accounts: Iterable[AccountRef],
    start: date,
    end: date,
    annual_budgets: dict[int, Decimal] | None = None,
) -> FundSummaryData:
    """
    Per-fund activity for [start, end].

    Planned income and expenses prorate the annual budget of each
    account that had activity in the fund by days in the period
    over days in the year.
    """
    lines = list(lines)
    annual_budgets = annual_budgets or {}
    types = {a.id: a.account_type for a in accounts}
    proration = Decimal(
        (end - start).days + 1
    ) / Decimal(days_in_year(start.year))

    beginning = fund_balances(lines, before=start)
    period = select_lines(lines, start, end)

    by_fund: dict[int, list[LineRow]] = defaultdict(list)
    for line in period:
        by_fund[line.fund_id].append(line)

    rows = []
    for fund in sorted(funds, key=lambda f: (f.is_restricted, f.name)):
        fund_lines = by_fund.get(fund.id, [])
        income, expenses = income_and_expenses(fund_lines)
        planned_income = planned_expenses = ZERO
        for account_id in {line.account_id for line in fund_lines}:
            planned = annual_budgets.get(account_id, ZERO) * proration
            if types.get(account_id) == AccountType.INCOME:
                planned_income += planned
            elif types.get(account_id) == AccountType.EXPENSE:
                planned_expenses += planned

        opening = beginning.get(fund.id, ZERO)
        rows.append(FundSummaryRow(
            fund_id=fund.id,
            fund_name=fund.name,
            is_restricted=fund.is_restricted,
            beginning_balance=opening,
            total_income=income,
            total_expenses=expenses,
            ending_balance=opening + income - expenses,
            planned_income=to_money(planned_income),
            planned_expenses=to_money(planned_expenses),
        ))

    return FundSummaryData(
        period_start=start,
        period_end=end,
        funds=rows,
        total_beginning_balance=sum((r.beginning_balance for r in rows), ZERO),
        total_income=sum((r.total_income for r in rows), ZERO),
        total_expenses=sum((r.total_expenses for r in rows), ZERO),
        total_ending_balance=sum((r.ending_balance for r in rows), ZERO),
    )


def period_totals(
    lines: Iterable[LineRow], start: date, end: date, label: str
) -> PeriodTotals:
    income, expenses = income_and_expenses(select_lines(lines, start, end))
    return PeriodTotals(
        label=label,
        period_start=start,
        period_end=end,
        income=income,
        expenses=expenses,
        net=income - expenses,
    )


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


QUARTERS = [
    (1, "Q1 (Jan-Mar)"),
    (4, "Q2 (Apr-Jun)"),
    (7, "Q3 (Jul-Sep)"),
    (10, "Q4 (Oct-Dec)"),
]


def quarter_bounds(year: int, first_month: int) -> tuple[date, date]:
    start, _ = month_bounds(year, first_month)
    _, end = month_bounds(year, first_month + 2)
    return start, end


def build_fund_activity(
    lines: Iterable[LineRow], funds: Iterable[FundRef], start: date, end: date
) -> list[FundActivityRow]:
    """Income, expenses, and net change per fund that had any in the range."""
    income: dict[int, Decimal] = defaultdict(lambda: ZERO)
    expenses: dict[int, Decimal] = defaultdict(lambda: ZERO)
    seen = set()
    for line in select_lines(lines, start, end):
        if line.account_type == AccountType.INCOME:
            income[line.fund_id] += line.credit - line.debit
            seen.add(line.fund_id)
        elif line.account_type == AccountType.EXPENSE:
            expenses[line.fund_id] += line.debit - line.credit
            seen.add(line.fund_id)

    rows = [
        FundActivityRow(
            fund_id=fund.id,
            fund_name=fund.name,
            ytd_income=to_money(income[fund.id]),
            ytd_expenses=to_money(expenses[fund.id]),
            net_change=to_money(income[fund.id] - expenses[fund.id]),
        )
        for fund in funds
        if fund.id in seen
    ]
    return sorted(rows, key=lambda r: r.fund_name)


def build_budget_variance(
    lines: Iterable[LineRow],
    accounts: Iterable[AccountRef],
    annual_budgets: dict[int, Decimal],
    fiscal_year: int,
) -> BudgetVarianceData:
    """
    Actual against budget for every budgeted Income/Expense account.

    variance = actual - budget; variance_percentage = actual / budget
    * 100, or 0 when nothing was budgeted.
    """
    start, end = date(fiscal_year, 1, 1), date(fiscal_year, 12, 31)
    actuals = account_balances(lines, start, end)

    income_items, expense_items = [], []
    for account in sorted(accounts, key=lambda a: a.account_number):
        if account.id not in annual_budgets:
            continue
        if account.account_type not in (AccountType.INCOME, AccountType.EXPENSE):
            continue
        budgeted = to_money(annual_budgets[account.id])
        actual = actuals.get(account.id, ZERO)
        if budgeted > 0:
            percentage = (actual / budgeted * 100).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
        else:
            percentage = ZERO
        item = BudgetVarianceItem(
            account_id=account.id,
            account_number=account.account_number,
            account_name=account.name,
            account_type=account.account_type,
            budgeted_amount=budgeted,
            actual_amount=actual,
            variance=actual - budgeted,
            variance_percentage=percentage,
        )
        if account.account_type == AccountType.INCOME:
            income_items.append(item)
        else:
            expense_items.append(item)

    return BudgetVarianceData(
        fiscal_year=fiscal_year,
        income_variance=income_items,
        expense_variance=expense_items,
        total_income_budgeted=sum((i.budgeted_amount for i in income_items), ZERO),
        total_income_actual=sum((i.actual_amount for i in income_items), ZERO),
        total_expense_budgeted=sum((i.budgeted_amount for i in expense_items), ZERO),
        total_expense_actual=sum((i.actual_amount for i in expense_items), ZERO),
    )
