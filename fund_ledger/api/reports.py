"""
Financial report endpoints.

Reports are read-only projections of the ledger. The payloads
are the structures the balance engine builds, returned as-is.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fund_ledger.api.responses import unwrap
from fund_ledger.models.base import get_db
from fund_ledger.schemas.reports import (
    BalanceSheetData,
    IncomeStatementData,
    QuarterlyIncomeStatementData,
    FundSummaryData,
    PeriodTotals,
    FundActivityRow,
    DonorStatementData,
)
from fund_ledger.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/balance-sheet", response_model=BalanceSheetData)
def balance_sheet(as_of: date | None = None, db: Session = Depends(get_db)):
    """Statement of financial position since inception, optionally as of a date."""
    return unwrap(ReportService(db).balance_sheet(as_of))


@router.get("/income-statement", response_model=IncomeStatementData)
def income_statement(
    year: int,
    month: int = Query(ge=1, le=12),
    db: Session = Depends(get_db),
):
    """Statement of activities for one calendar month, with 1/12 of each annual budget."""
    return unwrap(ReportService(db).income_statement(year, month))


@router.get("/income-statement/range", response_model=IncomeStatementData)
def income_statement_for_range(start: date, end: date, db: Session = Depends(get_db)):
    return unwrap(ReportService(db).income_statement_for_range(start, end))


@router.get("/income-statement/quarterly", response_model=QuarterlyIncomeStatementData)
def quarterly_income_statement(year: int, db: Session = Depends(get_db)):
    return unwrap(ReportService(db).quarterly_income_statement(year))


@router.get("/fund-summary", response_model=FundSummaryData)
def fund_summary(start: date, end: date, db: Session = Depends(get_db)):
    return unwrap(ReportService(db).fund_summary(start, end))


@router.get("/income-expense/monthly", response_model=list[PeriodTotals])
def monthly_income_expense(
    months: int = Query(default=6, ge=1, le=36), db: Session = Depends(get_db)
):
    return unwrap(ReportService(db).monthly_income_expense(months))


@router.get("/income-expense/ytd", response_model=PeriodTotals)
def ytd_income_expense(db: Session = Depends(get_db)):
    return unwrap(ReportService(db).ytd_income_expense())


@router.get("/fund-activity/ytd", response_model=list[FundActivityRow])
def ytd_fund_activity(db: Session = Depends(get_db)):
    return unwrap(ReportService(db).ytd_fund_activity())


@router.get("/donors/{donor_id}/statement", response_model=DonorStatementData)
def donor_statement(donor_id: int, year: int, db: Session = Depends(get_db)):
    """Annual giving statement for one donor."""
    return unwrap(ReportService(db).donor_statement(donor_id, year))
