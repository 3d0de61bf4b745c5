"""
Budget endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fund_ledger.api.responses import unwrap
from fund_ledger.models.base import get_db
from fund_ledger.schemas.budgets import BudgetUpsert, BudgetResponse, HistoricalActual
from fund_ledger.schemas.reports import BudgetVarianceData
from fund_ledger.services.budget_service import BudgetService

router = APIRouter(prefix="/budgets", tags=["Budgets"])


@router.put("", response_model=list[BudgetResponse])
def save_budgets(requests: list[BudgetUpsert], db: Session = Depends(get_db)):
    """Create or update annual budgets. All lines are saved or none are."""
    return unwrap(BudgetService(db).upsert_budgets(requests))


@router.get("", response_model=list[BudgetResponse])
def list_budgets(fiscal_year: int, db: Session = Depends(get_db)):
    return unwrap(BudgetService(db).list_budgets(fiscal_year))


@router.get("/historical", response_model=list[HistoricalActual])
def historical_actuals(fiscal_year: int, db: Session = Depends(get_db)):
    return unwrap(BudgetService(db).historical_actuals(fiscal_year))


@router.get("/variance", response_model=BudgetVarianceData)
def budget_variance(fiscal_year: int, db: Session = Depends(get_db)):
    return unwrap(BudgetService(db).budget_variance(fiscal_year))
