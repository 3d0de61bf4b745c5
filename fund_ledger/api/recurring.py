"""
Recurring transaction template endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fund_ledger.api.responses import unwrap
from fund_ledger.models.base import get_db
from fund_ledger.schemas.recurring import (
    TemplateCreate,
    TemplateActiveUpdate,
    TemplateResponse,
    RecurringHistoryResponse,
)
from fund_ledger.schemas.result import BatchResult
from fund_ledger.services.recurring_service import RecurringService

router = APIRouter(prefix="/recurring-templates", tags=["Recurring Transactions"])


@router.post("", response_model=TemplateResponse, status_code=201)
def create_template(request: TemplateCreate, db: Session = Depends(get_db)):
    return unwrap(RecurringService(db).create_template(request))


@router.get("", response_model=list[TemplateResponse])
def list_templates(include_inactive: bool = True, db: Session = Depends(get_db)):
    return unwrap(RecurringService(db).list_templates(include_inactive))


@router.get("/due-count")
def due_count(today: date | None = None, db: Session = Depends(get_db)):
    return {"due": unwrap(RecurringService(db).due_count(today))}


@router.post("/run", response_model=BatchResult)
def run_due_templates(today: date | None = None, db: Session = Depends(get_db)):
    """Post every template that is due as of `today` (default: now)."""
    return unwrap(RecurringService(db).process_due(today))


@router.get("/history", response_model=list[RecurringHistoryResponse])
def all_history(
    limit: int = Query(default=50, ge=1, le=500), db: Session = Depends(get_db)
):
    return unwrap(RecurringService(db).history(None, limit))


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(template_id: int, db: Session = Depends(get_db)):
    return unwrap(RecurringService(db).get_template(template_id))


@router.patch("/{template_id}/active", response_model=TemplateResponse)
def set_active(
    template_id: int, request: TemplateActiveUpdate, db: Session = Depends(get_db)
):
    return unwrap(RecurringService(db).set_active(template_id, request.is_active))


@router.delete("/{template_id}", status_code=204)
def delete_template(template_id: int, db: Session = Depends(get_db)):
    unwrap(RecurringService(db).delete_template(template_id))


@router.get("/{template_id}/history", response_model=list[RecurringHistoryResponse])
def template_history(
    template_id: int,
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return unwrap(RecurringService(db).history(template_id, limit))
