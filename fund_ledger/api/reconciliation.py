"""
Bank reconciliation endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fund_ledger.api.responses import unwrap
from fund_ledger.models.base import get_db
from fund_ledger.schemas.reconciliation import (
    ReconciliationStart,
    LineSelection,
    ClearedUpdate,
    ReconciliationLine,
    ReconciliationResponse,
    ReconciliationBalance,
)
from fund_ledger.services.reconciliation_service import ReconciliationService

router = APIRouter(tags=["Reconciliation"])


# --- Per-account views ---

@router.get(
    "/reconciliation/accounts/{account_id}/uncleared",
    response_model=list[ReconciliationLine],
)
def uncleared_transactions(account_id: int, db: Session = Depends(get_db)):
    return unwrap(ReconciliationService(db).get_uncleared_transactions(account_id))


@router.get(
    "/reconciliation/accounts/{account_id}/cleared",
    response_model=list[ReconciliationLine],
)
def cleared_transactions(
    account_id: int,
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return unwrap(ReconciliationService(db).get_cleared_transactions(account_id, limit))


@router.get(
    "/reconciliation/accounts/{account_id}/cleared-balance",
    response_model=ReconciliationBalance,
)
def cleared_balance(account_id: int, db: Session = Depends(get_db)):
    return unwrap(ReconciliationService(db).get_cleared_balance(account_id))


@router.post(
    "/reconciliation/accounts/{account_id}/selection-balance",
    response_model=ReconciliationBalance,
)
def selection_balance(
    account_id: int, request: LineSelection, db: Session = Depends(get_db)
):
    """Balance of the lines currently ticked on the reconciliation screen."""
    return unwrap(ReconciliationService(db).calculate_balance_for_transactions(
        account_id, request.ledger_line_ids
    ))


@router.get(
    "/reconciliation/accounts/{account_id}/current",
    response_model=ReconciliationResponse | None,
)
def current_reconciliation(account_id: int, db: Session = Depends(get_db)):
    return unwrap(ReconciliationService(db).get_current_reconciliation(account_id))


@router.get(
    "/reconciliation/accounts/{account_id}/history",
    response_model=list[ReconciliationResponse],
)
def reconciliation_history(
    account_id: int,
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return unwrap(ReconciliationService(db).reconciliation_history(account_id, limit))


@router.patch("/ledger-lines/{ledger_line_id}/cleared", response_model=ReconciliationLine)
def mark_cleared(
    ledger_line_id: int, request: ClearedUpdate, db: Session = Depends(get_db)
):
    return unwrap(ReconciliationService(db).mark_cleared(ledger_line_id, request.is_cleared))


# --- Reconciliation lifecycle ---

@router.post("/reconciliations", response_model=ReconciliationResponse, status_code=201)
def start_reconciliation(request: ReconciliationStart, db: Session = Depends(get_db)):
    """Open a reconciliation. Only one may be in progress per account."""
    return unwrap(ReconciliationService(db).start_reconciliation(request))


@router.post(
    "/reconciliations/{reconciliation_id}/finalize",
    response_model=ReconciliationResponse,
)
def finalize_reconciliation(
    reconciliation_id: int, request: LineSelection, db: Session = Depends(get_db)
):
    """
    Clear the selected lines and complete the reconciliation.

    Rejected, with nothing changed, unless the selected lines
    balance to the statement within one cent.
    """
    return unwrap(ReconciliationService(db).finalize_reconciliation(
        reconciliation_id, request.ledger_line_ids
    ))


@router.delete("/reconciliations/{reconciliation_id}", status_code=204)
def delete_reconciliation(reconciliation_id: int, db: Session = Depends(get_db)):
    unwrap(ReconciliationService(db).delete_reconciliation(reconciliation_id))
