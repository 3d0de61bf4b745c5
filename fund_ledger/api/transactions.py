"""
Journal entry endpoints.

Every way money enters the ledger ends up here: a raw balanced
entry, or one of the bookkeeping shortcuts (giving, expenses,
transfers, deposits) that build the lines for you.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fund_ledger.api.responses import unwrap
from fund_ledger.models.base import get_db
from fund_ledger.schemas.journal import (
    PostEntryRequest,
    VoidEntryRequest,
    GivingInput,
    ExpenseInput,
    AccountTransferInput,
    FundTransferInput,
    OpeningBalanceInput,
    InKindDonationInput,
    BatchOnlineDonationInput,
    WeeklyDepositInput,
    DuplicateCheckRequest,
    JournalEntryResponse,
    TransactionPage,
)
from fund_ledger.services.posting_service import PostingService

router = APIRouter(tags=["Transactions"])


@router.post("/transactions", response_model=JournalEntryResponse, status_code=201)
def post_entry(request: PostEntryRequest, db: Session = Depends(get_db)):
    """
    Post a balanced journal entry.

    Rejected entries (unbalanced, fewer than two lines, unknown
    or inactive accounts) write nothing.
    """
    return unwrap(PostingService(db).post_entry(request))


@router.get("/transactions", response_model=TransactionPage)
def list_transactions(
    search: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    return unwrap(PostingService(db).list_entries(search, limit, offset))


@router.post("/transactions/duplicate-check")
def check_duplicate(request: DuplicateCheckRequest, db: Session = Depends(get_db)):
    """Tell an importer whether a statement row looks already entered."""
    is_duplicate = unwrap(PostingService(db).check_duplicate(
        request.entry_date, request.amount, request.description
    ))
    return {"is_duplicate": is_duplicate}


@router.get("/transactions/{entry_id}", response_model=JournalEntryResponse)
def get_transaction(entry_id: int, db: Session = Depends(get_db)):
    return unwrap(PostingService(db).get_entry(entry_id))


@router.post("/transactions/{entry_id}/void", response_model=JournalEntryResponse)
def void_transaction(
    entry_id: int, request: VoidEntryRequest, db: Session = Depends(get_db)
):
    """Void an entry. Its lines stay but no balance counts them."""
    return unwrap(PostingService(db).void_entry(entry_id, request.reason))


@router.delete("/transactions/{entry_id}", status_code=204)
def delete_transaction(entry_id: int, db: Session = Depends(get_db)):
    unwrap(PostingService(db).delete_entry(entry_id))


# --- Bookkeeping shortcuts ---

@router.post("/giving", response_model=JournalEntryResponse, status_code=201)
def record_giving(data: GivingInput, db: Session = Depends(get_db)):
    return unwrap(PostingService(db).record_giving(data))


@router.post("/expenses", response_model=JournalEntryResponse, status_code=201)
def record_expense(data: ExpenseInput, db: Session = Depends(get_db)):
    return unwrap(PostingService(db).record_expense(data))


@router.post("/transfers/accounts", response_model=JournalEntryResponse, status_code=201)
def transfer_between_accounts(data: AccountTransferInput, db: Session = Depends(get_db)):
    return unwrap(PostingService(db).transfer_between_accounts(data))


@router.post("/transfers/funds", response_model=JournalEntryResponse, status_code=201)
def transfer_between_funds(data: FundTransferInput, db: Session = Depends(get_db)):
    return unwrap(PostingService(db).transfer_between_funds(data))


@router.post("/opening-balances", response_model=JournalEntryResponse, status_code=201)
def record_opening_balance(data: OpeningBalanceInput, db: Session = Depends(get_db)):
    return unwrap(PostingService(db).record_opening_balance(data))


@router.post("/donations/in-kind", response_model=JournalEntryResponse, status_code=201)
def record_in_kind_donation(data: InKindDonationInput, db: Session = Depends(get_db)):
    return unwrap(PostingService(db).record_in_kind_donation(data))


@router.post("/donations/online-batch", response_model=JournalEntryResponse, status_code=201)
def record_batch_online_donation(
    data: BatchOnlineDonationInput, db: Session = Depends(get_db)
):
    return unwrap(PostingService(db).record_batch_online_donation(data))


@router.post("/deposits/weekly", response_model=JournalEntryResponse, status_code=201)
def record_weekly_deposit(data: WeeklyDepositInput, db: Session = Depends(get_db)):
    return unwrap(PostingService(db).record_weekly_deposit(data))
