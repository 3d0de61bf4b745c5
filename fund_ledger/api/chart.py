"""
Chart of accounts, fund, and donor endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fund_ledger.api.responses import unwrap
from fund_ledger.models.base import get_db
from fund_ledger.models.enums import AccountType
from fund_ledger.schemas.chart import (
    AccountCreate,
    AccountUpdate,
    AccountResponse,
    ExpenseLiabilityMapping,
    FundCreate,
    FundUpdate,
    FundEquityMapping,
    FundResponse,
    DonorCreate,
    DonorUpdate,
    DonorResponse,
)
from fund_ledger.services.chart_service import ChartService

router = APIRouter(tags=["Chart of Accounts"])


# --- Account Endpoints ---

@router.post("/accounts", response_model=AccountResponse, status_code=201)
def create_account(request: AccountCreate, db: Session = Depends(get_db)):
    """Create a new account in the chart of accounts."""
    return unwrap(ChartService(db).create_account(request))


@router.get("/accounts", response_model=list[AccountResponse])
def list_accounts(
    account_type: AccountType | None = None,
    include_inactive: bool = False,
    db: Session = Depends(get_db),
):
    return unwrap(ChartService(db).list_accounts(account_type, include_inactive))


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(account_id: int, db: Session = Depends(get_db)):
    return unwrap(ChartService(db).get_account(account_id))


@router.patch("/accounts/{account_id}", response_model=AccountResponse)
def update_account(account_id: int, request: AccountUpdate, db: Session = Depends(get_db)):
    return unwrap(ChartService(db).update_account(account_id, request))


@router.post("/accounts/{account_id}/deactivate", response_model=AccountResponse)
def deactivate_account(account_id: int, db: Session = Depends(get_db)):
    """
    Mark an account inactive.

    Inactive accounts keep their history but reject new postings.
    """
    return unwrap(ChartService(db).set_account_active(account_id, False))


@router.post("/accounts/{account_id}/activate", response_model=AccountResponse)
def activate_account(account_id: int, db: Session = Depends(get_db)):
    return unwrap(ChartService(db).set_account_active(account_id, True))


@router.put("/accounts/{account_id}/default-liability", response_model=AccountResponse)
def map_expense_to_liability(
    account_id: int, request: ExpenseLiabilityMapping, db: Session = Depends(get_db)
):
    return unwrap(
        ChartService(db).map_expense_to_liability(account_id, request.liability_account_id)
    )


@router.delete("/accounts/{account_id}", status_code=204)
def delete_account(account_id: int, db: Session = Depends(get_db)):
    """Delete an account that has never been used in a transaction."""
    unwrap(ChartService(db).delete_account(account_id))


# --- Fund Endpoints ---

@router.post("/funds", response_model=FundResponse, status_code=201)
def create_fund(request: FundCreate, db: Session = Depends(get_db)):
    return unwrap(ChartService(db).create_fund(request))


@router.get("/funds", response_model=list[FundResponse])
def list_funds(include_inactive: bool = False, db: Session = Depends(get_db)):
    return unwrap(ChartService(db).list_funds(include_inactive))


@router.patch("/funds/{fund_id}", response_model=FundResponse)
def update_fund(fund_id: int, request: FundUpdate, db: Session = Depends(get_db)):
    return unwrap(ChartService(db).update_fund(fund_id, request))


@router.put("/funds/{fund_id}/net-asset-account", response_model=FundResponse)
def map_fund_to_equity(
    fund_id: int, request: FundEquityMapping, db: Session = Depends(get_db)
):
    """
    Choose the Equity account that presents this fund's balance
    on the balance sheet. Send null to unmap.
    """
    return unwrap(
        ChartService(db).map_fund_to_equity(fund_id, request.net_asset_account_id)
    )


@router.delete("/funds/{fund_id}", status_code=204)
def delete_fund(fund_id: int, db: Session = Depends(get_db)):
    unwrap(ChartService(db).delete_fund(fund_id))


# --- Donor Endpoints ---

@router.post("/donors", response_model=DonorResponse, status_code=201)
def create_donor(request: DonorCreate, db: Session = Depends(get_db)):
    return unwrap(ChartService(db).create_donor(request))


@router.get("/donors", response_model=list[DonorResponse])
def list_donors(db: Session = Depends(get_db)):
    return unwrap(ChartService(db).list_donors())


@router.patch("/donors/{donor_id}", response_model=DonorResponse)
def update_donor(donor_id: int, request: DonorUpdate, db: Session = Depends(get_db)):
    return unwrap(ChartService(db).update_donor(donor_id, request))


@router.delete("/donors/{donor_id}", status_code=204)
def delete_donor(donor_id: int, db: Session = Depends(get_db)):
    unwrap(ChartService(db).delete_donor(donor_id))
