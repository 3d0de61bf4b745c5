"""
Accounts payable endpoints: vendors, bills, and bill payments.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fund_ledger.api.responses import unwrap
from fund_ledger.models.base import get_db
from fund_ledger.models.enums import BillStatus
from fund_ledger.schemas.payables import (
    VendorCreate,
    VendorResponse,
    BillCreate,
    BillPaymentCreate,
    BillCancel,
    BillResponse,
    BillDetailResponse,
    PayBillResult,
)
from fund_ledger.services.payables_service import PayablesService

router = APIRouter(tags=["Accounts Payable"])


@router.post("/vendors", response_model=VendorResponse, status_code=201)
def create_vendor(request: VendorCreate, db: Session = Depends(get_db)):
    return unwrap(PayablesService(db).create_vendor(request))


@router.get("/vendors", response_model=list[VendorResponse])
def list_vendors(include_inactive: bool = False, db: Session = Depends(get_db)):
    return unwrap(PayablesService(db).list_vendors(include_inactive))


@router.post("/bills", response_model=BillResponse, status_code=201)
def create_bill(request: BillCreate, db: Session = Depends(get_db)):
    """
    Enter a vendor bill.

    Posts the expense against Accounts Payable in the same
    transaction that creates the bill.
    """
    return unwrap(PayablesService(db).create_bill(request))


@router.get("/bills", response_model=list[BillResponse])
def list_bills(status: BillStatus | None = None, db: Session = Depends(get_db)):
    return unwrap(PayablesService(db).list_bills(status))


@router.get("/bills/outstanding-total")
def total_amount_owed(db: Session = Depends(get_db)):
    return {"total_amount_owed": unwrap(PayablesService(db).total_amount_owed())}


@router.get("/bills/{bill_id}", response_model=BillDetailResponse)
def get_bill(bill_id: int, db: Session = Depends(get_db)):
    return unwrap(PayablesService(db).get_bill(bill_id))


@router.post("/bills/{bill_id}/payments", response_model=PayBillResult, status_code=201)
def pay_bill(bill_id: int, request: BillPaymentCreate, db: Session = Depends(get_db)):
    """
    Pay all or part of a bill.

    Overpayments, payments on paid bills, and payments on
    cancelled bills are rejected.
    """
    return unwrap(PayablesService(db).pay_bill(bill_id, request))


@router.post("/bills/{bill_id}/cancel", response_model=BillResponse)
def cancel_bill(bill_id: int, request: BillCancel, db: Session = Depends(get_db)):
    return unwrap(PayablesService(db).cancel_bill(bill_id, request.reason))
