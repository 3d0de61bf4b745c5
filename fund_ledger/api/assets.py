"""
Fixed asset endpoints: registration, depreciation, disposal,
and maintenance.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fund_ledger.api.responses import unwrap
from fund_ledger.models.base import get_db
from fund_ledger.schemas.assets import (
    AssetCreate,
    AssetResponse,
    AssetDetailResponse,
    AssetSummary,
    DepreciationRequest,
    DepreciationCalculation,
    DepreciationResult,
    DisposalRequest,
    DisposalResult,
    MaintenanceCreate,
    MaintenanceResponse,
)
from fund_ledger.schemas.result import BatchResult
from fund_ledger.services.asset_service import AssetService

router = APIRouter(prefix="/assets", tags=["Fixed Assets"])


@router.post("", response_model=AssetResponse, status_code=201)
def create_asset(request: AssetCreate, db: Session = Depends(get_db)):
    return unwrap(AssetService(db).create_asset(request))


@router.get("", response_model=list[AssetResponse])
def list_assets(include_disposed: bool = False, db: Session = Depends(get_db)):
    return unwrap(AssetService(db).list_assets(include_disposed))


@router.get("/summary", response_model=AssetSummary)
def asset_summary(db: Session = Depends(get_db)):
    return unwrap(AssetService(db).asset_summary())


@router.post("/depreciation/run", response_model=BatchResult)
def run_depreciation(process_date: date | None = None, db: Session = Depends(get_db)):
    """
    Book one month of depreciation on every active asset.

    Assets are processed independently; the response lists what
    was processed, skipped, and failed.
    """
    return unwrap(AssetService(db).process_all_depreciation(process_date))


@router.get("/{asset_id}", response_model=AssetDetailResponse)
def get_asset(asset_id: int, db: Session = Depends(get_db)):
    return unwrap(AssetService(db).get_asset(asset_id))


@router.get("/{asset_id}/depreciation/preview", response_model=DepreciationCalculation)
def preview_depreciation(
    asset_id: int,
    months: int = Query(default=1, ge=1),
    db: Session = Depends(get_db),
):
    return unwrap(AssetService(db).calculate_depreciation(asset_id, months))


@router.post("/{asset_id}/depreciation", response_model=DepreciationResult, status_code=201)
def record_depreciation(
    asset_id: int, request: DepreciationRequest, db: Session = Depends(get_db)
):
    return unwrap(AssetService(db).record_depreciation(
        asset_id, request.depreciation_date, request.months
    ))


@router.post("/{asset_id}/disposal", response_model=DisposalResult)
def dispose_asset(asset_id: int, request: DisposalRequest, db: Session = Depends(get_db)):
    return unwrap(AssetService(db).dispose_asset(asset_id, request))


@router.post("/{asset_id}/maintenance", response_model=MaintenanceResponse, status_code=201)
def add_maintenance(
    asset_id: int, request: MaintenanceCreate, db: Session = Depends(get_db)
):
    return unwrap(AssetService(db).add_maintenance_log(asset_id, request))
