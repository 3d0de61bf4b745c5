"""Schemas for fixed assets, depreciation, and disposal."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from fund_ledger.models.enums import AssetStatus, DepreciationMethod


# --- Request Schemas ---

class AssetCreate(BaseModel):
    asset_name: str
    purchase_date: date
    purchase_price: Decimal
    estimated_life_years: int
    fund_id: int
    asset_account_id: int
    accumulated_depreciation_account_id: int
    depreciation_expense_account_id: int
    depreciation_start_date: date
    salvage_value: Decimal = Decimal("0")
    depreciation_method: DepreciationMethod = DepreciationMethod.STRAIGHT_LINE
    description: str | None = None
    serial_number: str | None = None
    asset_tag: str | None = None
    category: str | None = None
    location: str | None = None
    assigned_to: str | None = None
    notes: str | None = None


class DepreciationRequest(BaseModel):
    depreciation_date: date
    months: int = Field(default=1, ge=1)


class DisposalRequest(BaseModel):
    """
    Dispose of an asset.

    cash_account_id receives the sale proceeds and is required
    when disposal_price is above zero. Gain or loss is posted to
    gain_loss_account_id, or to the asset's own account when none
    is given.
    """
    disposal_date: date
    disposal_price: Decimal = Decimal("0")
    disposal_notes: str | None = None
    cash_account_id: int | None = None
    gain_loss_account_id: int | None = None


class MaintenanceCreate(BaseModel):
    maintenance_date: date
    maintenance_type: str
    description: str
    cost: Decimal = Decimal("0")
    performed_by: str | None = None
    notes: str | None = None


# --- Response Schemas ---

class DepreciationScheduleResponse(BaseModel):
    id: int
    period_start_date: date
    period_end_date: date
    fiscal_year: int
    period_number: int
    beginning_book_value: Decimal
    depreciation_amount: Decimal
    accumulated_depreciation: Decimal
    ending_book_value: Decimal
    journal_entry_id: int
    recorded_date: date

    model_config = {"from_attributes": True}


class MaintenanceResponse(BaseModel):
    id: int
    asset_id: int
    maintenance_date: date
    maintenance_type: str
    description: str
    cost: Decimal
    performed_by: str | None
    notes: str | None

    model_config = {"from_attributes": True}


class AssetResponse(BaseModel):
    id: int
    asset_name: str
    description: str | None
    asset_tag: str | None
    serial_number: str | None
    category: str | None
    location: str | None
    purchase_date: date
    purchase_price: Decimal
    salvage_value: Decimal
    estimated_life_years: int
    depreciation_method: DepreciationMethod
    accumulated_depreciation_amount: Decimal
    book_value: Decimal
    status: AssetStatus
    fund_id: int
    asset_account_id: int
    accumulated_depreciation_account_id: int
    depreciation_expense_account_id: int
    depreciation_start_date: date
    last_depreciation_date: date | None
    disposal_date: date | None
    disposal_price: Decimal | None
    disposal_journal_entry_id: int | None

    model_config = {"from_attributes": True}


class AssetDetailResponse(AssetResponse):
    schedule: list[DepreciationScheduleResponse]
    maintenance_log: list[MaintenanceResponse]


class DepreciationCalculation(BaseModel):
    depreciation: Decimal
    accumulated_depreciation: Decimal
    book_value: Decimal
    is_fully_depreciated: bool


class DepreciationResult(BaseModel):
    asset_id: int
    journal_entry_id: int
    depreciation_amount: Decimal
    accumulated_depreciation: Decimal
    book_value: Decimal
    is_fully_depreciated: bool


class DisposalResult(BaseModel):
    asset_id: int
    journal_entry_id: int
    book_value: Decimal
    disposal_price: Decimal
    gain_loss: Decimal


class AssetSummary(BaseModel):
    total_assets: int
    active_assets: int
    fully_depreciated_assets: int
    disposed_assets: int
    total_purchase_value: Decimal
    total_accumulated_depreciation: Decimal
    total_book_value: Decimal
