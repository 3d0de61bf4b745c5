"""
Schemas for the chart of accounts, funds, and donors.

Required-field and uniqueness rules live in ChartService so that
they come back as failed Results with the ledger's own wording.
"""

from datetime import datetime

from pydantic import BaseModel

from fund_ledger.models.enums import AccountType


# --- Accounts ---

class AccountCreate(BaseModel):
    account_number: int
    name: str
    account_type: AccountType
    description: str | None = None
    is_active: bool = True


class AccountUpdate(BaseModel):
    """Partial update; only fields that are set are applied."""
    account_number: int | None = None
    name: str | None = None
    description: str | None = None


class ExpenseLiabilityMapping(BaseModel):
    liability_account_id: int | None = None


class AccountResponse(BaseModel):
    id: int
    account_number: int
    name: str
    account_type: AccountType
    description: str | None
    is_active: bool
    default_liability_account_id: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


# --- Funds ---

class FundCreate(BaseModel):
    name: str
    description: str | None = None
    is_restricted: bool = False
    net_asset_account_id: int | None = None


class FundUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    is_restricted: bool | None = None
    is_active: bool | None = None


class FundEquityMapping(BaseModel):
    net_asset_account_id: int | None = None


class FundResponse(BaseModel):
    id: int
    name: str
    description: str | None
    is_restricted: bool
    is_active: bool
    net_asset_account_id: int | None

    model_config = {"from_attributes": True}


# --- Donors ---

class DonorCreate(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    envelope_number: int | None = None
    notes: str | None = None


class DonorUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    envelope_number: int | None = None
    notes: str | None = None


class DonorResponse(BaseModel):
    id: int
    name: str
    email: str | None
    phone: str | None
    address: str | None
    envelope_number: int | None
    notes: str | None

    model_config = {"from_attributes": True}
