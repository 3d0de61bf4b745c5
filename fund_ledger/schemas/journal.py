"""
Schemas for posting, voiding, and reading journal entries.

Amount rules (non-negative, balanced, at least two lines) are
enforced by the posting service so a bad request comes back as
a failed Result with a readable message rather than a schema
error.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from fund_ledger.models.enums import PaymentType


# --- Request Schemas ---

class LineInput(BaseModel):
    """One debit-or-credit posting within an entry."""
    account_id: int
    fund_id: int
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    memo: str | None = None


class EntryHeader(BaseModel):
    entry_date: date
    description: str = ""
    reference_number: str | None = None
    donor_id: int | None = None
    is_in_kind: bool = False


class PostEntryRequest(EntryHeader):
    lines: list[LineInput] = Field(default_factory=list)


class VoidEntryRequest(BaseModel):
    reason: str = Field(min_length=1)


class GivingInput(BaseModel):
    """A gift deposited to checking: Dr checking, Cr income."""
    entry_date: date
    fund_id: int
    income_account_id: int
    checking_account_id: int
    amount: Decimal
    description: str | None = None
    reference_number: str | None = None
    donor_id: int | None = None


class ExpenseInput(BaseModel):
    """An expense paid from checking (cash) or put on credit."""
    entry_date: date
    fund_id: int
    expense_account_id: int
    amount: Decimal
    description: str
    payment_type: PaymentType = PaymentType.CASH
    checking_account_id: int | None = None
    liability_account_id: int | None = None
    reference_number: str | None = None


class AccountTransferInput(BaseModel):
    entry_date: date
    fund_id: int
    source_account_id: int
    destination_account_id: int
    amount: Decimal
    description: str | None = None
    reference_number: str | None = None


class FundTransferInput(BaseModel):
    entry_date: date
    checking_account_id: int
    source_fund_id: int
    destination_fund_id: int
    amount: Decimal
    description: str | None = None
    reference_number: str | None = None


class OpeningBalanceInput(BaseModel):
    """Starting balance for an asset: Dr asset, Cr equity."""
    entry_date: date
    fund_id: int
    asset_account_id: int
    equity_account_id: int
    amount: Decimal
    description: str = "Opening balance"
    reference_number: str | None = None


class InKindDonationInput(BaseModel):
    """
    Goods or services given instead of cash.

    The receiving account is usually an Expense (donated services)
    or an Asset (donated equipment).
    """
    entry_date: date
    fund_id: int
    donor_id: int
    income_account_id: int
    receiving_account_id: int
    amount: Decimal
    description: str
    reference_number: str | None = None


class DonationSplit(BaseModel):
    fund_id: int
    income_account_id: int
    amount: Decimal


class BatchOnlineDonationInput(BaseModel):
    """
    A payout from an online giving processor.

    The bank receives net_deposit; the processor kept
    processing_fees; the donations add up to the gross.
    """
    entry_date: date
    checking_account_id: int
    fees_account_id: int | None = None
    net_deposit: Decimal
    processing_fees: Decimal = Decimal("0")
    donations: list[DonationSplit] = Field(default_factory=list)
    description: str | None = None
    reference_number: str | None = None


class DesignatedItem(BaseModel):
    fund_id: int
    account_id: int
    amount: Decimal
    description: str


class WeeklyDepositInput(BaseModel):
    """A Sunday deposit split between general, missions, and designated gifts."""
    entry_date: date
    description: str
    checking_account_id: int
    general_fund_id: int
    general_income_account_id: int
    general_fund_amount: Decimal = Decimal("0")
    missions_fund_id: int | None = None
    missions_amount: Decimal = Decimal("0")
    designated_items: list[DesignatedItem] = Field(default_factory=list)


class DuplicateCheckRequest(BaseModel):
    entry_date: date
    amount: Decimal
    description: str


# --- Response Schemas ---

class LedgerLineResponse(BaseModel):
    id: int
    account_id: int
    fund_id: int
    debit: Decimal
    credit: Decimal
    memo: str | None
    is_cleared: bool

    model_config = {"from_attributes": True}


class JournalEntryResponse(BaseModel):
    id: int
    entry_date: date
    description: str
    reference_number: str | None
    donor_id: int | None
    is_in_kind: bool
    is_voided: bool
    voided_at: datetime | None
    voided_reason: str | None
    created_at: datetime
    lines: list[LedgerLineResponse]

    model_config = {"from_attributes": True}


class TransactionSummary(BaseModel):
    """One row of the transaction history listing."""
    id: int
    entry_date: date
    description: str
    reference_number: str | None
    is_voided: bool
    total_amount: Decimal
    line_count: int


class TransactionPage(BaseModel):
    transactions: list[TransactionSummary]
    total_count: int
