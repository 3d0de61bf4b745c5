"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored. The values match the
strings the ledger has always stored, so existing rows
load without translation.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    INCOME = "Income"
    EXPENSE = "Expense"

    @property
    def increases_with_debit(self) -> bool:
        """Asset and Expense are debit-normal; the rest are credit-normal."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class BillStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    CANCELLED = "cancelled"


class AssetStatus(str, enum.Enum):
    ACTIVE = "active"
    FULLY_DEPRECIATED = "fully_depreciated"
    DISPOSED = "disposed"


class DepreciationMethod(str, enum.Enum):
    STRAIGHT_LINE = "straight_line"


class Frequency(str, enum.Enum):
    """How often a recurring template fires."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUALLY = "semiannually"
    YEARLY = "yearly"


class RunStatus(str, enum.Enum):
    """Outcome of one recurring template execution."""
    SUCCESS = "success"
    FAILED = "failed"


class ReconciliationStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class PaymentType(str, enum.Enum):
    """How an expense was paid: from checking, or on credit."""
    CASH = "cash"
    CREDIT = "credit"
