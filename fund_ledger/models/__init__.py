"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from fund_ledger.models.base import Base
from fund_ledger.models.enums import (
    AccountType,
    BillStatus,
    AssetStatus,
    DepreciationMethod,
    Frequency,
    RunStatus,
    ReconciliationStatus,
    PaymentType,
)
from fund_ledger.models.audit_log import AuditLog
from fund_ledger.models.account import Account
from fund_ledger.models.fund import Fund
from fund_ledger.models.donor import Donor
from fund_ledger.models.journal import JournalEntry, LedgerLine
from fund_ledger.models.vendor import Vendor
from fund_ledger.models.bill import Bill, BillPayment
from fund_ledger.models.fixed_asset import (
    FixedAsset,
    DepreciationScheduleEntry,
    AssetMaintenanceLog,
)
from fund_ledger.models.recurring import (
    RecurringTemplate,
    RecurringTemplateLine,
    RecurringHistory,
)
from fund_ledger.models.reconciliation import Reconciliation
from fund_ledger.models.budget import Budget

__all__ = [
    "Base",
    "AccountType",
    "BillStatus",
    "AssetStatus",
    "DepreciationMethod",
    "Frequency",
    "RunStatus",
    "ReconciliationStatus",
    "PaymentType",
    "AuditLog",
    "Account",
    "Fund",
    "Donor",
    "JournalEntry",
    "LedgerLine",
    "Vendor",
    "Bill",
    "BillPayment",
    "FixedAsset",
    "DepreciationScheduleEntry",
    "AssetMaintenanceLog",
    "RecurringTemplate",
    "RecurringTemplateLine",
    "RecurringHistory",
    "Reconciliation",
    "Budget",
]
