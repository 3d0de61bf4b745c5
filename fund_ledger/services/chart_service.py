"""
Chart service: accounts, funds, and donors.

Reference data the ledger posts against. Accounts and funds
that have been used in transactions are never deleted, only
deactivated, so history stays intact.
"""

import logging

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from fund_ledger.errors import ValidationError, StateConflictError
from fund_ledger.models.account import Account
from fund_ledger.models.donor import Donor
from fund_ledger.models.enums import AccountType
from fund_ledger.models.fund import Fund
from fund_ledger.models.journal import JournalEntry, LedgerLine
from fund_ledger.schemas.chart import (
    AccountCreate,
    AccountUpdate,
    FundCreate,
    FundUpdate,
    DonorCreate,
    DonorUpdate,
)
from fund_ledger.services.boundary import ledger_operation
from fund_ledger.services.lookups import get_or_raise

logger = logging.getLogger(__name__)


class ChartService:

    def __init__(self, db: Session):
        self.db = db

    # --- Accounts ---

    def _check_account_number(self, number: int, exclude_id: int | None = None) -> None:
        query = select(Account.id).where(Account.account_number == number)
        if exclude_id is not None:
            query = query.where(Account.id != exclude_id)
        if self.db.execute(query).first():
            raise ValidationError(f"Account number {number} already exists")

    @ledger_operation
    def create_account(self, request: AccountCreate) -> Account:
        name = request.name.strip()
        if not name:
            raise ValidationError("Account name is required")
        self._check_account_number(request.account_number)

        account = Account(
            account_number=request.account_number,
            name=name,
            account_type=request.account_type,
            description=request.description,
            is_active=request.is_active,
        )
        self.db.add(account)
        self.db.flush()
        logger.info("Created account %s %s", account.account_number, account.name)
        return account

    @ledger_operation
    def update_account(self, account_id: int, request: AccountUpdate) -> Account:
        """Rename or renumber an account. The type is fixed."""
        account = get_or_raise(self.db, Account, account_id, "Account")
        if request.account_number is not None:
            self._check_account_number(request.account_number, exclude_id=account.id)
            account.account_number = request.account_number
        if request.name is not None:
            if not request.name.strip():
                raise ValidationError("Account name is required")
            account.name = request.name.strip()
        if request.description is not None:
            account.description = request.description
        self.db.flush()
        return account

    @ledger_operation
    def set_account_active(self, account_id: int, is_active: bool) -> Account:
        account = get_or_raise(self.db, Account, account_id, "Account")
        account.is_active = is_active
        self.db.flush()
        return account

    @ledger_operation
    def map_expense_to_liability(
        self, expense_account_id: int, liability_account_id: int | None
    ) -> Account:
        """Set the payable new bills for this expense credit when none is given."""
        account = get_or_raise(self.db, Account, expense_account_id, "Account")
        if account.account_type != AccountType.EXPENSE:
            raise ValidationError("Only Expense accounts have a default liability account")
        if liability_account_id is not None:
            liability = get_or_raise(self.db, Account, liability_account_id, "Account")
            if liability.account_type != AccountType.LIABILITY:
                raise ValidationError("Default liability account must be a Liability account")
        account.default_liability_account_id = liability_account_id
        self.db.flush()
        return account

    @ledger_operation
    def delete_account(self, account_id: int) -> int:
        account = get_or_raise(self.db, Account, account_id, "Account")
        used = self.db.scalar(
            select(func.count(LedgerLine.id)).where(LedgerLine.account_id == account_id)
        )
        if used:
            raise StateConflictError(
                "Cannot delete account that has been used in transactions. "
                "Consider marking it as inactive instead."
            )
        mapped = self.db.scalar(
            select(func.count(Account.id))
            .where(Account.default_liability_account_id == account_id)
        )
        if mapped:
            raise StateConflictError(
                "Cannot delete account that is the default liability for an expense account."
            )
        self.db.delete(account)
        self.db.flush()
        return account_id

    @ledger_operation(commit=False)
    def list_accounts(
        self,
        account_type: AccountType | None = None,
        include_inactive: bool = False,
    ) -> list[Account]:
        query = select(Account).order_by(Account.account_number)
        if account_type is not None:
            query = query.where(Account.account_type == account_type)
        if not include_inactive:
            query = query.where(Account.is_active.is_(True))
        return list(self.db.execute(query).scalars())

    @ledger_operation(commit=False)
    def get_account(self, account_id: int) -> Account:
        return get_or_raise(self.db, Account, account_id, "Account")

    # --- Funds ---

    def _check_fund_name(self, name: str, exclude_id: int | None = None) -> None:
        query = select(Fund.id).where(func.lower(Fund.name) == name.lower())
        if exclude_id is not None:
            query = query.where(Fund.id != exclude_id)
        if self.db.execute(query).first():
            raise ValidationError(f'Fund "{name}" already exists')

    def _check_equity_account(self, account_id: int | None) -> None:
        if account_id is None:
            return
        account = get_or_raise(self.db, Account, account_id, "Account")
        if account.account_type != AccountType.EQUITY:
            raise ValidationError("Net asset account must be an Equity account")

    @ledger_operation
    def create_fund(self, request: FundCreate) -> Fund:
        name = request.name.strip()
        if not name:
            raise ValidationError("Fund name is required")
        self._check_fund_name(name)
        self._check_equity_account(request.net_asset_account_id)

        fund = Fund(
            name=name,
            description=request.description,
            is_restricted=request.is_restricted,
            net_asset_account_id=request.net_asset_account_id,
        )
        self.db.add(fund)
        self.db.flush()
        logger.info("Created fund %s", fund.name)
        return fund

    @ledger_operation
    def update_fund(self, fund_id: int, request: FundUpdate) -> Fund:
        fund = get_or_raise(self.db, Fund, fund_id, "Fund")
        if request.name is not None:
            name = request.name.strip()
            if not name:
                raise ValidationError("Fund name is required")
            self._check_fund_name(name, exclude_id=fund.id)
            fund.name = name
        if request.description is not None:
            fund.description = request.description
        if request.is_restricted is not None:
            fund.is_restricted = request.is_restricted
        if request.is_active is not None:
            fund.is_active = request.is_active
        self.db.flush()
        return fund

    @ledger_operation
    def map_fund_to_equity(self, fund_id: int, net_asset_account_id: int | None) -> Fund:
        """Choose which Equity account presents this fund on the balance sheet."""
        fund = get_or_raise(self.db, Fund, fund_id, "Fund")
        self._check_equity_account(net_asset_account_id)
        fund.net_asset_account_id = net_asset_account_id
        self.db.flush()
        return fund

    @ledger_operation
    def delete_fund(self, fund_id: int) -> int:
        fund = get_or_raise(self.db, Fund, fund_id, "Fund")
        used = self.db.scalar(
            select(func.count(LedgerLine.id)).where(LedgerLine.fund_id == fund_id)
        )
        if used:
            raise StateConflictError("Cannot delete fund that has been used in transactions.")
        self.db.delete(fund)
        self.db.flush()
        return fund_id

    @ledger_operation(commit=False)
    def list_funds(self, include_inactive: bool = False) -> list[Fund]:
        query = select(Fund).order_by(Fund.is_restricted, Fund.name)
        if not include_inactive:
            query = query.where(Fund.is_active.is_(True))
        return list(self.db.execute(query).scalars())

    # --- Donors ---

    def _check_envelope(self, number: int | None, exclude_id: int | None = None) -> None:
        if number is None:
            return
        query = select(Donor).where(Donor.envelope_number == number)
        if exclude_id is not None:
            query = query.where(Donor.id != exclude_id)
        existing = self.db.execute(query).scalars().first()
        if existing:
            raise ValidationError(
                f"Envelope #{number} is already assigned to {existing.name}"
            )

    @ledger_operation
    def create_donor(self, request: DonorCreate) -> Donor:
        name = (request.name or "").strip()
        if not name:
            raise ValidationError("Donor name is required")
        self._check_envelope(request.envelope_number)

        donor = Donor(
            name=name,
            email=request.email or None,
            phone=request.phone or None,
            address=request.address or None,
            envelope_number=request.envelope_number,
            notes=request.notes or None,
        )
        self.db.add(donor)
        self.db.flush()
        return donor

    @ledger_operation
    def update_donor(self, donor_id: int, request: DonorUpdate) -> Donor:
        donor = get_or_raise(self.db, Donor, donor_id, "Donor")
        changes = request.model_dump(exclude_unset=True)
        if "name" in changes:
            if not (changes["name"] or "").strip():
                raise ValidationError("Donor name is required")
            changes["name"] = changes["name"].strip()
        if "envelope_number" in changes:
            self._check_envelope(changes["envelope_number"], exclude_id=donor.id)
        for field, value in changes.items():
            setattr(donor, field, value)
        self.db.flush()
        return donor

    @ledger_operation
    def delete_donor(self, donor_id: int) -> int:
        donor = get_or_raise(self.db, Donor, donor_id, "Donor")
        used = self.db.scalar(
            select(func.count(JournalEntry.id)).where(JournalEntry.donor_id == donor_id)
        )
        if used:
            raise StateConflictError("Cannot delete donor with existing transactions.")
        self.db.delete(donor)
        self.db.flush()
        return donor_id

    @ledger_operation(commit=False)
    def list_donors(self) -> list[Donor]:
        return list(self.db.execute(select(Donor).order_by(Donor.name)).scalars())
