"""
Bank reconciliation.

The user picks the ledger lines that appear on a bank statement.
Their balance must match the statement balance within one cent;
only then are the lines marked cleared and the reconciliation
completed. A mismatch changes nothing.

Balance sign follows the account: Liability accounts (a credit
card, say) count credit - debit, everything else debit - credit.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from fund_ledger.errors import (
    ValidationError,
    ConsistencyError,
    StateConflictError,
)
from fund_ledger.models.account import Account
from fund_ledger.models.base import utcnow
from fund_ledger.models.enums import AccountType, ReconciliationStatus
from fund_ledger.models.journal import JournalEntry, LedgerLine
from fund_ledger.models.reconciliation import Reconciliation
from fund_ledger.money import ZERO, to_money, amounts_match, fmt
from fund_ledger.schemas.reconciliation import (
    ReconciliationStart,
    ReconciliationLine,
    ReconciliationBalance,
)
from fund_ledger.services.audit import record_event
from fund_ledger.services.boundary import ledger_operation
from fund_ledger.services.lookups import get_or_raise

logger = logging.getLogger(__name__)

IN_PROGRESS_EXISTS = (
    "There is already an in-progress reconciliation for this account. "
    "Please complete or delete it first."
)


def _signed_total(account: Account, lines) -> Decimal:
    if account.account_type == AccountType.LIABILITY:
        total = sum((l.credit - l.debit for l in lines), ZERO)
    else:
        total = sum((l.debit - l.credit for l in lines), ZERO)
    return to_money(total)


def _as_row(line: LedgerLine) -> ReconciliationLine:
    entry = line.journal_entry
    return ReconciliationLine(
        ledger_line_id=line.id,
        journal_entry_id=entry.id,
        entry_date=entry.entry_date,
        description=entry.description,
        reference_number=entry.reference_number,
        fund_name=line.fund.name,
        debit=line.debit,
        credit=line.credit,
        memo=line.memo,
        is_cleared=line.is_cleared,
        cleared_at=line.cleared_at,
    )


class ReconciliationService:

    def __init__(self, db: Session):
        self.db = db

    def _account_lines(self, account_id: int, cleared: bool):
        return (
            select(LedgerLine)
            .join(LedgerLine.journal_entry)
            .options(
                joinedload(LedgerLine.journal_entry),
                joinedload(LedgerLine.fund),
            )
            .where(LedgerLine.account_id == account_id)
            .where(LedgerLine.is_cleared.is_(cleared))
            .where(JournalEntry.is_voided.is_(False))
        )

    # --- Transaction lists ---

    @ledger_operation(commit=False)
    def get_uncleared_transactions(self, account_id: int) -> list[ReconciliationLine]:
        get_or_raise(self.db, Account, account_id, "Account")
        query = self._account_lines(account_id, cleared=False).order_by(
            JournalEntry.entry_date, LedgerLine.id
        )
        return [_as_row(line) for line in self.db.execute(query).scalars()]

    @ledger_operation(commit=False)
    def get_cleared_transactions(self, account_id: int, limit: int = 50) -> list[ReconciliationLine]:
        get_or_raise(self.db, Account, account_id, "Account")
        query = (
            self._account_lines(account_id, cleared=True)
            .order_by(JournalEntry.entry_date.desc(), LedgerLine.id.desc())
            .limit(limit)
        )
        return [_as_row(line) for line in self.db.execute(query).scalars()]

    @ledger_operation
    def mark_cleared(self, ledger_line_id: int, is_cleared: bool) -> ReconciliationLine:
        """Toggle a single line outside of a reconciliation."""
        line = get_or_raise(self.db, LedgerLine, ledger_line_id, "Ledger line", lock=True)
        if line.reconciliation_id is not None:
            raise StateConflictError(
                "Transaction belongs to a completed reconciliation"
            )
        line.is_cleared = is_cleared
        line.cleared_at = utcnow() if is_cleared else None
        self.db.flush()
        return _as_row(line)

    # --- Balances ---

    @ledger_operation(commit=False)
    def get_cleared_balance(self, account_id: int) -> ReconciliationBalance:
        account = get_or_raise(self.db, Account, account_id, "Account")
        lines = self.db.execute(self._account_lines(account_id, cleared=True)).scalars()
        return ReconciliationBalance(
            account_id=account_id, balance=_signed_total(account, list(lines))
        )

    def _selected_balance(self, account: Account, line_ids: list[int]) -> Decimal:
        lines = self.db.execute(
            select(LedgerLine)
            .where(LedgerLine.account_id == account.id)
            .where(LedgerLine.id.in_(line_ids))
        ).scalars()
        return _signed_total(account, list(lines))

    @ledger_operation(commit=False)
    def calculate_balance_for_transactions(
        self, account_id: int, ledger_line_ids: list[int]
    ) -> ReconciliationBalance:
        account = get_or_raise(self.db, Account, account_id, "Account")
        return ReconciliationBalance(
            account_id=account_id,
            balance=self._selected_balance(account, ledger_line_ids),
        )

    # --- Lifecycle ---

    @ledger_operation
    def start_reconciliation(self, request: ReconciliationStart) -> Reconciliation:
        get_or_raise(self.db, Account, request.account_id, "Account")
        existing = self.db.execute(
            select(Reconciliation.id)
            .where(Reconciliation.account_id == request.account_id)
            .where(Reconciliation.status == ReconciliationStatus.IN_PROGRESS)
        ).first()
        if existing:
            raise StateConflictError(IN_PROGRESS_EXISTS)

        reconciliation = Reconciliation(
            account_id=request.account_id,
            statement_date=request.statement_date,
            statement_balance=to_money(request.statement_balance),
            status=ReconciliationStatus.IN_PROGRESS,
            notes=request.notes or None,
        )
        self.db.add(reconciliation)
        try:
            self.db.flush()
        except IntegrityError:
            # A concurrent start won the partial unique index
            raise StateConflictError(IN_PROGRESS_EXISTS)
        logger.info(
            "Started reconciliation %s for account %s", reconciliation.id, request.account_id
        )
        return reconciliation

    @ledger_operation
    def finalize_reconciliation(
        self, reconciliation_id: int, ledger_line_ids: list[int]
    ) -> Reconciliation:
        reconciliation = get_or_raise(
            self.db, Reconciliation, reconciliation_id, "Reconciliation", lock=True
        )
        if reconciliation.status != ReconciliationStatus.IN_PROGRESS:
            raise StateConflictError("Reconciliation is already completed")
        ids = sorted(set(ledger_line_ids or []))
        if not ids:
            raise ValidationError("No transactions selected to clear")

        lines = list(self.db.execute(
            select(LedgerLine)
            .where(LedgerLine.id.in_(ids))
            .with_for_update()
        ).scalars())
        if len(lines) != len(ids):
            raise ValidationError("One or more selected transactions were not found")
        for line in lines:
            if line.account_id != reconciliation.account_id:
                raise ValidationError(
                    "Selected transactions must belong to the account being reconciled"
                )
            if line.is_cleared:
                raise StateConflictError("One or more selected transactions are already cleared")
            if line.journal_entry.is_voided:
                raise StateConflictError("Voided transactions cannot be cleared")

        cleared_balance = _signed_total(reconciliation.account, lines)
        statement_balance = reconciliation.statement_balance
        if not amounts_match(cleared_balance, statement_balance):
            difference = abs(cleared_balance - statement_balance)
            raise ConsistencyError(
                f"Balances do not match. Bank statement: ${fmt(statement_balance)}, "
                f"Your cleared balance: ${fmt(cleared_balance)}. "
                f"Difference: ${fmt(difference)}"
            )

        now = utcnow()
        for line in lines:
            line.is_cleared = True
            line.cleared_at = now
            line.reconciliation_id = reconciliation.id
        reconciliation.status = ReconciliationStatus.COMPLETED
        reconciliation.reconciled_balance = cleared_balance
        reconciliation.completed_at = now
        record_event(
            self.db, "reconciliation.completed",
            reconciliation_id=reconciliation.id, lines=len(lines),
            balance=cleared_balance,
        )
        self.db.flush()
        logger.info(
            "Completed reconciliation %s: %d lines, balance %s",
            reconciliation.id, len(lines), fmt(cleared_balance),
        )
        return reconciliation

    @ledger_operation
    def delete_reconciliation(self, reconciliation_id: int) -> int:
        reconciliation = get_or_raise(
            self.db, Reconciliation, reconciliation_id, "Reconciliation", lock=True
        )
        if reconciliation.status == ReconciliationStatus.COMPLETED:
            raise StateConflictError("Cannot delete completed reconciliations")
        self.db.delete(reconciliation)
        self.db.flush()
        return reconciliation_id

    # --- Reads ---

    @ledger_operation(commit=False)
    def get_current_reconciliation(self, account_id: int) -> Reconciliation | None:
        return self.db.execute(
            select(Reconciliation)
            .where(Reconciliation.account_id == account_id)
            .where(Reconciliation.status == ReconciliationStatus.IN_PROGRESS)
        ).scalars().first()

    @ledger_operation(commit=False)
    def reconciliation_history(self, account_id: int, limit: int = 10) -> list[Reconciliation]:
        return list(self.db.execute(
            select(Reconciliation)
            .where(Reconciliation.account_id == account_id)
            .order_by(Reconciliation.statement_date.desc())
            .limit(limit)
        ).scalars())
