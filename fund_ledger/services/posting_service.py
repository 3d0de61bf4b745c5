"""
Posting service: the only writer of journal entries.

This service enforces the fundamental rules:
1. Every entry has at least two lines
2. Debit and credit amounts are never negative
3. Total debits equal total credits (within one cent)
4. Every referenced account, fund, and donor exists, and
   every account is active

Everything is validated before anything is written, so a
rejected entry leaves the store untouched. Header and lines are
written in the same database transaction; if any step fails the
whole entry rolls back.

Other services build on write_entry(), which raises and only
flushes, so a bill and its journal entry (for example) commit
together or not at all.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from fund_ledger.errors import (
    ValidationError,
    ConsistencyError,
    NotFoundError,
    StateConflictError,
)
from fund_ledger.models.account import Account
from fund_ledger.models.bill import Bill, BillPayment
from fund_ledger.models.donor import Donor
from fund_ledger.models.fixed_asset import FixedAsset, DepreciationScheduleEntry
from fund_ledger.models.fund import Fund
from fund_ledger.models.journal import JournalEntry, LedgerLine
from fund_ledger.models.recurring import RecurringHistory
from fund_ledger.models.enums import PaymentType
from fund_ledger.models.base import utcnow
from fund_ledger.money import ZERO, to_money, amounts_match, fmt
from fund_ledger.schemas.journal import (
    EntryHeader,
    LineInput,
    PostEntryRequest,
    GivingInput,
    ExpenseInput,
    AccountTransferInput,
    FundTransferInput,
    OpeningBalanceInput,
    InKindDonationInput,
    BatchOnlineDonationInput,
    WeeklyDepositInput,
    TransactionSummary,
    TransactionPage,
)
from fund_ledger.services.audit import record_event
from fund_ledger.services.boundary import ledger_operation
from fund_ledger.services.lookups import get_or_raise

logger = logging.getLogger(__name__)


def _contains(text: str) -> str:
    """ILIKE pattern matching `text` as a plain substring."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def check_line_amounts(debit, credit) -> tuple[Decimal, Decimal]:
    """Round one line's amounts; neither may be negative and not both zero."""
    debit = to_money(debit)
    credit = to_money(credit)
    if debit < 0 or credit < 0:
        raise ValidationError("Debit and credit amounts cannot be negative")
    if debit == 0 and credit == 0:
        raise ValidationError("Each ledger line must have a debit or credit amount")
    return debit, credit


def _require_positive(amount, message: str = "Amount must be greater than zero") -> Decimal:
    value = to_money(amount)
    if value <= 0:
        raise ValidationError(message)
    return value


class PostingService:
    """
    Journal entry posting, voiding, deletion, and lookups.

    The caller owns the session. Public methods are wrapped by
    @ledger_operation and return a Result; write_entry() is the
    raising primitive for use inside other operations.
    """

    def __init__(self, db: Session):
        self.db = db

    # --- Core primitive ---

    def write_entry(
        self, header: EntryHeader, lines: list[LineInput]
    ) -> JournalEntry:
        """
        Validate and add a balanced journal entry to the session.

        Raises a LedgerError subclass on any rule violation. Does
        not commit.
        """
        description = (header.description or "").strip()
        if not description:
            raise ValidationError("Description is required")

        if len(lines) < 2:
            raise ConsistencyError(
                "At least two ledger lines are required (debit and credit)"
            )

        prepared = []
        for line in lines:
            debit, credit = check_line_amounts(line.debit, line.credit)
            prepared.append((line, debit, credit))

        total_debits = sum((d for _, d, _ in prepared), ZERO)
        total_credits = sum((c for _, _, c in prepared), ZERO)
        if not amounts_match(total_debits, total_credits):
            raise ConsistencyError(
                f"Transaction is not balanced. "
                f"Debits: {fmt(total_debits)}, Credits: {fmt(total_credits)}"
            )

        self._check_references(header, lines)

        entry = JournalEntry(
            entry_date=header.entry_date,
            description=description,
            reference_number=header.reference_number or None,
            donor_id=header.donor_id,
            is_in_kind=header.is_in_kind,
        )
        for line, debit, credit in prepared:
            entry.lines.append(LedgerLine(
                account_id=line.account_id,
                fund_id=line.fund_id,
                debit=debit,
                credit=credit,
                memo=line.memo,
            ))

        self.db.add(entry)
        self.db.flush()
        logger.info(
            "Posted journal entry %s on %s for %s: %s",
            entry.id, entry.entry_date, fmt(total_debits), description,
        )
        return entry

    def _check_references(self, header: EntryHeader, lines: list[LineInput]) -> None:
        account_ids = {line.account_id for line in lines}
        accounts = {
            a.id: a for a in self.db.execute(
                select(Account).where(Account.id.in_(account_ids))
            ).scalars()
        }
        missing = sorted(account_ids - accounts.keys())
        if missing:
            raise NotFoundError(f"Account {missing[0]}")
        for account in accounts.values():
            if not account.is_active:
                raise ValidationError(
                    f"Account {account.account_number} ({account.name}) is inactive"
                )

        fund_ids = {line.fund_id for line in lines}
        found_funds = set(self.db.execute(
            select(Fund.id).where(Fund.id.in_(fund_ids))
        ).scalars())
        missing = sorted(fund_ids - found_funds)
        if missing:
            raise NotFoundError(f"Fund {missing[0]}")

        if header.donor_id is not None and self.db.get(Donor, header.donor_id) is None:
            raise NotFoundError("Donor")

    # --- Generic posting ---

    @ledger_operation
    def post_entry(self, request: PostEntryRequest) -> JournalEntry:
        """Post an arbitrary balanced entry."""
        return self.write_entry(request, request.lines)

    @ledger_operation
    def void_entry(self, entry_id: int, reason: str) -> JournalEntry:
        """
        Void an entry. Its lines stay in place but every balance
        and report skips them from now on.
        """
        entry = get_or_raise(self.db, JournalEntry, entry_id, "Transaction", lock=True)
        if entry.is_voided:
            raise StateConflictError("This transaction is already voided")
        if not reason or not reason.strip():
            raise ValidationError("A reason is required to void a transaction")

        entry.is_voided = True
        entry.voided_at = utcnow()
        entry.voided_reason = reason.strip()
        record_event(
            self.db, "journal_entry.voided",
            journal_entry_id=entry.id, reason=entry.voided_reason,
        )
        self.db.flush()
        logger.info("Voided journal entry %s: %s", entry.id, entry.voided_reason)
        return entry

    @ledger_operation
    def delete_entry(self, entry_id: int) -> int:
        """
        Permanently remove an entry and its lines.

        Entries that back a bill, a bill payment, or a depreciation
        record must be voided instead, since deleting them would
        leave those records pointing at nothing.
        """
        entry = get_or_raise(self.db, JournalEntry, entry_id, "Transaction", lock=True)

        linked = (
            self.db.scalar(select(func.count(Bill.id)).where(
                Bill.journal_entry_id == entry_id))
            + self.db.scalar(select(func.count(BillPayment.id)).where(
                BillPayment.journal_entry_id == entry_id))
            + self.db.scalar(select(func.count(DepreciationScheduleEntry.id)).where(
                DepreciationScheduleEntry.journal_entry_id == entry_id))
            + self.db.scalar(select(func.count(FixedAsset.id)).where(
                FixedAsset.disposal_journal_entry_id == entry_id))
        )
        if linked:
            raise StateConflictError(
                "This transaction is linked to a bill, payment, or asset record "
                "and cannot be deleted. Void it instead."
            )

        # Recurring history keeps its row but loses the link
        for run in self.db.execute(
            select(RecurringHistory).where(RecurringHistory.journal_entry_id == entry_id)
        ).scalars():
            run.journal_entry_id = None

        line_count = len(entry.lines)
        record_event(
            self.db, "journal_entry.deleted",
            journal_entry_id=entry.id,
            entry_date=entry.entry_date,
            description=entry.description,
            amount=entry.total_debits,
            line_count=line_count,
        )
        self.db.delete(entry)
        self.db.flush()
        logger.info("Deleted journal entry %s (%d lines)", entry_id, line_count)
        return entry_id

    # --- Recording helpers ---

    @ledger_operation
    def record_giving(self, data: GivingInput) -> JournalEntry:
        """
        Record a gift deposited to checking.

        Accounting:
            DEBIT  Checking (cash increases)
            CREDIT Income
        """
        amount = _require_positive(data.amount)
        return self.write_entry(
            EntryHeader(
                entry_date=data.entry_date,
                description=data.description or "Weekly giving",
                reference_number=data.reference_number,
                donor_id=data.donor_id,
            ),
            [
                LineInput(account_id=data.checking_account_id, fund_id=data.fund_id,
                          debit=amount, memo="Cash received from giving"),
                LineInput(account_id=data.income_account_id, fund_id=data.fund_id,
                          credit=amount, memo="Income from giving"),
            ],
        )

    @ledger_operation
    def record_expense(self, data: ExpenseInput) -> JournalEntry:
        """
        Record an expense, paid now from checking or owed on credit.

        Accounting:
            DEBIT  Expense
            CREDIT Checking (cash) or a liability account (credit)
        """
        amount = _require_positive(data.amount)
        if data.payment_type == PaymentType.CASH:
            if not data.checking_account_id:
                raise ValidationError("Checking account is required for cash payments")
            credit_account_id = data.checking_account_id
            credit_memo = "Payment made"
        else:
            if not data.liability_account_id:
                raise ValidationError("Liability account is required for credit payments")
            credit_account_id = data.liability_account_id
            credit_memo = "Accounts Payable"

        return self.write_entry(
            EntryHeader(
                entry_date=data.entry_date,
                description=data.description,
                reference_number=data.reference_number,
            ),
            [
                LineInput(account_id=data.expense_account_id, fund_id=data.fund_id,
                          debit=amount, memo=data.description),
                LineInput(account_id=credit_account_id, fund_id=data.fund_id,
                          credit=amount, memo=credit_memo),
            ],
        )

    @ledger_operation
    def transfer_between_accounts(self, data: AccountTransferInput) -> JournalEntry:
        """Move money between two accounts within one fund."""
        amount = _require_positive(data.amount)
        if data.source_account_id == data.destination_account_id:
            raise ValidationError("Source and destination accounts must be different")

        return self.write_entry(
            EntryHeader(
                entry_date=data.entry_date,
                description=data.description or "Account transfer",
                reference_number=data.reference_number,
            ),
            [
                LineInput(account_id=data.source_account_id, fund_id=data.fund_id,
                          credit=amount, memo="Transfer out"),
                LineInput(account_id=data.destination_account_id, fund_id=data.fund_id,
                          debit=amount, memo="Transfer in"),
            ],
        )

    @ledger_operation
    def transfer_between_funds(self, data: FundTransferInput) -> JournalEntry:
        """
        Reassign money from one fund to another.

        The cash does not move; the same checking account is
        credited in the source fund and debited in the destination.
        """
        amount = _require_positive(data.amount)
        if data.source_fund_id == data.destination_fund_id:
            raise ValidationError("Source and destination funds must be different")

        return self.write_entry(
            EntryHeader(
                entry_date=data.entry_date,
                description=data.description or "Fund transfer",
                reference_number=data.reference_number,
            ),
            [
                LineInput(account_id=data.checking_account_id, fund_id=data.source_fund_id,
                          credit=amount, memo="Transfer out"),
                LineInput(account_id=data.checking_account_id,
                          fund_id=data.destination_fund_id,
                          debit=amount, memo="Transfer in"),
            ],
        )

    @ledger_operation
    def record_opening_balance(self, data: OpeningBalanceInput) -> JournalEntry:
        """Dr asset, Cr equity: the starting position of an account."""
        amount = _require_positive(data.amount)
        return self.write_entry(
            EntryHeader(
                entry_date=data.entry_date,
                description=data.description,
                reference_number=data.reference_number,
            ),
            [
                LineInput(account_id=data.asset_account_id, fund_id=data.fund_id,
                          debit=amount, memo="Opening balance"),
                LineInput(account_id=data.equity_account_id, fund_id=data.fund_id,
                          credit=amount, memo="Opening balance equity"),
            ],
        )

    @ledger_operation
    def record_in_kind_donation(self, data: InKindDonationInput) -> JournalEntry:
        """Record a non-cash gift; flagged so donor statements can separate it."""
        amount = _require_positive(data.amount)
        return self.write_entry(
            EntryHeader(
                entry_date=data.entry_date,
                description=data.description,
                reference_number=data.reference_number,
                donor_id=data.donor_id,
                is_in_kind=True,
            ),
            [
                LineInput(account_id=data.receiving_account_id, fund_id=data.fund_id,
                          debit=amount, memo="In-kind donation received"),
                LineInput(account_id=data.income_account_id, fund_id=data.fund_id,
                          credit=amount, memo="In-kind contribution"),
            ],
        )

    @ledger_operation
    def record_batch_online_donation(self, data: BatchOnlineDonationInput) -> JournalEntry:
        """
        Record a processor payout covering several online gifts.

        Accounting:
            DEBIT  Checking            net deposit
            DEBIT  Processing fees     fees (when any)
            CREDIT Income, per gift    gift amount
        """
        net_deposit = _require_positive(
            data.net_deposit, "Net deposit must be greater than zero"
        )
        fees = to_money(data.processing_fees)
        if fees < 0:
            raise ValidationError("Processing fees cannot be negative")
        if not data.donations:
            raise ValidationError("At least one donation is required")
        if fees > 0 and not data.fees_account_id:
            raise ValidationError("Fees account is required when processing fees are entered")

        gross = net_deposit + fees
        donations_total = sum((to_money(d.amount) for d in data.donations), ZERO)
        if not amounts_match(gross, donations_total):
            raise ValidationError(
                f"Donations total (${fmt(donations_total)}) must equal "
                f"gross amount (${fmt(gross)})"
            )

        # Cash and fees are carried in the first gift's fund
        primary_fund_id = data.donations[0].fund_id
        lines = [
            LineInput(account_id=data.checking_account_id, fund_id=primary_fund_id,
                      debit=net_deposit, memo="Online donation deposit (net)"),
        ]
        if fees > 0:
            lines.append(LineInput(
                account_id=data.fees_account_id, fund_id=primary_fund_id,
                debit=fees, memo="Online donation processing fees",
            ))
        for donation in data.donations:
            lines.append(LineInput(
                account_id=donation.income_account_id, fund_id=donation.fund_id,
                credit=donation.amount, memo="Online donation",
            ))

        return self.write_entry(
            EntryHeader(
                entry_date=data.entry_date,
                description=data.description or "Online donation batch",
                reference_number=data.reference_number,
            ),
            lines,
        )

    @ledger_operation
    def record_weekly_deposit(self, data: WeeklyDepositInput) -> JournalEntry:
        """
        Record one bank deposit split across funds.

        Each portion gets its own checking debit in its fund so
        fund balances stay correct.
        """
        general = to_money(data.general_fund_amount)
        missions = to_money(data.missions_amount)
        total = general + missions + sum(
            (to_money(item.amount) for item in data.designated_items), ZERO
        )
        if total <= 0:
            raise ValidationError("Total deposit must be greater than zero")
        if general < 0:
            raise ValidationError("General fund amount cannot be negative")
        if missions > 0 and not data.missions_fund_id:
            raise ValidationError(
                "Missions fund must be selected when missions amount is provided"
            )

        lines = []
        if general > 0:
            lines += [
                LineInput(account_id=data.checking_account_id, fund_id=data.general_fund_id,
                          debit=general, memo="Cash received - General Fund"),
                LineInput(account_id=data.general_income_account_id,
                          fund_id=data.general_fund_id,
                          credit=general, memo="Tithes & Offerings - General"),
            ]
        if missions > 0:
            lines += [
                LineInput(account_id=data.checking_account_id, fund_id=data.missions_fund_id,
                          debit=missions, memo="Cash received - Missions"),
                LineInput(account_id=data.general_income_account_id,
                          fund_id=data.missions_fund_id,
                          credit=missions, memo="Missions Giving"),
            ]
        for item in data.designated_items:
            if to_money(item.amount) <= 0:
                continue
            lines += [
                LineInput(account_id=data.checking_account_id, fund_id=item.fund_id,
                          debit=item.amount, memo=f"Cash received - {item.description}"),
                LineInput(account_id=item.account_id, fund_id=item.fund_id,
                          credit=item.amount, memo=item.description),
            ]

        return self.write_entry(
            EntryHeader(entry_date=data.entry_date, description=data.description),
            lines,
        )

    # --- Reads ---

    @ledger_operation(commit=False)
    def check_duplicate(self, entry_date: date, amount, description: str) -> bool:
        """
        Heuristic used by statement importers.

        True when an entry on the same date has a description
        containing `description` (case-insensitive) and any line
        whose debit or credit equals `amount` exactly.
        """
        amount = to_money(amount)
        match = self.db.execute(
            select(JournalEntry.id)
            .join(LedgerLine, LedgerLine.journal_entry_id == JournalEntry.id)
            .where(
                JournalEntry.entry_date == entry_date,
                JournalEntry.description.ilike(_contains(description), escape="\\"),
                or_(LedgerLine.debit == amount, LedgerLine.credit == amount),
            )
            .limit(1)
        ).scalar_one_or_none()
        return match is not None

    @ledger_operation(commit=False)
    def get_entry(self, entry_id: int) -> JournalEntry:
        return get_or_raise(self.db, JournalEntry, entry_id, "Transaction")

    @ledger_operation(commit=False)
    def list_entries(
        self, search: str | None = None, limit: int = 100, offset: int = 0
    ) -> TransactionPage:
        """Transaction history, newest first, optionally filtered."""
        filters = []
        if search:
            pattern = _contains(search)
            filters.append(or_(
                JournalEntry.description.ilike(pattern, escape="\\"),
                JournalEntry.reference_number.ilike(pattern, escape="\\"),
            ))

        total_count = self.db.scalar(
            select(func.count(JournalEntry.id)).where(*filters)
        )
        rows = self.db.execute(
            select(
                JournalEntry,
                func.coalesce(func.sum(LedgerLine.debit), 0),
                func.count(LedgerLine.id),
            )
            .outerjoin(LedgerLine, LedgerLine.journal_entry_id == JournalEntry.id)
            .where(*filters)
            .group_by(JournalEntry.id)
            .order_by(JournalEntry.entry_date.desc(), JournalEntry.id.desc())
            .limit(limit)
            .offset(offset)
        ).all()

        return TransactionPage(
            transactions=[
                TransactionSummary(
                    id=entry.id,
                    entry_date=entry.entry_date,
                    description=entry.description,
                    reference_number=entry.reference_number,
                    is_voided=entry.is_voided,
                    total_amount=to_money(total),
                    line_count=count,
                )
                for entry, total, count in rows
            ],
            total_count=total_count,
        )
