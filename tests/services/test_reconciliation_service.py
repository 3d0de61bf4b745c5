"""
Tests for the ReconciliationService.

A reconciliation completes only when the selected lines match
the bank statement within one cent; otherwise nothing changes.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from fund_ledger.errors import ErrorKind
from fund_ledger.models import LedgerLine, Reconciliation
from fund_ledger.models.enums import ReconciliationStatus
from fund_ledger.schemas.journal import PostEntryRequest, LineInput
from fund_ledger.schemas.reconciliation import ReconciliationStart
from fund_ledger.services.posting_service import PostingService
from fund_ledger.services.reconciliation_service import ReconciliationService


def post(db_session, chart, amount, account=None, on=date(2024, 5, 5), deposit=True):
    """Helper: post a deposit to (or payment from) checking; return the checking line id."""
    account = account or chart.checking
    amount = Decimal(amount)
    bank = LineInput(account_id=account.id, fund_id=chart.general.id)
    other = LineInput(account_id=chart.tithes.id if deposit else chart.utilities.id,
                      fund_id=chart.general.id)
    if deposit:
        bank.debit, other.credit = amount, amount
    else:
        bank.credit, other.debit = amount, amount
    entry = PostingService(db_session).post_entry(PostEntryRequest(
        entry_date=on, description="Activity", lines=[bank, other],
    )).data
    return entry.lines[0].id


def start(db_session, chart, balance="1000.00"):
    return ReconciliationService(db_session).start_reconciliation(ReconciliationStart(
        account_id=chart.checking.id,
        statement_date=date(2024, 5, 31),
        statement_balance=Decimal(balance),
    ))


class TestStartReconciliation:

    def test_start(self, db_session, chart):
        recon = start(db_session, chart).data

        assert recon.status == ReconciliationStatus.IN_PROGRESS
        assert recon.statement_balance == Decimal("1000.00")

    def test_only_one_in_progress_per_account(self, db_session, chart):
        start(db_session, chart)

        result = start(db_session, chart)

        assert result.error == (
            "There is already an in-progress reconciliation for this account. "
            "Please complete or delete it first."
        )
        assert result.error_kind == ErrorKind.STATE_CONFLICT

    def test_database_enforces_one_in_progress(self, db_session, chart):
        start(db_session, chart)
        db_session.add(Reconciliation(
            account_id=chart.checking.id,
            statement_date=date(2024, 6, 30),
            statement_balance=Decimal("1.00"),
            status=ReconciliationStatus.IN_PROGRESS,
        ))
        with pytest.raises(IntegrityError):
            db_session.flush()


class TestFinalizeReconciliation:

    def test_mismatch_rejected_without_changes(self, db_session, chart):
        service = ReconciliationService(db_session)
        first = post(db_session, chart, "600.00")
        second = post(db_session, chart, "399.50")
        recon = start(db_session, chart).data

        result = service.finalize_reconciliation(recon.id, [first, second])

        assert result.error == (
            "Balances do not match. Bank statement: $1000.00, "
            "Your cleared balance: $999.50. Difference: $0.50"
        )
        assert result.error_kind == ErrorKind.CONSISTENCY
        db_session.refresh(recon)
        assert recon.status == ReconciliationStatus.IN_PROGRESS
        assert db_session.get(LedgerLine, first).is_cleared is False

    def test_exact_match_completes(self, db_session, chart):
        service = ReconciliationService(db_session)
        first = post(db_session, chart, "600.00")
        second = post(db_session, chart, "400.00")
        outstanding = post(db_session, chart, "25.00")
        recon = start(db_session, chart).data

        done = service.finalize_reconciliation(recon.id, [first, second]).data

        assert done.status == ReconciliationStatus.COMPLETED
        assert done.reconciled_balance == Decimal("1000.00")
        assert done.completed_at is not None
        assert sorted(done.cleared_line_ids) == sorted([first, second])
        uncleared = service.get_uncleared_transactions(chart.checking.id).data
        assert [row.ledger_line_id for row in uncleared] == [outstanding]

    def test_payments_reduce_cleared_balance(self, db_session, chart):
        service = ReconciliationService(db_session)
        deposit = post(db_session, chart, "1200.00")
        check = post(db_session, chart, "200.00", deposit=False)
        recon = start(db_session, chart).data

        assert service.finalize_reconciliation(recon.id, [deposit, check]).success

    def test_nothing_selected(self, db_session, chart):
        recon = start(db_session, chart).data
        result = ReconciliationService(db_session).finalize_reconciliation(recon.id, [])
        assert result.error == "No transactions selected to clear"

    def test_lines_from_other_accounts_rejected(self, db_session, chart):
        savings_line = post(db_session, chart, "1000.00", account=chart.savings)
        recon = start(db_session, chart).data

        result = ReconciliationService(db_session).finalize_reconciliation(
            recon.id, [savings_line]
        )

        assert result.error == (
            "Selected transactions must belong to the account being reconciled"
        )

    def test_voided_lines_cannot_be_cleared(self, db_session, chart):
        line_id = post(db_session, chart, "1000.00")
        entry_id = db_session.get(LedgerLine, line_id).journal_entry_id
        PostingService(db_session).void_entry(entry_id, "Bounced")
        recon = start(db_session, chart).data

        result = ReconciliationService(db_session).finalize_reconciliation(recon.id, [line_id])

        assert result.error == "Voided transactions cannot be cleared"

    def test_completed_cannot_be_finalized_or_deleted(self, db_session, chart):
        service = ReconciliationService(db_session)
        line_id = post(db_session, chart, "1000.00")
        recon = start(db_session, chart).data
        service.finalize_reconciliation(recon.id, [line_id])

        assert service.delete_reconciliation(recon.id).error == (
            "Cannot delete completed reconciliations"
        )
        assert service.finalize_reconciliation(recon.id, [line_id]).error == (
            "Reconciliation is already completed"
        )


class TestReconciliationReads:

    def test_liability_balance_is_credit_minus_debit(self, db_session, chart):
        charge = post(db_session, chart, "75.00", account=chart.credit_card, deposit=False)

        result = ReconciliationService(db_session).calculate_balance_for_transactions(
            chart.credit_card.id, [charge]
        ).data

        assert result.balance == Decimal("75.00")

    def test_delete_in_progress_allows_new_start(self, db_session, chart):
        service = ReconciliationService(db_session)
        recon = start(db_session, chart).data

        assert service.delete_reconciliation(recon.id).success
        assert service.get_current_reconciliation(chart.checking.id).data is None
        assert start(db_session, chart).success

    def test_history_newest_first(self, db_session, chart):
        service = ReconciliationService(db_session)
        line_id = post(db_session, chart, "1000.00")
        first = start(db_session, chart).data
        service.finalize_reconciliation(first.id, [line_id])
        second = service.start_reconciliation(ReconciliationStart(
            account_id=chart.checking.id,
            statement_date=date(2024, 6, 30),
            statement_balance=Decimal("1000.00"),
        )).data

        history = service.reconciliation_history(chart.checking.id).data

        assert [r.id for r in history] == [second.id, first.id]
        assert service.get_current_reconciliation(chart.checking.id).data.id == second.id

    def test_mark_cleared_toggle(self, db_session, chart):
        service = ReconciliationService(db_session)
        line_id = post(db_session, chart, "10.00")

        row = service.mark_cleared(line_id, True).data

        assert row.is_cleared is True
        assert service.get_cleared_balance(chart.checking.id).data.balance == Decimal("10.00")
