"""
Tests for the PostingService.

Posting is the only way money enters the ledger, so these
cover the balancing rules, voids and deletes, and each of the
bookkeeping shortcuts.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import select, func

from fund_ledger.errors import ErrorKind
from fund_ledger.models import Account, JournalEntry, LedgerLine, AuditLog
from fund_ledger.models.enums import AccountType, PaymentType
from fund_ledger.schemas.journal import (
    PostEntryRequest,
    LineInput,
    GivingInput,
    ExpenseInput,
    AccountTransferInput,
    FundTransferInput,
    OpeningBalanceInput,
    InKindDonationInput,
    BatchOnlineDonationInput,
    DonationSplit,
    WeeklyDepositInput,
    DesignatedItem,
)
from fund_ledger.services.posting_service import PostingService


def count_rows(db_session, model):
    return db_session.scalar(select(func.count(model.id)))


def simple_entry(chart, debit="100.00", credit="100.00", description="Sunday offering"):
    return PostEntryRequest(
        entry_date=date(2024, 3, 3),
        description=description,
        lines=[
            LineInput(account_id=chart.checking.id, fund_id=chart.general.id,
                      debit=Decimal(debit)),
            LineInput(account_id=chart.tithes.id, fund_id=chart.general.id,
                      credit=Decimal(credit)),
        ],
    )


# --- Posting ---

class TestPostEntry:

    def test_balanced_entry_is_posted(self, db_session, chart):
        result = PostingService(db_session).post_entry(simple_entry(chart))

        assert result.success
        entry = result.data
        assert len(entry.lines) == 2
        assert entry.total_debits == entry.total_credits == Decimal("100.00")
        assert entry.is_voided is False

    def test_unbalanced_entry_writes_nothing(self, db_session, chart):
        result = PostingService(db_session).post_entry(
            simple_entry(chart, debit="100.00", credit="90.00")
        )

        assert not result.success
        assert result.error_kind == ErrorKind.CONSISTENCY
        assert result.error == (
            "Transaction is not balanced. Debits: 100.00, Credits: 90.00"
        )
        assert count_rows(db_session, JournalEntry) == 0
        assert count_rows(db_session, LedgerLine) == 0

    def test_sub_cent_difference_is_accepted(self, db_session, chart):
        result = PostingService(db_session).post_entry(
            simple_entry(chart, debit="100.004", credit="100.00")
        )
        assert result.success

    def test_single_line_rejected(self, db_session, chart):
        request = simple_entry(chart)
        request.lines = request.lines[:1]

        result = PostingService(db_session).post_entry(request)

        assert not result.success
        assert result.error == "At least two ledger lines are required (debit and credit)"

    def test_negative_amount_rejected(self, db_session, chart):
        result = PostingService(db_session).post_entry(
            simple_entry(chart, debit="-100.00", credit="-100.00")
        )
        assert result.error == "Debit and credit amounts cannot be negative"

    def test_zero_line_rejected(self, db_session, chart):
        request = simple_entry(chart)
        request.lines.append(
            LineInput(account_id=chart.savings.id, fund_id=chart.general.id)
        )
        result = PostingService(db_session).post_entry(request)
        assert result.error == "Each ledger line must have a debit or credit amount"

    def test_description_required(self, db_session, chart):
        result = PostingService(db_session).post_entry(
            simple_entry(chart, description="  ")
        )
        assert result.error == "Description is required"
        assert result.error_kind == ErrorKind.VALIDATION

    def test_unknown_account_is_not_found(self, db_session, chart):
        request = simple_entry(chart)
        request.lines[0].account_id = 9999

        result = PostingService(db_session).post_entry(request)

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error == "Account 9999 not found"

    def test_unknown_fund_is_not_found(self, db_session, chart):
        request = simple_entry(chart)
        request.lines[1].fund_id = 9999
        result = PostingService(db_session).post_entry(request)
        assert result.error == "Fund 9999 not found"

    def test_inactive_account_rejected(self, db_session, chart):
        old = Account(
            account_number=1099, name="Old Checking",
            account_type=AccountType.ASSET, is_active=False,
        )
        db_session.add(old)
        db_session.commit()

        request = simple_entry(chart)
        request.lines[0].account_id = old.id
        result = PostingService(db_session).post_entry(request)

        assert not result.success
        assert result.error == "Account 1099 (Old Checking) is inactive"
        assert count_rows(db_session, JournalEntry) == 0


# --- Void and delete ---

class TestVoidEntry:

    def test_void_keeps_lines(self, db_session, chart):
        service = PostingService(db_session)
        entry = service.post_entry(simple_entry(chart)).data

        result = service.void_entry(entry.id, "Entered twice")

        assert result.success
        assert result.data.is_voided is True
        assert result.data.voided_reason == "Entered twice"
        assert result.data.voided_at is not None
        assert count_rows(db_session, LedgerLine) == 2

    def test_double_void_rejected(self, db_session, chart):
        service = PostingService(db_session)
        entry = service.post_entry(simple_entry(chart)).data
        service.void_entry(entry.id, "Entered twice")

        result = service.void_entry(entry.id, "Again")

        assert not result.success
        assert result.error == "This transaction is already voided"
        assert result.error_kind == ErrorKind.STATE_CONFLICT

    def test_void_missing_entry(self, db_session, chart):
        result = PostingService(db_session).void_entry(424242, "Nope")
        assert result.error == "Transaction not found"
        assert result.error_kind == ErrorKind.NOT_FOUND

    def test_void_writes_audit_event(self, db_session, chart):
        service = PostingService(db_session)
        entry = service.post_entry(simple_entry(chart)).data
        service.void_entry(entry.id, "Bounced check")

        events = db_session.scalars(select(AuditLog.event_type)).all()
        assert "journal_entry.voided" in events


class TestDeleteEntry:

    def test_delete_removes_header_and_lines(self, db_session, chart):
        service = PostingService(db_session)
        entry = service.post_entry(simple_entry(chart)).data

        result = service.delete_entry(entry.id)

        assert result.success
        assert count_rows(db_session, JournalEntry) == 0
        assert count_rows(db_session, LedgerLine) == 0
        events = db_session.scalars(select(AuditLog.event_type)).all()
        assert events == ["journal_entry.deleted"]

    def test_delete_missing_entry(self, db_session, chart):
        result = PostingService(db_session).delete_entry(31337)
        assert result.error_kind == ErrorKind.NOT_FOUND


# --- Bookkeeping shortcuts ---

class TestRecordingHelpers:

    def test_record_giving(self, db_session, chart):
        result = PostingService(db_session).record_giving(GivingInput(
            entry_date=date(2024, 3, 3),
            fund_id=chart.general.id,
            income_account_id=chart.tithes.id,
            checking_account_id=chart.checking.id,
            amount=Decimal("250.00"),
            donor_id=chart.donor.id,
        ))

        entry = result.data
        assert entry.description == "Weekly giving"
        assert entry.donor_id == chart.donor.id
        debit, credit = entry.lines
        assert (debit.account_id, debit.debit) == (chart.checking.id, Decimal("250.00"))
        assert (credit.account_id, credit.credit) == (chart.tithes.id, Decimal("250.00"))

    def test_giving_requires_positive_amount(self, db_session, chart):
        result = PostingService(db_session).record_giving(GivingInput(
            entry_date=date(2024, 3, 3),
            fund_id=chart.general.id,
            income_account_id=chart.tithes.id,
            checking_account_id=chart.checking.id,
            amount=Decimal("0"),
        ))
        assert result.error == "Amount must be greater than zero"

    def test_cash_expense_credits_checking(self, db_session, chart):
        entry = PostingService(db_session).record_expense(ExpenseInput(
            entry_date=date(2024, 3, 5),
            fund_id=chart.general.id,
            expense_account_id=chart.utilities.id,
            amount=Decimal("80.00"),
            description="Electric bill",
            checking_account_id=chart.checking.id,
        )).data

        assert entry.lines[1].account_id == chart.checking.id
        assert entry.lines[1].memo == "Payment made"

    def test_credit_expense_needs_liability_account(self, db_session, chart):
        result = PostingService(db_session).record_expense(ExpenseInput(
            entry_date=date(2024, 3, 5),
            fund_id=chart.general.id,
            expense_account_id=chart.utilities.id,
            amount=Decimal("80.00"),
            description="Electric bill",
            payment_type=PaymentType.CREDIT,
        ))
        assert result.error == "Liability account is required for credit payments"

    def test_transfer_between_accounts(self, db_session, chart):
        entry = PostingService(db_session).transfer_between_accounts(AccountTransferInput(
            entry_date=date(2024, 3, 6),
            fund_id=chart.general.id,
            source_account_id=chart.checking.id,
            destination_account_id=chart.savings.id,
            amount=Decimal("40.00"),
        )).data

        memos = {line.account_id: line.memo for line in entry.lines}
        assert memos == {chart.checking.id: "Transfer out", chart.savings.id: "Transfer in"}

    def test_transfer_to_same_account_rejected(self, db_session, chart):
        result = PostingService(db_session).transfer_between_accounts(AccountTransferInput(
            entry_date=date(2024, 3, 6),
            fund_id=chart.general.id,
            source_account_id=chart.checking.id,
            destination_account_id=chart.checking.id,
            amount=Decimal("40.00"),
        ))
        assert result.error == "Source and destination accounts must be different"

    def test_transfer_between_funds_uses_one_account(self, db_session, chart):
        entry = PostingService(db_session).transfer_between_funds(FundTransferInput(
            entry_date=date(2024, 3, 6),
            checking_account_id=chart.checking.id,
            source_fund_id=chart.general.id,
            destination_fund_id=chart.building.id,
            amount=Decimal("500.00"),
        )).data

        assert {line.account_id for line in entry.lines} == {chart.checking.id}
        assert {line.fund_id for line in entry.lines} == {chart.general.id, chart.building.id}

    def test_opening_balance(self, db_session, chart):
        entry = PostingService(db_session).record_opening_balance(OpeningBalanceInput(
            entry_date=date(2024, 1, 1),
            fund_id=chart.general.id,
            asset_account_id=chart.checking.id,
            equity_account_id=chart.unrestricted.id,
            amount=Decimal("10000.00"),
        )).data
        assert entry.description == "Opening balance"

    def test_in_kind_donation_is_flagged(self, db_session, chart):
        entry = PostingService(db_session).record_in_kind_donation(InKindDonationInput(
            entry_date=date(2024, 4, 1),
            fund_id=chart.general.id,
            donor_id=chart.donor.id,
            income_account_id=chart.donated.id,
            receiving_account_id=chart.equipment.id,
            amount=Decimal("1200.00"),
            description="Donated projector",
        )).data
        assert entry.is_in_kind is True

    def test_batch_online_donation(self, db_session, chart):
        entry = PostingService(db_session).record_batch_online_donation(
            BatchOnlineDonationInput(
                entry_date=date(2024, 4, 2),
                checking_account_id=chart.checking.id,
                fees_account_id=chart.fees.id,
                net_deposit=Decimal("291.00"),
                processing_fees=Decimal("9.00"),
                donations=[
                    DonationSplit(fund_id=chart.general.id,
                                  income_account_id=chart.tithes.id,
                                  amount=Decimal("200.00")),
                    DonationSplit(fund_id=chart.building.id,
                                  income_account_id=chart.tithes.id,
                                  amount=Decimal("100.00")),
                ],
            )
        ).data

        assert len(entry.lines) == 4
        assert entry.total_debits == Decimal("300.00")

    def test_batch_donation_total_must_match_gross(self, db_session, chart):
        result = PostingService(db_session).record_batch_online_donation(
            BatchOnlineDonationInput(
                entry_date=date(2024, 4, 2),
                checking_account_id=chart.checking.id,
                fees_account_id=chart.fees.id,
                net_deposit=Decimal("291.00"),
                processing_fees=Decimal("9.00"),
                donations=[
                    DonationSplit(fund_id=chart.general.id,
                                  income_account_id=chart.tithes.id,
                                  amount=Decimal("250.00")),
                ],
            )
        )
        assert result.error == (
            "Donations total ($250.00) must equal gross amount ($300.00)"
        )

    def test_batch_without_donations_rejected(self, db_session, chart):
        result = PostingService(db_session).record_batch_online_donation(
            BatchOnlineDonationInput(
                entry_date=date(2024, 4, 2),
                checking_account_id=chart.checking.id,
                net_deposit=Decimal("100.00"),
            )
        )
        assert result.error == "At least one donation is required"

    def test_weekly_deposit_splits_by_fund(self, db_session, chart):
        entry = PostingService(db_session).record_weekly_deposit(WeeklyDepositInput(
            entry_date=date(2024, 4, 7),
            description="Deposit 4/7",
            checking_account_id=chart.checking.id,
            general_fund_id=chart.general.id,
            general_income_account_id=chart.tithes.id,
            general_fund_amount=Decimal("900.00"),
            missions_fund_id=chart.missions.id,
            missions_amount=Decimal("150.00"),
            designated_items=[DesignatedItem(
                fund_id=chart.building.id, account_id=chart.tithes.id,
                amount=Decimal("50.00"), description="Roof",
            )],
        )).data

        assert len(entry.lines) == 6
        assert entry.total_credits == Decimal("1100.00")

    def test_weekly_deposit_needs_missions_fund(self, db_session, chart):
        result = PostingService(db_session).record_weekly_deposit(WeeklyDepositInput(
            entry_date=date(2024, 4, 7),
            description="Deposit 4/7",
            checking_account_id=chart.checking.id,
            general_fund_id=chart.general.id,
            general_income_account_id=chart.tithes.id,
            missions_amount=Decimal("150.00"),
        ))
        assert result.error == (
            "Missions fund must be selected when missions amount is provided"
        )


# --- Reads ---

class TestLookups:

    def test_check_duplicate(self, db_session, chart):
        service = PostingService(db_session)
        service.post_entry(simple_entry(chart, description="Deposit - Sunday offering"))

        assert service.check_duplicate(date(2024, 3, 3), Decimal("100.00"), "sunday").data is True
        assert service.check_duplicate(date(2024, 3, 3), Decimal("100.01"), "sunday").data is False
        assert service.check_duplicate(date(2024, 3, 4), Decimal("100.00"), "sunday").data is False

    def test_check_duplicate_treats_wildcards_literally(self, db_session, chart):
        service = PostingService(db_session)
        service.post_entry(simple_entry(chart, description="Deposit - Sunday offering"))

        on, amount = date(2024, 3, 3), Decimal("100.00")
        assert service.check_duplicate(on, amount, "%").data is False
        assert service.check_duplicate(on, amount, "Sunday_offering").data is False
        assert service.check_duplicate(on, amount, "Deposit - Sunday").data is True

    def test_search_matches_percent_sign_literally(self, db_session, chart):
        service = PostingService(db_session)
        service.post_entry(simple_entry(chart, description="Pledge 100% paid"))
        service.post_entry(simple_entry(chart, description="Sunday offering"))

        page = service.list_entries(search="%").data

        assert page.total_count == 1

    def test_list_entries_newest_first(self, db_session, chart):
        service = PostingService(db_session)
        first = simple_entry(chart, description="First")
        second = simple_entry(chart, description="Second")
        second.entry_date = date(2024, 3, 10)
        service.post_entry(first)
        service.post_entry(second)

        page = service.list_entries().data

        assert page.total_count == 2
        assert [t.description for t in page.transactions] == ["Second", "First"]
        assert page.transactions[0].total_amount == Decimal("100.00")
        assert page.transactions[0].line_count == 2

    def test_list_entries_search(self, db_session, chart):
        service = PostingService(db_session)
        service.post_entry(simple_entry(chart, description="Easter offering"))
        service.post_entry(simple_entry(chart, description="Sunday offering"))

        page = service.list_entries(search="easter").data

        assert page.total_count == 1
        assert page.transactions[0].description == "Easter offering"
