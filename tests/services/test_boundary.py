"""
Tests for the @ledger_operation boundary.

A lost concurrent update and a database failure must both roll
the whole operation back and come out as a failed Result.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from fund_ledger.errors import ErrorKind, NotFoundError
from fund_ledger.models import Bill, BillPayment, JournalEntry, Vendor
from fund_ledger.models.enums import BillStatus
from fund_ledger.schemas.payables import BillCreate, BillPaymentCreate
from fund_ledger.services.boundary import (
    CONCURRENT_UPDATE_ERROR,
    UNEXPECTED_ERROR,
    ledger_operation,
)
from fund_ledger.services.payables_service import PayablesService


class VendorWriter:
    """Adds a vendor, then fails the way the method is told to."""

    def __init__(self, db, error):
        self.db = db
        self.error = error

    @ledger_operation
    def add_vendor(self, name):
        self.db.add(Vendor(name=name))
        self.db.flush()
        raise self.error


def vendor_count(db_session, name):
    return db_session.scalar(
        select(func.count(Vendor.id)).where(Vendor.name == name)
    )


@pytest.fixture
def second_session(db_session):
    session = Session(bind=db_session.get_bind(), autoflush=False)
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def create_bill(db_session, chart):
    return PayablesService(db_session).create_bill(BillCreate(
        vendor_id=chart.vendor.id,
        fund_id=chart.general.id,
        expense_account_id=chart.utilities.id,
        liability_account_id=chart.payable.id,
        description="March electric",
        invoice_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
        amount=Decimal("500.00"),
    )).data


class TestConcurrentUpdate:

    def test_stale_bill_payment_is_a_state_conflict(
        self, db_session, second_session, chart
    ):
        bill = create_bill(db_session, chart)
        # The second session reads the bill before the first one changes it
        stale = second_session.get(Bill, bill.id)
        assert stale.version == 1

        bill.amount_paid = Decimal("100.00")
        bill.status = BillStatus.PARTIAL
        db_session.commit()
        assert bill.version == 2

        result = PayablesService(second_session).pay_bill(
            bill.id,
            BillPaymentCreate(
                amount=Decimal("50.00"),
                bank_account_id=chart.checking.id,
                payment_date=date(2024, 3, 15),
            ),
        )

        assert not result.success
        assert result.error_kind == ErrorKind.STATE_CONFLICT
        assert result.error == CONCURRENT_UPDATE_ERROR
        assert db_session.scalar(select(func.count(BillPayment.id))) == 0
        # Only the bill's own entry; the payment entry was rolled back
        assert db_session.scalar(select(func.count(JournalEntry.id))) == 1
        db_session.refresh(bill)
        assert bill.amount_paid == Decimal("100.00")
        assert bill.version == 2


class TestFailureMapping:

    def test_database_error_rolls_back_with_generic_message(self, db_session, chart):
        timeout = OperationalError(
            "SELECT 1", {}, Exception("canceling statement due to statement timeout")
        )

        result = VendorWriter(db_session, timeout).add_vendor("Acme Plumbing")

        assert not result.success
        assert result.error == UNEXPECTED_ERROR
        assert result.error_kind == ErrorKind.UNEXPECTED
        assert vendor_count(db_session, "Acme Plumbing") == 0

    def test_unexpected_exception_hides_details(self, db_session, chart):
        result = VendorWriter(db_session, KeyError("secret")).add_vendor("Acme Plumbing")

        assert result.error == UNEXPECTED_ERROR
        assert result.error_kind == ErrorKind.UNEXPECTED
        assert vendor_count(db_session, "Acme Plumbing") == 0

    def test_ledger_error_keeps_message_and_kind(self, db_session, chart):
        result = VendorWriter(db_session, NotFoundError("Fund")).add_vendor("Acme Plumbing")

        assert result.error == "Fund not found"
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert vendor_count(db_session, "Acme Plumbing") == 0
