"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before and dropped
after every test, so no test data persists.
"""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fund_ledger.main import app
from fund_ledger.models import Base, Account, Fund, Donor, Vendor
from fund_ledger.models.base import get_db
from fund_ledger.models.enums import AccountType


# Use SQLite for tests, no external database needed.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    This ensures each test starts with a clean database.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_account(db_session, number, name, account_type, is_active=True):
    """Helper: insert an account directly, bypassing the service layer."""
    account = Account(
        account_number=number,
        name=name,
        account_type=account_type,
        is_active=is_active,
    )
    db_session.add(account)
    db_session.flush()
    return account


@pytest.fixture
def chart(db_session):
    """
    A small church chart of accounts.

    General Fund maps to Net Assets Without Donor Restrictions,
    Building Fund to Net Assets With Donor Restrictions, and the
    Missions Fund is left unmapped.
    """
    c = SimpleNamespace()
    c.checking = make_account(db_session, 1000, "Checking", AccountType.ASSET)
    c.savings = make_account(db_session, 1010, "Savings", AccountType.ASSET)
    c.equipment = make_account(db_session, 1500, "Equipment", AccountType.ASSET)
    c.accumulated = make_account(
        db_session, 1510, "Accumulated Depreciation", AccountType.ASSET
    )
    c.payable = make_account(db_session, 2000, "Accounts Payable", AccountType.LIABILITY)
    c.credit_card = make_account(db_session, 2100, "Credit Card", AccountType.LIABILITY)
    c.unrestricted = make_account(
        db_session, 3000, "Net Assets Without Donor Restrictions", AccountType.EQUITY
    )
    c.restricted = make_account(
        db_session, 3100, "Net Assets With Donor Restrictions", AccountType.EQUITY
    )
    c.tithes = make_account(db_session, 4000, "Tithes & Offerings", AccountType.INCOME)
    c.donated = make_account(db_session, 4500, "In-Kind Contributions", AccountType.INCOME)
    c.utilities = make_account(db_session, 5000, "Utilities", AccountType.EXPENSE)
    c.depreciation = make_account(
        db_session, 5100, "Depreciation Expense", AccountType.EXPENSE
    )
    c.fees = make_account(db_session, 5200, "Processing Fees", AccountType.EXPENSE)

    c.general = Fund(name="General Fund", net_asset_account_id=c.unrestricted.id)
    c.building = Fund(
        name="Building Fund", is_restricted=True, net_asset_account_id=c.restricted.id
    )
    c.missions = Fund(name="Missions Fund")
    c.donor = Donor(name="Ada Lovelace", envelope_number=17)
    c.vendor = Vendor(name="City Power & Light")
    db_session.add_all([c.general, c.building, c.missions, c.donor, c.vendor])
    db_session.commit()
    return c
