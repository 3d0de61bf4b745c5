"""
Chart of accounts.

Every posting lands on one of these accounts. The account type
decides the sign convention every report uses, so it is treated
as fixed once lines exist.
"""

from datetime import datetime

from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from fund_ledger.models.base import Base, utcnow
from fund_ledger.models.enums import AccountType


class Account(Base):
    __tablename__ = "chart_of_accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    account_number: Mapped[int] = mapped_column(
        Integer, unique=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(
            AccountType,
            name="account_type_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    # Expense accounts only: the payable a new bill credits by default
    default_liability_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<Account {self.account_number} {self.name} ({self.account_type.value})>"
