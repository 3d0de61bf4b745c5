"""
Fund model.

A fund is a logical bucket of restricted or unrestricted
resources. Every ledger line carries exactly one fund, which
is how the ledger keeps designated gifts apart from general
operating money without separate bank accounts.
"""

from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fund_ledger.models.base import Base, utcnow


class Fund(Base):
    __tablename__ = "funds"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_restricted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    # Equity account that presents this fund's balance on the
    # balance sheet. Optional; unmapped funds are shown together.
    net_asset_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    net_asset_account: Mapped["Account | None"] = relationship()

    def __repr__(self) -> str:
        kind = "restricted" if self.is_restricted else "unrestricted"
        return f"<Fund {self.name} ({kind})>"
