"""
Fixed assets, their depreciation schedule, and maintenance log.

Straight-line is the only depreciation method. The accumulated
depreciation amount never decreases while an asset is active and
never exceeds purchase_price - salvage_value. Every depreciation
run appends one DepreciationScheduleEntry; those rows are never
updated.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Integer, String, Text, Date, DateTime, Numeric,
    ForeignKey, Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fund_ledger.models.base import Base, utcnow
from fund_ledger.models.enums import AssetStatus, DepreciationMethod


class FixedAsset(Base):
    __tablename__ = "fixed_assets"

    id: Mapped[int] = mapped_column(primary_key=True)
    asset_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    asset_tag: Mapped[str | None] = mapped_column(String(100), nullable=True)
    serial_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    assigned_to: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    purchase_price: Mapped[Decimal] = mapped_column(Numeric(19, 2), nullable=False)
    salvage_value: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    estimated_life_years: Mapped[int] = mapped_column(Integer, nullable=False)
    depreciation_method: Mapped[DepreciationMethod] = mapped_column(
        SAEnum(
            DepreciationMethod,
            name="depreciation_method_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=DepreciationMethod.STRAIGHT_LINE,
    )
    accumulated_depreciation_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    status: Mapped[AssetStatus] = mapped_column(
        SAEnum(
            AssetStatus,
            name="asset_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=AssetStatus.ACTIVE,
    )

    asset_account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False
    )
    accumulated_depreciation_account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False
    )
    depreciation_expense_account_id: Mapped[int] = mapped_column(
        ForeignKey("chart_of_accounts.id"), nullable=False
    )
    fund_id: Mapped[int] = mapped_column(ForeignKey("funds.id"), nullable=False)

    depreciation_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    last_depreciation_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    disposal_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    disposal_price: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 2), nullable=True
    )
    disposal_journal_entry_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=True
    )
    disposal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    schedule: Mapped[list["DepreciationScheduleEntry"]] = relationship(
        back_populates="asset",
        order_by="DepreciationScheduleEntry.period_start_date",
    )
    maintenance_log: Mapped[list["AssetMaintenanceLog"]] = relationship(
        back_populates="asset",
        order_by="AssetMaintenanceLog.maintenance_date.desc()",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def depreciable_amount(self) -> Decimal:
        return self.purchase_price - self.salvage_value

    @property
    def book_value(self) -> Decimal:
        return self.purchase_price - self.accumulated_depreciation_amount

    def __repr__(self) -> str:
        return f"<FixedAsset {self.asset_name} ({self.status.value})>"


class DepreciationScheduleEntry(Base):
    __tablename__ = "depreciation_schedule"

    id: Mapped[int] = mapped_column(primary_key=True)
    asset_id: Mapped[int] = mapped_column(
        ForeignKey("fixed_assets.id"), nullable=False, index=True
    )
    period_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    period_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    fiscal_year: Mapped[int] = mapped_column(Integer, nullable=False)
    period_number: Mapped[int] = mapped_column(Integer, nullable=False)
    beginning_book_value: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False
    )
    depreciation_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False
    )
    accumulated_depreciation: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False
    )
    ending_book_value: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False
    )
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id"), nullable=False
    )
    recorded_date: Mapped[date] = mapped_column(Date, nullable=False)

    asset: Mapped[FixedAsset] = relationship(back_populates="schedule")


class AssetMaintenanceLog(Base):
    __tablename__ = "asset_maintenance_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    asset_id: Mapped[int] = mapped_column(
        ForeignKey("fixed_assets.id"), nullable=False, index=True
    )
    maintenance_date: Mapped[date] = mapped_column(Date, nullable=False)
    maintenance_type: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    cost: Mapped[Decimal] = mapped_column(
        Numeric(19, 2), nullable=False, default=Decimal("0")
    )
    performed_by: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    asset: Mapped[FixedAsset] = relationship(back_populates="maintenance_log")
