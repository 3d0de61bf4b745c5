"""
Fixed assets and straight-line depreciation.

    monthly depreciation = (purchase price - salvage value) / life years / 12

A run for N months books monthly x N, clamped to what is left to
depreciate and rounded to cents, so accumulated depreciation can
never pass purchase price - salvage value however many runs are
processed.

Each run is one transaction: the journal entry, the asset update
and the schedule row commit together. The asset row is locked and
versioned while it is updated.
"""

import logging
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.orm import Session

from fund_ledger.errors import LedgerError, ValidationError, StateConflictError
from fund_ledger.models.account import Account
from fund_ledger.models.enums import AssetStatus, DepreciationMethod
from fund_ledger.models.fixed_asset import (
    FixedAsset,
    DepreciationScheduleEntry,
    AssetMaintenanceLog,
)
from fund_ledger.models.fund import Fund
from fund_ledger.money import ZERO, to_money, fmt
from fund_ledger.schemas.assets import (
    AssetCreate,
    DisposalRequest,
    MaintenanceCreate,
    DepreciationCalculation,
    DepreciationResult,
    DisposalResult,
    AssetSummary,
)
from fund_ledger.schemas.journal import EntryHeader, LineInput
from fund_ledger.schemas.result import BatchItemResult, BatchResult
from fund_ledger.services.audit import record_event
from fund_ledger.services.boundary import ledger_operation
from fund_ledger.services.lookups import get_or_raise
from fund_ledger.services.posting_service import PostingService

logger = logging.getLogger(__name__)


def _asset_ref(asset: FixedAsset) -> str:
    return asset.asset_tag or str(asset.id)


class AssetService:

    def __init__(self, db: Session):
        self.db = db
        self.posting = PostingService(db)

    # --- Registration ---

    @ledger_operation
    def create_asset(self, request: AssetCreate) -> FixedAsset:
        name = (request.asset_name or "").strip()
        if not name:
            raise ValidationError("Asset name is required")
        purchase_price = to_money(request.purchase_price)
        salvage_value = to_money(request.salvage_value)
        if purchase_price <= 0:
            raise ValidationError("Purchase price must be greater than zero")
        if request.estimated_life_years <= 0:
            raise ValidationError("Estimated life must be greater than zero")
        if salvage_value < 0:
            raise ValidationError("Salvage value cannot be negative")
        if salvage_value >= purchase_price:
            raise ValidationError("Salvage value must be less than purchase price")

        get_or_raise(self.db, Fund, request.fund_id, "Fund")
        for account_id in (
            request.asset_account_id,
            request.accumulated_depreciation_account_id,
            request.depreciation_expense_account_id,
        ):
            get_or_raise(self.db, Account, account_id, "Account")

        asset = FixedAsset(
            asset_name=name,
            description=request.description,
            asset_tag=request.asset_tag or None,
            serial_number=request.serial_number or None,
            category=request.category or None,
            location=request.location or None,
            assigned_to=request.assigned_to or None,
            notes=request.notes or None,
            purchase_date=request.purchase_date,
            purchase_price=purchase_price,
            salvage_value=salvage_value,
            estimated_life_years=request.estimated_life_years,
            depreciation_method=request.depreciation_method,
            accumulated_depreciation_amount=ZERO,
            status=AssetStatus.ACTIVE,
            fund_id=request.fund_id,
            asset_account_id=request.asset_account_id,
            accumulated_depreciation_account_id=request.accumulated_depreciation_account_id,
            depreciation_expense_account_id=request.depreciation_expense_account_id,
            depreciation_start_date=request.depreciation_start_date,
        )
        self.db.add(asset)
        self.db.flush()
        logger.info("Registered asset %s (%s)", asset.id, asset.asset_name)
        return asset

    # --- Depreciation ---

    def _calculate(self, asset: FixedAsset, months: int) -> DepreciationCalculation:
        if asset.status == AssetStatus.DISPOSED:
            raise StateConflictError("Asset is not active")
        if months < 1:
            raise ValidationError("Months must be at least one")
        if asset.depreciation_method != DepreciationMethod.STRAIGHT_LINE:
            raise ValidationError("Depreciation method not supported yet")

        depreciable = asset.depreciable_amount
        accumulated = asset.accumulated_depreciation_amount
        if accumulated >= depreciable:
            return DepreciationCalculation(
                depreciation=ZERO,
                accumulated_depreciation=accumulated,
                book_value=asset.book_value,
                is_fully_depreciated=True,
            )

        monthly = depreciable / Decimal(asset.estimated_life_years) / Decimal(12)
        amount = to_money(min(monthly * months, depreciable - accumulated))
        new_accumulated = accumulated + amount
        return DepreciationCalculation(
            depreciation=amount,
            accumulated_depreciation=new_accumulated,
            book_value=asset.purchase_price - new_accumulated,
            is_fully_depreciated=new_accumulated >= depreciable,
        )

    @ledger_operation(commit=False)
    def calculate_depreciation(self, asset_id: int, months: int = 1) -> DepreciationCalculation:
        """Preview the next depreciation run without booking it."""
        asset = get_or_raise(self.db, FixedAsset, asset_id, "Asset")
        return self._calculate(asset, months)

    def _record(self, asset_id: int, depreciation_date: date, months: int) -> DepreciationResult:
        asset = get_or_raise(self.db, FixedAsset, asset_id, "Asset", lock=True)
        calc = self._calculate(asset, months)
        if calc.depreciation == 0:
            raise StateConflictError(
                "No depreciation to record (asset may be fully depreciated)"
            )

        plural = "s" if months > 1 else ""
        entry = self.posting.write_entry(
            EntryHeader(
                entry_date=depreciation_date,
                description=f"Depreciation - {asset.asset_name} ({months} month{plural})",
                reference_number=f"DEP-{_asset_ref(asset)}",
            ),
            [
                LineInput(account_id=asset.depreciation_expense_account_id,
                          fund_id=asset.fund_id, debit=calc.depreciation,
                          memo=f"Depreciation expense for {asset.asset_name}"),
                LineInput(account_id=asset.accumulated_depreciation_account_id,
                          fund_id=asset.fund_id, credit=calc.depreciation,
                          memo=f"Accumulated depreciation for {asset.asset_name}"),
            ],
        )

        beginning_book_value = asset.book_value
        asset.accumulated_depreciation_amount = calc.accumulated_depreciation
        asset.last_depreciation_date = depreciation_date
        if calc.is_fully_depreciated:
            asset.status = AssetStatus.FULLY_DEPRECIATED

        period_start = depreciation_date.replace(day=1)
        period_end = period_start + relativedelta(months=months) - relativedelta(days=1)
        self.db.add(DepreciationScheduleEntry(
            asset_id=asset.id,
            period_start_date=period_start,
            period_end_date=period_end,
            fiscal_year=depreciation_date.year,
            period_number=depreciation_date.month,
            beginning_book_value=beginning_book_value,
            depreciation_amount=calc.depreciation,
            accumulated_depreciation=calc.accumulated_depreciation,
            ending_book_value=calc.book_value,
            journal_entry_id=entry.id,
            recorded_date=depreciation_date,
        ))
        self.db.flush()

        logger.info(
            "Recorded %s depreciation on asset %s; accumulated %s",
            fmt(calc.depreciation), asset.id, fmt(calc.accumulated_depreciation),
        )
        return DepreciationResult(
            asset_id=asset.id,
            journal_entry_id=entry.id,
            depreciation_amount=calc.depreciation,
            accumulated_depreciation=calc.accumulated_depreciation,
            book_value=calc.book_value,
            is_fully_depreciated=calc.is_fully_depreciated,
        )

    @ledger_operation
    def record_depreciation(
        self, asset_id: int, depreciation_date: date, months: int = 1
    ) -> DepreciationResult:
        return self._record(asset_id, depreciation_date, months)

    def _skip_reason(self, asset: FixedAsset, process_date: date) -> str | None:
        if asset.depreciation_start_date > process_date:
            return "Depreciation start date not reached"
        if asset.accumulated_depreciation_amount >= asset.depreciable_amount:
            return "Already fully depreciated"
        last = asset.last_depreciation_date
        if last and (last.year, last.month) == (process_date.year, process_date.month):
            return "Already depreciated for this month"
        return None

    @ledger_operation
    def process_all_depreciation(self, process_date: date | None = None) -> BatchResult:
        """
        Book one month of depreciation on every active asset.

        Each asset is committed on its own; a failure is recorded
        in the results and the run moves on to the next asset.
        """
        process_date = process_date or date.today()
        assets = list(self.db.execute(
            select(FixedAsset)
            .where(FixedAsset.status == AssetStatus.ACTIVE)
            .order_by(FixedAsset.id)
        ).scalars())
        targets = [(a.id, a.asset_name, self._skip_reason(a, process_date)) for a in assets]

        results = []
        processed = skipped = failed = 0
        for asset_id, name, skip_reason in targets:
            if skip_reason:
                skipped += 1
                results.append(BatchItemResult(
                    item_id=asset_id, name=name, status="skipped", error=skip_reason
                ))
                continue
            try:
                outcome = self._record(asset_id, process_date, 1)
                self.db.commit()
                processed += 1
                results.append(BatchItemResult(
                    item_id=asset_id, name=name, status="success",
                    journal_entry_id=outcome.journal_entry_id,
                ))
            except LedgerError as e:
                self.db.rollback()
                failed += 1
                results.append(BatchItemResult(
                    item_id=asset_id, name=name, status="failed", error=e.message
                ))
            except Exception:
                self.db.rollback()
                logger.exception("Depreciation failed for asset %s", asset_id)
                failed += 1
                results.append(BatchItemResult(
                    item_id=asset_id, name=name, status="failed", error="Unexpected error"
                ))

        batch = BatchResult(
            processed=processed, skipped=skipped, failed=failed, results=results
        )
        record_event(
            self.db, "depreciation.batch",
            process_date=process_date, processed=processed,
            skipped=skipped, failed=failed,
        )
        logger.info("Depreciation run for %s: %s", process_date, batch.message)
        return batch

    # --- Disposal ---

    @ledger_operation
    def dispose_asset(self, asset_id: int, request: DisposalRequest) -> DisposalResult:
        """
        Take an asset off the books.

        Accounting:
            DEBIT  Accumulated depreciation   accumulated amount
            DEBIT  Cash                       disposal price
            CREDIT Asset                      purchase price
            DEBIT/CREDIT gain-loss account    the difference
        """
        asset = get_or_raise(self.db, FixedAsset, asset_id, "Asset", lock=True)
        if asset.status == AssetStatus.DISPOSED:
            raise StateConflictError("Asset is already disposed")

        disposal_price = to_money(request.disposal_price)
        if disposal_price < 0:
            raise ValidationError("Disposal price cannot be negative")
        if disposal_price > 0 and not request.cash_account_id:
            raise ValidationError("Cash account is required when the asset is sold")

        accumulated = asset.accumulated_depreciation_amount
        book_value = asset.book_value
        gain_loss = disposal_price - book_value
        gain_loss_account_id = request.gain_loss_account_id or asset.asset_account_id
        name = asset.asset_name

        lines = []
        if accumulated > 0:
            lines.append(LineInput(
                account_id=asset.accumulated_depreciation_account_id, fund_id=asset.fund_id,
                debit=accumulated, memo=f"Remove accumulated depreciation for {name}",
            ))
        if disposal_price > 0:
            lines.append(LineInput(
                account_id=request.cash_account_id, fund_id=asset.fund_id,
                debit=disposal_price, memo=f"Proceeds from disposal of {name}",
            ))
        lines.append(LineInput(
            account_id=asset.asset_account_id, fund_id=asset.fund_id,
            credit=asset.purchase_price, memo=f"Remove {name} from books",
        ))
        if gain_loss != 0:
            lines.append(LineInput(
                account_id=gain_loss_account_id, fund_id=asset.fund_id,
                debit=-gain_loss if gain_loss < 0 else ZERO,
                credit=gain_loss if gain_loss > 0 else ZERO,
                memo=(f"Gain on disposal of {name}" if gain_loss > 0
                      else f"Loss on disposal of {name}"),
            ))

        outcome = "Gain on sale" if gain_loss >= 0 else "Loss on sale"
        entry = self.posting.write_entry(
            EntryHeader(
                entry_date=request.disposal_date,
                description=f"Disposal of {name} - {outcome}",
                reference_number=f"DISP-{_asset_ref(asset)}",
            ),
            lines,
        )

        asset.status = AssetStatus.DISPOSED
        asset.disposal_date = request.disposal_date
        asset.disposal_price = disposal_price
        asset.disposal_journal_entry_id = entry.id
        asset.disposal_notes = request.disposal_notes or None
        record_event(
            self.db, "asset.disposed",
            asset_id=asset.id, journal_entry_id=entry.id, gain_loss=gain_loss,
        )
        self.db.flush()
        logger.info("Disposed asset %s; gain/loss %s", asset.id, fmt(gain_loss))

        return DisposalResult(
            asset_id=asset.id,
            journal_entry_id=entry.id,
            book_value=book_value,
            disposal_price=disposal_price,
            gain_loss=gain_loss,
        )

    # --- Maintenance and reads ---

    @ledger_operation
    def add_maintenance_log(self, asset_id: int, request: MaintenanceCreate) -> AssetMaintenanceLog:
        get_or_raise(self.db, FixedAsset, asset_id, "Asset")
        if not request.maintenance_type.strip():
            raise ValidationError("Maintenance type is required")
        if not request.description.strip():
            raise ValidationError("Description is required")
        cost = to_money(request.cost)
        if cost < 0:
            raise ValidationError("Cost cannot be negative")
        log = AssetMaintenanceLog(
            asset_id=asset_id,
            maintenance_date=request.maintenance_date,
            maintenance_type=request.maintenance_type.strip(),
            description=request.description.strip(),
            cost=cost,
            performed_by=request.performed_by or None,
            notes=request.notes or None,
        )
        self.db.add(log)
        self.db.flush()
        return log

    @ledger_operation(commit=False)
    def list_assets(self, include_disposed: bool = False) -> list[FixedAsset]:
        query = select(FixedAsset).order_by(FixedAsset.asset_name)
        if not include_disposed:
            query = query.where(FixedAsset.status != AssetStatus.DISPOSED)
        return list(self.db.execute(query).scalars())

    @ledger_operation(commit=False)
    def get_asset(self, asset_id: int) -> FixedAsset:
        return get_or_raise(self.db, FixedAsset, asset_id, "Asset")

    @ledger_operation(commit=False)
    def asset_summary(self) -> AssetSummary:
        assets = list(self.db.execute(select(FixedAsset)).scalars())

        def count(status: AssetStatus) -> int:
            return sum(1 for a in assets if a.status == status)

        return AssetSummary(
            total_assets=len(assets),
            active_assets=count(AssetStatus.ACTIVE),
            fully_depreciated_assets=count(AssetStatus.FULLY_DEPRECIATED),
            disposed_assets=count(AssetStatus.DISPOSED),
            total_purchase_value=sum((a.purchase_price for a in assets), ZERO),
            total_accumulated_depreciation=sum(
                (a.accumulated_depreciation_amount for a in assets), ZERO
            ),
            total_book_value=sum((a.book_value for a in assets), ZERO),
        )
