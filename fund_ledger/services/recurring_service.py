"""
Recurring transaction scheduler.

A template fires when it is due:

    is_active and next_run_date <= today
    and (end_date is None or today <= end_date)

Firing posts the template's lines as a new journal entry, writes
a history row, and moves next_run_date one frequency step forward
from its previous value. A template whose posting fails keeps its
next_run_date, so it is retried on the next run.

The lines are re-validated when the template fires, not only when
it is saved: an account deactivated in between makes that run
fail instead of posting to an inactive account.
"""

import logging
from datetime import date

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.orm import Session

from fund_ledger.errors import LedgerError, ValidationError, ConsistencyError
from fund_ledger.models.account import Account
from fund_ledger.models.enums import Frequency, RunStatus
from fund_ledger.models.fund import Fund
from fund_ledger.models.recurring import (
    RecurringTemplate,
    RecurringTemplateLine,
    RecurringHistory,
)
from fund_ledger.money import ZERO, to_money, amounts_match, fmt
from fund_ledger.schemas.journal import EntryHeader, LineInput
from fund_ledger.schemas.recurring import TemplateCreate
from fund_ledger.schemas.result import BatchItemResult, BatchResult
from fund_ledger.services.audit import record_event
from fund_ledger.services.boundary import ledger_operation
from fund_ledger.services.lookups import get_or_raise
from fund_ledger.services.posting_service import PostingService, check_line_amounts

logger = logging.getLogger(__name__)

FREQUENCY_STEPS = {
    Frequency.WEEKLY: relativedelta(days=7),
    Frequency.BIWEEKLY: relativedelta(days=14),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.QUARTERLY: relativedelta(months=3),
    Frequency.SEMIANNUALLY: relativedelta(months=6),
    Frequency.YEARLY: relativedelta(years=1),
}


def next_run_after(current: date, frequency: Frequency) -> date:
    """One frequency step after current. Month steps clamp to month end."""
    return current + FREQUENCY_STEPS[frequency]


class RecurringService:

    def __init__(self, db: Session):
        self.db = db
        self.posting = PostingService(db)

    @ledger_operation
    def create_template(self, request: TemplateCreate) -> RecurringTemplate:
        name = (request.template_name or "").strip()
        if not name:
            raise ValidationError("Template name is required")
        description = (request.description or "").strip()
        if not description:
            raise ValidationError("Description is required")
        if not request.fund_id:
            raise ValidationError("Fund is required")
        amount = to_money(request.amount)
        if amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if len(request.lines) < 2:
            raise ConsistencyError(
                "At least two ledger lines are required (debit and credit)"
            )
        if request.end_date and request.end_date < request.start_date:
            raise ValidationError("End date cannot be before start date")

        amounts = [check_line_amounts(l.debit, l.credit) for l in request.lines]
        total_debits = sum((d for d, _ in amounts), ZERO)
        total_credits = sum((c for _, c in amounts), ZERO)
        if not amounts_match(total_debits, total_credits):
            raise ConsistencyError(
                f"Ledger lines are not balanced. "
                f"Debits: {fmt(total_debits)}, Credits: {fmt(total_credits)}"
            )

        get_or_raise(self.db, Fund, request.fund_id, "Fund")
        for line in request.lines:
            get_or_raise(self.db, Account, line.account_id, "Account")

        template = RecurringTemplate(
            template_name=name,
            description=description,
            frequency=request.frequency,
            start_date=request.start_date,
            end_date=request.end_date,
            next_run_date=next_run_after(request.start_date, request.frequency),
            fund_id=request.fund_id,
            amount=amount,
            reference_number_prefix=request.reference_number_prefix or None,
            notes=request.notes or None,
            is_active=True,
        )
        for order, line in enumerate(request.lines):
            template.lines.append(RecurringTemplateLine(
                account_id=line.account_id,
                debit=to_money(line.debit),
                credit=to_money(line.credit),
                memo=line.memo,
                line_order=order,
            ))
        self.db.add(template)
        self.db.flush()
        logger.info(
            "Created recurring template %s (%s), next run %s",
            template.id, template.frequency.value, template.next_run_date,
        )
        return template

    # --- Processing ---

    def _fire(self, template_id: int, today: date) -> RecurringHistory:
        template = get_or_raise(
            self.db, RecurringTemplate, template_id, "Template", lock=True
        )
        reference = None
        if template.reference_number_prefix:
            reference = f"{template.reference_number_prefix}{today:%Y-%m}"

        entry = self.posting.write_entry(
            EntryHeader(
                entry_date=today,
                description=f"{template.description} (Recurring)",
                reference_number=reference,
            ),
            [
                LineInput(
                    account_id=line.account_id,
                    fund_id=template.fund_id,
                    debit=line.debit,
                    credit=line.credit,
                    memo=line.memo,
                )
                for line in template.lines
            ],
        )

        template.last_run_date = today
        template.next_run_date = next_run_after(template.next_run_date, template.frequency)
        history = RecurringHistory(
            template_id=template.id,
            journal_entry_id=entry.id,
            executed_date=today,
            amount=template.amount,
            status=RunStatus.SUCCESS,
        )
        self.db.add(history)
        self.db.flush()
        return history

    def _record_failure(self, template_id: int, amount, today: date, message: str) -> None:
        self.db.add(RecurringHistory(
            template_id=template_id,
            executed_date=today,
            amount=amount,
            status=RunStatus.FAILED,
            error_message=message,
        ))
        self.db.commit()

    def _due_templates(self, today: date) -> list[RecurringTemplate]:
        query = (
            select(RecurringTemplate)
            .where(RecurringTemplate.is_active.is_(True))
            .where(RecurringTemplate.next_run_date <= today)
            .order_by(RecurringTemplate.next_run_date, RecurringTemplate.id)
        )
        return [t for t in self.db.execute(query).scalars() if t.is_due(today)]

    @ledger_operation
    def process_due(self, today: date | None = None) -> BatchResult:
        """
        Fire every due template once.

        Each template runs in its own transaction. A failure rolls
        back that template's posting, records a failed history row,
        and the run continues with the next template.
        """
        today = today or date.today()
        due = [(t.id, t.template_name, t.amount) for t in self._due_templates(today)]

        results = []
        processed = failed = 0
        for template_id, name, amount in due:
            try:
                history = self._fire(template_id, today)
                self.db.commit()
                processed += 1
                results.append(BatchItemResult(
                    item_id=template_id, name=name, status="success",
                    journal_entry_id=history.journal_entry_id,
                ))
                continue
            except LedgerError as e:
                self.db.rollback()
                message = e.message
                logger.warning("Recurring template %s failed: %s", template_id, message)
            except Exception:
                self.db.rollback()
                message = "Unexpected error"
                logger.exception("Recurring template %s failed", template_id)
            failed += 1
            self._record_failure(template_id, amount, today, message)
            results.append(BatchItemResult(
                item_id=template_id, name=name, status="failed", error=message
            ))

        batch = BatchResult(processed=processed, failed=failed, results=results)
        record_event(
            self.db, "recurring.batch",
            process_date=today, processed=processed, failed=failed,
        )
        logger.info("Recurring run for %s: %s", today, batch.message)
        return batch

    # --- Management and reads ---

    @ledger_operation
    def set_active(self, template_id: int, is_active: bool) -> RecurringTemplate:
        template = get_or_raise(self.db, RecurringTemplate, template_id, "Template", lock=True)
        template.is_active = is_active
        self.db.flush()
        return template

    @ledger_operation
    def delete_template(self, template_id: int) -> int:
        """Delete a template and its history. Posted entries are kept."""
        template = get_or_raise(self.db, RecurringTemplate, template_id, "Template")
        self.db.delete(template)
        self.db.flush()
        return template_id

    @ledger_operation(commit=False)
    def list_templates(self, include_inactive: bool = True) -> list[RecurringTemplate]:
        query = select(RecurringTemplate).order_by(RecurringTemplate.next_run_date)
        if not include_inactive:
            query = query.where(RecurringTemplate.is_active.is_(True))
        return list(self.db.execute(query).scalars())

    @ledger_operation(commit=False)
    def get_template(self, template_id: int) -> RecurringTemplate:
        return get_or_raise(self.db, RecurringTemplate, template_id, "Template")

    @ledger_operation(commit=False)
    def history(self, template_id: int | None = None, limit: int = 50) -> list[RecurringHistory]:
        query = (
            select(RecurringHistory)
            .order_by(RecurringHistory.executed_date.desc(), RecurringHistory.id.desc())
            .limit(limit)
        )
        if template_id is not None:
            query = query.where(RecurringHistory.template_id == template_id)
        return list(self.db.execute(query).scalars())

    @ledger_operation(commit=False)
    def due_count(self, today: date | None = None) -> int:
        return len(self._due_templates(today or date.today()))
