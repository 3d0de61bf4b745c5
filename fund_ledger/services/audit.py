"""Helpers for writing audit log rows inside the caller's transaction."""

import json

from sqlalchemy.orm import Session

from fund_ledger.models.audit_log import AuditLog


def record_event(db: Session, event_type: str, **details) -> AuditLog:
    """Add an audit row. It commits or rolls back with the operation."""
    entry = AuditLog(
        event_type=event_type,
        details=json.dumps(details, default=str, sort_keys=True),
    )
    db.add(entry)
    return entry
