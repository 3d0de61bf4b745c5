"""
Ledger error taxonomy.

Service internals raise these; the operation boundary in
services/boundary.py turns them into failed Result envelopes.
They subclass ValueError so code that only cares about
"bad request" can keep catching ValueError.
"""

import enum


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    CONSISTENCY = "consistency"
    NOT_FOUND = "not_found"
    STATE_CONFLICT = "state_conflict"
    UNEXPECTED = "unexpected"


class LedgerError(ValueError):
    """Base class for expected, user-facing ledger failures."""

    kind = ErrorKind.VALIDATION

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__


class ValidationError(LedgerError):
    """Bad input, detected before anything is written."""
    kind = ErrorKind.VALIDATION


class ConsistencyError(LedgerError):
    """Lines do not balance, too few lines, reconciliation mismatch."""
    kind = ErrorKind.CONSISTENCY


class NotFoundError(LedgerError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, what: str):
        super().__init__(f"{what} not found")


class StateConflictError(LedgerError):
    """The entity's current state does not allow the operation."""
    kind = ErrorKind.STATE_CONFLICT
