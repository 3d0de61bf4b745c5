"""
Uniform result envelope.

Every public service operation returns a Result instead of
raising: success with data, or failure with a message and the
kind of failure. Callers such as the HTTP layer or a CLI decide
what a failure means for them.
"""

from typing import Any

from pydantic import BaseModel, computed_field

from fund_ledger.errors import ErrorKind


class Result(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    model_config = {"arbitrary_types_allowed": True}

    @classmethod
    def ok(cls, data: Any = None) -> "Result":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.VALIDATION) -> "Result":
        return cls(success=False, error=error, error_kind=kind)


class BatchItemResult(BaseModel):
    """Outcome for one item of a batch run: success, skipped, or failed."""
    item_id: int
    name: str
    status: str
    error: str | None = None
    journal_entry_id: int | None = None


class BatchResult(BaseModel):
    """Counts and per-item detail for a depreciation or recurring run."""
    processed: int
    skipped: int = 0
    failed: int
    results: list[BatchItemResult]

    @computed_field
    @property
    def message(self) -> str:
        return f"Processed {self.processed}. Skipped {self.skipped}. {self.failed} failed."
