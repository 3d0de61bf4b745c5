"""
Translate service Results into HTTP responses.

Services never raise across their boundary; routers hand the
Result to unwrap(), which returns the data or raises the
HTTPException matching the failure kind.
"""

from fastapi import HTTPException

from fund_ledger.errors import ErrorKind
from fund_ledger.schemas.result import Result

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONSISTENCY: 400,
    ErrorKind.STATE_CONFLICT: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNEXPECTED: 500,
}


def unwrap(result: Result):
    if result.success:
        return result.data
    status_code = STATUS_BY_KIND.get(result.error_kind, 500)
    raise HTTPException(status_code=status_code, detail=result.error)
