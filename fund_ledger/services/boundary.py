"""
Operation boundary for service methods.

A method decorated with @ledger_operation runs as one database
transaction and always returns a Result:

- it returns normally        -> commit, Result.ok(value)
- it raises a LedgerError    -> rollback, Result.fail(message, kind)
- a concurrent writer won    -> rollback, state-conflict failure
- anything else goes wrong   -> rollback, generic failure, traceback logged

Service internals therefore raise freely and only flush; nothing
is visible to other sessions until the decorated method commits.
"""

import functools
import logging

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from fund_ledger.errors import ErrorKind, LedgerError
from fund_ledger.schemas.result import Result

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred"
CONCURRENT_UPDATE_ERROR = (
    "This record was changed by another operation. Please reload and try again."
)


def ledger_operation(func=None, *, commit: bool = True):
    """
    Wrap a service method in a transaction and a Result envelope.

    Use commit=False for read-only operations; they still roll
    back on failure so the session is left clean.
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs) -> Result:
            name = method.__qualname__
            try:
                data = method(self, *args, **kwargs)
                if commit:
                    self.db.commit()
                return Result.ok(data)
            except LedgerError as e:
                self.db.rollback()
                logger.warning("%s rejected: %s", name, e.message)
                return Result.fail(e.message, e.kind)
            except StaleDataError:
                self.db.rollback()
                logger.warning("%s lost a concurrent update", name)
                return Result.fail(
                    CONCURRENT_UPDATE_ERROR, ErrorKind.STATE_CONFLICT
                )
            except OperationalError:
                # Store unreachable or statement timeout
                self.db.rollback()
                logger.exception("%s failed talking to the database", name)
                return Result.fail(UNEXPECTED_ERROR, ErrorKind.UNEXPECTED)
            except Exception:
                self.db.rollback()
                logger.exception("Unexpected error in %s", name)
                return Result.fail(UNEXPECTED_ERROR, ErrorKind.UNEXPECTED)
        return wrapper

    if func is not None:
        return decorator(func)
    return decorator
