"""Small lookup helpers shared by the services."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from fund_ledger.errors import NotFoundError


def get_or_raise(db: Session, model, entity_id, label: str, lock: bool = False):
    """
    Load a row by primary key or raise NotFoundError("<label> not found").

    With lock=True the row is read with SELECT ... FOR UPDATE and
    stays locked until the surrounding transaction ends.
    """
    if entity_id is None:
        raise NotFoundError(label)
    if lock:
        obj = db.execute(
            select(model).where(model.id == entity_id).with_for_update()
        ).scalar_one_or_none()
    else:
        obj = db.get(model, entity_id)
    if obj is None:
        raise NotFoundError(label)
    return obj
