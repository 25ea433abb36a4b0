from datetime import date
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

logger = logging.getLogger(__name__)

NUMBERING_ATTEMPTS = 5


def next_document_number(db: Session, column, tenant_column, tenant_id: str, prefix: str, on_date: date = None) -> str:
    """
    Build the next tenant-sequential document number, e.g. ``TXN-2024-17``.

    Numbers restart every year and continue from the highest sequence already
    used in the series, hand-entered numbers included. Suffixes that are not
    plain integers (``TXN-2024-007``, ``TXN-2024-A``) can never clash with a
    generated number and are ignored.
    """
    year = (on_date or date.today()).year
    year_prefix = f"{prefix}-{year}-"
    used = db.query(column).filter(
        tenant_column == tenant_id,
        column.like(f"{year_prefix}%")
    ).order_by(func.length(column).desc(), column.desc())

    for (number,) in used:
        suffix = number[len(year_prefix):]
        if suffix.isdigit() and not suffix.startswith("0"):
            return f"{year_prefix}{int(suffix) + 1}"
    return f"{year_prefix}1"


def add_numbered(db: Session, row, column, tenant_id: str, prefix: str, on_date: date = None):
    """
    Add ``row`` to the session and flush it under a free document number.

    A number already set on the row is used as given, and a clash with an
    existing document is a ValueError. Otherwise the next number is
    generated; when a concurrent posting takes it first the unique
    constraint fails inside this row's SAVEPOINT and a fresh number is tried.
    """
    tenant_column = column.class_.tenant_id
    explicit = getattr(row, column.key)

    # Pending changes of the caller must not ride in the savepoint
    db.flush()
    for attempt in range(1, NUMBERING_ATTEMPTS + 1):
        number = explicit or next_document_number(db, column, tenant_column, tenant_id, prefix, on_date)
        setattr(row, column.key, number)
        try:
            with db.begin_nested():
                db.add(row)
                db.flush()
            return row
        except IntegrityError:
            if explicit:
                taken = db.query(column).filter(tenant_column == tenant_id, column == explicit).first()
                if taken:
                    raise ValueError(f"Document number {explicit} already exists")
                raise
            if attempt == NUMBERING_ATTEMPTS:
                raise
            logger.warning(f"Document number {number} was taken for tenant {tenant_id}, retrying ({attempt}/{NUMBERING_ATTEMPTS})")
