"""
Database Helper Utilities

Provides:
- Database dialect detection (PostgreSQL vs SQLite)
- Row locking on PostgreSQL
- Upsert keyed by a record's unique tuple (e.g. rate_plan_id + date)
"""

import logging
from typing import Any, Dict, Optional, Tuple, Type, TypeVar
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar('T')


def is_postgres(db: Session) -> bool:
    """Check if the database is PostgreSQL"""
    bind = db.get_bind()
    return bind is not None and bind.dialect.name == 'postgresql'


def acquire_row_lock(
    db: Session,
    model: Type[T],
    *filter_conditions,
    nowait: bool = False
) -> Optional[T]:
    """
    Fetch a single row, locking it FOR UPDATE on PostgreSQL.

    SQLite has no row locks; the query runs unlocked there.

    Example:
        price = acquire_row_lock(db, Price, Price.rate_plan_id == rp_id, Price.date == d)
    """
    query = db.query(model).filter(*filter_conditions)

    if is_postgres(db):
        query = query.with_for_update(nowait=nowait)

    return query.first()


def upsert_by_keys(
    db: Session,
    model: Type[T],
    keys: Dict[str, Any],
    values: Dict[str, Any],
) -> Tuple[T, bool]:
    """
    Create or update the record identified by its unique key columns.

    Args:
        db: Database session
        model: SQLAlchemy model class
        keys: Unique key column values, e.g. {"property_id": pid, "date": d}
        values: Columns to write on create and on update

    Returns:
        Tuple of (record, is_new). The caller commits.
    """
    conditions = [getattr(model, column) == value for column, value in keys.items()]
    existing = acquire_row_lock(db, model, *conditions)

    if existing:
        for key, value in values.items():
            setattr(existing, key, value)
        db.flush()
        return existing, False

    record = model(**keys, **values)
    db.add(record)
    db.flush()
    return record, True
