"""
Atomic insert-or-update keyed by a unique constraint.

Concurrent deliveries for the same Shopify ID are not locked in-process;
the database resolves the race with INSERT ... ON CONFLICT DO UPDATE.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from ..extensions import db

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    'postgresql': pg_insert,
    'sqlite': sqlite_insert,
}


def upsert(model, values: Dict[str, Any], index_elements: Iterable[str],
           update_fields: Iterable[str], session=None):
    """
    Insert a row, or update ``update_fields`` on the row matching ``index_elements``.

    Runs inside the caller's transaction; the caller commits.

    Args:
        model: Mapped model class with a unique constraint over index_elements
        values: Column values for the insert
        index_elements: Column names forming the conflict target
        update_fields: Column names overwritten when the row exists
        session: SQLAlchemy session (defaults to db.session)

    Returns:
        The persisted model instance, refreshed from the database
    """
    session = session or db.session
    index_elements = list(index_elements)
    update_fields = list(update_fields)
    now = datetime.utcnow()

    insert_values = dict(values)
    if hasattr(model, 'created_at'):
        insert_values.setdefault('created_at', now)
    if hasattr(model, 'updated_at'):
        insert_values.setdefault('updated_at', now)
        if 'updated_at' not in update_fields:
            update_fields.append('updated_at')

    dialect = session.get_bind().dialect.name
    dialect_insert = _DIALECT_INSERTS.get(dialect)

    if dialect_insert is not None:
        stmt = dialect_insert(model).values(**insert_values)
        stmt = stmt.on_conflict_do_update(
            index_elements=index_elements,
            set_={field: stmt.excluded[field] for field in update_fields},
        )
        session.execute(stmt)
    else:
        logger.debug(f'No native upsert for dialect {dialect}, using select-then-write')
        existing = session.execute(
            select(model).filter_by(**{k: values[k] for k in index_elements})
        ).scalar_one_or_none()
        if existing is None:
            session.add(model(**insert_values))
        else:
            for field in update_fields:
                setattr(existing, field, insert_values[field])
        session.flush()

    return session.execute(
        select(model)
        .filter_by(**{k: values[k] for k in index_elements})
        .execution_options(populate_existing=True)
    ).scalar_one()
