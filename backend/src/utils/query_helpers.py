"""
Query helper utilities for database operations.

This module provides shared utilities for common database query patterns,
particularly the upsert-on-conflict primitive used for operating hours and
daily availability rows.
"""

import logging
from typing import Any, Dict, List, Sequence, Type

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from core.database import Base

logger = logging.getLogger(__name__)


def upsert_rows(
    db: Session,
    model: Type[Base],
    rows: List[Dict[str, Any]],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
) -> None:
    """
    Insert rows, updating selected columns when the conflict key already exists.

    Uses the dialect's native ``INSERT ... ON CONFLICT DO UPDATE`` so the
    write is a single statement. Columns not listed in ``update_columns``
    keep their stored value on conflict (e.g. live booking counters).

    Args:
        db: Database session
        model: Mapped model class
        rows: Column/value mappings, one per row
        conflict_columns: Columns of the unique constraint to conflict on
        update_columns: Columns overwritten from the incoming row on conflict

    Example:
        ```python
        upsert_rows(
            db, OperatingHours, rows,
            conflict_columns=["business_id", "day_of_week"],
            update_columns=["open_time", "close_time", "is_closed"],
        )
        ```
    """
    if not rows:
        return

    dialect_name = db.get_bind().dialect.name
    if dialect_name == "postgresql":
        insert_fn = postgresql_insert
    elif dialect_name == "sqlite":
        insert_fn = sqlite_insert
    else:
        raise NotImplementedError(f"Upsert is not supported for dialect: {dialect_name}")

    stmt = insert_fn(model).values(rows)
    set_ = {column: stmt.excluded[column] for column in update_columns}
    # ON CONFLICT DO UPDATE bypasses onupdate hooks
    if "updated_at" in model.__table__.columns:
        set_["updated_at"] = func.now()
    stmt = stmt.on_conflict_do_update(
        index_elements=list(conflict_columns),
        set_=set_,
    )
    db.execute(stmt)
    logger.debug(f"Upserted {len(rows)} {model.__tablename__} rows")
