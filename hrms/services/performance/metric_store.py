from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import select

# Unique-key races retry the whole transaction once
STORE_ATTEMPTS = 2


def key_conditions(model, key: Dict[str, Any]) -> List:
    """Equality on every key column; NULL never equals NULL in SQL, so None becomes IS NULL"""
    conditions = []
    for name, value in key.items():
        column = getattr(model, name)
        conditions.append(column.is_(None) if value is None else column == value)
    return conditions


async def upsert_metric(session, model, key: Dict[str, Any], values: Dict[str, Any]):
    """
    Insert or overwrite the metric row identified by key.

    Flushes but does not commit; the caller owns the transaction. A row
    inserted concurrently for the same key surfaces as IntegrityError on
    flush, and the caller reruns the transaction so the select finds it.
    """
    result = await session.execute(select(model).where(*key_conditions(model, key)))
    row = result.scalars().first()

    calculated_at = datetime.now(timezone.utc)
    if row is None:
        row = model(**key, **values, calculated_at=calculated_at)
        session.add(row)
    else:
        for name, value in values.items():
            setattr(row, name, value)
        row.calculated_at = calculated_at

    await session.flush()
    return row
