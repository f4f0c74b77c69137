"""Persistence Helpers: the fetch/commit steps every route handler shares.

Invariants:
    - fetch_one_or_404 raises the same ResourceNotFoundError for absent and
      foreign-tenant rows (the scoping predicate already excluded the latter)
    - commit_or_conflict maps a unique-constraint violation to ConflictError;
      the store constraint is authoritative, handler pre-checks are advisory
    - count_grouped returns 0 for ids with no rows
"""

import logging
from collections.abc import Iterable

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from schoolhub.core.errors import ConflictError, ResourceNotFoundError

logger = logging.getLogger(__name__)


async def fetch_one_or_404(
    db: AsyncSession, stmt: Select, resource: str, resource_id: str | None = None,
):
    """Execute a scoped statement and return its single entity or raise 404."""
    result = await db.execute(stmt)
    entity = result.unique().scalar_one_or_none()
    if entity is None:
        raise ResourceNotFoundError(resource, resource_id)
    return entity


async def fetch_all(db: AsyncSession, stmt: Select) -> list:
    result = await db.execute(stmt)
    return list(result.unique().scalars().all())


async def commit_or_conflict(db: AsyncSession, conflict_message: str) -> None:
    """Commit; a concurrent duplicate that slipped past the pre-check becomes a 400."""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Unique constraint rejected write: {e.orig}")
        raise ConflictError(conflict_message)


async def count_grouped(
    db: AsyncSession, fk_column: InstrumentedAttribute, ids: Iterable[str],
) -> dict[str, int]:
    """COUNT(*) of rows per foreign-key value, e.g. students per section."""
    ids = list(ids)
    if not ids:
        return {}
    result = await db.execute(
        select(fk_column, func.count())
        .where(fk_column.in_(ids))
        .group_by(fk_column),
    )
    counts = {key: count for key, count in result.all()}
    return {i: counts.get(i, 0) for i in ids}
