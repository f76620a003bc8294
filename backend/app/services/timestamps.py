"""Timestamp Records — bump and read per-resource-type cache invalidation markers.

Invariants:
    - touch() upserts one row per distinct type and sets updated_at = now
    - touch() flushes but never commits: the bump lands in the caller's transaction,
      so a rolled-back mutation never advertises a change
    - last_updated() returns epoch ms, or now when the type has no row yet
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetimes import to_epoch_ms, utc_now
from app.core.domain_types import TimestampType
from app.models.timestamp import TimestampRecord


async def touch(db: AsyncSession, *types: TimestampType | str) -> None:
    now = utc_now()
    for type_ in dict.fromkeys(TimestampType(t).value for t in types):
        record = await db.get(TimestampRecord, type_)
        if record is None:
            db.add(TimestampRecord(type=type_, created_at=now, updated_at=now))
        else:
            record.updated_at = now
    await db.flush()


async def last_updated(db: AsyncSession, type_name: str) -> int:
    record = await db.get(TimestampRecord, type_name.strip().lower())
    if record is None:
        return to_epoch_ms(utc_now())
    return to_epoch_ms(record.updated_at)
