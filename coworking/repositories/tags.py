"""Tag repository helpers."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.tag import Tag


async def list_tags(session: AsyncSession) -> list[Tag]:
    """Return all tags alphabetically."""

    result = await session.execute(select(Tag).order_by(Tag.name.asc()))
    return list(result.scalars().all())
