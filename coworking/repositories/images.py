"""Office image persistence helpers."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.image import Image


async def get_by_id(session: AsyncSession, image_id: str) -> Image | None:
    return await session.get(Image, image_id)


async def count_for_office(session: AsyncSession, office_id: str) -> int:
    stmt = select(func.count(Image.id)).where(Image.office_id == office_id)
    result = await session.execute(stmt)
    return result.scalar_one()


async def create_image(session: AsyncSession, *, office_id: str, path: str) -> Image:
    """Persist an image row pointing at a stored blob."""

    image = Image(id=str(uuid4()), office_id=office_id, path=path, created_at=utcnow())
    session.add(image)
    await session.flush()
    return image


async def delete_image(session: AsyncSession, image: Image) -> None:
    await session.delete(image)
    await session.flush()
