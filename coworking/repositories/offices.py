"""Data access helpers for office listings."""
from __future__ import annotations

from typing import Iterable
from uuid import uuid4

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.office import ApprovalStatus, Office, office_tags
from ..models.reservation import Reservation
from ..models.tag import Tag


async def get_by_id(session: AsyncSession, office_id: str, *, include_deleted: bool = False) -> Office | None:
    """Return an office by identifier, skipping soft-deleted rows by default."""

    office = await session.get(Office, office_id)
    if office is None:
        return None
    if office.deleted_at is not None and not include_deleted:
        return None
    return office


async def search_offices(
    session: AsyncSession,
    *,
    requester_id: str | None,
    host_id: str | None,
    visitor_id: str | None,
    limit: int,
    offset: int = 0,
) -> list[Office]:
    """Return listed offices newest first.

    A host browsing their own offices also sees hidden and pending ones.
    """

    stmt = select(Office).where(Office.deleted_at.is_(None))

    if not (host_id and host_id == requester_id):
        stmt = stmt.where(
            Office.approval_status == ApprovalStatus.APPROVED,
            Office.hidden.is_(False),
        )
    if host_id:
        stmt = stmt.where(Office.user_id == host_id)
    if visitor_id:
        visited = select(Reservation.office_id).where(Reservation.user_id == visitor_id)
        stmt = stmt.where(Office.id.in_(visited))

    stmt = stmt.order_by(Office.created_at.desc(), Office.id.desc()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_office(session: AsyncSession, *, user_id: str, **fields: object) -> Office:
    """Persist a new office in PENDING state."""

    now = utcnow()
    office = Office(
        id=str(uuid4()),
        user_id=user_id,
        approval_status=ApprovalStatus.PENDING,
        created_at=now,
        updated_at=now,
        **fields,
    )
    session.add(office)
    await session.flush()
    return office


async def list_tag_ids(session: AsyncSession, office_id: str) -> list[str]:
    stmt = select(office_tags.c.tag_id).where(office_tags.c.office_id == office_id).order_by(office_tags.c.tag_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def replace_tags(session: AsyncSession, office_id: str, tag_ids: Iterable[str]) -> None:
    """Set the office's tags to exactly ``tag_ids``."""

    await session.execute(delete(office_tags).where(office_tags.c.office_id == office_id))
    rows = [{"office_id": office_id, "tag_id": tag_id} for tag_id in dict.fromkeys(tag_ids)]
    if rows:
        await session.execute(insert(office_tags), rows)


async def find_missing_tags(session: AsyncSession, tag_ids: Iterable[str]) -> list[str]:
    """Return the requested tag ids that do not exist."""

    wanted = list(dict.fromkeys(tag_ids))
    if not wanted:
        return []
    stmt = select(Tag.id).where(Tag.id.in_(wanted))
    result = await session.execute(stmt)
    found = set(result.scalars().all())
    return [tag_id for tag_id in wanted if tag_id not in found]
