"""Reservation persistence helpers."""
from __future__ import annotations

from datetime import date
from typing import Protocol
from uuid import uuid4

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.office import Office
from ..models.reservation import Reservation, ReservationStatus


class ReservationFiltersProtocol(Protocol):
    """Duck-type for listing filters to avoid pydantic at the repo layer."""

    status: ReservationStatus | None
    office_id: str | None
    from_date: date | None
    to_date: date | None


def _intersecting(stmt: Select, start: date, end: date) -> Select:
    # Inclusive ranges: [a, b] and [c, d] intersect iff a <= d and c <= b.
    return stmt.where(Reservation.start_date <= end, Reservation.end_date >= start)


async def get_by_id(
    session: AsyncSession,
    reservation_id: str,
    *,
    for_update: bool = False,
) -> Reservation | None:
    """Return a reservation by identifier, optionally row-locked until commit."""

    stmt: Select[tuple[Reservation]] = select(Reservation).where(Reservation.id == reservation_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_active_between(
    session: AsyncSession,
    *,
    office_id: str,
    start_date: date,
    end_date: date,
) -> list[Reservation]:
    """Return ACTIVE reservations of the office that intersect the inclusive window."""

    stmt = select(Reservation).where(
        Reservation.office_id == office_id,
        Reservation.status == ReservationStatus.ACTIVE,
    )
    stmt = _intersecting(stmt, start_date, end_date).order_by(Reservation.start_date.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_active(session: AsyncSession, *, office_id: str) -> int:
    """Return the number of ACTIVE reservations for the office."""

    stmt = select(func.count(Reservation.id)).where(
        Reservation.office_id == office_id,
        Reservation.status == ReservationStatus.ACTIVE,
    )
    result = await session.execute(stmt)
    return result.scalar_one()


async def create_reservation(
    session: AsyncSession,
    *,
    office_id: str,
    user_id: str,
    start_date: date,
    end_date: date,
    price: int,
    wifi_password: str,
) -> Reservation:
    """Persist a new ACTIVE reservation."""

    now = utcnow()
    reservation = Reservation(
        id=str(uuid4()),
        office_id=office_id,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        status=ReservationStatus.ACTIVE,
        price=price,
        wifi_password=wifi_password,
        created_at=now,
        updated_at=now,
    )
    session.add(reservation)
    await session.flush()
    return reservation


async def list_for_user(
    session: AsyncSession,
    *,
    user_id: str,
    filters: ReservationFiltersProtocol,
    limit: int,
    offset: int = 0,
) -> list[Reservation]:
    """Return the visitor's reservations matching the filters, ordered by id."""

    stmt = select(Reservation).where(Reservation.user_id == user_id)
    if filters.status is not None:
        stmt = stmt.where(Reservation.status == filters.status)
    if filters.office_id:
        stmt = stmt.where(Reservation.office_id == filters.office_id)
    if filters.from_date is not None and filters.to_date is not None:
        stmt = _intersecting(stmt, filters.from_date, filters.to_date)

    stmt = stmt.order_by(Reservation.id.asc()).offset(offset).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_starting_on(session: AsyncSession, *, day: date) -> list[tuple[Reservation, str]]:
    """Return ACTIVE reservations starting on ``day`` with their office owner id."""

    stmt = (
        select(Reservation, Office.user_id)
        .join(Office, Office.id == Reservation.office_id)
        .where(
            Reservation.status == ReservationStatus.ACTIVE,
            Reservation.start_date == day,
        )
        .order_by(Reservation.id.asc())
    )
    result = await session.execute(stmt)
    return [(reservation, owner_id) for reservation, owner_id in result.all()]
