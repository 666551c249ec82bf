"""Reservation lifecycle: guarded creation, cancellation and listing.

Creation runs a check-then-insert sequence that must be atomic per office. It
is serialised with the office lease from ``locks``: the overlap query and the
insert happen inside one transaction which commits before the lease is given
back. Notifications go out only after the lease is released.
"""
from __future__ import annotations

import logging
from datetime import date
from secrets import token_urlsafe

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import AuthorizationError, ContentionError, NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.office import Office
from ..models.reservation import Reservation, ReservationStatus
from ..repositories import offices as offices_repo
from ..repositories import reservations as reservations_repo
from ..schemas import reservations as schemas
from . import locks, notifications
from .dates import DateRange, today
from .notifications import NotificationEvent
from .pricing import calculate_price

logger = logging.getLogger(__name__)

WIFI_PASSWORD_BYTES = 12


async def create_reservation(
    session: AsyncSession,
    *,
    office_id: str,
    user_id: str,
    start_date: date,
    end_date: date,
) -> Reservation:
    """Reserve ``office_id`` for ``user_id`` over the inclusive date range."""

    _validate_dates(start_date, end_date)

    async with session.begin():
        office = await offices_repo.get_by_id(session, office_id)
        _ensure_bookable(office, user_id)

    candidate = DateRange(start_date, end_date)
    lock_key = locks.office_lock_key(office.id)

    try:
        async with locks.office_locks.hold(lock_key, wait=settings.reservation_lock_wait_seconds):
            logger.debug("Checking availability of office %s for %s..%s", office.id, start_date, end_date)
            async with session.begin():
                reservation = await _check_and_insert(session, office, user_id, candidate)
    except locks.LockTimeout as exc:
        logger.warning("Gave up waiting for %s after %.1fs", exc.key, exc.wait)
        raise ContentionError("Office is busy, please retry") from exc

    logger.info(
        "Reservation %s created for office %s (%s..%s, price=%s)",
        reservation.id,
        office.id,
        start_date,
        end_date,
        reservation.price,
    )

    payload = {"reservation_id": reservation.id, "office_id": office.id}
    await notifications.dispatcher.notify([user_id], NotificationEvent.NEW_USER_RESERVATION, payload)
    await notifications.dispatcher.notify([office.user_id], NotificationEvent.NEW_HOST_RESERVATION, payload)
    return reservation


async def cancel_reservation(
    session: AsyncSession,
    *,
    reservation_id: str,
    user_id: str,
) -> Reservation:
    """Cancel an upcoming ACTIVE reservation on behalf of its visitor.

    No office lease is taken: cancelling can only free calendar time.
    """

    async with session.begin():
        reservation = await reservations_repo.get_by_id(session, reservation_id, for_update=True)
        if reservation is None:
            raise NotFoundError("Reservation not found")

        if (
            reservation.user_id != user_id
            or reservation.status != ReservationStatus.ACTIVE
            or reservation.start_date <= today()
        ):
            raise ValidationError("reservation", "You cannot cancel this reservation")

        reservation.status = ReservationStatus.CANCELLED
        reservation.updated_at = utcnow()
        session.add(reservation)

    logger.info("Reservation %s cancelled by %s", reservation.id, user_id)
    return reservation


async def get_reservation(
    session: AsyncSession,
    *,
    reservation_id: str,
    user_id: str,
) -> Reservation:
    """Return a reservation visible to its visitor or the office host."""

    async with session.begin():
        reservation = await reservations_repo.get_by_id(session, reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation not found")
        if reservation.user_id == user_id:
            return reservation

        office = await offices_repo.get_by_id(session, reservation.office_id, include_deleted=True)
        if office is None or office.user_id != user_id:
            raise AuthorizationError("You cannot view this reservation")
    return reservation


async def list_reservations(
    session: AsyncSession,
    *,
    user_id: str,
    filters: schemas.ReservationFilters,
) -> list[Reservation]:
    """Return the requester's reservations, ordered by id."""

    if (filters.from_date is None) != (filters.to_date is None):
        missing = "to_date" if filters.to_date is None else "from_date"
        raise ValidationError(missing, f"The {missing} field is required with a date range")
    if filters.from_date is not None and filters.to_date <= filters.from_date:
        raise ValidationError("to_date", "The to_date must be a date after from_date")

    async with session.begin():
        return await reservations_repo.list_for_user(
            session,
            user_id=user_id,
            filters=filters,
            limit=filters.limit or settings.reservations_page_size,
            offset=filters.offset,
        )


async def notify_due_reservations(session: AsyncSession, *, day: date | None = None) -> int:
    """Tell visitors and hosts about ACTIVE reservations starting on ``day``."""

    day = day or today()
    async with session.begin():
        due = await reservations_repo.list_starting_on(session, day=day)

    for reservation, owner_id in due:
        payload = {"reservation_id": reservation.id, "office_id": reservation.office_id}
        await notifications.dispatcher.notify(
            [reservation.user_id], NotificationEvent.USER_RESERVATION_STARTING, payload
        )
        await notifications.dispatcher.notify([owner_id], NotificationEvent.HOST_RESERVATION_STARTING, payload)

    logger.info("Sent starting notifications for %d reservations on %s", len(due), day)
    return len(due)


async def _check_and_insert(
    session: AsyncSession,
    office: Office,
    user_id: str,
    candidate: DateRange,
) -> Reservation:
    """Must run while holding the office lease."""

    active = await reservations_repo.list_active_between(
        session,
        office_id=office.id,
        start_date=candidate.start,
        end_date=candidate.end,
    )
    if any(candidate.overlaps(DateRange(r.start_date, r.end_date)) for r in active):
        logger.info("Office %s already booked within %s..%s", office.id, candidate.start, candidate.end)
        raise ValidationError("office_id", "You cannot make a reservation during this time")

    price = calculate_price(candidate.days, office.price_per_day, office.monthly_discount)

    return await reservations_repo.create_reservation(
        session,
        office_id=office.id,
        user_id=user_id,
        start_date=candidate.start,
        end_date=candidate.end,
        price=price,
        wifi_password=token_urlsafe(WIFI_PASSWORD_BYTES),
    )


def _validate_dates(start_date: date, end_date: date) -> None:
    if start_date <= today():
        raise ValidationError("start_date", "The start date must be a date after today")
    if end_date <= start_date:
        raise ValidationError("end_date", "The end date must be a date after start date")


def _ensure_bookable(office: Office | None, user_id: str) -> None:
    # A missing office is reported on the field, not as a 404.
    if office is None:
        raise ValidationError("office_id", "Invalid office_id")
    if office.user_id == user_id:
        raise ValidationError("office_id", "You cannot make a reservation on your own office")
    if not office.is_bookable:
        raise ValidationError("office_id", "You cannot make a reservation on a hidden office")
