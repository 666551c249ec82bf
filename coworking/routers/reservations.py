"""Visitor reservation endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..dependencies import Principal, require_scope
from ..schemas import reservations as reservations_schema
from ..services import reservations as reservations_service

router = APIRouter()


@router.get("", response_model=reservations_schema.ReservationListResponse)
async def list_reservations(
    filters: Annotated[reservations_schema.ReservationFilters, Query()],
    principal: Principal = Depends(require_scope("reservations.show")),
    session: AsyncSession = Depends(get_session),
) -> reservations_schema.ReservationListResponse:
    """Return the requester's reservations."""

    reservations = await reservations_service.list_reservations(
        session, user_id=principal.user_id, filters=filters
    )
    return reservations_schema.ReservationListResponse(
        items=[reservations_schema.ReservationOut.model_validate(item) for item in reservations]
    )


@router.post("", response_model=reservations_schema.ReservationOut, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: reservations_schema.ReservationCreateRequest,
    principal: Principal = Depends(require_scope("reservations.make")),
    session: AsyncSession = Depends(get_session),
) -> reservations_schema.ReservationOut:
    """Reserve an office for a date range."""

    reservation = await reservations_service.create_reservation(
        session,
        office_id=payload.office_id,
        user_id=principal.user_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    return reservations_schema.ReservationOut.model_validate(reservation)


@router.get("/{reservation_id}", response_model=reservations_schema.ReservationOut)
async def get_reservation(
    reservation_id: str,
    principal: Principal = Depends(require_scope("reservations.show")),
    session: AsyncSession = Depends(get_session),
) -> reservations_schema.ReservationOut:
    reservation = await reservations_service.get_reservation(
        session, reservation_id=reservation_id, user_id=principal.user_id
    )
    return reservations_schema.ReservationOut.model_validate(reservation)


@router.post("/{reservation_id}/cancel", response_model=reservations_schema.ReservationOut)
async def cancel_reservation(
    reservation_id: str,
    principal: Principal = Depends(require_scope("reservations.cancel")),
    session: AsyncSession = Depends(get_session),
) -> reservations_schema.ReservationOut:
    """Cancel an upcoming reservation."""

    reservation = await reservations_service.cancel_reservation(
        session, reservation_id=reservation_id, user_id=principal.user_id
    )
    return reservations_schema.ReservationOut.model_validate(reservation)
