"""Schemas for reservation endpoints."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models.reservation import ReservationStatus


class ReservationCreateRequest(BaseModel):
    office_id: str
    start_date: date
    end_date: date


class ReservationFilters(BaseModel):
    status: ReservationStatus | None = None
    office_id: str | None = None
    from_date: date | None = None
    to_date: date | None = None
    limit: int | None = Field(default=None, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class ReservationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    office_id: str
    user_id: str
    start_date: date
    end_date: date
    status: ReservationStatus
    price: int
    wifi_password: str
    created_at: datetime


class ReservationListResponse(BaseModel):
    items: list[ReservationOut]
