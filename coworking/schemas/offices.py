"""Schemas for office, image and tag endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models.office import ApprovalStatus


class OfficeCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    address_line1: str = Field(min_length=1)
    address_line2: str | None = None
    hidden: bool = False
    price_per_day: int = Field(ge=100)
    monthly_discount: int = Field(default=0, ge=0, le=100)
    tags: list[str] = Field(default_factory=list)


class OfficeUpdateRequest(BaseModel):
    """Partial update; only fields explicitly sent are applied."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)
    address_line1: str | None = Field(default=None, min_length=1)
    address_line2: str | None = None
    hidden: bool | None = None
    price_per_day: int | None = Field(default=None, ge=100)
    monthly_discount: int | None = Field(default=None, ge=0, le=100)
    featured_image_id: str | None = None
    tags: list[str] | None = None


class OfficeFilters(BaseModel):
    host_id: str | None = None
    visitor_id: str | None = None
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class OfficeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    title: str
    description: str
    lat: float
    lng: float
    address_line1: str
    address_line2: str | None = None
    approval_status: ApprovalStatus
    hidden: bool
    price_per_day: int
    monthly_discount: int
    featured_image_id: str | None = None
    created_at: datetime


class OfficeDetail(OfficeOut):
    tags: list[str] = Field(default_factory=list)
    reservations_count: int = 0


class OfficeListResponse(BaseModel):
    items: list[OfficeOut]


class ImageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    office_id: str
    path: str


class TagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class TagListResponse(BaseModel):
    items: list[TagOut]
