"""Reservation model."""
from __future__ import annotations

from datetime import date, datetime
import enum

from sqlalchemy import CheckConstraint, Date, DateTime, Enum, ForeignKey, Index, Integer, String

from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class ReservationStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class Reservation(Base):
    """Date-ranged booking of an office by a visitor."""

    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="date_order"),
        CheckConstraint("price >= 0", name="price_positive"),
        Index("ix_reservations_office_status_dates", "office_id", "status", "start_date", "end_date"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    office_id: Mapped[str] = mapped_column(ForeignKey("offices.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[ReservationStatus] = mapped_column(
        Enum(ReservationStatus, name="reservation_status"), default=ReservationStatus.ACTIVE, nullable=False
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    wifi_password: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
