"""Expose ORM models."""
from .image import Image
from .office import ApprovalStatus, Office, office_tags
from .reservation import Reservation, ReservationStatus
from .tag import Tag
from .user import User

__all__ = [
    "ApprovalStatus",
    "Image",
    "Office",
    "Reservation",
    "ReservationStatus",
    "Tag",
    "User",
    "office_tags",
]
