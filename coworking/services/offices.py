"""Office listing lifecycle and the approval re-review policy."""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import AuthorizationError, NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.office import ApprovalStatus, Office
from ..repositories import images as images_repo
from ..repositories import offices as offices_repo
from ..repositories import reservations as reservations_repo
from ..repositories import tags as tags_repo
from ..repositories import users as users_repo
from ..schemas import offices as schemas
from . import notifications
from .notifications import NotificationEvent

logger = logging.getLogger(__name__)

# Editing any of these sends the office back to moderation.
REVIEW_FIELDS = frozenset({"lat", "lng", "price_per_day"})

NULLABLE_FIELDS = frozenset({"address_line2", "featured_image_id"})


def requires_review(office: Office, changes: Mapping[str, Any]) -> bool:
    """Return True when ``changes`` alters a field that needs admin approval."""

    return any(field in changes and getattr(office, field) != changes[field] for field in REVIEW_FIELDS)


async def create_office(
    session: AsyncSession,
    *,
    user_id: str,
    payload: schemas.OfficeCreateRequest,
) -> schemas.OfficeDetail:
    """Create a listing in PENDING state and ask admins to review it."""

    data = payload.model_dump()
    tag_ids = list(dict.fromkeys(data.pop("tags")))

    async with session.begin():
        await _validate_tags(session, tag_ids)
        office = await offices_repo.create_office(session, user_id=user_id, **data)
        await offices_repo.replace_tags(session, office.id, tag_ids)
        admin_ids = await users_repo.list_admin_ids(session)

    logger.info("Office %s created by %s, pending approval", office.id, user_id)
    await _request_review(office, admin_ids)
    return _to_detail(office, tag_ids, reservations_count=0)


async def update_office(
    session: AsyncSession,
    *,
    office_id: str,
    user_id: str,
    payload: schemas.OfficeUpdateRequest,
) -> schemas.OfficeDetail:
    """Apply a partial update, resetting approval when a reviewed field changes."""

    changes = payload.model_dump(exclude_unset=True)
    tag_ids = changes.pop("tags", None)
    changes = {
        field: value for field, value in changes.items() if value is not None or field in NULLABLE_FIELDS
    }

    admin_ids: list[str] = []
    async with session.begin():
        office = await get_owned_office(session, office_id=office_id, user_id=user_id)

        featured_image_id = changes.get("featured_image_id")
        if featured_image_id is not None:
            image = await images_repo.get_by_id(session, featured_image_id)
            if image is None or image.office_id != office.id:
                raise ValidationError("featured_image_id", "The featured image must belong to this office")

        if tag_ids is not None:
            tag_ids = list(dict.fromkeys(tag_ids))
            await _validate_tags(session, tag_ids)
            await offices_repo.replace_tags(session, office.id, tag_ids)
        else:
            tag_ids = await offices_repo.list_tag_ids(session, office.id)

        needs_review = requires_review(office, changes)
        for field, value in changes.items():
            setattr(office, field, value)
        if needs_review:
            office.approval_status = ApprovalStatus.PENDING
            admin_ids = await users_repo.list_admin_ids(session)
        office.updated_at = utcnow()
        session.add(office)

        reservations_count = await reservations_repo.count_active(session, office_id=office.id)

    if needs_review:
        logger.info("Office %s changed reviewed fields, back to pending", office.id)
        await _request_review(office, admin_ids)
    return _to_detail(office, tag_ids, reservations_count=reservations_count)


async def delete_office(session: AsyncSession, *, office_id: str, user_id: str) -> None:
    """Soft-delete an office that has no active reservations."""

    async with session.begin():
        office = await get_owned_office(session, office_id=office_id, user_id=user_id, action="delete")
        if await reservations_repo.count_active(session, office_id=office.id) > 0:
            raise ValidationError("office", "Cannot delete this office")
        now = utcnow()
        office.deleted_at = now
        office.updated_at = now
        session.add(office)

    logger.info("Office %s deleted by %s", office_id, user_id)


async def get_office(session: AsyncSession, *, office_id: str) -> schemas.OfficeDetail:
    async with session.begin():
        office = await offices_repo.get_by_id(session, office_id)
        if office is None:
            raise NotFoundError("Office not found")
        tag_ids = await offices_repo.list_tag_ids(session, office.id)
        reservations_count = await reservations_repo.count_active(session, office_id=office.id)
    return _to_detail(office, tag_ids, reservations_count=reservations_count)


async def list_offices(
    session: AsyncSession,
    *,
    requester_id: str | None,
    filters: schemas.OfficeFilters,
) -> schemas.OfficeListResponse:
    async with session.begin():
        offices = await offices_repo.search_offices(
            session,
            requester_id=requester_id,
            host_id=filters.host_id,
            visitor_id=filters.visitor_id,
            limit=filters.limit,
            offset=filters.offset,
        )
    return schemas.OfficeListResponse(items=[schemas.OfficeOut.model_validate(office) for office in offices])


async def list_tags(session: AsyncSession) -> schemas.TagListResponse:
    async with session.begin():
        tags = await tags_repo.list_tags(session)
    return schemas.TagListResponse(items=[schemas.TagOut.model_validate(tag) for tag in tags])


async def get_owned_office(
    session: AsyncSession,
    *,
    office_id: str,
    user_id: str,
    action: str = "update",
) -> Office:
    """Load an office the requester owns; call inside an open transaction."""

    office = await offices_repo.get_by_id(session, office_id)
    if office is None:
        raise NotFoundError("Office not found")
    if office.user_id != user_id:
        raise AuthorizationError(f"You cannot {action} this office")
    return office


async def _validate_tags(session: AsyncSession, tag_ids: Iterable[str]) -> None:
    missing = await offices_repo.find_missing_tags(session, tag_ids)
    if missing:
        raise ValidationError("tags", f"Unknown tags: {', '.join(missing)}")


async def _request_review(office: Office, admin_ids: list[str]) -> None:
    await notifications.dispatcher.notify(
        admin_ids,
        NotificationEvent.OFFICE_PENDING_APPROVAL,
        {"office_id": office.id},
    )


def _to_detail(office: Office, tag_ids: list[str], *, reservations_count: int) -> schemas.OfficeDetail:
    detail = schemas.OfficeDetail.model_validate(office)
    detail.tags = list(tag_ids)
    detail.reservations_count = reservations_count
    return detail
