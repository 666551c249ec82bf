"""Office, office image and tag endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import get_session
from ..dependencies import Principal, get_optional_principal, require_scope
from ..schemas import offices as offices_schema
from ..services import images as images_service
from ..services import offices as offices_service

router = APIRouter()


@router.get("/offices", response_model=offices_schema.OfficeListResponse)
async def list_offices(
    filters: Annotated[offices_schema.OfficeFilters, Query()],
    principal: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(get_session),
) -> offices_schema.OfficeListResponse:
    """Return listed offices, newest first."""

    requester_id = principal.user_id if principal else None
    return await offices_service.list_offices(session, requester_id=requester_id, filters=filters)


@router.get("/offices/{office_id}", response_model=offices_schema.OfficeDetail)
async def show_office(
    office_id: str,
    session: AsyncSession = Depends(get_session),
) -> offices_schema.OfficeDetail:
    return await offices_service.get_office(session, office_id=office_id)


@router.post("/offices", response_model=offices_schema.OfficeDetail, status_code=status.HTTP_201_CREATED)
async def create_office(
    payload: offices_schema.OfficeCreateRequest,
    principal: Principal = Depends(require_scope("office.create")),
    session: AsyncSession = Depends(get_session),
) -> offices_schema.OfficeDetail:
    """Create a listing; it stays pending until an admin approves it."""

    return await offices_service.create_office(session, user_id=principal.user_id, payload=payload)


@router.put("/offices/{office_id}", response_model=offices_schema.OfficeDetail)
async def update_office(
    office_id: str,
    payload: offices_schema.OfficeUpdateRequest,
    principal: Principal = Depends(require_scope("office.update")),
    session: AsyncSession = Depends(get_session),
) -> offices_schema.OfficeDetail:
    return await offices_service.update_office(
        session, office_id=office_id, user_id=principal.user_id, payload=payload
    )


@router.delete("/offices/{office_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_office(
    office_id: str,
    principal: Principal = Depends(require_scope("office.delete")),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await offices_service.delete_office(session, office_id=office_id, user_id=principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/offices/{office_id}/images",
    response_model=offices_schema.ImageOut,
    status_code=status.HTTP_201_CREATED,
)
async def upload_office_image(
    office_id: str,
    image: UploadFile = File(...),
    principal: Principal = Depends(require_scope("office.update")),
    session: AsyncSession = Depends(get_session),
) -> offices_schema.ImageOut:
    """Attach an uploaded jpg or png to the office."""

    content = await image.read()
    return await images_service.upload_image(
        session,
        office_id=office_id,
        user_id=principal.user_id,
        filename=image.filename or "",
        content_type=image.content_type,
        content=content,
    )


@router.delete("/offices/{office_id}/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_office_image(
    office_id: str,
    image_id: str,
    principal: Principal = Depends(require_scope("office.update")),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await images_service.delete_image(
        session, office_id=office_id, image_id=image_id, user_id=principal.user_id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/tags", response_model=offices_schema.TagListResponse)
async def list_tags(session: AsyncSession = Depends(get_session)) -> offices_schema.TagListResponse:
    return await offices_service.list_tags(session)
