"""Office image upload and removal."""
from __future__ import annotations

import asyncio
import logging
from pathlib import PurePosixPath

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import NotFoundError, ValidationError
from ..repositories import images as images_repo
from ..schemas import offices as schemas
from . import storage
from .offices import get_owned_office

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg": {".jpg", ".jpeg"}, "image/png": {".png"}}


async def upload_image(
    session: AsyncSession,
    *,
    office_id: str,
    user_id: str,
    filename: str,
    content_type: str | None,
    content: bytes,
) -> schemas.ImageOut:
    """Store an image blob and attach it to the requester's office."""

    async with session.begin():
        office = await get_owned_office(session, office_id=office_id, user_id=user_id)

    _validate_upload(filename, content_type, content)
    loop = asyncio.get_running_loop()
    path = await loop.run_in_executor(None, storage.blob_store.store, filename, content)

    try:
        async with session.begin():
            image = await images_repo.create_image(session, office_id=office.id, path=path)
    except Exception:
        await loop.run_in_executor(None, storage.blob_store.delete, path)
        raise

    logger.info("Stored image %s for office %s at %s", image.id, office.id, path)
    return schemas.ImageOut.model_validate(image)


async def delete_image(
    session: AsyncSession,
    *,
    office_id: str,
    image_id: str,
    user_id: str,
) -> None:
    """Remove an image unless it is the office's only or featured image."""

    async with session.begin():
        office = await get_owned_office(session, office_id=office_id, user_id=user_id)
        image = await images_repo.get_by_id(session, image_id)
        if image is None or image.office_id != office.id:
            raise NotFoundError("Image not found")
        if await images_repo.count_for_office(session, office.id) == 1:
            raise ValidationError("image", "Cannot delete the only image")
        if office.featured_image_id == image.id:
            raise ValidationError("image", "Cannot delete the featured image")
        path = image.path
        await images_repo.delete_image(session, image)

    await asyncio.get_running_loop().run_in_executor(None, storage.blob_store.delete, path)


def _validate_upload(filename: str, content_type: str | None, content: bytes) -> None:
    suffixes = ALLOWED_CONTENT_TYPES.get((content_type or "").lower())
    if suffixes is None or PurePosixPath(filename).suffix.lower() not in suffixes:
        raise ValidationError("image", "The image must be a file of type: jpg, png")
    if not content:
        raise ValidationError("image", "The image must not be empty")
    if len(content) > settings.max_image_bytes:
        raise ValidationError("image", f"The image must not be greater than {settings.max_image_bytes} bytes")
