"""Service-level tests for office lifecycle and the re-review policy."""
from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from coworking.core.errors import AuthorizationError, NotFoundError, ValidationError
from coworking.models.office import ApprovalStatus
from coworking.repositories import images as images_repo
from coworking.repositories import offices as offices_repo
from coworking.repositories import reservations as reservations_repo
from coworking.repositories import users as users_repo
from coworking.schemas import offices as schemas
from coworking.services import notifications
from coworking.services import offices as offices_service
from coworking.services.notifications import NotificationEvent


class DummySession:
    """Minimal session stub supporting async transaction context."""

    def __init__(self) -> None:
        self.added: list[object] = []

    def add(self, obj: object) -> None:
        self.added.append(obj)

    def begin(self):  # noqa: D401 - mimic SQLAlchemy's async begin
        session = self

        class _Tx:
            async def __aenter__(self_inner):
                return session

            async def __aexit__(self_inner, exc_type, exc, tb):
                return False

        return _Tx()


def _office(**overrides) -> SimpleNamespace:
    data = dict(
        id="office-1",
        user_id="host-1",
        title="Harbour Loft",
        description="Quiet loft",
        lat=25.2,
        lng=55.27,
        address_line1="12 Marina Walk",
        address_line2=None,
        approval_status=ApprovalStatus.APPROVED,
        hidden=False,
        price_per_day=4500,
        monthly_discount=10,
        featured_image_id=None,
        created_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
        updated_at=None,
        deleted_at=None,
    )
    data.update(overrides)
    return SimpleNamespace(**data)


@pytest.fixture
def notify(monkeypatch):
    mock = AsyncMock(return_value=2)
    monkeypatch.setattr(notifications, "dispatcher", SimpleNamespace(notify=mock))
    return mock


@pytest.fixture
def stub_reads(monkeypatch):
    monkeypatch.setattr(offices_repo, "list_tag_ids", AsyncMock(return_value=["tag-wifi"]))
    monkeypatch.setattr(offices_repo, "replace_tags", AsyncMock())
    monkeypatch.setattr(offices_repo, "find_missing_tags", AsyncMock(return_value=[]))
    monkeypatch.setattr(reservations_repo, "count_active", AsyncMock(return_value=0))
    monkeypatch.setattr(users_repo, "list_admin_ids", AsyncMock(return_value=["admin-1", "admin-2"]))


def test_requires_review_only_for_changed_sensitive_fields():
    office = _office()

    assert offices_service.requires_review(office, {"price_per_day": 5000})
    assert offices_service.requires_review(office, {"lat": 25.3})
    assert offices_service.requires_review(office, {"lng": 55.0, "title": "New"})
    assert not offices_service.requires_review(office, {"price_per_day": 4500})
    assert not offices_service.requires_review(office, {"title": "New", "hidden": True})


@pytest.mark.asyncio
async def test_price_change_resets_approval_and_notifies_admins_once(monkeypatch, stub_reads, notify):
    office = _office()
    monkeypatch.setattr(offices_repo, "get_by_id", AsyncMock(return_value=office))

    detail = await offices_service.update_office(
        DummySession(),
        office_id="office-1",
        user_id="host-1",
        payload=schemas.OfficeUpdateRequest(price_per_day=5000),
    )

    assert office.approval_status == ApprovalStatus.PENDING
    assert detail.approval_status == ApprovalStatus.PENDING
    assert detail.price_per_day == 5000
    notify.assert_awaited_once()
    recipients, event, payload = notify.await_args.args
    assert recipients == ["admin-1", "admin-2"]
    assert event is NotificationEvent.OFFICE_PENDING_APPROVAL
    assert payload == {"office_id": "office-1"}


@pytest.mark.asyncio
async def test_title_change_keeps_approval(monkeypatch, stub_reads, notify):
    office = _office()
    monkeypatch.setattr(offices_repo, "get_by_id", AsyncMock(return_value=office))

    detail = await offices_service.update_office(
        DummySession(),
        office_id="office-1",
        user_id="host-1",
        payload=schemas.OfficeUpdateRequest(title="Harbour Loft II"),
    )

    assert detail.title == "Harbour Loft II"
    assert office.approval_status == ApprovalStatus.APPROVED
    notify.assert_not_awaited()
    assert detail.tags == ["tag-wifi"]


@pytest.mark.asyncio
async def test_update_requires_ownership(monkeypatch, stub_reads, notify):
    monkeypatch.setattr(offices_repo, "get_by_id", AsyncMock(return_value=_office()))

    with pytest.raises(AuthorizationError):
        await offices_service.update_office(
            DummySession(),
            office_id="office-1",
            user_id="intruder",
            payload=schemas.OfficeUpdateRequest(title="Mine now"),
        )


@pytest.mark.asyncio
async def test_featured_image_must_belong_to_office(monkeypatch, stub_reads, notify):
    monkeypatch.setattr(offices_repo, "get_by_id", AsyncMock(return_value=_office()))
    monkeypatch.setattr(
        images_repo, "get_by_id", AsyncMock(return_value=SimpleNamespace(id="img-9", office_id="office-2"))
    )

    with pytest.raises(ValidationError) as exc:
        await offices_service.update_office(
            DummySession(),
            office_id="office-1",
            user_id="host-1",
            payload=schemas.OfficeUpdateRequest(featured_image_id="img-9"),
        )

    assert exc.value.field == "featured_image_id"


@pytest.mark.asyncio
async def test_create_office_is_pending_and_notifies_admins(monkeypatch, stub_reads, notify):
    created = _office(approval_status=ApprovalStatus.PENDING)
    create_office = AsyncMock(return_value=created)
    monkeypatch.setattr(offices_repo, "create_office", create_office)
    payload = schemas.OfficeCreateRequest(
        title="Harbour Loft",
        description="Quiet loft",
        lat=25.2,
        lng=55.27,
        address_line1="12 Marina Walk",
        price_per_day=4500,
        monthly_discount=10,
        tags=["tag-wifi", "tag-wifi"],
    )

    detail = await offices_service.create_office(DummySession(), user_id="host-1", payload=payload)

    assert detail.approval_status == ApprovalStatus.PENDING
    assert detail.tags == ["tag-wifi"]
    assert create_office.await_args.kwargs["user_id"] == "host-1"
    assert "tags" not in create_office.await_args.kwargs
    notify.assert_awaited_once()
    assert notify.await_args.args[1] is NotificationEvent.OFFICE_PENDING_APPROVAL


@pytest.mark.asyncio
async def test_create_office_rejects_unknown_tags(monkeypatch, stub_reads, notify):
    monkeypatch.setattr(offices_repo, "find_missing_tags", AsyncMock(return_value=["tag-x"]))
    create_office = AsyncMock()
    monkeypatch.setattr(offices_repo, "create_office", create_office)
    payload = schemas.OfficeCreateRequest(
        title="Loft",
        description="Desc",
        lat=1,
        lng=1,
        address_line1="Street",
        price_per_day=100,
        tags=["tag-x"],
    )

    with pytest.raises(ValidationError) as exc:
        await offices_service.create_office(DummySession(), user_id="host-1", payload=payload)

    assert exc.value.field == "tags"
    create_office.assert_not_awaited()
    notify.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_office_with_active_reservations_rejected(monkeypatch, stub_reads):
    office = _office()
    monkeypatch.setattr(offices_repo, "get_by_id", AsyncMock(return_value=office))
    monkeypatch.setattr(reservations_repo, "count_active", AsyncMock(return_value=1))

    with pytest.raises(ValidationError) as exc:
        await offices_service.delete_office(DummySession(), office_id="office-1", user_id="host-1")

    assert exc.value.field == "office"
    assert office.deleted_at is None


@pytest.mark.asyncio
async def test_delete_office_soft_deletes(monkeypatch, stub_reads):
    office = _office()
    monkeypatch.setattr(offices_repo, "get_by_id", AsyncMock(return_value=office))
    session = DummySession()

    await offices_service.delete_office(session, office_id="office-1", user_id="host-1")

    assert office.deleted_at is not None
    assert office in session.added


@pytest.mark.asyncio
async def test_get_office_includes_active_reservation_count(monkeypatch, stub_reads):
    monkeypatch.setattr(offices_repo, "get_by_id", AsyncMock(return_value=_office()))
    monkeypatch.setattr(reservations_repo, "count_active", AsyncMock(return_value=3))

    detail = await offices_service.get_office(DummySession(), office_id="office-1")

    assert detail.reservations_count == 3
    assert detail.tags == ["tag-wifi"]


@pytest.mark.asyncio
async def test_get_missing_office(monkeypatch):
    monkeypatch.setattr(offices_repo, "get_by_id", AsyncMock(return_value=None))

    with pytest.raises(NotFoundError):
        await offices_service.get_office(DummySession(), office_id="gone")


@pytest.mark.asyncio
async def test_list_offices_passes_requester(monkeypatch):
    search = AsyncMock(return_value=[_office()])
    monkeypatch.setattr(offices_repo, "search_offices", search)
    filters = schemas.OfficeFilters(host_id="host-1")

    response = await offices_service.list_offices(DummySession(), requester_id="host-1", filters=filters)

    assert [item.id for item in response.items] == ["office-1"]
    assert search.await_args.kwargs["requester_id"] == "host-1"
    assert search.await_args.kwargs["host_id"] == "host-1"
