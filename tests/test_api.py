"""HTTP-level tests for identity, scopes and the error envelope."""
from __future__ import annotations

from datetime import date, datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from coworking.core.errors import ContentionError, ValidationError
from coworking.db.session import get_session
from coworking.main import app
from coworking.models.reservation import ReservationStatus
from coworking.services import reservations as reservations_service

BODY = {"office_id": "office-1", "start_date": "2031-05-01", "end_date": "2031-05-10"}
VISITOR = {"X-User-Id": "visitor-1", "X-Token-Scopes": "reservations.make reservations.show"}


async def _no_session():
    yield SimpleNamespace()


@pytest.fixture
def client():
    app.dependency_overrides[get_session] = _no_session
    transport = ASGITransport(app=app)
    yield AsyncClient(transport=transport, base_url="http://testserver")
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_requires_identity(client):
    async with client:
        response = await client.post("/api/reservations", json=BODY)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_requires_scope(client):
    async with client:
        response = await client.post(
            "/api/reservations",
            json=BODY,
            headers={"X-User-Id": "visitor-1", "X-Token-Scopes": "reservations.show"},
        )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_reservation_returns_snapshot(monkeypatch, client):
    reservation = SimpleNamespace(
        id="res-1",
        office_id="office-1",
        user_id="visitor-1",
        start_date=date(2031, 5, 1),
        end_date=date(2031, 5, 10),
        status=ReservationStatus.ACTIVE,
        price=10000,
        wifi_password="secret",
        created_at=datetime(2031, 4, 1, tzinfo=timezone.utc),
    )
    create = AsyncMock(return_value=reservation)
    monkeypatch.setattr(reservations_service, "create_reservation", create)

    async with client:
        response = await client.post("/api/reservations", json=BODY, headers={"X-User-Id": "visitor-1", "X-Token-Scopes": "*"})

    assert response.status_code == 201
    assert response.json()["price"] == 10000
    assert response.json()["status"] == "active"
    assert create.await_args.kwargs["user_id"] == "visitor-1"
    assert create.await_args.kwargs["start_date"] == date(2031, 5, 1)


@pytest.mark.asyncio
async def test_validation_error_envelope(monkeypatch, client):
    monkeypatch.setattr(
        reservations_service,
        "create_reservation",
        AsyncMock(side_effect=ValidationError("office_id", "You cannot make a reservation on your own office")),
    )

    async with client:
        response = await client.post("/api/reservations", json=BODY, headers=VISITOR)

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == {
        "office_id": ["You cannot make a reservation on your own office"]
    }


@pytest.mark.asyncio
async def test_contention_is_retryable(monkeypatch, client):
    monkeypatch.setattr(reservations_service, "create_reservation", AsyncMock(side_effect=ContentionError()))

    async with client:
        response = await client.post("/api/reservations", json=BODY, headers=VISITOR)

    assert response.status_code == 503
    assert response.headers["retry-after"] == "1"


@pytest.mark.asyncio
async def test_list_reservations_query_filters(monkeypatch, client):
    list_reservations = AsyncMock(return_value=[])
    monkeypatch.setattr(reservations_service, "list_reservations", list_reservations)

    async with client:
        response = await client.get(
            "/api/reservations",
            params={"status": "cancelled", "from_date": "2031-05-01", "to_date": "2031-06-01"},
            headers=VISITOR,
        )

    assert response.status_code == 200
    assert response.json() == {"items": []}
    filters = list_reservations.await_args.kwargs["filters"]
    assert filters.status is ReservationStatus.CANCELLED
    assert filters.to_date == date(2031, 6, 1)
