"""
Tests for rental_admin/deps.py: get_current_admin and the lifecycle wiring.
These tests use the real dep functions (no overrides) to get coverage.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from rental_admin.deps import (
    CurrentAdmin,
    get_booking_transitions,
    get_current_admin,
    get_invoice_service,
    get_otp_store,
)
from rental_admin.invoice import InvoiceService
from rental_admin.lifecycle import Actor
from rental_admin.otp import InMemoryOtpStore
from rental_admin.transitions import BookingTransitions

from .factories import ADMIN_EMAIL, ADMIN_ID, ADMIN_NAME, ADMIN_ROLE, TOKEN, admin_user

CRUD_PATH = "rental_admin.deps.admin_crud"


def _whoami_app() -> FastAPI:
    app = FastAPI()

    @app.get("/whoami")
    async def whoami(admin: CurrentAdmin = Depends(get_current_admin)):
        return {"id": admin.id, "name": admin.name, "email": admin.email}

    return app


class TestGetCurrentAdmin:
    def test_valid_token_authenticates(self):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_by_token = AsyncMock(return_value=admin_user(last_token=TOKEN))
            resp = TestClient(_whoami_app()).get(
                "/whoami", headers={"Authorization": f"Bearer {TOKEN}"}
            )

        assert resp.status_code == 200
        assert resp.json() == {"id": ADMIN_ID, "name": ADMIN_NAME, "email": ADMIN_EMAIL}
        mock_crud.get_by_token.assert_awaited_once_with(TOKEN)

    def test_missing_header_is_401(self):
        resp = TestClient(_whoami_app()).get("/whoami")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Missing bearer token"
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_superseded_token_is_401(self):
        with patch(CRUD_PATH) as mock_crud:
            mock_crud.get_by_token = AsyncMock(return_value=None)
            resp = TestClient(_whoami_app()).get(
                "/whoami", headers={"Authorization": "Bearer old-token"}
            )

        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid token"

    def test_wrong_scheme_is_401(self):
        resp = TestClient(_whoami_app()).get(
            "/whoami", headers={"Authorization": f"Basic {TOKEN}"}
        )
        assert resp.status_code == 401


class TestCurrentAdmin:
    def test_as_actor(self):
        admin = CurrentAdmin(id=ADMIN_ID, name=ADMIN_NAME, role=ADMIN_ROLE, email=ADMIN_EMAIL)
        assert admin.as_actor() == Actor(id=ADMIN_ID, name=ADMIN_NAME, role=ADMIN_ROLE)


class TestProviders:
    def test_transitions_is_singleton(self):
        first = get_booking_transitions()
        assert isinstance(first, BookingTransitions)
        assert get_booking_transitions() is first

    def test_invoice_service(self):
        assert isinstance(get_invoice_service(), InvoiceService)

    def test_otp_store_defaults_to_memory(self):
        store = get_otp_store()
        assert isinstance(store, InMemoryOtpStore)
        assert get_otp_store() is store
