"""
Shared pytest fixtures available to every test file automatically.
No imports needed in test files; pytest discovers this by convention.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rental_admin.deps import (
    get_booking_transitions,
    get_current_admin,
    get_email_channel,
    get_invoice_service,
    get_otp_store,
)
from rental_admin.otp import InMemoryOtpStore
from rental_admin.routers import auth, bookings

from .factories import dispatch_report, make_admin

# ---------------------------------------------------------------------------
# Default no-op collaborator mocks, so tests never touch real DB/SMTP services
# ---------------------------------------------------------------------------


def _noop_transitions():
    mock = MagicMock()
    for name in ("pending", "confirm", "finish", "cancel", "notify_price"):
        setattr(mock, name, AsyncMock(return_value=dispatch_report()))
    return mock


def _noop_invoice_service():
    mock = MagicMock()
    mock.send_invoice = AsyncMock(return_value=True)
    return mock


def _noop_email_channel():
    mock = MagicMock()
    mock.send = AsyncMock(return_value=True)
    return mock


# ---------------------------------------------------------------------------
# App builder used by all client fixtures
# ---------------------------------------------------------------------------


def build_app(
    current_admin,
    transitions=None,
    invoice_service=None,
    otp_store=None,
    email_channel=None,
) -> FastAPI:
    """
    Fresh FastAPI app with get_current_admin overridden to return
    `current_admin` unconditionally.

    Pass collaborators to inject custom mocks; defaults are no-op mocks.
    """
    app = FastAPI()
    app.include_router(auth.router)
    app.include_router(bookings.router)

    async def _admin():
        return current_admin

    app.dependency_overrides[get_current_admin] = _admin

    tr = transitions if transitions is not None else _noop_transitions()
    inv = invoice_service if invoice_service is not None else _noop_invoice_service()
    store = otp_store if otp_store is not None else InMemoryOtpStore()
    mail = email_channel if email_channel is not None else _noop_email_channel()
    app.dependency_overrides[get_booking_transitions] = lambda: tr
    app.dependency_overrides[get_invoice_service] = lambda: inv
    app.dependency_overrides[get_otp_store] = lambda: store
    app.dependency_overrides[get_email_channel] = lambda: mail

    return app


# ---------------------------------------------------------------------------
# Reusable client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def admin_client():
    return TestClient(build_app(make_admin()), raise_server_exceptions=True)


@pytest.fixture()
def anon_app():
    """
    Bare app with NO auth override.
    Use this when you want the real bearer-token dependency to run.
    """
    app = FastAPI()
    app.include_router(bookings.router)
    app.include_router(auth.router)
    return app


@pytest.fixture()
def client_factory():
    def _make(
        current_admin=None,
        transitions=None,
        invoice_service=None,
        otp_store=None,
        email_channel=None,
    ) -> TestClient:
        return TestClient(
            build_app(
                current_admin or make_admin(),
                transitions=transitions,
                invoice_service=invoice_service,
                otp_store=otp_store,
                email_channel=email_channel,
            ),
            raise_server_exceptions=True,
        )

    return _make
