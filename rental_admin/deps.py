from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rental_admin.audit import audit_log
from rental_admin.crud import admin_crud, booking_crud
from rental_admin.dispatcher import SideEffectDispatcher
from rental_admin.invoice import InvoiceService
from rental_admin.lifecycle import Actor
from rental_admin.mailer import SmtpEmailChannel, email_channel
from rental_admin.notifications import notification_channel
from rental_admin.otp import OtpStore, build_otp_store
from rental_admin.transitions import BookingTransitions

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentAdmin:
    id: int
    name: str
    role: str
    email: str

    def as_actor(self) -> Actor:
        return Actor(id=self.id, name=self.name, role=self.role)


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentAdmin:
    """
    Resolves the bearer token issued by /admin/verify-login-otp.
    Only the most recently issued token of an admin is valid.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    admin = await admin_crud.get_by_token(credentials.credentials)
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CurrentAdmin(id=admin.id, name=admin.name, role=admin.role, email=admin.email)


# ---------------------------------------------------------------------------
# Lifecycle wiring: module-level singletons, overridable in tests
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def _build_transitions() -> BookingTransitions:
    dispatcher = SideEffectDispatcher(
        repository=booking_crud,
        audit_log=audit_log,
        notifications=notification_channel,
        email=email_channel,
    )
    return BookingTransitions(repository=booking_crud, dispatcher=dispatcher)


def get_booking_transitions() -> BookingTransitions:
    return _build_transitions()


_invoice_service = InvoiceService(email_channel)


def get_invoice_service() -> InvoiceService:
    return _invoice_service


def get_email_channel() -> SmtpEmailChannel:
    return email_channel


@lru_cache(maxsize=1)
def _build_otp_store() -> OtpStore:
    return build_otp_store()


def get_otp_store() -> OtpStore:
    return _build_otp_store()
