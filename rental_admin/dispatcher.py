"""
Executes a TransitionIntent against storage and the outbound channels.

Order is strict: the booking update must be stored before anything else happens.
Audit, notification and email are best-effort. Each runs under its own timeout,
and a failure is logged and recorded on the DispatchReport instead of being raised.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any, Protocol

from loguru import logger

from rental_admin import settings
from rental_admin.errors import EffectError, NotFoundError, PersistenceError
from rental_admin.lifecycle import TransitionIntent, snapshot
from rental_admin.schemas import BookingRecord

AUDIT = "audit"
NOTIFICATION = "notification"
EMAIL = "email"


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------


class BookingRepository(Protocol):
    async def find_by_booking_id(self, booking_id: int) -> BookingRecord | None: ...

    async def update(
        self, booking_id: int, fields: dict[str, Any]
    ) -> BookingRecord | None: ...


class AuditLog(Protocol):
    async def record(
        self,
        admin_id: int,
        admin_name: str,
        admin_role: str,
        action: str,
        details: dict[str, Any],
    ) -> bool: ...


class NotificationChannel(Protocol):
    async def notify(
        self,
        booking_id: int,
        user_id: int | None,
        title: str,
        message: str,
        acting_role: str,
    ) -> bool: ...


class EmailChannel(Protocol):
    async def send(self, title: str, message: str, recipient: str) -> bool: ...


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EffectOutcome:
    name: str
    ok: bool
    error: Exception | None = None


@dataclass(frozen=True)
class DispatchReport:
    """What happened after the booking was stored. For logging and tests only."""

    booking: BookingRecord
    audit: EffectOutcome
    notification: EffectOutcome
    email: EffectOutcome
    invoice_due: bool = False

    @property
    def outcomes(self) -> tuple[EffectOutcome, ...]:
        return (self.audit, self.notification, self.email)

    @property
    def succeeded(self) -> list[str]:
        return [o.name for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[str]:
        return [o.name for o in self.outcomes if not o.ok]

    def as_dict(self) -> dict[str, bool]:
        return {o.name: o.ok for o in self.outcomes}


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class SideEffectDispatcher:
    def __init__(
        self,
        repository: BookingRepository,
        audit_log: AuditLog,
        notifications: NotificationChannel,
        email: EmailChannel,
        effect_timeout: float = settings.EFFECT_TIMEOUT,
    ) -> None:
        self._repository = repository
        self._audit_log = audit_log
        self._notifications = notifications
        self._email = email
        self._effect_timeout = effect_timeout

    async def dispatch(self, intent: TransitionIntent) -> DispatchReport:
        """
        Store the booking update, then fire audit / notification / email.

        Raises PersistenceError if the update fails and NotFoundError if the booking
        disappeared in the meantime. In both cases no effect is attempted.
        """
        try:
            booking = await self._repository.update(intent.booking_id, intent.changes)
        except Exception as exc:
            logger.error(
                "Failed to store booking {} update: {}", intent.booking_id, exc
            )
            raise PersistenceError(
                f"Could not update booking {intent.booking_id}"
            ) from exc
        if booking is None:
            raise NotFoundError(intent.booking_id)

        # Audit what was actually stored, not what was expected
        audit = replace(intent.audit, details=snapshot(booking))
        notification = intent.notification
        email = intent.email

        audit_outcome, notification_outcome, email_outcome = await asyncio.gather(
            self._run(
                AUDIT,
                intent.booking_id,
                lambda: self._audit_log.record(
                    audit.admin_id,
                    audit.admin_name,
                    audit.admin_role,
                    audit.action,
                    audit.details,
                ),
            ),
            self._run(
                NOTIFICATION,
                intent.booking_id,
                lambda: self._notifications.notify(
                    notification.booking_id,
                    notification.user_id,
                    notification.title,
                    notification.message,
                    notification.acting_role,
                ),
            ),
            self._send_email(intent),
        )

        report = DispatchReport(
            booking=booking,
            audit=audit_outcome,
            notification=notification_outcome,
            email=email_outcome,
            invoice_due=intent.invoice_due,
        )
        logger.info(
            "Booking {} stored ({}); effects ok={} failed={}",
            intent.booking_id,
            booking.status,
            report.succeeded,
            report.failed,
        )
        return report

    async def _send_email(self, intent: TransitionIntent) -> EffectOutcome:
        email = intent.email
        if not email.recipient:
            logger.warning("Booking {}: no client email, skipping", intent.booking_id)
            return EffectOutcome(EMAIL, ok=False, error=EffectError("no recipient"))
        return await self._run(
            EMAIL,
            intent.booking_id,
            lambda: self._email.send(email.title, email.message, email.recipient),
        )

    async def _run(
        self,
        name: str,
        booking_id: int,
        call: Callable[[], Awaitable[bool | None]],
    ) -> EffectOutcome:
        try:
            result = await asyncio.wait_for(call(), timeout=self._effect_timeout)
        except TimeoutError:
            logger.warning(
                "Booking {}: {} timed out after {}s",
                booking_id,
                name,
                self._effect_timeout,
            )
            return EffectOutcome(name, ok=False, error=EffectError(f"{name} timed out"))
        except Exception as exc:
            logger.opt(exception=exc).warning(
                "Booking {}: {} failed, continuing", booking_id, name
            )
            return EffectOutcome(name, ok=False, error=exc)

        if result is False:
            logger.warning("Booking {}: {} reported failure", booking_id, name)
            return EffectOutcome(
                name, ok=False, error=EffectError(f"{name} reported failure")
            )
        return EffectOutcome(name, ok=True)
