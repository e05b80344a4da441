"""
Booking lifecycle: validates a status change and describes everything it implies.

BookingLifecycle never touches storage or channels. It takes the current booking and
returns a TransitionIntent: the fields to persist plus the audit entry, client
notification and email that SideEffectDispatcher fires once the change is stored.

Admins may move a booking from any status to any other (manual override), so there is
no transition table to consult; each target status only decides which fields are reset
and which messages go out.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from textwrap import dedent
from typing import Any

from loguru import logger

from rental_admin import settings
from rental_admin.errors import NotFoundError, ValidationError
from rental_admin.formatting import format_date, format_time
from rental_admin.models import BookingStatus
from rental_admin.policy import compute_cancellation_fee, pickup_timestamp
from rental_admin.schemas import BookingRecord

NO_REASON = "None"  # stored in cancel_reason whenever a booking is not cancelled


@dataclass(frozen=True)
class Actor:
    """The admin performing the change."""

    id: int
    name: str
    role: str


@dataclass(frozen=True)
class AuditEntry:
    admin_id: int
    admin_name: str
    admin_role: str
    action: str
    details: dict[str, Any]


@dataclass(frozen=True)
class ClientNotification:
    booking_id: int
    user_id: int | None
    title: str
    message: str
    acting_role: str


@dataclass(frozen=True)
class EmailMessage:
    title: str
    message: str
    recipient: str | None


@dataclass(frozen=True)
class TransitionIntent:
    booking_id: int
    target: BookingStatus | None  # None when the status is left as is
    changes: dict[str, Any]
    booking: BookingRecord  # expected state once `changes` are stored
    audit: AuditEntry
    notification: ClientNotification
    email: EmailMessage
    invoice_due: bool = False

    @property
    def effects(self) -> tuple[AuditEntry, ClientNotification, EmailMessage]:
        """Side effects in dispatch order."""
        return (self.audit, self.notification, self.email)


@dataclass(frozen=True)
class _Messages:
    action: str
    title: str
    message: str
    email_title: str
    email_body: str


_SIGNATURE = """
    Best regards,
    The {company} Team"""

_TEMPLATES: dict[BookingStatus, _Messages] = {
    BookingStatus.PENDING: _Messages(
        action="Change Status of Booking {booking_id} into Pending",
        title="Booking Pending.",
        message="Your Booking {booking_id} has been put into Pending, please review it.",
        email_title="Booking Pending: Action Required",
        email_body="""
    Hello,

    We're writing to let you know that your booking (ID: {booking_id}) is currently marked as pending. Please review the booking details on our platform at your earliest convenience.
    Below are a few details of the said booking:
    Booking ID: {booking_id}
    Pickup Location: {pickup_location}
    Pickup Date: {pickup_date}
    Pickup Time: {pickup_time}
    Return Location: {return_location}
    Return Date: {return_date}
    Return Time: {return_time}
    Date Booked: {date_booked}

    If you have any questions or need assistance, don't hesitate to reach out to us.

    Thank you for choosing {company}! We look forward to assisting you further.
""",
    ),
    BookingStatus.CONFIRMED: _Messages(
        action="Change Status of Booking {booking_id} into Confirmed",
        title="Booking Confirmed.",
        message=(
            "Great news! Your Booking:{booking_id} has been confirmed. "
            "An automated invoice will be sent to your registered email shortly."
        ),
        email_title="Booking Confirmed: Thank You!",
        email_body="""
    Hello,

    Great news! Your booking (ID: {booking_id}) has been successfully confirmed. We're thrilled to have the opportunity to serve you and ensure your journey goes smoothly.

    If you have any questions or need assistance, feel free to contact us at any time.

    Thank you for choosing {company}. We look forward to serving you!
""",
    ),
    BookingStatus.FINISHED: _Messages(
        action="Change Status of Booking {booking_id} into Finished",
        title="Booking Finished.",
        message=(
            "Your Booking:{booking_id} is now marked as finished! We hope you had a "
            "great experience. Please consider leaving a feedback. Thanks for choosing us!"
        ),
        email_title="Booking Completed: Thank You!",
        email_body="""
    Hello,

    We're excited to let you know that your booking (ID: {booking_id}) has been successfully completed! We hope you had a fantastic experience using our service.

    Thank you for choosing {company}. We truly appreciate your trust in us and look forward to serving you again in the future.

    If you have any feedback or questions, please don't hesitate to reach out.
""",
    ),
    BookingStatus.CANCELLED: _Messages(
        action="Change status of {booking_id} into Cancelled",
        title="Booking Declined.",
        message=(
            "We're sorry to inform you that your Booking:{booking_id} has been declined. "
            "The reason for the decline is: {cancel_reason}."
        ),
        email_title="Booking Update: Unfortunately Declined",
        email_body="""
    Hello,

    We regret to inform you that your booking (ID: {booking_id}) cannot be processed at this time.

    Reason for Decline: {cancel_reason}

    We understand this may be disappointing, and we sincerely apologize for the inconvenience. Our team is committed to providing the best possible service, even when we cannot accommodate a specific request.

    We'd be happy to help you explore alternative options or find a solution that meets your transportation needs. Please feel free to contact us for further assistance.

    Thank you for your understanding.
""",
    ),
}

_PRICE_NOTICE = _Messages(
    action="Notify The User About Estimated Price",
    title="Price Notification.",
    message=(
        "The price for your Booking:{booking_id} is {currency}{price}. "
        "Would you like to proceed?"
    ),
    email_title="Your Booking Price Confirmation",
    email_body="""
    Hello,

    We wanted to provide you with an important update regarding your booking (ID: {booking_id}).

    Booking Price: {currency}{price}

    Your requested booking is now ready for final confirmation. To proceed, please visit our website and review the complete details. Kindly complete the payment process to secure your reservation.

    If you have any questions or need assistance, don't hesitate to reach out to us.

    Thank you for choosing {company}.
""",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def require_cancel_reason(reason: str | None) -> str:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Cancellation reason is required.")
    return reason


def parse_amount(value: Any, name: str) -> Decimal:
    """Money input as a non-negative Decimal; anything else is a ValidationError."""
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{name} must be a number.") from None
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"{name} must be non-negative.")
    return amount


def snapshot(booking: BookingRecord) -> dict[str, Any]:
    """JSON-safe view of a booking for the audit trail."""
    return {"booking": booking.model_dump(mode="json")}


class BookingLifecycle:
    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        company: str = settings.company_name,
        currency: str = settings.currency_symbol,
    ) -> None:
        self._clock = clock
        self._company = company
        self._currency = currency

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def transition(
        self,
        target: BookingStatus,
        booking: BookingRecord | None,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
        *,
        cancel_reason: str | None = None,
        expenses: Decimal | None = None,
    ) -> TransitionIntent:
        """
        Build the intent for moving `booking` into `target`.

        Raises ValidationError when cancelling without a reason or when `expenses`
        is not a non-negative amount (both checked before anything else), and
        NotFoundError when `booking` is None.
        """
        target = BookingStatus(target)
        if target == BookingStatus.CANCELLED:
            cancel_reason = require_cancel_reason(cancel_reason)
        if expenses is not None:
            expenses = parse_amount(expenses, "Expenses")
        if booking is None:
            raise NotFoundError()

        changes = self._changes_for(target, booking, actor, cancel_reason, expenses)
        updated = booking.model_copy(update=changes)
        logger.debug(
            "Booking {} transition {} -> {} by {}",
            booking.booking_id,
            booking.status,
            target,
            actor.name,
        )
        return self._intent(
            _TEMPLATES[target],
            target,
            booking,
            updated,
            changes,
            actor,
            user_id,
            client_email,
            invoice_due=target == BookingStatus.CONFIRMED,
        )

    def to_pending(
        self,
        booking: BookingRecord | None,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
    ) -> TransitionIntent:
        return self.transition(
            BookingStatus.PENDING, booking, actor, user_id, client_email
        )

    def to_confirmed(
        self,
        booking: BookingRecord | None,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
    ) -> TransitionIntent:
        return self.transition(
            BookingStatus.CONFIRMED, booking, actor, user_id, client_email
        )

    def to_finished(
        self,
        booking: BookingRecord | None,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
        expenses: Decimal | None = None,
    ) -> TransitionIntent:
        return self.transition(
            BookingStatus.FINISHED,
            booking,
            actor,
            user_id,
            client_email,
            expenses=expenses,
        )

    def to_cancelled(
        self,
        booking: BookingRecord | None,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
        cancel_reason: str | None = None,
    ) -> TransitionIntent:
        return self.transition(
            BookingStatus.CANCELLED,
            booking,
            actor,
            user_id,
            client_email,
            cancel_reason=cancel_reason,
        )

    # ------------------------------------------------------------------
    # Price notice
    # ------------------------------------------------------------------

    def notify_price(
        self,
        booking: BookingRecord | None,
        actor: Actor,
        price: Decimal | None,
        user_id: int | None = None,
        client_email: str | None = None,
    ) -> TransitionIntent:
        """
        Quote a (new) price to the client without changing the status.

        Cancelled bookings are rejected: their cancel_fee was charged against the
        old price and must stay within it.
        """
        if price is None:
            raise ValidationError("Price must be provided and non-negative.")
        price = parse_amount(price, "Price")
        if booking is None:
            raise NotFoundError()
        if booking.status == BookingStatus.CANCELLED:
            raise ValidationError("Cannot change the price of a cancelled booking.")
        changes = {"price": price}
        updated = booking.model_copy(update=changes)
        return self._intent(
            _PRICE_NOTICE,
            None,
            booking,
            updated,
            changes,
            actor,
            user_id,
            client_email,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _changes_for(
        self,
        target: BookingStatus,
        booking: BookingRecord,
        actor: Actor,
        cancel_reason: str | None,
        expenses: Decimal | None,
    ) -> dict[str, Any]:
        if target == BookingStatus.CANCELLED:
            now = self._clock()
            fee = compute_cancellation_fee(
                pickup_timestamp(booking.pickup_date), booking.price, now
            )
            return {
                "status": target,
                "cancel_reason": cancel_reason,
                "cancel_fee": fee,
                "cancel_date": now.date(),
                "expenses": Decimal("0"),
                "officer": actor.name,
            }

        changes: dict[str, Any] = {
            "status": target,
            "cancel_fee": Decimal("0"),
            "cancel_reason": NO_REASON,
            "cancel_date": None,
            "officer": actor.name,
        }
        if target == BookingStatus.FINISHED:
            changes["expenses"] = expenses if expenses is not None else Decimal("0")
        return changes

    def _fields(self, booking: BookingRecord) -> dict[str, Any]:
        return {
            "booking_id": booking.booking_id,
            "company": self._company,
            "currency": self._currency,
            "price": booking.price,
            "cancel_reason": booking.cancel_reason,
            "pickup_location": booking.pickup_location or "N/A",
            "pickup_date": format_date(booking.pickup_date),
            "pickup_time": format_time(booking.pickup_time),
            "return_location": booking.return_location or "N/A",
            "return_date": format_date(booking.return_date),
            "return_time": format_time(booking.return_time),
            "date_booked": format_date(booking.created_at),
        }

    def _intent(
        self,
        messages: _Messages,
        target: BookingStatus | None,
        current: BookingRecord,
        updated: BookingRecord,
        changes: dict[str, Any],
        actor: Actor,
        user_id: int | None,
        client_email: str | None,
        invoice_due: bool = False,
    ) -> TransitionIntent:
        values = self._fields(updated)
        body = dedent(messages.email_body + _SIGNATURE).strip()
        return TransitionIntent(
            booking_id=current.booking_id,
            target=target,
            changes=changes,
            booking=updated,
            audit=AuditEntry(
                admin_id=actor.id,
                admin_name=actor.name,
                admin_role=actor.role,
                action=messages.action.format(**values),
                details=snapshot(updated),
            ),
            notification=ClientNotification(
                booking_id=current.booking_id,
                user_id=user_id if user_id is not None else current.user_id,
                title=messages.title,
                message=messages.message.format(**values),
                acting_role=actor.role,
            ),
            email=EmailMessage(
                title=messages.email_title,
                message=body.format(**values),
                recipient=client_email or current.email,
            ),
            invoice_due=invoice_due,
        )
