from __future__ import annotations

from decimal import Decimal

from loguru import logger

from rental_admin.dispatcher import BookingRepository, DispatchReport, SideEffectDispatcher
from rental_admin.errors import NotFoundError
from rental_admin.lifecycle import Actor, BookingLifecycle, require_cancel_reason
from rental_admin.models import BookingStatus
from rental_admin.schemas import BookingRecord


class BookingTransitions:
    """
    Entry points for admin status changes.

    Each call loads the booking, lets BookingLifecycle build the intent and hands it
    to SideEffectDispatcher. The returned DispatchReport carries the stored booking.
    Concurrent changes to the same booking are not coordinated: the last update wins.
    """

    def __init__(
        self,
        repository: BookingRepository,
        dispatcher: SideEffectDispatcher,
        lifecycle: BookingLifecycle | None = None,
    ) -> None:
        self._repository = repository
        self._dispatcher = dispatcher
        self._lifecycle = lifecycle or BookingLifecycle()

    async def _load(self, booking_id: int) -> BookingRecord:
        booking = await self._repository.find_by_booking_id(booking_id)
        if booking is None:
            logger.warning("No booking found for ID: {}", booking_id)
            raise NotFoundError(booking_id)
        return booking

    async def pending(
        self,
        booking_id: int,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
    ) -> DispatchReport:
        booking = await self._load(booking_id)
        intent = self._lifecycle.to_pending(booking, actor, user_id, client_email)
        return await self._dispatcher.dispatch(intent)

    async def confirm(
        self,
        booking_id: int,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
    ) -> DispatchReport:
        booking = await self._load(booking_id)
        intent = self._lifecycle.to_confirmed(booking, actor, user_id, client_email)
        return await self._dispatcher.dispatch(intent)

    async def finish(
        self,
        booking_id: int,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
        expenses: Decimal | None = None,
    ) -> DispatchReport:
        booking = await self._load(booking_id)
        intent = self._lifecycle.to_finished(
            booking, actor, user_id, client_email, expenses=expenses
        )
        return await self._dispatcher.dispatch(intent)

    async def cancel(
        self,
        booking_id: int,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
        cancel_reason: str | None = None,
    ) -> DispatchReport:
        # Reason is checked before the booking is even looked up
        cancel_reason = require_cancel_reason(cancel_reason)
        booking = await self._load(booking_id)
        intent = self._lifecycle.to_cancelled(
            booking, actor, user_id, client_email, cancel_reason=cancel_reason
        )
        return await self._dispatcher.dispatch(intent)

    async def notify_price(
        self,
        booking_id: int,
        actor: Actor,
        price: Decimal,
        user_id: int | None = None,
        client_email: str | None = None,
    ) -> DispatchReport:
        booking = await self._load(booking_id)
        intent = self._lifecycle.notify_price(
            booking, actor, price, user_id, client_email
        )
        return await self._dispatcher.dispatch(intent)

    async def apply(
        self,
        target: BookingStatus,
        booking_id: int,
        actor: Actor,
        user_id: int | None = None,
        client_email: str | None = None,
        **fields,
    ) -> DispatchReport:
        """Dispatch by target status, for callers that carry it as data."""
        handlers = {
            BookingStatus.PENDING: self.pending,
            BookingStatus.CONFIRMED: self.confirm,
            BookingStatus.FINISHED: self.finish,
            BookingStatus.CANCELLED: self.cancel,
        }
        return await handlers[BookingStatus(target)](
            booking_id, actor, user_id, client_email, **fields
        )
