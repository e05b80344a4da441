from collections.abc import Awaitable

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from loguru import logger

from rental_admin.crud import booking_crud
from rental_admin.deps import (
    CurrentAdmin,
    get_booking_transitions,
    get_current_admin,
    get_invoice_service,
)
from rental_admin.dispatcher import DispatchReport
from rental_admin.errors import LifecycleError
from rental_admin.invoice import InvoiceService
from rental_admin.schemas import (
    CancelRequest,
    FinishRequest,
    InvoiceRequest,
    InvoiceResponse,
    PriceNoticeRequest,
    TransitionRequest,
    TransitionResponse,
)
from rental_admin.transitions import BookingTransitions

router = APIRouter(prefix="/admin/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _run(call: Awaitable[DispatchReport]) -> DispatchReport:
    """Await a lifecycle call, turning core errors into HTTP errors."""
    try:
        return await call
    except LifecycleError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


def _response(message: str, report: DispatchReport) -> TransitionResponse:
    return TransitionResponse(
        message=message,
        booking_id=report.booking.booking_id,
        booking=report.booking,
        effects=report.as_dict(),
    )


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------


@router.put("/{booking_id}/pending", response_model=TransitionResponse)
async def set_pending(
    booking_id: int,
    payload: TransitionRequest,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    transitions: BookingTransitions = Depends(get_booking_transitions),
) -> TransitionResponse:
    report = await _run(
        transitions.pending(
            booking_id,
            current_admin.as_actor(),
            user_id=payload.user_id,
            client_email=payload.client_email,
        )
    )
    return _response("Booking status updated to Pending successfully", report)


@router.put("/{booking_id}/confirm", response_model=TransitionResponse)
async def confirm_booking(
    booking_id: int,
    payload: TransitionRequest,
    background_tasks: BackgroundTasks,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    transitions: BookingTransitions = Depends(get_booking_transitions),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> TransitionResponse:
    report = await _run(
        transitions.confirm(
            booking_id,
            current_admin.as_actor(),
            user_id=payload.user_id,
            client_email=payload.client_email,
        )
    )
    # Invoice goes out after the response; its failure never affects the confirmation
    if report.invoice_due:
        background_tasks.add_task(
            invoice_service.send_invoice, report.booking, payload.client_email
        )
    return _response("Booking has been confirmed successfully.", report)


@router.put("/{booking_id}/finish", response_model=TransitionResponse)
async def finish_booking(
    booking_id: int,
    payload: FinishRequest,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    transitions: BookingTransitions = Depends(get_booking_transitions),
) -> TransitionResponse:
    report = await _run(
        transitions.finish(
            booking_id,
            current_admin.as_actor(),
            user_id=payload.user_id,
            client_email=payload.client_email,
            expenses=payload.expenses,
        )
    )
    return _response("Booking has been finished successfully.", report)


@router.put("/{booking_id}/cancel", response_model=TransitionResponse)
async def cancel_booking(
    booking_id: int,
    payload: CancelRequest,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    transitions: BookingTransitions = Depends(get_booking_transitions),
) -> TransitionResponse:
    report = await _run(
        transitions.cancel(
            booking_id,
            current_admin.as_actor(),
            user_id=payload.user_id,
            client_email=payload.client_email,
            cancel_reason=payload.cancel_reason,
        )
    )
    return _response("Booking cancelled successfully.", report)


@router.put("/{booking_id}/price", response_model=TransitionResponse)
async def notify_price(
    booking_id: int,
    payload: PriceNoticeRequest,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    transitions: BookingTransitions = Depends(get_booking_transitions),
) -> TransitionResponse:
    report = await _run(
        transitions.notify_price(
            booking_id,
            current_admin.as_actor(),
            payload.price,
            user_id=payload.user_id,
            client_email=payload.client_email,
        )
    )
    return _response("Price updated successfully", report)


# ---------------------------------------------------------------------------
# Invoice
# ---------------------------------------------------------------------------


@router.post("/{booking_id}/invoice", response_model=InvoiceResponse)
async def send_invoice(
    booking_id: int,
    payload: InvoiceRequest,
    _: CurrentAdmin = Depends(get_current_admin),
    invoice_service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceResponse:
    booking = await booking_crud.find_by_booking_id(booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )

    sent = await invoice_service.send_invoice(booking, payload.client_email)
    if not sent:
        logger.warning("Invoice for booking {} was not sent", booking_id)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Error generating and sending invoice",
        )
    return InvoiceResponse(
        message="Invoice generated and sent successfully.", booking_id=booking_id
    )
