"""Invoice emailed to the client once a booking is confirmed."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from loguru import logger

from rental_admin import settings
from rental_admin.dispatcher import EmailChannel
from rental_admin.formatting import format_date
from rental_admin.schemas import BookingRecord

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class InvoiceItem:
    date: str
    description: str
    units: int
    amount: Decimal


@dataclass(frozen=True)
class InvoiceData:
    company: str
    contact: str
    booking_officer: str | None
    invoice_no: int
    date: str
    date_of_trip: str
    driver: str | None
    unit: int | None
    guest: str | None
    items: list[InvoiceItem] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((item.amount for item in self.items), Decimal("0"))


def calculate_rental_days(pickup: date | datetime, return_: date | datetime) -> int:
    """Whole days billed between pickup and return, partial days rounded up."""
    if isinstance(pickup, datetime) and isinstance(return_, datetime):
        return math.ceil((return_ - pickup).total_seconds() / SECONDS_PER_DAY)
    if isinstance(pickup, datetime):
        pickup = pickup.date()
    if isinstance(return_, datetime):
        return_ = return_.date()
    return (return_ - pickup).days


def build_invoice(
    booking: BookingRecord,
    company: str = settings.company_name,
    contact: str = settings.company_contact,
) -> InvoiceData:
    issued = format_date(booking.created_at)
    description = "For Personal" if booking.rental_type == "personal" else "For Company"
    return InvoiceData(
        company=company,
        contact=contact,
        booking_officer=booking.officer,
        invoice_no=booking.booking_id,
        date=issued,
        date_of_trip=(
            f"{format_date(booking.pickup_date)} - {format_date(booking.return_date)}"
        ),
        driver=booking.driver,
        unit=booking.car_id,
        guest=booking.name,
        items=[
            InvoiceItem(
                date=issued,
                description=description,
                units=calculate_rental_days(booking.pickup_date, booking.return_date),
                amount=booking.price,
            )
        ],
    )


def render_invoice(invoice: InvoiceData, currency: str = settings.currency_symbol) -> str:
    lines = [
        "Hello,",
        "",
        f"Great news! Your booking (ID: {invoice.invoice_no}) has been successfully "
        "confirmed. Please find your invoice below.",
        "",
        f"Invoice No: {invoice.invoice_no}",
        f"Date: {invoice.date}",
        f"Booking Officer: {invoice.booking_officer or 'N/A'}",
        f"Guest: {invoice.guest or 'N/A'}",
        f"Date of Trip: {invoice.date_of_trip}",
        f"Driver: {invoice.driver or 'N/A'}",
        f"Unit: {invoice.unit if invoice.unit is not None else 'N/A'}",
        "",
    ]
    for item in invoice.items:
        lines.append(
            f"{item.date}  {item.description}  x{item.units}  {currency}{item.amount}"
        )
    lines += [
        f"Total: {currency}{invoice.total}",
        "",
        f"If you have any questions, contact us at {invoice.contact}.",
        "",
        "Best regards,",
        f"The {invoice.company} Team",
    ]
    return "\n".join(lines)


class InvoiceService:
    def __init__(self, email: EmailChannel) -> None:
        self._email = email

    async def send_invoice(self, booking: BookingRecord, recipient: str | None) -> bool:
        """
        Email the invoice for `booking`.
        Returns False instead of raising so a confirmation never fails on it.
        """
        recipient = recipient or booking.email
        if not recipient:
            logger.warning("Booking {}: no email for invoice", booking.booking_id)
            return False

        invoice = build_invoice(booking)
        try:
            await self._email.send(
                f"Invoice #{invoice.invoice_no}", render_invoice(invoice), recipient
            )
        except Exception:
            logger.exception("Error sending invoice for booking {}", booking.booking_id)
            return False
        logger.info("Invoice for booking {} sent to {}", booking.booking_id, recipient)
        return True
