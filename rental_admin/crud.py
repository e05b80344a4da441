from __future__ import annotations

from typing import Any

from rental_admin.models import AdminUser, Booking
from rental_admin.schemas import BookingRecord

# Columns a lifecycle change is allowed to write
UPDATABLE_FIELDS = frozenset(
    {
        "status",
        "price",
        "expenses",
        "cancel_fee",
        "cancel_reason",
        "cancel_date",
        "officer",
    }
)


class BookingCRUD:
    """Booking storage used by the lifecycle core. No caching: every call hits the DB."""

    async def find_by_booking_id(self, booking_id: int) -> BookingRecord | None:
        inst = await Booking.get_or_none(booking_id=booking_id)
        if not inst:
            return None
        return BookingRecord.model_validate(inst, from_attributes=True)

    async def update(
        self, booking_id: int, fields: dict[str, Any]
    ) -> BookingRecord | None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update booking fields: {sorted(unknown)}")

        inst = await Booking.get_or_none(booking_id=booking_id)
        if not inst:
            return None
        for name, value in fields.items():
            setattr(inst, name, value)
        await inst.save(update_fields=list(fields))
        return BookingRecord.model_validate(inst, from_attributes=True)


class AdminCRUD:
    async def get_by_email(self, email: str) -> AdminUser | None:
        return await AdminUser.get_or_none(email=email)

    async def get_by_token(self, token: str) -> AdminUser | None:
        if not token:
            return None
        return await AdminUser.get_or_none(last_token=token)

    async def set_token(self, admin: AdminUser, token: str) -> None:
        admin.last_token = token
        await admin.save(update_fields=["last_token"])


booking_crud = BookingCRUD()
admin_crud = AdminCRUD()
