from __future__ import annotations

from rental_admin.models import Notification


class DatabaseNotificationChannel:
    """
    Stores client notifications shown in the client's inbox.
    Real-time push is handled elsewhere, off the rows written here.
    """

    async def notify(
        self,
        booking_id: int,
        user_id: int | None,
        title: str,
        message: str,
        acting_role: str,
    ) -> bool:
        # acting_role is accepted for interface parity; the inbox does not show it
        await Notification.create(
            booking_id=booking_id,
            user_id=user_id,
            title=title,
            message=message,
        )
        return True


notification_channel = DatabaseNotificationChannel()
