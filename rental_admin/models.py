from enum import StrEnum

from tortoise import fields
from tortoise.models import Model


class BookingStatus(StrEnum):
    PENDING = "Pending"  # created by the client, awaiting review
    CONFIRMED = "Confirmed"  # accepted by an admin, invoice due
    FINISHED = "Finished"  # rental period over
    CANCELLED = "Cancelled"  # declined or cancelled, cancel_fee applies


class Booking(Model):
    booking_id = fields.IntField(primary_key=True)

    car_id = fields.IntField(null=True)
    user_id = fields.IntField(null=True)  # the client who made the booking

    name = fields.CharField(max_length=255, null=True)
    email = fields.CharField(max_length=255, null=True)
    phone = fields.CharField(max_length=50, null=True)

    pickup_location = fields.CharField(max_length=255, null=True)
    pickup_date = fields.DateField()
    pickup_time = fields.TimeField(null=True)
    return_location = fields.CharField(max_length=255, null=True)
    return_date = fields.DateField()
    return_time = fields.TimeField(null=True)

    rental_type = fields.CharField(max_length=50, default="personal")
    driver = fields.CharField(max_length=255, null=True)
    status = fields.CharEnumField(BookingStatus, default=BookingStatus.PENDING)

    price = fields.DecimalField(max_digits=12, decimal_places=2, default=0)
    expenses = fields.DecimalField(max_digits=12, decimal_places=2, default=0)
    cancel_fee = fields.DecimalField(max_digits=12, decimal_places=2, default=0)
    cancel_reason = fields.TextField(null=True)
    cancel_date = fields.DateField(null=True)
    officer = fields.CharField(max_length=255, null=True)  # last admin to act on it

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:  # type: ignore
        table = "bookings"
        ordering = ["-booking_id"]


class AuditLogEntry(Model):
    id = fields.IntField(primary_key=True)
    admin_id = fields.IntField(null=True)
    admin_name = fields.CharField(max_length=255, null=True)
    admin_role = fields.CharField(max_length=50, null=True)
    action = fields.TextField()
    details = fields.JSONField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:  # type: ignore
        table = "audit_logs"
        ordering = ["-created_at"]


class Notification(Model):
    """In-app notification shown to the client on their bookings page."""

    id = fields.IntField(primary_key=True)
    booking_id = fields.IntField()
    user_id = fields.IntField(null=True)
    title = fields.CharField(max_length=255)
    message = fields.TextField()
    is_read = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:  # type: ignore
        table = "notifications_client"
        ordering = ["-created_at"]


class AdminUser(Model):
    id = fields.IntField(primary_key=True)
    email = fields.CharField(max_length=255, unique=True)
    name = fields.CharField(max_length=255)
    role = fields.CharField(max_length=50)
    last_token = fields.CharField(max_length=128, null=True, db_index=True)

    class Meta:  # type: ignore
        table = "admin_users"
