"""Errors raised by the booking lifecycle core."""


class LifecycleError(Exception):
    """Base for failures that abort a transition before it is durable."""

    status_code: int = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(LifecycleError):
    """The caller omitted or mangled a required field."""

    status_code = 400


class NotFoundError(LifecycleError):
    status_code = 404

    def __init__(self, booking_id: int | None = None) -> None:
        detail = "Booking not found"
        if booking_id is not None:
            detail = f"Booking {booking_id} not found"
        super().__init__(detail)
        self.booking_id = booking_id


class PersistenceError(LifecycleError):
    """The repository update failed; no side effects were attempted."""

    status_code = 500


class EffectError(Exception):
    """
    An audit / notification / email step failed.
    Never raised to callers, only recorded on the DispatchReport.
    """
