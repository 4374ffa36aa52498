"""Status rules for the booking lifecycle.

Kept free of I/O so the lifecycle service and its tests share one source of
truth for which statuses allow which actions.
"""

from lab_booking.db.models.booking import BookingStatus, BookingType

POST_CONFIRMATION_STATUSES = frozenset(
    {
        BookingStatus.CONFIRMED.value,
        BookingStatus.SAMPLE_COLLECTED.value,
        BookingStatus.PROCESSING.value,
        BookingStatus.COMPLETED.value,
    }
)

TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value})

NON_EDITABLE_STATUSES = frozenset(
    {
        BookingStatus.CONFIRMED.value,
        BookingStatus.COMPLETED.value,
        BookingStatus.CANCELLED.value,
    }
)

STATUS_LABELS = {
    BookingStatus.PENDING.value: "Pending",
    BookingStatus.CONFIRMED.value: "Confirmed",
    BookingStatus.SAMPLE_COLLECTED.value: "Sample Collected",
    BookingStatus.PROCESSING.value: "Processing",
    BookingStatus.COMPLETED.value: "Completed",
    BookingStatus.CANCELLED.value: "Cancelled",
}


def parse_status(raw: str | None) -> BookingStatus | None:
    """Map a client-supplied status string to a known status, or None."""
    if not isinstance(raw, str):
        return None
    try:
        return BookingStatus(raw.strip().lower())
    except ValueError:
        return None


def cancellation_needs_review(status: str) -> bool:
    return status in POST_CONFIRMATION_STATUSES


def edit_blocked_reason(booking_type: str, status: str) -> str | None:
    if status in NON_EDITABLE_STATUSES:
        return "Booking cannot be edited at this stage"
    if booking_type != BookingType.HOME_COLLECTION.value:
        return "Only home collection bookings can be edited"
    return None


def admin_transition_blocked_reason(current: str, target: str) -> str | None:
    if current == target:
        return None
    if current in TERMINAL_STATUSES:
        return f"Booking is {current} and its status can no longer change"
    return None
