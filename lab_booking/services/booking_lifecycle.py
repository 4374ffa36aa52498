"""Booking creation, cancellation, admin status changes and user edits."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from lab_booking.core.config import settings
from lab_booking.core.exceptions import ConflictError, ForbiddenError, NotFoundError, StaleVersionError
from lab_booking.core.metrics import BOOKING_CANCEL_REQUESTS, BOOKING_TRANSITIONS
from lab_booking.core.sanitize import sanitize_string
from lab_booking.db.models import Booking, BookingItem, BookingStatus
from lab_booking.db.repositories import BookingRepository
from lab_booking.domain.actor import Actor
from lab_booking.domain.events import BookedTest, BookingEvent, BookingPlaced, BookingStatusChanged
from lab_booking.domain.policy import (
    POST_CONFIRMATION_STATUSES,
    admin_transition_blocked_reason,
    cancellation_needs_review,
    edit_blocked_reason,
    parse_status,
)
from lab_booking.schemas.booking import AdminBookingUpdateRequest, BookingCreateRequest, BookingEditRequest

logger = logging.getLogger(__name__)

BOOKING_NOT_FOUND_DETAIL = "Booking not found"
TESTS_NOT_FOUND_DETAIL = "One or more tests not found or inactive"
ALREADY_CANCELLED_DETAIL = "Booking already cancelled"


class CancelOutcome(str, Enum):
    CANCELLED = "cancelled"
    CANCEL_REQUESTED = "cancel_requested"


@dataclass
class LifecycleResult:
    booking: Booking
    events: list[BookingEvent] = field(default_factory=list)
    outcome: CancelOutcome | None = None


def _check_version(booking: Booking, expected_version: int | None) -> None:
    if expected_version is not None and booking.version != expected_version:
        raise StaleVersionError()


def _load_for_mutation(
    repo: BookingRepository,
    booking_id: str,
    actor: Actor,
    expected_version: int | None,
) -> Booking:
    booking = repo.find_booking(booking_id)
    if booking is None:
        raise NotFoundError(BOOKING_NOT_FOUND_DETAIL)
    if not actor.owns_or_admin(booking.user_id):
        raise ForbiddenError()
    _check_version(booking, expected_version)
    return booking


def _clean_reason(reason: str | None) -> str | None:
    if reason is None:
        return None
    cleaned = sanitize_string(reason)[: settings.cancel_reason_max_length]
    return cleaned or None


def create_booking(repo: BookingRepository, actor: Actor, payload: BookingCreateRequest) -> LifecycleResult:
    test_ids = list(dict.fromkeys(payload.test_ids))
    tests_by_id = {test.id: test for test in repo.find_active_tests(test_ids)}
    if any(test_id not in tests_by_id for test_id in test_ids):
        raise NotFoundError(TESTS_NOT_FOUND_DETAIL)

    tests = [tests_by_id[test_id] for test_id in test_ids]
    booking = Booking(
        user_id=actor.id,
        booking_type=payload.booking_type.value,
        status=BookingStatus.PENDING.value,
        patient_name=payload.patient_name,
        patient_age=payload.patient_age,
        booking_date=payload.booking_date,
        booking_time=payload.booking_time,
        address=payload.address,
        city=payload.city,
        state=payload.state,
        pincode=payload.pincode,
        phone=payload.phone,
        prescription_url=payload.prescription_url,
        notes=payload.notes,
        total_amount=sum((test.price for test in tests), Decimal("0")),
        cancel_requested=False,
        items=[BookingItem(test_id=test.id, price=test.price) for test in tests],
    )
    booking = repo.add(booking)

    owner = booking.user
    BOOKING_TRANSITIONS.labels(from_status="new", to_status=booking.status).inc()
    logger.info(
        "booking_created booking_id=%s user_id=%s items=%d total=%s",
        booking.id,
        booking.user_id,
        len(booking.items),
        booking.total_amount,
    )
    event = BookingPlaced(
        booking_id=booking.id,
        recipient_email=owner.email if owner else actor.email,
        recipient_name=owner.name if owner else actor.name,
        booking_type=booking.booking_type,
        total_amount=booking.total_amount,
        tests=tuple(BookedTest(name=item.test.name, price=item.price) for item in booking.items),
        booking_date=booking.booking_date,
        booking_time=booking.booking_time,
    )
    return LifecycleResult(booking=booking, events=[event])


def request_or_perform_cancel(
    repo: BookingRepository,
    booking_id: str,
    actor: Actor,
    reason: str | None = None,
    expected_version: int | None = None,
) -> LifecycleResult:
    booking = _load_for_mutation(repo, booking_id, actor, expected_version)
    if booking.status == BookingStatus.CANCELLED.value:
        raise ConflictError(ALREADY_CANCELLED_DETAIL)

    previous_status = booking.status
    if cancellation_needs_review(previous_status):
        booking.cancel_requested = True
        booking.cancel_reason = _clean_reason(reason)
        outcome = CancelOutcome.CANCEL_REQUESTED
    else:
        booking.status = BookingStatus.CANCELLED.value
        outcome = CancelOutcome.CANCELLED

    booking = repo.save(booking)

    if outcome is CancelOutcome.CANCEL_REQUESTED:
        BOOKING_CANCEL_REQUESTS.inc()
    else:
        BOOKING_TRANSITIONS.labels(from_status=previous_status, to_status=booking.status).inc()
    logger.info(
        "booking_cancel outcome=%s booking_id=%s actor_id=%s status=%s",
        outcome.value,
        booking.id,
        actor.id,
        booking.status,
    )
    return LifecycleResult(booking=booking, outcome=outcome)


def admin_set_status(
    repo: BookingRepository,
    booking_id: str,
    actor: Actor,
    changes: AdminBookingUpdateRequest,
    expected_version: int | None = None,
) -> LifecycleResult:
    if not actor.is_admin:
        raise ForbiddenError()

    booking = repo.find_booking(booking_id)
    if booking is None:
        raise NotFoundError(BOOKING_NOT_FOUND_DETAIL)
    _check_version(booking, expected_version)

    old_status = booking.status
    target = parse_status(changes.status)
    if changes.status is not None and target is None:
        logger.warning("admin_status_ignored booking_id=%s value=%r", booking.id, changes.status)

    if target is not None and target.value != old_status:
        blocked = admin_transition_blocked_reason(old_status, target.value)
        if blocked:
            raise ConflictError(blocked)
        booking.status = target.value
        if target is BookingStatus.CANCELLED:
            booking.cancel_reviewed_at = datetime.now(UTC)
            booking.cancel_reviewed_by = actor.id
            booking.cancel_requested = False
        elif target.value not in POST_CONFIRMATION_STATUSES:
            booking.cancel_requested = False

    if "notes" in changes.model_fields_set:
        booking.notes = changes.notes

    booking = repo.save(booking)

    events: list[BookingEvent] = []
    if booking.status != old_status:
        BOOKING_TRANSITIONS.labels(from_status=old_status, to_status=booking.status).inc()
        logger.info(
            "booking_status_changed booking_id=%s from=%s to=%s admin_id=%s",
            booking.id,
            old_status,
            booking.status,
            actor.id,
        )
        events.append(
            BookingStatusChanged(
                booking_id=booking.id,
                recipient_email=booking.user.email,
                recipient_name=booking.user.name,
                old_status=old_status,
                new_status=booking.status,
                notes=booking.notes,
            )
        )
    return LifecycleResult(booking=booking, events=events)


def user_edit_booking(
    repo: BookingRepository,
    booking_id: str,
    actor: Actor,
    changes: BookingEditRequest,
    expected_version: int | None = None,
) -> LifecycleResult:
    booking = _load_for_mutation(repo, booking_id, actor, expected_version)
    blocked = edit_blocked_reason(booking.booking_type, booking.status)
    if blocked:
        raise ConflictError(blocked)

    applied = changes.changes()
    for name, value in applied.items():
        setattr(booking, name, value)

    booking = repo.save(booking)
    logger.info(
        "booking_edited booking_id=%s actor_id=%s fields=%s",
        booking.id,
        actor.id,
        ",".join(sorted(applied)) or "-",
    )
    return LifecycleResult(booking=booking)
