from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.orm import Session

from lab_booking.api.deps import (
    LimitParam,
    OffsetParam,
    booking_rate_limit,
    get_booking_repository,
    get_current_actor,
    get_expected_version,
)
from lab_booking.core.exceptions import ForbiddenError, NotFoundError
from lab_booking.db.repositories import BookingRepository
from lab_booking.db.session import get_db
from lab_booking.domain.actor import Actor
from lab_booking.schemas.booking import (
    BookingCreateRequest,
    BookingEditRequest,
    BookingResponse,
    CancelBookingRequest,
    CancelBookingResponse,
)
from lab_booking.services.booking_lifecycle import (
    BOOKING_NOT_FOUND_DETAIL,
    CancelOutcome,
    create_booking,
    request_or_perform_cancel,
    user_edit_booking,
)
from lab_booking.services.email_service import Notifier, get_notifier
from lab_booking.services.notifications import schedule_booking_events
from lab_booking.services.site_config_service import get_lab_name

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _set_etag(response: Response, version: int) -> None:
    response.headers["ETag"] = f'"{version}"'


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_rate_limit)],
)
def place_booking(
    payload: BookingCreateRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    repo: BookingRepository = Depends(get_booking_repository),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> BookingResponse:
    result = create_booking(repo, actor, payload)
    schedule_booking_events(background_tasks, notifier, result.events, get_lab_name(db))
    _set_etag(response, result.booking.version)
    return BookingResponse.model_validate(result.booking)


@router.get("", response_model=list[BookingResponse], status_code=status.HTTP_200_OK)
def list_my_bookings(
    limit: LimitParam = 20,
    offset: OffsetParam = 0,
    actor: Actor = Depends(get_current_actor),
    repo: BookingRepository = Depends(get_booking_repository),
) -> list[BookingResponse]:
    bookings = repo.list_for_user(actor.id, limit=limit, offset=offset)
    return [BookingResponse.model_validate(booking) for booking in bookings]


@router.get("/{booking_id}", response_model=BookingResponse, status_code=status.HTTP_200_OK)
def get_booking(
    booking_id: str,
    response: Response,
    actor: Actor = Depends(get_current_actor),
    repo: BookingRepository = Depends(get_booking_repository),
) -> BookingResponse:
    booking = repo.find_booking(booking_id)
    if not booking:
        raise NotFoundError(BOOKING_NOT_FOUND_DETAIL)
    if not actor.owns_or_admin(booking.user_id):
        raise ForbiddenError()
    _set_etag(response, booking.version)
    return BookingResponse.model_validate(booking)


@router.patch("/{booking_id}", response_model=BookingResponse, status_code=status.HTTP_200_OK)
def edit_booking(
    booking_id: str,
    payload: BookingEditRequest,
    response: Response,
    expected_version: int | None = Depends(get_expected_version),
    actor: Actor = Depends(get_current_actor),
    repo: BookingRepository = Depends(get_booking_repository),
) -> BookingResponse:
    result = user_edit_booking(repo, booking_id, actor, payload, expected_version=expected_version)
    _set_etag(response, result.booking.version)
    return BookingResponse.model_validate(result.booking)


@router.post("/{booking_id}/cancel", response_model=CancelBookingResponse, status_code=status.HTTP_200_OK)
def cancel_booking(
    booking_id: str,
    response: Response,
    payload: CancelBookingRequest | None = None,
    expected_version: int | None = Depends(get_expected_version),
    actor: Actor = Depends(get_current_actor),
    repo: BookingRepository = Depends(get_booking_repository),
) -> CancelBookingResponse:
    reason = payload.reason if payload else None
    result = request_or_perform_cancel(repo, booking_id, actor, reason=reason, expected_version=expected_version)
    _set_etag(response, result.booking.version)
    return CancelBookingResponse(
        cancelled=result.outcome is CancelOutcome.CANCELLED,
        cancel_requested=result.outcome is CancelOutcome.CANCEL_REQUESTED,
        booking=BookingResponse.model_validate(result.booking),
    )
