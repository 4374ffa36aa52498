from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from lab_booking.api.deps import (
    LimitParam,
    OffsetParam,
    admin_rate_limit,
    get_booking_repository,
    get_expected_version,
    require_admin,
)
from lab_booking.core.exceptions import NotFoundError
from lab_booking.db.models import BookingStatus, BookingType, TestType, User
from lab_booking.db.repositories import BookingRepository
from lab_booking.db.session import get_db
from lab_booking.domain.actor import Actor
from lab_booking.schemas.booking import AdminBookingResponse, AdminBookingUpdateRequest, BookingResponse
from lab_booking.schemas.lab_test import (
    LabTestCreateRequest,
    LabTestDeleteResponse,
    LabTestResponse,
    LabTestUpdateRequest,
)
from lab_booking.schemas.site_config import SiteConfigRequest, SiteConfigResponse
from lab_booking.schemas.user import AdminUserResponse
from lab_booking.services.booking_lifecycle import BOOKING_NOT_FOUND_DETAIL, admin_set_status
from lab_booking.services.email_service import Notifier, get_notifier
from lab_booking.services.lab_test_service import create_test, delete_test, get_test, list_tests, update_test
from lab_booking.services.notifications import schedule_booking_events
from lab_booking.services.site_config_service import get_lab_name, read_site_config, upsert_site_config

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin), Depends(admin_rate_limit)],
)


@router.get("/bookings", response_model=list[AdminBookingResponse], status_code=status.HTTP_200_OK)
def list_bookings(
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
    booking_type: BookingType | None = Query(default=None),
    limit: LimitParam = 50,
    offset: OffsetParam = 0,
    repo: BookingRepository = Depends(get_booking_repository),
) -> list[AdminBookingResponse]:
    bookings = repo.list_all(
        status=status_filter.value if status_filter else None,
        booking_type=booking_type.value if booking_type else None,
        limit=limit,
        offset=offset,
    )
    return [AdminBookingResponse.model_validate(booking) for booking in bookings]


@router.get("/bookings/{booking_id}", response_model=AdminBookingResponse, status_code=status.HTTP_200_OK)
def get_booking(
    booking_id: str,
    response: Response,
    repo: BookingRepository = Depends(get_booking_repository),
) -> AdminBookingResponse:
    booking = repo.find_booking(booking_id)
    if not booking:
        raise NotFoundError(BOOKING_NOT_FOUND_DETAIL)
    response.headers["ETag"] = f'"{booking.version}"'
    return AdminBookingResponse.model_validate(booking)


@router.patch("/bookings/{booking_id}", response_model=AdminBookingResponse, status_code=status.HTTP_200_OK)
def update_booking(
    booking_id: str,
    payload: AdminBookingUpdateRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    expected_version: int | None = Depends(get_expected_version),
    actor: Actor = Depends(require_admin),
    repo: BookingRepository = Depends(get_booking_repository),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> AdminBookingResponse:
    result = admin_set_status(repo, booking_id, actor, payload, expected_version=expected_version)
    schedule_booking_events(background_tasks, notifier, result.events, get_lab_name(db))
    response.headers["ETag"] = f'"{result.booking.version}"'
    return AdminBookingResponse.model_validate(result.booking)


@router.get("/tests", response_model=list[LabTestResponse], status_code=status.HTTP_200_OK)
def list_all_tests(
    category: str | None = Query(default=None, max_length=120),
    test_type: TestType | None = Query(default=None),
    search: str | None = Query(default=None, max_length=120),
    limit: LimitParam = 50,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> list[LabTestResponse]:
    tests = list_tests(
        db,
        category=category,
        test_type=test_type,
        search=search,
        include_inactive=True,
        limit=limit,
        offset=offset,
    )
    return [LabTestResponse.model_validate(test) for test in tests]


@router.post("/tests", response_model=LabTestResponse, status_code=status.HTTP_201_CREATED)
def add_test(payload: LabTestCreateRequest, db: Session = Depends(get_db)) -> LabTestResponse:
    return LabTestResponse.model_validate(create_test(payload, db))


@router.get("/tests/{test_id}", response_model=LabTestResponse, status_code=status.HTTP_200_OK)
def get_any_test(test_id: str, db: Session = Depends(get_db)) -> LabTestResponse:
    return LabTestResponse.model_validate(get_test(test_id, db, include_inactive=True))


@router.patch("/tests/{test_id}", response_model=LabTestResponse, status_code=status.HTTP_200_OK)
def edit_test(test_id: str, payload: LabTestUpdateRequest, db: Session = Depends(get_db)) -> LabTestResponse:
    return LabTestResponse.model_validate(update_test(test_id, payload, db))


@router.delete("/tests/{test_id}", response_model=LabTestDeleteResponse, status_code=status.HTTP_200_OK)
def remove_test(test_id: str, db: Session = Depends(get_db)) -> LabTestDeleteResponse:
    return delete_test(test_id, db)


@router.get("/users", response_model=list[AdminUserResponse], status_code=status.HTTP_200_OK)
def list_users(
    limit: LimitParam = 50,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
    repo: BookingRepository = Depends(get_booking_repository),
) -> list[AdminUserResponse]:
    users = db.scalars(select(User).order_by(User.created_at.desc(), User.id).limit(limit).offset(offset)).all()
    counts = repo.count_for_users(user.id for user in users)
    return [
        AdminUserResponse.model_validate(user).model_copy(update={"booking_count": counts.get(user.id, 0)})
        for user in users
    ]


@router.get("/users/{user_id}/bookings", response_model=list[BookingResponse], status_code=status.HTTP_200_OK)
def list_user_bookings(
    user_id: str,
    limit: LimitParam = 50,
    offset: OffsetParam = 0,
    repo: BookingRepository = Depends(get_booking_repository),
) -> list[BookingResponse]:
    if repo.find_user(user_id) is None:
        raise NotFoundError("User not found")
    bookings = repo.list_for_user(user_id, limit=limit, offset=offset)
    return [BookingResponse.model_validate(booking) for booking in bookings]


@router.get("/settings", response_model=SiteConfigResponse, status_code=status.HTTP_200_OK)
def get_settings(db: Session = Depends(get_db)) -> SiteConfigResponse:
    return read_site_config(db)


@router.put("/settings", response_model=SiteConfigResponse, status_code=status.HTTP_200_OK)
def put_settings(payload: SiteConfigRequest, db: Session = Depends(get_db)) -> SiteConfigResponse:
    return SiteConfigResponse.model_validate(upsert_site_config(payload, db))
