import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from lab_booking.core.exceptions import NotFoundError
from lab_booking.db.models import LabTest, TestType
from lab_booking.db.repositories import BookingRepository
from lab_booking.schemas.lab_test import LabTestCreateRequest, LabTestDeleteResponse, LabTestUpdateRequest

logger = logging.getLogger(__name__)

TEST_NOT_FOUND_DETAIL = "Test not found"


def _storable(data: dict) -> dict:
    if isinstance(data.get("test_type"), TestType):
        data["test_type"] = data["test_type"].value
    return data


def list_tests(
    db: Session,
    category: str | None = None,
    test_type: TestType | None = None,
    search: str | None = None,
    include_inactive: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> list[LabTest]:
    query = select(LabTest)
    if not include_inactive:
        query = query.where(LabTest.is_active.is_(True))
    if category:
        query = query.where(LabTest.category == category)
    if test_type:
        query = query.where(LabTest.test_type == test_type.value)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(LabTest.name.ilike(pattern), LabTest.description.ilike(pattern)))

    query = query.order_by(LabTest.category, LabTest.name, LabTest.id).limit(limit).offset(offset)
    return list(db.scalars(query).all())


def get_test(test_id: str, db: Session, include_inactive: bool = False) -> LabTest:
    test = db.get(LabTest, test_id)
    if test is None or (not include_inactive and not test.is_active):
        raise NotFoundError(TEST_NOT_FOUND_DETAIL)
    return test


def create_test(payload: LabTestCreateRequest, db: Session) -> LabTest:
    test = LabTest(**_storable(payload.model_dump()))
    db.add(test)
    db.commit()
    db.refresh(test)
    logger.info("lab_test_created test_id=%s", test.id)
    return test


def update_test(test_id: str, payload: LabTestUpdateRequest, db: Session) -> LabTest:
    test = get_test(test_id, db, include_inactive=True)
    for name, value in _storable(payload.changes()).items():
        setattr(test, name, value)
    db.commit()
    db.refresh(test)
    logger.info("lab_test_updated test_id=%s", test.id)
    return test


def delete_test(test_id: str, db: Session) -> LabTestDeleteResponse:
    test = get_test(test_id, db, include_inactive=True)

    # Booked tests stay referenced by booking items, so they are only hidden
    if BookingRepository(db).test_has_bookings(test.id):
        test.is_active = False
        db.commit()
        logger.info("lab_test_deactivated test_id=%s", test_id)
        return LabTestDeleteResponse(
            deleted=False,
            deactivated=True,
            message="Test has existing bookings and was deactivated instead of deleted",
        )

    db.delete(test)
    db.commit()
    logger.info("lab_test_deleted test_id=%s", test_id)
    return LabTestDeleteResponse(deleted=True, deactivated=False, message="Test deleted")
