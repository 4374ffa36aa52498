from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from lab_booking.core.exceptions import ConflictError, StaleVersionError
from lab_booking.db.models import Booking, BookingItem, LabTest, User


class BookingRepository:
    """Storage collaborator for the booking lifecycle.

    Every write commits one unit of work; a failed write rolls the session
    back so nothing is partially applied.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _with_relations(self):
        return select(Booking).options(
            selectinload(Booking.items).selectinload(BookingItem.test),
            selectinload(Booking.user),
        )

    def find_booking(self, booking_id: str) -> Booking | None:
        return self.db.scalar(self._with_relations().where(Booking.id == booking_id))

    def find_active_tests(self, test_ids: Iterable[str]) -> list[LabTest]:
        ids = list(test_ids)
        if not ids:
            return []
        return list(
            self.db.scalars(select(LabTest).where(LabTest.id.in_(ids), LabTest.is_active.is_(True))).all()
        )

    def find_user(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def add(self, booking: Booking) -> Booking:
        self.db.add(booking)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Booking could not be stored") from None
        return self.find_booking(booking.id)

    def save(self, booking: Booking) -> Booking:
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise StaleVersionError() from None
        self.db.refresh(booking)
        return booking

    def list_for_user(self, user_id: str, limit: int = 50, offset: int = 0) -> list[Booking]:
        query = (
            self._with_relations()
            .where(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.id)
            .limit(limit)
            .offset(offset)
        )
        return list(self.db.scalars(query).all())

    def list_all(
        self,
        status: str | None = None,
        booking_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Booking]:
        query = self._with_relations()
        if status:
            query = query.where(Booking.status == status)
        if booking_type:
            query = query.where(Booking.booking_type == booking_type)
        query = query.order_by(Booking.created_at.desc(), Booking.id).limit(limit).offset(offset)
        return list(self.db.scalars(query).all())

    def count_for_users(self, user_ids: Iterable[str]) -> dict[str, int]:
        ids = list(user_ids)
        if not ids:
            return {}
        rows = self.db.execute(
            select(Booking.user_id, func.count(Booking.id))
            .where(Booking.user_id.in_(ids))
            .group_by(Booking.user_id)
        ).all()
        return {user_id: count for user_id, count in rows}

    def test_has_bookings(self, test_id: str) -> bool:
        return self.db.scalar(select(BookingItem.id).where(BookingItem.test_id == test_id).limit(1)) is not None
