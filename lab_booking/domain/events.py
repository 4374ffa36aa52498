from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from uuid import uuid4


@dataclass(frozen=True)
class BookingEvent:
    booking_id: str
    recipient_email: str | None
    recipient_name: str | None
    event_id: str = field(default_factory=lambda: uuid4().hex, kw_only=True)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC), kw_only=True)


@dataclass(frozen=True)
class BookedTest:
    name: str
    price: Decimal


@dataclass(frozen=True)
class BookingPlaced(BookingEvent):
    booking_type: str
    total_amount: Decimal
    tests: tuple[BookedTest, ...]
    booking_date: date | None = None
    booking_time: str | None = None


@dataclass(frozen=True)
class BookingStatusChanged(BookingEvent):
    old_status: str
    new_status: str
    notes: str | None = None
