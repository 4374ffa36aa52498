from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field, model_validator

from lab_booking.db.models.booking import BookingType
from lab_booking.schemas.common import (
    LongText,
    OptionalCode,
    OptionalLongText,
    OptionalNote,
    OptionalShortText,
    OptionalUrl,
    Phone,
    ShortText,
)


def _clean_test_ids(value: list[str]) -> list[str]:
    cleaned = [test_id.strip() for test_id in value]
    if any(not test_id for test_id in cleaned):
        raise ValueError("test ids must be non-empty strings")
    return cleaned


TestIds = Annotated[list[str], Field(min_length=1, max_length=50), AfterValidator(_clean_test_ids)]
PatientAge = Annotated[int, Field(ge=1, le=150)]


class BookingCreateRequest(BaseModel):
    booking_type: BookingType
    patient_name: ShortText
    patient_age: PatientAge
    city: ShortText
    phone: Phone
    test_ids: TestIds
    address: OptionalLongText = None
    state: OptionalShortText = None
    pincode: OptionalCode = None
    booking_date: date | None = None
    booking_time: OptionalCode = None
    notes: OptionalNote = None
    prescription_url: OptionalUrl = None

    @model_validator(mode="after")
    def require_address_for_home_collection(self) -> "BookingCreateRequest":
        if self.booking_type == BookingType.HOME_COLLECTION and not self.address:
            raise ValueError("address is required for home collection")
        return self


class BookingEditRequest(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    patient_name: ShortText | None = None
    patient_age: PatientAge | None = None
    address: LongText | None = None
    city: ShortText | None = None
    state: OptionalShortText = None
    pincode: OptionalCode = None
    phone: Phone | None = None
    booking_date: date | None = None
    booking_time: OptionalCode = None
    notes: OptionalNote = None

    @model_validator(mode="after")
    def reject_null_for_required_fields(self) -> "BookingEditRequest":
        for name in ("patient_name", "patient_age", "address", "city", "phone"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class AdminBookingUpdateRequest(BaseModel):
    # Free-form: unknown statuses are ignored rather than rejected.
    status: str | None = Field(default=None, max_length=40)
    notes: OptionalNote = None


class CancelBookingRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=5000)


class BookedTestResponse(BaseModel):
    id: str
    name: str
    category: str

    model_config = {"from_attributes": True}


class BookingItemResponse(BaseModel):
    id: int
    test_id: str
    price: Decimal
    test: BookedTestResponse | None = None

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: str
    user_id: str
    booking_type: BookingType
    status: str
    patient_name: str
    patient_age: int
    booking_date: date | None
    booking_time: str | None
    address: str | None
    city: str
    state: str | None
    pincode: str | None
    phone: str
    prescription_url: str | None
    notes: str | None
    total_amount: Decimal
    cancel_requested: bool
    cancel_reason: str | None
    cancel_reviewed_at: datetime | None
    cancel_reviewed_by: str | None
    version: int
    created_at: datetime
    updated_at: datetime
    items: list[BookingItemResponse]

    model_config = {"from_attributes": True}


class BookingOwnerResponse(BaseModel):
    id: str
    name: str | None
    email: str
    phone: str | None

    model_config = {"from_attributes": True}


class AdminBookingResponse(BookingResponse):
    user: BookingOwnerResponse


class CancelBookingResponse(BaseModel):
    ok: bool = True
    cancelled: bool = False
    cancel_requested: bool = False
    booking: BookingResponse
