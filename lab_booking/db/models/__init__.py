from lab_booking.db.models.booking import Booking, BookingItem, BookingStatus, BookingType
from lab_booking.db.models.lab_test import LabTest, TestType
from lab_booking.db.models.password_reset_token import PasswordResetToken
from lab_booking.db.models.site_config import DEFAULT_LAB_NAME, SiteConfig
from lab_booking.db.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "LabTest",
    "TestType",
    "Booking",
    "BookingItem",
    "BookingStatus",
    "BookingType",
    "SiteConfig",
    "DEFAULT_LAB_NAME",
    "PasswordResetToken",
]
