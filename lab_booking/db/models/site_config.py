from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from lab_booking.db.base import Base, generate_id

DEFAULT_LAB_NAME = "Lab Test Booking"


class SiteConfig(Base):
    __tablename__ = "site_config"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    lab_name: Mapped[str] = mapped_column(String(200), nullable=False)
    lab_address: Mapped[str] = mapped_column(String(500), nullable=False)
    lab_city: Mapped[str] = mapped_column(String(120), nullable=False)
    lab_state: Mapped[str] = mapped_column(String(120), nullable=False)
    lab_pincode: Mapped[str] = mapped_column(String(20), nullable=False)
    lab_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    lab_email: Mapped[str] = mapped_column(String(255), nullable=False)
    lab_logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    primary_color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    secondary_color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    about_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    terms_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    privacy_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
