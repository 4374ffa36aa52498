from pydantic import BaseModel, EmailStr

from lab_booking.db.models.site_config import DEFAULT_LAB_NAME
from lab_booking.schemas.common import LongText, OptionalCode, OptionalUrl, Phone, RichText, ShortText


class SiteConfigRequest(BaseModel):
    lab_name: ShortText
    lab_address: LongText
    lab_city: ShortText
    lab_state: ShortText
    lab_pincode: ShortText
    lab_phone: Phone
    lab_email: EmailStr
    lab_logo_url: OptionalUrl = None
    primary_color: OptionalCode = None
    secondary_color: OptionalCode = None
    about_text: RichText = None
    terms_text: RichText = None
    privacy_text: RichText = None


class SiteConfigResponse(BaseModel):
    lab_name: str = DEFAULT_LAB_NAME
    lab_address: str = ""
    lab_city: str = ""
    lab_state: str = ""
    lab_pincode: str = ""
    lab_phone: str = ""
    lab_email: str = ""
    lab_logo_url: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    about_text: str | None = None
    terms_text: str | None = None
    privacy_text: str | None = None

    model_config = {"from_attributes": True}
