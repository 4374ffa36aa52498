from pydantic import BaseModel, EmailStr, Field

from lab_booking.schemas.common import Phone, ShortText


class SignupRequest(BaseModel):
    name: ShortText
    email: EmailStr
    phone: Phone
    password: str = Field(min_length=1, max_length=256)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SessionUser(BaseModel):
    id: str
    email: str | None
    role: str


class SessionResponse(BaseModel):
    user: SessionUser | None = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1, max_length=128)
    password: str = Field(min_length=1, max_length=256)


class OkResponse(BaseModel):
    ok: bool = True
