from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.orm import Session

from lab_booking.api.deps import auth_rate_limit, get_optional_actor
from lab_booking.core.config import settings
from lab_booking.db.session import get_db
from lab_booking.domain.actor import Actor
from lab_booking.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    OkResponse,
    ResetPasswordRequest,
    SessionResponse,
    SessionUser,
    SignupRequest,
    TokenResponse,
)
from lab_booking.schemas.user import UserResponse
from lab_booking.services.auth_service import create_password_reset, login_user, register_user, reset_password
from lab_booking.services.email_service import Notifier, get_notifier
from lab_booking.services.email_templates import password_reset_email, welcome_email
from lab_booking.services.notifications import OutgoingEmail, schedule_emails
from lab_booking.services.site_config_service import get_lab_name

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
def signup(
    payload: SignupRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> UserResponse:
    user = register_user(payload=payload, db=db)
    subject, body = welcome_email(user.name or "User", get_lab_name(db), settings.app_base_url)
    schedule_emails(background_tasks, notifier, [OutgoingEmail("welcome", user.email, subject, body)])
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(auth_rate_limit)],
)
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> TokenResponse:
    _, token = login_user(payload=payload, db=db)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return TokenResponse(access_token=token)


@router.post("/logout", response_model=OkResponse, status_code=status.HTTP_200_OK)
def logout(response: Response) -> OkResponse:
    response.delete_cookie(key=settings.session_cookie_name)
    return OkResponse()


@router.get("/session", response_model=SessionResponse, status_code=status.HTTP_200_OK)
def read_session(actor: Actor | None = Depends(get_optional_actor)) -> SessionResponse:
    if actor is None:
        return SessionResponse()
    return SessionResponse(user=SessionUser(id=actor.id, email=actor.email, role=actor.role))


@router.post(
    "/forgot-password",
    response_model=OkResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(auth_rate_limit)],
)
def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> OkResponse:
    issued = create_password_reset(email=payload.email, db=db)
    if issued:
        user, token = issued
        subject, body = password_reset_email(
            user.name or "User",
            f"{settings.app_base_url}/reset-password?token={token}",
            get_lab_name(db),
            f"{settings.password_reset_expire_minutes} minutes",
        )
        schedule_emails(background_tasks, notifier, [OutgoingEmail("password_reset", user.email, subject, body)])
    # Same answer whether or not the email exists
    return OkResponse()


@router.post(
    "/reset-password",
    response_model=OkResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(auth_rate_limit)],
)
def reset(payload: ResetPasswordRequest, db: Session = Depends(get_db)) -> OkResponse:
    reset_password(token=payload.token, new_password=payload.password, db=db)
    return OkResponse()
