import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lab_booking.core.config import settings
from lab_booking.core.exceptions import BadRequestError, ConflictError, UnauthorizedError
from lab_booking.core.password_policy import validate_password
from lab_booking.core.security import (
    create_access_token,
    ensure_aware,
    generate_reset_token,
    get_password_hash,
    verify_password,
)
from lab_booking.db.models import PasswordResetToken, User, UserRole
from lab_booking.schemas.auth import LoginRequest, SignupRequest

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_DETAIL = "User with this email already exists"
INVALID_CREDENTIALS_DETAIL = "Invalid email or password"
INVALID_RESET_TOKEN_DETAIL = "Invalid or expired reset token"


def _enforce_password_policy(password: str) -> None:
    is_valid, errors = validate_password(password)
    if not is_valid:
        raise BadRequestError("Password does not meet requirements: " + "; ".join(errors))


def register_user(payload: SignupRequest, db: Session) -> User:
    _enforce_password_policy(payload.password)

    email = payload.email.lower()
    existing_user = db.scalar(select(User).where(User.email == email))
    if existing_user:
        raise ConflictError(DUPLICATE_EMAIL_DETAIL)

    user = User(
        email=email,
        name=payload.name,
        phone=payload.phone,
        hashed_password=get_password_hash(payload.password),
        role=UserRole.USER.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_EMAIL_DETAIL) from None
    db.refresh(user)
    logger.info("user_registered user_id=%s", user.id)
    return user


def issue_token(user: User) -> str:
    return create_access_token(subject=user.id, extra_claims={"role": user.role, "email": user.email})


def login_user(payload: LoginRequest, db: Session) -> tuple[User, str]:
    email = payload.email.lower()
    user = db.scalar(select(User).where(User.email == email))
    if not user or not verify_password(payload.password, user.hashed_password):
        logger.info("login_failed email=%s", email)
        raise UnauthorizedError(INVALID_CREDENTIALS_DETAIL)
    if not user.is_active:
        raise UnauthorizedError(INVALID_CREDENTIALS_DETAIL)

    return user, issue_token(user)


def create_password_reset(email: str, db: Session, now: datetime | None = None) -> tuple[User, str] | None:
    user = db.scalar(select(User).where(User.email == email.lower()))
    if not user or not user.is_active:
        logger.info("password_reset_unknown_email")
        return None

    current_time = now or datetime.now(UTC)
    # Any older outstanding token stops working once a new one is issued
    db.execute(
        update(PasswordResetToken)
        .where(PasswordResetToken.user_id == user.id, PasswordResetToken.consumed.is_(False))
        .values(consumed=True)
    )
    token = generate_reset_token()
    db.add(
        PasswordResetToken(
            token=token,
            user_id=user.id,
            expires_at=current_time + timedelta(minutes=settings.password_reset_expire_minutes),
            consumed=False,
        )
    )
    db.commit()
    logger.info("password_reset_created user_id=%s", user.id)
    return user, token


def reset_password(token: str, new_password: str, db: Session, now: datetime | None = None) -> User:
    current_time = now or datetime.now(UTC)
    reset = db.scalar(select(PasswordResetToken).where(PasswordResetToken.token == token))
    if not reset or reset.consumed or ensure_aware(reset.expires_at) <= current_time:
        raise BadRequestError(INVALID_RESET_TOKEN_DETAIL)

    _enforce_password_policy(new_password)

    user = reset.user
    user.hashed_password = get_password_hash(new_password)
    reset.consumed = True
    db.commit()
    db.refresh(user)
    logger.info("password_reset_completed user_id=%s", user.id)
    return user
