from typing import Annotated, Callable

from fastapi import Depends, Header, Query, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.orm import Session

from lab_booking.core.config import settings
from lab_booking.core.exceptions import BadRequestError, ForbiddenError, RateLimitedError, UnauthorizedError
from lab_booking.core.rate_limiter import RateLimitPolicy, admin_policy, auth_policy, booking_policy, rate_limiter
from lab_booking.core.security import decode_access_token
from lab_booking.db.models.user import User
from lab_booking.db.repositories import BookingRepository
from lab_booking.db.session import get_db
from lab_booking.domain.actor import Actor

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

LimitParam = Annotated[int, Query(ge=1, le=100)]
OffsetParam = Annotated[int, Query(ge=0)]


def _actor_from_token(token: str, db: Session) -> Actor | None:
    try:
        payload = decode_access_token(token)
    except ValueError:
        return None
    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        return None

    user = db.scalar(select(User).where(User.id == user_id))
    if not user or not user.is_active:
        return None
    return Actor(id=user.id, role=user.role, email=user.email, name=user.name)


def get_optional_actor(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Actor | None:
    for candidate in (request.cookies.get(settings.session_cookie_name), token):
        if candidate:
            actor = _actor_from_token(candidate, db)
            if actor:
                return actor
    return None


def get_current_actor(actor: Actor | None = Depends(get_optional_actor)) -> Actor:
    if actor is None:
        raise UnauthorizedError(headers={"WWW-Authenticate": "Bearer"})
    return actor


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise ForbiddenError()
    return actor


def get_booking_repository(db: Session = Depends(get_db)) -> BookingRepository:
    return BookingRepository(db)


def get_expected_version(
    if_match: Annotated[str | None, Header(alias="If-Match")] = None,
) -> int | None:
    if if_match is None:
        return None
    raw = if_match.strip()
    if raw.startswith("W/"):
        raw = raw[2:]
    raw = raw.strip('"')
    if not raw.isdigit():
        raise BadRequestError("If-Match header must be a booking version number")
    return int(raw)


def _enforce(policy: RateLimitPolicy, identifier: str) -> None:
    decision = rate_limiter.check(policy, identifier)
    if not decision.allowed:
        raise RateLimitedError(headers={"Retry-After": str(decision.retry_after)})


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def rate_limit_by_ip(policy_factory: Callable[[], RateLimitPolicy]) -> Callable[[Request], None]:
    def checker(request: Request) -> None:
        _enforce(policy_factory(), client_ip(request))

    return checker


def rate_limit_by_actor(policy_factory: Callable[[], RateLimitPolicy]) -> Callable[[Actor], None]:
    def checker(actor: Actor = Depends(get_current_actor)) -> None:
        _enforce(policy_factory(), actor.id)

    return checker


auth_rate_limit = rate_limit_by_ip(auth_policy)
booking_rate_limit = rate_limit_by_actor(booking_policy)
admin_rate_limit = rate_limit_by_actor(admin_policy)
