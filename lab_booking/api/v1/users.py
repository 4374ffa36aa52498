from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from lab_booking.api.deps import get_current_actor
from lab_booking.core.exceptions import UnauthorizedError
from lab_booking.db.models.user import User
from lab_booking.db.session import get_db
from lab_booking.domain.actor import Actor
from lab_booking.schemas.user import UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse, status_code=status.HTTP_200_OK)
def get_me(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)) -> UserResponse:
    user = db.scalar(select(User).where(User.id == actor.id))
    if not user:
        raise UnauthorizedError()
    return UserResponse.model_validate(user)
