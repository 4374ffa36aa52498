from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lab_booking.db.session import get_db
from lab_booking.schemas.site_config import SiteConfigResponse
from lab_booking.services.site_config_service import read_site_config

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SiteConfigResponse, status_code=status.HTTP_200_OK)
def get_public_settings(db: Session = Depends(get_db)) -> SiteConfigResponse:
    return read_site_config(db)
