from sqlalchemy import select
from sqlalchemy.orm import Session

from lab_booking.db.models import DEFAULT_LAB_NAME, SiteConfig
from lab_booking.schemas.site_config import SiteConfigRequest, SiteConfigResponse


def get_site_config(db: Session) -> SiteConfig | None:
    return db.scalar(select(SiteConfig).order_by(SiteConfig.updated_at.desc()).limit(1))


def read_site_config(db: Session) -> SiteConfigResponse:
    config = get_site_config(db)
    if config is None:
        return SiteConfigResponse()
    return SiteConfigResponse.model_validate(config)


def get_lab_name(db: Session) -> str:
    config = get_site_config(db)
    return config.lab_name if config else DEFAULT_LAB_NAME


def upsert_site_config(payload: SiteConfigRequest, db: Session) -> SiteConfig:
    config = get_site_config(db)
    if config is None:
        config = SiteConfig()
        db.add(config)

    for name, value in payload.model_dump().items():
        setattr(config, name, value)

    db.commit()
    db.refresh(config)
    return config
