from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from lab_booking.api.deps import LimitParam, OffsetParam
from lab_booking.db.models.lab_test import TestType
from lab_booking.db.session import get_db
from lab_booking.schemas.lab_test import LabTestResponse
from lab_booking.services.lab_test_service import get_test, list_tests

router = APIRouter(prefix="/tests", tags=["catalog"])


@router.get("", response_model=list[LabTestResponse], status_code=status.HTTP_200_OK)
def list_catalog(
    category: str | None = Query(default=None, max_length=120),
    test_type: TestType | None = Query(default=None),
    search: str | None = Query(default=None, max_length=120),
    limit: LimitParam = 20,
    offset: OffsetParam = 0,
    db: Session = Depends(get_db),
) -> list[LabTestResponse]:
    tests = list_tests(db, category=category, test_type=test_type, search=search, limit=limit, offset=offset)
    return [LabTestResponse.model_validate(test) for test in tests]


@router.get("/{test_id}", response_model=LabTestResponse, status_code=status.HTTP_200_OK)
def get_catalog_test(test_id: str, db: Session = Depends(get_db)) -> LabTestResponse:
    return LabTestResponse.model_validate(get_test(test_id, db))
