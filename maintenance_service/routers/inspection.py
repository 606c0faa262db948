"""
Inspection endpoints
Submit an inspection, read one back, list them newest first.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import sessionmaker

from maintenance_service.config import settings
from maintenance_service.database import get_session_factory
from maintenance_service.errors import NotFoundError
from maintenance_service.models.inspection import InspectionDraft
from maintenance_service.routers.responses import success
from maintenance_service.services.engineers import EngineerResolver
from maintenance_service.services.inspection import InspectionSubmissionEngine
from maintenance_service.services.repository import InspectionRepository

router = APIRouter(prefix="/inspections", tags=["inspections"])


def get_repository(session_factory: sessionmaker = Depends(get_session_factory)) -> InspectionRepository:
    return InspectionRepository(session_factory)


def get_submission_engine(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> InspectionSubmissionEngine:
    resolver = EngineerResolver(
        allow_auto_create=settings.auto_create_engineers,
        hash_rounds=settings.password_hash_rounds,
    )
    return InspectionSubmissionEngine(session_factory, engineer_resolver=resolver)


@router.post("")
def create_inspection(draft: InspectionDraft, engine: InspectionSubmissionEngine = Depends(get_submission_engine)):
    """
    Submit an inspection.

    POST /inspections
    Body: InspectionDraft (camelCase), e.g.
    {"inspectionDate": "2025-08-01", "inspectionCategory": "Facility", "itemId": 1,
     "engineerId": 1, "comment": null,
     "subchecks": [{"subcheckName": "Function test", "subcheckDescription": "Push test",
                    "valueType": "boolean", "passCriteria": "true", "status": "pass"}]}
    """
    return success(engine.submit(draft))


@router.get("")
def list_inspections(
    engineer_id: Optional[int] = Query(None, alias="engineerId"),
    repository: InspectionRepository = Depends(get_repository),
):
    """List inspections, newest first, optionally only those of one engineer."""
    if engineer_id is not None:
        return success(repository.list_by_engineer(engineer_id))
    return success(repository.list_all())


@router.get("/{inspection_id}")
def get_inspection(inspection_id: int, repository: InspectionRepository = Depends(get_repository)):
    inspection = repository.get_by_id(inspection_id)
    if inspection is None:
        raise NotFoundError("Inspection", inspection_id)
    return success(inspection)
