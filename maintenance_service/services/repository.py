"""
Read path for inspections.

Every read returns PersistedInspection built from the stored rows: engineer
name joined from users, subchecks in insertion order.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload, sessionmaker

from maintenance_service.errors import StorageError
from maintenance_service.models.inspection import (
    Inspection,
    PersistedInspection,
    PersistedSubcheck,
    SubcheckResult,
)
from maintenance_service.services import rules

logger = logging.getLogger(__name__)


class InspectionRepository:
    """Read-only access to stored inspections."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_by_id(self, inspection_id: int) -> Optional[PersistedInspection]:
        """Get one inspection, or None if the id is unknown."""
        records = self._query(Inspection.inspection_id == inspection_id)
        return records[0] if records else None

    def list_all(self) -> List[PersistedInspection]:
        """All inspections, newest first (date desc, then id desc)."""
        return self._query()

    def list_by_engineer(self, engineer_id: int) -> List[PersistedInspection]:
        """Inspections made by one engineer, newest first."""
        return self._query(Inspection.engineer_id == engineer_id)

    def _query(self, *criteria) -> List[PersistedInspection]:
        session = self.session_factory()
        try:
            query = (
                select(Inspection)
                .options(joinedload(Inspection.engineer), selectinload(Inspection.subchecks))
                .where(*criteria)
                .order_by(Inspection.inspection_date.desc(), Inspection.inspection_id.desc())
            )
            return [to_persisted(record) for record in session.scalars(query).unique()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to read inspections: {e}")
            raise StorageError() from e
        finally:
            session.close()


def to_persisted(record: Inspection) -> PersistedInspection:
    return PersistedInspection(
        inspection_id=record.inspection_id,
        engineer_id=record.engineer_id,
        engineer_name=record.engineer.full_name,
        inspection_date=record.inspection_date,
        inspection_category=record.inspection_category,
        item_id=record.item_id,
        comment=record.comment,
        overall_result=record.overall_result,
        subchecks=[_subcheck_out(row) for row in record.subchecks],
    )


def _subcheck_out(row: SubcheckResult) -> PersistedSubcheck:
    return PersistedSubcheck(
        subcheck_name=row.subcheck_result_label,
        subcheck_description=row.subcheck_result_description or "",
        value_type=rules.from_db_value_type(row.value_type),
        pass_criteria=row.pass_criteria or "",
        status=row.result,
        mandatory=bool(row.subcheck_result_mandatory),
    )
