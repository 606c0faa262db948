"""Inspection records and the payloads exchanged with the HTTP layer.

`InspectionDraft` is what a client submits; `PersistedInspection` is what the
store hands back after a submission or a read. Field names are snake_case in
Python and camelCase on the wire.
"""

from typing import List, Optional

from pydantic import Field
from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from maintenance_service.database import Base
from maintenance_service.models.base import CamelModel
from maintenance_service.models.enums import (
    InspectionCategory,
    OverallResult,
    SubcheckStatus,
    ValueType,
    check_in,
)


class Inspection(Base):
    __tablename__ = "inspections"
    __table_args__ = (
        CheckConstraint(check_in("inspection_category", InspectionCategory), name="ck_inspections_category"),
        CheckConstraint(check_in("overall_result", OverallResult), name="ck_inspections_overall_result"),
    )

    inspection_id = Column(Integer, primary_key=True, autoincrement=True)
    inspection_date = Column(String, nullable=False, index=True)  # ISO 8601 as submitted
    inspection_category = Column(String, nullable=False)
    item_id = Column(Integer, ForeignKey("items.item_id", ondelete="RESTRICT"), nullable=False, index=True)
    engineer_id = Column(Integer, ForeignKey("users.user_id", ondelete="RESTRICT"), nullable=False, index=True)
    comment = Column(Text)
    overall_result = Column(String, nullable=False)

    engineer = relationship("User")
    subchecks = relationship(
        "SubcheckResult",
        back_populates="inspection",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SubcheckResult.subcheck_result_id",
    )


class SubcheckResult(Base):
    """Outcome of one check; template values are snapshotted, not linked."""
    __tablename__ = "subcheck_results"
    __table_args__ = (
        CheckConstraint(check_in("value_type", ValueType), name="ck_subcheck_results_value_type"),
        CheckConstraint(check_in("result", SubcheckStatus), name="ck_subcheck_results_result"),
    )

    subcheck_result_id = Column(Integer, primary_key=True, autoincrement=True)
    inspection_id = Column(
        Integer, ForeignKey("inspections.inspection_id", ondelete="CASCADE"), nullable=False, index=True
    )
    subcheck_template_id = Column(
        Integer, ForeignKey("subcheck_templates.subcheck_template_id", ondelete="SET NULL"), nullable=True
    )
    subcheck_result_label = Column(String, nullable=False)
    subcheck_result_description = Column(Text)
    value_type = Column(String, nullable=False)
    subcheck_result_mandatory = Column(Boolean, nullable=False)
    pass_criteria = Column(Text)
    result = Column(String, nullable=False)

    inspection = relationship("Inspection", back_populates="subchecks")


class SubcheckDraft(CamelModel):
    """One submitted subcheck. Shape is checked by the validation rules, not here."""
    subcheck_name: str = ""
    subcheck_description: str = ""
    value_type: str = ""  # string | number | boolean
    pass_criteria: Optional[str] = None
    status: str = ""  # pass | fail | notApplicable
    mandatory: Optional[bool] = None


class InspectionDraft(CamelModel):
    inspection_date: str = ""
    inspection_category: str = ""
    item_id: Optional[int] = None
    engineer_id: Optional[int] = None
    engineer_email: Optional[str] = None
    engineer_name: Optional[str] = None
    engineer_password: Optional[str] = Field(default=None, repr=False)
    comment: Optional[str] = None
    subchecks: List[SubcheckDraft] = Field(default_factory=list)


class PersistedSubcheck(CamelModel):
    subcheck_name: str
    subcheck_description: str
    value_type: str
    pass_criteria: str
    status: SubcheckStatus
    mandatory: bool


class PersistedInspection(CamelModel):
    inspection_id: int
    engineer_id: int
    engineer_name: str
    inspection_date: str
    inspection_category: InspectionCategory
    item_id: int
    comment: Optional[str] = None
    overall_result: OverallResult
    subchecks: List[PersistedSubcheck]
