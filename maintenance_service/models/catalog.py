from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from maintenance_service.database import Base
from maintenance_service.models.base import CamelModel
from maintenance_service.models.enums import InspectionCategory, ValueType, check_in


class ItemType(Base):
    """Kind of item, scoped to an inspection category. Owns its subcheck templates."""
    __tablename__ = "item_types"
    __table_args__ = (
        UniqueConstraint("inspection_category", "item_type_label", name="uq_item_types_category_label"),
        CheckConstraint(check_in("inspection_category", InspectionCategory), name="ck_item_types_category"),
    )

    item_type_id = Column(Integer, primary_key=True, autoincrement=True)
    inspection_category = Column(String, nullable=False)
    item_type_label = Column(String, nullable=False, index=True)
    item_type_description = Column(Text)

    templates = relationship(
        "SubcheckTemplate",
        back_populates="item_type",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SubcheckTemplate.subcheck_template_id",
    )


class SubcheckTemplate(Base):
    """Canonical definition of one check expected for an item type."""
    __tablename__ = "subcheck_templates"
    __table_args__ = (
        UniqueConstraint("item_type_id", "subcheck_template_label", name="uq_subcheck_templates_type_label"),
        CheckConstraint(check_in("value_type", ValueType), name="ck_subcheck_templates_value_type"),
    )

    subcheck_template_id = Column(Integer, primary_key=True, autoincrement=True)
    item_type_id = Column(
        Integer, ForeignKey("item_types.item_type_id", ondelete="CASCADE"), nullable=False, index=True
    )
    subcheck_template_label = Column(String, nullable=False)
    subcheck_template_description = Column(Text)
    value_type = Column(String, nullable=False)
    subcheck_template_mandatory = Column(Boolean, nullable=False, default=True)
    pass_criteria = Column(Text)

    item_type = relationship("ItemType", back_populates="templates")


class ItemTypeOut(CamelModel):
    id: int
    label: str
    category: InspectionCategory
    description: Optional[str] = None


class SubcheckTemplateOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    value_type: str  # wire form: string | number | boolean
    pass_criteria: Optional[str] = None
    mandatory: bool
