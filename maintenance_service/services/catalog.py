"""
Template catalog: item types and the subcheck templates they own.

Rows are created lazily the first time a submission (or an item) refers to
them. Creation is an insert that does nothing on a unique-key conflict,
followed by a re-select, so concurrent first use still ends with one row per
(category, label) and per (item type, label). Callers own the transaction.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from maintenance_service.errors import ConflictError, StorageError, ValidationError
from maintenance_service.models.catalog import ItemType, ItemTypeOut, SubcheckTemplate, SubcheckTemplateOut
from maintenance_service.models.enums import InspectionCategory, ValueType
from maintenance_service.models.inspection import SubcheckDraft
from maintenance_service.services import rules

logger = logging.getLogger(__name__)

DEFAULT_PASS_CRITERIA = "true"


@dataclass(frozen=True)
class ItemTypeResolution:
    item_type_id: int
    created: bool


@dataclass(frozen=True)
class TemplateResolution:
    """Effective template values for one subcheck; `created` tells Existing from Created."""
    template_id: int
    value_type: ValueType
    mandatory: bool
    pass_criteria: str
    created: bool


def insert_if_absent(session: Session, model, values: dict, conflict_columns: Optional[List[str]]) -> bool:
    """
    Insert one row unless a row with the same unique key exists.

    Args:
        session: open session, inside the caller's transaction
        model: ORM class whose table receives the row
        values: column -> value
        conflict_columns: columns of the unique constraint to test, None for any

    Returns:
        True if this call inserted the row, False if it was already there
    """
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        stmt = sqlite_insert(model.__table__)
    elif dialect == "postgresql":
        stmt = pg_insert(model.__table__)
    else:
        try:
            _insert_in_savepoint(session, model, values)
        except ConflictError:
            return False
        return True
    stmt = stmt.values(**values).on_conflict_do_nothing(index_elements=conflict_columns)
    result = session.execute(stmt)
    return result.rowcount == 1


def _insert_in_savepoint(session: Session, model, values: dict):
    # Dialects without ON CONFLICT: a duplicate only undoes the savepoint
    try:
        with session.begin_nested():
            session.execute(insert(model.__table__).values(**values))
    except IntegrityError as exc:
        raise ConflictError(f"{model.__tablename__} row already exists.") from exc


def resolve_item_type(session: Session, category, label: str) -> ItemTypeResolution:
    """Find the item type for (category, label), creating it with no description if absent."""
    parsed = InspectionCategory.parse(category)
    if parsed is None:
        raise ValidationError("Inspection category must be 'Facility' | 'MachineSafety'.")
    if not label or not label.strip():
        raise ValidationError("Item type label is required.")

    existing = _select_item_type_id(session, parsed, label)
    if existing is not None:
        return ItemTypeResolution(existing, created=False)

    created = insert_if_absent(
        session,
        ItemType,
        {
            "inspection_category": parsed.value,
            "item_type_label": label,
            "item_type_description": None,
        },
        ["inspection_category", "item_type_label"],
    )
    item_type_id = _select_item_type_id(session, parsed, label)
    if item_type_id is None:
        raise StorageError(f"Item type '{label}' vanished while it was being created.")
    if created:
        logger.info(f"Created item type {item_type_id}: {parsed.value}/{label}")
    return ItemTypeResolution(item_type_id, created=created)


def load_mandatory_map(session: Session, item_type_id: int) -> Dict[str, bool]:
    rows = session.execute(
        select(SubcheckTemplate.subcheck_template_label, SubcheckTemplate.subcheck_template_mandatory)
        .where(SubcheckTemplate.item_type_id == item_type_id)
    ).all()
    return {label: bool(mandatory) for label, mandatory in rows}


def resolve_or_create_template(session: Session, item_type_id: int, subcheck) -> TemplateResolution:
    """
    Match a submitted subcheck to its template, creating the template on first use.

    An existing template's value type, mandatory flag and pass criteria win over
    the submitted ones. A new template takes the submitted label, description
    and value type, with mandatory=True and pass criteria "true" unless the
    subcheck supplies them.

    Args:
        session: open session, inside the caller's transaction
        item_type_id: owning item type
        subcheck: SubcheckDraft (or anything with the same attributes)

    Returns:
        TemplateResolution with the effective values
    """
    label = subcheck.subcheck_name
    template = _select_template(session, item_type_id, label)
    if template is not None:
        return _resolution(template, subcheck, created=False)

    mandatory = getattr(subcheck, "mandatory", None)
    pass_criteria = getattr(subcheck, "pass_criteria", None)
    created = insert_if_absent(
        session,
        SubcheckTemplate,
        {
            "item_type_id": item_type_id,
            "subcheck_template_label": label,
            "subcheck_template_description": subcheck.subcheck_description or "",
            "value_type": rules.to_db_value_type(subcheck.value_type).value,
            "subcheck_template_mandatory": True if mandatory is None else bool(mandatory),
            "pass_criteria": pass_criteria if pass_criteria and pass_criteria.strip() else DEFAULT_PASS_CRITERIA,
        },
        ["item_type_id", "subcheck_template_label"],
    )
    template = _select_template(session, item_type_id, label)
    if template is None:
        raise StorageError(f"Subcheck template '{label}' vanished while it was being created.")
    if created:
        logger.info(f"Created subcheck template {template.subcheck_template_id} '{label}' for item type {item_type_id}")
    return _resolution(template, subcheck, created=created)


def seed_template(
    session: Session,
    item_type_id: int,
    label: str,
    description: str,
    value_type: str = "boolean",
    mandatory: bool = True,
    pass_criteria: Optional[str] = None,
) -> TemplateResolution:
    """Administrative creation of a template; an existing one is left untouched."""
    draft = SubcheckDraft(
        subcheck_name=label,
        subcheck_description=description,
        value_type=value_type,
        pass_criteria=pass_criteria,
        mandatory=mandatory,
    )
    return resolve_or_create_template(session, item_type_id, draft)


def list_item_types(session: Session, category=None) -> List[ItemTypeOut]:
    query = select(ItemType).order_by(ItemType.item_type_label, ItemType.item_type_id)
    if category:
        parsed = InspectionCategory.parse(category)
        if parsed is None:
            raise ValidationError("Inspection category must be 'Facility' | 'MachineSafety'.")
        query = query.where(ItemType.inspection_category == parsed.value)
    return [
        ItemTypeOut(
            id=row.item_type_id,
            label=row.item_type_label,
            category=row.inspection_category,
            description=row.item_type_description,
        )
        for row in session.scalars(query)
    ]


def list_templates(session: Session, item_type_id: int) -> List[SubcheckTemplateOut]:
    rows = session.scalars(
        select(SubcheckTemplate)
        .where(SubcheckTemplate.item_type_id == item_type_id)
        .order_by(SubcheckTemplate.subcheck_template_id)
    )
    return [_template_out(row) for row in rows]


def list_templates_by_label(session: Session, item_type_label: str, category=None) -> List[SubcheckTemplateOut]:
    """Templates for an item type given by label; an unknown label yields an empty list."""
    query = (
        select(SubcheckTemplate)
        .join(ItemType, ItemType.item_type_id == SubcheckTemplate.item_type_id)
        .where(ItemType.item_type_label == item_type_label)
        .order_by(SubcheckTemplate.subcheck_template_id)
    )
    if category:
        parsed = InspectionCategory.parse(category)
        if parsed is None:
            raise ValidationError("Inspection category must be 'Facility' | 'MachineSafety'.")
        query = query.where(ItemType.inspection_category == parsed.value)
    return [_template_out(row) for row in session.scalars(query)]


def _select_item_type_id(session: Session, category: InspectionCategory, label: str) -> Optional[int]:
    return session.scalar(
        select(ItemType.item_type_id).where(
            ItemType.inspection_category == category.value,
            ItemType.item_type_label == label,
        )
    )


def _select_template(session: Session, item_type_id: int, label: str) -> Optional[SubcheckTemplate]:
    return session.scalar(
        select(SubcheckTemplate)
        .where(
            SubcheckTemplate.item_type_id == item_type_id,
            SubcheckTemplate.subcheck_template_label == label,
        )
        .execution_options(populate_existing=True)
    )


def _resolution(template: SubcheckTemplate, subcheck, created: bool) -> TemplateResolution:
    pass_criteria = template.pass_criteria
    if pass_criteria is None:
        pass_criteria = getattr(subcheck, "pass_criteria", None) or DEFAULT_PASS_CRITERIA
    return TemplateResolution(
        template_id=template.subcheck_template_id,
        value_type=ValueType(template.value_type),
        mandatory=bool(template.subcheck_template_mandatory),
        pass_criteria=pass_criteria,
        created=created,
    )


def _template_out(row: SubcheckTemplate) -> SubcheckTemplateOut:
    return SubcheckTemplateOut(
        id=row.subcheck_template_id,
        name=row.subcheck_template_label,
        description=row.subcheck_template_description,
        value_type=rules.from_db_value_type(row.value_type),
        pass_criteria=row.pass_criteria,
        mandatory=bool(row.subcheck_template_mandatory),
    )
