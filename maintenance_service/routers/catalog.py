"""
Template catalog lookups
Item types per inspection category and the subcheck templates of an item type.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from maintenance_service.database import get_db
from maintenance_service.errors import ValidationError
from maintenance_service.routers.responses import success
from maintenance_service.services import catalog

router = APIRouter(tags=["catalog"])


@router.get("/item-types")
def list_item_types(category: Optional[str] = None, db: Session = Depends(get_db)):
    """GET /item-types?category=Facility"""
    return success(catalog.list_item_types(db, category.strip() if category else None))


@router.get("/subcheck-templates")
def list_subcheck_templates(
    item_type_id: Optional[int] = Query(None, alias="itemTypeId"),
    db: Session = Depends(get_db),
):
    """GET /subcheck-templates?itemTypeId=1"""
    if item_type_id is None:
        raise ValidationError("itemTypeId must be a number")
    return success(catalog.list_templates(db, item_type_id))


@router.get("/subcheck-templates/by-label")
def list_subcheck_templates_by_label(
    item_type: Optional[str] = Query(None, alias="itemType"),
    category: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    GET /subcheck-templates/by-label?itemType=Emergency%20Lighting

    An item type that has never been seen returns an empty list.
    """
    label = (item_type or "").strip()
    if not label:
        raise ValidationError("itemType is required")
    return success(catalog.list_templates_by_label(db, label, category))
