"""
Sites, zones and items
Plain create/list endpoints used to fill the inspection form.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from maintenance_service.database import get_db
from maintenance_service.models.site import ItemCreate, SiteCreate, ZoneCreate
from maintenance_service.routers.responses import success
from maintenance_service.services import lookups

router = APIRouter(tags=["lookups"])


@router.post("/sites")
def create_site(payload: SiteCreate, db: Session = Depends(get_db)):
    site = lookups.create_site(db, payload)
    db.commit()
    return success(site)


@router.get("/sites")
def list_sites(db: Session = Depends(get_db)):
    return success(lookups.list_sites(db))


@router.post("/zones")
def create_zone(payload: ZoneCreate, db: Session = Depends(get_db)):
    zone = lookups.create_zone(db, payload)
    db.commit()
    return success(zone)


@router.get("/zones")
def list_zones(site_id: Optional[int] = Query(None, alias="siteId"), db: Session = Depends(get_db)):
    return success(lookups.list_zones(db, site_id))


@router.post("/items")
def create_item(payload: ItemCreate, db: Session = Depends(get_db)):
    """Create an item; with inspectionCategory its item type is registered as well."""
    item = lookups.create_item(db, payload)
    db.commit()
    return success(item)


@router.get("/items")
def list_items(
    zone_id: Optional[int] = Query(None, alias="zoneId"),
    item_type: Optional[str] = Query(None, alias="itemType"),
    db: Session = Depends(get_db),
):
    return success(lookups.list_items(db, zone_id, item_type))
