"""
Sites, zones and items.

Creation is idempotent on the natural key: posting an existing site name, a
zone name within a site, or an item name/type within a zone returns the row
already stored. The caller commits.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from maintenance_service.errors import NotFoundError, ValidationError
from maintenance_service.models.site import (
    Item,
    ItemCreate,
    ItemOut,
    Site,
    SiteCreate,
    SiteOut,
    Zone,
    ZoneCreate,
    ZoneOut,
)
from maintenance_service.services import catalog


def create_site(session: Session, payload: SiteCreate) -> SiteOut:
    name = _required(payload.site_name, "siteName")
    catalog.insert_if_absent(
        session, Site, {"site_name": name, "site_address": payload.site_address}, ["site_name"]
    )
    site = session.scalar(select(Site).where(Site.site_name == name))
    return _site_out(site)


def list_sites(session: Session) -> List[SiteOut]:
    return [_site_out(site) for site in session.scalars(select(Site).order_by(Site.site_name))]


def create_zone(session: Session, payload: ZoneCreate) -> ZoneOut:
    name = _required(payload.zone_name, "zoneName")
    if session.get(Site, payload.site_id) is None:
        raise NotFoundError("Site", payload.site_id)
    catalog.insert_if_absent(
        session,
        Zone,
        {"zone_name": name, "zone_description": payload.zone_description, "site_id": payload.site_id},
        ["site_id", "zone_name"],
    )
    zone = session.scalar(select(Zone).where(Zone.site_id == payload.site_id, Zone.zone_name == name))
    return _zone_out(zone)


def list_zones(session: Session, site_id: Optional[int] = None) -> List[ZoneOut]:
    query = select(Zone).order_by(Zone.zone_name, Zone.zone_id)
    if site_id is not None:
        query = query.where(Zone.site_id == site_id)
    return [_zone_out(zone) for zone in session.scalars(query)]


def create_item(session: Session, payload: ItemCreate) -> ItemOut:
    item_type = _required(payload.item_type, "itemType")
    name = _required(payload.item_name, "itemName")
    if session.get(Zone, payload.zone_id) is None:
        raise NotFoundError("Zone", payload.zone_id)
    if payload.inspection_category:
        catalog.resolve_item_type(session, payload.inspection_category, item_type)
    catalog.insert_if_absent(
        session,
        Item,
        {
            "item_type": item_type,
            "item_name": name,
            "item_description": payload.item_description,
            "zone_id": payload.zone_id,
        },
        ["zone_id", "item_type", "item_name"],
    )
    item = session.scalar(
        select(Item).where(Item.zone_id == payload.zone_id, Item.item_type == item_type, Item.item_name == name)
    )
    return _item_out(item)


def list_items(session: Session, zone_id: Optional[int] = None, item_type: Optional[str] = None) -> List[ItemOut]:
    query = select(Item).order_by(Item.item_name, Item.item_id)
    if zone_id is not None:
        query = query.where(Item.zone_id == zone_id)
    if item_type:
        query = query.where(Item.item_type == item_type.strip())
    return [_item_out(item) for item in session.scalars(query)]


def _required(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required.")
    return value


def _site_out(site: Site) -> SiteOut:
    return SiteOut(id=site.site_id, name=site.site_name, address=site.site_address)


def _zone_out(zone: Zone) -> ZoneOut:
    return ZoneOut(id=zone.zone_id, name=zone.zone_name, description=zone.zone_description, site_id=zone.site_id)


def _item_out(item: Item) -> ItemOut:
    return ItemOut(
        id=item.item_id,
        name=item.item_name,
        description=item.item_description,
        zone_id=item.zone_id,
        item_type=item.item_type,
    )
