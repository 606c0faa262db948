"""Sites, zones and items: the physical assets inspections are made against."""

from typing import Optional

from pydantic import Field
from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint

from maintenance_service.database import Base
from maintenance_service.models.base import CamelModel


class Site(Base):
    __tablename__ = "sites"

    site_id = Column(Integer, primary_key=True, autoincrement=True)
    site_name = Column(String, nullable=False, unique=True)
    site_address = Column(Text)


class Zone(Base):
    __tablename__ = "zones"
    __table_args__ = (UniqueConstraint("site_id", "zone_name", name="uq_zones_site_name"),)

    zone_id = Column(Integer, primary_key=True, autoincrement=True)
    zone_name = Column(String, nullable=False)
    zone_description = Column(Text)
    site_id = Column(Integer, ForeignKey("sites.site_id", ondelete="CASCADE"), nullable=False, index=True)


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        UniqueConstraint("zone_id", "item_type", "item_name", name="uq_items_zone_type_name"),
    )

    item_id = Column(Integer, primary_key=True, autoincrement=True)
    item_type = Column(String, nullable=False, index=True)  # item type label, e.g. "Emergency Lighting"
    item_name = Column(String, nullable=False)
    item_description = Column(Text)
    zone_id = Column(Integer, ForeignKey("zones.zone_id", ondelete="CASCADE"), nullable=False, index=True)


class SiteCreate(CamelModel):
    site_name: str = Field(min_length=1)
    site_address: Optional[str] = None


class ZoneCreate(CamelModel):
    site_id: int
    zone_name: str = Field(min_length=1)
    zone_description: Optional[str] = None


class ItemCreate(CamelModel):
    zone_id: int
    item_type: str = Field(min_length=1)
    item_name: str = Field(min_length=1)
    item_description: Optional[str] = None
    # When present the item type is registered in the template catalog too
    inspection_category: Optional[str] = None


class SiteOut(CamelModel):
    id: int
    name: str
    address: Optional[str] = None


class ZoneOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    site_id: int


class ItemOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    zone_id: int
    item_type: str
