"""
Seed a demo dataset.

Usage:
    python -m maintenance_service.seed

Creates the tables if needed, then one engineer, site "HQ", zone
"Warehouse A", the "Emergency Lighting" item type with its subcheck templates
and item "EL-01". Running it again changes nothing.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from maintenance_service.config import settings
from maintenance_service.database import SessionLocal, init_db
from maintenance_service.models.enums import InspectionCategory, UserRole
from maintenance_service.models.site import ItemCreate, SiteCreate, ZoneCreate
from maintenance_service.models.user import User
from maintenance_service.services import catalog, lookups
from maintenance_service.services.catalog import insert_if_absent
from maintenance_service.services.engineers import EngineerResolver

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo"

EMERGENCY_LIGHTING = "Emergency Lighting"

# label, description, value type, mandatory, pass criteria
EMERGENCY_LIGHTING_TEMPLATES = [
    ("Function test - all luminaires illuminate", "Quick push test", "boolean", True, "Illuminate on test"),
    ("Recharge indicator working", "LED is visible and steady", "boolean", False, "Indicator OK"),
    ("Labels/ID present and legible", "Asset label readable", "boolean", False, "Label present"),
    ("No visible damage or faults", "Housing intact, cables tidy", "boolean", False, "No damage"),
]


def seed(session: Session) -> dict:
    """Insert the demo rows that are missing. The caller commits."""
    resolver = EngineerResolver(hash_rounds=settings.password_hash_rounds)
    insert_if_absent(
        session,
        User,
        {
            "username": "demo",
            "full_name": "Demo Engineer",
            "email": DEMO_EMAIL,
            "password_hash": resolver.hash_password(DEMO_PASSWORD),
            "role": UserRole.ENGINEER.value,
        },
        None,
    )
    engineer_id = session.scalar(select(User.user_id).where(User.email == DEMO_EMAIL))

    site = lookups.create_site(session, SiteCreate(site_name="HQ"))
    zone = lookups.create_zone(
        session, ZoneCreate(site_id=site.id, zone_name="Warehouse A", zone_description="Main warehouse area")
    )

    item_type = catalog.resolve_item_type(session, InspectionCategory.FACILITY, EMERGENCY_LIGHTING)
    for label, description, value_type, mandatory, pass_criteria in EMERGENCY_LIGHTING_TEMPLATES:
        catalog.seed_template(
            session, item_type.item_type_id, label, description, value_type, mandatory, pass_criteria
        )

    item = lookups.create_item(
        session,
        ItemCreate(
            zone_id=zone.id,
            item_type=EMERGENCY_LIGHTING,
            item_name="EL-01",
            item_description="Twin-head near exit 1",
        ),
    )
    return {
        "engineer_id": engineer_id,
        "site_id": site.id,
        "zone_id": zone.id,
        "item_type_id": item_type.item_type_id,
        "item_id": item.id,
    }


def run(session_factory: sessionmaker = SessionLocal) -> dict:
    with session_factory.begin() as session:
        ids = seed(session)
    logger.info(f"Seed OK: {ids}")
    return ids


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    init_db()
    run()
