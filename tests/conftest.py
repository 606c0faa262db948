# conftest.py - Pytest fixtures for testing
import pytest
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))  # Add project root to path
from sqlalchemy.pool import StaticPool
from maintenance_service.database import Base, init_db, make_engine, make_session_factory
from maintenance_service.models.catalog import ItemType, SubcheckTemplate
from maintenance_service.models.inspection import InspectionDraft, SubcheckDraft
from maintenance_service.models.site import Item, Site, Zone
from maintenance_service.models.user import User
import tempfile
from pathlib import Path

# Use in-memory SQLite for tests to avoid affecting real DB.
# StaticPool keeps one connection so every session sees the same database.
TEST_DATABASE_URL = "sqlite:///:memory:"

@pytest.fixture(scope="function")
def engine():
    """Create test engine with a fresh schema."""
    test_engine = make_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    init_db(test_engine)  # Create tables
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)  # Clean up
    test_engine.dispose()

@pytest.fixture(scope="function")
def session_factory(engine):
    """Session factory bound to the test engine (the services' storage handle)."""
    return make_session_factory(engine)

@pytest.fixture(scope="function")
def db_session(session_factory):
    """Provide a test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

@pytest.fixture(scope="function")
def seeded(session_factory):
    """One engineer, site, zone and an "Emergency Lighting" item; no item types or templates yet."""
    with session_factory.begin() as session:
        engineer = User(username="jane", full_name="Jane Engineer", email="jane@example.com",
                        password_hash="not-a-real-hash", role="engineer")
        site = Site(site_name="HQ")
        session.add_all([engineer, site])
        session.flush()
        zone = Zone(zone_name="Warehouse A", site_id=site.site_id)
        session.add(zone)
        session.flush()
        item = Item(item_type="Emergency Lighting", item_name="EL-01", zone_id=zone.zone_id)
        session.add(item)
        session.flush()
        return {
            "engineer_id": engineer.user_id,
            "site_id": site.site_id,
            "zone_id": zone.zone_id,
            "item_id": item.item_id,
        }

@pytest.fixture(scope="function")
def emergency_lighting_templates(session_factory, seeded):
    """Facility item type for the seeded item with one mandatory and one optional template."""
    with session_factory.begin() as session:
        item_type = ItemType(inspection_category="Facility", item_type_label="Emergency Lighting")
        session.add(item_type)
        session.flush()
        session.add_all([
            SubcheckTemplate(item_type_id=item_type.item_type_id, subcheck_template_label="Function test",
                             subcheck_template_description="Push test", value_type="boolean",
                             subcheck_template_mandatory=True, pass_criteria="Illuminates"),
            SubcheckTemplate(item_type_id=item_type.item_type_id, subcheck_template_label="Label legible",
                             subcheck_template_description="Asset label readable", value_type="boolean",
                             subcheck_template_mandatory=False, pass_criteria="Label present"),
        ])
        session.flush()
        return item_type.item_type_id

@pytest.fixture(scope="function")
def make_draft(seeded):
    """Build an InspectionDraft for the seeded item; keyword arguments override fields."""
    def _make(subchecks=None, **overrides):
        if subchecks is None:
            subchecks = [("Function test", "pass")]
        fields = {
            "inspection_date": "2025-08-01",
            "inspection_category": "Facility",
            "item_id": seeded["item_id"],
            "engineer_id": seeded["engineer_id"],
            "comment": None,
            "subchecks": [
                SubcheckDraft(subcheck_name=name, subcheck_description=f"{name} description",
                              value_type="boolean", pass_criteria="true", status=status)
                for name, status in subchecks
            ],
        }
        fields.update(overrides)
        return InspectionDraft(**fields)
    return _make

@pytest.fixture(scope="function")
def temp_dir():
    """Provide a temporary directory for file operations."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
