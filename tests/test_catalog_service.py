# tests/test_catalog_service.py
"""Test the template catalog: lazy item types and templates, idempotent creation."""
import threading
import pytest
from sqlalchemy import func, select
from maintenance_service.database import init_db, make_engine, make_session_factory
from maintenance_service.errors import ValidationError
from maintenance_service.models.catalog import ItemType, SubcheckTemplate
from maintenance_service.models.enums import ValueType
from maintenance_service.models.inspection import SubcheckDraft
from maintenance_service.services import catalog


def draft(name, value_type="boolean", mandatory=None, pass_criteria=None):
    return SubcheckDraft(subcheck_name=name, subcheck_description=f"{name} description",
                         value_type=value_type, pass_criteria=pass_criteria, status="pass",
                         mandatory=mandatory)


def test_resolve_item_type_creates_once(db_session):
    first = catalog.resolve_item_type(db_session, "Facility", "Fire Door")
    second = catalog.resolve_item_type(db_session, "Facility", "Fire Door")
    assert first.created is True
    assert second.created is False
    assert first.item_type_id == second.item_type_id

    row = db_session.get(ItemType, first.item_type_id)
    assert row.inspection_category == "Facility"
    assert row.item_type_description is None


def test_item_type_label_is_scoped_per_category(db_session):
    facility = catalog.resolve_item_type(db_session, "Facility", "Guard")
    machine = catalog.resolve_item_type(db_session, "Machine Safety", "Guard")
    assert facility.item_type_id != machine.item_type_id
    assert db_session.get(ItemType, machine.item_type_id).inspection_category == "MachineSafety"


def test_resolve_item_type_rejects_unknown_category(db_session):
    with pytest.raises(ValidationError):
        catalog.resolve_item_type(db_session, "Garden", "Hedge")


def test_new_template_defaults(db_session):
    item_type = catalog.resolve_item_type(db_session, "Facility", "Emergency Lighting")
    resolution = catalog.resolve_or_create_template(db_session, item_type.item_type_id, draft("Function test"))

    assert resolution.created is True
    assert resolution.mandatory is True
    assert resolution.pass_criteria == "true"
    assert resolution.value_type == ValueType.BOOLEAN

    row = db_session.get(SubcheckTemplate, resolution.template_id)
    assert row.subcheck_template_label == "Function test"
    assert row.subcheck_template_mandatory is True
    assert row.pass_criteria == "true"


def test_new_template_keeps_supplied_values(db_session):
    item_type = catalog.resolve_item_type(db_session, "Facility", "Emergency Lighting")
    resolution = catalog.resolve_or_create_template(
        db_session, item_type.item_type_id,
        draft("Lux reading", value_type="number", mandatory=False, pass_criteria=">= 1 lux"),
    )
    assert resolution.mandatory is False
    assert resolution.pass_criteria == ">= 1 lux"
    assert resolution.value_type == ValueType.NUMBER


def test_existing_template_wins_over_submission(db_session, emergency_lighting_templates):
    resolution = catalog.resolve_or_create_template(
        db_session, emergency_lighting_templates,
        draft("Label legible", value_type="string", mandatory=True, pass_criteria="anything"),
    )
    assert resolution.created is False
    assert resolution.mandatory is False
    assert resolution.value_type == ValueType.BOOLEAN
    assert resolution.pass_criteria == "Label present"


def test_load_mandatory_map(db_session, emergency_lighting_templates):
    assert catalog.load_mandatory_map(db_session, emergency_lighting_templates) == {
        "Function test": True,
        "Label legible": False,
    }
    assert catalog.load_mandatory_map(db_session, 999) == {}


def test_list_templates_and_lookup_by_label(db_session, emergency_lighting_templates):
    templates = catalog.list_templates(db_session, emergency_lighting_templates)
    assert [t.name for t in templates] == ["Function test", "Label legible"]
    assert templates[0].value_type == "boolean"

    by_label = catalog.list_templates_by_label(db_session, "Emergency Lighting")
    assert [t.id for t in by_label] == [t.id for t in templates]
    assert catalog.list_templates_by_label(db_session, "Never Seen") == []


def test_list_item_types_by_category(db_session):
    catalog.resolve_item_type(db_session, "Facility", "Fire Door")
    catalog.resolve_item_type(db_session, "MachineSafety", "Die-Cut")
    assert [t.label for t in catalog.list_item_types(db_session)] == ["Die-Cut", "Fire Door"]
    assert [t.label for t in catalog.list_item_types(db_session, "Facility")] == ["Fire Door"]


def test_seed_template_is_idempotent(db_session):
    item_type = catalog.resolve_item_type(db_session, "Facility", "Emergency Lighting")
    first = catalog.seed_template(db_session, item_type.item_type_id, "Recharge indicator", "LED steady",
                                  mandatory=False, pass_criteria="Indicator OK")
    second = catalog.seed_template(db_session, item_type.item_type_id, "Recharge indicator", "LED steady",
                                   mandatory=True)
    assert first.template_id == second.template_id
    assert second.mandatory is False


def test_concurrent_template_creation_yields_one_row(temp_dir):
    """Two writers racing on the same unseen (item type, label) end up with one template."""
    engine = make_engine(f"sqlite:///{temp_dir / 'catalog.db'}")
    init_db(engine)
    factory = make_session_factory(engine)
    with factory.begin() as session:
        item_type_id = catalog.resolve_item_type(session, "Facility", "Emergency Lighting").item_type_id

    barrier = threading.Barrier(2)
    results, errors = [], []

    def worker():
        try:
            barrier.wait()
            with factory.begin() as session:
                results.append(catalog.resolve_or_create_template(session, item_type_id, draft("Function test")))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    assert len(results) == 2
    assert results[0].template_id == results[1].template_id
    assert sum(r.created for r in results) <= 1
    with factory() as session:
        count = session.scalar(select(func.count()).select_from(SubcheckTemplate))
    assert count == 1
    engine.dispose()


def test_concurrent_item_type_creation_yields_one_row(temp_dir):
    """Two writers racing on the same unseen (category, label) end up with one item type."""
    engine = make_engine(f"sqlite:///{temp_dir / 'item_types.db'}")
    init_db(engine)
    factory = make_session_factory(engine)

    barrier = threading.Barrier(2)
    results, errors = [], []

    def worker():
        try:
            barrier.wait()
            with factory.begin() as session:
                results.append(catalog.resolve_item_type(session, "Facility", "Fire Door"))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    assert len(results) == 2
    assert results[0].item_type_id == results[1].item_type_id
    assert sum(r.created for r in results) == 1
    with factory() as session:
        count = session.scalar(select(func.count()).select_from(ItemType))
    assert count == 1
    engine.dispose()
