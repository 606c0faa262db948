# tests/test_api.py
"""Test the HTTP endpoints against the in-memory database."""
import pytest
from fastapi.testclient import TestClient
from maintenance_service.database import get_db, get_session_factory
from maintenance_service.main import app


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def inspection_body(seeded, status="pass", comment=None, **overrides):
    body = {
        "inspectionDate": "2025-08-01",
        "inspectionCategory": "Facility",
        "itemId": seeded["item_id"],
        "engineerId": seeded["engineer_id"],
        "comment": comment,
        "subchecks": [{
            "subcheckName": "Function test",
            "subcheckDescription": "Push test",
            "valueType": "boolean",
            "passCriteria": "true",
            "status": status,
        }],
    }
    body.update(overrides)
    return body


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_submit_and_read_inspection(client, seeded, emergency_lighting_templates):
    response = client.post("/inspections", json=inspection_body(seeded))
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    data = body["data"]
    assert data["overallResult"] == "pass"
    assert data["engineerName"] == "Jane Engineer"
    assert data["subchecks"][0]["passCriteria"] == "Illuminates"
    assert data["subchecks"][0]["valueType"] == "boolean"

    response = client.get(f"/inspections/{data['inspectionId']}")
    assert response.status_code == 200
    assert response.json()["data"] == data

    listed = client.get("/inspections").json()["data"]
    assert [i["inspectionId"] for i in listed] == [data["inspectionId"]]
    assert client.get("/inspections", params={"engineerId": 999}).json()["data"] == []


def test_failed_inspection_without_comment_is_400(client, seeded, emergency_lighting_templates):
    response = client.post("/inspections", json=inspection_body(seeded, status="fail"))
    assert response.status_code == 400
    assert response.json() == {
        "status": "error",
        "message": "Comment is required when the overall result is 'fail'.",
    }
    assert client.get("/inspections").json()["data"] == []


def test_failed_inspection_with_comment(client, seeded, emergency_lighting_templates):
    response = client.post("/inspections", json=inspection_body(seeded, status="fail", comment="Bulb failed"))
    assert response.status_code == 200
    assert response.json()["data"]["overallResult"] == "fail"


def test_unknown_item_is_404(client, seeded):
    response = client.post("/inspections", json=inspection_body(seeded, itemId=999))
    assert response.status_code == 404
    assert response.json()["status"] == "error"


def test_unknown_inspection_is_404(client):
    response = client.get("/inspections/12345")
    assert response.status_code == 404
    assert response.json()["message"] == "Inspection 12345 not found."


def test_bad_status_is_400(client, seeded):
    body = inspection_body(seeded)
    body["subchecks"][0]["status"] = "ok"
    response = client.post("/inspections", json=body)
    assert response.status_code == 400
    assert "status must be" in response.json()["message"]


def test_catalog_endpoints(client, emergency_lighting_templates):
    item_types = client.get("/item-types", params={"category": "Facility"}).json()["data"]
    assert item_types == [{"id": emergency_lighting_templates, "label": "Emergency Lighting",
                           "category": "Facility", "description": None}]

    templates = client.get("/subcheck-templates", params={"itemTypeId": emergency_lighting_templates}).json()["data"]
    assert [t["name"] for t in templates] == ["Function test", "Label legible"]
    assert templates[1]["mandatory"] is False

    by_label = client.get("/subcheck-templates/by-label", params={"itemType": "Emergency Lighting"}).json()["data"]
    assert by_label == templates
    assert client.get("/subcheck-templates/by-label", params={"itemType": "Boiler"}).json()["data"] == []


def test_catalog_parameter_errors(client):
    assert client.get("/subcheck-templates").status_code == 400
    assert client.get("/subcheck-templates/by-label").status_code == 400
    assert client.get("/item-types", params={"category": "Garden"}).status_code == 400


def test_sites_zones_items(client):
    site = client.post("/sites", json={"siteName": "Plant 2"}).json()["data"]
    assert client.post("/sites", json={"siteName": "Plant 2"}).json()["data"]["id"] == site["id"]

    zone = client.post("/zones", json={"siteId": site["id"], "zoneName": "Press shop"}).json()["data"]
    assert zone["siteId"] == site["id"]
    assert client.post("/zones", json={"siteId": 999, "zoneName": "Nowhere"}).status_code == 404

    item = client.post("/items", json={"zoneId": zone["id"], "itemType": "Guillotine", "itemName": "G-1",
                                       "inspectionCategory": "MachineSafety"}).json()["data"]
    assert item["itemType"] == "Guillotine"

    assert [s["name"] for s in client.get("/sites").json()["data"]] == ["Plant 2"]
    assert [z["id"] for z in client.get("/zones", params={"siteId": site["id"]}).json()["data"]] == [zone["id"]]
    assert [i["id"] for i in client.get("/items", params={"zoneId": zone["id"]}).json()["data"]] == [item["id"]]
    item_types = client.get("/item-types", params={"category": "MachineSafety"}).json()["data"]
    assert [t["label"] for t in item_types] == ["Guillotine"]


def test_malformed_body_uses_error_envelope(client, seeded):
    response = client.post("/inspections", json=inspection_body(seeded, itemId="abc"))
    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert "itemId" in body["message"]


def test_request_models_share_camel_case_aliases():
    from maintenance_service.models.base import CamelModel
    from maintenance_service.models.catalog import ItemTypeOut
    from maintenance_service.models.inspection import InspectionDraft
    from maintenance_service.models.site import SiteCreate

    for model in (ItemTypeOut, InspectionDraft, SiteCreate):
        assert issubclass(model, CamelModel)
    assert SiteCreate(siteName="HQ") == SiteCreate(site_name="HQ")
