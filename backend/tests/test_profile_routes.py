"""Tests for the profile API routes."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from app.services.profile_store import ProfileStore


# =============================================================================
# Generate
# =============================================================================


@pytest.mark.asyncio
async def test_generate_profile(client: AsyncClient, sample_generation_request: dict):
    response = await client.post("/api/profile/generate", json=sample_generation_request)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    profile = body["data"]["profile"]
    assert profile["resourceType"] == "StructureDefinition"
    assert profile["id"] == "CommunityPatient"
    assert profile["url"] == "http://example.org/fhir/StructureDefinition/CommunityPatient"
    assert profile["date"].endswith("Z")
    assert "jurisdiction" not in profile
    elements = profile["differential"]["element"]
    assert elements[0] == {
        "id": "Patient",
        "path": "Patient",
        "short": "Community Patient",
        "definition": "Patient demographics for community clinic exchange",
    }
    assert elements[-1]["type"] == [
        {
            "code": "Extension",
            "profile": ["http://hl7.org/fhir/us/core/StructureDefinition/us-core-race"],
        }
    ]


@pytest.mark.asyncio
async def test_generate_uses_configured_canonical_base(
    client: AsyncClient, test_settings, sample_generation_request: dict
):
    test_settings.canonical_base_url = "https://fhir.acme.org"
    test_settings.default_publisher = "Acme"
    del sample_generation_request["publisher"]

    response = await client.post("/api/profile/generate", json=sample_generation_request)

    profile = response.json()["data"]["profile"]
    assert profile["url"] == "https://fhir.acme.org/StructureDefinition/CommunityPatient"
    assert profile["publisher"] == "Acme"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["profileName", "baseResourceType", "description", "fhirVersion"])
async def test_generate_missing_field_is_400(
    client: AsyncClient, sample_generation_request: dict, field: str
):
    del sample_generation_request[field]

    response = await client.post("/api/profile/generate", json=sample_generation_request)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    assert any(field in detail["loc"] for detail in body["details"])


@pytest.mark.asyncio
async def test_generate_unknown_fhir_version_is_400(client: AsyncClient, sample_generation_request: dict):
    sample_generation_request["fhirVersion"] = "STU3"

    response = await client.post("/api/profile/generate", json=sample_generation_request)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_generate_unknown_binding_strength_is_example(
    client: AsyncClient, sample_generation_request: dict
):
    sample_generation_request["bindingConstraints"][0]["strength"] = "mandatory"

    response = await client.post("/api/profile/generate", json=sample_generation_request)

    assert response.status_code == 200
    elements = response.json()["data"]["profile"]["differential"]["element"]
    gender = next(e for e in elements if e["path"] == "Patient.gender")
    assert gender["binding"]["strength"] == "example"


# =============================================================================
# Validate
# =============================================================================


@pytest.mark.asyncio
async def test_validate_round_trip(
    client: AsyncClient, sample_generation_request: dict, sample_patient: dict
):
    generated = await client.post("/api/profile/generate", json=sample_generation_request)
    profile = generated.json()["data"]["profile"]

    response = await client.post(
        "/api/profile/validate",
        json={"resource": sample_patient, "profile": profile},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {"valid": True, "errors": []}}


@pytest.mark.asyncio
async def test_validate_reports_errors_with_200(client: AsyncClient):
    profile = {
        "type": "Patient",
        "differential": {"element": [{"id": "name", "path": "name", "mustSupport": True}]},
    }

    response = await client.post(
        "/api/profile/validate",
        json={"resource": {"resourceType": "Observation"}, "profile": profile},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["valid"] is False
    assert data["errors"] == [
        "Resource type Observation does not match profile type Patient",
        "Missing must-support element: name",
    ]


@pytest.mark.asyncio
async def test_validate_empty_resource_reports_mismatch(client: AsyncClient):
    response = await client.post(
        "/api/profile/validate",
        json={"resource": {}, "profile": {"type": "Patient", "differential": {"element": []}}},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["valid"] is False
    assert data["errors"][0].startswith("Resource type")
    assert data["errors"][0].endswith("does not match profile type Patient")


@pytest.mark.asyncio
async def test_validate_empty_objects_is_200(client: AsyncClient):
    response = await client.post("/api/profile/validate", json={"resource": {}, "profile": {}})

    assert response.status_code == 200
    assert response.json()["success"] is True


@pytest.mark.asyncio
async def test_validate_missing_fields_is_400(client: AsyncClient):
    response = await client.post("/api/profile/validate", json={"resource": {"resourceType": "Patient"}})

    assert response.status_code == 400
    assert response.json()["success"] is False


# =============================================================================
# Save / List
# =============================================================================


@pytest.mark.asyncio
async def test_save_and_list_filesystem(client: AsyncClient, test_settings):
    profile = {"resourceType": "StructureDefinition", "id": "P1", "name": "P1", "version": "0.1.0"}

    saved = await client.post("/api/profile/save", json={"profile": profile, "filename": "P1"})

    assert saved.status_code == 200
    data = saved.json()["data"]
    assert data["message"] == "Profile saved successfully"
    assert data["filename"] == "P1.json"
    assert "content" not in data
    stored = test_settings.profiles_dir / "P1.json"
    assert json.loads(stored.read_text(encoding="utf-8")) == profile

    listed = await client.get("/api/profile/list")

    assert listed.status_code == 200
    assert listed.json() == {
        "success": True,
        "data": [{"filename": "P1.json", "id": "P1", "name": "P1", "version": "0.1.0"}],
    }


@pytest.mark.asyncio
async def test_list_empty(client: AsyncClient):
    response = await client.get("/api/profile/list")

    assert response.json() == {"success": True, "data": []}


@pytest.mark.asyncio
async def test_save_invalid_filename_is_400(client: AsyncClient):
    response = await client.post("/api/profile/save", json={"profile": {"id": "x"}, "filename": ".."})

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid filename")


@pytest.mark.asyncio
async def test_save_download_mode(client: AsyncClient, test_context):
    test_context.profile_store = ProfileStore(mode="download")
    profile = {"resourceType": "StructureDefinition", "id": "P1"}

    response = await client.post("/api/profile/save", json={"profile": profile, "filename": "P1.json"})

    data = response.json()["data"]
    assert data["message"] == "Profile ready for download"
    assert json.loads(data["content"]) == profile
    assert data["size"] == len(data["content"].encode("utf-8"))
    assert "filepath" not in data

    listed = await client.get("/api/profile/list")
    assert listed.json()["data"] == []


@pytest.mark.asyncio
async def test_save_unexpected_failure_keeps_cors_headers(client: AsyncClient, test_context):
    failing_store = MagicMock()
    failing_store.save = AsyncMock(side_effect=RuntimeError("disk full"))
    test_context.profile_store = failing_store

    response = await client.post(
        "/api/profile/save",
        json={"profile": {"id": "P1"}, "filename": "P1.json"},
        headers={"Origin": "http://localhost:5173"},
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "disk full"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
