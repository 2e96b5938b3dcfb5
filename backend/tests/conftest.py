"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- Settings isolated from any local .env file
- An application context with an unconfigured LLM and catalog
- HTTP client for API testing
- Common FHIR and use-case test data
"""

import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.dependencies import AppContext, get_context
from app.main import create_app
from app.services.profile_store import ProfileStore
from app.services.recommender import RecommendationService
from app.services.simplifier import SimplifierClient


# =============================================================================
# Settings / Context Fixtures
# =============================================================================


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with no credentials and a temporary profiles directory."""
    return Settings(
        _env_file=None,
        openai_api_key="",
        simplifier_api_key="",
        profile_storage="filesystem",
        profiles_dir=tmp_path / "profiles",
    )


@pytest_asyncio.fixture
async def test_context(test_settings: Settings):
    """Application context with unconfigured outbound clients."""
    context = AppContext(
        settings=test_settings,
        recommender=RecommendationService(client=None),
        simplifier=SimplifierClient(api_key=""),
        profile_store=ProfileStore(mode="filesystem", directory=test_settings.profiles_dir),
    )
    yield context
    await context.close()


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client(test_settings: Settings, test_context: AppContext):
    """Async test client for the FastAPI app.

    Overrides get_context so routes use ``test_context``; tests may replace
    its services before issuing requests.
    """
    app = create_app(test_settings)
    app.dependency_overrides[get_context] = lambda: test_context

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Test Data
# =============================================================================


@pytest.fixture
def sample_use_case() -> dict:
    """Use-case payload as sent by the first wizard step."""
    return {
        "businessUseCase": "Share care coordination episodes between community clinics",
        "reasonForProfile": "Existing profiles lack the referral tracking we need",
        "specificUseCase": "Track an episode of care across two referral hops",
        "dataRole": "producer",
        "fhirVersion": "R4",
        "organizationContext": "Regional health information exchange",
    }


@pytest.fixture
def sample_recommendation() -> dict:
    return {
        "profileName": "US Core Patient",
        "profileUrl": "http://hl7.org/fhir/us/core/StructureDefinition/us-core-patient",
        "implementationGuide": "US Core",
        "igUrl": "http://hl7.org/fhir/us/core",
        "relevanceScore": 85,
        "reasoning": "Covers demographics required by the exchange",
        "baseResource": "Patient",
        "mustSupportElements": ["Patient.name", "Patient.birthDate"],
        "extensions": ["us-core-race"],
    }


@pytest.fixture
def sample_analysis(sample_recommendation: dict) -> dict:
    """Well-formed LLM analysis reply."""
    return {
        "recommendations": [sample_recommendation],
        "analysis": "US Core Patient covers most demographic needs.",
        "suggestedApproach": "extend-existing",
        "rationale": "Only referral tracking is missing.",
        "additionalConsiderations": ["Bind identifier types to a local value set"],
    }


@pytest.fixture
def sample_analysis_text(sample_analysis: dict) -> str:
    return json.dumps(sample_analysis)


@pytest.fixture
def sample_generation_request() -> dict:
    """Profile generation payload as sent by the third wizard step."""
    return {
        "profileName": "Community Patient",
        "baseResourceType": "Patient",
        "description": "Patient demographics for community clinic exchange",
        "fhirVersion": "R4",
        "publisher": "Example Health",
        "mustSupportElements": ["Patient.name", "Patient.birthDate"],
        "cardinalityConstraints": [
            {"element": "Patient.name", "min": 1, "max": "*"},
            {"element": "Patient.gender", "min": 1, "max": "1"},
        ],
        "bindingConstraints": [
            {
                "element": "Patient.gender",
                "valueSetUrl": "http://hl7.org/fhir/ValueSet/administrative-gender",
                "strength": "required",
            }
        ],
        "extensions": [
            {
                "url": "http://hl7.org/fhir/us/core/StructureDefinition/us-core-race",
                "description": "Race",
            }
        ],
    }


@pytest.fixture
def sample_patient() -> dict:
    """Sample FHIR Patient resource."""
    return {
        "resourceType": "Patient",
        "id": "patient-123",
        "name": [{"given": ["John"], "family": "Doe"}],
        "birthDate": "1960-05-15",
        "gender": "male",
    }
