"""Profile API routes: generate, validate, save and list StructureDefinitions."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.config import Settings
from app.dependencies import get_profile_store, get_settings
from app.schemas.common import ApiResponse
from app.schemas.profile import (
    GeneratedProfile,
    ProfileGenerationRequest,
    ProfileSummary,
    ProfileValidationRequest,
    SaveProfileRequest,
    SaveProfileResult,
    ValidationResult,
)
from app.services.profile_generator import generate_profile, validate_resource
from app.services.profile_store import ProfileStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.post(
    "/generate",
    response_model=ApiResponse[GeneratedProfile],
    response_model_exclude_none=True,
)
async def generate(
    request: ProfileGenerationRequest,
    settings: Settings = Depends(get_settings),
) -> ApiResponse[GeneratedProfile]:
    """Generate a StructureDefinition from the wizard's constraints.

    Missing profileName, baseResourceType, description or fhirVersion is
    rejected with 400 by request validation.
    """
    profile = generate_profile(
        request,
        canonical_base=settings.canonical_base_url,
        default_publisher=settings.default_publisher,
    )
    return ApiResponse(data=GeneratedProfile(profile=profile))


@router.post("/validate", response_model=ApiResponse[ValidationResult])
async def validate(request: ProfileValidationRequest) -> ApiResponse[ValidationResult]:
    """Check a resource for the profile's must-support and required elements.

    Missing ``resource`` or ``profile`` keys are rejected with 400 by request
    validation. Anything else is 200; problems are reported in ``errors``.
    """
    return ApiResponse(data=validate_resource(request.resource, request.profile))


@router.post(
    "/save",
    response_model=ApiResponse[SaveProfileResult],
    response_model_exclude_none=True,
)
async def save(
    request: SaveProfileRequest,
    store: ProfileStore = Depends(get_profile_store),
) -> ApiResponse[SaveProfileResult]:
    """Save a profile, or return it for download when no filesystem is available."""
    try:
        result = await store.save(request.profile, request.filename)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ApiResponse(data=result)


@router.get(
    "/list",
    response_model=ApiResponse[list[ProfileSummary]],
    response_model_exclude_none=True,
)
async def list_profiles(
    store: ProfileStore = Depends(get_profile_store),
) -> ApiResponse[list[ProfileSummary]]:
    """List stored profiles; empty when nothing has been saved."""
    return ApiResponse(data=await store.list_profiles())
