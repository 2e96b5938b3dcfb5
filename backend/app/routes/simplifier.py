"""Simplifier.net proxy routes."""

from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import get_simplifier
from app.schemas.common import ApiResponse
from app.schemas.simplifier import (
    ImplementationGuideRequest,
    ProjectCreateRequest,
    PublishResult,
    RemoteValidationRequest,
    RemoteValidationResult,
    SimplifierStatus,
    UploadRequest,
)
from app.services.simplifier import SimplifierClient

router = APIRouter(prefix="/simplifier", tags=["simplifier"])


@router.get("/status", response_model=ApiResponse[SimplifierStatus])
async def get_status(
    simplifier: SimplifierClient = Depends(get_simplifier),
) -> ApiResponse[SimplifierStatus]:
    """Report whether the Simplifier integration has a credential."""
    configured = simplifier.is_configured()
    message = (
        "Simplifier integration is configured"
        if configured
        else "Simplifier API key not configured. Set SIMPLIFIER_API_KEY in .env"
    )
    return ApiResponse(data=SimplifierStatus(configured=configured, message=message))


@router.get("/projects", response_model=ApiResponse[list[dict[str, Any]]])
async def list_projects(
    simplifier: SimplifierClient = Depends(get_simplifier),
) -> ApiResponse[list[dict[str, Any]]]:
    return ApiResponse(data=await simplifier.get_projects())


@router.post("/projects", response_model=ApiResponse[dict[str, Any]])
async def create_project(
    request: ProjectCreateRequest,
    simplifier: SimplifierClient = Depends(get_simplifier),
) -> ApiResponse[dict[str, Any]]:
    project = await simplifier.create_project(request.name, request.scope, request.description)
    return ApiResponse(data=project)


@router.post("/upload", response_model=ApiResponse[PublishResult])
async def upload_profile(
    request: UploadRequest,
    simplifier: SimplifierClient = Depends(get_simplifier),
) -> ApiResponse[PublishResult]:
    """Upload a generated profile into a Simplifier project."""
    result = await simplifier.upload_profile(request.project_scope, request.profile, request.filename)
    return ApiResponse(data=PublishResult.model_validate(result))


@router.post("/ig", response_model=ApiResponse[PublishResult])
async def create_implementation_guide(
    request: ImplementationGuideRequest,
    simplifier: SimplifierClient = Depends(get_simplifier),
) -> ApiResponse[PublishResult]:
    """Create an Implementation Guide referencing uploaded profiles."""
    result = await simplifier.create_implementation_guide(
        request.project_scope, request.ig_name, request.profiles
    )
    return ApiResponse(data=PublishResult.model_validate(result))


@router.post("/validate", response_model=ApiResponse[RemoteValidationResult])
async def validate_remote(
    request: RemoteValidationRequest,
    simplifier: SimplifierClient = Depends(get_simplifier),
) -> ApiResponse[RemoteValidationResult]:
    """Validate a profile with Simplifier's validator."""
    result = await simplifier.validate_profile(request.profile)
    return ApiResponse(data=RemoteValidationResult.model_validate(result))
