"""Pydantic schemas."""

from app.schemas.common import ApiResponse, CamelModel
from app.schemas.profile import (
    BindingConstraint,
    CardinalityConstraint,
    ElementDefinition,
    ExtensionDeclaration,
    GeneratedProfile,
    ProfileGenerationRequest,
    ProfileSummary,
    ProfileValidationRequest,
    SaveProfileRequest,
    SaveProfileResult,
    StructureDefinition,
    ValidationResult,
)
from app.schemas.simplifier import (
    ImplementationGuideRequest,
    ProjectCreateRequest,
    PublishResult,
    RemoteValidationRequest,
    RemoteValidationResult,
    SimplifierStatus,
    UploadRequest,
)
from app.schemas.use_case import (
    ProfileRecommendation,
    SpecificationRequest,
    SpecificationResponse,
    UseCaseAnalysisRequest,
    UseCaseAnalysisResponse,
)

__all__ = [
    "ApiResponse",
    "BindingConstraint",
    "CamelModel",
    "CardinalityConstraint",
    "ElementDefinition",
    "ExtensionDeclaration",
    "GeneratedProfile",
    "ImplementationGuideRequest",
    "ProfileGenerationRequest",
    "ProfileRecommendation",
    "ProfileSummary",
    "ProfileValidationRequest",
    "ProjectCreateRequest",
    "PublishResult",
    "RemoteValidationRequest",
    "RemoteValidationResult",
    "SaveProfileRequest",
    "SaveProfileResult",
    "SimplifierStatus",
    "SpecificationRequest",
    "SpecificationResponse",
    "StructureDefinition",
    "UploadRequest",
    "UseCaseAnalysisRequest",
    "UseCaseAnalysisResponse",
    "ValidationResult",
]
