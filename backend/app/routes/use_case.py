"""Use-case API routes: LLM profile recommendations and specification drafts."""

import logging

from fastapi import APIRouter, Depends

from app.dependencies import get_recommender
from app.schemas.common import ApiResponse
from app.schemas.use_case import (
    SpecificationRequest,
    SpecificationResponse,
    UseCaseAnalysisRequest,
    UseCaseAnalysisResponse,
)
from app.services.recommender import RecommendationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/use-case", tags=["use-case"])


@router.post("/analyze", response_model=ApiResponse[UseCaseAnalysisResponse])
async def analyze_use_case(
    request: UseCaseAnalysisRequest,
    recommender: RecommendationService = Depends(get_recommender),
) -> ApiResponse[UseCaseAnalysisResponse]:
    """Ask the LLM which existing profiles fit a use case.

    Args:
        request: Use-case details from the first wizard step.

    Returns:
        Recommendations, analysis narrative and suggested approach.

    Raises:
        UpstreamError: LLM unconfigured, failed, timed out or replied with
            unparseable content (rendered as 500).
    """
    logger.info(
        "Analyzing use case: role=%s, fhir_version=%s",
        request.data_role, request.fhir_version,
    )
    analysis = await recommender.analyze_use_case(request)
    return ApiResponse(data=analysis)


@router.post("/generate-spec", response_model=ApiResponse[SpecificationResponse])
async def generate_specification(
    request: SpecificationRequest,
    recommender: RecommendationService = Depends(get_recommender),
) -> ApiResponse[SpecificationResponse]:
    """Draft a markdown specification for the selected recommendation."""
    specification = await recommender.generate_specification(
        request.use_case,
        request.selected_recommendation,
        request.custom_requirements,
    )
    return ApiResponse(data=SpecificationResponse(specification=specification))
