"""Pydantic schemas for use-case analysis and specification drafting.

The analysis models describe the JSON the LLM is asked to return. Apart from
``suggested_approach`` and the recommendations list nothing is enforced: records
are passed straight through to the wizard.
"""

from typing import Any, Literal

from pydantic import ConfigDict, Field

from app.schemas.common import CamelModel
from app.schemas.profile import FhirVersion

DataRole = Literal["consumer", "producer", "intermediary"]
SuggestedApproach = Literal["use-existing", "extend-existing", "create-new"]

MIN_DESCRIPTION_LENGTH = 10


class UseCaseAnalysisRequest(CamelModel):
    """Use-case details collected by the first wizard step."""

    business_use_case: str = Field(min_length=MIN_DESCRIPTION_LENGTH)
    reason_for_profile: str = Field(min_length=MIN_DESCRIPTION_LENGTH)
    specific_use_case: str = Field(min_length=MIN_DESCRIPTION_LENGTH)
    data_role: DataRole
    fhir_version: FhirVersion
    organization_context: str | None = None


class ProfileRecommendation(CamelModel):
    """One existing profile the LLM suggests building on.

    Passed through as the model wrote it: unknown keys are kept and values
    are not coerced.
    """

    model_config = ConfigDict(extra="allow")

    profile_name: Any = None
    profile_url: Any = None
    implementation_guide: Any = None
    ig_url: Any = None
    relevance_score: Any = Field(default=None, description="0-100, as scored by the LLM")
    reasoning: Any = None
    base_resource: Any = None
    must_support_elements: Any = Field(default_factory=list)
    extensions: Any = Field(default_factory=list)


class UseCaseAnalysisResponse(CamelModel):
    model_config = ConfigDict(extra="allow")

    recommendations: list[ProfileRecommendation]
    analysis: Any = ""
    suggested_approach: SuggestedApproach
    rationale: Any = ""
    additional_considerations: Any = Field(default_factory=list)


class SpecificationRequest(CamelModel):
    """Request body for POST /use-case/generate-spec."""

    use_case: UseCaseAnalysisRequest
    selected_recommendation: ProfileRecommendation
    custom_requirements: str | None = None


class SpecificationResponse(CamelModel):
    specification: str
