"""LLM-backed profile recommendation service.

Sends the wizard's use-case description to the model and returns structured
profile recommendations, or drafts a markdown specification for a selected
recommendation. Replies are not deterministic; only their shape is checked.

Uses the OpenAI Responses API. The client is injected so callers and tests
can substitute their own.
"""

import asyncio
import json
import logging
import time
from collections.abc import Awaitable
from typing import Any, TypeVar

from openai import AsyncOpenAI
from pydantic import ValidationError

from app.errors import LLMResponseError, NotConfiguredError, UpstreamError, UpstreamTimeoutError
from app.schemas.use_case import (
    ProfileRecommendation,
    UseCaseAnalysisRequest,
    UseCaseAnalysisResponse,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MODEL = "gpt-5-mini"
DEFAULT_ANALYSIS_MAX_TOKENS = 4096
DEFAULT_SPEC_MAX_TOKENS = 8192
DEFAULT_TIMEOUT_SECONDS = 55.0

VALID_APPROACHES = ("use-existing", "extend-existing", "create-new")

ANALYSIS_TIMEOUT_MESSAGE = "Analysis timeout - please try again"
SPEC_TIMEOUT_MESSAGE = "Specification generation timeout - please try again"

_PERSONA = (
    "You are a FHIR (Fast Healthcare Interoperability Resources) expert specializing "
    "in healthcare interoperability standards and profile design."
)

_ANALYSIS_RESPONSE_FORMAT = """{
  "recommendations": [
    {
      "profileName": "string",
      "profileUrl": "string",
      "implementationGuide": "string",
      "igUrl": "string",
      "relevanceScore": 0,
      "reasoning": "string",
      "baseResource": "string",
      "mustSupportElements": ["string"],
      "extensions": ["string"]
    }
  ],
  "analysis": "string",
  "suggestedApproach": "use-existing | extend-existing | create-new",
  "rationale": "string",
  "additionalConsiderations": ["string"]
}"""


def build_analysis_prompt(use_case: UseCaseAnalysisRequest) -> str:
    """Render the recommendation prompt for a use case."""
    lines = [
        _PERSONA,
        "Analyze the healthcare use case below and recommend FHIR profiles.",
        "",
        "Use case:",
        f"- Business use case: {use_case.business_use_case}",
        f"- Reason a profile is needed: {use_case.reason_for_profile}",
        f"- Specific use case: {use_case.specific_use_case}",
        f"- Data role: {use_case.data_role}",
        f"- Target FHIR version: {use_case.fhir_version}",
    ]
    if use_case.organization_context:
        lines.append(f"- Organization context: {use_case.organization_context}")
    lines += [
        "",
        "Recommend the 2-3 most relevant existing profiles from implementation guides such as "
        "US Core, International Patient Summary (IPS), mCODE, CARIN Blue Button and "
        "Da Vinci HRex. For each give the profile and guide URLs, a relevance score (0-100), "
        "reasoning, the base resource, key must-support elements and relevant extensions.",
        "Then suggest an approach (use-existing, extend-existing or create-new), explain the "
        "rationale, and list additional considerations such as terminology bindings, "
        "cardinality and privacy.",
        "",
        "Return ONLY valid JSON (no markdown, no text before or after) with this structure:",
        _ANALYSIS_RESPONSE_FORMAT,
    ]
    return "\n".join(lines)


def build_specification_prompt(
    use_case: UseCaseAnalysisRequest,
    recommendation: ProfileRecommendation,
    custom_requirements: str | None = None,
) -> str:
    """Render the specification-drafting prompt for a selected recommendation."""
    lines = [
        _PERSONA,
        "Write a concise, implementable FHIR profile specification.",
        "",
        f"Use case: {use_case.business_use_case}",
        "",
        "Base profile:",
        f"- {recommendation.profile_name} ({recommendation.base_resource})",
        f"- {recommendation.profile_url}",
        "",
        f"Custom requirements: {custom_requirements or 'None specified'}",
        "",
        f"Target: FHIR {use_case.fhir_version}",
        "",
        "Cover:",
        "1. Profile name and description",
        "2. Key constraints (cardinality, must-support elements)",
        "3. Terminology bindings",
        "4. Extensions needed",
        "5. Implementation notes",
        "",
        "Use markdown.",
    ]
    return "\n".join(lines)


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` or ``` ... ``` fence."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    first_newline = stripped.find("\n")
    body = stripped[first_newline + 1:] if first_newline != -1 else stripped[3:]
    if body.rstrip().endswith("```"):
        body = body.rstrip()[:-3]
    return body.strip()


def parse_analysis_response(text: str) -> UseCaseAnalysisResponse:
    """Decode the model's analysis reply.

    Raises:
        LLMResponseError: If the reply is not JSON, has no recommendations
            list, or suggests an approach outside the allowed values.
    """
    try:
        payload: Any = json.loads(_strip_code_fence(text))
    except json.JSONDecodeError as e:
        logger.error("LLM analysis reply is not JSON: %s", text[:500])
        raise LLMResponseError(f"Failed to parse LLM response: {e.msg}") from e

    if not isinstance(payload, dict) or not isinstance(payload.get("recommendations"), list):
        raise LLMResponseError(
            "Failed to parse LLM response: Invalid response structure: missing recommendations array"
        )
    if payload.get("suggestedApproach") not in VALID_APPROACHES:
        raise LLMResponseError("Failed to parse LLM response: Invalid suggestedApproach value")

    try:
        return UseCaseAnalysisResponse.model_validate(payload)
    except ValidationError as e:
        raise LLMResponseError(f"Failed to parse LLM response: {e.error_count()} invalid fields") from e


async def run_with_timeout(awaitable: Awaitable[T], timeout: float, message: str) -> T:
    """Await an upstream call, failing with UpstreamTimeoutError after ``timeout`` seconds."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error("Upstream call timed out after %.1fs", timeout)
        raise UpstreamTimeoutError(message) from e


class RecommendationService:
    """Profile recommendations and specification drafts from an LLM.

    Example:
        service = RecommendationService(client=AsyncOpenAI(api_key=key))
        analysis = await service.analyze_use_case(use_case)
        for rec in analysis.recommendations:
            print(rec.profile_name, rec.relevance_score)
    """

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str = DEFAULT_MODEL,
        analysis_max_tokens: int = DEFAULT_ANALYSIS_MAX_TOKENS,
        spec_max_tokens: int = DEFAULT_SPEC_MAX_TOKENS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """Initialize RecommendationService.

        Args:
            client: Pre-configured AsyncOpenAI client. When None the service is
                unconfigured and every call raises NotConfiguredError.
            model: Model used for both prompts.
            analysis_max_tokens: Output budget for use-case analysis.
            spec_max_tokens: Output budget for specification drafts.
            timeout_seconds: Window for each LLM call.
        """
        self._client = client
        self._model = model
        self._analysis_max_tokens = analysis_max_tokens
        self._spec_max_tokens = spec_max_tokens
        self._timeout_seconds = timeout_seconds

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def close(self) -> None:
        """Close the OpenAI client connection."""
        if self._client is not None:
            await self._client.close()

    async def _complete(self, prompt: str, max_output_tokens: int) -> str:
        if self._client is None:
            raise NotConfiguredError("LLM API key not configured. Set OPENAI_API_KEY.")

        t0 = time.perf_counter()
        try:
            response = await self._client.responses.create(
                model=self._model,
                input=[{"role": "user", "content": prompt}],
                max_output_tokens=max_output_tokens,
            )
        except Exception as e:
            logger.error("LLM request failed", exc_info=True)
            raise UpstreamError(f"LLM request failed: {e}") from e

        text = getattr(response, "output_text", None)
        logger.info(
            "LLM reply: model=%s, prompt_chars=%d, reply_chars=%d, elapsed=%.2fs",
            self._model, len(prompt), len(text or ""), time.perf_counter() - t0,
        )
        if not text:
            raise LLMResponseError("Unexpected empty response from LLM")
        return text

    async def analyze_use_case(self, use_case: UseCaseAnalysisRequest) -> UseCaseAnalysisResponse:
        """Recommend existing profiles and an approach for a use case.

        Raises:
            NotConfiguredError: No LLM client configured.
            UpstreamTimeoutError: The call exceeded the timeout.
            LLMResponseError: The reply could not be parsed.
            UpstreamError: The LLM request itself failed.
        """
        prompt = build_analysis_prompt(use_case)
        text = await run_with_timeout(
            self._complete(prompt, self._analysis_max_tokens),
            self._timeout_seconds,
            ANALYSIS_TIMEOUT_MESSAGE,
        )
        analysis = parse_analysis_response(text)
        logger.info(
            "Use-case analysis: %d recommendations, approach=%s",
            len(analysis.recommendations), analysis.suggested_approach,
        )
        return analysis

    async def generate_specification(
        self,
        use_case: UseCaseAnalysisRequest,
        recommendation: ProfileRecommendation,
        custom_requirements: str | None = None,
    ) -> str:
        """Draft a markdown profile specification for a selected recommendation."""
        prompt = build_specification_prompt(use_case, recommendation, custom_requirements)
        return await run_with_timeout(
            self._complete(prompt, self._spec_max_tokens),
            self._timeout_seconds,
            SPEC_TIMEOUT_MESSAGE,
        )
