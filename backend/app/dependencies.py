"""Application context and FastAPI dependencies.

Clients are built once from Settings at startup and stored on
``app.state.context``. Routes receive them through ``Depends`` so tests can
swap the whole context with ``app.dependency_overrides[get_context]``.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from openai import AsyncOpenAI

from app.config import Settings
from app.services.profile_store import ProfileStore
from app.services.recommender import RecommendationService
from app.services.simplifier import SimplifierClient

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Per-process services shared by all requests."""

    settings: Settings
    recommender: RecommendationService
    simplifier: SimplifierClient
    profile_store: ProfileStore

    async def close(self) -> None:
        """Close all outbound clients."""
        await self.recommender.close()
        await self.simplifier.close()


def build_context(settings: Settings) -> AppContext:
    """Construct every service from configuration."""
    llm_client = AsyncOpenAI(api_key=settings.openai_api_key) if settings.openai_api_key else None

    context = AppContext(
        settings=settings,
        recommender=RecommendationService(
            client=llm_client,
            model=settings.llm_model,
            analysis_max_tokens=settings.llm_max_output_tokens,
            spec_max_tokens=settings.spec_max_output_tokens,
            timeout_seconds=settings.upstream_timeout_seconds,
        ),
        simplifier=SimplifierClient(
            api_key=settings.simplifier_api_key,
            base_url=settings.simplifier_base_url,
            timeout_seconds=settings.upstream_timeout_seconds,
        ),
        profile_store=ProfileStore(
            mode=settings.profile_storage,
            directory=settings.profiles_dir,
        ),
    )
    logger.info(
        "Context ready: llm=%s, simplifier=%s, profile_storage=%s",
        "configured" if context.recommender.is_configured else "unconfigured",
        "configured" if context.simplifier.is_configured() else "unconfigured",
        settings.profile_storage,
    )
    return context


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_settings(context: AppContext = Depends(get_context)) -> Settings:
    return context.settings


def get_recommender(context: AppContext = Depends(get_context)) -> RecommendationService:
    return context.recommender


def get_simplifier(context: AppContext = Depends(get_context)) -> SimplifierClient:
    return context.simplifier


def get_profile_store(context: AppContext = Depends(get_context)) -> ProfileStore:
    return context.profile_store
