"""Pydantic schemas for the Simplifier.net proxy routes."""

from typing import Any

from pydantic import Field

from app.schemas.common import CamelModel


class SimplifierStatus(CamelModel):
    configured: bool
    message: str


class ProjectCreateRequest(CamelModel):
    name: str = Field(min_length=1)
    scope: str = Field(min_length=1)
    description: str | None = None


class UploadRequest(CamelModel):
    project_scope: str = Field(min_length=1)
    profile: dict[str, Any]
    filename: str = Field(min_length=1)


class ImplementationGuideRequest(CamelModel):
    project_scope: str = Field(min_length=1)
    ig_name: str = Field(min_length=1)
    profiles: list[dict[str, Any]]


class RemoteValidationRequest(CamelModel):
    profile: dict[str, Any]


class PublishResult(CamelModel):
    success: bool
    url: str | None = None


class RemoteValidationResult(CamelModel):
    valid: bool
    issues: list[Any]
