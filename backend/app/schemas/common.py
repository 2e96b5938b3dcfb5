"""Shared API envelope and model configuration.

All request and response bodies use camelCase keys on the wire; Python code
uses snake_case attributes.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope: ``{"success": true, "data": ...}``."""

    success: bool = True
    data: DataT
