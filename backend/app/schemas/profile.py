"""Pydantic schemas for profile generation, validation and storage.

The StructureDefinition models mirror the subset of the FHIR R4
StructureDefinition/ElementDefinition resources that the generator fills in.
Optional fields default to None and are dropped on serialization.
"""

from typing import Any, Literal

from pydantic import Field

from app.schemas.common import CamelModel

FhirVersion = Literal["R4", "R5", "R6"]
BindingStrength = Literal["required", "extensible", "preferred", "example"]


# === Constraint inputs ===


class CardinalityConstraint(CamelModel):
    """Min/max occurrence bound on an element path."""

    element: str = Field(min_length=1)
    min: int = Field(ge=0)
    max: str = Field(pattern=r"^(\*|\d+)$", description="Integer literal or '*'")


class BindingConstraint(CamelModel):
    """Value set binding on a coded element.

    ``strength`` is accepted as free text; unknown values are mapped to
    ``example`` by the differential builder.
    """

    element: str = Field(min_length=1)
    value_set_url: str = Field(min_length=1)
    strength: str = "example"


class ExtensionDeclaration(CamelModel):
    """An extension the profile adds, referenced by its canonical url."""

    url: str = Field(min_length=1)
    description: str | None = None


class ProfileGenerationRequest(CamelModel):
    """Request body for POST /profile/generate."""

    profile_name: str = Field(min_length=1)
    base_resource_type: str = Field(min_length=1)
    base_profile: str | None = None
    description: str = Field(min_length=1)
    fhir_version: FhirVersion
    publisher: str | None = None
    jurisdiction: str | None = None
    must_support_elements: list[str] = Field(default_factory=list)
    cardinality_constraints: list[CardinalityConstraint] | None = None
    extensions: list[ExtensionDeclaration] | None = None
    binding_constraints: list[BindingConstraint] | None = None


# === StructureDefinition ===


class ElementBinding(CamelModel):
    strength: BindingStrength
    value_set: str


class ElementType(CamelModel):
    code: str
    profile: list[str] | None = None


class ElementDefinition(CamelModel):
    """One differential entry, identified by its dotted path."""

    id: str
    path: str
    slice_name: str | None = None
    short: str | None = None
    definition: str | None = None
    min: int | None = None
    max: str | None = None
    type: list[ElementType] | None = None
    must_support: bool | None = None
    binding: ElementBinding | None = None


class Differential(CamelModel):
    element: list[ElementDefinition]


class Coding(CamelModel):
    system: str
    code: str


class CodeableConcept(CamelModel):
    coding: list[Coding]


class StructureDefinition(CamelModel):
    """Generated R4 profile document."""

    resource_type: Literal["StructureDefinition"] = "StructureDefinition"
    id: str
    url: str
    version: str
    name: str
    title: str
    status: Literal["draft", "active", "retired", "unknown"]
    description: str
    fhir_version: str
    kind: Literal["resource"]
    abstract: bool
    type: str
    base_definition: str
    derivation: Literal["constraint", "specialization"]
    publisher: str
    date: str
    jurisdiction: list[CodeableConcept] | None = None
    differential: Differential


class GeneratedProfile(CamelModel):
    profile: StructureDefinition


# === Validation ===


class ProfileValidationRequest(CamelModel):
    """Request body for POST /profile/validate.

    Both documents are kept as plain JSON objects: the profile may have been
    edited client-side and the resource is arbitrary FHIR JSON.
    """

    resource: dict[str, Any]
    profile: dict[str, Any]


class ValidationResult(CamelModel):
    valid: bool
    errors: list[str]


# === Storage ===


class SaveProfileRequest(CamelModel):
    profile: dict[str, Any]
    filename: str = Field(min_length=1)


class SaveProfileResult(CamelModel):
    """Outcome of a save; which fields are set depends on the storage mode."""

    message: str
    filename: str | None = None
    filepath: str | None = None
    content: str | None = None
    size: int | None = None


class ProfileSummary(CamelModel):
    filename: str
    id: str | None = None
    name: str | None = None
    title: str | None = None
    version: str | None = None
    status: str | None = None
