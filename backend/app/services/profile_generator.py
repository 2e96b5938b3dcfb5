"""FHIR profile generation and simplified validation.

``generate_profile`` fills a fixed R4 StructureDefinition template from a
ProfileGenerationRequest and delegates the differential to
``build_differential_elements``. ``validate_resource`` is the matching
field-presence check: it walks must-support and min>0 paths on a resource and
reports what is absent. It is not a conformance validator (no terminology,
slicing or datatype checks).
"""

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from app.schemas.profile import (
    CodeableConcept,
    Coding,
    Differential,
    ProfileGenerationRequest,
    StructureDefinition,
    ValidationResult,
)
from app.services.differential import build_differential_elements
from app.utils.fhir_helpers import has_path_value, strip_type_prefix

logger = logging.getLogger(__name__)

DEFAULT_CANONICAL_BASE = "http://example.org/fhir"
DEFAULT_PUBLISHER = "FHIRSquire"
CORE_DEFINITION_BASE = "http://hl7.org/fhir/StructureDefinition"
JURISDICTION_SYSTEM = "urn:iso:std:iso:3166"

# Only R4 documents are generated; other versions reuse this template.
R4_FHIR_VERSION = "4.0.1"
PROFILE_VERSION = "0.1.0"

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9\s]")


def generate_profile_id(name: str) -> str:
    """Derive a StructureDefinition id/name from a human-readable title.

    Punctuation is dropped, words are capitalized and concatenated:
    "episode of care" -> "EpisodeOfCare", "Patient-2!" -> "Patient2".
    """
    words = _NON_ALPHANUMERIC.sub("", name).split()
    return "".join(word[:1].upper() + word[1:].lower() for word in words)


def format_fhir_instant(moment: datetime) -> str:
    """Format a datetime as a UTC FHIR instant with millisecond precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_profile(
    request: ProfileGenerationRequest,
    *,
    canonical_base: str = DEFAULT_CANONICAL_BASE,
    default_publisher: str = DEFAULT_PUBLISHER,
    now: datetime | None = None,
) -> StructureDefinition:
    """Build an R4 StructureDefinition for the requested profile.

    Args:
        request: Validated generation request.
        canonical_base: Namespace for the profile's canonical url.
        default_publisher: Publisher used when the request names none.
        now: Timestamp for ``date``. Defaults to the current UTC time.

    Returns:
        The generated StructureDefinition.
    """
    if request.fhir_version != "R4":
        logger.warning(
            "FHIR %s requested for %r; generating an R4 StructureDefinition",
            request.fhir_version, request.profile_name,
        )

    profile_id = generate_profile_id(request.profile_name)
    base_type = request.base_resource_type

    elements = build_differential_elements(
        base_type,
        request.profile_name,
        request.description,
        must_support=request.must_support_elements,
        cardinality=request.cardinality_constraints,
        bindings=request.binding_constraints,
        extensions=request.extensions,
    )

    jurisdiction = None
    if request.jurisdiction:
        jurisdiction = [
            CodeableConcept(coding=[Coding(system=JURISDICTION_SYSTEM, code=request.jurisdiction)])
        ]

    profile = StructureDefinition(
        id=profile_id,
        url=f"{canonical_base.rstrip('/')}/StructureDefinition/{profile_id}",
        version=PROFILE_VERSION,
        name=profile_id,
        title=request.profile_name,
        status="draft",
        description=request.description,
        fhir_version=R4_FHIR_VERSION,
        kind="resource",
        abstract=False,
        type=base_type,
        base_definition=request.base_profile or f"{CORE_DEFINITION_BASE}/{base_type}",
        derivation="constraint",
        publisher=request.publisher or default_publisher,
        date=format_fhir_instant(now or datetime.now(timezone.utc)),
        jurisdiction=jurisdiction,
        differential=Differential(element=elements),
    )

    logger.info(
        "Generated profile %s on %s with %d differential elements",
        profile_id, base_type, len(elements),
    )
    return profile


def _differential_elements(profile: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    differential = profile.get("differential")
    if not isinstance(differential, Mapping):
        return []
    elements = differential.get("element")
    if not isinstance(elements, list):
        return []
    return [element for element in elements if isinstance(element, Mapping)]


def validate_resource(resource: Mapping[str, Any], profile: Mapping[str, Any]) -> ValidationResult:
    """Check a resource for the elements a profile requires.

    Checks, all of which run regardless of earlier failures:
    - resourceType equals the profile's type
    - every mustSupport element is present and non-null
    - every element with min > 0 is present and non-null

    Args:
        resource: FHIR resource JSON.
        profile: StructureDefinition JSON (as generated or edited client-side).

    Returns:
        ValidationResult with every problem found.
    """
    errors: list[str] = []
    profile_type = profile.get("type")

    if resource.get("resourceType") != profile_type:
        errors.append(
            f"Resource type {resource.get('resourceType')} does not match profile type {profile_type}"
        )

    elements = _differential_elements(profile)

    for element in elements:
        if not element.get("mustSupport"):
            continue
        path = strip_type_prefix(str(element.get("path", "")), profile_type)
        if path and not has_path_value(resource, path):
            errors.append(f"Missing must-support element: {path}")

    for element in elements:
        minimum = element.get("min")
        if not isinstance(minimum, int) or minimum <= 0:
            continue
        path = strip_type_prefix(str(element.get("path", "")), profile_type)
        if path and not has_path_value(resource, path):
            errors.append(f"Required element missing (min={minimum}): {path}")

    return ValidationResult(valid=not errors, errors=errors)
