"""Differential element builder.

Turns the constraint lists collected by the wizard into the ordered
``differential.element`` list of a StructureDefinition:

    base element -> must-support -> cardinality -> binding -> extension slices

Cardinality and binding constraints update the first element already carrying
their path and only append when none exists. Must-support paths are appended
as given, and extension declarations always add a new slice on
``<base>.extension``.
"""

from collections.abc import Sequence

from app.schemas.profile import (
    BindingConstraint,
    BindingStrength,
    CardinalityConstraint,
    ElementBinding,
    ElementDefinition,
    ElementType,
    ExtensionDeclaration,
)

_BINDING_STRENGTHS: dict[str, BindingStrength] = {
    "required": "required",
    "extensible": "extensible",
    "preferred": "preferred",
    "example": "example",
}

DEFAULT_BINDING_STRENGTH: BindingStrength = "example"


def map_binding_strength(strength: str | None) -> BindingStrength:
    """Map a requested binding strength to an R4 BindingStrength code.

    Unrecognized values fall back to ``example``.
    """
    return _BINDING_STRENGTHS.get(strength or "", DEFAULT_BINDING_STRENGTH)


def _find_element(elements: list[ElementDefinition], path: str) -> ElementDefinition | None:
    """Return the first element with the given path, if any."""
    for element in elements:
        if element.path == path:
            return element
    return None


def build_differential_elements(
    base_type: str,
    title: str,
    description: str,
    must_support: Sequence[str] = (),
    cardinality: Sequence[CardinalityConstraint] | None = None,
    bindings: Sequence[BindingConstraint] | None = None,
    extensions: Sequence[ExtensionDeclaration] | None = None,
) -> list[ElementDefinition]:
    """Merge constraint lists into an ordered list of element definitions.

    Args:
        base_type: Base resource type, e.g. "Patient".
        title: Human-readable profile title, used as the root element's short.
        description: Profile description, used as the root element's definition.
        must_support: Element paths flagged mustSupport, in order.
        cardinality: Min/max constraints.
        bindings: Value set bindings.
        extensions: Extension declarations, sliced as ext0..extN-1.

    Returns:
        Element definitions in merge order. Never empty.
    """
    elements = [
        ElementDefinition(
            id=base_type,
            path=base_type,
            short=title,
            definition=description,
        )
    ]

    # Duplicate paths are kept as separate entries here
    for path in must_support:
        elements.append(ElementDefinition(id=path, path=path, must_support=True))

    for constraint in cardinality or ():
        existing = _find_element(elements, constraint.element)
        if existing is not None:
            existing.min = constraint.min
            existing.max = constraint.max
        else:
            elements.append(
                ElementDefinition(
                    id=constraint.element,
                    path=constraint.element,
                    min=constraint.min,
                    max=constraint.max,
                )
            )

    for constraint in bindings or ():
        binding = ElementBinding(
            strength=map_binding_strength(constraint.strength),
            value_set=constraint.value_set_url,
        )
        existing = _find_element(elements, constraint.element)
        if existing is not None:
            existing.binding = binding
        else:
            elements.append(
                ElementDefinition(id=constraint.element, path=constraint.element, binding=binding)
            )

    extension_path = f"{base_type}.extension"
    for index, extension in enumerate(extensions or ()):
        slice_name = f"ext{index}"
        elements.append(
            ElementDefinition(
                id=f"{extension_path}:{slice_name}",
                path=extension_path,
                slice_name=slice_name,
                short=extension.description,
                min=0,
                max="1",
                type=[ElementType(code="Extension", profile=[extension.url])],
            )
        )

    return elements
