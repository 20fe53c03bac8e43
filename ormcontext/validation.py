"""Validation and error handling for metamodel resolution."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ormcontext.core.mapped_class import MappedClass
    from ormcontext.core.metamodel import Metamodel
    from ormcontext.core.naming import NamingStrategy


class ValidationError(Exception):
    """Raised when metamodel validation fails."""

    pass


class MetamodelValidationError(ValidationError):
    """Raised when a metamodel cannot be resolved as declared."""

    pass


class ResolutionError(Exception):
    """Raised when resolution of an entity type fails."""

    pass


class UnresolvedMetadataError(ResolutionError):
    """Raised when referenced metadata is missing from the metamodel."""

    pass


def validate_class(mapped_class: "MappedClass", naming: "NamingStrategy | None" = None) -> list[str]:
    """Validate a single class declaration.

    Args:
        mapped_class: Class declaration to validate
        naming: Naming strategy deriving undeclared primary table names

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not mapped_class.name:
        errors.append("Class declarations must have a name")

    if mapped_class.table is not None and not mapped_class.table.strip():
        errors.append(f"Class '{mapped_class.name}' declares an empty table name")

    primary = mapped_class.table or (naming.table_name(mapped_class.name) if naming else mapped_class.name)
    for secondary in mapped_class.secondary_tables:
        if not secondary.strip():
            errors.append(f"Class '{mapped_class.name}' declares an empty secondary table name")
        elif secondary == primary:
            errors.append(f"Class '{mapped_class.name}': secondary table '{secondary}' is its primary table")

    seen = set()
    for field in mapped_class.fields:
        if field.name in seen:
            errors.append(f"Class '{mapped_class.name}': field '{field.name}' is declared more than once")
        seen.add(field.name)

        if field.declaring_class != mapped_class.name:
            errors.append(
                f"Class '{mapped_class.name}': field '{field.name}' claims to be declared "
                f"on '{field.declaring_class}'"
            )

    return errors


def validate_metamodel(metamodel: "Metamodel", naming: "NamingStrategy | None" = None) -> list[str]:
    """Validate a metamodel for the properties resolution relies on.

    Args:
        metamodel: Metamodel to validate
        naming: Naming strategy deriving undeclared primary table names

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    for mapped_class in metamodel.classes.values():
        errors.extend(validate_class(mapped_class, naming))

    # Circular inheritance would make the chain walk endless
    for name in metamodel.classes:
        seen = {name}
        current = metamodel.classes[name].superclass
        while current is not None and current in metamodel.classes:
            if current in seen:
                errors.append(f"Circular inheritance detected for class '{name}'")
                break
            seen.add(current)
            current = metamodel.classes[current].superclass

    return errors
