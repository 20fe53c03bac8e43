"""Metamodel container for mapped class declarations."""

from collections.abc import Iterable

from ormcontext.core.mapped_class import MappedClass


class Metamodel:
    """Snapshot of a host framework's mapping metadata.

    Holds the raw ``MappedClass`` declarations by class name. The snapshot is
    assumed immutable once a ``ResolutionSession`` starts working on it.
    """

    def __init__(self, classes: Iterable[MappedClass] = ()):
        self.classes: dict[str, MappedClass] = {}
        for mapped_class in classes:
            self.add_class(mapped_class)

    def __contains__(self, name: object) -> bool:
        return name in self.classes

    def __len__(self) -> int:
        return len(self.classes)

    def add_class(self, mapped_class: MappedClass) -> None:
        """Add a class declaration.

        Args:
            mapped_class: Class declaration to add

        Raises:
            ValueError: If a class with the same name already exists
        """
        if mapped_class.name in self.classes:
            raise ValueError(f"Class {mapped_class.name} already exists")

        self.classes[mapped_class.name] = mapped_class

    def get_class(self, name: str) -> MappedClass:
        """Get class declaration by name.

        Args:
            name: Class name

        Returns:
            Class declaration

        Raises:
            KeyError: If class not found
        """
        if name not in self.classes:
            raise KeyError(f"Class {name} not found")
        return self.classes[name]

    def find_class(self, name: str | None) -> MappedClass | None:
        """Get class declaration by name, or None when unknown."""
        if name is None:
            return None
        return self.classes.get(name)

    def is_entity(self, name: str | None) -> bool:
        mapped_class = self.find_class(name)
        return mapped_class is not None and mapped_class.is_entity

    @property
    def entity_names(self) -> list[str]:
        """Names of all entity classes, in declaration order."""
        return [name for name, mapped_class in self.classes.items() if mapped_class.is_entity]

    def merge(self, other: "Metamodel") -> None:
        """Add all classes of another metamodel.

        Raises:
            ValueError: If both metamodels declare the same class
        """
        for mapped_class in other.classes.values():
            self.add_class(mapped_class)
