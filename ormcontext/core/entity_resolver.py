"""Inheritance-chain walk collecting the mapped fields of an entity type."""

import logging
import threading

from ormcontext.core.field import FieldDescriptor
from ormcontext.core.mapped_class import EntityTypeDescriptor, InheritanceType, MappedClass
from ormcontext.core.metamodel import Metamodel
from ormcontext.validation import ResolutionError, UnresolvedMetadataError

logger = logging.getLogger(__name__)


class EntityDescriptorResolver:
    """Resolves ``MappedClass`` declarations into ``EntityTypeDescriptor`` values.

    Results are memoized per resolver; the metamodel is treated as immutable.
    """

    def __init__(self, metamodel: Metamodel):
        self.metamodel = metamodel
        self._descriptors: dict[str, EntityTypeDescriptor] = {}
        self._lock = threading.RLock()

    def resolve(self, name: str) -> EntityTypeDescriptor:
        """Get the resolved descriptor of a class.

        Args:
            name: Class name

        Returns:
            Resolved descriptor

        Raises:
            UnresolvedMetadataError: If the class is not part of the metamodel
            ResolutionError: If circular inheritance is detected
        """
        descriptor = self._descriptors.get(name)
        if descriptor is not None:
            return descriptor

        mapped_class = self.metamodel.find_class(name)
        if mapped_class is None:
            raise UnresolvedMetadataError(f"Class '{name}' is not part of the metamodel")

        chain = self.inheritance_chain(mapped_class)
        superclass = self.metamodel.find_class(mapped_class.superclass)
        descriptor = EntityTypeDescriptor(
            name=mapped_class.entity_name or mapped_class.name,
            simple_name=mapped_class.name,
            kind=mapped_class.kind,
            inheritance_chain=tuple(c.name for c in chain),
            superclass_entity=superclass.name if superclass is not None and superclass.is_entity else None,
            inheritance=self.inheritance_strategy(mapped_class),
            table=mapped_class.table,
            secondary_tables=mapped_class.secondary_tables,
            fields=self.collect_fields(chain),
        )

        with self._lock:
            descriptor = self._descriptors.setdefault(name, descriptor)
        logger.debug("Resolved %s with %d fields", name, len(descriptor.fields))
        return descriptor

    def inheritance_chain(self, mapped_class: MappedClass) -> list[MappedClass]:
        """Get the class followed by its mapped ancestors, nearest first.

        The walk stops at the first ancestor that is unknown or not mapped.

        Raises:
            ResolutionError: If circular inheritance is detected
        """
        chain = [mapped_class]
        seen = {mapped_class.name}
        current = self.metamodel.find_class(mapped_class.superclass)
        while current is not None and current.is_mapped:
            if current.name in seen:
                raise ResolutionError(f"Circular inheritance detected for class '{mapped_class.name}'")
            seen.add(current.name)
            chain.append(current)
            current = self.metamodel.find_class(current.superclass)
        return chain

    @staticmethod
    def collect_fields(chain: list[MappedClass]) -> tuple[FieldDescriptor, ...]:
        """Collect persistent fields along a chain; subclass declarations shadow ancestors."""
        fields = []
        seen = set()
        for mapped_class in chain:
            for field in mapped_class.fields:
                if field.name in seen:
                    continue
                seen.add(field.name)
                if field.static or field.transient:
                    continue
                fields.append(field)
        return tuple(fields)

    def inheritance_strategy(self, mapped_class: MappedClass) -> InheritanceType | None:
        """Get the nearest explicitly declared inheritance strategy.

        Only entity classes declare strategies. Without any declaration a concrete
        entity defaults to ``SINGLE_TABLE``, while a mapped superclass has none.

        Raises:
            ResolutionError: If circular inheritance is detected
        """
        seen = set()
        current = mapped_class
        while current is not None:
            if current.name in seen:
                raise ResolutionError(f"Circular inheritance detected for class '{mapped_class.name}'")
            seen.add(current.name)

            if current.is_entity and current.inheritance is not None:
                return current.inheritance
            current = self.metamodel.find_class(current.superclass)

        if mapped_class.kind == "mapped_superclass":
            return None
        return InheritanceType.SINGLE_TABLE
