"""Domain description of entity types."""

import threading

from ormcontext.core.association import AssociationResolver
from ormcontext.core.domain import AttributeInfo, EntityInfo
from ormcontext.core.field import FieldDescriptor
from ormcontext.core.mapped_class import EntityTypeDescriptor


class DomainDescriptorResolver:
    """Summarizes entities as attributes, associations and inheritance."""

    def __init__(self, associations: AssociationResolver):
        self.associations = associations
        self._entities: dict[str, EntityInfo] = {}
        self._lock = threading.RLock()

    def resolve(self, entity: EntityTypeDescriptor) -> EntityInfo:
        """Get the domain description of an entity, memoized per entity."""
        info = self._entities.get(entity.simple_name)
        if info is not None:
            return info

        simple_attributes = []
        relationship_attributes = []
        for field in entity.fields:
            if field.is_association:
                relationship_attributes.append(self.attribute_info(field))
            else:
                simple_attributes.append(self.attribute_info(field))

        info = EntityInfo(
            entity_type_name=entity.name,
            superclass_entity=entity.superclass_entity,
            inheritance_type=entity.inheritance if entity.superclass_entity else None,
            simple_attributes=tuple(simple_attributes),
            relationship_attributes=tuple(relationship_attributes),
        )
        with self._lock:
            return self._entities.setdefault(entity.simple_name, info)

    def attribute_info(self, field: FieldDescriptor) -> AttributeInfo:
        """Describe one attribute; associations carry their ownership flag."""
        plural = field.collection_type is not None
        owning = None
        if field.is_association:
            # Looked up on the declaring class so inherited associations resolve too
            owning = self.associations.is_owning_side_of(field.declaring_class, field.name)

        return AttributeInfo(
            attr_name=field.name,
            attr_category="plural" if plural else "singular",
            attr_type=field.element_type.name,
            kind=field.kind,
            association=field.association,
            collection_type=field.collection_type,
            is_mapping_side_in_db=owning,
        )
