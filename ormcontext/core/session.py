"""Resolution session: the main API for schema and domain descriptions."""

import logging
from collections.abc import Iterable

from ormcontext.core.association import AssociationResolver
from ormcontext.core.cache import SchemaCache
from ormcontext.core.domain import DomainModel
from ormcontext.core.domain_resolver import DomainDescriptorResolver
from ormcontext.core.entity_resolver import EntityDescriptorResolver
from ormcontext.core.mapped_class import EntityTypeDescriptor
from ormcontext.core.metamodel import Metamodel
from ormcontext.core.naming import NamingStrategy
from ormcontext.core.schema import SchemaModel, TableDescriptor
from ormcontext.core.table_resolver import TableSchemaResolver
from ormcontext.db.base import BaseTypeLookup, NullTypeLookup
from ormcontext.validation import MetamodelValidationError, UnresolvedMetadataError, validate_metamodel

logger = logging.getLogger(__name__)


class ResolutionSession:
    """Resolves schema and domain descriptions for selections of entity types.

    A session owns every cache involved. Each entity type is resolved at most
    once per session; later requests over growing or shrinking selections only
    choose which cached entries are relevant.

    Example:
        >>> session = ResolutionSession(metamodel)
        >>> schema = session.schema(["Student", "Course"])
        >>> [t.table_name for t in schema.join_tables]
        ['Student_Course']
    """

    def __init__(
        self,
        metamodel: Metamodel,
        type_lookup: BaseTypeLookup | None = None,
        naming: NamingStrategy | None = None,
    ):
        """Initialize resolution session.

        Args:
            metamodel: Mapping metadata to resolve
            type_lookup: Column type lookup (default: every type is UNKNOWN)
            naming: Naming strategy for undeclared table and column names

        Raises:
            MetamodelValidationError: If the metamodel cannot be resolved
        """
        self.naming = naming or NamingStrategy()
        errors = validate_metamodel(metamodel, self.naming)
        if errors:
            raise MetamodelValidationError(
                "Metamodel validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        self.metamodel = metamodel
        self.type_lookup = type_lookup or NullTypeLookup()

        self.entities = EntityDescriptorResolver(metamodel)
        self.tables = TableSchemaResolver(self.type_lookup, self.naming)
        self.associations = AssociationResolver(metamodel, self.naming)
        self.cache = SchemaCache(self.tables, self.associations)
        self.domains = DomainDescriptorResolver(self.associations)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Release the type lookup's resources."""
        self.type_lookup.close()

    def entity_names(self) -> list[str]:
        """Names of all entity classes in the metamodel."""
        return self.metamodel.entity_names

    def entity(self, name: str) -> EntityTypeDescriptor:
        """Get the resolved descriptor of an entity class.

        Raises:
            UnresolvedMetadataError: If the name is not an entity of the metamodel
        """
        if not self.metamodel.is_entity(name):
            raise UnresolvedMetadataError(f"'{name}' is not an entity of the metamodel")
        return self.entities.resolve(name)

    def tables_of(self, name: str) -> dict[str, TableDescriptor]:
        """Get the tables of one entity, keyed by table name."""
        return self.cache.resolve(self.entity(name))

    def schema(self, entity_names: Iterable[str]) -> SchemaModel:
        """Resolve the schema relevant to a set of entity types.

        Entity tables are those of the requested entities. Join tables are those
        whose participant tables all belong to requested entities.

        Args:
            entity_names: Requested entity names (order is kept, duplicates ignored)

        Returns:
            Schema model with deduplicated entity and join tables

        Raises:
            TypeError: If entity_names is None
            UnresolvedMetadataError: If a name is not an entity of the metamodel
        """
        entities = self._requested(entity_names)

        entity_tables: list[TableDescriptor] = []
        requested_tables: set[str] = set()
        for entity in entities:
            for table in self.cache.resolve(entity).values():
                if table not in entity_tables:
                    entity_tables.append(table)
            requested_tables.update(self.tables.table_names(entity))

        return SchemaModel(
            entity_tables=tuple(entity_tables),
            join_tables=tuple(self.cache.registry.relevant(requested_tables)),
        )

    def domain(self, entity_names: Iterable[str]) -> DomainModel:
        """Resolve the domain description of a set of entity types.

        Raises:
            TypeError: If entity_names is None
            UnresolvedMetadataError: If a name is not an entity of the metamodel
        """
        entities = self._requested(entity_names)
        return DomainModel(entities=tuple(self.domains.resolve(entity) for entity in entities))

    def _requested(self, entity_names: Iterable[str]) -> list[EntityTypeDescriptor]:
        if entity_names is None:
            raise TypeError("entity_names must not be None")
        if isinstance(entity_names, str):
            entity_names = [entity_names]

        entities = []
        seen = set()
        for name in entity_names:
            if name in seen:
                continue
            seen.add(name)
            entities.append(self.entity(name))
        logger.debug("Resolving %d entity types", len(entities))
        return entities
