"""Per-session memoization of entity table resolution."""

import logging
import threading

from ormcontext.core.association import AssociationResolver
from ormcontext.core.join_registry import JoinTableRegistry
from ormcontext.core.mapped_class import EntityTypeDescriptor
from ormcontext.core.schema import TableDescriptor
from ormcontext.core.table_resolver import TableSchemaResolver

logger = logging.getLogger(__name__)


class SchemaCache:
    """Append-only cache of resolved tables per entity type.

    Each entity is computed outside the lock and committed in one step together
    with its join tables, so a failed or concurrent computation never leaves a
    partial entry behind. When two callers race on the same entity the first
    commit wins.
    """

    def __init__(
        self,
        tables: TableSchemaResolver,
        associations: AssociationResolver,
        registry: JoinTableRegistry | None = None,
    ):
        self.tables = tables
        self.associations = associations
        self.registry = registry or JoinTableRegistry()
        self._entries: dict[str, dict[str, TableDescriptor]] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, entity: EntityTypeDescriptor) -> dict[str, TableDescriptor]:
        """Get the tables of an entity, computing and caching them on first use.

        Args:
            entity: Resolved entity descriptor

        Returns:
            Copy of the cached tables keyed by name
        """
        key = entity.simple_name
        entry = self._entries.get(key)
        if entry is not None:
            with self._lock:
                self.hits += 1
            return dict(entry)

        logger.debug("Schema cache miss for %s", key)
        tables = self.tables.resolve(entity)
        join_tables = [self.associations.describe_join_table(field, entity) for field in entity.join_table_fields]

        with self._lock:
            self.misses += 1
            entry = self._entries.get(key)
            if entry is None:
                self.registry.register(join_tables)
                self._entries[key] = entry = tables
        return dict(entry)

    def cached_tables(self, name: str) -> dict[str, TableDescriptor] | None:
        """Get the cached tables of an entity without computing them."""
        entry = self._entries.get(name)
        return dict(entry) if entry is not None else None
