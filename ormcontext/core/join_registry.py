"""Registry of join tables discovered across resolved entity types."""

import threading
from collections.abc import Iterable

from ormcontext.core.schema import JoinTableDescriptor


class JoinTableRegistry:
    """Deduplicated join tables keyed by canonical name.

    Both sides of a bidirectional association may report the same join table;
    the first registration of a name wins and later ones are ignored.
    """

    def __init__(self):
        self.join_tables: dict[str, JoinTableDescriptor] = {}
        self.participants: dict[str, frozenset[str]] = {}
        self._lock = threading.RLock()

    def __contains__(self, name: object) -> bool:
        return name in self.join_tables

    def __len__(self) -> int:
        return len(self.join_tables)

    def register(self, descriptors: Iterable[JoinTableDescriptor]) -> list[str]:
        """Insert join tables not seen before.

        Args:
            descriptors: Join tables derived from one entity type

        Returns:
            Names that were newly registered
        """
        added = []
        with self._lock:
            for descriptor in descriptors:
                if descriptor.table_name in self.join_tables:
                    continue
                self.join_tables[descriptor.table_name] = descriptor
                self.participants[descriptor.table_name] = frozenset(descriptor.participants)
                added.append(descriptor.table_name)
        return added

    def get(self, name: str) -> JoinTableDescriptor:
        """Get join table by name.

        Raises:
            KeyError: If join table not found
        """
        if name not in self.join_tables:
            raise KeyError(f"Join table {name} not found")
        return self.join_tables[name]

    def relevant(self, table_names: Iterable[str]) -> list[JoinTableDescriptor]:
        """Join tables whose participants are all among ``table_names``.

        A self-referencing join table has a single participant and is relevant as
        soon as that table is requested; a join table between two entities needs both.
        Participant sets are not limited to one or two names: an owner with secondary
        tables contributes all of them, and such a join table is relevant once every
        participant is requested rather than being dropped for its size.

        Args:
            table_names: Table names of the requested entity types

        Returns:
            Relevant join tables in registration order
        """
        requested = set(table_names)
        with self._lock:
            return [
                self.join_tables[name]
                for name, participants in self.participants.items()
                if participants and participants <= requested
            ]
