"""Selection state over the entity types of a session."""

from ormcontext.core.domain import DomainModel
from ormcontext.core.schema import SchemaModel
from ormcontext.core.session import ResolutionSession


class EntitySelection:
    """Tracks which entity types are selected and caches their descriptions.

    All entity types start selected. Schema and domain descriptions are computed
    lazily and dropped whenever the selection changes; the session's caches keep
    per-entity work from being repeated.
    """

    def __init__(self, session: ResolutionSession, entity_names: list[str] | None = None):
        self.session = session
        names = session.entity_names() if entity_names is None else entity_names
        self._selection: dict[str, bool] = {}
        for name in names:
            session.entity(name)
            self._selection[name] = True
        self._schema: SchemaModel | None = None
        self._domain: DomainModel | None = None

    @property
    def entity_names(self) -> list[str]:
        """All entity names managed by this selection."""
        return list(self._selection)

    def is_selected(self, name: str) -> bool:
        """Whether an entity is selected.

        Raises:
            TypeError: If name is None
            KeyError: If the entity is not managed by this selection
        """
        return self._selection[self._check(name)]

    def set_selected(self, name: str, selected: bool) -> None:
        """Select or deselect an entity.

        Raises:
            TypeError: If name is None
            KeyError: If the entity is not managed by this selection
        """
        name = self._check(name)
        if self._selection[name] != selected:
            self._selection[name] = selected
            self._invalidate()

    def select_all(self) -> None:
        self._set_all(True)

    def deselect_all(self) -> None:
        self._set_all(False)

    def all_selected(self) -> bool:
        return all(self._selection.values())

    def selected(self) -> list[str]:
        """Selected entity names in declaration order."""
        return [name for name, selected in self._selection.items() if selected]

    def schema(self) -> SchemaModel:
        """Schema of the selected entities."""
        if self._schema is None:
            self._schema = self.session.schema(self.selected())
        return self._schema

    def domain(self) -> DomainModel:
        """Domain description of the selected entities."""
        if self._domain is None:
            self._domain = self.session.domain(self.selected())
        return self._domain

    def _set_all(self, selected: bool) -> None:
        if any(value != selected for value in self._selection.values()):
            for name in self._selection:
                self._selection[name] = selected
            self._invalidate()

    def _invalidate(self) -> None:
        self._schema = None
        self._domain = None

    def _check(self, name: str) -> str:
        if name is None:
            raise TypeError("Entity name must not be None")
        if name not in self._selection:
            raise KeyError(f"Entity {name} is not part of this selection")
        return name
