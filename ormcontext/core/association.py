"""Association ownership and join table resolution."""

from ormcontext.core.field import FieldDescriptor
from ormcontext.core.mapped_class import EntityTypeDescriptor
from ormcontext.core.metamodel import Metamodel
from ormcontext.core.naming import NamingStrategy
from ormcontext.core.schema import JoinTableDescriptor
from ormcontext.core.table_resolver import TableSchemaResolver
from ormcontext.validation import UnresolvedMetadataError


class AssociationResolver:
    """Resolves which side of an association owns it and how join tables are named.

    Join tables get a canonical name so that both sides of a bidirectional
    association resolve to the same table.
    """

    def __init__(self, metamodel: Metamodel, naming: NamingStrategy | None = None):
        self.metamodel = metamodel
        self.tables = TableSchemaResolver(naming=naming)

    @staticmethod
    def is_owning_side(field: FieldDescriptor) -> bool:
        """Whether this side's declaration is authoritative for persisting the relationship.

        Precedence:
        - explicit join table: not owning, the join table holds the mapping
        - many_to_one: always owning
        - one_to_one, one_to_many, many_to_many: owning unless mapped_by is set
        - anything else: owning
        """
        if field.join_table is not None:
            return False
        if field.association == "many_to_one":
            return True
        if field.association in ("one_to_one", "one_to_many", "many_to_many"):
            return not field.mapped_by
        return True

    def is_owning_side_of(self, class_name: str, field_name: str) -> bool:
        """Ownership of a field looked up on the class declaring it.

        Raises:
            UnresolvedMetadataError: If the class or field does not exist
        """
        return self.is_owning_side(self.declared_field(class_name, field_name))

    def declared_field(self, class_name: str, field_name: str) -> FieldDescriptor:
        """Get a field from its declaring class.

        Raises:
            UnresolvedMetadataError: If the class or field does not exist
        """
        mapped_class = self.metamodel.find_class(class_name)
        if mapped_class is None:
            raise UnresolvedMetadataError(f"Class '{class_name}' is not part of the metamodel")
        field = mapped_class.get_field(field_name)
        if field is None:
            raise UnresolvedMetadataError(f"The attribute did not stem from an existing field: {class_name}.{field_name}")
        return field

    def table_names(self, class_name: str | None) -> list[str]:
        """Primary and secondary table names of an entity; empty for anything else."""
        mapped_class = self.metamodel.find_class(class_name)
        if mapped_class is None or not mapped_class.is_entity:
            return []
        return self.tables.table_names(mapped_class)

    def target_entity(self, field: FieldDescriptor) -> str | None:
        """Find the entity an association points to.

        The declared type wins when it is an entity. Otherwise its generic
        arguments are inspected, including one nested level, for the first entity.
        """
        if self.metamodel.is_entity(field.type.name):
            return field.type.name

        for arg in field.type.args:
            if self.metamodel.is_entity(arg.name):
                return arg.name
            for nested in arg.args:
                if self.metamodel.is_entity(nested.name):
                    return nested.name
        return None

    def join_table_name(self, field: FieldDescriptor) -> str:
        """Canonical join table name of a join-table-bearing field.

        An explicit name is used verbatim. Otherwise the declaring class and target
        simple names are ordered ascending and joined with an underscore.

        Raises:
            ValueError: If the field has no join table declaration
        """
        if field.join_table is None:
            raise ValueError(f"Field '{field.declaring_class}.{field.name}' has no join table declaration")

        if field.join_table.name:
            return field.join_table.name

        first, second = sorted((field.declaring_class, field.element_type.name))
        return f"{first}_{second}"

    def join_table_participants(
        self, field: FieldDescriptor, owner: EntityTypeDescriptor | None = None
    ) -> tuple[str, ...]:
        """Tables joined by a join table: the owning entity's tables and the target's.

        The owning entity is the declaring class. A field inherited from a mapped
        superclass is owned by the entity that inherits it, passed as ``owner``.
        """
        participants = list(self.table_names(field.declaring_class))
        if not participants and owner is not None:
            participants = self.tables.table_names(owner)
        for name in self.table_names(self.target_entity(field)):
            if name not in participants:
                participants.append(name)
        return tuple(participants)

    @staticmethod
    def join_columns(field: FieldDescriptor) -> tuple[str, ...]:
        """Named join columns and inverse join columns; unnamed ones are omitted."""
        if field.join_table is None:
            return ()
        names = []
        for join_column in field.join_table.join_columns + field.join_table.inverse_join_columns:
            if join_column.name and join_column.name not in names:
                names.append(join_column.name)
        return tuple(names)

    def describe_join_table(
        self, field: FieldDescriptor, owner: EntityTypeDescriptor | None = None
    ) -> JoinTableDescriptor:
        """Build the join table descriptor of a join-table-bearing field.

        Args:
            field: Field carrying a join table declaration
            owner: Entity being resolved, used when the field is inherited from a non-entity

        Raises:
            ValueError: If the field has no join table declaration
        """
        return JoinTableDescriptor(
            table_name=self.join_table_name(field),
            participants=self.join_table_participants(field, owner),
            join_columns=self.join_columns(field),
        )
