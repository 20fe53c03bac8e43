"""Table schema resolution for a single entity type."""

import logging

from ormcontext.core.field import FieldDescriptor
from ormcontext.core.mapped_class import EntityTypeDescriptor, MappedClass
from ormcontext.core.naming import NamingStrategy
from ormcontext.core.schema import ColumnDescriptor, TableDescriptor
from ormcontext.db.base import BaseTypeLookup, NullTypeLookup

logger = logging.getLogger(__name__)


class TableSchemaResolver:
    """Builds the primary and secondary tables of an entity type.

    Column placement follows explicit declarations first and falls back to the
    naming strategy: the primary table is named after the class, columns after
    their fields.
    """

    def __init__(self, type_lookup: BaseTypeLookup | None = None, naming: NamingStrategy | None = None):
        self.type_lookup = type_lookup or NullTypeLookup()
        self.naming = naming or NamingStrategy()

    def primary_table_name(self, entity: EntityTypeDescriptor | MappedClass) -> str:
        """Explicit table declaration, else the naming strategy's name for the class."""
        if entity.table:
            return entity.table
        simple_name = entity.simple_name if isinstance(entity, EntityTypeDescriptor) else entity.name
        return self.naming.table_name(simple_name)

    @staticmethod
    def secondary_table_names(entity: EntityTypeDescriptor | MappedClass) -> list[str]:
        """Explicit secondary tables, duplicates and empty names removed."""
        names = []
        for name in entity.secondary_tables:
            if name and name not in names:
                names.append(name)
        return names

    def table_names(self, entity: EntityTypeDescriptor | MappedClass) -> list[str]:
        """Primary table followed by secondary tables."""
        names = [self.primary_table_name(entity)]
        names.extend(name for name in self.secondary_table_names(entity) if name not in names)
        return names

    def column_name(self, field: FieldDescriptor) -> str:
        """Explicit column name, else explicit join column name, else derived from the field."""
        return field.column_name_override or self.naming.column_name(field.name)

    def resolve(self, entity: EntityTypeDescriptor) -> dict[str, TableDescriptor]:
        """Resolve the tables of an entity type.

        Args:
            entity: Resolved entity descriptor

        Returns:
            Tables keyed by name, primary table first
        """
        primary_table = self.primary_table_name(entity)
        secondary_tables = self.secondary_table_names(entity)

        columns: dict[str, list[ColumnDescriptor]] = {primary_table: []}
        primary_keys: dict[str, list[str]] = {primary_table: []}
        for name in secondary_tables:
            columns.setdefault(name, [])
            primary_keys.setdefault(name, [])

        for field in entity.column_fields:
            table_name = field.table_override or primary_table
            if table_name not in columns:
                logger.debug(
                    "Dropping field %s.%s: table '%s' is not a table of %s",
                    field.declaring_class,
                    field.name,
                    table_name,
                    entity.name,
                )
                continue

            column = self.build_column(field, table_name)
            columns[table_name].append(column)
            if column.primary_key and column.name not in primary_keys[table_name]:
                primary_keys[table_name].append(column.name)

        # Secondary tables join back to the primary table's key
        join_keys = tuple(primary_keys[primary_table])

        tables = {}
        for table_name in columns:
            tables[table_name] = TableDescriptor(
                table_name=table_name,
                columns=tuple(columns[table_name]),
                primary_keys=tuple(primary_keys[table_name]),
                join_keys=join_keys if table_name != primary_table else None,
            )
        return tables

    def build_column(self, field: FieldDescriptor, table_name: str) -> ColumnDescriptor:
        """Build the column of a field placed in ``table_name``."""
        name = self.column_name(field)
        column_type = self.type_lookup.column_type(table_name, name)

        if field.column is not None:
            return ColumnDescriptor(
                name=name,
                type=column_type,
                nullable=field.column.nullable,
                unique=field.column.unique,
                length=field.column.length,
                primary_key=field.primary_key,
            )
        return ColumnDescriptor(name=name, type=column_type, primary_key=field.primary_key)
