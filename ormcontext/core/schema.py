"""Relational schema models produced by resolution."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

UNKNOWN_TYPE = "UNKNOWN"


class ColumnDescriptor(BaseModel):
    """Column of a resolved table.

    ``nullable``, ``unique`` and ``length`` are only set when the field carries
    an explicit column declaration.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Column name")
    type: str = Field(default=UNKNOWN_TYPE, description="Resolved SQL type")
    nullable: bool | None = Field(default=None, description="Declared nullability")
    unique: bool | None = Field(default=None, description="Declared uniqueness")
    length: int | None = Field(default=None, description="Declared length")
    primary_key: bool = Field(default=False, description="Whether the column is part of the primary key")


class TableDescriptor(BaseModel):
    """Resolved table of an entity type (primary or secondary)."""

    model_config = ConfigDict(frozen=True)

    table_name: str = Field(..., min_length=1, description="Table name")
    columns: tuple[ColumnDescriptor, ...] = Field(default=(), description="Columns in field order")
    primary_keys: tuple[str, ...] = Field(default=(), description="Primary key column names")
    join_keys: tuple[str, ...] | None = Field(
        default=None, description="Primary key columns of the primary table (secondary tables only)"
    )

    @model_validator(mode="after")
    def _check_primary_keys(self) -> "TableDescriptor":
        for column in self.columns:
            if column.primary_key and column.name not in self.primary_keys:
                raise ValueError(
                    f"Column '{column.name}' is flagged as primary key but missing from "
                    f"primary keys of table '{self.table_name}'"
                )
        return self

    def get_column(self, name: str) -> ColumnDescriptor | None:
        """Get column by name."""
        for column in self.columns:
            if column.name == name:
                return column
        return None


class JoinTableDescriptor(BaseModel):
    """Join table of a cross-table association."""

    model_config = ConfigDict(frozen=True)

    table_name: str = Field(..., min_length=1, description="Canonical join table name")
    participants: tuple[str, ...] = Field(
        default=(), description="Tables joined (one entry for self references)"
    )
    join_columns: tuple[str, ...] = Field(default=(), description="Named join and inverse join columns")


class SchemaModel(BaseModel):
    """Schema relevant to a set of requested entity types."""

    model_config = ConfigDict(frozen=True)

    entity_tables: tuple[TableDescriptor, ...] = Field(default=(), description="Tables of the requested entities")
    join_tables: tuple[JoinTableDescriptor, ...] = Field(
        default=(), description="Join tables whose participants were all requested"
    )

    def get_table(self, name: str) -> TableDescriptor | None:
        """Get entity table by name."""
        for table in self.entity_tables:
            if table.table_name == name:
                return table
        return None

    def get_join_table(self, name: str) -> JoinTableDescriptor | None:
        """Get join table by name."""
        for join_table in self.join_tables:
            if join_table.table_name == name:
                return join_table
        return None
