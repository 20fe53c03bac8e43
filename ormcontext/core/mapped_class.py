"""Class-level mapping declarations and resolved entity descriptors."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ormcontext.core.field import FieldDescriptor

ClassKind = Literal["entity", "mapped_superclass", "embeddable", "plain"]


class InheritanceType(str, Enum):
    """Inheritance mapping strategy."""

    SINGLE_TABLE = "SINGLE_TABLE"
    JOINED = "JOINED"
    TABLE_PER_CLASS = "TABLE_PER_CLASS"


class MappedClass(BaseModel):
    """Raw mapping declaration of one class, as reported by a metamodel adapter.

    Fields are the class's own declarations only, in declaration order, including
    static and transient members. Inherited fields are collected by
    ``EntityDescriptorResolver``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Simple class name, unique within a metamodel")
    kind: ClassKind = Field(default="entity", description="Mapping role of the class")
    entity_name: str | None = Field(default=None, description="Entity name override")
    superclass: str | None = Field(default=None, description="Direct superclass name")
    table: str | None = Field(default=None, description="Explicit primary table name")
    secondary_tables: tuple[str, ...] = Field(default=(), description="Explicit secondary table names")
    inheritance: InheritanceType | None = Field(default=None, description="Declared inheritance strategy")
    fields: tuple[FieldDescriptor, ...] = Field(default=(), description="Own declared fields")

    def __hash__(self) -> int:
        return hash(self.name)

    @property
    def is_entity(self) -> bool:
        return self.kind == "entity"

    @property
    def is_mapped(self) -> bool:
        """Entities and mapped superclasses contribute fields to subclasses."""
        return self.kind in ("entity", "mapped_superclass")

    def get_field(self, name: str) -> FieldDescriptor | None:
        """Get own declared field by name."""
        for field in self.fields:
            if field.name == name:
                return field
        return None


class EntityTypeDescriptor(BaseModel):
    """Resolved view of a mapped class: its chain, strategy and collected fields."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Entity name")
    simple_name: str = Field(..., description="Simple class name")
    kind: ClassKind = Field(default="entity", description="Mapping role of the class")
    inheritance_chain: tuple[str, ...] = Field(
        default=(), description="Mapped class names, nearest first, starting with the class itself"
    )
    superclass_entity: str | None = Field(
        default=None, description="Direct superclass when it is itself an entity"
    )
    inheritance: InheritanceType | None = Field(default=None, description="Resolved inheritance strategy")
    table: str | None = Field(default=None, description="Explicit primary table name")
    secondary_tables: tuple[str, ...] = Field(default=(), description="Explicit secondary table names")
    fields: tuple[FieldDescriptor, ...] = Field(
        default=(), description="Own and inherited fields, excluding static and transient members"
    )

    def __hash__(self) -> int:
        return hash(self.simple_name)

    @property
    def column_fields(self) -> tuple[FieldDescriptor, ...]:
        """Fields with a column representation (inverse sides removed)."""
        return tuple(field for field in self.fields if not field.is_inverse)

    @property
    def join_table_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(field for field in self.fields if field.join_table is not None)

    def get_field(self, name: str) -> FieldDescriptor | None:
        """Get field by name."""
        for field in self.fields:
            if field.name == name:
                return field
        return None
