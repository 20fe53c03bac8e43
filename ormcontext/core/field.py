"""Field-level mapping declarations."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AssociationType = Literal["many_to_one", "one_to_one", "one_to_many", "many_to_many"]

# Type names treated as collections when classifying associations
LIST_TYPES = {"list", "List", "Sequence", "MutableSequence", "tuple", "Tuple", "deque"}
SET_TYPES = {"set", "Set", "frozenset", "FrozenSet", "MutableSet", "AbstractSet"}
MAP_TYPES = {"dict", "Dict", "Mapping", "MutableMapping", "OrderedDict", "defaultdict"}
COLLECTION_TYPES = {"Collection", "Iterable"} | LIST_TYPES | SET_TYPES | MAP_TYPES

OPTIONAL_TYPES = {"Optional", "Union"}


class FieldKind(str, Enum):
    """Closed classification of a mapped member."""

    SCALAR = "scalar"
    EMBEDDED = "embedded"
    SINGULAR_ASSOCIATION = "singular_association"
    PLURAL_ASSOCIATION = "plural_association"


class TypeRef(BaseModel):
    """Declared type of a field, with its generic parameters.

    ``list[Course]`` is ``TypeRef(name="list", args=(TypeRef(name="Course"),))``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Simple type name")
    args: tuple[TypeRef, ...] = Field(default=(), description="Generic type arguments")

    @classmethod
    def parse(cls, text: str) -> TypeRef:
        """Parse a type expression such as ``dict[str, set[Tag]]`` or ``Course | None``.

        Args:
            text: Type expression

        Returns:
            Parsed type reference

        Raises:
            ValueError: If the expression is malformed
        """
        ref, rest = _parse_union(text.strip())
        if rest.strip():
            raise ValueError(f"Invalid type expression: '{text}'")
        return ref

    @property
    def is_collection(self) -> bool:
        return self.name in COLLECTION_TYPES

    @property
    def is_optional(self) -> bool:
        return self.name in OPTIONAL_TYPES

    def unwrap_optional(self) -> TypeRef:
        """Return the single non-None member of an optional/union type."""
        if not self.is_optional:
            return self
        members = [arg for arg in self.args if arg.name != "None"]
        if len(members) == 1:
            return members[0]
        return self

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(str(arg) for arg in self.args)}]"


TypeRef.model_rebuild()


def _parse_union(text: str) -> tuple[TypeRef, str]:
    members = []
    ref, rest = _parse_single(text)
    members.append(ref)
    while rest.lstrip().startswith("|"):
        ref, rest = _parse_single(rest.lstrip()[1:])
        members.append(ref)
    if len(members) == 1:
        return members[0], rest
    return TypeRef(name="Union", args=tuple(members)), rest


def _parse_single(text: str) -> tuple[TypeRef, str]:
    text = text.lstrip()
    end = 0
    while end < len(text) and (text[end].isalnum() or text[end] in "_."):
        end += 1
    if end == 0:
        raise ValueError(f"Expected type name at: '{text}'")

    # Qualified names keep only the simple name
    name = text[:end].rsplit(".", 1)[-1]
    rest = text[end:].lstrip()
    if not rest.startswith("["):
        return TypeRef(name=name), rest

    args = []
    rest = rest[1:]
    while True:
        arg, rest = _parse_union(rest)
        args.append(arg)
        rest = rest.lstrip()
        if rest.startswith(","):
            rest = rest[1:]
            continue
        if rest.startswith("]"):
            return TypeRef(name=name, args=tuple(args)), rest[1:]
        raise ValueError(f"Unterminated type arguments for '{name}'")


class ColumnDeclaration(BaseModel):
    """Explicit column override on a field."""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, description="Column name override")
    table: str | None = Field(default=None, description="Table holding the column (primary or secondary)")
    nullable: bool = Field(default=True, description="Whether the column accepts NULL")
    unique: bool = Field(default=False, description="Whether the column carries a unique constraint")
    length: int = Field(default=255, description="Declared column length")


class JoinColumnDeclaration(BaseModel):
    """Explicit foreign key column declaration."""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, description="Foreign key column name")
    table: str | None = Field(default=None, description="Table holding the foreign key column")


class JoinTableDeclaration(BaseModel):
    """Explicit join table declaration on an association field."""

    model_config = ConfigDict(frozen=True)

    name: str | None = Field(default=None, description="Join table name (convention applies when absent)")
    join_columns: tuple[JoinColumnDeclaration, ...] = Field(
        default=(), description="Columns referencing the owning entity"
    )
    inverse_join_columns: tuple[JoinColumnDeclaration, ...] = Field(
        default=(), description="Columns referencing the target entity"
    )


class FieldDescriptor(BaseModel):
    """One mapped member of a class.

    Association categories:
    - many_to_one: this side holds a foreign key to the target
    - one_to_one: one target, owning unless mapped_by is set
    - one_to_many: many targets, owning unless mapped_by is set
    - many_to_many: many targets, usually through a join table
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Field name")
    declaring_class: str = Field(..., description="Name of the class declaring the field")
    type: TypeRef = Field(default=TypeRef(name="object"), description="Declared type")
    kind: FieldKind = Field(default=FieldKind.SCALAR, description="Attribute classification")
    association: AssociationType | None = Field(default=None, description="Association category")
    column: ColumnDeclaration | None = Field(default=None, description="Column override")
    join_columns: tuple[JoinColumnDeclaration, ...] = Field(default=(), description="Join column overrides")
    join_table: JoinTableDeclaration | None = Field(default=None, description="Join table declaration")
    mapped_by: str | None = Field(default=None, description="Owning field on the other side")
    primary_key: bool = Field(default=False, description="Whether the field is (part of) the primary key")
    static: bool = Field(default=False, description="Class-level member, never persisted")
    transient: bool = Field(default=False, description="Explicitly excluded from persistence")

    @property
    def is_association(self) -> bool:
        return self.kind in (FieldKind.SINGULAR_ASSOCIATION, FieldKind.PLURAL_ASSOCIATION)

    @property
    def is_plural(self) -> bool:
        return self.kind == FieldKind.PLURAL_ASSOCIATION

    @property
    def is_inverse(self) -> bool:
        """Inverse sides have no column representation."""
        return bool(self.mapped_by) and self.association in ("one_to_one", "one_to_many", "many_to_many")

    @property
    def column_name_override(self) -> str | None:
        """Explicit column name, falling back to the first explicit join column name."""
        if self.column is not None and self.column.name:
            return self.column.name
        if self.join_columns and self.join_columns[0].name:
            return self.join_columns[0].name
        return None

    @property
    def table_override(self) -> str | None:
        """Explicit table for the column, if declared."""
        if self.column is not None:
            return self.column.table or None
        if self.join_columns:
            return self.join_columns[0].table or None
        return None

    @property
    def element_type(self) -> TypeRef:
        """Element type for collections (value type for mappings), else the unwrapped type."""
        declared = self.type.unwrap_optional()
        if declared.is_collection and declared.args:
            if declared.name in MAP_TYPES:
                return declared.args[-1]
            return declared.args[0]
        return declared

    @property
    def collection_type(self) -> str | None:
        declared = self.type.unwrap_optional()
        if not declared.is_collection:
            return None
        if declared.name in LIST_TYPES:
            return "LIST"
        if declared.name in SET_TYPES:
            return "SET"
        if declared.name in MAP_TYPES:
            return "MAP"
        return "COLLECTION"
