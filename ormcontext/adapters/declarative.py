"""Declarative mapping markers for Python classes and the adapter reading them.

Classes are marked with ``@entity``, ``@mapped_superclass`` or ``@embeddable``;
fields are class annotations, with mapping declarations attached through
``typing.Annotated``:

    @entity(table="orders", secondary_tables=["order_meta"])
    class Order:
        id: Annotated[int, Id()]
        notes: Annotated[str, Column(table="order_meta", length=2000)]
        customer: Annotated["Customer", ManyToOne(), JoinColumn(name="customer_id")]
        lines: Annotated[list["OrderLine"], OneToMany(mapped_by="order")]
        scratch: Annotated[dict, Transient()]
        instances: ClassVar[int] = 0
"""

import inspect
import runpy
import sys
import types
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, ClassVar, ForwardRef, Union, get_args, get_origin, get_type_hints

from ormcontext.adapters.base import BaseAdapter
from ormcontext.core.field import (
    ColumnDeclaration,
    FieldDescriptor,
    FieldKind,
    JoinColumnDeclaration,
    JoinTableDeclaration,
    TypeRef,
)
from ormcontext.core.mapped_class import ClassKind, InheritanceType, MappedClass
from ormcontext.core.metamodel import Metamodel

MAPPING_ATTR = "__orm_mapping__"


@dataclass(frozen=True)
class Id:
    """Marks a primary key field."""


@dataclass(frozen=True)
class Column:
    name: str | None = None
    table: str | None = None
    nullable: bool = True
    unique: bool = False
    length: int = 255


@dataclass(frozen=True)
class JoinColumn:
    name: str | None = None
    table: str | None = None


@dataclass(frozen=True)
class JoinTable:
    name: str | None = None
    join_columns: tuple[JoinColumn | str, ...] = ()
    inverse_join_columns: tuple[JoinColumn | str, ...] = ()


@dataclass(frozen=True)
class ManyToOne:
    association = "many_to_one"


@dataclass(frozen=True)
class OneToOne:
    mapped_by: str | None = None
    association = "one_to_one"


@dataclass(frozen=True)
class OneToMany:
    mapped_by: str | None = None
    association = "one_to_many"


@dataclass(frozen=True)
class ManyToMany:
    mapped_by: str | None = None
    association = "many_to_many"


@dataclass(frozen=True)
class Embedded:
    """Marks a field holding an embeddable value."""


@dataclass(frozen=True)
class Transient:
    """Excludes a field from persistence."""


_MARKERS = (Id, Column, JoinColumn, JoinTable, ManyToOne, OneToOne, OneToMany, ManyToMany, Embedded, Transient)
_ASSOCIATIONS = (ManyToOne, OneToOne, OneToMany, ManyToMany)


@dataclass(frozen=True)
class ClassMapping:
    """Class-level declaration stored on a decorated class."""

    kind: ClassKind
    entity_name: str | None = None
    table: str | None = None
    secondary_tables: tuple[str, ...] = ()
    inheritance: InheritanceType | None = None


def entity(
    cls: type | None = None,
    *,
    name: str | None = None,
    table: str | None = None,
    secondary_tables: list[str] | tuple[str, ...] = (),
    inheritance: InheritanceType | str | None = None,
):
    """Mark a class as an entity.

    Usable bare (``@entity``) or with arguments (``@entity(table="orders")``).

    Args:
        cls: Class to mark (when used bare)
        name: Entity name override
        table: Primary table name
        secondary_tables: Secondary table names
        inheritance: Inheritance strategy for this hierarchy
    """
    mapping = ClassMapping(
        kind="entity",
        entity_name=name,
        table=table,
        secondary_tables=tuple(secondary_tables),
        inheritance=InheritanceType(inheritance) if inheritance is not None else None,
    )

    def decorate(target: type) -> type:
        setattr(target, MAPPING_ATTR, mapping)
        return target

    if cls is not None:
        return decorate(cls)
    return decorate


def mapped_superclass(cls: type) -> type:
    """Mark a class whose fields are inherited by entities but that has no table."""
    setattr(cls, MAPPING_ATTR, ClassMapping(kind="mapped_superclass"))
    return cls


def embeddable(cls: type) -> type:
    """Mark a value class embedded into entities."""
    setattr(cls, MAPPING_ATTR, ClassMapping(kind="embeddable"))
    return cls


def class_mapping(cls: Any) -> ClassMapping | None:
    """Get the class's own mapping declaration (inherited declarations do not count)."""
    if not isinstance(cls, type):
        return None
    return cls.__dict__.get(MAPPING_ATTR)


def type_ref(tp: Any) -> TypeRef:
    """Convert a Python annotation into a ``TypeRef``."""
    if tp is None or tp is type(None):
        return TypeRef(name="None")
    if isinstance(tp, str):
        return TypeRef.parse(tp)
    if isinstance(tp, ForwardRef):
        return TypeRef.parse(tp.__forward_arg__)

    origin = get_origin(tp)
    if origin is Annotated:
        return type_ref(get_args(tp)[0])

    args = tuple(type_ref(arg) for arg in get_args(tp) if arg is not Ellipsis)
    if origin is Union or origin is types.UnionType:
        return TypeRef(name="Union", args=args)
    if origin is not None:
        return TypeRef(name=getattr(origin, "__name__", str(origin)), args=args)
    return TypeRef(name=getattr(tp, "__name__", str(tp)), args=args)


def _referenced_classes(tp: Any) -> list[type]:
    if isinstance(tp, type) and get_origin(tp) is None:
        return [tp]
    found = []
    for arg in get_args(tp):
        found.extend(_referenced_classes(arg))
    return found


def _markers(metadata: tuple) -> list:
    markers = []
    for item in metadata:
        # Bare marker classes are accepted, e.g. Annotated[int, Id]
        if isinstance(item, type) and issubclass(item, _MARKERS):
            item = item()
        if isinstance(item, _MARKERS):
            markers.append(item)
    return markers


def _join_column(value: JoinColumn | str) -> JoinColumnDeclaration:
    if isinstance(value, str):
        return JoinColumnDeclaration(name=value)
    return JoinColumnDeclaration(name=value.name, table=value.table)


class DeclarativeAdapter(BaseAdapter):
    """Reads mapping declarations from decorated Python classes.

    Superclasses and association targets that are themselves mapped are picked
    up even when not passed explicitly.
    """

    def parse(self, source: str | Path) -> Metamodel:
        """Execute a Python module and collect the mapped classes it defines.

        Args:
            source: Path to a Python file

        Returns:
            Metamodel with the mapped classes of the module
        """
        source_path = Path(source)
        script_dir = str(source_path.parent)
        sys.path.insert(0, script_dir)
        try:
            namespace = runpy.run_path(str(source_path))
        finally:
            if sys.path and sys.path[0] == script_dir:
                sys.path.pop(0)

        classes = [value for key, value in namespace.items() if not key.startswith("__") and class_mapping(value)]
        return self.from_classes(classes, namespace)

    def from_classes(self, classes: list[type], namespace: dict[str, Any] | None = None) -> Metamodel:
        """Build a metamodel from mapped classes.

        Args:
            classes: Decorated classes
            namespace: Extra names for resolving string annotations

        Returns:
            Metamodel with one declaration per mapped class

        Raises:
            ValueError: If a passed class is not mapped or two classes share a name
        """
        localns = dict(namespace or {})
        localns.update({cls.__name__: cls for cls in classes})

        metamodel = Metamodel()
        seen: dict[str, type] = {}
        queue = list(classes)
        while queue:
            cls = queue.pop(0)
            if cls.__name__ in seen:
                if seen[cls.__name__] is not cls:
                    raise ValueError(f"Two mapped classes are named {cls.__name__}")
                continue
            if class_mapping(cls) is None:
                raise ValueError(f"Class {cls.__name__} has no mapping declaration")
            seen[cls.__name__] = cls

            mapped_class, referenced = self._read_class(cls, localns)
            metamodel.add_class(mapped_class)
            for candidate in referenced:
                localns.setdefault(candidate.__name__, candidate)
                if class_mapping(candidate) is not None and candidate.__name__ not in seen:
                    queue.append(candidate)
        return metamodel

    def _read_class(self, cls: type, localns: dict[str, Any]) -> tuple[MappedClass, list[type]]:
        mapping = class_mapping(cls)
        superclass = self._superclass(cls)
        referenced = [superclass] if superclass is not None else []

        own = inspect.get_annotations(cls)
        module = sys.modules.get(cls.__module__)
        globalns = dict(vars(module)) if module is not None else {}
        hints = get_type_hints(cls, globalns=globalns, localns=localns, include_extras=True)

        fields = []
        for name in own:
            hint = hints.get(name, own[name])
            fields.append(self._read_field(cls.__name__, name, hint))
            referenced.extend(_referenced_classes(hint))

        mapped_class = MappedClass(
            name=cls.__name__,
            kind=mapping.kind,
            entity_name=mapping.entity_name,
            superclass=superclass.__name__ if superclass is not None else None,
            table=mapping.table,
            secondary_tables=mapping.secondary_tables,
            inheritance=mapping.inheritance,
            fields=tuple(fields),
        )
        return mapped_class, referenced

    @staticmethod
    def _superclass(cls: type) -> type | None:
        bases = [base for base in cls.__bases__ if base is not object]
        for base in bases:
            if class_mapping(base) is not None:
                return base
        return bases[0] if bases else None

    def _read_field(self, class_name: str, name: str, hint: Any) -> FieldDescriptor:
        if hint is ClassVar or get_origin(hint) is ClassVar:
            return FieldDescriptor(name=name, declaring_class=class_name, type=type_ref(hint), static=True)

        metadata: tuple = ()
        if get_origin(hint) is Annotated:
            metadata = hint.__metadata__
        markers = _markers(metadata)
        declared = type_ref(hint)

        association = next((m for m in markers if isinstance(m, _ASSOCIATIONS)), None)
        column = next((m for m in markers if isinstance(m, Column)), None)
        join_table = next((m for m in markers if isinstance(m, JoinTable)), None)

        if association is not None:
            plural = declared.unwrap_optional().is_collection
            kind = FieldKind.PLURAL_ASSOCIATION if plural else FieldKind.SINGULAR_ASSOCIATION
        elif any(isinstance(m, Embedded) for m in markers) or self._is_embeddable(hint):
            kind = FieldKind.EMBEDDED
        else:
            kind = FieldKind.SCALAR

        return FieldDescriptor(
            name=name,
            declaring_class=class_name,
            type=declared,
            kind=kind,
            association=association.association if association is not None else None,
            column=(
                ColumnDeclaration(
                    name=column.name,
                    table=column.table,
                    nullable=column.nullable,
                    unique=column.unique,
                    length=column.length,
                )
                if column is not None
                else None
            ),
            join_columns=tuple(_join_column(m) for m in markers if isinstance(m, JoinColumn)),
            join_table=(
                JoinTableDeclaration(
                    name=join_table.name,
                    join_columns=tuple(_join_column(c) for c in join_table.join_columns),
                    inverse_join_columns=tuple(_join_column(c) for c in join_table.inverse_join_columns),
                )
                if join_table is not None
                else None
            ),
            mapped_by=getattr(association, "mapped_by", None),
            primary_key=any(isinstance(m, Id) for m in markers),
            transient=any(isinstance(m, Transient) for m in markers),
        )

    @staticmethod
    def _is_embeddable(hint: Any) -> bool:
        if get_origin(hint) is Annotated:
            hint = get_args(hint)[0]
        mapping = class_mapping(hint)
        return mapping is not None and mapping.kind == "embeddable"
