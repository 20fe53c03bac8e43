"""ormcontext: schema and domain descriptions derived from ORM mapping metadata."""

__version__ = "0.1.0"

from ormcontext.core.domain import AttributeInfo, DomainModel, EntityInfo
from ormcontext.core.field import FieldDescriptor, FieldKind, TypeRef
from ormcontext.core.mapped_class import EntityTypeDescriptor, InheritanceType, MappedClass
from ormcontext.core.metamodel import Metamodel
from ormcontext.core.schema import ColumnDescriptor, JoinTableDescriptor, SchemaModel, TableDescriptor
from ormcontext.core.selection import EntitySelection
from ormcontext.core.session import ResolutionSession
from ormcontext.loaders import load_metamodel

__all__ = [
    "AttributeInfo",
    "ColumnDescriptor",
    "DomainModel",
    "EntityInfo",
    "EntitySelection",
    "EntityTypeDescriptor",
    "FieldDescriptor",
    "FieldKind",
    "InheritanceType",
    "JoinTableDescriptor",
    "MappedClass",
    "Metamodel",
    "ResolutionSession",
    "SchemaModel",
    "TableDescriptor",
    "TypeRef",
    "load_metamodel",
]


def __getattr__(name):  # Lazy import to avoid importing duckdb on package import
    if name == "DuckDBTypeLookup":
        from ormcontext.db.duckdb import DuckDBTypeLookup

        return DuckDBTypeLookup
    raise AttributeError(name)
