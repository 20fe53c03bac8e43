"""Tests for the declarative class adapter."""

from typing import Annotated, ClassVar, Optional

import pytest

from ormcontext.adapters.declarative import (
    Column,
    DeclarativeAdapter,
    Id,
    JoinColumn,
    JoinTable,
    ManyToMany,
    ManyToOne,
    OneToMany,
    Transient,
    embeddable,
    entity,
    mapped_superclass,
    type_ref,
)
from ormcontext.core.field import FieldKind
from ormcontext.core.mapped_class import InheritanceType
from ormcontext.core.session import ResolutionSession


@mapped_superclass
class Auditable:
    id: Annotated[int, Id()]
    created_by: str


@embeddable
class Address:
    street: str
    city: str


@entity(table="customers")
class Customer(Auditable):
    email: Annotated[str, Column(unique=True, nullable=False, length=320)]
    address: Address
    orders: Annotated[list["Order"], OneToMany(mapped_by="customer")]
    session_token: Annotated[str, Transient]
    registry: ClassVar[dict] = {}


@entity(table="orders", secondary_tables=["order_meta"], inheritance="JOINED")
class Order(Auditable):
    notes: Annotated[str, Column(table="order_meta")]
    customer: Annotated[Optional["Customer"], ManyToOne(), JoinColumn(name="customer_id")]
    tags: Annotated[
        set["Tag"],
        ManyToMany(),
        JoinTable(join_columns=("order_id",), inverse_join_columns=(JoinColumn(name="tag_id"),)),
    ]


@entity(name="Label")
class Tag:
    id: Annotated[int, Id]
    name: str


@entity
class Counter:
    id: Annotated[int, Id()]
    count: ClassVar = 0


class Unmapped:
    value: int


def test_classes_and_kinds():
    """Mapped superclasses and embeddables are picked up automatically."""
    metamodel = DeclarativeAdapter().from_classes([Customer, Order, Tag])

    assert set(metamodel.classes) == {"Auditable", "Address", "Customer", "Order", "Tag"}
    assert metamodel.get_class("Auditable").kind == "mapped_superclass"
    assert metamodel.get_class("Address").kind == "embeddable"
    assert set(metamodel.entity_names) == {"Customer", "Order", "Tag"}
    assert metamodel.get_class("Customer").superclass == "Auditable"


def test_class_declarations():
    metamodel = DeclarativeAdapter().from_classes([Order])

    order = metamodel.get_class("Order")
    assert order.table == "orders"
    assert order.secondary_tables == ("order_meta",)
    assert order.inheritance == InheritanceType.JOINED
    assert metamodel.get_class("Tag").entity_name == "Label"


def test_own_fields_only():
    """Inherited annotations stay on the class that declares them."""
    metamodel = DeclarativeAdapter().from_classes([Customer])

    customer = metamodel.get_class("Customer")
    assert [f.name for f in customer.fields] == ["email", "address", "orders", "session_token", "registry"]
    assert [f.name for f in metamodel.get_class("Auditable").fields] == ["id", "created_by"]


def test_field_markers():
    metamodel = DeclarativeAdapter().from_classes([Customer])
    customer = metamodel.get_class("Customer")

    email = customer.get_field("email")
    assert email.kind == FieldKind.SCALAR
    assert email.column.unique is True
    assert email.column.nullable is False
    assert email.column.length == 320

    assert customer.get_field("address").kind == FieldKind.EMBEDDED

    orders = customer.get_field("orders")
    assert orders.kind == FieldKind.PLURAL_ASSOCIATION
    assert orders.association == "one_to_many"
    assert orders.mapped_by == "customer"
    assert orders.element_type.name == "Order"

    assert customer.get_field("session_token").transient
    assert customer.get_field("registry").static
    assert metamodel.get_class("Auditable").get_field("id").primary_key


def test_optional_association_is_singular():
    order = DeclarativeAdapter().from_classes([Order]).get_class("Order")

    customer = order.get_field("customer")
    assert customer.kind == FieldKind.SINGULAR_ASSOCIATION
    assert customer.type.name == "Union"
    assert customer.element_type.name == "Customer"
    assert customer.join_columns[0].name == "customer_id"


def test_join_table_marker():
    order = DeclarativeAdapter().from_classes([Order]).get_class("Order")

    tags = order.get_field("tags")
    assert tags.kind == FieldKind.PLURAL_ASSOCIATION
    assert tags.collection_type == "SET"
    assert tags.join_table.name is None
    assert [c.name for c in tags.join_table.join_columns] == ["order_id"]
    assert [c.name for c in tags.join_table.inverse_join_columns] == ["tag_id"]


def test_bare_marker_class():
    tag = DeclarativeAdapter().from_classes([Tag]).get_class("Tag")
    assert tag.get_field("id").primary_key


def test_bare_classvar_is_static():
    metamodel = DeclarativeAdapter().from_classes([Counter])
    assert metamodel.get_class("Counter").get_field("count").static

    table = ResolutionSession(metamodel).schema(["Counter"]).get_table("Counter")
    assert [c.name for c in table.columns] == ["id"]


def test_unmapped_class_rejected():
    with pytest.raises(ValueError, match="Unmapped"):
        DeclarativeAdapter().from_classes([Unmapped])


def test_resolves_end_to_end():
    metamodel = DeclarativeAdapter().from_classes([Customer, Order, Tag])
    session = ResolutionSession(metamodel)

    schema = session.schema(["Order", "Tag"])
    assert [t.table_name for t in schema.join_tables] == ["Order_Tag"]
    assert schema.get_join_table("Order_Tag").participants == ("orders", "order_meta", "Tag")
    assert [c.name for c in schema.get_table("orders").columns] == ["customer_id", "tags", "id", "created_by"]

    customer = session.domain(["Customer"]).get_entity("Customer")
    assert customer.get_attribute("session_token") is None
    assert customer.get_attribute("id") is not None


def test_type_ref_conversion():
    assert str(type_ref(list[int])) == "list[int]"
    assert str(type_ref(Optional[int])) == "Union[int, None]"
    assert str(type_ref(int | None)) == "Union[int, None]"
    assert str(type_ref(dict[str, "Tag"])) == "dict[str, Tag]"
    assert str(type_ref(Annotated[int, Id()])) == "int"


def test_parse_module(tmp_path):
    """Python modules are executed and their mapped classes collected."""
    module = tmp_path / "mappings.py"
    module.write_text(
        """
from typing import Annotated

from ormcontext.adapters.declarative import Id, ManyToOne, entity


@entity(table="authors")
class Author:
    id: Annotated[int, Id()]
    name: str


@entity
class Book:
    id: Annotated[int, Id()]
    author: Annotated["Author", ManyToOne()]
"""
    )
    metamodel = DeclarativeAdapter().parse(module)

    assert metamodel.entity_names == ["Author", "Book"]
    assert metamodel.get_class("Book").get_field("author").kind == FieldKind.SINGULAR_ASSOCIATION
