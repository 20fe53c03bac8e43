"""Tests for table schema resolution of single entity types."""

from ormcontext.core.entity_resolver import EntityDescriptorResolver
from ormcontext.core.field import ColumnDeclaration, FieldDescriptor
from ormcontext.core.mapped_class import MappedClass
from ormcontext.core.metamodel import Metamodel
from ormcontext.core.naming import SnakeCaseNamingStrategy
from ormcontext.core.table_resolver import TableSchemaResolver
from ormcontext.db.base import StaticTypeLookup


def test_primary_and_secondary_tables(order_metamodel, order_types):
    """Fields land in their owning table; inverse sides get no column."""
    order = EntityDescriptorResolver(order_metamodel).resolve("Order")
    tables = TableSchemaResolver(order_types).resolve(order)

    assert list(tables) == ["orders", "order_meta"]

    orders = tables["orders"]
    assert [c.name for c in orders.columns] == ["id", "total", "customer_id"]
    assert orders.primary_keys == ("id",)
    assert orders.join_keys is None

    meta = tables["order_meta"]
    assert [c.name for c in meta.columns] == ["notes"]
    assert meta.primary_keys == ()
    assert meta.join_keys == ("id",)


def test_column_types_and_constraints(order_metamodel, order_types):
    """Types come from the lookup; constraints only from explicit declarations."""
    order = EntityDescriptorResolver(order_metamodel).resolve("Order")
    tables = TableSchemaResolver(order_types).resolve(order)

    id_column = tables["orders"].get_column("id")
    assert id_column.type == "INTEGER"
    assert id_column.primary_key
    assert id_column.nullable is None

    notes = tables["order_meta"].get_column("notes")
    assert notes.type == "VARCHAR"
    assert notes.length == 2000
    assert notes.nullable is True
    assert notes.unique is False


def test_lookup_failure_degrades_to_unknown(order_metamodel, order_types):
    """A failing lookup only affects its own column."""
    order = EntityDescriptorResolver(order_metamodel).resolve("Order")
    tables = TableSchemaResolver(order_types).resolve(order)

    assert tables["orders"].get_column("total").type == "UNKNOWN"
    assert tables["orders"].get_column("customer_id").type == "INTEGER"


def test_lookup_keyed_by_owning_table(order_metamodel, order_types):
    order = EntityDescriptorResolver(order_metamodel).resolve("Order")
    TableSchemaResolver(order_types).resolve(order)

    assert ("order_meta", "notes") in order_types.calls
    assert ("orders", "notes") not in order_types.calls


def test_default_names_from_class_and_field():
    """Without declarations the table is the simple name and columns are field names."""
    metamodel = Metamodel(
        [
            MappedClass(
                name="Student",
                fields=(
                    FieldDescriptor(name="id", declaring_class="Student", primary_key=True),
                    FieldDescriptor(name="fullName", declaring_class="Student"),
                ),
            )
        ]
    )
    student = EntityDescriptorResolver(metamodel).resolve("Student")
    tables = TableSchemaResolver().resolve(student)

    assert list(tables) == ["Student"]
    assert [c.name for c in tables["Student"].columns] == ["id", "fullName"]
    assert all(c.type == "UNKNOWN" for c in tables["Student"].columns)


def test_snake_case_naming():
    metamodel = Metamodel(
        [
            MappedClass(
                name="OrderLine",
                fields=(
                    FieldDescriptor(name="unitPrice", declaring_class="OrderLine"),
                    FieldDescriptor(
                        name="sku", declaring_class="OrderLine", column=ColumnDeclaration(name="SKU_CODE")
                    ),
                ),
            )
        ]
    )
    line = EntityDescriptorResolver(metamodel).resolve("OrderLine")
    lookup = StaticTypeLookup({("order_line", "unit_price"): "DOUBLE"})
    tables = TableSchemaResolver(lookup, SnakeCaseNamingStrategy()).resolve(line)

    assert list(tables) == ["order_line"]
    assert [c.name for c in tables["order_line"].columns] == ["unit_price", "SKU_CODE"]
    assert tables["order_line"].get_column("unit_price").type == "DOUBLE"


def test_field_in_undeclared_table_is_dropped():
    metamodel = Metamodel(
        [
            MappedClass(
                name="Order",
                table="orders",
                fields=(
                    FieldDescriptor(name="id", declaring_class="Order", primary_key=True),
                    FieldDescriptor(
                        name="legacy", declaring_class="Order", column=ColumnDeclaration(table="archive")
                    ),
                ),
            )
        ]
    )
    order = EntityDescriptorResolver(metamodel).resolve("Order")
    tables = TableSchemaResolver().resolve(order)

    assert list(tables) == ["orders"]
    assert tables["orders"].get_column("legacy") is None


def test_empty_secondary_table_keeps_join_keys():
    """Secondary tables are emitted even without columns."""
    metamodel = Metamodel(
        [
            MappedClass(
                name="Order",
                table="orders",
                secondary_tables=("order_audit",),
                fields=(FieldDescriptor(name="id", declaring_class="Order", primary_key=True),),
            )
        ]
    )
    order = EntityDescriptorResolver(metamodel).resolve("Order")
    tables = TableSchemaResolver().resolve(order)

    assert tables["order_audit"].columns == ()
    assert tables["order_audit"].join_keys == ("id",)


def test_inherited_fields_in_subclass_table(employee_metamodel):
    manager = EntityDescriptorResolver(employee_metamodel).resolve("Manager")
    tables = TableSchemaResolver().resolve(manager)

    managers = tables["managers"]
    assert [c.name for c in managers.columns] == [
        "budget",
        "display_name",
        "salary",
        "manager",
        "colleagues",
        "id",
    ]
    assert managers.primary_keys == ("id",)
