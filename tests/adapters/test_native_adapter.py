"""Tests for the native YAML/JSON metamodel adapter."""

import json

import pytest

from ormcontext.adapters.native import NativeAdapter, substitute_env_vars
from ormcontext.core.field import FieldKind


def test_parse_yaml(tmp_path):
    path = tmp_path / "mappings.yml"
    path.write_text(
        """
classes:
  - name: Order
    table: orders
    secondary_tables: order_meta
    fields:
      - name: id
        type: int
        id: true
      - name: notes
        type: str
        column:
          table: order_meta
          length: 2000
      - name: lines
        type: list[OrderLine]
        association: one_to_many
        mapped_by: order
  - name: OrderLine
    fields:
      - name: order
        type: Order
        association: many_to_one
        join_columns: order_id
"""
    )
    metamodel = NativeAdapter().parse(path)

    order = metamodel.get_class("Order")
    assert order.secondary_tables == ("order_meta",)
    assert order.get_field("id").primary_key
    assert order.get_field("notes").column.length == 2000
    assert order.get_field("lines").kind == FieldKind.PLURAL_ASSOCIATION

    line_order = metamodel.get_class("OrderLine").get_field("order")
    assert line_order.kind == FieldKind.SINGULAR_ASSOCIATION
    assert line_order.join_columns[0].name == "order_id"
    assert line_order.declaring_class == "OrderLine"


def test_parse_json(tmp_path):
    path = tmp_path / "mappings.json"
    path.write_text(
        json.dumps(
            {
                "classes": [
                    {"name": "Base", "kind": "mapped_superclass", "fields": [{"name": "id", "id": True}]},
                    {"name": "Item", "superclass": "Base", "inheritance": "TABLE_PER_CLASS"},
                ]
            }
        )
    )
    metamodel = NativeAdapter().parse(path)

    assert metamodel.entity_names == ["Item"]
    assert metamodel.get_class("Item").superclass == "Base"
    assert metamodel.get_class("Base").get_field("id").type.name == "object"


def test_env_substitution_in_file(tmp_path, monkeypatch):
    monkeypatch.setenv("ORDERS_TABLE", "sales_orders")
    monkeypatch.delenv("META_TABLE", raising=False)
    path = tmp_path / "mappings.yaml"
    path.write_text(
        """
classes:
  - name: Order
    table: ${ORDERS_TABLE}
    secondary_tables: [${META_TABLE:-order_meta}]
"""
    )
    order = NativeAdapter().parse(path).get_class("Order")

    assert order.table == "sales_orders"
    assert order.secondary_tables == ("order_meta",)


def test_substitute_env_vars(monkeypatch):
    monkeypatch.setenv("SCHEMA", "main")
    monkeypatch.delenv("MISSING", raising=False)

    assert substitute_env_vars("schema: $SCHEMA") == "schema: main"
    assert substitute_env_vars("schema: ${SCHEMA}") == "schema: main"
    assert substitute_env_vars("schema: ${MISSING}") == "schema: ${MISSING}"
    assert substitute_env_vars("schema: ${MISSING:-public}") == "schema: public"


def test_join_table():
    metamodel = NativeAdapter().from_dict(
        {
            "classes": [
                {
                    "name": "Student",
                    "fields": [
                        {
                            "name": "courses",
                            "type": "list[Course]",
                            "association": "many_to_many",
                            "join_table": {
                                "name": "enrollments",
                                "join_columns": [{"name": "student_id", "table": "enrollments"}],
                                "inverse_join_columns": "course_id",
                            },
                        }
                    ],
                }
            ]
        }
    )
    join_table = metamodel.get_class("Student").get_field("courses").join_table

    assert join_table.name == "enrollments"
    assert join_table.join_columns[0].table == "enrollments"
    assert [c.name for c in join_table.inverse_join_columns] == ["course_id"]


def test_embedded_field():
    metamodel = NativeAdapter().from_dict(
        {"classes": [{"name": "Customer", "fields": [{"name": "address", "type": "Address", "embedded": True}]}]}
    )
    assert metamodel.get_class("Customer").get_field("address").kind == FieldKind.EMBEDDED


def test_missing_classes(tmp_path):
    path = tmp_path / "models.yml"
    path.write_text("models:\n  - name: orders\n")

    with pytest.raises(ValueError, match="no 'classes' list"):
        NativeAdapter().parse(path)


def test_missing_names():
    with pytest.raises(ValueError, match="missing 'name'"):
        NativeAdapter().from_dict({"classes": [{"table": "orders"}]})
    with pytest.raises(ValueError, match="Order is missing 'name'"):
        NativeAdapter().from_dict({"classes": [{"name": "Order", "fields": [{"type": "int"}]}]})


def test_duplicate_classes():
    with pytest.raises(ValueError, match="already exists"):
        NativeAdapter().from_dict({"classes": [{"name": "Order"}, {"name": "Order"}]})
