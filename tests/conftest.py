"""Pytest configuration and fixtures.

Metamodels are built from native-format dicts so each fixture reads like the
mapping file a user would write.
"""

import pytest

from ormcontext.adapters.native import NativeAdapter
from ormcontext.core.metamodel import Metamodel
from ormcontext.core.session import ResolutionSession
from ormcontext.db.base import StaticTypeLookup

ORDER_CLASSES = {
    "classes": [
        {
            "name": "Customer",
            "table": "customers",
            "fields": [
                {"name": "id", "type": "int", "id": True},
                {"name": "email", "type": "str", "column": {"unique": True, "nullable": False, "length": 320}},
                {"name": "orders", "type": "list[Order]", "association": "one_to_many", "mapped_by": "customer"},
            ],
        },
        {
            "name": "Order",
            "table": "orders",
            "secondary_tables": ["order_meta"],
            "fields": [
                {"name": "id", "type": "int", "id": True},
                {"name": "total", "type": "Decimal"},
                {"name": "notes", "type": "str", "column": {"table": "order_meta", "length": 2000}},
                {
                    "name": "customer",
                    "type": "Customer",
                    "association": "many_to_one",
                    "join_columns": [{"name": "customer_id"}],
                },
                {"name": "lines", "type": "list[OrderLine]", "association": "one_to_many", "mapped_by": "order"},
                {"name": "cache_key", "type": "str", "transient": True},
                {"name": "instances", "type": "int", "static": True},
            ],
        },
        {
            "name": "OrderLine",
            "table": "order_lines",
            "fields": [
                {"name": "id", "type": "int", "id": True},
                {"name": "quantity", "type": "int"},
                {"name": "order", "type": "Order", "association": "many_to_one", "join_columns": ["order_id"]},
            ],
        },
    ]
}

UNIVERSITY_CLASSES = {
    "classes": [
        {
            "name": "Student",
            "fields": [
                {"name": "id", "type": "int", "id": True},
                {"name": "name", "type": "str"},
                {
                    "name": "courses",
                    "type": "list[Course]",
                    "association": "many_to_many",
                    "join_table": {
                        "name": "Student_Course",
                        "join_columns": ["student_id"],
                        "inverse_join_columns": ["course_id"],
                    },
                },
            ],
        },
        {
            "name": "Course",
            "fields": [
                {"name": "id", "type": "int", "id": True},
                {"name": "title", "type": "str"},
                {"name": "students", "type": "set[Student]", "association": "many_to_many", "mapped_by": "courses"},
            ],
        },
    ]
}

EMPLOYEE_CLASSES = {
    "classes": [
        {
            "name": "Person",
            "kind": "mapped_superclass",
            "fields": [
                {"name": "id", "type": "int", "id": True},
                {"name": "name", "type": "str"},
            ],
        },
        {
            "name": "Employee",
            "extends": "Person",
            "table": "employees",
            "inheritance": "JOINED",
            "fields": [
                {"name": "salary", "type": "Decimal"},
                {"name": "manager", "type": "Employee | None", "association": "many_to_one"},
                {
                    "name": "colleagues",
                    "type": "list[Employee]",
                    "association": "many_to_many",
                    "join_table": {"join_columns": ["employee_id"], "inverse_join_columns": ["colleague_id"]},
                },
            ],
        },
        {
            "name": "Manager",
            "extends": "Employee",
            "table": "managers",
            "fields": [
                {"name": "budget", "type": "Decimal"},
                {"name": "name", "type": "str", "column": {"name": "display_name"}},
            ],
        },
    ]
}


@pytest.fixture
def order_metamodel() -> Metamodel:
    """Customers, orders with a secondary table, and order lines."""
    return NativeAdapter().from_dict(ORDER_CLASSES)


@pytest.fixture
def university_metamodel() -> Metamodel:
    """Students and courses joined through an explicit join table."""
    return NativeAdapter().from_dict(UNIVERSITY_CLASSES)


@pytest.fixture
def employee_metamodel() -> Metamodel:
    """Employee hierarchy under a mapped superclass with a self-referencing join table."""
    return NativeAdapter().from_dict(EMPLOYEE_CLASSES)


class CountingTypeLookup(StaticTypeLookup):
    """Static lookup that records every call and fails for configured columns."""

    def __init__(self, types, failing=()):
        super().__init__(types)
        self.calls = []
        self.failing = {(table.lower(), column.lower()) for table, column in failing}

    def fetch_type(self, table_name, column_name):
        self.calls.append((table_name, column_name))
        if (table_name.lower(), column_name.lower()) in self.failing:
            raise RuntimeError(f"lookup failed for {table_name}.{column_name}")
        return super().fetch_type(table_name, column_name)


@pytest.fixture
def order_types() -> CountingTypeLookup:
    """Type lookup for the order tables; ``orders.total`` always fails."""
    return CountingTypeLookup(
        {
            ("orders", "id"): "INTEGER",
            ("orders", "customer_id"): "INTEGER",
            ("orders", "total"): "DECIMAL(10,2)",
            ("order_meta", "notes"): "VARCHAR",
            ("customers", "id"): "INTEGER",
            ("customers", "email"): "VARCHAR",
        },
        failing=[("orders", "total")],
    )


@pytest.fixture
def order_session(order_metamodel, order_types) -> ResolutionSession:
    return ResolutionSession(order_metamodel, order_types)


@pytest.fixture
def university_session(university_metamodel) -> ResolutionSession:
    return ResolutionSession(university_metamodel)


@pytest.fixture
def employee_session(employee_metamodel) -> ResolutionSession:
    return ResolutionSession(employee_metamodel)
