"""Adapter for the native YAML/JSON metamodel format."""

import json
import os
import re
from pathlib import Path

import yaml

from ormcontext.adapters.base import BaseAdapter
from ormcontext.core.field import (
    ColumnDeclaration,
    FieldDescriptor,
    FieldKind,
    JoinColumnDeclaration,
    JoinTableDeclaration,
    TypeRef,
)
from ormcontext.core.mapped_class import MappedClass
from ormcontext.core.metamodel import Metamodel


def substitute_env_vars(content: str) -> str:
    """Substitute environment variables in metamodel content.

    Supports:
    - ${ENV_VAR} - replaced with environment variable value
    - ${ENV_VAR:-default} - replaced with value or default if not set
    - $ENV_VAR - simple form without braces

    Unset variables without a default are left untouched.

    Examples:
        >>> os.environ['ORDERS_TABLE'] = 'orders'
        >>> substitute_env_vars('table: ${ORDERS_TABLE}')
        'table: orders'
        >>> substitute_env_vars('table: ${MISSING:-fallback}')
        'table: fallback'
    """

    def replace_var(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.environ.get(var_name, default)
        value = os.environ.get(var_expr)
        if value is None:
            return match.group(0)
        return value

    content = re.sub(r"\$\{([^}]+)\}", replace_var, content)

    def replace_simple_var(match):
        value = os.environ.get(match.group(1))
        if value is None:
            return match.group(0)
        return value

    return re.sub(r"\$([A-Z_][A-Z0-9_]*)", replace_simple_var, content)


class NativeAdapter(BaseAdapter):
    """Adapter for native metamodel files.

    Native format structure:
    ```yaml
    classes:
      - name: Order
        table: orders
        secondary_tables: [order_meta]
        fields:
          - name: id
            type: int
            id: true
          - name: notes
            type: str
            column: {table: order_meta, length: 2000}
          - name: customer
            type: Customer
            association: many_to_one
            join_columns: [{name: customer_id}]
          - name: lines
            type: list[OrderLine]
            association: one_to_many
            mapped_by: order
    ```

    Class keys: ``name``, ``kind`` (entity, mapped_superclass, embeddable, plain),
    ``entity_name``, ``extends``, ``table``, ``secondary_tables``, ``inheritance``,
    ``fields``.
    """

    def parse(self, source: str | Path) -> Metamodel:
        """Parse a YAML or JSON metamodel file.

        Args:
            source: Path to a .yml, .yaml or .json file

        Returns:
            Metamodel with the declared classes

        Raises:
            ValueError: If the file has no ``classes`` list
        """
        source_path = Path(source)
        content = substitute_env_vars(source_path.read_text())

        if source_path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)

        if not isinstance(data, dict) or not isinstance(data.get("classes"), list):
            raise ValueError(f"{source_path} has no 'classes' list")

        return self.from_dict(data)

    def from_dict(self, data: dict) -> Metamodel:
        """Build a metamodel from already loaded native data."""
        metamodel = Metamodel()
        for class_def in data.get("classes") or []:
            metamodel.add_class(self._parse_class(class_def))
        return metamodel

    def _parse_class(self, class_def: dict) -> MappedClass:
        name = class_def.get("name")
        if not name:
            raise ValueError("Class definition is missing 'name'")

        secondary_tables = class_def.get("secondary_tables") or []
        if isinstance(secondary_tables, str):
            secondary_tables = [secondary_tables]

        return MappedClass(
            name=name,
            kind=class_def.get("kind", "entity"),
            entity_name=class_def.get("entity_name"),
            superclass=class_def.get("extends") or class_def.get("superclass"),
            table=class_def.get("table"),
            secondary_tables=tuple(secondary_tables),
            inheritance=class_def.get("inheritance"),
            fields=tuple(self._parse_field(name, field_def) for field_def in class_def.get("fields") or []),
        )

    def _parse_field(self, class_name: str, field_def: dict) -> FieldDescriptor:
        name = field_def.get("name")
        if not name:
            raise ValueError(f"Field definition in {class_name} is missing 'name'")

        field_type = TypeRef.parse(str(field_def.get("type", "object")))
        association = field_def.get("association")

        if association:
            if field_type.unwrap_optional().is_collection:
                kind = FieldKind.PLURAL_ASSOCIATION
            else:
                kind = FieldKind.SINGULAR_ASSOCIATION
        elif field_def.get("embedded"):
            kind = FieldKind.EMBEDDED
        else:
            kind = FieldKind.SCALAR

        column = None
        if field_def.get("column") is not None:
            column = ColumnDeclaration(**field_def["column"])

        join_table = None
        if field_def.get("join_table") is not None:
            join_table_def = field_def["join_table"]
            join_table = JoinTableDeclaration(
                name=join_table_def.get("name"),
                join_columns=self._join_columns(join_table_def.get("join_columns")),
                inverse_join_columns=self._join_columns(join_table_def.get("inverse_join_columns")),
            )

        return FieldDescriptor(
            name=name,
            declaring_class=class_name,
            type=field_type,
            kind=kind,
            association=association,
            column=column,
            join_columns=self._join_columns(field_def.get("join_columns")),
            join_table=join_table,
            mapped_by=field_def.get("mapped_by"),
            primary_key=bool(field_def.get("id", False)),
            static=bool(field_def.get("static", False)),
            transient=bool(field_def.get("transient", False)),
        )

    @staticmethod
    def _join_columns(values) -> tuple[JoinColumnDeclaration, ...]:
        """Join columns may be given as names or as mappings with name/table."""
        if not values:
            return ()
        if isinstance(values, str | dict):
            values = [values]
        columns = []
        for value in values:
            if isinstance(value, str):
                columns.append(JoinColumnDeclaration(name=value))
            else:
                columns.append(JoinColumnDeclaration(**value))
        return tuple(columns)
