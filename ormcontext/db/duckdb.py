"""DuckDB column type lookup."""

from typing import Any

import duckdb

from ormcontext.db.base import BaseTypeLookup, validate_identifier


class DuckDBTypeLookup(BaseTypeLookup):
    """Column type lookup against DuckDB's information schema.

    Table and column names are matched case-insensitively.
    """

    def __init__(self, path: str = ":memory:", schema_name: str | None = None, read_only: bool = False):
        """Initialize DuckDB lookup.

        Args:
            path: Database file path or ":memory:" for in-memory database
            schema_name: Restrict lookups to this schema (optional)
            read_only: Open the database file read-only
        """
        if schema_name is not None:
            validate_identifier(schema_name, "schema")
        self.schema_name = schema_name
        if path == ":memory:":
            self.conn = duckdb.connect(path)
        else:
            self.conn = duckdb.connect(path, read_only=read_only)

    def fetch_type(self, table_name: str, column_name: str) -> str | None:
        """Query the data type of a column from ``information_schema.columns``."""
        sql = """
            SELECT data_type
            FROM information_schema.columns
            WHERE lower(table_name) = lower(?) AND lower(column_name) = lower(?)
        """
        params: list[Any] = [table_name, column_name]
        if self.schema_name:
            sql += " AND lower(table_schema) = lower(?)"
            params.append(self.schema_name)
        row = self.conn.execute(sql, params).fetchone()
        return row[0] if row else None

    def close(self) -> None:
        """Close database connection."""
        self.conn.close()

    @property
    def raw_connection(self) -> Any:
        """Get underlying DuckDB connection."""
        return self.conn

    @classmethod
    def from_url(cls, url: str, schema_name: str | None = None) -> "DuckDBTypeLookup":
        """Create lookup from connection URL.

        Args:
            url: Connection URL (e.g., "duckdb:///:memory:" or "duckdb:///path/to/db.duckdb")
            schema_name: Restrict lookups to this schema (optional)

        Returns:
            DuckDBTypeLookup instance
        """
        if not url.startswith("duckdb://"):
            raise ValueError(f"Invalid DuckDB URL: {url}")

        # duckdb:///:memory: -> :memory:
        # duckdb:///tmp/app.db -> /tmp/app.db
        # duckdb:/// -> :memory:
        db_path = url[len("duckdb://") :]

        if db_path in ("/:memory:", ":memory:", "", "/"):
            db_path = ":memory:"

        return cls(db_path, schema_name=schema_name)
