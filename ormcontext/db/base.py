"""Base column type lookup interface."""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping

from ormcontext.core.schema import UNKNOWN_TYPE

logger = logging.getLogger(__name__)

# Pattern for valid SQL identifiers: starts with letter or underscore,
# followed by letters, digits, or underscores. Also allows dots for
# qualified names (schema.table).
_IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)*$")


def validate_identifier(value: str, name: str = "identifier") -> str:
    """Validate that a value is a safe SQL identifier.

    Args:
        value: The identifier value to validate
        name: Human-readable name for error messages (e.g., "table name", "schema")

    Returns:
        The validated identifier (unchanged if valid)

    Raises:
        ValueError: If the identifier contains invalid characters
    """
    if not value:
        raise ValueError(f"Invalid {name}: cannot be empty")

    if not _IDENTIFIER_PATTERN.match(value):
        raise ValueError(
            f"Invalid {name}: '{value}'. "
            f"Identifiers must start with a letter or underscore and contain only "
            f"letters, digits, underscores, and dots."
        )

    return value


class BaseTypeLookup(ABC):
    """Best-effort SQL type lookup keyed by (table name, column name).

    Backends implement ``fetch_type``, which may raise for any reason (missing
    driver support, connectivity, metadata mismatch). ``column_type`` is the
    boundary used by resolution: it never raises and reports ``UNKNOWN`` instead.
    """

    @abstractmethod
    def fetch_type(self, table_name: str, column_name: str) -> str | None:
        """Query the SQL type of a column.

        Args:
            table_name: Table holding the column
            column_name: Column name

        Returns:
            Type name, or None when the column is not found
        """
        raise NotImplementedError

    def column_type(self, table_name: str, column_name: str) -> str:
        """Get the SQL type of a column, degrading to ``UNKNOWN`` on any failure."""
        try:
            type_name = self.fetch_type(table_name, column_name)
        except Exception as e:
            logger.debug("Type lookup failed for %s.%s: %s", table_name, column_name, e)
            return UNKNOWN_TYPE
        return type_name or UNKNOWN_TYPE

    def close(self) -> None:
        """Release resources held by the lookup."""
        return None


class NullTypeLookup(BaseTypeLookup):
    """Lookup for sessions without a database: every type is unknown."""

    def fetch_type(self, table_name: str, column_name: str) -> str | None:
        return None


class StaticTypeLookup(BaseTypeLookup):
    """Lookup backed by a mapping of ``(table, column)`` to type name.

    Matching is case-insensitive, as with unquoted identifiers in most databases.
    """

    def __init__(self, types: Mapping[tuple[str, str], str]):
        self.types = {(table.lower(), column.lower()): type_name for (table, column), type_name in types.items()}

    def fetch_type(self, table_name: str, column_name: str) -> str | None:
        return self.types.get((table_name.lower(), column_name.lower()))
