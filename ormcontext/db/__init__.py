"""Column type lookup layer."""

from ormcontext.db.base import BaseTypeLookup, NullTypeLookup, StaticTypeLookup

__all__ = ["BaseTypeLookup", "NullTypeLookup", "StaticTypeLookup"]


def __getattr__(name):
    """Lazy import lookups to avoid importing duckdb on package import."""
    if name == "DuckDBTypeLookup":
        from ormcontext.db.duckdb import DuckDBTypeLookup

        return DuckDBTypeLookup
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
