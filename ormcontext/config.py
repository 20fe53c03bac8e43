"""Configuration file format for ormcontext."""

import json
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from ormcontext.core.naming import NamingStrategy, get_naming_strategy
from ormcontext.db.base import BaseTypeLookup, NullTypeLookup

CONFIG_FILE_NAMES = ("ormcontext.yaml", "ormcontext.yml", "ormcontext.json")


class DuckDBConnection(BaseModel):
    """DuckDB connection used for column type lookups."""

    type: Literal["duckdb"] = "duckdb"
    path: str = Field(..., description="Path to DuckDB database file or :memory:")
    schema_name: str | None = Field(default=None, description="Restrict type lookups to this schema")


class OrmContextConfig(BaseModel):
    """ormcontext configuration file format.

    Can be saved as ormcontext.yaml, ormcontext.yml or ormcontext.json.

    Example YAML:
        metamodel_path: ./mappings
        naming_strategy: snake_case
        connection:
          type: duckdb
          path: data/warehouse.db
          schema_name: main
    """

    metamodel_path: str = Field(
        default=".", description="Metamodel file or directory (defaults to current dir)"
    )
    connection: DuckDBConnection | None = Field(default=None, description="Database used for column types")
    naming_strategy: Literal["default", "snake_case"] = Field(
        default="default", description="Naming strategy for undeclared table and column names"
    )

    def resolve_paths(self, base_dir: Path | None = None) -> "OrmContextConfig":
        """Resolve relative paths to absolute paths.

        Args:
            base_dir: Base directory for resolving relative paths (defaults to cwd)

        Returns:
            New config with resolved paths
        """
        base = base_dir or Path.cwd()

        metamodel_path = Path(self.metamodel_path)
        if not metamodel_path.is_absolute():
            metamodel_path = (base / metamodel_path).resolve()

        connection = self.connection
        if connection and connection.path != ":memory:":
            db_path = Path(connection.path)
            if not db_path.is_absolute():
                db_path = (base / db_path).resolve()
            connection = connection.model_copy(update={"path": str(db_path)})

        return self.model_copy(update={"metamodel_path": str(metamodel_path), "connection": connection})

    def naming(self) -> NamingStrategy:
        return get_naming_strategy(self.naming_strategy)


def load_config(config_path: Path) -> OrmContextConfig:
    """Load configuration from YAML or JSON file.

    Args:
        config_path: Path to config file (ormcontext.yaml or ormcontext.json)

    Returns:
        Loaded and validated configuration, paths resolved against the file's directory

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file format is invalid
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    elif suffix == ".json":
        with open(config_path) as f:
            data = json.load(f)
    else:
        raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    config = OrmContextConfig(**(data or {}))
    return config.resolve_paths(config_path.parent)


def find_config(start_dir: Path | None = None) -> Path | None:
    """Find config file by searching up the directory tree.

    Args:
        start_dir: Directory to start searching from (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def build_type_lookup(config: OrmContextConfig | None) -> BaseTypeLookup:
    """Create the column type lookup described by a config.

    Without a connection every column type resolves to UNKNOWN.
    """
    if config is None or config.connection is None:
        return NullTypeLookup()

    from ormcontext.db.duckdb import DuckDBTypeLookup

    read_only = config.connection.path != ":memory:"
    return DuckDBTypeLookup(config.connection.path, schema_name=config.connection.schema_name, read_only=read_only)
