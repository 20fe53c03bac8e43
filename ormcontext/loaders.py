"""Auto-discovery loaders for metamodel definitions."""

import logging
from pathlib import Path

from ormcontext.adapters.base import BaseAdapter
from ormcontext.adapters.declarative import DeclarativeAdapter
from ormcontext.adapters.native import NativeAdapter
from ormcontext.core.metamodel import Metamodel

CONFIG_NAMES = {"ormcontext.yaml", "ormcontext.yml", "ormcontext.json"}
DECLARATIVE_TOKENS = ("@entity", "@mapped_superclass", "@embeddable")


def load_metamodel(path: str | Path) -> Metamodel:
    """Load a metamodel from a file or a directory.

    Directories are searched recursively. Files whose format cannot be detected
    are ignored; files that fail to parse are logged and skipped.

    Args:
        path: Metamodel file or directory containing metamodel files

    Returns:
        Metamodel with all discovered class declarations

    Raises:
        ValueError: If the path does not exist, or a single file has no detectable format

    Example:
        >>> metamodel = load_metamodel("mappings/")
        >>> metamodel.entity_names
        ['Order', 'Customer']
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"Path {path} does not exist")

    if path.is_file():
        adapter = detect_adapter(path)
        if adapter is None:
            raise ValueError(f"Could not detect metamodel format of {path}")
        return adapter.parse(path)

    metamodel = Metamodel()
    for file_path in sorted(path.rglob("*")):
        if not file_path.is_file() or file_path.name in CONFIG_NAMES:
            continue

        adapter = detect_adapter(file_path)
        if adapter is None:
            continue

        try:
            parsed = adapter.parse(file_path)
        except Exception as e:
            # Skip files that fail to parse
            logging.warning("Could not parse %s: %s", file_path, e)
            continue

        duplicates = [name for name in parsed.classes if name in metamodel]
        if duplicates:
            logging.warning("Skipping %s: classes already declared: %s", file_path, ", ".join(duplicates))
            continue
        metamodel.merge(parsed)

    return metamodel


def detect_adapter(file_path: Path) -> BaseAdapter | None:
    """Pick the adapter for a file by suffix and content.

    Returns:
        Adapter instance, or None if the file is not a metamodel definition
    """
    suffix = file_path.suffix.lower()

    if suffix == ".py":
        if _looks_like_declarative_module(file_path):
            return DeclarativeAdapter()
        return None

    if suffix in (".yml", ".yaml", ".json"):
        try:
            content = file_path.read_text()
        except (OSError, UnicodeDecodeError):
            return None
        if "classes:" in content or '"classes"' in content:
            return NativeAdapter()

    return None


def _looks_like_declarative_module(file_path: Path) -> bool:
    """Return True if a Python file appears to contain mapped classes."""
    try:
        content = file_path.read_text()
    except (OSError, UnicodeDecodeError):
        return False

    if "ormcontext" not in content:
        return False
    return any(token in content for token in DECLARATIVE_TOKENS)
