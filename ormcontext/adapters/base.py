"""Base adapter interface for importing mapping metadata."""

from abc import ABC, abstractmethod
from pathlib import Path

from ormcontext.core.metamodel import Metamodel
from ormcontext.validation import validate_metamodel


class BaseAdapter(ABC):
    """Base adapter converting a host framework's mapping metadata into a metamodel."""

    @abstractmethod
    def parse(self, source: str | Path) -> Metamodel:
        """Parse external mapping metadata into a metamodel.

        Args:
            source: Path to file containing mapping definitions

        Returns:
            Metamodel with the imported class declarations
        """
        raise NotImplementedError

    def validate(self, metamodel: Metamodel) -> list[str]:
        """Validate an imported metamodel.

        Args:
            metamodel: Metamodel to validate

        Returns:
            List of validation errors (empty if valid)
        """
        return validate_metamodel(metamodel)
