"""Naming strategies for tables and columns derived from class and field names."""

import re


class NamingStrategy:
    """Derives physical names when no explicit declaration exists.

    The default strategy keeps class and field names as they are.
    """

    name = "default"

    def table_name(self, simple_name: str) -> str:
        return simple_name

    def column_name(self, field_name: str) -> str:
        return field_name


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """Convert ``OrderLine`` / ``orderLine`` / ``HTTPRequest`` to snake case.

    Examples:
        >>> to_snake_case("OrderLine")
        'order_line'
        >>> to_snake_case("HTTPRequest")
        'http_request'
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


class SnakeCaseNamingStrategy(NamingStrategy):
    """Lower snake case names, as physical naming strategies of common ORMs produce."""

    name = "snake_case"

    def table_name(self, simple_name: str) -> str:
        return to_snake_case(simple_name)

    def column_name(self, field_name: str) -> str:
        return to_snake_case(field_name)


NAMING_STRATEGIES: dict[str, type[NamingStrategy]] = {
    NamingStrategy.name: NamingStrategy,
    SnakeCaseNamingStrategy.name: SnakeCaseNamingStrategy,
}


def get_naming_strategy(name: str) -> NamingStrategy:
    """Instantiate a naming strategy by name.

    Raises:
        ValueError: If the strategy is unknown
    """
    try:
        return NAMING_STRATEGIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown naming strategy: '{name}'. Must be one of: {', '.join(NAMING_STRATEGIES)}"
        ) from None
