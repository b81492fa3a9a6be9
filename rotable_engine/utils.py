"""Small helpers shared across the engine."""

from typing import Iterable, List, Mapping, Union

# US grouping/decimal marks swapped for European ones in a single pass
_EUROPEAN_MARKS = str.maketrans({",": ".", ".": ","})


def format_cost(cost: float) -> str:
    """
    Render a cost with 2 decimals, "." as thousands mark and "," as decimal mark.

    Examples:
        >>> format_cost(12345.67)
        '12.345,67'
        >>> format_cost(123.45)
        '123,45'
    """
    return f"{cost:,.2f}".translate(_EUROPEAN_MARKS)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def as_list(items: Union[Mapping, Iterable, None]) -> List:
    """Values of a mapping, or the items of any other iterable, as a list."""
    if items is None:
        return []
    if isinstance(items, Mapping):
        return list(items.values())
    return list(items)
