"""Pure numeric helpers for period comparisons.

Every function here is stateless. Used by the change calculator and the
temporal aggregator.
"""

from typing import Iterable, Optional


def percent_change(current: float, previous: Optional[float]) -> Optional[float]:
    """Year-over-year change of *current* against *previous*, in percent.

    ``None`` means there is no usable baseline. A zero baseline with a
    positive current value is reported as a 100% increase. The signed
    previous value is the denominator.

    >>> round(percent_change(1234.5, 1000), 2)
    23.45
    >>> percent_change(85, 100)
    -15.0
    >>> percent_change(5, 0)
    100.0
    >>> percent_change(0, 0) is None
    True
    >>> percent_change(5, None) is None
    True
    """
    if previous is None:
        return None
    if previous == 0:
        return 100.0 if current > 0 else None
    return ((current - previous) / previous) * 100


def round_percentage(value: Optional[float], digits: int = 1) -> Optional[float]:
    """Round a percentage for display.

    >>> round_percentage(23.4567)
    23.5
    >>> round_percentage(None) is None
    True
    """
    if value is None:
        return None
    return round(value, digits)


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean; 0.0 for an empty input.

    >>> mean([2, 4, 9])
    5.0
    >>> mean([])
    0.0
    """
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)
