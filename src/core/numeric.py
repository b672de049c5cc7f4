"""Decimal arithmetic layer for yield calculations.

Formulas run inside ``YIELD_CONTEXT``: 50 significant digits and no traps,
so ``x / 0`` evaluates to ``Infinity`` and ``0 / 0`` to ``NaN`` instead of
raising. Degenerate values are detected explicitly by the callers and clamped
with :func:`finite_or`.
"""

import decimal
from decimal import Decimal
from functools import wraps
from typing import Any, Callable, Iterable, TypeVar

from src.core.constants import WAD

T = TypeVar("T")

YIELD_CONTEXT = decimal.Context(prec=50, rounding=decimal.ROUND_HALF_EVEN, traps=[])

ZERO = Decimal("0")
ONE = Decimal("1")


def in_yield_context(func: Callable[..., T]) -> Callable[..., T]:
    """Run a synchronous function with ``YIELD_CONTEXT`` as the active context."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        with decimal.localcontext(YIELD_CONTEXT):
            return func(*args, **kwargs)

    return wrapper


def to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats, strings and None into a Decimal.

    None maps to zero. Floats go through ``str`` so 0.1 stays 0.1.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(str(value).strip())


@in_yield_context
def from_wad(value: Any) -> Decimal:
    """Scale an 18-decimal fixed-point integer down to a Decimal."""
    return to_decimal(value) / WAD


def finite_or(value: Decimal, default: Decimal) -> Decimal:
    """Return ``value`` unless it is NaN or infinite."""
    if value.is_finite():
        return value
    return default


@in_yield_context
def safe_div(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, returning zero for a zero or non-finite denominator."""
    if not denominator.is_finite() or denominator == ZERO:
        return ZERO
    return numerator / denominator


@in_yield_context
def compound(rate: Decimal, periods: int) -> Decimal:
    """Compound an annual rate over ``periods``: ``(rate/periods + 1)^periods - 1``."""
    return (rate / periods + ONE) ** periods - ONE


def to_float(value: Decimal) -> float:
    """Convert to float, mapping NaN and infinities to 0.0."""
    if not value.is_finite():
        return 0.0
    return float(value)


@in_yield_context
def decimal_sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)
