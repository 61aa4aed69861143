"""
Module: inventory_kernel.domain.decimals
Responsibility: Fixed-point helpers for inventory cost arithmetic.  Centralizes
    scale, rounding mode, and Decimal coercion so that the replay engine,
    the summary assembler and the stock history writer all agree.
Architecture position: Kernel > Domain.  Pure functions, zero I/O.

Invariants enforced:
    - No floats.  to_decimal() rejects float input outright; binary floating
      point drifts when averaged across thousands of replayed events.
    - COST_SCALE (4) with ROUND_HALF_UP is the canonical precision of a
      weighted average unit cost.  round_cost() is the only sanctioned way
      to reach it.

Failure modes:
    - TypeError on float or bool input to to_decimal().
    - ValueError on non-numeric strings or non-finite values.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

COST_SCALE = 4
DISPLAY_SCALE = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def quantum(places: int) -> Decimal:
    """Return the Decimal exponent for ``places`` decimal places (2 -> 0.01)."""
    if places < 0:
        raise ValueError(f"decimal places cannot be negative, got {places}")
    return Decimal(1).scaleb(-places)


def round_cost(
    value: Decimal,
    places: int = COST_SCALE,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a cost or value to ``places`` decimal places, half-up by default.

    Preconditions: value is a finite Decimal.
    Postconditions: Returns value quantized to ``places``.
    """
    return value.quantize(quantum(places), rounding=rounding)


def to_decimal(value: Decimal | str | int) -> Decimal:
    """
    Coerce a price-like value to Decimal without passing through float.

    Raises:
        TypeError: If value is a float or bool (or another unsupported type).
        ValueError: If value is not a finite number.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"expected Decimal, str or int, got {type(value).__name__}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid decimal value: {value!r}") from e
    else:
        raise TypeError(f"expected Decimal, str or int, got {type(value).__name__}")
    if not result.is_finite():
        raise ValueError(f"Decimal value must be finite, got {value!r}")
    return result
