"""Witnessed integer division over unsigned fixed-point values.

Every function is stateless and operates on plain Python ints.

The quotient is computed out of band with `//` and then re-derived: the caller only
ever sees a quotient for which ``n == q*d + r`` and ``0 <= r < d`` were checked.
"""

from __future__ import annotations

from .errors import ArithmeticFault, ErrorCode

U64_MAX: int = (1 << 64) - 1
UNIT_PRECISION: int = 1_000_000_000  # 9 decimals (MINA and zkUSD)


def _require_uint(x: int, *, name: str) -> int:
    if not isinstance(x, int) or isinstance(x, bool):
        raise TypeError(f"{name} must be an int, got {type(x).__name__}")
    if x < 0:
        raise ValueError(f"{name} must be non-negative: {x}")
    return x


def verified_div(numerator: int, denominator: int) -> int:
    """``floor(numerator / denominator)`` with the reconstruction identity checked.

    Raises:
        ArithmeticFault: ``DIVISION_BY_ZERO`` when ``denominator == 0``.
    """
    _require_uint(numerator, name="numerator")
    _require_uint(denominator, name="denominator")
    if denominator == 0:
        raise ArithmeticFault(ErrorCode.DIVISION_BY_ZERO)

    q = numerator // denominator
    r = numerator - q * denominator
    if not (0 <= r < denominator):
        raise AssertionError(f"remainder out of range: {r}")
    if numerator != q * denominator + r:
        raise AssertionError("division reconstruction failed")
    return q


def safe_div(numerator: int, denominator: int) -> int:
    """Total division: ``U64_MAX`` when ``denominator == 0``.

    The witnessed division still runs (against a substituted denominator of 1) so
    both branches discharge the same checks.
    """
    is_zero = denominator == 0
    q = verified_div(numerator, 1 if is_zero else denominator)
    return U64_MAX if is_zero else q
