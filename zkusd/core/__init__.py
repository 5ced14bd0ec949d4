"""
Core zkUSD kernels: fixed-point arithmetic, vault state machine, oracle aggregation.
"""

from .errors import ErrorCode, ZkUsdError
from .fixed_point import U64_MAX, UNIT_PRECISION, safe_div, verified_div
from .vault import health_factor

__all__ = [
    "ErrorCode",
    "ZkUsdError",
    "U64_MAX",
    "UNIT_PRECISION",
    "safe_div",
    "verified_div",
    "health_factor",
]
