from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("fibnum")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .arith import add, compare, multiply, shift_left, subtract
from .bignum import AllocationFailure, BigNum, BigNumError, InvalidOperand, copy, create, destroy, resize
from .bits import bit_length, is_zero, leading_zero_count
from .fibonacci import compute_fibonacci, compute_fibonacci_doubling, fibonacci, fibonacci_terms
from .fmt import to_decimal_string
from .runtime import APPLY, CFG

__all__ = [
    "APPLY",
    "CFG",
    "AllocationFailure",
    "BigNum",
    "BigNumError",
    "InvalidOperand",
    "__version__",
    "add",
    "bit_length",
    "compare",
    "compute_fibonacci",
    "compute_fibonacci_doubling",
    "copy",
    "create",
    "destroy",
    "fibonacci",
    "fibonacci_terms",
    "is_zero",
    "leading_zero_count",
    "multiply",
    "resize",
    "shift_left",
    "subtract",
    "to_decimal_string",
]
