# src/fibnum/verify.py
"""Cross-check computed terms against an independent big-integer library."""

from __future__ import annotations

from collections.abc import Callable

from fibnum.runtime import CFG, ensure_runtime_deps

ORACLES = ("gmpy2", "sympy")


def _gmpy2_fib(n: int) -> str:
    import gmpy2
    return gmpy2.fib(n).digits(10)


def _sympy_fib(n: int) -> str:
    from sympy import fibonacci
    return str(fibonacci(n))


def oracle(name: str | None = None) -> Callable[[int], str] | None:
    """
    Return a function n -> decimal F(n) from the chosen library
    (profile VERIFY.ORACLE when None), or None if it is not installed.
    """
    name = str(name or CFG("VERIFY.ORACLE", "gmpy2")).strip().lower()
    if name not in ORACLES:
        raise ValueError(f"Unknown oracle {name!r}; choose from {', '.join(ORACLES)}")
    if not ensure_runtime_deps((name,), strict=True):
        return None
    return _gmpy2_fib if name == "gmpy2" else _sympy_fib


def check_term(n: int, digits: str, reference: Callable[[int], str]) -> str | None:
    """None when `digits` is F(n), else the expected string."""
    expected = reference(n)
    return None if expected == digits else expected
