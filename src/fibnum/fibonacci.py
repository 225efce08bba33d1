# src/fibnum/fibonacci.py
"""
Fibonacci terms as BigNum values (F0=0, F1=1).

compute_fibonacci() is the plain O(n) rolling-sum generator.
compute_fibonacci_doubling() uses the identities
    F(2k)   = F(k) * (2*F(k+1) - F(k))
    F(2k+1) = F(k)^2 + F(k+1)^2
and needs only O(log n) steps, each with one subtract and three multiplies.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from fibnum.arith import add, multiply, shift_left, subtract
from fibnum.bignum import BigNum, InvalidOperand, copy, create, destroy, duplicate
from fibnum.runtime import CFG, debug


def _check_index(n: int) -> None:
    if n < 0:
        raise InvalidOperand(f"Fibonacci index must be >= 0, got {n}")


def compute_fibonacci(n: int) -> BigNum:
    _check_index(n)
    dest = create(1)
    if n < 2:
        dest.limbs[0] = n
        return dest

    prev = create(1)     # F(i - 1)
    saved = create(1)
    dest.limbs[0] = 1    # F(i)
    for _ in range(1, n):
        copy(saved, dest)
        add(dest, prev, dest)
        copy(prev, saved)
    destroy(prev)
    destroy(saved)
    return dest


def compute_fibonacci_doubling(n: int) -> BigNum:
    _check_index(n)
    a = create(1)        # F(k)
    b = create(1)        # F(k + 1)
    b.limbs[0] = 1
    even = create(1)
    odd = create(1)

    for i in range(n.bit_length() - 1, -1, -1):
        shift_left(even, b, 1)
        subtract(even, a, even)
        multiply(even, a, even)      # F(2k)

        multiply(a, a, odd)
        multiply(b, b, b)
        add(odd, b, odd)             # F(2k + 1)

        if n >> i & 1:
            copy(a, odd)
            add(even, odd, b)
        else:
            copy(a, even)
            copy(b, odd)

    destroy(b)
    destroy(even)
    destroy(odd)
    return a


METHODS: dict[str, Callable[[int], BigNum]] = {
    "iterative": compute_fibonacci,
    "doubling": compute_fibonacci_doubling,
}


def fibonacci(n: int, method: str | None = None) -> BigNum:
    """Compute F(n) with the named method (profile FIBONACCI.METHOD when None)."""
    name = str(method or CFG("FIBONACCI.METHOD", "iterative")).strip().lower()
    fn = METHODS.get(name)
    if fn is None:
        raise ValueError(f"Unknown Fibonacci method {name!r}; choose from {', '.join(METHODS)}")
    debug(f"F({n}) via {name}")
    return fn(n)


def fibonacci_terms(start: int, stop: int) -> Iterator[tuple[int, BigNum]]:
    """
    Yield (k, F(k)) for start <= k <= stop, one addition per step.
    Every yielded value is a fresh BigNum owned by the caller.
    """
    _check_index(start)
    cur = create(1)      # F(k)
    nxt = create(1)      # F(k + 1)
    nxt.limbs[0] = 1
    tmp = create(1)
    try:
        for k in range(stop + 1):
            if k >= start:
                yield k, duplicate(cur)
            add(cur, nxt, tmp)
            copy(cur, nxt)
            copy(nxt, tmp)
    finally:
        destroy(cur)
        destroy(nxt)
        destroy(tmp)
