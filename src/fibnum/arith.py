# src/fibnum/arith.py
"""
Limb arithmetic on BigNum values: compare, add, subtract, shift_left, multiply.

Every operation writes its result into an explicit destination which may be
the very same object as one (or both) of the sources.
"""

from __future__ import annotations

from fibnum.bignum import (
    LIMB_BITS,
    LIMB_MASK,
    BigNum,
    InvalidOperand,
    copy,
    create,
    destroy,
    duplicate,
    require_live,
    resize,
)
from fibnum.bits import bit_is_set, bit_length, leading_zero_count


def trim(bn: BigNum) -> None:
    """Drop all-zero high limbs, keeping at least one limb."""
    zero_limbs = leading_zero_count(bn) // LIMB_BITS
    if zero_limbs == bn.size:
        zero_limbs -= 1
    resize(bn, bn.size - zero_limbs)


def compare(a: BigNum, b: BigNum) -> int:
    """Return -1, 0 or 1 as a <, ==, > b. High zero limbs are ignored."""
    require_live(a, b)
    size_a, size_b = a.size, b.size
    for i in range(max(size_a, size_b) - 1, -1, -1):
        x = a.limbs[i] if i < size_a else 0
        y = b.limbs[i] if i < size_b else 0
        if x != y:
            return 1 if x > y else -1
    return 0


def add(a: BigNum, b: BigNum, c: BigNum) -> None:
    """c = a + b"""
    require_live(a, b, c)
    size_a, size_b = a.size, b.size
    # growing c only appends zero limbs, so an aliased a/b still reads correctly
    resize(c, max(size_a, size_b) + 1)

    carry = 0
    for i in range(c.size):
        x = a.limbs[i] if i < size_a else 0
        y = b.limbs[i] if i < size_b else 0
        carry += x + y
        c.limbs[i] = carry & LIMB_MASK
        carry >>= LIMB_BITS

    if not c.limbs[-1] and c.size > 1:
        resize(c, c.size - 1)


def subtract(a: BigNum, b: BigNum, c: BigNum) -> None:
    """c = a - b, requires a >= b."""
    require_live(a, b, c)
    if compare(a, b) < 0:
        raise InvalidOperand("subtract: minuend is smaller than subtrahend")

    size_a, size_b = a.size, b.size
    resize(c, max(size_a, size_b))

    borrow = 0
    for i in range(c.size):
        x = a.limbs[i] if i < size_a else 0
        y = b.limbs[i] if i < size_b else 0
        diff = x - y - borrow
        if diff < 0:
            c.limbs[i] = diff + (1 << LIMB_BITS)
            borrow = 1
        else:
            c.limbs[i] = diff
            borrow = 0

    trim(c)


def shift_left(dest: BigNum, src: BigNum, shift: int) -> None:
    """
    dest = src << (shift % 32)

    Only shifts inside one limb width are performed; a multiple of 32 leaves
    the value as it is (dest becomes a copy of src). When the shifted value
    would not fit, src itself is grown by one zero limb first.
    """
    require_live(dest, src)
    if shift < 0:
        raise InvalidOperand(f"negative shift: {shift}")
    shift %= LIMB_BITS
    if not shift:
        copy(dest, src)
        return

    if shift > leading_zero_count(src):
        resize(src, src.size + 1)
    resize(dest, src.size)

    s, d = src.limbs, dest.limbs
    back = LIMB_BITS - shift
    # high-to-low: s[i - 1] is still unshifted when dest is src
    for i in range(len(s) - 1, 0, -1):
        d[i] = (s[i] << shift | s[i - 1] >> back) & LIMB_MASK
    d[0] = (s[0] << shift) & LIMB_MASK


def multiply(a: BigNum, b: BigNum, c: BigNum) -> None:
    """c = a * b by shift-and-add over the bits of b."""
    require_live(a, b, c)
    size = a.size + b.size

    aliased = c is a or c is b
    if aliased:
        acc = create(size)
    else:
        acc = c
        resize(acc, 1)
        acc.limbs[0] = 0
        resize(acc, size)

    running = duplicate(a)
    nbits = bit_length(b)
    for i in range(nbits):
        if bit_is_set(b, i):
            add(acc, running, acc)
        if i < nbits - 1:
            shift_left(running, running, 1)
    destroy(running)

    trim(acc)

    if aliased:
        copy(c, acc)
        destroy(acc)
