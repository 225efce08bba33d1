# tests/test_arith.py
"""
Limb arithmetic checked against Python ints.

Run: pytest -v
"""

from __future__ import annotations

import itertools

import pytest

from fibnum.arith import add, compare, multiply, shift_left, subtract
from fibnum.bignum import LIMB_BITS, LIMB_MASK, BigNum, InvalidOperand, create
from fibnum.bits import bit_length

# ---------- helpers -----------------------------------------------------------


def _bn(x: int) -> BigNum:
    limbs = []
    while True:
        limbs.append(x & LIMB_MASK)
        x >>= LIMB_BITS
        if not x:
            break
    return BigNum.from_limbs(limbs)


def _val(bn: BigNum) -> int:
    return sum(limb << (LIMB_BITS * i) for i, limb in enumerate(bn.limbs))


def _is_trimmed(bn: BigNum) -> bool:
    return bn.size == 1 or bn.limbs[-1] != 0


VALUES = [
    0,
    1,
    7,
    LIMB_MASK,
    1 << 32,
    (1 << 64) - 1,
    0x1234567890ABCDEF1122334455,
    3 ** 80,
    2 ** 95 + 12345,
]

PAIRS = list(itertools.product(VALUES, repeat=2))
PAIR_IDS = [f"{a:#x}+{b:#x}" for a, b in PAIRS]


# ---------- compare -----------------------------------------------------------


@pytest.mark.parametrize("a,b", PAIRS, ids=PAIR_IDS)
def test_compare_matches_ints(a, b):
    assert compare(_bn(a), _bn(b)) == (a > b) - (a < b)


def test_compare_ignores_high_zero_limbs():
    assert compare(BigNum.from_limbs([5, 0, 0]), BigNum.from_limbs([5])) == 0
    assert compare(BigNum.from_limbs([0, 0, 0]), BigNum.from_limbs([1])) == -1


# ---------- add ---------------------------------------------------------------


@pytest.mark.parametrize("a,b", PAIRS, ids=PAIR_IDS)
def test_add_is_exact_and_commutative(a, b):
    ab, ba = create(1), create(1)
    add(_bn(a), _bn(b), ab)
    add(_bn(b), _bn(a), ba)
    assert _val(ab) == a + b
    assert ab == ba
    assert _is_trimmed(ab)


def test_add_carry_opens_new_limb():
    c = create(1)
    add(BigNum.from_limbs([LIMB_MASK]), BigNum.from_limbs([1]), c)
    assert c.limbs == [0, 1]


def test_add_without_carry_keeps_size():
    c = create(5)
    add(BigNum.from_limbs([1]), BigNum.from_limbs([2]), c)
    assert c.limbs == [3]


@pytest.mark.parametrize("a,b", [(LIMB_MASK, 1), (3 ** 80, 2 ** 95 + 12345), (0, 5)])
def test_add_aliasing_matches_distinct_destination(a, b):
    expected = create(1)
    add(_bn(a), _bn(b), expected)

    x, y = _bn(a), _bn(b)
    add(x, y, x)
    assert x == expected

    x, y = _bn(a), _bn(b)
    add(x, y, y)
    assert y == expected


def test_add_to_itself_doubles():
    x = _bn(3 ** 80)
    add(x, x, x)
    assert _val(x) == 2 * 3 ** 80


# ---------- subtract ----------------------------------------------------------


@pytest.mark.parametrize("a,b", PAIRS, ids=PAIR_IDS)
def test_subtract_undoes_add(a, b):
    s, d = create(1), create(1)
    bb = _bn(b)
    add(_bn(a), bb, s)
    subtract(s, bb, d)
    assert _val(d) == a
    assert _is_trimmed(d)


def test_subtract_trims_to_single_zero_limb():
    c = create(1)
    subtract(_bn(1 << 64), _bn(1 << 64), c)
    assert c.limbs == [0]


def test_subtract_borrows_across_limbs():
    c = create(1)
    subtract(_bn(1 << 64), _bn(1), c)
    assert c.limbs == [LIMB_MASK, LIMB_MASK]


def test_subtract_in_place():
    a = _bn(2 ** 95 + 12345)
    subtract(a, _bn(12345), a)
    assert _val(a) == 2 ** 95


def test_subtract_rejects_negative_result():
    c = BigNum.from_limbs([77])
    with pytest.raises(InvalidOperand):
        subtract(_bn(5), _bn(6), c)
    assert c.limbs == [77]


# ---------- shift_left --------------------------------------------------------


@pytest.mark.parametrize("x", VALUES, ids=[hex(v) for v in VALUES])
def test_shift_by_one_equals_doubling(x):
    shifted, doubled = create(1), create(1)
    shift_left(shifted, _bn(x), 1)
    add(_bn(x), _bn(x), doubled)
    assert _val(shifted) == _val(doubled) == 2 * x


@pytest.mark.parametrize("shift", [1, 5, 31])
def test_shift_in_place(shift):
    x = _bn(0x1234567890ABCDEF1122334455)
    shift_left(x, x, shift)
    assert _val(x) == 0x1234567890ABCDEF1122334455 << shift


def test_shift_grows_only_when_needed():
    src = BigNum.from_limbs([0x80000000])
    dest = create(1)
    shift_left(dest, src, 1)
    assert dest.limbs == [0, 1]
    # the source got the extra limb too, its value is unchanged
    assert _val(src) == 0x80000000

    src = BigNum.from_limbs([0x40000000])
    shift_left(dest, src, 1)
    assert dest.limbs == [0x80000000]


@pytest.mark.parametrize("shift,effective", [(32, 0), (64, 0), (33, 1), (70, 6)])
def test_shift_amount_is_taken_modulo_limb_width(shift, effective):
    dest = create(1)
    shift_left(dest, _bn(0xABCDEF), shift)
    assert _val(dest) == 0xABCDEF << effective


def test_shift_rejects_negative_amount():
    with pytest.raises(InvalidOperand):
        shift_left(create(1), _bn(1), -1)


# ---------- multiply ----------------------------------------------------------


def _shift_and_add(a: int, b: int) -> int:
    return sum(a << i for i in range(b.bit_length()) if b >> i & 1)


@pytest.mark.parametrize("a,b", PAIRS, ids=PAIR_IDS)
def test_multiply_is_sum_of_shifted_multiplicand(a, b):
    c = create(1)
    multiply(_bn(a), _bn(b), c)
    assert _val(c) == _shift_and_add(a, b) == a * b
    assert _is_trimmed(c)


def test_multiply_overwrites_previous_destination():
    c = BigNum.from_limbs([9, 9, 9, 9, 9, 9])
    multiply(_bn(3), _bn(5), c)
    assert c.limbs == [15]


@pytest.mark.parametrize("a,b", [(7, 3 ** 80), (LIMB_MASK, LIMB_MASK), (2 ** 95 + 12345, 0x1234567890ABCDEF)])
def test_multiply_aliasing_matches_distinct_destination(a, b):
    expected = create(1)
    multiply(_bn(a), _bn(b), expected)

    x, y = _bn(a), _bn(b)
    multiply(x, y, x)
    assert x == expected
    assert _val(y) == b

    x, y = _bn(a), _bn(b)
    multiply(x, y, y)
    assert y == expected
    assert _val(x) == a


def test_multiply_square_in_place():
    x = _bn(3 ** 80)
    multiply(x, x, x)
    assert _val(x) == 3 ** 160
    assert bit_length(x) == (3 ** 160).bit_length()


def test_multiply_by_zero_gives_single_zero_limb():
    c = create(3)
    multiply(_bn(3 ** 80), _bn(0), c)
    assert c.limbs == [0]
