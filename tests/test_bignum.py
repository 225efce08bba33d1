# tests/test_bignum.py
"""
Storage lifecycle and bit inspection of BigNum values.

Run: pytest -v
"""

from __future__ import annotations

import pytest

from fibnum import bignum
from fibnum.bignum import (
    LIMB_MASK,
    AllocationFailure,
    BigNum,
    InvalidOperand,
    copy,
    create,
    destroy,
    duplicate,
    resize,
)
from fibnum.bits import bit_is_set, bit_length, is_zero, leading_zero_count

# ---------- allocation --------------------------------------------------------


@pytest.mark.parametrize("count", [1, 2, 7])
def test_create_is_zero_filled(count):
    bn = create(count)
    assert bn.size == count
    assert bn.limbs == [0] * count
    assert is_zero(bn)


@pytest.mark.parametrize("count", [0, -3])
def test_create_rejects_empty_values(count):
    with pytest.raises(InvalidOperand):
        create(count)


def test_create_reports_allocation_failure():
    with pytest.raises(AllocationFailure):
        create(1 << 62)


def test_from_limbs_validates_input():
    assert BigNum.from_limbs([1, 2]).limbs == [1, 2]
    with pytest.raises(InvalidOperand):
        BigNum.from_limbs([])
    with pytest.raises(InvalidOperand):
        BigNum.from_limbs([LIMB_MASK + 1])
    with pytest.raises(InvalidOperand):
        BigNum.from_limbs([-1])


# ---------- resize ------------------------------------------------------------


def test_resize_grow_zero_fills_high_limbs():
    bn = BigNum.from_limbs([5, 6])
    resize(bn, 4)
    assert bn.limbs == [5, 6, 0, 0]


def test_resize_same_size_is_noop():
    bn = BigNum.from_limbs([5, 6])
    storage = bn.limbs
    resize(bn, 2)
    assert bn.limbs is storage
    assert bn.limbs == [5, 6]


def test_shrink_discards_high_limbs_for_good():
    bn = BigNum.from_limbs([1, 2, 3])
    resize(bn, 1)
    assert bn.limbs == [1]
    resize(bn, 3)
    # previous high limbs come back as zeros, not as 2 and 3
    assert bn.limbs == [1, 0, 0]


def test_resize_to_zero_destroys():
    bn = BigNum.from_limbs([9])
    resize(bn, 0)
    assert not bn.alive
    with pytest.raises(InvalidOperand):
        resize(bn, 2)
    with pytest.raises(InvalidOperand):
        is_zero(bn)


def test_failed_grow_keeps_original_value():
    bn = BigNum.from_limbs([1, 2, 3])
    with pytest.raises(AllocationFailure):
        resize(bn, 1 << 62)
    assert bn.limbs == [1, 2, 3]


# ---------- copy / destroy ----------------------------------------------------


def test_copy_duplicates_and_resizes_dest():
    src = BigNum.from_limbs([1, 2, 3])
    dest = BigNum.from_limbs([7])
    copy(dest, src)
    assert dest.limbs == [1, 2, 3]
    src.limbs[0] = 42
    assert dest.limbs[0] == 1


def test_copy_shrinks_larger_dest():
    dest = BigNum.from_limbs([4, 4, 4, 4])
    copy(dest, BigNum.from_limbs([8]))
    assert dest.limbs == [8]


def test_copy_onto_itself_keeps_value():
    bn = BigNum.from_limbs([3, 1])
    copy(bn, bn)
    assert bn.limbs == [3, 1]


def test_duplicate_is_independent():
    src = BigNum.from_limbs([1, 0, 0])
    dup = duplicate(src)
    assert dup == src
    assert dup.limbs is not src.limbs


def test_destroy_twice_is_an_error():
    bn = create(2)
    destroy(bn)
    assert not bn.alive
    assert bn.size == 0
    with pytest.raises(InvalidOperand):
        destroy(bn)


def test_destroy_absent_value_is_an_error():
    with pytest.raises(InvalidOperand):
        destroy(None)


# ---------- bit inspector -----------------------------------------------------

CLZ_CASES = [
    ([0], 32, 0),
    ([0, 0], 64, 0),
    ([1], 31, 1),
    ([0x80000000], 0, 32),
    ([LIMB_MASK, 0], 32, 32),
    ([5, 1], 31, 33),
    ([0, 0, 0x10], 27, 69),
]


@pytest.mark.parametrize("limbs,clz,bits", CLZ_CASES, ids=[str(c[0]) for c in CLZ_CASES])
def test_leading_zeros_and_bit_length(limbs, clz, bits):
    bn = BigNum.from_limbs(limbs)
    assert leading_zero_count(bn) == clz
    assert bit_length(bn) == bits


def test_is_zero_ignores_limb_count():
    assert is_zero(BigNum.from_limbs([0, 0, 0]))
    assert not is_zero(BigNum.from_limbs([0, 0, 1]))


def test_bit_is_set_reads_across_limbs():
    bn = BigNum.from_limbs([0b101, 1])
    assert bit_is_set(bn, 0)
    assert not bit_is_set(bn, 1)
    assert bit_is_set(bn, 2)
    assert bit_is_set(bn, 32)
    assert not bit_is_set(bn, 33)
    assert not bit_is_set(bn, 500)


def test_copy_reports_failed_growth_and_keeps_dest(monkeypatch):
    def out_of_memory(limbs, count):
        raise MemoryError

    monkeypatch.setattr(bignum, "_zero_extended", out_of_memory)
    dest = BigNum.from_limbs([9])
    with pytest.raises(AllocationFailure):
        copy(dest, BigNum.from_limbs([1, 2, 3]))
    assert dest.limbs == [9]
