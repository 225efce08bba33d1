# src/fibnum/bits.py
from __future__ import annotations

from fibnum.bignum import LIMB_BITS, BigNum, require_live


def leading_zero_count(bn: BigNum) -> int:
    """Zero bits above the highest set bit; an all-zero value gives size * 32."""
    require_live(bn)
    cnt = 0
    for limb in reversed(bn.limbs):
        if limb:
            return cnt + LIMB_BITS - limb.bit_length()
        cnt += LIMB_BITS
    return cnt


def bit_length(bn: BigNum) -> int:
    return bn.size * LIMB_BITS - leading_zero_count(bn)


def is_zero(bn: BigNum) -> bool:
    require_live(bn)
    return not any(bn.limbs)


def bit_is_set(bn: BigNum, i: int) -> bool:
    require_live(bn)
    idx, off = divmod(i, LIMB_BITS)
    if idx >= len(bn.limbs):
        return False
    return bool(bn.limbs[idx] >> off & 1)
