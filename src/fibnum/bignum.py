# src/fibnum/bignum.py
"""
Arbitrary-precision unsigned integers stored as 32-bit limbs.

Layout: limbs[0] is the least significant limb, limbs[size - 1] the most
significant one. A live value always has at least one limb; a destroyed
value has no storage at all (limbs is None) and is rejected by every
operation.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

LIMB_BITS = 32
LIMB_MASK = (1 << LIMB_BITS) - 1


class BigNumError(Exception):
    pass


class AllocationFailure(BigNumError):
    pass


class InvalidOperand(BigNumError):
    pass


@dataclass
class BigNum:
    limbs: list[int] | None

    @property
    def size(self) -> int:
        return len(self.limbs) if self.limbs is not None else 0

    @property
    def alive(self) -> bool:
        return self.limbs is not None

    @classmethod
    def from_limbs(cls, limbs: Iterable[int]) -> BigNum:
        """Build a value from explicit little-limb-endian limbs (no normalization)."""
        out = [int(x) for x in limbs]
        if not out:
            raise InvalidOperand("a BigNum needs at least one limb")
        for x in out:
            if not 0 <= x <= LIMB_MASK:
                raise InvalidOperand(f"limb out of range: {x:#x}")
        return cls(limbs=out)


def require_live(*values: BigNum | None) -> None:
    for bn in values:
        if bn is None or bn.limbs is None:
            raise InvalidOperand("operand is absent or already destroyed")


def create(limb_count: int) -> BigNum:
    """Allocate a zero value with `limb_count` limbs."""
    if limb_count < 1:
        raise InvalidOperand(f"limb count must be >= 1, got {limb_count}")
    try:
        return BigNum(limbs=[0] * limb_count)
    except MemoryError as e:
        raise AllocationFailure(f"cannot allocate {limb_count} limbs") from e


def _zero_extended(limbs: list[int], count: int) -> list[int]:
    return limbs + [0] * (count - len(limbs))


def resize(bn: BigNum, new_limb_count: int) -> None:
    """
    Grow (zero-filled) or shrink `bn` to `new_limb_count` limbs.

    Shrinking truncates: the dropped high-order limbs are gone for good and a
    later grow brings them back as zeros. Resizing to 0 destroys the value.
    The new storage is built before it replaces the old one, so a failed grow
    leaves `bn` untouched.
    """
    require_live(bn)
    if new_limb_count < 0:
        raise InvalidOperand(f"limb count must be >= 0, got {new_limb_count}")
    size = len(bn.limbs)
    if new_limb_count == size:
        return
    if new_limb_count == 0:
        destroy(bn)
        return

    if new_limb_count < size:
        del bn.limbs[new_limb_count:]
        return

    try:
        grown = _zero_extended(bn.limbs, new_limb_count)
    except MemoryError as e:
        raise AllocationFailure(f"cannot grow to {new_limb_count} limbs") from e
    bn.limbs = grown


def copy(dest: BigNum, src: BigNum) -> None:
    """Make `dest` an exact limb-for-limb duplicate of `src`."""
    require_live(dest, src)
    if dest is src:
        return
    resize(dest, len(src.limbs))
    dest.limbs[:] = src.limbs


def duplicate(src: BigNum) -> BigNum:
    require_live(src)
    out = create(len(src.limbs))
    copy(out, src)
    return out


def destroy(bn: BigNum | None) -> None:
    """Release the storage of `bn`; the handle is unusable afterwards."""
    require_live(bn)
    bn.limbs = None
