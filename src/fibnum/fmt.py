# src/fibnum/fmt.py
from __future__ import annotations

import math
import re

from colorama import Fore, Style

from fibnum.bignum import LIMB_BITS, BigNum, destroy, duplicate, require_live
from fibnum.bits import bit_length
from fibnum.runtime import CFG

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

_LOG10_2 = math.log10(2)


def to_decimal_string(bn: BigNum) -> str:
    """
    Base-10 rendering of `bn` by repeated division by ten.

    Each pass is a bit-serial long division over the nonzero limbs, from
    the top bit of the top limb down, and yields one digit (the remainder).
    The division runs on a private copy; `bn` is left exactly as it was.
    """
    require_live(bn)
    work = duplicate(bn)

    # digits(x) <= floor(bits * log10(2)) + 1; one spare slot on top
    length = int(bit_length(work) * _LOG10_2) + 2
    buf = ["0"] * length
    cur = length - 1

    limbs = work.limbs
    # limbs[top:] are all zero; the quotient never grows, so top only falls
    top = len(limbs)
    while top and not limbs[top - 1]:
        top -= 1
    while top:
        rem = 0
        for i in range(top - 1, -1, -1):
            limb = limbs[i]
            quotient = 0
            for d in range(LIMB_BITS - 1, -1, -1):
                rem = rem << 1 | (limb >> d & 1)
                if rem >= 10:
                    quotient = quotient << 1 | 1
                    rem -= 10
                else:
                    quotient <<= 1
            limbs[i] = quotient
        buf[cur] = chr(ord("0") + rem)
        cur -= 1
        while top and not limbs[top - 1]:
            top -= 1
    destroy(work)

    # skip leading zeros, keep one for the zero value
    return "".join(buf).lstrip("0") or "0"


def strip_ansi(s: str | None) -> str:
    return ANSI_RE.sub("", s or "")


def abbr_digits(s: str, head: int = 10, tail: int = 10, threshold: int = 35, ellipsis: str = "…") -> str:
    """Abbreviate a long digit string as first<head>…last<tail>."""
    if len(s) <= threshold or head + tail >= len(s):
        return s
    return f"{s[:head]}{ellipsis}{s[-tail:]}"


def format_term(n: int, digits: str, *, abbreviate: bool | None = None) -> str:
    """
    Render one result line 'F(n) = digits'.
    Uses FORMATTING.NUM_ABBR_* when abbreviation is on (argument or profile).
    """
    if abbreviate is None:
        abbreviate = bool(CFG("FORMATTING.ABBREVIATE", False))

    if abbreviate:
        ell = CFG("FORMATTING.ELLIPSIS", "…")
        head = int(CFG("FORMATTING.NUM_ABBR_HEAD", 10))
        tail = int(CFG("FORMATTING.NUM_ABBR_TAIL", 10))
        thr = int(CFG("FORMATTING.NUM_ABBR_THRESHOLD", 35))
        tok = abbr_digits(digits, head, tail, thr, ell)
        if tok != digits:
            tok += f" {Style.DIM}({len(digits)} digits){Style.RESET_ALL}"
    else:
        tok = digits

    return f"{Fore.CYAN}F({n}){Style.RESET_ALL} = {tok}"
