"""
structeq.tolerance — Precision-tolerant float equivalence.

Two floats are equivalent at P bits when they round to the same value
once their mantissas are cut down to P bits (round half to even):

    x = m · 2^e,  0.5 ≤ |m| < 1
    round_P(x) = round(m · 2^P) · 2^(e − P)

The rounded value is held as a Fraction so that rounding up at the top
of the float range can't overflow.  Precision at or above the 53-bit
mantissa of an IEEE double is the same as exact comparison.
"""

import math
from fractions import Fraction
from typing import Union

# Significand width of an IEEE 754 double.
DOUBLE_MANTISSA_BITS = 53


def round_mantissa(value, bits: int) -> Union[Fraction, float]:
    """
    Round a real number to `bits` bits of mantissa.

    Zero, infinities and NaN come back unchanged, as floats.
    """
    value = float(value)
    if value == 0.0 or not math.isfinite(value):
        return value
    if bits <= 0 or bits >= DOUBLE_MANTISSA_BITS:
        return Fraction(value)

    mantissa, exponent = math.frexp(value)
    scaled = math.ldexp(mantissa, bits)
    return Fraction(round(scaled)) * Fraction(2) ** (exponent - bits)


class FloatTolerance:
    """Equivalence of floats at a fixed mantissa precision."""

    __slots__ = ("bits",)

    def __init__(self, bits: int):
        if bits <= 0:
            raise ValueError(f"precision must be positive, got {bits}")
        self.bits = bits

    def equal(self, x, y) -> bool:
        return round_mantissa(x, self.bits) == round_mantissa(y, self.bits)

    def __repr__(self) -> str:
        return f"FloatTolerance(bits={self.bits})"
