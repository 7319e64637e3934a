"""Exact rational numbers for sample positions and sample-rate ratios.

Positions in a resampled stream are never accumulated in floating point.
Every output sample index maps to an exact input position, so chunk
boundaries never drift.
"""

import math
import numbers

INT64_MAX = 2 ** 63 - 1


class Rational:
    """Reduced fraction with a positive denominator.

    Usage:
        r = Rational(3, 2)
        r + 1            # Rational(5, 2)
        floor(r)         # 1
        frac(r)          # Rational(1, 2)

    The sign lives in the numerator. Python ints never overflow, so every
    operation here is exact; see fits_int64() for the compiled-kernel range.
    """

    __slots__ = ("_num", "_den")

    def __init__(self, numerator=0, denominator=1):
        if isinstance(numerator, Rational) or isinstance(denominator, Rational):
            a, b = _as_rational(numerator), _as_rational(denominator)
            numerator, denominator = a._num * b._den, a._den * b._num
        elif isinstance(numerator, numbers.Integral) and isinstance(denominator, numbers.Integral):
            numerator, denominator = int(numerator), int(denominator)
        else:
            raise TypeError(f"Rational needs integers, got {numerator!r} / {denominator!r}")
        if denominator == 0:
            raise ZeroDivisionError(f"Rational({numerator}, 0)")
        if denominator < 0:
            numerator, denominator = -numerator, -denominator
        g = math.gcd(numerator, denominator)
        self._num = numerator // g
        self._den = denominator // g

    @property
    def numerator(self) -> int:
        return self._num

    @property
    def denominator(self) -> int:
        return self._den

    # -- arithmetic ----------------------------------------------------------

    def __add__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return Rational(self._num * other._den + other._num * self._den,
                        self._den * other._den)

    __radd__ = __add__

    def __sub__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return Rational(self._num * other._den - other._num * self._den,
                        self._den * other._den)

    def __rsub__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return other - self

    def __mul__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return Rational(self._num * other._num, self._den * other._den)

    __rmul__ = __mul__

    def __truediv__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return Rational(self._num * other._den, self._den * other._num)

    def __rtruediv__(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return other / self

    def __neg__(self):
        return Rational(-self._num, self._den)

    def __abs__(self):
        return Rational(abs(self._num), self._den)

    # -- comparison ----------------------------------------------------------

    def _cmp(self, other):
        other = _coerce(other)
        if other is NotImplemented:
            return other
        return self._num * other._den - other._num * self._den

    def __eq__(self, other):
        d = self._cmp(other)
        return d if d is NotImplemented else d == 0

    def __lt__(self, other):
        d = self._cmp(other)
        return d if d is NotImplemented else d < 0

    def __le__(self, other):
        d = self._cmp(other)
        return d if d is NotImplemented else d <= 0

    def __gt__(self, other):
        d = self._cmp(other)
        return d if d is NotImplemented else d > 0

    def __ge__(self, other):
        d = self._cmp(other)
        return d if d is NotImplemented else d >= 0

    def __hash__(self):
        if self._den == 1:
            return hash(self._num)
        return hash((self._num, self._den))

    # -- conversion ----------------------------------------------------------

    def __floor__(self):
        return self._num // self._den

    def __ceil__(self):
        return -(-self._num // self._den)

    def __float__(self):
        return self._num / self._den

    def __bool__(self):
        return self._num != 0

    def __repr__(self):
        return f"Rational({self._num}, {self._den})"

    def __str__(self):
        return str(self._num) if self._den == 1 else f"{self._num}/{self._den}"


def _coerce(value):
    if isinstance(value, Rational):
        return value
    if isinstance(value, numbers.Integral):
        return Rational(int(value), 1)
    return NotImplemented


def _as_rational(value) -> Rational:
    if isinstance(value, Rational):
        return value
    if isinstance(value, numbers.Integral):
        return Rational(int(value), 1)
    raise TypeError(f"expected an integer or Rational, got {type(value).__name__} {value!r}")


def as_rational(value) -> Rational:
    """Accept a Rational, an int, or a (numerator, denominator) pair."""
    if isinstance(value, tuple):
        return Rational(*value)
    return _as_rational(value)


def floor(x: Rational) -> int:
    """Greatest integer <= x (rounds toward negative infinity)."""
    return math.floor(x)


def frac(x: Rational) -> Rational:
    """x - floor(x), always in [0, 1)."""
    return Rational(x.numerator % x.denominator, x.denominator)


def fits_int64(*values: int) -> bool:
    """True if every value can be held by a signed 64-bit integer."""
    return all(-INT64_MAX - 1 <= v <= INT64_MAX for v in values)
