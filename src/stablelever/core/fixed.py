"""
Fixed-point decimal primitives: UFix64, IFix64 and UFix128.

- A value is an integer `bits` scaled by `10^exponent` (exponent <= 0 in practice).
- Magnitudes are bounded to the type's bit width; every constructor and operation
  is checked and raises instead of wrapping.
- Operands must share class and exponent. Crossing exponents is explicit:
  `convert`, `convert_ceil`, `checked_convert`, `mul_div_floor/ceil` and `checked_div`.
- Rounding is always chosen at the call site: `mul_div_floor` rounds toward zero,
  `mul_div_ceil` rounds away from zero.

# Alignment notes:
# - Intermediates in mul_div are exact Python integers; only the result is
#   range-checked, matching a 128/256-bit widened intermediate on-chain.
# - `convert` truncates toward zero on downscale (lossy) and raises on upscale
#   overflow; `checked_convert` returns None instead.
# - Decimal appears only in `__str__` for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Optional, TypeVar, Union

from .constants import I64_MAX, I64_MIN, U64_MAX, U128_MAX
from .exc import (
    ExponentMismatch,
    FixedPointDivisionByZero,
    FixedPointOverflow,
    FixedPointUnderflow,
)

# Debug printing control
DEBUG_FIXED = False

def _dbg(msg: str) -> None:
    if DEBUG_FIXED:
        print(msg)


F = TypeVar("F", bound="_Fixed")


# ----------------------------
# Integer rounding helpers (signed)
# ----------------------------

def _div_toward_zero(a: int, b: int) -> int:
    if b == 0:
        raise FixedPointDivisionByZero("division by zero")
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _div_away_from_zero(a: int, b: int) -> int:
    if b == 0:
        raise FixedPointDivisionByZero("division by zero")
    q = -(-abs(a) // abs(b))
    return q if (a >= 0) == (b > 0) else -q


def _pow10(n: int) -> int:
    if n < 0:
        raise ValueError("_pow10 expects non-negative exponent")
    return 10 ** n


# ----------------------------
# Base value type
# ----------------------------

@dataclass(frozen=True)
class _Fixed:
    """Checked decimal fixed-point value: bits * 10^exponent."""
    bits: int
    exponent: int

    MIN_BITS: ClassVar[int] = 0
    MAX_BITS: ClassVar[int] = 0

    def __post_init__(self):
        if not isinstance(self.bits, int) or isinstance(self.bits, bool):
            raise TypeError(f"{type(self).__name__}.bits must be int, got {type(self.bits).__name__}")
        if self.bits > self.MAX_BITS:
            raise FixedPointOverflow(f"{type(self).__name__} overflow: {self.bits} (exp {self.exponent})")
        if self.bits < self.MIN_BITS:
            raise FixedPointUnderflow(f"{type(self).__name__} underflow: {self.bits} (exp {self.exponent})")

    # ------------- constructors -------------

    @classmethod
    def zero(cls: type[F], exponent: int) -> F:
        return cls(0, exponent)

    @classmethod
    def one(cls: type[F], exponent: int) -> F:
        return cls(_pow10(-exponent), exponent)

    @classmethod
    def from_int(cls: type[F], n: int, exponent: int) -> F:
        """Whole number `n` at the given exponent."""
        return cls(n * _pow10(-exponent), exponent)

    # ------------- guards -------------

    def _same(self, other: "_Fixed", op: str) -> None:
        if type(other) is not type(self):
            raise ExponentMismatch(
                f"{op}: operands must share type ({type(self).__name__} vs {type(other).__name__})"
            )
        if other.exponent != self.exponent:
            raise ExponentMismatch(f"{op}: exponent {self.exponent} vs {other.exponent}")

    def _with(self: F, bits: int, exponent: Optional[int] = None) -> F:
        return type(self)(bits, self.exponent if exponent is None else exponent)

    # ------------- predicates / ordering -------------

    def is_zero(self) -> bool:
        return self.bits == 0

    def __lt__(self, other: "_Fixed") -> bool:
        self._same(other, "compare")
        return self.bits < other.bits

    def __le__(self, other: "_Fixed") -> bool:
        self._same(other, "compare")
        return self.bits <= other.bits

    def __gt__(self, other: "_Fixed") -> bool:
        self._same(other, "compare")
        return self.bits > other.bits

    def __ge__(self, other: "_Fixed") -> bool:
        self._same(other, "compare")
        return self.bits >= other.bits

    def min(self: F, other: F) -> F:
        return other if other < self else self

    def max(self: F, other: F) -> F:
        return other if other > self else self

    # ------------- checked arithmetic -------------

    def __add__(self: F, other: F) -> F:
        self._same(other, "add")
        return self._with(self.bits + other.bits)

    def __sub__(self: F, other: F) -> F:
        self._same(other, "sub")
        return self._with(self.bits - other.bits)

    def saturating_sub(self: F, other: F) -> F:
        """Subtract, clamping at the type's minimum instead of raising."""
        self._same(other, "saturating_sub")
        return self._with(max(self.bits - other.bits, self.MIN_BITS))

    def abs_diff(self: F, other: F) -> F:
        self._same(other, "abs_diff")
        return self._with(abs(self.bits - other.bits))

    def mul_div_floor(self: F, num: "_Fixed", den: "_Fixed") -> F:
        """self * num / den rounded toward zero; keeps self's exponent."""
        return self._mul_div(num, den, _div_toward_zero)

    def mul_div_ceil(self: F, num: "_Fixed", den: "_Fixed") -> F:
        """self * num / den rounded away from zero; keeps self's exponent."""
        return self._mul_div(num, den, _div_away_from_zero)

    def _mul_div(self: F, num: "_Fixed", den: "_Fixed", div) -> F:
        if num.exponent != den.exponent:
            raise ExponentMismatch(f"mul_div: multiplier exp {num.exponent} vs divisor exp {den.exponent}")
        if den.bits == 0:
            raise FixedPointDivisionByZero("mul_div: divisor is zero")
        q = div(self.bits * num.bits, den.bits)
        _dbg(f"mul_div: {self.bits}*{num.bits}/{den.bits} -> {q}")
        return self._with(q)

    def checked_div(self: F, other: "_Fixed") -> F:
        """Truncating division; result exponent is self.exponent - other.exponent."""
        if other.bits == 0:
            raise FixedPointDivisionByZero("checked_div: divisor is zero")
        return self._with(_div_toward_zero(self.bits, other.bits), self.exponent - other.exponent)

    # ------------- rescaling -------------

    def convert(self: F, exponent: int) -> F:
        """Rescale to `exponent`: truncates on downscale, raises on upscale overflow."""
        if exponent == self.exponent:
            return self
        if exponent < self.exponent:
            return self._with(self.bits * _pow10(self.exponent - exponent), exponent)
        return self._with(_div_toward_zero(self.bits, _pow10(exponent - self.exponent)), exponent)

    def convert_ceil(self: F, exponent: int) -> F:
        """Like `convert`, but rounds away from zero on downscale."""
        if exponent <= self.exponent:
            return self.convert(exponent)
        return self._with(_div_away_from_zero(self.bits, _pow10(exponent - self.exponent)), exponent)

    def checked_convert(self: F, exponent: int) -> Optional[F]:
        try:
            return self.convert(exponent)
        except (FixedPointOverflow, FixedPointUnderflow):
            return None

    # ------------- display -------------

    def to_decimal(self) -> Decimal:
        return Decimal(self.bits).scaleb(self.exponent)

    def __str__(self) -> str:
        return str(self.to_decimal())


class UFix64(_Fixed):
    """Unsigned 64-bit fixed-point value."""
    MIN_BITS: ClassVar[int] = 0
    MAX_BITS: ClassVar[int] = U64_MAX

    @classmethod
    def max_value(cls, exponent: int) -> "UFix64":
        return cls(U64_MAX, exponent)

    def to_signed(self) -> Optional["IFix64"]:
        if self.bits > I64_MAX:
            return None
        return IFix64(self.bits, self.exponent)

    def widen(self) -> "UFix128":
        return UFix128(self.bits, self.exponent)


class IFix64(_Fixed):
    """Signed 64-bit fixed-point value."""
    MIN_BITS: ClassVar[int] = I64_MIN
    MAX_BITS: ClassVar[int] = I64_MAX

    def to_unsigned(self) -> Optional[UFix64]:
        if self.bits < 0:
            return None
        return UFix64(self.bits, self.exponent)


class UFix128(_Fixed):
    """Unsigned 128-bit fixed-point value for wide intermediates."""
    MIN_BITS: ClassVar[int] = 0
    MAX_BITS: ClassVar[int] = U128_MAX

    def narrow(self) -> Optional[UFix64]:
        if self.bits > U64_MAX:
            return None
        return UFix64(self.bits, self.exponent)


Fixed = Union[UFix64, IFix64, UFix128]


def eq_tolerance(a: _Fixed, b: _Fixed, tolerance_bits: int) -> bool:
    """True when `a` and `b` differ by at most `tolerance_bits` units of their exponent."""
    a._same(b, "eq_tolerance")
    return abs(a.bits - b.bits) <= tolerance_bits


__all__ = [
    "UFix64",
    "IFix64",
    "UFix128",
    "Fixed",
    "eq_tolerance",
]
