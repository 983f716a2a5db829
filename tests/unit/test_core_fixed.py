import random
from decimal import Decimal

import pytest

from stablelever.core import N2, N5, N6, N9, U64_MAX, I64_MAX, UFix64, IFix64, UFix128, eq_tolerance
from stablelever.core.exc import (
    ExponentMismatch,
    FixedPointDivisionByZero,
    FixedPointOverflow,
    FixedPointUnderflow,
)


# -----------------------------
# Construction bounds
# -----------------------------

@pytest.mark.parametrize(
    "ctor,bits,exc",
    [
        (UFix64, U64_MAX + 1, FixedPointOverflow),
        (UFix64, -1, FixedPointUnderflow),
        (IFix64, I64_MAX + 1, FixedPointOverflow),
        (IFix64, -I64_MAX - 2, FixedPointUnderflow),
    ],
)
def test_construction_out_of_range(ctor, bits, exc):
    print(f"[ctor-range] {ctor.__name__}({bits}) -> expect {exc.__name__}")
    with pytest.raises(exc):
        ctor(bits, N9)


def test_bool_bits_rejected():
    with pytest.raises(TypeError):
        UFix64(True, N9)


def test_one_and_from_int():
    assert UFix64.one(N6) == UFix64(1_000_000, N6)
    assert UFix64.from_int(75_000, N6).bits == 75_000_000_000
    assert UFix64.max_value(N9).bits == U64_MAX


# -----------------------------
# Checked arithmetic
# -----------------------------

def test_add_sub_checked():
    a = UFix64(5, N9)
    b = UFix64(7, N9)
    assert (a + b).bits == 12
    with pytest.raises(FixedPointUnderflow):
        a - b
    with pytest.raises(FixedPointOverflow):
        UFix64.max_value(N9) + UFix64(1, N9)
    assert a.saturating_sub(b) == UFix64.zero(N9)
    assert a.abs_diff(b).bits == 2


@pytest.mark.parametrize(
    "lhs,rhs",
    [
        (UFix64(1, N9), UFix64(1, N6)),
        (UFix64(1, N9), IFix64(1, N9)),
    ],
)
def test_mixed_operands_rejected(lhs, rhs):
    print(f"[mixed-operands] {lhs!r} vs {rhs!r} -> expect ExponentMismatch")
    with pytest.raises(ExponentMismatch):
        lhs + rhs
    with pytest.raises(ExponentMismatch):
        lhs < rhs


def test_mul_div_rounding_signed():
    x = IFix64(-7, N5)
    one, two = IFix64(1, N5), IFix64(2, N5)
    assert x.mul_div_floor(one, two).bits == -3
    assert x.mul_div_ceil(one, two).bits == -4
    assert IFix64(7, N5).mul_div_ceil(one, two).bits == 4


def test_mul_div_keeps_receiver_exponent():
    amount = UFix64(69_618_816_010, N9)
    out = amount.mul_div_ceil(UFix64(50, N6), UFix64(1_000_000, N6))
    assert out.exponent == N9


def test_mul_div_mismatched_factors():
    with pytest.raises(ExponentMismatch):
        UFix64(1, N9).mul_div_floor(UFix64(1, N6), UFix64(1, N9))


def test_division_by_zero():
    with pytest.raises(FixedPointDivisionByZero):
        UFix64(1, N9).mul_div_floor(UFix64(1, N6), UFix64(0, N6))
    with pytest.raises(FixedPointDivisionByZero):
        UFix64(1, N9).checked_div(UFix64(0, N2))


def test_checked_div_exponent():
    q = UFix64(1_500_000_000, N9).checked_div(UFix64(150, N2))
    assert q == UFix64(10_000_000, -7)


# -----------------------------
# Rescaling
# -----------------------------

def test_convert_truncates_down_and_scales_up():
    assert UFix64(1_999, N9).convert(N6) == UFix64(1, N6)
    assert UFix64(1, N6).convert(N9) == UFix64(1_000, N9)
    assert IFix64(-1_999, N9).convert(N6) == IFix64(-1, N6)


@pytest.mark.parametrize("bits,exp,out", [
    (1_001, N9, 2),
    (1_000, N9, 1),
    (0, N9, 0),
])
def test_convert_ceil_rounds_up_on_downscale(bits, exp, out):
    assert UFix64(bits, exp).convert_ceil(N6) == UFix64(out, N6)
    assert UFix64(1, N6).convert_ceil(N9) == UFix64(1_000, N9)
    assert IFix64(-1_001, N9).convert_ceil(N6) == IFix64(-2, N6)


def test_convert_overflow():
    big = UFix64(U64_MAX, N6)
    with pytest.raises(FixedPointOverflow):
        big.convert(N9)
    assert big.checked_convert(N9) is None


def test_sign_and_width_changes():
    assert UFix64(U64_MAX, N9).to_signed() is None
    assert UFix64(5, N9).to_signed() == IFix64(5, N9)
    assert IFix64(-5, N9).to_unsigned() is None
    assert UFix64(5, N9).widen() == UFix128(5, N9)
    assert UFix128(U64_MAX + 1, N9).narrow() is None


def test_display():
    assert str(UFix64(1_500_000, N6)) == "1.500000"
    assert UFix64(150, N2).to_decimal() == Decimal("1.50")


def test_eq_tolerance():
    assert eq_tolerance(UFix64(1_000, N9), UFix64(1_003, N9), 3)
    assert not eq_tolerance(UFix64(1_000, N9), UFix64(1_004, N9), 3)


# -----------------------------
# Property: floor <= exact <= ceil, gap at most one unit
# -----------------------------

@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
def test_mul_div_brackets_exact(seed):
    rng = random.Random(seed)
    for _ in range(200):
        a = UFix64(rng.randrange(0, 10**12), N9)
        num = UFix64(rng.randrange(0, 10**6), N6)
        den = UFix64(rng.randrange(1, 10**9), N6)
        lo = a.mul_div_floor(num, den)
        hi = a.mul_div_ceil(num, den)
        exact = a.bits * num.bits
        assert lo.bits * den.bits <= exact <= hi.bits * den.bits
        assert hi.bits - lo.bits in (0, 1)
