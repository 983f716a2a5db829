"""
Formatting helpers and Decimal bridges (non-core arithmetic).

Core arithmetic uses integer fixed-point types. Decimal here is only for
formatting and convenience (e.g., tests, logs, display) and for converting
human-entered values at I/O boundaries with an explicit rounding direction.
"""

from decimal import Decimal, getcontext, ROUND_DOWN, ROUND_UP

from .fixed import UFix64, _Fixed

# Debug printing control (formatting layer)
DEBUG_FMT = False

def _dbg(msg: str) -> None:
    if DEBUG_FMT:
        print(msg)


# ---------------------------------------------------------------------------
# Global Decimal precision (formatting only)
# ---------------------------------------------------------------------------

#: Default global precision for Decimal-based formatting. Wide enough for a
#: 128-bit magnitude with 9 fractional digits.
DEFAULT_DECIMAL_PRECISION: int = 48
getcontext().prec = DEFAULT_DECIMAL_PRECISION


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def to_decimal(x: _Fixed) -> Decimal:
    """Exact Decimal value of a fixed-point number (display only)."""
    return Decimal(x.bits).scaleb(x.exponent)


def fmt_dec(x: Decimal, places: int = 9) -> str:
    """Format a Decimal with fixed fractional digits, e.g. Decimal('1.5') -> '1.500000000'."""
    return format(x, f".{places}f")


def fmt_fixed(x: _Fixed) -> str:
    """Format a fixed-point value with exactly its own number of fractional digits."""
    return fmt_dec(to_decimal(x), max(-x.exponent, 0))


# ---------------------------------------------------------------------------
# Decimal quantisation bridges (I/O only)
# ---------------------------------------------------------------------------

def _from_decimal(x: Decimal, exponent: int, rounding: str) -> UFix64:
    if x.is_nan() or x.is_infinite():
        raise ValueError("invalid Decimal for fixed-point conversion")
    if x < 0:
        raise ValueError("negative Decimal not allowed for UFix64")
    bits = int(x.scaleb(-exponent).to_integral_value(rounding=rounding))
    _dbg(f"_from_decimal: {x} @ {exponent} -> {bits}")
    return UFix64(bits, exponent)


def from_decimal_floor(x: Decimal, exponent: int) -> UFix64:
    """Quantise down to the grid (won't give more OUT)."""
    return _from_decimal(x, exponent, ROUND_DOWN)


def from_decimal_ceil(x: Decimal, exponent: int) -> UFix64:
    """Quantise up to the grid (won't take less IN)."""
    return _from_decimal(x, exponent, ROUND_UP)


__all__ = [
    "DEFAULT_DECIMAL_PRECISION",
    "to_decimal",
    "fmt_dec",
    "fmt_fixed",
    "from_decimal_floor",
    "from_decimal_ceil",
]
