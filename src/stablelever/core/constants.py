"""
Stablelever Core Constants (integer domain)
===========================================

Bit widths, decimal exponents and chain timing constants shared by the
fixed-point core and the pricing modules. Formatting quanta that rely on
Decimal live in `fmt.py`.
"""

# NOTE: exponents follow the mantissa/exponent convention: a value is
# `bits * 10^exponent`, so nine fractional digits is exponent -9.

# ---------------------------------------------------------------------------
# Magnitude bounds
# ---------------------------------------------------------------------------

U64_MAX: int = (1 << 64) - 1
I64_MIN: int = -(1 << 63)
I64_MAX: int = (1 << 63) - 1
U128_MAX: int = (1 << 128) - 1


# ---------------------------------------------------------------------------
# Decimal exponents in use across the protocol
# ---------------------------------------------------------------------------

Z0: int = 0
N2: int = -2   # stability thresholds, CI multipliers
N3: int = -3
N4: int = -4   # basis points
N5: int = -5   # fee curve lookup precision
N6: int = -6   # protocol tokens (stablecoin, levercoin, LP token)
N7: int = -7
N8: int = -8   # oracle USD prices
N9: int = -9   # collateral amounts (SOL, LST, exo), collateral ratio

#: Exponent the collateral ratio is narrowed to before fee curve lookup.
FEE_CURVE_EXPONENT: int = N5

#: Pyth exponents accepted by price normalisation (inclusive).
PYTH_EXP_MIN: int = -9
PYTH_EXP_MAX: int = -2


# ---------------------------------------------------------------------------
# Chain timing
# ---------------------------------------------------------------------------

#: Slot time used to convert an oracle age window into a slot window (0.40 s).
SLOT_TIME_CENTIS: int = 40

#: Slot time assumed by the Switchboard staleness check (milliseconds).
SWITCHBOARD_SLOT_MS: int = 200

#: Switchboard publishes decimals with a fixed scale of 18.
SWITCHBOARD_SCALE: int = 18


# ---------------------------------------------------------------------------
# Protocol limits
# ---------------------------------------------------------------------------

#: Maximum per-epoch funding rate at N8 (~10% annualised at 182 epochs/year).
FUNDING_RATE_MAX_BITS: int = 60_000


__all__ = [
    "U64_MAX",
    "I64_MIN",
    "I64_MAX",
    "U128_MAX",
    "Z0",
    "N2",
    "N3",
    "N4",
    "N5",
    "N6",
    "N7",
    "N8",
    "N9",
    "FEE_CURVE_EXPONENT",
    "PYTH_EXP_MIN",
    "PYTH_EXP_MAX",
    "SLOT_TIME_CENTIS",
    "SWITCHBOARD_SLOT_MS",
    "SWITCHBOARD_SCALE",
    "FUNDING_RATE_MAX_BITS",
]
