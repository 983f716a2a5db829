"""
Static stablecoin fee curves, sampled as (collateral ratio, fee) at N5.

Mint fees decay as the projected collateral ratio rises above 1.50 (inverse
shape); redeem fees grow logarithmically from 1.30 upward. The tables are
immutable tuples; `mint_fee_curve()` / `redeem_fee_curve()` validate them into
fresh interpolators for each caller.
"""

from __future__ import annotations

from typing import Tuple

from .core.constants import FEE_CURVE_EXPONENT
from .core.interp import FixInterp

MINT_FEE_INV: Tuple[Tuple[int, int], ...] = (
    (150_000, 200),
    (151_000, 180),
    (152_000, 150),
    (153_000, 140),
    (154_000, 120),
    (155_000, 110),
    (156_000, 100),
    (157_000, 90),
    (158_000, 80),
    (159_000, 70),
    (160_000, 60),
    (161_000, 50),
    (162_000, 50),
    (163_000, 40),
    (164_000, 30),
    (165_000, 30),
    (166_000, 20),
    (167_000, 10),
    (168_000, 10),
    (169_000, 0),
    (170_000, 0),
)

REDEEM_FEE_LN: Tuple[Tuple[int, int], ...] = (
    (130_000, 0),
    (132_000, 45),
    (134_000, 77),
    (135_000, 91),
    (137_000, 113),
    (138_000, 123),
    (140_000, 140),
    (141_000, 148),
    (143_000, 162),
    (145_000, 174),
    (150_000, 200),
    (155_000, 212),
    (160_000, 221),
    (166_000, 230),
    (172_000, 238),
    (187_000, 252),
    (207_000, 265),
    (232_000, 278),
    (263_000, 289),
    (300_000, 300),
)


def mint_fee_curve() -> FixInterp:
    return FixInterp.from_ints(MINT_FEE_INV, FEE_CURVE_EXPONENT)


def redeem_fee_curve() -> FixInterp:
    return FixInterp.from_ints(REDEEM_FEE_LN, FEE_CURVE_EXPONENT)


__all__ = [
    "MINT_FEE_INV",
    "REDEEM_FEE_LN",
    "mint_fee_curve",
    "redeem_fee_curve",
]
