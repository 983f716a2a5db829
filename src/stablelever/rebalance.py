"""
Collateral rebalancing: oracle-derived trade price curves and trade sizes.

Two independent two-point curves keyed by collateral ratio (N9):

- SellPriceCurve, CR 1.20 -> 1.35: the protocol sells collateral for USD.
  Flat below 1.20, inactive above 1.35.
- BuyPriceCurve, CR 1.65 -> 1.75: the protocol buys collateral with USD.
  Inactive below 1.65, flat above 1.75.

Endpoint prices are `spot - conf * floor_mult` and `spot + conf * ceil_mult`.

# Alignment notes:
# - Scaled confidence rounds up (wider band).
# - Trade sizes return None when the pool is already on the other side of the
#   target ratio; they are sizing hints, not failures.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import RebalanceCurveConfig
from .core.constants import N2, N9
from .core.exc import (
    ArithmeticFault,
    RebalanceBuyInactiveError,
    RebalancePriceConstructionError,
    RebalancePriceConversionError,
    RebalanceSellInactiveError,
    reraise_as,
)
from .core.fixed import IFix64, UFix64
from .core.interp import FixInterp, Point
from .oracle import OraclePrice

logger = logging.getLogger(__name__)

CR_1_20 = IFix64(1_200_000_000, N9)
CR_1_35 = IFix64(1_350_000_000, N9)
CR_1_65 = IFix64(1_650_000_000, N9)
CR_1_75 = IFix64(1_750_000_000, N9)


# ----------------------------
# Price curves
# ----------------------------

def _narrow(value: UFix64) -> IFix64:
    signed = value.to_signed()
    if signed is None:
        raise RebalancePriceConversionError(f"{value} does not fit a signed 64-bit value")
    return signed


def scale_ci(conf: UFix64, mult: UFix64) -> UFix64:
    with reraise_as(RebalancePriceConstructionError, f"cannot scale confidence {conf} by {mult}"):
        return conf.mul_div_ceil(mult, UFix64.one(N2))


def _endpoint_curve(oracle: OraclePrice, config: RebalanceCurveConfig, x0: IFix64, x1: IFix64) -> FixInterp:
    with reraise_as(RebalancePriceConstructionError, "rebalance endpoint prices out of range"):
        floor = oracle.spot - scale_ci(oracle.conf, config.floor_mult)
        ceil = oracle.spot + scale_ci(oracle.conf, config.ceil_mult)
    curve = FixInterp([Point(x0, _narrow(floor)), Point(x1, _narrow(ceil))])
    if not (curve.y_min() > IFix64.zero(N9) and curve.y_min() < curve.y_max()):
        raise RebalancePriceConstructionError(
            f"floor price {curve.y_min()} must be positive and below ceiling {curve.y_max()}"
        )
    logger.debug("rebalance curve [%s, %s] -> [%s, %s]", x0, x1, floor, ceil)
    return curve


class _RebalancePriceCurve:
    """Price lookup over a validated two-point curve; subclasses set the boundary policy."""

    def __init__(self, curve: FixInterp):
        self._curve = curve

    @property
    def curve(self) -> FixInterp:
        return self._curve

    def price_inner(self, cr: IFix64) -> IFix64:
        raise NotImplementedError

    def price(self, collateral_ratio: UFix64) -> UFix64:
        """Trade price (N9) at an N9 collateral ratio."""
        price = self.price_inner(_narrow(collateral_ratio)).to_unsigned()
        if price is None:
            raise RebalancePriceConversionError("negative rebalance price")
        return price


class SellPriceCurve(_RebalancePriceCurve):

    @classmethod
    def new(cls, oracle: OraclePrice, config: RebalanceCurveConfig) -> "SellPriceCurve":
        return cls(_endpoint_curve(oracle, config, CR_1_20, CR_1_35))

    def price_inner(self, cr: IFix64) -> IFix64:
        if cr < self._curve.x_min():
            return self._curve.y_min()
        if cr > self._curve.x_max():
            raise RebalanceSellInactiveError(f"sell side inactive at CR {cr}")
        return self._curve.interpolate(cr)


class BuyPriceCurve(_RebalancePriceCurve):

    @classmethod
    def new(cls, oracle: OraclePrice, config: RebalanceCurveConfig) -> "BuyPriceCurve":
        return cls(_endpoint_curve(oracle, config, CR_1_65, CR_1_75))

    def price_inner(self, cr: IFix64) -> IFix64:
        if cr < self._curve.x_min():
            raise RebalanceBuyInactiveError(f"buy side inactive at CR {cr}")
        if cr > self._curve.x_max():
            return self._curve.y_max()
        return self._curve.interpolate(cr)


# ----------------------------
# Trade sizing
# ----------------------------

def max_sellable_collateral(
    target_cr: UFix64,
    virtual_stablecoin: UFix64,
    collateral_usd_price: UFix64,
    total_collateral: UFix64,
) -> Optional[UFix64]:
    """Collateral (N9) to sell so CR rises to `target_cr`; None if CR is already there.

    Selling `x` collateral at price `p` retires `x*p` of stablecoin value:
    `x = (target*supply - p*total) / (p*(target - 1))`.
    """
    one = UFix64.one(N9)
    try:
        target = target_cr.convert(N9)
        supply = virtual_stablecoin.convert(N9)
        num = target.mul_div_floor(supply, one) - collateral_usd_price.mul_div_ceil(total_collateral, one)
        denom = collateral_usd_price.mul_div_ceil(target - one, one)
        return num.mul_div_floor(one, denom)
    except ArithmeticFault:
        return None


def max_buyable_collateral(
    target_cr: UFix64,
    virtual_stablecoin: UFix64,
    collateral_usd_price: UFix64,
    total_collateral: UFix64,
) -> Optional[UFix64]:
    """Collateral (N9) to buy so CR falls to `target_cr`; None if CR is already there."""
    one = UFix64.one(N9)
    try:
        target = target_cr.convert(N9)
        supply = virtual_stablecoin.convert(N9)
        num = collateral_usd_price.mul_div_floor(total_collateral, one) - target.mul_div_ceil(supply, one)
        denom = collateral_usd_price.mul_div_ceil(target - one, one)
        return num.mul_div_floor(one, denom)
    except ArithmeticFault:
        return None


__all__ = [
    "SellPriceCurve",
    "BuyPriceCurve",
    "scale_ci",
    "max_sellable_collateral",
    "max_buyable_collateral",
]
