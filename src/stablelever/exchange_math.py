"""
Closed-form protocol math: collateral ratio, TVL, NAVs and mint/swap ceilings.

Precision conventions used throughout:
  total collateral N9, USD price N8, token supplies and NAVs N6,
  collateral ratio and TVL N9, target ratios N2.

Every formula picks its rounding direction in the protocol's favour: values
owed to users round down, values owed by users round up.
"""

from __future__ import annotations

from .core.constants import N2, N6, N8, N9, U64_MAX
from .core.exc import (
    CollateralRatioError,
    LevercoinNavError,
    MaxMintableError,
    MaxSwappableError,
    StablecoinNavError,
    TargetCollateralRatioTooLowError,
    TotalValueLockedError,
    reraise_as,
)
from .core.fixed import UFix64
from .oracle import PriceRange


def collateral_ratio(total_collateral: UFix64, usd_price: UFix64, stablecoin_supply: UFix64) -> UFix64:
    """total * price / supply at N9; `U64_MAX` bits (infinite) when no stablecoin exists."""
    if stablecoin_supply.is_zero():
        return UFix64(U64_MAX, N9)
    with reraise_as(CollateralRatioError):
        return total_collateral.mul_div_floor(usd_price, stablecoin_supply.convert(N8))


def total_value_locked(total_collateral: UFix64, usd_price: UFix64) -> UFix64:
    with reraise_as(TotalValueLockedError):
        return total_collateral.mul_div_floor(usd_price, UFix64.one(N8))


def max_mintable_stablecoin(
    target_collateral_ratio: UFix64,
    total_collateral: UFix64,
    usd_price: UFix64,
    stablecoin_supply: UFix64,
) -> UFix64:
    """Stablecoin that can be minted before CR falls to `target_collateral_ratio`.

    Minting `m` stablecoin deposits `m` USD of collateral, so solving
    `(tvl + m) / (supply + m) = target` gives `m = (tvl - target*supply) / (target - 1)`.
    """
    if not target_collateral_ratio > UFix64.one(N2):
        raise TargetCollateralRatioTooLowError(f"target CR {target_collateral_ratio} must exceed 1.00")
    with reraise_as(MaxMintableError):
        target_supply = stablecoin_supply.mul_div_ceil(target_collateral_ratio, UFix64.one(N2))
        tvl = total_collateral.mul_div_floor(usd_price, UFix64.one(N8))
        numerator = tvl - target_supply.convert(N9)
        denominator = target_collateral_ratio - UFix64.one(N2)
        return numerator.checked_div(denominator).convert(N6)


def max_swappable_stablecoin(
    target_collateral_ratio: UFix64,
    total_value_locked: UFix64,
    stablecoin_supply: UFix64,
) -> UFix64:
    """Stablecoin obtainable from levercoin before CR falls to the target: tvl/target - supply."""
    with reraise_as(MaxSwappableError):
        limit = total_value_locked.checked_div(target_collateral_ratio)
        return (limit - stablecoin_supply.convert(limit.exponent)).convert(N6)


def depeg_stablecoin_nav(total_collateral: UFix64, usd_price: UFix64, stablecoin_supply: UFix64) -> UFix64:
    """Stablecoin NAV once collateral no longer covers the supply 1:1."""
    with reraise_as(StablecoinNavError):
        nav = total_collateral.mul_div_floor(usd_price.convert(N9), stablecoin_supply.convert(N9))
        return nav.convert(N6)


def _levercoin_nav(
    total_collateral: UFix64,
    usd_price: UFix64,
    stablecoin_supply: UFix64,
    stablecoin_nav: UFix64,
    levercoin_supply: UFix64,
    *,
    round_up: bool,
) -> UFix64:
    if levercoin_supply.is_zero():
        return UFix64.one(N6)
    with reraise_as(LevercoinNavError):
        collateral_value = total_collateral.mul_div_floor(usd_price, UFix64.one(N8))
        if round_up:
            stablecoin_value = stablecoin_supply.mul_div_ceil(stablecoin_nav, UFix64.one(N6))
        else:
            stablecoin_value = stablecoin_supply.mul_div_floor(stablecoin_nav, UFix64.one(N6))
        # Residual equity cannot be negative; an insolvent pool prices levercoin at zero.
        free_collateral = collateral_value.saturating_sub(stablecoin_value.convert(N9))
        if round_up:
            return free_collateral.mul_div_ceil(UFix64.one(N6), levercoin_supply).convert_ceil(N6)
        return free_collateral.mul_div_floor(UFix64.one(N6), levercoin_supply).convert(N6)


def next_levercoin_mint_nav(
    total_collateral: UFix64,
    usd_price_range: PriceRange,
    stablecoin_supply: UFix64,
    stablecoin_nav: UFix64,
    levercoin_supply: UFix64,
) -> UFix64:
    """Levercoin NAV charged to minters: upper price, ceiling rounding.

    In Depeg the ceiling-rounded stablecoin value can consume the residual
    equity, so the result is clamped at the redeem NAV.
    """
    mint_nav = _levercoin_nav(
        total_collateral,
        usd_price_range.upper,
        stablecoin_supply,
        stablecoin_nav,
        levercoin_supply,
        round_up=True,
    )
    redeem_nav = next_levercoin_redeem_nav(
        total_collateral, usd_price_range, stablecoin_supply, stablecoin_nav, levercoin_supply
    )
    return mint_nav.max(redeem_nav)


def next_levercoin_redeem_nav(
    total_collateral: UFix64,
    usd_price_range: PriceRange,
    stablecoin_supply: UFix64,
    stablecoin_nav: UFix64,
    levercoin_supply: UFix64,
) -> UFix64:
    """Levercoin NAV paid to redeemers: lower price, floor rounding."""
    return _levercoin_nav(
        total_collateral,
        usd_price_range.lower,
        stablecoin_supply,
        stablecoin_nav,
        levercoin_supply,
        round_up=False,
    )


__all__ = [
    "collateral_ratio",
    "total_value_locked",
    "max_mintable_stablecoin",
    "max_swappable_stablecoin",
    "depeg_stablecoin_nav",
    "next_levercoin_mint_nav",
    "next_levercoin_redeem_nav",
]
