"""
Stability pool LP accounting.

The pool holds stablecoin and (after rebalancing swaps) some levercoin; its
LP token is valued at pool capitalisation over LP supply. All token amounts
and NAVs are N6.

# Alignment notes:
# - Capitalisation and LP NAV round up, LP tokens minted and tokens withdrawn
#   round down: depositors never receive more than their share.
# - The withdrawal fee is charged on the full allocation value but paid only
#   from stablecoin, so it is capped at what the pool holds.
"""

from __future__ import annotations

from .conversion import SwapConversion
from .core.constants import N3, N6
from .core.exc import (
    LpTokenNavError,
    LpTokenOutError,
    StabilityPoolCapError,
    StablecoinToSwapError,
    TokenWithdrawError,
    reraise_as,
)
from .core.fixed import UFix64
from .fees import FeeExtract
from .oracle import PriceRange


def stability_pool_cap(
    stablecoin_nav: UFix64,
    stablecoin_in_pool: UFix64,
    levercoin_nav: UFix64,
    levercoin_in_pool: UFix64,
) -> UFix64:
    """USD value of the pool's stablecoin plus levercoin holdings."""
    with reraise_as(StabilityPoolCapError):
        stable_cap = stablecoin_in_pool.mul_div_ceil(stablecoin_nav, UFix64.one(N6))
        lever_cap = levercoin_in_pool.mul_div_ceil(levercoin_nav, UFix64.one(N6))
        return stable_cap + lever_cap


def lp_token_nav(
    stablecoin_nav: UFix64,
    stablecoin_in_pool: UFix64,
    levercoin_nav: UFix64,
    levercoin_in_pool: UFix64,
    lp_token_supply: UFix64,
) -> UFix64:
    """Capitalisation per LP token; exactly 1 for an empty pool."""
    if lp_token_supply.is_zero():
        return UFix64.one(N6)
    total_cap = stability_pool_cap(stablecoin_nav, stablecoin_in_pool, levercoin_nav, levercoin_in_pool)
    with reraise_as(LpTokenNavError):
        return total_cap.mul_div_ceil(UFix64.one(N6), lp_token_supply)


def lp_token_out(amount_stablecoin_in: UFix64, lp_token_nav: UFix64) -> UFix64:
    with reraise_as(LpTokenOutError):
        return amount_stablecoin_in.mul_div_floor(UFix64.one(N6), lp_token_nav)


def amount_token_to_withdraw(
    user_lp_token_amount: UFix64,
    lp_token_supply: UFix64,
    pool_amount: UFix64,
) -> UFix64:
    """Pro-rata share of `pool_amount` for `user_lp_token_amount` LP tokens."""
    with reraise_as(TokenWithdrawError):
        return user_lp_token_amount.mul_div_floor(pool_amount, lp_token_supply)


def amount_stable_to_swap(
    stablecoin_in_pool: UFix64,
    target_stability_threshold: UFix64,
    current_stablecoin_supply: UFix64,
    total_value_locked: UFix64,
) -> UFix64:
    """Stablecoin the pool must convert to lift CR back to the target, capped at its holdings.

    Fails when the supply already sits below the target supply (CR above target).
    """
    with reraise_as(StablecoinToSwapError):
        # N9 / N3 -> N6
        target_supply = total_value_locked.checked_div(target_stability_threshold.convert(N3))
        to_swap = current_stablecoin_supply - target_supply
    return stablecoin_in_pool.min(to_swap)


def amount_lever_to_swap(
    levercoin_in_pool: UFix64,
    levercoin_nav: PriceRange,
    max_swappable_stablecoin: UFix64,
) -> UFix64:
    """Levercoin the pool can swap back to stablecoin without exceeding the swap ceiling."""
    conversion = SwapConversion(UFix64.one(N6), levercoin_nav)
    target_stablecoin = conversion.lever_to_stable(levercoin_in_pool)
    if target_stablecoin <= max_swappable_stablecoin:
        return levercoin_in_pool
    return conversion.stable_to_lever(max_swappable_stablecoin)


def stablecoin_withdrawal_fee(
    stablecoin_in_pool: UFix64,
    stablecoin_to_withdraw: UFix64,
    stablecoin_nav: UFix64,
    levercoin_to_withdraw: UFix64,
    levercoin_nav: UFix64,
    withdrawal_fee: UFix64,
) -> FeeExtract:
    allocation_cap = stability_pool_cap(
        stablecoin_nav,
        stablecoin_to_withdraw,
        levercoin_nav,
        levercoin_to_withdraw,
    )
    proposed = FeeExtract.new(withdrawal_fee, allocation_cap).fees_extracted
    fees_extracted = proposed.min(stablecoin_in_pool)
    return FeeExtract(fees_extracted, stablecoin_to_withdraw.saturating_sub(fees_extracted))


__all__ = [
    "stability_pool_cap",
    "lp_token_nav",
    "lp_token_out",
    "amount_token_to_withdraw",
    "amount_stable_to_swap",
    "amount_lever_to_swap",
    "stablecoin_withdrawal_fee",
]
