"""
Shared exchange state and the capability interface both contexts implement.

`ExchangeState` is the immutable snapshot every context owns: total
collateral (N9), collateral USD price range (N8), supplies (N6), the
stability controller and the levercoin fee table, plus the collateral ratio
and regime computed once at load. Contexts compose it rather than inherit
from it; the regime changes only by loading a new context.

# Alignment notes:
# - Mint ceilings use the upper price, TVL and CR the lower one.
# - `stablecoin_nav` is 1 outside Depeg; in Depeg it is collateral value over
#   supply, read at the lower price.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Type, Union

from ..clock import ChainClock
from ..config import OracleConfig
from ..conversion import SwapConversion
from ..core.constants import N6, N8
from ..core.exc import (
    DestinationFeeStablecoinError,
    EngineError,
    LevercoinNavError,
    NoNextStabilityThresholdError,
    RequestedStablecoinOverMaxMintableError,
    RequestedStablecoinOverMaxSwappableError,
    reraise_as,
)
from ..core.fixed import UFix64
from ..exchange_math import (
    collateral_ratio,
    depeg_stablecoin_nav,
    max_mintable_stablecoin,
    max_swappable_stablecoin,
    next_levercoin_mint_nav,
    next_levercoin_redeem_nav,
    total_value_locked,
)
from ..fees import FeeExtract, LevercoinFees
from ..ledger import VirtualStablecoin
from ..oracle import OracleFeed, PriceRange
from ..stability import StabilityController, StabilityMode, select_worse_mode
from ..stability_pool import stability_pool_cap

logger = logging.getLogger(__name__)


def resolve_price(
    price: Union[PriceRange, OracleFeed],
    clock: ChainClock,
    oracle_config: OracleConfig,
) -> PriceRange:
    """Use an already validated range as is; otherwise validate the feed at N8."""
    if isinstance(price, PriceRange):
        return price.convert(N8)
    return price.query_price(clock, oracle_config, N8)


@dataclass(frozen=True)
class ExchangeState:
    """Cached pricing snapshot shared by the LST and exo contexts."""
    total_collateral: UFix64
    collateral_usd_price: PriceRange
    virtual_stablecoin: VirtualStablecoin
    levercoin_supply_snapshot: Optional[UFix64]
    stability_controller: StabilityController
    levercoin_fees: LevercoinFees
    collateral_ratio: UFix64
    stability_mode: StabilityMode

    @classmethod
    def load(
        cls,
        total_collateral: UFix64,
        collateral_usd_price: PriceRange,
        virtual_stablecoin: VirtualStablecoin,
        levercoin_supply: Optional[UFix64],
        stability_controller: StabilityController,
        levercoin_fees: LevercoinFees,
    ) -> "ExchangeState":
        cr = collateral_ratio(total_collateral, collateral_usd_price.lower, virtual_stablecoin.supply)
        mode = stability_controller.stability_mode(cr)
        logger.debug(
            "exchange state: collateral=%s price=[%s, %s] cr=%s mode=%s",
            total_collateral, collateral_usd_price.lower, collateral_usd_price.upper, cr, mode,
        )
        return cls(
            total_collateral,
            collateral_usd_price,
            virtual_stablecoin,
            levercoin_supply,
            stability_controller,
            levercoin_fees,
            cr,
            mode,
        )

    # ------------- supplies -------------

    @property
    def stablecoin_supply(self) -> UFix64:
        return self.virtual_stablecoin.supply

    def levercoin_supply(self) -> UFix64:
        if self.levercoin_supply_snapshot is None:
            raise LevercoinNavError("no levercoin supply snapshot loaded")
        return self.levercoin_supply_snapshot

    # ------------- NAV -------------

    def total_value_locked(self) -> UFix64:
        return total_value_locked(self.total_collateral, self.collateral_usd_price.lower)

    def stablecoin_nav(self) -> UFix64:
        if self.stability_mode == StabilityMode.DEPEG:
            return depeg_stablecoin_nav(
                self.total_collateral, self.collateral_usd_price.lower, self.stablecoin_supply
            )
        return UFix64.one(N6)

    def levercoin_mint_nav(self) -> UFix64:
        return next_levercoin_mint_nav(
            self.total_collateral,
            self.collateral_usd_price,
            self.stablecoin_supply,
            self.stablecoin_nav(),
            self.levercoin_supply(),
        )

    def levercoin_redeem_nav(self) -> UFix64:
        return next_levercoin_redeem_nav(
            self.total_collateral,
            self.collateral_usd_price,
            self.stablecoin_supply,
            self.stablecoin_nav(),
            self.levercoin_supply(),
        )

    # ------------- regime -------------

    def projected_stability_mode(self, new_total: UFix64, new_stablecoin: UFix64) -> StabilityMode:
        projected_cr = collateral_ratio(new_total, self.collateral_usd_price.lower, new_stablecoin)
        return self.stability_controller.stability_mode(projected_cr)

    def select_stability_mode_for_fees(self, projected: StabilityMode) -> StabilityMode:
        return select_worse_mode(self.stability_mode, projected)

    # ------------- swaps and pool -------------

    def swap_conversion(self) -> SwapConversion:
        levercoin_nav = PriceRange(self.levercoin_redeem_nav(), self.levercoin_mint_nav())
        return SwapConversion(self.stablecoin_nav(), levercoin_nav)

    def stability_pool_cap(self, stablecoin_in_pool: UFix64, levercoin_in_pool: UFix64) -> UFix64:
        return stability_pool_cap(
            self.stablecoin_nav(),
            stablecoin_in_pool,
            self.levercoin_mint_nav(),
            levercoin_in_pool,
        )

    # ------------- limits -------------

    def max_mintable_stablecoin(self) -> UFix64:
        return max_mintable_stablecoin(
            self.stability_controller.min_stability_threshold(),
            self.total_collateral,
            self.collateral_usd_price.upper,
            self.stablecoin_supply,
        )

    def max_swappable_stablecoin(self) -> UFix64:
        return max_swappable_stablecoin(
            self.stability_controller.min_stability_threshold(),
            self.total_value_locked(),
            self.stablecoin_supply,
        )

    def max_swappable_stablecoin_to_next_threshold(self) -> UFix64:
        threshold = self.stability_controller.next_stability_threshold(self.stability_mode)
        if threshold is None:
            raise NoNextStabilityThresholdError(f"no lower threshold in {self.stability_mode}")
        return max_swappable_stablecoin(threshold, self.total_value_locked(), self.stablecoin_supply)

    def validate_stablecoin_amount(self, requested: UFix64) -> UFix64:
        maximum = self.max_mintable_stablecoin()
        if requested > maximum:
            raise RequestedStablecoinOverMaxMintableError(f"requested {requested} above max mintable {maximum}")
        return requested

    def validate_stablecoin_swap_amount(self, requested: UFix64) -> UFix64:
        maximum = self.max_swappable_stablecoin()
        if requested > maximum:
            raise RequestedStablecoinOverMaxSwappableError(f"requested {requested} above max swappable {maximum}")
        return requested

    # ------------- swap fees -------------

    def levercoin_to_stablecoin_fee(
        self,
        amount_stablecoin: UFix64,
        supply_error: Type[EngineError] = DestinationFeeStablecoinError,
    ) -> FeeExtract:
        """Fee on a levercoin -> stablecoin swap, at the regime after `amount_stablecoin` is issued."""
        with reraise_as(supply_error):
            new_stablecoin = self.stablecoin_supply + amount_stablecoin
        mode = self.select_stability_mode_for_fees(
            self.projected_stability_mode(self.total_collateral, new_stablecoin)
        )
        fee = self.levercoin_fees.swap_to_stablecoin_fee(mode)
        return FeeExtract.new(fee, amount_stablecoin)

    def stablecoin_to_levercoin_fee(
        self,
        amount_stablecoin: UFix64,
        supply_error: Type[EngineError] = DestinationFeeStablecoinError,
    ) -> FeeExtract:
        """Fee on a stablecoin -> levercoin swap, at the regime after `amount_stablecoin` is retired."""
        with reraise_as(supply_error):
            new_stablecoin = self.stablecoin_supply - amount_stablecoin
        mode = self.select_stability_mode_for_fees(
            self.projected_stability_mode(self.total_collateral, new_stablecoin)
        )
        fee = self.levercoin_fees.swap_from_stablecoin_fee(mode)
        return FeeExtract.new(fee, amount_stablecoin)


class ExchangeContext(Protocol):
    """Operations every collateral-pricing variant exposes.

    Stablecoin and levercoin mint/redeem fees are variant specific: the LST
    context also needs the LST/SOL price of the deposited token.
    """

    @property
    def total_collateral(self) -> UFix64: ...

    @property
    def collateral_usd_price(self) -> PriceRange: ...

    @property
    def collateral_ratio(self) -> UFix64: ...

    @property
    def stability_mode(self) -> StabilityMode: ...

    def total_value_locked(self) -> UFix64: ...

    def stablecoin_nav(self) -> UFix64: ...

    def levercoin_mint_nav(self) -> UFix64: ...

    def levercoin_redeem_nav(self) -> UFix64: ...

    def projected_stability_mode(self, new_total: UFix64, new_stablecoin: UFix64) -> StabilityMode: ...

    def select_stability_mode_for_fees(self, projected: StabilityMode) -> StabilityMode: ...

    def swap_conversion(self) -> SwapConversion: ...

    def stability_pool_cap(self, stablecoin_in_pool: UFix64, levercoin_in_pool: UFix64) -> UFix64: ...

    def max_mintable_stablecoin(self) -> UFix64: ...

    def max_swappable_stablecoin(self) -> UFix64: ...

    def max_swappable_stablecoin_to_next_threshold(self) -> UFix64: ...

    def validate_stablecoin_amount(self, requested: UFix64) -> UFix64: ...

    def validate_stablecoin_swap_amount(self, requested: UFix64) -> UFix64: ...

    def levercoin_to_stablecoin_fee(self, amount_stablecoin: UFix64) -> FeeExtract: ...

    def stablecoin_to_levercoin_fee(self, amount_stablecoin: UFix64) -> FeeExtract: ...


__all__ = [
    "ExchangeState",
    "ExchangeContext",
    "resolve_price",
]
