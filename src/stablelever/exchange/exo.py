"""
Exchange context for exogenous collateral priced directly in USD.

Same cached state and shared operations as the LST context; fees take the
collateral amount itself, with no SOL leg and no epoch-stamped cache.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..clock import ChainClock
from ..config import OracleConfig
from ..conversion import ExoConversion, SwapConversion
from ..core.constants import N9
from ..core.exc import (
    ExoDestinationCollateralError,
    ExoDestinationStablecoinError,
    ExponentMismatch,
    reraise_as,
)
from ..core.fixed import UFix64
from ..exchange_math import collateral_ratio
from ..fee_curves import mint_fee_curve, redeem_fee_curve
from ..fees import FeeExtract, InterpolatedMintFees, InterpolatedRedeemFees, LevercoinFees
from ..ledger import VirtualStablecoin
from ..oracle import OracleFeed, PriceRange
from ..stability import StabilityController, StabilityMode, validate_stability_thresholds
from .base import ExchangeState, resolve_price

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExoExchangeContext:
    clock: ChainClock
    state: ExchangeState
    mint_fees: InterpolatedMintFees
    redeem_fees: InterpolatedRedeemFees

    @classmethod
    def load(
        cls,
        clock: ChainClock,
        total_collateral: UFix64,
        stability_threshold_1: UFix64,
        oracle_config: OracleConfig,
        levercoin_fees: LevercoinFees,
        collateral_usd_price: Union[PriceRange, OracleFeed],
        virtual_stablecoin: VirtualStablecoin,
        levercoin_supply: Optional[UFix64] = None,
    ) -> "ExoExchangeContext":
        if total_collateral.exponent != N9:
            raise ExponentMismatch(f"total_collateral must have exponent {N9}, got {total_collateral.exponent}")
        price = resolve_price(collateral_usd_price, clock, oracle_config)
        mint_fees = InterpolatedMintFees(mint_fee_curve())
        redeem_fees = InterpolatedRedeemFees(redeem_fee_curve())
        stability_threshold_2 = redeem_fees.cr_floor()
        validate_stability_thresholds(stability_threshold_1, stability_threshold_2)
        controller = StabilityController(stability_threshold_1, stability_threshold_2)
        state = ExchangeState.load(
            total_collateral, price, virtual_stablecoin, levercoin_supply, controller, levercoin_fees
        )
        logger.debug("exo context loaded at slot %d", clock.slot())
        return cls(clock, state, mint_fees, redeem_fees)

    # ------------- cached state -------------

    @property
    def total_collateral(self) -> UFix64:
        return self.state.total_collateral

    @property
    def collateral_usd_price(self) -> PriceRange:
        return self.state.collateral_usd_price

    @property
    def collateral_ratio(self) -> UFix64:
        return self.state.collateral_ratio

    @property
    def stability_mode(self) -> StabilityMode:
        return self.state.stability_mode

    @property
    def stability_controller(self) -> StabilityController:
        return self.state.stability_controller

    def virtual_stablecoin_supply(self) -> UFix64:
        return self.state.stablecoin_supply

    def levercoin_supply(self) -> UFix64:
        return self.state.levercoin_supply()

    # ------------- shared operations -------------

    def total_value_locked(self) -> UFix64:
        return self.state.total_value_locked()

    def stablecoin_nav(self) -> UFix64:
        return self.state.stablecoin_nav()

    def levercoin_mint_nav(self) -> UFix64:
        return self.state.levercoin_mint_nav()

    def levercoin_redeem_nav(self) -> UFix64:
        return self.state.levercoin_redeem_nav()

    def projected_stability_mode(self, new_total: UFix64, new_stablecoin: UFix64) -> StabilityMode:
        return self.state.projected_stability_mode(new_total, new_stablecoin)

    def select_stability_mode_for_fees(self, projected: StabilityMode) -> StabilityMode:
        return self.state.select_stability_mode_for_fees(projected)

    def swap_conversion(self) -> SwapConversion:
        return self.state.swap_conversion()

    def stability_pool_cap(self, stablecoin_in_pool: UFix64, levercoin_in_pool: UFix64) -> UFix64:
        return self.state.stability_pool_cap(stablecoin_in_pool, levercoin_in_pool)

    def max_mintable_stablecoin(self) -> UFix64:
        return self.state.max_mintable_stablecoin()

    def max_swappable_stablecoin(self) -> UFix64:
        return self.state.max_swappable_stablecoin()

    def max_swappable_stablecoin_to_next_threshold(self) -> UFix64:
        return self.state.max_swappable_stablecoin_to_next_threshold()

    def validate_stablecoin_amount(self, requested: UFix64) -> UFix64:
        return self.state.validate_stablecoin_amount(requested)

    def validate_stablecoin_swap_amount(self, requested: UFix64) -> UFix64:
        return self.state.validate_stablecoin_swap_amount(requested)

    def levercoin_to_stablecoin_fee(self, amount_stablecoin: UFix64) -> FeeExtract:
        return self.state.levercoin_to_stablecoin_fee(amount_stablecoin, ExoDestinationStablecoinError)

    def stablecoin_to_levercoin_fee(self, amount_stablecoin: UFix64) -> FeeExtract:
        return self.state.stablecoin_to_levercoin_fee(amount_stablecoin, ExoDestinationStablecoinError)

    # ------------- conversions -------------

    def exo_conversion(self) -> ExoConversion:
        return ExoConversion(self.collateral_usd_price)

    # ------------- fees -------------

    def _projected_total(self, collateral_amount: UFix64, deposit: bool) -> UFix64:
        with reraise_as(ExoDestinationCollateralError):
            if deposit:
                return self.total_collateral + collateral_amount
            return self.total_collateral - collateral_amount

    def stablecoin_mint_fee(self, collateral_amount: UFix64) -> FeeExtract:
        new_total = self._projected_total(collateral_amount, deposit=True)
        minted = self.exo_conversion().exo_to_token(collateral_amount, self.stablecoin_nav())
        with reraise_as(ExoDestinationStablecoinError):
            new_stablecoin = minted + self.virtual_stablecoin_supply()
        projected_cr = collateral_ratio(new_total, self.collateral_usd_price.lower, new_stablecoin)
        return self.mint_fees.apply_fee(projected_cr, collateral_amount)

    def stablecoin_redeem_fee(self, collateral_amount: UFix64) -> FeeExtract:
        new_total = self._projected_total(collateral_amount, deposit=False)
        redeemed = self.exo_conversion().exo_to_token(collateral_amount, self.stablecoin_nav())
        with reraise_as(ExoDestinationStablecoinError):
            new_stablecoin = self.virtual_stablecoin_supply() - redeemed
        projected_cr = collateral_ratio(new_total, self.collateral_usd_price.lower, new_stablecoin)
        return self.redeem_fees.apply_fee(projected_cr, collateral_amount)

    def levercoin_mint_fee(self, collateral_amount: UFix64) -> FeeExtract:
        new_total = self._projected_total(collateral_amount, deposit=True)
        projected = self.projected_stability_mode(new_total, self.virtual_stablecoin_supply())
        fee = self.state.levercoin_fees.mint_fee(self.select_stability_mode_for_fees(projected))
        return FeeExtract.new(fee, collateral_amount)

    def levercoin_redeem_fee(self, collateral_amount: UFix64) -> FeeExtract:
        new_total = self._projected_total(collateral_amount, deposit=False)
        projected = self.projected_stability_mode(new_total, self.virtual_stablecoin_supply())
        fee = self.state.levercoin_fees.redeem_fee(self.select_stability_mode_for_fees(projected))
        return FeeExtract.new(fee, collateral_amount)


__all__ = ["ExoExchangeContext"]
