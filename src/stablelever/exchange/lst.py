"""
Exchange context for LST collateral priced through SOL.

Total collateral is the epoch-stamped SOL total; deposits and withdrawals are
converted to SOL with the LST's own epoch price before projecting the
collateral ratio.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..clock import ChainClock
from ..config import OracleConfig
from ..conversion import Conversion, SwapConversion
from ..core.constants import N9
from ..core.exc import DestinationFeeSolError, DestinationFeeStablecoinError, reraise_as
from ..core.fixed import UFix64
from ..exchange_math import collateral_ratio
from ..fee_curves import mint_fee_curve, redeem_fee_curve
from ..fees import FeeExtract, InterpolatedMintFees, InterpolatedRedeemFees, LevercoinFees
from ..ledger import LstSolPrice, TotalSolCache, VirtualStablecoin
from ..oracle import OracleFeed, PriceRange
from ..stability import StabilityController, StabilityMode, validate_stability_thresholds
from .base import ExchangeState, resolve_price

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LstExchangeContext:
    clock: ChainClock
    state: ExchangeState
    stablecoin_mint_fees: InterpolatedMintFees
    stablecoin_redeem_fees: InterpolatedRedeemFees

    @classmethod
    def load(
        cls,
        clock: ChainClock,
        total_sol_cache: TotalSolCache,
        stability_threshold_1: UFix64,
        oracle_config: OracleConfig,
        levercoin_fees: LevercoinFees,
        sol_usd_price: Union[PriceRange, OracleFeed],
        virtual_stablecoin: VirtualStablecoin,
        levercoin_supply: Optional[UFix64] = None,
    ) -> "LstExchangeContext":
        """Validate cache, oracle and thresholds, then cache CR and regime.

        `threshold_2` is the lowest ratio of the redeem fee curve.
        """
        total_sol = total_sol_cache.get_validated(clock.epoch())
        price = resolve_price(sol_usd_price, clock, oracle_config)
        mint_fees = InterpolatedMintFees(mint_fee_curve())
        redeem_fees = InterpolatedRedeemFees(redeem_fee_curve())
        stability_threshold_2 = redeem_fees.cr_floor()
        validate_stability_thresholds(stability_threshold_1, stability_threshold_2)
        controller = StabilityController(stability_threshold_1, stability_threshold_2)
        state = ExchangeState.load(
            total_sol, price, virtual_stablecoin, levercoin_supply, controller, levercoin_fees
        )
        logger.debug("lst context loaded at epoch %d", clock.epoch())
        return cls(clock, state, mint_fees, redeem_fees)

    # ------------- cached state -------------

    @property
    def total_collateral(self) -> UFix64:
        return self.state.total_collateral

    @property
    def total_sol(self) -> UFix64:
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
        """Swap ceiling using the current regime's lower boundary instead of threshold_2."""
        return self.state.max_swappable_stablecoin_to_next_threshold()

    def validate_stablecoin_amount(self, requested: UFix64) -> UFix64:
        return self.state.validate_stablecoin_amount(requested)

    def validate_stablecoin_swap_amount(self, requested: UFix64) -> UFix64:
        return self.state.validate_stablecoin_swap_amount(requested)

    def levercoin_to_stablecoin_fee(self, amount_stablecoin: UFix64) -> FeeExtract:
        return self.state.levercoin_to_stablecoin_fee(amount_stablecoin)

    def stablecoin_to_levercoin_fee(self, amount_stablecoin: UFix64) -> FeeExtract:
        return self.state.stablecoin_to_levercoin_fee(amount_stablecoin)

    # ------------- conversions -------------

    def token_conversion(self, lst_sol_price: LstSolPrice) -> Conversion:
        lst_sol = lst_sol_price.get_epoch_price(self.clock.epoch())
        return Conversion(self.collateral_usd_price, lst_sol)

    def sol_to_stablecoin(self, amount_sol: UFix64) -> UFix64:
        conversion = Conversion(self.collateral_usd_price, UFix64.one(N9))
        return conversion.lst_to_token(amount_sol, self.stablecoin_nav())

    def sol_to_levercoin(self, amount_sol: UFix64) -> UFix64:
        conversion = Conversion(self.collateral_usd_price, UFix64.one(N9))
        return conversion.lst_to_token(amount_sol, self.levercoin_mint_nav())

    # ------------- fees -------------

    def _sol_in(self, lst_sol_price: LstSolPrice, amount_lst: UFix64) -> UFix64:
        new_sol = lst_sol_price.convert_sol(amount_lst, self.clock.epoch())
        with reraise_as(DestinationFeeSolError):
            return self.total_sol + new_sol

    def _sol_out(self, lst_sol_price: LstSolPrice, amount_lst: UFix64) -> UFix64:
        sol_removed = lst_sol_price.convert_sol(amount_lst, self.clock.epoch())
        with reraise_as(DestinationFeeSolError):
            return self.total_sol - sol_removed

    def stablecoin_mint_fee(self, lst_sol_price: LstSolPrice, amount_lst: UFix64) -> FeeExtract:
        """Curve fee at the CR left after minting stablecoin against `amount_lst`."""
        new_total_sol = self._sol_in(lst_sol_price, amount_lst)
        minted = self.token_conversion(lst_sol_price).lst_to_token(amount_lst, self.stablecoin_nav())
        with reraise_as(DestinationFeeStablecoinError):
            new_stablecoin = minted + self.virtual_stablecoin_supply()
        projected_cr = collateral_ratio(new_total_sol, self.collateral_usd_price.lower, new_stablecoin)
        return self.stablecoin_mint_fees.apply_fee(projected_cr, amount_lst)

    def stablecoin_redeem_fee(self, lst_sol_price: LstSolPrice, amount_lst: UFix64) -> FeeExtract:
        """Curve fee at the CR left after redeeming stablecoin for `amount_lst`."""
        new_total_sol = self._sol_out(lst_sol_price, amount_lst)
        redeemed = self.token_conversion(lst_sol_price).lst_to_token(amount_lst, self.stablecoin_nav())
        with reraise_as(DestinationFeeStablecoinError):
            new_stablecoin = self.virtual_stablecoin_supply() - redeemed
        projected_cr = collateral_ratio(new_total_sol, self.collateral_usd_price.lower, new_stablecoin)
        return self.stablecoin_redeem_fees.apply_fee(projected_cr, amount_lst)

    def levercoin_mint_fee(self, lst_sol_price: LstSolPrice, amount_lst: UFix64) -> FeeExtract:
        new_total_sol = self._sol_in(lst_sol_price, amount_lst)
        projected = self.projected_stability_mode(new_total_sol, self.virtual_stablecoin_supply())
        fee = self.state.levercoin_fees.mint_fee(self.select_stability_mode_for_fees(projected))
        return FeeExtract.new(fee, amount_lst)

    def levercoin_redeem_fee(self, lst_sol_price: LstSolPrice, amount_lst: UFix64) -> FeeExtract:
        new_total_sol = self._sol_out(lst_sol_price, amount_lst)
        projected = self.projected_stability_mode(new_total_sol, self.virtual_stablecoin_supply())
        fee = self.state.levercoin_fees.redeem_fee(self.select_stability_mode_for_fees(projected))
        return FeeExtract.new(fee, amount_lst)


__all__ = ["LstExchangeContext"]
