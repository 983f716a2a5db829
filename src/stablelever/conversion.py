"""
Conversions between collateral and protocol tokens.

- Conversion: LST (N9) <-> token (N6) through an LST/SOL rate (N9) and a
  SOL/USD price range (N8).
- ExoConversion: exogenous collateral (N9) <-> token (N6) priced directly in USD.
- SwapConversion: stablecoin <-> levercoin at their NAVs.

Minting reads the lower USD bound and redeeming the upper bound; every step
floors. A round trip therefore never returns more than went in.
"""

from __future__ import annotations

from dataclasses import dataclass

from .core.constants import N6, N8, N9
from .core.exc import (
    ExoToTokenError,
    LeverToStableError,
    LstToTokenError,
    StableToLeverError,
    TokenToExoError,
    TokenToLstError,
    reraise_as,
)
from .core.fixed import UFix64
from .oracle import PriceRange


@dataclass(frozen=True)
class Conversion:
    """LST <-> protocol token at a fixed epoch's LST/SOL rate."""
    usd_sol_price: PriceRange
    lst_sol_price: UFix64

    def lst_to_token(self, amount_lst: UFix64, token_nav: UFix64) -> UFix64:
        with reraise_as(LstToTokenError):
            sol = amount_lst.mul_div_floor(self.lst_sol_price, UFix64.one(N9))
            usd = sol.mul_div_floor(self.usd_sol_price.lower, token_nav.convert(N8))
            return usd.convert(N6)

    def token_to_lst(self, amount_token: UFix64, token_nav: UFix64) -> UFix64:
        with reraise_as(TokenToLstError):
            sol = amount_token.convert(N9).mul_div_floor(token_nav.convert(N8), self.usd_sol_price.upper)
            return sol.mul_div_floor(UFix64.one(N9), self.lst_sol_price)


@dataclass(frozen=True)
class ExoConversion:
    """Exogenous collateral <-> protocol token."""
    collateral_usd_price: PriceRange

    def exo_to_token(self, amount_collateral: UFix64, token_nav: UFix64) -> UFix64:
        with reraise_as(ExoToTokenError):
            usd = amount_collateral.mul_div_floor(self.collateral_usd_price.lower, token_nav.convert(N8))
            return usd.convert(N6)

    def token_to_exo(self, amount_token: UFix64, token_nav: UFix64) -> UFix64:
        with reraise_as(TokenToExoError):
            return amount_token.convert(N9).mul_div_floor(token_nav.convert(N8), self.collateral_usd_price.upper)


@dataclass(frozen=True)
class SwapConversion:
    """Stablecoin <-> levercoin; levercoin is bought at its upper NAV and sold at its lower."""
    stablecoin_nav: UFix64
    levercoin_nav: PriceRange

    def stable_to_lever(self, amount_stable: UFix64) -> UFix64:
        with reraise_as(StableToLeverError):
            usd = amount_stable.mul_div_floor(self.stablecoin_nav, UFix64.one(N6))
            return usd.mul_div_floor(UFix64.one(N6), self.levercoin_nav.upper)

    def lever_to_stable(self, amount_lever: UFix64) -> UFix64:
        with reraise_as(LeverToStableError):
            usd = amount_lever.mul_div_floor(self.levercoin_nav.lower, UFix64.one(N6))
            return usd.mul_div_floor(UFix64.one(N6), self.stablecoin_nav)


__all__ = [
    "Conversion",
    "ExoConversion",
    "SwapConversion",
]
