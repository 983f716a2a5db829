"""
Epoch-stamped ledger values: virtual stablecoin supply, total SOL cache and
LST/SOL price.

All three are immutable; mutators return a new instance. Staleness is a
read-time comparison against the caller's current epoch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .core.constants import N6, N9
from .core.exc import (
    BurnUnderflowError,
    BurnZeroError,
    ExponentMismatch,
    LstLstPriceConversionError,
    LstSolPriceConversionError,
    LstSolPriceDeltaError,
    LstSolPriceEpochOrderError,
    LstSolPriceOutdatedError,
    MintOverflowError,
    MintZeroError,
    TotalSolCacheDecrementError,
    TotalSolCacheIncrementError,
    TotalSolCacheOutdatedError,
    TotalSolCacheOverflowError,
    TotalSolCacheUnderflowError,
    reraise_as,
)
from .core.fixed import UFix64

logger = logging.getLogger(__name__)


def _check_exponent(value: UFix64, exponent: int, name: str) -> None:
    if value.exponent != exponent:
        raise ExponentMismatch(f"{name} must have exponent {exponent}, got {value.exponent}")


# ----------------------------
# Virtual stablecoin
# ----------------------------

@dataclass(frozen=True)
class VirtualStablecoin:
    """Stablecoin liability counter (N6), tracked apart from the token mint."""
    supply: UFix64 = UFix64.zero(N6)

    def __post_init__(self):
        _check_exponent(self.supply, N6, "supply")

    def mint(self, amount: UFix64) -> "VirtualStablecoin":
        if amount.is_zero():
            raise MintZeroError("cannot mint zero stablecoin")
        with reraise_as(MintOverflowError, f"minting {amount} overflows supply {self.supply}"):
            return VirtualStablecoin(self.supply + amount)

    def burn(self, amount: UFix64) -> "VirtualStablecoin":
        if amount.is_zero():
            raise BurnZeroError("cannot burn zero stablecoin")
        with reraise_as(BurnUnderflowError, f"burning {amount} exceeds supply {self.supply}"):
            return VirtualStablecoin(self.supply - amount)


# ----------------------------
# Total SOL cache
# ----------------------------

@dataclass(frozen=True)
class TotalSolCache:
    """Total SOL-equivalent collateral (N9) and the epoch it was last refreshed in."""
    current_update_epoch: int
    total_sol: UFix64 = UFix64.zero(N9)

    def __post_init__(self):
        _check_exponent(self.total_sol, N9, "total_sol")

    def increment(self, sol_in: UFix64, current_epoch: int) -> "TotalSolCache":
        if current_epoch != self.current_update_epoch:
            raise TotalSolCacheIncrementError(
                f"cache stamped for epoch {self.current_update_epoch}, now {current_epoch}"
            )
        with reraise_as(TotalSolCacheOverflowError):
            return TotalSolCache(self.current_update_epoch, self.total_sol + sol_in)

    def decrement(self, sol_out: UFix64, current_epoch: int) -> "TotalSolCache":
        if current_epoch != self.current_update_epoch:
            raise TotalSolCacheDecrementError(
                f"cache stamped for epoch {self.current_update_epoch}, now {current_epoch}"
            )
        with reraise_as(TotalSolCacheUnderflowError):
            return TotalSolCache(self.current_update_epoch, self.total_sol - sol_out)

    def set(self, total_sol: UFix64, current_epoch: int) -> "TotalSolCache":
        """Restamp the cache with a freshly computed total."""
        logger.debug("total sol cache set to %s at epoch %d", total_sol, current_epoch)
        return TotalSolCache(current_epoch, total_sol)

    def get_validated(self, current_epoch: int) -> UFix64:
        if current_epoch != self.current_update_epoch:
            raise TotalSolCacheOutdatedError(
                f"cache stamped for epoch {self.current_update_epoch}, now {current_epoch}"
            )
        return self.total_sol


# ----------------------------
# LST / SOL price
# ----------------------------

@dataclass(frozen=True)
class LstSolPrice:
    """SOL per LST (N9), valid only in `epoch`."""
    price: UFix64
    epoch: int

    def __post_init__(self):
        _check_exponent(self.price, N9, "price")

    def checked_delta(self, prev: "LstSolPrice") -> UFix64:
        """Price growth since the immediately preceding epoch."""
        if self.epoch != prev.epoch + 1:
            raise LstSolPriceEpochOrderError(
                f"epoch {self.epoch} does not directly follow {prev.epoch}"
            )
        with reraise_as(LstSolPriceDeltaError, f"price fell from {prev.price} to {self.price}"):
            return self.price - prev.price

    def get_epoch_price(self, current_epoch: int) -> UFix64:
        if current_epoch != self.epoch:
            raise LstSolPriceOutdatedError(f"price stamped for epoch {self.epoch}, now {current_epoch}")
        return self.price

    def convert_sol(self, amount_lst: UFix64, current_epoch: int) -> UFix64:
        price = self.get_epoch_price(current_epoch)
        with reraise_as(LstSolPriceConversionError):
            return price.mul_div_floor(amount_lst, UFix64.one(N9))

    def convert_lst_amount(self, current_epoch: int, amount_lst: UFix64, other: "LstSolPrice") -> UFix64:
        """Amount of `other`'s LST worth `amount_lst` of this LST."""
        in_price = self.get_epoch_price(current_epoch)
        out_price = other.get_epoch_price(current_epoch)
        with reraise_as(LstLstPriceConversionError):
            return amount_lst.mul_div_floor(in_price, out_price)


__all__ = [
    "VirtualStablecoin",
    "TotalSolCache",
    "LstSolPrice",
]
