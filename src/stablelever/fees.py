"""
Fee tables and fee extraction.

- FeeExtract: `fees_extracted` rounds up, `amount_remaining` is the exact
  difference, so the two always sum to the input amount.
- FeePair / StablecoinFees / LevercoinFees: flat basis-point fees (N4) selected
  by stability regime. Regimes that refuse an operation raise a
  `NoValidFeeError` subclass.
- InterpolatedMintFees / InterpolatedRedeemFees: stablecoin fees read off a
  fee curve at the projected collateral ratio, with distinct clamp policies at
  the curve boundaries.

# Alignment notes:
# - Curve lookups narrow the N9 collateral ratio to N5 (truncating) before
#   interpolation; the N5 curve fee is applied at its own precision.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .core.constants import FEE_CURVE_EXPONENT, N2, N4
from .core.exc import (
    CollateralRatioConversionError,
    FeeExtractionError,
    InterpFeeConversionError,
    InvalidFeesError,
    NoValidLevercoinMintFeeError,
    NoValidLevercoinRedeemFeeError,
    NoValidStablecoinMintFeeError,
    NoValidSwapFeeError,
    reraise_as,
)
from .core.fixed import IFix64, UFix64
from .core.interp import FixInterp
from .stability import StabilityMode

logger = logging.getLogger(__name__)


# ----------------------------
# Fee extraction
# ----------------------------

@dataclass(frozen=True)
class FeeExtract:
    """Fee taken from an amount, and what is left of it."""
    fees_extracted: UFix64
    amount_remaining: UFix64

    @classmethod
    def new(cls, fee: UFix64, amount_in: UFix64) -> "FeeExtract":
        """Extract `fee` (a fraction at its own exponent) from `amount_in`.

        Fees above 100% cannot be taken from the amount and raise FeeExtractionError.
        """
        with reraise_as(FeeExtractionError, f"cannot extract fee {fee} from {amount_in}"):
            fees_extracted = amount_in.mul_div_ceil(fee, UFix64.one(fee.exponent))
            amount_remaining = amount_in - fees_extracted
        return cls(fees_extracted, amount_remaining)


# ----------------------------
# Flat regime fee tables
# ----------------------------

@dataclass(frozen=True)
class FeePair:
    """Mint and redeem fee in basis points (N4), each strictly below 100%."""
    mint: UFix64
    redeem: UFix64

    def __post_init__(self):
        one = UFix64.one(N4)
        for name, fee in (("mint", self.mint), ("redeem", self.redeem)):
            if fee.exponent != N4:
                raise InvalidFeesError(f"{name} fee must be in basis points, got exponent {fee.exponent}")
            if not fee < one:
                raise InvalidFeesError(f"{name} fee must be below 100%, got {fee}")

    @classmethod
    def from_bps(cls, mint: int, redeem: int) -> "FeePair":
        return cls(UFix64(mint, N4), UFix64(redeem, N4))


@dataclass(frozen=True)
class StablecoinFees:
    """Stablecoin fees: mint refused from Mode2 down, redeem free from Mode2 down."""
    normal: FeePair
    mode_1: FeePair

    def mint_fee(self, mode: StabilityMode) -> UFix64:
        if mode == StabilityMode.NORMAL:
            return self.normal.mint
        if mode == StabilityMode.MODE_1:
            return self.mode_1.mint
        raise NoValidStablecoinMintFeeError(f"stablecoin mint disabled in {mode}")

    def redeem_fee(self, mode: StabilityMode) -> UFix64:
        if mode == StabilityMode.NORMAL:
            return self.normal.redeem
        if mode == StabilityMode.MODE_1:
            return self.mode_1.redeem
        return UFix64.zero(N4)


@dataclass(frozen=True)
class LevercoinFees:
    """Levercoin fees per regime; mint and redeem are refused in Depeg."""
    normal: FeePair
    mode_1: FeePair
    mode_2: FeePair

    def _pair(self, mode: StabilityMode) -> FeePair:
        return {
            StabilityMode.NORMAL: self.normal,
            StabilityMode.MODE_1: self.mode_1,
            StabilityMode.MODE_2: self.mode_2,
        }[mode]

    def mint_fee(self, mode: StabilityMode) -> UFix64:
        if mode == StabilityMode.DEPEG:
            raise NoValidLevercoinMintFeeError("levercoin mint disabled in Depeg")
        return self._pair(mode).mint

    def redeem_fee(self, mode: StabilityMode) -> UFix64:
        if mode == StabilityMode.DEPEG:
            raise NoValidLevercoinRedeemFeeError("levercoin redeem disabled in Depeg")
        return self._pair(mode).redeem

    def swap_to_stablecoin_fee(self, mode: StabilityMode) -> UFix64:
        """Levercoin -> stablecoin swaps pay the redeem fee; refused from Mode2 down."""
        if mode >= StabilityMode.MODE_2:
            raise NoValidSwapFeeError(f"levercoin to stablecoin swap disabled in {mode}")
        return self._pair(mode).redeem

    def swap_from_stablecoin_fee(self, mode: StabilityMode) -> UFix64:
        """Stablecoin -> levercoin swaps pay the mint fee; refused in Depeg."""
        if mode == StabilityMode.DEPEG:
            raise NoValidSwapFeeError("stablecoin to levercoin swap disabled in Depeg")
        return self._pair(mode).mint


# ----------------------------
# Interpolated stablecoin fees
# ----------------------------

def narrow_cr(cr: UFix64) -> IFix64:
    """Truncate an N9 collateral ratio to the signed N5 curve domain."""
    narrowed = cr.convert(FEE_CURVE_EXPONENT).to_signed()
    if narrowed is None:
        raise CollateralRatioConversionError(f"collateral ratio {cr} does not fit the fee curve domain")
    return narrowed


class _InterpolatedFees:
    """Fee curve controller; subclasses define the boundary policy in `fee_inner`."""

    def __init__(self, curve: FixInterp):
        self._curve = curve

    @property
    def curve(self) -> FixInterp:
        return self._curve

    def fee_inner(self, cr: IFix64) -> IFix64:
        raise NotImplementedError

    def fee(self, cr: UFix64) -> UFix64:
        """Curve fee at an N9 collateral ratio."""
        fee = self.fee_inner(narrow_cr(cr)).to_unsigned()
        if fee is None:
            raise InterpFeeConversionError("negative fee from curve")
        return fee

    def apply_fee(self, cr: UFix64, amount_in: UFix64) -> FeeExtract:
        fee = self.fee(cr)
        logger.debug("%s: cr=%s fee=%s amount=%s", type(self).__name__, cr, fee, amount_in)
        return FeeExtract.new(fee, amount_in)

    def cr_floor(self) -> UFix64:
        """Lowest collateral ratio in the curve's domain, at N2."""
        x_min = self._curve.x_min().to_unsigned()
        floor = x_min.checked_convert(N2) if x_min is not None else None
        if floor is None:
            raise InterpFeeConversionError("curve floor does not fit N2")
        return floor


class InterpolatedMintFees(_InterpolatedFees):
    """Mint curve: refused below the lowest ratio, flat at the last point above."""

    def fee_inner(self, cr: IFix64) -> IFix64:
        if cr < self._curve.x_min():
            raise NoValidStablecoinMintFeeError(
                f"collateral ratio {cr} below mint curve floor {self._curve.x_min()}"
            )
        if cr > self._curve.x_max():
            return self._curve.y_max()
        return self._curve.interpolate(cr)


class InterpolatedRedeemFees(_InterpolatedFees):
    """Redeem curve: flat at both ends so redemption is always quotable."""

    def fee_inner(self, cr: IFix64) -> IFix64:
        if cr < self._curve.x_min():
            return self._curve.y_min()
        if cr > self._curve.x_max():
            return self._curve.y_max()
        return self._curve.interpolate(cr)


__all__ = [
    "FeeExtract",
    "FeePair",
    "StablecoinFees",
    "LevercoinFees",
    "narrow_cr",
    "InterpolatedMintFees",
    "InterpolatedRedeemFees",
]
