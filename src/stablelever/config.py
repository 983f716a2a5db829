"""
Immutable configuration models.

Each model is a frozen pydantic model whose fixed-point fields are validated
for exponent and range at construction. Range violations raise the engine's
own typed errors (e.g. `InvalidFeesError`) rather than a pydantic
`ValidationError`, so callers handle configuration faults like any other
engine failure; malformed types still surface as `ValidationError`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .core.constants import FUNDING_RATE_MAX_BITS, N2, N4, N8, N9
from .core.exc import (
    ExponentMismatch,
    FundingRateApplyError,
    FundingRateValidationError,
    InvalidFeesError,
    RebalanceCurveConfigError,
    SlippageArithmeticError,
    SlippageExceededError,
    YieldHarvestAllocationError,
    YieldHarvestConfigError,
    reraise_as,
)
from .core.fixed import UFix64
from .fees import FeeExtract


def _require_exponent(value: UFix64, exponent: int, field: str) -> UFix64:
    if value.exponent != exponent:
        raise ExponentMismatch(f"{field} must have exponent {exponent}, got {value.exponent}")
    return value


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


# =============================================================================
# ORACLE
# =============================================================================


class OracleConfig(_FrozenModel):
    """Oracle freshness window and maximum confidence/price ratio."""

    interval_secs: int = Field(..., ge=0, description="Maximum price age in seconds")
    conf_tolerance: UFix64 = Field(..., description="Maximum conf/price ratio (N9)")

    @field_validator("conf_tolerance")
    @classmethod
    def _check_tolerance(cls, v: UFix64) -> UFix64:
        return _require_exponent(v, N9, "conf_tolerance")


# =============================================================================
# REBALANCING
# =============================================================================


class RebalanceCurveConfig(_FrozenModel):
    """Confidence-interval multipliers for the rebalance price curve endpoints."""

    floor_mult: UFix64 = Field(..., description="CI multiplier below spot (N2)")
    ceil_mult: UFix64 = Field(..., description="CI multiplier above spot (N2)")

    @field_validator("floor_mult", "ceil_mult")
    @classmethod
    def _check_mult(cls, v: UFix64, info) -> UFix64:
        _require_exponent(v, N2, info.field_name)
        if v.is_zero():
            raise RebalanceCurveConfigError(f"{info.field_name} must be > 0")
        return v


# =============================================================================
# SLIPPAGE
# =============================================================================


class SlippageConfig(_FrozenModel):
    """Expected output and tolerated shortfall (N4) for a quoted operation."""

    expected_token_out: UFix64
    slippage_tolerance: UFix64

    @field_validator("slippage_tolerance")
    @classmethod
    def _check_tolerance(cls, v: UFix64) -> UFix64:
        return _require_exponent(v, N4, "slippage_tolerance")

    def tolerable_amount(self) -> UFix64:
        with reraise_as(SlippageArithmeticError):
            factor = UFix64.one(N4) - self.slippage_tolerance
            return self.expected_token_out.mul_div_floor(factor, UFix64.one(N4))

    def validate_token_out(self, token_out: UFix64) -> None:
        tolerable = self.tolerable_amount()
        if token_out < tolerable:
            raise SlippageExceededError(f"output {token_out} below tolerable {tolerable}")


# =============================================================================
# SWAP FEES
# =============================================================================


def _check_swap_fee(v: UFix64) -> UFix64:
    _require_exponent(v, N4, "fee")
    if not (UFix64.zero(N4) < v < UFix64.one(N4)):
        raise InvalidFeesError(f"swap fee must be in (0, 1), got {v}")
    return v


class LstSwapConfig(_FrozenModel):
    """Flat fee for LST-to-LST swaps."""

    fee: UFix64

    @field_validator("fee")
    @classmethod
    def _check_fee(cls, v: UFix64) -> UFix64:
        return _check_swap_fee(v)

    def apply_swap_fee(self, amount: UFix64) -> FeeExtract:
        return FeeExtract.new(self.fee, amount)


class AssetSwapConfig(_FrozenModel):
    """Flat fee for exogenous asset swaps."""

    fee: UFix64

    @field_validator("fee")
    @classmethod
    def _check_fee(cls, v: UFix64) -> UFix64:
        return _check_swap_fee(v)

    def apply_fee(self, amount: UFix64) -> FeeExtract:
        return FeeExtract.new(self.fee, amount)


# =============================================================================
# FUNDING / YIELD
# =============================================================================


class FundingRateConfig(_FrozenModel):
    """Per-epoch funding rate (N8), capped at FUNDING_RATE_MAX_BITS."""

    rate: UFix64

    @field_validator("rate")
    @classmethod
    def _check_rate(cls, v: UFix64) -> UFix64:
        _require_exponent(v, N8, "rate")
        if not (0 < v.bits <= FUNDING_RATE_MAX_BITS):
            raise FundingRateValidationError(f"funding rate must be in (0, {FUNDING_RATE_MAX_BITS}] bits, got {v.bits}")
        return v

    def apply(self, collateral_value_usd: UFix64) -> UFix64:
        with reraise_as(FundingRateApplyError):
            return collateral_value_usd.mul_div_floor(self.rate, UFix64.one(N8))


class YieldHarvestConfig(_FrozenModel):
    """Share of harvested yield sent to the stability pool, and the harvest fee (both N4)."""

    allocation: UFix64
    fee: UFix64

    @model_validator(mode="after")
    def _check_bounds(self) -> "YieldHarvestConfig":
        one = UFix64.one(N4)
        for name in ("allocation", "fee"):
            v = _require_exponent(getattr(self, name), N4, name)
            if v.is_zero() or v > one:
                raise YieldHarvestConfigError(f"{name} must be in (0, 1], got {v}")
        return self

    def apply_allocation(self, stablecoin: UFix64) -> UFix64:
        with reraise_as(YieldHarvestAllocationError):
            return stablecoin.mul_div_floor(self.allocation, UFix64.one(N4))

    def apply_fee(self, stablecoin: UFix64) -> FeeExtract:
        return FeeExtract.new(self.fee, stablecoin)


__all__ = [
    "OracleConfig",
    "RebalanceCurveConfig",
    "SlippageConfig",
    "LstSwapConfig",
    "AssetSwapConfig",
    "FundingRateConfig",
    "YieldHarvestConfig",
]
