"""
Core exception types for stablelever.

These are dependency-free and may be imported by all modules. Every failure
the engine can produce is a distinct class under one of four category bases,
so callers can decide whether to retry with fresher state (`StalenessError`),
reduce the requested amount (`RequestedOverMaxError`), or refuse the
operation outright (`DomainError`).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Type


class EngineError(Exception):
    """Root of all engine failures."""

    @property
    def code(self) -> str:
        """Stable identifier for the failure kind."""
        return type(self).__name__


# ---------------------------------------------------------------------------
# Category bases
# ---------------------------------------------------------------------------

class ArithmeticFault(EngineError):
    """Overflow, underflow or an out-of-range division result."""


class OracleValidationError(EngineError):
    """Oracle price update failed a freshness, trust or spread check."""


class DomainError(EngineError):
    """Operation disallowed by regime, limits or configuration."""


class StalenessError(EngineError):
    """Cached value read outside the epoch it was stamped for."""


# ---------------------------------------------------------------------------
# Fixed-point primitives
# ---------------------------------------------------------------------------

class FixedPointOverflow(ArithmeticFault):
    """Result magnitude exceeds the value's bit width."""


class FixedPointUnderflow(ArithmeticFault):
    """Result is below the representable minimum (e.g. negative unsigned)."""


class FixedPointDivisionByZero(ArithmeticFault):
    """Divisor is zero."""


class ExponentMismatch(ArithmeticFault):
    """Operands carry different decimal exponents without an explicit convert."""


# ---------------------------------------------------------------------------
# Named computation failures (arithmetic category)
# ---------------------------------------------------------------------------

class CollateralRatioError(ArithmeticFault):
    """Collateral ratio could not be computed."""


class CollateralRatioConversionError(ArithmeticFault):
    """Collateral ratio does not fit the fee curve precision."""


class TotalValueLockedError(ArithmeticFault):
    """TVL could not be computed."""


class MaxMintableError(ArithmeticFault):
    """Maximum mintable stablecoin could not be computed."""


class MaxSwappableError(ArithmeticFault):
    """Maximum swappable stablecoin could not be computed."""


class StablecoinNavError(ArithmeticFault):
    """Depeg stablecoin NAV could not be computed."""


class LevercoinNavError(ArithmeticFault):
    """Levercoin NAV could not be computed or no levercoin supply is known."""


class FeeExtractionError(ArithmeticFault):
    """Fee exceeds the amount it is extracted from."""


class DestinationFeeSolError(ArithmeticFault):
    """Projected SOL total overflows or underflows."""


class DestinationFeeStablecoinError(ArithmeticFault):
    """Projected stablecoin supply overflows or underflows."""


class ExoDestinationCollateralError(ArithmeticFault):
    """Projected exogenous collateral total overflows or underflows."""


class ExoDestinationStablecoinError(ArithmeticFault):
    """Projected stablecoin supply of an exo pair overflows or underflows."""


class InterpolationError(ArithmeticFault):
    """Arithmetic failure inside a curve segment."""


class InterpFeeConversionError(ArithmeticFault):
    """Interpolated fee does not convert to basis points."""


class ConversionError(ArithmeticFault):
    """Base for token and collateral conversion failures."""


class LstToTokenError(ConversionError):
    """LST to protocol token conversion failed."""


class TokenToLstError(ConversionError):
    """Protocol token to LST conversion failed."""


class ExoToTokenError(ConversionError):
    """Exogenous collateral to protocol token conversion failed."""


class TokenToExoError(ConversionError):
    """Protocol token to exogenous collateral conversion failed."""


class StableToLeverError(ConversionError):
    """Stablecoin to levercoin conversion failed."""


class LeverToStableError(ConversionError):
    """Levercoin to stablecoin conversion failed."""


class LstSolPriceConversionError(ConversionError):
    """LST amount could not be priced in SOL."""


class LstLstPriceConversionError(ConversionError):
    """LST amount could not be priced in another LST."""


class LstSolPriceDeltaError(ArithmeticFault):
    """Current LST price is below the previous epoch's price."""


class RebalancePriceConversionError(ArithmeticFault):
    """Rebalance price or CR does not fit a signed 64-bit value."""


class StabilityPoolCapError(ArithmeticFault):
    """Stability pool capitalisation could not be computed."""


class LpTokenError(ArithmeticFault):
    """LP token accounting failed."""


class LpTokenNavError(LpTokenError):
    """LP token NAV could not be computed."""


class LpTokenOutError(LpTokenError):
    """LP token amount for a deposit could not be computed."""


class TokenWithdrawError(ArithmeticFault):
    """Withdrawal amount could not be computed."""


class StablecoinToSwapError(ArithmeticFault):
    """Stablecoin amount to swap out of the pool could not be computed."""


class TotalSolCacheOverflowError(ArithmeticFault):
    """Increment overflows the cached SOL total."""


class TotalSolCacheUnderflowError(ArithmeticFault):
    """Decrement underflows the cached SOL total."""


class MintOverflowError(ArithmeticFault):
    """Minting overflows the virtual stablecoin supply."""


class BurnUnderflowError(ArithmeticFault):
    """Burning underflows the virtual stablecoin supply."""


class SlippageArithmeticError(ArithmeticFault):
    """Tolerable amount could not be computed."""


class FundingRateApplyError(ArithmeticFault):
    """Funding rate application overflowed."""


class YieldHarvestAllocationError(ArithmeticFault):
    """Harvest allocation overflowed."""


# ---------------------------------------------------------------------------
# Oracle validation
# ---------------------------------------------------------------------------

class OracleConfidenceError(OracleValidationError):
    """Confidence interval is too wide relative to the price."""


class OracleExponentError(OracleValidationError):
    """Price exponent is unsupported or does not match the expected one."""


class OracleNegativePriceError(OracleValidationError):
    """Price is zero or negative."""


class OracleNegativeTimeError(OracleValidationError):
    """Publish time or clock time is not positive."""


class OracleOutdatedError(OracleValidationError):
    """Price was not published within the configured age window."""


class OraclePriceRangeError(OracleValidationError):
    """Price minus or plus confidence is not representable."""


class OracleSlotInvalidError(OracleValidationError):
    """Posted slot is in the future or too far in the past."""


class OracleVerificationLevelError(OracleValidationError):
    """Price update is not fully verified."""


class SwitchboardStaleError(OracleValidationError):
    """Switchboard quote is older than the configured window."""


class SwitchboardInvalidValueError(OracleValidationError):
    """Switchboard quote carries no feed or a negative value."""


class SwitchboardPriceRangeError(OracleValidationError):
    """Switchboard value does not fit the target precision."""


# ---------------------------------------------------------------------------
# Domain / regime
# ---------------------------------------------------------------------------

class StabilityValidationError(DomainError):
    """Stability thresholds are malformed or out of order."""


class InvalidFeesError(DomainError):
    """Configured fee is outside its allowed range."""


class CurveValidationError(DomainError):
    """Interpolation points are malformed."""


class InterpInsufficientPointsError(CurveValidationError):
    """Curve has fewer than two points."""


class InterpPointsNotMonotonicError(CurveValidationError):
    """Curve x values are not strictly increasing."""


class InterpOutOfDomainError(DomainError):
    """Lookup x lies outside the curve's domain."""


class TargetCollateralRatioTooLowError(DomainError):
    """Target collateral ratio must be above 1.0."""


class NoNextStabilityThresholdError(DomainError):
    """No lower threshold exists for the current regime."""


class RequestedOverMaxError(DomainError):
    """Requested amount exceeds a computed maximum."""


class RequestedStablecoinOverMaxMintableError(RequestedOverMaxError):
    """Requested stablecoin mint exceeds the maximum mintable."""


class RequestedStablecoinOverMaxSwappableError(RequestedOverMaxError):
    """Requested stablecoin swap exceeds the maximum swappable."""


class NoValidFeeError(DomainError):
    """Operation is refused in the current stability regime."""


class NoValidStablecoinMintFeeError(NoValidFeeError):
    """Stablecoin cannot be minted at this collateral ratio."""


class NoValidLevercoinMintFeeError(NoValidFeeError):
    """Levercoin cannot be minted in this regime."""


class NoValidLevercoinRedeemFeeError(NoValidFeeError):
    """Levercoin cannot be redeemed in this regime."""


class NoValidSwapFeeError(NoValidFeeError):
    """Swap is refused in this regime."""


class RebalanceCurveConfigError(DomainError):
    """Rebalance CI multipliers are malformed."""


class RebalancePriceConstructionError(DomainError):
    """Rebalance floor price is not positive or not below the ceiling."""


class RebalanceInactiveError(DomainError):
    """Rebalancing is inactive at this collateral ratio."""


class RebalanceSellInactiveError(RebalanceInactiveError):
    """Sell-side rebalancing is inactive at this collateral ratio."""


class RebalanceBuyInactiveError(RebalanceInactiveError):
    """Buy-side rebalancing is inactive at this collateral ratio."""


class SlippageExceededError(DomainError):
    """Output is below the tolerable amount."""


class MintZeroError(DomainError):
    """Cannot mint a zero amount."""


class BurnZeroError(DomainError):
    """Cannot burn a zero amount."""


class FundingRateValidationError(DomainError):
    """Funding rate is zero or above the maximum."""


class YieldHarvestConfigError(DomainError):
    """Yield harvest allocation or fee is out of range."""


# ---------------------------------------------------------------------------
# Staleness
# ---------------------------------------------------------------------------

class TotalSolCacheOutdatedError(StalenessError):
    """Total SOL cache is not valid for the current epoch."""


class TotalSolCacheIncrementError(StalenessError):
    """Cannot increment total SOL cache stamped for another epoch."""


class TotalSolCacheDecrementError(StalenessError):
    """Cannot decrement total SOL cache stamped for another epoch."""


class LstSolPriceOutdatedError(StalenessError):
    """LST price is not from the current epoch."""


class LstSolPriceEpochOrderError(StalenessError):
    """LST price delta requires a strictly later epoch."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@contextmanager
def reraise_as(exc_type: Type[EngineError], message: str = "") -> Iterator[None]:
    """Map an `ArithmeticFault` raised inside the block to `exc_type`.

    Other engine errors (staleness, domain, oracle) pass through untouched.
    """
    try:
        yield
    except ArithmeticFault as exc:
        if isinstance(exc, exc_type):
            raise
        raise exc_type(message or str(exc)) from exc


__all__ = [name for name, obj in list(globals().items())
           if isinstance(obj, type) and issubclass(obj, EngineError)] + ["reraise_as"]
