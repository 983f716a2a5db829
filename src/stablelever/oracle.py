"""
Oracle price validation for the primary (Pyth) and alternate (Switchboard) feeds.

Pyth updates are validated in a fixed order, each step with its own error:

  1. verification level must be FULL             -> OracleVerificationLevelError
  2. publish time within [now - interval, now]    -> OracleNegativeTimeError / OracleOutdatedError
  3. posted slot within interval / 0.4s slots     -> OracleSlotInvalidError
  4. exponent supported (-2 ... -9)               -> OracleExponentError
  5. price strictly positive                      -> OracleNegativePriceError
  6. conf / price within tolerance                -> OracleConfidenceError

Prices are normalised to N9 and the confidence interval becomes
`PriceRange(lower=spot - conf, upper=spot + conf)`. Switchboard quotes carry
no confidence figure, so their range collapses to a single price and only
slot staleness is checked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Tuple

from .clock import ChainClock
from .config import OracleConfig
from .core.constants import (
    N9,
    PYTH_EXP_MAX,
    PYTH_EXP_MIN,
    SLOT_TIME_CENTIS,
    SWITCHBOARD_SCALE,
    SWITCHBOARD_SLOT_MS,
)
from .core.exc import (
    ExponentMismatch,
    FixedPointOverflow,
    OracleConfidenceError,
    OracleExponentError,
    OracleNegativePriceError,
    OracleNegativeTimeError,
    OracleOutdatedError,
    OraclePriceRangeError,
    OracleSlotInvalidError,
    OracleVerificationLevelError,
    SwitchboardInvalidValueError,
    SwitchboardPriceRangeError,
    SwitchboardStaleError,
    reraise_as,
)
from .core.fixed import UFix64

logger = logging.getLogger(__name__)


# ----------------------------
# Price values
# ----------------------------

@dataclass(frozen=True)
class PriceRange:
    """Conservative price bounds: mint against `lower`, redeem against `upper`."""
    lower: UFix64
    upper: UFix64

    def __post_init__(self):
        if self.lower.exponent != self.upper.exponent:
            raise ExponentMismatch("PriceRange bounds must share an exponent")
        if self.lower > self.upper:
            raise OraclePriceRangeError(f"lower {self.lower} above upper {self.upper}")

    @classmethod
    def from_conf(cls, price: UFix64, conf: UFix64) -> "PriceRange":
        with reraise_as(OraclePriceRangeError, f"price {price} +/- conf {conf} not representable"):
            return cls(price - conf, price + conf)

    @classmethod
    def one(cls, price: UFix64) -> "PriceRange":
        """Zero-width range at `price`."""
        return cls(price, price)

    @property
    def exponent(self) -> int:
        return self.lower.exponent

    def convert(self, exponent: int) -> "PriceRange":
        """Rescale both bounds; on downscale `lower` truncates and `upper` rounds up."""
        return PriceRange(self.lower.convert(exponent), self.upper.convert_ceil(exponent))


@dataclass(frozen=True)
class OraclePrice:
    """Validated spot price and confidence interval at N9."""
    spot: UFix64
    conf: UFix64

    def price_range(self) -> PriceRange:
        return PriceRange.from_conf(self.spot, self.conf)


# ----------------------------
# Raw feed records
# ----------------------------

class VerificationLevel(Enum):
    """Trust level of a Pyth price update."""
    PARTIAL = "partial"
    FULL = "full"


@dataclass(frozen=True)
class PythPriceUpdate:
    """Raw Pyth price message plus the slot it was posted in."""
    price: int
    conf: int
    exponent: int
    publish_time: int
    posted_slot: int
    verification_level: VerificationLevel = VerificationLevel.FULL

    def query_price(self, clock: ChainClock, config: OracleConfig, exponent: int = N9) -> PriceRange:
        return query_pyth_price(clock, self, config, exponent)


@dataclass(frozen=True)
class SwitchboardQuote:
    """Switchboard quote: feed values as scale-18 decimal mantissas, and the update slot."""
    slot: int
    feeds: Tuple[int, ...] = field(default_factory=tuple)

    def query_price(self, clock: ChainClock, config: OracleConfig, exponent: int = N9) -> PriceRange:
        return query_switchboard_price(clock, self, config, exponent)


class OracleFeed(Protocol):
    """Any price source that yields a validated PriceRange at the requested exponent."""

    def query_price(self, clock: ChainClock, config: OracleConfig, exponent: int = N9) -> PriceRange: ...


# ----------------------------
# Pyth validation steps
# ----------------------------

def validate_verification_level(level: VerificationLevel) -> None:
    if level is not VerificationLevel.FULL:
        raise OracleVerificationLevelError(f"verification level {level.value} is not full")


def validate_publish_time(publish_time: int, interval_secs: int, clock_time: int) -> None:
    """Publish time must lie in the inclusive window [clock_time - interval, clock_time]."""
    if publish_time <= 0 or clock_time <= 0:
        raise OracleNegativeTimeError(f"non-positive time: publish={publish_time} clock={clock_time}")
    if publish_time + interval_secs < clock_time:
        raise OracleOutdatedError(
            f"price published at {publish_time} is older than {interval_secs}s at {clock_time}"
        )


def slot_interval(interval_secs: int) -> int:
    """Number of 400ms slots in `interval_secs`."""
    return interval_secs * 100 // SLOT_TIME_CENTIS


def validate_posted_slot(posted_slot: int, interval_secs: int, current_slot: int) -> None:
    delta = current_slot - posted_slot
    if delta < 0 or delta > slot_interval(interval_secs):
        raise OracleSlotInvalidError(
            f"posted slot {posted_slot} outside window of {slot_interval(interval_secs)} slots at {current_slot}"
        )


def _validate_exponent(exp: int) -> None:
    if not PYTH_EXP_MIN <= exp <= PYTH_EXP_MAX:
        raise OracleExponentError(f"unsupported exponent {exp}")


def normalize_pyth_price(price: int, exp: int) -> UFix64:
    """Rescale a raw Pyth magnitude at exponent `exp` (-2 ... -9) to N9."""
    _validate_exponent(exp)
    try:
        return UFix64(price, exp).convert(N9)
    except FixedPointOverflow as exc:
        raise OracleExponentError(f"price {price} at exponent {exp} overflows N9") from exc


def validate_price(price: int, exp: int) -> UFix64:
    _validate_exponent(exp)
    if price <= 0:
        raise OracleNegativePriceError(f"non-positive price {price}")
    return normalize_pyth_price(price, exp)


def validate_conf(price: UFix64, conf: UFix64, tolerance: UFix64) -> UFix64:
    """conf / price must not exceed `tolerance` (all N9)."""
    ratio = conf.mul_div_floor(UFix64.one(N9), price)
    if ratio > tolerance:
        raise OracleConfidenceError(f"confidence ratio {ratio} exceeds tolerance {tolerance}")
    return conf


def query_pyth_oracle(clock: ChainClock, update: PythPriceUpdate, config: OracleConfig) -> OraclePrice:
    """Validate a Pyth update and return spot and confidence at N9."""
    validate_verification_level(update.verification_level)
    validate_publish_time(update.publish_time, config.interval_secs, clock.unix_timestamp())
    validate_posted_slot(update.posted_slot, config.interval_secs, clock.slot())
    spot = validate_price(update.price, update.exponent)
    conf = normalize_pyth_price(update.conf, update.exponent)
    validate_conf(spot, conf, config.conf_tolerance)
    logger.debug("pyth price accepted: spot=%s conf=%s", spot, conf)
    return OraclePrice(spot, conf)


def query_pyth_price(
    clock: ChainClock,
    update: PythPriceUpdate,
    config: OracleConfig,
    exponent: int = N9,
) -> PriceRange:
    """Validated Pyth price range, rescaled to `exponent`."""
    return query_pyth_oracle(clock, update, config).price_range().convert(exponent)


# ----------------------------
# Switchboard
# ----------------------------

def validate_switchboard_staleness(quote_slot: int, interval_secs: int, current_slot: int) -> None:
    max_slots = interval_secs * 1000 // SWITCHBOARD_SLOT_MS
    if max(current_slot - quote_slot, 0) > max_slots:
        raise SwitchboardStaleError(f"quote slot {quote_slot} older than {max_slots} slots at {current_slot}")


def switchboard_value_to_fixed(mantissa: int, exponent: int) -> UFix64:
    """Rescale a scale-18 mantissa to `exponent` (truncating)."""
    if mantissa < 0:
        raise SwitchboardInvalidValueError(f"negative switchboard value {mantissa}")
    shift = SWITCHBOARD_SCALE + exponent
    bits = mantissa // 10 ** shift if shift >= 0 else mantissa * 10 ** -shift
    with reraise_as(SwitchboardPriceRangeError, f"value {mantissa} does not fit at exponent {exponent}"):
        return UFix64(bits, exponent)


def query_switchboard_price(
    clock: ChainClock,
    quote: SwitchboardQuote,
    config: OracleConfig,
    exponent: int = N9,
) -> PriceRange:
    validate_switchboard_staleness(quote.slot, config.interval_secs, clock.slot())
    if not quote.feeds:
        raise SwitchboardInvalidValueError("quote carries no feeds")
    spot = switchboard_value_to_fixed(quote.feeds[0], exponent)
    logger.debug("switchboard price accepted: spot=%s", spot)
    return PriceRange.one(spot)


__all__ = [
    "PriceRange",
    "OraclePrice",
    "VerificationLevel",
    "PythPriceUpdate",
    "SwitchboardQuote",
    "OracleFeed",
    "validate_verification_level",
    "validate_publish_time",
    "slot_interval",
    "validate_posted_slot",
    "normalize_pyth_price",
    "validate_price",
    "validate_conf",
    "query_pyth_oracle",
    "query_pyth_price",
    "validate_switchboard_staleness",
    "switchboard_value_to_fixed",
    "query_switchboard_price",
]
