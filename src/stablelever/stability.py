"""
Stability controller: classify the protocol into one of four ordered regimes.

- Regimes are totally ordered: NORMAL < MODE_1 < MODE_2 < DEPEG (worse is greater).
- Thresholds carry two fractional digits (N2) and must satisfy
  threshold_1 > threshold_2 > 1.00.
- Classification compares the N9 collateral ratio against the thresholds
  converted up to N9; a ratio exactly on a threshold belongs to the better regime.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .core.constants import N2, N9
from .core.exc import StabilityValidationError
from .core.fixed import UFix64

logger = logging.getLogger(__name__)


class StabilityMode(IntEnum):
    """Protocol risk regime, ordered from healthiest to worst."""
    NORMAL = 0
    MODE_1 = 1
    MODE_2 = 2
    DEPEG = 3

    def __str__(self) -> str:
        return {0: "Normal", 1: "Mode1", 2: "Mode2", 3: "Depeg"}[int(self)]


def select_worse_mode(current: StabilityMode, projected: StabilityMode) -> StabilityMode:
    """Regime used for fees: an operation is never charged below the current regime."""
    return max(current, projected)


@dataclass(frozen=True)
class StabilityController:
    """Two-threshold regime classifier."""
    stability_threshold_1: UFix64
    stability_threshold_2: UFix64

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        t1 = self.stability_threshold_1
        t2 = self.stability_threshold_2
        if t1.exponent != N2 or t2.exponent != N2:
            raise StabilityValidationError(
                f"thresholds must have exponent {N2}, got {t1.exponent} and {t2.exponent}"
            )
        one = UFix64.one(N2)
        if not (t1 > t2 and t1 > one and t2 > one):
            logger.debug("rejecting thresholds t1=%s t2=%s", t1, t2)
            raise StabilityValidationError(f"require t1 > t2 > 1.00, got t1={t1} t2={t2}")

    def stability_mode(self, collateral_ratio: UFix64) -> StabilityMode:
        if collateral_ratio >= self.stability_threshold_1.convert(N9):
            return StabilityMode.NORMAL
        if collateral_ratio >= self.stability_threshold_2.convert(N9):
            return StabilityMode.MODE_1
        if collateral_ratio >= UFix64.one(N9):
            return StabilityMode.MODE_2
        return StabilityMode.DEPEG

    def next_stability_threshold(self, mode: StabilityMode) -> Optional[UFix64]:
        """Lower boundary of `mode`: the CR at which the next worse regime begins."""
        return {
            StabilityMode.NORMAL: self.stability_threshold_1,
            StabilityMode.MODE_1: self.stability_threshold_2,
            StabilityMode.MODE_2: UFix64.one(N2),
            StabilityMode.DEPEG: None,
        }[mode]

    def prev_stability_threshold(self, mode: StabilityMode) -> Optional[UFix64]:
        """Upper boundary of `mode`: the CR needed to recover to the next better regime."""
        return {
            StabilityMode.NORMAL: None,
            StabilityMode.MODE_1: self.stability_threshold_1,
            StabilityMode.MODE_2: self.stability_threshold_2,
            StabilityMode.DEPEG: UFix64.one(N2),
        }[mode]

    def min_stability_threshold(self) -> UFix64:
        return self.stability_threshold_2


def validate_stability_thresholds(stability_threshold_1: UFix64, stability_threshold_2: UFix64) -> None:
    """Configured threshold_1 must lie strictly above the curve-implied threshold_2."""
    if not stability_threshold_1 > stability_threshold_2:
        raise StabilityValidationError(
            f"threshold_1 {stability_threshold_1} must exceed threshold_2 {stability_threshold_2}"
        )


__all__ = [
    "StabilityMode",
    "StabilityController",
    "select_worse_mode",
    "validate_stability_thresholds",
]
