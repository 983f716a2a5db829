"""
Shared fixtures for stablelever tests.

Scenario used across the exchange tests:
  1000 SOL of collateral at $150 (zero-width range), 50_000 levercoin,
  threshold_1 = 1.50 and the curve-implied threshold_2 = 1.30.
Stablecoin supply is a factory argument so each test picks its regime.
"""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from stablelever import (
    FeePair,
    FixedClock,
    LevercoinFees,
    LstExchangeContext,
    ExoExchangeContext,
    LstSolPrice,
    OracleConfig,
    PriceRange,
    TotalSolCache,
    UFix64,
    VirtualStablecoin,
    N2,
    N6,
    N8,
    N9,
)

# -----------------------------
# Scenario constants
# -----------------------------

SLOT = 1_000_000
EPOCH = 600
UNIX_TS = 1_700_000_000

SOL_PRICE_N8 = 15_000_000_000          # $150.00000000
TOTAL_SOL_N9 = 1_000_000_000_000       # 1000 SOL
LEVERCOIN_SUPPLY_N6 = 50_000_000_000   # 50_000 levercoin
LST_SOL_N9 = 1_100_000_000             # 1.1 SOL per LST


def stable(whole: int) -> UFix64:
    """Whole stablecoin units at N6."""
    return UFix64.from_int(whole, N6)


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(SLOT, EPOCH, UNIX_TS)


@pytest.fixture()
def oracle_config() -> OracleConfig:
    # 60s window, 1% confidence tolerance
    return OracleConfig(interval_secs=60, conf_tolerance=UFix64(10_000_000, N9))


@pytest.fixture()
def levercoin_fees() -> LevercoinFees:
    return LevercoinFees(
        normal=FeePair.from_bps(20, 30),
        mode_1=FeePair.from_bps(10, 50),
        mode_2=FeePair.from_bps(5, 100),
    )


@pytest.fixture()
def sol_price() -> PriceRange:
    return PriceRange.one(UFix64(SOL_PRICE_N8, N8))


@pytest.fixture()
def lst_sol_price() -> LstSolPrice:
    return LstSolPrice(UFix64(LST_SOL_N9, N9), EPOCH)


@pytest.fixture()
def make_lst_ctx(clock, oracle_config, levercoin_fees, sol_price) -> Callable[..., LstExchangeContext]:
    def _make(
        stablecoin_supply: int,
        total_sol: int = TOTAL_SOL_N9,
        levercoin_supply: Optional[int] = LEVERCOIN_SUPPLY_N6,
        price=None,
        threshold_1: int = 150,
    ) -> LstExchangeContext:
        return LstExchangeContext.load(
            clock,
            TotalSolCache(EPOCH, UFix64(total_sol, N9)),
            UFix64(threshold_1, N2),
            oracle_config,
            levercoin_fees,
            sol_price if price is None else price,
            VirtualStablecoin(stable(stablecoin_supply)),
            None if levercoin_supply is None else UFix64(levercoin_supply, N6),
        )
    return _make


@pytest.fixture()
def make_exo_ctx(clock, oracle_config, levercoin_fees) -> Callable[..., ExoExchangeContext]:
    """Exo pair with 150_000 units of a $1 asset, same TVL as the LST scenario."""
    def _make(
        stablecoin_supply: int,
        total_collateral: int = 150_000 * 10**9,
        levercoin_supply: Optional[int] = LEVERCOIN_SUPPLY_N6,
    ) -> ExoExchangeContext:
        return ExoExchangeContext.load(
            clock,
            UFix64(total_collateral, N9),
            UFix64(150, N2),
            oracle_config,
            levercoin_fees,
            PriceRange.one(UFix64(100_000_000, N8)),
            VirtualStablecoin(stable(stablecoin_supply)),
            None if levercoin_supply is None else UFix64(levercoin_supply, N6),
        )
    return _make
