import pytest
from pydantic import ValidationError

from stablelever import (
    N4,
    N6,
    N8,
    N9,
    UFix64,
    AssetSwapConfig,
    FundingRateConfig,
    LstSwapConfig,
    OracleConfig,
    SlippageConfig,
    YieldHarvestConfig,
)
from stablelever.core.exc import (
    ExponentMismatch,
    FundingRateValidationError,
    InvalidFeesError,
    SlippageExceededError,
    YieldHarvestConfigError,
)


# -----------------------------
# Oracle
# -----------------------------

def test_oracle_config_frozen():
    cfg = OracleConfig(interval_secs=60, conf_tolerance=UFix64(10_000_000, N9))
    with pytest.raises(ValidationError):
        cfg.interval_secs = 30


def test_oracle_config_validation():
    with pytest.raises(ExponentMismatch):
        OracleConfig(interval_secs=60, conf_tolerance=UFix64(1, N6))
    with pytest.raises(ValidationError):
        OracleConfig(interval_secs=-1, conf_tolerance=UFix64(1, N9))
    with pytest.raises(ValidationError):
        OracleConfig(interval_secs=60, conf_tolerance=5)


# -----------------------------
# Slippage
# -----------------------------

@pytest.mark.parametrize(
    "expected,tol_bps,out,ok",
    [
        (1_201_346, 20, 1_198_942, False),        # tolerable is 1_198_943
        (99_411_501, 10, 99_312_089, True),
        (1_000_000, 100, 990_000, True),
        (1_000_000, 100, 989_999, False),
    ],
)
def test_slippage(expected, tol_bps, out, ok):
    cfg = SlippageConfig(expected_token_out=UFix64(expected, N6), slippage_tolerance=UFix64(tol_bps, N4))
    print(f"[slippage] expected={expected} tol={tol_bps}bps out={out} tolerable={cfg.tolerable_amount().bits}")
    if ok:
        cfg.validate_token_out(UFix64(out, N6))
    else:
        with pytest.raises(SlippageExceededError):
            cfg.validate_token_out(UFix64(out, N6))


# -----------------------------
# Swap fees
# -----------------------------

@pytest.mark.parametrize("model", [LstSwapConfig, AssetSwapConfig])
@pytest.mark.parametrize("bps", [0, 10_000])
def test_swap_fee_bounds(model, bps):
    with pytest.raises(InvalidFeesError):
        model(fee=UFix64(bps, N4))


def test_swap_fee_apply():
    got = LstSwapConfig(fee=UFix64(5, N4)).apply_swap_fee(UFix64(1_000_000_000, N9))
    assert got.fees_extracted == UFix64(500_000, N9)
    got = AssetSwapConfig(fee=UFix64(5, N4)).apply_fee(UFix64(1_000_000_000, N9))
    assert got.amount_remaining == UFix64(999_500_000, N9)


# -----------------------------
# Funding / yield
# -----------------------------

def test_funding_rate_apply():
    cfg = FundingRateConfig(rate=UFix64(38_462, N8))
    assert cfg.apply(UFix64(1_000_000_000_000, N6)) == UFix64(384_620_000, N6)


@pytest.mark.parametrize("bits,ok", [(0, False), (1, True), (60_000, True), (60_001, False)])
def test_funding_rate_bounds(bits, ok):
    if ok:
        FundingRateConfig(rate=UFix64(bits, N8))
    else:
        with pytest.raises(FundingRateValidationError):
            FundingRateConfig(rate=UFix64(bits, N8))


def test_yield_harvest():
    cfg = YieldHarvestConfig(allocation=UFix64(5_000, N4), fee=UFix64(100, N4))
    assert cfg.apply_allocation(UFix64(1_000_000, N6)) == UFix64(500_000, N6)
    got = cfg.apply_fee(UFix64(1_000_000, N6))
    assert (got.fees_extracted.bits, got.amount_remaining.bits) == (10_000, 990_000)


@pytest.mark.parametrize("allocation,fee", [(0, 100), (10_001, 100), (5_000, 0), (5_000, 10_001)])
def test_yield_harvest_bounds(allocation, fee):
    with pytest.raises(YieldHarvestConfigError):
        YieldHarvestConfig(allocation=UFix64(allocation, N4), fee=UFix64(fee, N4))
