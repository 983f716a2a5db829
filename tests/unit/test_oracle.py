from dataclasses import replace

import pytest

from stablelever import N8, N9, UFix64, FixedClock, OracleConfig
from stablelever.core.exc import (
    ExponentMismatch,
    OracleConfidenceError,
    OracleExponentError,
    OracleNegativePriceError,
    OracleNegativeTimeError,
    OracleOutdatedError,
    OraclePriceRangeError,
    OracleSlotInvalidError,
    OracleVerificationLevelError,
    OracleValidationError,
    SwitchboardInvalidValueError,
    SwitchboardPriceRangeError,
    SwitchboardStaleError,
)
from stablelever.oracle import (
    OraclePrice,
    PriceRange,
    PythPriceUpdate,
    SwitchboardQuote,
    VerificationLevel,
    normalize_pyth_price,
    query_pyth_oracle,
    query_pyth_price,
    query_switchboard_price,
    slot_interval,
    switchboard_value_to_fixed,
    validate_conf,
    validate_posted_slot,
    validate_publish_time,
)

CLOCK = FixedClock(current_slot=1_000_000, current_epoch=600, current_unix_timestamp=1_700_000_000)
CONFIG = OracleConfig(interval_secs=60, conf_tolerance=UFix64(10_000_000, N9))

GOOD = PythPriceUpdate(
    price=14_640_110_937,
    conf=8_000_000,
    exponent=-8,
    publish_time=1_700_000_000 - 10,
    posted_slot=1_000_000 - 5,
)


# -----------------------------
# PriceRange
# -----------------------------

def test_price_range_from_conf():
    r = PriceRange.from_conf(UFix64(100, N9), UFix64(3, N9))
    assert (r.lower.bits, r.upper.bits) == (97, 103)


def test_price_range_rejects_bad_bounds():
    with pytest.raises(OraclePriceRangeError):
        PriceRange(UFix64(2, N9), UFix64(1, N9))
    with pytest.raises(ExponentMismatch):
        PriceRange(UFix64(1, N8), UFix64(1, N9))
    with pytest.raises(OraclePriceRangeError):
        PriceRange.from_conf(UFix64(5, N9), UFix64(6, N9))


def test_price_range_convert_exact():
    r = PriceRange(UFix64(146_321_109_370, N9), UFix64(146_481_109_370, N9)).convert(N8)
    assert r.lower == UFix64(14_632_110_937, N8)
    assert r.upper == UFix64(14_648_110_937, N8)


def test_price_range_convert_widens():
    # lower truncates, upper rounds up: the downscaled range still covers the original
    r = PriceRange(UFix64(146_321_109_375, N9), UFix64(146_481_109_371, N9)).convert(N8)
    assert r.lower == UFix64(14_632_110_937, N8)
    assert r.upper == UFix64(14_648_110_938, N8)


# -----------------------------
# Individual checks
# -----------------------------

@pytest.mark.parametrize("price,exp,expected", [
    (14_640_110_937, -8, 146_401_109_370),
    (14_640, -2, 146_400_000_000),
    (146_401_109_370, -9, 146_401_109_370),
])
def test_normalize_pyth_price(price, exp, expected):
    assert normalize_pyth_price(price, exp) == UFix64(expected, N9)


@pytest.mark.parametrize("exp", [-1, -10, 0, 5])
def test_normalize_rejects_exponent(exp):
    print(f"[pyth-exponent] exp={exp} -> expect OracleExponentError")
    with pytest.raises(OracleExponentError):
        normalize_pyth_price(1, exp)


def test_normalize_overflow_is_exponent_error():
    with pytest.raises(OracleExponentError):
        normalize_pyth_price(10**18, -2)


@pytest.mark.parametrize("publish,interval,now,ok", [
    (100, 60, 160, True),
    (100, 60, 161, False),
    (100, 0, 100, True),
    (200, 60, 100, True),   # publish after clock time is accepted
])
def test_validate_publish_time(publish, interval, now, ok):
    if ok:
        validate_publish_time(publish, interval, now)
    else:
        with pytest.raises(OracleOutdatedError):
            validate_publish_time(publish, interval, now)


@pytest.mark.parametrize("publish,now", [(0, 100), (-5, 100), (100, 0)])
def test_validate_publish_time_non_positive(publish, now):
    with pytest.raises(OracleNegativeTimeError):
        validate_publish_time(publish, 60, now)


@pytest.mark.parametrize("secs,slots", [(60, 150), (1, 2), (0, 0), (3600, 9000)])
def test_slot_interval(secs, slots):
    assert slot_interval(secs) == slots


@pytest.mark.parametrize("posted,now,ok", [
    (1000, 1150, True),
    (1000, 1000, True),
    (1000, 1151, False),
    (1001, 1000, False),    # posted in the future
])
def test_validate_posted_slot(posted, now, ok):
    if ok:
        validate_posted_slot(posted, 60, now)
    else:
        with pytest.raises(OracleSlotInvalidError):
            validate_posted_slot(posted, 60, now)


@pytest.mark.parametrize("price,conf,tol,ok", [
    (146_401_109_370, 80_000_000, 1_000_000, True),
    (146_401_109_370, 2_000_000_000, 1_000_000, False),
    (1_000_000_000, 10_000_000, 10_000_000, True),   # ratio == tolerance
    (1_000_000_000, 10_000_001, 10_000_000, False),
])
def test_validate_conf(price, conf, tol, ok):
    args = (UFix64(price, N9), UFix64(conf, N9), UFix64(tol, N9))
    if ok:
        assert validate_conf(*args) == UFix64(conf, N9)
    else:
        with pytest.raises(OracleConfidenceError):
            validate_conf(*args)


# -----------------------------
# Full Pyth pipeline
# -----------------------------

def test_query_pyth_oracle_accepts():
    got = query_pyth_oracle(CLOCK, GOOD, CONFIG)
    assert got == OraclePrice(UFix64(146_401_109_370, N9), UFix64(80_000_000, N9))


def test_query_pyth_price_range_at_n8():
    r = GOOD.query_price(CLOCK, CONFIG, N8)
    print(f"[pyth-range] lower={r.lower} upper={r.upper}")
    assert r == query_pyth_price(CLOCK, GOOD, CONFIG, N8)
    assert r.lower == UFix64(14_632_110_937, N8)
    assert r.upper == UFix64(14_648_110_937, N8)


def test_query_pyth_price_n9_feed_keeps_upper_bound():
    update = replace(GOOD, price=146_401_109_375, conf=80_000_001, exponent=-9)
    r = query_pyth_price(CLOCK, update, CONFIG, N8)
    print(f"[pyth-range-n9] lower={r.lower} upper={r.upper}")
    assert r.lower == UFix64(14_632_110_937, N8)
    assert r.upper == UFix64(14_648_110_938, N8)


@pytest.mark.parametrize(
    "changes,exc",
    [
        ({"verification_level": VerificationLevel.PARTIAL}, OracleVerificationLevelError),
        ({"publish_time": 1_700_000_000 - 61}, OracleOutdatedError),
        ({"publish_time": 0}, OracleNegativeTimeError),
        ({"posted_slot": 1_000_000 - 151}, OracleSlotInvalidError),
        ({"posted_slot": 1_000_001}, OracleSlotInvalidError),
        ({"exponent": -12}, OracleExponentError),
        ({"price": 0}, OracleNegativePriceError),
        ({"price": -14_640_110_937}, OracleNegativePriceError),
        ({"conf": 200_000_000}, OracleConfidenceError),
    ],
)
def test_query_pyth_rejects(changes, exc):
    update = replace(GOOD, **changes)
    print(f"[pyth-reject] {changes} -> expect {exc.__name__}")
    with pytest.raises(exc):
        query_pyth_price(CLOCK, update, CONFIG)


def test_query_pyth_check_order():
    # stale and a bad exponent: the freshness check runs first
    update = replace(GOOD, publish_time=1, exponent=-12)
    with pytest.raises(OracleOutdatedError):
        query_pyth_oracle(CLOCK, update, CONFIG)
    # bad exponent and a non-positive price: the exponent check runs first
    with pytest.raises(OracleExponentError):
        query_pyth_oracle(CLOCK, replace(GOOD, exponent=-1, price=0), CONFIG)


def test_pyth_errors_share_category():
    with pytest.raises(OracleValidationError):
        query_pyth_oracle(CLOCK, replace(GOOD, price=0), CONFIG)


# -----------------------------
# Switchboard
# -----------------------------

@pytest.mark.parametrize("mantissa,exp,bits", [
    (146_401_109_370_000_000_000, N8, 14_640_110_937),
    (1_464_011_093_700_000_000, N8, 146_401_109),
    (146_401_109_370_000_000_000, N9, 146_401_109_370),
])
def test_switchboard_value_to_fixed(mantissa, exp, bits):
    assert switchboard_value_to_fixed(mantissa, exp) == UFix64(bits, exp)


def test_switchboard_value_errors():
    with pytest.raises(SwitchboardInvalidValueError):
        switchboard_value_to_fixed(-1, N9)
    with pytest.raises(SwitchboardPriceRangeError):
        switchboard_value_to_fixed(10**40, N9)


@pytest.mark.parametrize("quote_slot,ok", [(1_000_000 - 300, True), (1_000_000 - 301, False), (1_000_100, True)])
def test_switchboard_staleness(quote_slot, ok):
    quote = SwitchboardQuote(slot=quote_slot, feeds=(146_401_109_370_000_000_000,))
    if ok:
        r = query_switchboard_price(CLOCK, quote, CONFIG, N8)
        assert r.lower == r.upper == UFix64(14_640_110_937, N8)
    else:
        with pytest.raises(SwitchboardStaleError):
            quote.query_price(CLOCK, CONFIG, N8)


def test_switchboard_empty_quote():
    with pytest.raises(SwitchboardInvalidValueError):
        query_switchboard_price(CLOCK, SwitchboardQuote(slot=1_000_000), CONFIG)


# -----------------------------
# Clock
# -----------------------------

def test_fixed_clock():
    from stablelever import ChainClock

    assert isinstance(CLOCK, ChainClock)
    assert (CLOCK.slot(), CLOCK.epoch(), CLOCK.unix_timestamp()) == (1_000_000, 600, 1_700_000_000)
    with pytest.raises(ValueError):
        FixedClock(current_slot=-1, current_epoch=0, current_unix_timestamp=1)
