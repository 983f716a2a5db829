import random

import pytest

from stablelever import N2, N6, N9, UFix64
from stablelever.core.exc import StabilityValidationError
from stablelever.stability import (
    StabilityController,
    StabilityMode,
    select_worse_mode,
    validate_stability_thresholds,
)

CONTROLLER = StabilityController(UFix64(150, N2), UFix64(130, N2))


@pytest.mark.parametrize(
    "cr_bits,mode",
    [
        (2_000_000_000, StabilityMode.NORMAL),
        (1_500_000_000, StabilityMode.NORMAL),     # on threshold_1
        (1_499_999_999, StabilityMode.MODE_1),
        (1_300_000_000, StabilityMode.MODE_1),     # on threshold_2
        (1_299_999_999, StabilityMode.MODE_2),
        (1_000_000_000, StabilityMode.MODE_2),
        (999_999_999, StabilityMode.DEPEG),
        (0, StabilityMode.DEPEG),
    ],
)
def test_stability_mode_boundaries(cr_bits, mode):
    got = CONTROLLER.stability_mode(UFix64(cr_bits, N9))
    print(f"[stability-mode] cr={cr_bits} -> {got}")
    assert got == mode


@pytest.mark.parametrize(
    "t1,t2",
    [
        (130, 130),   # equal
        (120, 130),   # out of order
        (150, 100),   # t2 not above 1.00
        (100, 90),
    ],
)
def test_invalid_thresholds(t1, t2):
    with pytest.raises(StabilityValidationError):
        StabilityController(UFix64(t1, N2), UFix64(t2, N2))


def test_thresholds_require_n2():
    with pytest.raises(StabilityValidationError):
        StabilityController(UFix64(1_500_000, N6), UFix64(1_300_000, N6))


def test_validate_configured_threshold():
    validate_stability_thresholds(UFix64(150, N2), UFix64(130, N2))
    with pytest.raises(StabilityValidationError):
        validate_stability_thresholds(UFix64(130, N2), UFix64(130, N2))


def test_next_and_prev_thresholds():
    t1, t2, one = UFix64(150, N2), UFix64(130, N2), UFix64(100, N2)
    assert CONTROLLER.next_stability_threshold(StabilityMode.NORMAL) == t1
    assert CONTROLLER.next_stability_threshold(StabilityMode.MODE_1) == t2
    assert CONTROLLER.next_stability_threshold(StabilityMode.MODE_2) == one
    assert CONTROLLER.next_stability_threshold(StabilityMode.DEPEG) is None
    assert CONTROLLER.prev_stability_threshold(StabilityMode.NORMAL) is None
    assert CONTROLLER.prev_stability_threshold(StabilityMode.MODE_1) == t1
    assert CONTROLLER.prev_stability_threshold(StabilityMode.MODE_2) == t2
    assert CONTROLLER.prev_stability_threshold(StabilityMode.DEPEG) == one
    assert CONTROLLER.min_stability_threshold() == t2


def test_select_worse_mode():
    assert select_worse_mode(StabilityMode.NORMAL, StabilityMode.MODE_1) == StabilityMode.MODE_1
    assert select_worse_mode(StabilityMode.MODE_2, StabilityMode.NORMAL) == StabilityMode.MODE_2
    assert str(StabilityMode.MODE_1) == "Mode1"


@pytest.mark.parametrize("seed", [3, 11, 99])
def test_mode_monotonic_in_cr(seed):
    rng = random.Random(seed)
    for _ in range(300):
        a, b = sorted(rng.randrange(0, 3_000_000_000) for _ in range(2))
        lo = CONTROLLER.stability_mode(UFix64(a, N9))
        hi = CONTROLLER.stability_mode(UFix64(b, N9))
        assert hi <= lo
