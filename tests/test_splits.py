from decimal import Decimal
import pytest
from splitledger.core.exceptions import InvalidAmount, SplitMismatch
from splitledger.core.splits import normalize_splits, resolve_splits, validate_splits
from splitledger.core.utils import to_decimal


def D(value):
    return Decimal(value)


def test_validate_accepts_exact_split():
    validate_splits(D("120.00"), {1: D("40"), 2: D("40"), 3: D("40")})


def test_validate_accepts_within_a_cent():
    validate_splits(D("100.00"), {1: D("33.33"), 2: D("33.33"), 3: D("33.33")})


@pytest.mark.parametrize("shares", [
    {1: D("50"), 2: D("49")},
    {1: D("50"), 2: D("50.02")},
    {},
])
def test_validate_rejects_mismatch(shares):
    with pytest.raises(SplitMismatch):
        validate_splits(D("100.00"), shares)


def test_validate_rejects_negative_share():
    with pytest.raises(InvalidAmount):
        validate_splits(D("10"), {1: D("20"), 2: D("-10")})


def test_equal_split_hands_leftover_cents_to_first_participants():
    shares = resolve_splits("equal", D("120.50"), {1: 0, 2: 0, 3: 0})

    assert shares == {1: D("40.17"), 2: D("40.17"), 3: D("40.16")}
    assert sum(shares.values()) == D("120.50")


def test_custom_split_passes_through():
    shares = resolve_splits("custom", D("30"), {"1": "10.5", "2": "19.5"})

    assert shares == {1: D("10.5"), 2: D("19.5")}


def test_percentage_split():
    shares = resolve_splits("percentage", D("200"), {1: D("50"), 2: D("30"), 3: D("20")})

    assert shares == {1: D("100.00"), 2: D("60.00"), 3: D("40.00")}


def test_percentage_must_total_hundred():
    with pytest.raises(SplitMismatch):
        resolve_splits("percentage", D("200"), {1: D("50"), 2: D("30")})


def test_shares_split_uses_largest_remainder():
    shares = resolve_splits("shares", D("10"), {1: D("1"), 2: D("1"), 3: D("1")})

    assert shares == {1: D("3.34"), 2: D("3.33"), 3: D("3.33")}


def test_shares_need_positive_total():
    with pytest.raises(SplitMismatch):
        resolve_splits("shares", D("10"), {1: D("0"), 2: D("0")})


def test_unknown_split_type():
    with pytest.raises(SplitMismatch):
        resolve_splits("bogus", D("10"), {1: D("10")})


def test_normalize_absorbs_residual_into_largest_share():
    amount, shares = normalize_splits(D("100"), {1: D("60.004"), 2: D("39.994")})

    assert amount == D("100.00")
    assert shares == {1: D("60.01"), 2: D("39.99")}
    assert sum(shares.values()) == amount


def test_normalize_needs_someone_to_carry_the_amount():
    with pytest.raises(SplitMismatch):
        normalize_splits(D("0.01"), {})


def test_to_decimal_rejects_garbage():
    with pytest.raises(InvalidAmount):
        to_decimal("ten")

    with pytest.raises(InvalidAmount):
        to_decimal(float("nan"))
