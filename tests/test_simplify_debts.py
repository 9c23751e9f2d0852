from collections import defaultdict
from decimal import Decimal
import pytest
from splitledger.core.utils import simplify_debts


def D(value):
    return Decimal(value)


def assert_settles(net_map, transfers):
    paid = defaultdict(Decimal)
    received = defaultdict(Decimal)
    for debtor, creditor, amount in transfers:
        assert amount > 0
        paid[debtor] += amount
        received[creditor] += amount

    for uid, bal in net_map.items():
        if bal < 0:
            assert paid[uid] == -bal
        elif bal > 0:
            assert received[uid] == bal


def test_four_member_example():
    net = {1: D("-30"), 2: D("-20"), 3: D("10"), 4: D("40")}

    transfers = simplify_debts(net)

    assert transfers == [
        (1, 4, D("30.00")),
        (2, 4, D("10.00")),
        (2, 3, D("10.00")),
    ]
    assert len(transfers) <= 3
    assert_settles(net, transfers)


def test_two_sided_case_pairs_directly():
    net = {1: D("-40"), 2: D("-40"), 3: D("80")}

    transfers = simplify_debts(net)

    assert transfers == [(1, 3, D("40.00")), (2, 3, D("40.00"))]


def test_simultaneous_zero_advances_both_sides():
    net = {1: D("-25"), 2: D("-10"), 3: D("25"), 4: D("10")}

    transfers = simplify_debts(net)

    assert transfers == [(1, 3, D("25.00")), (2, 4, D("10.00"))]


def test_settled_group_needs_no_transfers():
    assert simplify_debts({1: D("0"), 2: D("0")}) == []
    assert simplify_debts({}) == []


def test_sub_cent_noise_is_ignored():
    assert simplify_debts({1: D("-0.005"), 2: D("0.005")}) == []


def test_input_is_not_mutated():
    net = {1: D("-5"), 2: D("5")}

    simplify_debts(net)

    assert net == {1: D("-5"), 2: D("5")}


@pytest.mark.parametrize("net", [
    {1: D("-10.50"), 2: D("-3.25"), 3: D("-6.25"), 4: D("12"), 5: D("8")},
    {1: D("-1"), 2: D("-1"), 3: D("-1"), 4: D("-1"), 5: D("4")},
    {1: D("-100"), 2: D("25"), 3: D("25"), 4: D("25"), 5: D("25")},
    {1: D("-7.77"), 2: D("3.33"), 3: D("-2.22"), 4: D("6.66")},
])
def test_transfer_bound_and_completeness(net):
    transfers = simplify_debts(net)
    nonzero = [b for b in net.values() if b != 0]

    assert len(transfers) <= len(nonzero) - 1
    assert_settles(net, transfers)
