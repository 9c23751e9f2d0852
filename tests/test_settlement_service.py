from decimal import Decimal
import pytest
from splitledger.core.exceptions import NotFound
from splitledger.services.group_services import add_member
from splitledger.services.ledger import credit
from splitledger.services.settlement_service import (
    audit_group_ledger,
    get_balances,
    get_settlement_suggestions,
    is_group_settled,
)
from splitledger.services.transaction_services import add_transaction, record_settlement


def D(value):
    return Decimal(value)


async def test_balances_report_owes_and_is_owed(db, group_id):
    await add_transaction(db, group_id, paid_by=1, amount="120", splits={1: "40", 2: "40", 3: "40"})

    rows = await get_balances(db, group_id)

    assert rows == [
        {"user_id": 1, "balance": D("80.00"), "owes": D("0.00"), "is_owed": D("80.00")},
        {"user_id": 2, "balance": D("-40.00"), "owes": D("40.00"), "is_owed": D("0.00")},
        {"user_id": 3, "balance": D("-40.00"), "owes": D("40.00"), "is_owed": D("0.00")},
    ]


async def test_suggestions_for_four_members(db, group_id, balances):
    await add_member(db, group_id, 4)
    # balances become 1: -30, 2: -20, 3: +10, 4: +40
    await add_transaction(db, group_id, paid_by=4, amount="50", splits={1: "30", 2: "20"})
    await add_transaction(db, group_id, paid_by=3, amount="10", splits={4: "10"})
    assert await balances(group_id) == {1: D("-30"), 2: D("-20"), 3: D("10"), 4: D("40")}

    suggestions = await get_settlement_suggestions(db, group_id)

    assert len(suggestions) <= 3
    assert suggestions[0] == {"from_user": 1, "to_user": 4, "amount": D("30.00")}

    outgoing = {1: D("0"), 2: D("0")}
    incoming = {3: D("0"), 4: D("0")}
    for s in suggestions:
        outgoing[s["from_user"]] += s["amount"]
        incoming[s["to_user"]] += s["amount"]
    assert outgoing == {1: D("30"), 2: D("20")}
    assert incoming == {3: D("10"), 4: D("40")}


async def test_following_the_suggestions_settles_the_group(db, group_id):
    await add_transaction(db, group_id, paid_by=1, amount="100", splits={1: "20", 2: "30", 3: "50"})
    await add_transaction(db, group_id, paid_by=2, amount="45.50", splits={1: "15.50", 3: "30"})
    assert not await is_group_settled(db, group_id)

    for s in await get_settlement_suggestions(db, group_id):
        await record_settlement(db, group_id, s["from_user"], s["to_user"], s["amount"])

    assert await is_group_settled(db, group_id)
    assert await get_settlement_suggestions(db, group_id) == []


async def test_suggestions_do_not_touch_the_ledger(db, group_id, balances):
    await add_transaction(db, group_id, paid_by=1, amount="30", splits={2: "10", 3: "20"})
    before = await balances(group_id)

    await get_settlement_suggestions(db, group_id)
    await get_settlement_suggestions(db, group_id)

    assert await balances(group_id) == before


async def test_audit_flags_balances_written_outside_transactions(db, group_id):
    await add_transaction(db, group_id, paid_by=1, amount="30", splits={2: "10", 3: "20"})
    assert (await audit_group_ledger(db, group_id))["consistent"]

    await credit(db, group_id, 2, D("5"))
    await db.commit()

    audit = await audit_group_ledger(db, group_id)
    assert audit["consistent"] is False
    assert audit["balance_sum"] == D("5.00")
    assert audit["drift"] == [{"user_id": 2, "stored": D("-5.00"), "derived": D("-10.00")}]


async def test_unknown_group(db):
    with pytest.raises(NotFound):
        await get_balances(db, 404)

    with pytest.raises(NotFound):
        await get_settlement_suggestions(db, 404)
