import logging
from decimal import Decimal
from splitledger.services.group_services import deactivate_member
from splitledger.services.ledger import (
    apply_transaction,
    credit,
    debit,
    reverse_transaction,
    transaction_deltas,
)


def D(value):
    return Decimal(value)


async def test_credit_and_debit(db, group_id, balances):
    assert await credit(db, group_id, 1, D("15.50"))
    assert await debit(db, group_id, 2, "15.50")
    await db.commit()

    assert await balances(group_id) == {1: D("15.50"), 2: D("-15.50"), 3: D("0")}


async def test_unknown_member_is_a_logged_noop(db, group_id, balances, caplog):
    with caplog.at_level(logging.WARNING, logger="splitledger.services.ledger"):
        touched = await credit(db, group_id, 99, D("5"))
    await db.commit()

    assert touched is False
    assert "Ledger inconsistency" in caplog.text
    assert await balances(group_id) == {1: D("0"), 2: D("0"), 3: D("0")}


async def test_inactive_member_is_skipped(db, group_id, caplog):
    await deactivate_member(db, group_id, 3)

    with caplog.at_level(logging.WARNING, logger="splitledger.services.ledger"):
        touched = await debit(db, group_id, 3, D("5"))

    assert touched is False
    assert "no active member 3" in caplog.text


def test_transaction_deltas_net_out_the_payers_own_share():
    deltas = transaction_deltas(1, D("120"), {1: 40, 2: 40, 3: 40})

    assert deltas == {1: D("80"), 2: D("-40"), 3: D("-40")}
    assert sum(deltas.values()) == 0


async def test_reverse_restores_previous_balances(db, group_id, balances):
    await credit(db, group_id, 2, D("7.25"))
    await debit(db, group_id, 3, D("7.25"))
    await db.commit()
    before = await balances(group_id)

    splits = {2: D("10.10"), 3: D("20.20")}
    await apply_transaction(db, group_id, 1, D("30.30"), splits)
    await db.commit()
    assert await balances(group_id) == {1: D("30.30"), 2: D("-2.85"), 3: D("-27.45")}

    await reverse_transaction(db, group_id, 1, D("30.30"), splits)
    await db.commit()
    assert await balances(group_id) == before
