from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Dict, List, Tuple
from splitledger.core.exceptions import InvalidAmount

getcontext().prec = 28
CENTS = Decimal("0.01")
ZERO = Decimal("0")

# balances closer to zero than this are treated as settled
SETTLE_EPSILON = Decimal("0.01")


def qround(d: Decimal) -> Decimal:
    return d.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise InvalidAmount(f"Invalid amount: {value!r}")

    if not d.is_finite():
        raise InvalidAmount(f"Invalid amount: {value!r}")
    return d


def simplify_debts(net_map: Dict[int, Decimal]) -> List[Tuple[int, int, Decimal]]:
    """
    Greedy two-pointer matching of debtors against creditors.

    Debtors are walked most negative first, creditors largest first.
    Every step zeroes at least one side, so n non-zero balances produce
    at most n - 1 transfers.

    Returns (from_user, to_user, amount) triples.
    """
    debtors = sorted(
        ([uid, bal] for uid, bal in net_map.items() if bal < 0),
        key=lambda x: (x[1], x[0])
    )
    creditors = sorted(
        ([uid, bal] for uid, bal in net_map.items() if bal > 0),
        key=lambda x: (-x[1], x[0])
    )

    transfers: List[Tuple[int, int, Decimal]] = []
    i = 0
    j = 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(abs(debtor[1]), creditor[1])

        if amount > SETTLE_EPSILON:
            transfers.append((debtor[0], creditor[0], qround(amount)))

        debtor[1] += amount
        creditor[1] -= amount

        # both may hit zero in the same step
        if abs(debtor[1]) < SETTLE_EPSILON:
            i += 1
        if creditor[1] < SETTLE_EPSILON:
            j += 1

    return transfers
