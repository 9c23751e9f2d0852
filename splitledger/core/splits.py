from decimal import Decimal, ROUND_FLOOR
from typing import Dict, Mapping
from splitledger.core.exceptions import InvalidAmount, SplitMismatch
from splitledger.core.utils import CENTS, ZERO, qround, to_decimal

SPLIT_TOLERANCE = Decimal("0.01")
HUNDRED = Decimal("100")

SPLIT_TYPES = ("equal", "custom", "percentage", "shares")


def validate_splits(amount, splits: Mapping[int, Decimal]):
    """Raise SplitMismatch unless the shares add up to amount within a cent."""
    amount = to_decimal(amount)
    shares = [to_decimal(v) for v in splits.values()]

    if any(s < 0 for s in shares):
        raise InvalidAmount("Split amounts cannot be negative")

    total = sum(shares, ZERO)
    if abs(amount - total) > SPLIT_TOLERANCE:
        raise SplitMismatch(
            f"Split total ({total}) must equal transaction amount ({amount})"
        )


def _allocate(amount: Decimal, weights: Dict[int, Decimal]) -> Dict[int, Decimal]:
    # largest remainder over whole cents, ties keep participant order
    total_weight = sum(weights.values(), ZERO)
    if total_weight <= 0:
        raise SplitMismatch("Split weights must add up to more than zero")

    total_cents = int((qround(amount) * 100).to_integral_value())

    raw = {uid: Decimal(total_cents) * w / total_weight for uid, w in weights.items()}
    cents = {uid: int(r.to_integral_value(rounding=ROUND_FLOOR)) for uid, r in raw.items()}

    leftover = total_cents - sum(cents.values())
    order = sorted(weights, key=lambda uid: raw[uid] - cents[uid], reverse=True)
    for uid in order[:leftover]:
        cents[uid] += 1

    return {uid: (Decimal(c) / 100).quantize(CENTS) for uid, c in cents.items()}


def resolve_splits(split_type: str, amount, entries: Mapping) -> Dict[int, Decimal]:
    """
    Turn user input into the owed-amount map the ledger works with.

    equal       keys are the participants, values are ignored
    custom      values are the owed amounts
    percentage  values are percentages adding up to 100
    shares      values are relative weights
    """
    amount = to_decimal(amount)

    if split_type == "equal":
        return _allocate(amount, {int(uid): Decimal(1) for uid in entries})

    values = {int(uid): to_decimal(v) for uid, v in entries.items()}

    if split_type == "custom":
        return values

    if any(v < 0 for v in values.values()):
        raise InvalidAmount(f"Negative {split_type} value in splits")

    if split_type == "percentage":
        total = sum(values.values(), ZERO)
        if abs(total - HUNDRED) > SPLIT_TOLERANCE:
            raise SplitMismatch(f"Percentages must add up to 100, got {total}")
        return _allocate(amount, values)

    if split_type == "shares":
        return _allocate(amount, values)

    raise SplitMismatch(f"Unknown split type: {split_type}")


def normalize_splits(amount, splits: Mapping[int, Decimal]):
    """
    Quantize amount and shares to cents.

    Whatever rounding residual remains (already within tolerance) goes to
    the largest share, so the stored shares add up to amount exactly.
    """
    amount = qround(to_decimal(amount))
    shares = {int(uid): qround(to_decimal(v)) for uid, v in splits.items()}

    residual = amount - sum(shares.values(), ZERO)
    if residual and shares:
        target = max(shares, key=lambda uid: shares[uid])
        shares[target] += residual

    if sum(shares.values(), ZERO) != amount:
        raise SplitMismatch(f"Shares do not add up to {amount}")

    return amount, shares
