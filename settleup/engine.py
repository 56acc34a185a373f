"""
Settlement Engine

Turns a set of signed net balances into an ordered list of payments that
brings every participant back to zero:
- Debtors (negative) and creditors (positive) are matched largest-first
- Balances within EPSILON of zero count as settled
- Transfers are rounded to cents with ROUND_HALF_UP
- Equal amounts are ordered by participant identifier

Greedy matching emits at most (debtors + creditors - 1) payments. It is not
guaranteed to be the global minimum.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Iterable, Mapping, Optional

from .config import get_settings
from .models import Settlement

logger = logging.getLogger(__name__)

EPSILON = Decimal("0.01")
CENTS = Decimal("0.01")


class SettlementError(Exception):
    pass


class InvalidBalanceError(SettlementError):
    def __init__(self, participant: str, amount: Any):
        self.participant = participant
        self.amount = amount
        super().__init__(f"Invalid balance for {participant!r}: {amount!r}")


@dataclass
class Balance:
    participant: str
    amount: Decimal


def to_amount(participant: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidBalanceError(participant, value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidBalanceError(participant, value)
    if not amount.is_finite():
        raise InvalidBalanceError(participant, value)
    return amount


def round_cents(amount: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def working_precision(amounts: Iterable[Decimal]) -> int:
    # digits needed to add or subtract any two amounts at cent scale or finer exactly
    digits = [a.adjusted() - min(a.as_tuple().exponent, -2) + 2 for a in amounts]
    return max(digits, default=0)


def partition(balances: Mapping[str, Any]) -> tuple[list[Balance], list[Balance]]:
    debtors: list[Balance] = []
    creditors: list[Balance] = []

    for participant, value in balances.items():
        amount = to_amount(participant, value)
        if amount <= -EPSILON:
            debtors.append(Balance(participant, amount))
        elif amount >= EPSILON:
            creditors.append(Balance(participant, amount))

    debtors.sort(key=lambda b: (b.amount, b.participant))
    creditors.sort(key=lambda b: (-b.amount, b.participant))
    return debtors, creditors


def compute_settlements(balances: Mapping[str, Any], currency: Optional[str] = None) -> list[Settlement]:
    """Match the largest debtor with the largest creditor until one side runs out.

    Inputs that do not sum to zero are not corrected: whatever is left on the
    side that outlives the other stays unsettled.
    """
    currency = currency or get_settings().default_currency
    debtors, creditors = partition(balances)
    logger.debug("Settling %d debtors against %d creditors", len(debtors), len(creditors))

    settlements: list[Settlement] = []
    i = j = 0

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, working_precision(b.amount for b in debtors + creditors))

        while i < len(debtors) and j < len(creditors):
            debtor = debtors[i]
            creditor = creditors[j]

            transfer = round_cents(min(abs(debtor.amount), creditor.amount))

            if transfer <= 0:
                # nothing payable at cent precision; drop the smaller side
                if abs(debtor.amount) <= creditor.amount:
                    i += 1
                if creditor.amount <= abs(debtor.amount):
                    j += 1
                continue

            settlements.append(Settlement(
                from_=debtor.participant,
                to=creditor.participant,
                amount=transfer,
                currency=currency,
            ))

            debtor.amount += transfer
            creditor.amount -= transfer

            if abs(debtor.amount) < EPSILON:
                i += 1
            if creditor.amount < EPSILON:
                j += 1

    if i < len(debtors) or j < len(creditors):
        logger.debug(
            "Balances do not net to zero: %d debtors and %d creditors left unsettled",
            len(debtors) - i, len(creditors) - j,
        )

    return settlements


def apply_settlements(balances: Mapping[str, Any], settlements: Iterable[Settlement]) -> dict[str, Decimal]:
    result = {participant: to_amount(participant, value) for participant, value in balances.items()}
    settlements = list(settlements)

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, working_precision([*result.values(), *(s.amount for s in settlements)]))
        for s in settlements:
            result[s.from_] = result.get(s.from_, Decimal("0")) + s.amount
            result[s.to] = result.get(s.to, Decimal("0")) - s.amount
    return result
