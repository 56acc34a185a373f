import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from .config import get_settings
from .engine import SettlementError, compute_settlements, round_cents
from .models import (
    Trip,
    Expense,
    CreateTripRequest,
    CreateExpenseRequest,
    SettleRequest,
    TripDetailResponse,
    SettlementResponse,
)

logger = logging.getLogger(__name__)


class TripServiceError(SettlementError):
    pass


class TripNotFoundError(TripServiceError):
    pass


class InMemoryStorage:
    def __init__(self):
        self.trips: dict[UUID, dict] = {}
        self.expenses: dict[UUID, dict] = {}

    def expenses_for(self, trip_id: UUID) -> list[dict]:
        return [e for e in self.expenses.values() if e["trip_id"] == trip_id]


def calculate_balances(trip: Trip, expenses: list[Expense]) -> dict[str, Decimal]:
    """Equal-split net balances: every expense is shared by all trip participants.

    The payer is credited what they paid minus their own share; everyone else
    is debited one share.
    """
    balances = {p: Decimal("0") for p in trip.participants}
    count = len(trip.participants)

    for expense in expenses:
        split = expense.amount / count
        balances[expense.payer] = balances.get(expense.payer, Decimal("0")) + (expense.amount - split)
        for person in trip.participants:
            if person != expense.payer:
                balances[person] -= split

    return balances


class TripService:
    def __init__(self, storage: Optional[InMemoryStorage] = None):
        self.storage = storage or InMemoryStorage()

    def create_trip(self, request: CreateTripRequest) -> Trip:
        trip_data = {
            "id": uuid4(),
            "name": request.name,
            "currency": request.currency,
            "participants": list(dict.fromkeys(request.participants)),
            "created_at": datetime.now(timezone.utc),
        }
        self.storage.trips[trip_data["id"]] = trip_data
        logger.info("Created trip %s (%s) with %d participants",
                    trip_data["id"], request.name, len(trip_data["participants"]))
        return Trip(**trip_data)

    def get_trip(self, trip_id: UUID) -> TripDetailResponse:
        trip = self._get_trip(trip_id)
        expenses = [Expense(**e) for e in self.storage.expenses_for(trip_id)]
        expenses.sort(key=lambda e: e.date)
        return TripDetailResponse(trip=trip, expenses=expenses)

    def add_expense(self, request: CreateExpenseRequest) -> Expense:
        self._get_trip(request.trip_id)

        date = request.date or datetime.now(timezone.utc)
        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)

        expense_data = {
            "id": uuid4(),
            "trip_id": request.trip_id,
            "description": request.description,
            "amount": request.amount,
            "payer": request.payer,
            "date": date,
        }
        self.storage.expenses[expense_data["id"]] = expense_data
        logger.info("Recorded expense %s of %s paid by %s on trip %s",
                    expense_data["id"], request.amount, request.payer, request.trip_id)
        return Expense(**expense_data)

    def settle_trip(self, trip_id: UUID) -> SettlementResponse:
        detail = self.get_trip(trip_id)
        balances = calculate_balances(detail.trip, detail.expenses)
        settlements = compute_settlements(balances, detail.trip.currency)

        return SettlementResponse(
            currency=detail.trip.currency,
            balances={p: round_cents(amount) for p, amount in balances.items()},
            settlements=settlements,
        )

    def settle_balances(self, request: SettleRequest) -> SettlementResponse:
        currency = request.currency or get_settings().default_currency
        settlements = compute_settlements(request.balances, currency)

        return SettlementResponse(
            currency=currency,
            balances={p: round_cents(amount) for p, amount in request.balances.items()},
            settlements=settlements,
        )

    def _get_trip(self, trip_id: UUID) -> Trip:
        trip_data = self.storage.trips.get(trip_id)
        if not trip_data:
            raise TripNotFoundError(f"Trip {trip_id} not found")
        return Trip(**trip_data)