"""
Shared Expense Settlement

This package provides:
- A settlement engine that turns net balances into a short list of payments
- Equal-split balance calculation for trips and their expenses
- An in-memory trip/expense service and its HTTP API
"""

from .models import (
    Settlement,
    Trip,
    Expense,
    SettlementResponse,
)
from .engine import (
    EPSILON,
    SettlementError,
    InvalidBalanceError,
    compute_settlements,
    apply_settlements,
)
from .service import TripService, calculate_balances

__all__ = [
    "Settlement",
    "Trip",
    "Expense",
    "SettlementResponse",
    "EPSILON",
    "SettlementError",
    "InvalidBalanceError",
    "compute_settlements",
    "apply_settlements",
    "TripService",
    "calculate_balances",
]
