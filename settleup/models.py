from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field, ConfigDict

from .config import get_settings


def _default_currency() -> str:
    return get_settings().default_currency


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Settlement(BaseModel):
    from_: str = Field(..., alias="from", description="Participant who pays")
    to: str = Field(..., description="Participant who receives")
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str

    model_config = ConfigDict(populate_by_name=True, frozen=True, json_schema_extra={
        "example": {"from": "Alice", "to": "Carol", "amount": "20.00", "currency": "USD"}
    })


class CreateTripRequest(BaseModel):
    name: str = Field(..., min_length=1)
    currency: str = Field(default_factory=_default_currency)
    participants: list[str] = Field(..., min_length=1, description="Names of everyone sharing costs")

    model_config = ConfigDict(json_schema_extra={
        "example": {"name": "Lisbon 2026", "currency": "EUR", "participants": ["Alice", "Bob", "Carol"]}
    })


class CreateExpenseRequest(BaseModel):
    trip_id: UUID
    description: str = ""
    amount: Decimal = Field(..., gt=0)
    payer: str = Field(..., min_length=1)
    date: Optional[datetime] = None


class SettleRequest(BaseModel):
    balances: dict[str, Decimal] = Field(..., description="Participant -> signed net balance")
    currency: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={
        "example": {"balances": {"Alice": -30, "Bob": 10, "Carol": 20}, "currency": "USD"}
    })


class Trip(BaseModel):
    id: UUID
    name: str
    currency: str
    participants: list[str]
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(from_attributes=True)


class Expense(BaseModel):
    id: UUID
    trip_id: UUID
    description: str = ""
    amount: Decimal
    payer: str
    date: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(from_attributes=True)


class TripDetailResponse(BaseModel):
    trip: Trip
    expenses: list[Expense]


class SettlementResponse(BaseModel):
    currency: str
    balances: dict[str, Decimal]
    settlements: list[Settlement]
