import logging
from uuid import UUID
from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .engine import InvalidBalanceError, SettlementError
from .models import (
    CreateTripRequest, CreateExpenseRequest, SettleRequest,
    Trip, Expense, TripDetailResponse, SettlementResponse,
)
from .service import TripService, TripNotFoundError

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="SettleUp API",
    description="Shared expense pools with equal-split balances and minimal settlement plans",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

trip_service = TripService()


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "settleup"}


@app.post("/trips", response_model=Trip, status_code=status.HTTP_201_CREATED, tags=["Trips"])
def create_trip(request: CreateTripRequest) -> Trip:
    return trip_service.create_trip(request)


@app.get("/trips/{trip_id}", response_model=TripDetailResponse, tags=["Trips"])
def get_trip(trip_id: UUID) -> TripDetailResponse:
    try:
        return trip_service.get_trip(trip_id)
    except TripNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Trip {trip_id} not found")


@app.post("/expenses", response_model=Expense, status_code=status.HTTP_201_CREATED, tags=["Expenses"])
def add_expense(request: CreateExpenseRequest) -> Expense:
    try:
        return trip_service.add_expense(request)
    except TripNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Trip {request.trip_id} not found")


@app.get("/trips/{trip_id}/settle", response_model=SettlementResponse, tags=["Settlements"])
def settle_trip(trip_id: UUID) -> SettlementResponse:
    try:
        return trip_service.settle_trip(trip_id)
    except TripNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Trip {trip_id} not found")
    except SettlementError as e:
        logger.warning("Settlement failed for trip %s: %s", trip_id, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@app.post("/settle", response_model=SettlementResponse, tags=["Settlements"])
def settle_balances(request: SettleRequest) -> SettlementResponse:
    try:
        return trip_service.settle_balances(request)
    except InvalidBalanceError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except SettlementError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
