"""Public slot availability for the booking form."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from rialto.availability import AvailabilityCalculator
from rialto.web.deps import get_availability
from rialto.web.schemas import AvailabilityResponse

router = APIRouter()


@router.get("", response_model=AvailabilityResponse)
async def get_available_slots(
    day: date = Query(..., alias="date"),
    calculator: AvailabilityCalculator = Depends(get_availability),
):
    """Every active slot for the date with remaining seats and closure flags."""
    return AvailabilityResponse(date=day, slots=await calculator.for_date(day))
