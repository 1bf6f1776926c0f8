"""Guest-facing reservation routes: book, look up by email, cancel."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from rialto.lifecycle import ReservationService
from rialto.models import Reservation, ReservationRequest
from rialto.web.deps import get_reservations
from rialto.web.schemas import CancelRequest, ReservationListResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=Reservation, status_code=201)
async def create_reservation(
    body: ReservationRequest,
    service: ReservationService = Depends(get_reservations),
):
    return await service.create(body)


@router.get("/mine", response_model=ReservationListResponse)
async def my_reservations(
    email: str = Query(..., min_length=3),
    service: ReservationService = Depends(get_reservations),
):
    """A guest's reservations, ordered by date then time."""
    return ReservationListResponse(reservations=await service.list_for_email(email))


@router.post("/{reservation_id}/cancel", response_model=Reservation)
async def cancel_reservation(
    reservation_id: str,
    body: CancelRequest,
    service: ReservationService = Depends(get_reservations),
):
    """Cancel a reservation; the email must match the one used to book."""
    return await service.cancel(reservation_id, body.email)
