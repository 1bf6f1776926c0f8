"""Admin back-office API routes.

Every endpoint requires a Supabase session (`Authorization: Bearer <jwt>`)
belonging to a staff member.

Endpoints:
- GET    /api/admin/reservations?date=&status=&search=  a day's reservations with tallies
- GET    /api/admin/reservations/{id}         one reservation
- PATCH  /api/admin/reservations/{id}/status  move along the status workflow
- GET    /api/admin/time-slots                slot catalog
- POST   /api/admin/time-slots                add a slot
- PATCH  /api/admin/time-slots/{id}           toggle / resize a slot
- DELETE /api/admin/time-slots/{id}
- GET    /api/admin/closed-dates
- POST   /api/admin/closed-dates
- DELETE /api/admin/closed-dates/{date}
- GET    /api/admin/recurring-closures
- POST   /api/admin/recurring-closures
- PATCH  /api/admin/recurring-closures/{id}
- DELETE /api/admin/recurring-closures/{id}
- GET    /api/admin/messages?status=&search=  contact inbox, newest first
- PATCH  /api/admin/messages/{id}/status
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query

from rialto.catalog import SlotCatalog
from rialto.closures import ClosureManager, RecurringClosureFields
from rialto.inbox import ContactInbox
from rialto.lifecycle import ReservationService, summarize
from rialto.models import (
    ClosedDate,
    ContactMessage,
    MessageStatus,
    RecurringClosure,
    Reservation,
    ReservationStatus,
    TimeSlot,
)
from rialto.web.deps import get_catalog, get_closures, get_inbox, get_reservations, require_admin
from rialto.web.schemas import (
    ClosedDateListResponse,
    ClosedDateRequest,
    DayReservationsResponse,
    MessageListResponse,
    MessageStatusRequest,
    RecurringClosureListResponse,
    RecurringClosureUpdateRequest,
    StatusUpdateRequest,
    TimeSlotCreateRequest,
    TimeSlotListResponse,
    TimeSlotUpdateRequest,
)

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------


@router.get("/reservations", response_model=DayReservationsResponse)
async def list_reservations(
    day: date = Query(..., alias="date"),
    status: list[ReservationStatus] | None = Query(None),
    search: str | None = None,
    service: ReservationService = Depends(get_reservations),
):
    """A day's reservations, optionally narrowed to some statuses and a search term."""
    rows = await service.list_for_date(day, statuses=status, search=search)
    return DayReservationsResponse(reservations=rows, **summarize(rows))


@router.get("/reservations/{reservation_id}", response_model=Reservation)
async def get_reservation(reservation_id: str, service: ReservationService = Depends(get_reservations)):
    return await service.get(reservation_id)


@router.patch("/reservations/{reservation_id}/status", response_model=Reservation)
async def update_reservation_status(
    reservation_id: str,
    body: StatusUpdateRequest,
    service: ReservationService = Depends(get_reservations),
):
    return await service.update_status(reservation_id, body.status)


# ---------------------------------------------------------------------------
# Time slots
# ---------------------------------------------------------------------------


@router.get("/time-slots", response_model=TimeSlotListResponse)
async def list_time_slots(catalog: SlotCatalog = Depends(get_catalog)):
    return TimeSlotListResponse(time_slots=await catalog.list_slots())


@router.post("/time-slots", response_model=TimeSlot, status_code=201)
async def create_time_slot(body: TimeSlotCreateRequest, catalog: SlotCatalog = Depends(get_catalog)):
    return await catalog.create_slot(body.time, body.max_capacity, body.is_lunch)


@router.patch("/time-slots/{slot_id}", response_model=TimeSlot)
async def update_time_slot(
    slot_id: str,
    body: TimeSlotUpdateRequest,
    catalog: SlotCatalog = Depends(get_catalog),
):
    return await catalog.update_slot(slot_id, is_active=body.is_active, max_capacity=body.max_capacity)


@router.delete("/time-slots/{slot_id}", status_code=204)
async def delete_time_slot(slot_id: str, catalog: SlotCatalog = Depends(get_catalog)):
    await catalog.delete_slot(slot_id)


# ---------------------------------------------------------------------------
# Closed dates
# ---------------------------------------------------------------------------


@router.get("/closed-dates", response_model=ClosedDateListResponse)
async def list_closed_dates(closures: ClosureManager = Depends(get_closures)):
    return ClosedDateListResponse(closed_dates=await closures.list_closed_dates())


@router.post("/closed-dates", response_model=ClosedDate, status_code=201)
async def add_closed_date(body: ClosedDateRequest, closures: ClosureManager = Depends(get_closures)):
    return await closures.add_closed_date(body.date)


@router.delete("/closed-dates/{day}", status_code=204)
async def remove_closed_date(day: date, closures: ClosureManager = Depends(get_closures)):
    await closures.remove_closed_date(day)


# ---------------------------------------------------------------------------
# Recurring closures
# ---------------------------------------------------------------------------


@router.get("/recurring-closures", response_model=RecurringClosureListResponse)
async def list_recurring_closures(closures: ClosureManager = Depends(get_closures)):
    return RecurringClosureListResponse(recurring_closures=await closures.list_recurring_closures())


@router.post("/recurring-closures", response_model=RecurringClosure, status_code=201)
async def create_recurring_closure(
    body: RecurringClosureFields,
    closures: ClosureManager = Depends(get_closures),
):
    return await closures.create_recurring_closure(body)


@router.patch("/recurring-closures/{closure_id}", response_model=RecurringClosure)
async def update_recurring_closure(
    closure_id: str,
    body: RecurringClosureUpdateRequest,
    closures: ClosureManager = Depends(get_closures),
):
    return await closures.update_recurring_closure(closure_id, body.model_dump(exclude_none=True))


@router.delete("/recurring-closures/{closure_id}", status_code=204)
async def delete_recurring_closure(closure_id: str, closures: ClosureManager = Depends(get_closures)):
    await closures.delete_recurring_closure(closure_id)


# ---------------------------------------------------------------------------
# Contact inbox
# ---------------------------------------------------------------------------


@router.get("/messages", response_model=MessageListResponse)
async def list_messages(
    status: MessageStatus | None = None,
    search: str | None = None,
    inbox: ContactInbox = Depends(get_inbox),
):
    return MessageListResponse(messages=await inbox.list_messages(status=status, search=search))


@router.patch("/messages/{message_id}/status", response_model=ContactMessage)
async def update_message_status(
    message_id: str,
    body: MessageStatusRequest,
    inbox: ContactInbox = Depends(get_inbox),
):
    return await inbox.update_status(message_id, body.status)
