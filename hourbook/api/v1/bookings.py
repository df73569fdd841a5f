from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from hourbook.api.v1.schemas import (
    BookingSchema,
    CreateBookingRequestSchema,
    CreateBookingResponseSchema,
    CreatedBookingSchema,
    DeleteBookingRequestSchema,
    DeleteBookingResponseSchema,
    UpdateBookingRequestSchema,
    UpdateBookingResponseSchema,
)
from hourbook.application.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    StoreContentionError,
)
from hourbook.application.use_cases.booking_service import BookingService
from hourbook.application.utils.booking_set import to_document
from hourbook.wiring.dependencies import get_booking_service

router = APIRouter()
logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, code: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code, **extra})


def _conflict(e: BookingConflictError) -> JSONResponse:
    logger.info("Booking rejected", extra={"code": e.code, "time_key": e.time_key, "reason": e.message})
    return JSONResponse(status_code=409, content=e.to_dict())


def _contention(e: StoreContentionError) -> JSONResponse:
    logger.error("Bookings document contention", extra={"error": str(e)})
    return _error(503, "Bookings are busy, please retry", StoreContentionError.code)


@router.get("/bookings")
def list_bookings(
    response: Response,
    service: BookingService = Depends(get_booking_service),
) -> dict[str, Any]:
    bookings, version = service.snapshot()
    response.headers["ETag"] = f'"{version}"'
    return to_document(bookings)


@router.post("/bookings", status_code=201, response_model=CreateBookingResponseSchema)
def create_booking(
    req: CreateBookingRequestSchema,
    service: BookingService = Depends(get_booking_service),
):
    try:
        booking = service.create_booking(req.date_key, req.time_key, req.user, req.duration)
    except BookingConflictError as e:
        return _conflict(e)
    except StoreContentionError as e:
        return _contention(e)

    return CreateBookingResponseSchema(
        booking=CreatedBookingSchema(
            date_key=req.date_key,
            time_key=req.time_key,
            user=booking.user,
            duration=booking.duration,
        )
    )


@router.put("/bookings/update", response_model=UpdateBookingResponseSchema)
def update_booking(
    req: UpdateBookingRequestSchema,
    service: BookingService = Depends(get_booking_service),
):
    try:
        booking = service.update_booking(
            req.date_key,
            req.time_key,
            user=req.updates.user,
            duration=req.updates.duration,
        )
    except BookingNotFoundError as e:
        return _error(404, e.message, e.code)
    except BookingConflictError as e:
        return _conflict(e)
    except StoreContentionError as e:
        return _contention(e)

    return UpdateBookingResponseSchema(booking=BookingSchema(user=booking.user, duration=booking.duration))


@router.delete("/bookings/update", response_model=DeleteBookingResponseSchema)
def delete_booking(
    req: DeleteBookingRequestSchema,
    service: BookingService = Depends(get_booking_service),
):
    try:
        service.delete_booking(req.date_key, req.time_key)
    except BookingNotFoundError as e:
        return _error(404, e.message, e.code)
    except StoreContentionError as e:
        return _contention(e)

    return DeleteBookingResponseSchema()
