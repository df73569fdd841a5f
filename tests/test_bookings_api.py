"""
Tests for the hosted bookings API client: request shapes and the mapping of
error responses onto the booking exceptions.
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from hourbook.application.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    BookingsUpstreamError,
    BookingValidationError,
    DurationConflictError,
    ExtendConflictError,
    SlotAlreadyBookedError,
)
from hourbook.domain.entities.booking import Booking
from hourbook.infrastructure.remote.bookings_api import BookingsApiClient

BASE = "https://calendar.test"
DAY = "2026-02-13"


def _client() -> BookingsApiClient:
    return BookingsApiClient(base_url=BASE + "/", timeout=5.0)


@pytest.mark.asyncio
@respx.mock
async def test_fetch_bookings_parses_document():
    client = _client()
    respx.get(f"{BASE}/api/bookings").respond(
        200, json={DAY: {"09:00": {"user": "Jack", "duration": 3}, "14:00": {"user": "Rue"}}}
    )

    result = await client.fetch_bookings()
    assert result == {DAY: {"09:00": Booking(user="Jack", duration=3), "14:00": Booking(user="Rue", duration=1)}}
    await client.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_fetch_bookings_malformed_document():
    client = _client()
    respx.get(f"{BASE}/api/bookings").respond(200, json=["nope"])

    with pytest.raises(BookingsUpstreamError):
        await client.fetch_bookings()
    await client.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_create_booking_posts_keys_and_fields():
    client = _client()
    route = respx.post(f"{BASE}/api/bookings").respond(
        201,
        json={"success": True, "booking": {"dateKey": DAY, "timeKey": "09:00", "user": "Jack", "duration": 2}},
    )

    booking = await client.create_booking(DAY, "09:00", "Jack", 2)

    assert booking == Booking(user="Jack", duration=2)
    assert json.loads(route.calls[0].request.content) == {
        "dateKey": DAY,
        "timeKey": "09:00",
        "user": "Jack",
        "duration": 2,
    }
    await client.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_update_booking_sends_only_given_fields():
    client = _client()
    route = respx.put(f"{BASE}/api/bookings/update").respond(
        200, json={"success": True, "booking": {"user": "Jack", "duration": 4}}
    )

    booking = await client.update_booking(DAY, "09:00", duration=4)

    assert booking == Booking(user="Jack", duration=4)
    assert json.loads(route.calls[0].request.content) == {
        "dateKey": DAY,
        "timeKey": "09:00",
        "updates": {"duration": 4},
    }
    await client.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_delete_booking_sends_body():
    client = _client()
    route = respx.delete(f"{BASE}/api/bookings/update").respond(200, json={"success": True})

    await client.delete_booking(DAY, "09:00")

    assert json.loads(route.calls[0].request.content) == {"dateKey": DAY, "timeKey": "09:00"}
    await client.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_conflict_responses_map_to_typed_errors():
    client = _client()
    route = respx.post(f"{BASE}/api/bookings")

    route.respond(409, json={"error": "Slot already booked", "code": "slot_already_booked", "timeKey": "09:00"})
    with pytest.raises(SlotAlreadyBookedError) as exc:
        await client.create_booking(DAY, "09:00", "Jack", 1)
    assert exc.value.message == "Slot already booked"

    route.respond(
        409,
        json={"error": "Slot 10:00 conflicts with booking duration", "code": "duration_conflict", "timeKey": "10:00"},
    )
    with pytest.raises(DurationConflictError) as exc:
        await client.create_booking(DAY, "09:00", "Jack", 2)
    assert exc.value.time_key == "10:00"
    assert str(exc.value) == "Slot 10:00 conflicts with booking duration"

    # Servers that only send a message still surface a conflict
    route.respond(409, json={"error": "Slot already booked"})
    with pytest.raises(BookingConflictError):
        await client.create_booking(DAY, "09:00", "Jack", 1)
    await client.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_extend_conflict_on_update():
    client = _client()
    respx.put(f"{BASE}/api/bookings/update").respond(
        409,
        json={"error": "Cannot extend: slot 11:00 is already booked", "code": "extend_conflict", "timeKey": "11:00"},
    )

    with pytest.raises(ExtendConflictError) as exc:
        await client.update_booking(DAY, "09:00", duration=3)
    assert exc.value.message == "Cannot extend: slot 11:00 is already booked"
    await client.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_not_found_and_validation_errors():
    client = _client()
    respx.delete(f"{BASE}/api/bookings/update").respond(
        404, json={"error": "Booking not found", "code": "booking_not_found"}
    )
    respx.post(f"{BASE}/api/bookings").respond(
        400,
        json={"error": "Missing or invalid fields: duration", "code": "validation_error", "fields": ["duration"]},
    )

    with pytest.raises(BookingNotFoundError):
        await client.delete_booking(DAY, "09:00")
    with pytest.raises(BookingValidationError) as exc:
        await client.create_booking(DAY, "09:00", "Jack", 12)
    assert exc.value.fields == ["duration"]
    await client.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_server_and_transport_failures_are_upstream_errors():
    client = _client()
    respx.get(f"{BASE}/api/bookings").respond(500, text="boom")
    respx.get(f"{BASE}/api/config").mock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(BookingsUpstreamError):
        await client.fetch_bookings()
    with pytest.raises(BookingsUpstreamError):
        await client.fetch_config()
    await client.aclose()


@pytest.mark.asyncio
@respx.mock
async def test_fetch_config():
    client = _client()
    respx.get(f"{BASE}/api/config").respond(
        200,
        json={
            "slug": "cps-software",
            "title": "CPS Software Booking",
            "users": [{"name": "Jack", "key": "j"}],
            "createdAt": "2026-01-01T00:00:00+00:00",
        },
    )

    config = await client.fetch_config()
    assert config.slug == "cps-software"
    assert [u.name for u in config.users] == ["Jack"]
    assert config.created_at == "2026-01-01T00:00:00+00:00"
    await client.aclose()
