"""
End-to-end: two client caches talking to the real API app over an
in-process transport.
"""

from __future__ import annotations

import httpx
import pytest

from hourbook.application.use_cases.booking_service import BookingService
from hourbook.application.use_cases.booking_store import BookingStore
from hourbook.application.use_cases.config_loader import ConfigLoader
from hourbook.application.use_cases.instance_config import InstanceConfigService
from hourbook.domain.entities.booking import Booking
from hourbook.infrastructure.remote.bookings_api import BookingsApiClient
from hourbook.infrastructure.store.memory_store import MemoryDocumentStore
from hourbook.main import app
from hourbook.wiring.dependencies import get_booking_service, get_instance_config_service

DAY = "2026-02-13"


@pytest.fixture
def server():
    store = MemoryDocumentStore()
    app.dependency_overrides[get_booking_service] = lambda: BookingService(store=store, instance_slug="it")
    app.dependency_overrides[get_instance_config_service] = lambda: InstanceConfigService(
        store=store, instance_slug="it"
    )
    yield store
    app.dependency_overrides.clear()


def _api_client() -> BookingsApiClient:
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://calendar.test")
    return BookingsApiClient(http=http)


@pytest.mark.asyncio
async def test_two_clients_converge_after_a_conflict(server):
    alice_repo, bob_repo = _api_client(), _api_client()
    alice, bob = BookingStore(alice_repo), BookingStore(bob_repo)
    await alice.load()
    await bob.load()

    assert await bob.book(DAY, 10, "Bob", 1) is True

    # Alice has not seen Bob's booking yet, so her cache allows the request
    assert alice.can_create(DAY, 9, 2) is True
    assert await alice.book(DAY, 9, "Alice", 2) is False
    assert alice.error == "Slot 10:00 conflicts with booking duration"
    assert alice.bookings == {DAY: {"10:00": Booking(user="Bob", duration=1)}}

    assert await alice.book(DAY, 8, "Alice", 2) is True
    await bob.refresh()
    assert bob.bookings == alice.bookings == {
        DAY: {"08:00": Booking(user="Alice", duration=2), "10:00": Booking(user="Bob", duration=1)}
    }

    assert await bob.remove(DAY, "10:00") is True
    await alice.refresh()
    assert alice.bookings == {DAY: {"08:00": Booking(user="Alice", duration=2)}}

    await alice_repo.aclose()
    await bob_repo.aclose()


@pytest.mark.asyncio
async def test_config_loader_reads_server_defaults(server):
    repo = _api_client()
    loader = ConfigLoader(repo, instance_slug="it")

    config = await loader.load()

    assert config.slug == "it"
    assert config.title == "CPS Software Booking"
    assert len(config.users) == 6
    assert loader.error is None
    await repo.aclose()
