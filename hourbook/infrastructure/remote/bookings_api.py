from __future__ import annotations

import logging
from typing import Any

import httpx

from hourbook.application.exceptions import (
    BookingNotFoundError,
    BookingsUpstreamError,
    BookingValidationError,
    conflict_from_payload,
)
from hourbook.application.ports.booking_repository import BookingRepositoryPort
from hourbook.application.utils.booking_set import from_document
from hourbook.core.config import settings
from hourbook.domain.entities.booking import Booking, BookingSet
from hourbook.domain.entities.instance_config import InstanceConfig


class BookingsApiClient(BookingRepositoryPort):
    """Bookings repository backed by the hosted HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._http = http or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout or settings.API_TIMEOUT_SECONDS,
        )
        self._logger = logging.getLogger(__name__)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        try:
            resp = await self._http.request(method, path, json=json)
        except httpx.HTTPError as e:
            self._logger.error("Bookings API unreachable", extra={"error": str(e), "reason": f"{method} {path}"})
            raise BookingsUpstreamError(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            try:
                payload = resp.json()
                if not isinstance(payload, dict):
                    payload = {"error": str(payload)}
            except ValueError:
                payload = {"error": resp.text or f"HTTP {resp.status_code}"}

            message = str(payload.get("error") or f"HTTP {resp.status_code}")
            self._logger.warning(
                "Bookings API rejected request",
                extra={"code": payload.get("code"), "error": message, "reason": f"{method} {path}"},
            )
            if resp.status_code == 409:
                raise conflict_from_payload(payload)
            if resp.status_code == 404:
                raise BookingNotFoundError(message)
            if resp.status_code == 400:
                raise BookingValidationError(message, payload.get("fields"))
            raise BookingsUpstreamError(f"HTTP {resp.status_code}: {message}")

        try:
            return resp.json()
        except ValueError as e:
            raise BookingsUpstreamError(f"{method} {path} returned invalid JSON") from e

    async def fetch_bookings(self) -> BookingSet | None:
        data = await self._request("GET", "/api/bookings")
        try:
            return from_document(data)
        except ValueError as e:
            raise BookingsUpstreamError(f"Malformed bookings document: {e}") from e

    async def create_booking(self, date_key: str, time_key: str, user: str, duration: int) -> Booking:
        data = await self._request(
            "POST",
            "/api/bookings",
            json={"dateKey": date_key, "timeKey": time_key, "user": user, "duration": duration},
        )
        return Booking.from_dict(data.get("booking") or {})

    async def update_booking(
        self,
        date_key: str,
        time_key: str,
        user: str | None = None,
        duration: int | None = None,
    ) -> Booking:
        updates: dict[str, Any] = {}
        if user is not None:
            updates["user"] = user
        if duration is not None:
            updates["duration"] = duration
        data = await self._request(
            "PUT",
            "/api/bookings/update",
            json={"dateKey": date_key, "timeKey": time_key, "updates": updates},
        )
        return Booking.from_dict(data.get("booking") or {})

    async def delete_booking(self, date_key: str, time_key: str) -> None:
        await self._request("DELETE", "/api/bookings/update", json={"dateKey": date_key, "timeKey": time_key})

    async def fetch_config(self) -> InstanceConfig | None:
        data = await self._request("GET", "/api/config")
        if not isinstance(data, dict):
            return None
        return InstanceConfig.from_dict(data)
