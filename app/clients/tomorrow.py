from __future__ import annotations

import logging
import random
from typing import Any, Literal

import httpx

from app.clients import mock
from app.core.errors import ApiError
from app.models.weather import Location, Timestep, Units

logger = logging.getLogger(__name__)

TOMORROW_API_BASE_URL = "https://api.tomorrow.io/v4"

HealthStatus = Literal["healthy", "unhealthy"]


def location_param(location: Location) -> str:
    if location.has_coordinates:
        return f"{location.lat},{location.lon}"
    if location.name:
        return location.name
    raise ApiError.bad_request("Invalid location data")


def map_status_error(status_code: int) -> ApiError:
    if status_code == 401:
        return ApiError.unauthorized("Invalid Tomorrow.io API key")
    if status_code == 403:
        return ApiError.forbidden("Tomorrow.io API access forbidden")
    if status_code == 404:
        return ApiError.not_found("Location not found")
    if status_code == 429:
        return ApiError.too_many_requests("Tomorrow.io API rate limit exceeded")
    if status_code >= 500:
        return ApiError.internal_server_error("Tomorrow.io API server error")
    return ApiError.internal_server_error("Failed to fetch weather data")


class TomorrowClient:
    """Tomorrow.io v4 client.

    In mock mode no HTTP request is ever made and the synthetic payloads
    from :mod:`app.clients.mock` are returned instead.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        timeout_seconds: float,
        base_url: str = TOMORROW_API_BASE_URL,
        use_mock: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._api_key = api_key or ""
        self._use_mock = use_mock
        self._rng = rng or random.Random()
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=headers,
            transport=transport,
        )

    @property
    def use_mock(self) -> bool:
        return self._use_mock

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self._api_key:
            raise ApiError.internal_server_error("Tomorrow.io API key not configured")

        try:
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Tomorrow.io %s returned %s", path, e.response.status_code
            )
            raise map_status_error(e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning("Tomorrow.io %s request failed: %s", path, e)
            raise ApiError.internal_server_error("Failed to fetch weather data") from e

        try:
            payload = resp.json()
        except ValueError as e:
            logger.warning("Tomorrow.io %s returned a non-JSON body", path)
            raise ApiError.internal_server_error("Failed to fetch weather data") from e
        if not isinstance(payload, dict):
            raise ApiError.internal_server_error("Failed to fetch weather data")
        return payload

    async def fetch_realtime(self, location: Location, units: Units = "metric") -> dict[str, Any]:
        if self._use_mock:
            if location.has_coordinates:
                return mock.realtime_by_coordinates(location.lat, location.lon, self._rng)
            return mock.realtime_by_city(location_param(location), self._rng)

        return await self._get(
            "/weather/realtime",
            {"location": location_param(location), "units": units},
        )

    async def fetch_forecast(
        self,
        location: Location,
        timesteps: Timestep = "1h",
        units: Units = "metric",
    ) -> dict[str, Any]:
        if self._use_mock:
            if location.has_coordinates:
                return mock.forecast_payload(
                    lat=location.lat, lon=location.lon, timestep=timesteps, rng=self._rng
                )
            return mock.forecast_payload(
                timestep=timesteps, name=location_param(location), rng=self._rng
            )

        return await self._get(
            "/weather/forecast",
            {"location": location_param(location), "timesteps": timesteps, "units": units},
        )

    async def search_locations(self, query: str, limit: int = 5) -> dict[str, Any]:
        if self._use_mock:
            return mock.search_payload(query, limit)
        return await self._get("/map/search", {"query": query, "limit": limit})

    async def check_health(self) -> HealthStatus:
        if self._use_mock:
            return "healthy"
        try:
            await self.fetch_realtime(Location(lat=0, lon=0), "metric")
        except Exception as e:  # noqa: BLE001 - any failure means unhealthy
            logger.warning("Tomorrow.io health check failed: %s", e)
            return "unhealthy"
        return "healthy"
