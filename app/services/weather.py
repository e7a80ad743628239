from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from app.clients.tomorrow import TomorrowClient
from app.core.errors import ApiError
from app.models.weather import (
    BatchOutcome,
    ForecastData,
    Location,
    ResponseFormat,
    Timestep,
    Units,
    WeatherData,
)
from app.schemas.weather import LocationQuery, ServiceHealth, WeatherCompact, WeatherFull
from app.services.location import resolve_location
from app.services.normalizer import (
    to_compact,
    to_full,
    transform_forecast_response,
    transform_realtime_response,
    transform_search_response,
)

logger = logging.getLogger(__name__)

MAX_BATCH_LOCATIONS = 10
MIN_SEARCH_QUERY_LENGTH = 2


class WeatherService:
    def __init__(self, *, client: TomorrowClient) -> None:
        self._client = client

    async def get_realtime(
        self, query: LocationQuery, units: Units = "metric"
    ) -> WeatherData:
        location = resolve_location(query)
        payload = await self._client.fetch_realtime(location, units)
        return transform_realtime_response(payload, location)

    async def get_with_format(
        self,
        query: LocationQuery,
        format: ResponseFormat = "full",
        units: Units = "metric",
    ) -> WeatherFull | WeatherCompact:
        weather = await self.get_realtime(query, units)
        if format == "compact":
            return to_compact(weather)
        return to_full(weather)

    async def get_forecast(
        self,
        query: LocationQuery,
        timesteps: Timestep = "1h",
        units: Units = "metric",
    ) -> ForecastData:
        location = resolve_location(query)
        payload = await self._client.fetch_forecast(location, timesteps, units)
        return transform_forecast_response(payload, location, timesteps)

    async def search_locations(self, query: str, limit: int = 5) -> list[Location]:
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_QUERY_LENGTH:
            raise ApiError.bad_request("Search query must be at least 2 characters")
        payload = await self._client.search_locations(query, limit)
        return transform_search_response(payload, query)[:limit]

    async def fetch_batch_outcomes(
        self, queries: list[LocationQuery], units: Units = "metric"
    ) -> list[BatchOutcome]:
        """Run every query to completion; one failure never cancels the others."""
        if not queries:
            raise ApiError.bad_request("Locations array is required")
        if len(queries) > MAX_BATCH_LOCATIONS:
            raise ApiError.bad_request(f"Maximum {MAX_BATCH_LOCATIONS} locations allowed")

        results = await asyncio.gather(
            *(self.get_realtime(query, units) for query in queries),
            return_exceptions=True,
        )
        outcomes: list[BatchOutcome] = []
        for index, result in enumerate(results):
            if isinstance(result, BaseException):
                outcomes.append(BatchOutcome(index=index, error=result))
            else:
                outcomes.append(BatchOutcome(index=index, weather=result))
        return outcomes

    async def get_batch_weather(
        self, queries: list[LocationQuery], units: Units = "metric"
    ) -> list[WeatherFull]:
        outcomes = await self.fetch_batch_outcomes(queries, units)
        failed = [o for o in outcomes if not o.ok]
        if failed:
            logger.warning(
                "Batch weather: %d of %d locations failed (%s)",
                len(failed),
                len(outcomes),
                "; ".join(f"#{o.index}: {o.error!r}" for o in failed),
            )
        return [to_full(o.weather) for o in outcomes if o.ok and o.weather is not None]

    async def get_service_health(self) -> ServiceHealth:
        api_status = await self._client.check_health()
        return ServiceHealth(
            status="healthy" if api_status == "healthy" else "unhealthy",
            services={"tomorrowApi": {"status": api_status}},
            timestamp=datetime.now(tz=timezone.utc),
        )
