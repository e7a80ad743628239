from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.responses import JSONResponse

from app.api.deps import AuthContext, OptionalUser, get_weather_service
from app.core.errors import ApiError
from app.models.weather import ResponseFormat, Timestep, Units
from app.schemas.weather import (
    BatchWeatherRequest,
    BatchWeatherResponse,
    ForecastResponse,
    LocationQuery,
    LocationSearchResponse,
    RealtimeWeatherRequest,
    ServiceHealth,
    WeatherResponse,
)
from app.services.normalizer import location_out, to_forecast_out
from app.services.weather import WeatherService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/weather")

Latitude = Annotated[float | None, Query(ge=-90, le=90)]
Longitude = Annotated[float | None, Query(ge=-180, le=180)]
City = Annotated[str | None, Query(min_length=1, max_length=128)]


def _log_caller(user: AuthContext | None, action: str) -> None:
    if user is not None:
        logger.debug("%s requested by %s", action, user.subject)


@router.get("/realtime", response_model=WeatherResponse, response_model_exclude_none=True)
async def realtime_weather(
    user: OptionalUser,
    service: Annotated[WeatherService, Depends(get_weather_service)],
    lat: Latitude = None,
    lon: Longitude = None,
    city: City = None,
    format: ResponseFormat = "full",
    units: Units = "metric",
) -> WeatherResponse:
    _log_caller(user, "realtime weather")
    try:
        data = await service.get_with_format(
            LocationQuery(lat=lat, lon=lon, city=city), format, units
        )
    except ApiError:
        raise
    except Exception as e:  # noqa: BLE001 - normalize unexpected failures
        raise ApiError.internal_server_error("Failed to fetch weather data") from e
    return WeatherResponse(data=data, message="Real-time weather data retrieved successfully")


@router.post("/realtime", response_model=WeatherResponse, response_model_exclude_none=True)
async def realtime_weather_post(
    user: OptionalUser,
    payload: RealtimeWeatherRequest,
    service: Annotated[WeatherService, Depends(get_weather_service)],
) -> WeatherResponse:
    _log_caller(user, "realtime weather")
    try:
        data = await service.get_with_format(payload.location, payload.format, payload.units)
    except ApiError:
        raise
    except Exception as e:  # noqa: BLE001
        raise ApiError.internal_server_error("Failed to fetch weather data") from e
    return WeatherResponse(data=data, message="Real-time weather data retrieved successfully")


@router.get(
    "/locations/{city}", response_model=WeatherResponse, response_model_exclude_none=True
)
async def weather_for_city(
    user: OptionalUser,
    city: Annotated[str, Path(min_length=1, max_length=128)],
    service: Annotated[WeatherService, Depends(get_weather_service)],
    format: ResponseFormat = "full",
    units: Units = "metric",
) -> WeatherResponse:
    _log_caller(user, "city weather")
    try:
        data = await service.get_with_format(LocationQuery(city=city), format, units)
    except ApiError:
        raise
    except Exception as e:  # noqa: BLE001
        raise ApiError.internal_server_error("Failed to fetch weather data") from e
    return WeatherResponse(data=data, message=f"Weather data for {city} retrieved successfully")


@router.get(
    "/coordinates/{lat}/{lon}",
    response_model=WeatherResponse,
    response_model_exclude_none=True,
)
async def weather_for_coordinates(
    user: OptionalUser,
    lat: Annotated[float, Path(ge=-90, le=90)],
    lon: Annotated[float, Path(ge=-180, le=180)],
    service: Annotated[WeatherService, Depends(get_weather_service)],
    format: ResponseFormat = "full",
    units: Units = "metric",
) -> WeatherResponse:
    _log_caller(user, "coordinate weather")
    try:
        data = await service.get_with_format(LocationQuery(lat=lat, lon=lon), format, units)
    except ApiError:
        raise
    except Exception as e:  # noqa: BLE001
        raise ApiError.internal_server_error("Failed to fetch weather data") from e
    return WeatherResponse(
        data=data,
        message=f"Weather data for coordinates {lat},{lon} retrieved successfully",
    )


@router.post("/batch", response_model=BatchWeatherResponse, response_model_exclude_none=True)
async def batch_weather(
    user: OptionalUser,
    payload: BatchWeatherRequest,
    service: Annotated[WeatherService, Depends(get_weather_service)],
) -> BatchWeatherResponse:
    _log_caller(user, "batch weather")
    try:
        rows = await service.get_batch_weather(payload.locations, payload.units)
    except ApiError:
        raise
    except Exception as e:  # noqa: BLE001
        raise ApiError.internal_server_error("Failed to fetch batch weather data") from e
    return BatchWeatherResponse(
        data=rows,
        total=len(rows),
        message="Batch weather data retrieved successfully",
    )


@router.get(
    "/search/{query}", response_model=LocationSearchResponse, response_model_exclude_none=True
)
async def search_locations(
    query: Annotated[str, Path(min_length=2, max_length=128)],
    service: Annotated[WeatherService, Depends(get_weather_service)],
    limit: Annotated[int, Query(ge=1, le=10)] = 5,
) -> LocationSearchResponse:
    try:
        locations = await service.search_locations(query, limit)
    except ApiError:
        raise
    except Exception as e:  # noqa: BLE001
        raise ApiError.internal_server_error("Failed to search locations") from e
    return LocationSearchResponse(
        data=[location_out(loc) for loc in locations],
        total=len(locations),
        message=f'Found {len(locations)} locations for "{query}"',
    )


@router.get("/forecast", response_model=ForecastResponse, response_model_exclude_none=True)
async def weather_forecast(
    user: OptionalUser,
    service: Annotated[WeatherService, Depends(get_weather_service)],
    lat: Latitude = None,
    lon: Longitude = None,
    city: City = None,
    timesteps: Timestep = "1h",
    units: Units = "metric",
) -> ForecastResponse:
    _log_caller(user, "forecast")
    try:
        forecast = await service.get_forecast(
            LocationQuery(lat=lat, lon=lon, city=city), timesteps, units
        )
    except ApiError:
        raise
    except Exception as e:  # noqa: BLE001
        raise ApiError.internal_server_error("Failed to fetch weather forecast") from e
    return ForecastResponse(
        data=to_forecast_out(forecast), message="Weather forecast retrieved successfully"
    )


@router.get("/health", response_model=ServiceHealth)
async def weather_health(
    service: Annotated[WeatherService, Depends(get_weather_service)],
):
    try:
        health = await service.get_service_health()
    except Exception:  # noqa: BLE001 - report as unhealthy rather than 500
        logger.exception("Weather service health check failed")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "error": "Failed to check service health",
                "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            },
        )
    code = status.HTTP_200_OK if health.status == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=health.model_dump(mode="json"))
