"""Mapping from Tomorrow.io payloads to the gateway's own weather shapes."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Any, Callable

from app.core.errors import ApiError
from app.models.weather import (
    ForecastData,
    ForecastInterval,
    Location,
    Precipitation,
    Timestep,
    WeatherCategory,
    WeatherData,
)
from app.schemas.weather import (
    ForecastIntervalOut,
    ForecastOut,
    LocationOut,
    PrecipitationOut,
    WeatherCompact,
    WeatherFull,
)

WEATHER_CODES: dict[int, str] = {
    1000: "Clear",
    1100: "Mostly Clear",
    1101: "Partly Cloudy",
    1102: "Mostly Cloudy",
    1001: "Cloudy",
    2000: "Fog",
    2100: "Light Fog",
    4000: "Drizzle",
    4001: "Rain",
    4200: "Light Rain",
    4201: "Heavy Rain",
    5000: "Snow",
    5001: "Flurries",
    5100: "Light Snow",
    5101: "Heavy Snow",
    6000: "Freezing Drizzle",
    6001: "Freezing Rain",
    6200: "Light Freezing Rain",
    6201: "Heavy Freezing Rain",
    7000: "Ice Pellets",
    7101: "Heavy Ice Pellets",
    7102: "Light Ice Pellets",
    8000: "Thunderstorm",
}

WEATHER_CATEGORIES: tuple[tuple[WeatherCategory, frozenset[int]], ...] = (
    ("clear", frozenset({1000, 1100})),
    ("cloudy", frozenset({1101, 1102, 1001})),
    ("rain", frozenset({4000, 4001, 4200, 4201, 6000, 6001, 6200, 6201})),
    ("snow", frozenset({5000, 5001, 5100, 5101})),
    ("storm", frozenset({8000})),
    ("fog", frozenset({2000, 2100})),
)


def weather_description(code: int | None) -> str:
    if code is None:
        return "Unknown"
    return WEATHER_CODES.get(code, "Unknown")


def weather_category(code: int | None) -> WeatherCategory:
    for category, codes in WEATHER_CATEGORIES:
        if code in codes:
            return category
    return "unknown"


def _parse_time(value: Any) -> datetime:
    # Example: "2026-01-30T22:00:00Z"
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO timestamp, got {value!r}")
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _time_or_none(value: Any) -> datetime | None:
    try:
        return _parse_time(value)
    except ValueError:
        return None


def _float_or_none(v: Any) -> float | None:
    try:
        if v is None:
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


def _int_or_zero(v: Any) -> int:
    value = _float_or_none(v)
    return int(value) if value is not None else 0


def _str_or_none(v: Any) -> str | None:
    if v is None:
        return None
    if isinstance(v, str):
        return v
    return str(v)


def normalize_location_name(location: Location) -> str:
    if location.name:
        return f"{location.name}, {location.country}" if location.country else location.name
    if location.has_coordinates:
        return f"{location.lat:.4f}, {location.lon:.4f}"
    return "Unknown location"


def merge_location(resolved: Location, provider_block: Any) -> Location:
    """Keep what the caller asked for; fill the gaps from the provider."""
    block = provider_block if isinstance(provider_block, dict) else {}
    return Location(
        lat=resolved.lat if resolved.lat is not None else _float_or_none(block.get("lat")),
        lon=resolved.lon if resolved.lon is not None else _float_or_none(block.get("lon")),
        name=resolved.name or _str_or_none(block.get("name")),
        country=resolved.country or _str_or_none(block.get("country")),
    )


def sanitize_weather_data(data: WeatherData) -> WeatherData:
    location = data.location
    name = location.name.strip() if location.name else ""
    location = dataclasses.replace(
        location,
        lat=round(location.lat, 4) if location.lat is not None else None,
        lon=round(location.lon, 4) if location.lon is not None else None,
        name=name or normalize_location_name(location),
    )
    return dataclasses.replace(
        data,
        location=location,
        temperature=round(data.temperature, 1),
        humidity=round(data.humidity, 1),
        wind_speed=round(data.wind_speed, 1),
        wind_direction=round(data.wind_direction, 0),
        precipitation=Precipitation(
            intensity=round(data.precipitation.intensity, 2),
            probability=round(data.precipitation.probability, 0),
        ),
        visibility=round(data.visibility, 1),
        uv_index=round(data.uv_index, 1),
        cloud_cover=round(data.cloud_cover, 0),
        pressure=round(data.pressure, 1),
        description=weather_description(data.weather_code),
    )


def transform_realtime_response(payload: dict[str, Any], location: Location) -> WeatherData:
    try:
        data = payload["data"]
        values: dict[str, Any] = data["values"]
        timestamp = _parse_time(data["time"])
    except (KeyError, TypeError, ValueError) as e:
        raise ApiError.internal_server_error(
            "Unexpected realtime response from weather provider"
        ) from e

    def num(key: str) -> float:
        value = _float_or_none(values.get(key))
        return value if value is not None else 0.0

    weather_code = _int_or_zero(values.get("weatherCode"))
    weather = WeatherData(
        location=merge_location(location, payload.get("location")),
        timestamp=timestamp,
        temperature=num("temperature"),
        humidity=num("humidity"),
        wind_speed=num("windSpeed"),
        wind_direction=num("windDirection"),
        precipitation=Precipitation(
            intensity=num("precipitationIntensity"),
            probability=num("precipitationProbability"),
        ),
        visibility=num("visibility"),
        uv_index=num("uvIndex"),
        cloud_cover=num("cloudCover"),
        pressure=num("pressureSurfaceLevel"),
        weather_code=weather_code,
        description=weather_description(weather_code),
    )
    return sanitize_weather_data(weather)


def _hourly_interval(time: datetime, values: dict[str, Any]) -> ForecastInterval:
    code = _int_or_zero(values.get("weatherCode"))
    return ForecastInterval(
        time=time,
        temperature=_float_or_none(values.get("temperature")),
        feels_like=_float_or_none(values.get("temperatureApparent")),
        humidity=_float_or_none(values.get("humidity")),
        cloud_cover=_float_or_none(values.get("cloudCover")),
        precipitation_chance=_float_or_none(values.get("precipitationProbability")) or 0.0,
        wind_speed=_float_or_none(values.get("windSpeed")),
        uv_index=_float_or_none(values.get("uvIndex")),
        weather_code=code,
        description=weather_description(code),
    )


def _daily_interval(time: datetime, values: dict[str, Any]) -> ForecastInterval:
    code = _int_or_zero(values.get("weatherCodeMax"))
    return ForecastInterval(
        time=time,
        temperature=_float_or_none(values.get("temperatureMax")),
        feels_like=_float_or_none(values.get("temperatureApparentMax")),
        humidity=_float_or_none(values.get("humidityAvg")),
        cloud_cover=_float_or_none(values.get("cloudCoverAvg")),
        precipitation_chance=_float_or_none(values.get("precipitationProbabilityMax")) or 0.0,
        wind_speed=_float_or_none(values.get("windSpeedAvg")),
        uv_index=_float_or_none(values.get("uvIndexMax")),
        sunrise=_time_or_none(values.get("sunriseTime")),
        sunset=_time_or_none(values.get("sunsetTime")),
        weather_code=code,
        description=weather_description(code),
    )


def transform_forecast_response(
    payload: dict[str, Any], location: Location, timestep: Timestep
) -> ForecastData:
    key = "hourly" if timestep == "1h" else "daily"
    timelines = payload.get("timelines")
    entries = timelines.get(key) if isinstance(timelines, dict) else None
    if not isinstance(entries, list):
        raise ApiError.internal_server_error(
            "Unexpected forecast response from weather provider"
        )

    mapper: Callable[[datetime, dict[str, Any]], ForecastInterval] = (
        _hourly_interval if timestep == "1h" else _daily_interval
    )
    intervals: list[ForecastInterval] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        time = _time_or_none(entry.get("time") or entry.get("startTime"))
        values = entry.get("values")
        if time is None or not isinstance(values, dict):
            continue
        intervals.append(mapper(time, values))

    return ForecastData(
        location=merge_location(location, payload.get("location")),
        timestep=timestep,
        intervals=intervals,
    )


def transform_search_response(payload: dict[str, Any], query: str) -> list[Location]:
    features = payload.get("features")
    if not isinstance(features, list):
        return []

    locations: list[Location] = []
    for feature in features:
        if not isinstance(feature, dict):
            continue
        coords = (feature.get("geometry") or {}).get("coordinates")
        if not isinstance(coords, list) or len(coords) < 2:
            continue
        props = feature.get("properties") or {}
        locations.append(
            Location(
                lat=_float_or_none(coords[1]),
                lon=_float_or_none(coords[0]),
                name=_str_or_none(props.get("name") or props.get("full_name")) or query,
                country=_str_or_none(props.get("country")),
            )
        )
    return locations


def location_out(location: Location) -> LocationOut:
    return LocationOut(
        name=location.name or normalize_location_name(location),
        lat=location.lat,
        lon=location.lon,
        country=location.country,
    )


def to_full(data: WeatherData) -> WeatherFull:
    return WeatherFull(
        location=location_out(data.location),
        temperature=data.temperature,
        wind_speed=data.wind_speed,
        wind_direction=data.wind_direction,
        precipitation=PrecipitationOut(
            intensity=data.precipitation.intensity,
            probability=data.precipitation.probability,
        ),
        condition=data.description,
        category=weather_category(data.weather_code),
        timestamp=data.timestamp,
    )


def to_compact(data: WeatherData) -> WeatherCompact:
    return WeatherCompact(
        location=data.location.name or normalize_location_name(data.location),
        temperature=data.temperature,
        condition=data.description,
        humidity=data.humidity,
        wind_speed=data.wind_speed,
        precipitation=data.precipitation.intensity,
        timestamp=data.timestamp,
    )


def to_forecast_out(forecast: ForecastData) -> ForecastOut:
    return ForecastOut(
        location=location_out(forecast.location),
        timestep=forecast.timestep,
        intervals=[
            ForecastIntervalOut.model_validate(dataclasses.asdict(interval))
            for interval in forecast.intervals
        ],
    )
