"""Synthetic Tomorrow.io payloads for running without the live provider.

Every payload here has the same shape as the live API so the normalizer
never needs to know which mode produced it.
"""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta, timezone
from typing import Any

from app.models.weather import Timestep

DEFAULT_LAT = 32.0853
DEFAULT_LON = 34.7818
BASE_TEMPERATURE = 20.0

_MILD_CITIES = ("london", "seattle", "moscow", "alaska", "dubai", "phoenix", "miami", "florida")


def _iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def _rainy(rng: random.Random) -> bool:
    return rng.random() > 0.8


def realtime_payload(
    *,
    lat: float = DEFAULT_LAT,
    lon: float = DEFAULT_LON,
    temperature: float = BASE_TEMPERATURE,
    name: str | None = None,
) -> dict[str, Any]:
    location: dict[str, Any] = {"lat": lat, "lon": lon}
    if name:
        location["name"] = name
    return {
        "data": {
            "time": _iso(datetime.now(tz=timezone.utc).replace(microsecond=0)),
            "values": {
                "temperature": temperature,
                "humidity": 60,
                "windSpeed": 5.0,
                "windDirection": 180,
                "precipitationIntensity": 0,
                "precipitationProbability": 10,
                "visibility": 15.0,
                "uvIndex": 5,
                "cloudCover": 30,
                "pressureSurfaceLevel": 1013.25,
                "weatherCode": 1000,
            },
        },
        "location": location,
    }


def city_temperature(city: str, rng: random.Random | None = None) -> float:
    rng = rng or random.Random()
    key = city.lower()
    if any(name in key for name in _MILD_CITIES):
        return BASE_TEMPERATURE
    return BASE_TEMPERATURE + (rng.random() - 0.5) * 2


def realtime_by_coordinates(
    lat: float, lon: float, rng: random.Random | None = None
) -> dict[str, Any]:
    rng = rng or random.Random()
    temperature = BASE_TEMPERATURE + (lat / 90) * 15 + (rng.random() - 0.5) * 10
    return realtime_payload(lat=lat, lon=lon, temperature=temperature)


def realtime_by_city(city: str, rng: random.Random | None = None) -> dict[str, Any]:
    return realtime_payload(temperature=city_temperature(city, rng), name=city)


def _hourly_values(i: int, rng: random.Random) -> dict[str, Any]:
    variation = rng.random() * 2 - 1
    return {
        "temperature": round(BASE_TEMPERATURE + variation, 1),
        "temperatureApparent": round(BASE_TEMPERATURE + variation + 1, 1),
        "humidity": round(50 + math.sin(i * 0.3) * 20),
        "windSpeed": round(3 + rng.random() * 4, 1),
        "windDirection": (180 + i * 15) % 360,
        "precipitationProbability": (
            round(rng.random() * 80 + 20) if _rainy(rng) else round(rng.random() * 20)
        ),
        "visibility": round(12 + rng.random() * 6, 1),
        "uvIndex": max(0, round(7 + math.sin(i * 0.2) * 3)),
        "cloudCover": round(rng.random() * 80),
        "weatherCode": 4000 if _rainy(rng) else 1000,
    }


def _daily_values(i: int, start: datetime, rng: random.Random) -> dict[str, Any]:
    max_temp = BASE_TEMPERATURE + 2
    min_temp = BASE_TEMPERATURE - 2
    return {
        "temperatureMax": max_temp,
        "temperatureMin": min_temp,
        "temperatureApparentMax": max_temp + 1,
        "temperatureApparentMin": min_temp + 1,
        "humidityAvg": round(50 + math.sin(i * 0.3) * 20),
        "windSpeedAvg": round(3 + rng.random() * 4, 1),
        "precipitationProbabilityMax": (
            round(rng.random() * 80 + 20) if _rainy(rng) else round(rng.random() * 20)
        ),
        "cloudCoverAvg": round(rng.random() * 80),
        "uvIndexMax": max(0, round(7 + math.sin(i * 0.2) * 3)),
        "weatherCodeMax": 4000 if _rainy(rng) else 1000,
        "sunriseTime": _iso(start + timedelta(hours=6)),
        "sunsetTime": _iso(start + timedelta(hours=18)),
    }


def forecast_payload(
    *,
    lat: float = DEFAULT_LAT,
    lon: float = DEFAULT_LON,
    timestep: Timestep = "1h",
    name: str | None = None,
    rng: random.Random | None = None,
) -> dict[str, Any]:
    rng = rng or random.Random()
    now = datetime.now(tz=timezone.utc).replace(microsecond=0)
    hourly = timestep == "1h"
    step = timedelta(hours=1) if hourly else timedelta(days=1)

    intervals: list[dict[str, Any]] = []
    for i in range(24 if hourly else 7):
        time = now + i * step
        values = _hourly_values(i, rng) if hourly else _daily_values(i, time, rng)
        intervals.append({"time": _iso(time), "values": values})

    return {
        "timelines": {"hourly" if hourly else "daily": intervals},
        "location": {
            "lat": lat,
            "lon": lon,
            "name": name or f"Mock Location {lat:.2f}, {lon:.2f}",
        },
    }


def search_payload(query: str, limit: int) -> dict[str, Any]:
    features = [
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [DEFAULT_LON, DEFAULT_LAT]},
            "properties": {"name": query.strip().title(), "country": "Mock"},
        }
    ]
    return {"type": "FeatureCollection", "features": features[: max(limit, 0)]}
