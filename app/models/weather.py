from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Units = Literal["metric", "imperial"]
ResponseFormat = Literal["full", "compact"]
Timestep = Literal["1h", "1d"]
WeatherCategory = Literal["clear", "cloudy", "rain", "snow", "storm", "fog", "unknown"]


@dataclass(frozen=True)
class Location:
    lat: float | None = None
    lon: float | None = None
    name: str | None = None
    country: str | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass(frozen=True)
class Precipitation:
    intensity: float = 0.0
    probability: float = 0.0


@dataclass(frozen=True)
class WeatherData:
    location: Location
    timestamp: datetime

    temperature: float = 0.0
    humidity: float = 0.0
    wind_speed: float = 0.0
    wind_direction: float = 0.0
    precipitation: Precipitation = field(default_factory=Precipitation)
    visibility: float = 0.0
    uv_index: float = 0.0
    cloud_cover: float = 0.0
    pressure: float = 0.0
    weather_code: int = 0
    description: str = "Unknown"


@dataclass(frozen=True)
class ForecastInterval:
    time: datetime
    temperature: float | None = None
    feels_like: float | None = None
    humidity: float | None = None
    cloud_cover: float | None = None
    precipitation_chance: float = 0.0
    wind_speed: float | None = None
    uv_index: float | None = None
    sunrise: datetime | None = None
    sunset: datetime | None = None
    weather_code: int = 0
    description: str = "Unknown"


@dataclass(frozen=True)
class ForecastData:
    location: Location
    timestep: Timestep
    intervals: list[ForecastInterval] = field(default_factory=list)


@dataclass(frozen=True)
class BatchOutcome:
    """Result of one batch entry; exactly one of ``weather``/``error`` is set."""

    index: int
    weather: WeatherData | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.weather is not None
