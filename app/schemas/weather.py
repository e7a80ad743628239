from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.weather import ResponseFormat, Timestep, Units, WeatherCategory


class LocationQuery(BaseModel):
    lat: float | None = None
    lon: float | None = None
    city: str | None = None


class RealtimeWeatherRequest(BaseModel):
    location: LocationQuery
    format: ResponseFormat = "full"
    units: Units = "metric"


class BatchWeatherRequest(BaseModel):
    locations: list[LocationQuery] = Field(default_factory=list)
    units: Units = "metric"


class LocationOut(BaseModel):
    name: str | None = None
    lat: float | None = None
    lon: float | None = None
    country: str | None = None


class PrecipitationOut(BaseModel):
    intensity: float
    probability: float


class WeatherFull(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location: LocationOut
    temperature: float
    wind_speed: float = Field(alias="windSpeed")
    wind_direction: float = Field(alias="windDirection")
    precipitation: PrecipitationOut
    condition: str
    category: WeatherCategory
    timestamp: datetime


class WeatherCompact(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location: str
    temperature: float
    condition: str
    humidity: float
    wind_speed: float = Field(alias="windSpeed")
    precipitation: float
    timestamp: datetime


class ForecastIntervalOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    time: datetime
    temperature: float | None = None
    feels_like: float | None = Field(default=None, alias="feelsLike")
    humidity: float | None = None
    cloud_cover: float | None = Field(default=None, alias="cloudCover")
    precipitation_chance: float = Field(default=0.0, alias="precipitationChance")
    wind_speed: float | None = Field(default=None, alias="windSpeed")
    uv_index: float | None = Field(default=None, alias="uvIndex")
    sunrise: datetime | None = None
    sunset: datetime | None = None
    weather_code: int = Field(alias="weatherCode")
    description: str


class ForecastOut(BaseModel):
    location: LocationOut
    timestep: Timestep
    intervals: list[ForecastIntervalOut] = Field(default_factory=list)


class WeatherResponse(BaseModel):
    success: bool = True
    data: WeatherFull | WeatherCompact
    message: str | None = None


class ForecastResponse(BaseModel):
    success: bool = True
    data: ForecastOut
    message: str | None = None


class BatchWeatherResponse(BaseModel):
    success: bool = True
    data: list[WeatherFull] = Field(default_factory=list)
    total: int = Field(ge=0)
    message: str | None = None


class LocationSearchResponse(BaseModel):
    success: bool = True
    data: list[LocationOut] = Field(default_factory=list)
    total: int = Field(ge=0)
    message: str | None = None


class ServiceHealth(BaseModel):
    status: Literal["healthy", "unhealthy"]
    services: dict[str, dict[str, Any]] = Field(default_factory=dict)
    timestamp: datetime
