from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from app.clients import mock
from app.core.errors import ApiError
from app.models.weather import Location, Precipitation, WeatherData
from app.services.normalizer import (
    WEATHER_CODES,
    sanitize_weather_data,
    to_compact,
    to_full,
    transform_forecast_response,
    transform_realtime_response,
    transform_search_response,
    weather_category,
    weather_description,
)


def test_weather_descriptions() -> None:
    assert weather_description(1000) == "Clear"
    assert weather_description(8000) == "Thunderstorm"
    assert weather_description(7102) == "Light Ice Pellets"
    assert weather_description(0) == "Unknown"
    assert weather_description(-5) == "Unknown"
    assert weather_description(None) == "Unknown"
    assert len(WEATHER_CODES) == 23


@pytest.mark.parametrize(
    ("code", "category"),
    [
        (1000, "clear"),
        (1100, "clear"),
        (1001, "cloudy"),
        (1101, "cloudy"),
        (4200, "rain"),
        (6201, "rain"),
        (5101, "snow"),
        (8000, "storm"),
        (2100, "fog"),
        (7000, "unknown"),
        (0, "unknown"),
    ],
)
def test_weather_categories(code: int, category: str) -> None:
    assert weather_category(code) == category


def test_sanitize_rounds_fields() -> None:
    raw = WeatherData(
        location=Location(lat=51.507412345, lon=-0.127812345, name="  London  "),
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
        temperature=12.345,
        humidity=70.06,
        wind_speed=3.14159,
        wind_direction=179.6,
        precipitation=Precipitation(intensity=0.12345, probability=33.4),
        visibility=9.87,
        uv_index=2.25,
        cloud_cover=45.5,
        pressure=1013.2549,
        weather_code=4001,
        description="stale",
    )
    clean = sanitize_weather_data(raw)
    assert clean.location.lat == 51.5074
    assert clean.location.lon == -0.1278
    assert clean.location.name == "London"
    assert clean.temperature == 12.3
    assert clean.humidity == 70.1
    assert clean.wind_speed == 3.1
    assert clean.wind_direction == 180
    assert clean.precipitation.intensity == 0.12
    assert clean.precipitation.probability == 33
    assert clean.visibility == 9.9
    assert clean.pressure == 1013.3
    assert clean.description == "Rain"


def test_sanitize_fills_missing_name() -> None:
    raw = WeatherData(
        location=Location(lat=1.0, lon=2.0),
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    assert sanitize_weather_data(raw).location.name == "1.0000, 2.0000"


def test_realtime_merges_provider_location() -> None:
    payload = mock.realtime_payload(lat=10.0, lon=20.0, name="Provider Town")
    payload["location"]["country"] = "PT"
    weather = transform_realtime_response(payload, Location(name="Lisbon"))
    assert weather.location.name == "Lisbon"
    assert weather.location.lat == 10.0
    assert weather.location.country == "PT"
    assert weather.weather_code == 1000
    assert weather.description == "Clear"
    assert weather.timestamp.tzinfo is not None


def test_realtime_missing_weather_code_is_unknown() -> None:
    payload = mock.realtime_payload()
    del payload["data"]["values"]["weatherCode"]
    weather = transform_realtime_response(payload, Location(name="Nowhere"))
    assert weather.weather_code == 0
    assert weather.description == "Unknown"
    assert to_full(weather).category == "unknown"


def test_realtime_bad_shape() -> None:
    with pytest.raises(ApiError) as exc:
        transform_realtime_response({"data": {}}, Location(name="Oslo"))
    assert exc.value.code == 500
    assert exc.value.detail == "Unexpected realtime response from weather provider"


def test_projections() -> None:
    weather = transform_realtime_response(
        mock.realtime_payload(temperature=21.0), Location(name="Haifa")
    )
    compact = to_compact(weather)
    assert compact.location == "Haifa"
    assert compact.precipitation == 0.0
    assert compact.humidity == 60.0

    full = to_full(weather)
    dumped = full.model_dump(by_alias=True)
    assert dumped["windSpeed"] == 5.0
    assert dumped["location"]["name"] == "Haifa"
    assert dumped["condition"] == "Clear"
    assert dumped["category"] == "clear"


def test_forecast_hourly_mapping() -> None:
    payload = {
        "timelines": {
            "hourly": [
                {
                    "time": "2026-01-30T22:00:00Z",
                    "values": {
                        "temperature": 5.5,
                        "temperatureApparent": 3.0,
                        "humidity": 80,
                        "cloudCover": 100,
                        "precipitationProbability": 40,
                        "windSpeed": 6.1,
                        "uvIndex": 0,
                        "weatherCode": 4200,
                    },
                },
                {"time": "2026-01-30T23:00:00Z", "values": {"weatherCode": 1001}},
            ]
        },
        "location": {"lat": 59.91, "lon": 10.75},
    }
    forecast = transform_forecast_response(payload, Location(name="Oslo"), "1h")
    assert forecast.location.lat == 59.91
    assert [i.description for i in forecast.intervals] == ["Light Rain", "Cloudy"]
    first = forecast.intervals[0]
    assert first.feels_like == 3.0
    assert first.precipitation_chance == 40.0
    assert first.sunrise is None
    assert forecast.intervals[1].precipitation_chance == 0.0


def test_forecast_daily_mapping() -> None:
    payload = mock.forecast_payload(timestep="1d", rng=random.Random(7))
    forecast = transform_forecast_response(payload, Location(name="Oslo"), "1d")
    assert len(forecast.intervals) == 7
    day = forecast.intervals[0]
    assert day.temperature == 22.0
    assert day.feels_like == 23.0
    assert day.sunrise is not None and day.sunset is not None
    assert day.weather_code in (1000, 4000)


def test_forecast_missing_timeline() -> None:
    with pytest.raises(ApiError) as exc:
        transform_forecast_response({"timelines": {"hourly": []}}, Location(name="Oslo"), "1d")
    assert exc.value.detail == "Unexpected forecast response from weather provider"


def test_search_response_mapping() -> None:
    payload = {
        "features": [
            {
                "geometry": {"coordinates": [2.3522, 48.8566]},
                "properties": {"name": "Paris", "country": "France"},
            },
            {"geometry": {"coordinates": [1]}, "properties": {}},
            {
                "geometry": {"coordinates": [-0.1, 51.5]},
                "properties": {"full_name": "London, UK"},
            },
        ]
    }
    locations = transform_search_response(payload, "par")
    assert [loc.name for loc in locations] == ["Paris", "London, UK"]
    assert locations[0].lat == 48.8566
    assert locations[0].lon == 2.3522
    assert locations[0].country == "France"
    assert transform_search_response({}, "x") == []


def test_sanitize_is_idempotent() -> None:
    raw = WeatherData(
        location=Location(lat=-33.868812, lon=151.209312, country="AU"),
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc),
        temperature=24.449,
        humidity=55.55,
        wind_speed=7.05,
        wind_direction=359.5,
        precipitation=Precipitation(intensity=1.005, probability=49.5),
        visibility=10.04,
        uv_index=8.96,
        cloud_cover=12.5,
        pressure=1009.95,
        weather_code=1102,
    )
    once = sanitize_weather_data(raw)
    twice = sanitize_weather_data(once)
    assert twice == once
    assert once.location.name == "-33.8688, 151.2093"
