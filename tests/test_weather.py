from __future__ import annotations

from fastapi.testclient import TestClient

from app.api import deps
from tests.fakes import ExplodingWeatherClient, FakeWeatherClient


def test_realtime_compact_for_city(client: TestClient) -> None:
    resp = client.get(
        "/api/v1/weather/realtime", params={"city": "London", "format": "compact"}
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert data["location"] == "London"
    assert data["temperature"] == 20.0
    assert data["condition"] == "Clear"
    assert data["humidity"] == 60.0
    assert data["windSpeed"] == 5.0
    assert data["precipitation"] == 0.0
    assert "timestamp" in data


def test_realtime_full_for_coordinates(client: TestClient) -> None:
    resp = client.get("/api/v1/weather/realtime", params={"lat": 51.5074, "lon": -0.1278})
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["location"]["lat"] == 51.5074
    assert data["location"]["lon"] == -0.1278
    assert data["location"]["name"] == "51.5074, -0.1278"
    assert data["category"] == "clear"
    assert data["windDirection"] == 180.0
    assert data["precipitation"] == {"intensity": 0.0, "probability": 10.0}


def test_realtime_post_body(client: TestClient) -> None:
    resp = client.post(
        "/api/v1/weather/realtime",
        json={"location": {"city": "Paris"}, "format": "compact"},
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"]["location"] == "Paris"


def test_realtime_requires_location(client: TestClient) -> None:
    resp = client.get("/api/v1/weather/realtime")
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["detail"] == "Location must include coordinates or city name"
    assert body["path"] == "/api/v1/weather/realtime"


def test_realtime_rejects_half_coordinates(client: TestClient) -> None:
    resp = client.get("/api/v1/weather/realtime", params={"lat": 10})
    assert resp.status_code == 400
    assert (
        resp.json()["error"]["detail"]
        == "When providing coordinates, both lat and lon are required"
    )


def test_out_of_range_query_is_validation_error(client: TestClient) -> None:
    resp = client.get("/api/v1/weather/realtime", params={"lat": 91, "lon": 0})
    assert resp.status_code == 400
    assert resp.json()["error"]["detail"].startswith("Validation failed:")


def test_city_path_and_coordinate_path(client: TestClient) -> None:
    by_city = client.get("/api/v1/weather/locations/Berlin")
    assert by_city.status_code == 200, by_city.text
    assert by_city.json()["data"]["location"]["name"] == "Berlin"

    by_coords = client.get("/api/v1/weather/coordinates/40.7128/-74.006")
    assert by_coords.status_code == 200, by_coords.text
    assert by_coords.json()["data"]["location"]["lat"] == 40.7128

    bad = client.get("/api/v1/weather/coordinates/100/0")
    assert bad.status_code == 400


def test_batch_drops_failed_entries(client: TestClient) -> None:
    resp = client.post(
        "/api/v1/weather/batch",
        json={"locations": [{"city": "Paris"}, {"lat": 999, "lon": 0}]},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["total"] == 1
    assert len(body["data"]) == 1
    assert body["data"][0]["location"]["name"] == "Paris"
    assert body["message"] == "Batch weather data retrieved successfully"


def test_batch_limits(client: TestClient) -> None:
    empty = client.post("/api/v1/weather/batch", json={"locations": []})
    assert empty.status_code == 400
    assert empty.json()["error"]["detail"] == "Locations array is required"

    too_many = client.post(
        "/api/v1/weather/batch", json={"locations": [{"city": "Rome"}] * 11}
    )
    assert too_many.status_code == 400
    assert too_many.json()["error"]["detail"] == "Maximum 10 locations allowed"


def test_forecast_hourly_and_daily(client: TestClient) -> None:
    hourly = client.get("/api/v1/weather/forecast", params={"city": "Oslo"})
    assert hourly.status_code == 200, hourly.text
    data = hourly.json()["data"]
    assert data["timestep"] == "1h"
    assert len(data["intervals"]) == 24
    first = data["intervals"][0]
    assert {"time", "temperature", "feelsLike", "weatherCode", "description"} <= set(first)
    assert "sunrise" not in first

    daily = client.get(
        "/api/v1/weather/forecast", params={"city": "Oslo", "timesteps": "1d"}
    )
    assert daily.status_code == 200, daily.text
    intervals = daily.json()["data"]["intervals"]
    assert len(intervals) == 7
    assert "sunrise" in intervals[0] and "sunset" in intervals[0]


def test_search_locations(client: TestClient) -> None:
    resp = client.get("/api/v1/weather/search/tel aviv")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["total"] == 1
    assert body["data"][0]["name"] == "Tel Aviv"
    assert body["data"][0]["country"] == "Mock"

    short = client.get("/api/v1/weather/search/a")
    assert short.status_code == 400


def test_weather_health_mock_is_healthy(client: TestClient) -> None:
    resp = client.get("/api/v1/weather/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["services"]["tomorrowApi"]["status"] == "healthy"


def test_weather_health_unhealthy_upstream(client: TestClient) -> None:
    client.app.dependency_overrides[deps.get_weather_client] = lambda: FakeWeatherClient(
        healthy=False
    )
    resp = client.get("/api/v1/weather/health")
    assert resp.status_code == 503
    assert resp.json()["services"]["tomorrowApi"]["status"] == "unhealthy"


def test_weather_health_unexpected_failure(client: TestClient) -> None:
    client.app.dependency_overrides[deps.get_weather_client] = lambda: ExplodingWeatherClient()
    resp = client.get("/api/v1/weather/health")
    assert resp.status_code == 503
    body = resp.json()
    assert body["status"] == "unhealthy"
    assert body["error"] == "Failed to check service health"


def test_unknown_route_envelope(client: TestClient) -> None:
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    body = resp.json()
    assert body["error"]["detail"] == "Route not found"
    assert body["success"] is False
