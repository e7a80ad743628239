from __future__ import annotations

import pytest

from app.core.errors import ApiError
from app.schemas.weather import LocationQuery
from app.services.location import resolve_location, valid_coordinates


def test_coordinates_get_a_generated_name() -> None:
    location = resolve_location(LocationQuery(lat=32.0853, lon=34.7818))
    assert location.lat == 32.0853
    assert location.lon == 34.7818
    assert location.name == "32.0853, 34.7818"


def test_coordinates_keep_city_name() -> None:
    location = resolve_location(LocationQuery(lat=48.8566, lon=2.3522, city="Paris"))
    assert location.name == "Paris"
    assert location.has_coordinates


def test_city_only() -> None:
    location = resolve_location(LocationQuery(city="  Tokyo "))
    assert location.name == "Tokyo"
    assert not location.has_coordinates


def test_boundary_coordinates_are_valid() -> None:
    assert valid_coordinates(90, 180)
    assert valid_coordinates(-90, -180)
    assert not valid_coordinates(90.0001, 0)
    assert not valid_coordinates(0, -180.5)


@pytest.mark.parametrize(
    ("query", "detail"),
    [
        (
            LocationQuery(lat=10),
            "When providing coordinates, both lat and lon are required",
        ),
        (
            LocationQuery(lon=10, city="Rome"),
            "When providing coordinates, both lat and lon are required",
        ),
        (
            LocationQuery(lat=999, lon=0),
            "Invalid coordinates: latitude must be -90 to 90, longitude must be -180 to 180",
        ),
        (
            LocationQuery(lat=-91, lon=0, city="Paris"),
            "Invalid coordinates: latitude must be -90 to 90, longitude must be -180 to 180",
        ),
        (LocationQuery(city="X"), "City name must be at least 2 characters long"),
        (LocationQuery(city="   "), "Location must include coordinates or city name"),
        (LocationQuery(), "Location must include coordinates or city name"),
    ],
)
def test_rejected_queries(query: LocationQuery, detail: str) -> None:
    with pytest.raises(ApiError) as exc:
        resolve_location(query)
    assert exc.value.code == 400
    assert exc.value.detail == detail
