from __future__ import annotations

from app.core.errors import ApiError
from app.models.weather import Location
from app.schemas.weather import LocationQuery

MIN_CITY_LENGTH = 2


def valid_coordinates(lat: float, lon: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lon <= 180


def resolve_location(query: LocationQuery) -> Location:
    """Turn a caller's location query into a Location, or raise a 400."""
    city = query.city.strip() if query.city is not None else None

    if (query.lat is None) != (query.lon is None):
        raise ApiError.bad_request("When providing coordinates, both lat and lon are required")

    if query.lat is not None and query.lon is not None:
        if not valid_coordinates(query.lat, query.lon):
            raise ApiError.bad_request(
                "Invalid coordinates: latitude must be -90 to 90, "
                "longitude must be -180 to 180"
            )
        return Location(
            lat=query.lat,
            lon=query.lon,
            name=city or f"{query.lat:.4f}, {query.lon:.4f}",
        )

    if city:
        if len(city) < MIN_CITY_LENGTH:
            raise ApiError.bad_request("City name must be at least 2 characters long")
        return Location(name=city)

    raise ApiError.bad_request("Location must include coordinates or city name")
