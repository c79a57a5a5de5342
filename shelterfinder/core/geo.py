import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Optional, Sequence, Tuple

from shelterfinder.config import settings
from shelterfinder.models.shelter import Coordinates
from shelterfinder.models.settings import TravelMode

EARTH_RADIUS_KM = 6371
KM_PER_DEGREE = 111

# Average speeds in km/h
TRAVEL_SPEEDS_KMH = {
    TravelMode.WALKING: 5,
    TravelMode.CYCLING: 15,
    TravelMode.DRIVING: 40,
}

BoundingBox = Tuple[Coordinates, Coordinates]

@dataclass
class NearestPoint:
    """Result of a nearest-point search"""
    point: Any
    distance: float  # km
    index: int

def _lat_lng(point: Any) -> Tuple[Any, Any]:
    """Read latitude/longitude from a model, an object or a mapping"""
    if isinstance(point, dict):
        return point.get("latitude"), point.get("longitude")
    return getattr(point, "latitude", None), getattr(point, "longitude", None)

def distance_km(a: Any, b: Any) -> float:
    """
    Calculate distance between two points using Haversine formula
    Returns distance in kilometers
    """
    lat1, lon1 = _lat_lng(a)
    lat2, lon2 = _lat_lng(b)

    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = math.sin(dlat/2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon/2)**2
    c = 2 * math.asin(min(1.0, math.sqrt(h)))

    return EARTH_RADIUS_KM * c

def bearing_degrees(start: Any, end: Any) -> float:
    """Initial compass bearing from start to end, 0 = north, in [0, 360)"""
    start_lat, start_lng = _lat_lng(start)
    end_lat, end_lng = _lat_lng(end)

    dlon = math.radians(end_lng - start_lng)
    lat1 = math.radians(start_lat)
    lat2 = math.radians(end_lat)

    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)

    bearing = (math.degrees(math.atan2(y, x)) + 360) % 360
    # (-tiny + 360) % 360 rounds to 360.0 in floating point
    return 0.0 if bearing >= 360 else bearing

def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)

def is_valid_coordinates(candidate: Any) -> bool:
    """Check for two finite numbers within latitude/longitude range"""
    if candidate is None:
        return False

    latitude, longitude = _lat_lng(candidate)
    if not (_is_number(latitude) and _is_number(longitude)):
        return False

    return -90 <= latitude <= 90 and -180 <= longitude <= 180

def normalize_coordinates(point: Any) -> Coordinates:
    """Clamp coordinates into valid bounds"""
    latitude, longitude = _lat_lng(point)
    return Coordinates(
        latitude=max(-90.0, min(90.0, float(latitude))),
        longitude=max(-180.0, min(180.0, float(longitude)))
    )

def nearest_point(origin: Any, points: Sequence[Any]) -> Optional[NearestPoint]:
    """
    Linear scan for the point closest to origin.
    Ties keep the earliest point.
    """
    if not points:
        return None

    nearest = NearestPoint(point=points[0], distance=distance_km(origin, points[0]), index=0)

    for index in range(1, len(points)):
        distance = distance_km(origin, points[index])
        if distance < nearest.distance:
            nearest = NearestPoint(point=points[index], distance=distance, index=index)

    return nearest

def bounding_box(center: Any, radius_km: float) -> BoundingBox:
    """
    Approximate (southwest, northeast) corners around center.
    Not guarded near the poles.
    """
    latitude, longitude = _lat_lng(center)
    lat_delta = radius_km / KM_PER_DEGREE
    lng_delta = radius_km / (KM_PER_DEGREE * math.cos(math.radians(latitude)))

    southwest = normalize_coordinates({
        "latitude": latitude - lat_delta,
        "longitude": longitude - lng_delta
    })
    northeast = normalize_coordinates({
        "latitude": latitude + lat_delta,
        "longitude": longitude + lng_delta
    })

    return southwest, northeast

def is_within_bounding_box(point: Any, box: BoundingBox) -> bool:
    latitude, longitude = _lat_lng(point)
    southwest, northeast = box
    return (
        southwest.latitude <= latitude <= northeast.latitude and
        southwest.longitude <= longitude <= northeast.longitude
    )

def travel_time_minutes(distance: float, mode: TravelMode = TravelMode.WALKING) -> int:
    """Estimated travel time in whole minutes, halves rounded up"""
    speed = TRAVEL_SPEEDS_KMH[TravelMode(mode)]
    return math.floor(distance / speed * 60 + 0.5)

def is_in_bulgaria(point: Any) -> bool:
    """Check if coordinates fall inside the country bounding box"""
    latitude, longitude = _lat_lng(point)
    return (
        settings.COUNTRY_MIN_LAT <= latitude <= settings.COUNTRY_MAX_LAT and
        settings.COUNTRY_MIN_LNG <= longitude <= settings.COUNTRY_MAX_LNG
    )
