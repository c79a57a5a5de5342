"""
Core modules for the Shelter Finder

This package contains the shelter data pipeline and query engine:
- geo: distance, bearing, bounding box and nearest-point primitives
- normalizer: raw record validation
- storage: persisted shelters, settings, favorites and history
- importer: data document import
- queries: distance ranking, filtering, search and statistics
- registry: the currently loaded shelter set
"""

from shelterfinder.exceptions import MalformedSourceError, ShelterFinderError, StorageWriteError
from .geo import (
    distance_km,
    bearing_degrees,
    is_valid_coordinates,
    normalize_coordinates,
    nearest_point,
    bounding_box,
    travel_time_minutes,
    is_in_bulgaria,
)
from .normalizer import Accepted, Rejected, normalize, normalize_shelter, extract_city
from .storage import ShelterStorage
from .importer import ShelterImporter, ImportReport
from .registry import ShelterRegistry, shelter_registry

__all__ = [
    # Errors
    "MalformedSourceError",
    "ShelterFinderError",
    "StorageWriteError",

    # Geo
    "distance_km",
    "bearing_degrees",
    "is_valid_coordinates",
    "normalize_coordinates",
    "nearest_point",
    "bounding_box",
    "travel_time_minutes",
    "is_in_bulgaria",

    # Normalization
    "Accepted",
    "Rejected",
    "normalize",
    "normalize_shelter",
    "extract_city",

    # Storage and import
    "ShelterStorage",
    "ShelterImporter",
    "ImportReport",
    "ShelterRegistry",
    "shelter_registry",
]
