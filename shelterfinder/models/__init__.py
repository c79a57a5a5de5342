from .shelter import (
    Coordinates,
    Shelter,
    ShelterWithDistance,
    StoredShelterSet,
    SearchFilters,
    ShelterStatistics,
    UNKNOWN_CITY,
)
from .settings import AppSettings, EmergencyContact, Language, TravelMode
from .storage import StorageEntry

__all__ = [
    "Coordinates",
    "Shelter",
    "ShelterWithDistance",
    "StoredShelterSet",
    "SearchFilters",
    "ShelterStatistics",
    "UNKNOWN_CITY",
    "AppSettings",
    "EmergencyContact",
    "Language",
    "TravelMode",
    "StorageEntry",
]
