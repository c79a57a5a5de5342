from pydantic import ConfigDict
from sqlmodel import SQLModel, Field
from typing import Any, Dict, List, Optional

UNKNOWN_NAME = "Unknown name"
UNKNOWN_ADDRESS = "Unknown address"
UNKNOWN_OPERATOR = "Unknown operator"
UNKNOWN_TYPE = "Unknown type"
UNKNOWN_CATEGORY = "Unknown category"
UNKNOWN_CITY = "Unknown city"

SHELTER_SET_VERSION = "1.0"

class Coordinates(SQLModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

class Shelter(SQLModel):
    """Validated shelter record. Instances are never mutated after import."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = UNKNOWN_NAME
    address: str = UNKNOWN_ADDRESS
    operator: str = UNKNOWN_OPERATOR
    type: str = UNKNOWN_TYPE
    category: str = UNKNOWN_CATEGORY
    short_category: str = UNKNOWN_CATEGORY
    city: str = UNKNOWN_CITY
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    confidence: float = Field(default=0, ge=0)
    has_coordinates: bool = False

    # Geocoding provenance, passed through untouched
    geocoding_status: Optional[Any] = None
    formatted_address: Optional[Any] = None
    opencage_formatted_address: Optional[Any] = None
    formatted_query: Optional[Any] = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

class ShelterWithDistance(Shelter):
    distance: float  # kilometers from the reference point

class StoredShelterSet(SQLModel):
    """Envelope written under the shelters storage key"""
    shelters: List[Shelter] = Field(default_factory=list)
    timestamp: int  # epoch milliseconds
    count: int
    version: str = SHELTER_SET_VERSION

class SearchFilters(SQLModel):
    max_distance: Optional[float] = None
    type: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None

class ShelterStatistics(SQLModel):
    total: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_category: Dict[str, int] = Field(default_factory=dict)
    by_city: Dict[str, int] = Field(default_factory=dict)
    with_coordinates: int = 0
    average_confidence: float = 0.0
