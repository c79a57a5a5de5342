from fastapi import APIRouter, Body, HTTPException, Query
from typing import Any, Dict, List, Optional

from shelterfinder.api.deps import ImporterDep, RegistryDep
from shelterfinder.config import settings
from shelterfinder.core import queries
from shelterfinder.core.geo import bearing_degrees, is_in_bulgaria, is_valid_coordinates, travel_time_minutes
from shelterfinder.models.settings import TravelMode
from shelterfinder.models.shelter import Coordinates, SearchFilters, Shelter, ShelterStatistics
from shelterfinder.utils.formatting import format_distance, format_travel_time

router = APIRouter()

def _origin(lat: Optional[float], lng: Optional[float]) -> Optional[Coordinates]:
    if lat is None and lng is None:
        return None
    point = {"latitude": lat, "longitude": lng}
    if not is_valid_coordinates(point):
        raise HTTPException(status_code=400, detail="Invalid coordinates")
    return Coordinates(**point)

@router.get("")
async def list_shelters(
    registry: RegistryDep,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    shelter_type: Optional[str] = Query(None, alias="type"),
    category: Optional[str] = None,
    city: Optional[str] = None,
    max_distance: Optional[float] = Query(None, ge=0),
    q: Optional[str] = None
) -> List[Dict[str, Any]]:
    origin = _origin(lat, lng)
    shelters: List[Shelter] = list(registry.shelters)

    if origin is not None:
        shelters = queries.sort_by_distance_ascending(queries.with_distances(shelters, origin))

    filters = SearchFilters(max_distance=max_distance, type=shelter_type, category=category, city=city)
    shelters = queries.filter_shelters(shelters, filters)
    if q:
        shelters = queries.search(shelters, q)

    return [shelter.model_dump() for shelter in shelters]

@router.get("/nearest")
async def nearest_shelters(
    registry: RegistryDep,
    lat: float,
    lng: float,
    n: int = Query(settings.DEFAULT_NEAREST_COUNT, ge=1, le=100)
) -> Dict[str, Any]:
    origin = _origin(lat, lng)
    results = []

    for shelter in queries.nearest(registry.shelters, origin, n):
        walking = travel_time_minutes(shelter.distance, TravelMode.WALKING)
        results.append({
            **shelter.model_dump(),
            "distance_text": format_distance(shelter.distance),
            "bearing": round(bearing_degrees(origin, shelter), 1),
            "walking_minutes": walking,
            "walking_time_text": format_travel_time(walking),
            "driving_minutes": travel_time_minutes(shelter.distance, TravelMode.DRIVING)
        })

    return {
        "origin": origin.model_dump(),
        "in_country": is_in_bulgaria(origin),
        "shelters": results
    }

@router.get("/within")
async def shelters_within(
    registry: RegistryDep,
    lat: float,
    lng: float,
    radius_km: float = Query(..., gt=0)
) -> List[Shelter]:
    origin = _origin(lat, lng)
    return queries.within_bounding_box(registry.shelters, origin, radius_km)

@router.get("/statistics", response_model=ShelterStatistics)
async def shelter_statistics(registry: RegistryDep) -> ShelterStatistics:
    return queries.statistics(registry.shelters)

@router.get("/cities")
async def shelters_by_city(registry: RegistryDep) -> Dict[str, List[Shelter]]:
    return queries.group_by_city(registry.shelters)

@router.post("/import")
async def import_shelters(
    importer: ImporterDep,
    registry: RegistryDep,
    document: Any = Body(...)
) -> Dict[str, Any]:
    shelters = await importer.import_from_source(document)
    registry.replace(shelters)

    report = importer.last_report
    return {
        "message": "Shelters imported successfully",
        "imported": report.accepted,
        "skipped": report.skipped,
        "duplicates": report.duplicates
    }

@router.get("/{shelter_id}", response_model=Shelter)
async def get_shelter(registry: RegistryDep, shelter_id: str) -> Shelter:
    shelter = registry.get(shelter_id)
    if shelter is None:
        raise HTTPException(status_code=404, detail="Shelter not found")
    return shelter
