"""
In-memory shelter queries: distances, ranking, filtering, search and
statistics. Pure functions over caller-owned lists, no I/O.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

from shelterfinder.core.geo import bounding_box, distance_km, is_within_bounding_box
from shelterfinder.models.shelter import (
    Shelter,
    ShelterWithDistance,
    SearchFilters,
    ShelterStatistics,
    UNKNOWN_CITY,
)

def with_distances(shelters: Iterable[Shelter], origin: Any) -> List[ShelterWithDistance]:
    """Annotate shelters that have coordinates with their distance from origin"""
    return [
        ShelterWithDistance(**shelter.model_dump(exclude={"distance"}), distance=distance_km(origin, shelter))
        for shelter in shelters
        if shelter.has_coordinates
    ]

def _distance_or_zero(shelter: Shelter) -> float:
    # Unknown distance (no location fix yet) sorts first
    return getattr(shelter, "distance", None) or 0

def sort_by_distance_ascending(shelters: Iterable[Shelter]) -> List[Shelter]:
    return sorted(shelters, key=_distance_or_zero)

def nearest(shelters: Iterable[Shelter], origin: Any, n: int = 1) -> List[ShelterWithDistance]:
    """Top n shelters closest to origin, ties in source order"""
    if n <= 0:
        return []
    return sort_by_distance_ascending(with_distances(shelters, origin))[:n]

def filter_shelters(shelters: Iterable[Shelter], filters: Optional[SearchFilters] = None) -> List[Shelter]:
    """Keep shelters matching every supplied criterion"""
    if filters is None:
        return list(shelters)

    def matches(shelter: Shelter) -> bool:
        distance = getattr(shelter, "distance", None)
        if filters.max_distance is not None and distance is not None and distance > filters.max_distance:
            return False
        if filters.type and shelter.type != filters.type:
            return False
        if filters.category and shelter.category != filters.category:
            return False
        if filters.city and shelter.city != filters.city:
            return False
        return True

    return [shelter for shelter in shelters if matches(shelter)]

def search(shelters: Sequence[Shelter], query: str) -> List[Shelter]:
    """Case-insensitive substring search over name, address, city and operator"""
    needle = (query or "").strip().casefold()
    if not needle:
        return list(shelters)

    return [
        shelter for shelter in shelters
        if any(
            needle in value.casefold()
            for value in (shelter.name, shelter.address, shelter.city, shelter.operator)
        )
    ]

def group_by_city(shelters: Iterable[Shelter]) -> Dict[str, List[Shelter]]:
    groups: Dict[str, List[Shelter]] = {}
    for shelter in shelters:
        groups.setdefault(shelter.city or UNKNOWN_CITY, []).append(shelter)
    return groups

def within_bounding_box(shelters: Iterable[Shelter], center: Any, radius_km: float) -> List[Shelter]:
    """Shelters with coordinates inside the approximate box around center"""
    box = bounding_box(center, radius_km)
    return [
        shelter for shelter in shelters
        if shelter.has_coordinates and is_within_bounding_box(shelter, box)
    ]

def statistics(shelters: Sequence[Shelter]) -> ShelterStatistics:
    """
    Counts by type, category and city in a single pass.
    Average confidence covers every shelter, with or without coordinates.
    """
    stats = ShelterStatistics(total=len(shelters))
    total_confidence = 0.0

    for shelter in shelters:
        stats.by_type[shelter.type] = stats.by_type.get(shelter.type, 0) + 1
        stats.by_category[shelter.category] = stats.by_category.get(shelter.category, 0) + 1
        stats.by_city[shelter.city] = stats.by_city.get(shelter.city, 0) + 1

        if shelter.has_coordinates:
            stats.with_coordinates += 1

        total_confidence += shelter.confidence or 0

    stats.average_confidence = total_confidence / stats.total if stats.total else 0.0
    return stats
