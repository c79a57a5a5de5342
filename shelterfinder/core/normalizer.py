"""
Raw shelter record normalization

Turns an untyped record from the shelter data document into a validated
Shelter, or explains why the record was rejected. Nothing in here raises:
a bad record only ever produces a Rejected result.
"""

import math
import re
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from shelterfinder.models.shelter import (
    Shelter,
    UNKNOWN_NAME,
    UNKNOWN_ADDRESS,
    UNKNOWN_OPERATOR,
    UNKNOWN_TYPE,
    UNKNOWN_CATEGORY,
    UNKNOWN_CITY,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "name", "latitude", "longitude")
PROVENANCE_FIELDS = (
    "geocoding_status",
    "formatted_address",
    "opencage_formatted_address",
    "formatted_query",
)

# "гр. София, ул. ..." -> "София"
CITY_PREFIX_PATTERN = re.compile(r"гр\.\s*([^,]+)", re.IGNORECASE)
LEADING_CITY_PREFIX = re.compile(r"^гр\.\s*", re.IGNORECASE)
MAX_PLAIN_CITY_LENGTH = 50

@dataclass(frozen=True)
class Accepted:
    shelter: Shelter

@dataclass(frozen=True)
class Rejected:
    reason: str

NormalizationResult = Union[Accepted, Rejected]

def _text(value: Any) -> str:
    return str(value).strip() if value else ""

def _text_or(default: str, *values: Any) -> str:
    """First non-blank value as trimmed text, else default"""
    for value in values:
        text = _text(value)
        if text:
            return text
    return default

def _to_float(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None

def _confidence(value: Any) -> float:
    number = _to_float(value)
    if number is None or number < 0:
        return 0.0
    return number

def extract_city(city_or_address: Any) -> str:
    """Derive a city name from a city field or a free-form address"""
    text = _text(city_or_address)
    if not text:
        return UNKNOWN_CITY

    match = CITY_PREFIX_PATTERN.search(text)
    if match:
        return match.group(1).strip()

    if "," not in text and len(text) < MAX_PLAIN_CITY_LENGTH:
        return text

    first_part = text.split(",")[0].strip()
    return LEADING_CITY_PREFIX.sub("", first_part) or UNKNOWN_CITY

def normalize(raw: Any) -> NormalizationResult:
    """Validate one raw record"""
    try:
        return _normalize(raw)
    except Exception as e:
        logger.warning(f"Unexpected error normalizing shelter record: {e}")
        return Rejected(f"error:{type(e).__name__}")

def _normalize(raw: Any) -> NormalizationResult:
    if not isinstance(raw, Mapping):
        return Rejected("not_a_mapping")

    for field in REQUIRED_FIELDS:
        if not _text(raw.get(field)):
            return Rejected(f"missing_field:{field}")

    latitude = _to_float(raw["latitude"])
    longitude = _to_float(raw["longitude"])
    if latitude is None or longitude is None:
        return Rejected("invalid_coordinates")
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        return Rejected("coordinates_out_of_range")

    shelter = Shelter(
        id=_text(raw["id"]),
        name=_text_or(UNKNOWN_NAME, raw.get("name")),
        address=_text_or(UNKNOWN_ADDRESS, raw.get("address")),
        operator=_text_or(UNKNOWN_OPERATOR, raw.get("operator")),
        type=_text_or(UNKNOWN_TYPE, raw.get("type")),
        category=_text_or(UNKNOWN_CATEGORY, raw.get("category"), raw.get("short_category")),
        short_category=_text_or(UNKNOWN_CATEGORY, raw.get("short_category"), raw.get("category")),
        city=extract_city(raw.get("city") or raw.get("address")),
        latitude=latitude,
        longitude=longitude,
        confidence=_confidence(raw.get("confidence")),
        has_coordinates=True,
        **{field: raw.get(field) for field in PROVENANCE_FIELDS}
    )
    return Accepted(shelter)

def normalize_shelter(raw: Any) -> Optional[Shelter]:
    """Shelter for a valid record, None otherwise"""
    result = normalize(raw)
    return result.shelter if isinstance(result, Accepted) else None
