from sqlmodel import SQLModel, Field
from typing import List
from enum import Enum

class Language(str, Enum):
    BG = "bg"
    EN = "en"

class TravelMode(str, Enum):
    WALKING = "walking"
    CYCLING = "cycling"
    DRIVING = "driving"

class EmergencyContact(SQLModel):
    id: str
    name: str
    phone: str
    relationship: str

class AppSettings(SQLModel):
    enable_notifications: bool = True
    enable_voice_navigation: bool = True
    preferred_language: Language = Language.BG
    max_search_distance: float = 10.0  # km
    auto_download_maps: bool = True
    emergency_contacts: List[EmergencyContact] = Field(default_factory=list)
