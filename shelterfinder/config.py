from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Database (key-value storage backend)
    DATABASE_URL: str = "sqlite+aiosqlite:///./shelters.db"
    DATABASE_ECHO: bool = False

    # Storage
    STORAGE_NAMESPACE: str = "@ShelterFinder:"
    SHELTER_DATA_MAX_AGE_DAYS: int = 30
    LAST_LOCATION_MAX_AGE_MINUTES: int = 60
    SEARCH_HISTORY_LIMIT: int = 20

    # Shelter data source
    SHELTER_DATA_PATH: str = "data/shelters.json"
    SHELTER_DATA_URL: Optional[str] = None
    DATA_FETCH_TIMEOUT: int = 30  # seconds

    # Queries
    DEFAULT_NEAREST_COUNT: int = 3

    # Country bounds (Bulgaria)
    COUNTRY_MIN_LAT: float = 41.2
    COUNTRY_MAX_LAT: float = 44.2
    COUNTRY_MIN_LNG: float = 22.3
    COUNTRY_MAX_LNG: float = 28.6

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
