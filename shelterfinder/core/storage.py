"""
Persistent store adapter

Typed access to shelters, settings, favorites, search history and the last
known location on top of a KeyValueStore. Reads never raise: missing,
stale and corrupted data all come back as the empty/default value. Writes
raise StorageWriteError and are not retried.
"""

import json
import logging
from datetime import datetime, timezone, timedelta
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError

from shelterfinder.config import settings
from shelterfinder.exceptions import StorageWriteError
from shelterfinder.core.geo import is_valid_coordinates
from shelterfinder.models.shelter import Coordinates, Shelter, StoredShelterSet
from shelterfinder.models.settings import AppSettings, EmergencyContact
from shelterfinder.utils.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

class StorageKeys:
    """Fully qualified keys owned by the adapter"""

    def __init__(self, namespace: str):
        self.namespace = namespace
        self.SHELTERS = f"{namespace}shelters"
        self.USER_SETTINGS = f"{namespace}settings"
        self.LAST_LOCATION = f"{namespace}lastLocation"
        self.EMERGENCY_CONTACTS = f"{namespace}emergencyContacts"
        self.SEARCH_HISTORY = f"{namespace}searchHistory"
        self.FAVORITE_SHELTERS = f"{namespace}favoriteShelters"
        self.LAST_UPDATE = f"{namespace}lastUpdate"

    def all(self) -> List[str]:
        return [
            self.SHELTERS,
            self.USER_SETTINGS,
            self.LAST_LOCATION,
            self.EMERGENCY_CONTACTS,
            self.SEARCH_HISTORY,
            self.FAVORITE_SHELTERS,
            self.LAST_UPDATE,
        ]

def _now() -> datetime:
    return datetime.now(timezone.utc)

def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def looks_like_shelter(record: Any) -> bool:
    """
    Read-path sanity check on a stored record. Much weaker than the import
    normalizer on purpose: it only guards against corrupted storage.
    """
    return (
        isinstance(record, dict) and
        isinstance(record.get("id"), str) and
        isinstance(record.get("name"), str) and
        _is_number(record.get("latitude")) and
        _is_number(record.get("longitude"))
    )

class ShelterStorage:
    def __init__(
        self,
        store: KeyValueStore,
        namespace: str = settings.STORAGE_NAMESPACE,
        max_age: timedelta = timedelta(days=settings.SHELTER_DATA_MAX_AGE_DAYS),
        location_max_age: timedelta = timedelta(minutes=settings.LAST_LOCATION_MAX_AGE_MINUTES),
        history_limit: int = settings.SEARCH_HISTORY_LIMIT
    ):
        self.store = store
        self.keys = StorageKeys(namespace)
        self.max_age = max_age
        self.location_max_age = location_max_age
        self.history_limit = history_limit

    # ==================== INTERNAL ====================

    async def _write(self, key: str, value: str) -> None:
        try:
            await self.store.set(key, value)
        except Exception as e:
            logger.error(f"Error writing {key}: {e}")
            raise StorageWriteError(key) from e

    async def _read_json(self, key: str) -> Any:
        """Parsed JSON under key, None when absent or unreadable"""
        try:
            raw = await self.store.get(key)
            return json.loads(raw) if raw else None
        except Exception as e:
            logger.error(f"Error reading {key}: {e}")
            return None

    def _is_expired(self, timestamp: Any, max_age: timedelta) -> bool:
        if not timestamp:
            return False
        return _epoch_ms(_now()) - timestamp > max_age.total_seconds() * 1000

    # ==================== SHELTERS ====================

    async def save_shelter_set(self, shelters: Sequence[Shelter]) -> None:
        """Replace the stored shelter set"""
        now = _now()
        envelope = StoredShelterSet(
            shelters=list(shelters),
            timestamp=_epoch_ms(now),
            count=len(shelters)
        )

        await self._write(self.keys.SHELTERS, envelope.model_dump_json())
        await self._write(self.keys.LAST_UPDATE, now.isoformat())
        logger.info(f"Saved {envelope.count} shelters")

    async def load_shelter_set(self) -> List[Shelter]:
        try:
            data = await self._read_json(self.keys.SHELTERS)
            if data is None:
                logger.info("No stored shelters")
                return []

            if self._is_expired(data.get("timestamp"), self.max_age):
                logger.info("Stored shelter data is stale")
                return []

            records = data.get("shelters") or []
            shelters: List[Shelter] = []
            for record in records:
                if not looks_like_shelter(record):
                    continue
                try:
                    shelters.append(Shelter.model_validate(record))
                except ValueError as e:
                    logger.warning(f"Dropping stored shelter {record.get('id')}: {e}")

            logger.info(f"Loaded {len(shelters)} valid shelters out of {len(records)}")
            return shelters

        except Exception as e:
            logger.error(f"Error loading shelters: {e}")
            return []

    async def get_last_update_timestamp(self) -> Optional[datetime]:
        try:
            value = await self.store.get(self.keys.LAST_UPDATE)
            return datetime.fromisoformat(value) if value else None
        except Exception as e:
            logger.error(f"Error getting last update: {e}")
            return None

    # ==================== LOCATION ====================

    async def save_last_location(self, location: Coordinates) -> None:
        payload = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "timestamp": _epoch_ms(_now()),
        }
        await self._write(self.keys.LAST_LOCATION, json.dumps(payload))

    async def load_last_location(self) -> Optional[Coordinates]:
        try:
            data = await self._read_json(self.keys.LAST_LOCATION)
            if not is_valid_coordinates(data):
                return None
            if self._is_expired(data.get("timestamp"), self.location_max_age):
                return None
            return Coordinates(latitude=data["latitude"], longitude=data["longitude"])
        except Exception as e:
            logger.error(f"Error getting last location: {e}")
            return None

    # ==================== SETTINGS ====================

    async def save_settings(self, app_settings: AppSettings) -> None:
        await self._write(self.keys.USER_SETTINGS, app_settings.model_dump_json())
        logger.info("Settings saved")

    async def load_settings(self) -> AppSettings:
        stored = await self._read_json(self.keys.USER_SETTINGS)
        if not isinstance(stored, dict):
            return AppSettings()

        # Stored values win over defaults added in later versions
        defaults = AppSettings().model_dump()
        try:
            return AppSettings.model_validate({**defaults, **stored})
        except ValidationError as e:
            invalid = {str(error["loc"][0]) for error in e.errors() if error["loc"]}
            logger.warning(f"Ignoring invalid stored settings: {sorted(invalid)}")

        valid = {key: value for key, value in stored.items() if key not in invalid}
        try:
            return AppSettings.model_validate({**defaults, **valid})
        except ValidationError as e:
            logger.error(f"Error getting settings: {e}")
            return AppSettings()

    # ==================== EMERGENCY CONTACTS ====================

    async def save_emergency_contacts(self, contacts: Sequence[EmergencyContact]) -> None:
        payload = json.dumps([contact.model_dump() for contact in contacts])
        await self._write(self.keys.EMERGENCY_CONTACTS, payload)
        logger.info(f"Saved {len(contacts)} emergency contacts")

    async def load_emergency_contacts(self) -> List[EmergencyContact]:
        stored = await self._read_json(self.keys.EMERGENCY_CONTACTS)
        if not isinstance(stored, list):
            return []

        try:
            return [EmergencyContact.model_validate(contact) for contact in stored]
        except ValueError as e:
            logger.error(f"Error getting emergency contacts: {e}")
            return []

    # ==================== SEARCH HISTORY ====================

    async def load_search_history(self) -> List[str]:
        stored = await self._read_json(self.keys.SEARCH_HISTORY)
        if not isinstance(stored, list):
            return []
        return [term for term in stored if isinstance(term, str)]

    async def add_search_term(self, term: str) -> None:
        """Move term to the front of the history, dropping older duplicates"""
        history = await self.load_search_history()
        updated = [term] + [item for item in history if item != term]
        await self._write(self.keys.SEARCH_HISTORY, json.dumps(updated[:self.history_limit]))

    async def clear_search_history(self) -> None:
        try:
            await self.store.remove(self.keys.SEARCH_HISTORY)
        except Exception as e:
            logger.error(f"Error clearing search history: {e}")
            raise StorageWriteError(self.keys.SEARCH_HISTORY) from e

    # ==================== FAVORITES ====================

    async def load_favorites(self) -> List[str]:
        stored = await self._read_json(self.keys.FAVORITE_SHELTERS)
        if not isinstance(stored, list):
            return []
        return [shelter_id for shelter_id in stored if isinstance(shelter_id, str)]

    async def add_favorite(self, shelter_id: str) -> None:
        favorites = await self.load_favorites()
        if shelter_id in favorites:
            return
        favorites.append(shelter_id)
        await self._write(self.keys.FAVORITE_SHELTERS, json.dumps(favorites))

    async def remove_favorite(self, shelter_id: str) -> None:
        favorites = await self.load_favorites()
        if shelter_id not in favorites:
            return
        remaining = [item for item in favorites if item != shelter_id]
        await self._write(self.keys.FAVORITE_SHELTERS, json.dumps(remaining))

    async def is_favorite(self, shelter_id: str) -> bool:
        return shelter_id in await self.load_favorites()

    # ==================== UTILITY ====================

    async def clear_all_data(self) -> None:
        try:
            await self.store.multi_remove(self.keys.all())
        except Exception as e:
            logger.error(f"Error clearing all data: {e}")
            raise StorageWriteError(self.keys.namespace) from e
        logger.info("All stored data cleared")

    async def storage_footprint_bytes(self) -> int:
        """UTF-8 size of every value under the adapter's namespace"""
        try:
            total = 0
            for key in await self.store.list_keys():
                if not key.startswith(self.keys.namespace):
                    continue
                value = await self.store.get(key)
                if value:
                    total += len(value.encode("utf-8"))
            return total
        except Exception as e:
            logger.error(f"Error calculating storage size: {e}")
            return 0
