import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Tuple

from shelterfinder.core.storage import ShelterStorage
from shelterfinder.models.shelter import Shelter

logger = logging.getLogger(__name__)

class ShelterRegistry:
    """
    Holds the currently loaded shelter set for the process.

    Starts empty. Every update swaps the whole set at once, so readers see
    either the previous set or the new one.
    """

    def __init__(self):
        self._shelters: Tuple[Shelter, ...] = ()
        self.loaded_at: Optional[datetime] = None

    @property
    def shelters(self) -> Tuple[Shelter, ...]:
        return self._shelters

    def __len__(self) -> int:
        return len(self._shelters)

    def replace(self, shelters: Iterable[Shelter]):
        self._shelters = tuple(shelters)
        self.loaded_at = datetime.now(timezone.utc)
        logger.info(f"Shelter registry holds {len(self._shelters)} shelters")

    def get(self, shelter_id: str) -> Optional[Shelter]:
        for shelter in self._shelters:
            if shelter.id == shelter_id:
                return shelter
        return None

    async def refresh(self, storage: ShelterStorage) -> Tuple[Shelter, ...]:
        """Reload from storage, replacing whatever is held"""
        self.replace(await storage.load_shelter_set())
        return self._shelters

shelter_registry = ShelterRegistry()
