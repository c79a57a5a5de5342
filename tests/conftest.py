"""
Shelter Finder - Pytest Configuration and Fixtures

Shared fixtures for all tests:
- Key-value store and storage adapter fixtures
- Sample shelters and raw data documents
"""

from typing import Any, Dict, List, Optional

import pytest

from shelterfinder.core.storage import ShelterStorage
from shelterfinder.models.shelter import Coordinates, Shelter
from shelterfinder.utils.kv_store import KeyValueStore, MemoryKeyValueStore

# =============================================================================
# Storage Fixtures
# =============================================================================


class FailingKeyValueStore(KeyValueStore):
    """Store whose reads and/or writes always fail"""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("disk unavailable")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.data[key] = value

    async def remove(self, key: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.data.pop(key, None)

    async def list_keys(self) -> List[str]:
        if self.fail_reads:
            raise OSError("disk unavailable")
        return list(self.data)


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def storage(memory_store: MemoryKeyValueStore) -> ShelterStorage:
    return ShelterStorage(memory_store)


@pytest.fixture
def failing_storage() -> ShelterStorage:
    return ShelterStorage(FailingKeyValueStore())


@pytest.fixture
def make_failing_store():
    """FailingKeyValueStore class, for tests that pick which operations fail"""
    return FailingKeyValueStore


# =============================================================================
# Shelter Fixtures
# =============================================================================


@pytest.fixture
def sofia_center() -> Coordinates:
    return Coordinates(latitude=42.6977, longitude=23.3219)


@pytest.fixture
def sample_shelters() -> List[Shelter]:
    """Three located shelters (about 0.3 km, 3 km and 130 km from Sofia center) and one without coordinates"""
    return [
        Shelter(
            id="1", name="Скривалище НДК", address="гр. София, бул. България 1",
            operator="Община София", type="Скривалище", category="Публично",
            short_category="Публ.", city="София",
            latitude=42.6950, longitude=23.3230, confidence=0.9, has_coordinates=True
        ),
        Shelter(
            id="2", name="Убежище Лозенец", address="гр. София, ул. Милин камък 5",
            operator="Министерство на отбраната", type="Убежище", category="Публично",
            short_category="Публ.", city="София",
            latitude=42.6700, longitude=23.3300, confidence=0.7, has_coordinates=True
        ),
        Shelter(
            id="3", name="Скривалище Тепетата", address="гр. Пловдив, ул. Главна 10",
            operator="Община Пловдив", type="Скривалище", category="Ведомствено",
            short_category="Вед.", city="Пловдив",
            latitude=42.1354, longitude=24.7453, confidence=0.5, has_coordinates=True
        ),
        Shelter(
            id="4", name="Склад без адрес", type="Скривалище", category="Ведомствено",
            city="", latitude=0, longitude=0, confidence=0, has_coordinates=False
        ),
    ]


@pytest.fixture
def raw_document() -> Dict[str, Any]:
    """Raw data document as shipped by the geocoding export"""
    return {
        "metadata": {"source": "test", "generated": "2025-01-01"},
        "shelters": [
            {
                "id": 101,
                "name": "  Скривалище Център ",
                "address": "гр. София, ул. Граф Игнатиев 2",
                "operator": "Община София",
                "type": "Скривалище",
                "category": "Публично",
                "latitude": "42.6934",
                "longitude": "23.3261",
                "confidence": 9,
                "geocoding_status": "ok",
                "formatted_address": "ul. Graf Ignatiev 2, Sofia",
            },
            {
                "id": "102",
                "name": "Убежище Варна",
                "address": "Варна, бул. Приморски 20",
                "short_category": "Публ.",
                "latitude": 43.2141,
                "longitude": 27.9147,
            },
            {"id": "103", "name": "Без координати", "address": "гр. Русе"},
            {"id": "104", "name": "Извън обхват", "latitude": 142.0, "longitude": 23.3},
            "not a record",
        ],
    }
