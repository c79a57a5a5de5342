from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from shelterfinder.core.importer import ShelterImporter
from shelterfinder.core.registry import ShelterRegistry, shelter_registry
from shelterfinder.core.storage import ShelterStorage
from shelterfinder.database import AsyncSessionLocal
from shelterfinder.utils.kv_store import SQLKeyValueStore

@lru_cache
def get_storage() -> ShelterStorage:
    return ShelterStorage(SQLKeyValueStore(AsyncSessionLocal))

def get_registry() -> ShelterRegistry:
    return shelter_registry

StorageDep = Annotated[ShelterStorage, Depends(get_storage)]
RegistryDep = Annotated[ShelterRegistry, Depends(get_registry)]

def get_importer(storage: StorageDep) -> ShelterImporter:
    return ShelterImporter(storage)

ImporterDep = Annotated[ShelterImporter, Depends(get_importer)]
