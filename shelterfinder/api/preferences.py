from fastapi import APIRouter
from sqlmodel import SQLModel
from typing import Any, Dict, List, Optional

from shelterfinder.api.deps import RegistryDep, StorageDep
from shelterfinder.models.settings import AppSettings, EmergencyContact
from shelterfinder.models.shelter import Coordinates

router = APIRouter()

class SearchTermRequest(SQLModel):
    query: str

# ==================== SETTINGS ====================

@router.get("/settings", response_model=AppSettings)
async def get_settings(storage: StorageDep) -> AppSettings:
    return await storage.load_settings()

@router.put("/settings", response_model=AppSettings)
async def update_settings(storage: StorageDep, app_settings: AppSettings) -> AppSettings:
    await storage.save_settings(app_settings)
    return app_settings

# ==================== EMERGENCY CONTACTS ====================

@router.get("/contacts", response_model=List[EmergencyContact])
async def get_contacts(storage: StorageDep) -> List[EmergencyContact]:
    return await storage.load_emergency_contacts()

@router.put("/contacts", response_model=List[EmergencyContact])
async def update_contacts(storage: StorageDep, contacts: List[EmergencyContact]) -> List[EmergencyContact]:
    await storage.save_emergency_contacts(contacts)
    return contacts

# ==================== SEARCH HISTORY ====================

@router.get("/history")
async def get_history(storage: StorageDep) -> List[str]:
    return await storage.load_search_history()

@router.post("/history")
async def add_history(storage: StorageDep, request: SearchTermRequest) -> List[str]:
    await storage.add_search_term(request.query)
    return await storage.load_search_history()

@router.delete("/history")
async def clear_history(storage: StorageDep) -> Dict[str, Any]:
    await storage.clear_search_history()
    return {"message": "Search history cleared"}

# ==================== FAVORITES ====================

@router.get("/favorites")
async def get_favorites(storage: StorageDep) -> List[str]:
    return await storage.load_favorites()

@router.get("/favorites/{shelter_id}")
async def check_favorite(storage: StorageDep, shelter_id: str) -> Dict[str, Any]:
    return {"shelter_id": shelter_id, "favorite": await storage.is_favorite(shelter_id)}

@router.put("/favorites/{shelter_id}")
async def add_favorite(storage: StorageDep, shelter_id: str) -> List[str]:
    await storage.add_favorite(shelter_id)
    return await storage.load_favorites()

@router.delete("/favorites/{shelter_id}")
async def remove_favorite(storage: StorageDep, shelter_id: str) -> List[str]:
    await storage.remove_favorite(shelter_id)
    return await storage.load_favorites()

# ==================== LOCATION ====================

@router.get("/location")
async def get_last_location(storage: StorageDep) -> Optional[Coordinates]:
    return await storage.load_last_location()

@router.put("/location", response_model=Coordinates)
async def update_last_location(storage: StorageDep, location: Coordinates) -> Coordinates:
    await storage.save_last_location(location)
    return location

# ==================== DATA ====================

@router.get("/storage")
async def storage_info(storage: StorageDep) -> Dict[str, Any]:
    last_update = await storage.get_last_update_timestamp()
    return {
        "size_bytes": await storage.storage_footprint_bytes(),
        "last_update": last_update.isoformat() if last_update else None
    }

@router.delete("/data")
async def clear_data(storage: StorageDep, registry: RegistryDep) -> Dict[str, Any]:
    await storage.clear_all_data()
    registry.replace(())
    return {"message": "All stored data cleared"}
