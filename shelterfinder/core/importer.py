import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from shelterfinder.exceptions import MalformedSourceError
from shelterfinder.core.normalizer import Accepted, normalize
from shelterfinder.core.storage import ShelterStorage
from shelterfinder.models.shelter import Shelter
from shelterfinder.utils.data_source import fetch_document, load_document_from_file

logger = logging.getLogger(__name__)

@dataclass
class ImportReport:
    """Outcome counts of the last import"""
    accepted: int = 0
    skipped: int = 0
    duplicates: int = 0
    # (position in source, reason) for every rejected record
    rejections: List[Tuple[int, str]] = field(default_factory=list)

class ShelterImporter:
    """Parses a shelter data document, normalizes it and replaces the stored set"""

    def __init__(self, storage: ShelterStorage):
        self.storage = storage
        self.last_report: Optional[ImportReport] = None

    async def import_from_source(self, data: Any) -> List[Shelter]:
        """
        Import every valid record of a {"shelters": [...]} document

        Raises:
            MalformedSourceError: the document has no shelters list
            StorageWriteError: the accepted set could not be saved
        """
        if not isinstance(data, Mapping) or not isinstance(data.get("shelters"), list):
            raise MalformedSourceError("Shelter data must be an object with a 'shelters' list")

        logger.info("Starting shelter import...")
        report = ImportReport()
        by_id: Dict[str, Shelter] = {}

        for position, raw in enumerate(data["shelters"]):
            result = normalize(raw)
            if not isinstance(result, Accepted):
                report.skipped += 1
                report.rejections.append((position, result.reason))
                continue

            shelter = result.shelter
            if shelter.id in by_id:
                # Later records win but keep the first record's position
                report.duplicates += 1
            by_id[shelter.id] = shelter

        shelters = list(by_id.values())
        report.accepted = len(shelters)
        self.last_report = report

        logger.info(
            f"Import finished: {report.accepted} valid, {report.skipped} skipped, "
            f"{report.duplicates} duplicate ids"
        )

        await self.storage.save_shelter_set(shelters)
        return shelters

    async def import_from_file(self, path: Union[str, Path]) -> List[Shelter]:
        document = await load_document_from_file(path)
        return await self.import_from_source(document)

    async def import_from_url(self, url: str) -> List[Shelter]:
        document = await fetch_document(url)
        return await self.import_from_source(document)
