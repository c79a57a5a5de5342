import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import aiohttp

from shelterfinder.config import settings
from shelterfinder.exceptions import MalformedSourceError

logger = logging.getLogger(__name__)

def _require_object(document: Any, source: str) -> Dict[str, Any]:
    if not isinstance(document, dict):
        raise MalformedSourceError(f"Shelter data from {source} is not a JSON object")
    return document

def _read_json_file(path: Path) -> Any:
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)

async def load_document_from_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a shelter data document from a local JSON file"""
    path = Path(path)
    try:
        document = await asyncio.to_thread(_read_json_file, path)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read shelter data file {path}: {e}")
        raise MalformedSourceError(f"Cannot read shelter data file {path}") from e

    return _require_object(document, str(path))

async def fetch_document(url: str, timeout: int = settings.DATA_FETCH_TIMEOUT) -> Dict[str, Any]:
    """Download a shelter data document"""
    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=timeout)
            ) as response:

                if response.status != 200:
                    logger.error(f"Shelter data download failed: {response.status}")
                    raise MalformedSourceError(f"Shelter data download failed with HTTP {response.status}")

                document = await response.json(content_type=None)

    except asyncio.TimeoutError as e:
        logger.error(f"Shelter data download timeout: {url}")
        raise MalformedSourceError(f"Timed out downloading {url}") from e
    except (aiohttp.ClientError, ValueError) as e:
        logger.error(f"Shelter data download error: {e}")
        raise MalformedSourceError(f"Cannot download shelter data from {url}") from e

    logger.info(f"Downloaded shelter data from {url}")
    return _require_object(document, url)
