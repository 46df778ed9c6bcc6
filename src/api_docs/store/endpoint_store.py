"""
File-backed endpoint store.

Endpoint groups live as ``*.json`` files in a single directory next to an
index file listing them. Writes to the same file from this process are
serialized with one ``asyncio.Lock`` per file name; writers in other
processes are not coordinated and the last write wins.
"""

import asyncio
import json
import logging
import posixpath
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import aiofiles
from pydantic import ValidationError

from .exceptions import InvalidFileNameError, StoreWriteError
from .models import EndpointGroup

logger = logging.getLogger(__name__)


def sanitize_file_name(file_name: str) -> str:
    """Reduce a client supplied name to its base name component."""
    return posixpath.basename(file_name.replace("\\", "/"))


def dump_json(data: Any) -> str:
    """Serialize with the stable 2-space layout used for every stored file."""
    return json.dumps(data, indent=2, ensure_ascii=False)


class EndpointStore:
    """Reads and writes endpoint group files and the index file."""

    def __init__(self, apis_dir: Path, index_file: str = "index.json"):
        self.apis_dir = Path(apis_dir)
        self.index_file = index_file
        self._locks: Dict[str, asyncio.Lock] = {}

    def ensure_directory(self) -> None:
        self.apis_dir.mkdir(parents=True, exist_ok=True)

    def _lock_for(self, name: str) -> asyncio.Lock:
        lock = self._locks.get(name)
        if lock is None:
            lock = self._locks[name] = asyncio.Lock()
        return lock

    async def _read_json(self, path: Path) -> Optional[Any]:
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                return json.loads(await f.read())
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store file {path.name}: {e}")
            return None

    async def _write_json(self, path: Path, data: Any) -> None:
        try:
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(dump_json(data))
        except OSError as e:
            logger.error(f"Failed to write {path.name}: {e}")
            raise StoreWriteError(str(e), path=path.name) from e

    async def read_group(self, file_name: str) -> Optional[EndpointGroup]:
        """
        Load an endpoint group.

        Returns:
            The group, or None when the file is missing, unparseable or not
            shaped like a group. Callers treat None as "create new".
        """
        data = await self._read_json(self.apis_dir / sanitize_file_name(file_name))
        if data is None:
            return None
        try:
            return EndpointGroup.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed endpoint group {file_name}: {e.error_count()} errors")
            return None

    async def load_or_create_group(
        self,
        file_name: str,
        group: str,
        description: Optional[str] = None
    ) -> EndpointGroup:
        existing = await self.read_group(file_name)
        if existing is not None:
            return existing
        return EndpointGroup(group=group, description=description, endpoints=[])

    async def write_group(
        self,
        file_name: str,
        group: Union[EndpointGroup, Mapping[str, Any]]
    ) -> str:
        """
        Overwrite a group file.

        The name is reduced to its base name and must end in ``.json``.
        Mappings are written as given so that unknown fields survive.

        Returns:
            The sanitized file name actually written

        Raises:
            InvalidFileNameError: If the name does not end with .json
            StoreWriteError: If the filesystem write fails
        """
        safe_name = sanitize_file_name(file_name)
        if not safe_name.endswith(".json"):
            raise InvalidFileNameError("fileName must end with .json", file_name=file_name)

        document = group.to_document() if isinstance(group, EndpointGroup) else dict(group)

        async with self._lock_for(safe_name):
            await self._write_json(self.apis_dir / safe_name, document)

        logger.info(
            "Endpoint group saved",
            extra={"file": safe_name, "endpoints": len(document.get("endpoints") or [])}
        )
        return safe_name

    async def read_index(self) -> List[str]:
        data = await self._read_json(self.apis_dir / self.index_file)
        if not isinstance(data, list):
            return []
        return data

    async def append_index(self, file_name: str) -> List[str]:
        """
        Add a file name to the index unless it is already listed.

        Returns:
            The index as written

        Raises:
            InvalidFileNameError: If the name is empty after sanitizing
            StoreWriteError: If the filesystem write fails
        """
        safe_name = sanitize_file_name(file_name)
        if not safe_name:
            raise InvalidFileNameError("file is required", file_name=file_name)

        async with self._lock_for(self.index_file):
            index = await self.read_index()
            if safe_name not in index:
                index.append(safe_name)
                logger.info("Adding file to index", extra={"file": safe_name})
            await self._write_json(self.apis_dir / self.index_file, index)

        return index
