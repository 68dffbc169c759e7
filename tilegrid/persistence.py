"""
ArchiveStore interface for pluggable archive storage backends.

This module provides the abstract ArchiveStore interface and three concrete
implementations for keeping named map archives. Storage is OPTIONAL - the
archive codec works on any byte stream, and an editor can hold archives
entirely in memory.

Three included implementations:
1. InMemoryArchiveStore - Dict of encoded bytes, data lost on exit (testing, prototyping)
2. BinaryArchiveStore - One ``.map`` file per archive in the binary format of record
3. JsonArchiveStore - One ``.json`` document per archive (tooling, diffs, review)

Key responsibilities:
- Save/load a MapArchive under a name
- List and delete stored archives
- Surface decode failures as typed errors (never a half-loaded archive)

Async design rationale:
- Editors and game servers run event loops; file I/O runs via asyncio.to_thread
  so saving a large archive never stalls the loop
- initialize() and close() manage directories and other backend state

Usage pattern:
    store = BinaryArchiveStore(Config.ARCHIVE_DIR)
    await store.initialize()

    await store.save_archive("overworld", archive)
    archive = await store.load_archive("overworld")

    await store.close()
"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from .archive import MapArchive
from .config import Config
from .logging_utils import log_info, log_success


class ArchiveStore(ABC):
    """Abstract base class for named map archive storage.

    Method categories:
    1. Lifecycle: initialize(), close()
    2. Archives: save_archive(), load_archive(), delete_archive(), list_archives()

    Archive names are plain identifiers ("overworld", "dungeon_03"); backends
    decide how a name maps onto files or keys.

    Loading a missing archive returns None. Loading a corrupt one raises the
    codec's ArchiveDecodeError subclass so the caller can decide what to do.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the storage backend.

        Called once before use. Used to create directories, open handles, etc.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Close the storage backend.

        Called once when the host is done with the store.
        """
        pass

    @abstractmethod
    async def save_archive(self, name: str, archive: MapArchive) -> None:
        """
        Save an archive under ``name``, replacing any previous version.

        Args:
            name: Archive name
            archive: Archive to store
        """
        pass

    @abstractmethod
    async def load_archive(self, name: str) -> Optional[MapArchive]:
        """
        Load the archive stored under ``name``.

        Returns:
            MapArchive if found, None otherwise

        Raises:
            ArchiveDecodeError: If stored data cannot be decoded
        """
        pass

    @abstractmethod
    async def delete_archive(self, name: str) -> bool:
        """
        Delete the archive stored under ``name``.

        Returns:
            True if something was deleted
        """
        pass

    @abstractmethod
    async def list_archives(self) -> List[str]:
        """Return the names of all stored archives, sorted."""
        pass


class InMemoryArchiveStore(ArchiveStore):
    """In-memory storage using a dict of encoded archives.

    Archives are stored as encoded bytes rather than live objects, so every
    load goes through the binary codec exactly like a file-backed store and
    callers never share mutable state with the store.
    """

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        """
        No-op: data is kept on close so callers can still inspect it.
        Use delete_archive() for explicit cleanup.
        """
        pass

    async def save_archive(self, name: str, archive: MapArchive) -> None:
        self.blobs[name] = archive.to_bytes()

    async def load_archive(self, name: str) -> Optional[MapArchive]:
        data = self.blobs.get(name)
        if data is None:
            return None
        return MapArchive.from_bytes(data)

    async def delete_archive(self, name: str) -> bool:
        return self.blobs.pop(name, None) is not None

    async def list_archives(self) -> List[str]:
        return sorted(self.blobs)


class _FileArchiveStore(ArchiveStore):
    """Shared directory handling for file-backed stores.

    Directory structure:
    ```
    {base_path}/
      overworld{suffix}
      dungeon_03{suffix}
    ```
    """

    suffix: str = ""

    def __init__(self, base_path: Path | str | None = None):
        self.base_path = Path(base_path) if base_path is not None else Config.ARCHIVE_DIR

    async def initialize(self) -> None:
        await asyncio.to_thread(self.base_path.mkdir, parents=True, exist_ok=True)

    async def close(self) -> None:
        # Nothing to clean up for file persistence
        return None

    async def delete_archive(self, name: str) -> bool:
        path = self._path(name)
        if not path.exists():
            return False
        await asyncio.to_thread(path.unlink)
        log_info(f"Deleted archive {path}")
        return True

    async def list_archives(self) -> List[str]:
        if not self.base_path.exists():
            return []

        def _scan() -> List[str]:
            return sorted(path.stem for path in self.base_path.glob(f"*{self.suffix}"))

        return await asyncio.to_thread(_scan)

    def _path(self, name: str) -> Path:
        if not name or Path(name).name != name:
            raise ValueError(f"Invalid archive name '{name}'")
        return self.base_path / f"{name}{self.suffix}"


class BinaryArchiveStore(_FileArchiveStore):
    """File-based storage in the binary format of record (``{name}.map``)."""

    suffix = ".map"

    async def save_archive(self, name: str, archive: MapArchive) -> None:
        path = self._path(name)
        await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)

        def _write() -> None:
            with path.open("wb") as handle:
                archive.encode(handle)

        await asyncio.to_thread(_write)
        log_success(f"Saved {len(archive)} map(s) to {path}")

    async def load_archive(self, name: str) -> Optional[MapArchive]:
        path = self._path(name)
        if not path.exists():
            return None

        data = await asyncio.to_thread(path.read_bytes)
        return MapArchive.from_bytes(data)


class JsonArchiveStore(_FileArchiveStore):
    """File-based storage as pretty-printed JSON documents (``{name}.json``).

    Handy for inspecting or diffing map data. Not the format of record.
    """

    suffix = ".json"

    async def save_archive(self, name: str, archive: MapArchive) -> None:
        path = self._path(name)
        await asyncio.to_thread(path.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_text, archive.to_json(), "utf-8")
        log_success(f"Saved {len(archive)} map(s) to {path}")

    async def load_archive(self, name: str) -> Optional[MapArchive]:
        path = self._path(name)
        if not path.exists():
            return None

        text = await asyncio.to_thread(path.read_text, "utf-8")
        return MapArchive.from_json(text)
