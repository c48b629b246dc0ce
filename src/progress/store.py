"""
Key-value blob storage for progress data.

Separates persistence from the trackers for testability. Blobs are plain
JSON-compatible dicts keyed by a short name (see STORE_KEYS).
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Union, runtime_checkable

logger = logging.getLogger(__name__)

# Keys used by the trackers
GAME_SETTINGS_KEY = "game_settings"
HIGH_SCORES_KEY = "high_scores"
ACHIEVEMENTS_KEY = "achievements"
PLAYER_STATISTICS_KEY = "player_statistics"
GAME_STATS_KEY = "game_stats"
POWERUPS_KEY = "powerups_data"
CHALLENGE_PROGRESS_KEY = "challenge_progress"

STORE_KEYS = (
    GAME_SETTINGS_KEY,
    HIGH_SCORES_KEY,
    ACHIEVEMENTS_KEY,
    PLAYER_STATISTICS_KEY,
    GAME_STATS_KEY,
    POWERUPS_KEY,
    CHALLENGE_PROGRESS_KEY,
)


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Async blob storage.

    Implementations:
    - JsonFileStore: one JSON file per key (production)
    - MemoryStore: in-memory dict (testing)
    """

    async def load(self, key: str) -> Optional[dict]:
        """Load a blob. Returns None if the key was never saved."""
        ...

    async def save(self, key: str, blob: dict) -> None:
        """Persist a blob, replacing any previous value."""
        ...


class JsonFileStore:
    """
    File-based storage, one `<key>.json` per key under `directory`.

    The directory is created on the first save.
    """

    def __init__(self, directory: Union[Path, str] = "data"):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    async def load(self, key: str) -> Optional[dict]:
        path = self._path(key)
        if not path.exists():
            return None
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Blob for {key!r} is not an object")
        return data

    async def save(self, key: str, blob: dict) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(blob, indent=2, default=str), encoding="utf-8")
        tmp.replace(path)


class MemoryStore:
    """In-memory storage for tests. Blobs are round-tripped through JSON."""

    def __init__(self, data: Optional[Dict[str, dict]] = None):
        self._data: Dict[str, str] = {}
        for key, blob in (data or {}).items():
            self._data[key] = json.dumps(blob, default=str)

    async def load(self, key: str) -> Optional[dict]:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    async def save(self, key: str, blob: dict) -> None:
        self._data[key] = json.dumps(blob, default=str)

    def keys(self):
        return list(self._data)

    def raw(self, key: str) -> Optional[dict]:
        """Synchronous peek for tests."""
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)


async def load_blob(store: KeyValueStore, key: str) -> Optional[dict]:
    """
    Load a blob, treating any store failure as missing data.

    Returns:
        The blob, or None when absent or unreadable
    """
    try:
        return await store.load(key)
    except Exception as e:
        logger.warning("Failed to load %r, using defaults: %s", key, e)
        return None


async def save_blob(store: KeyValueStore, key: str, blob: dict) -> bool:
    """Save a blob, logging failures. Returns True on success."""
    try:
        await store.save(key, blob)
        return True
    except Exception as e:
        logger.warning("Failed to save %r: %s", key, e)
        return False


class PersistentTracker:
    """
    Base for trackers that keep one blob in a KeyValueStore.

    Subclasses implement `to_blob()` and `from_blob()`; `persist()` issues a
    fire-and-forget write: a task on the running loop when there is one,
    otherwise the write runs inline.
    """

    key: str = ""

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else MemoryStore()
        self._pending: set = set()

    def to_blob(self) -> dict:
        raise NotImplementedError

    def from_blob(self, blob: dict) -> None:
        raise NotImplementedError

    def reset_defaults(self) -> None:
        raise NotImplementedError

    async def load(self) -> None:
        """Load state from the store; missing or corrupt data resets to defaults."""
        blob = await load_blob(self.store, self.key)
        if blob is None:
            self.reset_defaults()
            return
        try:
            self.from_blob(blob)
        except Exception as e:
            logger.warning("Corrupt %r blob, using defaults: %s", self.key, e)
            self.reset_defaults()

    async def save(self) -> bool:
        return await save_blob(self.store, self.key, self.to_blob())

    def persist(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.save())
            return
        task = loop.create_task(self.save())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        """Wait for outstanding fire-and-forget writes."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
