# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Profile and save-slot management over an opaque string-keyed store.

The game only needs ``get``/``set``/``delete``/``keys`` on string values, so
the backend is pluggable.  Two backends are provided:

    store = MemoryStore()                      # in-process, for tests
    store = JsonFileStore("/tmp/profiles")     # one JSON file per key

    profiles = ProfileStore(store)
    profiles.save_player(player)
    profiles.set_current(player.id)
    player = profiles.get_current()
"""

from __future__ import annotations

import hashlib
import json
import logging
import shutil
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from player import PlayerRecord

logger = logging.getLogger(__name__)


PLAYER_KEY_PREFIX = "player:"
CURRENT_PLAYER_KEY = "currentPlayer"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> bool: ...

    def keys(self) -> list[str]: ...


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

class MemoryStore:
    """Dict-backed store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore:
    """File-based store: each key is one JSON file inside *root_dir*.

    Files hold ``{"key": <key>, "value": <string>}`` and are named by the
    SHA-256 of the key, so any key is a safe filename.  Writes go through a
    temporary file and an atomic rename.
    """

    def __init__(self, root_dir: str | Path) -> None:
        self._root = Path(root_dir)

    def _path_for(self, key: str) -> Path:
        return self._root / f"{hashlib.sha256(key.encode()).hexdigest()}.json"

    def _read(self, path: Path) -> Optional[dict]:
        try:
            with open(path) as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Unreadable store entry %s: %s", path.name, e)
            return None

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        entry = self._read(path)
        if entry is None:
            return None
        return entry.get("value")

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump({"key": key, "value": value}, f, separators=(",", ":"))
        tmp_path.replace(path)

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def keys(self) -> list[str]:
        if not self._root.exists():
            return []
        found = []
        for path in sorted(self._root.glob("*.json")):
            entry = self._read(path)
            if entry and "key" in entry:
                found.append(entry["key"])
        return found

    def clear(self) -> None:
        if self._root.exists():
            shutil.rmtree(self._root)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

class ProfileStore:
    """Saved players plus the pointer to the one currently in use."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def save_player(self, player: PlayerRecord) -> None:
        self.store.set(PLAYER_KEY_PREFIX + player.id, player.model_dump_json())

    def load_player(self, player_id: str) -> Optional[PlayerRecord]:
        """Return the saved player, or ``None`` when missing or unreadable."""
        raw = self.store.get(PLAYER_KEY_PREFIX + player_id)
        if raw is None:
            return None
        try:
            return PlayerRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding corrupt profile %s: %s", player_id, e)
            return None

    def list_players(self) -> list[PlayerRecord]:
        players = []
        for key in self.store.keys():
            if key.startswith(PLAYER_KEY_PREFIX):
                p = self.load_player(key[len(PLAYER_KEY_PREFIX):])
                if p is not None:
                    players.append(p)
        return players

    def delete_player(self, player_id: str) -> bool:
        if self.store.get(CURRENT_PLAYER_KEY) == player_id:
            self.store.delete(CURRENT_PLAYER_KEY)
        return self.store.delete(PLAYER_KEY_PREFIX + player_id)

    def delete_all(self) -> int:
        removed = 0
        for key in self.store.keys():
            if key.startswith(PLAYER_KEY_PREFIX):
                removed += int(self.store.delete(key))
        self.store.delete(CURRENT_PLAYER_KEY)
        return removed

    def set_current(self, player_id: str) -> None:
        if self.store.get(PLAYER_KEY_PREFIX + player_id) is None:
            raise ValueError(f"No saved player with id {player_id!r}")
        self.store.set(CURRENT_PLAYER_KEY, player_id)

    def get_current(self) -> Optional[PlayerRecord]:
        player_id = self.store.get(CURRENT_PLAYER_KEY)
        if player_id is None:
            return None
        return self.load_player(player_id)
