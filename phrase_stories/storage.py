"""Key-value persistence of local state as JSON files."""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from .errors import PersistenceError

THREAD_KEY = "thread_id"
PHRASES_KEY = "phrase_blocks"
SETTINGS_KEY = "settings"
CLICKS_KEY = "character_clicks"


class LocalStore:
    """One JSON file per key under ``root``.

    ``load`` returns ``None`` for a key that was never saved and raises
    :class:`PersistenceError` when a saved record cannot be decoded, so callers
    can tell "absent" from "broken".
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def save(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            payload = json.dumps(value, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot serialize '{key}': {e}") from e

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise PersistenceError(f"Cannot write '{key}': {e}") from e
        logger.debug(f"Saved {key} to {path}")

    def load(self, key: str) -> Any:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read '{key}': {e}") from e

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
