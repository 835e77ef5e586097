"""Content-addressed cache for detailed translations (memory, then disk)."""

import hashlib
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Optional

from loguru import logger


class DisplayMode(str, Enum):
    PHRASE = "phrase"
    SENTENCE = "sentence"


def detail_cache_key(phrase: str, context: str, mode: DisplayMode) -> str:
    mode = DisplayMode(mode)
    raw = f"{mode.value}|{phrase}|{context}"
    return f"detail-{mode.value}-{hashlib.sha256(raw.encode('utf-8')).hexdigest()}"


class DetailCache:
    """Entries never expire; the disk tier survives restarts, the memory tier does not."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory else None
        self._memory: Dict[str, str] = {}

    def key_for(self, phrase: str, context: str, mode: DisplayMode) -> str:
        return detail_cache_key(phrase, context, mode)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.txt"

    def get(self, key: str) -> Optional[str]:
        if key in self._memory:
            return self._memory[key]
        if self.directory is None:
            return None

        path = self._path(key)
        if not path.exists():
            return None
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Unreadable detail cache entry {path.name}: {e}")
            return None
        self._memory[key] = text
        return text

    def put(self, key: str, text: str) -> None:
        self._memory[key] = text
        if self.directory is None:
            return
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._path(key).write_text(text, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write detail cache entry {key}: {e}")

    def get_or_fetch(
        self,
        phrase: str,
        context: str,
        mode: DisplayMode,
        fetch: Callable[[], str],
    ) -> str:
        key = self.key_for(phrase, context, mode)
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Detail cache hit {key[:24]}")
            return cached
        text = fetch()
        self.put(key, text)
        return text

    def __len__(self) -> int:
        return len(self._memory)
