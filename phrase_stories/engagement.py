"""Per-character click tracking used to spot vocabulary the learner struggles with."""

import threading
import unicodedata
from typing import Dict, List, Optional, Tuple

from loguru import logger

from .errors import PersistenceError
from .models import ClickData, PhraseBlock
from .storage import CLICKS_KEY, LocalStore

DIFFICULT_THRESHOLD = 4
DIFFICULT_TOP_N = 3


def is_visible_character(ch: str) -> bool:
    """False for punctuation, symbols, separators and whitespace."""
    if ch.isspace():
        return False
    return unicodedata.category(ch)[0] not in ("P", "S", "Z")


class EngagementTracker:
    """
    Clicks are recorded as pending marks and only turn into counts when a
    new chapter is generated: a character clicked any number of times in one
    chapter gains one click. On continuation, characters that were not
    clicked have their count halved and are dropped when it reaches zero.
    """

    def __init__(self, store: Optional[LocalStore] = None):
        self._store = store
        self.counts: Dict[str, ClickData] = {}
        # Clicks arrive from the UI while a cycle commits on its worker thread
        self._lock = threading.RLock()

    def record_click(self, phrase: PhraseBlock | str) -> None:
        text = phrase.language if isinstance(phrase, PhraseBlock) else phrase
        with self._lock:
            for ch in text:
                if not is_visible_character(ch):
                    continue
                entry = self.counts.setdefault(ch, ClickData())
                entry.was_clicked = True
            self.persist()

    def commit_pending(self, decay: bool) -> None:
        with self._lock:
            for ch, entry in list(self.counts.items()):
                if entry.was_clicked:
                    self.counts[ch] = ClickData(clicks=entry.clicks + 1, was_clicked=False)
                elif decay:
                    halved = entry.clicks // 2
                    if halved == 0:
                        del self.counts[ch]
                    else:
                        self.counts[ch] = ClickData(clicks=halved, was_clicked=False)
            self.persist()

    def ranked(self) -> List[Tuple[str, int]]:
        with self._lock:
            items = [(ch, data.clicks) for ch, data in self.counts.items()]
        return sorted(items, key=lambda item: item[1], reverse=True)

    def top_characters(self, n: int = DIFFICULT_TOP_N, threshold: int = DIFFICULT_THRESHOLD) -> List[str]:
        return [ch for ch, clicks in self.ranked() if clicks >= threshold][:n]

    def reset(self) -> None:
        with self._lock:
            self.counts.clear()
            self.persist()

    def persist(self) -> None:
        if self._store is None:
            return
        with self._lock:
            payload = {ch: data.to_dict() for ch, data in self.counts.items()}
            self._store.save(CLICKS_KEY, payload)

    def restore(self) -> bool:
        if self._store is None:
            return False
        try:
            data = self._store.load(CLICKS_KEY)
            if data is None:
                return False
            if not isinstance(data, dict):
                raise PersistenceError("Expected a mapping of character clicks")
            counts = {ch: ClickData.from_dict(item) for ch, item in data.items()}
        except (PersistenceError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring saved click counts: {e}")
            return False
        with self._lock:
            self.counts = counts
        return True
