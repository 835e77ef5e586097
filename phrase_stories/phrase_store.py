"""The phrase blocks of the current story and their sentence-level translations."""

from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from loguru import logger

from .errors import PersistenceError
from .models import PhraseBlock
from .storage import PHRASES_KEY, LocalStore

SENTENCE_SEPARATOR = "~"
SENTENCE_TRANSLATION_FALLBACK = "translation unavailable"


class PhraseStore:
    """
    Owns every PhraseBlock of the current story.

    Blocks are values; updates replace the block at its position, looked up by
    its ``index``. Translation tasks write disjoint positions and disjoint
    sentence slots, so they can run concurrently without a lock.
    """

    def __init__(self, store: Optional[LocalStore] = None, key: str = PHRASES_KEY):
        self._store = store
        self._key = key
        self._blocks: List[PhraseBlock] = []
        self._positions: Dict[int, int] = {}
        self._sentences: Dict[int, str] = {}

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[PhraseBlock]:
        return iter(tuple(self._blocks))

    @property
    def blocks(self) -> Tuple[PhraseBlock, ...]:
        return tuple(self._blocks)

    @property
    def is_empty(self) -> bool:
        return not self._blocks

    @property
    def sentence_count(self) -> int:
        if not self._blocks:
            return 0
        return self._blocks[-1].parent_sentence + 1

    @property
    def next_index(self) -> int:
        if not self._blocks:
            return 0
        return self._blocks[-1].index + 1

    def replace_all(self, blocks: Iterable[PhraseBlock]) -> None:
        blocks = list(blocks)
        positions = {block.index: pos for pos, block in enumerate(blocks)}
        if len(positions) != len(blocks):
            raise ValueError("Phrase block indices must be unique")

        sentences = {}
        for block in blocks:
            if block.english_contextual:
                sentences.setdefault(block.parent_sentence, block.english_contextual)

        # Swap all three together so readers never see a mixed generation
        self._blocks, self._positions, self._sentences = blocks, positions, sentences

    def get(self, index: int) -> Optional[PhraseBlock]:
        pos = self._positions.get(index)
        return None if pos is None else self._blocks[pos]

    def filter_by_sentence(self, sentence_index: int) -> List[PhraseBlock]:
        return [b for b in self._blocks if b.parent_sentence == sentence_index]

    def sentence_text(self, sentence_index: int) -> str:
        return "".join(b.language for b in self.filter_by_sentence(sentence_index))

    def apply_translation(self, index: int, romanization: str, english: str) -> bool:
        pos = self._positions.get(index)
        if pos is None:
            logger.warning(f"No phrase block with index {index}, translation dropped")
            return False
        self._blocks[pos] = replace(self._blocks[pos], romanization=romanization, english=english)
        return True

    def apply_sentence_translation(self, sentence_index: int, english_sentence: str) -> None:
        self._sentences[sentence_index] = english_sentence
        for block in self.filter_by_sentence(sentence_index):
            pos = self._positions[block.index]
            self._blocks[pos] = replace(block, english_contextual=english_sentence)

    def sentence_translation(self, sentence_index: int) -> Optional[str]:
        return self._sentences.get(sentence_index)

    def build_sentence_view(self, phrase: PhraseBlock) -> PhraseBlock:
        """
        Composite block for the sentence containing ``phrase``.

        The selected phrase is wrapped in ``[...]`` in all three text facets
        and the sentence's phrases are joined with ``~``.
        """
        members = self.filter_by_sentence(phrase.parent_sentence)

        def join(attr: str) -> str:
            parts = []
            for block in members:
                text = getattr(block, attr)
                parts.append(f"[{text}]" if block.index == phrase.index else text)
            return SENTENCE_SEPARATOR.join(parts)

        return PhraseBlock(
            index=phrase.parent_sentence,
            language=join("language"),
            romanization=join("romanization"),
            english=join("english"),
            english_contextual=self._sentences.get(phrase.parent_sentence, SENTENCE_TRANSLATION_FALLBACK),
            parent_sentence=phrase.parent_sentence,
        )

    def persist(self) -> None:
        if self._store is None:
            return
        self._store.save(self._key, [b.to_dict() for b in self._blocks])

    def restore(self) -> Optional[List[PhraseBlock]]:
        """
        Load the saved snapshot into the store.

        Returns:
            None when nothing usable is saved, otherwise the restored blocks
            (an empty list when an empty story was saved)
        """
        if self._store is None:
            return None
        try:
            data = self._store.load(self._key)
            if data is None:
                return None
            if not isinstance(data, list):
                raise PersistenceError(f"Expected a list under '{self._key}'")
            blocks = [PhraseBlock.from_dict(item) for item in data]
            self.replace_all(blocks)
        except (PersistenceError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring saved phrase blocks: {e}")
            return None

        logger.info(f"Restored {len(blocks)} phrase blocks")
        return blocks
