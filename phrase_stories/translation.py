"""Concurrent per-sentence translation of the phrase store."""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from .errors import PartialTranslationFailure
from .phrase_store import PhraseStore
from .settings import Language


@dataclass
class SentenceOutcome:
    sentence_index: int
    ok: bool
    message: str = ""


@dataclass
class TranslationReport:
    outcomes: List[SentenceOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[SentenceOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def diagnostic(self) -> str:
        return "; ".join(o.message for o in self.failures)

    @property
    def error(self) -> Optional[PartialTranslationFailure]:
        failed = self.failures
        if not failed:
            return None
        return PartialTranslationFailure(self.diagnostic, [o.sentence_index for o in failed])


class TranslationCoordinator:
    """
    One translation call per sentence, all sentences in parallel.

    Each task writes only its own sentence's blocks and its own slot in the
    sentence map. A failed sentence leaves its blocks untranslated and never
    affects the others; the call returns once every task has finished.
    """

    def __init__(self, translator, max_workers: int = 8):
        self.translator = translator
        self.max_workers = max_workers

    def translate_all(
        self,
        store: PhraseStore,
        language: Language,
        cancel: threading.Event | None = None,
    ) -> TranslationReport:
        if store.is_empty:
            return TranslationReport()

        cancel = cancel or threading.Event()
        total = store.blocks[-1].parent_sentence
        logger.info(f"Translating {total + 1} sentences")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._translate_sentence, store, sentence, language, cancel)
                for sentence in range(total + 1)
            ]
            # Join on every task, failures are returned, not raised
            outcomes = [future.result() for future in futures]

        report = TranslationReport(outcomes=outcomes)
        if report.failures:
            logger.warning(f"{len(report.failures)} of {len(outcomes)} sentences failed: {report.diagnostic}")
        else:
            logger.success(f"Translated {len(outcomes)} sentences")
        return report

    def _translate_sentence(
        self,
        store: PhraseStore,
        sentence: int,
        language: Language,
        cancel: threading.Event,
    ) -> SentenceOutcome:
        if cancel.is_set():
            return SentenceOutcome(sentence, False, f"Translation cancelled for sentence {sentence}")

        blocks = store.filter_by_sentence(sentence)
        if not blocks:
            return SentenceOutcome(sentence, True)

        try:
            result = self.translator.translate_sentence([b.language for b in blocks], language)
        except Exception as e:
            logger.debug(f"Sentence {sentence} translation error: {e!r}")
            return SentenceOutcome(sentence, False, f"Translation failed for sentence {sentence}: {e}")

        if len(result.romanized_phrases) != len(blocks) or len(result.english_phrases) != len(blocks):
            return SentenceOutcome(sentence, False, f"Block mismatch count for sentence {sentence}")

        for block, romanized, english in zip(blocks, result.romanized_phrases, result.english_phrases):
            store.apply_translation(block.index, romanized, english)
        store.apply_sentence_translation(sentence, result.english_sentence)
        return SentenceOutcome(sentence, True)
