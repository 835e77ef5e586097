import json
import re
from typing import Iterable, List

from loguru import logger

from ..errors import MalformedResponse
from ..models import PhraseBlock

# Phrases ending with one of these close their sentence
SENTENCE_TERMINALS = (".", "!", "?", "。", "？", "！")

_FENCE = re.compile(r"```(?:json)?\s*\n(.*?)\n```", re.DOTALL)


def parse_phrases(raw: str) -> List[str]:
    """
    Extract the ``phrases`` array from a writer response.

    The writer persona answers with ``{"phrases": [...]}``; a markdown code
    fence around the object is tolerated.

    Raises:
        MalformedResponse: invalid JSON, missing key or non-string items
    """
    if not isinstance(raw, str):
        raise MalformedResponse(f"Expected JSON text, got {type(raw).__name__}")

    text = raw.strip()
    fenced = _FENCE.search(text)
    if fenced:
        text = fenced.group(1).strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Unexpected error parsing JSON: {raw[:200]}") from e

    if not isinstance(data, dict) or "phrases" not in data:
        raise MalformedResponse(f"Key 'phrases' not found in response: {raw[:200]}")

    phrases = data["phrases"]
    if not isinstance(phrases, list) or not all(isinstance(p, str) for p in phrases):
        raise MalformedResponse("Field 'phrases' must be an array of strings")
    return phrases


def lowercase_first_letter(text: str) -> str:
    """Lowercase the first alphabetic character, keeping any leading non-letters."""
    for i, ch in enumerate(text):
        if ch.isalpha():
            return text[:i] + ch.lower() + text[i + 1:]
    return text


def ends_sentence(text: str) -> bool:
    return bool(text) and text[-1] in SENTENCE_TERMINALS


class TextSegmenter:
    """Turns generated phrase strings into ordered, sentence-grouped PhraseBlocks."""

    def segment(self, phrases: Iterable[str], start_index: int = 0) -> List[PhraseBlock]:
        """
        Assign indices and sentence numbers to phrases in generation order.

        Args:
            phrases: Phrase strings as produced by the writer
            start_index: Index given to the first phrase

        Returns:
            One untranslated PhraseBlock per input phrase
        """
        blocks = []
        sentence = 0
        new_sentence = True

        for offset, phrase in enumerate(phrases):
            # The model tends to capitalize every phrase, only sentence starts keep it
            text = phrase if new_sentence else lowercase_first_letter(phrase)
            blocks.append(
                PhraseBlock(
                    index=start_index + offset,
                    language=text,
                    parent_sentence=sentence,
                )
            )

            if ends_sentence(phrase):
                sentence += 1
                new_sentence = True
            else:
                new_sentence = False

        logger.debug(f"Segmented {len(blocks)} phrases into {sentence + (0 if new_sentence else 1)} sentences")
        return blocks

    def segment_response(self, raw: str, start_index: int = 0) -> List[PhraseBlock]:
        return self.segment(parse_phrases(raw), start_index=start_index)
