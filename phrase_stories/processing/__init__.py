from .segment import (
    SENTENCE_TERMINALS,
    TextSegmenter,
    ends_sentence,
    lowercase_first_letter,
    parse_phrases,
)

__all__ = [
    "SENTENCE_TERMINALS",
    "TextSegmenter",
    "ends_sentence",
    "lowercase_first_letter",
    "parse_phrases",
]
