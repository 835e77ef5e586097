"""Translator agent: per-sentence phrase translation and detailed breakdowns."""

from dataclasses import dataclass
from typing import List

from .base import BaseAgent
from ..config import OpenAIConfig
from ..errors import SchemaMismatchError
from ..settings import Language

SENTENCE_SYSTEM_TEMPLATE = """You will receive a list of phrases written in {name}. You have two tasks:
1. Translate each phrase into both the romanization ({romanization}) and English individually. While translating each phrase, you may use the other phrases for context, but your translation should focus on the meaning of the individual phrase. It is critical that you translate each phrase you are provided. They will be separated with new line characters.
2. Combine the translated phrases into a full sentence and provide a contextual translation of the full sentence into English. Pay special attention to English grammar and sentence structure to ensure that the translated sentence reads naturally in English."""

SENTENCE_DETAIL_TEMPLATE = """You will be given a sentence in {name} for which you will provide a detailed translation. You will respond with the following:
- for each character, you will print "<character> (<{romanization}>): <a concise in-context translation for the character>."
- Provide an analysis or two to help an English reader better understand this sentence. Limit it to 350 characters. Ensure the analysis is appropriate for someone reading {name} at a CEFR level of {level}.
Your output must be machine readable so you must not provide any extra text outside the per-character analysis and extra analysis sentence(s)."""

PHRASE_DETAIL_TEMPLATE = """You will be given a phrase in {name} as well as its parent sentence for context. You will provide a detailed translation of the contents of the phrase. You will respond with the following:
- for each character in the phrase, you will print "<character> (<{romanization}>): <a concise in-context translation for the character>." Only include characters from the phrase, do not include characters from the parent sentence.
- Provide an extra sentence or two to help an English reader better understand this phrase in the context of the provided sentence. This could be idiomatic meaning, grammar structure, or explanation for choice of phrases. Your reader will have a limited vocabulary and may only know one way to say certain things. Using different phrases with similar meanings might confuse them, so it's important to explain why those phrases were chosen, if applicable.
Your output must be machine readable so you must not provide any extra text outside the per-character analysis and extra analysis sentence(s)."""

SENTENCE_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "translateText",
        "schema": {
            "type": "object",
            "properties": {
                "romanizedPhrases": {"type": "array", "items": {"type": "string"}},
                "englishPhrases": {"type": "array", "items": {"type": "string"}},
                "englishSentence": {"type": "string"},
            },
            "required": ["romanizedPhrases", "englishPhrases", "englishSentence"],
            "additionalProperties": False,
        },
        "strict": True,
    },
}


@dataclass
class SentenceTranslation:
    romanized_phrases: List[str]
    english_phrases: List[str]
    english_sentence: str


def _string_list(data: dict, key: str) -> List[str]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SchemaMismatchError(f"Field '{key}' must be an array of strings")
    return value


class PhraseTranslator(BaseAgent):
    def __init__(self, config: OpenAIConfig, client=None):
        super().__init__("PhraseTranslator", config, client)

    def translate_sentence(self, phrases: List[str], language: Language) -> SentenceTranslation:
        """Translate the phrases of one sentence, one line per phrase in the prompt."""
        system = SENTENCE_SYSTEM_TEMPLATE.format(
            name=language.name, romanization=language.romanization_system
        )
        data = self.call_chat_json(
            system,
            "\n".join(phrases),
            SENTENCE_RESPONSE_FORMAT,
            required=("romanizedPhrases", "englishPhrases", "englishSentence"),
        )
        sentence = data["englishSentence"]
        if not isinstance(sentence, str):
            raise SchemaMismatchError("Field 'englishSentence' must be a string")
        return SentenceTranslation(
            romanized_phrases=_string_list(data, "romanizedPhrases"),
            english_phrases=_string_list(data, "englishPhrases"),
            english_sentence=sentence,
        )

    def detailed_translation(
        self,
        phrase: str,
        context_sentence: str,
        language: Language,
        language_level: str,
    ) -> str:
        """Plain-text per-character breakdown; a phrase equal to its context is treated as a sentence."""
        if phrase == context_sentence:
            system = SENTENCE_DETAIL_TEMPLATE.format(
                name=language.name,
                romanization=language.romanization_system,
                level=language_level,
            )
            prompt = phrase
        else:
            system = PHRASE_DETAIL_TEMPLATE.format(
                name=language.name, romanization=language.romanization_system
            )
            prompt = f"Phrase: {phrase}, context sentence: {context_sentence}"
        return self.call_chat(system, prompt)
