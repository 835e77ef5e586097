"""Learner-chosen generation settings: target language, CEFR level and story flavour."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Language(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    romanization_system: str
    script_name: str


AVAILABLE_LANGUAGES: List[Language] = [
    Language(id="zh", name="Chinese", romanization_system="Pinyin", script_name="Simplified Chinese"),
    Language(id="ja", name="Japanese", romanization_system="Romaji", script_name="Japanese Hiragana"),
]

# Ordered easiest to hardest
LANGUAGE_LEVELS: List[tuple[str, str]] = [
    ("Pre-A1", "Can recognize a few basic words or phrases but cannot yet use the language independently."),
    ("Beginner - A1", "Can understand and use basic expressions and phrases for immediate needs."),
    ("Beginner - A2", "Can communicate in simple tasks and understand frequently used expressions."),
    ("Intermediate - B1", "Can handle most situations while traveling and produce simple connected text."),
    ("Intermediate - B2", "Can understand main ideas of complex texts and interact with fluency."),
    ("Advanced - C1", "Can express ideas fluently and use language flexibly in social and professional contexts."),
    ("Advanced - C2", "Can understand almost everything and express themselves spontaneously with precision."),
]

LEVEL_KEYS = [key for key, _ in LANGUAGE_LEVELS]


def language_by_id(language_id: str) -> Language:
    for language in AVAILABLE_LANGUAGES:
        if language.id == language_id:
            return language
    known = ", ".join(lang.id for lang in AVAILABLE_LANGUAGES)
    raise ValueError(f"Unknown language '{language_id}' (expected one of: {known})")


def level_description(level: str) -> str:
    return dict(LANGUAGE_LEVELS)[level]


def shift_level(level: str, step: int) -> str:
    """Move ``step`` positions along the CEFR scale, clamped at both ends."""
    position = LEVEL_KEYS.index(level) + step
    position = max(0, min(position, len(LEVEL_KEYS) - 1))
    return LEVEL_KEYS[position]


class SettingsConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    selected_language: Language = Field(default=AVAILABLE_LANGUAGES[0])
    language_level: str = Field(default="Pre-A1")
    selected_genres: List[str] = Field(default_factory=list)
    selected_tone: str = Field(default="")
    selected_conflict: str = Field(default="")
    selected_time_period: str = Field(default="")
    custom_request: str = Field(default="")

    @field_validator("language_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if value not in LEVEL_KEYS:
            raise ValueError(f"Unknown language level '{value}'")
        return value

    @field_validator("selected_language")
    @classmethod
    def _known_language(cls, value: Language) -> Language:
        return language_by_id(value.id)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> "SettingsConfiguration":
        return cls.model_validate(data)
