import pytest
from pydantic import ValidationError

from phrase_stories.settings import (
    LEVEL_KEYS,
    Language,
    SettingsConfiguration,
    language_by_id,
    level_description,
    shift_level,
)


def test_defaults():
    settings = SettingsConfiguration()
    assert settings.selected_language.id == "zh"
    assert settings.language_level == "Pre-A1"
    assert settings.selected_genres == []


def test_round_trip():
    settings = SettingsConfiguration(
        selected_language=language_by_id("ja"),
        language_level="Intermediate - B1",
        selected_genres=["Fantasy"],
        selected_tone="dark",
    )
    assert SettingsConfiguration.from_dict(settings.to_dict()) == settings


def test_unknown_level_rejected():
    with pytest.raises(ValidationError):
        SettingsConfiguration(language_level="Expert")


def test_unknown_language_rejected():
    fake = Language(id="xx", name="Klingon", romanization_system="-", script_name="-")
    with pytest.raises(ValidationError):
        SettingsConfiguration(selected_language=fake)


def test_language_canonicalized():
    stale = Language(id="ja", name="Japanese (old)", romanization_system="Hepburn", script_name="Kana")
    settings = SettingsConfiguration(selected_language=stale)
    assert settings.selected_language == language_by_id("ja")


def test_language_by_id_unknown():
    with pytest.raises(ValueError):
        language_by_id("fr")


def test_shift_level_clamps():
    assert shift_level("Pre-A1", -1) == "Pre-A1"
    assert shift_level("Pre-A1", 2) == "Beginner - A2"
    assert shift_level("Advanced - C1", 5) == "Advanced - C2"


def test_every_level_described():
    assert all(level_description(level) for level in LEVEL_KEYS)
    assert len(LEVEL_KEYS) == 7
