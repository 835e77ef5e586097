import pytest
import yaml
from pathlib import Path
from pydantic import ValidationError

from phrase_stories.config import Config


def test_default_config(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    config = Config()

    assert config.openai.api_key == "sk-env"
    assert config.openai.model == "gpt-4o-2024-08-06"
    assert config.polling.interval_seconds == 1.0
    assert config.translation.max_workers == 8
    assert config.storage.audio_dir == Path("data/cache/audio")
    assert config.storage.detail_dir == Path("data/cache/details")


def test_config_from_yaml(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(f"""
polling:
  interval_seconds: 0.5
  max_attempts: 10
storage:
  state_dir: {tmp_path / "state"}
speech:
  voice_id: custom-voice
log_level: DEBUG
""")

    config = Config.from_yaml(config_file)
    assert config.polling.max_attempts == 10
    assert config.storage.state_dir == tmp_path / "state"
    assert config.speech.voice_id == "custom-voice"
    assert config.speech.model_id == "eleven_turbo_v2_5"
    assert config.log_level == "DEBUG"


def test_empty_yaml(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("")
    assert Config.from_yaml(config_file).polling.max_attempts == 300


def test_invalid_values(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("polling:\n  interval_seconds: 0\n")
    with pytest.raises(ValidationError):
        Config.from_yaml(config_file)


def test_to_yaml_omits_secrets(tmp_path):
    config = Config()
    config.openai.api_key = "sk-secret"
    config.speech.api_key = "xi-secret"
    path = tmp_path / "out.yaml"

    config.to_yaml(path)

    data = yaml.safe_load(path.read_text())
    assert "api_key" not in data["openai"]
    assert "api_key" not in data["speech"]
    assert "sk-secret" not in path.read_text()
    assert Config.from_yaml(path).polling == config.polling
