import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
import yaml


def _env(name: str) -> str:
    return os.environ.get(name, "")


class OpenAIConfig(BaseModel):
    api_key: str = Field(default_factory=lambda: _env("OPENAI_API_KEY"))
    base_url: Optional[str] = Field(default=None)
    model: str = Field(default="gpt-4o-2024-08-06")
    timeout: float = Field(default=120.0, gt=0)

class SpeechConfig(BaseModel):
    api_key: str = Field(default_factory=lambda: _env("ELEVENLABS_API_KEY"))
    base_url: str = Field(default="https://api.elevenlabs.io/v1")
    voice_id: str = Field(default="ByhETIclHirOlWnWKhHc")
    model_id: str = Field(default="eleven_turbo_v2_5")
    output_format: str = Field(default="mp3_22050_32")
    stability: float = Field(default=0.5, ge=0, le=1)
    similarity_boost: float = Field(default=1.0, ge=0, le=1)
    style: float = Field(default=0.0, ge=0, le=1)
    timeout: float = Field(default=60.0, gt=0)

class PollingConfig(BaseModel):
    interval_seconds: float = Field(default=1.0, gt=0)
    max_attempts: int = Field(default=300, gt=0)

class StorageConfig(BaseModel):
    state_dir: Path = Field(default=Path("data/state"))
    cache_dir: Path = Field(default=Path("data/cache"))

    @property
    def detail_dir(self) -> Path:
        return self.cache_dir / "details"

    @property
    def audio_dir(self) -> Path:
        return self.cache_dir / "audio"

class TranslationConfig(BaseModel):
    max_workers: int = Field(default=8, gt=0)

class Config(BaseModel):
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    speech: SpeechConfig = Field(default_factory=SpeechConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    log_level: str = Field(default="INFO")
    log_file: Optional[Path] = Field(default=None)

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: Path, include_secrets: bool = False):
        data = self.model_dump(mode="json")
        if not include_secrets:
            data["openai"].pop("api_key", None)
            data["speech"].pop("api_key", None)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True)
