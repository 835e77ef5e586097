"""Text-to-speech synthesis and the on-disk audio cache."""

from pathlib import Path
from typing import Callable

import httpx
from loguru import logger

from .config import SpeechConfig
from .errors import RemoteCallError


class SpeechSynthesizer:
    """ElevenLabs text-to-speech; returns the whole mp3 in one response."""

    def __init__(self, config: SpeechConfig, client: httpx.Client | None = None):
        self.config = config
        self._client = client

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.config.timeout)
        return self._client

    def synthesize(self, text: str) -> bytes:
        cfg = self.config
        try:
            resp = self.client.post(
                f"{cfg.base_url}/text-to-speech/{cfg.voice_id}",
                params={"output_format": cfg.output_format},
                headers={"xi-api-key": cfg.api_key, "Content-Type": "application/json"},
                json={
                    "text": text,
                    "model_id": cfg.model_id,
                    "voice_settings": {
                        "stability": cfg.stability,
                        "similarity_boost": cfg.similarity_boost,
                        "style": cfg.style,
                    },
                },
            )
        except httpx.HTTPError as e:
            raise RemoteCallError(f"Speech request failed: {e}") from e

        if resp.status_code != 200:
            raise RemoteCallError(f"Speech request returned HTTP {resp.status_code}")
        logger.debug(f"Synthesized {len(resp.content)} bytes of audio")
        return resp.content


class AudioCache:
    """One mp3 per name; cleared at the start of every generation cycle."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.mp3"

    def get_or_create(self, name: str, text: str, synthesize: Callable[[str], bytes]) -> Path:
        path = self.path_for(name)
        if path.exists():
            return path
        audio = synthesize(text)
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(audio)
        return path

    def clear(self) -> int:
        if not self.directory.exists():
            return 0
        removed = 0
        for path in self.directory.glob("*.mp3"):
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Error deleting {path.name}: {e}")
        logger.debug(f"Deleted {removed} cached audio files")
        return removed
