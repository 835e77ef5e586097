"""Base agent with OpenAI client access and a call log."""

import json
import time
from dataclasses import dataclass

from loguru import logger

from ..config import OpenAIConfig
from ..errors import RemoteCallError, SchemaMismatchError


@dataclass
class AgentLog:
    agent_name: str = ""
    action: str = ""
    prompt_preview: str = ""
    response_preview: str = ""
    elapsed_seconds: float = 0.0


def build_client(config: OpenAIConfig):
    from openai import OpenAI

    return OpenAI(
        api_key=config.api_key or None,
        base_url=config.base_url,
        timeout=config.timeout,
    )


class BaseAgent:
    """Base class for agents talking to the generative-text service."""

    def __init__(self, name: str, config: OpenAIConfig, client=None):
        self.name = name
        self.config = config
        self._client = client
        self.logs: list[AgentLog] = []

    @property
    def client(self):
        if self._client is None:
            self._client = build_client(self.config)
        return self._client

    def call_chat(
        self,
        system: str,
        prompt: str,
        response_format: dict | None = None,
    ) -> str:
        """One-shot chat completion without a persistent thread."""
        from openai import OpenAIError

        start = time.time()
        kwargs = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }
        if response_format is not None:
            kwargs["response_format"] = response_format

        try:
            response = self.client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            raise RemoteCallError(f"{self.name}: chat completion failed: {e}") from e

        try:
            result = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise RemoteCallError(f"{self.name}: response has no message content") from e
        if result is None:
            raise RemoteCallError(f"{self.name}: response has no message content")

        self._log("call_chat", prompt, result, time.time() - start)
        return result

    def call_chat_json(
        self,
        system: str,
        prompt: str,
        response_format: dict,
        required: tuple[str, ...] = (),
    ) -> dict:
        """Call with a JSON schema response format and check required keys."""
        raw = self.call_chat(system, prompt, response_format=response_format)
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RemoteCallError(f"{self.name}: malformed JSON in response") from e
        if not isinstance(data, dict):
            raise SchemaMismatchError(f"{self.name}: expected a JSON object")
        missing = [key for key in required if key not in data]
        if missing:
            raise SchemaMismatchError(
                f"{self.name}: missing keys in response: {', '.join(missing)}"
            )
        return data

    def _log(
        self, action: str, prompt: str, response: str, elapsed: float
    ) -> None:
        entry = AgentLog(
            agent_name=self.name,
            action=action,
            prompt_preview=prompt[:200],
            response_preview=response[:200] if response else "",
            elapsed_seconds=round(elapsed, 2),
        )
        self.logs.append(entry)
        logger.debug(f"{self.name}.{action} took {entry.elapsed_seconds}s")
