"""Shared fixtures: an in-memory stand-in for the OpenAI client and temp config."""

import itertools
import json
from types import SimpleNamespace

import pytest

from phrase_stories.config import Config, OpenAIConfig, PollingConfig, StorageConfig


def translate_lines(system, user, response_format):
    """Default chat handler: deterministic per-phrase translations."""
    if response_format is None:
        return f"DETAIL for {user}"
    lines = user.split("\n")
    return json.dumps({
        "romanizedPhrases": [f"r-{line}" for line in lines],
        "englishPhrases": [f"e-{line}" for line in lines],
        "englishSentence": "S: " + " ".join(lines),
    }, ensure_ascii=False)


class FakeOpenAI:
    """
    Just enough of ``openai.OpenAI`` for assistants, threads, runs and chat.

    Each run consumes the next entry of ``replies``; the reply becomes the
    newest thread message once the run completes. Runs report
    ``in_progress`` for ``polls_before_complete`` polls first.
    """

    def __init__(self, replies=None, chat_handler=translate_lines):
        self.replies = list(replies or [])
        self.chat_handler = chat_handler
        self.polls_before_complete = 1
        self.final_status = "completed"

        self.assistants = []
        self.threads = []
        self.messages = []
        self.chat_calls = []
        self.latest = {}
        self._runs = {}
        self._ids = itertools.count(1)

        self.beta = SimpleNamespace(
            assistants=SimpleNamespace(create=self._create_assistant),
            threads=SimpleNamespace(
                create=self._create_thread,
                messages=SimpleNamespace(create=self._create_message, list=self._list_messages),
                runs=SimpleNamespace(create=self._create_run, retrieve=self._retrieve_run),
            ),
        )
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._chat))

    def _create_assistant(self, **kwargs):
        self.assistants.append(kwargs)
        return SimpleNamespace(id=f"asst_{next(self._ids)}")

    def _create_thread(self):
        thread_id = f"thread_{next(self._ids)}"
        self.threads.append(thread_id)
        return SimpleNamespace(id=thread_id)

    def _create_message(self, thread_id, role, content):
        self.messages.append((thread_id, role, content))
        return SimpleNamespace(id=f"msg_{next(self._ids)}")

    def _create_run(self, thread_id, assistant_id):
        run_id = f"run_{next(self._ids)}"
        reply = self.replies.pop(0) if self.replies else ""
        self._runs[run_id] = {"thread_id": thread_id, "polls": self.polls_before_complete, "reply": reply}
        return SimpleNamespace(id=run_id, status="queued")

    def _retrieve_run(self, run_id, thread_id):
        run = self._runs[run_id]
        if run["polls"] > 0:
            run["polls"] -= 1
            return SimpleNamespace(id=run_id, status="in_progress")
        if self.final_status == "completed":
            self.latest[thread_id] = run["reply"]
        return SimpleNamespace(id=run_id, status=self.final_status)

    def _list_messages(self, thread_id, order, limit):
        text = self.latest.get(thread_id)
        if text is None:
            return SimpleNamespace(data=[])
        content = [SimpleNamespace(text=SimpleNamespace(value=text))]
        return SimpleNamespace(data=[SimpleNamespace(content=content)])

    def _chat(self, model, messages, response_format=None):
        system, user = messages[0]["content"], messages[1]["content"]
        self.chat_calls.append({"system": system, "user": user, "response_format": response_format})
        content = self.chat_handler(system, user, response_format)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def phrases_json(*phrases):
    return json.dumps({"phrases": list(phrases)}, ensure_ascii=False)


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def sample_config(tmp_path):
    return Config(
        openai=OpenAIConfig(api_key="test-key"),
        polling=PollingConfig(interval_seconds=0.001, max_attempts=5),
        storage=StorageConfig(state_dir=tmp_path / "state", cache_dir=tmp_path / "cache"),
        log_level="DEBUG",
    )
