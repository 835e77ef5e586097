"""Persistent conversation session: personas, one thread, runs and polling."""

import threading
import time
from typing import Optional

from loguru import logger

from ..config import OpenAIConfig, PollingConfig
from ..errors import (
    OperationCancelled,
    PersistenceError,
    PollTimeoutError,
    RemoteCallError,
    SessionError,
)
from ..storage import THREAD_KEY, LocalStore
from .base import build_client

FAILED_RUN_STATES = {"failed", "cancelled", "expired", "incomplete"}


class AssistantSession:
    """
    Server-side conversation context shared by the planner and writer personas.

    The thread id is the only handle that survives restarts; personas are
    recreated whenever the session is (re)initialized.
    """

    def __init__(
        self,
        config: OpenAIConfig,
        polling: PollingConfig | None = None,
        store: LocalStore | None = None,
        client=None,
    ):
        self.config = config
        self.polling = polling or PollingConfig()
        self.store = store
        self._client = client
        self.thread_id: Optional[str] = None

    @property
    def client(self):
        if self._client is None:
            self._client = build_client(self.config)
        return self._client

    def create_persona(self, name: str, instructions: str, response_format: dict | None = None) -> str:
        from openai import OpenAIError

        kwargs = {
            "name": name,
            "instructions": instructions,
            "model": self.config.model,
        }
        if response_format is not None:
            kwargs["response_format"] = response_format
        try:
            assistant = self.client.beta.assistants.create(**kwargs)
        except OpenAIError as e:
            raise SessionError(f"Error creating persona '{name}': {e}") from e
        logger.debug(f"Created persona {name}: {assistant.id}")
        return assistant.id

    def create_thread(self) -> str:
        """Start a new thread, replacing the current one in memory only."""
        from openai import OpenAIError

        try:
            thread = self.client.beta.threads.create()
        except OpenAIError as e:
            raise SessionError(f"Error creating thread: {e}") from e
        self.thread_id = thread.id
        logger.debug(f"Created thread {thread.id}")
        return thread.id

    def save_thread(self) -> None:
        if self.store is not None and self.thread_id:
            self.store.save(THREAD_KEY, self.thread_id)

    def load_thread(self) -> bool:
        if self.store is None:
            return False
        try:
            thread_id = self.store.load(THREAD_KEY)
        except PersistenceError as e:
            logger.warning(f"Ignoring saved thread id: {e}")
            return False
        if not isinstance(thread_id, str) or not thread_id:
            logger.info("No thread ID found")
            return False
        self.thread_id = thread_id
        return True

    def _require_thread(self) -> str:
        if not self.thread_id:
            raise SessionError("No conversation thread available")
        return self.thread_id

    def post_message(
        self,
        prompt: str,
        assistant_id: str,
        cancel: threading.Event | None = None,
    ) -> str:
        """Add a user message, run ``assistant_id`` on the thread and return its reply."""
        from openai import OpenAIError

        thread_id = self._require_thread()
        try:
            self.client.beta.threads.messages.create(thread_id=thread_id, role="user", content=prompt)
            run = self.client.beta.threads.runs.create(thread_id=thread_id, assistant_id=assistant_id)
        except OpenAIError as e:
            raise RemoteCallError(f"Error starting run: {e}") from e

        self.wait_for_run(run.id, cancel)
        return self.latest_message()

    def wait_for_run(self, run_id: str, cancel: threading.Event | None = None) -> None:
        """
        Poll the run on a fixed interval until it completes.

        Raises:
            OperationCancelled: ``cancel`` was set while waiting
            PollTimeoutError: still running after ``max_attempts`` polls
            RemoteCallError: the run ended in a failed state
        """
        from openai import OpenAIError

        thread_id = self._require_thread()
        cancel = cancel or threading.Event()
        interval = self.polling.interval_seconds
        started = time.time()

        for attempt in range(1, self.polling.max_attempts + 1):
            if cancel.wait(interval):
                raise OperationCancelled(f"Cancelled while waiting for run {run_id}")
            try:
                run = self.client.beta.threads.runs.retrieve(run_id, thread_id=thread_id)
            except OpenAIError as e:
                raise RemoteCallError(f"Error polling run {run_id}: {e}") from e

            if run.status == "completed":
                logger.debug(f"Run {run_id} completed after {attempt} polls ({time.time() - started:.1f}s)")
                return
            if run.status in FAILED_RUN_STATES:
                raise RemoteCallError(f"Run {run_id} ended with status '{run.status}'")

        raise PollTimeoutError(
            f"Run {run_id} did not complete after {self.polling.max_attempts} polls"
        )

    def latest_message(self) -> str:
        """Text of the newest message on the thread."""
        from openai import OpenAIError

        thread_id = self._require_thread()
        try:
            page = self.client.beta.threads.messages.list(thread_id=thread_id, order="desc", limit=1)
        except OpenAIError as e:
            raise RemoteCallError(f"Error fetching latest message: {e}") from e

        try:
            return page.data[0].content[0].text.value
        except (AttributeError, IndexError) as e:
            raise RemoteCallError("Latest message has no text content") from e
