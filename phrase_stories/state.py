"""Observable application state shared with a single UI consumer."""

import queue
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List


class Phase(str, Enum):
    UNINITIALIZED = "uninitialized"
    SESSION_READY = "session_ready"
    GENERATING = "generating"
    TRANSLATING = "translating"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class StorySnapshot:
    phase: Phase = Phase.UNINITIALIZED
    initializing: bool = True
    is_loading: bool = False
    story_generated: bool = False
    settings_changed: bool = False
    diagnostic: str = ""
    story_arc: str = ""


Listener = Callable[[StorySnapshot], None]


class ImmediateDispatcher:
    """Applies updates on the calling thread."""

    def dispatch(self, fn: Callable[[], None]) -> None:
        fn()


class QueueDispatcher:
    """Queues updates until the designated consumer calls ``drain``."""

    def __init__(self):
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()

    def dispatch(self, fn: Callable[[], None]) -> None:
        self._queue.put(fn)

    def drain(self) -> int:
        applied = 0
        while True:
            try:
                fn = self._queue.get_nowait()
            except queue.Empty:
                return applied
            fn()
            applied += 1


class AppState:
    def __init__(self, dispatcher=None):
        self._dispatcher = dispatcher or ImmediateDispatcher()
        self._lock = threading.Lock()
        self._snapshot = StorySnapshot()
        self._listeners: List[Listener] = []

    @property
    def snapshot(self) -> StorySnapshot:
        return self._snapshot

    def update(self, **changes) -> None:
        def apply():
            with self._lock:
                self._snapshot = replace(self._snapshot, **changes)
                snapshot = self._snapshot
                listeners = list(self._listeners)
            for listener in listeners:
                listener(snapshot)

        self._dispatcher.dispatch(apply)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
