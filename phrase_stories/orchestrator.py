"""Story state machine: session setup, generate, continue and resume cycles."""

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from .agents import AssistantSession, PhraseTranslator, StoryPlanner, StoryWriter
from .config import Config
from .detail_cache import DetailCache, DisplayMode
from .engagement import EngagementTracker
from .errors import PersistenceError, SessionError, StoryError
from .models import PhraseBlock
from .phrase_store import PhraseStore
from .processing import TextSegmenter
from .settings import SettingsConfiguration
from .speech import AudioCache, SpeechSynthesizer
from .state import AppState, Phase
from .storage import PHRASES_KEY, SETTINGS_KEY, LocalStore
from .translation import TranslationCoordinator


class StoryOrchestrator:
    """
    Drives planner → writer → segmenter → translator → persistence.

    Only one cycle (session init, generate, continue, resume) runs at a time;
    a cycle requested while another is in flight is rejected. Failures are
    reported through ``state.snapshot.diagnostic`` and never discard the
    phrases already on display.
    """

    def __init__(
        self,
        config: Config,
        *,
        client=None,
        speech_client=None,
        dispatcher=None,
    ):
        self.config = config
        self.store = LocalStore(config.storage.state_dir)

        self.session = AssistantSession(config.openai, config.polling, self.store, client=client)
        self.planner = StoryPlanner(config.openai)
        self.writer = StoryWriter(config.openai)
        self.translator = PhraseTranslator(config.openai, client=client)

        self.segmenter = TextSegmenter()
        self.phrases = PhraseStore(self.store)
        self.coordinator = TranslationCoordinator(self.translator, config.translation.max_workers)
        self.engagement = EngagementTracker(self.store)
        self.details = DetailCache(config.storage.detail_dir)
        self.speech = SpeechSynthesizer(config.speech, client=speech_client)
        self.audio = AudioCache(config.storage.audio_dir)
        self.state = AppState(dispatcher)

        self.settings = SettingsConfiguration()
        self._settings_changed = False
        self._cycle_lock = threading.Lock()
        self._cancel = threading.Event()

        self.load_settings()
        self.engagement.restore()

    @property
    def all_agents(self) -> list:
        return [self.planner, self.writer, self.translator]

    @property
    def all_logs(self) -> list:
        logs = []
        for agent in self.all_agents:
            logs.extend(agent.logs)
        return logs

    @property
    def settings_changed(self) -> bool:
        """Personas still reflect older settings; ``state`` only mirrors this for display."""
        return self._settings_changed

    # -- settings -----------------------------------------------------------

    def load_settings(self) -> bool:
        try:
            data = self.store.load(SETTINGS_KEY)
            if data is None:
                return False
            self.settings = SettingsConfiguration.from_dict(data)
        except (PersistenceError, ValidationError, TypeError) as e:
            logger.warning(f"Ignoring saved settings: {e}")
            return False
        return True

    def save_settings(self, settings: SettingsConfiguration) -> None:
        """Persist new settings; personas are rebuilt before the next generation."""
        changed = settings != self.settings
        self.settings = settings
        self.store.save(SETTINGS_KEY, settings.to_dict())
        if changed:
            self._settings_changed = True
            self.state.update(settings_changed=True)
            logger.info("Settings changed, session will be recreated before the next story")

    # -- cycles -------------------------------------------------------------

    @contextmanager
    def _cycle(self, name: str):
        if not self._cycle_lock.acquire(blocking=False):
            logger.warning(f"Ignoring {name}: another story cycle is running")
            yield False
            return
        self._cancel.clear()
        try:
            yield True
        finally:
            self._cycle_lock.release()

    def cancel(self) -> None:
        """Abort remote polling and unstarted translations of the running cycle."""
        self._cancel.set()

    def _fail(self, message: str, **changes) -> None:
        logger.error(message)
        self.state.update(
            phase=Phase.ERROR,
            is_loading=False,
            story_generated=False,
            diagnostic=message,
            **changes,
        )

    def _personas_ready(self) -> bool:
        return self.planner.persona_id is not None and self.writer.persona_id is not None

    def initialize_session(self, overwrite_thread: bool = False) -> bool:
        with self._cycle("initialize_session") as acquired:
            if not acquired:
                return False
            return self._initialize_session(overwrite_thread)

    def _initialize_session(self, overwrite_thread: bool) -> bool:
        self.state.update(initializing=True)
        try:
            self.planner.create_persona(self.session)
            self.writer.create_persona(self.session, self.settings)
        except StoryError as e:
            self._fail(f"Error initializing assistant or thread: {e}", initializing=False)
            return False

        self._settings_changed = False
        changes = {"phase": Phase.SESSION_READY, "initializing": False, "settings_changed": False}
        if not overwrite_thread and self.session.load_thread():
            # A saved thread means a story was already generated
            changes["story_generated"] = True
        self.state.update(**changes)
        logger.info("Story session ready")
        return True

    def generate(self) -> bool:
        """Plan and write a new story, replacing the current one on success."""
        with self._cycle("generate") as acquired:
            if not acquired:
                return False
            if self._settings_changed or not self._personas_ready():
                if not self._initialize_session(overwrite_thread=True):
                    return False

            self.state.update(diagnostic="", is_loading=True, story_generated=False, phase=Phase.GENERATING)
            previous_thread = self.session.thread_id
            try:
                self.engagement.commit_pending(decay=False)
                self.audio.clear()
                self.session.create_thread()
                arc = self.planner.plan_arc(self.session, self.settings, self._cancel)
                self.state.update(story_arc=arc)
                raw = self.writer.write_first_chapter(self.session, self.settings, self._cancel)
                return self._process_chapter(raw, start_index=0)
            except StoryError as e:
                self.session.thread_id = previous_thread
                self._fail(f"Unexpected error: {e}")
                return False

    def continue_story(self) -> bool:
        """Write the next chapter on the same thread; it replaces the displayed chapter."""
        with self._cycle("continue_story") as acquired:
            if not acquired:
                return False
            if not self._personas_ready():
                if not self._initialize_session(overwrite_thread=False):
                    return False
            if self.phrases.is_empty:
                self.phrases.restore()

            self.state.update(diagnostic="", is_loading=True, phase=Phase.GENERATING)
            try:
                if not self.session.thread_id:
                    raise SessionError("No story to continue, generate one first")
                self.engagement.commit_pending(decay=True)
                self.audio.clear()
                raw = self.writer.continue_story(self.session, self._cancel)
                return self._process_chapter(raw, start_index=self.phrases.next_index)
            except StoryError as e:
                self._fail(f"Unexpected error: {e}")
                return False

    def resume_story(self) -> bool:
        """
        Bring back the last story after a restart.

        Tries memory, then the saved snapshot, then the newest message on the
        saved thread. The last path re-segments the text but does not
        translate it.
        """
        with self._cycle("resume_story") as acquired:
            if not acquired:
                return False
            if not self.phrases.is_empty:
                return True
            if self.phrases.restore() is not None:
                self.state.update(story_generated=True, phase=Phase.READY)
                return True

            self.state.update(is_loading=True, phase=Phase.GENERATING)
            try:
                if not self.session.thread_id and not self.session.load_thread():
                    raise SessionError("No saved story to resume")
                raw = self.session.latest_message()
                blocks = self.segmenter.segment_response(raw)
                self.phrases.replace_all(blocks)
                self.phrases.persist()
            except StoryError as e:
                self._fail(f"Unexpected error: {e}")
                return False

            # TODO: translate recovered phrases once resume can reuse the translation pass
            logger.warning(f"Recovered {len(blocks)} phrases from the thread without translations")
            self.state.update(is_loading=False, story_generated=True, phase=Phase.READY)
            return True

    def _process_chapter(self, raw: str, start_index: int) -> bool:
        blocks = self.segmenter.segment_response(raw, start_index=start_index)

        # The displayed chapter and both saved records only change once the new one is stored
        staged = PhraseStore(self.store)
        staged.replace_all(blocks)
        self.state.update(phase=Phase.TRANSLATING)
        report = self.coordinator.translate_all(staged, self.settings.selected_language, self._cancel)

        staged.persist()
        try:
            self.session.save_thread()
        except PersistenceError:
            if self.phrases.is_empty:
                self.store.delete(PHRASES_KEY)
            else:
                self.phrases.persist()
            raise
        self.phrases.replace_all(staged.blocks)

        self.state.update(
            phase=Phase.READY,
            is_loading=False,
            story_generated=True,
            diagnostic=report.diagnostic,
        )
        logger.success(f"Story ready: {len(blocks)} phrases, {self.phrases.sentence_count} sentences")
        return True

    # -- phrase interaction -------------------------------------------------

    def select_phrase(self, phrase: PhraseBlock) -> PhraseBlock:
        """Record a click on ``phrase`` and return its sentence view."""
        self.engagement.record_click(phrase)
        return self.phrases.build_sentence_view(phrase)

    def sentence_view(self, phrase: PhraseBlock) -> PhraseBlock:
        return self.phrases.build_sentence_view(phrase)

    def detailed_translation(self, phrase: PhraseBlock, mode: DisplayMode = DisplayMode.PHRASE) -> str:
        mode = DisplayMode(mode)
        view = self.phrases.build_sentence_view(phrase)
        if mode is DisplayMode.PHRASE:
            text, context = phrase.language, view.language
        else:
            text = context = view.language

        def fetch() -> str:
            return self.translator.detailed_translation(
                text, context, self.settings.selected_language, self.settings.language_level
            )

        try:
            return self.details.get_or_fetch(text, context, mode, fetch)
        except StoryError as e:
            self.state.update(diagnostic=f"Error fetching detailed translation: {e}")
            raise

    def audio_for(self, phrase: PhraseBlock, mode: DisplayMode = DisplayMode.PHRASE) -> Path:
        mode = DisplayMode(mode)
        if mode is DisplayMode.PHRASE:
            name, text = f"phrase-{phrase.index}", phrase.language
        else:
            name = f"sentence-{phrase.parent_sentence}"
            text = self.phrases.sentence_text(phrase.parent_sentence)
        return self.audio.get_or_create(name, text, self.speech.synthesize)

    def difficult_characters(self) -> List[str]:
        return self.engagement.top_characters()

    def reset_clicks(self) -> None:
        self.engagement.reset()

    def phrase(self, index: int) -> Optional[PhraseBlock]:
        return self.phrases.get(index)
