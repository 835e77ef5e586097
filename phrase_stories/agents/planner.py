"""Story planner persona: drafts a short concept and a five-part arc."""

import threading
import time

from .base import BaseAgent
from .session import AssistantSession
from ..config import OpenAIConfig
from ..settings import SettingsConfiguration

SYSTEM = """You are an expert in writing, publishing, and editing, with a special talent for crafting unique and engaging short story arcs. Your task is to write a concise (maximum three sentences) concept for a short story that can inspire another writer. Then, briefly outline what happens in each of five parts (max two sentences per part), with the final part concluding the story.
Each time, before you begin writing, you always think of a list of random nouns, verbs, and adjectives as inspiration for your story. This helps you keep your stories fresh and unique. There is no need to write these random words down."""


def build_arc_prompt(settings: SettingsConfiguration) -> str:
    prompt = (
        "The reader is learning a new language and can read at CEFR level of "
        f"{settings.language_level}, so keep your planned story accordingly complex. "
        "Write a story arc for a short story"
    )
    if settings.selected_genres:
        prompt += f" in the genres of {', '.join(settings.selected_genres)}"
    if settings.selected_tone:
        prompt += f" with a {settings.selected_tone} tone"
    if settings.selected_conflict:
        prompt += f" involving {settings.selected_conflict} conflict"
    if settings.selected_time_period:
        prompt += f" based in the {settings.selected_time_period} time period"
    if settings.custom_request:
        prompt += f". Custom requests: {settings.custom_request}"
    return prompt


class StoryPlanner(BaseAgent):
    def __init__(self, config: OpenAIConfig):
        super().__init__("StoryPlanner", config)
        self.persona_id: str | None = None

    def create_persona(self, session: AssistantSession) -> str:
        self.persona_id = session.create_persona(self.name, SYSTEM)
        return self.persona_id

    def plan_arc(
        self,
        session: AssistantSession,
        settings: SettingsConfiguration,
        cancel: threading.Event | None = None,
    ) -> str:
        """Ask the planner for the story arc on the session's current thread."""
        if self.persona_id is None:
            self.create_persona(session)
        prompt = build_arc_prompt(settings)
        start = time.time()
        arc = session.post_message(prompt, self.persona_id, cancel)
        self._log("plan_arc", prompt, arc, time.time() - start)
        return arc
