"""Writer persona: story text in the target language, split into phrases."""

import threading
import time

from .base import BaseAgent
from .session import AssistantSession
from ..config import OpenAIConfig
from ..errors import SessionError
from ..settings import SettingsConfiguration

SYSTEM_TEMPLATE = """You are an expert story writer and an expert in writing in the {name} language.
You will generate short stories in {name} exclusively using {script} and using limited vocabulary that will be defined later. The stories must be written in the third-person limited narrative style and they must follow the plan provided to you by your story planning partner.

1. Phrase Format:
    - Purpose: segment the story into meaningful phrases.
    - Definition: A meaningful phrase is a group of words/characters that naturally belong together in both {name} and English. When segmenting the text into meaningful phrases, ensure that you keep grammatically dependent elements together. Do not separate particles, markers, or modifiers from the words they directly modify or are closely associated with. Each phrase should be a complete grammatical unit that can stand on its own while retaining its intended meaning within the context of the sentence. Try to keep phrases to less than 6 characters/words in length. Do not make each phrase an entire sentence, and do not make the entire story one run-on sentence without punctuation. Think of a phrase as a sentence fragment, and think about how you can construct sentences by piecing together multiple phrases.

2. You are an expert grammarian and you must take care to add punctuation when necessary at the end of phrases. For example commas should be added after introductory phrases, between items in a list, and to separate independent clauses joined by conjunctions. Use periods to end complete sentences, question marks for direct questions, and exclamation marks for emphasis. Do not add punctuation unless you are at least 80% sure it is correct to do so. Think carefully about whether a comma is grammatically correct before adding one."""

RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "phraseFormat",
        "schema": {
            "type": "object",
            "properties": {
                "phrases": {
                    "type": "array",
                    "items": {"type": "string"},
                },
            },
            "required": ["phrases"],
            "additionalProperties": False,
        },
        "strict": True,
    },
}

CONTINUE_PROMPT = (
    "Continue writing the next segment, ensuring consistency with the planner's story arc "
    "and previous chapters. Maintain tone, style, and plot, while addressing character "
    "development, pacing, and unresolved elements. If any planned details were missed, "
    "decide whether to include or drop them."
)


def build_instructions(settings: SettingsConfiguration) -> str:
    language = settings.selected_language
    return SYSTEM_TEMPLATE.format(name=language.name, script=language.script_name)


def build_first_chapter_prompt(settings: SettingsConfiguration) -> str:
    return (
        "Write the first chapter of the short story using vocabulary appropriate for "
        f"someone learning at CEFR level of {settings.language_level}"
    )


class StoryWriter(BaseAgent):
    def __init__(self, config: OpenAIConfig):
        super().__init__("StoryWriter", config)
        self.persona_id: str | None = None

    def create_persona(self, session: AssistantSession, settings: SettingsConfiguration) -> str:
        self.persona_id = session.create_persona(
            self.name, build_instructions(settings), response_format=RESPONSE_FORMAT
        )
        return self.persona_id

    def write_first_chapter(
        self,
        session: AssistantSession,
        settings: SettingsConfiguration,
        cancel: threading.Event | None = None,
    ) -> str:
        """Returns the raw ``{"phrases": [...]}`` JSON text of chapter one."""
        return self._write(session, build_first_chapter_prompt(settings), cancel)

    def continue_story(
        self,
        session: AssistantSession,
        cancel: threading.Event | None = None,
    ) -> str:
        # Prior chapters live on the thread, the prompt only asks for more
        return self._write(session, CONTINUE_PROMPT, cancel)

    def _write(self, session: AssistantSession, prompt: str, cancel: threading.Event | None) -> str:
        if self.persona_id is None:
            raise SessionError("Writer persona has not been created")
        start = time.time()
        result = session.post_message(prompt, self.persona_id, cancel)
        self._log("write", prompt, result, time.time() - start)
        return result
