from .base import AgentLog, BaseAgent
from .planner import StoryPlanner
from .session import AssistantSession
from .translator import PhraseTranslator, SentenceTranslation
from .writer import StoryWriter

__all__ = [
    "AgentLog",
    "AssistantSession",
    "BaseAgent",
    "PhraseTranslator",
    "SentenceTranslation",
    "StoryPlanner",
    "StoryWriter",
]
