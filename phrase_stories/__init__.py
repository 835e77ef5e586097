"""Graded-reader stories in Chinese or Japanese, split into translated phrase blocks."""

from .config import Config
from .models import ClickData, PhraseBlock
from .orchestrator import StoryOrchestrator
from .settings import SettingsConfiguration

__version__ = "0.1.0"

__all__ = [
    "ClickData",
    "Config",
    "PhraseBlock",
    "SettingsConfiguration",
    "StoryOrchestrator",
]
