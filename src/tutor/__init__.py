"""TerminalTutor - a CLI tutor that lives in your shell."""

from .core import ExecuteIntent, ExplainIntent, IntentError, SmartResponse, classify, is_dangerous
from .gemini import GeminiClient, GeminiResponse
from .session import SessionStore, Turn

__version__ = "0.1.0"

__all__ = [
    "ExecuteIntent",
    "ExplainIntent",
    "GeminiClient",
    "GeminiResponse",
    "IntentError",
    "SessionStore",
    "SmartResponse",
    "Turn",
    "classify",
    "is_dangerous",
]
