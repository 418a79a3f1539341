"""Core intent, safety and budget logic."""

from .classifier import classify
from .safety import is_dangerous
from .types import ExecuteIntent, ExplainIntent, IntentError, SmartResponse

__all__ = [
    "ExecuteIntent",
    "ExplainIntent",
    "IntentError",
    "SmartResponse",
    "classify",
    "is_dangerous",
]
