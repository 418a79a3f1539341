"""Gemini service client."""

from .client import GeminiClient, GeminiResponse
from .stream import StreamAccumulator, StreamResult

__all__ = ["GeminiClient", "GeminiResponse", "StreamAccumulator", "StreamResult"]
