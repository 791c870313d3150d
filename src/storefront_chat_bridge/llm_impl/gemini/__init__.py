"""Gemini conversation adapter."""

from .core import GeminiConversationService, create_gemini_service
from .history import history_to_contents, contents_to_history
from .schema_sanitizer import normalize_tools, sanitize
from .stream import StreamEmulator, StreamState
from .response import build_assistant_message, map_finish_reason

__all__ = [
    "GeminiConversationService",
    "create_gemini_service",
    "history_to_contents",
    "contents_to_history",
    "normalize_tools",
    "sanitize",
    "StreamEmulator",
    "StreamState",
    "build_assistant_message",
    "map_finish_reason",
]
