"""Collect concrete provider adapters."""

from .gemini import GeminiConversationService, create_gemini_service

__all__ = [
    "GeminiConversationService",
    "create_gemini_service",
]
