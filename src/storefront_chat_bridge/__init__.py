"""Storefront chat bridge - drive Gemini from a Claude-format chat handler."""

from .config import BridgeSettings
from .llm_core import (
    ConversationService,
    ConversationRequest,
    StreamHandlers,
    ConversationTurn,
    AssistantMessage,
    ToolDeclaration,
    ToolUseBlock,
    PromptCatalog,
)
from .llm_impl.gemini import GeminiConversationService, create_gemini_service

__all__ = [
    "BridgeSettings",
    "ConversationService",
    "ConversationRequest",
    "StreamHandlers",
    "ConversationTurn",
    "AssistantMessage",
    "ToolDeclaration",
    "ToolUseBlock",
    "PromptCatalog",
    "GeminiConversationService",
    "create_gemini_service",
]
