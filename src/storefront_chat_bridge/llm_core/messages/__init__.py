"""Expose the canonical message models shared by the translators and the stream emulator."""

from .models import (
    StopReason,
    TextBlock,
    OpaqueBlock,
    ToolResultBlock,
    ToolUseBlock,
    ContentBlock,
    ToolCall,
    ConversationTurn,
    AssistantMessage,
)
from .payloads import parse_structured, dump_structured

__all__ = [
    "StopReason",
    "TextBlock",
    "OpaqueBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    "ContentBlock",
    "ToolCall",
    "ConversationTurn",
    "AssistantMessage",
    "parse_structured",
    "dump_structured",
]
