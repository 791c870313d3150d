"""Public exports for the canonical conversation model and shared utilities."""

from .base import ConversationService, ConversationRequest, StreamHandlers
from .exceptions import (
    BridgeError,
    ConfigurationError,
    TransportCompatibilityError,
    ParseError,
    MissingCandidateError,
    SchemaError,
    PromptNotFoundError,
)
from .logger import get_logger, setup_logging
from .messages import (
    StopReason,
    TextBlock,
    OpaqueBlock,
    ToolResultBlock,
    ToolUseBlock,
    ContentBlock,
    ToolCall,
    ConversationTurn,
    AssistantMessage,
    parse_structured,
    dump_structured,
)
from .prompts import PromptCatalog, DEFAULT_PROMPT_KEY
from .tools import ToolDeclaration, declarations_from_mcp

__all__ = [
    "ConversationService",
    "ConversationRequest",
    "StreamHandlers",
    "BridgeError",
    "ConfigurationError",
    "TransportCompatibilityError",
    "ParseError",
    "MissingCandidateError",
    "SchemaError",
    "PromptNotFoundError",
    "get_logger",
    "setup_logging",
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
    "PromptCatalog",
    "DEFAULT_PROMPT_KEY",
    "ToolDeclaration",
    "declarations_from_mcp",
]
