"""Re-export the adapter interface and the request/callback models shared by all providers."""

from .base import ConversationService, ConversationRequest, StreamHandlers

__all__ = [
    "ConversationService",
    "ConversationRequest",
    "StreamHandlers",
]
