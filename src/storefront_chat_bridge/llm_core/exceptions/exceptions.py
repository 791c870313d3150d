"""
Custom exception classes for the conversation bridge.

This module defines the hierarchy of exceptions raised while building the
adapter, translating history and tool schemas, and consuming a Gemini stream.
All of them propagate to the orchestration layer; the bridge never retries.
"""


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    pass


class ConfigurationError(BridgeError):
    """Raised when a required credential or setting is missing at construction time."""

    pass


class TransportCompatibilityError(BridgeError):
    """Raised when the provider stream has an incompatible shape.

    The message is meant to be shown to the end user as-is.
    """

    USER_MESSAGE = (
        "Streaming is temporarily unavailable due to a stream compatibility issue. "
        "Please try again or contact support if the issue persists."
    )

    def __init__(self, message: str = USER_MESSAGE):
        super().__init__(message)


class ParseError(BridgeError):
    """Raised when a tool result payload is not valid structured data."""

    def __init__(self, message: str, payload: str | None = None):
        super().__init__(message)
        self.payload = payload


class MissingCandidateError(BridgeError):
    """Raised when the aggregated Gemini response carries no candidate."""

    pass


class SchemaError(BridgeError):
    """Raised when a tool parameter schema cannot be normalized."""

    pass


class PromptNotFoundError(BridgeError):
    """Raised when neither the requested nor the default system prompt exists."""

    pass
