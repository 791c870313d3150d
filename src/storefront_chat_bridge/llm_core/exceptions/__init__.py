"""Export the bridge exception hierarchy used across translation and streaming paths."""

from .exceptions import (
    BridgeError,
    ConfigurationError,
    TransportCompatibilityError,
    ParseError,
    MissingCandidateError,
    SchemaError,
    PromptNotFoundError,
)

__all__ = [
    "BridgeError",
    "ConfigurationError",
    "TransportCompatibilityError",
    "ParseError",
    "MissingCandidateError",
    "SchemaError",
    "PromptNotFoundError",
]
