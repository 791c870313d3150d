"""System prompt lookup."""

from .catalog import PromptCatalog, DEFAULT_PROMPT_KEY

__all__ = ["PromptCatalog", "DEFAULT_PROMPT_KEY"]
