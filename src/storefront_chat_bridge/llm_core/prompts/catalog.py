"""System prompt catalog keyed by prompt type."""

import json
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import ConfigurationError, PromptNotFoundError
from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_PROMPT_KEY = "standardAssistant"


class PromptCatalog:
    """
    Resolves a prompt key to the system instruction sent to the provider.

    Unknown keys fall back to the catalog's default key, so a stale key stored
    with a chat session still yields a usable prompt.
    """

    def __init__(self, prompts: Mapping[str, str], default_key: str = DEFAULT_PROMPT_KEY):
        self._prompts: Dict[str, str] = dict(prompts)
        self.default_key = default_key

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default_key: str = DEFAULT_PROMPT_KEY) -> "PromptCatalog":
        """Builds a catalog from the ``{"systemPrompts": {key: {"content": ...}}}`` document shape.

        Raises:
            ConfigurationError: If the document does not have the expected shape.
        """
        entries = data.get("systemPrompts")
        if not isinstance(entries, Mapping):
            raise ConfigurationError("Prompt document must contain a 'systemPrompts' object.")

        prompts = {}
        for key, entry in entries.items():
            content = entry.get("content") if isinstance(entry, Mapping) else None
            if not isinstance(content, str):
                raise ConfigurationError(f"System prompt '{key}' has no text 'content'.")
            prompts[key] = content
        return cls(prompts, default_key=default_key)

    @classmethod
    def from_file(cls, path: Union[str, Path], default_key: str = DEFAULT_PROMPT_KEY) -> "PromptCatalog":
        """Loads a catalog from a JSON file."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            msg = f"Could not load system prompts from '{path}': {e}"
            logger.error(msg)
            raise ConfigurationError(msg) from e
        return cls.from_mapping(data, default_key=default_key)

    @classmethod
    def bundled(cls, default_key: str = DEFAULT_PROMPT_KEY) -> "PromptCatalog":
        """Loads the prompts shipped with the package."""
        text = resources.files(__package__).joinpath("prompts.json").read_text(encoding="utf-8")
        return cls.from_mapping(json.loads(text), default_key=default_key)

    def keys(self) -> list[str]:
        return list(self._prompts)

    def get(self, key: Optional[str] = None) -> str:
        """Returns the system prompt for ``key``, falling back to the default key.

        Raises:
            PromptNotFoundError: If neither ``key`` nor the default key is known.
        """
        if key and key in self._prompts:
            return self._prompts[key]
        if key:
            logger.debug(f"Unknown prompt key '{key}', using '{self.default_key}'.")
        try:
            return self._prompts[self.default_key]
        except KeyError:
            msg = f"No system prompt for '{key}' and default prompt '{self.default_key}' is missing."
            logger.error(msg)
            raise PromptNotFoundError(msg) from None
