"""Runtime settings for the conversation bridge."""

import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from .llm_core import DEFAULT_PROMPT_KEY, ConfigurationError

DEFAULT_GEMINI_MODEL = "gemini-2.5-pro"
DEFAULT_MAX_OUTPUT_TOKENS = 20000


class BridgeSettings(BaseModel):
    """
    Settings used to build a conversation adapter.

    Attributes:
        gemini_api_key: API key for the Gemini API.
        model_name: The Gemini model that answers the conversation.
        default_prompt_key: Prompt key used when a request names none or an unknown one.
        max_output_tokens: Upper bound on generated tokens per response.
        prompts_path: Optional JSON file overriding the bundled system prompts.
    """

    gemini_api_key: Optional[str] = Field(default=None, repr=False)
    model_name: str = DEFAULT_GEMINI_MODEL
    default_prompt_key: str = DEFAULT_PROMPT_KEY
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    prompts_path: Optional[str] = None

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "BridgeSettings":
        """
        Reads settings from environment variables, loading a ``.env`` file first.

        Raises:
            ConfigurationError: If ``MAX_OUTPUT_TOKENS`` is not an integer.
        """
        if load_env_file:
            env_file = find_dotenv(usecwd=True)
            if env_file:
                load_dotenv(env_file)

        raw_max_tokens = os.getenv("MAX_OUTPUT_TOKENS")
        try:
            max_tokens = int(raw_max_tokens) if raw_max_tokens else DEFAULT_MAX_OUTPUT_TOKENS
        except ValueError as e:
            raise ConfigurationError(f"MAX_OUTPUT_TOKENS must be an integer, got '{raw_max_tokens}'.") from e

        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            model_name=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
            default_prompt_key=os.getenv("DEFAULT_PROMPT_KEY") or DEFAULT_PROMPT_KEY,
            max_output_tokens=max_tokens,
            prompts_path=os.getenv("PROMPTS_PATH") or None,
        )
