"""Canonical tool declaration model."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ToolDeclaration(BaseModel):
    """A tool the assistant may call, declared in the canonical format.

    Attributes:
        name: The tool name the model uses when invoking it.
        description: Free-text description shown to the model.
        input_schema: JSON schema of the tool's arguments.
    """

    name: str
    description: str = ""
    input_schema: Optional[Dict[str, Any]] = Field(default=None)
