from .models import ToolDeclaration
from .mcp import declarations_from_mcp

__all__ = ["ToolDeclaration", "declarations_from_mcp"]
