"""Convert tools listed by an MCP server into canonical tool declarations."""

from typing import Iterable, List

from mcp.types import Tool as MCPTool

from ..logger import get_logger
from .models import ToolDeclaration

logger = get_logger(__name__)


def declarations_from_mcp(tools: Iterable[MCPTool]) -> List[ToolDeclaration]:
    """Builds canonical declarations from the result of ``ClientSession.list_tools()``.

    Args:
        tools: MCP tool descriptors.

    Returns:
        One declaration per tool, in listing order.
    """
    declarations = []
    for tool in tools:
        # Gemini rejects function declarations without a description.
        description = tool.description or f"Tool {tool.name} provided by MCP server."
        declarations.append(
            ToolDeclaration(name=tool.name, description=description, input_schema=dict(tool.inputSchema or {}))
        )
    logger.debug(f"Converted {len(declarations)} MCP tools into declarations.")
    return declarations
