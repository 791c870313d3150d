"""Build canonical assistant messages from Gemini responses."""

from typing import Any, Dict, List, Optional, Sequence

from google.genai import types

from storefront_chat_bridge.llm_core import AssistantMessage, StopReason, TextBlock, ToolUseBlock

_FINISH_REASONS: Dict[str, StopReason] = {
    "STOP": "end_turn",
    "TOOL_USE": "tool_use",
    "MAX_TOKENS": "max_tokens",
}


def map_finish_reason(reason: Any) -> StopReason:
    """Maps a Gemini finish reason to the canonical stop reason.

    Unknown or missing reasons map to ``end_turn``.
    """
    if reason is None:
        return "end_turn"
    key = getattr(reason, "value", reason)
    return _FINISH_REASONS.get(str(key).upper(), "end_turn")


def tool_use_block(call: types.FunctionCall) -> ToolUseBlock:
    # No invocation ids on this path: the function name doubles as the id.
    name = call.name or ""
    return ToolUseBlock(id=name, name=name, input=call.args or {})


def build_assistant_message(
    text: str,
    function_calls: Sequence[types.FunctionCall],
    finish_reason: Any,
    model: Optional[str] = None,
) -> AssistantMessage:
    """
    Constructs the final canonical message for one response.

    A message holds either tool-use blocks or a single text block, never both:
    when the response requested tools, streamed text is dropped.

    Args:
        text: All streamed text, concatenated in arrival order.
        function_calls: Function calls of the response, in response order.
        finish_reason: Gemini's finish reason of the terminal candidate.
        model: The model that produced the response.

    Returns:
        The canonical assistant message.
    """
    content: List[Any]
    if function_calls:
        content = [tool_use_block(call) for call in function_calls]
    else:
        content = [TextBlock(text=text)]
    return AssistantMessage(content=content, model=model, stop_reason=map_finish_reason(finish_reason))
