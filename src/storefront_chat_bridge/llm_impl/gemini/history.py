"""Translate canonical conversation history into Gemini contents and back."""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from google.genai import types
from pydantic import JsonValue

from storefront_chat_bridge.llm_core import (
    ConversationTurn,
    TextBlock,
    ToolCall,
    ToolResultBlock,
    ToolUseBlock,
    dump_structured,
    get_logger,
    parse_structured,
)

logger = get_logger(__name__)

MODEL_ROLE = "model"
USER_ROLE = "user"
FUNCTION_ROLE = "function"


def history_to_contents(history: Iterable[Union[ConversationTurn, Mapping[str, Any]]]) -> List[types.Content]:
    """
    Converts canonical history turns into Gemini ``Content`` objects.

    Turns whose role is not ``user``, ``assistant`` or ``tool`` are dropped; the
    remaining turns keep their relative order.

    Args:
        history: Canonical turns, as models or plain dictionaries.

    Returns:
        The history formatted for Gemini's ``contents`` argument.

    Raises:
        ParseError: If a tool result payload is not valid JSON.
    """
    contents = []
    for raw_turn in history:
        turn = raw_turn if isinstance(raw_turn, ConversationTurn) else ConversationTurn.model_validate(raw_turn)
        content = _translate_turn(turn)
        if content is None:
            logger.debug(f"Skipping history turn with unsupported role '{turn.role}'.")
            continue
        contents.append(content)
    return contents


def _translate_turn(turn: ConversationTurn) -> Optional[types.Content]:
    if turn.role == "assistant":
        if turn.tool_calls:
            return types.Content(role=MODEL_ROLE, parts=[_function_call_part(call) for call in turn.tool_calls])
        return types.Content(role=MODEL_ROLE, parts=[types.Part(text=turn.text())])

    if turn.role == "user":
        results = _tool_results(turn)
        if results:
            return types.Content(
                role=FUNCTION_ROLE,
                parts=[
                    _function_response_part(result.tool_use_id, parse_structured(result.payload_text()))
                    for result in results
                ],
            )
        return types.Content(role=USER_ROLE, parts=[types.Part(text=turn.text())])

    if turn.role == "tool":
        name = turn.tool_call_id or turn.name or ""
        payload: JsonValue
        if isinstance(turn.content, str):
            payload = parse_structured(turn.content)
        elif turn.has_blocks():
            payload = parse_structured(turn.text())
        else:
            payload = turn.content
        return types.Content(role=FUNCTION_ROLE, parts=[_function_response_part(name, payload)])

    return None


def _tool_results(turn: ConversationTurn) -> List[ToolResultBlock]:
    """Returns the tool results of a user turn that opens with one, else an empty list."""
    if isinstance(turn.content, list) and turn.content and isinstance(turn.content[0], ToolResultBlock):
        return [block for block in turn.content if isinstance(block, ToolResultBlock)]
    return []


def _function_call_part(call: ToolCall) -> types.Part:
    return types.Part(function_call=types.FunctionCall(name=call.name, args=call.arguments))


def _function_response_part(name: str, payload: JsonValue) -> types.Part:
    # Canonical results address the invocation, so the invocation id becomes the response name.
    return types.Part(function_response=types.FunctionResponse(name=name, response=_as_response_object(payload)))


def _as_response_object(payload: JsonValue) -> Dict[str, Any]:
    """Gemini only accepts objects as function responses."""
    if isinstance(payload, dict):
        return payload
    return {"output": payload}


def contents_to_history(contents: Iterable[types.Content]) -> List[ConversationTurn]:
    """
    Converts Gemini ``Content`` objects back into canonical history turns.

    Function calls become assistant ``tool_calls`` (the function name doubles as
    the invocation id) and function responses become ``tool_result`` blocks
    addressed by the response name.

    Args:
        contents: Gemini contents, e.g. the ``contents`` sent with a request.

    Returns:
        The canonical history.
    """
    history: List[ConversationTurn] = []
    for content in contents:
        parts = content.parts or []
        calls = [p.function_call for p in parts if p.function_call]
        responses = [p.function_response for p in parts if p.function_response]
        text = "".join(p.text for p in parts if p.text and not p.thought)

        if content.role == MODEL_ROLE:
            if calls:
                tool_calls = [ToolCall(id=c.name or "", name=c.name or "", arguments=c.args or {}) for c in calls]
                history.append(
                    ConversationTurn(
                        role="assistant",
                        content=[ToolUseBlock(id=c.id, name=c.name, input=c.arguments) for c in tool_calls],
                        tool_calls=tool_calls,
                    )
                )
            else:
                history.append(ConversationTurn(role="assistant", content=[TextBlock(text=text)]))
        elif responses:
            history.append(
                ConversationTurn(
                    role="user",
                    content=[
                        ToolResultBlock(
                            tool_use_id=r.name or "",
                            content=[TextBlock(text=dump_structured(r.response or {}))],
                        )
                        for r in responses
                    ],
                )
            )
        elif content.role == USER_ROLE:
            history.append(ConversationTurn(role="user", content=text))
        else:
            logger.debug(f"Skipping Gemini content with unsupported role '{content.role}'.")
    return history
