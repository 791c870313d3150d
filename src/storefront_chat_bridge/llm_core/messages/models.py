"""Canonical (Claude-format) message models for chat history and assistant output."""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, JsonValue, Tag, model_validator

from ..exceptions import ParseError
from .payloads import parse_structured

StopReason = Literal["end_turn", "tool_use", "max_tokens"]


class TextBlock(BaseModel):
    """A plain text content block."""

    type: Literal["text"] = "text"
    text: str


class OpaqueBlock(BaseModel):
    """Any content block the bridge does not interpret (images, documents, ...).

    Kept so that histories containing such blocks still validate; translators skip it.
    """

    model_config = ConfigDict(extra="allow")

    type: str


def _text_or_other(value: Any) -> str:
    tag = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return "text" if tag == "text" else "other"


ResultContentBlock = Annotated[
    Union[Annotated[TextBlock, Tag("text")], Annotated[OpaqueBlock, Tag("other")]],
    Discriminator(_text_or_other),
]


class ToolResultBlock(BaseModel):
    """The result of a tool invocation, addressed by the invocation id it answers.

    Attributes:
        tool_use_id: Identifier of the tool-use block this result answers.
        content: The result payload, either raw text or a list of content blocks.
        is_error: Whether the tool reported a failure.
    """

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: Union[str, List[ResultContentBlock]] = ""
    is_error: bool = False

    def payload_text(self) -> str:
        """Returns the text carrying the structured result payload.

        Raises:
            ParseError: If the result carries no text at all.
        """
        if isinstance(self.content, str):
            return self.content
        for block in self.content:
            if isinstance(block, TextBlock):
                return block.text
        raise ParseError(f"Tool result for '{self.tool_use_id}' carries no text payload.")


class ToolUseBlock(BaseModel):
    """The assistant asks to invoke tool ``name`` with ``input``."""

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Dict[str, JsonValue] = Field(default_factory=dict)


def _block_tag(value: Any) -> str:
    tag = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return tag if tag in ("text", "tool_result", "tool_use") else "other"


ContentBlock = Annotated[
    Union[
        Annotated[TextBlock, Tag("text")],
        Annotated[ToolResultBlock, Tag("tool_result")],
        Annotated[ToolUseBlock, Tag("tool_use")],
        Annotated[OpaqueBlock, Tag("other")],
    ],
    Discriminator(_block_tag),
]


class ToolCall(BaseModel):
    """A tool invocation recorded on an assistant turn.

    Accepts both the flat ``{"id", "name", "arguments"}`` shape and the nested
    ``{"id", "function": {"name", "arguments"}}`` shape used by the chat handler.
    """

    id: str
    name: str
    arguments: Dict[str, JsonValue] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _flatten_function(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "function" not in data:
            return data
        function = data["function"] or {}
        flat = {k: v for k, v in data.items() if k != "function"}
        flat.setdefault("name", function.get("name"))
        arguments = function.get("arguments")
        if isinstance(arguments, str):
            arguments = parse_structured(arguments) if arguments.strip() else {}
        flat.setdefault("arguments", arguments or {})
        flat.setdefault("id", flat["name"])
        return flat


class ConversationTurn(BaseModel):
    """One entry of the canonical conversation history.

    Attributes:
        role: ``user``, ``assistant`` or ``tool``. Other roles are accepted but not translated.
        content: Plain text, a list of content blocks, or (tool turns) a structured JSON object or array.
        tool_calls: Tool invocations requested by an assistant turn.
        tool_call_id: Invocation id a tool turn answers.
        name: Tool name of a tool turn.
    """

    role: str
    content: Union[str, List[ContentBlock], Dict[str, JsonValue], List[JsonValue]] = Field(
        default="", union_mode="left_to_right"
    )
    tool_calls: Optional[List[ToolCall]] = None
    tool_call_id: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def _structured_lists_only_on_tool_turns(self) -> "ConversationTurn":
        if self.role != "tool" and not self.has_blocks() and isinstance(self.content, list):
            raise ValueError(f"A '{self.role}' turn must carry text or content blocks, not a JSON array.")
        return self

    def has_blocks(self) -> bool:
        """Whether the content is a list of content blocks (an empty list counts)."""
        return isinstance(self.content, list) and all(isinstance(block, BaseModel) for block in self.content)

    def text(self) -> str:
        """Joins every text block with a newline, skipping other blocks."""
        if isinstance(self.content, str):
            return self.content
        if not self.has_blocks():
            return ""
        return "\n".join(block.text for block in self.content if isinstance(block, TextBlock))


AssistantBlock = Annotated[Union[TextBlock, ToolUseBlock], Field(discriminator="type")]


class AssistantMessage(BaseModel):
    """Canonical assistant message built from a provider response.

    Attributes:
        content: A single text block, or one or more tool-use blocks.
        model: The provider model that produced the message.
        stop_reason: Why generation ended, in the canonical vocabulary.
    """

    role: Literal["assistant"] = "assistant"
    content: List[AssistantBlock]
    model: Optional[str] = None
    stop_reason: StopReason = "end_turn"

    @property
    def tool_uses(self) -> List[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    @property
    def text(self) -> str:
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))

    def to_turn(self) -> ConversationTurn:
        """Converts the message into a history turn, recording tool uses as ``tool_calls``."""
        tool_uses = self.tool_uses
        if tool_uses:
            return ConversationTurn(
                role="assistant",
                content=list(tool_uses),
                tool_calls=[ToolCall(id=t.id, name=t.name, arguments=t.input) for t in tool_uses],
            )
        return ConversationTurn(role="assistant", content=[TextBlock(text=self.text)])
