"""Core abstractions for conversation adapters."""

import inspect
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Union

from pydantic import BaseModel, Field

from ..logger import get_logger
from ..messages import AssistantMessage, ConversationTurn, ToolUseBlock
from ..tools import ToolDeclaration

logger = get_logger(__name__)


class ConversationRequest(BaseModel):
    """One conversation turn to run against the provider.

    Attributes:
        history: The canonical conversation history, oldest turn first.
        prompt_key: Key of the system prompt to use. ``None`` selects the default prompt.
        tools: Tools the assistant may call during this turn.
    """

    history: List[ConversationTurn]
    prompt_key: Optional[str] = None
    tools: List[ToolDeclaration] = Field(default_factory=list)


class StreamHandlers(BaseModel):
    """Callbacks notified while a response streams in.

    Every callback is optional; missing ones are skipped. ``on_tool_use`` may be a
    coroutine function, in which case each call is awaited before the next one.
    """

    on_text: Optional[Callable[[str], None]] = None
    on_tool_use: Optional[Callable[[ToolUseBlock], Union[Awaitable[None], None]]] = None
    on_message: Optional[Callable[[AssistantMessage], None]] = None

    def emit_text(self, fragment: str) -> None:
        if self.on_text:
            self.on_text(fragment)

    async def emit_tool_use(self, block: ToolUseBlock) -> None:
        if not self.on_tool_use:
            return
        result = self.on_tool_use(block)
        if inspect.isawaitable(result):
            await result

    def emit_message(self, message: AssistantMessage) -> None:
        if self.on_message:
            self.on_message(message)


class ConversationService(ABC):
    """Abstract base class for adapters that run canonical conversations on a provider.

    Implementations translate the canonical history and tools into the provider's
    format, stream the response, and report it back through ``StreamHandlers`` in
    the same order a native canonical client would.
    """

    @abstractmethod
    async def stream_conversation(
        self, request: ConversationRequest, handlers: Optional[StreamHandlers] = None
    ) -> AssistantMessage:
        """
        Runs one conversation turn.

        Args:
            request: History, prompt key and tools for this turn.
            handlers: Optional callbacks for streamed text, tool uses and the final message.

        Returns:
            The canonical assistant message, identical to the one passed to ``on_message``.
        """
        pass

    @abstractmethod
    def get_system_prompt(self, prompt_key: Optional[str] = None) -> str:
        pass
