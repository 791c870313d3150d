"""Replay a Gemini stream through the canonical streaming callbacks."""

from collections import Counter
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional

from google.genai import types

from storefront_chat_bridge.llm_core import (
    AssistantMessage,
    MissingCandidateError,
    StreamHandlers,
    TransportCompatibilityError,
    get_logger,
)
from .response import build_assistant_message, tool_use_block

logger = get_logger(__name__)

# Errors raised when the SDK hands back a stream object of the wrong shape,
# typically after an SDK/httpx version mismatch.
STREAM_INCOMPATIBILITY_SIGNATURES = (
    "requires an object with __aiter__ method",
    "can't be used in 'await' expression",
    "content has already been streamed",
)

StreamOpener = Callable[[], Awaitable[AsyncIterator[types.GenerateContentResponse]]]


class StreamState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    AGGREGATING = "aggregating"
    TOOL_DISPATCH = "tool_dispatch"
    COMPLETED = "completed"


_TRANSITIONS = {
    StreamState.IDLE: {StreamState.STREAMING},
    StreamState.STREAMING: {StreamState.AGGREGATING},
    StreamState.AGGREGATING: {StreamState.TOOL_DISPATCH, StreamState.COMPLETED},
    StreamState.TOOL_DISPATCH: {StreamState.COMPLETED},
    StreamState.COMPLETED: set(),
}


def is_stream_incompatibility(error: BaseException) -> bool:
    message = str(error)
    return any(signature in message for signature in STREAM_INCOMPATIBILITY_SIGNATURES)


class StreamEmulator:
    """
    Drives one Gemini streaming call and reports it like a native canonical stream.

    Each non-empty text chunk produces one ``on_text`` call. Once the stream is
    exhausted, every function call produces one awaited ``on_tool_use`` call in
    response order, and ``on_message`` receives the final message last.

    An emulator handles a single request; create a new one per call.
    """

    def __init__(self, handlers: Optional[StreamHandlers] = None, model: Optional[str] = None):
        self.handlers = handlers or StreamHandlers()
        self.model = model
        self.state = StreamState.IDLE
        self.fragments: List[str] = []
        self.function_calls: List[types.FunctionCall] = []
        self.finish_reason: Any = None
        self._candidate_seen = False

    @property
    def text(self) -> str:
        return "".join(self.fragments)

    async def run(self, open_stream: StreamOpener) -> AssistantMessage:
        """
        Opens the stream, replays it through the handlers and returns the final message.

        Args:
            open_stream: Coroutine function issuing the provider's streaming call.

        Returns:
            The canonical assistant message, also passed to ``on_message``.

        Raises:
            TransportCompatibilityError: If the stream object has an incompatible shape.
            MissingCandidateError: If the provider returned no candidate.
        """
        stream = await self._open(open_stream)

        self._transition(StreamState.STREAMING)
        async for chunk in stream:
            self._consume(chunk)

        self._transition(StreamState.AGGREGATING)
        if not self._candidate_seen:
            msg = "No response candidate found from Gemini."
            logger.error(msg)
            raise MissingCandidateError(msg)

        if self.function_calls:
            self._transition(StreamState.TOOL_DISPATCH)
            await self._dispatch_tool_uses()

        message = build_assistant_message(self.text, self.function_calls, self.finish_reason, model=self.model)
        self._transition(StreamState.COMPLETED)
        self.handlers.emit_message(message)
        return message

    async def _open(self, open_stream: StreamOpener) -> AsyncIterator[types.GenerateContentResponse]:
        try:
            stream = await open_stream()
        except Exception as e:
            if is_stream_incompatibility(e):
                logger.error(f"Gemini stream has an incompatible shape: {e}")
                raise TransportCompatibilityError() from e
            raise

        if not hasattr(stream, "__aiter__"):
            logger.error(f"Gemini returned a non-iterable stream object: {type(stream).__name__}")
            raise TransportCompatibilityError()
        return stream

    def _consume(self, chunk: types.GenerateContentResponse) -> None:
        if not chunk.candidates:
            return
        candidate = chunk.candidates[0]
        self._candidate_seen = True
        if candidate.finish_reason is not None:
            self.finish_reason = candidate.finish_reason

        parts = candidate.content.parts if candidate.content and candidate.content.parts else []
        fragment = "".join(p.text for p in parts if p.text and not p.thought)
        if fragment:
            self.handlers.emit_text(fragment)
            self.fragments.append(fragment)
        self.function_calls.extend(p.function_call for p in parts if p.function_call)

    async def _dispatch_tool_uses(self) -> None:
        duplicates = [name for name, count in Counter(c.name for c in self.function_calls).items() if count > 1]
        if duplicates:
            logger.warning(f"Gemini called {duplicates} more than once; their tool-use ids collide.")

        # One at a time, in response order.
        for call in self.function_calls:
            block = tool_use_block(call)
            logger.info(f"Gemini requested tool '{block.name}'.")
            await self.handlers.emit_tool_use(block)

    def _transition(self, target: StreamState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid stream state transition: {self.state.value} -> {target.value}")
        self.state = target
